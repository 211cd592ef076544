"""Audit log ORM model. Append-only record of every mutating request."""

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, Connection, DateTime, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from officeflow.infrastructure.persistence.database import Base
from officeflow.infrastructure.persistence.models.mixins import IntIdMixin
from officeflow.shared.utils.datetime import utc_now


class AuditLog(IntIdMixin, Base):
    """Who did what, when, to which entity. No update; no per-row delete.

    (entity_type, entity_id) is a soft reference: entities may be removed
    while their trail persists. Payload columns hold JSON text.
    Retention cleanup uses a single bulk DELETE statement, which does not
    go through the per-row listeners below.
    """

    __tablename__ = "audit_logs"

    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    old_values: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_values: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes; the column keeps the name.
    meta: Mapped[str | None] = mapped_column("metadata", Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )

    __table_args__ = (Index("ix_audit_logs_entity", "entity_type", "entity_id"),)


@event.listens_for(AuditLog, "before_update")
def _prevent_audit_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditLog
) -> None:
    """Audit log entries are append-only; updates are forbidden."""
    raise ValueError("Audit log entries are immutable and cannot be updated.")


@event.listens_for(AuditLog, "before_delete")
def _prevent_audit_log_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditLog
) -> None:
    """Individual audit log entries cannot be deleted; use retention cleanup."""
    raise ValueError("Audit log entries cannot be deleted individually.")
