"""Incoming/outgoing document ORM models.

Document CRUD lives outside this service; these mappings exist so tasks
can link to incoming documents and audit summaries can join both tables.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from officeflow.infrastructure.persistence.database import Base
from officeflow.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin


class _DocumentColumns:
    document_number: Mapped[str] = mapped_column(String(100), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="received")
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class IncomingDocument(_DocumentColumns, IntIdMixin, TimestampMixin, Base):
    """Received document. Table: incoming_documents."""

    __tablename__ = "incoming_documents"

    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    processor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )


class OutgoingDocument(_DocumentColumns, IntIdMixin, TimestampMixin, Base):
    """Issued document. Table: outgoing_documents."""

    __tablename__ = "outgoing_documents"

    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    drafter_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
