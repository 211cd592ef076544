"""Task status history ORM model. Append-only; one row per lifecycle operation."""

from datetime import datetime
from typing import Any

from sqlalchemy import Connection, DateTime, ForeignKey, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from officeflow.infrastructure.persistence.database import Base
from officeflow.infrastructure.persistence.models.mixins import IntIdMixin
from officeflow.shared.utils.datetime import utc_now


class TaskStatusHistory(IntIdMixin, Base):
    """Status change of a task. Table: task_status_history. Read order: created_at, id."""

    __tablename__ = "task_status_history"

    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tasks.id"), nullable=False, index=True
    )
    old_status: Mapped[str] = mapped_column(String(16), nullable=False, default="")
    new_status: Mapped[str] = mapped_column(String(16), nullable=False)
    changed_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_task_status_history_task_created", "task_id", "created_at", "id"),
    )


@event.listens_for(TaskStatusHistory, "before_update")
def _prevent_history_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: TaskStatusHistory
) -> None:
    """Status history is append-only; updates are forbidden."""
    raise ValueError("Task status history rows are immutable and cannot be updated.")


@event.listens_for(TaskStatusHistory, "before_delete")
def _prevent_history_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: TaskStatusHistory
) -> None:
    """Status history outlives its task (tasks are only soft-deleted)."""
    raise ValueError("Task status history rows cannot be deleted.")
