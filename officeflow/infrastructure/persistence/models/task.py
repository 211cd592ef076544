"""Task and task comment ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from officeflow.infrastructure.persistence.database import Base
from officeflow.infrastructure.persistence.models.mixins import AuditedModel


class Task(AuditedModel, Base):
    """Task aggregate row. Table: tasks. Soft-deleted, never hard-deleted."""

    __tablename__ = "tasks"

    description: Mapped[str] = mapped_column(Text, nullable=False)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deadline_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default="specific", server_default="specific"
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="NotStarted", server_default="NotStarted"
    )
    task_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="independent", server_default="independent"
    )
    assigned_to_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    linked_document_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("incoming_documents.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    processing_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    processing_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    completion_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    report_file: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (Index("ix_tasks_status_created", "status", "created_at"),)


class TaskComment(AuditedModel, Base):
    """Comment on a task (forward notes and free comments). Table: task_comments."""

    __tablename__ = "task_comments"

    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tasks.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
