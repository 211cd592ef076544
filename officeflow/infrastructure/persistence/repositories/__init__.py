"""Persistence repositories. Re-exports for dependency injection."""

from officeflow.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogRepository,
)
from officeflow.infrastructure.persistence.repositories.base import BaseRepository
from officeflow.infrastructure.persistence.repositories.comment_repo import (
    CommentRepository,
)
from officeflow.infrastructure.persistence.repositories.document_repo import (
    DocumentRepository,
)
from officeflow.infrastructure.persistence.repositories.status_history_repo import (
    StatusHistoryRepository,
)
from officeflow.infrastructure.persistence.repositories.task_repo import TaskRepository
from officeflow.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "AuditLogRepository",
    "BaseRepository",
    "CommentRepository",
    "DocumentRepository",
    "StatusHistoryRepository",
    "TaskRepository",
    "UserRepository",
]
