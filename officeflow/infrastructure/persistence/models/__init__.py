"""ORM models. Importing this package registers every table on Base.metadata."""

from officeflow.infrastructure.persistence.models.audit_log import AuditLog
from officeflow.infrastructure.persistence.models.document import (
    IncomingDocument,
    OutgoingDocument,
)
from officeflow.infrastructure.persistence.models.task import Task, TaskComment
from officeflow.infrastructure.persistence.models.task_status_history import (
    TaskStatusHistory,
)
from officeflow.infrastructure.persistence.models.user import User

__all__ = [
    "AuditLog",
    "IncomingDocument",
    "OutgoingDocument",
    "Task",
    "TaskComment",
    "TaskStatusHistory",
    "User",
]
