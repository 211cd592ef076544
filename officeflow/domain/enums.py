"""Domain enumerations (closed value sets).

Unknown values are rejected at the boundary via parse(); business logic
only ever sees members.
"""

from enum import Enum
from typing import Self

from officeflow.domain.exceptions import ValidationException


class _ValuesMixin:
    """Mixin that adds values() and parse() classmethods to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]  # type: ignore[attr-defined]

    @classmethod
    def parse(cls, raw: str, field: str | None = None) -> Self:
        """Return the member for raw or raise ValidationException listing allowed values."""
        try:
            return cls(raw)  # type: ignore[call-arg]
        except ValueError:
            raise ValidationException(
                f"Invalid value {raw!r}; expected one of: {', '.join(cls.values())}",
                field=field,
            ) from None


class TaskStatus(_ValuesMixin, str, Enum):
    """Task lifecycle status."""

    NOT_STARTED = "NotStarted"
    PROCESSING = "Processing"
    REVIEW = "Review"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, raw: str, field: str | None = None) -> "TaskStatus":
        """Accept the legacy creation state "Received" as NotStarted."""
        if raw == LEGACY_RECEIVED_STATUS:
            return cls.NOT_STARTED
        return super().parse(raw, field=field)


LEGACY_RECEIVED_STATUS = "Received"


class Role(_ValuesMixin, str, Enum):
    """Directory role of a user."""

    ADMIN = "Admin"
    TEAM_LEADER = "TeamLeader"
    DEPUTY = "Deputy"
    SECRETARY = "Secretary"
    OFFICER = "Officer"


class DeadlineType(_ValuesMixin, str, Enum):
    SPECIFIC = "specific"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class TaskType(_ValuesMixin, str, Enum):
    DOCUMENT_LINKED = "document_linked"
    INDEPENDENT = "independent"


class Urgency(_ValuesMixin, str, Enum):
    """Deadline-derived UI priority. Never stored."""

    NORMAL = "normal"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
    CRITICAL = "critical"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit log action (open but finite set)."""

    DOCUMENT_CREATE = "document_create"
    DOCUMENT_UPDATE = "document_update"
    DOCUMENT_DELETE = "document_delete"
    DOCUMENT_FORWARD = "document_forward"
    DOCUMENT_ASSIGN = "document_assign"
    DOCUMENT_PROCESS = "document_process"
    DOCUMENT_COMPLETE = "document_complete"

    TASK_CREATE = "task_create"
    TASK_UPDATE = "task_update"
    TASK_DELETE = "task_delete"
    TASK_ASSIGN = "task_assign"
    TASK_FORWARD = "task_forward"
    TASK_DELEGATE = "task_delegate"
    TASK_START = "task_start"
    TASK_COMPLETE = "task_complete"

    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    USER_CREATE = "user_create"
    USER_UPDATE = "user_update"
    USER_DELETE = "user_delete"
    USER_ACTIVATE = "user_activate"
    USER_DEACTIVATE = "user_deactivate"

    SYSTEM_CONFIG = "system_config"
    FILE_UPLOAD = "file_upload"
    FILE_DOWNLOAD = "file_download"
    FILE_DELETE = "file_delete"
    REPORT_GENERATE = "report_generate"
    REPORT_EXPORT = "report_export"


class AuditEntityType(_ValuesMixin, str, Enum):
    """Kind of entity an audit row refers to (soft reference by id)."""

    TASK = "task"
    INCOMING_DOCUMENT = "incoming_document"
    OUTGOING_DOCUMENT = "outgoing_document"
    USER = "user"
    FILE = "file"
    SYSTEM = "system"


# Entity types counted as "document actions" in per-user rollups.
DOCUMENT_ENTITY_TYPES: frozenset[AuditEntityType] = frozenset(
    {AuditEntityType.INCOMING_DOCUMENT, AuditEntityType.OUTGOING_DOCUMENT}
)

# Entity types that have an owning table for per-entity summaries.
SUMMARIZABLE_ENTITY_TYPES: frozenset[AuditEntityType] = frozenset(
    {
        AuditEntityType.TASK,
        AuditEntityType.INCOMING_DOCUMENT,
        AuditEntityType.OUTGOING_DOCUMENT,
    }
)
