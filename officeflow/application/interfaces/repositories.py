"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from officeflow.domain.enums import Role, TaskStatus

if TYPE_CHECKING:
    from officeflow.application.dtos.audit_log import (
        ActorActivityCount,
        AuditLogEntryCreate,
        AuditLogFilter,
        AuditLogResult,
        CountByKey,
        EntitySummaryRow,
    )
    from officeflow.application.dtos.task import (
        CommentResult,
        StatusHistoryResult,
        TaskListFilter,
        TaskPage,
    )
    from officeflow.application.dtos.user import UserResult
    from officeflow.domain.entities.task import TaskEntity


class ITaskRepository(Protocol):
    """Protocol for the task aggregate store."""

    async def get_task(self, task_id: int, *, for_update: bool = False) -> TaskEntity | None:
        """Return a live (not soft-deleted) task, optionally row-locked for the transaction."""

    async def add_task(self, task: TaskEntity) -> TaskEntity:
        """Persist a new task; return it with id and timestamps set."""

    async def save_task(self, task: TaskEntity) -> TaskEntity:
        """Write back a mutated task; return the stored state."""

    async def soft_delete_task(self, task_id: int, deleted_at: datetime) -> None:
        """Mark a task deleted."""

    async def list_tasks(self, filters: TaskListFilter, skip: int, limit: int) -> TaskPage:
        """Return one page of live tasks visible under filters, newest first."""


class IStatusHistoryRepository(Protocol):
    """Protocol for the append-only status history store."""

    async def append(
        self,
        task_id: int,
        old_status: str,
        new_status: TaskStatus,
        changed_by_id: int,
        notes: str,
        created_at: datetime,
    ) -> StatusHistoryResult:
        """Append one history row."""

    async def list_for_task(self, task_id: int) -> list[StatusHistoryResult]:
        """Return history ordered by created_at then id (ascending)."""


class ICommentRepository(Protocol):
    """Protocol for task comments."""

    async def add_comment(
        self, task_id: int, user_id: int, content: str, created_at: datetime
    ) -> CommentResult:
        """Create a comment on a task."""

    async def soft_delete_for_task(self, task_id: int, deleted_at: datetime) -> int:
        """Soft-delete all live comments of a task; return how many were marked."""

    async def list_for_task(self, task_id: int) -> list[CommentResult]:
        """Return live comments oldest first."""


class IUserLookup(Protocol):
    """Read-only view of the user directory."""

    async def get_user(self, user_id: int) -> UserResult | None:
        """Return a user by id, or None."""

    async def find_active_by_role(self, role: Role) -> UserResult | None:
        """Return the first active user holding role (lowest id), or None."""


class IDocumentLookup(Protocol):
    """Read-only view of incoming documents (link targets for tasks)."""

    async def document_exists(self, document_id: int) -> bool:
        """Return True if the incoming document exists."""


class IAuditLogRepository(Protocol):
    """Append-only audit log store plus its aggregate reads."""

    async def append(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return the created record."""

    async def query(
        self, filters: AuditLogFilter, *, skip: int, limit: int
    ) -> tuple[list[AuditLogResult], int]:
        """Return (page ordered by timestamp desc, total matching)."""

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[AuditLogResult]:
        """Return all rows for one entity ordered by timestamp asc."""

    async def user_rollup(
        self,
        user_id: int,
        start: datetime,
        end: datetime,
        *,
        document_entity_types: list[str],
        task_entity_type: str,
        login_action: str,
    ) -> tuple[int, int, int, int, int, datetime | None]:
        """Return (total, document, task, login, failed, last_activity) in [start, end]."""

    async def count_by(self, column: str, start: datetime, end: datetime) -> list[CountByKey]:
        """Return row counts grouped by 'action' or 'entity_type', largest first."""

    async def top_actors(
        self, start: datetime, end: datetime, limit: int
    ) -> list[ActorActivityCount]:
        """Return the most active actors with their names."""

    async def totals(self, start: datetime, end: datetime) -> tuple[int, int, float]:
        """Return (total rows, failed rows, average duration over rows with duration > 0)."""

    async def entity_summaries(
        self, entity_type: str, start: datetime, end: datetime, now: datetime
    ) -> list[EntitySummaryRow]:
        """Return one row per owning entity created inside [start, end], counting all its audit rows."""

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Bulk delete rows with timestamp < cutoff; return the count removed."""

    async def export_rows(self, filters: AuditLogFilter, limit: int) -> list[AuditLogResult]:
        """Return up to limit rows (timestamp desc) with actor names resolved."""
