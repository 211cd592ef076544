"""Audit service: write path (structured, failed, timed) and read path (reports, cleanup, export).

Depends only on IAuditLogRepository. Writes never participate in the
caller's business transaction: the capture middleware runs them in a
separate session and swallows their failures.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from officeflow.application.dtos.audit_log import (
    AuditExportRow,
    AuditLogEntryCreate,
    AuditLogFilter,
    AuditLogPage,
    AuditLogResult,
    EntitySummaryRow,
    SystemStatistics,
    UserActivitySummary,
)
from officeflow.domain.enums import (
    DOCUMENT_ENTITY_TYPES,
    SUMMARIZABLE_ENTITY_TYPES,
    AuditAction,
    AuditEntityType,
)
from officeflow.domain.exceptions import (
    MissingActorException,
    SerializationException,
    ValidationException,
)
from officeflow.shared.context import get_current_actor
from officeflow.shared.telemetry.logging import get_logger
from officeflow.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from officeflow.application.interfaces.repositories import IAuditLogRepository
    from officeflow.shared.context import ActorContext

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * limit inside a 64-bit OFFSET.
MAX_PAGE = 1_000_000
# Longest retention window accepted by cleanup (about a century).
MAX_RETENTION_DAYS = 36_500
TOP_ACTORS_LIMIT = 10

EXPORT_HEADER = (
    "Timestamp",
    "User",
    "Action",
    "Entity Type",
    "Entity ID",
    "Description",
    "Success",
    "IP Address",
    "Duration (ms)",
)


def clamp_paging(
    page: int | None,
    limit: int | None,
    *,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> tuple[int, int]:
    """Return (1 <= page <= MAX_PAGE, 1 <= limit <= max_limit); missing limit uses default_limit."""
    page = min(page, MAX_PAGE) if page and page > 0 else 1
    if limit is None:
        limit = default_limit
    limit = min(max(limit, 1), max_limit)
    return page, limit


def _encode(field: str, value: Any) -> str | None:
    """Serialize an opaque payload to JSON text. Raises SerializationException."""
    if value is None:
        return None
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise SerializationException(field, str(e)) from e


def _enum_value(value: Any) -> str:
    return value.value if isinstance(value, (AuditAction, AuditEntityType)) else str(value)


def to_export_row(row: AuditLogResult) -> AuditExportRow:
    return AuditExportRow(
        timestamp=row.timestamp,
        user_name=row.user_name or "",
        action=row.action,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        description=row.description,
        success=row.success,
        ip_address=row.ip_address or "",
        duration_ms=row.duration_ms,
    )


def render_csv(rows: list[AuditExportRow]) -> str:
    """Render export rows as CSV text with a header line (ISO-8601 timestamps)."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(EXPORT_HEADER)
    for r in rows:
        writer.writerow(
            (
                ensure_utc(r.timestamp).isoformat(),
                r.user_name,
                r.action,
                r.entity_type,
                r.entity_id,
                r.description,
                "true" if r.success else "false",
                r.ip_address,
                r.duration_ms,
            )
        )
    return buf.getvalue()


class AuditService:
    """Append-only audit records and the reports built on them."""

    def __init__(
        self,
        repo: IAuditLogRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
        export_max_rows: int = 10_000,
        report_window_days: int = 365,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._repo = repo
        self._clock = clock
        self._export_max_rows = export_max_rows
        self._report_window = timedelta(days=report_window_days)
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    # ---- write path ----

    def _resolve_actor(self, actor: ActorContext | None, operation: str) -> ActorContext:
        actor = actor or get_current_actor()
        if actor is None:
            raise MissingActorException(operation)
        return actor

    async def log_activity(
        self,
        action: AuditAction | str,
        entity_type: AuditEntityType | str,
        entity_id: int,
        description: str,
        *,
        actor: ActorContext | None = None,
        old_values: Any = None,
        new_values: Any = None,
        metadata: dict[str, Any] | None = None,
        success: bool = True,
        error_message: str | None = None,
        duration_ms: int = 0,
    ) -> AuditLogResult:
        """Append one structured audit record for the actor (explicit or from context).

        Raises:
            MissingActorException: No actor given and none in request context.
            SerializationException: A payload could not be encoded as JSON.
        """
        actor = self._resolve_actor(actor, "log_activity")
        entry = AuditLogEntryCreate(
            user_id=actor.user_id,
            action=_enum_value(action),
            entity_type=_enum_value(entity_type),
            entity_id=max(int(entity_id or 0), 0),
            description=description,
            success=success,
            timestamp=self._clock(),
            old_values=_encode("old_values", old_values),
            new_values=_encode("new_values", new_values),
            metadata=_encode("metadata", metadata),
            error_message=error_message if not success else None,
            duration_ms=max(int(duration_ms), 0),
            ip_address=actor.ip_address,
            user_agent=actor.user_agent,
            request_id=actor.request_id,
        )
        return await self._repo.append(entry)

    async def log_failed_activity(
        self,
        action: AuditAction | str,
        entity_type: AuditEntityType | str,
        entity_id: int,
        description: str,
        error_message: str,
        *,
        actor: ActorContext | None = None,
        metadata: dict[str, Any] | None = None,
        duration_ms: int = 0,
    ) -> AuditLogResult:
        """Append a success=false record. Old/new values are never stored for failures."""
        return await self.log_activity(
            action,
            entity_type,
            entity_id,
            description,
            actor=actor,
            metadata=metadata,
            success=False,
            error_message=error_message or "Request failed",
            duration_ms=duration_ms,
        )

    async def log_with_duration(
        self,
        action: AuditAction | str,
        entity_type: AuditEntityType | str,
        entity_id: int,
        description: str,
        duration_ms: int,
        *,
        actor: ActorContext | None = None,
        old_values: Any = None,
        new_values: Any = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLogResult:
        """Append a successful record carrying the elapsed request time."""
        return await self.log_activity(
            action,
            entity_type,
            entity_id,
            description,
            actor=actor,
            old_values=old_values,
            new_values=new_values,
            metadata=metadata,
            duration_ms=duration_ms,
        )

    # ---- read path ----

    def resolve_window(
        self, start: datetime | None, end: datetime | None
    ) -> tuple[datetime, datetime]:
        """Fill missing bounds: end defaults to now, start to end minus the report window."""
        end = ensure_utc(end) or self._clock()
        start = ensure_utc(start) or end - self._report_window
        if start > end:
            raise ValidationException("start_date must not be after end_date", field="start_date")
        return start, end

    async def query(
        self,
        filters: AuditLogFilter,
        page: int | None = None,
        limit: int | None = None,
    ) -> AuditLogPage:
        """Filtered page of rows, newest first, with the total for pagination."""
        page, limit = clamp_paging(
            page,
            limit,
            default_limit=self._default_page_size,
            max_limit=self._max_page_size,
        )
        items, total = await self._repo.query(filters, skip=(page - 1) * limit, limit=limit)
        return AuditLogPage(items=items, total=total, page=page, limit=limit)

    async def user_activity(
        self,
        user_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> UserActivitySummary:
        """Rollup of one actor's rows inside [start, end]."""
        start, end = self.resolve_window(start, end)
        total, documents, tasks, logins, failed, last = await self._repo.user_rollup(
            user_id,
            start,
            end,
            document_entity_types=sorted(t.value for t in DOCUMENT_ENTITY_TYPES),
            task_entity_type=AuditEntityType.TASK.value,
            login_action=AuditAction.USER_LOGIN.value,
        )
        return UserActivitySummary(
            user_id=user_id,
            start=start,
            end=end,
            total_actions=total,
            document_actions=documents,
            task_actions=tasks,
            login_count=logins,
            failed_actions=failed,
            last_activity=ensure_utc(last),
        )

    async def entity_trail(
        self, entity_type: AuditEntityType, entity_id: int
    ) -> list[AuditLogResult]:
        """Every row for one entity, oldest first (replay order)."""
        return await self._repo.list_for_entity(entity_type.value, entity_id)

    async def entity_type_summary(
        self,
        entity_type: AuditEntityType,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[EntitySummaryRow]:
        """Per-entity rollup for tasks or documents created inside [start, end].

        Raises:
            ValidationException: entity_type has no owning table.
        """
        if entity_type not in SUMMARIZABLE_ENTITY_TYPES:
            raise ValidationException(
                f"Summaries are available for: {', '.join(sorted(t.value for t in SUMMARIZABLE_ENTITY_TYPES))}",
                field="entity_type",
            )
        start, end = self.resolve_window(start, end)
        return await self._repo.entity_summaries(entity_type.value, start, end, self._clock())

    async def system_statistics(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> SystemStatistics:
        start, end = self.resolve_window(start, end)
        total, failed, avg_duration = await self._repo.totals(start, end)
        return SystemStatistics(
            start=start,
            end=end,
            total_activities=total,
            failed_activities=failed,
            average_duration_ms=avg_duration,
            by_action=await self._repo.count_by("action", start, end),
            by_entity_type=await self._repo.count_by("entity_type", start, end),
            top_actors=await self._repo.top_actors(start, end, TOP_ACTORS_LIMIT),
        )

    async def cleanup(self, days_to_keep: int, now: datetime | None = None) -> int:
        """Bulk delete rows older than now - days_to_keep; rows exactly at the cutoff stay.

        The minimum retention is enforced by the caller; windows longer than
        MAX_RETENTION_DAYS are rejected.
        """
        if days_to_keep > MAX_RETENTION_DAYS:
            raise ValidationException(
                f"Invalid days parameter. Must be at most {MAX_RETENTION_DAYS} days",
                field="days",
            )
        cutoff = (ensure_utc(now) or self._clock()) - timedelta(days=days_to_keep)
        deleted = await self._repo.delete_older_than(cutoff)
        logger.info("Audit cleanup removed %d rows older than %s", deleted, cutoff.isoformat())
        return deleted

    async def export(self, filters: AuditLogFilter) -> list[AuditExportRow]:
        """Filtered rows (newest first, capped) flattened for tabular download."""
        rows = await self._repo.export_rows(filters, self._export_max_rows)
        return [to_export_row(r) for r in rows]
