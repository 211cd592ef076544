"""Audit API: query, reports, CSV export and retention cleanup.

Paths live under /audit/, which the capture middleware skips; cleanup
writes its own audit row instead.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from officeflow.api.v1.dependencies import (
    get_audit_service,
    get_audit_service_for_write,
    require_roles,
)
from officeflow.application.dtos.audit_log import AuditLogFilter
from officeflow.application.services.audit_service import AuditService, render_csv
from officeflow.core.config import get_settings
from officeflow.domain.enums import AuditAction, AuditEntityType, Role
from officeflow.domain.exceptions import OfficeflowException, ValidationException
from officeflow.schemas.audit_log import (
    AuditCleanupResponse,
    AuditLogEntryResponse,
    AuditLogListResponse,
    EntitySummaryItem,
    EntitySummaryResponse,
    EntityTrailResponse,
    SystemStatisticsResponse,
    UserActivityResponse,
)
from officeflow.schemas.common import PaginationMeta
from officeflow.shared.context import ActorContext
from officeflow.shared.telemetry.logging import get_logger
from officeflow.shared.utils.datetime import parse_range_bound, utc_now

logger = get_logger(__name__)

router = APIRouter()

Reader = Annotated[AuditService, Depends(get_audit_service)]

_REPORT_ROLES = (Role.ADMIN, Role.TEAM_LEADER)


def _date_bound(raw: str | None, field: str, *, end_of_day: bool) -> datetime | None:
    if raw is None or not raw.strip():
        return None
    try:
        return parse_range_bound(raw, end_of_day=end_of_day)
    except ValueError:
        raise ValidationException(
            f"Invalid {field}; use YYYY-MM-DD or an ISO-8601 datetime", field=field
        ) from None


def _filters(
    user_id: int | None = Query(None),
    action: str | None = Query(None),
    entity_type: str | None = Query(None),
    entity_id: int | None = Query(None),
    success: bool | None = Query(None),
    start_date: str | None = Query(None, description="YYYY-MM-DD or ISO-8601"),
    end_date: str | None = Query(None, description="YYYY-MM-DD or ISO-8601"),
    ip_address: str | None = Query(None),
) -> AuditLogFilter:
    """Shared query-string filters for listing and export."""
    return AuditLogFilter(
        user_id=user_id,
        action=AuditAction.parse(action, field="action").value if action else None,
        entity_type=(
            AuditEntityType.parse(entity_type, field="entity_type").value
            if entity_type
            else None
        ),
        entity_id=entity_id,
        success=success,
        start=_date_bound(start_date, "start_date", end_of_day=False),
        end=_date_bound(end_date, "end_date", end_of_day=True),
        ip_address=ip_address or None,
    )


Filters = Annotated[AuditLogFilter, Depends(_filters)]


@router.get("/logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    filters: Filters,
    audit: Reader,
    _: Annotated[ActorContext, Depends(require_roles(*_REPORT_ROLES))],
    page: int | None = Query(None, description="Page number (values below 1 mean 1)"),
    limit: int | None = Query(None, description="Page size, clamped to [1, 100]"),
):
    """Filtered audit rows, newest first."""
    result = await audit.query(filters, page, limit)
    return AuditLogListResponse(
        items=[AuditLogEntryResponse.from_result(r) for r in result.items],
        pagination=PaginationMeta.build(result.page, result.limit, result.total),
    )


@router.get("/user-activity/{user_id}", response_model=UserActivityResponse)
async def get_user_activity(
    user_id: int,
    audit: Reader,
    _: Annotated[ActorContext, Depends(require_roles(*_REPORT_ROLES))],
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
):
    summary = await audit.user_activity(
        user_id,
        _date_bound(start_date, "start_date", end_of_day=False),
        _date_bound(end_date, "end_date", end_of_day=True),
    )
    return UserActivityResponse.model_validate(summary)


@router.get(
    "/entity-trail/{entity_type}/{entity_id}", response_model=EntityTrailResponse
)
async def get_entity_trail(
    entity_type: str,
    entity_id: int,
    audit: Reader,
    _: Annotated[
        ActorContext,
        Depends(require_roles(Role.ADMIN, Role.TEAM_LEADER, Role.DEPUTY)),
    ],
):
    """Every audit row for one entity, oldest first."""
    kind = AuditEntityType.parse(entity_type, field="entity_type")
    rows = await audit.entity_trail(kind, entity_id)
    return EntityTrailResponse(
        entity_type=kind.value,
        entity_id=entity_id,
        items=[AuditLogEntryResponse.from_result(r) for r in rows],
    )


@router.get("/entity-summary", response_model=EntitySummaryResponse)
async def get_entity_summary(
    audit: Reader,
    _: Annotated[ActorContext, Depends(require_roles(*_REPORT_ROLES))],
    entity_type: str = Query(..., description="task, incoming_document or outgoing_document"),
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
):
    kind = AuditEntityType.parse(entity_type, field="entity_type")
    start, end = audit.resolve_window(
        _date_bound(start_date, "start_date", end_of_day=False),
        _date_bound(end_date, "end_date", end_of_day=True),
    )
    rows = await audit.entity_type_summary(kind, start, end)
    return EntitySummaryResponse(
        entity_type=kind.value,
        start=start,
        end=end,
        items=[EntitySummaryItem.model_validate(r) for r in rows],
    )


@router.get("/statistics", response_model=SystemStatisticsResponse)
async def get_system_statistics(
    audit: Reader,
    _: Annotated[ActorContext, Depends(require_roles(Role.ADMIN))],
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
):
    stats = await audit.system_statistics(
        _date_bound(start_date, "start_date", end_of_day=False),
        _date_bound(end_date, "end_date", end_of_day=True),
    )
    return SystemStatisticsResponse.model_validate(stats)


@router.get("/export")
async def export_audit_logs(
    filters: Filters,
    audit: Reader,
    _: Annotated[ActorContext, Depends(require_roles(*_REPORT_ROLES))],
) -> Response:
    """Filtered rows as a CSV attachment (capped at audit_export_max_rows)."""
    rows = await audit.export(filters)
    filename = f"audit_logs_{utc_now().strftime('%Y-%m-%d_%H-%M-%S')}.csv"
    return Response(
        content=render_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.delete("/cleanup", response_model=AuditCleanupResponse)
async def cleanup_audit_logs(
    audit: Annotated[AuditService, Depends(get_audit_service_for_write)],
    actor: Annotated[ActorContext, Depends(require_roles(Role.ADMIN))],
    days: int | None = Query(None, description="Days of history to keep"),
):
    """Delete rows older than now - days (Admin only, days >= the retention floor)."""
    settings = get_settings()
    days_to_keep = settings.audit_retention_default_days if days is None else days
    if days_to_keep < settings.audit_retention_min_days:
        raise ValidationException(
            f"Invalid days parameter. Must be at least {settings.audit_retention_min_days} days",
            field="days",
        )
    deleted = await audit.cleanup(days_to_keep)
    try:
        await audit.log_activity(
            AuditAction.SYSTEM_CONFIG,
            AuditEntityType.SYSTEM,
            0,
            f"Cleaned up audit logs older than {days_to_keep} days",
            actor=actor,
            metadata={"days_to_keep": days_to_keep, "deleted_count": deleted},
        )
    except OfficeflowException as e:
        logger.warning("Failed to record audit cleanup: %s", e.message)
    return AuditCleanupResponse(
        message=f"Successfully cleaned up audit logs older than {days_to_keep} days",
        deleted_count=deleted,
        days_to_keep=days_to_keep,
    )
