"""Request/response schemas for audit log API."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from officeflow.application.dtos.audit_log import AuditLogResult
from officeflow.schemas.common import PaginationMeta


def _decode(raw: str | None) -> Any:
    """Stored payloads are JSON text; hand them back as JSON values."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


class AuditLogEntryResponse(BaseModel):
    """Single audit log entry (read)."""

    id: int
    user_id: int
    user_name: str | None = None
    action: str
    entity_type: str
    entity_id: int
    description: str
    old_values: Any = None
    new_values: Any = None
    metadata: Any = None
    success: bool
    error_message: str | None = None
    duration_ms: int
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None
    timestamp: datetime

    @classmethod
    def from_result(cls, row: AuditLogResult) -> AuditLogEntryResponse:
        return cls(
            id=row.id,
            user_id=row.user_id,
            user_name=row.user_name,
            action=row.action,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            description=row.description,
            old_values=_decode(row.old_values),
            new_values=_decode(row.new_values),
            metadata=_decode(row.metadata),
            success=row.success,
            error_message=row.error_message,
            duration_ms=row.duration_ms,
            ip_address=row.ip_address,
            user_agent=row.user_agent,
            request_id=row.request_id,
            timestamp=row.timestamp,
        )


class AuditLogListResponse(BaseModel):
    """Paginated list of audit log entries."""

    items: list[AuditLogEntryResponse]
    pagination: PaginationMeta


class EntityTrailResponse(BaseModel):
    entity_type: str
    entity_id: int
    items: list[AuditLogEntryResponse]


class UserActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    start: datetime
    end: datetime
    total_actions: int
    document_actions: int
    task_actions: int
    login_count: int
    failed_actions: int
    last_activity: datetime | None


class EntitySummaryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entity_type: str
    entity_id: int
    title: str
    status: str
    created_by_name: str | None
    owner_name: str | None
    audit_count: int
    last_activity: datetime | None
    created_at: datetime
    completed_at: datetime | None
    processing_hours: float


class EntitySummaryResponse(BaseModel):
    entity_type: str
    start: datetime
    end: datetime
    items: list[EntitySummaryItem]


class CountByKeyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    count: int


class ActorActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    user_name: str | None
    count: int


class SystemStatisticsResponse(BaseModel):
    """Aggregate counters over a time window."""

    model_config = ConfigDict(from_attributes=True)

    start: datetime
    end: datetime
    total_activities: int
    failed_activities: int
    average_duration_ms: float
    by_action: list[CountByKeyResponse]
    by_entity_type: list[CountByKeyResponse]
    top_actors: list[ActorActivityResponse]


class AuditCleanupResponse(BaseModel):
    message: str
    deleted_count: int
    days_to_keep: int
