"""DTOs for the audit log (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Data to append one audit log entry. Payloads are already serialized JSON text."""

    user_id: int
    action: str
    entity_type: str
    entity_id: int
    description: str
    success: bool
    timestamp: datetime
    old_values: str | None = None
    new_values: str | None = None
    metadata: str | None = None
    error_message: str | None = None
    duration_ms: int = 0
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class AuditLogResult:
    """Audit log entry as returned by the repository."""

    id: int
    user_id: int
    action: str
    entity_type: str
    entity_id: int
    description: str
    old_values: str | None
    new_values: str | None
    metadata: str | None
    success: bool
    error_message: str | None
    duration_ms: int
    ip_address: str | None
    user_agent: str | None
    request_id: str | None
    timestamp: datetime
    user_name: str | None = None


@dataclass(frozen=True)
class AuditLogFilter:
    """AND-combined filters for query/export. None means unfiltered."""

    user_id: int | None = None
    action: str | None = None
    entity_type: str | None = None
    entity_id: int | None = None
    success: bool | None = None
    start: datetime | None = None
    end: datetime | None = None
    ip_address: str | None = None


@dataclass(frozen=True)
class AuditLogPage:
    items: list[AuditLogResult]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0


@dataclass(frozen=True)
class UserActivitySummary:
    """Per-user rollup over a time window."""

    user_id: int
    start: datetime
    end: datetime
    total_actions: int
    document_actions: int
    task_actions: int
    login_count: int
    failed_actions: int
    last_activity: datetime | None


@dataclass(frozen=True)
class EntitySummaryRow:
    """Per-entity rollup joined against the owning table."""

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


@dataclass(frozen=True)
class CountByKey:
    key: str
    count: int


@dataclass(frozen=True)
class ActorActivityCount:
    user_id: int
    user_name: str | None
    count: int


@dataclass(frozen=True)
class SystemStatistics:
    start: datetime
    end: datetime
    total_activities: int
    failed_activities: int
    average_duration_ms: float
    by_action: list[CountByKey] = field(default_factory=list)
    by_entity_type: list[CountByKey] = field(default_factory=list)
    top_actors: list[ActorActivityCount] = field(default_factory=list)


@dataclass(frozen=True)
class AuditExportRow:
    """Flat tabular row for CSV export (payloads excluded)."""

    timestamp: datetime
    user_name: str
    action: str
    entity_type: str
    entity_id: int
    description: str
    success: bool
    ip_address: str
    duration_ms: int
