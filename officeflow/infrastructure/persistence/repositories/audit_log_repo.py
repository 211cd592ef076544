"""Audit log repository. Append-only; implements IAuditLogRepository."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import and_, case, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from officeflow.application.dtos.audit_log import (
    ActorActivityCount,
    AuditLogEntryCreate,
    AuditLogFilter,
    AuditLogResult,
    CountByKey,
    EntitySummaryRow,
)
from officeflow.domain.enums import AuditEntityType
from officeflow.infrastructure.persistence.models.audit_log import AuditLog
from officeflow.infrastructure.persistence.models.document import (
    IncomingDocument,
    OutgoingDocument,
)
from officeflow.infrastructure.persistence.models.task import Task
from officeflow.infrastructure.persistence.models.user import User
from officeflow.shared.utils.datetime import ensure_utc

_GROUPABLE_COLUMNS = {"action": AuditLog.action, "entity_type": AuditLog.entity_type}


def _orm_to_result(row: AuditLog, user_name: str | None = None) -> AuditLogResult:
    """Map ORM to application DTO."""
    return AuditLogResult(
        id=row.id,
        user_id=row.user_id,
        action=row.action,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        description=row.description,
        old_values=row.old_values,
        new_values=row.new_values,
        metadata=row.meta,
        success=row.success,
        error_message=row.error_message,
        duration_ms=row.duration_ms,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        request_id=row.request_id,
        timestamp=ensure_utc(row.timestamp),
        user_name=user_name,
    )


def _conditions(filters: AuditLogFilter) -> list[Any]:
    conditions: list[Any] = []
    if filters.user_id is not None:
        conditions.append(AuditLog.user_id == filters.user_id)
    if filters.action is not None:
        conditions.append(AuditLog.action == filters.action)
    if filters.entity_type is not None:
        conditions.append(AuditLog.entity_type == filters.entity_type)
    if filters.entity_id is not None:
        conditions.append(AuditLog.entity_id == filters.entity_id)
    if filters.success is not None:
        conditions.append(AuditLog.success.is_(filters.success))
    if filters.start is not None:
        conditions.append(AuditLog.timestamp >= filters.start)
    if filters.end is not None:
        conditions.append(AuditLog.timestamp <= filters.end)
    if filters.ip_address is not None:
        conditions.append(AuditLog.ip_address == filters.ip_address)
    return conditions


def _in_window(start: datetime, end: datetime) -> Any:
    return AuditLog.timestamp.between(start, end)


def _hours_between(start: datetime, end: datetime) -> float:
    return round(max((end - start).total_seconds(), 0.0) / 3600, 2)


class AuditLogRepository:
    """Append-only audit log repository. No update; deletes only through retention cleanup."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record."""
        row = AuditLog(
            user_id=entry.user_id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            description=entry.description,
            old_values=entry.old_values,
            new_values=entry.new_values,
            meta=entry.metadata,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            request_id=entry.request_id,
            success=entry.success,
            error_message=entry.error_message,
            duration_ms=entry.duration_ms,
            timestamp=entry.timestamp,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _orm_to_result(row)

    async def query(
        self, filters: AuditLogFilter, *, skip: int, limit: int
    ) -> tuple[list[AuditLogResult], int]:
        """Page of entries (newest first) plus the total matching count."""
        conditions = _conditions(filters)
        total = await self.db.scalar(
            select(func.count(AuditLog.id)).where(and_(True, *conditions))
        )
        stmt = (
            select(AuditLog, User.name)
            .outerjoin(User, User.id == AuditLog.user_id)
            .where(and_(True, *conditions))
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r, name) for r, name in result.all()], int(total or 0)

    async def list_for_entity(self, entity_type: str, entity_id: int) -> list[AuditLogResult]:
        stmt = (
            select(AuditLog, User.name)
            .outerjoin(User, User.id == AuditLog.user_id)
            .where(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
            .order_by(AuditLog.timestamp.asc(), AuditLog.id.asc())
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r, name) for r, name in result.all()]

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
        stmt = select(
            func.count(AuditLog.id),
            func.count(case((AuditLog.entity_type.in_(document_entity_types), 1))),
            func.count(case((AuditLog.entity_type == task_entity_type, 1))),
            func.count(case((AuditLog.action == login_action, 1))),
            func.count(case((AuditLog.success.is_(False), 1))),
            func.max(AuditLog.timestamp),
        ).where(AuditLog.user_id == user_id, _in_window(start, end))
        total, documents, tasks, logins, failed, last = (await self.db.execute(stmt)).one()
        return (
            int(total or 0),
            int(documents or 0),
            int(tasks or 0),
            int(logins or 0),
            int(failed or 0),
            ensure_utc(last),
        )

    async def count_by(self, column: str, start: datetime, end: datetime) -> list[CountByKey]:
        col = _GROUPABLE_COLUMNS[column]
        count = func.count(AuditLog.id).label("count")
        stmt = (
            select(col, count)
            .where(_in_window(start, end))
            .group_by(col)
            .order_by(desc("count"), col)
        )
        result = await self.db.execute(stmt)
        return [CountByKey(key=k, count=int(c)) for k, c in result.all()]

    async def top_actors(
        self, start: datetime, end: datetime, limit: int
    ) -> list[ActorActivityCount]:
        count = func.count(AuditLog.id).label("count")
        stmt = (
            select(AuditLog.user_id, User.name, count)
            .outerjoin(User, User.id == AuditLog.user_id)
            .where(_in_window(start, end))
            .group_by(AuditLog.user_id, User.name)
            .order_by(desc("count"), AuditLog.user_id)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [
            ActorActivityCount(user_id=uid, user_name=name, count=int(c))
            for uid, name, c in result.all()
        ]

    async def totals(self, start: datetime, end: datetime) -> tuple[int, int, float]:
        stmt = select(
            func.count(AuditLog.id),
            func.count(case((AuditLog.success.is_(False), 1))),
            func.avg(case((AuditLog.duration_ms > 0, AuditLog.duration_ms))),
        ).where(_in_window(start, end))
        total, failed, avg_duration = (await self.db.execute(stmt)).one()
        return int(total or 0), int(failed or 0), round(float(avg_duration or 0.0), 2)

    async def entity_summaries(
        self, entity_type: str, start: datetime, end: datetime, now: datetime
    ) -> list[EntitySummaryRow]:
        """One row per task/document created in [start, end], counting its whole audit trail."""
        creator = aliased(User)
        owner = aliased(User)
        if entity_type == AuditEntityType.TASK.value:
            model: Any = Task
            title_col = Task.description
            owner_fk = Task.assigned_to_id
            completed_col = Task.completion_date
        else:
            model = (
                IncomingDocument
                if entity_type == AuditEntityType.INCOMING_DOCUMENT.value
                else OutgoingDocument
            )
            title_col = model.document_number
            owner_fk = (
                model.processor_id if model is IncomingDocument else model.drafter_id
            )
            completed_col = model.completed_at

        audit_count = func.count(AuditLog.id)
        last_activity = func.max(AuditLog.timestamp)
        stmt = (
            select(
                model.id,
                title_col,
                model.status,
                model.created_at,
                completed_col,
                creator.name,
                owner.name,
                audit_count,
                last_activity,
            )
            .select_from(model)
            .outerjoin(creator, creator.id == model.created_by_id)
            .outerjoin(owner, owner.id == owner_fk)
            .outerjoin(
                AuditLog,
                and_(AuditLog.entity_type == entity_type, AuditLog.entity_id == model.id),
            )
            .where(model.created_at.between(start, end))
            .group_by(
                model.id,
                title_col,
                model.status,
                model.created_at,
                completed_col,
                creator.name,
                owner.name,
            )
            .order_by(model.created_at.desc(), model.id.desc())
        )
        result = await self.db.execute(stmt)
        rows: list[EntitySummaryRow] = []
        for eid, title, status, created_at, completed_at, creator_name, owner_name, n, last in result.all():
            created_at = ensure_utc(created_at)
            completed_at = ensure_utc(completed_at)
            rows.append(
                EntitySummaryRow(
                    entity_type=entity_type,
                    entity_id=eid,
                    title=title,
                    status=status,
                    created_by_name=creator_name,
                    owner_name=owner_name,
                    audit_count=int(n or 0),
                    last_activity=ensure_utc(last),
                    created_at=created_at,
                    completed_at=completed_at,
                    processing_hours=_hours_between(created_at, completed_at or now),
                )
            )
        return rows

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Bulk delete (bypasses per-row ORM listeners); rows at exactly cutoff are kept."""
        result = await self.db.execute(
            delete(AuditLog)
            .where(AuditLog.timestamp < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def export_rows(self, filters: AuditLogFilter, limit: int) -> list[AuditLogResult]:
        stmt = (
            select(AuditLog, User.name)
            .outerjoin(User, User.id == AuditLog.user_id)
            .where(and_(True, *_conditions(filters)))
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r, name) for r, name in result.all()]
