"""Task status history repository. Append-only; implements IStatusHistoryRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from officeflow.application.dtos.task import StatusHistoryResult
from officeflow.domain.enums import TaskStatus
from officeflow.infrastructure.persistence.models.task_status_history import (
    TaskStatusHistory,
)
from officeflow.shared.utils.datetime import ensure_utc


def _to_result(row: TaskStatusHistory) -> StatusHistoryResult:
    """Map ORM to application DTO."""
    return StatusHistoryResult(
        id=row.id,
        task_id=row.task_id,
        old_status=row.old_status,
        new_status=row.new_status,
        changed_by_id=row.changed_by_id,
        notes=row.notes,
        created_at=ensure_utc(row.created_at),
    )


class StatusHistoryRepository:
    """Append-only status history. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(
        self,
        task_id: int,
        old_status: str,
        new_status: TaskStatus,
        changed_by_id: int,
        notes: str,
        created_at: datetime,
    ) -> StatusHistoryResult:
        row = TaskStatusHistory(
            task_id=task_id,
            old_status=old_status,
            new_status=new_status.value,
            changed_by_id=changed_by_id,
            notes=notes,
            created_at=created_at,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _to_result(row)

    async def list_for_task(self, task_id: int) -> list[StatusHistoryResult]:
        """Return history oldest first; id breaks created_at ties."""
        stmt = (
            select(TaskStatusHistory)
            .where(TaskStatusHistory.task_id == task_id)
            .order_by(TaskStatusHistory.created_at.asc(), TaskStatusHistory.id.asc())
        )
        result = await self.db.execute(stmt)
        return [_to_result(r) for r in result.scalars().all()]
