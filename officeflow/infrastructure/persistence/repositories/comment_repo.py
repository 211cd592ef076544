"""Task comment repository. Implements ICommentRepository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from officeflow.application.dtos.task import CommentResult
from officeflow.infrastructure.persistence.models.task import TaskComment
from officeflow.shared.utils.datetime import ensure_utc


def _to_result(row: TaskComment) -> CommentResult:
    return CommentResult(
        id=row.id,
        task_id=row.task_id,
        user_id=row.user_id,
        content=row.content,
        created_at=ensure_utc(row.created_at),
    )


class CommentRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add_comment(
        self, task_id: int, user_id: int, content: str, created_at: datetime
    ) -> CommentResult:
        row = TaskComment(
            task_id=task_id,
            user_id=user_id,
            content=content,
            created_at=created_at,
            updated_at=created_at,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _to_result(row)

    async def soft_delete_for_task(self, task_id: int, deleted_at: datetime) -> int:
        result = await self.db.execute(
            update(TaskComment)
            .where(TaskComment.task_id == task_id, TaskComment.deleted_at.is_(None))
            .values(deleted_at=deleted_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def list_for_task(self, task_id: int) -> list[CommentResult]:
        stmt = (
            select(TaskComment)
            .where(TaskComment.task_id == task_id, TaskComment.deleted_at.is_(None))
            .order_by(TaskComment.created_at.asc(), TaskComment.id.asc())
        )
        result = await self.db.execute(stmt)
        return [_to_result(r) for r in result.scalars().all()]
