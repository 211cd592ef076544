"""Task repository. Implements ITaskRepository over the tasks table."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from officeflow.application.dtos.task import TaskListFilter, TaskPage, TaskVisibility
from officeflow.domain.entities.task import TaskEntity
from officeflow.domain.enums import DeadlineType, TaskStatus, TaskType
from officeflow.domain.exceptions import ResourceNotFoundException
from officeflow.infrastructure.persistence.models.task import Task
from officeflow.infrastructure.persistence.repositories.base import BaseRepository
from officeflow.shared.utils.datetime import ensure_utc


def _to_entity(t: Task) -> TaskEntity:
    """Map Task ORM to TaskEntity."""
    return TaskEntity(
        id=t.id,
        description=t.description,
        created_by_id=t.created_by_id,
        status=TaskStatus.parse(t.status),
        deadline=ensure_utc(t.deadline),
        deadline_type=DeadlineType.parse(t.deadline_type),
        task_type=TaskType.parse(t.task_type),
        assigned_to_id=t.assigned_to_id,
        linked_document_id=t.linked_document_id,
        processing_content=t.processing_content or "",
        processing_notes=t.processing_notes or "",
        completion_date=ensure_utc(t.completion_date),
        report_file=t.report_file,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
    )


def _apply(entity: TaskEntity, row: Task) -> None:
    """Copy mutable entity state onto the ORM row (created_by_id only on insert)."""
    row.description = entity.description
    row.deadline = entity.deadline
    row.deadline_type = entity.deadline_type.value
    row.status = entity.status.value
    row.task_type = entity.task_type.value
    row.assigned_to_id = entity.assigned_to_id
    row.linked_document_id = entity.linked_document_id
    row.processing_content = entity.processing_content
    row.processing_notes = entity.processing_notes
    row.completion_date = entity.completion_date
    row.report_file = entity.report_file


class TaskRepository(BaseRepository[Task]):
    """Task repository. Soft-deleted rows are invisible to every read."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def _live_row(self, task_id: int, *, for_update: bool = False) -> Task | None:
        stmt = select(Task).where(Task.id == task_id, Task.deleted_at.is_(None))
        if for_update:
            # Rendered as FOR UPDATE on PostgreSQL; SQLite serializes writers itself.
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_task(self, task_id: int, *, for_update: bool = False) -> TaskEntity | None:
        row = await self._live_row(task_id, for_update=for_update)
        return _to_entity(row) if row else None

    async def add_task(self, task: TaskEntity) -> TaskEntity:
        row = Task(created_by_id=task.created_by_id)
        _apply(task, row)
        return _to_entity(await self.create(row))

    async def save_task(self, task: TaskEntity) -> TaskEntity:
        assert task.id is not None
        row = await self._live_row(task.id)
        if row is None:
            raise ResourceNotFoundException("task", task.id)
        _apply(task, row)
        return _to_entity(await self.update(row))

    async def soft_delete_task(self, task_id: int, deleted_at: datetime) -> None:
        await self.db.execute(
            update(Task)
            .where(Task.id == task_id, Task.deleted_at.is_(None))
            .values(deleted_at=deleted_at)
            .execution_options(synchronize_session=False)
        )

    async def list_tasks(self, filters: TaskListFilter, skip: int, limit: int) -> TaskPage:
        conditions = [Task.deleted_at.is_(None)]
        if filters.visibility == TaskVisibility.ASSIGNED:
            conditions.append(Task.assigned_to_id == filters.viewer_id)
        elif filters.visibility == TaskVisibility.ASSIGNED_OR_CREATED:
            conditions.append(
                or_(
                    Task.assigned_to_id == filters.viewer_id,
                    Task.created_by_id == filters.viewer_id,
                )
            )
        if filters.status is not None:
            conditions.append(Task.status == filters.status.value)

        total = await self.db.scalar(
            select(func.count()).select_from(Task).where(and_(*conditions))
        )
        stmt = (
            select(Task)
            .where(and_(*conditions))
            .order_by(Task.created_at.desc(), Task.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return TaskPage(
            items=[_to_entity(r) for r in result.scalars().all()],
            total=int(total or 0),
        )
