"""Task service dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from officeflow.application.use_cases.tasks import TaskLifecycleService, TaskQueryService
from officeflow.infrastructure.persistence.database import get_db, get_db_transactional
from officeflow.infrastructure.persistence.repositories import (
    CommentRepository,
    DocumentRepository,
    StatusHistoryRepository,
    TaskRepository,
    UserRepository,
)


async def get_task_lifecycle_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> TaskLifecycleService:
    """Lifecycle engine over one transactional session."""
    return TaskLifecycleService(
        task_repo=TaskRepository(db),
        history_repo=StatusHistoryRepository(db),
        comment_repo=CommentRepository(db),
        user_lookup=UserRepository(db),
        document_lookup=DocumentRepository(db),
    )


async def get_task_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TaskQueryService:
    return TaskQueryService(
        task_repo=TaskRepository(db),
        history_repo=StatusHistoryRepository(db),
        comment_repo=CommentRepository(db),
    )
