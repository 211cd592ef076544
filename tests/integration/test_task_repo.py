"""Task, status history and comment repositories against in-memory SQLite."""

from datetime import UTC, datetime, timedelta

from officeflow.application.dtos.task import TaskListFilter, TaskVisibility
from officeflow.domain.entities.task import TaskEntity
from officeflow.domain.enums import Role, TaskStatus, TaskType
from officeflow.infrastructure.persistence.repositories import (
    CommentRepository,
    DocumentRepository,
    StatusHistoryRepository,
    TaskRepository,
    UserRepository,
)

T0 = datetime(2024, 4, 1, 9, 0, 0, tzinfo=UTC)


async def _add(repo: TaskRepository, created_by: int, assigned_to: int | None = None, **kw):
    return await repo.add_task(
        TaskEntity(
            id=None,
            description=kw.pop("description", "Task"),
            created_by_id=created_by,
            assigned_to_id=assigned_to,
            **kw,
        )
    )


async def test_add_and_get_round_trips_entity(db_session, users, incoming_document_id) -> None:
    repo = TaskRepository(db_session)
    created = await _add(
        repo,
        users["secretary"].id,
        users["leader"].id,
        description="Reply to ministry",
        deadline=T0,
        task_type=TaskType.DOCUMENT_LINKED,
        linked_document_id=incoming_document_id,
    )
    assert created.id is not None
    assert created.created_at is not None and created.created_at.tzinfo is not None

    found = await repo.get_task(created.id, for_update=True)
    assert found is not None
    assert found.description == "Reply to ministry"
    assert found.status == TaskStatus.NOT_STARTED
    assert found.deadline == T0
    assert found.task_type == TaskType.DOCUMENT_LINKED
    assert found.linked_document_id == incoming_document_id


async def test_save_task_persists_status_and_completion(db_session, users) -> None:
    repo = TaskRepository(db_session)
    task = await _add(repo, users["leader"].id, users["officer"].id)
    task.change_status(TaskStatus.COMPLETED, T0)
    saved = await repo.save_task(task)
    assert saved.status == TaskStatus.COMPLETED
    assert saved.completion_date == T0


async def test_soft_deleted_task_is_invisible(db_session, users) -> None:
    repo = TaskRepository(db_session)
    task = await _add(repo, users["secretary"].id, users["officer"].id)
    await repo.soft_delete_task(task.id, T0)
    assert await repo.get_task(task.id) is None
    page = await repo.list_tasks(
        TaskListFilter(viewer_id=users["admin"].id, visibility=TaskVisibility.ALL),
        skip=0,
        limit=10,
    )
    assert page.total == 0


async def test_list_tasks_visibility_and_status(db_session, users) -> None:
    repo = TaskRepository(db_session)
    leader, officer, officer2 = users["leader"], users["officer"], users["officer2"]
    mine = await _add(repo, users["secretary"].id, officer.id, description="mine")
    await _add(repo, users["secretary"].id, officer2.id, description="other")
    created = await _add(repo, leader.id, officer2.id, description="by leader")

    page = await repo.list_tasks(
        TaskListFilter(viewer_id=officer.id, visibility=TaskVisibility.ASSIGNED), 0, 10
    )
    assert [t.id for t in page.items] == [mine.id]

    page = await repo.list_tasks(
        TaskListFilter(viewer_id=leader.id, visibility=TaskVisibility.ASSIGNED_OR_CREATED),
        0,
        10,
    )
    assert [t.id for t in page.items] == [created.id]

    page = await repo.list_tasks(
        TaskListFilter(
            viewer_id=leader.id, visibility=TaskVisibility.ALL, status=TaskStatus.NOT_STARTED
        ),
        0,
        2,
    )
    assert page.total == 3
    assert len(page.items) == 2
    # Newest first.
    assert page.items[0].id == created.id


async def test_history_ordered_by_time_then_id(db_session, users) -> None:
    tasks = TaskRepository(db_session)
    history = StatusHistoryRepository(db_session)
    uid = users["leader"].id
    task = await _add(tasks, uid, users["officer"].id)
    await history.append(task.id, "NotStarted", TaskStatus.PROCESSING, uid, "b", T0)
    await history.append(task.id, "", TaskStatus.NOT_STARTED, uid, "a", T0 - timedelta(minutes=1))
    await history.append(task.id, "Processing", TaskStatus.REVIEW, uid, "c", T0)

    rows = await history.list_for_task(task.id)
    assert [r.notes for r in rows] == ["a", "b", "c"]
    assert rows[0].created_at == T0 - timedelta(minutes=1)
    assert rows[1].new_status == "Processing"


async def test_comments_soft_delete(db_session, users) -> None:
    tasks = TaskRepository(db_session)
    comments = CommentRepository(db_session)
    uid = users["leader"].id
    task = await _add(tasks, uid, users["officer"].id)
    await comments.add_comment(task.id, uid, "first", T0)
    await comments.add_comment(task.id, uid, "second", T0 + timedelta(seconds=1))
    assert [c.content for c in await comments.list_for_task(task.id)] == ["first", "second"]

    assert await comments.soft_delete_for_task(task.id, T0) == 2
    assert await comments.list_for_task(task.id) == []
    assert await comments.soft_delete_for_task(task.id, T0) == 0


async def test_user_lookup(db_session, users) -> None:
    repo = UserRepository(db_session)
    leader = await repo.find_active_by_role(Role.TEAM_LEADER)
    assert leader is not None and leader.id == users["leader"].id
    assert await repo.get_user(9999) is None
    inactive = await repo.create_user("ghost", "Ghost", Role.DEPUTY, is_active=False)
    assert inactive.is_active is False
    found = await repo.find_active_by_role(Role.DEPUTY)
    assert found is not None and found.id == users["deputy"].id


async def test_document_exists(db_session, incoming_document_id) -> None:
    repo = DocumentRepository(db_session)
    assert await repo.document_exists(incoming_document_id)
    assert not await repo.document_exists(incoming_document_id + 100)
