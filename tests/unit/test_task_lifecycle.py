"""Tests for TaskLifecycleService against in-memory repositories."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from officeflow.application.dtos.task import (
    CommentResult,
    StatusHistoryResult,
    TaskCreate,
    TaskDetailsUpdate,
)
from officeflow.application.dtos.user import UserResult
from officeflow.application.use_cases.tasks.lifecycle import TaskLifecycleService
from officeflow.domain.entities.task import TaskEntity
from officeflow.domain.enums import Role, TaskStatus, TaskType
from officeflow.domain.exceptions import (
    AuthorizationException,
    InvalidStateException,
    ResourceNotFoundException,
    ReviewerNotFoundException,
    ValidationException,
)
from officeflow.shared.context import ActorContext

NOW = datetime(2024, 5, 1, 8, 0, 0, tzinfo=UTC)


class InMemoryTasks:
    def __init__(self) -> None:
        self.rows: dict[int, TaskEntity] = {}
        self.deleted: set[int] = set()

    async def get_task(self, task_id: int, *, for_update: bool = False) -> TaskEntity | None:
        if task_id in self.deleted or task_id not in self.rows:
            return None
        return replace(self.rows[task_id])

    async def add_task(self, task: TaskEntity) -> TaskEntity:
        stored = replace(task, id=len(self.rows) + 1, created_at=NOW, updated_at=NOW)
        self.rows[stored.id] = stored
        return replace(stored)

    async def save_task(self, task: TaskEntity) -> TaskEntity:
        self.rows[task.id] = replace(task)
        return replace(task)

    async def soft_delete_task(self, task_id: int, deleted_at: datetime) -> None:
        self.deleted.add(task_id)


class InMemoryHistory:
    def __init__(self) -> None:
        self.rows: list[StatusHistoryResult] = []

    async def append(self, task_id, old_status, new_status, changed_by_id, notes, created_at):
        row = StatusHistoryResult(
            id=len(self.rows) + 1,
            task_id=task_id,
            old_status=old_status,
            new_status=TaskStatus(new_status).value,
            changed_by_id=changed_by_id,
            notes=notes,
            created_at=created_at,
        )
        self.rows.append(row)
        return row

    async def list_for_task(self, task_id: int) -> list[StatusHistoryResult]:
        return [r for r in self.rows if r.task_id == task_id]


class InMemoryComments:
    def __init__(self) -> None:
        self.rows: list[CommentResult] = []
        self.deleted_for: list[int] = []

    async def add_comment(self, task_id, user_id, content, created_at) -> CommentResult:
        row = CommentResult(len(self.rows) + 1, task_id, user_id, content, created_at)
        self.rows.append(row)
        return row

    async def soft_delete_for_task(self, task_id: int, deleted_at: datetime) -> int:
        self.deleted_for.append(task_id)
        return sum(1 for c in self.rows if c.task_id == task_id)

    async def list_for_task(self, task_id: int) -> list[CommentResult]:
        return [c for c in self.rows if c.task_id == task_id]


class InMemoryUsers:
    def __init__(self, users: list[UserResult]) -> None:
        self.by_id = {u.id: u for u in users}

    async def get_user(self, user_id: int) -> UserResult | None:
        return self.by_id.get(user_id)

    async def find_active_by_role(self, role: Role) -> UserResult | None:
        matches = sorted(
            (u for u in self.by_id.values() if u.role == role and u.is_active),
            key=lambda u: u.id,
        )
        return matches[0] if matches else None


class InMemoryDocuments:
    def __init__(self, ids: set[int]) -> None:
        self.ids = ids

    async def document_exists(self, document_id: int) -> bool:
        return document_id in self.ids


ADMIN = UserResult(1, "Admin User", "admin", Role.ADMIN, True)
LEADER = UserResult(2, "Lead Tran", "leader", Role.TEAM_LEADER, True)
DEPUTY = UserResult(3, "Deputy Le", "deputy", Role.DEPUTY, True)
SECRETARY = UserResult(4, "Sec Pham", "secretary", Role.SECRETARY, True)
OFFICER = UserResult(5, "Officer Ngo", "officer", Role.OFFICER, True)
OFFICER2 = UserResult(6, "Officer Vo", "officer2", Role.OFFICER, True)
ALL_USERS = [ADMIN, LEADER, DEPUTY, SECRETARY, OFFICER, OFFICER2]


def actor(user: UserResult) -> ActorContext:
    return ActorContext(user_id=user.id, role=user.role, name=user.name)


class Clock:
    """Advances one minute per call so history rows have distinct timestamps."""

    def __init__(self) -> None:
        self.now = NOW

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def make_service():
    def _make(users: list[UserResult] = ALL_USERS):
        tasks, history, comments = InMemoryTasks(), InMemoryHistory(), InMemoryComments()
        service = TaskLifecycleService(
            tasks,
            history,
            comments,
            InMemoryUsers(users),
            InMemoryDocuments({10}),
            clock=Clock(),
        )
        return service, tasks, history, comments

    return _make


async def _create(service, creator=SECRETARY, assignee=LEADER, **kw):
    data = TaskCreate(description="Prepare quarterly report", assigned_to_id=assignee.id, **kw)
    return await service.create(data, actor(creator))


def _assert_completion_invariant(task: TaskEntity) -> None:
    assert (task.status == TaskStatus.COMPLETED) == (task.completion_date is not None)


async def test_create_starts_not_started_with_initial_history(make_service) -> None:
    """Create writes one "" -> NotStarted history row."""
    service, _, history, _ = make_service()
    detail = await _create(service)
    assert detail.task.status == TaskStatus.NOT_STARTED
    assert detail.task.created_by_id == SECRETARY.id
    assert [(h.old_status, h.new_status) for h in detail.history] == [("", "NotStarted")]
    assert len(history.rows) == 1
    _assert_completion_invariant(detail.task)


async def test_create_forbidden_for_officer(make_service) -> None:
    service, tasks, history, _ = make_service()
    with pytest.raises(AuthorizationException):
        await _create(service, creator=OFFICER)
    assert tasks.rows == {} and history.rows == []


async def test_create_rejects_blank_description(make_service) -> None:
    service, _, _, _ = make_service()
    with pytest.raises(ValidationException) as exc_info:
        await service.create(
            TaskCreate(description="   ", assigned_to_id=LEADER.id), actor(SECRETARY)
        )
    assert exc_info.value.details == {"field": "description"}


async def test_create_rejects_bad_deadline(make_service) -> None:
    service, _, _, _ = make_service()
    with pytest.raises(ValidationException):
        await _create(service, deadline="next tuesday")


async def test_create_accepts_date_only_deadline(make_service) -> None:
    service, _, _, _ = make_service()
    detail = await _create(service, deadline="2024-06-30")
    assert detail.task.deadline == datetime(2024, 6, 30, tzinfo=UTC)


async def test_create_unknown_assignee_or_document(make_service) -> None:
    service, _, _, _ = make_service()
    with pytest.raises(ResourceNotFoundException):
        await service.create(TaskCreate("x", assigned_to_id=99), actor(SECRETARY))
    with pytest.raises(ResourceNotFoundException):
        await _create(service, linked_document_id=77)


async def test_create_with_document_is_document_linked(make_service) -> None:
    service, _, _, _ = make_service()
    detail = await _create(service, linked_document_id=10)
    assert detail.task.task_type == TaskType.DOCUMENT_LINKED


async def test_full_lifecycle_history_sequence(make_service) -> None:
    """create -> assign -> submit for review -> complete leaves four history rows."""
    service, _, _, _ = make_service()
    task_id = (await _create(service)).task.id

    await service.assign(task_id, OFFICER.id, actor(LEADER))
    reviewed = await service.submit_for_review(task_id, actor(OFFICER))
    assert reviewed.task.assigned_to_id == LEADER.id
    done = await service.update_status(task_id, TaskStatus.COMPLETED, None, actor(LEADER))

    transitions = [(h.old_status, h.new_status) for h in done.history]
    assert transitions == [
        ("", "NotStarted"),
        ("NotStarted", "Processing"),
        ("Processing", "Review"),
        ("Review", "Completed"),
    ]
    timestamps = [h.created_at for h in done.history]
    assert timestamps == sorted(timestamps)
    assert done.task.completion_date is not None
    _assert_completion_invariant(done.task)


async def test_assign_not_started_moves_to_processing(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service)).task.id
    detail = await service.assign(task_id, OFFICER.id, actor(DEPUTY))
    assert detail.task.status == TaskStatus.PROCESSING
    assert detail.task.assigned_to_id == OFFICER.id
    assert detail.history[-1].notes == "Assigned task to Officer Ngo"


async def test_reassign_processing_task_keeps_status_without_history(make_service) -> None:
    service, _, history, _ = make_service()
    task_id = (await _create(service)).task.id
    await service.assign(task_id, OFFICER.id, actor(LEADER))
    before = len(history.rows)
    detail = await service.assign(task_id, OFFICER2.id, actor(LEADER))
    assert detail.task.status == TaskStatus.PROCESSING
    assert detail.task.assigned_to_id == OFFICER2.id
    assert len(history.rows) == before


async def test_assign_forbidden_for_secretary(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service)).task.id
    with pytest.raises(AuthorizationException):
        await service.assign(task_id, OFFICER.id, actor(SECRETARY))


async def test_assign_missing_task(make_service) -> None:
    service, _, _, _ = make_service()
    with pytest.raises(ResourceNotFoundException):
        await service.assign(404, OFFICER.id, actor(LEADER))


async def test_forward_adds_comment_and_history(make_service) -> None:
    service, _, _, comments = make_service()
    task_id = (await _create(service)).task.id
    await service.assign(task_id, OFFICER.id, actor(LEADER))
    detail = await service.forward(task_id, OFFICER2.id, "please handle", actor(LEADER))
    expected = "Forwarded task from Officer Ngo to Officer Vo. Note: please handle"
    assert detail.task.assigned_to_id == OFFICER2.id
    assert detail.task.status == TaskStatus.PROCESSING
    assert detail.history[-1].notes == expected
    assert detail.history[-1].old_status == detail.history[-1].new_status == "Processing"
    assert [c.content for c in comments.rows] == [expected]


async def test_delegate_notes_and_matrix(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service, creator=LEADER, assignee=DEPUTY)).task.id
    detail = await service.delegate(task_id, OFFICER.id, None, actor(DEPUTY))
    assert detail.history[-1].notes == "Delegated task from Deputy Le to Officer Ngo"
    assert detail.task.assigned_to_id == OFFICER.id


async def test_delegate_deputy_to_deputy_is_forbidden(make_service) -> None:
    service, tasks, _, _ = make_service()
    task_id = (await _create(service, creator=LEADER, assignee=DEPUTY)).task.id
    with pytest.raises(AuthorizationException):
        await service.delegate(task_id, DEPUTY.id, None, actor(DEPUTY))
    assert tasks.rows[task_id].assigned_to_id == DEPUTY.id


async def test_delegate_requires_creator_or_assignee(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service, creator=SECRETARY, assignee=OFFICER)).task.id
    with pytest.raises(AuthorizationException):
        await service.delegate(task_id, OFFICER2.id, None, actor(LEADER))


@pytest.mark.parametrize(
    "status", [TaskStatus.NOT_STARTED, TaskStatus.REVIEW, TaskStatus.COMPLETED]
)
async def test_submit_for_review_requires_processing(make_service, status) -> None:
    service, tasks, history, _ = make_service()
    task_id = (await _create(service, assignee=OFFICER)).task.id
    stored = tasks.rows[task_id]
    stored.status = status
    stored.completion_date = NOW if status == TaskStatus.COMPLETED else None
    before = len(history.rows)
    with pytest.raises(InvalidStateException) as exc_info:
        await service.submit_for_review(task_id, actor(OFFICER))
    assert exc_info.value.details["current_status"] == status.value
    assert tasks.rows[task_id].status == status
    assert len(history.rows) == before


async def test_submit_for_review_only_by_assignee(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service)).task.id
    await service.assign(task_id, OFFICER.id, actor(LEADER))
    with pytest.raises(AuthorizationException):
        await service.submit_for_review(task_id, actor(OFFICER2))


async def test_reviewer_is_creator_when_deputy(make_service) -> None:
    service, tasks, _, _ = make_service()
    # Deputy cannot create, so build via TeamLeader and rewrite the creator.
    detail = await _create(service, creator=LEADER)
    tasks.rows[detail.task.id].created_by_id = DEPUTY.id
    await service.assign(detail.task.id, OFFICER.id, actor(LEADER))
    reviewed = await service.submit_for_review(detail.task.id, actor(OFFICER))
    assert reviewed.task.assigned_to_id == DEPUTY.id
    assert reviewed.history[-1].notes == "Submitted for review to Deputy Le"


async def test_reviewer_falls_back_to_active_deputy(make_service) -> None:
    inactive_leader = replace(LEADER, is_active=False)
    service, tasks, _, _ = make_service([inactive_leader, DEPUTY, SECRETARY, OFFICER])
    task_id = (await _create(service, assignee=OFFICER)).task.id
    tasks.rows[task_id].status = TaskStatus.PROCESSING
    reviewed = await service.submit_for_review(task_id, actor(OFFICER))
    assert reviewed.task.assigned_to_id == DEPUTY.id


async def test_no_reviewer_raises(make_service) -> None:
    service, tasks, _, _ = make_service([SECRETARY, OFFICER])
    task_id = (await _create(service, assignee=OFFICER)).task.id
    tasks.rows[task_id].status = TaskStatus.PROCESSING
    with pytest.raises(ReviewerNotFoundException):
        await service.submit_for_review(task_id, actor(OFFICER))
    assert tasks.rows[task_id].status == TaskStatus.PROCESSING


async def test_update_status_same_status_still_records(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service)).task.id
    detail = await service.update_status(task_id, TaskStatus.NOT_STARTED, "  ", actor(OFFICER))
    last = detail.history[-1]
    assert (last.old_status, last.new_status) == ("NotStarted", "NotStarted")
    assert last.notes == "Updated task status"


async def test_leaving_completed_clears_completion_date(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service)).task.id
    await service.assign(task_id, OFFICER.id, actor(LEADER))
    done = await service.update_status(task_id, TaskStatus.COMPLETED, None, actor(LEADER))
    first_completion = done.task.completion_date
    again = await service.update_status(task_id, TaskStatus.COMPLETED, None, actor(LEADER))
    assert again.task.completion_date == first_completion
    reopened = await service.update_status(task_id, TaskStatus.PROCESSING, "reopen", actor(LEADER))
    assert reopened.task.completion_date is None
    _assert_completion_invariant(reopened.task)


async def test_processing_content_only_by_assignee(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service)).task.id
    await service.assign(task_id, OFFICER.id, actor(LEADER))
    with pytest.raises(AuthorizationException):
        await service.update_processing_content(task_id, "draft", "", actor(LEADER))
    detail = await service.update_processing_content(task_id, "draft", "n", actor(OFFICER))
    assert detail.task.processing_content == "draft"
    assert detail.task.status == TaskStatus.PROCESSING


async def test_update_details_partial(make_service) -> None:
    service, _, _, _ = make_service()
    task_id = (await _create(service, deadline="2024-06-01")).task.id
    detail = await service.update_details(
        task_id, TaskDetailsUpdate(description=" Revised "), actor(SECRETARY)
    )
    assert detail.task.description == "Revised"
    assert detail.task.deadline == datetime(2024, 6, 1, tzinfo=UTC)
    assert detail.history[-1].notes == "Updated task details"


async def test_delete_completed_task_is_rejected(make_service) -> None:
    service, tasks, _, comments = make_service()
    task_id = (await _create(service)).task.id
    await service.assign(task_id, OFFICER.id, actor(LEADER))
    await service.update_status(task_id, TaskStatus.COMPLETED, None, actor(LEADER))
    with pytest.raises(InvalidStateException):
        await service.delete(task_id, actor(SECRETARY))
    assert task_id not in tasks.deleted
    assert comments.deleted_for == []


async def test_delete_by_leader_needs_creator(make_service) -> None:
    service, tasks, _, comments = make_service()
    task_id = (await _create(service, creator=SECRETARY)).task.id
    with pytest.raises(AuthorizationException):
        await service.delete(task_id, actor(LEADER))
    await service.delete(task_id, actor(SECRETARY))
    assert task_id in tasks.deleted
    assert comments.deleted_for == [task_id]
    with pytest.raises(ResourceNotFoundException):
        await service.update_status(task_id, TaskStatus.PROCESSING, None, actor(LEADER))
