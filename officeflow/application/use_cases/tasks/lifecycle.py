"""Task lifecycle engine: the only writer of tasks and their status history.

Each operation loads the task (row-locked when the store supports it),
checks the authorization policy table, mutates the TaskEntity, saves it and
appends exactly one StatusHistory row. The caller supplies the transaction
(one per request), so a task row and its history row commit together.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from officeflow.application.dtos.task import TaskCreate, TaskDetail, TaskDetailsUpdate
from officeflow.domain.entities.task import TaskEntity
from officeflow.domain.enums import DeadlineType, Role, TaskStatus, TaskType
from officeflow.domain.exceptions import (
    InvalidStateException,
    ResourceNotFoundException,
    ReviewerNotFoundException,
    ValidationException,
)
from officeflow.domain.policies import (
    REVIEWER_ROLES,
    TaskOperation,
    authorize,
    authorize_delegation_target,
    relationships_of,
)
from officeflow.shared.telemetry.logging import get_logger
from officeflow.shared.utils.datetime import parse_deadline, utc_now

if TYPE_CHECKING:
    from officeflow.application.dtos.user import UserResult
    from officeflow.application.interfaces.repositories import (
        ICommentRepository,
        IDocumentLookup,
        IStatusHistoryRepository,
        ITaskRepository,
        IUserLookup,
    )
    from officeflow.shared.context import ActorContext

logger = get_logger(__name__)

UNASSIGNED_LABEL = "unassigned"


def _with_note(text: str, note: str | None) -> str:
    note = (note or "").strip()
    return f"{text}. Note: {note}" if note else text


def _parse_deadline_field(raw: str | None) -> datetime | None:
    if raw is None or not raw.strip():
        return None
    try:
        return parse_deadline(raw)
    except ValueError:
        raise ValidationException(
            "Invalid deadline; use ISO-8601 (YYYY-MM-DDTHH:MM:SS[Z|±HH:MM]), "
            "'YYYY-MM-DD HH:MM:SS' or 'YYYY-MM-DD'",
            field="deadline",
        ) from None


class TaskLifecycleService:
    """Status transitions, reassignment and deletion of tasks."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        history_repo: IStatusHistoryRepository,
        comment_repo: ICommentRepository,
        user_lookup: IUserLookup,
        document_lookup: IDocumentLookup,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._tasks = task_repo
        self._history = history_repo
        self._comments = comment_repo
        self._users = user_lookup
        self._documents = document_lookup
        self._clock = clock

    # ---- helpers ----

    async def _load(self, task_id: int) -> TaskEntity:
        task = await self._tasks.get_task(task_id, for_update=True)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def _require_user(self, user_id: int) -> UserResult:
        user = await self._users.get_user(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        return user

    async def _assignee_name(self, task: TaskEntity) -> str:
        if task.assigned_to_id is None:
            return UNASSIGNED_LABEL
        return (await self._require_user(task.assigned_to_id)).name

    async def _require_document(self, document_id: int) -> None:
        if not await self._documents.document_exists(document_id):
            raise ResourceNotFoundException("incoming_document", document_id)

    def _authorize(
        self, operation: TaskOperation, actor: ActorContext, task: TaskEntity | None = None
    ) -> None:
        rels = relationships_of(
            actor.user_id,
            task.created_by_id if task else None,
            task.assigned_to_id if task else None,
        )
        authorize(operation, actor.role, rels)

    async def _record(
        self,
        task: TaskEntity,
        old_status: str,
        actor: ActorContext,
        notes: str,
    ) -> TaskDetail:
        """Save the task, append its history row and return it with history preloaded."""
        assert task.id is not None
        saved = await self._tasks.save_task(task)
        await self._history.append(
            task_id=task.id,
            old_status=old_status,
            new_status=task.status,
            changed_by_id=actor.user_id,
            notes=notes,
            created_at=self._clock(),
        )
        return TaskDetail(task=saved, history=await self._history.list_for_task(task.id))

    # ---- operations ----

    async def create(self, data: TaskCreate, actor: ActorContext) -> TaskDetail:
        """Create a task in NotStarted with its initial "" -> NotStarted history row.

        Raises:
            AuthorizationException: Actor is not Secretary or TeamLeader.
            ValidationException: Empty description, bad deadline, or a
                document-linked task without a document.
            ResourceNotFoundException: Assignee or linked document missing.
        """
        self._authorize(TaskOperation.CREATE, actor)
        description = (data.description or "").strip()
        if not description:
            raise ValidationException("Task description is required", field="description")
        deadline = _parse_deadline_field(data.deadline)
        await self._require_user(data.assigned_to_id)
        if data.linked_document_id is not None:
            await self._require_document(data.linked_document_id)
        task_type = data.task_type or (
            TaskType.DOCUMENT_LINKED
            if data.linked_document_id is not None
            else TaskType.INDEPENDENT
        )
        entity = TaskEntity(
            id=None,
            description=description,
            created_by_id=actor.user_id,
            status=TaskStatus.NOT_STARTED,
            deadline=deadline,
            deadline_type=data.deadline_type or DeadlineType.SPECIFIC,
            task_type=task_type,
            assigned_to_id=data.assigned_to_id,
            linked_document_id=data.linked_document_id,
        )
        entity.validate()
        task = await self._tasks.add_task(entity)
        assert task.id is not None
        await self._history.append(
            task_id=task.id,
            old_status="",
            new_status=TaskStatus.NOT_STARTED,
            changed_by_id=actor.user_id,
            notes="Created task",
            created_at=self._clock(),
        )
        logger.info("Task %s created by user %s", task.id, actor.user_id)
        return TaskDetail(task=task, history=await self._history.list_for_task(task.id))

    async def assign(self, task_id: int, assignee_id: int, actor: ActorContext) -> TaskDetail:
        """Set the assignee; a NotStarted task moves to Processing.

        A history row is written only when the status changes.
        """
        task = await self._load(task_id)
        self._authorize(TaskOperation.ASSIGN, actor, task)
        assignee = await self._require_user(assignee_id)
        task.reassign(assignee.id)
        if task.status != TaskStatus.NOT_STARTED:
            saved = await self._tasks.save_task(task)
            logger.info("Task %s reassigned to user %s", task_id, assignee.id)
            return TaskDetail(task=saved, history=await self._history.list_for_task(task_id))
        old = task.change_status(TaskStatus.PROCESSING, self._clock())
        logger.info("Task %s assigned to user %s (%s -> Processing)", task_id, assignee.id, old.value)
        return await self._record(task, old.value, actor, f"Assigned task to {assignee.name}")

    async def forward(
        self,
        task_id: int,
        new_assignee_id: int,
        comment: str | None,
        actor: ActorContext,
    ) -> TaskDetail:
        """Reassign without a status change; leaves a comment and a history row."""
        task = await self._load(task_id)
        self._authorize(TaskOperation.FORWARD, actor, task)
        new_assignee = await self._require_user(new_assignee_id)
        old_name = await self._assignee_name(task)
        text = _with_note(f"Forwarded task from {old_name} to {new_assignee.name}", comment)
        task.reassign(new_assignee.id)
        now = self._clock()
        await self._comments.add_comment(task_id, actor.user_id, text, now)
        logger.info("Task %s forwarded to user %s", task_id, new_assignee.id)
        return await self._record(task, task.status.value, actor, text)

    async def delegate(
        self,
        task_id: int,
        new_assignee_id: int,
        notes: str | None,
        actor: ActorContext,
    ) -> TaskDetail:
        """Reassign under the delegation matrix (TeamLeader -> Deputy/Officer, Deputy -> Officer)."""
        task = await self._load(task_id)
        self._authorize(TaskOperation.DELEGATE, actor, task)
        target = await self._require_user(new_assignee_id)
        authorize_delegation_target(actor.role, target.role)
        old_name = await self._assignee_name(task)
        text = _with_note(f"Delegated task from {old_name} to {target.name}", notes)
        task.reassign(target.id)
        logger.info("Task %s delegated by user %s to user %s", task_id, actor.user_id, target.id)
        return await self._record(task, task.status.value, actor, text)

    async def _resolve_reviewer(self, task: TaskEntity) -> UserResult:
        creator = await self._users.get_user(task.created_by_id)
        if creator is not None and creator.role in REVIEWER_ROLES:
            return creator
        for role in (Role.TEAM_LEADER, Role.DEPUTY):
            reviewer = await self._users.find_active_by_role(role)
            if reviewer is not None:
                return reviewer
        assert task.id is not None
        raise ReviewerNotFoundException(task.id)

    async def submit_for_review(self, task_id: int, actor: ActorContext) -> TaskDetail:
        """Hand a Processing task from its Officer assignee to a reviewer and move it to Review.

        Reviewer: the creator when a TeamLeader or Deputy, else any active
        TeamLeader, else any active Deputy.

        Raises:
            InvalidStateException: Status is not Processing.
            AuthorizationException: Actor is not the Officer assignee.
            ReviewerNotFoundException: No eligible reviewer.
        """
        task = await self._load(task_id)
        if task.status != TaskStatus.PROCESSING:
            raise InvalidStateException(
                f"Only Processing tasks can be submitted for review (status is {task.status.value})",
                current_status=task.status.value,
                operation=TaskOperation.SUBMIT_FOR_REVIEW.value,
            )
        self._authorize(TaskOperation.SUBMIT_FOR_REVIEW, actor, task)
        reviewer = await self._resolve_reviewer(task)
        task.reassign(reviewer.id)
        old = task.change_status(TaskStatus.REVIEW, self._clock())
        logger.info("Task %s submitted for review to user %s", task_id, reviewer.id)
        return await self._record(task, old.value, actor, f"Submitted for review to {reviewer.name}")

    async def update_status(
        self,
        task_id: int,
        new_status: TaskStatus,
        notes: str | None,
        actor: ActorContext,
    ) -> TaskDetail:
        """Set status directly. Always records history, even when old == new."""
        task = await self._load(task_id)
        self._authorize(TaskOperation.UPDATE_STATUS, actor, task)
        old = task.change_status(new_status, self._clock())
        logger.info("Task %s status %s -> %s", task_id, old.value, new_status.value)
        return await self._record(task, old.value, actor, (notes or "").strip() or "Updated task status")

    async def update_processing_content(
        self,
        task_id: int,
        content: str,
        notes: str,
        actor: ActorContext,
    ) -> TaskDetail:
        """Replace processing content/notes. Assignee only; status unchanged."""
        task = await self._load(task_id)
        self._authorize(TaskOperation.UPDATE_PROCESSING_CONTENT, actor, task)
        task.processing_content = content
        task.processing_notes = notes
        return await self._record(task, task.status.value, actor, "Updated processing content")

    async def update_details(
        self,
        task_id: int,
        changes: TaskDetailsUpdate,
        actor: ActorContext,
    ) -> TaskDetail:
        """Edit descriptive fields (Secretary any task; TeamLeader as creator or assignee)."""
        task = await self._load(task_id)
        self._authorize(TaskOperation.UPDATE_DETAILS, actor, task)
        if changes.description is not None:
            task.description = changes.description.strip()
        if changes.deadline is not None:
            task.deadline = _parse_deadline_field(changes.deadline)
        if changes.deadline_type is not None:
            task.deadline_type = changes.deadline_type
        if changes.assigned_to_id is not None:
            task.reassign((await self._require_user(changes.assigned_to_id)).id)
        if changes.linked_document_id is not None:
            await self._require_document(changes.linked_document_id)
            task.linked_document_id = changes.linked_document_id
        if changes.task_type is not None:
            task.task_type = changes.task_type
        if changes.processing_content is not None:
            task.processing_content = changes.processing_content
        if changes.processing_notes is not None:
            task.processing_notes = changes.processing_notes
        task.validate()
        return await self._record(task, task.status.value, actor, "Updated task details")

    async def delete(self, task_id: int, actor: ActorContext) -> None:
        """Soft-delete a task and its comments. Completed tasks are kept.

        Raises:
            AuthorizationException: Not Secretary, or TeamLeader who did not create it.
            InvalidStateException: Task is Completed.
        """
        task = await self._load(task_id)
        self._authorize(TaskOperation.DELETE, actor, task)
        if task.status == TaskStatus.COMPLETED:
            raise InvalidStateException(
                "Completed tasks cannot be deleted",
                current_status=task.status.value,
                operation=TaskOperation.DELETE.value,
            )
        now = self._clock()
        removed = await self._comments.soft_delete_for_task(task_id, now)
        await self._tasks.soft_delete_task(task_id, now)
        logger.info("Task %s deleted by user %s (%d comments)", task_id, actor.user_id, removed)
