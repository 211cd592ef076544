"""Read side for tasks: single task, role-scoped listing, history, comments, workflow view."""

from __future__ import annotations

from typing import TYPE_CHECKING

from officeflow.application.dtos.task import (
    CommentResult,
    StatusHistoryResult,
    TaskDetail,
    TaskListFilter,
    TaskPage,
    TaskVisibility,
    TaskWorkflow,
    WorkflowStage,
)
from officeflow.domain.entities.task import TaskEntity
from officeflow.domain.enums import Role, TaskStatus
from officeflow.domain.exceptions import ResourceNotFoundException

if TYPE_CHECKING:
    from officeflow.application.interfaces.repositories import (
        ICommentRepository,
        IStatusHistoryRepository,
        ITaskRepository,
    )
    from officeflow.shared.context import ActorContext

WORKFLOW_STAGES: tuple[TaskStatus, ...] = (
    TaskStatus.NOT_STARTED,
    TaskStatus.PROCESSING,
    TaskStatus.REVIEW,
    TaskStatus.COMPLETED,
)

_VISIBILITY_BY_ROLE: dict[Role, TaskVisibility] = {
    Role.ADMIN: TaskVisibility.ALL,
    Role.SECRETARY: TaskVisibility.ALL,
    Role.TEAM_LEADER: TaskVisibility.ASSIGNED_OR_CREATED,
    Role.DEPUTY: TaskVisibility.ASSIGNED_OR_CREATED,
    Role.OFFICER: TaskVisibility.ASSIGNED,
}


def visibility_for(role: Role) -> TaskVisibility:
    return _VISIBILITY_BY_ROLE.get(role, TaskVisibility.ASSIGNED)


def build_workflow(task: TaskEntity, history: list[StatusHistoryResult]) -> TaskWorkflow:
    """Derive the four-stage workflow view from the status history.

    A stage is completed when the task has moved past it (the first stage
    always counts, as does every stage once the task is Completed). Its
    timestamp and actor come from the first history row entering it.
    """
    assert task.id is not None
    current_index = WORKFLOW_STAGES.index(task.status)
    first_entry: dict[str, StatusHistoryResult] = {}
    for row in history:
        if row.new_status != row.old_status:
            first_entry.setdefault(row.new_status, row)
    stages: list[WorkflowStage] = []
    completed = 0
    for index, status in enumerate(WORKFLOW_STAGES):
        done = (
            index == 0
            or index < current_index
            or task.status == TaskStatus.COMPLETED
        )
        completed += int(done)
        entry = first_entry.get(status.value)
        stages.append(
            WorkflowStage(
                status=status,
                reached=done or index == current_index,
                reached_at=entry.created_at if entry else None,
                changed_by_id=entry.changed_by_id if entry else None,
            )
        )
    return TaskWorkflow(
        task_id=task.id,
        current_status=task.status,
        stages=stages,
        progress_percent=completed * 100 // len(WORKFLOW_STAGES),
    )


class TaskQueryService:
    """Read-only task views. No authorization beyond role-scoped listing."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        history_repo: IStatusHistoryRepository,
        comment_repo: ICommentRepository,
    ) -> None:
        self._tasks = task_repo
        self._history = history_repo
        self._comments = comment_repo

    async def _require(self, task_id: int) -> TaskEntity:
        task = await self._tasks.get_task(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def get_task(self, task_id: int) -> TaskDetail:
        task = await self._require(task_id)
        return TaskDetail(task=task, history=await self._history.list_for_task(task_id))

    async def list_tasks(
        self,
        actor: ActorContext,
        *,
        status: TaskStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> TaskPage:
        """Return tasks visible to the actor's role, newest first.

        Secretary and Admin see all tasks; TeamLeader and Deputy see tasks
        assigned to or created by them; Officer sees tasks assigned to them.
        """
        filters = TaskListFilter(
            viewer_id=actor.user_id,
            visibility=visibility_for(actor.role),
            status=status,
        )
        return await self._tasks.list_tasks(filters, skip=(page - 1) * limit, limit=limit)

    async def get_history(self, task_id: int) -> list[StatusHistoryResult]:
        await self._require(task_id)
        return await self._history.list_for_task(task_id)

    async def list_comments(self, task_id: int) -> list[CommentResult]:
        await self._require(task_id)
        return await self._comments.list_for_task(task_id)

    async def get_workflow(self, task_id: int) -> TaskWorkflow:
        task = await self._require(task_id)
        return build_workflow(task, await self._history.list_for_task(task_id))
