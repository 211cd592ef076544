"""Task API: thin routes delegating to TaskLifecycleService and TaskQueryService.

Every mutation returns the task with its status history preloaded.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from officeflow.api.v1.dependencies import (
    get_current_actor,
    get_task_lifecycle_service,
    get_task_query_service,
)
from officeflow.application.dtos.task import TaskCreate, TaskDetail, TaskDetailsUpdate
from officeflow.application.services.audit_service import MAX_PAGE
from officeflow.application.use_cases.tasks import TaskLifecycleService, TaskQueryService
from officeflow.domain.enums import TaskStatus
from officeflow.schemas.common import PaginationMeta
from officeflow.schemas.task import (
    CommentResponse,
    StatusHistoryResponse,
    TaskAssignRequest,
    TaskCreateRequest,
    TaskDelegateRequest,
    TaskForwardRequest,
    TaskListResponse,
    TaskProcessingUpdateRequest,
    TaskResponse,
    TaskStatusUpdateRequest,
    TaskUpdateRequest,
    TaskWorkflowResponse,
)
from officeflow.shared.context import ActorContext
from officeflow.shared.utils.datetime import utc_now

router = APIRouter()

Actor = Annotated[ActorContext, Depends(get_current_actor)]
Lifecycle = Annotated[TaskLifecycleService, Depends(get_task_lifecycle_service)]
Queries = Annotated[TaskQueryService, Depends(get_task_query_service)]


def _respond(detail: TaskDetail) -> TaskResponse:
    return TaskResponse.from_detail(detail, utc_now())


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(body: TaskCreateRequest, actor: Actor, lifecycle: Lifecycle):
    """Create a task (Secretary, TeamLeader). Starts in NotStarted."""
    detail = await lifecycle.create(
        TaskCreate(
            description=body.description,
            assigned_to_id=body.assigned_to_id,
            deadline=body.deadline,
            deadline_type=body.deadline_type,
            linked_document_id=body.linked_document_id,
            task_type=body.task_type,
        ),
        actor,
    )
    return _respond(detail)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    actor: Actor,
    queries: Queries,
    status: str | None = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
):
    """List tasks visible to the caller's role, newest first."""
    result = await queries.list_tasks(
        actor,
        status=TaskStatus.parse(status, field="status") if status else None,
        page=page,
        limit=limit,
    )
    now = utc_now()
    return TaskListResponse(
        items=[TaskResponse.from_detail(TaskDetail(task=t), now) for t in result.items],
        pagination=PaginationMeta.build(page, limit, result.total),
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, actor: Actor, queries: Queries):
    return _respond(await queries.get_task(task_id))


@router.get("/{task_id}/history", response_model=list[StatusHistoryResponse])
async def get_task_history(task_id: int, actor: Actor, queries: Queries):
    """Status history, oldest first."""
    rows = await queries.get_history(task_id)
    return [StatusHistoryResponse.model_validate(r) for r in rows]


@router.get("/{task_id}/comments", response_model=list[CommentResponse])
async def list_task_comments(task_id: int, actor: Actor, queries: Queries):
    rows = await queries.list_comments(task_id)
    return [CommentResponse.model_validate(r) for r in rows]


@router.get("/{task_id}/workflow", response_model=TaskWorkflowResponse)
async def get_task_workflow(task_id: int, actor: Actor, queries: Queries):
    """Four-stage progress derived from the status history."""
    return TaskWorkflowResponse.model_validate(await queries.get_workflow(task_id))


@router.put("/{task_id}/assign", response_model=TaskResponse)
async def assign_task(
    task_id: int, body: TaskAssignRequest, actor: Actor, lifecycle: Lifecycle
):
    """Assign (TeamLeader, Deputy). NotStarted moves to Processing."""
    return _respond(await lifecycle.assign(task_id, body.assigned_to_id, actor))


@router.post("/{task_id}/forward", response_model=TaskResponse)
async def forward_task(
    task_id: int, body: TaskForwardRequest, actor: Actor, lifecycle: Lifecycle
):
    return _respond(
        await lifecycle.forward(task_id, body.assigned_to_id, body.comment, actor)
    )


@router.post("/{task_id}/delegate", response_model=TaskResponse)
async def delegate_task(
    task_id: int, body: TaskDelegateRequest, actor: Actor, lifecycle: Lifecycle
):
    """Delegate down the hierarchy (TeamLeader to Deputy/Officer, Deputy to Officer)."""
    return _respond(
        await lifecycle.delegate(task_id, body.assigned_to_id, body.notes, actor)
    )


@router.put("/{task_id}/submit-review", response_model=TaskResponse)
async def submit_task_for_review(task_id: int, actor: Actor, lifecycle: Lifecycle):
    """Officer hands a Processing task to a reviewer."""
    return _respond(await lifecycle.submit_for_review(task_id, actor))


@router.put("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: int, body: TaskStatusUpdateRequest, actor: Actor, lifecycle: Lifecycle
):
    new_status = TaskStatus.parse(body.status, field="status")
    return _respond(await lifecycle.update_status(task_id, new_status, body.notes, actor))


@router.put("/{task_id}/processing", response_model=TaskResponse)
async def update_task_processing(
    task_id: int, body: TaskProcessingUpdateRequest, actor: Actor, lifecycle: Lifecycle
):
    return _respond(
        await lifecycle.update_processing_content(
            task_id, body.processing_content, body.processing_notes, actor
        )
    )


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int, body: TaskUpdateRequest, actor: Actor, lifecycle: Lifecycle
):
    """Partial update of descriptive fields."""
    changes = TaskDetailsUpdate(**body.model_dump(exclude_unset=True))
    return _respond(await lifecycle.update_details(task_id, changes, actor))


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: int, actor: Actor, lifecycle: Lifecycle) -> None:
    """Soft-delete a task and its comments. Completed tasks cannot be deleted."""
    await lifecycle.delete(task_id, actor)
