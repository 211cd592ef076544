"""Task API schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from officeflow.application.dtos.task import TaskDetail
from officeflow.domain.enums import DeadlineType, TaskStatus, TaskType, Urgency
from officeflow.domain.remaining_time import compute_remaining_time
from officeflow.schemas.common import PaginationMeta


class TaskCreateRequest(BaseModel):
    """Request body for creating a task."""

    description: str = Field(..., min_length=1)
    assigned_to_id: int = Field(..., gt=0)
    deadline: str | None = Field(
        default=None, description="ISO-8601, 'YYYY-MM-DD HH:MM:SS' or 'YYYY-MM-DD' (UTC)"
    )
    deadline_type: DeadlineType | None = None
    linked_document_id: int | None = Field(default=None, gt=0)
    task_type: TaskType | None = None


class TaskAssignRequest(BaseModel):
    assigned_to_id: int = Field(..., gt=0)


class TaskForwardRequest(BaseModel):
    assigned_to_id: int = Field(..., gt=0)
    comment: str | None = None


class TaskDelegateRequest(BaseModel):
    assigned_to_id: int = Field(..., gt=0)
    notes: str | None = None


class TaskStatusUpdateRequest(BaseModel):
    """New status by name; "Received" is accepted as NotStarted."""

    status: str = Field(..., min_length=1)
    notes: str | None = None


class TaskProcessingUpdateRequest(BaseModel):
    processing_content: str = ""
    processing_notes: str = ""


class TaskUpdateRequest(BaseModel):
    """Partial update of descriptive fields. Omitted fields are unchanged."""

    description: str | None = Field(default=None, min_length=1)
    deadline: str | None = None
    deadline_type: DeadlineType | None = None
    assigned_to_id: int | None = Field(default=None, gt=0)
    linked_document_id: int | None = Field(default=None, gt=0)
    task_type: TaskType | None = None
    processing_content: str | None = None
    processing_notes: str | None = None


class RemainingTimeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    text: str
    is_overdue: bool
    urgency: Urgency
    days: int
    hours: int
    minutes: int


class StatusHistoryResponse(BaseModel):
    """One status history row (append-only)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    old_status: str
    new_status: str
    changed_by_id: int
    notes: str
    created_at: datetime


class TaskResponse(BaseModel):
    """Task with derived remaining time and its status history (oldest first)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    status: TaskStatus
    deadline: datetime | None
    deadline_type: DeadlineType
    task_type: TaskType
    created_by_id: int
    assigned_to_id: int | None
    linked_document_id: int | None
    processing_content: str
    processing_notes: str
    completion_date: datetime | None
    report_file: str | None
    created_at: datetime | None
    updated_at: datetime | None
    remaining_time: RemainingTimeResponse
    status_history: list[StatusHistoryResponse] = Field(default_factory=list)

    @classmethod
    def from_detail(cls, detail: TaskDetail, now: datetime) -> TaskResponse:
        task = detail.task
        return cls(
            id=task.id,
            description=task.description,
            status=task.status,
            deadline=task.deadline,
            deadline_type=task.deadline_type,
            task_type=task.task_type,
            created_by_id=task.created_by_id,
            assigned_to_id=task.assigned_to_id,
            linked_document_id=task.linked_document_id,
            processing_content=task.processing_content,
            processing_notes=task.processing_notes,
            completion_date=task.completion_date,
            report_file=task.report_file,
            created_at=task.created_at,
            updated_at=task.updated_at,
            remaining_time=RemainingTimeResponse.model_validate(
                compute_remaining_time(task.deadline, now)
            ),
            status_history=[StatusHistoryResponse.model_validate(h) for h in detail.history],
        )


class TaskListResponse(BaseModel):
    items: list[TaskResponse]
    pagination: PaginationMeta


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime


class WorkflowStageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: TaskStatus
    reached: bool
    reached_at: datetime | None = None
    changed_by_id: int | None = None


class TaskWorkflowResponse(BaseModel):
    """Four-stage progress view of a task."""

    model_config = ConfigDict(from_attributes=True)

    task_id: int
    current_status: TaskStatus
    stages: list[WorkflowStageResponse]
    progress_percent: int
