"""DTOs for tasks, status history, comments and workflow views (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from officeflow.domain.entities.task import TaskEntity
from officeflow.domain.enums import DeadlineType, TaskStatus, TaskType


@dataclass(frozen=True)
class TaskCreate:
    """Input for TaskLifecycleService.create. Deadline is raw client text, parsed by the service."""

    description: str
    assigned_to_id: int
    deadline: str | None = None
    deadline_type: DeadlineType | None = None
    linked_document_id: int | None = None
    task_type: TaskType | None = None


@dataclass(frozen=True)
class TaskDetailsUpdate:
    """Partial update for TaskLifecycleService.update_details. None means unchanged."""

    description: str | None = None
    deadline: str | None = None
    deadline_type: DeadlineType | None = None
    assigned_to_id: int | None = None
    linked_document_id: int | None = None
    task_type: TaskType | None = None
    processing_content: str | None = None
    processing_notes: str | None = None


@dataclass(frozen=True)
class StatusHistoryResult:
    """One append-only status history row."""

    id: int
    task_id: int
    old_status: str
    new_status: str
    changed_by_id: int
    notes: str
    created_at: datetime


@dataclass(frozen=True)
class CommentResult:
    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime


@dataclass(frozen=True)
class TaskDetail:
    """Task with its status history preloaded (ascending)."""

    task: TaskEntity
    history: list[StatusHistoryResult] = field(default_factory=list)


class TaskVisibility(str, Enum):
    """Which tasks a viewer may list."""

    ALL = "all"
    ASSIGNED = "assigned"
    ASSIGNED_OR_CREATED = "assigned_or_created"


@dataclass(frozen=True)
class TaskListFilter:
    viewer_id: int
    visibility: TaskVisibility
    status: TaskStatus | None = None


@dataclass(frozen=True)
class TaskPage:
    items: list[TaskEntity]
    total: int


@dataclass(frozen=True)
class WorkflowStage:
    """One lifecycle stage and when (if ever) the task first entered it."""

    status: TaskStatus
    reached: bool
    reached_at: datetime | None = None
    changed_by_id: int | None = None


@dataclass(frozen=True)
class TaskWorkflow:
    task_id: int
    current_status: TaskStatus
    stages: list[WorkflowStage]
    progress_percent: int
