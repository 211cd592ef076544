"""Task domain entity.

Represents the task aggregate independent of persistence. Mutated only
through the methods below so the status/completion and status/assignee
invariants hold after every operation.
"""

from dataclasses import dataclass
from datetime import datetime

from officeflow.domain.enums import DeadlineType, TaskStatus, TaskType
from officeflow.domain.exceptions import InvalidStateException, ValidationException


@dataclass
class TaskEntity:
    """Mutable task aggregate.

    Invariants:
        completion_date is set iff status is Completed.
        assigned_to_id may be None only while status is NotStarted.
    """

    id: int | None
    description: str
    created_by_id: int
    status: TaskStatus = TaskStatus.NOT_STARTED
    deadline: datetime | None = None
    deadline_type: DeadlineType = DeadlineType.SPECIFIC
    task_type: TaskType = TaskType.INDEPENDENT
    assigned_to_id: int | None = None
    linked_document_id: int | None = None
    processing_content: str = ""
    processing_notes: str = ""
    completion_date: datetime | None = None
    report_file: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def validate(self) -> None:
        """Validate business rules. Raises ValidationException if invalid."""
        if not self.description or not self.description.strip():
            raise ValidationException("Task description is required", field="description")
        if self.task_type == TaskType.DOCUMENT_LINKED and self.linked_document_id is None:
            raise ValidationException(
                "A document-linked task requires linked_document_id",
                field="linked_document_id",
            )

    def is_creator(self, user_id: int) -> bool:
        return self.created_by_id == user_id

    def is_assignee(self, user_id: int) -> bool:
        return self.assigned_to_id is not None and self.assigned_to_id == user_id

    def change_status(self, new_status: TaskStatus, now: datetime) -> TaskStatus:
        """Set status, keeping completion_date in step; return the previous status.

        Entering Completed stamps completion_date once; leaving Completed
        clears it.

        Raises:
            InvalidStateException: If new_status leaves NotStarted while no
                one is assigned.
        """
        if new_status != TaskStatus.NOT_STARTED and self.assigned_to_id is None:
            raise InvalidStateException(
                f"Task must be assigned before moving to {new_status.value}",
                current_status=self.status.value,
                operation="update_status",
            )
        old_status = self.status
        self.status = new_status
        if new_status == TaskStatus.COMPLETED:
            if self.completion_date is None:
                self.completion_date = now
        else:
            self.completion_date = None
        return old_status

    def reassign(self, user_id: int) -> int | None:
        """Point the task at a new assignee; return the previous assignee id."""
        previous = self.assigned_to_id
        self.assigned_to_id = user_id
        return previous
