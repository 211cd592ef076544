"""Task lifecycle engine and task read side."""

from officeflow.application.use_cases.tasks.lifecycle import TaskLifecycleService
from officeflow.application.use_cases.tasks.queries import TaskQueryService

__all__ = ["TaskLifecycleService", "TaskQueryService"]
