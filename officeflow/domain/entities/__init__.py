"""Domain entities."""

from officeflow.domain.entities.task import TaskEntity

__all__ = ["TaskEntity"]
