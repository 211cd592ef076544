"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers, never on repositories or sessions
directly.
"""

from officeflow.api.v1.dependencies.audit import (
    get_audit_service,
    get_audit_service_for_write,
)
from officeflow.api.v1.dependencies.auth import (
    get_current_actor,
    get_current_actor_optional,
    require_roles,
)
from officeflow.api.v1.dependencies.db import get_db, get_db_transactional
from officeflow.api.v1.dependencies.tasks import (
    get_task_lifecycle_service,
    get_task_query_service,
)

__all__ = [
    "get_audit_service",
    "get_audit_service_for_write",
    "get_current_actor",
    "get_current_actor_optional",
    "get_db",
    "get_db_transactional",
    "get_task_lifecycle_service",
    "get_task_query_service",
    "require_roles",
]
