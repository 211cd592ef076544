"""Task authorization policy table.

One mapping from (operation, actor role) to the relationships with the
task that grant access. Evaluated once per lifecycle operation.
"""

from enum import Enum

from officeflow.domain.enums import Role
from officeflow.domain.exceptions import AuthorizationException


class TaskOperation(str, Enum):
    CREATE = "create"
    ASSIGN = "assign"
    FORWARD = "forward"
    DELEGATE = "delegate"
    SUBMIT_FOR_REVIEW = "submit_for_review"
    UPDATE_STATUS = "update_status"
    UPDATE_PROCESSING_CONTENT = "update_processing_content"
    UPDATE_DETAILS = "update_details"
    DELETE = "delete"


class Relationship(str, Enum):
    """How the actor relates to the task. ANY holds for every actor."""

    ANY = "any"
    CREATOR = "creator"
    ASSIGNEE = "assignee"


_ANY = frozenset({Relationship.ANY})
_ASSIGNEE = frozenset({Relationship.ASSIGNEE})
_CREATOR = frozenset({Relationship.CREATOR})
_CREATOR_OR_ASSIGNEE = frozenset({Relationship.CREATOR, Relationship.ASSIGNEE})

TASK_POLICY: dict[tuple[TaskOperation, Role], frozenset[Relationship]] = {
    (TaskOperation.CREATE, Role.SECRETARY): _ANY,
    (TaskOperation.CREATE, Role.TEAM_LEADER): _ANY,
    (TaskOperation.ASSIGN, Role.TEAM_LEADER): _ANY,
    (TaskOperation.ASSIGN, Role.DEPUTY): _ANY,
    (TaskOperation.FORWARD, Role.TEAM_LEADER): _ANY,
    (TaskOperation.FORWARD, Role.DEPUTY): _ANY,
    (TaskOperation.DELEGATE, Role.TEAM_LEADER): _CREATOR_OR_ASSIGNEE,
    (TaskOperation.DELEGATE, Role.DEPUTY): _CREATOR_OR_ASSIGNEE,
    (TaskOperation.SUBMIT_FOR_REVIEW, Role.OFFICER): _ASSIGNEE,
    (TaskOperation.UPDATE_DETAILS, Role.SECRETARY): _ANY,
    (TaskOperation.UPDATE_DETAILS, Role.TEAM_LEADER): _CREATOR_OR_ASSIGNEE,
    (TaskOperation.DELETE, Role.SECRETARY): _ANY,
    (TaskOperation.DELETE, Role.TEAM_LEADER): _CREATOR,
}
for _role in Role:
    TASK_POLICY[(TaskOperation.UPDATE_STATUS, _role)] = _ANY
    TASK_POLICY[(TaskOperation.UPDATE_PROCESSING_CONTENT, _role)] = _ASSIGNEE

# Who a delegator may hand a task to, by the delegator's role.
DELEGATION_TARGETS: dict[Role, frozenset[Role]] = {
    Role.TEAM_LEADER: frozenset({Role.DEPUTY, Role.OFFICER}),
    Role.DEPUTY: frozenset({Role.OFFICER}),
}

# Reviewer roles that a task creator may hold to be picked as reviewer directly.
REVIEWER_ROLES: frozenset[Role] = frozenset({Role.TEAM_LEADER, Role.DEPUTY})


def relationships_of(
    actor_id: int,
    created_by_id: int | None = None,
    assigned_to_id: int | None = None,
) -> frozenset[Relationship]:
    """Return every relationship the actor has with a task."""
    rels = {Relationship.ANY}
    if created_by_id is not None and created_by_id == actor_id:
        rels.add(Relationship.CREATOR)
    if assigned_to_id is not None and assigned_to_id == actor_id:
        rels.add(Relationship.ASSIGNEE)
    return frozenset(rels)


def is_allowed(
    operation: TaskOperation,
    role: Role,
    relationships: frozenset[Relationship],
) -> bool:
    """Return True if some granting relationship for (operation, role) is held."""
    granting = TASK_POLICY.get((operation, role))
    if not granting:
        return False
    return bool(granting & relationships)


def authorize(
    operation: TaskOperation,
    role: Role,
    relationships: frozenset[Relationship],
) -> None:
    """Raise AuthorizationException unless the policy table allows the operation."""
    if not is_allowed(operation, role, relationships):
        raise AuthorizationException(resource="task", action=operation.value)


def can_delegate_to(actor_role: Role, target_role: Role) -> bool:
    return target_role in DELEGATION_TARGETS.get(actor_role, frozenset())


def authorize_delegation_target(actor_role: Role, target_role: Role) -> None:
    """Raise AuthorizationException unless actor_role may delegate to target_role."""
    if not can_delegate_to(actor_role, target_role):
        raise AuthorizationException(
            resource="task",
            action=TaskOperation.DELEGATE.value,
            message=(
                f"{actor_role.value} cannot delegate a task to {target_role.value}"
            ),
        )
