"""Route classifier: (method, path) -> audit (action, entity type, entity id).

Pure and table-driven, independent of handler internals. The audit capture
middleware depends on the IRouteClassifier protocol only, so a classifier
built from route metadata can replace PathRouteClassifier without touching
the middleware.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from officeflow.domain.enums import AuditAction, AuditEntityType


@dataclass(frozen=True)
class RouteClassification:
    """Audit identity of a request. entity_id is 0 when not known from the path."""

    action: AuditAction
    entity_type: AuditEntityType
    entity_id: int = 0


class IRouteClassifier(Protocol):
    """Maps an HTTP method and path to an audit classification (None = not audited)."""

    def classify(self, method: str, path: str) -> RouteClassification | None:
        """Return the classification, or None for reads and unmatched paths."""


@dataclass(frozen=True)
class _Rule:
    """One row of the classification table.

    fragments: any of these substrings selects the rule.
    segment: path segment after which the entity id is read (None = always 0).
    actions: method -> action; POST/PUT may be refined by suffixes.
    suffixes: (method, path fragment, action) checked in order before actions.
    """

    fragments: tuple[str, ...]
    entity_type: AuditEntityType
    segment: str | None
    actions: dict[str, AuditAction]
    suffixes: tuple[tuple[str, str, AuditAction], ...] = ()
    create_has_id: bool = False


_CONFIG_SEGMENTS = ("document-types", "issuing-units", "receiving-units", "notifications")

DEFAULT_RULES: tuple[_Rule, ...] = (
    _Rule(
        fragments=("/incoming-documents",),
        entity_type=AuditEntityType.INCOMING_DOCUMENT,
        segment="incoming-documents",
        actions={
            "POST": AuditAction.DOCUMENT_CREATE,
            "PUT": AuditAction.DOCUMENT_UPDATE,
            "DELETE": AuditAction.DOCUMENT_DELETE,
        },
        suffixes=(("PUT", "/assign", AuditAction.DOCUMENT_ASSIGN),),
    ),
    _Rule(
        fragments=("/outgoing-documents",),
        entity_type=AuditEntityType.OUTGOING_DOCUMENT,
        segment="outgoing-documents",
        actions={
            "POST": AuditAction.DOCUMENT_CREATE,
            "PUT": AuditAction.DOCUMENT_UPDATE,
            "DELETE": AuditAction.DOCUMENT_DELETE,
        },
    ),
    _Rule(
        fragments=("/tasks",),
        entity_type=AuditEntityType.TASK,
        segment="tasks",
        actions={
            "POST": AuditAction.TASK_CREATE,
            "PUT": AuditAction.TASK_UPDATE,
            "DELETE": AuditAction.TASK_DELETE,
        },
        suffixes=(
            ("POST", "/forward", AuditAction.TASK_FORWARD),
            ("POST", "/delegate", AuditAction.TASK_DELEGATE),
            ("PUT", "/assign", AuditAction.TASK_ASSIGN),
        ),
    ),
    _Rule(
        fragments=("/users",),
        entity_type=AuditEntityType.USER,
        segment="users",
        actions={
            "POST": AuditAction.USER_CREATE,
            "PUT": AuditAction.USER_UPDATE,
            "DELETE": AuditAction.USER_DELETE,
        },
    ),
    _Rule(
        fragments=("/files",),
        entity_type=AuditEntityType.FILE,
        segment="files",
        actions={
            "POST": AuditAction.FILE_UPLOAD,
            "DELETE": AuditAction.FILE_DELETE,
        },
    ),
    _Rule(
        fragments=tuple(f"/{s}" for s in _CONFIG_SEGMENTS),
        entity_type=AuditEntityType.SYSTEM,
        segment=None,
        actions={
            "POST": AuditAction.SYSTEM_CONFIG,
            "PUT": AuditAction.SYSTEM_CONFIG,
            "PATCH": AuditAction.SYSTEM_CONFIG,
            "DELETE": AuditAction.SYSTEM_CONFIG,
        },
        create_has_id=True,
    ),
)

# Actions whose id is never taken from the path (the entity does not exist yet).
CREATE_ACTIONS = frozenset(
    {
        AuditAction.DOCUMENT_CREATE,
        AuditAction.TASK_CREATE,
        AuditAction.USER_CREATE,
        AuditAction.FILE_UPLOAD,
    }
)


def parse_entity_id(raw: str) -> int:
    """Return raw as a non-negative integer, or 0 if it is not all ASCII digits."""
    return int(raw) if raw.isascii() and raw.isdigit() else 0


def extract_id_after(path: str, segments: tuple[str, ...]) -> int:
    """Return the id in the path segment right after the first of segments, else 0."""
    parts = path.split("/")
    for i, part in enumerate(parts[:-1]):
        if part in segments:
            entity_id = parse_entity_id(parts[i + 1])
            if entity_id > 0:
                return entity_id
    return 0


class PathRouteClassifier:
    """Classifies by substring rules over the URL path, first match wins."""

    def __init__(self, rules: tuple[_Rule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    def classify(self, method: str, path: str) -> RouteClassification | None:
        method = method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return None
        for rule in self._rules:
            if not any(f in path for f in rule.fragments):
                continue
            action = next(
                (a for m, frag, a in rule.suffixes if m == method and frag in path),
                rule.actions.get(method),
            )
            if action is None:
                # Matched resource but not a mutating verb it knows; later rules may still apply.
                continue
            entity_id = 0
            if action not in CREATE_ACTIONS or rule.create_has_id:
                segments = (
                    (rule.segment,)
                    if rule.segment
                    else tuple(s for s in _CONFIG_SEGMENTS if f"/{s}" in path)
                )
                entity_id = extract_id_after(path, segments)
            return RouteClassification(action, rule.entity_type, entity_id)
        return None


_DESCRIPTIONS: dict[AuditAction, str] = {
    AuditAction.DOCUMENT_ASSIGN: "Assigned document processor",
    AuditAction.TASK_CREATE: "Created new task",
    AuditAction.TASK_DELETE: "Deleted task",
    AuditAction.TASK_ASSIGN: "Assigned task",
    AuditAction.TASK_FORWARD: "Forwarded task",
    AuditAction.TASK_DELEGATE: "Delegated task",
    AuditAction.USER_CREATE: "Created new user",
    AuditAction.USER_UPDATE: "Updated user information",
    AuditAction.USER_DELETE: "Deleted user",
    AuditAction.FILE_UPLOAD: "Uploaded file",
    AuditAction.FILE_DELETE: "Deleted file",
    AuditAction.SYSTEM_CONFIG: "Updated system configuration",
}

_DOCUMENT_VERBS: dict[AuditAction, str] = {
    AuditAction.DOCUMENT_CREATE: "Created new",
    AuditAction.DOCUMENT_UPDATE: "Updated",
    AuditAction.DOCUMENT_DELETE: "Deleted",
}


def describe(action: AuditAction, method: str, path: str) -> str:
    """Return the human-readable sentence for an audited request."""
    if action in _DOCUMENT_VERBS:
        kind = "incoming" if "/incoming-documents" in path else "outgoing"
        return f"{_DOCUMENT_VERBS[action]} {kind} document"
    if action == AuditAction.TASK_UPDATE:
        return "Updated task status" if "/status" in path else "Updated task"
    return _DESCRIPTIONS.get(action, f"{method.upper()} {path}")
