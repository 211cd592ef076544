"""Audit capture middleware.

Writes one audit row per classified mutating request: a failed-activity row
when the response status is >= 400 (or the app raised), otherwise a timed
success row carrying the request JSON as new_values. Runs as raw ASGI so
the request body can be buffered and replayed and the response body teed
without breaking streaming.

The audit write happens after the downstream app returns, in its own
session, so it never joins or rolls back the business transaction. It is
shielded from cancellation; its failures are logged and never reach the
client.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Sequence
from typing import Any, Callable

import officeflow.infrastructure.persistence.database as database
from officeflow.application.services.audit_service import AuditService
from officeflow.application.services.route_classifier import (
    CREATE_ACTIONS,
    IRouteClassifier,
    PathRouteClassifier,
    RouteClassification,
    describe,
)
from officeflow.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogRepository,
)
from officeflow.middleware.response_capture import ResponseCapture
from officeflow.shared.context import ActorContext
from officeflow.shared.request_audit import get_header
from officeflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_BUFFERED_METHODS = ("POST", "PUT")
DEFAULT_ERROR_MESSAGE = "Request failed"


def is_skipped(path: str, skip_paths: Sequence[str]) -> bool:
    return any(fragment and fragment in path for fragment in skip_paths)


async def _read_body(receive: Callable) -> bytes:
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def _replaying(body: bytes, receive: Callable) -> Callable:
    """Return a receive callable that yields the buffered body once, then defers."""
    replayed = False

    async def replay() -> dict:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def _parse_json(raw: bytes) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _error_message(payload: Any) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error:
            return error
    return DEFAULT_ERROR_MESSAGE


def _created_id(classification: RouteClassification, payload: Any) -> int:
    """Id of the entity a successful create returned, else the classified id."""
    if classification.entity_id or classification.action not in CREATE_ACTIONS:
        return classification.entity_id
    if isinstance(payload, dict):
        created = payload.get("id")
        if isinstance(created, int) and not isinstance(created, bool) and created > 0:
            return created
    return 0


async def _write_audit_row(
    actor: ActorContext,
    classification: RouteClassification,
    entity_id: int,
    description: str,
    metadata: dict[str, Any],
    status_code: int,
    error_message: str,
    new_values: Any,
    duration_ms: int,
) -> None:
    database._ensure_engine()
    assert database.AsyncSessionLocal is not None
    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            service = AuditService(AuditLogRepository(session))
            if status_code >= 400:
                await service.log_failed_activity(
                    classification.action,
                    classification.entity_type,
                    entity_id,
                    description,
                    error_message,
                    actor=actor,
                    metadata=metadata,
                    duration_ms=duration_ms,
                )
            else:
                await service.log_with_duration(
                    classification.action,
                    classification.entity_type,
                    entity_id,
                    description,
                    duration_ms,
                    actor=actor,
                    new_values=new_values,
                    metadata=metadata,
                )


def AuditCaptureMiddleware(
    app: Callable,
    classifier: IRouteClassifier | None = None,
    skip_paths: Sequence[str] = (),
    max_body_bytes: int = 65536,
) -> Callable:
    """Record classified mutating requests in the audit log. Raw ASGI."""
    route_classifier = classifier or PathRouteClassifier()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or is_skipped(scope["path"], skip_paths):
            await app(scope, receive, send)
            return
        method = scope["method"].upper()
        path = scope["path"]
        classification = route_classifier.classify(method, path)
        if classification is None:
            await app(scope, receive, send)
            return

        started = time.perf_counter()
        request_body = b""
        if method in _BUFFERED_METHODS:
            request_body = await _read_body(receive)
            receive = _replaying(request_body, receive)
        capture = ResponseCapture(send, max_body_bytes)

        try:
            await app(scope, receive, capture)
        except Exception:
            # Record the crash, then let the server error handler answer the client.
            await _record(
                scope, method, path, classification, capture, request_body, started,
                crashed=True,
            )
            raise
        await _record(scope, method, path, classification, capture, request_body, started)

    return asgi_app


async def _record(
    scope: dict,
    method: str,
    path: str,
    classification: RouteClassification,
    capture: ResponseCapture,
    request_body: bytes,
    started: float,
    crashed: bool = False,
) -> None:
    actor: ActorContext | None = scope.get("state", {}).get("actor")
    if actor is None:
        return
    status_code = 500 if crashed or capture.status_code is None else capture.status_code
    payload = None if crashed else capture.json()
    metadata = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "user_agent": get_header(scope, "User-Agent"),
    }
    write = _write_audit_row(
        actor,
        classification,
        _created_id(classification, payload) if status_code < 400 else classification.entity_id,
        describe(classification.action, method, path),
        metadata,
        status_code,
        "Internal server error" if crashed else _error_message(payload),
        _parse_json(request_body),
        int((time.perf_counter() - started) * 1000),
    )
    try:
        await asyncio.shield(write)
    except Exception as e:
        logger.warning(
            "Failed to write audit log for %s %s: %s", method, path, e, exc_info=True
        )
