"""Request-id-aware logging and the request id contextvar."""

import logging
from types import SimpleNamespace

import officeflow.shared.telemetry.logging as telemetry_logging
from officeflow.middleware.request_id import RequestIDMiddleware
from officeflow.shared.context import get_request_id, reset_request_id, set_request_id
from officeflow.shared.telemetry.logging import LOG_FORMAT, RequestIdFilter


def _record() -> logging.LogRecord:
    return logging.LogRecord("officeflow.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_stamps_current_request_id() -> None:
    token = set_request_id("req-42")
    try:
        record = _record()
        assert RequestIdFilter().filter(record) is True
    finally:
        reset_request_id(token)
    assert record.request_id == "req-42"
    assert "[req-42] hello" in logging.Formatter(LOG_FORMAT).format(record)


def test_filter_outside_request_uses_dash() -> None:
    record = _record()
    RequestIdFilter().filter(record)
    assert record.request_id == "-"


def test_log_level_prefers_explicit_setting(monkeypatch) -> None:
    monkeypatch.setattr(
        telemetry_logging,
        "get_settings",
        lambda: SimpleNamespace(log_level="warning", debug=True),
    )
    assert telemetry_logging.resolve_log_level() == "WARNING"

    monkeypatch.setattr(
        telemetry_logging,
        "get_settings",
        lambda: SimpleNamespace(log_level=None, debug=True),
    )
    assert telemetry_logging.resolve_log_level() == logging.DEBUG


async def test_request_id_is_visible_inside_the_app_only() -> None:
    seen: list[str | None] = []

    async def app(scope, receive, send) -> None:
        seen.append(get_request_id())

    async def receive() -> dict:
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message: dict) -> None:
        return None

    middleware = RequestIDMiddleware(app)
    scope = {"type": "http", "headers": [(b"x-request-id", b"trace-7")]}
    await middleware(scope, receive, send)

    assert seen == ["trace-7"]
    assert scope["state"]["request_id"] == "trace-7"
    assert get_request_id() is None
