"""Helpers for audit logging: derive client identity from an ASGI scope."""

from __future__ import annotations


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def client_ip_from_scope(scope: dict) -> str | None:
    """Return the first X-Forwarded-For hop, else the connecting client host."""
    forwarded = get_header(scope, "X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    client = scope.get("client")
    return client[0] if client else None

