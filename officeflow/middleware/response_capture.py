"""Write-through tee over the ASGI send channel."""

from __future__ import annotations

import json
from typing import Any, Callable


class ResponseCapture:
    """Forwards every response message unchanged while keeping the status and
    a bounded copy of the body for later inspection."""

    def __init__(self, send: Callable, max_body_bytes: int = 65536) -> None:
        self._send = send
        self._max_body_bytes = max_body_bytes
        self.status_code: int | None = None
        self.truncated = False
        self._chunks: list[bytes] = []
        self._size = 0

    async def __call__(self, message: dict) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
        elif message["type"] == "http.response.body":
            self._keep(message.get("body", b""))
        await self._send(message)

    def _keep(self, chunk: bytes) -> None:
        if not chunk or self.truncated:
            return
        room = self._max_body_bytes - self._size
        if len(chunk) > room:
            chunk = chunk[:room]
            self.truncated = True
        self._chunks.append(chunk)
        self._size += len(chunk)

    @property
    def started(self) -> bool:
        return self.status_code is not None

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def json(self) -> Any:
        """Parsed body, or None when it is truncated, empty or not JSON."""
        if self.truncated or not self._chunks:
            return None
        try:
            return json.loads(self.body)
        except ValueError:
            return None
