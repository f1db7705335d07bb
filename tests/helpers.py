"""Test doubles shared by the test modules."""

from __future__ import annotations

import inspect
import json
from typing import Any

from lighthouse.core.network import RequestTarget, Response


def reply(target: RequestTarget, body: Any, status: int = 200) -> Response:
    return Response(
        status=status,
        url=str(target.url),
        method=target.method,
        text=json.dumps(body),
    )


class FakeTransport:
    """Answers every request through ``handler(target, payload)``.

    The handler may be sync or async and may return a ``Response`` or an
    exception instance to raise.
    """

    def __init__(self, handler) -> None:
        self.handler = handler
        self.calls: list[tuple[RequestTarget, Any]] = []
        self.closed = False

    async def send(self, target: RequestTarget, payload: Any = None) -> Response:
        self.calls.append((target, payload))
        result = self.handler(target, payload)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True
