"""Concurrent fan-out of bridge requests.

Every request of a batch runs as its own task, tagged with its input index.
Results are collected as tasks finish and sorted back into input order once
the whole batch is done, so result ``i`` always belongs to ``targets[i]``.
A failed request becomes that element's result; it never cancels its
siblings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from operator import itemgetter
from typing import Protocol

from lighthouse.core.network import Payload, RequestTarget, Response
from lighthouse.errors import BatchError, TransportError, TransportErrorKind
from lighthouse.utils.redaction import redact_url

logger = logging.getLogger(__name__)

Result = Response | TransportError


class SupportsSend(Protocol):
    async def send(
        self, target: RequestTarget, payload: Payload | None = None
    ) -> Response: ...


async def _send_indexed(
    index: int,
    transport: SupportsSend,
    target: RequestTarget,
    payload: Payload | None,
    timeout: float | None,
) -> tuple[int, Result]:
    try:
        if timeout is None:
            response = await transport.send(target, payload)
        else:
            response = await asyncio.wait_for(transport.send(target, payload), timeout)
    except (asyncio.TimeoutError, TimeoutError):
        limit = "" if timeout is None else f" after {timeout}s"
        return index, TransportError(
            f"{target.method.value} {redact_url(target.url)} timed out{limit}",
            kind=TransportErrorKind.TIMEOUT,
            url=str(target.url),
        )
    except TransportError as exc:
        return index, exc
    return index, response


async def dispatch(
    transport: SupportsSend,
    targets: Sequence[RequestTarget],
    payloads: Sequence[Payload | None],
    *,
    timeout: float | None = None,
) -> list[Result]:
    """Send every ``(target, payload)`` pair concurrently.

    Returns one result per pair in input order, after all requests finished.
    ``timeout`` bounds each request individually.
    """
    targets = list(targets)
    payloads = list(payloads)
    if len(targets) != len(payloads):
        raise ValueError(
            f"Got {len(targets)} targets but {len(payloads)} payloads"
        )
    if not targets:
        return []

    tasks = [
        asyncio.ensure_future(_send_indexed(index, transport, target, payload, timeout))
        for index, (target, payload) in enumerate(zip(targets, payloads))
    ]
    collected: list[tuple[int, Result]] = []
    try:
        for next_done in asyncio.as_completed(tasks):
            collected.append(await next_done)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    collected.sort(key=itemgetter(0))
    failed = sum(isinstance(result, TransportError) for _, result in collected)
    logger.debug("Dispatched %d request(s), %d failed", len(collected), failed)
    return [result for _, result in collected]


@dataclass
class BatchOutcome:
    """Per-light results of one batch, in the order the IDs were given."""

    ids: list[int]
    results: list[Result]

    def __iter__(self):
        return iter(zip(self.ids, self.results))

    def __len__(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> dict[int, TransportError]:
        return {
            light_id: result
            for light_id, result in self
            if isinstance(result, TransportError)
        }

    @property
    def succeeded(self) -> dict[int, Response]:
        return {
            light_id: result
            for light_id, result in self
            if isinstance(result, Response)
        }

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> list[Response]:
        """Collapse to the list of responses, raising if any request failed."""
        failures = self.failures
        if failures:
            raise BatchError(failures, self.succeeded)
        return [result for result in self.results if isinstance(result, Response)]
