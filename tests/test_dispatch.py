from __future__ import annotations

import asyncio
import random

import pytest
from helpers import FakeTransport, reply
from yarl import URL

from lighthouse.core import AllowedMethod, BatchOutcome, dispatch, resolve
from lighthouse.core.network import light_state_path
from lighthouse.errors import BatchError, TransportError, TransportErrorKind
from lighthouse.models import SendableState

BASE = URL("http://192.168.1.2/api/token/")


def _targets(count: int):
    return [
        resolve(BASE, light_state_path(light_id), AllowedMethod.PUT)
        for light_id in range(1, count + 1)
    ]


def _light_id(target) -> int:
    return int(target.url.parts[-2])


@pytest.mark.parametrize("count", [0, 1, 5, 50])
def test_results_follow_input_order_whatever_the_latency(count):
    delays = [index * 0.002 for index in range(count)]
    random.Random(count).shuffle(delays)
    finished: list[int] = []

    async def handler(target, payload):
        light_id = _light_id(target)
        await asyncio.sleep(delays[light_id - 1])
        finished.append(light_id)
        return reply(target, [{"success": {"id": light_id}}])

    targets = _targets(count)
    transport = FakeTransport(handler)
    results = asyncio.run(dispatch(transport, targets, [None] * count))

    assert len(results) == count
    assert [result.url for result in results] == [str(t.url) for t in targets]
    assert [result.json()[0]["success"]["id"] for result in results] == list(
        range(1, count + 1)
    )
    assert sorted(finished) == list(range(1, count + 1))


def test_requests_run_concurrently_and_complete_out_of_order():
    finished: list[int] = []

    async def handler(target, payload):
        light_id = _light_id(target)
        await asyncio.sleep(0.01 * (6 - light_id))
        finished.append(light_id)
        return reply(target, [])

    results = asyncio.run(dispatch(FakeTransport(handler), _targets(5), [None] * 5))

    assert finished == [5, 4, 3, 2, 1]
    assert [_light_id_from_url(result.url) for result in results] == [1, 2, 3, 4, 5]


def _light_id_from_url(url: str) -> int:
    return int(URL(url).parts[-2])


def test_one_failure_does_not_affect_the_others():
    async def handler(target, payload):
        light_id = _light_id(target)
        if light_id == 3:
            return TransportError(
                "connection refused",
                kind=TransportErrorKind.CONNECTION,
                url=str(target.url),
            )
        await asyncio.sleep(0.001 * light_id)
        return reply(target, [{"success": {}}])

    results = asyncio.run(dispatch(FakeTransport(handler), _targets(5), [None] * 5))

    assert len(results) == 5
    assert isinstance(results[2], TransportError)
    assert results[2].kind is TransportErrorKind.CONNECTION
    assert all(
        not isinstance(result, TransportError)
        for index, result in enumerate(results)
        if index != 2
    )


def test_payloads_are_paired_with_their_targets():
    states = [SendableState(on=True, bri=light_id) for light_id in range(1, 4)]
    transport = FakeTransport(lambda target, payload: reply(target, []))

    asyncio.run(dispatch(transport, _targets(3), states))

    sent = {_light_id(target): payload for target, payload in transport.calls}
    assert sent == {1: states[0], 2: states[1], 3: states[2]}


def test_slow_request_is_reported_as_timeout():
    async def handler(target, payload):
        if _light_id(target) == 2:
            await asyncio.sleep(10)
        return reply(target, [])

    results = asyncio.run(
        dispatch(FakeTransport(handler), _targets(3), [None] * 3, timeout=0.05)
    )

    assert isinstance(results[1], TransportError)
    assert results[1].kind is TransportErrorKind.TIMEOUT
    assert not isinstance(results[0], TransportError)
    assert not isinstance(results[2], TransportError)


def test_timeout_from_the_transport_without_a_deadline():
    def handler(target, payload):
        if _light_id(target) == 1:
            return TimeoutError()
        return reply(target, [])

    results = asyncio.run(dispatch(FakeTransport(handler), _targets(2), [None] * 2))

    assert isinstance(results[0], TransportError)
    assert results[0].kind is TransportErrorKind.TIMEOUT
    assert str(results[0]).endswith("timed out")
    assert "None" not in str(results[0])
    assert not isinstance(results[1], TransportError)


def test_mismatched_lengths_fail_before_sending():
    transport = FakeTransport(lambda target, payload: reply(target, []))

    with pytest.raises(ValueError):
        asyncio.run(dispatch(transport, _targets(3), [None, None]))

    assert transport.calls == []


def test_unexpected_errors_propagate():
    def handler(target, payload):
        raise RuntimeError("bug")

    with pytest.raises(RuntimeError):
        asyncio.run(dispatch(FakeTransport(handler), _targets(2), [None] * 2))


def test_batch_outcome_collapses_only_on_request():
    targets = _targets(3)
    error = TransportError("down", kind=TransportErrorKind.STATUS, status=503)
    outcome = BatchOutcome(
        ids=[1, 2, 3],
        results=[reply(targets[0], []), error, reply(targets[2], [])],
    )

    assert not outcome.ok
    assert outcome.failures == {2: error}
    assert sorted(outcome.succeeded) == [1, 3]

    with pytest.raises(BatchError) as excinfo:
        outcome.raise_for_failures()
    assert excinfo.value.failures == {2: error}
    assert sorted(excinfo.value.responses) == [1, 3]


def test_batch_outcome_all_ok():
    targets = _targets(2)
    outcome = BatchOutcome(ids=[1, 2], results=[reply(t, []) for t in targets])

    assert outcome.ok
    assert len(outcome.raise_for_failures()) == 2
