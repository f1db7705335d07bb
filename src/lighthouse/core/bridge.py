"""The bridge session: the main entry point of the library."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Iterable
from typing import Any, TypeVar

from rich.console import Console

from lighthouse.config import Settings, get_settings
from lighthouse.core.discovery import discover
from lighthouse.core.dispatch import BatchOutcome, SupportsSend, dispatch
from lighthouse.core.network import (
    LIGHTS_PATH,
    AllowedMethod,
    Payload,
    RequestTarget,
    Response,
    Transport,
    generate_target,
    light_state_path,
    resolve,
)
from lighthouse.core.registration import Registration, register
from lighthouse.errors import DecodeError, RegistrationError, TransportError
from lighthouse.models import Light, SendableState, parse_inventory
from lighthouse.storage import Credentials
from lighthouse.utils.redaction import redact_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Bridge:
    """Authenticated handle to one bridge.

    The bridge owns a private event loop runner that every public operation
    runs on to completion, so operations never overlap. The light inventory
    only changes through :meth:`scan`; readers get copies.

    Public methods are synchronous and must not be called from inside a
    running event loop.
    """

    def __init__(
        self,
        host: str,
        token: str,
        *,
        port: int | None = None,
        transport: SupportsSend | None = None,
        request_timeout: float | None = None,
    ) -> None:
        # Validated before anything that needs releasing is created.
        self.target = generate_target(host, token, port)
        self._host = host
        self._token = token
        self._request_timeout = request_timeout
        self._transport = transport if transport is not None else Transport()
        self._runner = asyncio.Runner()
        self._lights: dict[int, Light] = {}
        self._closed = False

    def __repr__(self) -> str:
        return f"<Bridge {redact_url(self.target)}>"

    def __enter__(self) -> Bridge:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @classmethod
    def from_credentials(cls, credentials: Credentials, **kwargs: Any) -> Bridge:
        return cls(credentials.host, credentials.token, **kwargs)

    @classmethod
    def try_register(
        cls,
        interactive: bool = False,
        settings: Settings | None = None,
        console: Console | None = None,
        transport: SupportsSend | None = None,
    ) -> tuple[Bridge, str]:
        """Discover bridges and register a new client with one of them.

        Returns the bridge and its new token so the caller can store it.
        """
        settings = settings or get_settings()
        registration = run_registration(settings, interactive=interactive, console=console)
        bridge = cls(
            registration.host,
            registration.token,
            transport=transport,
            request_timeout=settings.transport.deadline,
        )
        return bridge, registration.token

    @classmethod
    def connect(
        cls,
        credentials: Credentials | None = None,
        settings: Settings | None = None,
        *,
        interactive: bool = True,
        transport: SupportsSend | None = None,
    ) -> Bridge:
        """Open a session and scan the lights once.

        Without credentials a new client is registered first. A failing scan
        is logged and leaves the inventory empty.
        """
        settings = settings or get_settings()
        if credentials is None:
            bridge, _ = cls.try_register(
                interactive=interactive, settings=settings, transport=transport
            )
        else:
            bridge = cls.from_credentials(
                credentials,
                transport=transport,
                request_timeout=settings.transport.deadline,
            )

        try:
            bridge.scan()
        except (TransportError, DecodeError) as exc:
            logger.warning("Could not collect information about the system: %s", exc)
        return bridge

    @property
    def credentials(self) -> Credentials:
        return Credentials(host=self._host, token=self._token)

    @property
    def lights(self) -> dict[int, Light]:
        """Snapshot of the lights found by the last scan."""
        return dict(self._lights)

    @property
    def ids(self) -> list[int]:
        return list(self._lights)

    def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        if self._closed:
            coro.close()
            raise RuntimeError("Bridge is closed")
        return self._runner.run(coro)

    def _endpoint(self, path: str, method: AllowedMethod) -> RequestTarget:
        return resolve(self.target, path, method)

    async def _get_lights(self) -> Any:
        response = await self._transport.send(self._endpoint(LIGHTS_PATH, AllowedMethod.GET))
        return response.json()

    def scan(self) -> dict[int, Light]:
        """Fetch the light list and replace the inventory with it."""
        lights = parse_inventory(self._run(self._get_lights()))
        self._lights = lights
        logger.debug("Scan found %d light(s): %s", len(lights), list(lights))
        return dict(lights)

    def system_info(self) -> Any:
        """Raw JSON of the bridge's light listing."""
        return self._run(self._get_lights())

    def state_to(self, light_id: int, state: SendableState) -> Response:
        """Send ``state`` to one light; raises :class:`TransportError` on failure."""
        target = self._endpoint(light_state_path(light_id), AllowedMethod.PUT)
        [result] = self._run(
            dispatch(self._transport, [target], [state], timeout=self._request_timeout)
        )
        if isinstance(result, TransportError):
            raise result
        return result

    def state_to_multiple(
        self, ids: Iterable[int], states: Iterable[SendableState]
    ) -> BatchOutcome:
        """Send ``states[i]`` to ``ids[i]`` for every ``i``, concurrently."""
        ids = list(ids)
        payloads: list[Payload | None] = list(states)
        if len(ids) != len(payloads):
            raise ValueError(
                f"Got {len(ids)} light ids but {len(payloads)} states"
            )
        duplicates = sorted({light_id for light_id in ids if ids.count(light_id) > 1})
        if duplicates:
            raise ValueError(f"Light ids must be unique, got duplicates: {duplicates}")

        targets = [
            self._endpoint(light_state_path(light_id), AllowedMethod.PUT)
            for light_id in ids
        ]
        results = self._run(
            dispatch(self._transport, targets, payloads, timeout=self._request_timeout)
        )
        outcome = BatchOutcome(ids=ids, results=results)
        if not outcome.ok:
            logger.debug("Failed lights: %s", sorted(outcome.failures))
        return outcome

    def state_to_all(self, state: SendableState) -> BatchOutcome:
        """Send the same ``state`` to every light known from the last scan."""
        ids = self.ids
        return self.state_to_multiple(ids, [state] * len(ids))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            close = getattr(self._transport, "close", None)
            if close is not None:
                self._runner.run(close())
        finally:
            self._runner.close()


def run_registration(
    settings: Settings,
    *,
    interactive: bool = False,
    console: Console | None = None,
) -> Registration:
    """Discover bridges and run the registration handshake to completion."""

    async def _discover_and_register() -> Registration:
        addresses = await discover(settings.discovery)
        transport = Transport()
        try:
            return await register(
                addresses,
                transport=transport,
                interactive=interactive,
                devicetype=settings.registration.devicetype,
                interval=settings.registration.interval,
                max_attempts=settings.registration.max_attempts,
                console=console,
            )
        finally:
            await transport.close()

    try:
        return asyncio.run(_discover_and_register())
    except KeyboardInterrupt as exc:
        raise RegistrationError("Registration aborted") from exc
