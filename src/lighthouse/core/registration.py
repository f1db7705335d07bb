"""Interactive registration of a new client with a bridge.

The bridge only issues a token after its physical link button was pressed
and offers no way to be notified of that, so registration polls every
candidate bridge until one of them answers with a token.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from rich.console import Console

from lighthouse.core.dispatch import SupportsSend
from lighthouse.core.network import AllowedMethod, RequestTarget, registration_url
from lighthouse.errors import (
    ConstructionError,
    DecodeError,
    RegistrationError,
    RegistrationTimeoutError,
    TransportError,
)
from lighthouse.utils.redaction import redact_token

logger = logging.getLogger(__name__)

DEFAULT_DEVICETYPE = "lighthouse"
LINK_BUTTON_NOT_PRESSED = 101


@dataclass(frozen=True)
class Registration:
    host: str
    token: str


def interpret_reply(reply: Any) -> str | None:
    """Return the issued token, or ``None`` while the button is not pressed."""
    if not isinstance(reply, list) or not reply or not isinstance(reply[0], dict):
        raise RegistrationError(f"Unexpected registration reply: {reply!r}")

    entry = reply[0]
    success = entry.get("success")
    if isinstance(success, dict):
        username = success.get("username")
        if isinstance(username, str) and username:
            return username
        raise RegistrationError(f"Registration succeeded without a token: {reply!r}")

    error = entry.get("error")
    if isinstance(error, dict):
        if error.get("type") == LINK_BUTTON_NOT_PRESSED:
            return None
        description = error.get("description", "unknown error")
        raise RegistrationError(
            f"Bridge refused registration (type {error.get('type')}): {description}"
        )

    raise RegistrationError(f"Unexpected registration reply: {reply!r}")


async def register(
    addresses: Sequence[str],
    *,
    transport: SupportsSend,
    interactive: bool = False,
    devicetype: str = DEFAULT_DEVICETYPE,
    interval: float = 3.0,
    max_attempts: int | None = None,
    console: Console | None = None,
) -> Registration:
    """Poll ``addresses`` until one bridge issues a token.

    Every round posts one registration request to each candidate; rounds are
    ``interval`` seconds apart. With ``max_attempts`` set, giving up after
    that many rounds raises :class:`RegistrationTimeoutError`.
    """
    candidates = list(addresses)
    if not candidates:
        raise RegistrationError("Could not find any bridges on the network")

    try:
        targets = {
            address: RequestTarget(registration_url(address), AllowedMethod.POST)
            for address in candidates
        }
    except ConstructionError as exc:
        raise RegistrationError(str(exc)) from exc

    out = console or Console()
    if interactive:
        out.print(f"Found the following bridges: {', '.join(candidates)}")
        out.print("Will try to register. Please press the link button on your bridge.")

    body = {"devicetype": devicetype}
    attempt = 0
    while True:
        attempt += 1
        if interactive:
            out.print("Waiting for button press...")
        logger.debug("Registration round %d over %d bridge(s)", attempt, len(candidates))

        for address, target in targets.items():
            try:
                response = await transport.send(target, body)
                token = interpret_reply(response.json())
            except TransportError as exc:
                logger.warning("Bridge %s did not answer: %s", address, exc)
                continue
            except DecodeError as exc:
                raise RegistrationError(f"Bridge {address} sent an invalid reply") from exc

            if token is not None:
                logger.info(
                    "Registered with bridge %s (token %s)", address, redact_token(token)
                )
                if interactive:
                    out.print(f"[green]✓[/green] Registered with bridge {address}")
                return Registration(host=address, token=token)

        if max_attempts is not None and attempt >= max_attempts:
            raise RegistrationTimeoutError(
                f"Link button was not pressed after {attempt} attempt(s)"
            )
        await asyncio.sleep(interval)
