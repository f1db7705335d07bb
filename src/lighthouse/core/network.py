"""HTTP plumbing: target construction, endpoint resolution and the transport."""

from __future__ import annotations

import asyncio
import ipaddress
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple
from urllib.parse import quote

import aiohttp
from yarl import URL

from lighthouse.errors import (
    ConstructionError,
    DecodeError,
    TransportError,
    TransportErrorKind,
)
from lighthouse.models import SendableState
from lighthouse.utils.redaction import redact_url

logger = logging.getLogger(__name__)

LIGHTS_PATH = "./lights"

_HOSTNAME_RE = re.compile(
    r"^(?=.{1,253}\.?$)[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*\.?$"
)
_TOKEN_FORBIDDEN = set("/?#") | set(" \t\r\n")


class AllowedMethod(str, Enum):
    """The only HTTP methods the bridge API is spoken with."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"


class RequestTarget(NamedTuple):
    url: URL
    method: AllowedMethod


Payload = SendableState | Mapping[str, Any]


@dataclass(frozen=True)
class Response:
    """A fully read bridge response."""

    status: int
    url: str
    method: AllowedMethod
    text: str

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as exc:
            raise DecodeError(
                f"Response from {redact_url(self.url)} is not JSON: {exc}"
            ) from exc

    def api_errors(self) -> list[dict[str, Any]]:
        """Return the ``error`` objects of a bridge reply list.

        The bridge answers state changes with HTTP 200 and a list of
        ``{"success": ...}`` / ``{"error": ...}`` entries.
        """
        try:
            data = self.json()
        except DecodeError:
            return []
        if not isinstance(data, list):
            return []
        return [
            entry["error"]
            for entry in data
            if isinstance(entry, dict) and isinstance(entry.get("error"), dict)
        ]


def _validate_host(host: str) -> str:
    host = host.strip()
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        pass
    if not _HOSTNAME_RE.match(host):
        raise ConstructionError(f"Invalid bridge host: {host!r}")
    return host


def generate_target(host: str, token: str, port: int | None = None) -> URL:
    """Build the ``http://<host>/api/<token>/`` base URL of a bridge."""
    if not isinstance(host, str) or not host.strip():
        raise ConstructionError("Bridge host must not be empty")
    if not isinstance(token, str) or not token.strip():
        raise ConstructionError("Bridge token must not be empty")
    if _TOKEN_FORBIDDEN & set(token):
        raise ConstructionError("Bridge token contains reserved characters")
    if port is not None and not 0 < port < 65536:
        raise ConstructionError(f"Invalid bridge port: {port}")

    validated = _validate_host(host)
    try:
        return URL.build(
            scheme="http", host=validated, port=port, path=f"/api/{token}/"
        )
    except ValueError as exc:
        raise ConstructionError(f"Invalid bridge address {host!r}: {exc}") from exc


def registration_url(host: str, port: int | None = None) -> URL:
    validated = _validate_host(host)
    try:
        return URL.build(scheme="http", host=validated, port=port, path="/api")
    except ValueError as exc:
        raise ConstructionError(f"Invalid bridge address {host!r}: {exc}") from exc


def resolve(base: URL, relative: str, method: AllowedMethod) -> RequestTarget:
    """Join ``relative`` onto ``base`` with URL reference semantics."""
    if not isinstance(relative, str):
        raise ConstructionError(f"Endpoint must be a string, got {relative!r}")
    if not base.is_absolute():
        raise ConstructionError(f"Base URL must be absolute: {redact_url(base)}")
    try:
        reference = URL(relative)
    except ValueError as exc:
        raise ConstructionError(f"Malformed endpoint {relative!r}: {exc}") from exc
    if reference.scheme or reference.is_absolute() or relative.startswith("/"):
        raise ConstructionError(f"Endpoint must be a relative reference: {relative!r}")
    return RequestTarget(base.join(reference), AllowedMethod(method))


def light_state_path(light_id: int | str) -> str:
    return f"{LIGHTS_PATH}/{quote(str(light_id), safe='')}/state"


def _encode_payload(payload: Payload | None) -> Any:
    if payload is None:
        return None
    if isinstance(payload, SendableState):
        return payload.to_payload()
    return dict(payload)


def _decode_body(raw: bytes, charset: str | None) -> str:
    # Undecodable bytes surface later as a DecodeError from Response.json().
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class Transport:
    """Issues single requests against the bridge.

    One ``aiohttp.ClientSession`` is opened lazily on first use and shared by
    every request in flight. No total timeout is set on the session and
    nothing is retried here; callers bound and retry requests themselves.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session
        self._owns_session = session is None

    def _client(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=None)
            )
            self._owns_session = True
        return self._session

    async def send(
        self, target: RequestTarget, payload: Payload | None = None
    ) -> Response:
        url, method = target
        body = _encode_payload(payload)
        shown = redact_url(url)
        logger.debug("%s %s %s", method.value, shown, body if body is not None else "")

        try:
            async with self._client().request(method.value, url, json=body) as resp:
                status = resp.status
                text = _decode_body(await resp.read(), resp.charset)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise TransportError(
                f"{method.value} {shown} timed out",
                kind=TransportErrorKind.TIMEOUT,
                url=str(url),
            ) from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise TransportError(
                f"{method.value} {shown} failed: {exc}",
                kind=TransportErrorKind.CONNECTION,
                url=str(url),
            ) from exc

        if not 200 <= status < 300:
            raise TransportError(
                f"{method.value} {shown} returned HTTP {status}",
                kind=TransportErrorKind.STATUS,
                url=str(url),
                status=status,
            )

        logger.debug("%s %s -> %d", method.value, shown, status)
        return Response(status=status, url=str(url), method=method, text=text)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
