from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lighthouse.core.network import Response


class LighthouseError(Exception):
    """Base class for every error raised by lighthouse."""


class ConstructionError(LighthouseError, ValueError):
    """A bridge target or endpoint could not be built from the given input."""


class DecodeError(LighthouseError, ValueError):
    """A response body does not match the expected schema."""


class TransportErrorKind(str, Enum):
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    STATUS = "status"


class TransportError(LighthouseError):
    """A single request failed.

    Inside a batch this is returned as the element's result, never raised.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: TransportErrorKind,
        url: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.url = url
        self.status = status

    def __repr__(self) -> str:
        return f"TransportError({self.kind.value}, url={self.url!r}, status={self.status})"


class DiscoveryError(LighthouseError):
    """The multicast search could not be performed at all."""


class RegistrationError(LighthouseError):
    pass


class RegistrationTimeoutError(RegistrationError):
    """The link button was not pressed within the allowed number of polls."""


class BatchError(LighthouseError):
    """At least one request of a batch failed.

    ``failures`` maps the light ID to its error; ``responses`` holds the
    successful responses keyed the same way.
    """

    def __init__(
        self,
        failures: dict[int, TransportError],
        responses: dict[int, Response],
    ) -> None:
        ids = ", ".join(str(light_id) for light_id in sorted(failures))
        super().__init__(f"{len(failures)} request(s) failed for light(s): {ids}")
        self.failures = failures
        self.responses = responses
