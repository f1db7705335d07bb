from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
import threading
from collections.abc import Callable, Iterable

from zeroconf import ServiceBrowser, ServiceInfo, ServiceListener, Zeroconf

from lighthouse.config import DiscoveryConfig
from lighthouse.errors import DiscoveryError

logger = logging.getLogger(__name__)

SSDP_ADDRESS = "239.255.255.250"
SSDP_PORT = 1900
SSDP_SEARCH_TARGET = "urn:schemas-upnp-org:device:Basic:1"
SSDP_MX = 5

MDNS_SERVICE_TYPE = "_hue._tcp.local."


def build_search_request(search_target: str = SSDP_SEARCH_TARGET, mx: int = SSDP_MX) -> bytes:
    lines = [
        "M-SEARCH * HTTP/1.1",
        f"HOST: {SSDP_ADDRESS}:{SSDP_PORT}",
        'MAN: "ssdp:discover"',
        f"MX: {mx}",
        f"ST: {search_target}",
        "",
        "",
    ]
    return "\r\n".join(lines).encode("ascii")


def parse_headers(data: bytes) -> dict[str, str]:
    text = data.decode("utf-8", errors="replace")
    headers: dict[str, str] = {}
    for line in text.split("\r\n")[1:]:
        key, sep, value = line.partition(":")
        if sep:
            headers[key.strip().lower()] = value.strip()
    return headers


def _address_key(address: str) -> tuple[int, int | str]:
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return (99, address)
    return (ip.version, int(ip))


def unique_addresses(addresses: Iterable[str]) -> list[str]:
    """Deduplicate ``addresses`` and sort them numerically."""
    return sorted(set(addresses), key=_address_key)


class SSDPSearchProtocol(asyncio.DatagramProtocol):
    """Collects the sender address of every reply to one M-SEARCH."""

    def __init__(self) -> None:
        self._replies: list[str] = []
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: tuple[str | object, ...]) -> None:
        address = str(addr[0])
        headers = parse_headers(data)
        logger.debug(
            "SSDP reply from %s (server=%s)", address, headers.get("server", "?")
        )
        self._replies.append(address)

    def error_received(self, exc: Exception) -> None:
        logger.debug("SSDP socket error: %s", exc)

    def addresses(self) -> list[str]:
        return unique_addresses(self._replies)


async def _open_search_socket(
    loop: asyncio.AbstractEventLoop,
    protocol_factory: Callable[[], SSDPSearchProtocol],
) -> tuple[asyncio.DatagramTransport, SSDPSearchProtocol]:
    return await loop.create_datagram_endpoint(
        protocol_factory,
        local_addr=("0.0.0.0", 0),
        family=socket.AF_INET,
    )


async def find_bridges(
    timeout: float = 5.0,
    *,
    search_target: str = SSDP_SEARCH_TARGET,
    mx: int = SSDP_MX,
) -> list[str]:
    """Search the local network for bridges with SSDP.

    Blocks for ``timeout`` seconds and returns the sorted, duplicate-free
    addresses of everything that answered.
    """
    logger.debug("Searching for bridges via SSDP (timeout=%.2fs)", timeout)
    loop = asyncio.get_running_loop()
    try:
        transport, protocol = await _open_search_socket(loop, SSDPSearchProtocol)
    except OSError as exc:
        raise DiscoveryError(f"Could not open multicast socket: {exc}") from exc

    try:
        transport.sendto(
            build_search_request(search_target, mx), (SSDP_ADDRESS, SSDP_PORT)
        )
        await asyncio.sleep(timeout)
    except OSError as exc:
        raise DiscoveryError(f"Could not send multicast search: {exc}") from exc
    finally:
        transport.close()

    addresses = protocol.addresses()
    logger.debug("SSDP search complete: found %d address(es)", len(addresses))
    return addresses


def _pick_ip(info: ServiceInfo) -> str | None:
    addresses = info.parsed_addresses()
    if not addresses:
        return None
    for address in addresses:
        if ":" not in address:
            return address
    return addresses[0]


class HueListener(ServiceListener):
    def __init__(self, info_timeout: float) -> None:
        self._info_timeout_ms = max(int(info_timeout * 1000), 1)
        self._lock = threading.Lock()
        self._found: dict[str, str] = {}

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        info = zc.get_service_info(type_, name, timeout=self._info_timeout_ms)
        if not info:
            return
        ip = _pick_ip(info)
        if ip is None:
            return
        with self._lock:
            self._found[name] = ip
        logger.debug("Discovered bridge '%s' at %s via mDNS", name, ip)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self.add_service(zc, type_, name)

    def remove_service(self, _zc: Zeroconf, _type_: str, name: str) -> None:
        with self._lock:
            self._found.pop(name, None)

    def addresses(self) -> list[str]:
        with self._lock:
            return unique_addresses(self._found.values())


async def find_bridges_mdns(timeout: float = 5.0) -> list[str]:
    logger.debug("Searching for bridges via mDNS (timeout=%.2fs)", timeout)
    try:
        zeroconf = Zeroconf()
    except OSError as exc:
        raise DiscoveryError(f"Could not start mDNS browser: {exc}") from exc
    listener = HueListener(timeout)
    ServiceBrowser(zeroconf, MDNS_SERVICE_TYPE, listener)
    try:
        await asyncio.sleep(timeout)
    finally:
        await asyncio.to_thread(zeroconf.close)

    addresses = listener.addresses()
    logger.debug("mDNS search complete: found %d bridge(s)", len(addresses))
    return addresses


async def discover(config: DiscoveryConfig) -> list[str]:
    if config.method == "mdns":
        return await find_bridges_mdns(config.timeout)
    return await find_bridges(
        config.timeout, search_target=config.search_target, mx=config.mx
    )
