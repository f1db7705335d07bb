from __future__ import annotations

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port
from yarl import URL

from lighthouse.core import AllowedMethod, Transport, generate_target, resolve
from lighthouse.core.dispatch import dispatch
from lighthouse.core.network import (
    LIGHTS_PATH,
    RequestTarget,
    Response,
    light_state_path,
    registration_url,
)
from lighthouse.errors import (
    ConstructionError,
    DecodeError,
    TransportError,
    TransportErrorKind,
)
from lighthouse.models import SendableState


def test_generate_target_builds_api_base():
    target = generate_target("192.168.1.2", "abc123")

    assert str(target) == "http://192.168.1.2/api/abc123/"


def test_generate_target_with_hostname_and_port():
    target = generate_target("hue-bridge.local", "abc123", port=8080)

    assert str(target) == "http://hue-bridge.local:8080/api/abc123/"


@pytest.mark.parametrize(
    "host, token",
    [
        ("", "abc"),
        ("192.168.1.2", ""),
        ("192.168.1.2", "   "),
        ("192.168.1.2", "ab/c"),
        ("192.168.1.2", "ab?c"),
        ("192.168.1.2", "ab#c"),
        ("192.168.1.2", "ab c"),
        ("not a host", "abc"),
        ("bad_host!", "abc"),
    ],
)
def test_generate_target_rejects_invalid_input(host, token):
    with pytest.raises(ConstructionError):
        generate_target(host, token)


def test_generate_target_rejects_invalid_port():
    with pytest.raises(ConstructionError):
        generate_target("192.168.1.2", "abc", port=70000)


def test_construction_error_is_a_value_error():
    with pytest.raises(ValueError):
        generate_target("192.168.1.2", "")


def test_registration_url():
    assert str(registration_url("10.0.0.5")) == "http://10.0.0.5/api"


def test_resolve_keeps_the_token_segment():
    base = generate_target("192.168.1.2", "abc123")

    target = resolve(base, LIGHTS_PATH, AllowedMethod.GET)

    assert str(target.url) == "http://192.168.1.2/api/abc123/lights"
    assert target.method is AllowedMethod.GET


def test_resolve_light_state_endpoint():
    base = generate_target("192.168.1.2", "abc123")

    target = resolve(base, light_state_path(7), AllowedMethod.PUT)

    assert str(target.url) == "http://192.168.1.2/api/abc123/lights/7/state"


def test_light_state_path_escapes_reserved_characters():
    assert light_state_path("a/b") == "./lights/a%2Fb/state"


@pytest.mark.parametrize(
    "relative",
    ["http://evil.example/lights", "//evil.example/lights", "/lights"],
)
def test_resolve_rejects_non_relative_references(relative):
    base = generate_target("192.168.1.2", "abc123")

    with pytest.raises(ConstructionError):
        resolve(base, relative, AllowedMethod.GET)


def test_resolve_rejects_relative_base():
    with pytest.raises(ConstructionError):
        resolve(URL("api/abc/"), LIGHTS_PATH, AllowedMethod.GET)


def test_resolve_rejects_non_string_endpoint():
    base = generate_target("192.168.1.2", "abc123")

    with pytest.raises(ConstructionError):
        resolve(base, 42, AllowedMethod.GET)  # type: ignore[arg-type]


def _response(text: str) -> Response:
    return Response(
        status=200,
        url="http://192.168.1.2/api/abc/lights/1/state",
        method=AllowedMethod.PUT,
        text=text,
    )


def test_response_json():
    assert _response('[{"success": {"/lights/1/state/on": true}}]').json() == [
        {"success": {"/lights/1/state/on": True}}
    ]


def test_response_json_raises_decode_error():
    with pytest.raises(DecodeError):
        _response("<html>").json()


def test_response_api_errors():
    response = _response(
        '[{"success": {}}, {"error": {"type": 201, "description": "not modifiable"}}]'
    )

    assert response.api_errors() == [{"type": 201, "description": "not modifiable"}]
    assert _response("{}").api_errors() == []
    assert _response("garbage").api_errors() == []


def _bridge_app(received: list) -> web.Application:
    async def get_lights(request: web.Request) -> web.Response:
        received.append((request.method, request.path, None))
        return web.json_response({"1": {"name": "Lamp"}})

    async def put_state(request: web.Request) -> web.Response:
        body = await request.json()
        received.append((request.method, request.path, body))
        light_id = request.match_info["light_id"]
        if light_id == "9":
            return web.Response(body=b"\xff\xfe\xfa", content_type="application/json")
        return web.json_response(
            [
                {"success": {f"/lights/{light_id}/state/{key}": value}}
                for key, value in body.items()
            ]
        )

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="not found")

    app = web.Application()
    app.router.add_get("/api/abc/lights", get_lights)
    app.router.add_put("/api/abc/lights/{light_id}/state", put_state)
    app.router.add_get("/api/abc/missing", missing)
    return app


def _server_target(
    server: TestServer, relative: str, method: AllowedMethod
) -> RequestTarget:
    base = generate_target(server.host, "abc", port=server.port)
    return resolve(base, relative, method)


def test_transport_get_and_put_against_a_server():
    received: list = []

    async def scenario():
        async with TestServer(_bridge_app(received)) as server:
            transport = Transport()
            try:
                listing = await transport.send(
                    _server_target(server, LIGHTS_PATH, AllowedMethod.GET)
                )
                change = await transport.send(
                    _server_target(server, light_state_path(1), AllowedMethod.PUT),
                    SendableState(on=True, bri=200),
                )
            finally:
                await transport.close()
        return listing, change

    listing, change = asyncio.run(scenario())

    assert listing.status == 200
    assert listing.json() == {"1": {"name": "Lamp"}}
    assert change.api_errors() == []
    assert received == [
        ("GET", "/api/abc/lights", None),
        (
            "PUT",
            "/api/abc/lights/1/state",
            {"on": True, "bri": 200, "transitiontime": 1},
        ),
    ]


def test_transport_maps_error_status():
    async def scenario():
        async with TestServer(_bridge_app([])) as server:
            transport = Transport()
            try:
                await transport.send(
                    _server_target(server, "./missing", AllowedMethod.GET)
                )
            finally:
                await transport.close()

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.kind is TransportErrorKind.STATUS
    assert excinfo.value.status == 404


def test_transport_maps_connection_failures():
    token = "0123456789abcdef"
    base = generate_target("127.0.0.1", token, port=unused_port())
    target = resolve(base, LIGHTS_PATH, AllowedMethod.GET)

    async def scenario():
        transport = Transport()
        try:
            await transport.send(target)
        finally:
            await transport.close()

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.kind is TransportErrorKind.CONNECTION
    assert token not in str(excinfo.value)


def test_undecodable_body_fails_only_its_own_light():
    async def scenario():
        async with TestServer(_bridge_app([])) as server:
            transport = Transport()
            targets = [
                _server_target(server, light_state_path(light_id), AllowedMethod.PUT)
                for light_id in (1, 9, 2)
            ]
            try:
                return await dispatch(transport, targets, [SendableState(on=True)] * 3)
            finally:
                await transport.close()

    results = asyncio.run(scenario())

    assert all(isinstance(result, Response) for result in results)
    assert results[0].api_errors() == []
    assert results[2].json()[0] == {"success": {"/lights/2/state/on": True}}
    with pytest.raises(DecodeError):
        results[1].json()
