"""Tests for the Tomato router adapter."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web

from conftest import ROUTER_HTTP_ID, UNAME
from tomato_exporter.adapters import TomatoClient, TransportError
from tomato_exporter.collectors import UnameCollector
from tomato_exporter.config import DeviceConfig
from tomato_exporter.scrape import ScrapeCoordinator


@pytest.mark.asyncio
async def test_run_command_posts_shell_form_with_token_first(fake_router, router_client):
    output = await router_client.run_command("uname -a")

    assert output == UNAME
    path, fields = fake_router.requests[-1]
    assert path == "/shell.cgi"
    assert fields == [
        ("_http_id", ROUTER_HTTP_ID),
        ("action", "execute"),
        ("nojs", "1"),
        ("working_dir", "/www"),
        ("command", "uname -a"),
    ]


@pytest.mark.asyncio
async def test_request_without_fields_sends_only_token(fake_router, router_client):
    fake_router.outputs[""] = "ok"

    await router_client.request("shell.cgi")

    _, fields = fake_router.requests[-1]
    assert fields == [("_http_id", ROUTER_HTTP_ID)]


@pytest.mark.asyncio
async def test_request_update_cgi_returns_body(fake_router, router_client):
    body = await router_client.request("update.cgi", {"exec": "netdev"})

    assert body.startswith("netdev=")
    path, fields = fake_router.requests[-1]
    assert path == "/update.cgi"
    assert fields == [("_http_id", ROUTER_HTTP_ID), ("exec", "netdev")]


@pytest.mark.asyncio
async def test_rejected_credentials_raise_transport_error(fake_router):
    client = TomatoClient(fake_router.device_config(password="wrong"))

    with pytest.raises(TransportError, match="rejected credentials") as excinfo:
        await client.run_command("uname -a")
    await client.aclose()

    assert excinfo.value.status == 401


@pytest.mark.asyncio
async def test_server_error_raises_transport_error(fake_router, router_client):
    fake_router.failing_commands.add("uname -a")

    with pytest.raises(TransportError, match="status 500") as excinfo:
        await router_client.run_command("uname -a")

    assert excinfo.value.status == 500


@pytest.mark.asyncio
async def test_unreachable_router_raises_transport_error(unused_tcp_port_factory):
    port = unused_tcp_port_factory()
    client = TomatoClient(
        fake_device_config(f"127.0.0.1:{port}", request_timeout_seconds=2.0)
    )

    with pytest.raises(TransportError):
        await client.run_command("uname -a")
    await client.aclose()


@pytest_asyncio.fixture
async def slow_router(unused_tcp_port_factory):
    async def handler(request: web.Request):
        await asyncio.sleep(1.0)
        return web.Response(text="late")

    app = web.Application()
    app.router.add_post("/shell.cgi", handler)
    runner = web.AppRunner(app)
    await runner.setup()
    port = unused_tcp_port_factory()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest.mark.asyncio
async def test_request_timeout_raises_transport_error(slow_router):
    client = TomatoClient(fake_device_config(slow_router, request_timeout_seconds=0.1))

    with pytest.raises(TransportError, match="timed out"):
        await client.run_command("uname -a")
    await client.aclose()


def test_base_url_defaults_to_http():
    assert TomatoClient(fake_device_config("192.168.1.1")).base_url == "http://192.168.1.1"
    assert (
        TomatoClient(fake_device_config("https://router.lan/")).base_url
        == "https://router.lan"
    )


def fake_device_config(address: str, **overrides) -> DeviceConfig:
    values = dict(
        address=address, username="admin", password="secret", http_id=ROUTER_HTTP_ID
    )
    values.update(overrides)
    return DeviceConfig(**values)


@pytest_asyncio.fixture
async def latin1_router(unused_tcp_port_factory):
    async def handler(request: web.Request):
        return web.Response(
            body=b"Linux karab\xe9r 2.6.22.19 #31 Thu Jul 16 01:30:27 CEST 2020 mips Tomato\n",
            content_type="text/plain",
            charset="utf-8",
        )

    app = web.Application()
    app.router.add_post("/shell.cgi", handler)
    runner = web.AppRunner(app)
    await runner.setup()
    port = unused_tcp_port_factory()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest.mark.asyncio
async def test_non_utf8_output_is_decoded_with_replacement(latin1_router):
    client = TomatoClient(fake_device_config(latin1_router))

    try:
        output = await client.run_command("uname -a")
        outcomes = await ScrapeCoordinator([UnameCollector(client)]).scrape()
    finally:
        await client.aclose()

    assert output.startswith("Linux karab\ufffdr 2.6.22.19")
    assert outcomes[0].success is True
