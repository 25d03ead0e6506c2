"""Shared fixtures: a fake Tomato router served by aiohttp."""

from __future__ import annotations

from typing import Optional
from urllib.parse import parse_qsl

import aiohttp
import pytest_asyncio
from aiohttp import web

from tomato_exporter.adapters import TomatoClient
from tomato_exporter.config import DeviceConfig

ROUTER_USERNAME = "admin"
ROUTER_PASSWORD = "secret"
ROUTER_HTTP_ID = "TID4c5d6e7f"

PROC_STAT = """cpu  162283 0 230563 168024492 2376 293698 4732481 0
cpu0 162283 0 230563 168024492 2376 293698 4732481 0
intr 846816216 0 0 0 203721765 315990752 153649036 8769 173445893 1 0 0 0
ctxt 15743031
btime 1596584154
processes 391097
procs_running 2
procs_blocked 0
"""

PROC_MEMINFO = """MemTotal:       255700 kB
MemFree:        221240 kB
Buffers:          5312 kB
Cached:          15428 kB
SwapTotal:           0 kB
"""

PROC_LOADAVG = "0.01 0.02 0.03 2/38 23618\n"

PROC_NET_DEV = """Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
    lo:   20551     116    0    0    0     0          0         0    20551     116    0    0    0     0       0          0
  eth0:1369176365 4125685    9    0    9     9          0         0 264555112  996099    0    0    0     0       0          0
  imq0:       0       0    0    0    0     0          0         0        0       0    0    0    0     0       0          0
"""

DATE_AND_UPTIME = "1598394934\n1810779.30 1804583.20\n"

UNAME = "Linux karabor 2.6.22.19 #31 Thu Jul 16 01:30:27 CEST 2020 mips Tomato\n"

NETDEV = "netdev={'eth0':{rx:0xab7666a1,tx:0x6a2c1014},'br0':{rx:0xd6dd237d,tx:0x0}};"

COMMAND_OUTPUTS = {
    "cat /proc/stat": PROC_STAT,
    "cat /proc/meminfo": PROC_MEMINFO,
    "cat /proc/loadavg": PROC_LOADAVG,
    "cat /proc/net/dev": PROC_NET_DEV,
    "date +%s && cat /proc/uptime": DATE_AND_UPTIME,
    "uname -a": UNAME,
}


class FakeRouter:
    """Records requests and serves canned command output."""

    def __init__(self, port: int) -> None:
        self.port = port
        self.requests: list[tuple[str, list[tuple[str, str]]]] = []
        self.outputs = dict(COMMAND_OUTPUTS)
        self.netdev = NETDEV
        self.failing_commands: set[str] = set()
        self.status_override: Optional[int] = None

    @property
    def address(self) -> str:
        return f"127.0.0.1:{self.port}"

    def device_config(self, **overrides) -> DeviceConfig:
        values = dict(
            address=self.address,
            username=ROUTER_USERNAME,
            password=ROUTER_PASSWORD,
            http_id=ROUTER_HTTP_ID,
            request_timeout_seconds=5.0,
        )
        values.update(overrides)
        return DeviceConfig(**values)

    async def _authorise(self, request: web.Request) -> list[tuple[str, str]]:
        expected = aiohttp.BasicAuth(ROUTER_USERNAME, ROUTER_PASSWORD).encode()
        if request.headers.get("Authorization") != expected:
            raise web.HTTPUnauthorized(text="Unauthorized")
        fields = parse_qsl(await request.text(), keep_blank_values=True)
        self.requests.append((request.path, fields))
        return fields

    async def handle_shell(self, request: web.Request) -> web.Response:
        fields = dict(await self._authorise(request))
        if self.status_override is not None:
            return web.Response(status=self.status_override, text="forced failure")
        command = fields.get("command", "")
        if command in self.failing_commands or command not in self.outputs:
            return web.Response(status=500, text=f"cannot run {command}")
        return web.Response(text=self.outputs[command])

    async def handle_update(self, request: web.Request) -> web.Response:
        fields = dict(await self._authorise(request))
        if self.status_override is not None:
            return web.Response(status=self.status_override, text="forced failure")
        if fields.get("exec") != "netdev":
            return web.Response(status=400, text="unknown exec")
        return web.Response(text=self.netdev, content_type="text/javascript")


@pytest_asyncio.fixture
async def fake_router(unused_tcp_port_factory):
    port = unused_tcp_port_factory()
    router = FakeRouter(port)

    app = web.Application()
    app.router.add_post("/shell.cgi", router.handle_shell)
    app.router.add_post("/update.cgi", router.handle_update)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()

    try:
        yield router
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def router_client(fake_router):
    client = TomatoClient(fake_router.device_config())
    try:
        yield client
    finally:
        await client.aclose()
