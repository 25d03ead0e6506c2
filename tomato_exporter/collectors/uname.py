"""Kernel identity collector backed by ``uname -a``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..core import ParseError
from ..exposition import MetricSeries, MetricType, Sample
from .base import ShellCommandCollector

# The version field usually holds a build timestamp with spaces, so it is
# captured greedily between nodename/release and machine/operating system.
_UNAME_RE = re.compile(
    r"^(?P<sysname>[A-Za-z]+) (?P<nodename>\S+) "
    r"(?P<release>[0-9][^\s]*) (?P<version>.+) "
    r"(?P<machine>[A-Za-z0-9._-]+) (?P<os>[^\s]+)$"
)

UNKNOWN_DOMAINNAME = "(none)"


@dataclass(frozen=True, slots=True)
class KernelIdentity:
    sysname: str
    nodename: str
    release: str
    version: str
    machine: str
    domainname: str = UNKNOWN_DOMAINNAME


def parse_uname(body: str) -> KernelIdentity:
    lines = body.strip().splitlines()
    match = _UNAME_RE.match(lines[0].strip()) if lines else None
    if match is None:
        raise ParseError("uname", "unrecognised uname -a output", body=body)

    return KernelIdentity(
        sysname=match.group("sysname"),
        nodename=match.group("nodename"),
        release=match.group("release"),
        version=match.group("version"),
        machine=match.group("machine"),
    )


def project_uname(identity: KernelIdentity) -> list[MetricSeries]:
    labels = (
        ("domainname", identity.domainname),
        ("machine", identity.machine),
        ("nodename", identity.nodename),
        ("release", identity.release),
        ("sysname", identity.sysname),
        ("version", identity.version),
    )
    return [
        MetricSeries(
            "node_uname_info",
            "Labeled system information as provided by the uname system call",
            MetricType.GAUGE,
            (Sample(labels, 1.0),),
        )
    ]


class UnameCollector(ShellCommandCollector):
    name = "uname"
    command = "uname -a"

    def parse(self, body: str) -> KernelIdentity:
        return parse_uname(body)

    def project(self, record: KernelIdentity) -> list[MetricSeries]:
        return project_uname(record)
