"""Exception types shared by collectors and the scrape coordinator."""

from __future__ import annotations


class ParseError(ValueError):
    """Raised when a device response does not match the expected format."""

    def __init__(self, family: str, message: str, *, body: str | None = None) -> None:
        super().__init__(f"{family}: {message}")
        self.family = family
        self.body = body


class CollectorFailure(RuntimeError):
    """A transport or parse failure attributed to one collector."""

    def __init__(self, collector: str, reason: str) -> None:
        super().__init__(f"collector '{collector}' failed: {reason}")
        self.collector = collector
        self.reason = reason
