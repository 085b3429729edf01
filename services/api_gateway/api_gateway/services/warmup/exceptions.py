"""Warmup — exception types.

Probe failures are not exceptions: they come back as ``WarmupOutcome``
values and feed the retry decision. Only address parsing raises, and the
resolver handles that locally.
"""

from __future__ import annotations


class WarmupError(Exception):
    """Base class for warmup errors."""


class DestinationParseError(WarmupError):
    """A configured destination address is not an absolute http(s) URI."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Invalid destination address {address!r}: {reason}")
        self.address = address
        self.reason = reason
