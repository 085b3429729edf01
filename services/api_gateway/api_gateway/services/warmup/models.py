"""Warmup — value types shared by the resolver, prober and retry controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import httpx


@dataclass(frozen=True)
class ClusterConfig:
    """A configured cluster as seen by the warmup service (read-only)."""

    name: str
    warmup_path: str | None = None
    addresses: tuple[str, ...] = ()


@dataclass(frozen=True)
class WarmupTarget:
    """One destination probe: a cluster name plus an absolute probe URI."""

    cluster_name: str
    uri: httpx.URL

    @property
    def key(self) -> tuple[str, str]:
        return self.cluster_name, str(self.uri).casefold()


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class WarmupOutcome:
    """Classified result of a single probe attempt."""

    kind: OutcomeKind
    status_code: int | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, status_code: int) -> WarmupOutcome:
        return cls(OutcomeKind.SUCCESS, status_code=status_code)

    @classmethod
    def server_error(cls, status_code: int) -> WarmupOutcome:
        return cls(OutcomeKind.SERVER_ERROR, status_code=status_code)

    @classmethod
    def timeout(cls) -> WarmupOutcome:
        return cls(OutcomeKind.TIMEOUT)

    @classmethod
    def transport_error(cls, error: BaseException) -> WarmupOutcome:
        return cls(OutcomeKind.TRANSPORT_ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


class WarmupState(str, Enum):
    """Terminal state of one target's retry loop."""

    WARMED = "warmed"
    EXHAUSTED = "exhausted"
