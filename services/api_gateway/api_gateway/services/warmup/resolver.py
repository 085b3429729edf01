"""Warmup — destination resolver.

Turns the configured clusters into a deduplicated, ordered list of probe
targets. Bad addresses are logged and skipped, never fatal.
"""

from __future__ import annotations

from collections.abc import Iterable

import httpx
import structlog

from api_gateway.services.warmup.exceptions import DestinationParseError
from api_gateway.services.warmup.models import ClusterConfig, WarmupTarget

logger = structlog.get_logger()


def parse_destination(address: str) -> httpx.URL:
    """Parse *address* as an absolute URI or raise ``DestinationParseError``."""
    try:
        url = httpx.URL(address.strip())
    except httpx.InvalidURL as exc:
        raise DestinationParseError(address, str(exc)) from exc

    if not url.scheme or not url.host:
        raise DestinationParseError(address, "not an absolute URI")
    return url


def build_warmup_uri(base: httpx.URL, warmup_path: str | None) -> httpx.URL:
    """Compose the probe URI for one destination.

    A blank path probes the address as-is. A path starting with ``/``
    replaces everything after the authority. Anything else is resolved
    relative to the address (RFC 3986), so ``health`` against
    ``http://host/base`` gives ``http://host/health``.
    """
    if not warmup_path or not warmup_path.strip():
        return base

    try:
        if warmup_path.startswith("/"):
            authority = base.netloc.decode("ascii")
            return httpx.URL(f"{base.scheme}://{authority}{warmup_path}")
        return base.join(warmup_path)
    except httpx.InvalidURL as exc:
        raise DestinationParseError(str(base), f"bad warmup path {warmup_path!r}") from exc


def resolve_targets(
    clusters: Iterable[ClusterConfig],
    default_path: str | None,
) -> list[WarmupTarget]:
    """Resolve every cluster destination into a unique ``WarmupTarget``.

    Uniqueness is on ``(cluster name, probe URI)`` with the URI compared
    case-insensitively; the first occurrence wins and config order is kept.
    """
    seen: set[tuple[str, str]] = set()
    targets: list[WarmupTarget] = []

    for cluster in clusters:
        path = cluster.warmup_path
        if not path or not path.strip():
            path = default_path

        for address in cluster.addresses:
            if not address or not address.strip():
                continue

            try:
                uri = build_warmup_uri(parse_destination(address), path)
            except DestinationParseError as exc:
                logger.warning(
                    "warmup_invalid_address",
                    cluster=cluster.name,
                    address=address,
                    reason=exc.reason,
                )
                continue

            target = WarmupTarget(cluster.name, uri)
            if target.key in seen:
                continue
            seen.add(target.key)
            targets.append(target)

    return targets
