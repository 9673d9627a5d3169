"""Processor registry for normalization and clustering."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from radar.process.base import BaseProcessor

PROCESSORS: dict[str, type[BaseProcessor]] = {}


def register_processor(name: str):
    """Decorator to register a processor."""

    def decorator(cls):
        PROCESSORS[name] = cls
        return cls

    return decorator


from radar.process.cluster import ClusterProcessor  # noqa: E402, F401
from radar.process.normalize import NormalizeProcessor  # noqa: E402, F401
