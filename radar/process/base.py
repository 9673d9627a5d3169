"""Abstract base class for processors."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from typing import Any

from radar.config import RadarSnapshot, get_pipeline_setting


class BaseProcessor(ABC):
    """A batch step over stored raw items."""

    batch_setting = "batch_size"
    default_batch_size = 100

    def __init__(self, config: dict, snapshot: RadarSnapshot):
        self.config = config
        self.snapshot = snapshot

    @property
    def batch_size(self) -> int:
        return int(get_pipeline_setting(self.config, self.batch_setting, self.default_batch_size))

    @abstractmethod
    async def process(self, conn: sqlite3.Connection) -> Any:
        """Process one bounded batch and return the stage result."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Processor name."""
        ...
