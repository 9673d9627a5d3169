"""Abstract base class for analyzers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from radar.config import RadarSnapshot
from radar.models import AnalysisResult, StoryItem


class BaseAnalyzer(ABC):
    """Turns one cluster's items into an AnalysisResult."""

    def __init__(self, config: dict, snapshot: RadarSnapshot):
        self.config = config
        self.snapshot = snapshot

    @abstractmethod
    async def analyze(self, items: Sequence[StoryItem]) -> AnalysisResult:
        """Analyze a non-empty list of items."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name."""
        ...
