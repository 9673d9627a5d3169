"""Analyzer registry: deterministic rules and the optional LLM strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from radar.analyze.base import BaseAnalyzer
    from radar.config import RadarSnapshot

ANALYZERS: dict[str, type[BaseAnalyzer]] = {}


def register_analyzer(name: str):
    """Decorator to register an analyzer strategy."""

    def decorator(cls):
        ANALYZERS[name] = cls
        return cls

    return decorator


def get_analyzer(config: dict, snapshot: RadarSnapshot) -> BaseAnalyzer:
    """Build the analyzer named by analysis.strategy (default: rules)."""
    from radar.config import get_analysis_config

    strategy = get_analysis_config(config)["strategy"]
    if strategy not in ANALYZERS:
        raise ValueError(f"Unknown analysis strategy: {strategy}")
    return ANALYZERS[strategy](config, snapshot)


# Import implementations to trigger registration
from radar.analyze.deterministic import RuleBasedAnalyzer  # noqa: E402, F401
from radar.analyze.llm import LLMAnalyzer  # noqa: E402, F401
