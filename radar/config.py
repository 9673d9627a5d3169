"""Load configuration from YAML with env var substitution, and validate catalogs."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, HttpUrl, ValidationError

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigError(ValueError):
    """Raised when configuration is missing, malformed or fails validation."""


class CompetitorConfig(BaseModel):
    """A tracked competitor from competitors.yaml."""

    model_config = {"frozen": True}

    name: str
    website: HttpUrl | None = None
    verticals: tuple[str, ...]
    keywords: tuple[str, ...]
    category: Literal[
        "PLATFORM", "AI_VOICE", "AI_CHAT", "AI_ANALYTICS", "RECEPTIONIST", "CRM", "FSM",
    ]


class SourceConfig(BaseModel):
    """A content origin from sources.yaml."""

    model_config = {"frozen": True}

    name: str
    base_url: str
    source_type: Literal["official", "industry", "reviews", "jobs"]
    trust_tier: Literal["HIGH", "MEDIUM", "LOW"]


@dataclass(frozen=True)
class RadarSnapshot:
    """Read-only catalog for one job run. Order of competitors is significant."""

    competitors: tuple[CompetitorConfig, ...] = ()
    sources: tuple[SourceConfig, ...] = ()

    def competitor_by_name(self, name: str) -> CompetitorConfig | None:
        for comp in self.competitors:
            if comp.name.lower() == name.lower():
                return comp
        return None

    def competitors_in_vertical(self, vertical: str) -> list[CompetitorConfig]:
        return [c for c in self.competitors if vertical in c.verticals]

    def sources_by_type(self, source_type: str) -> list[SourceConfig]:
        return [s for s in self.sources if s.source_type == source_type]

    def sources_by_trust_tier(self, tier: str) -> list[SourceConfig]:
        return [s for s in self.sources if s.trust_tier == tier]


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            if key and key not in os.environ:
                os.environ[key] = value.strip().strip("'\"")


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        match = _ENV_PATTERN.fullmatch(value)
        if match:
            return os.environ.get(match.group(1), "")
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def _read_yaml(path: Path) -> Any:
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = _read_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    config = _resolve_env_vars(raw)
    config.setdefault("_base_dir", str(path.parent))
    return config


def _catalog_entries(config: dict, key: str, default_file: str) -> list:
    """Return the raw list for `key`, inline in config or from its catalog file."""
    if key in config:
        entries = config[key]
    else:
        filename = (config.get("catalog") or {}).get(f"{key}_file", default_file)
        path = Path(filename)
        if not path.is_absolute():
            path = Path(config.get("_base_dir", ".")) / path
        if not path.is_file():
            raise ConfigError(f"Catalog file not found: {path}")
        data = _read_yaml(path) or {}
        if not isinstance(data, dict) or key not in data:
            raise ConfigError(f"{path} must contain a top-level '{key}' list")
        entries = data[key]

    if not isinstance(entries, list):
        raise ConfigError(f"'{key}' must be a list")
    return entries


def load_competitors(config: dict) -> tuple[CompetitorConfig, ...]:
    entries = _catalog_entries(config, "competitors", "config/competitors.yaml")
    try:
        return tuple(CompetitorConfig.model_validate(e) for e in entries)
    except ValidationError as exc:
        raise ConfigError(f"Invalid competitor catalog: {exc}") from exc


def load_sources(config: dict) -> tuple[SourceConfig, ...]:
    entries = _catalog_entries(config, "sources", "config/sources.yaml")
    try:
        return tuple(SourceConfig.model_validate(e) for e in entries)
    except ValidationError as exc:
        raise ConfigError(f"Invalid source catalog: {exc}") from exc


def load_snapshot(config: dict) -> RadarSnapshot:
    """Load and validate both catalogs once for a job run."""
    return RadarSnapshot(
        competitors=load_competitors(config),
        sources=load_sources(config),
    )


def get_pipeline_setting(config: dict, key: str, default: Any) -> Any:
    return config.get("pipeline", {}).get(key, default)


def get_analysis_config(config: dict) -> dict:
    """Analyzer strategy and LLM timeout."""
    cfg = config.get("analysis", {})
    return {
        "strategy": cfg.get("strategy", "rules"),
        "llm_timeout": float(cfg.get("llm_timeout", 30)),
    }


def get_llm_task_config(config: dict, task: str) -> dict:
    """Get provider name and model for a given LLM task."""
    llm_cfg = config.get("llm", {})
    task_cfg = llm_cfg.get("tasks", {}).get(task, {})
    provider_name = task_cfg.get("provider", "anthropic")
    provider_cfg = llm_cfg.get("providers", {}).get(provider_name, {})

    return {
        "provider_name": provider_name,
        "provider_type": provider_cfg.get("type", provider_name),
        "api_key": provider_cfg.get("api_key", ""),
        "base_url": provider_cfg.get("base_url", ""),
        "model": task_cfg.get("model") or provider_cfg.get("default_model", ""),
        "max_retries": provider_cfg.get("max_retries", 2),
        "timeout": provider_cfg.get("timeout", 60),
        "json_mode": provider_cfg.get("json_mode", False),
    }


def get_db_path(config: dict) -> str:
    """Get database path from config."""
    return config.get("database", {}).get("path", "data/radar.db")
