"""Language model backends, keyed by the `type` of a configured provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from radar.llm.base import BaseLLMProvider

PROVIDERS: dict[str, type[BaseLLMProvider]] = {}

_instances: dict[tuple[str, str], BaseLLMProvider] = {}


def register_provider(name: str):
    """Decorator to register a backend class under a provider type."""

    def decorator(cls):
        PROVIDERS[name] = cls
        return cls

    return decorator


def get_provider_for_task(config: dict, task: str) -> BaseLLMProvider:
    """Return the backend configured for `task`, one instance per provider and model."""
    from radar.config import get_llm_task_config

    task_cfg = get_llm_task_config(config, task)
    key = (task_cfg["provider_name"], task_cfg["model"])
    if key not in _instances:
        provider_cls = PROVIDERS.get(task_cfg["provider_type"])
        if provider_cls is None:
            raise ValueError(f"Unknown LLM provider type: {task_cfg['provider_type']}")
        _instances[key] = provider_cls(
            model=task_cfg["model"],
            api_key=task_cfg["api_key"],
            base_url=task_cfg["base_url"],
            max_retries=task_cfg["max_retries"],
            timeout=task_cfg["timeout"],
            json_mode=task_cfg["json_mode"],
        )
    return _instances[key]


def reset_providers() -> None:
    _instances.clear()


# Import implementations to trigger registration
from radar.llm.anthropic_provider import AnthropicProvider  # noqa: E402, F401
from radar.llm.openai_compat import OpenAICompatibleProvider  # noqa: E402, F401
