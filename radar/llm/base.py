"""Base class for the language model backends behind the llm analyzer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from radar.retry import retry_async


@dataclass
class LLMResponse:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0


class BaseLLMProvider(ABC):
    """One configured backend bound to a single model."""

    temperature = 0.2
    max_tokens = 1500

    def __init__(
        self,
        model: str,
        api_key: str = "",
        base_url: str = "",
        max_retries: int = 2,
        timeout: float = 60,
        json_mode: bool = False,
    ):
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.max_retries = max_retries
        self.timeout = timeout
        self.json_mode = json_mode

    async def complete(self, prompt: str, system: str = "") -> LLMResponse:
        """Send one prompt, retrying transient failures."""
        return await retry_async(
            self._send, prompt, system, max_retries=self.max_retries,
        )

    @abstractmethod
    async def _send(self, prompt: str, system: str) -> LLMResponse:
        ...
