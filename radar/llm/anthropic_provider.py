"""Anthropic Messages API backend."""

from __future__ import annotations

import anthropic

from radar.llm import register_provider
from radar.llm.base import BaseLLMProvider, LLMResponse


@register_provider("anthropic")
class AnthropicProvider(BaseLLMProvider):

    async def _send(self, prompt: str, system: str) -> LLMResponse:
        client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        message = await client.messages.create(**kwargs)
        return LLMResponse(
            text="".join(block.text for block in message.content if block.type == "text"),
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )
