"""Chat completions backend for OpenAI-compatible servers (Ollama, vLLM, LM Studio)."""

from __future__ import annotations

import httpx

from radar.llm import register_provider
from radar.llm.base import BaseLLMProvider, LLMResponse


@register_provider("openai_compatible")
class OpenAICompatibleProvider(BaseLLMProvider):

    async def _send(self, prompt: str, system: str) -> LLMResponse:
        messages = [{"role": "user", "content": prompt}]
        if system:
            messages.insert(0, {"role": "system", "content": system})

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        # Ask for a bare JSON object
        if self.json_mode:
            payload["response_format"] = {"type": "json_object"}

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                f"{self.base_url.rstrip('/')}/chat/completions", json=payload, headers=headers,
            )
            resp.raise_for_status()
            data = resp.json()

        usage = data.get("usage") or {}
        return LLMResponse(
            text=data["choices"][0]["message"]["content"] or "",
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )
