"""
OpenRouter backend — one key, many hosted models.
Speaks the OpenAI-compatible chat completions format; the system prompt
travels as a leading `system` message.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx

from introspector.backends.base import BaseBackend
from introspector.errors import ProviderResponseError, UnexpectedResponseShape

logger = logging.getLogger(__name__)


class OpenRouterBackend(BaseBackend):
    """Backend for OpenRouter API."""

    @property
    def endpoint(self) -> str:
        return f"{self.url}/chat/completions"

    def _headers(self) -> dict:
        """Build request headers with auth."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": "https://github.com/introspector/introspector",
            "X-Title": "Introspector",
        }

    def _body(self, system_prompt: str, messages: list[dict], max_tokens: int, stream: bool) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "max_tokens": max_tokens,
            "stream": stream,
        }

    @staticmethod
    def _error_text(data: dict) -> str | None:
        error = data.get("error")
        if not error:
            return None
        if isinstance(error, dict):
            return error.get("message") or str(error)
        return str(error)

    async def stream(
        self, system_prompt: str, messages: list[dict], max_tokens: int
    ) -> AsyncIterator[str]:
        body = self._body(system_prompt, messages, max_tokens, stream=True)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                async with client.stream(
                    "POST", self.endpoint, headers=self._headers(), json=body,
                ) as resp:
                    await self._raise_for_status(resp)
                    async for payload in self._iter_sse_data(resp):
                        if payload == "[DONE]":
                            return
                        chunk = self._decode(payload)
                        error = self._error_text(chunk)
                        if error:
                            raise ProviderResponseError(error)
                        choices = chunk.get("choices") or [{}]
                        delta = (choices[0] or {}).get("delta") or {}
                        content = delta.get("content")
                        if content:
                            yield content
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e

    async def complete(
        self, system_prompt: str, messages: list[dict], max_tokens: int
    ) -> str:
        body = self._body(system_prompt, messages, max_tokens, stream=False)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.endpoint, headers=self._headers(), json=body)
        except httpx.HTTPError as e:
            raise self._transport_error(e) from e

        if resp.status_code >= 400:
            raise ProviderResponseError(resp.text, status_code=resp.status_code)

        data = self._decode(resp.text)
        error = self._error_text(data)
        if error:
            raise ProviderResponseError(error)

        choices = data.get("choices")
        if not isinstance(choices, list):
            raise UnexpectedResponseShape("OpenRouter response has no choices")
        if not choices:
            raise ProviderResponseError("No response from OpenRouter")

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise UnexpectedResponseShape("OpenRouter choice has no message")

        content = message.get("content")
        if content is not None and not isinstance(content, str):
            raise UnexpectedResponseShape("OpenRouter message content is not text")
        if not content:
            raise ProviderResponseError("No response from OpenRouter")

        logger.debug("OpenRouter '%s' returned %d chars", self.model, len(content))
        return content
