"""
Anthropic backend — direct access to the Messages API.

Streaming uses server-sent events; only `content_block_delta` events with
a `text_delta` carry text. An `error` event mid-stream fails the turn.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

import httpx

from introspector.backends.base import BaseBackend
from introspector.errors import ProviderResponseError, UnexpectedResponseShape

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicBackend(BaseBackend):
    """Backend for the Anthropic Messages API."""

    @property
    def endpoint(self) -> str:
        return f"{self.url}/v1/messages"

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _body(self, system_prompt: str, messages: list[dict], max_tokens: int, stream: bool) -> dict:
        body = {
            "model": self.model,
            "max_tokens": max_tokens,
            "system": system_prompt,
            "messages": messages,
        }
        if stream:
            body["stream"] = True
        return body

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
                        event = self._decode(payload)
                        etype = event.get("type")
                        if etype == "content_block_delta":
                            delta = event.get("delta") or {}
                            if delta.get("type") == "text_delta" and delta.get("text"):
                                yield delta["text"]
                        elif etype == "error":
                            error = event.get("error") or {}
                            raise ProviderResponseError(error.get("message") or payload)
                        elif etype == "message_stop":
                            return
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
        content = data.get("content")
        first = content[0] if isinstance(content, list) and content else None
        if not isinstance(first, dict) or first.get("type") != "text":
            raise UnexpectedResponseShape("Unexpected response type from Anthropic")

        text = first.get("text") or ""
        if not text:
            raise ProviderResponseError("No response from Anthropic")

        logger.debug("Anthropic '%s' returned %d chars", self.model, len(text))
        return text
