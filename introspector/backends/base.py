"""
Base backend abstraction.
Both provider variants implement this interface so the engine can treat
them uniformly: two streamed operations and one non-streamed summary call.
"""

from __future__ import annotations

import abc
import json
import logging
from contextlib import aclosing
from typing import AsyncIterator

import httpx

from introspector.constants import MAX_CONVERSATION_TOKENS, MAX_SUMMARY_TOKENS
from introspector.errors import ProviderResponseError, ProviderUnconfigured
from introspector.prompts import OPENING_USER_TURN

logger = logging.getLogger(__name__)


class BaseBackend(abc.ABC):
    """
    Abstract base for LLM backends.
    Holds configuration only; no per-session state lives here.
    """

    def __init__(
        self,
        name: str,
        url: str,
        api_key: str = "",
        model: str = "",
        timeout: float | None = None,
    ):
        self.name = name
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @abc.abstractmethod
    def stream(
        self, system_prompt: str, messages: list[dict], max_tokens: int
    ) -> AsyncIterator[str]:
        """
        Open a streamed completion.
        Yields text fragments in emission order; exhausts exactly once.
        """
        ...

    @abc.abstractmethod
    async def complete(
        self, system_prompt: str, messages: list[dict], max_tokens: int
    ) -> str:
        """Run one non-streamed completion and return its text."""
        ...

    # ------------------------------------------------------------------
    # Operations used by the engine
    # ------------------------------------------------------------------

    async def stream_start(self, system_prompt: str) -> AsyncIterator[str]:
        """Opening turn: a single synthetic user message."""
        self._require_key()
        messages = [{"role": "user", "content": OPENING_USER_TURN}]
        fragments = self._nonempty(self.stream(system_prompt, messages, MAX_CONVERSATION_TOKENS))
        async with aclosing(fragments):
            async for fragment in fragments:
                yield fragment

    async def stream_continue(
        self, system_prompt: str, history: list[dict]
    ) -> AsyncIterator[str]:
        """Continuation over the full ordered history."""
        self._require_key()
        fragments = self._nonempty(self.stream(system_prompt, list(history), MAX_CONVERSATION_TOKENS))
        async with aclosing(fragments):
            async for fragment in fragments:
                yield fragment

    async def complete_summary(self, system_prompt: str, user_text: str) -> str:
        self._require_key()
        messages = [{"role": "user", "content": user_text}]
        return await self.complete(system_prompt, messages, MAX_SUMMARY_TOKENS)

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def _require_key(self) -> None:
        if not self.api_key:
            raise ProviderUnconfigured(f"No API key configured for {self.name}")

    async def _nonempty(self, fragments: AsyncIterator[str]) -> AsyncIterator[str]:
        """Pass fragments through; a stream that produced no text is an error."""
        produced = False
        async with aclosing(fragments):
            async for fragment in fragments:
                produced = True
                yield fragment
        if not produced:
            raise ProviderResponseError(f"No response from {self.name}")

    @staticmethod
    async def _raise_for_status(resp: httpx.Response) -> None:
        """Raise with the raw body text on any non-success status."""
        if resp.status_code >= 400:
            body = await resp.aread()
            text = body.decode("utf-8", errors="replace")
            raise ProviderResponseError(text, status_code=resp.status_code)

    @staticmethod
    async def _iter_sse_data(resp: httpx.Response) -> AsyncIterator[str]:
        """Yield the payload of each `data:` line. Comments and event names are skipped."""
        async for line in resp.aiter_lines():
            if not line or not line.startswith("data:"):
                continue
            yield line[5:].strip()

    def _decode(self, payload: str) -> dict:
        try:
            data = json.loads(payload)
        except json.JSONDecodeError:
            raise ProviderResponseError(
                f"Malformed response from {self.name}: {payload[:200]}"
            ) from None
        if not isinstance(data, dict):
            raise ProviderResponseError(
                f"Malformed response from {self.name}: {payload[:200]}"
            )
        return data

    def _transport_error(self, e: httpx.HTTPError) -> ProviderResponseError:
        logger.warning("Backend '%s' request failed: %s", self.name, e)
        return ProviderResponseError(str(e) or e.__class__.__name__)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} url={self.url!r} model={self.model!r}>"
