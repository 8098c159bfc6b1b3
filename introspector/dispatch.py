"""
Session controller — the caller side of the engine.

Serializes turns with a busy flag, fetches note context once per session,
routes "aha" turns straight to finalization and hands finished summaries
to the persister. Fragments are forwarded to `on_fragment` as they arrive
so a front end can render the reply while it streams.
"""

from __future__ import annotations

import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from introspector.collaborators import ContextProvider, LinkExistenceChecker, NotePersister
from introspector.engine import ConversationEngine
from introspector.errors import ProviderUnconfigured, SessionBusy
from introspector.models import Session, Style, SummaryResult

logger = logging.getLogger(__name__)


@dataclass
class TurnOutcome:
    """What one send()/finish() call produced."""
    reply: str = ""
    resolution_detected: bool = False
    summary: SummaryResult | None = None
    location: str | None = None

    @property
    def finished(self) -> bool:
        return self.summary is not None


class SessionController:
    def __init__(
        self,
        engine: ConversationEngine,
        context_provider: ContextProvider | None = None,
        link_checker: LinkExistenceChecker | None = None,
        persister: NotePersister | None = None,
        on_fragment: Callable[[str], object] | None = None,
        context_config: dict | None = None,
        default_style: Style = Style.SOCRATIC,
    ):
        self.engine = engine
        self.context_provider = context_provider
        self.link_checker = link_checker
        self.persister = persister
        self.on_fragment = on_fragment
        self.context_config = context_config or {}
        self.default_style = default_style
        self.busy = False

    @property
    def session(self) -> Session | None:
        return self.engine.session

    async def start(self, style: Style | str | None = None) -> str:
        """Begin a new session and return the opening text."""
        async with self._turn():
            if not self.engine.provider.is_configured():
                raise ProviderUnconfigured("Please configure your API key before starting a session.")
            context = ""
            if self.context_provider:
                context = self.context_provider.get_context(self.context_config)
            return await self._drain(self.engine.begin(style or self.default_style, context))

    async def send(self, text: str) -> TurnOutcome:
        """One user turn. An "aha" turn finishes the session instead of replying."""
        async with self._turn():
            reply = await self._drain(self.engine.advance(text))
            if self.engine.finalize_requested:
                return await self._finish()
            return TurnOutcome(reply=reply, resolution_detected=self.engine.resolution_detected)

    async def finish(self) -> TurnOutcome:
        async with self._turn():
            return await self._finish()

    async def _finish(self) -> TurnOutcome:
        result = await self.engine.finalize(self.link_checker)
        location = None
        if self.persister:
            session = self.engine.session
            location = self.persister.save(result, session.opening_text, session.start_date)
            logger.info("Session %s saved to %s", session.id[:8], location)
        return TurnOutcome(summary=result, location=location)

    @asynccontextmanager
    async def _turn(self):
        if self.busy:
            raise SessionBusy("Still working on the previous turn")
        self.busy = True
        try:
            yield
        finally:
            self.busy = False

    async def _drain(self, fragments: AsyncIterator[str]) -> str:
        parts: list[str] = []
        async for fragment in fragments:
            parts.append(fragment)
            if self.on_fragment:
                out = self.on_fragment(fragment)
                if inspect.isawaitable(out):
                    await out
        return "".join(parts)
