"""
Conversation engine — one guided session from opening haiku to summary.

States:

    idle ──advance()──▶ streaming ──(stream exhausted)──▶ idle
      │                                                    │
      └──── "aha" in user text / finalize() ──▶ finalizing ──▶ done

begin() and advance() return async iterators of text fragments. The
assistant reply is committed to the session only after its stream is
fully consumed; a failed or abandoned stream commits nothing. Turns on
one engine must not overlap: the caller serializes them (see dispatch.py).

Resolution signals are deliberately simple substring checks:
  - the reply mentions both "capture" and "insight" → resolution_detected
  - the user writes "aha" → finalize_requested, no model turn is run
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from enum import Enum
from typing import AsyncIterator

from introspector.collaborators import LinkExistenceChecker
from introspector.errors import (
    InsufficientHistory,
    SessionBusy,
    SessionFinished,
    SessionNotStarted,
)
from introspector.models import Role, Session, Style, SummaryResult
from introspector.prompts import (
    build_summary_prompt,
    build_system_prompt,
    format_summary_request,
)
from introspector.summary_parser import parse_summary
from introspector.wiretap import WireLog

logger = logging.getLogger(__name__)

MIN_MESSAGES_TO_FINALIZE = 2


class EngineState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    DONE = "done"


def detect_resolution(reply: str) -> bool:
    """True when the guide is offering to capture an insight."""
    text = reply.lower()
    return "capture" in text and "insight" in text


def is_aha(user_text: str) -> bool:
    return "aha" in user_text.lower()


def merge_links(confirmed: list[str], suggested: list[str]) -> list[str]:
    """Union of both lists, confirmed first, first-seen order, no duplicates."""
    return list(dict.fromkeys([*confirmed, *suggested]))


class ConversationEngine:
    """
    Owns the session state and the streaming protocol.

    `provider` needs stream_start(), stream_continue() and
    complete_summary(); ProviderAdapter is the production one.
    """

    def __init__(self, provider, wire: WireLog | None = None):
        self.provider = provider
        self.wire = wire
        self.session: Session | None = None
        self.state = EngineState.IDLE
        self.resolution_detected = False
        self.finalize_requested = False

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    async def begin(self, style: Style | str, context_text: str = "") -> AsyncIterator[str]:
        """
        Start a fresh session (discarding any previous one) and stream the
        opening haiku. The context is captured here for the whole session.
        """
        if self.state is EngineState.STREAMING:
            raise SessionBusy("A turn is already streaming")

        session = Session(style=Style.parse(style), context_text=context_text or "")
        self.session = session
        self.state = EngineState.IDLE
        self.resolution_detected = False
        self.finalize_requested = False
        logger.info("Session %s started (style=%s, context=%d chars)",
                    session.id[:8], session.style.value, len(session.context_text))

        system_prompt = build_system_prompt(session.style, session.context_text)
        parts: list[str] = []
        async with aclosing(self._stream(self.provider.stream_start(system_prompt), parts)) as stream:
            async for fragment in stream:
                yield fragment

        opening = "".join(parts)
        session.opening_text = opening
        self._commit(session, Role.ASSISTANT, opening)

    async def advance(self, user_text: str) -> AsyncIterator[str]:
        """
        Send one user turn and stream the guide's reply.
        Blank input is ignored. The user message is kept even if the reply fails.
        """
        session = self._require_session()
        if self.state is EngineState.STREAMING:
            raise SessionBusy("A turn is already streaming")

        text = (user_text or "").strip()
        if not text:
            return

        self.resolution_detected = False
        self.finalize_requested = False
        self._commit(session, Role.USER, text)

        if is_aha(text):
            self.state = EngineState.FINALIZING
            self.finalize_requested = True
            logger.info("Session %s: aha from user, routing to finalize", session.id[:8])
            return

        system_prompt = build_system_prompt(session.style, session.context_text)
        fragments = self.provider.stream_continue(system_prompt, session.history())
        parts: list[str] = []
        async with aclosing(self._stream(fragments, parts)) as stream:
            async for fragment in stream:
                yield fragment

        reply = "".join(parts)
        self._commit(session, Role.ASSISTANT, reply)
        self.resolution_detected = detect_resolution(reply)
        if self.resolution_detected:
            logger.info("Session %s: guide offered to capture an insight", session.id[:8])

    async def finalize(self, link_checker: LinkExistenceChecker | None = None) -> SummaryResult:
        """
        Summarize the transcript into insights and suggested links.

        Links the checker confirms come first; unconfirmed ones are kept.
        """
        session = self._require_session()
        if self.state is EngineState.STREAMING:
            raise SessionBusy("A turn is already streaming")
        if len(session.messages) < MIN_MESSAGES_TO_FINALIZE:
            raise InsufficientHistory("Have a conversation first before finishing.")

        self.state = EngineState.FINALIZING
        try:
            raw = await self.provider.complete_summary(
                build_summary_prompt(),
                format_summary_request(session.transcript()),
            )
        except Exception:
            self.state = EngineState.IDLE
            self.finalize_requested = False
            raise

        result = parse_summary(raw)
        confirmed = [link for link in result.links if link_checker.exists(link)] if link_checker else []
        result.links = merge_links(confirmed, result.links)

        self.state = EngineState.DONE
        self.finalize_requested = False
        logger.info("Session %s finalized: %d insights, %d links (%d existing)",
                    session.id[:8], len(result.insights), len(result.links), len(confirmed))
        if self.wire:
            self.wire.log("outbound", "summary", raw, model=self._model(), session_id=session.id)
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_session(self) -> Session:
        if self.session is None:
            raise SessionNotStarted("Call begin() before sending turns")
        if self.state is EngineState.DONE:
            raise SessionFinished("Session already finalized; call begin() to start a new one")
        return self.session

    async def _stream(self, fragments: AsyncIterator[str], parts: list[str]) -> AsyncIterator[str]:
        """Relay fragments while recording them; always leaves the engine idle."""
        self.state = EngineState.STREAMING
        try:
            async with aclosing(fragments):
                async for fragment in fragments:
                    parts.append(fragment)
                    yield fragment
        finally:
            self.state = EngineState.IDLE

    def _commit(self, session: Session, role: Role, content: str) -> None:
        session.append(role, content)
        logger.debug("Session %s: committed %s message (%d chars)",
                     session.id[:8], role.value, len(content))
        if self.wire:
            direction = "inbound" if role is Role.USER else "outbound"
            self.wire.log(direction, role.value, content, model=self._model(), session_id=session.id)

    def _model(self) -> str:
        return str(getattr(self.provider, "model", "") or "")
