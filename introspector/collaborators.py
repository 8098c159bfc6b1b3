"""
Services the engine consumes but does not implement.

Structural typing only: any object with the right methods works. The
note-taking host supplies these (document search, link lookup, note
writing); Introspector never touches the user's files itself.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from introspector.models import SummaryResult


@runtime_checkable
class ContextProvider(Protocol):
    """
    Returns recent relevant snippets as one human-readable block.

    Implementations should honour CONTEXT_FILE_LIMIT and
    CONTEXT_SNIPPET_LENGTH from introspector.constants, label each snippet
    with its source title and mark truncated snippets with an ellipsis.
    The text is appended to the system prompt verbatim.
    """

    def get_context(self, config: dict) -> str:
        ...


@runtime_checkable
class LinkExistenceChecker(Protocol):
    """Reports whether a suggested link (e.g. "[[Title]]") names an existing note."""

    def exists(self, candidate_title: str) -> bool:
        ...


@runtime_checkable
class NotePersister(Protocol):
    """Stores a finished session and returns where it went."""

    def save(self, result: SummaryResult, opening_text: str, start_date: str) -> str:
        ...
