"""
Tests for the session data model.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from introspector.models import Message, Role, Session, Style


def test_style_options_in_display_order():
    assert Style.options() == [
        ("socratic", "Socratic Guide"),
        ("warm", "Warm Therapist"),
        ("challenger", "Direct Challenger"),
    ]


def test_style_parse():
    assert Style.parse("WARM") is Style.WARM
    assert Style.parse(" challenger ") is Style.CHALLENGER
    assert Style.parse(Style.SOCRATIC) is Style.SOCRATIC
    with pytest.raises(ValueError, match="Unknown style"):
        Style.parse("stoic")


def test_message_is_immutable():
    msg = Message(Role.USER, "hi")
    with pytest.raises(FrozenInstanceError):
        msg.content = "changed"
    assert msg.to_dict() == {"role": "user", "content": "hi"}


def test_session_appends_in_order():
    session = Session(style=Style.SOCRATIC)
    session.append(Role.ASSISTANT, "haiku?")
    session.append(Role.USER, "answer")
    assert [m.role for m in session.messages] == [Role.ASSISTANT, Role.USER]
    assert session.history() == [
        {"role": "assistant", "content": "haiku?"},
        {"role": "user", "content": "answer"},
    ]
    assert session.last_assistant_reply == "haiku?"


def test_transcript_labels_speakers():
    session = Session(style=Style.WARM)
    session.append(Role.ASSISTANT, "Why now?")
    session.append(Role.USER, "Because.")
    assert session.transcript() == "Introspector: Why now?\n\nYou: Because."


def test_start_date_is_iso_day():
    session = Session(style=Style.WARM, started_at=datetime(2026, 3, 7, 23, 59, tzinfo=timezone.utc))
    assert session.start_date == "2026-03-07"


def test_sessions_get_distinct_ids():
    assert Session(style=Style.WARM).id != Session(style=Style.WARM).id


def test_contract_constants():
    from introspector import constants
    assert constants.MAX_CONVERSATION_TOKENS == 500
    assert constants.MAX_SUMMARY_TOKENS == 1000
    assert constants.CONTEXT_FILE_LIMIT == 10
    assert constants.CONTEXT_SNIPPET_LENGTH == 500
