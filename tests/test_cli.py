"""
Tests for the CLI surface (parser, terminal collaborators, simple commands).
"""

import os

import pytest

from introspector.cli import FileContext, PrintPersister, build_parser, cmd_styles
from introspector.collaborators import ContextProvider, NotePersister
from introspector.constants import CONTEXT_FILE_LIMIT, CONTEXT_SNIPPET_LENGTH
from introspector.models import SummaryResult


@pytest.mark.parametrize("name", ["session", "talk", "start"])
def test_session_aliases(name):
    args = build_parser().parse_args([name, "--style", "warm", "-c", "a.md", "-c", "b.md"])
    assert args.style == "warm"
    assert args.context_file == ["a.md", "b.md"]
    assert args.func.__name__ == "cmd_session"


def test_tap_options():
    args = build_parser().parse_args(["log", "-n", "5", "--no-follow", "--role", "summary"])
    assert args.last == 5
    assert args.no_follow
    assert args.role == "summary"
    assert args.func.__name__ == "cmd_tap"


def test_flash_aliases():
    for name in ("flash", "info", "config"):
        assert build_parser().parse_args([name]).func.__name__ == "cmd_flash"


def _note(path, text, age):
    path.write_text(text, encoding="utf-8")
    st = path.stat()
    os.utime(path, (st.st_atime - age, st.st_mtime - age))
    return path


def test_file_context_is_a_context_provider(tmp_path):
    provider = FileContext([_note(tmp_path / "Daily.md", "hello", 0)])
    assert isinstance(provider, ContextProvider)
    assert provider.get_context({}) == 'From "Daily":\nhello'


def test_file_context_truncates_and_orders_newest_first(tmp_path):
    old = _note(tmp_path / "Old.md", "x" * (CONTEXT_SNIPPET_LENGTH + 20), 100)
    new = _note(tmp_path / "New.md", "short", 0)
    text = FileContext([old, new]).get_context({})

    first, second = text.split("\n\n---\n\n")
    assert first == 'From "New":\nshort'
    assert second == 'From "Old":\n' + "x" * CONTEXT_SNIPPET_LENGTH + "..."


def test_file_context_limits_file_count_and_skips_missing(tmp_path):
    paths = [_note(tmp_path / f"n{i:02}.md", f"note {i}", i) for i in range(CONTEXT_FILE_LIMIT + 3)]
    paths.append(tmp_path / "missing.md")
    text = FileContext(paths).get_context({})

    assert text.count("From ") == CONTEXT_FILE_LIMIT
    assert 'From "n00"' in text
    assert f'From "n{CONTEXT_FILE_LIMIT:02}"' not in text
    assert "missing" not in text


def test_file_context_without_files_is_empty():
    assert FileContext().get_context({}) == ""


def test_print_persister(capsys):
    persister = PrintPersister()
    assert isinstance(persister, NotePersister)
    location = persister.save(
        SummaryResult(insights=["I rush"], links=["[[Pace]]"]),
        "Line one\nline two\nwhy?",
        "2026-10-19",
    )
    out = capsys.readouterr().out
    assert location == "<stdout>"
    assert "2026-10-19" in out
    assert "- I rush" in out
    assert "- [[Pace]]" in out
    assert "why?" in out


def test_styles_command(capsys):
    cmd_styles(None)
    out = capsys.readouterr().out
    assert "socratic" in out
    assert "Direct Challenger" in out
