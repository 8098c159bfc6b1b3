"""
Tests for the summary parser.
Run with: pytest tests/test_summary_parser.py
"""

from introspector.models import SummaryResult
from introspector.summary_parser import SummaryParser, parse_summary


def test_parses_both_sections():
    result = parse_summary("INSIGHTS:\n- a\n- b\n\nLINKS:\n- [[X]]\n- [[Y]]")
    assert result.insights == ["a", "b"]
    assert result.links == ["[[X]]", "[[Y]]"]


def test_ignores_bullets_before_any_header():
    """Noise and orphan bullets before a header are dropped."""
    result = parse_summary("noise\n- ignored\nINSIGHTS:\n- kept")
    assert result.insights == ["kept"]
    assert result.links == []


def test_headers_are_case_insensitive_and_trimmed():
    result = parse_summary("  insights:  \n- one\n\tLinks:\n- [[Two]]")
    assert result.insights == ["one"]
    assert result.links == ["[[Two]]"]


def test_non_dash_lines_inside_section_are_ignored():
    text = "INSIGHTS:\nHere is what I found\n- real insight\n* star bullet\n1. numbered\n-no space"
    assert parse_summary(text).insights == ["real insight"]


def test_empty_bullets_are_skipped():
    result = parse_summary("INSIGHTS:\n- \n-    \n- kept  ")
    assert result.insights == ["kept"]


def test_indented_bullets_count():
    result = parse_summary("LINKS:\n   - [[Indented]]")
    assert result.links == ["[[Indented]]"]


def test_header_with_trailing_text_is_not_a_header():
    """Only a line that is exactly the header switches sections."""
    result = parse_summary("INSIGHTS: below\n- stray")
    assert result == SummaryResult()


def test_link_syntax_is_not_validated():
    result = parse_summary("LINKS:\n- not a wiki link\n- [[Real]]")
    assert result.links == ["not a wiki link", "[[Real]]"]


def test_sections_can_repeat():
    text = "INSIGHTS:\n- a\nLINKS:\n- [[L]]\nINSIGHTS:\n- b"
    result = parse_summary(text)
    assert result.insights == ["a", "b"]
    assert result.links == ["[[L]]"]


def test_total_on_garbage():
    for text in ("", "\n\n", "LINKS:", "- just a dash", None):
        result = parse_summary(text)
        assert result.insights == []
        assert result.links == []


def test_windows_line_endings():
    result = parse_summary("INSIGHTS:\r\n- a\r\nLINKS:\r\n- [[B]]\r\n")
    assert result.insights == ["a"]
    assert result.links == ["[[B]]"]


def test_parser_object_matches_function():
    text = "INSIGHTS:\n- same\nLINKS:\n- [[Same]]"
    assert SummaryParser().parse(text) == parse_summary(text)
