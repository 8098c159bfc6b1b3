"""
Parser for the semi-structured summary the model returns.

Expected shape (anything else is skipped, never rejected):

    INSIGHTS:
    - I keep waiting for permission
    - ...

    LINKS:
    - [[Fear of failure]]
    - ...
"""

from __future__ import annotations

from introspector.models import SummaryResult

_HEADERS = {
    "INSIGHTS:": "insights",
    "LINKS:": "links",
}

_BULLET = "- "


def parse_summary(text: str) -> SummaryResult:
    """Single line-oriented pass. Total: malformed input yields empty lists."""
    result = SummaryResult()
    section = None

    for line in (text or "").splitlines():
        stripped = line.strip()
        header = _HEADERS.get(stripped.upper())
        if header:
            section = header
            continue
        if not stripped.startswith(_BULLET) or section is None:
            continue
        item = stripped[len(_BULLET):].strip()
        if item:
            getattr(result, section).append(item)

    return result


class SummaryParser:
    """Object wrapper around parse_summary, for callers that inject a parser."""

    def parse(self, text: str) -> SummaryResult:
        return parse_summary(text)
