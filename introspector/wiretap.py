"""
Wiretap — a structured record of every committed turn.

Two parts:
  1. WireLog: appends one JSONL entry per committed message and per summary
  2. live_tap(): reads the JSONL and renders a colour-coded view

Only committed messages reach the wire. A stream that fails or is
abandoned leaves no trace here, exactly as it leaves none in the session.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

# ANSI colors
C_RESET = "\033[0m"
C_BOLD = "\033[1m"
C_DIM = "\033[2m"
C_USER = "\033[96m"      # cyan
C_ASSISTANT = "\033[93m"  # yellow
C_SUMMARY = "\033[92m"    # green
C_MODEL = "\033[95m"      # magenta
C_TIME = "\033[90m"       # gray
C_BORDER = "\033[90m"     # gray

ROLE_COLORS = {
    "user": C_USER,
    "assistant": C_ASSISTANT,
    "summary": C_SUMMARY,
}

ROLE_ICONS = {
    "user": "▶",
    "assistant": "◀",
    "summary": "✦",
}

MAX_CONTENT_CHARS = 2000


class WireLog:
    """
    Structured JSONL logger for sessions.

    Format:
        {"ts": "...", "dir": "inbound|outbound", "role": "...",
         "model": "...", "session": "...", "len": 123, "content": "..."}
    """

    def __init__(self, log_path: str | Path):
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = None

    def _ensure_open(self):
        if self._file is None:
            self._file = open(self.log_path, "a", buffering=1)  # line-buffered

    def log(
        self,
        direction: str,
        role: str,
        content: str,
        model: str = "",
        session_id: str = "",
    ):
        """Write a wire log entry."""
        self._ensure_open()
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "dir": direction,
            "role": role,
            "model": model,
            "session": session_id[:16] if session_id else "",
            "len": len(content),
        }

        if len(content) <= MAX_CONTENT_CHARS:
            entry["content"] = content
        else:
            half = MAX_CONTENT_CHARS // 2
            entry["content"] = (
                content[:half]
                + f"\n\n[... {len(content) - MAX_CONTENT_CHARS} chars truncated ...]\n\n"
                + content[-half:]
            )

        self._file.write(json.dumps(entry, ensure_ascii=False) + "\n")

    def close(self):
        if self._file:
            self._file.close()
            self._file = None


def format_entry(entry: dict, raw: bool = False) -> str:
    """Format a single wire log entry for display."""
    if raw:
        return json.dumps(entry, ensure_ascii=False)

    ts = entry.get("ts", "")
    try:
        time_str = datetime.fromisoformat(ts).strftime("%H:%M:%S")
    except (ValueError, TypeError):
        time_str = ts[:8] if ts else "??:??:??"

    role = entry.get("role", "?")
    model = entry.get("model", "")
    session = entry.get("session", "")
    content = entry.get("content", "")

    role_color = ROLE_COLORS.get(role, C_RESET)
    icon = ROLE_ICONS.get(role, "?")
    arrow = f"{C_DIM}──▶{C_RESET}" if entry.get("dir") == "inbound" else f"{C_DIM}◀──{C_RESET}"

    header = f"  {C_TIME}{time_str}{C_RESET} {arrow} {role_color}{C_BOLD}{icon} {role.upper()}{C_RESET}"
    if model:
        header += f"  {C_MODEL}[{model}]{C_RESET}"
    header += f"  {C_DIM}({entry.get('len', 0)} chars){C_RESET}"
    if session:
        header += f"  {C_DIM}session:{session}{C_RESET}"

    lines = [header]
    content_lines = content.split("\n") if content else []
    for cline in content_lines[:15]:
        lines.append(f"      {cline}")
    if len(content_lines) > 15:
        lines.append(f"      {C_DIM}[... {len(content_lines) - 15} more lines]{C_RESET}")

    lines.append(f"  {C_BORDER}{'─' * 60}{C_RESET}")
    return "\n".join(lines)


def read_entries(log_path: str | Path, role_filter: str | None = None) -> list[dict]:
    """Parse every valid entry in the log, skipping corrupt lines."""
    entries = []
    with open(log_path) as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Skipping corrupt wire entry: %.80s", line)
                continue
            if role_filter and entry.get("role") != role_filter:
                continue
            entries.append(entry)
    return entries


def live_tap(
    log_path: str | Path,
    follow: bool = True,
    last_n: int = 20,
    role_filter: str | None = None,
    raw: bool = False,
):
    """Tail the wire log, optionally following new entries until Ctrl+C."""
    wire_path = Path(log_path)

    if not wire_path.exists():
        print(f"  ✗  No wire log found at {wire_path}")
        print("     Run a session first: introspector session")
        return

    if not raw:
        print(f"  ☎  Tapping into {wire_path}")
        print(f"  {C_BORDER}{'═' * 60}{C_RESET}")

    for entry in read_entries(wire_path, role_filter)[-last_n:]:
        print(format_entry(entry, raw=raw))

    if not follow:
        return

    if not raw:
        print(f"\n  {C_DIM}[listening for new turns... Ctrl+C to stop]{C_RESET}\n")

    try:
        with open(wire_path) as f:
            f.seek(0, 2)
            while True:
                line = f.readline()
                if not line:
                    time.sleep(0.1)
                    continue
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if role_filter and entry.get("role") != role_filter:
                    continue
                print(format_entry(entry, raw=raw))
    except KeyboardInterrupt:
        if not raw:
            print(f"\n  {C_DIM}[tap closed]{C_RESET}")
