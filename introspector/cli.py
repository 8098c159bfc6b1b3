#!/usr/bin/env python3
"""
Introspector CLI — a guided conversation with yourself, in the terminal.

    COMMAND         ALIASES         WHAT IT DOES
    --------        --------        ----------------------------------
    session         talk, start     Run an interactive introspection session
    flash           info, config    Show the effective provider config
    tap             log, tail       Watch the session wiretap
    styles          personalities   List the available guide styles

Inside a session, type /finish to summarize, /new to start over and
/quit to leave. Writing "aha" finishes the session on the spot.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from introspector import __version__
from introspector.constants import CONTEXT_FILE_LIMIT, CONTEXT_SNIPPET_LENGTH
from introspector.models import Style

logger = logging.getLogger(__name__)

DEFAULT_WIRE_PATH = "./data/wire.jsonl"


# ---------------------------------------------------------------------------
# Terminal collaborators
# ---------------------------------------------------------------------------

class FileContext:
    """
    Note context from --context-file paths, newest first.

    Takes at most CONTEXT_FILE_LIMIT files and the first
    CONTEXT_SNIPPET_LENGTH characters of each, labelled with the file's
    stem. Unreadable files are skipped.
    """

    def __init__(self, paths=()):
        self.paths = [Path(p) for p in paths]

    def get_context(self, config: dict) -> str:
        existing = []
        for path in self.paths:
            if path.is_file():
                existing.append(path)
            else:
                logger.warning("Context file not found: %s", path)
        existing.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        parts = []
        for path in existing[:CONTEXT_FILE_LIMIT]:
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping context file %s: %s", path, e)
                continue
            snippet = content[:CONTEXT_SNIPPET_LENGTH]
            if len(content) > CONTEXT_SNIPPET_LENGTH:
                snippet += "..."
            parts.append(f'From "{path.stem}":\n{snippet}')
        return "\n\n---\n\n".join(parts)


class PrintPersister:
    """Prints the summary instead of writing a note."""

    def save(self, result, opening_text: str, start_date: str) -> str:
        print(f"\n  ✦  Introspection — {start_date}\n")
        if opening_text:
            for line in opening_text.strip().splitlines():
                print(f"     {line}")
            print()
        print("  Insights")
        for insight in result.insights or ["(none)"]:
            print(f"   - {insight}")
        print("\n  Related notes")
        for link in result.links or ["(none)"]:
            print(f"   - {link}")
        print()
        return "<stdout>"


def _setup_logging():
    from introspector.config import get_config
    level = str(get_config().get("logging", {}).get("level", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _wire_from_config():
    from introspector.config import get_config
    from introspector.wiretap import WireLog
    w_cfg = get_config().get("wiretap", {}) or {}
    if not w_cfg.get("enabled", False):
        return None
    return WireLog(w_cfg.get("path", DEFAULT_WIRE_PATH))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def _run_session(args) -> int:
    from introspector.backends import ProviderAdapter
    from introspector.config import default_style, get_config
    from introspector.dispatch import SessionController
    from introspector.engine import ConversationEngine
    from introspector.errors import ConfigError, IntrospectorError, ProviderUnconfigured

    def echo(fragment: str):
        sys.stdout.write(fragment)
        sys.stdout.flush()

    try:
        fallback_style = default_style()
    except ConfigError as e:
        print(f"  ✗  {e}")
        return 1

    wire = _wire_from_config()
    controller = SessionController(
        engine=ConversationEngine(ProviderAdapter(), wire=wire),
        context_provider=FileContext(args.context_file or ()),
        persister=PrintPersister(),
        on_fragment=echo,
        context_config=get_config().get("context", {}) or {},
        default_style=fallback_style,
    )
    style = Style.parse(args.style) if args.style else None

    async def start() -> bool:
        print()
        try:
            await controller.start(style)
        except ProviderUnconfigured as e:
            print(f"  ✗  {e}")
            print("     Set provider.api_key in config.yaml (or INTROSPECTOR_API_KEY).")
            return False
        except IntrospectorError as e:
            print(f"\n  ✗  Failed to start session: {e}")
            return False
        print("\n")
        return True

    try:
        if not await start():
            return 1
        while True:
            try:
                text = (await asyncio.to_thread(input, "  you › ")).strip()
            except EOFError:
                break
            if not text:
                continue
            if text in ("/quit", "/exit", "/q"):
                break
            if text == "/new":
                if not await start():
                    return 1
                continue

            print()
            try:
                if text == "/finish":
                    outcome = await controller.finish()
                else:
                    outcome = await controller.send(text)
            except IntrospectorError as e:
                print(f"\n  ✗  {e}\n")
                continue

            if outcome.finished:
                break
            print("\n")
            if outcome.resolution_detected:
                print("  ✦  Sounds like an insight. Type /finish to capture it.\n")
    except KeyboardInterrupt:
        pass
    finally:
        if wire:
            wire.close()
    print("  [session closed]")
    return 0


def cmd_session(args):
    """Run an interactive session."""
    _setup_logging()
    try:
        code = asyncio.run(_run_session(args))
    except KeyboardInterrupt:
        print("\n  [session closed]")
        code = 0
    sys.exit(code)


def cmd_flash(args):
    """Show the effective provider config at a glance."""
    from introspector.config import config_path, default_style, get_config, load_provider_config
    from introspector.errors import ConfigError

    try:
        cfg = load_provider_config()
        style = default_style()
    except ConfigError as e:
        print(f"  ✗  {e}")
        sys.exit(1)
    w_cfg = get_config().get("wiretap", {}) or {}
    print(f"  Config:   {config_path()}")
    print(f"  Backend:  {cfg.backend.value}")
    print(f"  Model:    {cfg.model}")
    print(f"  URL:      {cfg.url}")
    print(f"  API key:  {cfg.masked_key}")
    print(f"  Timeout:  {cfg.timeout if cfg.timeout is not None else 'none'}")
    print(f"  Style:    {style.label}")
    if w_cfg.get("enabled"):
        print(f"  Wiretap:  {w_cfg.get('path', DEFAULT_WIRE_PATH)}")
    else:
        print("  Wiretap:  off")


def cmd_tap(args):
    """Watch the session wiretap."""
    from introspector.config import get_config
    from introspector.wiretap import live_tap

    log_path = args.log or (get_config().get("wiretap", {}) or {}).get("path", DEFAULT_WIRE_PATH)
    live_tap(
        log_path=log_path,
        follow=not args.no_follow,
        last_n=args.last,
        role_filter=args.role,
        raw=args.raw,
    )


def cmd_styles(args):
    """List guide styles."""
    for value, label in Style.options():
        print(f"  {value:<12} {label}")


# ---------------------------------------------------------------------------
# Parser with aliases
# ---------------------------------------------------------------------------

def _add_command(subparsers, names, help_text, func, setup_fn=None):
    """Register a command under several names."""
    p = subparsers.add_parser(names[0], help=help_text, aliases=names[1:])
    p.set_defaults(func=func)
    if setup_fn:
        setup_fn(p)
    return p


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="introspector",
        description="Introspector — guided self-reflection with a language model.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", "-V", action="version",
        version=f"introspector {__version__}",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    def setup_session(p):
        p.add_argument("--style", "-s", default=None, choices=[s.value for s in Style],
                       help="Guide style (default: from config)")
        p.add_argument("--context-file", "-c", action="append", default=None,
                       help="Note file whose opening is shared as context (repeatable)")

    _add_command(sub, ["session", "talk", "start"],
                 "Run an interactive introspection session", cmd_session, setup_session)

    _add_command(sub, ["flash", "info", "config"],
                 "Show the effective provider config", cmd_flash)

    def setup_tap(p):
        p.add_argument("--log", default=None, help="Path to wire.jsonl (default: from config)")
        p.add_argument("--last", "-n", type=int, default=20, help="Show last N entries before following")
        p.add_argument("--role", "-r", choices=["user", "assistant", "summary"], default=None,
                       help="Filter by role")
        p.add_argument("--no-follow", action="store_true", help="Don't follow, just show last entries")
        p.add_argument("--raw", action="store_true", help="Raw JSONL output, no formatting")

    _add_command(sub, ["tap", "log", "tail"],
                 "Watch the session wiretap", cmd_tap, setup_tap)

    _add_command(sub, ["styles", "personalities"], "List the available guide styles", cmd_styles)
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
