"""
Config loader for Introspector.

Reads config.yaml (or the file named by INTROSPECTOR_CONFIG) and resolves
${ENV_VAR} references, with .env loaded first. The file is re-read whenever
its mtime changes, so provider settings edited mid-session take effect on
the next turn without restarting anything.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml
from dotenv import load_dotenv

from introspector.errors import ConfigError
from introspector.models import Style

load_dotenv()

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

ANTHROPIC_URL = "https://api.anthropic.com"
OPENROUTER_URL = "https://openrouter.ai/api/v1"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENROUTER_MODEL = "anthropic/claude-sonnet-4"

# Hot-reload state: path -> (mtime, parsed config)
_cache: dict[Path, tuple[float, dict]] = {}


class BackendKind(str, Enum):
    """Direct provider API, or a routing service fronting many providers."""

    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"

    @classmethod
    def parse(cls, value: str | BackendKind) -> BackendKind:
        if isinstance(value, BackendKind):
            return value
        key = str(value or "").strip().lower()
        key = {"direct": "anthropic", "routed": "openrouter"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown provider backend '{value}'") from None


@dataclass(frozen=True)
class ProviderConfig:
    """Read-only provider settings for one call."""

    backend: BackendKind = BackendKind.ANTHROPIC
    api_key: str = ""
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL
    openrouter_model: str = DEFAULT_OPENROUTER_MODEL
    anthropic_url: str = ANTHROPIC_URL
    openrouter_url: str = OPENROUTER_URL
    timeout: float | None = None

    @property
    def model(self) -> str:
        if self.backend is BackendKind.OPENROUTER:
            return self.openrouter_model
        return self.anthropic_model

    @property
    def url(self) -> str:
        if self.backend is BackendKind.OPENROUTER:
            return self.openrouter_url
        return self.anthropic_url

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def masked_key(self) -> str:
        if not self.api_key:
            return "(not set)"
        return f"{self.api_key[:6]}…{self.api_key[-4:]}" if len(self.api_key) > 12 else "****"


def _resolve_env_vars(value: str) -> str:
    """Replace ${ENV_VAR} patterns with actual environment variable values."""
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")
    return re.sub(r"\$\{(\w+)\}", replacer, value)


def _walk_and_resolve(obj):
    """Recursively resolve env vars in all string values."""
    if isinstance(obj, dict):
        return {k: _walk_and_resolve(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_walk_and_resolve(v) for v in obj]
    elif isinstance(obj, str):
        return _resolve_env_vars(obj)
    return obj


def config_path() -> Path:
    override = os.environ.get("INTROSPECTOR_CONFIG")
    return Path(override) if override else _DEFAULT_CONFIG_PATH


def get_config(path: Path | None = None) -> dict:
    """
    Return the parsed config, reloading if the file changed on disk.
    A missing file yields {} so every setting falls back to its default.
    On a parse error the last good copy is kept.
    """
    path = Path(path) if path else config_path()
    if not path.exists():
        return {}

    try:
        mtime = path.stat().st_mtime
    except OSError:
        return _cache.get(path, (0.0, {}))[1]

    cached = _cache.get(path)
    if cached and cached[0] == mtime:
        return cached[1]

    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error("Failed to parse %s: %s (keeping last good config)", path, e)
        return cached[1] if cached else {}

    cfg = _walk_and_resolve(raw)
    _cache[path] = (mtime, cfg)
    logger.debug("Loaded config from %s", path)
    return cfg


def provider_config_from_dict(cfg: dict) -> ProviderConfig:
    """Raises ConfigError on an unknown backend or a non-numeric timeout."""
    p_cfg = cfg.get("provider", {}) or {}
    try:
        backend = BackendKind.parse(p_cfg.get("backend", "anthropic"))
        timeout = p_cfg.get("timeout")
        timeout = float(timeout) if timeout is not None else None
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid provider config: {e}") from e
    return ProviderConfig(
        backend=backend,
        api_key=str(p_cfg.get("api_key") or "").strip(),
        anthropic_model=p_cfg.get("anthropic_model") or DEFAULT_ANTHROPIC_MODEL,
        openrouter_model=p_cfg.get("openrouter_model") or DEFAULT_OPENROUTER_MODEL,
        anthropic_url=p_cfg.get("anthropic_url") or ANTHROPIC_URL,
        openrouter_url=p_cfg.get("openrouter_url") or OPENROUTER_URL,
        timeout=timeout,
    )


def load_provider_config(path: Path | None = None) -> ProviderConfig:
    """Build a fresh ProviderConfig from the current config file."""
    return provider_config_from_dict(get_config(path))


def default_style(path: Path | None = None) -> Style:
    s_cfg = get_config(path).get("session", {}) or {}
    try:
        return Style.parse(s_cfg.get("default_style", "socratic"))
    except ValueError as e:
        raise ConfigError(f"Invalid session config: {e}") from e


def reset_cache() -> None:
    """Forget every cached config (tests use this between cases)."""
    _cache.clear()
