"""
Provider router — picks the backend variant for each call.

The config is re-read and the backend resolved on every operation, so a
provider or key change applies to the very next turn. The router itself
holds nothing but the config loader, which makes one instance safe to
share between any number of sessions.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Callable

from introspector.backends.anthropic import AnthropicBackend
from introspector.backends.base import BaseBackend
from introspector.backends.openrouter import OpenRouterBackend
from introspector.config import BackendKind, ProviderConfig, load_provider_config

logger = logging.getLogger(__name__)

# Backend kind → backend class
PROVIDERS: dict[BackendKind, type[BaseBackend]] = {
    BackendKind.ANTHROPIC: AnthropicBackend,
    BackendKind.OPENROUTER: OpenRouterBackend,
}


class ProviderAdapter:
    """Uniform front over the configured backend."""

    def __init__(self, config_loader: Callable[[], ProviderConfig] = load_provider_config):
        self.config_loader = config_loader

    @staticmethod
    def create_backend(cfg: ProviderConfig) -> BaseBackend:
        """Instantiate the backend named by the config."""
        cls = PROVIDERS[cfg.backend]
        return cls(
            name=cfg.backend.value,
            url=cfg.url,
            api_key=cfg.api_key,
            model=cfg.model,
            timeout=cfg.timeout,
        )

    def resolve(self) -> BaseBackend:
        backend = self.create_backend(self.config_loader())
        logger.debug("Resolved backend %r", backend)
        return backend

    def is_configured(self) -> bool:
        return self.config_loader().is_configured

    @property
    def model(self) -> str:
        return self.config_loader().model

    def stream_start(self, system_prompt: str) -> AsyncIterator[str]:
        return self.resolve().stream_start(system_prompt)

    def stream_continue(self, system_prompt: str, history: list[dict]) -> AsyncIterator[str]:
        return self.resolve().stream_continue(system_prompt, history)

    async def complete_summary(self, system_prompt: str, user_text: str) -> str:
        return await self.resolve().complete_summary(system_prompt, user_text)
