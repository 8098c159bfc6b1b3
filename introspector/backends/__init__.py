"""
Provider backends for Introspector.
A direct Anthropic variant and an OpenRouter variant behind one router.
"""
from introspector.backends.base import BaseBackend
from introspector.backends.anthropic import AnthropicBackend
from introspector.backends.openrouter import OpenRouterBackend
from introspector.backends.router import ProviderAdapter, PROVIDERS

__all__ = [
    "ProviderAdapter",
    "PROVIDERS",
    "BaseBackend",
    "AnthropicBackend",
    "OpenRouterBackend",
]
