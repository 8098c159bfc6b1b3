"""
Tests for the provider router: backend selection is redone on every call.
"""

from unittest.mock import AsyncMock, patch

import pytest

from introspector.backends import PROVIDERS, AnthropicBackend, OpenRouterBackend, ProviderAdapter
from introspector.config import BackendKind, ProviderConfig, load_provider_config
from introspector.errors import ConfigError, ProviderUnconfigured


class SwitchableConfig:
    """Config loader whose answer can change between calls."""

    def __init__(self, cfg: ProviderConfig):
        self.cfg = cfg
        self.calls = 0

    def __call__(self) -> ProviderConfig:
        self.calls += 1
        return self.cfg


def test_provider_table_covers_every_backend():
    assert set(PROVIDERS) == set(BackendKind)


def test_create_backend_from_config():
    backend = ProviderAdapter.create_backend(ProviderConfig(
        backend=BackendKind.OPENROUTER, api_key="sk-or", openrouter_model="openai/gpt-4o", timeout=12,
    ))
    assert isinstance(backend, OpenRouterBackend)
    assert backend.model == "openai/gpt-4o"
    assert backend.url == "https://openrouter.ai/api/v1"
    assert backend.api_key == "sk-or"
    assert backend.timeout == 12


def test_config_change_applies_to_next_call():
    loader = SwitchableConfig(ProviderConfig(backend=BackendKind.ANTHROPIC, api_key="a"))
    adapter = ProviderAdapter(loader)
    assert isinstance(adapter.resolve(), AnthropicBackend)
    assert adapter.model == "claude-sonnet-4-20250514"

    loader.cfg = ProviderConfig(backend=BackendKind.OPENROUTER, api_key="b")
    assert isinstance(adapter.resolve(), OpenRouterBackend)
    assert adapter.model == "anthropic/claude-sonnet-4"


def test_is_configured_follows_config():
    loader = SwitchableConfig(ProviderConfig(api_key=""))
    adapter = ProviderAdapter(loader)
    assert not adapter.is_configured()
    loader.cfg = ProviderConfig(api_key="sk-ant-x")
    assert adapter.is_configured()


def test_bad_config_surfaces_as_config_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("provider:\n  backend: bogus\n  api_key: k\n")
    adapter = ProviderAdapter(lambda: load_provider_config(path))
    with pytest.raises(ConfigError):
        adapter.stream_continue("SYS", [])
    with pytest.raises(ConfigError):
        adapter.is_configured()


@pytest.mark.asyncio
async def test_unconfigured_stream_raises_on_first_read():
    adapter = ProviderAdapter(lambda: ProviderConfig(api_key=""))
    stream = adapter.stream_start("SYS")
    with pytest.raises(ProviderUnconfigured):
        await stream.__anext__()


@pytest.mark.asyncio
async def test_complete_summary_delegates_to_resolved_backend():
    adapter = ProviderAdapter(lambda: ProviderConfig(backend=BackendKind.OPENROUTER, api_key="k"))
    with patch.object(OpenRouterBackend, "complete", new=AsyncMock(return_value="INSIGHTS:\n- x")) as complete:
        text = await adapter.complete_summary("SUMMARY", "transcript")
    assert text == "INSIGHTS:\n- x"
    complete.assert_awaited_once_with("SUMMARY", [{"role": "user", "content": "transcript"}], 1000)


@pytest.mark.asyncio
async def test_stream_continue_delegates_with_history():
    async def fake_stream(self, system_prompt, messages, max_tokens):
        assert system_prompt == "SYS"
        assert messages == [{"role": "user", "content": "hi"}]
        assert max_tokens == 500
        for piece in ("a", "b"):
            yield piece

    adapter = ProviderAdapter(lambda: ProviderConfig(api_key="k"))
    with patch.object(AnthropicBackend, "stream", new=fake_stream):
        fragments = [f async for f in adapter.stream_continue("SYS", [{"role": "user", "content": "hi"}])]
    assert fragments == ["a", "b"]
