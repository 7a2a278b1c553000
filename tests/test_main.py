"""Tests for the application container and CLI."""

from unittest.mock import AsyncMock

import pytest
from click.testing import CliRunner

import hookrelay.main as main_mod
from hookrelay.config import Settings
from hookrelay.core.pool import Selection, SelectionOutcome
from hookrelay.errors import RemoteAPIError
from hookrelay.main import HookRelay, cli
from hookrelay.models import Actor, ChannelRef, ChannelSettings, Webhook

MANAGE_WEBHOOKS = 1 << 29


@pytest.fixture
def rest():
    r = AsyncMock()
    r.fetch_current_user = AsyncMock(return_value=Actor(id="900", username="Bot"))
    r.fetch_channel_webhooks = AsyncMock(return_value=[
        Webhook(id="10", channel_id="100", owner_id="900", name="Bot-1"),
        Webhook(id="11", channel_id="100", owner_id="900", name="Bot-2"),
    ])
    return r


@pytest.fixture
def settings_service():
    s = AsyncMock()
    s.get_channel_ignored = AsyncMock(return_value=False)
    return s


class TestHookRelay:
    async def test_pool_requires_start(self, rest, settings_service):
        relay = HookRelay(Settings(), rest=rest, settings_service=settings_service)
        with pytest.raises(RuntimeError):
            relay.pool

    async def test_start_resolves_actor(self, rest, settings_service):
        async with HookRelay(Settings(), rest=rest, settings_service=settings_service) as relay:
            assert relay.pool.actor == Actor(id="900", username="Bot")
        rest.fetch_current_user.assert_awaited_once()
        rest.aclose.assert_awaited_once()
        settings_service.aclose.assert_awaited_once()

    async def test_given_actor_skips_lookup(self, rest, settings_service):
        actor = Actor(id="1", username="Relay")
        async with HookRelay(Settings(), actor=actor, rest=rest, settings_service=settings_service) as relay:
            assert relay.pool.actor is actor
        rest.fetch_current_user.assert_not_awaited()

    async def test_failed_start_closes_clients(self, rest, settings_service):
        rest.fetch_current_user.side_effect = RemoteAPIError("GET", "/users/@me", 401, "Unauthorized")

        with pytest.raises(RemoteAPIError):
            async with HookRelay(Settings(), rest=rest, settings_service=settings_service):
                pass

        rest.aclose.assert_awaited_once()
        settings_service.aclose.assert_awaited_once()

    async def test_components_share_one_index(self, rest, settings_service):
        async with HookRelay(Settings(), rest=rest, settings_service=settings_service) as relay:
            channel = ChannelRef(id="100", permissions=MANAGE_WEBHOOKS)
            webhook = await relay.pool.select_webhook(channel)
            assert relay.index.get(webhook.id) == webhook

            await relay.channel_settings.set_ignored(channel, True)
            assert relay.channel_settings.get(channel) == ChannelSettings(ignored=True, cached=True)


class FakeRelay:
    """Replaces HookRelay inside CLI commands."""

    last = None

    def __init__(self, settings):
        self.settings = settings
        self.pool = AsyncMock()
        self.channel_settings = AsyncMock()
        FakeRelay.last = self

    async def stop(self):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        pass


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.setenv("HOOKRELAY_CONFIG_DIR", str(tmp_path))
    monkeypatch.delenv("HOOKRELAY_CONFIG", raising=False)
    monkeypatch.setattr(main_mod, "HookRelay", FakeRelay)
    monkeypatch.setattr(main_mod, "setup_logging", lambda **kwargs: None)
    return CliRunner()


class TestCli:
    def test_pool(self, runner, monkeypatch):
        async def ensure(channel):
            assert channel.id == "100"
            return {"10": Webhook(id="10", channel_id="100", owner_id="900", name="Bot-1")}

        monkeypatch.setattr(FakeRelay, "__init__", _init_with(pool_ensure=ensure))
        result = runner.invoke(cli, ["pool", "100"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "10 Bot-1"

    def test_select_denied(self, runner, monkeypatch):
        async def select(channel):
            assert channel.permissions == 0
            return Selection(SelectionOutcome.DENIED)

        monkeypatch.setattr(FakeRelay, "__init__", _init_with(pool_select=select))
        result = runner.invoke(cli, ["select", "100", "--permissions", "0"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "denied"

    def test_select(self, runner, monkeypatch):
        webhook = Webhook(id="11", channel_id="100", owner_id="900", name="Bot-2")

        async def select(channel):
            return Selection(SelectionOutcome.SELECTED, webhook)

        monkeypatch.setattr(FakeRelay, "__init__", _init_with(pool_select=select))
        result = runner.invoke(cli, ["select", "100", "--permissions", str(MANAGE_WEBHOOKS)])
        assert result.output.strip() == "11 Bot-2"

    def test_ignored_read(self, runner):
        result = runner.invoke(cli, ["ignored", "100"])
        assert result.exit_code == 0, result.output
        FakeRelay.last.channel_settings.fetch_ignored.assert_awaited_once()
        FakeRelay.last.channel_settings.set_ignored.assert_not_awaited()

    def test_ignored_set(self, runner):
        result = runner.invoke(cli, ["ignored", "100", "--set"])
        assert result.exit_code == 0, result.output
        call = FakeRelay.last.channel_settings.set_ignored.await_args
        assert call.args == (ChannelRef(id="100"), True)

    def test_ignored_unset(self, runner):
        result = runner.invoke(cli, ["ignored", "100", "--unset"])
        assert result.exit_code == 0, result.output
        assert FakeRelay.last.channel_settings.set_ignored.await_args.args[1] is False


def _init_with(pool_ensure=None, pool_select=None):
    original = FakeRelay.__init__

    def init(self, settings):
        original(self, settings)
        if pool_ensure is not None:
            self.pool.ensure_pool = AsyncMock(side_effect=pool_ensure)
        if pool_select is not None:
            self.pool.select = AsyncMock(side_effect=pool_select)

    return init


class TestCliUsage:
    def test_set_and_unset_conflict(self, runner):
        result = runner.invoke(cli, ["ignored", "100", "--set", "--unset"])
        assert result.exit_code == 2
        assert "mutually exclusive" in result.output
