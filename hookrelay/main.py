"""hookrelay entry point: wires clients, caches and the pool together."""

from __future__ import annotations

import asyncio
from typing import Any

import click

from hookrelay.api.rest import DiscordRestClient
from hookrelay.api.settings_service import SettingsServiceClient
from hookrelay.config import Settings, load_settings
from hookrelay.core.index import WebhookIndex
from hookrelay.core.pool import WebhookPool
from hookrelay.core.settings_cache import SettingsCache
from hookrelay.models import Actor, ChannelRef
from hookrelay.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


class HookRelay:
    """Application container.

    One ``WebhookIndex`` is shared by everything built here. The pool only
    exists after ``start()`` has resolved the actor.
    """

    def __init__(
        self,
        settings: Settings,
        actor: Actor | None = None,
        rest: DiscordRestClient | None = None,
        settings_service: SettingsServiceClient | None = None,
    ) -> None:
        self.settings = settings
        self.rest = rest or DiscordRestClient(settings.discord)
        self.settings_service = settings_service or SettingsServiceClient(
            settings.settings_service
        )
        self.index = WebhookIndex()
        self.channel_settings = SettingsCache(self.settings_service)
        self._actor = actor
        self._pool: WebhookPool | None = None

    @property
    def pool(self) -> WebhookPool:
        if self._pool is None:
            raise RuntimeError("HookRelay.start() has not been called")
        return self._pool

    async def start(self) -> None:
        if self._actor is None:
            self._actor = await self.rest.fetch_current_user()
        self._pool = WebhookPool(
            self.rest, self.index, self._actor, self.settings.pool
        )
        log.info("hookrelay_started", actor=self._actor.username, pool_size=self.settings.pool.size)

    async def stop(self) -> None:
        await self.rest.aclose()
        await self.settings_service.aclose()
        log.info("hookrelay_stopped")

    async def __aenter__(self) -> HookRelay:
        try:
            await self.start()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def _run_pool(settings: Settings, channel_id: str) -> list[str]:
    async with HookRelay(settings) as relay:
        pool = await relay.pool.ensure_pool(ChannelRef(id=channel_id))
    return [f"{w.id} {w.name}" for w in pool.values()]


async def _run_select(settings: Settings, channel_id: str, permissions: int) -> str:
    async with HookRelay(settings) as relay:
        selection = await relay.pool.select(ChannelRef(id=channel_id, permissions=permissions))
    if selection.webhook is None:
        return selection.outcome.value
    return f"{selection.webhook.id} {selection.webhook.name}"


async def _run_ignored(settings: Settings, channel_id: str, value: bool | None) -> bool:
    relay = HookRelay(settings)
    channel = ChannelRef(id=channel_id)
    try:
        if value is None:
            return await relay.channel_settings.fetch_ignored(channel)
        result = await relay.channel_settings.set_ignored(channel, value)
        return result.ignored
    finally:
        await relay.stop()


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """Manage channel webhook pools and ignore settings."""
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    ctx.obj = settings


@cli.command("pool")
@click.argument("channel_id")
@click.pass_obj
def pool_cmd(settings: Settings, channel_id: str) -> None:
    """Create missing pool webhooks in CHANNEL_ID and list the pool."""
    for line in asyncio.run(_run_pool(settings, channel_id)):
        click.echo(line)


@cli.command("select")
@click.argument("channel_id")
@click.option("--permissions", type=int, required=True, help="Permission bits of the bot in the channel")
@click.pass_obj
def select_cmd(settings: Settings, channel_id: str, permissions: int) -> None:
    """Pick the next webhook to post through in CHANNEL_ID."""
    click.echo(asyncio.run(_run_select(settings, channel_id, permissions)))


@cli.command("ignored")
@click.argument("channel_id")
@click.option("--set", "set_flag", is_flag=True, help="Mark the channel as ignored")
@click.option("--unset", "unset_flag", is_flag=True, help="Clear the ignored mark")
@click.pass_obj
def ignored_cmd(settings: Settings, channel_id: str, set_flag: bool, unset_flag: bool) -> None:
    """Show or change whether CHANNEL_ID is ignored."""
    if set_flag and unset_flag:
        raise click.UsageError("--set and --unset are mutually exclusive")
    value = True if set_flag else False if unset_flag else None
    ignored = asyncio.run(_run_ignored(settings, channel_id, value))
    click.echo("ignored" if ignored else "not ignored")


if __name__ == "__main__":
    cli()
