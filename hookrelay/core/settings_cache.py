"""Lazily-loaded per-channel "ignored" flag backed by the settings service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from hookrelay.api.settings_service import SettingsServiceClient
from hookrelay.core.sync import KeyedLock
from hookrelay.models import ChannelRef, ChannelSettings
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Unloaded:
    pass


@dataclass(frozen=True)
class Loaded:
    ignored: bool


SettingsState = Union[Unloaded, Loaded]

UNLOADED = Unloaded()


class SettingsCache:
    """Write-through cache of each channel's ignored flag.

    A channel starts ``Unloaded`` and becomes ``Loaded`` after the first
    successful fetch or set. Loaded values never expire; only
    ``fetch_ignored`` rereads the remote record.
    """

    def __init__(self, service: SettingsServiceClient) -> None:
        self._service = service
        self._states: dict[str, Loaded] = {}
        self._locks: KeyedLock[str] = KeyedLock()

    def state(self, channel_id: str) -> SettingsState:
        return self._states.get(channel_id, UNLOADED)

    def get(self, channel: ChannelRef) -> ChannelSettings:
        state = self.state(channel.id)
        if isinstance(state, Loaded):
            return ChannelSettings(ignored=state.ignored, cached=True)
        return ChannelSettings(ignored=False, cached=False)

    async def fetch_ignored(self, channel: ChannelRef) -> bool:
        async with self._locks.hold(channel.id):
            return await self._fetch(channel.id)

    async def _fetch(self, channel_id: str) -> bool:
        ignored = await self._service.get_channel_ignored(channel_id)
        self._states[channel_id] = Loaded(ignored)
        return ignored

    async def set_ignored(self, channel: ChannelRef, ignored: bool) -> ChannelSettings:
        async with self._locks.hold(channel.id):
            state = self.state(channel.id)
            if isinstance(state, Loaded):
                previous = state.ignored
            else:
                previous = await self._fetch(channel.id)

            if ignored and not previous:
                await self._service.create_ignore_record(channel.id)
                log.info("channel_ignore_created", channel_id=channel.id)
            elif previous and not ignored:
                await self._service.delete_ignore_record(channel.id)
                log.info("channel_ignore_deleted", channel_id=channel.id)

            self._states[channel.id] = Loaded(ignored)
        return ChannelSettings(ignored=ignored, cached=True)
