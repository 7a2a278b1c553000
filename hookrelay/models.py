"""Typed models for webhooks, channels and channel settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

DISCORD_EPOCH_MS = 1420070400000


def snowflake_time(snowflake: str | int) -> datetime:
    ms = (int(snowflake) >> 22) + DISCORD_EPOCH_MS
    return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(milliseconds=ms)


@dataclass(frozen=True)
class Actor:
    """The bot user webhooks are maintained for."""
    id: str
    username: str

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Actor:
        return cls(id=str(data["id"]), username=data["username"])


@dataclass(frozen=True)
class Webhook:
    id: str
    channel_id: str
    owner_id: str | None
    name: str
    guild_id: str | None = None
    type: int = 1
    token: str | None = None
    avatar: str | None = None
    application_id: str | None = None

    @property
    def created_at(self) -> datetime:
        return snowflake_time(self.id)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Webhook:
        user = data.get("user") or {}
        owner_id = user.get("id")
        return cls(
            id=str(data["id"]),
            channel_id=str(data["channel_id"]),
            owner_id=str(owner_id) if owner_id is not None else None,
            name=data.get("name") or "",
            guild_id=str(data["guild_id"]) if data.get("guild_id") else None,
            type=int(data.get("type", 1)),
            token=data.get("token"),
            avatar=data.get("avatar"),
            application_id=(
                str(data["application_id"]) if data.get("application_id") else None
            ),
        )


@dataclass(frozen=True)
class ChannelRef:
    """A guild text channel as seen by the actor.

    ``permissions`` is the actor's resolved permission bit field in the
    channel.
    """
    id: str
    guild_id: str | None = None
    permissions: int = 0

    @classmethod
    def from_discord(cls, channel: Any) -> ChannelRef:
        """Build from a discord.py guild channel."""
        perms = channel.permissions_for(channel.guild.me)
        return cls(
            id=str(channel.id),
            guild_id=str(channel.guild.id),
            permissions=perms.value,
        )


@dataclass(frozen=True)
class ChannelSettings:
    ignored: bool
    cached: bool
