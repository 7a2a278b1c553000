"""Per-channel pool of actor-owned webhooks with rotating selection."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

import discord

from hookrelay.api.rest import DiscordRestClient
from hookrelay.config import PoolConfig
from hookrelay.core.index import WebhookIndex
from hookrelay.core.sync import SingleFlight
from hookrelay.models import Actor, ChannelRef, Webhook
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)


def can_manage_webhooks(permissions: int) -> bool:
    return discord.Permissions(permissions).manage_webhooks


class SelectionOutcome(str, Enum):
    SELECTED = "selected"
    DENIED = "denied"


@dataclass(frozen=True)
class Selection:
    outcome: SelectionOutcome
    webhook: Webhook | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is SelectionOutcome.SELECTED


class WebhookPool:
    """Keeps ``size`` webhooks named ``<username>-<slot>`` in each channel.

    The pool is a view over the shared ``WebhookIndex``: the entries for a
    channel that the actor owns and that carry the actor's username. Slots
    are told apart by the ``-<slot>`` name suffix; when several webhooks
    claim one slot the oldest holds it.
    """

    def __init__(
        self,
        rest: DiscordRestClient,
        index: WebhookIndex,
        actor: Actor,
        config: PoolConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._rest = rest
        self._index = index
        self._actor = actor
        self._config = config or PoolConfig()
        self._rng = rng or random.Random()
        self._flights: SingleFlight[str, dict[str, Webhook]] = SingleFlight()
        # channel_id -> id of the webhook handed out last
        self._last_selected: dict[str, str] = {}

    @property
    def actor(self) -> Actor:
        return self._actor

    @property
    def size(self) -> int:
        return self._config.size

    @property
    def slots(self) -> tuple[str, ...]:
        return tuple(str(n) for n in range(1, self._config.size + 1))

    def slot_name(self, slot: str) -> str:
        return f"{self._actor.username}-{slot}"

    def slot_of(self, webhook: Webhook) -> str | None:
        """Return the slot a webhook occupies, or None if it isn't ours."""
        if webhook.owner_id != self._actor.id:
            return None
        if self._actor.username not in webhook.name:
            return None
        for slot in self.slots:
            if webhook.name.endswith(f"-{slot}"):
                return slot
        return None

    def _partition(self, webhooks: list[Webhook]) -> dict[str, Webhook]:
        occupants: dict[str, Webhook] = {}
        for webhook in sorted(webhooks, key=lambda w: int(w.id)):
            slot = self.slot_of(webhook)
            if slot is not None and slot not in occupants:
                occupants[slot] = webhook
        return occupants

    def pool(self, channel_id: str) -> dict[str, Webhook]:
        """The channel's pool as currently visible in the index."""
        occupants = self._partition(list(self._index.for_channel(channel_id).values()))
        return {w.id: w for w in occupants.values()}

    def last_selected(self, channel_id: str) -> str | None:
        return self._last_selected.get(channel_id)

    async def ensure_pool(self, channel: ChannelRef) -> dict[str, Webhook]:
        """Make sure every slot in the channel has a webhook.

        Concurrent calls for one channel share a single fetch-and-create
        pass.
        """
        return await self._flights.do(channel.id, lambda: self._ensure(channel.id))

    async def _ensure(self, channel_id: str) -> dict[str, Webhook]:
        fetched = await self._rest.fetch_channel_webhooks(channel_id)
        self._index.update(fetched)
        occupants = self._partition([w for w in fetched if w.channel_id == channel_id])

        created = 0
        for slot in self.slots:
            if slot in occupants:
                continue
            webhook = await self._rest.create_channel_webhook(
                channel_id,
                self.slot_name(slot),
                avatar=self._config.avatar,
                reason=self._config.reason,
            )
            self._index.add(webhook)
            occupants[slot] = webhook
            created += 1

        log.info(
            "webhook_pool_ready",
            channel_id=channel_id,
            fetched=len(fetched),
            created=created,
        )
        return {w.id: w for w in occupants.values()}

    async def select(self, channel: ChannelRef) -> Selection:
        """Pick a webhook to post through, never the one handed out last."""
        if not can_manage_webhooks(channel.permissions):
            log.debug("webhook_select_denied", channel_id=channel.id)
            return Selection(SelectionOutcome.DENIED)

        pool = self.pool(channel.id)
        if len(pool) < self.size:
            pool = await self.ensure_pool(channel)

        last = self._last_selected.get(channel.id)
        candidates = [w for w in pool.values() if w.id != last]
        if candidates:
            webhook = self._rng.choice(candidates)
        else:
            webhook = next(iter(pool.values()))

        self._last_selected[channel.id] = webhook.id
        log.debug("webhook_selected", channel_id=channel.id, webhook_id=webhook.id)
        return Selection(SelectionOutcome.SELECTED, webhook)

    async def select_webhook(self, channel: ChannelRef) -> Webhook | None:
        return (await self.select(channel)).webhook
