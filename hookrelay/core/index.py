"""Process-wide webhook cache keyed by webhook id."""

from __future__ import annotations

from typing import Iterable, Iterator

from hookrelay.models import Webhook
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)


class WebhookIndex:
    """Insert-or-overwrite cache of every webhook seen by this process.

    Entries are never evicted. A webhook deleted out-of-band stays here
    until the next fetch or create for the same id overwrites it.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, Webhook] = {}

    def add(self, webhook: Webhook) -> None:
        self._hooks[webhook.id] = webhook

    def update(self, webhooks: Iterable[Webhook]) -> None:
        count = 0
        for webhook in webhooks:
            self._hooks[webhook.id] = webhook
            count += 1
        log.debug("webhook_index_updated", added=count, size=len(self._hooks))

    def get(self, webhook_id: str) -> Webhook | None:
        return self._hooks.get(webhook_id)

    def for_channel(self, channel_id: str) -> dict[str, Webhook]:
        return {
            wid: hook for wid, hook in self._hooks.items()
            if hook.channel_id == channel_id
        }

    def __contains__(self, webhook_id: object) -> bool:
        return webhook_id in self._hooks

    def __len__(self) -> int:
        return len(self._hooks)

    def __iter__(self) -> Iterator[Webhook]:
        return iter(list(self._hooks.values()))
