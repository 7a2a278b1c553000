"""Discord REST calls used by the webhook pool."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from hookrelay.api.base import ApiClient
from hookrelay.config import DiscordConfig
from hookrelay.models import Actor, Webhook
from hookrelay.utils.images import resolve_image
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)


class DiscordRestClient(ApiClient):
    def __init__(
        self,
        config: DiscordConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            config.api_base,
            headers={"Authorization": f"Bot {config.token}"},
            timeout=config.timeout,
            client=client,
        )

    async def fetch_current_user(self) -> Actor:
        data = await self.request("GET", "/users/@me")
        return Actor.from_payload(data)

    async def fetch_channel_webhooks(self, channel_id: str) -> list[Webhook]:
        data = await self.request("GET", f"/channels/{channel_id}/webhooks")
        return [Webhook.from_payload(item) for item in data or []]

    async def create_channel_webhook(
        self,
        channel_id: str,
        name: str,
        *,
        avatar: str | bytes | None = None,
        reason: str | None = None,
    ) -> Webhook:
        """Create a webhook in a channel.

        ``avatar`` may be a data URI, raw image bytes, an http(s) URL or a
        local file path; it is sent as a data URI.
        """
        body = {"name": name, "avatar": await resolve_image(avatar)}
        headers = {"X-Audit-Log-Reason": quote(reason)} if reason else None
        data = await self.request(
            "POST", f"/channels/{channel_id}/webhooks", json=body, headers=headers
        )
        webhook = Webhook.from_payload(data)
        log.info("webhook_created", channel_id=channel_id, webhook_id=webhook.id, name=name)
        return webhook
