"""Client for the remote per-channel settings service."""

from __future__ import annotations

import httpx

from hookrelay.api.base import ApiClient
from hookrelay.config import SettingsServiceConfig
from hookrelay.errors import RemoteAPIError


class SettingsServiceClient(ApiClient):
    def __init__(
        self,
        config: SettingsServiceConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {config.token}"} if config.token else None
        super().__init__(
            config.base_url,
            headers=headers,
            timeout=config.timeout,
            client=client,
        )

    async def get_channel_ignored(self, channel_id: str) -> bool:
        """Read the channel record; a missing record means not ignored."""
        path = f"/channels/{channel_id}"
        payload = await self.request("GET", path)
        if payload is None:
            return False
        if not isinstance(payload, dict):
            raise RemoteAPIError("GET", path, 200, "expected a JSON object")
        data = payload.get("data")
        if data is None:
            return False
        if not isinstance(data, dict):
            raise RemoteAPIError("GET", path, 200, "expected 'data' to be an object or null")
        return bool(data.get("ignored"))

    async def create_ignore_record(self, channel_id: str) -> None:
        await self.request(
            "PUT",
            "/channels/new",
            json={"channelId": channel_id, "ignored": True},
            expect_body=False,
        )

    async def delete_ignore_record(self, channel_id: str) -> None:
        await self.request("PUT", f"/channels/{channel_id}/delete", expect_body=False)
