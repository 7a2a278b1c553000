"""Avatar resolution: turn URLs, paths and raw bytes into data URIs."""

from __future__ import annotations

import asyncio
import base64
from pathlib import Path

import httpx

from hookrelay.errors import RemoteAPIError

_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
]


def sniff_mime(data: bytes) -> str:
    for magic, mime in _SIGNATURES:
        if data.startswith(magic):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def to_data_uri(data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{sniff_mime(data)};base64,{encoded}"


async def resolve_image(
    image: str | bytes | None,
    client: httpx.AsyncClient | None = None,
) -> str | None:
    """Resolve an avatar to a data URI.

    Strings starting with ``data:`` pass through untouched, http(s) URLs
    are downloaded and anything else is read as a local path.
    """
    if image is None:
        return None
    if isinstance(image, bytes):
        return to_data_uri(image)
    if image.startswith("data:"):
        return image
    if image.startswith(("http://", "https://")):
        return to_data_uri(await _download(image, client))
    data = await asyncio.to_thread(Path(image).expanduser().read_bytes)
    return to_data_uri(data)


async def _download(url: str, client: httpx.AsyncClient | None) -> bytes:
    try:
        if client is not None:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content
        async with httpx.AsyncClient(timeout=30, follow_redirects=True) as owned:
            resp = await owned.get(url)
            resp.raise_for_status()
            return resp.content
    except httpx.HTTPStatusError as e:
        raise RemoteAPIError("GET", url, e.response.status_code, "avatar download failed") from e
    except httpx.TransportError as e:
        raise RemoteAPIError("GET", url, None, str(e) or type(e).__name__) from e
