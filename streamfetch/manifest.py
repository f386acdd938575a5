"""Metadata API client: resolves a video ID to its title and HLS manifest URL."""

import json
import urllib.parse
from typing import Any, Dict, Optional

import aiohttp

from .errors import ApiError, ManifestNotFoundError
from .models import API_BASE_URL, API_EXPAND, API_VERSION, HLS_MIME_TYPE, Manifest


def build_video_api_url(
    video_id: str,
    api_base_url: str = API_BASE_URL,
    api_version: str = API_VERSION,
) -> str:
    """Build the metadata endpoint URL for *video_id*."""
    base = api_base_url.rstrip("/")
    quoted_id = urllib.parse.quote(video_id, safe="")
    return (
        f"{base}/api/videos/{quoted_id}"
        f"?$expand={API_EXPAND}&api-version={api_version}"
    )


def select_hls_url(payload: Dict[str, Any]) -> str:
    """Return the first playback URL whose MIME type marks it as HLS."""
    entries = payload.get("playbackUrls") or []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if entry.get("mimeType") == HLS_MIME_TYPE and entry.get("playbackUrl"):
            return entry["playbackUrl"]

    available = sorted(
        {str(entry.get("mimeType")) for entry in entries if isinstance(entry, dict)}
    )
    raise ManifestNotFoundError(
        "Error fetching HLS URL: no playback entry with MIME type "
        f"{HLS_MIME_TYPE} (available: {', '.join(available) or 'none'})"
    )


def manifest_from_payload(payload: Dict[str, Any]) -> Manifest:
    """Extract title and HLS URL from a decoded API response."""
    title = payload.get("name")
    return Manifest(
        title="" if title is None else str(title),
        playback_url=select_hls_url(payload),
    )


async def resolve_manifest(
    http,
    video_id: str,
    access_token: str,
    *,
    api_base_url: str = API_BASE_URL,
    api_version: str = API_VERSION,
    verbose: bool = False,
) -> Manifest:
    """Fetch metadata for *video_id* and resolve its manifest.

    Error statuses are not retried: they mean an expired session or denied
    access, neither of which changes within the same session.
    """
    url = build_video_api_url(video_id, api_base_url, api_version)
    headers = {"Authorization": f"Bearer {access_token}"}

    if verbose:
        print(f"[video_id={video_id}] GET {url}")

    try:
        async with http.get(url, headers=headers) as response:
            status = response.status
            body = await response.text()
    except aiohttp.ClientError as exc:
        raise ApiError(0, f"request failed: {exc}", url=url) from exc

    if status >= 400:
        print(f"[video_id={video_id}] Stream API answered HTTP {status}")
        raise ApiError(status, body, url=url)

    payload: Optional[Any]
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ApiError(status, body, url=url) from exc

    if not isinstance(payload, dict):
        raise ApiError(status, body, url=url)

    if verbose:
        print(json.dumps(payload, indent=2))

    return manifest_from_payload(payload)
