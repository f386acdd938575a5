"""Session driver: login once, then resolve and dispatch each video in order."""

import asyncio
from typing import Callable, List, Optional, Sequence

import aiohttp
from yt_dlp.utils import sanitize_filename

from .credentials import extract_credential
from .dispatcher import dispatch_download
from .errors import AccessTokenUnavailableError, MalformedInputError
from .manifest import resolve_manifest
from .models import (
    API_BASE_URL,
    API_VERSION,
    DEFAULT_AUTH_TIMEOUT,
    DEFAULT_COOKIE_RETRY_DELAY,
    DEFAULT_LOGIN_SETTLE_TIMEOUT,
    DEFAULT_PAGE_SETTLE_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TOKEN_TIMEOUT,
    STREAM_DOMAIN_MARKER,
    DownloadJob,
    VideoRequest,
    api_cookie_url,
)
from .polling import wait_until
from .session import BrowserSession

Dispatcher = Callable[[DownloadJob, bool], None]


def derive_video_id(url: str) -> str:
    """Return the video ID for *url* (its last path segment)."""
    return VideoRequest(url).video_id


def fallback_title(index: int) -> str:
    return f"Video{index}"


def normalize_title(title: Optional[str], index: int) -> str:
    """Sanitize *title* for use as a filename, falling back to a positional name."""
    sanitized = sanitize_filename(title or "")
    if not sanitized.strip():
        return fallback_title(index)
    return sanitized


def create_http_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(raise_for_status=False)


def _setting(args, name: str, default):
    value = getattr(args, name, None)
    return default if value is None else value


async def authenticate(session, first_url: str, username: str, args) -> None:
    """Drive the login form and wait for the redirect back to the streaming site."""
    auth_timeout = _setting(args, "auth_timeout", DEFAULT_AUTH_TIMEOUT)
    poll_interval = _setting(args, "poll_interval", DEFAULT_POLL_INTERVAL)

    await session.open_login(first_url)
    await session.submit_username(username)
    print(f"Waiting up to {auth_timeout:g}s for the login to complete (finish any MFA prompt in the browser)...")
    await session.wait_for_stream_domain(STREAM_DOMAIN_MARKER, auth_timeout)
    print("We are logged in.")
    await wait_until(session.is_loaded, DEFAULT_LOGIN_SETTLE_TIMEOUT, poll_interval)


async def process_video(
    session,
    http,
    request: VideoRequest,
    args,
    dispatcher: Dispatcher,
) -> DownloadJob:
    """Resolve one video and hand it to *dispatcher*.

    Credential and token are re-read for every video: the service can rotate
    its cookies between navigations.
    """
    video_id = request.video_id
    verbose = bool(getattr(args, "verbose", False))
    poll_interval = _setting(args, "poll_interval", DEFAULT_POLL_INTERVAL)
    api_base_url = _setting(args, "api_base_url", API_BASE_URL)

    print(f"\n[video_id={video_id}] Navigating to {request.url}")
    await session.goto(request.url, wait_until="load")
    await wait_until(session.is_loaded, DEFAULT_PAGE_SETTLE_TIMEOUT, poll_interval)

    credential = await extract_credential(
        session,
        api_cookie_url(api_base_url),
        retry_delay=_setting(args, "cookie_retry_delay", DEFAULT_COOKIE_RETRY_DELAY),
    )
    print(f"[video_id={video_id}] Got cookie. Consuming cookie...")

    print(f"[video_id={video_id}] Accessing API...")
    token_timeout = _setting(args, "token_timeout", DEFAULT_TOKEN_TIMEOUT)
    access_token = await wait_until(session.read_access_token, token_timeout, poll_interval)
    if not access_token:
        raise AccessTokenUnavailableError(
            f"No access token found in the page session state for {request.url} "
            f"after {token_timeout:g} seconds"
        )

    print(f"[video_id={video_id}] Fetching title and HLS URL...")
    manifest = await resolve_manifest(
        http,
        video_id,
        access_token,
        api_base_url=api_base_url,
        api_version=_setting(args, "api_version", API_VERSION),
        verbose=verbose,
    )

    title = normalize_title(manifest.title, request.index)
    print(f"[video_id={video_id}] Video title is: {title}")

    job = DownloadJob(
        title=title,
        playback_url=manifest.playback_url,
        cookie_header=credential.cookie_header,
        output_directory=args.output_directory,
        format=getattr(args, "format", None),
        simulate=bool(getattr(args, "simulate", False)),
        video_id=video_id,
    )
    await asyncio.to_thread(dispatcher, job, verbose)
    return job


async def run_videos(
    session,
    http,
    video_urls: Sequence[str],
    username: str,
    args,
    dispatcher: Dispatcher,
) -> List[DownloadJob]:
    """Log in, then process *video_urls* strictly in order.

    The first fatal error aborts the remaining queue.
    """
    if not video_urls:
        raise MalformedInputError("No video URLs were given")

    await authenticate(session, video_urls[0], username, args)

    jobs: List[DownloadJob] = []
    total = len(video_urls)
    for index, url in enumerate(video_urls):
        print(f"\n[{index + 1}/{total}] Processing {url}")
        request = VideoRequest(url=url, index=index)
        jobs.append(await process_video(session, http, request, args, dispatcher))
    return jobs


async def run_pipeline(args, dispatcher: Optional[Dispatcher] = None) -> List[DownloadJob]:
    """Own the browser and HTTP sessions for the run and process every video."""
    if dispatcher is None:
        dispatcher = dispatch_download

    async with BrowserSession(
        browser_channel=getattr(args, "browser_channel", None),
        verbose=bool(getattr(args, "verbose", False)),
    ) as session:
        async with create_http_session() as http:
            return await run_videos(
                session, http, list(args.video_urls), args.username, args, dispatcher
            )
