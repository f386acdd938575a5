"""Data models and constants for the stream downloader."""

import os
import urllib.parse
from dataclasses import dataclass
from typing import Optional

from .errors import MalformedInputError


# Metadata API contract
API_VERSION = "1.3-private"
API_BASE_URL = "https://api.microsoftstream.com"
API_EXPAND = "creator,tokens,status,liveEvent,extensions"

# Cookies set by the streaming service on the API host after login
AUTHORIZATION_COOKIE = "Authorization_Api"
SIGNATURE_COOKIE = "Signature_Api"

HLS_MIME_TYPE = "application/vnd.apple.mpegurl"

# Login page and redirect detection
STREAM_DOMAIN_MARKER = "microsoftstream.com/"
EMAIL_INPUT_SELECTOR = 'input[type="email"]'
SUBMIT_SELECTOR = 'input[type="submit"]'

# Timing (seconds)
DEFAULT_AUTH_TIMEOUT = 90.0
DEFAULT_COOKIE_RETRY_DELAY = 5.0
DEFAULT_TOKEN_TIMEOUT = 4.0
DEFAULT_PAGE_SETTLE_TIMEOUT = 2.0
DEFAULT_LOGIN_SETTLE_TIMEOUT = 1.5
DEFAULT_POLL_INTERVAL = 0.25

DEFAULT_OUTPUT_DIRECTORY = "videos"
DEFAULT_CONFIG_PATH = "streamfetch.json"

# Environment variable names
ENV_USERNAME = "STREAMFETCH_USERNAME"
ENV_OUTPUT_DIRECTORY = "STREAMFETCH_OUTPUT_DIRECTORY"
ENV_FORMAT = "STREAMFETCH_FORMAT"
ENV_API_VERSION = "STREAMFETCH_API_VERSION"
ENV_BROWSER_CHANNEL = "STREAMFETCH_BROWSER_CHANNEL"


def api_cookie_url(api_base_url: str = API_BASE_URL) -> str:
    """Return the URL whose cookie jar holds the signed API cookies."""
    parsed = urllib.parse.urlparse(api_base_url)
    return f"{parsed.scheme or 'https'}://{parsed.netloc or parsed.path}"


@dataclass(frozen=True)
class VideoRequest:
    """One input video URL and its position in the input sequence."""
    url: str
    index: int = 0

    @property
    def video_id(self) -> str:
        """Last path segment of the URL; query string and fragment are ignored."""
        path = urllib.parse.urlparse(self.url.strip()).path
        segment = path.split("/")[-1] if path else ""
        if not segment:
            raise MalformedInputError(
                f"Couldn't split the video ID from {self.url!r}, wrong URL"
            )
        return segment


@dataclass(frozen=True)
class Credential:
    """Signed cookie pair bound to the API host for the current session."""
    authorization: str
    signature: str

    @property
    def cookie_header(self) -> str:
        return f"Authorization={self.authorization}; Signature={self.signature}"

    def __repr__(self) -> str:
        return "Credential(authorization=<redacted>, signature=<redacted>)"


@dataclass(frozen=True)
class Manifest:
    """Resolved title and HLS playback URL for one video."""
    title: str
    playback_url: str


@dataclass(frozen=True)
class DownloadJob:
    """Everything the downloader needs for one video."""
    title: str
    playback_url: str
    cookie_header: str
    output_directory: str
    format: Optional[str] = None
    simulate: bool = False
    video_id: Optional[str] = None

    @property
    def output_path(self) -> str:
        return os.path.join(self.output_directory, f"{self.title}.mp4")

    def __repr__(self) -> str:
        return (
            f"DownloadJob(title={self.title!r}, video_id={self.video_id!r}, "
            f"playback_url={self.playback_url!r}, "
            f"output_path={self.output_path!r}, format={self.format!r}, "
            f"simulate={self.simulate})"
        )
