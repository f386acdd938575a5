"""Microsoft Stream downloader package."""

# Import main components for easier access
from .config import apply_environment_defaults, load_config_file, parse_args, positive_float
from .credentials import credential_from_jar, extract_credential
from .dispatcher import build_ydl_options, dispatch_download
from .driver import (
    derive_video_id,
    fallback_title,
    normalize_title,
    process_video,
    run_pipeline,
    run_videos,
)
from .errors import (
    AccessTokenUnavailableError,
    ApiError,
    AuthTimeoutError,
    BrowserSessionError,
    CredentialUnavailableError,
    DownloadFailedError,
    EnvironmentSetupError,
    MalformedInputError,
    ManifestNotFoundError,
    StreamFetchError,
    exit_code_for,
    report_failure,
)
from .health_check import run_environment_check
from .logger import DownloadLogger
from .manifest import build_video_api_url, resolve_manifest, select_hls_url
from .models import Credential, DownloadJob, Manifest, VideoRequest
from .polling import wait_until
from .session import BrowserSession
from .sources import collect_video_urls, load_video_urls_from_file, parse_video_line

__all__ = [
    # Main entry points
    "parse_args",
    "apply_environment_defaults",
    "run_pipeline",
    "run_environment_check",
    # Pipeline steps
    "run_videos",
    "process_video",
    "extract_credential",
    "credential_from_jar",
    "resolve_manifest",
    "select_hls_url",
    "build_video_api_url",
    "dispatch_download",
    "build_ydl_options",
    "derive_video_id",
    "normalize_title",
    "fallback_title",
    "wait_until",
    # Sources
    "parse_video_line",
    "load_video_urls_from_file",
    "collect_video_urls",
    # Models and data structures
    "VideoRequest",
    "Credential",
    "Manifest",
    "DownloadJob",
    "BrowserSession",
    "DownloadLogger",
    # Errors
    "StreamFetchError",
    "EnvironmentSetupError",
    "MalformedInputError",
    "AuthTimeoutError",
    "BrowserSessionError",
    "CredentialUnavailableError",
    "AccessTokenUnavailableError",
    "ApiError",
    "ManifestNotFoundError",
    "DownloadFailedError",
    "exit_code_for",
    "report_failure",
    # Configuration
    "load_config_file",
    "positive_float",
]
