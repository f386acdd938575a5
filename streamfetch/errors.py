"""Error taxonomy and top-level failure reporting for the stream downloader."""

import sys
from typing import Optional

# Process exit codes
EXIT_ENVIRONMENT_SETUP = 22
EXIT_MALFORMED_INPUT = 25
EXIT_MANIFEST_NOT_FOUND = 27
EXIT_API_ERROR = 29
EXIT_AUTH_TIMEOUT = 31
EXIT_BROWSER_SESSION = 32
EXIT_DOWNLOAD_FAILED = 33
EXIT_CREDENTIAL_UNAVAILABLE = 88
EXIT_ACCESS_TOKEN_UNAVAILABLE = 89
EXIT_INTERRUPTED = 130
EXIT_UNKNOWN = 1

# Non-verbose runs only show the head of an API error body
API_BODY_PREVIEW_LENGTH = 300


class StreamFetchError(Exception):
    """Base class for fatal pipeline errors. Each maps to one exit code."""

    exit_code = EXIT_UNKNOWN
    category = "unknown"
    hint = "Check the output above for details."

    def details(self) -> Optional[str]:
        """Extra diagnostics shown only in verbose mode."""
        return None


class EnvironmentSetupError(StreamFetchError):
    """Raised when the local environment cannot run the pipeline."""

    exit_code = EXIT_ENVIRONMENT_SETUP
    category = "environment"
    hint = (
        "Install the Python dependencies (pip install -e .) and the Playwright "
        "browser (playwright install chromium), then retry."
    )


class MalformedInputError(StreamFetchError):
    """Raised when a video URL has no final path segment to use as video ID."""

    exit_code = EXIT_MALFORMED_INPUT
    category = "malformed_input"
    hint = "Pass the full video URL, e.g. https://web.microsoftstream.com/video/<id>."


class AuthTimeoutError(StreamFetchError):
    """Raised when the login flow never redirects back to the streaming domain."""

    exit_code = EXIT_AUTH_TIMEOUT
    category = "auth_timeout"
    hint = (
        "Complete the login (including any MFA prompt) in the browser window "
        "before the timeout, or raise --auth-timeout."
    )


class BrowserSessionError(StreamFetchError):
    """Raised when the browser page fails or is closed during the run."""

    exit_code = EXIT_BROWSER_SESSION
    category = "browser_session"
    hint = (
        "Keep the browser window open until the run finishes. If the login page "
        "changed, rerun with --verbose and report the error."
    )


class CredentialUnavailableError(StreamFetchError):
    """Raised when the signed API cookies never appear in the session."""

    exit_code = EXIT_CREDENTIAL_UNAVAILABLE
    category = "credential_unavailable"
    hint = (
        "Unable to read cookies. Try launching one more time, this is not an "
        "exact science. Raising --cookie-retry-delay may help on slow connections."
    )


class AccessTokenUnavailableError(StreamFetchError):
    """Raised when the page never exposes an access token."""

    exit_code = EXIT_ACCESS_TOKEN_UNAVAILABLE
    category = "access_token_unavailable"
    hint = "The video page did not finish loading its session. Raise --token-timeout and retry."


class ApiError(StreamFetchError):
    """Raised when the metadata API answers with an error status."""

    exit_code = EXIT_API_ERROR
    category = "api_error"
    hint = (
        "The session is likely expired or you lack access to this video. "
        "Retrying within the same session will not help; rerun the login."
    )

    def __init__(self, status: int, body: str, url: Optional[str] = None) -> None:
        self.status = status
        self.body = body
        self.url = url
        preview = body[:API_BODY_PREVIEW_LENGTH]
        if len(body) > API_BODY_PREVIEW_LENGTH:
            preview += "..."
        super().__init__(f"Error when calling the Stream API: HTTP {status}: {preview}")

    def details(self) -> Optional[str]:
        parts = []
        if self.url:
            parts.append(f"Request URL: {self.url}")
        parts.append(f"Full response body:\n{self.body}")
        return "\n".join(parts)


class ManifestNotFoundError(StreamFetchError):
    """Raised when the API response lists no HLS playback URL."""

    exit_code = EXIT_MANIFEST_NOT_FOUND
    category = "manifest_not_found"
    hint = "The video has no HLS rendition yet (still processing?) or is not a playable video."


class DownloadFailedError(StreamFetchError):
    """Raised when yt-dlp reports a failed transfer."""

    exit_code = EXIT_DOWNLOAD_FAILED
    category = "download_failed"
    hint = "Rerun with --verbose to see the yt-dlp output, or try --simulate first."


def exit_code_for(exc: BaseException) -> int:
    """Map an exception to the documented process exit code."""
    if isinstance(exc, StreamFetchError):
        return exc.exit_code
    if isinstance(exc, KeyboardInterrupt):
        return EXIT_INTERRUPTED
    return EXIT_UNKNOWN


def report_failure(exc: StreamFetchError, verbose: bool = False, file=None) -> None:
    """Print a formatted failure summary for a fatal pipeline error."""
    out = file if file is not None else sys.stderr
    print("\n" + "=" * 70, file=out)
    print(f"Fatal error [{exc.category}] (exit code {exc.exit_code})", file=out)
    print("=" * 70, file=out)
    print(str(exc), file=out)
    if verbose:
        details = exc.details()
        if details:
            print(details, file=out)
        if exc.__cause__ is not None:
            print(f"Caused by: {exc.__cause__!r}", file=out)
    print(f"\nHint: {exc.hint}", file=out)
    print("Exiting...", file=out)
