"""Download dispatch: hands an authenticated HLS request to yt-dlp."""

import http.cookiejar
import urllib.parse
from typing import Callable, Dict, List, Optional, Tuple

try:
    import yt_dlp
    from yt_dlp.utils import DownloadError
except ImportError:
    raise ImportError("yt-dlp is not installed. Run: pip install -e .")

from .errors import DownloadFailedError
from .logger import DownloadLogger
from .models import DownloadJob


def _escape_template(path: str) -> str:
    """Escape a literal path for use as a yt-dlp output template."""
    return path.replace("%", "%%")


def parse_cookie_header(header: str) -> List[Tuple[str, str]]:
    """Split a ``name=value; name=value`` header into pairs."""
    pairs = []
    for part in header.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name:
            pairs.append((name, value))
    return pairs


def build_cookies(job: DownloadJob) -> List[http.cookiejar.Cookie]:
    """Cookies for *job*, scoped to the host serving the manifest.

    yt-dlp rejects cookies passed as a raw ``Cookie`` header; they go into
    its cookie jar instead.
    """
    parsed = urllib.parse.urlsplit(job.playback_url)
    host = parsed.hostname or ""
    secure = parsed.scheme == "https"
    cookies = []
    for name, value in parse_cookie_header(job.cookie_header):
        cookies.append(
            http.cookiejar.Cookie(
                version=0,
                name=name,
                value=value,
                port=None,
                port_specified=False,
                domain=host,
                domain_specified=False,
                domain_initial_dot=False,
                path="/",
                path_specified=True,
                secure=secure,
                expires=None,
                discard=True,
                comment=None,
                comment_url=None,
                rest={},
            )
        )
    return cookies


def build_ydl_options(
    job: DownloadJob,
    logger: DownloadLogger,
    hook: Optional[Callable[[dict], None]] = None,
) -> dict:
    """Build yt-dlp options for one authenticated HLS download."""
    ydl_opts: Dict = {
        "outtmpl": _escape_template(job.output_path),
        "continuedl": True,
        "retries": 5,
        "fragment_retries": 5,
        "noprogress": False,
        "no_warnings": True,
        "quiet": False,
        "logger": logger,
        "progress_hooks": [hook] if hook else [],
    }

    if job.format:
        ydl_opts["format"] = job.format
    if job.simulate:
        ydl_opts["simulate"] = True
        ydl_opts["skip_download"] = True

    debug_parts = [f"output={job.output_path}"]
    debug_parts.append(f"format={job.format}" if job.format else "format=yt-dlp-default")
    if job.simulate:
        debug_parts.append("simulate=True")
    print("Constructed yt-dlp options: " + ", ".join(debug_parts))

    return ydl_opts


def dispatch_download(job: DownloadJob, verbose: bool = False) -> None:
    """Download *job* with yt-dlp, raising DownloadFailedError on failure."""
    logger = DownloadLogger(verbose=verbose)
    logger.set_context(job.title, job.video_id)
    prefix = f"[title={job.title}]"
    if job.video_id:
        prefix = f"[title={job.title} video_id={job.video_id}]"

    def hook(d: dict) -> None:
        status = d.get("status")
        if status == "finished":
            filename = d.get("filename") or job.output_path
            print(f"{prefix} Completed download: {filename}")
        elif status == "error":
            logger.error(f"Download error for {job.title}")

    if job.simulate:
        print(
            f"{prefix} Simulating download of {job.playback_url} "
            f"to {job.output_path}; nothing will be written."
        )
    else:
        print(f"Spawning yt-dlp with cookie and HLS URL for {job.title!r}...")

    ydl_opts = build_ydl_options(job, logger, hook)

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            for cookie in build_cookies(job):
                ydl.cookiejar.set_cookie(cookie)
            retcode = ydl.download([job.playback_url])
    except DownloadError as exc:
        raise DownloadFailedError(f"yt-dlp failed for {job.title!r}: {exc}") from exc

    if retcode:
        reason = logger.last_error or f"yt-dlp exited with code {retcode}"
        raise DownloadFailedError(f"yt-dlp failed for {job.title!r}: {reason}")
