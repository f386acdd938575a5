"""Video URL list parsing and loading."""

import re
from typing import Iterable, List, Optional


def parse_video_line(line: str) -> Optional[str]:
    """Parse a line from a video list file into a URL, or None for blanks/comments."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    comment_match = re.search(r"\s#", stripped)
    if comment_match:
        stripped = stripped[: comment_match.start()].rstrip()
        if not stripped:
            return None

    return stripped


def load_video_urls_from_file(path: str) -> List[str]:
    """Load video URLs from a local file, one per line."""
    urls: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            parsed = parse_video_line(line)
            if parsed:
                urls.append(parsed)
    print(f"Loaded {len(urls)} video URLs from {path}")
    return urls


def merge_video_urls(*groups: Iterable[str]) -> List[str]:
    """Concatenate URL groups in order. Repeated URLs are kept as given."""
    merged: List[str] = []
    for group in groups:
        for url in group:
            cleaned = url.strip()
            if cleaned:
                merged.append(cleaned)
    return merged


def collect_video_urls(args) -> List[str]:
    """Collect video URLs from --video-urls and --video-urls-file."""
    cli_urls = list(getattr(args, "video_urls", None) or [])
    file_urls: List[str] = []
    urls_file = getattr(args, "video_urls_file", None)
    if urls_file:
        file_urls = load_video_urls_from_file(urls_file)
    return merge_video_urls(cli_urls, file_urls)
