"""Logger handed to yt-dlp while dispatching a download."""

import sys
from typing import List, Optional


class DownloadLogger:
    """yt-dlp logger that prefixes messages with the current video context."""

    IGNORED_FRAGMENTS = (
        "falling back on generic information extractor",
    )

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self.current_title: Optional[str] = None
        self.current_video_id: Optional[str] = None
        self.error_count = 0
        self.errors: List[str] = []

    def set_context(self, title: Optional[str], video_id: Optional[str] = None) -> None:
        self.current_title = title
        self.current_video_id = video_id

    def _format_with_context(self, message: str) -> str:
        context_parts = []
        if self.current_title:
            context_parts.append(f"title={self.current_title}")
        if self.current_video_id:
            context_parts.append(f"video_id={self.current_video_id}")
        if context_parts:
            return f"[{' '.join(context_parts)}] {message}"
        return message

    def _print(self, message: str, file=None) -> None:
        # Looked up per call so later stream redirection takes effect
        print(self._format_with_context(message), file=file or sys.stdout)

    def _is_ignored(self, text: str) -> bool:
        lowered = text.lower()
        return any(fragment in lowered for fragment in self.IGNORED_FRAGMENTS)

    @staticmethod
    def _ensure_text(message) -> str:
        if isinstance(message, bytes):
            return message.decode("utf-8", "ignore")
        return str(message)

    def debug(self, message) -> None:  # yt-dlp calls this
        if self.verbose:
            self._print(self._ensure_text(message))

    def info(self, message) -> None:
        self._print(self._ensure_text(message))

    def warning(self, message) -> None:
        text = self._ensure_text(message)
        if self._is_ignored(text):
            return
        self._print(text, file=sys.stderr)

    def error(self, message) -> None:
        text = self._ensure_text(message)
        self.error_count += 1
        self.errors.append(text)
        self._print(text, file=sys.stderr)

    @property
    def last_error(self) -> Optional[str]:
        return self.errors[-1] if self.errors else None
