"""Environment checks run before the browser is launched."""

import os
import shutil
import sys

from yt_dlp.version import __version__ as YT_DLP_VERSION

from .errors import EnvironmentSetupError


def ensure_output_directory(path: str) -> None:
    """Create *path* if needed, raising EnvironmentSetupError when that fails."""
    if os.path.isdir(path):
        return
    print(f"Creating output directory: {os.path.abspath(path)}")
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        raise EnvironmentSetupError(f"Cannot create output directory {path}: {exc}") from exc


def run_environment_check(args) -> None:
    """Report tool versions and prepare the output directory."""
    print(f"Using yt-dlp version {YT_DLP_VERSION}")

    ffmpeg_path = shutil.which("ffmpeg")
    if ffmpeg_path:
        print(f"Using ffmpeg at {ffmpeg_path}")
    else:
        print(
            "Warning: FFmpeg is missing. yt-dlp can fetch HLS natively, but a recent "
            "FFmpeg in $PATH is recommended for merging and fixups.",
            file=sys.stderr,
        )

    ensure_output_directory(args.output_directory)
