#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
download_stream_videos.py

Download Microsoft Stream videos with yt-dlp after logging in through a real browser.
Supports:
- One or more video URLs (--video-urls)
- A local list of video URLs (--video-urls-file)
- Simulation mode that resolves everything but writes nothing (--simulate)
"""

import asyncio
import sys
from typing import List, Optional

from streamfetch.config import apply_environment_defaults, parse_args
from streamfetch.driver import run_pipeline
from streamfetch.errors import StreamFetchError, exit_code_for, report_failure
from streamfetch.health_check import run_environment_check
from streamfetch.sources import collect_video_urls


def print_run_banner(args) -> None:
    print(f"Video URLs: {args.video_urls}")
    print(f"Username: {args.username}")
    if args.simulate:
        print("There will be no video downloaded, it's only a simulation")
    else:
        print(f"Output Directory: {args.output_directory}")
        print(f"Video/Audio Quality: {args.format or 'yt-dlp default'}")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    apply_environment_defaults(args)
    verbose = bool(args.verbose)

    try:
        if args.check_environment:
            run_environment_check(args)
            print("\nEnvironment looks usable.")
            return 0

        try:
            args.video_urls = collect_video_urls(args)
        except OSError as exc:
            print(f"Error: Failed to read {args.video_urls_file}: {exc}", file=sys.stderr)
            return 2

        if not args.video_urls:
            print("Error: You must provide --video-urls or --video-urls-file", file=sys.stderr)
            return 2
        if not args.username:
            print("Error: You must provide --username", file=sys.stderr)
            return 2

        print_run_banner(args)
        run_environment_check(args)
        asyncio.run(run_pipeline(args))
    except StreamFetchError as exc:
        report_failure(exc, verbose=verbose)
        return exit_code_for(exc)
    except KeyboardInterrupt as exc:
        print("\nInterrupted.", file=sys.stderr)
        return exit_code_for(exc)

    print("\nAll done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
