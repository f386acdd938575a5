"""Configuration and argument parsing for the stream downloader."""

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

from .models import (
    API_VERSION,
    DEFAULT_AUTH_TIMEOUT,
    DEFAULT_CONFIG_PATH,
    DEFAULT_COOKIE_RETRY_DELAY,
    DEFAULT_OUTPUT_DIRECTORY,
    DEFAULT_TOKEN_TIMEOUT,
    ENV_API_VERSION,
    ENV_BROWSER_CHANNEL,
    ENV_FORMAT,
    ENV_OUTPUT_DIRECTORY,
    ENV_USERNAME,
)

VALID_CONFIG_KEYS = {
    "username",
    "output_directory",
    "format",
    "simulate",
    "verbose",
    "auth_timeout",
    "cookie_retry_delay",
    "token_timeout",
    "browser_channel",
    "api_version",
    "api_base_url",
    "video_urls_file",
}


def positive_float(value: str) -> float:
    """Return *value* parsed as a positive number of seconds for argparse."""

    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise argparse.ArgumentTypeError("Expected a positive number") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("Expected a positive number")

    return parsed


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load configuration defaults from a JSON file.

    Missing or invalid files yield an empty dictionary; unknown keys are
    reported and dropped.
    """
    if not os.path.exists(config_path):
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as exc:
        print(f"Warning: Failed to parse config file {config_path}: {exc}. Ignoring.", file=sys.stderr)
        return {}
    except OSError as exc:
        print(f"Warning: Failed to read config file {config_path}: {exc}. Ignoring.", file=sys.stderr)
        return {}

    if not isinstance(config, dict):
        print(f"Warning: Config file {config_path} must contain a JSON object. Ignoring.", file=sys.stderr)
        return {}

    invalid_keys = set(config.keys()) - VALID_CONFIG_KEYS
    if invalid_keys:
        print(f"Warning: Unknown config keys ignored: {', '.join(sorted(invalid_keys))}", file=sys.stderr)

    return {k: v for k, v in config.items() if k in VALID_CONFIG_KEYS}


def _config_path_from_argv(argv: List[str]) -> str:
    for idx, arg in enumerate(argv):
        if arg == "--config" and idx + 1 < len(argv):
            return argv[idx + 1]
        if arg.startswith("--config="):
            return arg.split("=", 1)[1]
    return DEFAULT_CONFIG_PATH


def build_parser(config: Optional[Dict[str, Any]] = None) -> argparse.ArgumentParser:
    config = config or {}
    parser = argparse.ArgumentParser(
        description=(
            "Log in to Microsoft Stream in a browser, resolve each video's HLS manifest "
            "and download it with yt-dlp."
        )
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to JSON configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--video-urls",
        nargs="+",
        default=[],
        metavar="URL",
        help="One or more video URLs. The first one is also used to start the login.",
    )
    parser.add_argument(
        "--video-urls-file",
        default=config.get("video_urls_file"),
        help="Path to a text file with one video URL per line ('#' starts a comment)",
    )
    parser.add_argument("--username", default=config.get("username"), help="Account e-mail used for the login form")
    parser.add_argument(
        "--output-directory",
        default=config.get("output_directory"),
        help=f"Directory for downloaded videos (default: {DEFAULT_OUTPUT_DIRECTORY})",
    )
    parser.add_argument(
        "-f",
        "--format",
        default=config.get("format"),
        help="Format selector passed to yt-dlp (see yt-dlp's format selection docs)",
    )
    parser.add_argument(
        "-s",
        "--simulate",
        action="store_true",
        default=config.get("simulate", False),
        help="Resolve everything and validate the download without writing any video",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=config.get("verbose", False),
        help="Print additional information (use this before opening an issue)",
    )
    parser.add_argument(
        "--auth-timeout",
        type=positive_float,
        default=config.get("auth_timeout", DEFAULT_AUTH_TIMEOUT),
        help=f"Seconds to wait for the login to finish (default: {DEFAULT_AUTH_TIMEOUT:g})",
    )
    parser.add_argument(
        "--cookie-retry-delay",
        type=positive_float,
        default=config.get("cookie_retry_delay", DEFAULT_COOKIE_RETRY_DELAY),
        help=(
            "Seconds to wait before re-reading the API cookies once when they are "
            f"missing (default: {DEFAULT_COOKIE_RETRY_DELAY:g})"
        ),
    )
    parser.add_argument(
        "--token-timeout",
        type=positive_float,
        default=config.get("token_timeout", DEFAULT_TOKEN_TIMEOUT),
        help=f"Seconds to wait for the page to expose its access token (default: {DEFAULT_TOKEN_TIMEOUT:g})",
    )
    parser.add_argument(
        "--browser-channel",
        default=config.get("browser_channel"),
        help="Playwright browser channel to launch instead of bundled Chromium (e.g. chrome, msedge)",
    )
    parser.add_argument(
        "--api-version",
        default=config.get("api_version"),
        help=f"Stream API version string (default: {API_VERSION})",
    )
    parser.add_argument(
        "--check-environment",
        action="store_true",
        help="Only check that yt-dlp, ffmpeg and the output directory are usable, then exit",
    )
    parser.set_defaults(api_base_url=config.get("api_base_url"))
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments, using the JSON config file for defaults."""
    if argv is None:
        argv = sys.argv[1:]

    config_path = _config_path_from_argv(argv)
    config = load_config_file(config_path)
    if config:
        print(f"Loaded configuration from {config_path}")

    return build_parser(config).parse_args(argv)


def _normalize_env_str(value: Optional[str]) -> Optional[str]:
    """Normalize environment variable string value."""
    if not value:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def apply_environment_defaults(args, environ: Optional[Dict[str, str]] = None) -> None:
    """Populate missing settings from STREAMFETCH_* environment variables."""

    if environ is None:
        environ = os.environ

    env_defaults = (
        ("username", ENV_USERNAME, None),
        ("output_directory", ENV_OUTPUT_DIRECTORY, DEFAULT_OUTPUT_DIRECTORY),
        ("format", ENV_FORMAT, None),
        ("api_version", ENV_API_VERSION, API_VERSION),
        ("browser_channel", ENV_BROWSER_CHANNEL, None),
    )

    for attr, env_name, fallback in env_defaults:
        if getattr(args, attr, None):
            continue
        env_value = _normalize_env_str(environ.get(env_name))
        setattr(args, attr, env_value if env_value is not None else fallback)
