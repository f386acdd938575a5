import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from streamfetch.sources import collect_video_urls, load_video_urls_from_file, parse_video_line


@pytest.mark.parametrize(
    "line, expected",
    [
        ("https://web.microsoftstream.com/video/abc", "https://web.microsoftstream.com/video/abc"),
        ("   https://web.microsoftstream.com/video/abc   ", "https://web.microsoftstream.com/video/abc"),
        ("https://web.microsoftstream.com/video/abc  # week 1", "https://web.microsoftstream.com/video/abc"),
        ("# just a comment", None),
        ("", None),
    ],
)
def test_parse_video_line(line, expected):
    assert parse_video_line(line) == expected


def test_load_video_urls_from_file(tmp_path):
    path = tmp_path / "videos.txt"
    path.write_text(
        "# lectures\nhttps://s/video/one\n\nhttps://s/video/two # second\n",
        encoding="utf-8",
    )

    assert load_video_urls_from_file(str(path)) == ["https://s/video/one", "https://s/video/two"]


def test_collect_keeps_cli_order_then_file_including_repeats(tmp_path):
    path = tmp_path / "videos.txt"
    path.write_text("https://s/video/two\nhttps://s/video/three\n", encoding="utf-8")
    args = SimpleNamespace(
        video_urls=["https://s/video/one", "https://s/video/two"],
        video_urls_file=str(path),
    )

    assert collect_video_urls(args) == [
        "https://s/video/one",
        "https://s/video/two",
        "https://s/video/two",
        "https://s/video/three",
    ]


def test_collect_without_file():
    args = SimpleNamespace(video_urls=["https://s/video/one"], video_urls_file=None)

    assert collect_video_urls(args) == ["https://s/video/one"]
