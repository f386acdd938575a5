import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from streamfetch.polling import wait_until


def make_check(values):
    calls = []

    async def check():
        calls.append(len(calls))
        index = min(len(calls) - 1, len(values) - 1)
        return values[index]

    return check, calls


def test_returns_first_truthy_value():
    check, calls = make_check([None, "", "token"])

    result = asyncio.run(wait_until(check, timeout=1.0, interval=0.001))

    assert result == "token"
    assert len(calls) == 3


def test_gives_up_at_deadline():
    check, calls = make_check([None])

    result = asyncio.run(wait_until(check, timeout=0.05, interval=0.01))

    assert result is None
    assert len(calls) >= 2


def test_zero_timeout_checks_once():
    check, calls = make_check([None])

    assert asyncio.run(wait_until(check, timeout=0, interval=0.5)) is None
    assert len(calls) == 1
