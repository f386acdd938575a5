"""Tests for signed cookie extraction with a single bounded retry."""

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from streamfetch import credentials
from streamfetch.errors import CredentialUnavailableError

API_URL = "https://api.microsoftstream.com"


class FakeJarSession:
    """Returns one prepared cookie jar per read, repeating the last one."""

    def __init__(self, jars):
        self.jars = list(jars)
        self.reads = []

    async def cookies_for(self, url):
        self.reads.append(url)
        index = min(len(self.reads) - 1, len(self.jars) - 1)
        return self.jars[index]


def cookie(name, value):
    return {"name": name, "value": value, "domain": ".api.microsoftstream.com", "path": "/"}


BOTH = [cookie("Authorization_Api", "authz"), cookie("Signature_Api", "sig")]


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch):
    recorded = []

    async def fake_sleep(delay):
        recorded.append(delay)

    monkeypatch.setattr(credentials.asyncio, "sleep", fake_sleep)
    return recorded


def test_cookies_present_immediately(sleeps):
    session = FakeJarSession([BOTH])

    credential = asyncio.run(credentials.extract_credential(session, API_URL))

    assert credential.cookie_header == "Authorization=authz; Signature=sig"
    assert session.reads == [API_URL]
    assert sleeps == []


def test_cookies_populated_after_first_check(sleeps):
    session = FakeJarSession([[cookie("Authorization_Api", "authz")], BOTH])

    credential = asyncio.run(credentials.extract_credential(session, API_URL, retry_delay=5.0))

    assert credential.cookie_header == "Authorization=authz; Signature=sig"
    assert len(session.reads) == 2
    assert sleeps == [5.0]


def test_missing_cookie_fails_after_exactly_one_retry(sleeps):
    only_authz = [cookie("Authorization_Api", "authz"), cookie("Other", "x")]
    session = FakeJarSession([only_authz])

    with pytest.raises(CredentialUnavailableError) as excinfo:
        asyncio.run(credentials.extract_credential(session, API_URL, retry_delay=5.0))

    assert excinfo.value.exit_code == 88
    assert len(session.reads) == 2
    assert sleeps == [5.0]


def test_empty_cookie_value_counts_as_missing():
    jar = [cookie("Authorization_Api", ""), cookie("Signature_Api", "sig")]

    assert credentials.credential_from_jar(jar) is None
    assert credentials.credential_from_jar(BOTH).signature == "sig"


def test_jar_read_errors_propagate(sleeps):
    class BrokenSession:
        async def cookies_for(self, url):
            raise RuntimeError("target closed")

    with pytest.raises(RuntimeError):
        asyncio.run(credentials.extract_credential(BrokenSession(), API_URL))
    assert sleeps == []
