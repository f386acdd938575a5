"""Tests for BrowserSession against a stubbed Playwright page."""

import asyncio
import sys
from pathlib import Path

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from streamfetch import session as session_module
from streamfetch.errors import AuthTimeoutError, BrowserSessionError, EnvironmentSetupError
from streamfetch.session import BrowserSession


class FakeKeyboard:
    def __init__(self):
        self.typed = []

    async def type(self, text):
        self.typed.append(text)


class FakePage:
    def __init__(self, goto_error=None, wait_error=None, evaluate_error=None, token="token"):
        self.goto_error = goto_error
        self.wait_error = wait_error
        self.evaluate_error = evaluate_error
        self.token = token
        self.keyboard = FakeKeyboard()
        self.gotos = []
        self.clicks = []
        self.waits = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.gotos.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector):
        return selector

    async def click(self, selector):
        self.clicks.append(selector)

    async def wait_for_url(self, matcher, timeout=None, wait_until=None):
        self.waits.append({"timeout": timeout, "wait_until": wait_until})
        if self.wait_error is not None:
            raise self.wait_error
        assert matcher("https://web.microsoftstream.com/video/abc")

    async def evaluate(self, expression):
        if self.evaluate_error is not None:
            raise self.evaluate_error
        if "readyState" in expression:
            return "complete"
        return self.token


class FakeContext:
    def __init__(self, cookies=None, error=None):
        self._cookies = cookies or []
        self.error = error
        self.requested = []

    async def cookies(self, urls):
        self.requested.append(list(urls))
        if self.error is not None:
            raise self.error
        return self._cookies

    async def new_page(self):
        return FakePage()


class FakeBrowser:
    def __init__(self, close_error=None):
        self.close_error = close_error
        self.closed = False

    async def close(self):
        self.closed = True
        if self.close_error is not None:
            raise self.close_error

    async def new_context(self):
        return FakeContext()


class FakeChromium:
    def __init__(self):
        self.launch_options = None

    async def launch(self, **options):
        self.launch_options = options
        return FakeBrowser()


class FakePlaywright:
    def __init__(self):
        self.chromium = FakeChromium()
        self.stopped = False

    async def stop(self):
        self.stopped = True


def running_session(page=None, context=None, browser=None):
    """A BrowserSession with its Playwright objects already in place."""
    browser_session = BrowserSession()
    browser_session._playwright = FakePlaywright()
    browser_session._browser = browser or FakeBrowser()
    browser_session._context = context or FakeContext()
    browser_session._page = page or FakePage()
    return browser_session


def test_launch_is_visible_and_closes_on_exit(monkeypatch: pytest.MonkeyPatch):
    playwright = FakePlaywright()

    class Starter:
        async def start(self):
            return playwright

    monkeypatch.setattr(session_module, "async_playwright", lambda: Starter())

    async def run():
        async with BrowserSession(browser_channel="chrome") as browser_session:
            assert browser_session.page is not None

    asyncio.run(run())

    assert playwright.chromium.launch_options["headless"] is False
    assert playwright.chromium.launch_options["channel"] == "chrome"
    assert "--disable-dev-shm-usage" in playwright.chromium.launch_options["args"]
    assert playwright.stopped


def test_launch_failure_is_environment_error(monkeypatch: pytest.MonkeyPatch):
    class Starter:
        async def start(self):
            raise PlaywrightError("Executable doesn't exist")

    monkeypatch.setattr(session_module, "async_playwright", lambda: Starter())

    with pytest.raises(EnvironmentSetupError):
        asyncio.run(BrowserSession().launch())


def test_navigations_have_no_timeout():
    page = FakePage()
    browser_session = running_session(page=page)

    asyncio.run(browser_session.open_login("https://provider/video/abc"))
    asyncio.run(browser_session.goto("https://provider/video/abc"))

    assert [call["timeout"] for call in page.gotos] == [0, 0]
    assert [call["wait_until"] for call in page.gotos] == ["networkidle", "load"]


def test_redirect_timeout_is_auth_timeout():
    page = FakePage(wait_error=PlaywrightTimeoutError("Timeout 90000ms exceeded"))
    browser_session = running_session(page=page)

    with pytest.raises(AuthTimeoutError):
        asyncio.run(browser_session.wait_for_stream_domain("microsoftstream.com/", 90))

    assert page.waits == [{"timeout": 90000, "wait_until": "commit"}]


def test_closed_page_during_redirect_wait_is_browser_session_error():
    page = FakePage(wait_error=PlaywrightError("Target page, context or browser has been closed"))

    with pytest.raises(BrowserSessionError) as excinfo:
        asyncio.run(running_session(page=page).wait_for_stream_domain("microsoftstream.com/", 90))

    assert excinfo.value.exit_code == 32


def test_failed_navigation_is_browser_session_error():
    page = FakePage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))

    with pytest.raises(BrowserSessionError) as excinfo:
        asyncio.run(running_session(page=page).goto("https://provider/video/abc"))

    assert isinstance(excinfo.value.__cause__, PlaywrightError)


def test_cookie_read_failure_is_browser_session_error():
    context = FakeContext(error=PlaywrightError("Browser has been closed"))

    with pytest.raises(BrowserSessionError):
        asyncio.run(running_session(context=context).cookies_for("https://api.microsoftstream.com/"))


def test_submit_username_types_and_clicks():
    page = FakePage()

    asyncio.run(running_session(page=page).submit_username("alice@example.com"))

    assert page.keyboard.typed == ["alice@example.com"]
    assert page.clicks == [session_module.SUBMIT_SELECTOR]


def test_token_read_during_navigation_returns_none():
    page = FakePage(evaluate_error=PlaywrightError("Execution context was destroyed"))
    browser_session = running_session(page=page)

    assert asyncio.run(browser_session.read_access_token()) is None
    assert asyncio.run(browser_session.is_loaded()) is False


def test_empty_token_is_none():
    assert asyncio.run(running_session(page=FakePage(token="")).read_access_token()) is None


def test_close_stops_playwright_even_if_browser_close_fails():
    browser = FakeBrowser(close_error=PlaywrightError("already closed"))
    browser_session = running_session(browser=browser)
    playwright = browser_session._playwright

    asyncio.run(browser_session.close())

    assert browser.closed
    assert playwright.stopped
    with pytest.raises(RuntimeError):
        browser_session.page
