"""Browser session owned by the pipeline for the whole run."""

from typing import Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .errors import AuthTimeoutError, BrowserSessionError, EnvironmentSetupError
from .models import EMAIL_INPUT_SELECTOR, SUBMIT_SELECTOR

# Reads the token the streaming web app keeps in its page-global session object.
ACCESS_TOKEN_QUERY = """() => {
    if (typeof sessionInfo === "undefined" || !sessionInfo) {
        return null;
    }
    return sessionInfo.AccessToken || null;
}"""

LAUNCH_ARGS = ["--disable-dev-shm-usage"]

# Playwright treats 0 ms as "wait indefinitely"
NO_TIMEOUT = 0


class BrowserSession:
    """A visible Chromium instance with a single page.

    Use as an async context manager; the browser is closed on every exit path.
    The login flow may ask for interactive steps (MFA), so the window is never
    headless.
    """

    def __init__(self, browser_channel: Optional[str] = None, verbose: bool = False) -> None:
        self.browser_channel = browser_channel
        self.verbose = verbose
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    async def __aenter__(self) -> "BrowserSession":
        await self.launch()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False

    @property
    def page(self):
        if self._page is None:
            raise RuntimeError("Browser session is not running")
        return self._page

    async def launch(self) -> None:
        print("Launching Chrome to perform the OpenID Connect dance...")
        launch_options = {"headless": False, "args": list(LAUNCH_ARGS)}
        if self.browser_channel:
            launch_options["channel"] = self.browser_channel
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(**launch_options)
            self._context = await self._browser.new_context()
            self._page = await self._context.new_page()
        except PlaywrightError as exc:
            await self.close()
            raise EnvironmentSetupError(f"Failed to launch the browser: {exc}") from exc

    async def close(self) -> None:
        if self._browser is None and self._playwright is None:
            return
        print("At this point Chrome's job is done, shutting it down...")
        try:
            if self._browser is not None:
                await self._browser.close()
        except PlaywrightError as exc:
            if self.verbose:
                print(f"Warning: browser did not close cleanly: {exc}")
        finally:
            self._page = None
            self._context = None
            self._browser = None
            if self._playwright is not None:
                playwright, self._playwright = self._playwright, None
                await playwright.stop()

    async def open_login(self, url: str) -> None:
        """Open the identity provider entry point and wait for the network to quiesce."""
        print("Navigating to STS login page...")
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=NO_TIMEOUT)
        except PlaywrightError as exc:
            raise BrowserSessionError(f"Failed to open the login page {url}: {exc}") from exc

    async def submit_username(self, username: str) -> None:
        try:
            await self.page.wait_for_selector(EMAIL_INPUT_SELECTOR)
            await self.page.keyboard.type(username)
            await self.page.click(SUBMIT_SELECTOR)
        except PlaywrightError as exc:
            raise BrowserSessionError(f"Failed to submit the login form: {exc}") from exc

    async def wait_for_stream_domain(self, marker: str, timeout: float) -> None:
        """Wait until the page has been redirected to a URL containing *marker*."""
        try:
            await self.page.wait_for_url(
                lambda url: marker in url,
                timeout=timeout * 1000,
                wait_until="commit",
            )
        except PlaywrightTimeoutError as exc:
            raise AuthTimeoutError(
                f"Login did not redirect to {marker} within {timeout:g} seconds"
            ) from exc
        except PlaywrightError as exc:
            raise BrowserSessionError(f"Browser failed while waiting for the login: {exc}") from exc

    async def goto(self, url: str, wait_until: str = "load") -> None:
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=NO_TIMEOUT)
        except PlaywrightError as exc:
            raise BrowserSessionError(f"Failed to navigate to {url}: {exc}") from exc

    async def is_loaded(self) -> bool:
        try:
            state = await self.page.evaluate("() => document.readyState")
        except PlaywrightError:
            return False
        return state == "complete"

    async def cookies_for(self, url: str) -> List[Dict]:
        try:
            return await self._context.cookies([url])
        except PlaywrightError as exc:
            raise BrowserSessionError(f"Failed to read cookies for {url}: {exc}") from exc

    async def read_access_token(self) -> Optional[str]:
        """Return the access token held in the page's session state, if any."""
        try:
            token = await self.page.evaluate(ACCESS_TOKEN_QUERY)
        except PlaywrightError as exc:
            # The page can be mid-navigation; treat as not ready yet.
            if self.verbose:
                print(f"Access token not readable yet: {exc}")
            return None
        return token or None
