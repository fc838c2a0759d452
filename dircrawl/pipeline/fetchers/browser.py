from __future__ import annotations

from typing import Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright


LAUNCH_ARGS = [
    '--disable-dev-shm-usage',     # Prevent /dev/shm issues in containers
    '--disable-extensions',         # No browser extensions
    '--disable-plugins',            # No plugins
    '--no-first-run',               # Skip first run setup
    '--disable-default-apps',       # No default apps
]


class BrowserSession:
    """One Chromium page shared by the whole crawl.

    The session is interactive by default (visible window) because a human
    has to complete the directory's login. Sandbox stays enabled.

    Usage:
        with BrowserSession(headless=False) as session:
            session.page.goto(url)
    """

    def __init__(
        self,
        *,
        headless: bool = False,
        slow_mo_ms: int = 100,
        timeout_ms: int = 30000,
        viewport: tuple[int, int] = (1280, 800),
    ) -> None:
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.timeout_ms = timeout_ms
        self.viewport = viewport
        self._pw_cm = None
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    def __enter__(self) -> "BrowserSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def start(self) -> Page:
        self._pw_cm = sync_playwright()
        self._playwright = self._pw_cm.__enter__()
        self._browser = self._playwright.chromium.launch(
            headless=self.headless,
            slow_mo=self.slow_mo_ms,
            args=LAUNCH_ARGS,
        )
        width, height = self.viewport
        self._context = self._browser.new_context(viewport={"width": width, "height": height})
        self._context.set_default_timeout(self.timeout_ms)
        self.page = self._context.new_page()
        return self.page

    def close(self) -> None:
        """Close browser and stop Playwright; safe to call twice."""
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._pw_cm is not None:
            self._pw_cm.__exit__(None, None, None)
            self._pw_cm = None
        self._playwright = None
        self._context = None
        self.page = None
