"""Playwright browser session with identity rotation and navigation retries."""

import random
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from bestsellers.config_loader import get_browser_config, get_delay_config
from bestsellers.errors import BrowserLaunchError, BrowserNotLaunchedError
from bestsellers.pacing import DelayPolicy

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
]

DEFAULT_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--window-size=1920,1080",
]

CHALLENGE_MARKERS = [
    "enter the characters you see below",
    "sorry, we just need to make sure you're not a robot",
    "sorry, we just need to make sure",
    "type the characters you see in this image",
    "/errors/validatecaptcha",
]

HIDE_WEBDRIVER_SCRIPT = "Object.defineProperty(navigator, 'webdriver', {get: () => undefined});"


class BotChallengeError(Exception):
    """Raised when a challenge page outlives the configured number of waits."""
    pass


def _start_playwright() -> Playwright:
    return sync_playwright().start()


class BrowserSession:
    """One Chromium instance owned by a single discovery or scrape run."""

    def __init__(
        self,
        headless: bool = True,
        delays: Optional[DelayPolicy] = None,
        navigation_timeout_ms: int = 60000,
        max_challenge_waits: int = 5,
        viewport: Optional[Dict[str, int]] = None,
        user_agents: Optional[List[str]] = None,
        launcher: Callable[[], Any] = _start_playwright,
        rng: Optional[random.Random] = None,
    ):
        self.headless = headless
        self.delays = delays or DelayPolicy()
        self.navigation_timeout_ms = int(navigation_timeout_ms)
        self.max_challenge_waits = max(0, int(max_challenge_waits))
        self.viewport = viewport or {"width": 1920, "height": 1080}
        self.user_agents = list(user_agents or USER_AGENTS)
        self._launcher = launcher
        self._rng = rng or random.Random()

        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        headless: Optional[bool] = None,
        delays: Optional[DelayPolicy] = None,
    ) -> "BrowserSession":
        browser_cfg = get_browser_config(config)
        return cls(
            headless=browser_cfg.get("headless", True) if headless is None else headless,
            delays=delays or DelayPolicy.from_config(get_delay_config(config)),
            navigation_timeout_ms=browser_cfg.get("navigation_timeout_ms", 60000),
            max_challenge_waits=browser_cfg.get("max_challenge_waits", 5),
            viewport=browser_cfg.get("viewport"),
        )

    def __enter__(self):
        self.launch()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def is_launched(self) -> bool:
        return self.browser is not None

    def launch(self) -> None:
        """Start the browser. Any failure here is fatal for the run."""
        if self.browser is not None:
            return
        logger.info("Launching browser (headless={})...", self.headless)
        try:
            self.playwright = self._launcher()
            self.browser = self.playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
            )
        except Exception as e:
            self.close()
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e
        logger.info("Browser launched")

    def pick_user_agent(self) -> str:
        return self._rng.choice(self.user_agents)

    def new_page(self) -> Page:
        """Open a page in a fresh context with a newly drawn identity."""
        if self.browser is None:
            raise BrowserNotLaunchedError("Browser not launched. Call launch() first.")

        user_agent = self.pick_user_agent()
        context = self.browser.new_context(
            user_agent=user_agent,
            viewport=self.viewport,
            locale="en-US",
            extra_http_headers=dict(DEFAULT_HEADERS),
        )
        context.add_init_script(HIDE_WEBDRIVER_SCRIPT)
        self._contexts.append(context)

        page = context.new_page()
        page.set_default_navigation_timeout(self.navigation_timeout_ms)
        logger.debug("New page with user agent: {}", user_agent)
        return page

    @staticmethod
    def detect_challenge(page: Page) -> Optional[str]:
        """Return the matched marker when the page is a captcha/verification wall."""
        try:
            content = (page.content() or "").lower()
        except Exception as e:
            logger.debug("Could not read page content for challenge check: {}", e)
            return None
        for marker in CHALLENGE_MARKERS:
            if marker in content:
                return marker
        return None

    def navigate_with_retry(self, page: Page, url: str, max_retries: int = 3) -> bool:
        """Navigate to ``url``; True on success, False once retries are exhausted.

        Challenge pages are waited out inside the same attempt. Navigation
        exceptions back off exponentially before the next attempt.
        """
        max_retries = max(1, int(max_retries))
        challenge_waits = 0
        attempt = 0

        def _attempt() -> None:
            nonlocal attempt, challenge_waits
            attempt += 1
            while True:
                logger.info("Navigating to {} (attempt {}/{})", url, attempt, max_retries)
                page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
                marker = self.detect_challenge(page)
                if marker is None:
                    return
                if challenge_waits >= self.max_challenge_waits:
                    raise BotChallengeError(
                        f"Bot challenge still present after {challenge_waits} waits ({marker})"
                    )
                challenge_waits += 1
                logger.warning(
                    "Bot challenge detected ({}), waiting before retrying ({}/{})",
                    marker,
                    challenge_waits,
                    self.max_challenge_waits,
                )
                self.delays.challenge_pause()

        def _log_before_sleep(retry_state) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            wait_seconds = retry_state.next_action.sleep if retry_state.next_action else 0
            logger.warning(
                "Navigation failed (attempt {}): {}. Waiting {:.0f}s before retry...",
                retry_state.attempt_number,
                exc,
                wait_seconds,
            )

        retrying = Retrying(
            stop=stop_after_attempt(max_retries),
            wait=lambda retry_state: self.delays.backoff(retry_state.attempt_number),
            retry=retry_if_exception_type(Exception),
            sleep=self.delays.sleep,
            before_sleep=_log_before_sleep,
            reraise=True,
        )

        try:
            retrying(_attempt)
        except Exception as e:
            logger.error("Giving up on {} after {} attempts: {}", url, max_retries, e)
            return False
        return True

    def close(self) -> None:
        """Close contexts, browser and driver. Safe to call repeatedly."""
        if self.browser is None and self.playwright is None:
            return
        logger.info("Closing browser...")
        for context in self._contexts:
            try:
                context.close()
            except Exception as e:
                logger.debug("Ignoring context close error: {}", e)
        self._contexts = []
        if self.browser is not None:
            try:
                self.browser.close()
            except Exception as e:
                logger.debug("Ignoring browser close error: {}", e)
        if self.playwright is not None:
            try:
                self.playwright.stop()
            except Exception as e:
                logger.debug("Ignoring playwright stop error: {}", e)
        self.browser = None
        self.playwright = None
        logger.info("Browser closed")
