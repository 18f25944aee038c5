"""Capture session: drive a headless browser while recording video."""

import sys
import uuid
from pathlib import Path
from typing import Any, Callable

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from scrollcast.config import Config
from scrollcast.errors import CaptureError, FinalizeError, LaunchError, NavigationError
from scrollcast.models.capture import (
    CaptureTarget,
    MarkerOutcome,
    RawRecording,
    ReadinessMarker,
    ScriptReport,
)
from scrollcast.readiness import await_marker
from scrollcast.recording import SessionStore, timed
from scrollcast.script import InteractionScript


class CaptureSession:
    """One headless browser, one recorded context, one raw recording.

    Usage:
        async with CaptureSession(config=config) as session:
            raw = await session.capture(target, marker, script)

    The browser, context, and page never leave the session. A session yields
    at most one recording; the browser is torn down when ``capture`` returns
    or raises, whether or not the session is used as a context manager.
    """

    def __init__(
        self,
        session_id: str | None = None,
        config: Config | None = None,
        playwright_factory: Callable[[], Any] | None = None,
    ):
        """Initialize CaptureSession.

        Args:
            session_id: Unique session identifier (auto-generated if not provided)
            config: Configuration object
            playwright_factory: Replacement for async_playwright (used by tests)
        """
        self.session_id = session_id or str(uuid.uuid4())
        self.config = config or Config.load()
        self._playwright_factory = playwright_factory or async_playwright

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

        self._store = SessionStore(self.session_id, self.config)
        self._captured = False

        self.marker_outcome: MarkerOutcome | None = None
        self.script_report: ScriptReport | None = None

    @property
    def browser(self) -> Browser:
        """Get the browser instance."""
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")
        return self._browser

    @property
    def store(self) -> SessionStore:
        """Video directory and capture log of this session."""
        return self._store

    async def start(self) -> "CaptureSession":
        """Launch Playwright and a headless Chromium.

        Raises:
            LaunchError: If the browser cannot be launched
        """
        if self._browser:
            return self

        try:
            self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.browser.headless,
                args=list(self.config.browser.extra_args),
            )
        except (PlaywrightError, OSError) as exc:
            error = LaunchError(f"Could not launch browser: {exc}")
            await self._stop_after(error)
            raise error from exc
        return self

    async def stop(self) -> None:
        """Tear down context, browser, and Playwright, in that order."""
        context, browser, playwright = self._context, self._browser, self._playwright
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        try:
            if context:
                await context.close()
        finally:
            try:
                if browser:
                    await browser.close()
            finally:
                if playwright:
                    await playwright.stop()

    async def __aenter__(self) -> "CaptureSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_val is not None:
            await self._stop_after(exc_val)
        else:
            await self._teardown()

    async def capture(
        self,
        target: CaptureTarget,
        marker: ReadinessMarker,
        script: InteractionScript,
    ) -> RawRecording:
        """Record ``target`` while playing ``script`` and return the raw video.

        Args:
            target: URL and viewport to record
            marker: Readiness marker waited for after navigation (timeout is not fatal)
            script: Interaction script, run only if its precondition element is present

        Returns:
            The finalized, non-empty raw recording

        Raises:
            LaunchError: If the browser cannot be launched
            NavigationError: If the page cannot be opened or navigated
            FinalizeError: If the recording cannot be flushed to a non-empty file,
                or teardown fails after a successful recording
            CaptureError: If the session was already used, a scripted action fails,
                or the session files cannot be written
        """
        if self._captured:
            raise CaptureError(f"Session {self.session_id} already produced its recording")
        self._captured = True

        try:
            raw = await self._record(target, marker, script)
        except BaseException as exc:
            await self._stop_after(exc)
            raise

        await self._teardown()
        return raw

    async def _record(
        self,
        target: CaptureTarget,
        marker: ReadinessMarker,
        script: InteractionScript,
    ) -> RawRecording:
        try:
            await self._store.prepare()
            await self.start()
            page = await self._open_page(target)
            await self._navigate(page, target.url)

            try:
                self.marker_outcome = await await_marker(page, marker, self._store)
            except PlaywrightError as exc:
                raise NavigationError(f"Page went away while waiting for {marker.selector}: {exc}") from exc

            script.store = self._store
            try:
                self.script_report = await script.run_if_ready(page)
            except PlaywrightError as exc:
                raise CaptureError(f"Interaction script failed: {exc}") from exc

            return await self._finalize(page)
        except OSError as exc:
            raise CaptureError(f"Could not write session files under {self._store.root}: {exc}") from exc

    async def _teardown(self) -> None:
        try:
            await self.stop()
        except (PlaywrightError, OSError) as exc:
            raise FinalizeError(f"Browser teardown failed: {exc}") from exc

    async def _stop_after(self, error: BaseException) -> None:
        """Tear down after a failed capture without hiding ``error``."""
        try:
            await self.stop()
        except (PlaywrightError, OSError) as exc:
            if isinstance(error, CaptureError):
                error.teardown_error = exc
            print(f"Browser teardown also failed: {exc}", file=sys.stderr, flush=True)

    async def _open_page(self, target: CaptureTarget) -> Page:
        size = target.viewport.as_dict()
        try:
            self._context = await self.browser.new_context(
                viewport=size,
                record_video_dir=str(self._store.video_dir),
                record_video_size=size,
            )
            self._page = await self._context.new_page()
        except PlaywrightError as exc:
            raise NavigationError(f"Could not open a recorded page: {exc}") from exc
        return self._page

    async def _navigate(self, page: Page, url: str) -> None:
        try:
            async with timed(self._store, "goto", url=url):
                await page.goto(url)
        except PlaywrightError as exc:
            raise NavigationError(f"Could not navigate to {url}: {exc}") from exc

    async def _finalize(self, page: Page) -> RawRecording:
        """Close the context (which writes the video) and resolve its path."""
        video = page.video
        if video is None:
            raise FinalizeError("Video recording was not enabled for this context")

        context, self._context = self._context, None
        try:
            async with timed(self._store, "close_context"):
                await context.close()
            path = Path(await video.path())
        except PlaywrightError as exc:
            raise FinalizeError(f"Could not finalize recording: {exc}") from exc

        try:
            size = path.stat().st_size
        except OSError as exc:
            raise FinalizeError(f"Recording was not written: {path}") from exc
        if size == 0:
            raise FinalizeError(f"Recording is empty: {path}")

        return RawRecording(path=path)
