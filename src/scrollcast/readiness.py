"""Readiness gate: wait for the page to attach its marker element."""

import sys
import time
from typing import TYPE_CHECKING

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from scrollcast.models.action_log import MarkerEntry
from scrollcast.models.capture import MarkerOutcome, ReadinessMarker
from scrollcast.recording import SessionStore

if TYPE_CHECKING:
    from playwright.async_api import Page


async def await_marker(
    page: "Page",
    marker: ReadinessMarker,
    store: SessionStore | None = None,
) -> MarkerOutcome:
    """Wait for ``marker.selector`` to be attached to the document.

    Blocks for at most ``marker.timeout_ms``. Running out of time is an
    expected outcome and is returned as ``MarkerOutcome.TIMED_OUT``; other
    Playwright errors propagate.
    """
    start = time.monotonic()
    try:
        await page.wait_for_selector(
            marker.selector,
            state="attached",
            timeout=marker.timeout_ms,
        )
        outcome = MarkerOutcome.FOUND
    except PlaywrightTimeoutError:
        print(
            f"Readiness marker {marker.selector!r} not attached within {marker.timeout_ms}ms; continuing",
            file=sys.stderr,
            flush=True,
        )
        outcome = MarkerOutcome.TIMED_OUT

    if store is not None:
        await store.write(MarkerEntry(
            selector=marker.selector,
            timeout_ms=marker.timeout_ms,
            outcome=outcome,
            duration_ms=round((time.monotonic() - start) * 1000, 3),
        ))
    return outcome
