"""Timed scroll/interaction sequence played against a live page."""

import asyncio
import sys
import time
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable

from scrollcast.config import ScriptConfig
from scrollcast.models.action_log import ActionEntry, ScriptEntry
from scrollcast.models.capture import (
    ClickIfPresent,
    HoverIfPresent,
    InteractionStep,
    ScriptReport,
    ScrollBy,
    Wait,
    WhenPresent,
)
from scrollcast.recording import SessionStore, timed

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

Sleep = Callable[[float], Awaitable[None]]
Handles = dict[str, "ElementHandle | None"]


def _conditional_selectors(steps: list[InteractionStep], into: list[str]) -> None:
    for step in steps:
        if isinstance(step, (ClickIfPresent, HoverIfPresent)):
            into.append(step.selector)
        elif isinstance(step, WhenPresent):
            into.extend(step.selectors)
            _conditional_selectors(step.steps, into)


class _ScrollBurst:
    """Consecutive wheel events, written as one log entry once scrolling stops."""

    def __init__(self):
        self.events = 0
        self.delta_x = 0.0
        self.delta_y = 0.0
        self.started: float | None = None
        self.ended: float | None = None

    def add(self, step: ScrollBy, started: float) -> None:
        if self.started is None:
            self.started = started
        self.events += 1
        self.delta_x += step.delta_x
        self.delta_y += step.delta_y
        self.ended = time.monotonic()


class InteractionScript:
    """Ordered interaction steps, each finishing before the next starts.

    Which optional elements exist is decided once, before the first step,
    and the conditional steps act on those same element handles. An element
    that attaches while the script is scrolling does not count.

    Usage:
        script = InteractionScript.default(config.script)
        report = await script.run_if_ready(page)
    """

    def __init__(
        self,
        steps: Iterable[InteractionStep],
        precondition: str | None = None,
        sleep: Sleep | None = None,
    ):
        """Initialize InteractionScript.

        Args:
            steps: Steps to run, in order
            precondition: Selector that must be on the page for the script to run at all
            sleep: Awaitable sleep taking seconds (defaults to asyncio.sleep)
        """
        self.steps: list[InteractionStep] = list(steps)
        self.precondition = precondition
        self._sleep = sleep or asyncio.sleep
        self.store: SessionStore | None = None
        self._burst = _ScrollBurst()

    @classmethod
    def default(cls, settings: ScriptConfig, sleep: Sleep | None = None) -> "InteractionScript":
        """Build the standard sequence: lead-in, smooth scroll, settle, personalize."""
        steps: list[InteractionStep] = [Wait(duration_ms=settings.lead_in_ms)]

        # Many small wheel events read as a smooth scroll in the recording.
        for _ in range(settings.scroll_iterations):
            steps.append(ScrollBy(delta_y=settings.scroll_delta))
            steps.append(Wait(duration_ms=settings.scroll_delay_ms))

        steps.append(Wait(duration_ms=settings.settle_ms))
        steps.append(
            WhenPresent(
                selectors=[settings.personalize_selector, settings.go_selector],
                steps=[
                    ClickIfPresent(selector=settings.personalize_selector),
                    Wait(duration_ms=settings.hover_delay_ms),
                    HoverIfPresent(selector=settings.go_selector),
                    Wait(duration_ms=settings.dwell_ms),
                ],
            )
        )
        return cls(steps, precondition=settings.outro_selector, sleep=sleep)

    def selectors(self) -> list[str]:
        """Every selector the script checks, precondition first, without repeats."""
        found = [self.precondition] if self.precondition else []
        _conditional_selectors(self.steps, found)
        return list(dict.fromkeys(found))

    async def snapshot(self, page: "Page") -> Handles:
        """Query each selector once and keep the resulting handles."""
        selectors = self.selectors()
        handles: Handles = {}
        if not selectors:
            return handles
        async with timed(self.store, "query_selector", detail=",".join(selectors)) as entry:
            for selector in selectors:
                handles[selector] = await page.query_selector(selector)
            entry.metadata["present"] = [s for s, h in handles.items() if h is not None]
        return handles

    async def run_if_ready(self, page: "Page") -> ScriptReport | None:
        """Run the script only if the precondition element is present.

        The presence check is a single query, not a timed wait, and happens
        before the lead-in together with the checks for every optional element.

        Returns:
            Report of the run, or None if the script was skipped
        """
        handles = await self.snapshot(page)

        if self.precondition:
            if handles[self.precondition] is None:
                print("Selector not found", file=sys.stderr, flush=True)
                if self.store is not None:
                    await self.store.write(ScriptEntry(precondition=self.precondition))
                return None

            print("Selector found; scrolling", file=sys.stderr, flush=True)

        return await self.run(page, handles)

    async def run(self, page: "Page", handles: Handles | None = None) -> ScriptReport:
        """Run every step in order against ``page``.

        Args:
            page: Page to drive
            handles: Presence snapshot from ``snapshot()``; taken now if omitted
        """
        if handles is None:
            handles = await self.snapshot(page)

        report = ScriptReport()
        self._burst = _ScrollBurst()
        await self._run_steps(page, self.steps, handles, report)
        await self._end_scroll()

        if self.store is not None:
            await self.store.write(ScriptEntry(precondition=self.precondition, report=report))
        return report

    async def _run_steps(
        self,
        page: "Page",
        steps: list[InteractionStep],
        handles: Handles,
        report: ScriptReport,
    ) -> None:
        for step in steps:
            await self._run_step(page, step, handles, report)

    async def _run_step(
        self,
        page: "Page",
        step: InteractionStep,
        handles: Handles,
        report: ScriptReport,
    ) -> None:
        if isinstance(step, Wait):
            await self._sleep(step.duration_ms / 1000)
            report.delayed_ms += step.duration_ms

        elif isinstance(step, ScrollBy):
            started = time.monotonic()
            await page.mouse.wheel(step.delta_x, step.delta_y)
            self._burst.add(step, started)
            report.scrolled_x += step.delta_x
            report.scrolled_y += step.delta_y

        elif isinstance(step, ClickIfPresent):
            element = handles.get(step.selector)
            if element is None:
                report.skipped.append(step.selector)
                return
            await self._end_scroll()
            async with timed(self.store, "click", selector=step.selector):
                await element.click()
            report.clicks += 1

        elif isinstance(step, HoverIfPresent):
            element = handles.get(step.selector)
            if element is None:
                report.skipped.append(step.selector)
                return
            await self._end_scroll()
            async with timed(self.store, "hover", selector=step.selector):
                await element.hover()
            report.hovers += 1

        elif isinstance(step, WhenPresent):
            missing = [s for s in step.selectors if handles.get(s) is None]
            if missing:
                report.skipped.append(missing[0])
                return
            await self._run_steps(page, step.steps, handles, report)

        else:
            raise TypeError(f"Unknown interaction step: {step!r}")

    async def _end_scroll(self) -> None:
        burst, self._burst = self._burst, _ScrollBurst()
        if not burst.events or self.store is None:
            return
        await self.store.write(ActionEntry(
            action="scroll",
            detail=f"{burst.delta_x:g},{burst.delta_y:g}",
            duration_ms=round((burst.ended - burst.started) * 1000, 3),
            metadata={"events": burst.events},
        ))
