#!/usr/bin/env python3
"""Record a page, with and without the full pipeline."""

import asyncio

from scrollcast import CaptureSession, Config, InteractionScript, Pipeline, Transcoder
from scrollcast.models import CaptureTarget, ReadinessMarker, ScrollBy, Viewport, Wait


async def main():
    """Run the configured pipeline end to end."""
    pipeline = Pipeline(Config.load())
    output = await pipeline.run()
    print(f"Raw recording: {pipeline.last_raw.path}")
    print(f"MP4: {output.path}")


async def custom_script_example():
    """Drive the stages by hand with a shorter, faster scroll."""
    config = Config.load()
    target = CaptureTarget(url="https://example.com", viewport=Viewport(width=1280, height=720))
    marker = ReadinessMarker(selector="h1", timeout_ms=2000)

    steps = [Wait(duration_ms=300)]
    for _ in range(40):
        steps += [ScrollBy(delta_y=15), Wait(duration_ms=16)]
    script = InteractionScript(steps)

    async with CaptureSession(session_id="custom-example", config=config) as session:
        raw = await session.capture(target, marker, script)
        print(f"Marker: {session.marker_outcome.value}, scrolled {session.script_report.scrolled_y}px")

    output = await Transcoder(config).transcode(raw)
    print(f"MP4: {output.path}")


if __name__ == "__main__":
    print("=== Pipeline Example ===")
    asyncio.run(main())

    print("\n=== Custom Script Example ===")
    asyncio.run(custom_script_example())
