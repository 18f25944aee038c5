"""Capture-then-transcode pipeline."""

import sys

from scrollcast.capture import CaptureSession
from scrollcast.config import Config
from scrollcast.errors import CaptureError, PipelineError, TranscodeError
from scrollcast.models.capture import (
    CaptureTarget,
    EncodedOutput,
    RawRecording,
    ReadinessMarker,
    Viewport,
)
from scrollcast.script import InteractionScript, Sleep
from scrollcast.transcode import Transcoder


class Pipeline:
    """Records a page and returns the path of the encoded video.

    Usage:
        pipeline = Pipeline(Config.load())
        output = await pipeline.run("https://example.com")
    """

    def __init__(self, config: Config | None = None, sleep: Sleep | None = None):
        self.config = config or Config.load()
        self._sleep = sleep
        self.last_raw: RawRecording | None = None

    def target_for(self, url: str) -> CaptureTarget:
        return CaptureTarget(
            url=url,
            viewport=Viewport(
                width=self.config.browser.viewport_width,
                height=self.config.browser.viewport_height,
            ),
        )

    def marker(self) -> ReadinessMarker:
        return ReadinessMarker(
            selector=self.config.readiness.selector,
            timeout_ms=self.config.readiness.timeout_ms,
        )

    def create_session(self) -> CaptureSession:
        return CaptureSession(config=self.config)

    def create_transcoder(self) -> Transcoder:
        return Transcoder(self.config)

    async def run(self, url: str | None = None) -> EncodedOutput:
        """Capture ``url`` (defaults to the configured URL) and transcode it.

        Raises:
            PipelineError: Wrapping the CaptureError or TranscodeError that stopped the run
        """
        url = url or self.config.pipeline.url
        script = InteractionScript.default(self.config.script, sleep=self._sleep)

        try:
            session = self.create_session()
            raw = await session.capture(self.target_for(url), self.marker(), script)
        except CaptureError as exc:
            raise PipelineError("capture", exc) from exc
        self.last_raw = raw

        transcoder = self.create_transcoder()
        transcoder.store = session.store
        try:
            output = await transcoder.transcode(raw)
        except TranscodeError as exc:
            raise PipelineError("transcode", exc) from exc

        print(f"Video written to {output.path}", file=sys.stderr, flush=True)
        return output
