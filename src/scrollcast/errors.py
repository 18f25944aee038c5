"""Exception hierarchy for the capture-and-convert pipeline.

A readiness-marker timeout is deliberately absent: it is an expected outcome
(``MarkerOutcome.TIMED_OUT``), not an error.
"""


class ScrollcastError(Exception):
    """Base class for all scrollcast errors."""


class CaptureError(ScrollcastError):
    """The browser capture could not produce a raw recording.

    ``teardown_error`` holds a failure from closing the browser afterwards, so
    it does not replace the error that ended the capture.
    """

    teardown_error: Exception | None = None


class LaunchError(CaptureError):
    """The headless browser could not be launched."""


class NavigationError(CaptureError):
    """The page could not be opened or navigated."""


class FinalizeError(CaptureError):
    """The recording could not be flushed to a non-empty file."""


class TranscodeError(ScrollcastError):
    """The raw recording could not be encoded."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class PipelineError(ScrollcastError):
    """A pipeline stage failed; ``cause`` is the originating stage error."""

    def __init__(self, stage: str, cause: Exception):
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause
