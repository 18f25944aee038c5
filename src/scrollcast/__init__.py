"""scrollcast - record a scripted scroll through a web page as an MP4."""

from scrollcast.capture import CaptureSession
from scrollcast.config import Config
from scrollcast.errors import (
    CaptureError,
    FinalizeError,
    LaunchError,
    NavigationError,
    PipelineError,
    ScrollcastError,
    TranscodeError,
)
from scrollcast.pipeline import Pipeline
from scrollcast.readiness import await_marker
from scrollcast.recording import SessionStore, timed
from scrollcast.script import InteractionScript
from scrollcast.transcode import Transcoder, encoded_path_for

__version__ = "0.1.0"

__all__ = [
    "CaptureSession",
    "Config",
    "InteractionScript",
    "Pipeline",
    "Transcoder",
    "SessionStore",
    "timed",
    "await_marker",
    "encoded_path_for",
    "ScrollcastError",
    "CaptureError",
    "LaunchError",
    "NavigationError",
    "FinalizeError",
    "TranscodeError",
    "PipelineError",
]
