"""Data models for scrollcast."""

from scrollcast.models.action_log import (
    ActionEntry,
    LogEntry,
    MarkerEntry,
    ScriptEntry,
    TranscodeEntry,
)
from scrollcast.models.capture import (
    CaptureTarget,
    ClickIfPresent,
    EncodedOutput,
    HoverIfPresent,
    InteractionStep,
    MarkerOutcome,
    RawRecording,
    ReadinessMarker,
    ScriptReport,
    ScrollBy,
    Viewport,
    Wait,
    WhenPresent,
)

__all__ = [
    "ActionEntry",
    "LogEntry",
    "MarkerEntry",
    "ScriptEntry",
    "TranscodeEntry",
    "CaptureTarget",
    "ClickIfPresent",
    "EncodedOutput",
    "HoverIfPresent",
    "InteractionStep",
    "MarkerOutcome",
    "RawRecording",
    "ReadinessMarker",
    "ScriptReport",
    "ScrollBy",
    "Viewport",
    "Wait",
    "WhenPresent",
]
