"""Typed entries of the per-session capture log.

Each line of ``<recordings_dir>/logs/<session>.jsonl`` is one of these,
tagged by ``type`` so a reader can validate the file with ``LogEntry``.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from scrollcast.models.capture import MarkerOutcome, ScriptReport


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActionEntry(BaseModel):
    """A single timed browser action (goto, click, hover, scroll burst...)."""

    type: Literal["action"] = "action"
    at: datetime = Field(default_factory=utcnow)
    action: str
    selector: str | None = None
    url: str | None = None
    detail: str | None = None
    duration_ms: float | None = None
    ok: bool = True
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class MarkerEntry(BaseModel):
    """How the readiness gate resolved."""

    type: Literal["marker"] = "marker"
    at: datetime = Field(default_factory=utcnow)
    selector: str
    timeout_ms: int
    outcome: MarkerOutcome
    duration_ms: float | None = None


class ScriptEntry(BaseModel):
    """Result of the interaction script; ``report`` is None when it was skipped."""

    type: Literal["script"] = "script"
    at: datetime = Field(default_factory=utcnow)
    precondition: str | None = None
    report: ScriptReport | None = None


class TranscodeEntry(BaseModel):
    type: Literal["transcode"] = "transcode"
    at: datetime = Field(default_factory=utcnow)
    raw_path: Path
    output_path: Path
    codec: str
    returncode: int | None = None
    duration_ms: float | None = None
    ok: bool = True
    error: str | None = None


LogEntry = Annotated[
    Union[ActionEntry, MarkerEntry, ScriptEntry, TranscodeEntry],
    Field(discriminator="type"),
]
