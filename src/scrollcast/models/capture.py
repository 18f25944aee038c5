"""Pydantic models for capture inputs, interaction steps, and outputs."""

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Viewport(BaseModel):
    """Pixel dimensions of the browser window and the recorded video."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)

    def as_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


class CaptureTarget(BaseModel):
    """Page to record and the viewport to record it at."""

    model_config = ConfigDict(frozen=True)

    url: str
    viewport: Viewport


class ReadinessMarker(BaseModel):
    """Element the page attaches once it is ready to be recorded."""

    model_config = ConfigDict(frozen=True)

    selector: str
    # Playwright reads a timeout of 0 as "wait forever".
    timeout_ms: int = Field(gt=0)


class MarkerOutcome(str, Enum):
    FOUND = "found"
    TIMED_OUT = "timed_out"


class Wait(BaseModel):
    kind: Literal["wait"] = "wait"
    duration_ms: int = Field(ge=0)


class ScrollBy(BaseModel):
    """A single mouse-wheel event."""

    kind: Literal["scroll_by"] = "scroll_by"
    delta_x: float = 0
    delta_y: float


class ClickIfPresent(BaseModel):
    kind: Literal["click_if_present"] = "click_if_present"
    selector: str


class HoverIfPresent(BaseModel):
    kind: Literal["hover_if_present"] = "hover_if_present"
    selector: str


class WhenPresent(BaseModel):
    """Run ``steps`` only if every selector in ``selectors`` is on the page."""

    kind: Literal["when_present"] = "when_present"
    selectors: list[str]
    steps: list["InteractionStep"] = Field(default_factory=list)


InteractionStep = Annotated[
    Union[Wait, ScrollBy, ClickIfPresent, HoverIfPresent, WhenPresent],
    Field(discriminator="kind"),
]

WhenPresent.model_rebuild()


class ScriptReport(BaseModel):
    """What an interaction script actually did to the page."""

    scrolled_x: float = 0
    scrolled_y: float = 0
    delayed_ms: int = 0
    clicks: int = 0
    hovers: int = 0
    skipped: list[str] = Field(default_factory=list)


class RawRecording(BaseModel):
    """Finalized browser recording (webm) on disk."""

    model_config = ConfigDict(frozen=True)

    path: Path


class EncodedOutput(BaseModel):
    """Transcoded, delivery-ready video on disk."""

    model_config = ConfigDict(frozen=True)

    path: Path
