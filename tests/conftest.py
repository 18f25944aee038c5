"""Shared fakes for Playwright objects and timed sleeps."""

import asyncio
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from scrollcast.config import Config, RecordingConfig


class FakeClock:
    """Sleep replacement that records requested durations instead of waiting."""

    def __init__(self):
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    @property
    def elapsed_ms(self) -> int:
        return round(sum(self.sleeps) * 1000)


def make_element():
    element = MagicMock()
    element.click = AsyncMock()
    element.hover = AsyncMock()
    return element


def make_page(present=(), marker_attached=True):
    """Mock Playwright Page where only ``present`` selectors resolve to elements."""
    page = MagicMock()
    page.elements = {selector: make_element() for selector in present}

    async def query_selector(selector):
        return page.elements.get(selector)

    page.query_selector = AsyncMock(side_effect=query_selector)
    page.goto = AsyncMock()
    if marker_attached:
        page.wait_for_selector = AsyncMock(return_value=make_element())
    else:
        page.wait_for_selector = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout exceeded"))
    page.mouse.wheel = AsyncMock()
    page.video = None
    return page


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config(tmp_path):
    return Config(recording=RecordingConfig(recordings_dir=tmp_path / "recordings"))


@pytest.fixture
def fake_playwright():
    """Mock async_playwright() chain: factory -> playwright -> browser -> context -> page.

    Closing the context writes ``video_bytes`` to the video path, the way
    Playwright flushes a recording when its context closes.
    """
    fake = SimpleNamespace(video_bytes=b"\x1aE\xdf\xa3webm-data", video_path=None)

    fake.page = make_page()
    fake.context = MagicMock()
    fake.browser = MagicMock()
    fake.playwright = MagicMock()

    async def new_context(**kwargs):
        fake.context_kwargs = kwargs
        fake.video_path = Path(kwargs["record_video_dir"]) / "raw-video.webm"
        video = MagicMock()
        video.path = AsyncMock(return_value=str(fake.video_path))
        fake.page.video = video
        return fake.context

    async def close_context():
        if fake.video_path is not None and not fake.video_path.exists():
            fake.video_path.parent.mkdir(parents=True, exist_ok=True)
            fake.video_path.write_bytes(fake.video_bytes)

    fake.context.new_page = AsyncMock(side_effect=lambda: fake.page)
    fake.context.close = AsyncMock(side_effect=close_context)
    fake.browser.new_context = AsyncMock(side_effect=new_context)
    fake.browser.close = AsyncMock()
    fake.playwright.chromium.launch = AsyncMock(return_value=fake.browser)
    fake.playwright.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=fake.playwright)
    fake.factory = MagicMock(return_value=starter)
    return fake


class FakeStdin:
    def __init__(self, broken: bool = False):
        self.data = b""
        self.closed = False
        self._broken = broken

    def write(self, chunk: bytes) -> None:
        self.data += chunk

    async def drain(self) -> None:
        if self._broken:
            raise BrokenPipeError("ffmpeg closed stdin")

    def close(self) -> None:
        self.closed = True


class FakeProcess:
    """Stands in for an ffmpeg process; writes its stdin to the output on exit.

    With ``hang`` it never exits on its own, only once killed.
    """

    def __init__(
        self,
        output: Path,
        returncode: int = 0,
        stderr: bytes = b"",
        broken_pipe: bool = False,
        hang: bool = False,
    ):
        self.output = output
        self.exit_code = returncode
        self.returncode = None
        self.stdin = FakeStdin(broken=broken_pipe)
        self.stderr = MagicMock()
        self.stderr.read = AsyncMock(return_value=stderr)
        self.hang = hang
        self.killed = False
        self.stderr_cancelled = False
        self._exited = asyncio.Event()
        if hang:
            self.stderr.read = AsyncMock(side_effect=self._read_until_cancelled)

    async def wait(self) -> int:
        if self.hang:
            await self._exited.wait()
        elif self.exit_code == 0:
            self.output.write_bytes(b"mp4:" + self.stdin.data)
        self.returncode = -9 if self.killed else self.exit_code
        return self.returncode

    def kill(self) -> None:
        self.killed = True
        self._exited.set()

    async def _read_until_cancelled(self) -> bytes:
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.stderr_cancelled = True
            raise
        return b""


@pytest.fixture
def spawn(monkeypatch):
    """Patch create_subprocess_exec; ``spawn.process_kwargs`` shapes the next process."""
    spawn = SimpleNamespace(calls=[], processes=[], process_kwargs={})

    async def fake_exec(*argv, **kwargs):
        spawn.calls.append(argv)
        process = FakeProcess(Path(argv[-1]), **spawn.process_kwargs)
        spawn.processes.append(process)
        return process

    monkeypatch.setattr("scrollcast.transcode.asyncio.create_subprocess_exec", fake_exec)
    return spawn

