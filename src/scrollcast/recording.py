"""Per-session files: the raw video directory and the JSONL capture log."""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiofiles
from pydantic import TypeAdapter

from scrollcast.config import Config
from scrollcast.models.action_log import ActionEntry, LogEntry

_entry_adapter = TypeAdapter(LogEntry)


class SessionStore:
    """Owns ``videos/<session>/`` and ``logs/<session>.jsonl`` under the recordings dir.

    Nothing touches the disk until ``prepare()``; storage failures surface as
    ``OSError`` and the calling stage decides which error they become.

    Usage:
        store = SessionStore("abc", config)
        await store.prepare()
        async with timed(store, "goto", url=url):
            await page.goto(url)
    """

    def __init__(self, session_id: str, config: Config | None = None):
        self.session_id = session_id
        self.config = config or Config.load()
        self.entries: list[LogEntry] = []

    @property
    def root(self) -> Path:
        return self.config.recording.recordings_dir

    @property
    def video_dir(self) -> Path:
        """Directory the browser writes this session's raw video into."""
        return self.root / "videos" / self.session_id

    @property
    def log_path(self) -> Path:
        return self.root / "logs" / f"{self.session_id}.jsonl"

    async def prepare(self) -> None:
        """Create the session directories.

        Raises:
            OSError: If the recordings dir is missing, not a directory, or read-only
        """
        self.video_dir.mkdir(parents=True, exist_ok=True)
        if self.config.recording.record_actions:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    async def write(self, entry: LogEntry) -> None:
        """Keep ``entry`` in memory and, if logging is on, append it to the session file."""
        self.entries.append(entry)
        if not self.config.recording.record_actions:
            return

        async with aiofiles.open(self.log_path, "a") as f:
            await f.write(entry.model_dump_json(exclude_none=True) + "\n")

    async def read(self) -> list[LogEntry]:
        """Parse the session log back into typed entries."""
        entries: list[LogEntry] = []
        async with aiofiles.open(self.log_path) as f:
            async for line in f:
                if line.strip():
                    entries.append(_entry_adapter.validate_json(line))
        return entries


@asynccontextmanager
async def timed(store: SessionStore | None, action: str, **fields) -> AsyncIterator[ActionEntry]:
    """Time the enclosed block and write it as an ``ActionEntry``.

    The yielded entry can be marked failed or given metadata before the block
    ends; an exception escaping the block marks it failed. With no store the
    entry is built but not kept.
    """
    entry = ActionEntry(action=action, **fields)
    start = time.monotonic()
    try:
        yield entry
    except Exception as exc:
        entry.ok = False
        entry.error = str(exc)
        raise
    finally:
        entry.duration_ms = round((time.monotonic() - start) * 1000, 3)
        if store is not None:
            await store.write(entry)
