"""Transcode raw browser recordings to H.264 MP4 with ffmpeg."""

import asyncio
import time
from pathlib import Path

import aiofiles

from scrollcast.config import Config
from scrollcast.errors import TranscodeError
from scrollcast.models.action_log import TranscodeEntry
from scrollcast.models.capture import EncodedOutput, RawRecording
from scrollcast.recording import SessionStore


def encoded_path_for(raw: RawRecording) -> Path:
    """Output path for ``raw``: the raw path with ``.mp4`` appended."""
    return Path(f"{raw.path}.mp4")


class Transcoder:
    """Streams a raw recording through ffmpeg into an encoded file.

    The output path is derived from the input, never chosen by the caller.
    With ``overwrite`` off (the default) an existing output is a collision
    and raises ``TranscodeError``; with it on, ffmpeg replaces the file.
    """

    def __init__(self, config: Config | None = None):
        self.config = config or Config.load()
        self.store: SessionStore | None = None

    def build_command(self, output: Path) -> list[str]:
        """ffmpeg argv reading the raw stream from stdin."""
        settings = self.config.transcode
        return [
            settings.ffmpeg_path,
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            "pipe:0",
            "-c:v",
            settings.video_codec,
            "-y" if settings.overwrite else "-n",
            str(output),
        ]

    async def transcode(self, raw: RawRecording) -> EncodedOutput:
        """Encode ``raw`` and return the finished output.

        Resolves only once ffmpeg has exited and the output exists.

        Raises:
            TranscodeError: If the input cannot be read, the output collides,
                ffmpeg is missing or fails, or the session log cannot be written
        """
        output = encoded_path_for(raw)
        entry = TranscodeEntry(
            raw_path=raw.path,
            output_path=output,
            codec=self.config.transcode.video_codec,
        )
        start = time.monotonic()

        try:
            await self._encode(raw, output, entry)
        except TranscodeError as exc:
            entry.ok = False
            entry.error = str(exc)
            await self._record(entry, start)
            raise

        await self._record(entry, start)
        return EncodedOutput(path=output)

    async def _encode(self, raw: RawRecording, output: Path, entry: TranscodeEntry) -> None:
        if not raw.path.is_file():
            raise TranscodeError(f"Raw recording not found: {raw.path}")
        if output.exists() and not self.config.transcode.overwrite:
            raise TranscodeError(f"Output already exists: {output}")

        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(output),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise TranscodeError(f"Could not start ffmpeg: {exc}") from exc

        # Drain stderr concurrently so ffmpeg never blocks on a full pipe.
        stderr_task = asyncio.create_task(process.stderr.read())
        try:
            try:
                await self._feed(process, raw.path)
            except (BrokenPipeError, ConnectionResetError):
                pass  # ffmpeg stopped reading; its exit code says why
            returncode = await process.wait()
            stderr = (await stderr_task).decode("utf-8", errors="ignore").strip()
        except BaseException as exc:
            if process.returncode is None:
                process.kill()
                await process.wait()
            stderr_task.cancel()
            await asyncio.gather(stderr_task, return_exceptions=True)
            if isinstance(exc, OSError):
                raise TranscodeError(f"Could not read {raw.path}: {exc}") from exc
            raise

        entry.returncode = returncode
        if returncode != 0:
            raise TranscodeError(
                f"ffmpeg exited with code {returncode}",
                returncode=returncode,
                stderr=stderr,
            )
        if not output.exists() or output.stat().st_size == 0:
            raise TranscodeError(f"ffmpeg produced no output: {output}", returncode, stderr)

    async def _record(self, entry: TranscodeEntry, start: float) -> None:
        entry.duration_ms = round((time.monotonic() - start) * 1000, 3)
        if self.store is None:
            return
        try:
            await self.store.write(entry)
        except OSError as exc:
            raise TranscodeError(f"Could not write session log {self.store.log_path}: {exc}") from exc

    async def _feed(self, process: asyncio.subprocess.Process, path: Path) -> None:
        chunk_size = self.config.transcode.chunk_size
        try:
            async with aiofiles.open(path, "rb") as f:
                while True:
                    chunk = await f.read(chunk_size)
                    if not chunk:
                        break
                    process.stdin.write(chunk)
                    await process.stdin.drain()
        finally:
            process.stdin.close()
