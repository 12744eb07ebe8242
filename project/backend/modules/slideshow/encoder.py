"""
Streaming video encoding for slideshow module.

Spawns FFmpeg over a numbered frame directory and hands back its stdout as a
live byte stream. The caller gets the stream as soon as the process exists;
success or failure is only known once the stream has been read to the end.
"""
import asyncio
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, List, Optional
from uuid import UUID

from shared.config import settings
from shared.errors import EncodeInitiationFailure, EncodeRuntimeFailure
from shared.logging import get_logger
from .config import FRAME_START_NUMBER, STDERR_TAIL_BYTES, STREAM_CHUNK_SIZE
from .sequencer import frame_path
from .utils import build_ffmpeg_command

logger = get_logger("slideshow.encoder")

FinishHook = Callable[["VideoStream"], Awaitable[None]]


class EncodeState(str, Enum):
    """Lifecycle of one encode. Transitions only move forward."""

    NOT_STARTED = "not_started"
    STARTED = "started"
    STREAMING = "streaming"
    ENDED = "ended"
    FAILED = "failed"


TERMINAL_STATES = (EncodeState.ENDED, EncodeState.FAILED)


class VideoStream:
    """
    Live MP4 output of one FFmpeg run.

    Read it with ``async for chunk in stream`` or ``await stream.read()``.
    A clean exit ends iteration normally; a non-zero exit raises
    EncodeRuntimeFailure from the read that hits end of output, and from
    ``wait()``. Diagnostic output on stderr is collected separately and never
    appears in the video bytes.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        command: List[str],
        job_id: Optional[UUID] = None,
        on_finish: Optional[FinishHook] = None
    ):
        self.command = command
        self.job_id = job_id
        self.state = EncodeState.STARTED
        self.bytes_read = 0
        self._process = process
        self._on_finish = on_finish
        self._stderr = bytearray()
        self._stderr_task = asyncio.ensure_future(self._drain_stderr())
        self._settle_lock = asyncio.Lock()
        self._returncode: Optional[int] = None
        self._error: Optional[EncodeRuntimeFailure] = None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._returncode

    @property
    def stderr(self) -> str:
        """Tail of FFmpeg's diagnostic output."""
        return self._stderr.decode(errors="replace")

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    async def _drain_stderr(self) -> None:
        """Keep the stderr pipe empty so FFmpeg never blocks on it."""
        stream = self._process.stderr
        if stream is None:
            return
        while True:
            chunk = await stream.read(STREAM_CHUNK_SIZE)
            if not chunk:
                return
            self._stderr.extend(chunk)
            if len(self._stderr) > STDERR_TAIL_BYTES:
                del self._stderr[:-STDERR_TAIL_BYTES]

    async def read(self, n: int = STREAM_CHUNK_SIZE) -> bytes:
        """
        Read up to n bytes of video.

        Returns:
            Video bytes, or b"" once the encoder finished cleanly

        Raises:
            EncodeRuntimeFailure: If the encoder failed or the stream was closed
        """
        if self._error is not None:
            raise self._error
        if self.state == EncodeState.ENDED:
            return b""
        if self.state == EncodeState.STARTED:
            self.state = EncodeState.STREAMING

        chunk = await self._process.stdout.read(n)
        if chunk:
            self.bytes_read += len(chunk)
            return chunk

        await self.wait()
        return b""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read()
            if not chunk:
                return
            yield chunk

    async def read_all(self) -> bytes:
        """Read the whole video into memory."""
        output = bytearray()
        async for chunk in self:
            output.extend(chunk)
        return bytes(output)

    async def wait(self) -> int:
        """
        Wait for FFmpeg to exit.

        This does not consume stdout; call it while or after reading, since
        FFmpeg stalls once nobody drains its output pipe.

        Returns:
            FFmpeg exit code (always 0)

        Raises:
            EncodeRuntimeFailure: If FFmpeg exited with an error
        """
        async with self._settle_lock:
            if not self.done:
                returncode = await self._process.wait()
                await self._stderr_task
                self._settle(returncode)
                await self._finish()
        if self._error is not None:
            raise self._error
        return self._returncode

    def _settle(self, returncode: int, reason: Optional[str] = None) -> None:
        self._returncode = returncode
        if returncode == 0 and reason is None:
            self.state = EncodeState.ENDED
            logger.info(
                f"FFmpeg processing finished ({self.bytes_read / 1024 / 1024:.2f} MB streamed)",
                extra={"job_id": str(self.job_id), "bytes_read": self.bytes_read}
            )
            return

        self.state = EncodeState.FAILED
        message = reason or f"FFmpeg exited with code {returncode}"
        self._error = EncodeRuntimeFailure(
            f"Encode failed: {message}",
            job_id=self.job_id,
            returncode=returncode,
            stderr=self.stderr
        )
        logger.error(
            f"FFmpeg error: {message}",
            extra={"job_id": str(self.job_id), "returncode": returncode, "stderr": self.stderr}
        )

    async def _finish(self) -> None:
        if self._on_finish is None:
            return
        hook, self._on_finish = self._on_finish, None
        try:
            await hook(self)
        except Exception as e:
            logger.warning(
                f"Post-encode hook failed: {e}",
                extra={"job_id": str(self.job_id)}
            )

    async def aclose(self) -> None:
        """Stop FFmpeg if it is still running; the stream counts as failed."""
        async with self._settle_lock:
            if self.done:
                return
            if self._process.returncode is None:
                try:
                    self._process.kill()
                except ProcessLookupError:
                    pass
            returncode = await self._process.wait()
            await self._stderr_task
            self._settle(returncode, reason="stream closed before encoding finished")
            await self._finish()

    async def __aenter__(self) -> "VideoStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class StreamingEncoder:
    """
    Encodes numbered JPEG frames to fragmented MP4 through FFmpeg.

    The binary path is fixed at construction; one instance can serve any
    number of jobs, each encode getting its own process and VideoStream.
    """

    def __init__(self, ffmpeg_path: Optional[str] = None):
        self.ffmpeg_path = ffmpeg_path or settings.ffmpeg_path

    async def encode(
        self,
        frame_dir: Path,
        fps: int,
        job_id: Optional[UUID] = None,
        on_finish: Optional[FinishHook] = None
    ) -> VideoStream:
        """
        Start encoding and return the live stream without waiting for FFmpeg.

        Args:
            frame_dir: Directory holding 1.jpg .. N.jpg
            fps: Input frame rate
            job_id: Job ID for logging and errors
            on_finish: Awaited once when the stream ends, fails or is closed

        Returns:
            VideoStream in STARTED state

        Raises:
            EncodeInitiationFailure: If there are no frames or FFmpeg cannot be spawned
        """
        if fps <= 0:
            raise EncodeInitiationFailure(f"Invalid frame rate: {fps}", job_id=job_id)

        frame_dir = Path(frame_dir)
        if not frame_path(frame_dir, FRAME_START_NUMBER).is_file():
            raise EncodeInitiationFailure(
                f"No frames to encode in {frame_dir}", job_id=job_id
            )

        cmd = build_ffmpeg_command(self.ffmpeg_path, frame_dir, fps)
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            logger.error(
                f"Failed to spawn FFmpeg: {e}",
                extra={"job_id": str(job_id), "command": cmd}
            )
            raise EncodeInitiationFailure(f"Failed to spawn FFmpeg: {e}", job_id=job_id) from e

        logger.info(
            f"Spawned FFmpeg with command: {' '.join(cmd)}",
            extra={"job_id": str(job_id), "pid": process.pid, "fps": fps}
        )
        return VideoStream(process, cmd, job_id=job_id, on_finish=on_finish)
