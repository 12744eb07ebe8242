"""
Test helpers for slideshow tests: synthetic images and a fake FFmpeg process.
"""
import asyncio
import io
from typing import List, Optional, Tuple

from PIL import Image


def create_test_image(
    width: int,
    height: int,
    color: Tuple[int, ...] = (200, 30, 30),
    fmt: str = "PNG",
    mode: str = "RGB"
) -> bytes:
    """
    Create a solid-color encoded image for testing.

    Args:
        width: Image width
        height: Image height
        color: Fill color (RGB or RGBA to match mode)
        fmt: Pillow format name (default: PNG)
        mode: Pillow mode (default: RGB)
    """
    output = io.BytesIO()
    Image.new(mode, (width, height), color).save(output, format=fmt)
    return output.getvalue()


def create_noise_jpeg(width: int = 128, height: int = 128) -> bytes:
    """Create a JPEG with enough entropy that truncating it cuts pixel data."""
    image = Image.effect_noise((width, height), 64).convert("RGB")
    output = io.BytesIO()
    image.save(output, format="JPEG", quality=95)
    return output.getvalue()


def decode(image_bytes: bytes) -> Image.Image:
    """Decode encoded bytes into an RGB image."""
    with Image.open(io.BytesIO(image_bytes)) as image:
        return image.convert("RGB")


def assert_color_close(actual, expected, tolerance: int = 12):
    """Compare pixel colors allowing for JPEG loss."""
    for a, e in zip(actual, expected):
        assert abs(a - e) <= tolerance, f"{actual} != {expected}"


def marker_color(index: int) -> Tuple[int, int, int]:
    """Distinct color for the pair at 1-based index."""
    return (40 * index % 256, 255 - 40 * index % 256, 90)


class FakeProcess:
    """
    Stand-in for asyncio.subprocess.Process.

    stdout/stderr are real StreamReaders; the process "exits" with
    exit_code once release() is called (immediately when auto_exit).
    """

    def __init__(
        self,
        stdout_chunks: Optional[List[bytes]] = None,
        stderr: bytes = b"",
        exit_code: int = 0,
        auto_exit: bool = True
    ):
        self.pid = 4242
        self.returncode = None
        self.killed = False
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self._exit_code = exit_code
        self._exited = asyncio.Event()

        for chunk in stdout_chunks or []:
            self.stdout.feed_data(chunk)
        if stderr:
            self.stderr.feed_data(stderr)
        if auto_exit:
            self.release()

    def feed(self, chunk: bytes) -> None:
        self.stdout.feed_data(chunk)

    def release(self, exit_code: Optional[int] = None) -> None:
        """End output and let wait() return."""
        if exit_code is not None:
            self._exit_code = exit_code
        if not self.stdout.at_eof():
            self.stdout.feed_eof()
        if not self.stderr.at_eof():
            self.stderr.feed_eof()
        self._exited.set()

    def kill(self) -> None:
        self.killed = True
        self.release(exit_code=-9)

    async def wait(self) -> int:
        await self._exited.wait()
        self.returncode = self._exit_code
        return self._exit_code


