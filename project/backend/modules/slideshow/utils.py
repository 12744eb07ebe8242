"""
Utility functions for slideshow module.

FFmpeg command construction and availability checks.
"""
import shutil
from pathlib import Path
from typing import List

from .config import (
    EVEN_DIMENSIONS_FILTER,
    FRAME_PATTERN,
    FRAME_START_NUMBER,
    OUTPUT_CONTAINER,
    OUTPUT_MOVFLAGS,
    OUTPUT_PIXEL_FORMAT,
    OUTPUT_VIDEO_CODEC,
)


def check_ffmpeg_available(ffmpeg_path: str = "ffmpeg") -> bool:
    """
    Check if FFmpeg is installed and available.

    Args:
        ffmpeg_path: Binary name looked up in PATH, or an explicit path

    Returns:
        True if FFmpeg is available, False otherwise
    """
    return shutil.which(ffmpeg_path) is not None


def build_ffmpeg_command(ffmpeg_path: str, frame_dir: Path, fps: int) -> List[str]:
    """
    Build the command that encodes <frame_dir>/1.jpg.. to fragmented MP4 on stdout.

    Args:
        ffmpeg_path: FFmpeg binary
        frame_dir: Directory holding the numbered frames
        fps: Input frame rate

    Returns:
        FFmpeg command as list of strings
    """
    return [
        ffmpeg_path,
        "-hide_banner",
        "-loglevel", "error",
        "-framerate", str(fps),                     # input frame rate
        "-start_number", str(FRAME_START_NUMBER),
        "-i", str(Path(frame_dir) / FRAME_PATTERN),
        "-c:v", OUTPUT_VIDEO_CODEC,                 # H.264 codec
        "-pix_fmt", OUTPUT_PIXEL_FORMAT,
        "-vf", EVEN_DIMENSIONS_FILTER,
        "-movflags", OUTPUT_MOVFLAGS,               # streamable without seeking
        "-f", OUTPUT_CONTAINER,
        "pipe:1",
    ]
