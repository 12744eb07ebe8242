"""
Frame sequencing for slideshow module.

Merges every pair concurrently and writes frame i to <dir>/<i>.jpg, where i
is the pair's 1-based input position. Completion order never affects naming.
"""
import asyncio
import os
import time
from pathlib import Path
from typing import List, Optional, Sequence
from uuid import UUID

from shared.config import settings
from shared.errors import CompositionFailure, FrameWriteFailure, ImageProcessingError
from shared.logging import get_logger
from shared.models.slideshow import ImagePair
from .compositor import merge_pair
from .config import FRAME_EXTENSION, FRAME_START_NUMBER

logger = get_logger("slideshow.sequencer")


def frame_path(output_dir: Path, index: int) -> Path:
    """Path of the frame with the given 1-based index."""
    return output_dir / f"{index}.{FRAME_EXTENSION}"


def write_frame(output_dir: Path, index: int, frame_bytes: bytes) -> Path:
    """
    Write one frame atomically.

    The bytes go to a temp file first and are renamed into place, so a
    numbered frame is either complete or absent.

    Raises:
        FrameWriteFailure: If the file cannot be written
    """
    path = frame_path(output_dir, index)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_bytes(frame_bytes)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise FrameWriteFailure(f"Failed to write frame {index}: {e}", frame_index=index) from e
    return path


def remove_frames(output_dir: Path) -> int:
    """
    Delete numbered frames and leftover temp files from a directory.

    Returns:
        Number of files removed
    """
    removed = 0
    for path in output_dir.glob(f"*.{FRAME_EXTENSION}*"):
        stem = path.name.split(".", 1)[0]
        if not stem.isdigit():
            continue
        try:
            path.unlink()
            removed += 1
        except FileNotFoundError:
            pass
    return removed


async def sequence_frames(
    pairs: Sequence[ImagePair],
    output_dir: Path,
    job_id: Optional[UUID] = None,
    max_concurrency: Optional[int] = None
) -> List[Path]:
    """
    Merge all pairs and write them as a numbered frame sequence.

    Every pair runs to completion even if another fails; the first failure in
    input order is then raised and all frames from this run are removed.

    Args:
        pairs: Ordered image pairs
        output_dir: Job-scoped frame directory (created if missing)
        job_id: Job ID for logging and errors
        max_concurrency: Pairs processed at once; 0 means unbounded,
            None uses SLIDESHOW_MAX_CONCURRENCY

    Returns:
        Frame paths in frame order (1.jpg .. N.jpg)

    Raises:
        InvalidMetadataError: If any image lacks usable dimensions
        CompositionFailure: If any pair fails to composite
        FrameWriteFailure: If the directory or any frame cannot be written
    """
    output_dir = Path(output_dir)
    if max_concurrency is None:
        max_concurrency = settings.slideshow_max_concurrency
    concurrency = max_concurrency or max(len(pairs), 1)
    semaphore = asyncio.Semaphore(concurrency)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        stale = remove_frames(output_dir)
    except OSError as e:
        raise FrameWriteFailure(f"Failed to prepare frame directory {output_dir}: {e}", job_id=job_id) from e
    if stale:
        logger.warning(
            f"Removed {stale} stale frames from {output_dir}",
            extra={"job_id": str(job_id), "stale_frames": stale}
        )

    logger.info(
        f"Sequencing {len(pairs)} frames, {concurrency} concurrent",
        extra={"job_id": str(job_id), "frame_count": len(pairs), "concurrency": concurrency}
    )
    step_start = time.time()

    async def sequence_one(index: int, pair: ImagePair) -> Path:
        """Merge and write a single frame."""
        async with semaphore:
            try:
                direction, frame_bytes = await merge_pair(pair)
                logger.debug(
                    f"Frame {index}: using {direction.value} merge strategy",
                    extra={"job_id": str(job_id), "frame_index": index, "direction": direction.value}
                )
                return await asyncio.to_thread(write_frame, output_dir, index, frame_bytes)
            except ImageProcessingError as e:
                if e.frame_index is None:
                    e.frame_index = index
                if e.job_id is None:
                    e.job_id = job_id
                raise
            except Exception as e:
                raise CompositionFailure(
                    f"Failed to merge pair {index}: {e}", job_id=job_id, frame_index=index
                ) from e

    tasks = [
        sequence_one(index, pair)
        for index, pair in enumerate(pairs, start=FRAME_START_NUMBER)
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        for failure in failures:
            logger.error(
                f"Frame {getattr(failure, 'frame_index', '?')} failed: {failure}",
                extra={"job_id": str(job_id), "frame_index": getattr(failure, "frame_index", None)}
            )
        await asyncio.to_thread(remove_frames, output_dir)
        raise failures[0]

    logger.info(
        f"Sequenced {len(results)} frames in {time.time() - step_start:.2f}s",
        extra={"job_id": str(job_id), "frame_count": len(results), "sequence_time": time.time() - step_start}
    )
    return list(results)
