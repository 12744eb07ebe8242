"""
Main entry point for slideshow module.

Orchestrates the pairs-to-video run: validates input, writes the numbered
frame sequence, then starts the streaming encoder and returns its stream.
"""
import asyncio
import shutil
from pathlib import Path
from typing import Optional, Sequence

from shared.config import settings
from shared.errors import EmptyInputError, ValidationError
from shared.logging import get_logger, set_job_id
from shared.models.slideshow import ImagePair, ProcessingJob
from .encoder import StreamingEncoder, VideoStream
from .sequencer import sequence_frames

logger = get_logger("slideshow.process")


class ImageVideoProcessor:
    """
    Turns ordered image pairs into a streamed MP4 for one job folder.

    Example:
        >>> processor = ImageVideoProcessor(ProcessingJob(folder="job-42"))
        >>> stream = await processor.process_images_and_create_video(pairs)
        >>> async for chunk in stream:
        ...     response.write(chunk)
    """

    def __init__(
        self,
        job: ProcessingJob,
        output_dir: Optional[Path] = None,
        encoder: Optional[StreamingEncoder] = None,
        max_concurrency: Optional[int] = None
    ):
        """
        Initialize processor.

        Args:
            job: Job configuration (folder, fps, cleanup)
            output_dir: Base output directory, defaults to OUTPUT_DIR
            encoder: Encoder to use, defaults to one built from FFMPEG_PATH
            max_concurrency: Pair concurrency, defaults to SLIDESHOW_MAX_CONCURRENCY
        """
        self.job = job
        self.output_dir = job.job_dir(output_dir or settings.output_dir)
        self.encoder = encoder or StreamingEncoder()
        self.max_concurrency = max_concurrency

    async def _cleanup(self, stream: VideoStream) -> None:
        """Remove the frame folder once the encoder no longer needs it."""
        await asyncio.to_thread(shutil.rmtree, self.output_dir, ignore_errors=True)
        logger.info(
            f"Removed frame directory {self.output_dir} ({stream.state.value})",
            extra={"job_id": str(self.job.job_id)}
        )

    async def process_images_and_create_video(
        self,
        image_pairs: Sequence[ImagePair]
    ) -> VideoStream:
        """
        Merge every pair into a frame and start streaming the video.

        Returns once all frames are on disk and FFmpeg has been spawned; the
        encode itself finishes (or fails) while the stream is read.

        Args:
            image_pairs: Ordered image pairs, one frame each

        Returns:
            Live VideoStream of fragmented MP4 bytes

        Raises:
            EmptyInputError: If no pairs were given
            ValidationError: If an item is not an ImagePair
            InvalidMetadataError: If any image lacks usable dimensions
            CompositionFailure: If any pair fails to composite
            FrameWriteFailure: If frames cannot be written
            EncodeInitiationFailure: If FFmpeg cannot be started
        """
        job_id = self.job.job_id
        set_job_id(job_id)

        if not image_pairs:
            raise EmptyInputError("At least one image pair is required", job_id=job_id)
        for i, pair in enumerate(image_pairs, start=1):
            if not isinstance(pair, ImagePair):
                raise ValidationError(
                    f"Item {i} is {type(pair).__name__}, expected ImagePair", job_id=job_id
                )

        logger.info(
            f"Processing {len(image_pairs)} image pairs into {self.output_dir}",
            extra={"job_id": str(job_id), "pairs": len(image_pairs), "fps": self.job.fps}
        )

        try:
            await sequence_frames(
                image_pairs, self.output_dir, job_id=job_id, max_concurrency=self.max_concurrency
            )
            return await self.encoder.encode(
                self.output_dir,
                self.job.fps,
                job_id=job_id,
                on_finish=self._cleanup if self.job.cleanup else None
            )
        except Exception as e:
            logger.error(f"Error in processing: {e}", extra={"job_id": str(job_id)})
            if self.job.cleanup:
                await asyncio.to_thread(shutil.rmtree, self.output_dir, ignore_errors=True)
            raise


async def create_video(
    image_pairs: Sequence[ImagePair],
    folder: str,
    fps: Optional[int] = None,
    cleanup: Optional[bool] = None
) -> VideoStream:
    """
    Convenience wrapper: build a job and run it with default settings.

    Args:
        image_pairs: Ordered image pairs
        folder: Job-scoped subfolder under OUTPUT_DIR
        fps: Frame rate, defaults to SLIDESHOW_FPS
        cleanup: Delete frames after encoding, defaults to SLIDESHOW_CLEANUP

    Returns:
        Live VideoStream of fragmented MP4 bytes
    """
    options = {"folder": folder}
    if fps is not None:
        options["fps"] = fps
    if cleanup is not None:
        options["cleanup"] = cleanup
    processor = ImageVideoProcessor(ProcessingJob(**options))
    return await processor.process_images_and_create_video(image_pairs)
