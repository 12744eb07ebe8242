"""
Error hierarchy for the slideshow pipeline.

All pipeline errors derive from PipelineError and carry an optional job_id.
None of them are retried: every failure is terminal for its job.
"""

from typing import Optional
from uuid import UUID


class PipelineError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, job_id: Optional[UUID] = None):
        super().__init__(message)
        self.message = message
        self.job_id = job_id


class ConfigError(PipelineError):
    """Invalid or missing configuration."""


class ValidationError(PipelineError):
    """Invalid caller input."""


class EmptyInputError(ValidationError):
    """No image pairs were supplied."""


class ImageProcessingError(PipelineError):
    """
    Failure while handling a single image pair.

    frame_index is the 1-based frame number of the pair that failed, when known.
    """

    def __init__(
        self,
        message: str,
        job_id: Optional[UUID] = None,
        frame_index: Optional[int] = None
    ):
        super().__init__(message, job_id=job_id)
        self.frame_index = frame_index


class InvalidMetadataError(ImageProcessingError):
    """Image width or height could not be determined."""


class CompositionFailure(ImageProcessingError):
    """Image decoding or compositing failed for a reason other than metadata."""


class FrameWriteFailure(ImageProcessingError):
    """A merged frame could not be written to disk."""


class EncodeError(PipelineError):
    """Base class for encoder failures."""


class EncodeInitiationFailure(EncodeError):
    """The encoder process could not be spawned."""


class EncodeRuntimeFailure(EncodeError):
    """The encoder exited abnormally after streaming began."""

    def __init__(
        self,
        message: str,
        job_id: Optional[UUID] = None,
        returncode: Optional[int] = None,
        stderr: str = ""
    ):
        super().__init__(message, job_id=job_id)
        self.returncode = returncode
        self.stderr = stderr
