"""
Slideshow data models.

Defines ImagePair, ImageDimensions, MergeDirection and ProcessingJob for the
pair-to-video pipeline.
"""

from enum import Enum
from pathlib import Path
from uuid import UUID, uuid4
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from shared.config import settings


class MergeDirection(str, Enum):
    """How the two images of a pair are arranged on one frame."""

    HORIZONTAL = "horizontal"  # side by side
    VERTICAL = "vertical"      # stacked


class ImagePair(BaseModel):
    """Two encoded images merged into a single frame."""

    model_config = ConfigDict(frozen=True)

    first: bytes
    second: bytes


class ImageDimensions(BaseModel):
    """Pixel size of a decoded image header."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


class ProcessingJob(BaseModel):
    """Configuration for one pairs-to-video run."""

    model_config = ConfigDict(frozen=True)

    folder: str = Field(description="Job-scoped subfolder under the output directory")
    fps: int = Field(default_factory=lambda: settings.slideshow_fps, gt=0)
    cleanup: bool = Field(default_factory=lambda: settings.slideshow_cleanup)
    job_id: UUID = Field(default_factory=uuid4)

    @field_validator("folder")
    @classmethod
    def validate_folder(cls, v: str) -> str:
        """Folder must be a single path component so jobs cannot collide or escape."""
        v = v.strip()
        if not v:
            raise ValueError("folder must not be empty")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"folder must be a single directory name, got {v!r}")
        return v

    @field_serializer("job_id")
    def serialize_uuid(self, value: UUID) -> str:
        """Serialize UUID to string."""
        return str(value)

    def job_dir(self, base_dir: Path) -> Path:
        """Directory holding this job's numbered frames."""
        return Path(base_dir) / self.folder
