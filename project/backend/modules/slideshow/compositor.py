"""
Pair compositing for slideshow module.

Places two images on one white canvas, side by side or stacked, centering
the smaller image along the shared axis, and encodes the result as JPEG.
"""
import asyncio
import io
from typing import List, Optional, Tuple

from PIL import Image

from shared.errors import CompositionFailure, InvalidMetadataError
from shared.models.slideshow import ImageDimensions, ImagePair, MergeDirection
from .config import CANVAS_BACKGROUND, CANVAS_MODE, FRAME_FORMAT
from .dimensions import inspect_dimensions
from .layout import select_layout

Placement = Tuple[int, int]  # (left, top)


def plan_canvas(
    first: ImageDimensions,
    second: ImageDimensions,
    direction: MergeDirection
) -> Tuple[Tuple[int, int], List[Placement]]:
    """
    Compute canvas size and image offsets for a merge.

    Args:
        first: Dimensions of the first image
        second: Dimensions of the second image
        direction: Merge direction

    Returns:
        ((canvas_width, canvas_height), [first_offset, second_offset])
    """
    if direction == MergeDirection.HORIZONTAL:
        canvas_width = first.width + second.width
        canvas_height = max(first.height, second.height)
        placements = [
            (0, (canvas_height - first.height) // 2),
            (first.width, (canvas_height - second.height) // 2),
        ]
    elif direction == MergeDirection.VERTICAL:
        canvas_width = max(first.width, second.width)
        canvas_height = first.height + second.height
        placements = [
            ((canvas_width - first.width) // 2, 0),
            ((canvas_width - second.width) // 2, first.height),
        ]
    else:
        raise CompositionFailure(f"Invalid merge direction: {direction}")

    return (canvas_width, canvas_height), placements


def _decode(image_bytes: bytes, label: str) -> Image.Image:
    """Fully decode an image to RGBA."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()
            return image.convert(CANVAS_MODE)
    except OSError as e:
        raise CompositionFailure(f"Failed to decode {label} image: {e}") from e


def composite(
    first_bytes: bytes,
    second_bytes: bytes,
    direction: MergeDirection,
    dimensions: Optional[Tuple[ImageDimensions, ImageDimensions]] = None
) -> bytes:
    """
    Merge two encoded images into one JPEG frame.

    Args:
        first_bytes: Raw bytes of the first image (left or top)
        second_bytes: Raw bytes of the second image (right or bottom)
        direction: Merge direction
        dimensions: Already-read dimensions of both images, to skip a second
            header read

    Returns:
        JPEG bytes of the merged frame

    Raises:
        InvalidMetadataError: If either image has no usable width/height
        CompositionFailure: If decoding or encoding fails
    """
    if dimensions is None:
        dimensions = (inspect_dimensions(first_bytes), inspect_dimensions(second_bytes))
    first_dims, second_dims = dimensions

    canvas_size, placements = plan_canvas(first_dims, second_dims, direction)

    first_image = _decode(first_bytes, "first")
    second_image = _decode(second_bytes, "second")

    # Header and pixel data disagreeing means the placement plan is wrong
    for image, dims, label in (
        (first_image, first_dims, "first"),
        (second_image, second_dims, "second"),
    ):
        if image.size != (dims.width, dims.height):
            raise InvalidMetadataError(
                f"Invalid image metadata: {label} image decoded as "
                f"{image.size[0]}x{image.size[1]}, header says {dims.width}x{dims.height}"
            )

    try:
        canvas = Image.new(CANVAS_MODE, canvas_size, CANVAS_BACKGROUND)
        for image, offset in zip((first_image, second_image), placements):
            canvas.alpha_composite(image, dest=offset)

        output = io.BytesIO()
        canvas.convert("RGB").save(output, format=FRAME_FORMAT)
        return output.getvalue()
    except (OSError, ValueError) as e:
        raise CompositionFailure(f"Failed to composite images: {e}") from e


async def merge_pair(pair: ImagePair) -> Tuple[MergeDirection, bytes]:
    """
    Pick a layout for a pair and composite it.

    Dimensions are read once and shared between layout selection and
    compositing. Pillow work runs in a worker thread.

    Args:
        pair: Image pair to merge

    Returns:
        (chosen direction, JPEG bytes)
    """
    first_dims, second_dims = await asyncio.gather(
        asyncio.to_thread(inspect_dimensions, pair.first),
        asyncio.to_thread(inspect_dimensions, pair.second),
    )
    direction = select_layout(first_dims, second_dims)

    frame_bytes = await asyncio.to_thread(
        composite, pair.first, pair.second, direction, (first_dims, second_dims)
    )
    return direction, frame_bytes
