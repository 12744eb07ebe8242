"""
Image dimension inspection.

Reads width/height from an encoded image header without decoding pixels.
"""
import io

from PIL import Image, UnidentifiedImageError

from shared.errors import InvalidMetadataError
from shared.models.slideshow import ImageDimensions


def inspect_dimensions(image_bytes: bytes) -> ImageDimensions:
    """
    Get the pixel size of an encoded image.

    Image.open only parses the header; pixel data is decoded lazily and never
    touched here.

    Args:
        image_bytes: Raw image bytes

    Returns:
        ImageDimensions for the image

    Raises:
        InvalidMetadataError: If width or height cannot be determined
    """
    if not image_bytes:
        raise InvalidMetadataError("Invalid image metadata: empty image buffer")

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InvalidMetadataError(f"Invalid image metadata: {e}") from e

    if not width or not height or width <= 0 or height <= 0:
        raise InvalidMetadataError(f"Invalid image metadata: {width}x{height}")

    return ImageDimensions(width=width, height=height)
