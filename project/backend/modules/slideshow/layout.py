"""
Merge direction selection.

Picks side-by-side or stacked arrangement by whichever combined aspect ratio
lands closer to TARGET_ASPECT_RATIO.
"""
from typing import Tuple

from shared.models.slideshow import ImageDimensions, MergeDirection
from .config import TARGET_ASPECT_RATIO


def combined_aspect_ratios(
    first: ImageDimensions,
    second: ImageDimensions
) -> Tuple[float, float]:
    """
    Aspect ratios of the merged canvas for both arrangements.

    Returns:
        (horizontal_ratio, vertical_ratio)
    """
    horizontal = (first.width + second.width) / max(first.height, second.height)
    vertical = max(first.width, second.width) / (first.height + second.height)
    return horizontal, vertical


def layout_distances(
    first: ImageDimensions,
    second: ImageDimensions,
    target: float = TARGET_ASPECT_RATIO
) -> Tuple[float, float]:
    """
    Distance of each arrangement's aspect ratio from the target.

    Returns:
        (horizontal_distance, vertical_distance)
    """
    horizontal, vertical = combined_aspect_ratios(first, second)
    return abs(horizontal - target), abs(vertical - target)


def select_layout(
    first: ImageDimensions,
    second: ImageDimensions,
    target: float = TARGET_ASPECT_RATIO
) -> MergeDirection:
    """
    Choose how to merge two images.

    HORIZONTAL only when strictly closer to the target; ties go VERTICAL.
    """
    horizontal_distance, vertical_distance = layout_distances(first, second, target)
    if horizontal_distance < vertical_distance:
        return MergeDirection.HORIZONTAL
    return MergeDirection.VERTICAL
