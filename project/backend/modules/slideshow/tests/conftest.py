"""
Pytest fixtures for slideshow tests.
"""
from typing import List, Tuple

import pytest

from shared.models.slideshow import ImagePair
from modules.slideshow.tests.helpers import create_test_image, marker_color


@pytest.fixture
def test_image():
    """Fixture that returns the create_test_image function."""
    return create_test_image


@pytest.fixture
def sample_pair():
    """Create a sample image pair."""
    def _create_pair(
        first_size: Tuple[int, int] = (40, 40),
        second_size: Tuple[int, int] = (40, 40),
        first_color: Tuple[int, int, int] = (200, 30, 30),
        second_color: Tuple[int, int, int] = (30, 30, 200)
    ) -> ImagePair:
        return ImagePair(
            first=create_test_image(*first_size, color=first_color),
            second=create_test_image(*second_size, color=second_color)
        )
    return _create_pair


@pytest.fixture
def marked_pairs():
    """Create pairs whose first image carries the pair's marker color."""
    def _create_pairs(count: int = 3) -> List[ImagePair]:
        return [
            ImagePair(
                first=create_test_image(40, 40, color=marker_color(i)),
                second=create_test_image(40, 40, color=(255, 255, 255))
            )
            for i in range(1, count + 1)
        ]
    return _create_pairs
