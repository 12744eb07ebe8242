"""
Data models for the slideshow pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .slideshow import ImagePair, ImageDimensions, MergeDirection, ProcessingJob

__all__ = [
    "ImagePair",
    "ImageDimensions",
    "MergeDirection",
    "ProcessingJob",
]
