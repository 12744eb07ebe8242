"""
Slideshow module.

Merges ordered image pairs into single frames, writes them as a numbered
sequence and streams them through ffmpeg as a fragmented MP4.
"""

from modules.slideshow.process import ImageVideoProcessor, create_video

__all__ = ["ImageVideoProcessor", "create_video"]
