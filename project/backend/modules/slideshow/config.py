"""
Slideshow configuration.

Layout target, canvas, frame naming and FFmpeg output settings.
"""

# Target aspect ratio for merged frames. 9/16 (portrait) is the value the
# layout heuristic has always used; keep it unless product says otherwise.
TARGET_ASPECT_RATIO = 9 / 16

# Canvas settings
CANVAS_MODE = "RGBA"  # 4 channels
CANVAS_BACKGROUND = (255, 255, 255, 255)  # opaque white

# Frame files
FRAME_FORMAT = "JPEG"
FRAME_EXTENSION = "jpg"
FRAME_PATTERN = f"%d.{FRAME_EXTENSION}"
FRAME_START_NUMBER = 1

# FFmpeg output settings
OUTPUT_VIDEO_CODEC = "libx264"
OUTPUT_PIXEL_FORMAT = "yuv420p"
OUTPUT_CONTAINER = "mp4"
OUTPUT_MOVFLAGS = "frag_keyframe+empty_moov"  # fragmented MP4, playable while streaming
# libx264 with yuv420p needs even width and height
EVEN_DIMENSIONS_FILTER = "scale=trunc(iw/2)*2:trunc(ih/2)*2"

# Streaming
STREAM_CHUNK_SIZE = 64 * 1024
STDERR_TAIL_BYTES = 16 * 1024  # stderr kept for diagnostics
