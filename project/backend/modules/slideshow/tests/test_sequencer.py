"""
Unit tests for frame sequencing.
"""
import asyncio
from pathlib import Path

import pytest
from unittest.mock import patch

from modules.slideshow import compositor
from modules.slideshow.sequencer import frame_path, remove_frames, sequence_frames, write_frame
from modules.slideshow.tests.helpers import assert_color_close, create_test_image, decode, marker_color
from shared.errors import CompositionFailure, FrameWriteFailure, InvalidMetadataError
from shared.models.slideshow import ImagePair


def frame_names(directory: Path):
    return sorted(p.name for p in directory.iterdir())


class TestWriteFrame:
    """Tests for write_frame function."""

    def test_write_frame(self, tmp_path):
        """Test frame is written under its index with no temp file left."""
        path = write_frame(tmp_path, 7, b"jpeg-bytes")

        assert path == tmp_path / "7.jpg"
        assert path.read_bytes() == b"jpeg-bytes"
        assert frame_names(tmp_path) == ["7.jpg"]

    def test_write_frame_overwrites(self, tmp_path):
        """Test an existing frame is replaced."""
        (tmp_path / "1.jpg").write_bytes(b"old")
        write_frame(tmp_path, 1, b"new")
        assert (tmp_path / "1.jpg").read_bytes() == b"new"

    def test_write_frame_missing_directory(self, tmp_path):
        """Test write errors raise FrameWriteFailure with the frame index."""
        with pytest.raises(FrameWriteFailure) as exc_info:
            write_frame(tmp_path / "missing", 3, b"x")
        assert exc_info.value.frame_index == 3


class TestRemoveFrames:
    """Tests for remove_frames function."""

    def test_removes_only_numbered_frames(self, tmp_path):
        """Test numbered frames and temp files go, other files stay."""
        for name in ["1.jpg", "2.jpg", "3.jpg.tmp", "cover.jpg", "notes.txt"]:
            (tmp_path / name).write_bytes(b"x")

        assert remove_frames(tmp_path) == 3
        assert frame_names(tmp_path) == ["cover.jpg", "notes.txt"]


class TestSequenceFrames:
    """Tests for sequence_frames function."""

    @pytest.mark.asyncio
    async def test_writes_numbered_frames(self, tmp_path, marked_pairs):
        """Test N pairs produce exactly 1.jpg .. N.jpg."""
        output_dir = tmp_path / "job" / "frames"
        paths = await sequence_frames(marked_pairs(4), output_dir)

        assert paths == [frame_path(output_dir, i) for i in range(1, 5)]
        assert frame_names(output_dir) == ["1.jpg", "2.jpg", "3.jpg", "4.jpg"]

    @pytest.mark.asyncio
    async def test_existing_directory_is_fine(self, tmp_path, marked_pairs):
        """Test an already existing output directory is reused."""
        await sequence_frames(marked_pairs(1), tmp_path)
        await sequence_frames(marked_pairs(1), tmp_path)
        assert frame_names(tmp_path) == ["1.jpg"]

    @pytest.mark.asyncio
    async def test_order_independent_of_completion(self, tmp_path, marked_pairs):
        """Test frame i comes from pairs[i-1] even when later pairs finish first."""
        pairs = marked_pairs(3)
        delays = {pairs[0].first: 0.3, pairs[1].first: 0.15, pairs[2].first: 0.0}
        completed = []
        real_merge_pair = compositor.merge_pair

        async def slow_merge_pair(pair: ImagePair):
            await asyncio.sleep(delays[pair.first])
            result = await real_merge_pair(pair)
            completed.append(pairs.index(pair) + 1)
            return result

        with patch("modules.slideshow.sequencer.merge_pair", side_effect=slow_merge_pair):
            await sequence_frames(pairs, tmp_path, max_concurrency=0)

        assert completed == [3, 2, 1]
        for index in (1, 2, 3):
            frame = decode(frame_path(tmp_path, index).read_bytes())
            # Two 40x40 images stack; the marked first image is on top
            assert frame.size == (40, 80)
            assert_color_close(frame.getpixel((20, 20)), marker_color(index))

    @pytest.mark.asyncio
    async def test_stale_frames_removed(self, tmp_path, marked_pairs):
        """Test frames from a longer previous run do not survive."""
        for i in range(1, 6):
            (tmp_path / f"{i}.jpg").write_bytes(b"stale")

        await sequence_frames(marked_pairs(2), tmp_path)

        assert frame_names(tmp_path) == ["1.jpg", "2.jpg"]

    @pytest.mark.asyncio
    async def test_invalid_metadata_fails_whole_run(self, tmp_path, marked_pairs):
        """Test one bad image fails sequencing and leaves no frames."""
        pairs = marked_pairs(3)
        pairs[1] = ImagePair(first=pairs[1].first, second=b"corrupt")

        with pytest.raises(InvalidMetadataError) as exc_info:
            await sequence_frames(pairs, tmp_path)

        assert exc_info.value.frame_index == 2
        assert frame_names(tmp_path) == []

    @pytest.mark.asyncio
    async def test_first_failure_in_input_order(self, tmp_path, marked_pairs):
        """Test the earliest failing pair is reported when several fail."""
        pairs = marked_pairs(4)
        pairs[3] = ImagePair(first=b"bad", second=b"bad")
        pairs[1] = ImagePair(first=b"bad", second=b"bad")

        with pytest.raises(InvalidMetadataError) as exc_info:
            await sequence_frames(pairs, tmp_path)

        assert exc_info.value.frame_index == 2

    @pytest.mark.asyncio
    async def test_all_pairs_finish_before_failure(self, tmp_path, marked_pairs):
        """Test in-flight pairs complete before the failure is raised."""
        pairs = marked_pairs(3)
        finished = []
        real_merge_pair = compositor.merge_pair

        async def merge_or_fail(pair: ImagePair):
            index = pairs.index(pair) + 1
            if index == 1:
                raise CompositionFailure("boom")
            await asyncio.sleep(0.05)
            result = await real_merge_pair(pair)
            finished.append(index)
            return result

        with patch("modules.slideshow.sequencer.merge_pair", side_effect=merge_or_fail):
            with pytest.raises(CompositionFailure):
                await sequence_frames(pairs, tmp_path, max_concurrency=0)

        assert sorted(finished) == [2, 3]
        assert frame_names(tmp_path) == []

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, tmp_path, marked_pairs):
        """Test non-pipeline exceptions become CompositionFailure."""
        with patch("modules.slideshow.sequencer.merge_pair", side_effect=RuntimeError("decoder crashed")):
            with pytest.raises(CompositionFailure, match="decoder crashed") as exc_info:
                await sequence_frames(marked_pairs(1), tmp_path)
        assert exc_info.value.frame_index == 1

    @pytest.mark.asyncio
    async def test_concurrency_limit(self, tmp_path, marked_pairs):
        """Test no more than max_concurrency pairs run at once."""
        active = 0
        peak = 0
        real_merge_pair = compositor.merge_pair

        async def counting_merge_pair(pair: ImagePair):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.02)
            try:
                return await real_merge_pair(pair)
            finally:
                active -= 1

        with patch("modules.slideshow.sequencer.merge_pair", side_effect=counting_merge_pair):
            await sequence_frames(marked_pairs(6), tmp_path, max_concurrency=2)

        assert peak == 2
        assert len(frame_names(tmp_path)) == 6

    @pytest.mark.asyncio
    async def test_directory_creation_failure(self, tmp_path, marked_pairs):
        """Test an unusable output path raises FrameWriteFailure."""
        blocker = tmp_path / "file"
        blocker.write_bytes(b"x")

        with pytest.raises(FrameWriteFailure):
            await sequence_frames(marked_pairs(1), blocker / "frames")

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, tmp_path, marked_pairs):
        """Test a failing frame write fails the run."""
        with patch(
            "modules.slideshow.sequencer.write_frame",
            side_effect=FrameWriteFailure("disk full")
        ):
            with pytest.raises(FrameWriteFailure, match="disk full") as exc_info:
                await sequence_frames(marked_pairs(1), tmp_path)
        assert exc_info.value.frame_index == 1
