"""Tests for input validation and frame extraction checks."""

from pathlib import Path

import pytest

from bg_remove.core.errors import InputValidationError, InvariantViolation
from bg_remove.core.interfaces import Frame
from bg_remove.media.ffmpeg import list_frames
from bg_remove.pipeline.extraction import extract_frames
from bg_remove.pipeline.validation import check_trim_range, validate_input

from conftest import FakeDecoder, FakeProber


class TestTrimRange:
    def test_start_after_end(self):
        with pytest.raises(InputValidationError) as excinfo:
            check_trim_range(5.0, 2.0)
        assert str(excinfo.value) == "--start (5.0s) must be before --end (2.0s)"
        assert excinfo.value.parameter == "start"

    def test_equal_bounds(self):
        with pytest.raises(InputValidationError):
            check_trim_range(2.0, 2.0)

    def test_negative_start(self):
        with pytest.raises(InputValidationError, match="must not be negative"):
            check_trim_range(-1.0, None)

    def test_zero_end(self):
        with pytest.raises(InputValidationError, match="must be positive"):
            check_trim_range(None, 0.0)

    def test_open_range(self):
        check_trim_range(None, None)
        check_trim_range(1.0, None)


class TestValidateInput:
    def test_missing_file(self, tmp_path):
        prober = FakeProber()
        with pytest.raises(InputValidationError, match="not found") as excinfo:
            validate_input(tmp_path / "missing.mp4", prober)
        assert excinfo.value.parameter == "input"
        assert prober.calls == []

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(InputValidationError, match="Unsupported video format: .txt"):
            validate_input(path, FakeProber())

    def test_bad_range_fails_before_probe(self, video_file):
        prober = FakeProber()
        with pytest.raises(InputValidationError):
            validate_input(video_file, prober, start=5.0, end=2.0)
        assert prober.calls == []

    def test_end_beyond_duration(self, video_file):
        with pytest.raises(InputValidationError, match="beyond video duration") as excinfo:
            validate_input(video_file, FakeProber(duration=3.0), end=4.0)
        assert excinfo.value.parameter == "end"

    def test_start_beyond_duration(self, video_file):
        with pytest.raises(InputValidationError, match="beyond video duration"):
            validate_input(video_file, FakeProber(duration=3.0), start=3.0)

    def test_zero_duration(self, video_file):
        with pytest.raises(InputValidationError, match="zero or unknown duration"):
            validate_input(video_file, FakeProber(duration=0.0))

    def test_returns_metadata(self, video_file):
        metadata, warnings = validate_input(video_file, FakeProber(duration=3.0, width=640, height=360))
        assert (metadata.width, metadata.height) == (640, 360)
        assert warnings == []

    def test_long_clip_warns(self, video_file):
        _, warnings = validate_input(video_file, FakeProber(duration=45.0))
        assert len(warnings) == 1
        assert "45.0s long" in warnings[0].message

    def test_trimmed_long_video_does_not_warn(self, video_file):
        _, warnings = validate_input(video_file, FakeProber(duration=120.0), start=10.0, end=20.0)
        assert warnings == []

    def test_extension_case_insensitive(self, tmp_path):
        path = tmp_path / "CLIP.MOV"
        path.write_bytes(b"x")
        validate_input(path, FakeProber())


class TestExtractFrames:
    def test_frames_in_order(self, video_file, tmp_path):
        decoder = FakeDecoder(duration=2.0)
        frames = extract_frames(video_file, decoder, tmp_path / "extracted", 12)
        assert len(frames) == 24
        assert [f.index for f in frames] == list(range(24))
        assert decoder.calls[0]["fps"] == 12

    def test_trim_forwarded(self, video_file, tmp_path):
        decoder = FakeDecoder(duration=10.0)
        frames = extract_frames(video_file, decoder, tmp_path / "extracted", 10, start=1.0, end=2.5)
        assert len(frames) == 15
        assert decoder.calls[0]["start"] == 1.0
        assert decoder.calls[0]["end"] == 2.5

    def test_no_frames(self, video_file, tmp_path):
        with pytest.raises(InputValidationError, match="No frames extracted"):
            extract_frames(video_file, FakeDecoder(count=0), tmp_path / "extracted", 12)

    def test_gap_in_indices(self, video_file, tmp_path):
        class GappyDecoder:
            def extract(self, path, output_dir, fps, start=None, end=None):
                return [Frame(0, Path("a.png")), Frame(2, Path("b.png"))]

        with pytest.raises(InvariantViolation, match="not contiguous"):
            extract_frames(video_file, GappyDecoder(), tmp_path, 12)

    def test_missing_frame_file_detected(self, video_file, tmp_path):
        class DroppingDecoder(FakeDecoder):
            def extract(self, path, output_dir, fps, start=None, end=None):
                super().extract(path, output_dir, fps, start, end)
                (Path(output_dir) / "frame_0003.png").unlink()
                return list_frames(Path(output_dir))

        with pytest.raises(InvariantViolation, match="got 3 at position 2"):
            extract_frames(video_file, DroppingDecoder(count=5), tmp_path / "extracted", 12)
