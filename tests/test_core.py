import os

import pytest

from application.ports.transcoder_port import TranscodeError
from infrastructure.web.scratch_files import scratch_pair, safe_delete
from trimmer.core import trim_media, validate_trim_params

from conftest import FakeTranscoder


class _Upload:
    """Mimics werkzeug's FileStorage.save()."""

    def __init__(self, data: bytes) -> None:
        self.data = data

    def save(self, path: str) -> None:
        with open(path, "wb") as f:
            f.write(self.data)


class TestValidateTrimParams:

    def test_valid_values_build_options(self) -> None:
        options = validate_trim_params("00:00:05", "10")
        assert options.start_time == "00:00:05"
        assert options.duration == "10"

    def test_bad_start_time_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid start time"):
            validate_trim_params("5", "10")

    def test_bad_duration_raises(self) -> None:
        with pytest.raises(ValueError, match="duration"):
            validate_trim_params("00:00:05", "ten")


class TestScratchPair:

    def test_directory_created_recursively(self, tmp_path) -> None:
        target = os.path.join(str(tmp_path), "a", "b", "temp")
        with scratch_pair(target, "mp4") as pair:
            assert os.path.isdir(target)
            assert pair.input_path.endswith(".mp4")
            assert os.path.basename(pair.input_path).startswith("input-")
            assert os.path.basename(pair.output_path).startswith("output-")

    def test_names_are_unique(self, tmp_path) -> None:
        with scratch_pair(str(tmp_path), "mp3") as a, scratch_pair(str(tmp_path), "mp3") as b:
            assert len({a.input_path, a.output_path, b.input_path, b.output_path}) == 4

    def test_files_removed_when_block_raises(self, tmp_path) -> None:
        with pytest.raises(RuntimeError):
            with scratch_pair(str(tmp_path), "mp4") as pair:
                for path in (pair.input_path, pair.output_path):
                    with open(path, "wb") as f:
                        f.write(b"x")
                raise RuntimeError("mid-pipeline failure")
        assert os.listdir(str(tmp_path)) == []

    def test_safe_delete_missing_file_is_noop(self, tmp_path) -> None:
        safe_delete(os.path.join(str(tmp_path), "missing.mp4"))  # Should not raise


class TestTrimMedia:
    """The trim pipeline with a fake transcoder."""

    def test_video_trim_returns_output_bytes(self, scratch_dir) -> None:
        transcoder = FakeTranscoder(output=b"cut-video")
        result = trim_media(b"source", "00:00:02", "3", "video", transcoder, scratch_dir)

        assert result.data == b"cut-video"
        assert result.mimetype == "video/mp4"
        assert result.filename == "trimmed.mp4"
        assert transcoder.seen_inputs == [b"source"]

    def test_audio_trim_uses_mp3_names_and_type(self, scratch_dir) -> None:
        transcoder = FakeTranscoder()
        result = trim_media(b"source", "00:00:00", "1", "audio", transcoder, scratch_dir)

        input_path, output_path, options = transcoder.calls[0]
        assert input_path.endswith(".mp3")
        assert output_path.endswith(".mp3")
        assert options.media_kind == "audio"
        assert result.mimetype == "audio/mpeg"
        assert result.filename == "trimmed.mp3"

    def test_unknown_kind_treated_as_audio(self, scratch_dir) -> None:
        result = trim_media(b"s", "00:00:00", "1", "", FakeTranscoder(), scratch_dir)
        assert result.filename == "trimmed.mp3"

    def test_options_forwarded_to_transcoder(self, scratch_dir) -> None:
        transcoder = FakeTranscoder()
        trim_media(b"s", "01:02:03", "4.5", "video", transcoder, scratch_dir)
        options = transcoder.calls[0][2]
        assert options.start_time == "01:02:03"
        assert options.duration == "4.5"

    def test_upload_object_is_saved(self, scratch_dir) -> None:
        transcoder = FakeTranscoder()
        trim_media(_Upload(b"uploaded"), "00:00:00", "1", "video", transcoder, scratch_dir)
        assert transcoder.seen_inputs == [b"uploaded"]

    def test_scratch_files_removed_after_success(self, scratch_dir) -> None:
        transcoder = FakeTranscoder()
        trim_media(b"s", "00:00:00", "1", "video", transcoder, scratch_dir)

        input_path, output_path, _ = transcoder.calls[0]
        assert not os.path.exists(input_path)
        assert not os.path.exists(output_path)
        assert os.listdir(scratch_dir) == []

    def test_scratch_files_removed_after_failure(self, scratch_dir) -> None:
        """A failing transcode must not leave input or partial output behind."""
        transcoder = FakeTranscoder(fail=True)
        with pytest.raises(TranscodeError):
            trim_media(b"s", "00:00:00", "1", "video", transcoder, scratch_dir)

        input_path, output_path, _ = transcoder.calls[0]
        assert not os.path.exists(input_path)
        assert not os.path.exists(output_path)
        assert os.listdir(scratch_dir) == []

    def test_invalid_params_rejected_before_any_file_is_written(self, scratch_dir) -> None:
        transcoder = FakeTranscoder()
        with pytest.raises(ValueError):
            trim_media(b"s", "bad", "1", "video", transcoder, scratch_dir)
        assert transcoder.calls == []
        assert not os.path.exists(scratch_dir)

    def test_progress_callback_reports_each_step(self, scratch_dir) -> None:
        steps = []
        trim_media(
            b"s", "00:00:00", "1", "video", FakeTranscoder(), scratch_dir,
            progress_callback=lambda idx, total, name: steps.append((idx, total, name)),
        )
        assert [s[0] for s in steps] == [0, 1, 2]
        assert all(s[1] == 3 for s in steps)
