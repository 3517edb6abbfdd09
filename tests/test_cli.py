import pytest

import convert_to_hls
import main as trim_cli
from trimmer.session import TrimSession, MSG_END_PAST_DURATION, MSG_INVALID_FILE

from conftest import FakeBackend, FakeProbe, FakeTranscoder


@pytest.fixture
def backend(monkeypatch) -> FakeBackend:
    backend = FakeBackend(trim_data=b"trimmed-output")
    monkeypatch.setattr(
        trim_cli, "build_session",
        lambda args: TrimSession(backend=backend, probe=FakeProbe(duration=60.0)),
    )
    return backend


class TestTrimCli:

    def test_trims_local_file(self, tmp_path, backend) -> None:
        source = tmp_path / "clip.mp4"
        source.write_bytes(b"source-bytes")
        output = tmp_path / "cut.mp4"

        code = trim_cli.main([
            str(source), "--start", "00:00:05", "--end", "00:00:10",
            "--output", str(output), "--quiet",
        ])

        assert code == 0
        assert output.read_bytes() == b"trimmed-output"
        call = backend.trim_calls[0]
        assert call["media"] == b"source-bytes"
        assert call["start_time"] == "00:00:05"
        assert call["duration"] == "5"
        assert call["media_kind"] == "video"

    def test_default_range_and_output_name(self, tmp_path, backend, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "song.mp3").write_bytes(b"audio")

        assert trim_cli.main(["song.mp3", "-q"]) == 0
        assert (tmp_path / "trimmed-song.mp3").read_bytes() == b"trimmed-output"
        assert backend.trim_calls[0]["duration"] == "60"
        assert backend.trim_calls[0]["media_kind"] == "audio"

    def test_url_source(self, tmp_path, backend) -> None:
        output = tmp_path / "out.mp4"
        code = trim_cli.main(["--url", "https://x.test/v", "--end", "00:00:20", "-o", str(output), "-q"])
        assert code == 0
        assert backend.download_calls == [("https://x.test/v", False)]
        assert backend.trim_calls[0]["media"] == b"remote-video"

    def test_save_original_from_url(self, tmp_path, backend, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        code = trim_cli.main(["--url", "https://x.test/v", "--save-original", "-o", "cut.mp4", "-q"])
        assert code == 0
        assert (tmp_path / "downloaded-video.mp4").read_bytes() == b"remote-video"
        assert (tmp_path / "cut.mp4").read_bytes() == b"trimmed-output"

    def test_save_original_to_path(self, tmp_path, backend) -> None:
        source = tmp_path / "clip.mp4"
        source.write_bytes(b"source-bytes")
        copy = tmp_path / "copy.mp4"
        code = trim_cli.main([
            str(source), "--save-original", str(copy), "-o", str(tmp_path / "cut.mp4"), "-q",
        ])
        assert code == 0
        assert copy.read_bytes() == b"source-bytes"

    def test_range_error_reported(self, tmp_path, backend, capsys) -> None:
        source = tmp_path / "clip.mp4"
        source.write_bytes(b"x")

        code = trim_cli.main([str(source), "--end", "00:02:00", "-o", str(tmp_path / "o.mp4"), "-q"])

        assert code == 1
        assert MSG_END_PAST_DURATION in capsys.readouterr().err
        assert backend.trim_calls == []

    def test_unsupported_file_type(self, tmp_path, backend, capsys) -> None:
        source = tmp_path / "notes.txt"
        source.write_text("hello")
        assert trim_cli.main([str(source), "-q"]) == 1
        assert MSG_INVALID_FILE in capsys.readouterr().err

    def test_missing_file(self, tmp_path, backend, capsys) -> None:
        assert trim_cli.main([str(tmp_path / "missing.mp4"), "-q"]) == 1
        assert "Input file not found" in capsys.readouterr().err

    def test_requires_exactly_one_source(self, backend) -> None:
        with pytest.raises(SystemExit):
            trim_cli.main([])
        with pytest.raises(SystemExit):
            trim_cli.main(["clip.mp4", "--url", "https://x.test/v"])


class TestHlsCli:

    @pytest.fixture
    def transcoder(self, monkeypatch) -> FakeTranscoder:
        transcoder = FakeTranscoder(fail_names=("broken",))
        monkeypatch.setattr(convert_to_hls, "FFmpegTranscoder", lambda: transcoder)
        return transcoder

    def test_converts_directory(self, tmp_path, transcoder) -> None:
        (tmp_path / "in").mkdir()
        (tmp_path / "in" / "a.mp4").write_bytes(b"x")
        (tmp_path / "in" / "b.mp4").write_bytes(b"x")

        code = convert_to_hls.main([
            "-i", str(tmp_path / "in"), "-o", str(tmp_path / "out"), "-s", "6", "-w", "2", "-q",
        ])

        assert code == 0
        assert (tmp_path / "out" / "a" / "a.m3u8").is_file()
        assert (tmp_path / "out" / "b" / "b.m3u8").is_file()
        assert all(options.segment_seconds == 6 for _, _, options in transcoder.segment_calls)

    def test_failed_file_sets_exit_code(self, tmp_path, transcoder, capsys) -> None:
        (tmp_path / "in").mkdir()
        (tmp_path / "in" / "ok.mp4").write_bytes(b"x")
        (tmp_path / "in" / "broken.mp4").write_bytes(b"x")

        code = convert_to_hls.main(["-i", str(tmp_path / "in"), "-o", str(tmp_path / "out"), "-q"])

        assert code == 1
        assert "broken.mp4" in capsys.readouterr().err
        assert (tmp_path / "out" / "ok" / "ok.m3u8").is_file()

    def test_missing_input_dir(self, tmp_path, transcoder, capsys) -> None:
        code = convert_to_hls.main(["-i", str(tmp_path / "nope"), "-o", str(tmp_path / "out"), "-q"])
        assert code == 1
        assert "Input directory not found" in capsys.readouterr().err

    def test_rejects_zero_workers(self, tmp_path, transcoder) -> None:
        with pytest.raises(SystemExit):
            convert_to_hls.main(["-i", str(tmp_path), "-w", "0"])
