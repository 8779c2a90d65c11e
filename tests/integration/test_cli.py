"""Integration tests for the command-line interface."""

import json
import subprocess
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from transcodeplan import __version__
from transcodeplan.api.models import MediaDescriptorModel
from transcodeplan.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def descriptor_file(tmp_path, movie_descriptor):
    """Movie descriptor serialized to JSON."""
    path = tmp_path / "movie.json"
    path.write_text(MediaDescriptorModel.from_descriptor(movie_descriptor).model_dump_json())
    return path


class TestPlanCommand:
    """Tests for `transcodeplan plan`."""

    def test_plan_from_descriptor(self, runner, descriptor_file):
        result = runner.invoke(cli, ["plan", "movie.mkv", "--descriptor", str(descriptor_file)])

        assert result.exit_code == 0, result.output
        assert 'ffmpeg -i "movie.mkv"' in result.output
        assert '"movie_compressed.mp4"' in result.output
        assert "⚠ Skipped embedded subtitle #2 (hdmv_pgs_subtitle)" in result.output
        assert "Estimated size: ~" in result.output
        assert "Active preset: nas" in result.output

    def test_scale_720p(self, runner, descriptor_file):
        result = runner.invoke(
            cli, ["plan", "movie.mkv", "--descriptor", str(descriptor_file), "--scale", "720p"]
        )

        assert result.exit_code == 0, result.output
        assert '-vf "scale=-2:min(720\\,ih)"' in result.output

    def test_preset_then_overrides(self, runner, descriptor_file):
        """Options override the preset applied before them."""
        result = runner.invoke(
            cli,
            [
                "plan",
                "movie.mkv",
                "-d",
                str(descriptor_file),
                "--preset",
                "high",
                "--crf",
                "20",
                "--audio",
                "1",
                "--no-subtitles",
                "-e",
                "movie.en.srt",
                "--sub-language",
                "en",
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        command = data["command"]
        assert "-crf 20 -preset slow" in command
        assert "-map 0:a:0" not in command
        assert "-map 0:a:1 -map 1:0" in command
        assert "language=eng" in command
        assert command.endswith('"movie_compressed.mkv"')
        assert data["warnings"] == []
        assert data["active_presets"] == []

    def test_unknown_preset(self, runner, descriptor_file):
        result = runner.invoke(cli, ["plan", "movie.mkv", "-d", str(descriptor_file), "-p", "bogus"])

        assert result.exit_code == 1
        assert "Unknown preset: bogus" in result.output

    def test_track_out_of_range(self, runner, descriptor_file):
        result = runner.invoke(cli, ["plan", "movie.mkv", "-d", str(descriptor_file), "-s", "9"])

        assert result.exit_code == 1
        assert "out of range" in result.output

    def test_plan_runs_analyzer(self, runner, tmp_path, movie_descriptor):
        media = tmp_path / "movie.mkv"
        media.touch()

        with patch("transcodeplan.cli.MediaAnalyzer.analyze", return_value=movie_descriptor) as mock_analyze:
            result = runner.invoke(cli, ["plan", str(media)])

        assert result.exit_code == 0, result.output
        mock_analyze.assert_called_once_with(media)
        assert "Container: matroska,webm" in result.output
        assert "Duration: 1h 30m 0s" in result.output

    def test_analysis_failure(self, runner, tmp_path):
        media = tmp_path / "broken.mkv"
        media.touch()
        error = subprocess.CalledProcessError(1, "ffprobe")

        with patch("transcodeplan.cli.MediaAnalyzer.analyze", side_effect=error):
            result = runner.invoke(cli, ["plan", str(media)])

        assert result.exit_code == 1
        assert "Could not analyze" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["plan", str(tmp_path / "missing.mkv")])

        assert result.exit_code == 1
        assert "File not found" in result.output


class TestOtherCommands:
    """Tests for presets and version."""

    def test_presets(self, runner):
        result = runner.invoke(cli, ["presets"])

        assert result.exit_code == 0
        assert "* nas" in result.output
        assert "  compat" in result.output

    def test_presets_from_config(self, runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("defaults:\n  preset: compress\n")

        result = runner.invoke(cli, ["--config", str(config_file), "presets"])

        assert result.exit_code == 0, result.output
        assert "* compress" in result.output
        assert "* nas" not in result.output

    @pytest.mark.parametrize("command", [["presets"], ["plan", "movie.mkv"]])
    def test_unknown_default_preset(self, runner, tmp_path, command):
        """Should report a bad default preset instead of failing with a traceback."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("defaults:\n  preset: bogus\n")

        result = runner.invoke(cli, ["--config", str(config_file), *command])

        assert result.exit_code == 1
        assert "unknown default preset 'bogus'" in result.output
        assert not isinstance(result.exception, KeyError)

    def test_version(self, runner):
        result = runner.invoke(cli, ["version"])

        assert result.exit_code == 0
        assert f"transcodeplan v{__version__}" in result.output
