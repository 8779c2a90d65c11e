"""Unit tests for ffmpeg command synthesis."""

import re
import shlex

import pytest

from transcodeplan.core.synthesizer import CommandSynthesizer
from transcodeplan.models.encoding import EncodingConfig, TrackSelection
from transcodeplan.models.track import ExternalSubtitle


@pytest.fixture
def synthesizer():
    """Create CommandSynthesizer instance."""
    return CommandSynthesizer()


class TestCommandLayout:
    """Test the overall command layout."""

    def test_full_command_for_mp4(self, synthesizer, movie_descriptor, nas_config):
        """Should build the complete command and drop bitmap subtitles."""
        selection = TrackSelection.select_all(movie_descriptor)

        plan = synthesizer.synthesize(movie_descriptor, nas_config, selection, [], "movie.mkv")

        assert plan.command == (
            'ffmpeg -i "movie.mkv" -map 0:v:0 -map 0:a:0 -map 0:a:1 -map 0:s:0 -map 0:s:2 '
            "-c:v libx265 -pix_fmt yuv420p -tag:v hvc1 -crf 23 -preset medium "
            '-vf "scale=-2:min(1080\\,ih)" -c:a aac -b:a 128k -c:s mov_text '
            '-movflags +faststart "movie_compressed.mp4"'
        )
        assert [w.track_ref for w in plan.warnings] == ["0:s:1", "0:s:3"]

    def test_idempotent(self, synthesizer, movie_descriptor, nas_config):
        """Should produce identical output for identical input."""
        selection = TrackSelection.select_all(movie_descriptor)
        subs = [ExternalSubtitle(id="a", source_ref="extra.srt", language_code="eng")]

        first = synthesizer.synthesize(movie_descriptor, nas_config, selection, subs, "movie.mkv")
        second = synthesizer.synthesize(movie_descriptor, nas_config, selection, subs, "movie.mkv")

        assert first == second

    def test_mkv_keeps_all_subtitles(self, synthesizer, movie_descriptor):
        """Should map bitmap subtitles into MKV with stream copy."""
        config = EncodingConfig(container_format="mkv")
        selection = TrackSelection.select_all(movie_descriptor)

        plan = synthesizer.synthesize(movie_descriptor, config, selection, [], "movie.mkv")

        for index in range(4):
            assert f"-map 0:s:{index}" in plan.command
        assert "-c:s copy" in plan.command
        assert "-tag:v hvc1" not in plan.command
        assert "-movflags" not in plan.command
        assert plan.command.endswith('"movie_compressed.mkv"')
        assert plan.warnings == []

    def test_mov_is_mp4_family(self, synthesizer, movie_descriptor):
        """Should treat MOV like MP4."""
        config = EncodingConfig(container_format="mov")
        selection = TrackSelection.select_all(movie_descriptor)

        plan = synthesizer.synthesize(movie_descriptor, config, selection, [], "movie.mkv")

        assert "-tag:v hvc1" in plan.command
        assert "-c:s mov_text" in plan.command
        assert "-movflags +faststart" in plan.command
        assert len(plan.warnings) == 2
        assert plan.command.endswith('"movie_compressed.mov"')

    def test_without_descriptor(self, synthesizer, nas_config):
        """Should still produce a command before any file is analyzed."""
        plan = synthesizer.synthesize(None, nas_config, TrackSelection(), [], None)

        assert plan.command.startswith('ffmpeg -i "input.mp4" -map 0:v:0 -c:v libx265')
        assert plan.command.endswith('"output_compressed.mp4"')
        assert "-c:s" not in plan.command


class TestStreamMapping:
    """Test audio and subtitle stream mapping."""

    def test_audio_indices_ascending(self, synthesizer, movie_descriptor, nas_config):
        """Should map audio in ascending order regardless of insertion order."""
        selection = TrackSelection()
        selection.selected_audio.add(1)
        selection.selected_audio.add(0)

        plan = synthesizer.synthesize(movie_descriptor, nas_config, selection, [], "movie.mkv")

        assert re.findall(r"-map 0:a:(\d+)", plan.command) == ["0", "1"]

    def test_subtitle_indices_ascending(self, synthesizer, movie_descriptor):
        """Should map subtitles in ascending order."""
        config = EncodingConfig(container_format="mkv")
        selection = TrackSelection(selected_subtitle={3, 0, 2})

        plan = synthesizer.synthesize(movie_descriptor, config, selection, [], "movie.mkv")

        assert re.findall(r"-map 0:s:(\d+)", plan.command) == ["0", "2", "3"]

    def test_muted_output_has_no_audio(self, synthesizer, movie_descriptor):
        """Should omit audio maps and codec when audio is 'none'."""
        config = EncodingConfig(audio_codec="none")
        selection = TrackSelection.select_all(movie_descriptor)

        plan = synthesizer.synthesize(movie_descriptor, config, selection, [], "movie.mkv")

        assert "-map 0:a" not in plan.command
        assert "-c:a" not in plan.command

    def test_audio_copy(self, synthesizer, movie_descriptor):
        """Should pass audio through without a bitrate."""
        config = EncodingConfig(audio_codec="copy")
        selection = TrackSelection.select_all(movie_descriptor)

        plan = synthesizer.synthesize(movie_descriptor, config, selection, [], "movie.mkv")

        assert "-c:a copy" in plan.command
        assert "-b:a" not in plan.command

    def test_bitmap_subtitle_dropped_with_single_warning(self, synthesizer, movie_descriptor, nas_config):
        """Should drop one bitmap track and warn exactly once."""
        selection = TrackSelection(selected_subtitle={1})

        plan = synthesizer.synthesize(movie_descriptor, nas_config, selection, [], "movie.mkv")

        assert "-map 0:s:1" not in plan.command
        assert "-c:s" not in plan.command
        assert len(plan.warnings) == 1
        assert plan.warnings[0].track_ref == "0:s:1"
        assert "hdmv_pgs_subtitle" in plan.warnings[0].reason

    def test_external_subtitles_follow_embedded(self, synthesizer, movie_descriptor, nas_config):
        """Should number external subtitle metadata after admitted embedded ones."""
        selection = TrackSelection(selected_subtitle={0, 1})
        subs = [
            ExternalSubtitle(id="a", source_ref="chs.srt", language_code="chi"),
            ExternalSubtitle(id="b", source_ref="eng.ass", language_code="eng", title="English SDH"),
        ]

        plan = synthesizer.synthesize(movie_descriptor, nas_config, selection, subs, "movie.mkv")

        assert plan.command.startswith('ffmpeg -i "movie.mkv" -i "chs.srt" -i "eng.ass" -map 0:v:0')
        assert (
            '-map 0:s:0 -map 1:0 -metadata:s:s:1 language=chi -metadata:s:s:1 title="chs.srt" '
            '-map 2:0 -metadata:s:s:2 language=eng -metadata:s:s:2 title="English SDH"'
        ) in plan.command
        assert "-c:s mov_text" in plan.command
        assert len(plan.warnings) == 1

    def test_external_subtitle_enables_subtitle_codec(self, synthesizer, movie_descriptor, nas_config):
        """Should emit a subtitle codec when only external subtitles are mapped."""
        subs = [ExternalSubtitle(id="a", source_ref="chs.srt")]

        plan = synthesizer.synthesize(movie_descriptor, nas_config, TrackSelection(), subs, "movie.mkv")

        assert "-map 1:0 -metadata:s:s:0 language=chi" in plan.command
        assert "-c:s mov_text" in plan.command

    def test_free_text_language_stays_one_word(self, synthesizer, movie_descriptor, nas_config):
        """Should quote a language tag that contains spaces."""
        subs = [ExternalSubtitle(id="a", source_ref="chs.srt", language_code="chinese simplified")]

        plan = synthesizer.synthesize(movie_descriptor, nas_config, TrackSelection(), subs, "movie.mkv")

        assert 'language="chinese simplified"' in plan.command
        assert "language=chinese simplified" in shlex.split(plan.command)


class TestVideoFlags:
    """Test encoder-specific video flags."""

    def test_x264_quality_and_preset(self, synthesizer, movie_descriptor):
        """Should use CRF and the chosen speed preset."""
        config = EncodingConfig(video_codec="libx264", crf=18, speed_preset="slow", scale_mode="original")

        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), [], "movie.mkv")

        assert "-c:v libx264 -pix_fmt yuv420p -crf 18 -preset slow" in plan.command
        assert "-tag:v" not in plan.command
        assert "-vf" not in plan.command

    def test_nvenc_uses_cq_and_fixed_preset(self, synthesizer, movie_descriptor):
        """Should use -cq with preset p4 regardless of the chosen speed."""
        config = EncodingConfig(video_codec="h264_nvenc", crf=25, speed_preset="veryslow")

        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), [], "movie.mkv")

        assert "-c:v h264_nvenc -pix_fmt yuv420p -cq 25 -preset p4" in plan.command
        assert "-crf" not in plan.command
        assert "veryslow" not in plan.command

    def test_hevc_nvenc_gets_compat_tag_in_mp4(self, synthesizer, movie_descriptor):
        """Should tag HEVC as hvc1 for MP4 players."""
        config = EncodingConfig(video_codec="hevc_nvenc")

        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), [], "movie.mkv")

        assert "-c:v hevc_nvenc -pix_fmt yuv420p -tag:v hvc1 -cq 23 -preset p4" in plan.command

    def test_vp9_constant_quality(self, synthesizer, movie_descriptor):
        """Should use constant quality without a forced pixel format."""
        config = EncodingConfig(video_codec="libvpx-vp9", container_format="mkv", crf=30)

        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), [], "movie.mkv")

        assert "-c:v libvpx-vp9 -crf 30 -b:v 0" in plan.command
        assert "-pix_fmt" not in plan.command

    def test_video_copy_skips_filters(self, synthesizer, movie_descriptor, nas_config):
        """Should not filter or re-quantize a stream copy."""
        config = nas_config.model_copy(update={"video_codec": "copy"})

        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), [], "movie.mkv")

        assert "-c:v copy" in plan.command
        assert "-vf" not in plan.command
        assert "-pix_fmt" not in plan.command
        assert "-crf" not in plan.command

    def test_scale_filters(self, synthesizer, movie_descriptor):
        """Should cap height for the 720p/1080p modes and width for custom."""
        cases = {
            "720p": '-vf "scale=-2:min(720\\,ih)"',
            "1080p": '-vf "scale=-2:min(1080\\,ih)"',
        }
        for mode, expected in cases.items():
            plan = synthesizer.synthesize(
                movie_descriptor, EncodingConfig(scale_mode=mode), TrackSelection(), [], "movie.mkv"
            )
            assert expected in plan.command

        config = EncodingConfig(scale_mode="custom", custom_width=1280)
        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), [], "movie.mkv")
        assert '-vf "scale=min(1280\\,iw):-2"' in plan.command


class TestPaths:
    """Test path formatting."""

    def test_windows_working_directory(self, synthesizer, movie_descriptor, nas_config):
        """Should join with backslashes and trim trailing separators."""
        config = nas_config.model_copy(update={"working_directory": "D:\\Videos\\"})

        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), [], "movie.mkv")

        assert plan.command.startswith('ffmpeg -i "D:\\Videos\\movie.mkv"')
        assert plan.command.endswith('"D:\\Videos\\movie_compressed.mp4"')

    def test_posix_working_directory(self, synthesizer, movie_descriptor):
        """Should join with forward slashes."""
        config = EncodingConfig(working_directory="  /data/media// ")
        subs = [ExternalSubtitle(id="a", source_ref="movie.srt")]

        plan = synthesizer.synthesize(movie_descriptor, config, TrackSelection(), subs, "movie.mkv")

        assert '-i "/data/media/movie.mkv" -i "/data/media/movie.srt"' in plan.command
        assert plan.command.endswith('"/data/media/movie_compressed.mp4"')

    def test_source_with_dots_in_name(self, synthesizer, movie_descriptor, nas_config):
        """Should strip only the last extension."""
        plan = synthesizer.synthesize(movie_descriptor, nas_config, TrackSelection(), [], "Show.S01E01.1080p.mkv")

        assert plan.command.endswith('"Show.S01E01.1080p_compressed.mp4"')
