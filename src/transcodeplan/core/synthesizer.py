"""ffmpeg command synthesis."""

from typing import Optional, Sequence

from transcodeplan.core import codecs
from transcodeplan.core.scaling import scale_filter
from transcodeplan.core.validator import SubtitleValidator
from transcodeplan.models.encoding import EncodingConfig, TrackSelection
from transcodeplan.models.media import MediaDescriptor
from transcodeplan.models.plan import CommandPlan, PlanWarning
from transcodeplan.models.track import ExternalSubtitle
from transcodeplan.utils import paths
from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)


class CommandSynthesizer:
    """Build a single-line ffmpeg invocation from a descriptor and settings.

    Argument order matters: output stream indices are positional, so inputs,
    maps and per-stream metadata are emitted in a fixed sequence.
    """

    def __init__(self, validator: Optional[SubtitleValidator] = None, binary: str = "ffmpeg"):
        """Initialize synthesizer.

        Args:
            validator: Subtitle validator (defaults to a new SubtitleValidator)
            binary: Program name written at the start of the command
        """
        self.validator = validator or SubtitleValidator()
        self.binary = binary

    def synthesize(
        self,
        descriptor: Optional[MediaDescriptor],
        config: EncodingConfig,
        selection: TrackSelection,
        external_subtitles: Sequence[ExternalSubtitle] = (),
        source_name: Optional[str] = None,
    ) -> CommandPlan:
        """Build the command and collect warnings for dropped tracks.

        Args:
            descriptor: Probed media, or None before analysis completes
            config: Encoding settings
            selection: Embedded tracks to keep
            external_subtitles: Attached subtitle files in attachment order
            source_name: File name of the primary input

        Returns:
            CommandPlan with the command text and warnings
        """
        directory = paths.clean_directory(config.working_directory)
        container = config.container_format
        warnings: list[PlanWarning] = []

        # Inputs: primary file first, then one per external subtitle
        cmd = [self.binary, "-i", paths.quote_path(directory, source_name or paths.DEFAULT_SOURCE_NAME)]
        for sub in external_subtitles:
            cmd.extend(["-i", paths.quote_path(directory, sub.source_ref)])

        cmd.extend(["-map", "0:v:0"])

        if config.audio_codec != codecs.NO_AUDIO:
            for index in selection.audio_indices:
                cmd.extend(["-map", f"0:a:{index}"])

        output_subtitle_index = 0
        for index in selection.subtitle_indices:
            track = descriptor.subtitle(index) if descriptor else None
            if track is not None:
                check = self.validator.check(track, container)
                if not check.admissible:
                    warnings.append(check.warning)
                    continue
            cmd.extend(["-map", f"0:s:{index}"])
            output_subtitle_index += 1

        for input_index, sub in enumerate(external_subtitles, 1):
            cmd.extend(["-map", f"{input_index}:0"])
            language = paths.quote_if_needed(sub.language_code)
            cmd.extend([f"-metadata:s:s:{output_subtitle_index}", f"language={language}"])
            cmd.extend([f"-metadata:s:s:{output_subtitle_index}", f"title={paths.quote(sub.title or '')}"])
            output_subtitle_index += 1

        cmd.extend(self._video_flags(config))

        filter_expression = scale_filter(config)
        if filter_expression:
            cmd.extend(["-vf", paths.quote(filter_expression)])

        cmd.extend(self._audio_flags(config))

        if output_subtitle_index > 0:
            cmd.extend(["-c:s", "mov_text" if container.is_mp4_family else "copy"])

        if container.is_mp4_family:
            cmd.extend(["-movflags", "+faststart"])

        output_name = paths.output_file_name(source_name, container.extension)
        cmd.append(paths.quote_path(directory, output_name))

        command = " ".join(cmd)
        logger.debug(
            "Command synthesized",
            container=container.value,
            video_codec=config.video_codec,
            audio_maps=0 if config.audio_codec == codecs.NO_AUDIO else len(selection.selected_audio),
            subtitle_maps=output_subtitle_index,
            warnings=len(warnings),
        )
        return CommandPlan(command=command, warnings=warnings)

    def _video_flags(self, config: EncodingConfig) -> list[str]:
        """Encoder, pixel format, compatibility tag and quality flags."""
        encoder = config.video_codec
        flags = ["-c:v", encoder]

        if codecs.is_stream_copy(encoder):
            return flags

        if codecs.needs_playback_pixel_format(encoder):
            flags.extend(["-pix_fmt", codecs.PLAYBACK_PIXEL_FORMAT])

        if codecs.is_efficient_encoder(encoder) and config.container_format.is_mp4_family:
            flags.extend(["-tag:v", codecs.HEVC_COMPAT_TAG])

        if encoder in codecs.SOFTWARE_CRF_ENCODERS:
            flags.extend(["-crf", str(config.crf), "-preset", config.speed_preset or "medium"])
        elif codecs.is_hardware_encoder(encoder):
            flags.extend(["-cq", str(config.crf), "-preset", codecs.HARDWARE_SPEED_PRESET])
        elif encoder in codecs.VP9_ENCODERS:
            flags.extend(["-crf", str(config.crf), "-b:v", "0"])

        return flags

    def _audio_flags(self, config: EncodingConfig) -> list[str]:
        encoder = config.audio_codec
        if encoder == codecs.NO_AUDIO:
            return []
        if codecs.is_stream_copy(encoder):
            return ["-c:a", "copy"]
        return ["-c:a", encoder, "-b:a", f"{codecs.audio_bitrate_kbps(encoder)}k"]
