"""Plan session: owns the mutable planning state and recomputes on change."""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import uuid4

from transcodeplan.core.estimator import SizeEstimator
from transcodeplan.core.presets import apply_preset, get_preset, is_preset_active, Preset, PRESETS
from transcodeplan.core.scaling import target_dimensions
from transcodeplan.core.synthesizer import CommandSynthesizer
from transcodeplan.models.encoding import EncodingConfig, TrackSelection
from transcodeplan.models.media import MediaDescriptor
from transcodeplan.models.plan import PlanResult
from transcodeplan.models.track import ExternalSubtitle
from transcodeplan.utils.language import normalize_language_code
from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EXTERNAL_LANGUAGE = "chi"


@dataclass(frozen=True)
class PlanInputs:
    """Everything one recomputation reads, captured by value."""

    descriptor: Optional[MediaDescriptor]
    config: EncodingConfig
    selection: TrackSelection
    external_subtitles: tuple[ExternalSubtitle, ...] = ()
    source_name: Optional[str] = None


def recompute(
    inputs: PlanInputs,
    synthesizer: Optional[CommandSynthesizer] = None,
    estimator: Optional[SizeEstimator] = None,
) -> PlanResult:
    """Compute command, warnings and estimate from one consistent input set."""
    synthesizer = synthesizer or CommandSynthesizer()
    estimator = estimator or SizeEstimator()

    plan = synthesizer.synthesize(
        inputs.descriptor,
        inputs.config,
        inputs.selection,
        inputs.external_subtitles,
        inputs.source_name,
    )
    estimate = estimator.estimate(inputs.descriptor, inputs.config, inputs.selection)

    dimensions = None
    if inputs.descriptor is not None:
        dimensions = target_dimensions(*inputs.descriptor.source_dimensions, inputs.config)

    return PlanResult(
        command=plan.command,
        warnings=list(plan.warnings),
        estimate=estimate,
        target_dimensions=dimensions,
    )


class PlanSession:
    """Holds the descriptor, settings, selection and attached subtitles.

    Every public mutator finishes with a full recomputation, so ``result``
    always reflects the current state and stale warnings never survive a
    change.
    """

    def __init__(
        self,
        config: Optional[EncodingConfig] = None,
        default_subtitle_language: str = DEFAULT_EXTERNAL_LANGUAGE,
        synthesizer: Optional[CommandSynthesizer] = None,
        estimator: Optional[SizeEstimator] = None,
    ):
        """Initialize session.

        Args:
            config: Initial encoding settings (defaults to EncodingConfig())
            default_subtitle_language: Language given to newly attached subtitles
            synthesizer: Command synthesizer
            estimator: Size estimator
        """
        self.synthesizer = synthesizer or CommandSynthesizer()
        self.estimator = estimator or SizeEstimator()
        self.default_subtitle_language = normalize_language_code(default_subtitle_language)

        self._config = config if config is not None else EncodingConfig()
        self._descriptor: Optional[MediaDescriptor] = None
        self._source_name: Optional[str] = None
        self._selection = TrackSelection()
        self._external_subtitles: list[ExternalSubtitle] = []
        self._result = self.recompute()

    @property
    def config(self) -> EncodingConfig:
        return self._config.model_copy()

    @property
    def descriptor(self) -> Optional[MediaDescriptor]:
        return self._descriptor

    @property
    def source_name(self) -> Optional[str]:
        return self._source_name

    @property
    def selection(self) -> TrackSelection:
        return self._selection.copy()

    @property
    def external_subtitles(self) -> list[ExternalSubtitle]:
        return [ExternalSubtitle(s.id, s.source_ref, s.language_code, s.title) for s in self._external_subtitles]

    @property
    def result(self) -> PlanResult:
        return self._result

    def snapshot(self) -> PlanInputs:
        """Copy of the current inputs."""
        return PlanInputs(
            descriptor=self._descriptor,
            config=self.config,
            selection=self.selection,
            external_subtitles=tuple(self.external_subtitles),
            source_name=self._source_name,
        )

    def recompute(self) -> PlanResult:
        """Recompute the plan from the current state."""
        self._result = recompute(self.snapshot(), self.synthesizer, self.estimator)
        logger.debug(
            "Plan recomputed",
            source=self._source_name,
            warnings=len(self._result.warnings),
            estimate=self._result.estimate_text,
        )
        return self._result

    # Descriptor

    def load_descriptor(self, descriptor: MediaDescriptor, source_name: Optional[str] = None) -> PlanResult:
        """Switch to a newly analyzed file and select all of its tracks."""
        self._descriptor = descriptor
        self._source_name = source_name
        self._selection = TrackSelection.select_all(descriptor)
        logger.info(
            "Media loaded",
            source=source_name,
            audio_tracks=len(descriptor.audio_tracks),
            subtitle_tracks=len(descriptor.subtitle_tracks),
            duration_seconds=descriptor.duration_seconds,
        )
        return self.recompute()

    def clear_descriptor(self) -> PlanResult:
        """Forget the current file, e.g. while a new analysis runs."""
        self._descriptor = None
        self._source_name = None
        self._selection = TrackSelection()
        return self.recompute()

    # Encoding settings

    def update_config(self, **changes: Any) -> PlanResult:
        """Change one or more encoding fields at once.

        Values are clamped or defaulted by EncodingConfig.

        Raises:
            ValueError: If a field name is unknown
        """
        unknown = set(changes) - set(EncodingConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown encoding fields: {', '.join(sorted(unknown))}")
        self._config = EncodingConfig.model_validate({**self._config.model_dump(), **changes})
        return self.recompute()

    def set_working_directory(self, directory: str) -> PlanResult:
        return self.update_config(working_directory=directory)

    def apply_preset(self, preset_id: str) -> PlanResult:
        """Apply a catalog preset.

        Raises:
            UnknownPresetError: If the preset id is unknown
        """
        preset = get_preset(preset_id)
        self._config = apply_preset(preset, self._config)
        logger.info("Preset applied", preset=preset.id)
        return self.recompute()

    def is_preset_active(self, preset: Preset | str) -> bool:
        if isinstance(preset, str):
            preset = get_preset(preset)
        return is_preset_active(preset, self._config)

    def active_presets(self) -> list[Preset]:
        return [p for p in PRESETS if is_preset_active(p, self._config)]

    # Track selection

    def _check_index(self, index: int, count: int, kind: str) -> None:
        if not 0 <= index < count:
            raise ValueError(f"{kind} track index {index} out of range (0-{count - 1})")

    def toggle_audio(self, index: int) -> PlanResult:
        """Select or deselect an embedded audio track."""
        count = len(self._descriptor.audio_tracks) if self._descriptor else 0
        self._check_index(index, count, "Audio")
        self._selection.selected_audio ^= {index}
        return self.recompute()

    def toggle_subtitle(self, index: int) -> PlanResult:
        """Select or deselect an embedded subtitle track."""
        count = len(self._descriptor.subtitle_tracks) if self._descriptor else 0
        self._check_index(index, count, "Subtitle")
        self._selection.selected_subtitle ^= {index}
        return self.recompute()

    def set_selection(
        self, audio: Optional[set[int]] = None, subtitles: Optional[set[int]] = None
    ) -> PlanResult:
        """Replace the audio and/or subtitle selection."""
        descriptor = self._descriptor
        audio_count = len(descriptor.audio_tracks) if descriptor else 0
        subtitle_count = len(descriptor.subtitle_tracks) if descriptor else 0
        for index in audio or ():
            self._check_index(index, audio_count, "Audio")
        for index in subtitles or ():
            self._check_index(index, subtitle_count, "Subtitle")

        if audio is not None:
            self._selection.selected_audio = set(audio)
        if subtitles is not None:
            self._selection.selected_subtitle = set(subtitles)
        return self.recompute()

    # External subtitles

    def attach_subtitle(
        self, source_ref: str, language_code: Optional[str] = None, title: Optional[str] = None
    ) -> ExternalSubtitle:
        """Attach a subtitle file; it is added after existing attachments."""
        subtitle = ExternalSubtitle(
            id=uuid4().hex[:9],
            source_ref=source_ref,
            language_code=normalize_language_code(language_code) if language_code else self.default_subtitle_language,
            title=title,
        )
        self._external_subtitles.append(subtitle)
        logger.info("External subtitle attached", subtitle_id=subtitle.id, source=source_ref)
        self.recompute()
        return subtitle

    def _find_external(self, subtitle_id: str) -> ExternalSubtitle:
        for subtitle in self._external_subtitles:
            if subtitle.id == subtitle_id:
                return subtitle
        raise ValueError(f"Unknown external subtitle: {subtitle_id}")

    def update_external_subtitle(
        self, subtitle_id: str, language_code: Optional[str] = None, title: Optional[str] = None
    ) -> PlanResult:
        """Edit language and/or title of an attached subtitle in place."""
        subtitle = self._find_external(subtitle_id)
        if language_code is not None:
            subtitle.language_code = normalize_language_code(language_code.strip()) or "und"
        if title is not None:
            subtitle.title = title
        return self.recompute()

    def remove_external_subtitle(self, subtitle_id: str) -> PlanResult:
        """Detach a subtitle; later attachments keep their relative order."""
        subtitle = self._find_external(subtitle_id)
        self._external_subtitles.remove(subtitle)
        logger.info("External subtitle removed", subtitle_id=subtitle_id)
        return self.recompute()
