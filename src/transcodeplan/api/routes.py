"""API routes for media analysis, presets and plan synthesis."""

import json
import subprocess
import time
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request

from transcodeplan import __version__
from transcodeplan.api.models import (
    AnalyzeRequest,
    HealthResponse,
    MediaDescriptorModel,
    PlanRequest,
    PlanResponse,
    PresetListResponse,
    PresetModel,
)
from transcodeplan.core.analyzer import AnalysisSuperseded
from transcodeplan.core.presets import (
    CATALOG_VERSION,
    PRESETS,
    UnknownPresetError,
    apply_preset,
    get_preset,
    is_preset_active,
)
from transcodeplan.core.session import PlanInputs, recompute
from transcodeplan.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """Report liveness and version."""
    start_time = request.app.state.transcodeplan.start_time
    return HealthResponse(version=__version__, uptime_seconds=round(time.time() - start_time, 2))


@router.post("/analyze", response_model=MediaDescriptorModel)
async def analyze_media(payload: AnalyzeRequest, request: Request):
    """Probe a media file with ffprobe.

    Only the newest request gets a descriptor back; an analysis overtaken by
    a later one answers 409.
    """
    file_path = Path(payload.path)
    analysis = request.app.state.transcodeplan.analysis

    try:
        descriptor = await analysis.analyze(file_path)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AnalysisSuperseded as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (subprocess.SubprocessError, json.JSONDecodeError) as e:
        raise HTTPException(status_code=422, detail=f"Could not analyze {file_path}: {e}")

    return MediaDescriptorModel.from_descriptor(descriptor)


@router.get("/presets", response_model=PresetListResponse)
async def list_presets():
    """List the preset catalog in display order."""
    return PresetListResponse(version=CATALOG_VERSION, presets=[PresetModel.from_preset(p) for p in PRESETS])


@router.get("/presets/{preset_id}", response_model=PresetModel)
async def read_preset(preset_id: str):
    """Return one preset."""
    try:
        return PresetModel.from_preset(get_preset(preset_id))
    except UnknownPresetError:
        raise HTTPException(status_code=404, detail=f"Unknown preset: {preset_id}")


@router.post("/plan", response_model=PlanResponse)
async def create_plan(payload: PlanRequest):
    """Synthesize a command, warnings and size estimate.

    The request carries the whole state, so repeated identical requests
    produce identical responses.
    """
    config = payload.config
    if payload.preset:
        try:
            config = apply_preset(get_preset(payload.preset), config)
        except UnknownPresetError:
            raise HTTPException(status_code=404, detail=f"Unknown preset: {payload.preset}")

    descriptor = payload.descriptor.to_descriptor() if payload.descriptor else None

    try:
        selection = payload.to_selection(descriptor)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = recompute(
        PlanInputs(
            descriptor=descriptor,
            config=config,
            selection=selection,
            external_subtitles=payload.to_external_subtitles(),
            source_name=payload.source_name,
        )
    )

    logger.info(
        "Plan created",
        source=payload.source_name,
        preset=payload.preset,
        warnings=len(result.warnings),
        estimate=result.estimate_text,
    )

    return PlanResponse.from_result(result, [p.id for p in PRESETS if is_preset_active(p, config)])
