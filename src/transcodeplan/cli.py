"""Command-line interface for transcodeplan."""

import json
import subprocess
import sys
from pathlib import Path

import click

from transcodeplan import __version__
from transcodeplan.api.models import MediaDescriptorModel, PlanResponse
from transcodeplan.config import load_config
from transcodeplan.core.analyzer import MediaAnalyzer
from transcodeplan.core.codecs import AUDIO_ENCODERS, SPEED_PRESETS, VIDEO_ENCODERS, friendly_codec_name
from transcodeplan.core.presets import PRESETS, UnknownPresetError, get_preset
from transcodeplan.core.session import PlanSession
from transcodeplan.utils.formatting import format_duration, format_size
from transcodeplan.utils.logger import get_logger, setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """transcodeplan - build ffmpeg commands and size estimates for a media file."""
    try:
        cfg = load_config(config)
        if cfg.defaults.preset:
            get_preset(cfg.defaults.preset)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except UnknownPresetError as e:
        click.echo(f"Error loading configuration: unknown default preset {e.args[0]!r}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


def _new_session(config) -> PlanSession:
    """Session seeded from configuration defaults."""
    defaults = config.defaults
    session = PlanSession(
        config=defaults.encoding,
        default_subtitle_language=defaults.external_subtitle_language,
    )
    if defaults.preset:
        session.apply_preset(defaults.preset)
    return session


def _describe_media(descriptor) -> None:
    click.secho(f"Container: {descriptor.container_format}", bold=True)
    click.echo(f"  Duration: {format_duration(descriptor.duration_seconds)}")
    click.echo(f"  Size:     {format_size(descriptor.file_size_bytes)}")
    for i, video in enumerate(descriptor.video_tracks):
        click.echo(
            f"  Video #{i + 1}: {friendly_codec_name(video.codec_format)} "
            f"{video.width}x{video.height} {video.frame_rate_text}fps {video.bit_rate_text}"
        )
    for track in descriptor.audio_tracks:
        click.echo(f"  Audio {track} {track.details}")
    for track in descriptor.subtitle_tracks:
        click.echo(f"  Subtitle {track}")
    click.echo("")


@cli.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--descriptor",
    "-d",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Read the media description from a JSON file instead of running ffprobe",
)
@click.option("--preset", "-p", default=None, help="Preset to apply before other options")
@click.option("--container", type=click.Choice(["mp4", "mkv", "mov"]), default=None)
@click.option("--video-codec", type=click.Choice(VIDEO_ENCODERS), default=None)
@click.option("--audio-codec", type=click.Choice(AUDIO_ENCODERS), default=None)
@click.option("--crf", type=int, default=None, help="Constant quality factor (0-51)")
@click.option("--speed", type=click.Choice(SPEED_PRESETS), default=None, help="Encoder speed preset")
@click.option(
    "--scale",
    type=click.Choice(["original", "720p", "1080p", "custom"]),
    default=None,
    help="Resolution limit",
)
@click.option("--width", type=int, default=None, help="Width limit for --scale custom")
@click.option("--workdir", "-w", default=None, help="Working directory prefixed to every path")
@click.option("--audio", "-a", "audio", type=int, multiple=True, help="Audio track index to keep (repeatable)")
@click.option("--subtitle", "-s", "subtitles", type=int, multiple=True, help="Subtitle track index to keep (repeatable)")
@click.option("--no-subtitles", is_flag=True, help="Drop every embedded subtitle track")
@click.option("--external-sub", "-e", "external_subs", multiple=True, help="External subtitle file (repeatable)")
@click.option("--sub-language", default=None, help="Language for external subtitles")
@click.option("--json", "as_json", is_flag=True, help="Print machine-readable JSON")
@click.pass_context
def plan(
    ctx,
    file,
    descriptor,
    preset,
    container,
    video_codec,
    audio_codec,
    crf,
    speed,
    scale,
    width,
    workdir,
    audio,
    subtitles,
    no_subtitles,
    external_subs,
    sub_language,
    as_json,
):
    """Print the ffmpeg command for FILE.

    Args:
        file: Media file to transcode
    """
    config = ctx.obj["config"]
    logger = get_logger(__name__)

    try:
        if descriptor:
            media = MediaDescriptorModel.model_validate_json(descriptor.read_text()).to_descriptor()
        else:
            analyzer = MediaAnalyzer(config.analyzer.ffprobe_path, config.analyzer.timeout_seconds)
            media = analyzer.analyze(file)
    except FileNotFoundError as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)
    except (subprocess.SubprocessError, json.JSONDecodeError, ValueError) as e:
        logger.error("Media analysis failed", file=str(file), error=str(e))
        click.secho(f"✗ Could not analyze {file}: {e}", fg="red", err=True)
        sys.exit(1)

    session = _new_session(config)
    session.load_descriptor(media, file.name)

    try:
        if preset:
            session.apply_preset(preset)

        overrides = {
            "container_format": container,
            "video_codec": video_codec,
            "audio_codec": audio_codec,
            "crf": crf,
            "speed_preset": speed,
            "scale_mode": scale,
            "custom_width": width,
            "working_directory": workdir,
        }
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            session.update_config(**overrides)

        session.set_selection(
            audio=set(audio) if audio else None,
            subtitles=set() if no_subtitles else (set(subtitles) if subtitles else None),
        )
        for sub in external_subs:
            session.attach_subtitle(sub, language_code=sub_language)
    except UnknownPresetError:
        click.secho(f"✗ Unknown preset: {preset}", fg="red", err=True)
        sys.exit(1)
    except ValueError as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)

    result = session.result
    active = [p.id for p in session.active_presets()]

    if as_json:
        click.echo(PlanResponse.from_result(result, active).model_dump_json(indent=2))
        return

    _describe_media(media)
    click.echo(result.command)
    click.echo("")
    for warning in result.warnings:
        click.secho(f"⚠ {warning.reason}", fg="yellow")
    if result.estimate is not None:
        click.secho(f"Estimated size: ~{result.estimate}", fg="cyan")
    else:
        click.secho("Estimated size: unavailable", fg="cyan")
    if active:
        click.echo(f"Active preset: {', '.join(active)}")


@cli.command()
@click.pass_context
def presets(ctx):
    """List the built-in presets."""
    session = _new_session(ctx.obj["config"])
    for preset in PRESETS:
        marker = "*" if session.is_preset_active(preset) else " "
        snapshot = preset.snapshot
        click.secho(f"{marker} {preset.id:<9} {preset.title}", bold=True)
        click.echo(
            f"    {snapshot.container_format.value} {snapshot.video_codec} CRF {snapshot.crf} "
            f"{snapshot.speed_preset} audio={snapshot.audio_codec} scale={snapshot.scale_mode.value}"
        )
        click.echo(f"    {preset.description}")


@cli.command()
@click.pass_context
def serve(ctx):
    """Start the HTTP API."""
    config = ctx.obj["config"]

    click.echo(f"Listening on {config.api.host}:{config.api.port}")
    click.echo(f"  - Plan:         POST http://{config.api.host}:{config.api.port}/plan")
    click.echo(f"  - Analyze:      POST http://{config.api.host}:{config.api.port}/analyze")
    click.echo(f"  - Presets:      GET  http://{config.api.host}:{config.api.port}/presets")
    click.echo(f"  - Health check: GET  http://{config.api.host}:{config.api.port}/health")
    click.echo("")

    from transcodeplan.daemon import start_server

    start_server(config)


@cli.command()
@click.pass_context
def version(ctx):
    """Show version information."""
    click.echo(f"transcodeplan v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
