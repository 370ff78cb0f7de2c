from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import subprocess

from .errors import ProbeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoInfo:
    duration: float = 0.0
    width: int = 0
    height: int = 0
    codec: str = "unknown"
    fps: float = 0.0
    audio_streams: int = 0
    format_name: str = "unknown"


def parse_frame_rate(value) -> float:
    """Parse an ffprobe rate such as "30000/1001" or "25". Bad input yields 0.0."""
    if value is None:
        return 0.0
    text = str(value).strip()
    if not text:
        return 0.0
    try:
        if "/" in text:
            num, den = text.split("/", 1)
            den_f = float(den)
            if den_f == 0:
                return 0.0
            return float(num) / den_f
        return float(text)
    except ValueError:
        return 0.0


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_probe_output(text: str) -> VideoInfo:
    """Build a VideoInfo from ffprobe's JSON. Missing fields default to zero/"unknown"."""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ProbeError("Invalid video file") from e
    if not isinstance(data, dict):
        raise ProbeError("Invalid video file")

    streams = data.get("streams") or []
    if not isinstance(streams, list):
        streams = []
    fmt = data.get("format") or {}
    if not isinstance(fmt, dict):
        fmt = {}

    video = next((s for s in streams if isinstance(s, dict) and s.get("codec_type") == "video"), {})
    audio = [s for s in streams if isinstance(s, dict) and s.get("codec_type") == "audio"]

    return VideoInfo(
        duration=_to_float(fmt.get("duration")),
        width=_to_int(video.get("width")),
        height=_to_int(video.get("height")),
        codec=str(video.get("codec_name") or "unknown"),
        fps=parse_frame_rate(video.get("r_frame_rate")),
        audio_streams=len(audio),
        format_name=str(fmt.get("format_name") or "unknown"),
    )


def probe_video(path: str, ffprobe: str = "ffprobe") -> VideoInfo:
    cmd = [
        ffprobe,
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        path,
    ]
    logger.debug("Probing: %s", cmd)
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8", errors="replace")
    except FileNotFoundError as e:
        raise ProbeError("FFmpeg not found. Install from https://ffmpeg.org/") from e
    except OSError as e:
        raise ProbeError(f"Could not run {ffprobe}: {e}") from e
    if proc.returncode != 0:
        logger.debug("ffprobe exited %s: %s", proc.returncode, proc.stderr)
        raise ProbeError("Invalid video file")
    return parse_probe_output(proc.stdout)
