from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
import logging
import os
import re
import secrets

from . import ui
from .errors import FileNotFound

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS: tuple[str, ...] = ("mp4", "avi", "mov", "mkv", "webm", "flv", "m4v")
MAX_NAME_ATTEMPTS = 1000

_VIDEO_TOKEN_RE = re.compile(
    r"\S+\.(?:%s)\b" % "|".join(VIDEO_EXTENSIONS),
    re.IGNORECASE,
)
_EXT_RE = re.compile(r"^\.[a-z0-9]{1,5}$")

# Checked in order; first keyword found in the operation text wins.
_KEYWORD_EXTENSIONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("mp3", "audio"), ".mp3"),
    (("avi",), ".avi"),
    (("mkv",), ".mkv"),
    (("webm",), ".webm"),
    (("mov",), ".mov"),
    (("wav",), ".wav"),
    (("gif",), ".gif"),
)
DEFAULT_EXTENSION = ".mp4"


def find_video_token(text: str) -> Optional[str]:
    """Return the first filename-looking token with a known video extension."""
    m = _VIDEO_TOKEN_RE.search(text or "")
    if not m:
        return None
    return m.group(0).strip("\"'")


def resolve_video_file(text: str, ask: Callable[[str], str]) -> str:
    token = find_video_token(text)
    if token and os.path.isfile(token):
        return token

    path = ask("What video file should I work with?").strip().strip("\"'")
    if not path or not os.path.isfile(path):
        raise FileNotFound(f"Video file not found: {path}")
    size_mb = os.path.getsize(path) / (1024 * 1024)
    ui.success(f"Found {os.path.basename(path)} ({size_mb:.1f}MB)")
    return path


def suggest_extension(operation: str) -> str:
    op = (operation or "").lower()
    for keywords, ext in _KEYWORD_EXTENSIONS:
        if any(k in op for k in keywords):
            return ext
    return DEFAULT_EXTENSION


def normalize_extension(ext: Optional[str]) -> Optional[str]:
    if not ext:
        return None
    ext = ext.strip().lower()
    if not ext.startswith("."):
        ext = "." + ext
    return ext if _EXT_RE.match(ext) else None


def choose_extension(declared: Optional[str], operation: str) -> str:
    """Interpreter-declared extension wins; keyword inference is the fallback."""
    return normalize_extension(declared) or suggest_extension(operation)


def generate_output_name(
    input_file: str,
    ext: str,
    directory: Path | None = None,
    max_attempts: int = MAX_NAME_ATTEMPTS,
) -> str:
    """Pick a path that does not exist yet: <base>_edited, then <base>_edited_<n>."""
    directory = Path(directory) if directory is not None else Path(".")
    base = Path(input_file).stem

    candidate = directory / f"{base}_edited{ext}"
    counter = 1
    while candidate.exists():
        if counter > max_attempts:
            stamp = datetime.now().strftime("%Y%m%d%H%M%S")
            candidate = directory / f"{base}_edited_{stamp}{ext}"
            while candidate.exists():
                candidate = directory / f"{base}_edited_{stamp}_{secrets.token_hex(3)}{ext}"
            logger.debug("Collision probe exhausted, using %s", candidate)
            break
        candidate = directory / f"{base}_edited_{counter}{ext}"
        counter += 1
    return str(candidate)
