from __future__ import annotations

from pathlib import Path
from typing import Sequence
import logging
import shlex
import subprocess
import sys
import threading

from .errors import TranscodeError

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 20


def build_command(ffmpeg: str, input_file: str, args: Sequence[str], output_file: str) -> list[str]:
    return [ffmpeg, "-i", input_file, *args, "-y", output_file]


def format_command(argv: Sequence[str]) -> str:
    return shlex.join(argv)


def _dots(stop: threading.Event, tick: float, stream) -> None:
    while not stop.wait(tick):
        stream.write(".")
        stream.flush()


def _tail(text: str, n: int = STDERR_TAIL_LINES) -> str:
    lines = (text or "").strip().splitlines()
    return "\n".join(lines[-n:])


def run_transcode(argv: Sequence[str], output_file: str, tick: float = 1.0, stream=None) -> None:
    """Run one ffmpeg invocation, printing a dot per tick until it exits.

    On failure any file left at output_file is removed and TranscodeError
    is raised with the tail of ffmpeg's stderr.
    """
    stream = stream or sys.stdout
    stop = threading.Event()
    ticker = threading.Thread(target=_dots, args=(stop, tick, stream), daemon=True)

    logger.debug("Executing: %s", format_command(argv))
    try:
        with subprocess.Popen(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        ) as proc:
            ticker.start()
            _, stderr = proc.communicate()
            rc = proc.returncode
    except FileNotFoundError as e:
        raise TranscodeError("FFmpeg not found. Install from https://ffmpeg.org/") from e
    except OSError as e:
        raise TranscodeError(f"Could not run {argv[0]}: {e}") from e
    finally:
        stop.set()
        if ticker.ident is not None:
            ticker.join()
            stream.write("\n")
            stream.flush()

    if rc != 0:
        out = Path(output_file)
        if out.exists():
            logger.debug("Removing partial output %s", out)
            out.unlink()
        raise TranscodeError(
            f"FFmpeg Error: {_tail(stderr) or f'exited with status {rc}'}",
            returncode=rc,
            stderr=stderr or "",
        )
