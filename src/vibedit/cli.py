import argparse
import logging
import sys

from . import __version__, ui
from .config import DEFAULT_BASE_URL, DEFAULT_MODEL, resolve_config
from .repl import repl
from .session import SessionContext

EPILOG = """Examples:
  "Convert my video to MP4 format"
  "Speed up vacation.mov by 3x"
  "Extract 45 seconds starting from 2:30"

Type "help" inside the session for more, "reset api key" to change your key.
"""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vibedit",
        description="AI-powered video editor: describe an edit, vibedit runs ffmpeg for you.",
        epilog=EPILOG,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    # Positional request: run once, then drop into the session loop
    p.add_argument(
        "request",
        nargs="?",
        default=None,
        help="Optional first request. Runs once, then continues interactively.",
    )

    p.add_argument(
        "--model",
        type=str,
        default=None,
        help=f"Model to use. Defaults VIBEDIT_MODEL then '{DEFAULT_MODEL}'.",
    )
    p.add_argument(
        "--url",
        type=str,
        default=None,
        help=f"Base URL for an OpenAI-compatible API. Defaults VIBEDIT_LLM_API_URL then {DEFAULT_BASE_URL}",
    )
    p.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Groq API key for this run only. Defaults VIBEDIT_GROQ_API_KEY, GROQ_API_KEY, then the saved key.",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Credential file. Defaults VIBEDIT_CONFIG then ~/.vibedit-config.json",
    )
    p.add_argument(
        "-c", "--copy",
        action="store_true",
        help="Copy each generated ffmpeg command to the clipboard.",
    )
    p.add_argument(
        "-n", "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Show the generated ffmpeg command without running it.",
    )
    p.add_argument("--debug", action="store_true", help="Log diagnostic detail to stderr.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cfg = resolve_config(args)
    ctx = SessionContext(cfg)

    try:
        rc = repl(ctx)
    except Exception as e:
        logging.getLogger(__name__).debug("Fatal error", exc_info=True)
        ui.error(f"Fatal error: {e}")
        rc = 1
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
