from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional
import logging

import pyperclip
from openai import OpenAIError
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory

from . import ui
from .errors import VibeditError
from .ffmpeg import build_command, format_command, run_transcode
from .files import choose_extension, generate_output_name, resolve_video_file
from .interpreter import clarify, interpret
from .media import probe_video
from .plan import NeedsClarification, Rejected
from .session import SessionContext

logger = logging.getLogger(__name__)

CMD_HISTFILE = Path.home() / ".vibedit_history"

EXIT_WORDS = ("quit", "exit", "bye", "done", "stop")
RESET_PHRASES = ("reset api key", "change api key")

Ask = Callable[[str], str]


def is_exit(line: str) -> bool:
    low = line.strip().lower()
    return not low or any(w in low for w in EXIT_WORDS)


def is_help(line: str) -> bool:
    return "help" in line.lower()


def is_reset(line: str) -> bool:
    low = line.lower()
    return any(p in low for p in RESET_PHRASES)


def make_ask(session: PromptSession) -> Ask:
    def ask(question: str) -> str:
        ui.question(question)
        return session.prompt([("class:prompt", "> ")], style=ui.vibe_style).strip()
    return ask


def handle_request(ctx: SessionContext, line: str, ask: Ask) -> Optional[str]:
    """Run one edit request end to end. Returns the saved output path, or None."""
    video_file = resolve_video_file(line, ask)
    info = probe_video(video_file, ctx.cfg.ffprobe)
    logger.debug("Probed %s: %s", video_file, info)

    plan = interpret(ctx, line, video_file, info, ask)
    if isinstance(plan, NeedsClarification):
        plan = clarify(ctx, plan, line, video_file, info, ask)

    if isinstance(plan, Rejected):
        ui.error(plan.error)
        if plan.alternatives:
            ui.hint("\n💡 Try these instead:")
            for alt in plan.alternatives:
                ui.info(f"   {alt}")
        return None

    ext = choose_extension(plan.output_extension, plan.operation)
    output_file = generate_output_name(video_file, ext)
    argv = build_command(ctx.cfg.ffmpeg, video_file, plan.args, output_file)
    cmdline = format_command(argv)
    ui.show_command(cmdline)

    if ctx.cfg.copy:
        try:
            pyperclip.copy(cmdline)
            ui.info("Command copied to clipboard.")
        except pyperclip.PyperclipException as e:
            ui.hint(f"Could not copy to clipboard: {e}")

    if ctx.cfg.dry_run:
        ui.info("Dry run: command not executed.")
        return None

    ui.processing(plan.operation)
    ui.processing("Processing your video...")
    run_transcode(argv, output_file)
    ui.success("Video processed successfully!")
    ui.success(f"🚀 Done! Saved as: {output_file}")
    return output_file


def repl(ctx: SessionContext, ask: Optional[Ask] = None) -> int:
    """Run the conversation loop. Returns the process exit status."""
    if ask is None:
        session = PromptSession(
            history=FileHistory(str(CMD_HISTFILE)),
            auto_suggest=AutoSuggestFromHistory(),
        )
        ask = make_ask(session)

    ui.banner()
    pending = ctx.cfg.preload_request
    ready = False

    while True:
        try:
            # later resets are picked up lazily by the next interpretation
            if not ready:
                ctx.ensure_client(ask)
                ready = True
            if pending:
                line, pending = pending, None
            else:
                line = ask("What would you like to do with your video?")

            if is_exit(line):
                ui.info("✨ Thanks for using Vibedit! Happy editing!")
                return 0
            if is_help(line):
                ui.show_examples()
                continue
            if is_reset(line):
                ctx.reset_api_key()
                continue

            handle_request(ctx, line, ask)
            ui.info("")
        except (EOFError, KeyboardInterrupt):
            ui.info("\nExiting vibedit.")
            return 0
        except (VibeditError, OpenAIError) as e:
            ui.error(str(e))
            try:
                retry = ask("Want to try something else? (yes/no)")
            except (EOFError, KeyboardInterrupt):
                return 1
            if not retry.lower().startswith("y"):
                return 1
