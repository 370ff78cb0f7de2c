from __future__ import annotations

from typing import Callable
import logging

from . import ui
from .errors import ClarificationFailed, InterpreterParseError
from .llm import complete
from .media import VideoInfo
from .plan import EditPlan, NeedsClarification, Rejected, Understood, parse_plan
from .prompt import (
    FALLBACK_ALTERNATIVES,
    FALLBACK_ERROR,
    build_followup_prompt,
    build_interpret_prompt,
)

logger = logging.getLogger(__name__)


def interpret(ctx, request: str, video_file: str, info: VideoInfo, ask: Callable[[str], str]) -> EditPlan:
    """Ask the interpreter for an edit plan. Malformed replies become a canned rejection."""
    client = ctx.ensure_client(ask)
    ui.thinking("Understanding your request...")
    reply = complete(client, ctx.cfg.model, build_interpret_prompt(request, video_file, info), max_tokens=500)
    try:
        return parse_plan(reply, default_alternatives=FALLBACK_ALTERNATIVES)
    except InterpreterParseError as e:
        logger.debug("Falling back to rejection: %s", e)
        return Rejected(error=FALLBACK_ERROR, alternatives=FALLBACK_ALTERNATIVES)


def clarify(
    ctx,
    plan: NeedsClarification,
    request: str,
    video_file: str,
    info: VideoInfo,
    ask: Callable[[str], str],
) -> EditPlan:
    """Collect one answer per question, in order, then resubmit once.

    Only a single round is supported: another batch of questions, or a
    reply that does not parse, raises ClarificationFailed.
    """
    answers = [ask(q) for q in plan.questions]

    client = ctx.ensure_client(ask)
    ui.thinking("Processing your answers...")
    reply = complete(client, ctx.cfg.model, build_followup_prompt(request, answers, video_file, info), max_tokens=300)
    try:
        result = parse_plan(reply, default_alternatives=FALLBACK_ALTERNATIVES)
    except InterpreterParseError as e:
        raise ClarificationFailed("Could not process your request. Please try again.") from e

    if isinstance(result, (Understood, Rejected)):
        return result
    raise ClarificationFailed("Could not process your request. Please try again.")
