from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
import json
import re
import shlex

from .errors import InterpreterParseError


@dataclass(frozen=True)
class Understood:
    operation: str
    command_fragment: str
    output_extension: Optional[str]
    args: tuple[str, ...]


@dataclass(frozen=True)
class NeedsClarification:
    questions: tuple[str, ...]


@dataclass(frozen=True)
class Rejected:
    error: str
    alternatives: tuple[str, ...]


EditPlan = Union[Understood, NeedsClarification, Rejected]

# Never passed to a shell, but an interpreter that emits these is not
# producing a plain ffmpeg argument fragment.
_FORBIDDEN_CHARS = set("`$|&<>\n\r\x00")
_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def split_fragment(fragment: str) -> tuple[str, ...]:
    """Tokenize an ffmpeg argument fragment into an argument vector."""
    bad = sorted(c for c in set(fragment) if c in _FORBIDDEN_CHARS)
    if bad:
        raise InterpreterParseError(f"Command fragment contains disallowed characters: {bad!r}")
    try:
        tokens = shlex.split(fragment, posix=True)
    except ValueError as e:
        raise InterpreterParseError(f"Unparseable command fragment: {e}") from e

    if tokens and tokens[0].lower() == "ffmpeg":
        tokens = tokens[1:]
    if "-i" in tokens:
        raise InterpreterParseError("Command fragment must not add inputs")
    tokens = [t for t in tokens if t != "-y"]
    if not tokens:
        raise InterpreterParseError("Empty command fragment")

    # every bare value must belong to the option before it; a stray one
    # would be taken by ffmpeg as an extra output file
    prev = None
    for t in tokens:
        if not _is_option(t) and (prev is None or not _is_option(prev)):
            raise InterpreterParseError(f"Unexpected argument in command fragment: {t!r}")
        prev = t
    return tuple(tokens)


def _is_option(token: str) -> bool:
    return len(token) > 1 and token.startswith("-") and not token[1].isdigit()


def extract_json(text: str) -> str:
    """Strip markdown fences / surrounding prose and return the JSON object text."""
    text = (text or "").strip()
    m = _FENCE_RE.search(text)
    if m:
        text = m.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise InterpreterParseError("No JSON object in reply")
    return text[start:end + 1]


def _string_list(value, field: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InterpreterParseError(f"'{field}' must be a list of strings")
    return tuple(v.strip() for v in value if v.strip())


def _nonempty_str(data: dict, field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InterpreterParseError(f"'{field}' must be a non-empty string")
    return value.strip()


def parse_plan(text: str, default_alternatives: tuple[str, ...] = ()) -> EditPlan:
    """Parse an interpreter reply into exactly one EditPlan variant.

    Raises InterpreterParseError on malformed JSON, a missing 'understood'
    flag, missing required fields, or more than one variant populated.
    """
    try:
        data = json.loads(extract_json(text))
    except ValueError as e:
        raise InterpreterParseError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InterpreterParseError("Reply is not a JSON object")

    understood = data.get("understood")
    if not isinstance(understood, bool):
        raise InterpreterParseError("'understood' must be true or false")

    questions = _string_list(data.get("questions"), "questions")
    error = data.get("error")
    has_error = isinstance(error, str) and bool(error.strip())
    if error is not None and not isinstance(error, str):
        raise InterpreterParseError("'error' must be a string")

    if understood:
        if questions or has_error:
            raise InterpreterParseError("Understood reply also carries questions or an error")
        fragment = _nonempty_str(data, "ffmpeg")
        ext = data.get("output_ext")
        return Understood(
            operation=_nonempty_str(data, "operation"),
            command_fragment=fragment,
            output_extension=ext if isinstance(ext, str) and ext.strip() else None,
            args=split_fragment(fragment),
        )

    if questions and has_error:
        raise InterpreterParseError("Reply both asks questions and rejects the request")
    if questions:
        return NeedsClarification(questions=questions)
    if has_error:
        alternatives = _string_list(data.get("alternatives"), "alternatives")
        return Rejected(error=error.strip(), alternatives=alternatives or default_alternatives)
    raise InterpreterParseError("Reply is neither understood, a question nor a rejection")
