from __future__ import annotations

from typing import Optional


class VibeditError(Exception):
    """Base for failures that end a single request and are shown to the user."""


class FileNotFound(VibeditError):
    pass


class ProbeError(VibeditError):
    pass


class InterpreterParseError(VibeditError):
    """The interpreter reply was not a valid edit plan."""


class ClarificationFailed(VibeditError):
    pass


class TranscodeError(VibeditError):
    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class InvalidApiKey(VibeditError):
    pass
