from types import SimpleNamespace

import pytest
from prompt_toolkit.formatted_text import to_plain_text

from vibedit import ui
from vibedit.config import AppConfig
from vibedit.media import VideoInfo
from vibedit.session import SessionContext


class FakeClient:
    """Stands in for openai.OpenAI; replies are consumed in order."""

    def __init__(self, replies, events=None):
        self.replies = list(replies)
        self.prompts = []
        self.events = events if events is not None else []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, model, messages, temperature, max_tokens):
        self.prompts.append(messages[0]["content"])
        self.events.append(("llm", messages[0]["content"]))
        content = self.replies.pop(0)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class ScriptedAsk:
    """Answers prompts from a list; EOF once the script runs out."""

    def __init__(self, answers, events=None):
        self.answers = list(answers)
        self.questions = []
        self.events = events if events is not None else []

    def __call__(self, question):
        self.questions.append(question)
        self.events.append(("ask", question))
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


@pytest.fixture(autouse=True)
def output(monkeypatch):
    lines = []
    monkeypatch.setattr(ui, "_emit", lambda text: lines.append(to_plain_text(text)))
    return lines


@pytest.fixture
def make_cfg(tmp_path):
    def _make(**overrides):
        values = dict(
            model="test-model",
            base_url="https://example.invalid/v1",
            api_key="gsk_test_key_123456",
            config_path=tmp_path / "vibedit-config.json",
            legacy_path=tmp_path / "vibedit-legacy",
            ffmpeg="ffmpeg",
            ffprobe="ffprobe",
            copy=False,
            dry_run=False,
            preload_request=None,
        )
        values.update(overrides)
        return AppConfig(**values)
    return _make


@pytest.fixture
def make_ctx(make_cfg):
    def _make(client, **overrides):
        return SessionContext(make_cfg(**overrides), client_factory=lambda cfg, key: client)
    return _make


@pytest.fixture
def info():
    return VideoInfo(duration=30.0, width=1280, height=720, codec="h264", fps=30.0, audio_streams=1, format_name="mov,mp4,m4a,3gp,3g2,mj2")
