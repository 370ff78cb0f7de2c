import json

import pytest

from vibedit.errors import ClarificationFailed
from vibedit.interpreter import clarify, interpret
from vibedit.plan import NeedsClarification, Rejected, Understood
from vibedit.prompt import FALLBACK_ALTERNATIVES, FALLBACK_ERROR

from conftest import FakeClient, ScriptedAsk


def _seconds(ts):
    h, m, s = (float(p) for p in ts.split(":"))
    return h * 3600 + m * 60 + s


def test_prompt_embeds_request_and_video_info(make_ctx, info):
    client = FakeClient([json.dumps({"understood": True, "operation": "Grayscale", "ffmpeg": '-vf "eq=saturation=0"'})])
    interpret(make_ctx(client), "make file3.mp4 black and white", "file3.mp4", info, ScriptedAsk([]))
    prompt = client.prompts[0]
    assert 'USER REQUEST: "make file3.mp4 black and white"' in prompt
    assert "File: file3.mp4" in prompt
    assert "Duration: 30s" in prompt
    assert "Resolution: 1280x720" in prompt
    assert "IMPOSSIBLE" in prompt


@pytest.mark.parametrize(
    "raw",
    [
        "Sorry, I can't do that.",
        "{",
        json.dumps({"operation": "Trim", "ffmpeg": "-t 5"}),
        json.dumps({"understood": True, "operation": "Trim", "ffmpeg": "-t 5; reboot"}),
        "",
    ],
)
def test_bad_replies_become_canned_rejection(make_ctx, info, raw):
    plan = interpret(make_ctx(FakeClient([raw])), "do something", "file3.mp4", info, ScriptedAsk([]))
    assert plan == Rejected(error=FALLBACK_ERROR, alternatives=FALLBACK_ALTERNATIVES)
    assert plan.alternatives


def test_trim_between_timestamps(make_ctx, info):
    client = FakeClient([json.dumps({
        "understood": True,
        "operation": "Trim from 0:05 to 0:15",
        "ffmpeg": "-ss 00:00:05 -to 00:00:15",
        "output_ext": ".mp4",
        "questions": [],
    })])
    plan = interpret(make_ctx(client), "trim file3.mp4 between 0:05 and 0:15", "file3.mp4", info, ScriptedAsk([]))
    assert isinstance(plan, Understood)
    args = list(plan.args)
    start = _seconds(args[args.index("-ss") + 1])
    end = _seconds(args[args.index("-to") + 1])
    assert 0 <= start < end <= info.duration
    assert end - start == pytest.approx(10)


def test_purple_is_rejected(make_ctx, info):
    client = FakeClient([json.dumps({
        "understood": False,
        "error": "This operation is not available with FFmpeg",
        "alternatives": ["Try: black and white filter", "Try: speed up by 2x"],
    })])
    plan = interpret(make_ctx(client), "make file3.mp4 purple", "file3.mp4", info, ScriptedAsk([]))
    assert isinstance(plan, Rejected)
    assert "not available" in plan.error
    assert plan.alternatives == ("Try: black and white filter", "Try: speed up by 2x")


def test_any_format_needs_clarification(make_ctx, info):
    client = FakeClient([json.dumps({
        "understood": False,
        "questions": ["What format would you like? (MP4, AVI, WebM)"],
    })])
    plan = interpret(make_ctx(client), "convert file3.mp4 to any other format", "file3.mp4", info, ScriptedAsk([]))
    assert isinstance(plan, NeedsClarification)
    assert any("format" in q.lower() for q in plan.questions)


def test_clarify_asks_every_question_in_order_before_resubmitting(make_ctx, info):
    events = []
    client = FakeClient(
        [json.dumps({"understood": True, "operation": "Convert to WebM", "ffmpeg": "-c:v libvpx-vp9 -c:a libopus", "output_ext": ".webm"})],
        events=events,
    )
    ask = ScriptedAsk(["WebM", "yes", "720p"], events=events)
    questions = ("Which format?", "Keep the audio?", "Which resolution?")
    ctx = make_ctx(client)

    plan = clarify(ctx, NeedsClarification(questions=questions), "convert file3.mp4 to any other format", "file3.mp4", info, ask)

    assert [e for e in events] == [
        ("ask", "Which format?"),
        ("ask", "Keep the audio?"),
        ("ask", "Which resolution?"),
        ("llm", client.prompts[0]),
    ]
    assert 'Original request: "convert file3.mp4 to any other format"' in client.prompts[0]
    assert "Additional info provided: WebM, yes, 720p" in client.prompts[0]
    assert isinstance(plan, Understood)
    assert plan.output_extension == ".webm"


def test_clarify_unparseable_reply_fails(make_ctx, info):
    ctx = make_ctx(FakeClient(["no idea"]))
    with pytest.raises(ClarificationFailed):
        clarify(ctx, NeedsClarification(questions=("Which?",)), "convert it", "a.mp4", info, ScriptedAsk(["mp4"]))


def test_clarify_allows_only_one_round(make_ctx, info):
    ctx = make_ctx(FakeClient([json.dumps({"understood": False, "questions": ["And the bitrate?"]})]))
    with pytest.raises(ClarificationFailed):
        clarify(ctx, NeedsClarification(questions=("Which?",)), "convert it", "a.mp4", info, ScriptedAsk(["mp4"]))


def test_clarify_passes_through_rejection(make_ctx, info):
    ctx = make_ctx(FakeClient([json.dumps({"understood": False, "error": "Cannot do that"})]))
    plan = clarify(ctx, NeedsClarification(questions=("Which?",)), "convert it", "a.mp4", info, ScriptedAsk(["purple"]))
    assert isinstance(plan, Rejected)
    assert plan.alternatives == FALLBACK_ALTERNATIVES
