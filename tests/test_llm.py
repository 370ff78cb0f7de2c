import pytest

from vibedit.llm import complete, strip_reply

from conftest import FakeClient


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"understood": true}', '{"understood": true}'),
        ('```json\n{"understood": true}\n```', '{"understood": true}'),
        ('```\n{"understood": false}\n```', '{"understood": false}'),
        ('assistant: {"a": 1}', '{"a": 1}'),
        ("`{}`", "{}"),
        ("", ""),
    ],
)
def test_strip_reply(raw, expected):
    assert strip_reply(raw) == expected


def test_complete_sends_single_user_message():
    seen = {}
    client = FakeClient(["  ```json\n{}\n```  "])

    def create(model, messages, temperature, max_tokens):
        seen.update(model=model, messages=messages, temperature=temperature, max_tokens=max_tokens)
        return FakeClient._create(client, model, messages, temperature, max_tokens)

    client.chat.completions.create = create
    assert complete(client, "llama-3.1-8b-instant", "hello", max_tokens=300) == "{}"
    assert seen == {
        "model": "llama-3.1-8b-instant",
        "messages": [{"role": "user", "content": "hello"}],
        "temperature": 0.1,
        "max_tokens": 300,
    }
