from __future__ import annotations

import logging

from openai import OpenAI

from .config import AppConfig

logger = logging.getLogger(__name__)


def build_client(cfg: AppConfig, api_key: str) -> OpenAI:
    """Build an OpenAI-compatible client for the configured endpoint (Groq by default)."""
    return OpenAI(base_url=cfg.base_url, api_key=api_key)


def strip_reply(raw: str) -> str:
    """Drop markdown fences and chatty prefixes the model sometimes adds."""
    text = (raw or "").strip()

    # strip fenced blocks if present
    if "```" in text:
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1].strip()
            if text.lower().startswith("json"):
                text = text[len("json"):].strip()

    if text.lower().startswith("assistant:"):
        text = text[len("assistant:"):].strip()

    if text.startswith("`") and text.endswith("`"):
        text = text.strip("`")

    return text


def complete(client: OpenAI, model: str, prompt: str, max_tokens: int = 500) -> str:
    """Send one single-message completion request and return the cleaned reply.

    API and network errors are not caught here.
    """
    resp = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
        temperature=0.1,
        max_tokens=max_tokens,
    )
    raw = (resp.choices[0].message.content or "").strip() if resp.choices else ""
    logger.debug("Interpreter reply: %r", raw)
    return strip_reply(raw)
