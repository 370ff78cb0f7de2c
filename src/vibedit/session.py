from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional
import logging

from openai import OpenAI

from . import ui
from .config import AppConfig, load_credentials, save_credentials, delete_credentials
from .llm import build_client

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Per-process state passed explicitly through the loop.

    The interpreter client is built on first use and dropped on key reset.
    """

    cfg: AppConfig
    client_factory: Callable[[AppConfig, str], OpenAI] = build_client
    _client: Optional[OpenAI] = field(default=None, init=False, repr=False)
    _api_key_override: Optional[str] = field(default=None, init=False, repr=False)
    _legacy_disabled: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self._api_key_override = self.cfg.api_key

    @property
    def has_client(self) -> bool:
        return self._client is not None

    def ensure_client(self, ask: Callable[[str], str]) -> OpenAI:
        if self._client is not None:
            return self._client

        api_key = self._api_key_override
        if not api_key:
            creds = load_credentials(
                self.cfg.config_path,
                self.cfg.legacy_path,
                use_legacy=not self._legacy_disabled,
            )
            api_key = creds.api_key if creds else None
        if not api_key:
            api_key = self._setup_api_key(ask)

        self._client = self.client_factory(self.cfg, api_key)
        return self._client

    def _setup_api_key(self, ask: Callable[[str], str]) -> str:
        ui.hint("\n🔑 API Key Setup Required")
        ui.info("Vibedit uses Groq AI for natural language understanding.")
        ui.info("1. Get a FREE API key: https://console.groq.com/")
        ui.info("2. Create account → API Keys → Create API Key")
        ui.info("3. Copy the key and paste it below\n")

        entered = ask("🔑 Paste your Groq API key here:")
        creds = save_credentials(entered, self.cfg.config_path)
        logger.debug("Saved credentials to %s", self.cfg.config_path)
        ui.success("API key saved! You're all set!")
        return creds.api_key

    def reset_api_key(self) -> None:
        delete_credentials(self.cfg.config_path)
        self._client = None
        self._api_key_override = None
        # a reset key must not come back from the legacy file
        self._legacy_disabled = True
        ui.success("API key reset! You'll be prompted for a new one.")
