from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Any
import json
import logging
import os

from . import __version__
from .errors import InvalidApiKey

logger = logging.getLogger(__name__)

# Defaults / keys
DEFAULT_MODEL = "llama-3.1-8b-instant"
DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
MIN_API_KEY_LENGTH = 10

DEFAULT_CONFIG_PATH = Path.home() / ".vibedit-config.json"
LEGACY_CONFIG_PATH = Path.home() / ".vibedit"

# Key names accepted from the legacy key=value file, in order of preference.
LEGACY_KEY_NAMES: tuple[str, ...] = (
    "groqApiKey",
    "groq_api_key",
    "GROQ_API_KEY",
    "api_key",
)


@dataclass(frozen=True)
class AppConfig:
    # interpreter endpoint
    model: str
    base_url: str
    api_key: Optional[str]  # explicit override (CLI/env); None -> credential file

    # persisted credentials
    config_path: Path
    legacy_path: Path

    # external tools
    ffmpeg: str
    ffprobe: str

    # actions
    copy: bool
    dry_run: bool
    preload_request: Optional[str]


@dataclass(frozen=True)
class Credentials:
    api_key: str
    setup_date: Optional[str]
    version: Optional[str]


def _env_nonempty(name: str) -> Optional[str]:
    v = os.environ.get(name)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    url = url.rstrip("/")
    if not url.endswith("/v1"):
        url += "/v1"
    return url


def _read_json_credentials(path: Path) -> Optional[Credentials]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("Ignoring unreadable credential file %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        return None
    key = data.get("groqApiKey")
    if not isinstance(key, str) or not key.strip():
        return None
    return Credentials(
        api_key=key.strip(),
        setup_date=data.get("setupDate"),
        version=data.get("version"),
    )


def _parse_key_value(text: str) -> dict[str, str]:
    """Parse a simple key=value file.

    - Ignores blank lines and lines starting with '#'
    - Skips lines without '='
    - Keeps insertion order so the first value can serve as a fallback
    """
    out: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if k and v:
            out[k] = v
    return out


def _read_legacy_credentials(path: Path) -> Optional[Credentials]:
    if not path.is_file():
        return None
    try:
        values = _parse_key_value(path.read_text(encoding="utf-8", errors="replace"))
    except OSError as e:
        logger.debug("Ignoring unreadable legacy config %s: %s", path, e)
        return None
    if not values:
        return None
    for name in LEGACY_KEY_NAMES:
        if name in values:
            return Credentials(api_key=values[name], setup_date=None, version=None)
    # older files held a single unnamed assignment
    return Credentials(api_key=next(iter(values.values())), setup_date=None, version=None)


def load_credentials(
    path: Path | None = None,
    legacy_path: Path | None = None,
    use_legacy: bool = True,
) -> Optional[Credentials]:
    """Return saved credentials, or None when nothing usable is stored.

    The JSON record wins; the legacy key=value file is consulted only when
    the JSON record is absent or corrupt, and only if use_legacy is set.
    """
    path = path or DEFAULT_CONFIG_PATH
    legacy_path = legacy_path or LEGACY_CONFIG_PATH

    creds = _read_json_credentials(path)
    if creds is not None or not use_legacy:
        return creds
    creds = _read_legacy_credentials(legacy_path)
    if creds is not None:
        logger.debug("Using API key from legacy config %s", legacy_path)
    return creds


def validate_api_key(api_key: str) -> str:
    key = (api_key or "").strip()
    if len(key) < MIN_API_KEY_LENGTH:
        raise InvalidApiKey("Invalid API key. Please get one from https://console.groq.com/")
    return key


def save_credentials(api_key: str, path: Path | None = None) -> Credentials:
    """Validate and persist an API key as the JSON credential record."""
    path = path or DEFAULT_CONFIG_PATH
    key = validate_api_key(api_key)
    creds = Credentials(
        api_key=key,
        setup_date=datetime.now(timezone.utc).isoformat(),
        version=__version__,
    )
    payload: dict[str, Any] = {
        "groqApiKey": creds.api_key,
        "setupDate": creds.setup_date,
        "version": creds.version,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return creds


def delete_credentials(path: Path | None = None) -> bool:
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return False
    path.unlink()
    return True


# args/env/defaults
def resolve_config(args) -> AppConfig:
    """Resolve config using the precedence:
        CLI args > env vars > defaults
    The API key additionally falls back to the credential file at run time.
    """
    url_raw = getattr(args, "url", None) or _env_nonempty("VIBEDIT_LLM_API_URL") or DEFAULT_BASE_URL
    model = getattr(args, "model", None) or _env_nonempty("VIBEDIT_MODEL") or DEFAULT_MODEL
    api_key = (
        getattr(args, "api_key", None)
        or _env_nonempty("VIBEDIT_GROQ_API_KEY")
        or _env_nonempty("GROQ_API_KEY")
    )
    config_path = getattr(args, "config", None) or _env_nonempty("VIBEDIT_CONFIG")

    return AppConfig(
        model=str(model),
        base_url=normalize_base_url(str(url_raw)),
        api_key=api_key,
        config_path=Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH,
        legacy_path=LEGACY_CONFIG_PATH,
        ffmpeg=_env_nonempty("VIBEDIT_FFMPEG") or "ffmpeg",
        ffprobe=_env_nonempty("VIBEDIT_FFPROBE") or "ffprobe",
        copy=bool(getattr(args, "copy", False)),
        dry_run=bool(getattr(args, "dry_run", False)),
        preload_request=getattr(args, "request", None),
    )
