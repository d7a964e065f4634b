import os
from dataclasses import dataclass, field, replace
from typing import Optional

from dotenv import load_dotenv

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL_PREFIX_MAP = "gpt-4:gpt-4o"
DEFAULT_UPSTREAM_TIMEOUT = 60.0


class ConfigurationError(Exception):
    """Raised when a required setting is missing or malformed."""


def parse_model_prefix_map(raw: str) -> dict[str, str]:
    """
    Parses "prefix:replacement,prefix:replacement" into an ordered dict.

    >>> parse_model_prefix_map("gpt-4:gpt-4o")
    {'gpt-4': 'gpt-4o'}
    """
    if not raw.strip():
        return {}
    try:
        prefix_map = {k.strip(): v.strip() for k, v in [item.split(":") for item in raw.split(",")]}
    except ValueError as e:
        raise ConfigurationError(f"Error parsing MODEL_PREFIX_MAP {raw!r}: {e}") from e

    for prefix, replacement in prefix_map.items():
        if not prefix or not replacement:
            raise ConfigurationError(f"MODEL_PREFIX_MAP entry {prefix!r}:{replacement!r} has an empty side")
    return prefix_map


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    explorer_passkey: Optional[str] = None
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    model_prefix_map: dict[str, str] = field(default_factory=lambda: parse_model_prefix_map(DEFAULT_MODEL_PREFIX_MAP))
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT

    @classmethod
    def from_env(cls) -> "Settings":
        raw_timeout = os.getenv("UPSTREAM_TIMEOUT", str(DEFAULT_UPSTREAM_TIMEOUT))
        try:
            upstream_timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(f"UPSTREAM_TIMEOUT must be a number, got {raw_timeout!r}") from e

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            explorer_passkey=os.getenv("EXPLORER_PASSKEY") or None,
            openai_base_url=os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL).rstrip("/"),
            model_prefix_map=parse_model_prefix_map(os.getenv("MODEL_PREFIX_MAP", DEFAULT_MODEL_PREFIX_MAP)),
            upstream_timeout=upstream_timeout,
        )


_settings: Optional[Settings] = None


def load_settings() -> Settings:
    """Re-reads .env and the process environment and installs the result."""
    global _settings
    load_dotenv()
    _settings = Settings.from_env()
    return _settings


def get_settings() -> Settings:
    if _settings is None:
        return load_settings()
    return _settings


def set_settings(**overrides) -> Settings:
    global _settings
    _settings = replace(get_settings(), **overrides)
    return _settings


def clear_settings() -> None:
    """Forgets the loaded settings, including any credential set at runtime."""
    global _settings
    _settings = None
