from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List
from urllib.parse import urlparse

DEFAULT_CONTENT_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
API_KEY_ENV_NAMES = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing before any remote call."""


def _parse_allowed_origins(raw: str | None) -> List[str]:
    """Normalise comma-separated origins into values accepted by CORSMiddleware."""

    if not raw:
        return ["*"]

    cleaned: List[str] = []
    for origin in raw.split(","):
        value = origin.strip()
        if not value:
            continue
        if value == "*":
            return ["*"]

        parsed = urlparse(value)
        if parsed.scheme and parsed.netloc:
            normalised = f"{parsed.scheme}://{parsed.netloc}"
        else:
            normalised = value.rstrip("/")

        if normalised not in cleaned:
            cleaned.append(normalised)

    return cleaned or ["*"]


@dataclass
class GenAIConfig:
    api_key: str | None = None
    content_model: str = DEFAULT_CONTENT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "GenAIConfig":
        api_key = None
        for name in API_KEY_ENV_NAMES:
            value = (os.getenv(name) or "").strip()
            if value:
                api_key = value
                break

        content_model = os.getenv("GENAI_CONTENT_MODEL") or DEFAULT_CONTENT_MODEL
        image_model = os.getenv("GENAI_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL
        return cls(api_key=api_key, content_model=content_model, image_model=image_model)


DEFAULT_MAX_BODY_BYTES = 25 * 1024 * 1024
DEFAULT_MAX_SESSIONS = 256


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


@dataclass
class GuardConfig:
    max_body_bytes: int
    max_sessions: int = DEFAULT_MAX_SESSIONS

    @classmethod
    def from_env(cls) -> "GuardConfig":
        return cls(
            max_body_bytes=_env_int("MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
            max_sessions=_env_int("MAX_SESSIONS", DEFAULT_MAX_SESSIONS, minimum=1),
        )


@dataclass
class Settings:
    environment: str
    allowed_origins: List[str]
    genai: GenAIConfig
    guard: GuardConfig


@lru_cache()
def get_settings() -> Settings:
    return Settings(
        environment=os.getenv("ENVIRONMENT", "development"),
        allowed_origins=_parse_allowed_origins(os.getenv("ALLOWED_ORIGINS", "*")),
        genai=GenAIConfig.from_env(),
        guard=GuardConfig.from_env(),
    )


def require_api_key(settings: Settings | None = None) -> str:
    """Return the generative API key or fail before any network activity."""

    config = (settings or get_settings()).genai
    if not config.is_configured:
        raise ConfigurationError(
            "API_KEY environment variable is not set. "
            f"Set one of {', '.join(API_KEY_ENV_NAMES)}."
        )
    return config.api_key  # type: ignore[return-value]
