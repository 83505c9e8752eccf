"""
Settings resolution for the generation layer.

Resolution order (first non-None wins):
1. ctx.get_secret() (explicit secrets, then process environment)
2. Defaults below

The only required value is the backend credential; everything else has a
default. Settings are immutable and rebuilt per operation call.
"""
from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidConfigError, MissingConfigError

logger = structlog.get_logger()


# =============================================================================
# MODEL DEFAULTS
# =============================================================================

MODEL_FAST = "gemini-2.5-flash"
MODEL_COMPLEX = "gemini-3-pro-preview"
MODEL_TTS = "gemini-2.5-flash-preview-tts"
MODEL_IMAGE_HQ = "gemini-2.5-flash-image"
MODEL_IMAGE_FALLBACK = "imagen-3.0-generate-001"

DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_REQUEST_TIMEOUT = 120.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0

# Checked in order; first one set wins
API_KEY_NAMES = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


class StudioSettings(BaseModel):
    """Resolved backend settings for one operation call."""
    model_config = ConfigDict(frozen=True)

    api_key: str = Field(repr=False)
    api_base_url: str = DEFAULT_API_BASE_URL
    model_fast: str = MODEL_FAST
    model_complex: str = MODEL_COMPLEX
    model_tts: str = MODEL_TTS
    model_image: str = MODEL_IMAGE_HQ
    model_image_fallback: str = MODEL_IMAGE_FALLBACK
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)


def _parse_number(ctx, name: str, cast, default):
    raw = ctx.get_secret(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as e:
        raise InvalidConfigError(
            f"{name} must be a number",
            {"name": name, "value": raw},
        ) from e


def load_settings(ctx) -> StudioSettings:
    """
    Build settings from the execution context.

    Raises:
        MissingConfigError: No API key is configured. Raised before any
            network attempt is made.
        InvalidConfigError: A numeric override could not be parsed.
    """
    api_key: Optional[str] = None
    for name in API_KEY_NAMES:
        api_key = ctx.get_secret(name)
        if api_key:
            break

    if not api_key:
        logger.error("api_key_missing", checked=list(API_KEY_NAMES))
        raise MissingConfigError(
            "API key not found in environment variables",
            {"checked": list(API_KEY_NAMES)},
        )

    try:
        return StudioSettings(
            api_key=api_key,
            api_base_url=(ctx.get_secret("TUBEFLOW_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/"),
            model_fast=ctx.get_secret("TUBEFLOW_MODEL_FAST") or MODEL_FAST,
            model_complex=ctx.get_secret("TUBEFLOW_MODEL_COMPLEX") or MODEL_COMPLEX,
            model_tts=ctx.get_secret("TUBEFLOW_MODEL_TTS") or MODEL_TTS,
            model_image=ctx.get_secret("TUBEFLOW_MODEL_IMAGE") or MODEL_IMAGE_HQ,
            model_image_fallback=ctx.get_secret("TUBEFLOW_MODEL_IMAGE_FALLBACK") or MODEL_IMAGE_FALLBACK,
            request_timeout=_parse_number(ctx, "TUBEFLOW_REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT),
            max_retries=_parse_number(ctx, "TUBEFLOW_MAX_RETRIES", int, DEFAULT_MAX_RETRIES),
            retry_delay=_parse_number(ctx, "TUBEFLOW_RETRY_DELAY", float, DEFAULT_RETRY_DELAY),
        )
    except ValidationError as e:
        raise InvalidConfigError(f"Invalid settings: {e}") from e
