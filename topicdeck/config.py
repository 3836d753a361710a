"""Environment-driven settings for the deck pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


def _get_env(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    val = env.get(name, default)
    if val is not None and not str(val).strip():
        return default
    return val


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _get_env(env, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _get_env(env, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    provider: str = "openai"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-2024-08-06"
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    generation_timeout: float = 120.0
    search_api_key: Optional[str] = None
    search_engine_id: Optional[str] = None
    slide_interval: float = 5.0
    batch_size: int = 20
    batch_pause: float = 10.0
    image_timeout: float = 5.0
    image_retries: int = 3
    image_backoff: float = 1.0
    max_image_candidates: int = 5


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ`` after ``.env``)."""

    if env is None:
        load_dotenv()
        env = os.environ
    return Settings(
        provider=(_get_env(env, "DECK_PROVIDER", "openai") or "openai").lower(),
        openai_api_key=_get_env(env, "OPENAI_API_KEY"),
        openai_model=_get_env(env, "DECK_OPENAI_MODEL", Settings.openai_model),
        google_api_key=_get_env(env, "GOOGLE_API_KEY"),
        gemini_model=_get_env(env, "DECK_GEMINI_MODEL", Settings.gemini_model),
        generation_timeout=_get_float(env, "DECK_GENERATION_TIMEOUT", Settings.generation_timeout),
        search_api_key=_get_env(env, "GOOGLE_SEARCH_API_KEY"),
        search_engine_id=_get_env(env, "GOOGLE_SEARCH_ENGINE_ID"),
        slide_interval=_get_float(env, "DECK_SLIDE_INTERVAL", Settings.slide_interval),
        batch_size=_get_int(env, "DECK_BATCH_SIZE", Settings.batch_size),
        batch_pause=_get_float(env, "DECK_BATCH_PAUSE", Settings.batch_pause),
        image_timeout=_get_float(env, "DECK_IMAGE_TIMEOUT", Settings.image_timeout),
        image_retries=_get_int(env, "DECK_IMAGE_RETRIES", Settings.image_retries),
        image_backoff=_get_float(env, "DECK_IMAGE_BACKOFF", Settings.image_backoff),
        max_image_candidates=_get_int(env, "DECK_MAX_IMAGE_CANDIDATES", Settings.max_image_candidates),
    )


__all__ = ["Settings", "load_settings"]
