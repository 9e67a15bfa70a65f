from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

load_dotenv()

DATA_DIR = Path(__file__).resolve().parent / "data"

_SCORING_CONFIG_CACHE: dict[str, Any] | None = None
_SCORING_CONFIG_PATH = DATA_DIR / "scoring.yaml"


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_int(name: str, default: int | None) -> int | None:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    log_level: str
    random_seed: int | None
    relevance_threshold: float
    autoplay_threshold: float
    follow_up_keep_rate: float
    max_timestamps: int
    max_follow_ups: int
    resume_delay_min_s: float
    resume_delay_max_s: float
    typing_speed_ms: int
    response_delay_ms: int
    pause_between_questions_ms: int


def load_settings() -> Settings:
    return Settings(
        log_level=(_get_env("TRADEFIT_LOG_LEVEL", "INFO") or "INFO").upper(),
        random_seed=_get_env_int("TRADEFIT_RANDOM_SEED", None),
        relevance_threshold=_get_env_float("TRADEFIT_RELEVANCE_THRESHOLD", 0.3),
        autoplay_threshold=_get_env_float("TRADEFIT_AUTOPLAY_THRESHOLD", 0.7),
        follow_up_keep_rate=_get_env_float("TRADEFIT_FOLLOW_UP_KEEP_RATE", 0.7),
        max_timestamps=_get_env_int("TRADEFIT_MAX_TIMESTAMPS", 3) or 3,
        max_follow_ups=_get_env_int("TRADEFIT_MAX_FOLLOW_UPS", 2) or 2,
        resume_delay_min_s=_get_env_float("TRADEFIT_RESUME_DELAY_MIN", 2.0),
        resume_delay_max_s=_get_env_float("TRADEFIT_RESUME_DELAY_MAX", 3.0),
        typing_speed_ms=_get_env_int("TRADEFIT_TYPING_SPEED_MS", 50) or 50,
        response_delay_ms=_get_env_int("TRADEFIT_RESPONSE_DELAY_MS", 1000) or 1000,
        pause_between_questions_ms=_get_env_int("TRADEFIT_PAUSE_BETWEEN_QUESTIONS_MS", 3000) or 3000,
    )


settings = load_settings()

if settings.resume_delay_min_s > settings.resume_delay_max_s:
    raise RuntimeError("TRADEFIT_RESUME_DELAY_MIN must not exceed TRADEFIT_RESUME_DELAY_MAX.")


def get_scoring_config() -> dict[str, Any]:
    """Load scoring constants from the packaged scoring.yaml and cache them."""
    global _SCORING_CONFIG_CACHE

    if _SCORING_CONFIG_CACHE is not None:
        return _SCORING_CONFIG_CACHE

    if not _SCORING_CONFIG_PATH.exists():
        raise RuntimeError(f"Scoring config not found at '{_SCORING_CONFIG_PATH}'.")

    try:
        raw = _SCORING_CONFIG_PATH.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read scoring config '{_SCORING_CONFIG_PATH}': {exc}"
        ) from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(
            f"Invalid YAML in scoring config '{_SCORING_CONFIG_PATH}': {exc}"
        ) from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(
            f"Invalid scoring config '{_SCORING_CONFIG_PATH}': expected a top-level mapping."
        )

    _SCORING_CONFIG_CACHE = parsed
    return _SCORING_CONFIG_CACHE


def get_scoring_value(path: str, default: Any = None) -> Any:
    """Get nested config value using dot path notation, e.g. 'bonus_weights.hands_on'."""
    if not path:
        return default

    current: Any = get_scoring_config()
    for key in path.split("."):
        if not isinstance(current, dict):
            return default
        if key not in current:
            return default
        current = current[key]
    return current
