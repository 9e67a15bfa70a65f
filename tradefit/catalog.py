from __future__ import annotations

import json
import logging
from functools import lru_cache

from tradefit.config import DATA_DIR
from tradefit.models import Skill

logger = logging.getLogger(__name__)

SKILLS_PATH = DATA_DIR / "skills.json"


def _to_skill(item: dict) -> Skill:
    return Skill(
        name=item["name"],
        category=item["category"],
        importance=int(item["importance"]),
    )


@lru_cache(maxsize=1)
def _load_raw() -> dict:
    with SKILLS_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=1)
def transferable_skills() -> tuple[Skill, ...]:
    return tuple(_to_skill(item) for item in _load_raw().get("transferable", []))


@lru_cache(maxsize=1)
def trade_skills() -> dict[str, tuple[Skill, ...]]:
    """Trade-specific skills, without the transferable list."""
    raw = _load_raw().get("trades", {})
    return {trade: tuple(_to_skill(item) for item in items) for trade, items in raw.items()}


def trades() -> list[str]:
    return list(trade_skills().keys())


def get_skills_by_trade(trade: str | None) -> list[Skill]:
    specific = trade_skills().get((trade or "").strip().lower())
    if specific is None:
        logger.warning("unknown_trade trade=%r", trade)
        return []
    return [*specific, *transferable_skills()]


def load_catalog() -> dict[str, list[Skill]]:
    return {trade: get_skills_by_trade(trade) for trade in trades()}
