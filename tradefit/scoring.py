from __future__ import annotations

import logging
import math
import random
import re
from typing import Iterable

from tradefit.catalog import get_skills_by_trade
from tradefit.config import get_scoring_value, settings
from tradefit.models import CompatibilityResult, QuestionAnswers, Skill, SkillGap

logger = logging.getLogger(__name__)

BONUS_WEIGHTS = {
    "motivation": 0.15,
    "hands_on": 0.20,
    "physical_work": 0.10,
    "problem_solving": 0.15,
    "availability": 0.10,
}

DEFAULT_KEYWORDS = {
    "motivation": ("passionate", "career change", "stable", "growth", "opportunity"),
    "hands_on": ("fix", "repair", "build", "diy", "tools", "hands-on", "construction", "mechanical"),
    "problem_solving": ("analyze", "solve", "debug", "troubleshoot", "systematic", "logical", "step"),
}

REQUIRED_LEVELS = {"basic": 6, "intermediate": 8, "advanced": 10}

_LEADING_INT = re.compile(r"^[+-]?\d+")


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _keywords(name: str) -> list[str]:
    return [str(k).lower() for k in get_scoring_value(f"keywords.{name}", DEFAULT_KEYWORDS[name])]


def _count_hits(text: str, keywords: Iterable[str]) -> int:
    lowered = (text or "").lower()
    return sum(1 for keyword in keywords if keyword in lowered)


def skill_matches(user_skills: Iterable[str], skill_name: str) -> bool:
    """Bidirectional case-insensitive containment between any user skill and a skill name."""
    name = skill_name.lower()
    for raw in user_skills:
        if not raw or not raw.strip():
            continue
        candidate = raw.lower()
        if candidate in name or name in candidate:
            return True
    return False


def calculate_skill_match(user_skills: list[str], required_skills: list[Skill]) -> float:
    matched = 0
    total = 0
    for required in required_skills:
        if skill_matches(user_skills, required.name):
            matched += required.importance
        total += required.importance
    return matched / total if total > 0 else 0.0


def _motivation_score(motivation: str) -> float:
    if _count_hits(motivation, _keywords("motivation")) > 0:
        return float(get_scoring_value("motivation.matched", 0.8))
    return float(get_scoring_value("motivation.unmatched", 0.4))


def _hands_on_score(hands_on: str) -> float:
    per_keyword = float(get_scoring_value("hands_on.per_keyword", 0.2))
    return min(_count_hits(hands_on, _keywords("hands_on")) * per_keyword, 1.0)


def _physical_work_score(physical_work: str) -> float:
    # Answers look like "7 - Very comfortable"; a missing or zero rating falls back to mid-scale.
    default = int(get_scoring_value("physical_work.default_rating", 5))
    first = (physical_work or "").split(" ")[0]
    match = _LEADING_INT.match(first)
    rating = int(match.group(0)) if match else 0
    if rating == 0:
        rating = default
    return _clamp(rating / 10.0)


def _problem_solving_score(problem_solving: str) -> float:
    per_keyword = float(get_scoring_value("problem_solving.per_keyword", 0.15))
    return min(_count_hits(problem_solving, _keywords("problem_solving")) * per_keyword, 1.0)


def _availability_score(availability: str) -> float:
    lowered = (availability or "").lower()
    if "full-time" in lowered or "flexible" in lowered:
        return float(get_scoring_value("availability.full", 1.0))
    if "part-time" in lowered:
        return float(get_scoring_value("availability.part_time", 0.7))
    return float(get_scoring_value("availability.other", 0.5))


def questionnaire_bonuses(answers: QuestionAnswers) -> dict[str, float]:
    return {
        "motivation": _motivation_score(answers.motivation),
        "hands_on": _hands_on_score(answers.hands_on),
        "physical_work": _physical_work_score(answers.physical_work),
        "problem_solving": _problem_solving_score(answers.problem_solving),
        "availability": _availability_score(answers.availability),
    }


def bonus_weights() -> dict[str, float]:
    return {
        key: float(get_scoring_value(f"bonus_weights.{key}", default))
        for key, default in BONUS_WEIGHTS.items()
    }


def required_level(skill: Skill) -> int:
    default = REQUIRED_LEVELS.get(skill.category, REQUIRED_LEVELS["advanced"])
    return int(get_scoring_value(f"required_levels.{skill.category}", default))


def calculate_skill_gaps(
    user_skills: list[str],
    required_skills: list[Skill],
    rng: random.Random | None = None,
) -> list[SkillGap]:
    rng = rng or random.Random(settings.random_seed)
    low = int(get_scoring_value("matched_level.low", 3))
    high = int(get_scoring_value("matched_level.high", 6))
    gaps: list[SkillGap] = []
    for required in required_skills:
        # Stand-in for a real assessment: a matched skill lands somewhere in the low-mid range.
        current = rng.randint(low, high) if skill_matches(user_skills, required.name) else 0
        target = required_level(required)
        if current < target:
            gaps.append(SkillGap(skill=required.name, current_level=current, required_level=target))
    return gaps


def compute_skill_gaps(
    user_skills: list[str], trade: str, rng: random.Random | None = None
) -> list[SkillGap]:
    return calculate_skill_gaps(user_skills, get_skills_by_trade(trade), rng)


def score_compatibility(
    user_skills: list[str],
    trade: str,
    answers: QuestionAnswers | None = None,
    rng: random.Random | None = None,
) -> CompatibilityResult:
    answers = answers or QuestionAnswers()
    required = get_skills_by_trade(trade)
    skill_match = calculate_skill_match(user_skills, required)

    weights = bonus_weights()
    bonuses = questionnaire_bonuses(answers)
    total_bonus = sum(weights[key] * bonuses[key] for key in weights)

    # Match fraction and bonuses share no common scale; the sum saturates at 100.
    raw_total = skill_match + total_bonus
    score = max(0, min(100, _js_round(min(raw_total, 1.0) * 100.0)))

    gaps = calculate_skill_gaps(user_skills, required, rng)
    logger.info(
        "compatibility_scored trade=%s skills=%s match=%.3f bonus=%.3f score=%s gaps=%s",
        trade,
        len(user_skills),
        skill_match,
        total_bonus,
        score,
        len(gaps),
    )
    return CompatibilityResult(score=score, gaps=gaps)


def matched_skills(user_skills: list[str], trade: str) -> list[str]:
    required = get_skills_by_trade(trade)
    return [
        skill
        for skill in user_skills
        if any(skill_matches([skill], item.name) for item in required)
    ]


FIT_MESSAGES = {
    "excellent": "Excellent match! You're well-positioned for this career transition.",
    "great": "Great potential! With focused learning, you'll be ready soon.",
    "good": "Good foundation! A structured learning path will get you there.",
    "beginner": "Every expert was once a beginner. Your journey starts here!",
}


def fit_band(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "great"
    if score >= 40:
        return "good"
    return "beginner"


def motivational_message(score: int) -> str:
    return FIT_MESSAGES[fit_band(score)]
