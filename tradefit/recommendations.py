from __future__ import annotations

from typing import Iterable

import numpy as np

from tradefit.config import get_scoring_value
from tradefit.models import Priority, Skill, SkillGap, SkillJourneyNode
from tradefit.scoring import skill_matches

PRIORITY_RANK: dict[Priority, int] = {"high": 3, "medium": 2, "low": 1}

SKILL_PREREQUISITES = {
    "Circuit design": ("Electrical code knowledge", "Wiring installation"),
    "Gas line work": ("Pipe fitting", "Safety protocols"),
    "Motor controls": ("Circuit design", "Electrical code knowledge"),
    "Load calculations": ("Mathematical skills", "Circuit design"),
    "Backflow prevention": ("Water systems", "Valve installation"),
    "Problem diagnosis": ("Troubleshooting", "Tool proficiency"),
}


def _cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    norm_product = np.linalg.norm(vec1) * np.linalg.norm(vec2)
    if norm_product == 0:
        return 0.0
    return float(np.dot(vec1, vec2) / norm_product)


def _user_vector(user_skills: list[str], skill_names: Iterable[str]) -> np.ndarray:
    return np.array(
        [1.0 if skill_matches(user_skills, name) else 0.0 for name in skill_names],
        dtype=float,
    )


def _trade_vector(skills: list[Skill], skill_names: Iterable[str]) -> np.ndarray:
    importance = {skill.name: float(skill.importance) for skill in skills}
    return np.array([importance.get(name, 0.0) for name in skill_names], dtype=float)


def recommend_trades(
    user_skills: list[str], catalog: dict[str, list[Skill]]
) -> list[tuple[str, float]]:
    skill_union = sorted({skill.name for skills in catalog.values() for skill in skills})
    user_vec = _user_vector(user_skills, skill_union)
    results: list[tuple[str, float]] = []
    for trade, skills in catalog.items():
        sim = _cosine_similarity(user_vec, _trade_vector(skills, skill_union))
        results.append((trade, round(max(0.0, min(1.0, sim)) * 100.0, 1)))
    results.sort(key=lambda r: r[1], reverse=True)
    return results[:3]


def skill_prerequisites(skill_name: str) -> list[str]:
    return list(SKILL_PREREQUISITES.get(skill_name, ()))


def _priority(required_level: int) -> Priority:
    if required_level >= int(get_scoring_value("journey.high_priority_level", 9)):
        return "high"
    if required_level >= int(get_scoring_value("journey.medium_priority_level", 7)):
        return "medium"
    return "low"


def build_learning_journey(gaps: list[SkillGap]) -> list[SkillJourneyNode]:
    hours_per_level = int(get_scoring_value("journey.hours_per_level", 20))
    nodes = [
        SkillJourneyNode(
            skill=gap.skill,
            current_level=gap.current_level,
            target_level=gap.required_level,
            priority=_priority(gap.required_level),
            estimated_hours=(gap.required_level - gap.current_level) * hours_per_level,
            prerequisites=skill_prerequisites(gap.skill),
        )
        for gap in gaps
    ]
    nodes.sort(key=lambda n: (-PRIORITY_RANK[n.priority], len(n.prerequisites)))
    return nodes


def journey_summary(nodes: list[SkillJourneyNode]) -> dict[str, int]:
    summary = {"total_hours": 0, "high": 0, "medium": 0, "low": 0}
    for node in nodes:
        summary["total_hours"] += node.estimated_hours
        summary[node.priority] += node.estimated_hours
    return summary


def next_steps(gaps: list[SkillGap]) -> list[dict[str, str]]:
    steps: list[dict[str, str]] = []
    if any("safety" in gap.skill.lower() for gap in gaps):
        steps.append(
            {
                "title": "Start with Safety Training",
                "description": "Complete OSHA safety certification - essential for all trades",
            }
        )
    if any("tool" in gap.skill.lower() for gap in gaps):
        steps.append(
            {
                "title": "Build Tool Familiarity",
                "description": "Practice with basic trade tools and equipment",
            }
        )
    steps.append(
        {
            "title": "Join Electrical Communities",
            "description": "Connect with professionals and learn from their experiences",
        }
    )
    return steps[:3]
