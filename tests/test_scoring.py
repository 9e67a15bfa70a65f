from __future__ import annotations

import random
from dataclasses import replace

from tradefit.catalog import get_skills_by_trade, transferable_skills
from tradefit.config import settings
from tradefit.models import QuestionAnswers
from tradefit.scoring import (
    calculate_skill_match,
    compute_skill_gaps,
    fit_band,
    matched_skills,
    motivational_message,
    questionnaire_bonuses,
    score_compatibility,
)


class _HighRandom(random.Random):
    def randint(self, a, b):
        return b


def _strong_answers() -> QuestionAnswers:
    return QuestionAnswers(
        motivation="I am passionate about growth in a stable career",
        hands_on="I fix and repair things, build furniture and do DIY with my own tools",
        physical_work="8 - Comfortable lifting and climbing all day",
        problem_solving="I analyze, debug and troubleshoot step by step in a systematic, logical way to solve it",
        availability="Full-time, flexible schedule",
    )


def test_empty_skills_give_zero_match_for_every_trade():
    for trade in ("plumber", "electrician"):
        assert get_skills_by_trade(trade)
        assert calculate_skill_match([], get_skills_by_trade(trade)) == 0.0


def test_empty_answers_score_from_neutral_bonuses_only():
    result = score_compatibility([], "electrician", QuestionAnswers(), rng=random.Random(1))
    # motivation 0.4*0.15 + physical 0.5*0.10 + availability 0.5*0.10
    assert result.score == 16


def test_unknown_trade_degrades_gracefully():
    result = score_compatibility(["Wiring"], "astronaut", QuestionAnswers(), rng=random.Random(1))
    assert result.gaps == []
    assert result.score == 16
    assert compute_skill_gaps(["Wiring"], "astronaut") == []


def test_skill_match_is_bidirectional_and_case_insensitive():
    required = get_skills_by_trade("electrician")
    short = calculate_skill_match(["WIRING"], required)
    long = calculate_skill_match(["Ten years of troubleshooting industrial plants"], required)
    assert short > 0
    assert long > 0


def test_blank_user_skill_matches_nothing():
    assert calculate_skill_match(["", "   "], get_skills_by_trade("plumber")) == 0.0


def test_score_saturates_at_100():
    transferable = [skill.name for skill in transferable_skills()]
    result = score_compatibility(transferable, "electrician", _strong_answers(), rng=random.Random(3))
    assert result.score == 100


def test_score_is_bounded_for_arbitrary_answers():
    answers = QuestionAnswers(
        motivation="",
        hands_on="!!!",
        physical_work="-40 - hate it",
        problem_solving="???",
        availability="",
    )
    result = score_compatibility(["x"], "plumber", answers, rng=random.Random(0))
    assert 0 <= result.score <= 100


def test_questionnaire_bonus_values():
    bonuses = questionnaire_bonuses(_strong_answers())
    assert bonuses["motivation"] == 0.8
    assert bonuses["hands_on"] == 1.0
    assert bonuses["physical_work"] == 0.8
    assert bonuses["problem_solving"] == 1.0
    assert bonuses["availability"] == 1.0


def test_physical_rating_falls_back_to_mid_scale():
    assert questionnaire_bonuses(QuestionAnswers(physical_work="7 - Very comfortable"))["physical_work"] == 0.7
    assert questionnaire_bonuses(QuestionAnswers(physical_work="very comfortable"))["physical_work"] == 0.5
    assert questionnaire_bonuses(QuestionAnswers(physical_work="0 - no"))["physical_work"] == 0.5
    assert questionnaire_bonuses(QuestionAnswers(physical_work="10"))["physical_work"] == 1.0


def test_availability_tiers():
    assert questionnaire_bonuses(QuestionAnswers(availability="Part-time evenings"))["availability"] == 0.7
    assert questionnaire_bonuses(QuestionAnswers(availability="weekends"))["availability"] == 0.5


def test_gaps_only_contain_real_gaps():
    skills = ["Safety awareness", "Project management", "Wiring installation"]
    for seed in range(20):
        gaps = compute_skill_gaps(skills, "electrician", rng=random.Random(seed))
        assert all(gap.current_level < gap.required_level for gap in gaps)


def test_matched_skill_at_required_level_is_not_a_gap():
    gaps = compute_skill_gaps(["Safety awareness", "Project management"], "electrician", rng=_HighRandom())
    by_skill = {gap.skill: gap for gap in gaps}
    assert "Safety awareness" not in by_skill
    assert by_skill["Project management"].current_level == 6
    assert by_skill["Project management"].required_level == 8
    assert by_skill["Circuit design"].current_level == 0
    assert by_skill["Circuit design"].required_level == 10


def test_gap_levels_are_deterministic_with_seed():
    skills = ["Problem-solving", "Customer service", "Soldering"]
    a = score_compatibility(skills, "plumber", QuestionAnswers(), rng=random.Random(42))
    b = score_compatibility(skills, "plumber", QuestionAnswers(), rng=random.Random(42))
    assert a == b


def test_matched_skills_keeps_input_order():
    skills = ["Python", "Safety awareness", "Wiring", "React"]
    assert matched_skills(skills, "electrician") == ["Safety awareness", "Wiring"]


def test_motivational_message_bands():
    assert motivational_message(85).startswith("Excellent match")
    assert motivational_message(60).startswith("Great potential")
    assert motivational_message(40).startswith("Good foundation")
    assert motivational_message(12).startswith("Every expert")


def test_fit_band_edges():
    assert fit_band(100) == "excellent"
    assert fit_band(80) == "excellent"
    assert fit_band(79) == "great"
    assert fit_band(60) == "great"
    assert fit_band(59) == "good"
    assert fit_band(40) == "good"
    assert fit_band(39) == "beginner"
    assert fit_band(0) == "beginner"


def test_default_gap_levels_follow_configured_seed(monkeypatch):
    monkeypatch.setattr("tradefit.scoring.settings", replace(settings, random_seed=7))
    skills = [skill.name for skill in transferable_skills()]
    assert compute_skill_gaps(skills, "plumber") == compute_skill_gaps(skills, "plumber")
