from __future__ import annotations

import asyncio
import random
from dataclasses import replace

import pytest

from tradefit.companion import VideoAssistant
from tradefit.config import settings
from tradefit.errors import InvalidTransitionError
from tradefit.recommendations import PRIORITY_RANK
from tradefit.session import AsyncioScheduler, DemoController, DemoState, ManualScheduler, Session

SAFETY_QUESTION = "What safety equipment do I need?"


def _fast_settings():
    return replace(settings, typing_speed_ms=10, response_delay_ms=100, pause_between_questions_ms=200)


def _controller(scheduler: ManualScheduler, questions=None, **callbacks) -> DemoController:
    return DemoController(
        scheduler,
        assistant=VideoAssistant(rng=random.Random(0)),
        settings=_fast_settings(),
        questions=questions,
        **callbacks,
    )


def test_analyze_falls_back_to_sample_profile():
    session = Session(rng=random.Random(4))
    result = session.analyze()
    assert session.used_sample_profile is True
    assert 0 <= result.score <= 100
    assert session.compatibility_score == result.score
    assert len(session.journey) == len(session.skill_gaps)
    ranks = [PRIORITY_RANK[node.priority] for node in session.journey]
    assert ranks == sorted(ranks, reverse=True)


def test_analyze_uses_provided_profile():
    session = Session(rng=random.Random(4))
    session.select_trade("plumber")
    session.set_resume("cv.pdf", ["Pipe fitting", "Customer service"])
    session.update_answer("availability", "Full-time")
    session.analyze()
    assert session.used_sample_profile is False
    assert all(gap.skill != "Pipe fitting" or gap.current_level >= 3 for gap in session.skill_gaps)


def test_update_answer_rejects_unknown_field():
    with pytest.raises(ValueError):
        Session().update_answer("salary", "lots")


def test_learning_progress_lifecycle():
    session = Session()
    session.start_learning("Soldering")
    assert session.learning_progress["Soldering"] == 0
    session.update_progress("Soldering", 150)
    assert session.learning_progress["Soldering"] == 100
    session.update_progress("Soldering", -5)
    assert session.learning_progress["Soldering"] == 0
    session.complete_skill()
    session.complete_skill("Soldering")
    assert session.completed_skills == ["Soldering"]
    assert session.current_learning_skill is None


def test_reset_clears_state_but_keeps_rng():
    rng = random.Random(1)
    session = Session(rng=rng)
    session.select_trade("electrician")
    session.mark_watched(75)
    session.mark_watched(75)
    assert session.watched_segments == [75]
    session.reset()
    assert session.selected_trade is None
    assert session.watched_segments == []
    assert session.rng is rng


def test_demo_walks_through_one_question():
    scheduler = ManualScheduler()
    messages: list[tuple[str, bool]] = []
    stamps: list[list[int]] = []
    controller = _controller(
        scheduler,
        questions=[SAFETY_QUESTION],
        on_message=lambda text, is_user: messages.append((text, is_user)),
        on_timestamps=stamps.append,
    )

    controller.start()
    assert controller.state is DemoState.TYPING_QUESTION
    scheduler.advance(10 * (len(SAFETY_QUESTION) - 1))
    assert controller.typed_text == SAFETY_QUESTION[:-1]
    scheduler.advance(10)
    assert controller.state is DemoState.WAITING_FOR_RESPONSE
    assert messages == [(SAFETY_QUESTION, True)]

    scheduler.advance(100)
    assert controller.state is DemoState.SHOWING_RESPONSE
    assert stamps == [[75]]
    assert messages[-1][1] is False

    scheduler.advance(200)
    assert controller.state is DemoState.IDLE
    assert controller.question_index == 1


def test_demo_plays_every_scripted_question():
    scheduler = ManualScheduler()
    messages: list[tuple[str, bool]] = []
    states: list[DemoState] = []
    controller = _controller(
        scheduler,
        on_message=lambda text, is_user: messages.append((text, is_user)),
        on_state_change=states.append,
    )
    controller.start()
    scheduler.run_all()
    assert controller.state is DemoState.IDLE
    assert len(messages) == 8
    assert [is_user for _, is_user in messages] == [True, False] * 4
    assert states.count(DemoState.SHOWING_RESPONSE) == 4


def test_pause_freezes_and_resume_continues():
    scheduler = ManualScheduler()
    controller = _controller(scheduler, questions=[SAFETY_QUESTION])
    controller.start()
    scheduler.advance(30)
    controller.pause()
    assert controller.state is DemoState.PAUSED
    assert scheduler.pending == 0
    scheduler.advance(10_000)
    assert controller.typed_text == SAFETY_QUESTION[:3]

    controller.resume()
    assert controller.state is DemoState.TYPING_QUESTION
    scheduler.run_all()
    assert controller.state is DemoState.IDLE
    assert controller.last_response is not None


def test_invalid_transitions_raise():
    scheduler = ManualScheduler()
    controller = _controller(scheduler, questions=[SAFETY_QUESTION])
    with pytest.raises(InvalidTransitionError):
        controller.resume()
    with pytest.raises(InvalidTransitionError):
        controller.pause()
    controller.start()
    with pytest.raises(InvalidTransitionError):
        controller.start()
    controller.stop()
    assert controller.state is DemoState.IDLE
    assert scheduler.pending == 0


def test_empty_question_list_returns_to_idle():
    controller = _controller(ManualScheduler(), questions=[])
    controller.start()
    assert controller.state is DemoState.IDLE


def test_asyncio_scheduler_drives_demo():
    async def play() -> DemoController:
        controller = DemoController(
            AsyncioScheduler(),
            assistant=VideoAssistant(rng=random.Random(0)),
            settings=replace(settings, typing_speed_ms=1, response_delay_ms=1, pause_between_questions_ms=1),
            questions=[SAFETY_QUESTION],
        )
        controller.start()
        for _ in range(500):
            if controller.state is DemoState.IDLE:
                break
            await asyncio.sleep(0.01)
        return controller

    controller = asyncio.run(play())
    assert controller.state is DemoState.IDLE
    assert [item.timestamp for item in controller.last_response.timestamps] == [75]
