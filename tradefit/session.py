from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import random
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Callable, Protocol

from tradefit.companion import VideoAssistant, demo_questions
from tradefit.config import Settings, settings as default_settings
from tradefit.errors import InvalidTransitionError
from tradefit.models import (
    CompatibilityResult,
    QuestionAnswers,
    SkillGap,
    SkillJourneyNode,
    VideoResponse,
)
from tradefit.recommendations import build_learning_journey
from tradefit.scoring import score_compatibility

logger = logging.getLogger(__name__)

QUESTIONNAIRE = (
    {
        "key": "motivation",
        "question": "What motivates you to transition into this trade?",
        "type": "textarea",
        "placeholder": "Tell us about your passion for this career change...",
    },
    {
        "key": "hands_on",
        "question": "Describe any hands-on work or DIY experience you have",
        "type": "textarea",
        "placeholder": "Share your experience with tools, repairs, building projects...",
    },
    {
        "key": "physical_work",
        "question": "How comfortable are you with physically demanding work?",
        "type": "scale",
        "placeholder": "Rate from 1-10 and explain your comfort level...",
    },
    {
        "key": "problem_solving",
        "question": "Describe a complex problem you've solved and your approach",
        "type": "textarea",
        "placeholder": "Walk us through your problem-solving process...",
    },
    {
        "key": "availability",
        "question": "What's your availability for training and apprenticeship?",
        "type": "textarea",
        "placeholder": "Tell us about your schedule flexibility and commitment...",
    },
)

# Used when results are requested before a trade and resume were provided.
SAMPLE_PROFILE = {
    "trade": "electrician",
    "skills": [
        "JavaScript",
        "React",
        "Node.js",
        "Python",
        "Data Analysis",
        "Project Management",
        "Communication",
        "Problem Solving",
    ],
    "answers": QuestionAnswers(
        motivation="Career change for better opportunities",
        hands_on="love",
        physical_work="comfortable",
        problem_solving="enjoy",
        availability="full-time",
    ),
}


def format_scale_answer(rating: int, explanation: str) -> str:
    return f"{rating} - {explanation}"


@dataclass
class Session:
    """Mutable state for one user's pass through the quiz. Never shared between users."""

    selected_trade: str | None = None
    resume_filename: str | None = None
    resume_skills: list[str] = field(default_factory=list)
    answers: QuestionAnswers = field(default_factory=QuestionAnswers)
    compatibility_score: int = 0
    skill_gaps: list[SkillGap] = field(default_factory=list)
    journey: list[SkillJourneyNode] = field(default_factory=list)
    is_analyzing: bool = False
    used_sample_profile: bool = False
    completed_skills: list[str] = field(default_factory=list)
    current_learning_skill: str | None = None
    learning_progress: dict[str, int] = field(default_factory=dict)
    watched_segments: list[int] = field(default_factory=list)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def select_trade(self, trade: str | None) -> None:
        self.selected_trade = trade

    def set_resume(self, filename: str | None, skills: list[str]) -> None:
        self.resume_filename = filename
        self.resume_skills = list(skills)

    def update_answer(self, key: str, value: str) -> None:
        if key not in {f.name for f in fields(QuestionAnswers)}:
            raise ValueError(f"Unknown questionnaire field: {key}")
        setattr(self.answers, key, value)

    def analyze(self) -> CompatibilityResult:
        trade, skills, answers = self.selected_trade, self.resume_skills, self.answers
        self.used_sample_profile = not trade or not skills
        if self.used_sample_profile:
            logger.info("session_analyze using sample profile")
            trade = SAMPLE_PROFILE["trade"]
            skills = SAMPLE_PROFILE["skills"]
            answers = SAMPLE_PROFILE["answers"]

        result = score_compatibility(skills, trade, answers, rng=self.rng)
        self.compatibility_score = result.score
        self.skill_gaps = result.gaps
        self.journey = build_learning_journey(result.gaps)
        return result

    def start_learning(self, skill: str) -> None:
        self.current_learning_skill = skill
        self.learning_progress.setdefault(skill, 0)

    def update_progress(self, skill: str, progress: int) -> None:
        self.learning_progress[skill] = max(0, min(100, int(progress)))

    def complete_skill(self, skill: str | None = None) -> None:
        skill = skill or self.current_learning_skill
        if skill is None:
            return
        if skill not in self.completed_skills:
            self.completed_skills.append(skill)
        self.learning_progress[skill] = 100
        self.current_learning_skill = None

    def mark_watched(self, timestamp: int) -> None:
        if timestamp not in self.watched_segments:
            self.watched_segments.append(timestamp)

    def ask(self, question: str, assistant: VideoAssistant | None = None) -> VideoResponse:
        assistant = assistant or VideoAssistant(rng=self.rng)
        return assistant.answer_question(question, self.watched_segments)

    def reset(self) -> None:
        rng = self.rng
        self.__init__(rng=rng)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)


class _ManualTimer:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock; callbacks run only when ``advance`` moves time past them."""

    def __init__(self):
        self.now_ms = 0
        self._queue: list[tuple[int, int, _ManualTimer, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        timer = _ManualTimer()
        heapq.heappush(self._queue, (self.now_ms + max(0, delay_ms), next(self._seq), timer, callback))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, timer, _ in self._queue if not timer.cancelled)

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, timer, callback = heapq.heappop(self._queue)
            self.now_ms = due
            if not timer.cancelled:
                callback()
        self.now_ms = target

    def run_all(self, limit: int = 100_000) -> None:
        for _ in range(limit):
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                return
            self.advance(min(entry[0] for entry in live) - self.now_ms)
        raise RuntimeError("ManualScheduler.run_all did not settle")


class DemoState(Enum):
    IDLE = "idle"
    TYPING_QUESTION = "typing_question"
    WAITING_FOR_RESPONSE = "waiting_for_response"
    SHOWING_RESPONSE = "showing_response"
    PAUSED = "paused"


class DemoController:
    """Plays the scripted questions: type each one out, wait, show the answer, pause, repeat."""

    def __init__(
        self,
        scheduler: Scheduler,
        assistant: VideoAssistant | None = None,
        settings: Settings | None = None,
        questions: list[str] | None = None,
        on_message: Callable[[str, bool], None] | None = None,
        on_timestamps: Callable[[list[int]], None] | None = None,
        on_state_change: Callable[[DemoState], None] | None = None,
    ):
        self.scheduler = scheduler
        self.assistant = assistant or VideoAssistant()
        self.settings = settings or default_settings
        self.questions = list(questions) if questions is not None else demo_questions()
        self.on_message = on_message
        self.on_timestamps = on_timestamps
        self.on_state_change = on_state_change

        self.state = DemoState.IDLE
        self.question_index = 0
        self.typed_text = ""
        self.last_response: VideoResponse | None = None
        self._paused_from: DemoState | None = None
        self._timer: TimerHandle | None = None

    @property
    def current_question(self) -> str | None:
        if 0 <= self.question_index < len(self.questions):
            return self.questions[self.question_index]
        return None

    def _transition(self, new_state: DemoState) -> None:
        old_state = self.state
        self.state = new_state
        logger.info("demo_transition %s -> %s index=%s", old_state.value, new_state.value, self.question_index)
        if self.on_state_change:
            self.on_state_change(new_state)

    def _schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._timer = self.scheduler.call_later(delay_ms, callback)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def start(self) -> None:
        if self.state is not DemoState.IDLE:
            raise InvalidTransitionError(self.state.value, "start")
        self.question_index = 0
        self._begin_question()

    def _begin_question(self) -> None:
        if self.current_question is None:
            self._timer = None
            self._transition(DemoState.IDLE)
            return
        self.typed_text = ""
        self._transition(DemoState.TYPING_QUESTION)
        self._schedule(self.settings.typing_speed_ms, self._type_next)

    def _type_next(self) -> None:
        question = self.current_question or ""
        self.typed_text = question[: len(self.typed_text) + 1]
        if len(self.typed_text) < len(question):
            self._schedule(self.settings.typing_speed_ms, self._type_next)
            return
        if self.on_message:
            self.on_message(question, True)
        self._transition(DemoState.WAITING_FOR_RESPONSE)
        self._schedule(self.settings.response_delay_ms, self._respond)

    def _respond(self) -> None:
        response = self.assistant.answer_question(self.current_question or "")
        self.last_response = response
        if self.on_message:
            self.on_message(response.message, False)
        if self.on_timestamps and response.timestamps:
            self.on_timestamps([item.timestamp for item in response.timestamps])
        self._transition(DemoState.SHOWING_RESPONSE)
        self._schedule(self.settings.pause_between_questions_ms, self._advance)

    def _advance(self) -> None:
        self.question_index += 1
        self._begin_question()

    def pause(self) -> None:
        if self.state in (DemoState.IDLE, DemoState.PAUSED):
            raise InvalidTransitionError(self.state.value, "pause")
        self._cancel_timer()
        self._paused_from = self.state
        self._transition(DemoState.PAUSED)

    def resume(self) -> None:
        if self.state is not DemoState.PAUSED or self._paused_from is None:
            raise InvalidTransitionError(self.state.value, "resume")
        previous, self._paused_from = self._paused_from, None
        self._transition(previous)
        if previous is DemoState.TYPING_QUESTION:
            self._schedule(self.settings.typing_speed_ms, self._type_next)
        elif previous is DemoState.WAITING_FOR_RESPONSE:
            self._schedule(self.settings.response_delay_ms, self._respond)
        else:
            self._schedule(self.settings.pause_between_questions_ms, self._advance)

    def stop(self) -> None:
        self._cancel_timer()
        self._paused_from = None
        if self.state is not DemoState.IDLE:
            self._transition(DemoState.IDLE)

    def reset(self) -> None:
        self.stop()
        self.question_index = 0
        self.typed_text = ""
        self.last_response = None
