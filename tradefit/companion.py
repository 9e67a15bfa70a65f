"""Video assistant: answers free-text questions with ranked transcript timestamps.

Answers are resolved in order: the scripted demo questions, the vague-question
guard, then keyword ranking over the transcript. Follow-up suggestions are
sampled from a per-category pool, so a seeded ``random.Random`` is needed for
repeatable output.
"""
from __future__ import annotations

import copy
import logging
import random
from typing import Iterable

from tradefit.config import Settings, settings as default_settings
from tradefit.models import RankedTimestamp, TranscriptSegment, VideoResponse, VideoTranscript
from tradefit.ranking import extract_keywords, find_relevant_segments, rank_timestamps
from tradefit.transcripts import all_topics, format_time, sample_transcript

logger = logging.getLogger(__name__)

VAGUE_PHRASES = frozenset({"what", "how", "tell me", "explain", "about"})

CLARIFICATION_EXAMPLES = (
    "How do series circuits work?",
    "What safety equipment do I need?",
    "How do I calculate voltage in a parallel circuit?",
)

FOLLOW_UP_POOLS = {
    "circuit-basics": (
        "What safety equipment do I need for circuit work?",
        "How do I calculate voltage in a parallel circuit?",
        "What tools are essential for circuit design?",
    ),
    "components": (
        "How do resistors affect current flow?",
        "When should I use capacitors in my circuit?",
        "What's the difference between AC and DC components?",
    ),
    "safety": (
        "What are the most common circuit design mistakes?",
        "How do I test if my circuit is safe?",
        "What voltage levels require special precautions?",
    ),
    "calculations": (
        "Can you show me more examples of Ohm's law?",
        "How do I calculate power consumption?",
        "What's the best way to measure circuit values?",
    ),
    "general": (
        "What are the fundamental circuit design principles?",
        "How do I troubleshoot a circuit that isn't working?",
        "What should beginners know about circuit safety?",
    ),
}

QUESTION_CATEGORIES = (
    ("safety", ("safety", "danger", "precaution")),
    ("components", ("resistor", "capacitor", "component")),
    ("calculations", ("calculate", "formula", "ohm")),
    ("circuit-basics", ("circuit", "series", "parallel")),
)

DEMO_QUESTIONS: dict[str, VideoResponse] = {
    "When the breaker is turned on, which wire does it feed first?": VideoResponse(
        message=(
            "Great question about breaker wiring! When a breaker is turned on, it feeds the hot (live) "
            "wire first. This is a fundamental concept in electrical safety and circuit operation.\n\n"
            "Jumping to 1:12 where this is demonstrated exactly!"
        ),
        timestamps=[
            RankedTimestamp(
                timestamp=72,
                relevance_score=0.98,
                description="Breaker operation and wire feed sequence - shows exactly which wire gets power first",
                context="Safety and circuit fundamentals",
            )
        ],
        suggested_questions=[
            "What happens if the breaker trips?",
            "How do you safely reset a breaker?",
        ],
        should_auto_play=True,
        confidence=0.95,
    ),
    "How do I calculate voltage in a parallel circuit?": VideoResponse(
        message=(
            "I found relevant information about your question:\n\n"
            "• [3:45] In parallel circuits, voltage remains constant across all branches, but current divides. To calculate...\n"
            "• [5:20] When analyzing parallel circuits, remember that each path provides an independent route for current...\n\n"
            "I recommend starting at 3:45 for the most comprehensive explanation."
        ),
        timestamps=[
            RankedTimestamp(
                timestamp=225,
                relevance_score=0.95,
                description="In parallel circuits, voltage remains constant across all branches, but current divides. To calculate...",
                context="Circuit design fundamentals",
            ),
            RankedTimestamp(
                timestamp=320,
                relevance_score=0.85,
                description="When analyzing parallel circuits, remember that each path provides an independent route for current...",
                context="Circuit design fundamentals",
            ),
        ],
        suggested_questions=[
            "What tools are essential for circuit design?",
            "How do I calculate power consumption?",
        ],
        should_auto_play=True,
        confidence=0.9,
    ),
    "What safety equipment do I need?": VideoResponse(
        message=(
            "I found relevant information about your question:\n\n"
            "• [1:15] Safety is paramount when working with electrical circuits. Always wear safety glasses, use insulated...\n\n"
            "Jumping to 1:15 where this topic is covered in detail."
        ),
        timestamps=[
            RankedTimestamp(
                timestamp=75,
                relevance_score=0.98,
                description="Safety is paramount when working with electrical circuits. Always wear safety glasses, use insulated...",
                context="Safety and precautions",
            )
        ],
        suggested_questions=[
            "What are the most common circuit design mistakes?",
            "What voltage levels require special precautions?",
        ],
        should_auto_play=True,
        confidence=0.95,
    ),
    "Can you explain Ohm's law?": VideoResponse(
        message=(
            "I found relevant information about your question:\n\n"
            "• [2:05] Ohm's law is the foundation of circuit analysis. It states that voltage equals current times...\n"
            "• [6:30] Practical application of Ohm's law: If you have a 12-volt battery and a 4-ohm resistor...\n"
            "• [8:45] Advanced Ohm's law applications include power calculations. Power equals voltage times current...\n\n"
            "I recommend starting at 2:05 for the most comprehensive explanation."
        ),
        timestamps=[
            RankedTimestamp(
                timestamp=125,
                relevance_score=0.95,
                description="Ohm's law is the foundation of circuit analysis. It states that voltage equals current times...",
                context="Theoretical concepts",
            ),
            RankedTimestamp(
                timestamp=390,
                relevance_score=0.85,
                description="Practical application of Ohm's law: If you have a 12-volt battery and a 4-ohm resistor...",
                context="Hands-on demonstration",
            ),
            RankedTimestamp(
                timestamp=525,
                relevance_score=0.80,
                description="Advanced Ohm's law applications include power calculations. Power equals voltage times current...",
                context="Mathematical calculations",
            ),
        ],
        suggested_questions=[
            "How do I calculate power consumption?",
            "What's the best way to measure circuit values?",
        ],
        should_auto_play=True,
        confidence=0.92,
    ),
}


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def demo_questions() -> list[str]:
    return list(DEMO_QUESTIONS)


def lookup_demo_answer(question: str) -> VideoResponse | None:
    lowered = (question or "").lower()
    for scripted_question, response in DEMO_QUESTIONS.items():
        if scripted_question.lower() == lowered:
            return copy.deepcopy(response)
    return None


def is_question_too_vague(question: str) -> bool:
    lowered = (question or "").lower()
    return (
        len(lowered.split(" ")) < 3
        or lowered in VAGUE_PHRASES
        or len(lowered.strip()) < 10
    )


def categorize_question(question: str) -> str:
    lowered = (question or "").lower()
    for category, needles in QUESTION_CATEGORIES:
        if any(needle in lowered for needle in needles):
            return category
    return "general"


class VideoAssistant:
    def __init__(
        self,
        transcript: VideoTranscript | None = None,
        rng: random.Random | None = None,
        settings: Settings | None = None,
        use_demo_answers: bool = True,
    ):
        self.transcript = transcript or sample_transcript()
        self.settings = settings or default_settings
        self.rng = rng or random.Random(self.settings.random_seed)
        self.use_demo_answers = use_demo_answers

    def answer_question(self, question: str, watched: Iterable[int] = ()) -> VideoResponse:
        question = question or ""
        if self.use_demo_answers:
            scripted = lookup_demo_answer(question)
            if scripted is not None:
                logger.info("question_answered branch=demo timestamps=%s", len(scripted.timestamps))
                return scripted

        if is_question_too_vague(question):
            logger.info("question_answered branch=vague chars=%s", len(question))
            return self._clarification()

        relevant = find_relevant_segments(question, self.transcript)
        ranked = rank_timestamps(
            question, relevant, watched, threshold=self.settings.relevance_threshold
        )
        if not ranked:
            logger.info("question_answered branch=no_match candidates=%s", len(relevant))
            return self._no_relevant_content(question)

        top = ranked[: self.settings.max_timestamps]
        response = VideoResponse(
            message=self.compose_message(self._segments_for(top)),
            timestamps=top,
            suggested_questions=self.suggest_follow_ups(question),
            should_auto_play=top[0].relevance_score > self.settings.autoplay_threshold,
            confidence=self.confidence(question, top),
        )
        logger.info(
            "question_answered branch=ranked candidates=%s ranked=%s top=%s confidence=%.2f",
            len(relevant),
            len(ranked),
            top[0].timestamp,
            response.confidence,
        )
        return response

    def _segments_for(self, ranked: list[RankedTimestamp]) -> list[TranscriptSegment]:
        by_start = {segment.start_time: segment for segment in self.transcript.segments}
        return [by_start[item.timestamp] for item in ranked if item.timestamp in by_start]

    def compose_message(self, segments: list[TranscriptSegment]) -> str:
        if not segments:
            return (
                "I couldn't find specific information about that in this video. "
                "Try asking about circuit basics, components, or safety procedures."
            )

        top_segments = segments[:3]
        lines = ["I found relevant information about your question:", ""]
        for segment in top_segments:
            lines.append(f"• [{format_time(segment.start_time)}] {segment.text[:80]}...")

        best = format_time(top_segments[0].start_time)
        if len(top_segments) == 1:
            closing = f"Jumping to {best} where this topic is covered in detail."
        else:
            closing = f"I recommend starting at {best} for the most comprehensive explanation."
        return "\n".join(lines) + "\n\n" + closing

    def confidence(self, question: str, timestamps: list[RankedTimestamp]) -> float:
        if not timestamps:
            return 0.1
        average = sum(item.relevance_score for item in timestamps) / len(timestamps)
        return _clamp(average + len(extract_keywords(question)) * 0.1)

    def suggest_follow_ups(self, question: str) -> list[str]:
        pool = FOLLOW_UP_POOLS[categorize_question(question)]
        # Each suggestion survives with probability keep_rate.
        drop_below = 1.0 - self.settings.follow_up_keep_rate
        kept = [suggestion for suggestion in pool if self.rng.random() > drop_below]
        return kept[: self.settings.max_follow_ups]

    def _clarification(self) -> VideoResponse:
        examples = "\n".join(f'• "{example}"' for example in CLARIFICATION_EXAMPLES)
        return VideoResponse(
            message=f"Could you be more specific? For example, you could ask:\n{examples}",
            timestamps=[],
            suggested_questions=list(CLARIFICATION_EXAMPLES),
            should_auto_play=False,
            confidence=0.2,
        )

    def _no_relevant_content(self, question: str) -> VideoResponse:
        topics = all_topics(self.transcript)[:5]
        listing = "\n".join(f"• {topic}" for topic in topics)
        return VideoResponse(
            message=(
                f'I couldn\'t find specific information about "{question}" in this video. '
                f"However, this video covers these related topics:\n\n{listing}"
            ),
            timestamps=[],
            suggested_questions=[f"Tell me about {topic.lower()}" for topic in topics[:3]],
            should_auto_play=False,
            confidence=0.1,
        )


def answer_question(
    question: str,
    watched: Iterable[int] = (),
    rng: random.Random | None = None,
) -> VideoResponse:
    """Answer against the sample transcript; each call gets its own assistant."""
    return VideoAssistant(rng=rng).answer_question(question, watched)
