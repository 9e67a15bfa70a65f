from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Category = Literal["basic", "intermediate", "advanced"]
Priority = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class Skill:
    name: str
    category: Category
    importance: int


@dataclass
class SkillGap:
    skill: str
    current_level: int
    required_level: int


@dataclass
class SkillJourneyNode:
    skill: str
    current_level: int
    target_level: int
    priority: Priority
    estimated_hours: int
    prerequisites: list[str] = field(default_factory=list)


@dataclass
class QuestionAnswers:
    motivation: str = ""
    hands_on: str = ""
    physical_work: str = ""
    problem_solving: str = ""
    availability: str = ""


@dataclass
class CompatibilityResult:
    score: int
    gaps: list[SkillGap]


@dataclass(frozen=True)
class TranscriptSegment:
    start_time: int
    end_time: int
    text: str
    keywords: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()


@dataclass(frozen=True)
class VideoTranscript:
    title: str
    duration: int
    segments: tuple[TranscriptSegment, ...]
    video_id: str = ""


@dataclass
class RankedTimestamp:
    timestamp: int
    relevance_score: float
    description: str
    context: str


@dataclass
class VideoResponse:
    message: str
    timestamps: list[RankedTimestamp]
    suggested_questions: list[str]
    should_auto_play: bool
    confidence: float


@dataclass
class ConceptMatch:
    timestamp: int
    time_display: str
    relevance: float
    preview: str
