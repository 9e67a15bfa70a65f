from __future__ import annotations

import re
from typing import Iterable

from tradefit.config import settings
from tradefit.models import ConceptMatch, RankedTimestamp, TranscriptSegment, VideoTranscript
from tradefit.transcripts import format_time, guide_transcript

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "how", "what", "where", "when", "why", "is", "are", "was",
        "were", "do", "does", "did", "can", "could", "should", "would", "will",
    }
)

CONTEXT_LABELS = (
    ("safety", "Safety and precautions"),
    ("component", "Circuit components"),
    ("calculation", "Mathematical calculations"),
    ("practical", "Hands-on demonstration"),
    ("theory", "Theoretical concepts"),
    ("troubleshooting", "Problem solving"),
)
DEFAULT_CONTEXT = "Circuit design fundamentals"

KEYWORD_CONCEPTS = {
    "resistance": ("resistance", "resistor", "ohm", "opposition"),
    "voltage": ("voltage", "volt", "electrical pressure", "potential"),
    "current": ("current", "amp", "ampere", "electron flow"),
    "power": ("power", "watt", "energy", "consumption"),
    "ohms law": ("ohm", "law", "formula", "calculation", "equation"),
    "series": ("series", "sequence", "end-to-end"),
    "parallel": ("parallel", "side-by-side", "multiple paths"),
    "safety": ("safety", "protection", "lockout", "tagout", "ppe"),
    "troubleshooting": ("troubleshoot", "debug", "fix", "problem", "repair"),
    "multimeter": ("multimeter", "meter", "measurement", "testing"),
    "circuit protection": ("breaker", "fuse", "protection", "overcurrent"),
    "grounding": ("ground", "grounding", "bonding", "safety"),
    "motor": ("motor", "contactor", "control", "starting"),
    "transformer": ("transformer", "voltage", "turns ratio"),
    "three phase": ("three", "phase", "industrial", "commercial"),
    "wire sizing": ("wire", "size", "ampacity", "conductor"),
    "voltage drop": ("voltage", "drop", "loss", "distance"),
}

_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _tokens(text: str) -> list[str]:
    return [word for word in _NON_WORD.sub(" ", (text or "").lower()).split() if len(word) > 2]


def extract_keywords(text: str) -> list[str]:
    keywords: list[str] = []
    for word in _tokens(text):
        if word in STOP_WORDS or word in keywords:
            continue
        keywords.append(word)
    return keywords


def _in_declared_keywords(keyword: str, segment: TranscriptSegment) -> bool:
    return any(keyword in declared.lower() for declared in segment.keywords)


def find_relevant_segments(question: str, transcript: VideoTranscript) -> list[TranscriptSegment]:
    """Coarse gate: segments sharing at least one literal keyword with the question."""
    keywords = extract_keywords(question)
    relevant = []
    for segment in transcript.segments:
        text = segment.text.lower()
        if any(k in text or _in_declared_keywords(k, segment) for k in keywords):
            relevant.append(segment)
    return relevant


def relevance_score(
    keywords: list[str],
    segment: TranscriptSegment,
    watched: Iterable[int] = (),
) -> float:
    score = 0.0
    text = segment.text.lower()
    for keyword in keywords:
        if keyword in text:
            score += 0.3
        if _in_declared_keywords(keyword, segment):
            score += 0.2

    for topic in segment.topics:
        topic_lower = topic.lower()
        for keyword in keywords:
            if keyword in topic_lower:
                score += 0.4

    if segment.start_time not in set(watched):
        score += 0.1
    return _clamp(score)


def describe_segment(segment: TranscriptSegment, question: str) -> str:
    text_lower = segment.text.lower()
    for keyword in extract_keywords(question):
        index = text_lower.find(keyword)
        if index != -1:
            start = max(0, index - 50)
            end = min(len(segment.text), index + 50)
            return segment.text[start:end] + "..."
    return segment.text[:100] + "..."


def context_description(segment: TranscriptSegment) -> str:
    topics = [topic.lower() for topic in segment.topics]
    for key, label in CONTEXT_LABELS:
        if any(key in topic for topic in topics):
            return label
    return DEFAULT_CONTEXT


def rank_timestamps(
    question: str,
    segments: Iterable[TranscriptSegment],
    watched: Iterable[int] = (),
    threshold: float | None = None,
) -> list[RankedTimestamp]:
    threshold = settings.relevance_threshold if threshold is None else threshold
    keywords = extract_keywords(question)
    watched = set(watched)
    ranked = [
        RankedTimestamp(
            timestamp=segment.start_time,
            relevance_score=relevance_score(keywords, segment, watched),
            description=describe_segment(segment, question),
            context=context_description(segment),
        )
        for segment in segments
    ]
    ranked = [item for item in ranked if item.relevance_score > threshold]
    ranked.sort(key=lambda item: item.relevance_score, reverse=True)
    return ranked


def _concept_score(query_lower: str, words: list[str], segment: TranscriptSegment) -> float:
    score = 0.0
    text = segment.text.lower()
    topics = [topic.lower() for topic in segment.topics]

    for word in words:
        score += text.count(word) * 0.3

    for topic in topics:
        for word in words:
            if word in topic:
                score += 0.5

    for related in KEYWORD_CONCEPTS.values():
        concept_hit = any(r in word or word in r for word in words for r in related)
        if not concept_hit:
            continue
        if any(r in topic for topic in topics for r in related):
            score += 0.8
        if any(r in text for r in related):
            score += 0.4

    if "calculate" in query_lower:
        if "formula" in text or "equals" in text or "calculate" in text:
            score += 1.0
    if "safety" in query_lower or "safe" in query_lower:
        if any("safety" in topic or "protection" in topic for topic in topics):
            score += 0.9
    if "troubleshoot" in query_lower or "fix" in query_lower or "problem" in query_lower:
        if any("troubleshoot" in topic or "testing" in topic for topic in topics):
            score += 0.9
    return score


def concept_search(
    query: str,
    transcript: VideoTranscript | None = None,
    limit: int = 8,
) -> list[ConceptMatch]:
    """Concept-mapped search across a long transcript; relevance is score / 3, capped at 1."""
    transcript = transcript or guide_transcript()
    query_lower = (query or "").lower()
    words = _tokens(query_lower)

    scored: list[tuple[TranscriptSegment, float]] = []
    for segment in transcript.segments:
        score = _concept_score(query_lower, words, segment)
        if score > 0:
            scored.append((segment, score))
    scored.sort(key=lambda pair: pair[1], reverse=True)

    return [
        ConceptMatch(
            timestamp=segment.start_time,
            time_display=format_time(segment.start_time),
            relevance=min(score / 3.0, 1.0),
            preview=segment.text if len(segment.text) <= 100 else segment.text[:97] + "...",
        )
        for segment, score in scored[:limit]
    ]
