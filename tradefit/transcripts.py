"""Static training-video transcripts and minutes:seconds helpers."""
from __future__ import annotations

import json
import logging
import math
import re
from functools import lru_cache
from pathlib import Path

from tradefit.config import DATA_DIR
from tradefit.errors import TranscriptFormatError
from tradefit.models import TranscriptSegment, VideoTranscript

logger = logging.getLogger(__name__)

TRANSCRIPTS_DIR = DATA_DIR / "transcripts"
SAMPLE_TRANSCRIPT_PATH = TRANSCRIPTS_DIR / "circuit_design_fundamentals.json"
GUIDE_TRANSCRIPT_PATH = TRANSCRIPTS_DIR / "circuit_design_guide.json"

_TIME_PATTERN = re.compile(r"^\s*(\d+):([0-5]\d)\s*$")


def format_time(seconds: float) -> str:
    mins = int(math.floor(seconds / 60))
    secs = int(math.floor(seconds % 60))
    return f"{mins}:{secs:02d}"


def parse_time(text: str) -> int:
    """Inverse of format_time: "3:45" -> 225."""
    match = _TIME_PATTERN.match(text or "")
    if match is None:
        raise TranscriptFormatError(f"Expected M:SS, got {text!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def _segment(item: dict) -> TranscriptSegment:
    return TranscriptSegment(
        start_time=int(item["start_time"]),
        end_time=int(item["end_time"]),
        text=str(item["text"]),
        keywords=tuple(item.get("keywords", ())),
        topics=tuple(item.get("topics", ())),
    )


def load_transcript(path: Path) -> VideoTranscript:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    try:
        segments = tuple(_segment(item) for item in raw["segments"])
        transcript = VideoTranscript(
            title=raw["title"],
            duration=int(raw["duration"]),
            segments=segments,
            video_id=raw.get("video_id", ""),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise TranscriptFormatError(f"Malformed transcript '{path.name}': {exc}") from exc

    starts = [segment.start_time for segment in segments]
    if len(set(starts)) != len(starts):
        raise TranscriptFormatError(f"Duplicate segment start times in '{path.name}'")
    logger.debug("transcript_loaded title=%r segments=%s", transcript.title, len(segments))
    return transcript


@lru_cache(maxsize=1)
def sample_transcript() -> VideoTranscript:
    return load_transcript(SAMPLE_TRANSCRIPT_PATH)


@lru_cache(maxsize=1)
def guide_transcript() -> VideoTranscript:
    return load_transcript(GUIDE_TRANSCRIPT_PATH)


def all_topics(transcript: VideoTranscript) -> list[str]:
    seen: dict[str, None] = {}
    for segment in transcript.segments:
        for topic in segment.topics:
            seen.setdefault(topic, None)
    return list(seen)


def segment_at(transcript: VideoTranscript, start_time: int) -> TranscriptSegment | None:
    for segment in transcript.segments:
        if segment.start_time == start_time:
            return segment
    return None
