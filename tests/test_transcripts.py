from __future__ import annotations

import json

import pytest

from tradefit.errors import TranscriptFormatError
from tradefit.transcripts import (
    all_topics,
    format_time,
    guide_transcript,
    load_transcript,
    parse_time,
    sample_transcript,
    segment_at,
)


def test_format_time():
    assert format_time(0) == "0:00"
    assert format_time(72) == "1:12"
    assert format_time(225) == "3:45"
    assert format_time(3605) == "60:05"


def test_parse_time_inverts_format_time():
    for seconds in (0, 5, 59, 60, 125, 525, 1799, 3600):
        assert parse_time(format_time(seconds)) == seconds


@pytest.mark.parametrize("text", ["", "3:5", "3:60", "abc", "1:2:3"])
def test_parse_time_rejects_malformed(text):
    with pytest.raises(TranscriptFormatError):
        parse_time(text)


def test_sample_transcript_shape():
    transcript = sample_transcript()
    assert transcript.video_id == "kHbXbK7S188"
    assert [s.start_time for s in transcript.segments] == [75, 125, 225, 320, 390, 525]
    assert all(s.start_time < s.end_time for s in transcript.segments)


def test_guide_transcript_shape():
    transcript = guide_transcript()
    assert len(transcript.segments) == 53
    assert transcript.segments[0].start_time == 0
    assert transcript.segments[-1].end_time == 1800


def test_all_topics_first_seen_order():
    topics = all_topics(sample_transcript())
    assert topics[:5] == ["safety", "precautions", "equipment", "theory", "calculations"]
    assert len(topics) == len(set(topics))


def test_segment_at():
    assert segment_at(sample_transcript(), 225).text.startswith("In parallel circuits")
    assert segment_at(sample_transcript(), 226) is None


def test_load_transcript_rejects_duplicate_starts(tmp_path):
    path = tmp_path / "dup.json"
    segment = {"start_time": 10, "end_time": 20, "text": "x"}
    path.write_text(
        json.dumps({"title": "t", "duration": 30, "segments": [segment, segment]}),
        encoding="utf-8",
    )
    with pytest.raises(TranscriptFormatError):
        load_transcript(path)


def test_load_transcript_rejects_missing_fields(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"title": "t", "segments": []}), encoding="utf-8")
    with pytest.raises(TranscriptFormatError):
        load_transcript(path)
