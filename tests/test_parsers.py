from __future__ import annotations

import asyncio
import random
from io import BytesIO

import pytest

from tradefit.errors import ResumeExtractionError, UnsupportedResumeError
from tradefit.parsers import MOCK_RESUME_SKILLS, extract_skills, is_supported_resume


class BadFile:
    name = "broken.pdf"

    def read(self):
        raise ValueError("cannot read")


def _resume(name: str = "resume.pdf", content: bytes = b"%PDF-1.4 fake") -> BytesIO:
    payload = BytesIO(content)
    payload.name = name
    return payload


def _recording_sleep(delays: list[float]):
    async def sleep(delay: float):
        delays.append(delay)

    return sleep


def test_extract_returns_sample_of_known_skills():
    delays: list[float] = []
    skills = asyncio.run(
        extract_skills(_resume(), rng=random.Random(7), sleep=_recording_sleep(delays))
    )
    assert 6 <= len(skills) <= 10
    assert len(set(skills)) == len(skills)
    assert set(skills) <= set(MOCK_RESUME_SKILLS)
    assert len(delays) == 1
    assert 2.0 <= delays[0] <= 3.0


def test_extract_is_repeatable_with_seed():
    a = asyncio.run(extract_skills(_resume(), rng=random.Random(3), sleep=_recording_sleep([])))
    b = asyncio.run(extract_skills(_resume(), rng=random.Random(3), sleep=_recording_sleep([])))
    assert a == b


def test_parser_rejects_unsupported_type():
    with pytest.raises(UnsupportedResumeError) as excinfo:
        asyncio.run(extract_skills(_resume("resume.txt"), sleep=_recording_sleep([])))
    assert "PDF, DOC, or DOCX" in str(excinfo.value)
    assert isinstance(excinfo.value, ResumeExtractionError)


def test_parser_error_on_malformed_file():
    with pytest.raises(ResumeExtractionError):
        asyncio.run(extract_skills(BadFile(), sleep=_recording_sleep([])))


def test_supported_resume_by_extension_or_mime():
    assert is_supported_resume("CV.DOCX")
    assert is_supported_resume("upload", "application/pdf")
    assert not is_supported_resume("notes.txt", "text/plain")
    assert not is_supported_resume("")
