from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

from tradefit.config import settings
from tradefit.errors import ResumeExtractionError, UnsupportedResumeError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx")

MOCK_RESUME_SKILLS = (
    "Problem-solving",
    "Attention to detail",
    "Customer service",
    "Time management",
    "Communication skills",
    "Project management",
    "Quality control",
    "Mathematical skills",
    "Technical documentation",
    "Safety awareness",
    "Manual dexterity",
)


def is_supported_resume(filename: str, content_type: str | None = None) -> bool:
    if content_type and content_type in ALLOWED_CONTENT_TYPES:
        return True
    return (filename or "").lower().endswith(ALLOWED_EXTENSIONS)


async def extract_skills(
    file,
    rng: random.Random | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> list[str]:
    """Simulated resume analysis: a 6-10 skill sample of the canned list after a short delay.

    ``file`` is any object with ``read()`` and ``name`` (Streamlit's UploadedFile works);
    an optional ``type`` attribute is checked as a MIME type.
    """
    rng = rng or random.Random()
    filename = getattr(file, "name", "") or ""
    content_type = getattr(file, "type", None)
    if not is_supported_resume(filename, content_type):
        raise UnsupportedResumeError(filename, content_type)

    try:
        payload = file.read()
    except (OSError, ValueError) as exc:
        logger.warning("resume_read_failed file=%s: %s", filename, exc)
        raise ResumeExtractionError(f"Error processing resume '{filename}'. Please try again.") from exc

    delay = rng.uniform(settings.resume_delay_min_s, settings.resume_delay_max_s)
    await sleep(delay)

    shuffled = list(MOCK_RESUME_SKILLS)
    rng.shuffle(shuffled)
    skills = shuffled[: rng.randint(6, 10)]
    logger.info(
        "resume_extracted file=%s bytes=%s skills=%s delay=%.2fs",
        filename,
        len(payload or b""),
        len(skills),
        delay,
    )
    return skills
