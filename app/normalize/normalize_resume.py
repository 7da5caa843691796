from __future__ import annotations

import logging

from app.core.config import settings
from app.schemas.normalized import Resume
from app.schemas.normalized.resume import PLACEHOLDER_NAME, PLACEHOLDER_SUMMARY
from app.taxonomy import LocalTaxonomy

from .extractors import (
    MAX_SUMMARY_CHARS,
    ExtractionContext,
    extract_achievements,
    extract_certifications,
    extract_contact,
    extract_education,
    extract_experience,
    extract_name,
    extract_projects,
    extract_skills,
    extract_summary,
)
from .utils import clamp_text, normalize_line

logger = logging.getLogger(__name__)


def minimal_resume(text: str) -> Resume:
    """Smallest valid record built straight from the raw text."""
    clean = (text or "").strip()
    first_line = next((normalize_line(line) for line in clean.split("\n") if line.strip()), "")
    return Resume(
        name=first_line[:80].upper() if first_line else PLACEHOLDER_NAME,
        summary=clean[:MAX_SUMMARY_CHARS] if clean else PLACEHOLDER_SUMMARY,
    )


def parse_resume(
    text: str,
    *,
    log: logging.Logger | None = None,
    taxonomy: LocalTaxonomy | None = None,
) -> Resume:
    """Turn raw resume text into a structured Resume.

    Each field is extracted independently and degrades to its placeholder.
    An unexpected failure of the whole pass yields ``minimal_resume(text)``
    instead of an exception.
    """
    active = log or logger
    clean = clamp_text(text, settings.max_resume_chars)
    try:
        ctx = ExtractionContext.from_text(clean, max_lines=settings.max_resume_lines, log=active)
        resume = Resume(
            name=extract_name(ctx),
            contact=extract_contact(ctx),
            summary=extract_summary(ctx),
            experience=extract_experience(ctx),
            education=extract_education(ctx),
            skills=extract_skills(ctx, taxonomy),
            achievements=extract_achievements(ctx),
            projects=extract_projects(ctx),
            certifications=extract_certifications(ctx),
        )
    except Exception as exc:  # noqa: BLE001 - parsing must always produce a record
        active.warning("resume_parse_failed chars=%s: %s", len(clean), exc)
        return minimal_resume(clean)

    active.info(
        "resume_parsed chars=%s experience=%s education=%s projects=%s skills=%s",
        len(clean),
        len(resume.experience),
        len(resume.education),
        len(resume.projects),
        len(resume.skills.all_skills()),
    )
    return resume
