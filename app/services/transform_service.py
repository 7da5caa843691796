from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from app.core.config import settings
from app.normalize.normalize_jd import analyze_job_description
from app.normalize.normalize_resume import parse_resume
from app.schemas.normalized import KeywordProfile, Resume
from app.services.formatter import format_resume
from app.services.optimizer import optimize_resume
from app.services.resume_llm import resume_llm_enabled, transform_with_llm

logger = logging.getLogger(__name__)

MIN_SUMMARY_CHARS = 20
MIN_DOCUMENT_CHARS = 50
FALLBACK_SUMMARY = "Experienced professional with relevant skills and expertise."

STRATEGY_RULE_BASED = "rule_based"
STRATEGY_LLM = "llm"


class TransformInputError(ValueError):
    """Client input that is missing, too short or too long."""


@dataclass(frozen=True)
class TransformResult:
    document: str
    strategy: str
    processing_ms: int
    job_title: str = ""


def validate_transform_input(resume_text: str | None, job_description: str | None) -> tuple[str, str]:
    if not resume_text or not isinstance(resume_text, str):
        raise TransformInputError("Resume text is required")
    if not job_description or not isinstance(job_description, str):
        raise TransformInputError("Job description is required")

    resume_clean = resume_text.strip()
    jd_clean = job_description.strip()
    if len(resume_clean) < settings.min_resume_chars:
        raise TransformInputError(
            f"Resume text is too short. Minimum {settings.min_resume_chars} characters required."
        )
    if len(resume_clean) > settings.max_resume_chars:
        raise TransformInputError(
            f"Resume text is too long. Maximum {settings.max_resume_chars} characters allowed."
        )
    if len(jd_clean) < settings.min_jd_chars:
        raise TransformInputError(
            f"Job description is too short. Minimum {settings.min_jd_chars} characters required."
        )
    if len(jd_clean) > settings.max_jd_chars:
        raise TransformInputError(
            f"Job description is too long. Maximum {settings.max_jd_chars} characters allowed."
        )
    return resume_clean, jd_clean


def rule_based_document(
    resume: Resume,
    job_description: str,
    profile: KeywordProfile | None = None,
) -> str:
    """Analyze the JD, optimize the record and serialise it."""
    active_profile = profile if profile is not None else analyze_job_description(job_description)
    optimized = optimize_resume(resume, active_profile, job_description)
    return format_resume(optimized)


def _with_usable_summary(resume: Resume, raw_text: str) -> Resume:
    if resume.summary and len(resume.summary) >= MIN_SUMMARY_CHARS:
        return resume
    return resume.model_copy(update={"summary": raw_text[:500] or FALLBACK_SUMMARY})


async def _llm_document(resume: Resume, job_description: str) -> str | None:
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(transform_with_llm, resume, job_description),
            timeout=settings.llm_timeout_s,
        )
    except asyncio.TimeoutError:
        logger.warning("resume_llm_failed code=llm_timeout timeout_s=%s", settings.llm_timeout_s)
        return None


async def transform_resume_text(resume_text: str | None, job_description: str | None) -> TransformResult:
    """Full pipeline from raw resume text to the canonical text document.

    Raises ``TransformInputError`` for bad input; every later failure falls
    back to the rule-based document.
    """
    started = time.perf_counter()
    resume_clean, jd_clean = validate_transform_input(resume_text, job_description)

    resume = _with_usable_summary(parse_resume(resume_clean), resume_clean)

    document: str | None = None
    strategy = STRATEGY_RULE_BASED
    if resume_llm_enabled():
        document = await _llm_document(resume, jd_clean)
        if document and len(document) >= 100:
            strategy = STRATEGY_LLM
        else:
            document = None

    if document is None:
        document = rule_based_document(resume, jd_clean)
    if len(document) < MIN_DOCUMENT_CHARS:
        logger.info("resume_transform_short_output chars=%s strategy=%s", len(document), strategy)

    processing_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "resume_transform_completed strategy=%s processing_ms=%s chars=%s",
        strategy,
        processing_ms,
        len(document),
    )
    return TransformResult(document=document, strategy=strategy, processing_ms=processing_ms)


def transform_structured_resume(resume: Resume, job_description: str) -> TransformResult:
    """Optimize and format an already structured record."""
    started = time.perf_counter()
    jd_clean = (job_description or "").strip()
    if len(jd_clean) < settings.min_jd_chars:
        raise TransformInputError(
            f"Job description is too short. Minimum {settings.min_jd_chars} characters required."
        )
    if len(jd_clean) > settings.max_jd_chars:
        raise TransformInputError(
            f"Job description is too long. Maximum {settings.max_jd_chars} characters allowed."
        )

    profile = analyze_job_description(jd_clean)
    document = rule_based_document(resume, jd_clean, profile)
    processing_ms = int((time.perf_counter() - started) * 1000)
    logger.info("resume_transform_structured_completed processing_ms=%s chars=%s", processing_ms, len(document))
    return TransformResult(
        document=document,
        strategy=STRATEGY_RULE_BASED,
        processing_ms=processing_ms,
        job_title=profile.role_title,
    )
