from __future__ import annotations

import logging
import re
import time
from functools import lru_cache

from openai import APIConnectionError, APITimeoutError, AuthenticationError, OpenAI, PermissionDeniedError

from app.core.config import settings
from app.schemas.normalized import Resume

logger = logging.getLogger(__name__)

MAX_PROMPT_JD_CHARS = 15_000
MIN_RESPONSE_CHARS = 100

_FENCE_RE = re.compile(r"```.*?```", re.DOTALL)
_HEADING_MARK_RE = re.compile(r"^#+\s*", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*")


class LLMAdapterError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def resume_llm_enabled() -> bool:
    if not settings.llm_enabled:
        return False
    token = (settings.hf_token or "").strip()
    if not token or _looks_like_placeholder(token):
        return False
    return True


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    # Retries are handled by transform_with_llm so auth errors are never retried.
    return OpenAI(
        api_key=(settings.hf_token or "").strip(),
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_s,
        max_retries=0,
    )


def build_resume_structure(resume: Resume) -> str:
    lines = [f"NAME: {resume.name}", "", "CONTACT:"]
    contact = resume.contact
    for label, value in (
        ("Email", contact.email),
        ("Phone", contact.phone),
        ("LinkedIn", contact.linkedin),
        ("Portfolio", contact.portfolio),
        ("GitHub", contact.github),
    ):
        if value:
            lines.append(f"{label}: {value}")
    lines += ["", "PROFESSIONAL SUMMARY:", resume.summary, "", "EXPERIENCE:"]
    for entry in resume.experience:
        lines.append(f"{entry.title} — {entry.company}")
        lines.append(f"{entry.start_date} – {entry.end_date}")
        lines.extend(f"• {bullet}" for bullet in entry.bullets)
        lines.append("")
    lines.append("EDUCATION:")
    for entry in resume.education:
        lines.append(f"{entry.degree} — {entry.university}")
        lines.append(f"{entry.years} | {entry.location}")
        lines.append("")
    lines.append("SKILLS:")
    for label, values in (
        ("Programming", resume.skills.programming),
        ("Tools", resume.skills.tools),
        ("Databases", resume.skills.databases),
        ("Cloud", resume.skills.cloud),
        ("Others", resume.skills.others),
    ):
        if values:
            lines.append(f"{label}: {', '.join(values)}")
    lines.append("")
    if resume.achievements:
        lines.append("ACHIEVEMENTS:")
        lines.extend(f"• {item}" for item in resume.achievements)
        lines.append("")
    if resume.projects:
        lines.append("PROJECTS:")
        for project in resume.projects:
            lines.append(project.title)
            lines.append(f"• {project.description}")
            lines.append(f"• {project.contribution}")
            lines.append(f"• {project.tech_stack}")
            lines.append("")
    if resume.certifications:
        lines.append("CERTIFICATIONS:")
        lines.extend(f"• {item}" for item in resume.certifications)
        lines.append("")
    return "\n".join(lines)


def build_prompt(resume: Resume, job_description: str) -> str:
    jd = job_description
    if len(jd) > MAX_PROMPT_JD_CHARS:
        jd = jd[:MAX_PROMPT_JD_CHARS] + "..."
    return f"""You are an expert resume writer and ATS (Applicant Tracking System) specialist. Rewrite the resume below so its terminology matches the job description.

Rules:
1. Start the Professional Summary with the exact job title from the job description.
2. Use the exact spelling and casing of every technology named in the job description.
3. In experience bullets, replace generic terms with the job description's terms.
4. List job description technologies first in each skills category.
5. Keep every fact unchanged: names, companies, dates, achievements and metrics. Never invent numbers.
6. Replace weak verbs with strong action verbs used in the job description.

Output format (follow exactly, plain text, no markdown):
[NAME]

[Email] | [Phone] | [LinkedIn] | [Portfolio] | [GitHub]

PROFESSIONAL SUMMARY

[2-3 lines]

WORK EXPERIENCE

[Job Title] — [Start Date] – [End Date]
[COMPANY NAME]
• [Bullet]

EDUCATION

[Degree] — [Start Year] – [End Year]
[University]

SKILLS

• Programming: [list]
• Tools & Tech: [list]
• Databases: [list]
• Cloud: [list]
• Others: [list]

ACHIEVEMENTS

• [Achievement]

[PROJECTS, CERTIFICATIONS and LINKS sections if applicable]

CURRENT RESUME:
{build_resume_structure(resume)}

TARGET JOB DESCRIPTION:
{jd}

Return ONLY the rewritten resume in the format above, with no explanations."""


def clean_response(content: str) -> str:
    cleaned = _FENCE_RE.sub("", content.strip())
    cleaned = _HEADING_MARK_RE.sub("", cleaned)
    cleaned = _BOLD_RE.sub("", cleaned).strip()
    if len(cleaned) < MIN_RESPONSE_CHARS:
        raise LLMAdapterError("LLM response too short after cleaning.", code="llm_short_response")
    return cleaned[: settings.max_resume_chars]


def _complete(prompt: str) -> str:
    response = _client().chat.completions.create(
        model=settings.llm_model,
        messages=[{"role": "user", "content": prompt}],
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    content = response.choices[0].message.content if response.choices else ""
    if not content or not isinstance(content, str):
        raise LLMAdapterError("No content in LLM response.", code="llm_empty_response")
    return content


def _request_with_retries(prompt: str) -> str:
    attempts = max(0, settings.llm_max_retries) + 1
    for attempt in range(attempts):
        if attempt > 0:
            # 1s, 2s, ...
            time.sleep(float(attempt))
            logger.info("resume_llm_retry attempt=%s", attempt)
        try:
            return _complete(prompt)
        except (AuthenticationError, PermissionDeniedError) as exc:
            raise LLMAdapterError("Authentication failed with LLM service.", code="llm_auth") from exc
        except (APIConnectionError, APITimeoutError) as exc:
            if attempt + 1 >= attempts:
                raise LLMAdapterError("LLM service unreachable.", code="llm_network") from exc
    raise LLMAdapterError("LLM transformation failed after retries.", code="llm_network")


def transform_with_llm(resume: Resume, job_description: str) -> str | None:
    """Ask the remote model for the canonical text document.

    Returns ``None`` on any failure so the caller can use the rule-based path.
    """
    if not resume_llm_enabled():
        return None
    if len(job_description.strip()) < settings.min_jd_chars:
        return None

    started = time.perf_counter()
    prompt = build_prompt(resume, job_description)
    try:
        document = clean_response(_request_with_retries(prompt))
    except LLMAdapterError as exc:
        logger.warning(
            "resume_llm_failed code=%s model=%s latency_ms=%s",
            exc.code,
            settings.llm_model,
            int((time.perf_counter() - started) * 1000),
        )
        return None
    except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
        logger.warning("resume_llm_failed code=llm_exception model=%s: %s", settings.llm_model, type(exc).__name__)
        return None

    logger.info(
        "resume_llm_completed model=%s chars=%s latency_ms=%s",
        settings.llm_model,
        len(document),
        int((time.perf_counter() - started) * 1000),
    )
    return document
