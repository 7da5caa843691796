from __future__ import annotations

import logging
import re

from app.core.config import settings
from app.schemas.normalized import KeywordProfile
from app.taxonomy import LocalTaxonomy, get_default_taxonomy_provider
from app.taxonomy.terms import dedupe_casefold

from .utils import clamp_text, normalize_line

logger = logging.getLogger(__name__)

MAX_REQUIREMENTS = 10

_ROLE_NOUNS = r"developer|engineer|analyst|specialist|manager|architect|consultant|scientist|designer|lead"
_WORD = r"[A-Za-z][\w/+.#&-]*"

# Tried in order; the first capture wins.
_ROLE_PATTERNS = (
    re.compile(
        rf"\b(?:seeking|looking\s+for|hiring|position|role|title|opening)\b[ \t:]+"
        rf"((?:{_WORD}[ \t]+){{0,4}}?(?:{_ROLE_NOUNS}))\b",
        re.IGNORECASE,
    ),
    re.compile(rf"^[ \t]*([A-Z][\w/+.#&-]*(?:[ \t]+{_WORD}){{0,4}}?[ \t]+(?i:{_ROLE_NOUNS}))\b", re.MULTILINE),
    re.compile(
        r"\b((?:power[ \t]*bi|business[ \t]+intelligence|bi)[ \t]+(?:developer|analyst|specialist|engineer|consultant))\b",
        re.IGNORECASE,
    ),
    re.compile(rf"\bas[ \t]+an?[ \t]+((?:{_WORD}[ \t]+){{0,4}}?(?:developer|engineer|analyst|specialist))\b", re.IGNORECASE),
)
_ARTICLE_RE = re.compile(r"^(?:a|an|the)\s+", re.IGNORECASE)
_ROLE_WORD_RE = re.compile(
    r"\b(?:developer|engineer|analyst|specialist|manager|architect|consultant|lead|senior|junior|"
    r"full[\s-]?stack|front[\s-]?end|back[\s-]?end)\b",
    re.IGNORECASE,
)
_REQUIREMENT_RE = re.compile(
    r"\b(?:must|required|requires|should|need|needs|essential)\b[^.!?\n]*[.!?]",
    re.IGNORECASE,
)


def extract_role_title(text: str) -> str:
    for pattern in _ROLE_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return _ARTICLE_RE.sub("", normalize_line(match.group(1)))
    return ""


def _technologies(text: str, tax: LocalTaxonomy) -> list[str]:
    found: list[str] = []
    # Group order puts BI terms first.
    for pattern in tax.jd_technology_patterns.values():
        if pattern is None:
            continue
        found.extend(tax.canonical_term(match.group(0)) for match in pattern.finditer(text))
    return dedupe_casefold(found)


def _skills(text: str, tax: LocalTaxonomy) -> list[str]:
    found: list[str] = []
    for pattern in tax.jd_skill_patterns.values():
        if pattern is None:
            continue
        found.extend(normalize_line(match.group(0)).lower() for match in pattern.finditer(text))
    return dedupe_casefold(found)


def _action_verbs(lowered: str, tax: LocalTaxonomy) -> list[str]:
    return [verb for verb in tax.action_verbs if re.search(rf"\b{re.escape(verb)}", lowered)]


def _requirements(text: str) -> list[str]:
    sentences = (normalize_line(match.group(0)) for match in _REQUIREMENT_RE.finditer(text))
    return dedupe_casefold(sentences)[:MAX_REQUIREMENTS]


def analyze_job_description(text: str, taxonomy: LocalTaxonomy | None = None) -> KeywordProfile:
    """Scan a job description into a keyword profile.

    No match anywhere is not an error: every field is simply left empty.
    """
    tax = taxonomy or get_default_taxonomy_provider()
    clean = clamp_text(text, settings.max_jd_chars)
    if not clean:
        return KeywordProfile()
    lowered = clean.lower()

    role_title = extract_role_title(clean)
    skills = _skills(clean, tax)
    role_words = [normalize_line(match.group(0)).lower() for match in _ROLE_WORD_RE.finditer(clean)]

    profile = KeywordProfile(
        role_title=role_title,
        technologies=_technologies(clean, tax),
        skills=skills,
        methodologies=[skill for skill in skills if skill in tax.methodologies],
        role_keywords=dedupe_casefold([role_title.lower(), *role_words]),
        action_verbs=_action_verbs(lowered, tax),
        requirements=_requirements(clean),
    )
    logger.info(
        "jd_analyzed role=%r technologies=%s skills=%s requirements=%s",
        profile.role_title,
        len(profile.technologies),
        len(profile.skills),
        len(profile.requirements),
    )
    return profile
