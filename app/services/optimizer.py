from __future__ import annotations

import logging
import re
from typing import Iterable

from app.schemas.normalized import Experience, KeywordProfile, Project, Resume, SkillSet
from app.schemas.normalized.resume import PLACEHOLDER_TECH_STACK
from app.taxonomy import SKILL_CATEGORIES, LocalTaxonomy, get_default_taxonomy_provider
from app.taxonomy.terms import compact_key, contains_term, dedupe_casefold, term_pattern, terms_overlap

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 500
MAX_SUMMARY_CHARS = 500
MUST_HAVE_BUDGET = 450
USING_CLAUSE_BUDGET = 200
WEAK_VERB_BUDGET = 120
TECH_STACK_BUDGET = 200
TOP_SUMMARY_TECHS = 5

_JD_YEARS_RE = re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s*)?(?:experience|exp)\b", re.IGNORECASE)
_SUMMARY_YEARS_RE = re.compile(r"(\d+)\+?\s*years", re.IGNORECASE)
_RESPONSIBILITY_PATTERNS = (
    re.compile(
        r"\b(?:design(?:ing|ed)?|develop(?:ing|ed)?|maintain(?:ing|ed)?|build(?:ing)?|creat(?:e|ing|ed)|"
        r"implement(?:ing|ed)?)\s+(?:business\s*intelligence|power\s*bi|dashboards?|reports?|data\s*models?|"
        r"data\s*visualizations?)",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:collaborate|work\s+with|stakeholders|requirements|data\s*driven|decision.?making)", re.IGNORECASE),
    re.compile(
        r"\b(?:data\s*modeling|data\s*models|datasets|etl|data\s*governance|data\s*security|data\s*accuracy|"
        r"data\s*integrity)",
        re.IGNORECASE,
    ),
)
_BI_TECH_RE = re.compile(r"\bbi\b|power|tableau|business intelligence", re.IGNORECASE)
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_TRAILING_PUNCT_RE = re.compile(r"^(.*?)([.!?]*)$", re.DOTALL)


def truncate(text: str, limit: int = MAX_TEXT_CHARS) -> str:
    """Cut to ``limit`` characters, ending with an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def _truncate_words(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,;:") + "..."


def _natural_list(items: list[str]) -> str:
    if len(items) <= 2:
        return " and ".join(items)
    return f"{', '.join(items[:-1])}, and {items[-1]}"


_NEXT_CAPITALIZED_RE = re.compile(r"[ \t]+[A-Z]")


def _starts_proper_name(match: re.Match[str]) -> bool:
    return match.group(0)[:1].isupper() and bool(_NEXT_CAPITALIZED_RE.match(match.string, match.end()))


class TermRewriter:
    """Replaces terms with their profile casing in one regex pass.

    Keys mapped to ``None`` are matched but left untouched so that a longer
    known term (``Node.js``) is never split by a shorter synonym (``node``).
    Spelling variants that share a compact key (``power-bi``, ``PowerBI``)
    resolve to the same target.
    """

    def __init__(self, replacements: dict[str, str | None]) -> None:
        self._targets: dict[str, str | None] = {}
        for term, target in replacements.items():
            key = compact_key(term)
            if target is not None or key not in self._targets:
                self._targets[key] = target
        self._pattern = self._compile(replacements)

    @staticmethod
    def _compile(replacements: dict[str, str | None]) -> re.Pattern[str] | None:
        if not any(value for value in replacements.values()):
            return None
        ordered = sorted(replacements, key=len, reverse=True)
        alternation = "|".join(term_pattern(term) for term in ordered)
        return re.compile(rf"(?<![A-Za-z0-9])(?:{alternation})(?![A-Za-z0-9+#])", re.IGNORECASE)

    def __call__(self, text: str) -> str:
        if self._pattern is None or not text:
            return text
        return self._pattern.sub(self._replace, text)

    def _replace(self, match: re.Match[str]) -> str:
        original = match.group(0)
        target = self._targets.get(compact_key(original))
        if not target:
            return original
        # "JS Partners" names an organisation, not the language.
        if compact_key(target) != compact_key(original) and _starts_proper_name(match):
            return original
        return target

    @classmethod
    def for_profile(cls, profile: KeywordProfile, tax: LocalTaxonomy, *, with_synonyms: bool) -> "TermRewriter":
        replacements: dict[str, str | None] = {}
        for term in _protected_terms(tax):
            replacements.setdefault(term.lower(), None)
        for tech in profile.technologies:
            if with_synonyms:
                for family, synonyms in tax.tech_synonyms.items():
                    if compact_key(family) != compact_key(tech):
                        continue
                    for synonym in synonyms:
                        replacements[synonym.lower()] = tech
            replacements[tech.lower()] = tech
        return cls(replacements)


def _protected_terms(tax: LocalTaxonomy) -> Iterable[str]:
    yield from tax.canonical_terms.values()
    for terms in tax.skill_categories.values():
        yield from terms


def _ordered_technologies(profile: KeywordProfile) -> list[str]:
    bi = [tech for tech in profile.technologies if _BI_TECH_RE.search(tech)]
    rest = [tech for tech in profile.technologies if not _BI_TECH_RE.search(tech)]
    return dedupe_casefold([*bi, *rest])


def _years_clause(jd_text: str, summary: str) -> str:
    match = _JD_YEARS_RE.search(jd_text) or _SUMMARY_YEARS_RE.search(summary)
    return f" with {match.group(1)}+ years of experience" if match else ""


def _first_responsibility(jd_text: str) -> str:
    for pattern in _RESPONSIBILITY_PATTERNS:
        match = pattern.search(jd_text)
        if match:
            return " ".join(match.group(0).lower().split())
    return ""


def _finalize_summary(text: str) -> str:
    clean = re.sub(r"\s+", " ", text).strip()
    clean = re.sub(r"\.\s*\.", ".", clean)
    clean = re.sub(r"\s+([,.])", r"\1", clean)
    if len(clean) > MAX_SUMMARY_CHARS:
        return truncate(clean, MAX_SUMMARY_CHARS)
    if clean and clean[-1] not in ".!?":
        clean += "."
    return clean


def optimize_summary(
    summary: str,
    profile: KeywordProfile,
    jd_text: str,
    tax: LocalTaxonomy,
    rewrite: TermRewriter,
) -> str:
    """Lead with the JD role and technologies, then keep the original text."""
    sentences = [part.strip() for part in _SENTENCE_SPLIT_RE.split(summary.strip()) if part.strip()]
    techs = _ordered_technologies(profile)[:TOP_SUMMARY_TECHS]
    role = profile.role_title

    parts: list[str] = []
    if role:
        opening = f"{role}{_years_clause(jd_text, summary)}"
        if techs:
            opening += f", specialized in {_natural_list(techs)}"
        parts.append(opening + ".")
        responsibility = _first_responsibility(jd_text)
        if responsibility:
            parts.append(f"Experienced in {responsibility}.")
        remainder = " ".join(sentences[1:]) or (sentences[0] if sentences else "")
        if remainder:
            parts.append(_truncate_words(rewrite(remainder), 200))
    else:
        if sentences:
            parts.append(rewrite(sentences[0]))
        if techs:
            parts.append(f"Specialized in {_natural_list(techs)}.")
        if len(sentences) > 1:
            parts.append(_truncate_words(rewrite(" ".join(sentences[1:])), 200))

    optimized = _finalize_summary(" ".join(parts))
    jd_lower = jd_text.lower()
    for term in tax.must_have_terms:
        if len(optimized) >= MUST_HAVE_BUDGET:
            break
        if contains_term(jd_lower, term) and not contains_term(optimized, term):
            optimized = _finalize_summary(f"{optimized} Proficient in {tax.canonical_term(term)}.")
    return optimized


def _with_using_clause(bullet: str, technology: str) -> str:
    match = _TRAILING_PUNCT_RE.match(bullet)
    body, punctuation = (match.group(1), match.group(2)) if match else (bullet, "")
    return f"{body.rstrip()} using {technology}{punctuation}"


def _match_case(replacement: str, original: str) -> str:
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def optimize_bullet(bullet: str, profile: KeywordProfile, tax: LocalTaxonomy, rewrite: TermRewriter) -> str:
    optimized = rewrite(bullet)

    for tech in profile.technologies:
        concepts = tax.related_concepts.get(tech.lower())
        if not concepts or contains_term(optimized, tech) or len(optimized) >= USING_CLAUSE_BUDGET:
            continue
        if any(re.search(rf"\b{re.escape(concept)}", optimized, re.IGNORECASE) for concept in concepts):
            optimized = _with_using_clause(optimized, tech)
            break

    if profile.action_verbs and len(optimized) < WEAK_VERB_BUDGET:
        strong = tax.past_tense(profile.action_verbs[0])
        weak_pattern = re.compile(
            r"\b(?:" + "|".join(re.escape(verb) for verb in tax.weak_verbs) + r")\b",
            re.IGNORECASE,
        )
        optimized = weak_pattern.sub(lambda match: _match_case(strong, match.group(0)), optimized, count=1)

    return optimized


def optimize_skills(skills: SkillSet, profile: KeywordProfile, tax: LocalTaxonomy) -> SkillSet:
    """Float profile matches to the front, then inject missing technologies."""
    techs = profile.technologies
    reordered: dict[str, list[str]] = {}
    for category in SKILL_CATEGORIES:
        values = list(getattr(skills, category))
        reordered[category] = sorted(
            values,
            key=lambda skill: 0 if any(terms_overlap(skill, tech) for tech in techs) else 1,
        )

    present = [skill for values in reordered.values() for skill in values]
    injected: dict[str, list[str]] = {category: [] for category in SKILL_CATEGORIES}
    for tech in techs:
        if any(terms_overlap(skill, tech) for skill in present):
            continue
        injected[tax.categorize(tech)].append(tech)
        present.append(tech)

    return SkillSet(**{category: [*injected[category], *reordered[category]] for category in SKILL_CATEGORIES})


def optimize_text(text: str, rewrite: TermRewriter) -> str:
    return truncate(rewrite(text))


def optimize_tech_stack(tech_stack: str, profile: KeywordProfile, rewrite: TermRewriter) -> str:
    if not tech_stack or tech_stack == PLACEHOLDER_TECH_STACK:
        return tech_stack
    optimized = rewrite(tech_stack)
    missing = [tech for tech in profile.technologies if not contains_term(optimized, tech)][:2]
    if missing:
        candidate = f"{optimized}, {', '.join(missing)}"
        if len(candidate) < TECH_STACK_BUDGET:
            optimized = candidate
    return truncate(optimized)


def optimize_resume(
    resume: Resume,
    profile: KeywordProfile,
    jd_text: str,
    taxonomy: LocalTaxonomy | None = None,
) -> Resume:
    """Return a copy of ``resume`` with terminology aligned to ``profile``.

    Names, companies, dates and numbers are never rewritten; an empty
    profile returns an untouched copy.
    """
    if profile.is_empty():
        logger.info("resume_optimize_skipped reason=empty_profile")
        return resume.model_copy(deep=True)

    tax = taxonomy or get_default_taxonomy_provider()
    exact = TermRewriter.for_profile(profile, tax, with_synonyms=False)
    full = TermRewriter.for_profile(profile, tax, with_synonyms=True)

    changed = 0
    experience: list[Experience] = []
    for entry in resume.experience:
        bullets = [optimize_bullet(bullet, profile, tax, full) for bullet in entry.bullets]
        changed += sum(1 for before, after in zip(entry.bullets, bullets) if before != after)
        experience.append(entry.model_copy(update={"title": exact(entry.title), "bullets": bullets}))

    projects = [
        Project(
            title=optimize_text(project.title, exact),
            description=optimize_text(project.description, exact),
            contribution=optimize_text(project.contribution, exact),
            tech_stack=optimize_tech_stack(project.tech_stack, profile, exact),
        )
        for project in resume.projects
    ]

    optimized = resume.model_copy(
        update={
            "summary": optimize_summary(resume.summary, profile, jd_text, tax, full),
            "experience": experience,
            "skills": optimize_skills(resume.skills, profile, tax),
            "projects": projects,
            "achievements": [optimize_text(item, exact) for item in resume.achievements],
            "certifications": [optimize_text(item, exact) for item in resume.certifications],
        },
        deep=True,
    )
    logger.info(
        "resume_optimized technologies=%s bullets_changed=%s",
        len(profile.technologies),
        changed,
    )
    return optimized
