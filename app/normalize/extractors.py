from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Sequence, TypeVar

from app.schemas.normalized.resume import (
    MAX_CERTIFICATIONS,
    MAX_EDUCATION,
    MAX_EXPERIENCE,
    MAX_PROJECTS,
    PLACEHOLDER_COMPANY,
    PLACEHOLDER_CONTRIBUTION,
    PLACEHOLDER_DEGREE,
    PLACEHOLDER_END,
    PLACEHOLDER_LOCATION,
    PLACEHOLDER_NAME,
    PLACEHOLDER_PROJECT_DESCRIPTION,
    PLACEHOLDER_PROJECT_TITLE,
    PLACEHOLDER_START,
    PLACEHOLDER_SUMMARY,
    PLACEHOLDER_TECH_STACK,
    PLACEHOLDER_TITLE,
    PLACEHOLDER_UNIVERSITY,
    PLACEHOLDER_YEARS,
    Contact,
    Education,
    Experience,
    Project,
    SkillSet,
)
from app.taxonomy import SKILL_CATEGORIES, LocalTaxonomy, get_default_taxonomy_provider
from app.taxonomy.terms import dedupe_casefold

from .utils import (
    is_bullet_like,
    is_contact_or_url,
    is_section_heading,
    normalize_line,
    section_window,
    split_blocks,
    split_lines,
    strip_bullet_prefix,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Strategy = Callable[["ExtractionContext"], "T | None"]

MAX_SUMMARY_CHARS = 500
MAX_EXTRACTED_ACHIEVEMENTS = 6

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"
_DATE_POINT = rf"(?:{_MONTH}\s+\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})"
_DATE_RANGE_RE = re.compile(
    rf"({_DATE_POINT})\s*[-–—]+\s*({_DATE_POINT}|present|current|now)\b",
    re.IGNORECASE,
)
_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
_SEPARATOR_EDGES = " \t-–—|,:;"

_NAME_SKIP_RE = re.compile(r"@|phone|email|linkedin|github|portfolio|resume|curriculum|\d", re.IGNORECASE)
_NAME_HEADER_RE = re.compile(
    r"^(?:professional|summary|experience|education|skills|projects|achievements|certifications|"
    r"objective|profile|work|technical|employment|links)\b",
    re.IGNORECASE,
)
_NAME_SHAPES = (
    re.compile(r"^[A-Z][a-z]+(?:[\s\-.']+[A-Z][a-z]*\.?){1,4}$"),
    re.compile(r"^[A-Z][A-Z'\-]+(?:\s+[A-Z][A-Z.'\-]*){1,4}$"),
    re.compile(r"^[A-Z][a-z]+\s+[A-Z]\.?\s+[A-Z][a-z]+"),
)

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_PHONE_PATTERNS = (
    re.compile(r"(?<![\d/])(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)"),
    re.compile(r"(?<!\d)\+\d{10,15}(?!\d)"),
)
_LINKEDIN_URL_RE = re.compile(r"linkedin\.com/(?:in|pub)/([A-Za-z0-9_-]+)", re.IGNORECASE)
_LINKEDIN_LABEL_RE = re.compile(r"\blinkedin\s*:\s*([^\s|,]+)", re.IGNORECASE)
_GITHUB_URL_RE = re.compile(r"github\.com/([A-Za-z0-9_-]+)", re.IGNORECASE)
_GITHUB_LABEL_RE = re.compile(r"\bgithub\s*:\s*([^\s|,]+)", re.IGNORECASE)
_PORTFOLIO_LABEL_RE = re.compile(r"\b(?:portfolio|website)\s*:\s*([^\s|,]+)", re.IGNORECASE)
_PORTFOLIO_DOMAIN_RE = re.compile(
    r"(?<![@\w.])(?:https?://(?:www\.)?|www\.)[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.(?:com|net|org|io|dev|me|app)\b(?:/[^\s|,]*)?"
)

_SUMMARY_KEYWORDS = ("professional summary", "summary", "objective", "profile", "about me")
_SUMMARY_STOP_RE = re.compile(
    r"^(?:experience|education|skills|projects|achievements|certifications|work experience|employment)\b",
    re.IGNORECASE,
)
_CONTACT_PREFIX_RE = re.compile(r"^(?:email|e-mail|phone|mobile|tel|linkedin|github)\b", re.IGNORECASE)

_EXPERIENCE_KEYWORDS = ("experience", "work experience", "employment", "professional experience", "work history")
_ROLE_RE = re.compile(
    r"\b(?:developer|engineer|analyst|manager|specialist|consultant|associate|lead|senior|junior|intern|"
    r"trainee|employee|staff|architect|director|scientist|designer|administrator|coordinator|officer|programmer)s?\b",
    re.IGNORECASE,
)
_ROLE_SCAN_RE = re.compile(
    r"\b(?:software|developer|programmer|engineer|analyst|manager|specialist|consultant|associate|lead|senior|junior|"
    r"full.?stack|front.?end|back.?end)\b",
    re.IGNORECASE,
)
_EDUCATION_SIGNAL_RE = re.compile(
    r"\b(?:college|university|degree|bachelor|master|phd|diploma|percentage|gpa|cgpa|grade)\b|%",
    re.IGNORECASE,
)
_TITLE_SKIP_RE = re.compile(r"\d+\s*%|\bgpa\b|\bcgpa\b", re.IGNORECASE)

_EDUCATION_KEYWORDS = ("education", "academic", "qualification")
_DEGREE_RE = re.compile(
    r"(?<![A-Za-z])(?:"
    r"[BM]\.\s?(?:Sc|Tech|Com|S|A|E)\b\.?"
    r"|B(?:Sc|Tech|Com|Eng)\b|M(?:Sc|Tech|Com|Eng|BA)\b"
    r"|(?:BS|BA|MS|MA|BE|ME)(?=\s+(?:in|of)\b)"
    r"|Ph\.?\s?D\b\.?"
    r"|(?i:bachelor|master|doctorate|diploma)(?:'?s)?\b"
    r")"
)
_UNIVERSITY_RE = re.compile(
    r"(?:[A-Z][\w&'.-]*\s+){0,4}(?:University|College|Institute|School|Academy)"
    r"(?:\s+of(?:\s+[A-Z][\w&'.-]*){1,4})?"
)
_DEGREE_SPLIT_RE = re.compile(r"\s*[,|]\s*|\s+[-–—]\s+")
_UNIVERSITY_WORD_RE = re.compile(r"\b(?:university|college|institute|school|academy)\b", re.IGNORECASE)
_LOCATION_RE = re.compile(r"(?:^|[,|]\s*)([A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,2})")

_ACHIEVEMENT_KEYWORDS = ("achievement", "accomplishment", "award", "recognition")
_ACHIEVEMENT_SIGNAL_RE = re.compile(r"\d+\s*%|\d+\+")
_QUANTIFIED_RE = re.compile(
    r"\b(?:improved|increased|reduced|decreased|delivered|achieved|implemented)\b[^\n]*?\d+(?:\.\d+)?\s*%",
    re.IGNORECASE,
)

_CONTRIBUTION_RE = re.compile(r"\b(?:developed|built|created|designed)\b", re.IGNORECASE)
_TECH_STACK_RE = re.compile(r"\b(?:tech|stack|technologies|tools)\b", re.IGNORECASE)
_TECH_LABEL_RE = re.compile(r"^(?:tech(?:nologies)?(?:\s+stack)?|stack|tools)\s*:\s*", re.IGNORECASE)

_CERTIFICATION_KEYWORDS = ("certification", "certified", "certificate", "cert")
_CERTIFICATION_WORD_RE = re.compile(r"\b(?:certified|certification|certificate)s?\b", re.IGNORECASE)


@dataclass(frozen=True)
class ExtractionContext:
    """Input shared by every extractor: full text, lowered text and trimmed lines."""

    text: str
    lower: str
    lines: tuple[str, ...]
    logger: logging.Logger = field(default=logger)

    @classmethod
    def from_text(cls, text: str, *, max_lines: int = 1000, log: logging.Logger | None = None) -> "ExtractionContext":
        return cls(
            text=text,
            lower=text.lower(),
            lines=tuple(split_lines(text, max_lines)),
            logger=log or logger,
        )


def run_strategies(
    field_name: str,
    strategies: Sequence[Strategy],
    ctx: ExtractionContext,
    default: T,
) -> T:
    """Try strategies in order and return the first non-empty result."""
    for strategy in strategies:
        try:
            result = strategy(ctx)
        except Exception as exc:  # noqa: BLE001 - extraction degrades to the next strategy
            ctx.logger.warning("resume_extract_failed field=%s strategy=%s: %s", field_name, strategy.__name__, exc)
            continue
        if result:
            ctx.logger.debug("resume_extract field=%s strategy=%s", field_name, strategy.__name__)
            return result
    ctx.logger.debug("resume_extract field=%s strategy=default", field_name)
    return default


def _trim_edges(value: str) -> str:
    return normalize_line(value).strip(_SEPARATOR_EDGES)


def strip_date_ranges(line: str) -> str:
    return _trim_edges(_DATE_RANGE_RE.sub(" ", line))


def _normalize_date_point(value: str) -> str:
    clean = normalize_line(value)
    if clean.lower() in {"present", "current", "now"}:
        return "Present"
    return clean


# Name


def _name_from_leading_lines(ctx: ExtractionContext) -> str | None:
    for line in ctx.lines[:10]:
        if _NAME_SKIP_RE.search(line) or _NAME_HEADER_RE.match(line) or len(line) > 40:
            continue
        if any(shape.match(line) for shape in _NAME_SHAPES):
            return normalize_line(line).upper()
    return None


NAME_STRATEGIES: tuple[Strategy, ...] = (_name_from_leading_lines,)


def extract_name(ctx: ExtractionContext) -> str:
    return run_strategies("name", NAME_STRATEGIES, ctx, PLACEHOLDER_NAME)


# Contact


def _email_anywhere(ctx: ExtractionContext) -> str | None:
    match = _EMAIL_RE.search(ctx.text)
    return match.group(0) if match else None


def _phone_anywhere(ctx: ExtractionContext) -> str | None:
    for pattern in _PHONE_PATTERNS:
        match = pattern.search(ctx.text)
        if match:
            return match.group(0).strip()
    return None


def _linkedin_url(ctx: ExtractionContext) -> str | None:
    match = _LINKEDIN_URL_RE.search(ctx.text)
    return f"linkedin.com/in/{match.group(1)}" if match else None


def _linkedin_labeled(ctx: ExtractionContext) -> str | None:
    match = _LINKEDIN_LABEL_RE.search(ctx.text)
    return match.group(1).rstrip(".;") if match else None


def _github_url(ctx: ExtractionContext) -> str | None:
    match = _GITHUB_URL_RE.search(ctx.text)
    return f"github.com/{match.group(1)}" if match else None


def _github_labeled(ctx: ExtractionContext) -> str | None:
    match = _GITHUB_LABEL_RE.search(ctx.text)
    return match.group(1).rstrip(".;") if match else None


def _portfolio_labeled(ctx: ExtractionContext) -> str | None:
    match = _PORTFOLIO_LABEL_RE.search(ctx.text)
    return match.group(1).rstrip(".;") if match else None


def _portfolio_domain(ctx: ExtractionContext) -> str | None:
    for match in _PORTFOLIO_DOMAIN_RE.finditer(ctx.text):
        value = match.group(0).rstrip(".;")
        lowered = value.lower()
        if "linkedin." in lowered or "github." in lowered:
            continue
        return value
    return None


CONTACT_STRATEGIES: dict[str, tuple[Strategy, ...]] = {
    "email": (_email_anywhere,),
    "phone": (_phone_anywhere,),
    "linkedin": (_linkedin_url, _linkedin_labeled),
    "github": (_github_url, _github_labeled),
    "portfolio": (_portfolio_labeled, _portfolio_domain),
}


def extract_contact(ctx: ExtractionContext) -> Contact:
    values = {
        name: run_strategies(f"contact.{name}", strategies, ctx, "")
        for name, strategies in CONTACT_STRATEGIES.items()
    }
    return Contact(**values)


# Summary


def _summary_from_section(ctx: ExtractionContext) -> str | None:
    for keyword in _SUMMARY_KEYWORDS:
        window = section_window(ctx.text, (keyword,), 800)
        if window is None:
            continue
        kept: list[str] = []
        for raw in window.split("\n"):
            line = raw.strip()
            if len(line) < 10 or _SUMMARY_STOP_RE.match(line) or is_section_heading(line):
                continue
            if is_contact_or_url(line):
                continue
            kept.append(strip_bullet_prefix(line))
            if len(kept) >= 5:
                break
        summary = normalize_line(" ".join(kept))
        if len(summary) > 50:
            return summary[:MAX_SUMMARY_CHARS]
    return None


def _summary_from_long_line(ctx: ExtractionContext) -> str | None:
    for line in ctx.lines:
        if len(line) <= 100 or "@" in line or _CONTACT_PREFIX_RE.match(line):
            continue
        return line[:MAX_SUMMARY_CHARS]
    return None


SUMMARY_STRATEGIES: tuple[Strategy, ...] = (_summary_from_section, _summary_from_long_line)


def extract_summary(ctx: ExtractionContext) -> str:
    return run_strategies("summary", SUMMARY_STRATEGIES, ctx, PLACEHOLDER_SUMMARY)[:MAX_SUMMARY_CHARS]


# Experience


def _block_dates(block: str) -> tuple[str, str]:
    labeled = _DATE_RANGE_RE.search(block)
    if labeled:
        return _normalize_date_point(labeled.group(1)), _normalize_date_point(labeled.group(2))
    years = _YEAR_RE.findall(block)
    if len(years) >= 2:
        return years[0], years[1]
    if years:
        return years[0], PLACEHOLDER_END
    return PLACEHOLDER_START, PLACEHOLDER_END


def parse_experience_block(block: str) -> Experience | None:
    """Build one Experience from a block of lines, or None when it is not a job.

    The first role-keyword line becomes the title and the first other line the
    company. When the job title carries no role keyword it is taken as the
    company instead; this ordering heuristic is kept as is.
    """
    lines = [line.strip() for line in block.split("\n") if line.strip()]
    if len(lines) < 2:
        return None
    if _EDUCATION_SIGNAL_RE.search(block) and not _ROLE_RE.search(block):
        return None

    start_date, end_date = _block_dates(block)
    title = ""
    company = ""
    for line in lines[:5]:
        if is_bullet_like(line) or _TITLE_SKIP_RE.search(line) or is_contact_or_url(line):
            continue
        candidate = strip_date_ranges(line)
        if len(candidate) < 2:
            continue
        if not title and _ROLE_RE.search(candidate) and len(candidate) < 100:
            title = candidate
        elif not company and not _CONTACT_PREFIX_RE.match(candidate):
            company = candidate

    if not title and not company:
        return None

    bullets = [strip_bullet_prefix(line) for line in lines if is_bullet_like(line)]
    return Experience(
        title=title or PLACEHOLDER_TITLE,
        company=company or PLACEHOLDER_COMPANY,
        start_date=start_date,
        end_date=end_date,
        bullets=[bullet for bullet in bullets if len(bullet) > 5],
    )


def _experience_from_section(ctx: ExtractionContext) -> list[Experience] | None:
    window = section_window(ctx.text, _EXPERIENCE_KEYWORDS)
    if window is None:
        return None
    entries: list[Experience] = []
    for block in split_blocks(window):
        if len(block) <= 20:
            continue
        entry = parse_experience_block(block)
        if entry is not None:
            entries.append(entry)
        if len(entries) >= MAX_EXPERIENCE:
            break
    return entries or None


def _experience_from_role_scan(ctx: ExtractionContext) -> list[Experience] | None:
    entries: list[Experience] = []
    seen: set[tuple[str, str]] = set()
    cursor = 0
    for line in ctx.lines:
        if len(line) >= 100 or is_bullet_like(line) or not _ROLE_SCAN_RE.search(line):
            continue
        index = ctx.text.find(line, cursor)
        if index < 0:
            continue
        cursor = index + len(line)
        entry = parse_experience_block(ctx.text[index:index + 500])
        if entry is None:
            continue
        key = (entry.title.lower(), entry.company.lower())
        if key in seen:
            continue
        seen.add(key)
        entries.append(entry)
        if len(entries) >= MAX_EXPERIENCE:
            break
    return entries or None


EXPERIENCE_STRATEGIES: tuple[Strategy, ...] = (_experience_from_section, _experience_from_role_scan)


def extract_experience(ctx: ExtractionContext) -> list[Experience]:
    return run_strategies("experience", EXPERIENCE_STRATEGIES, ctx, [])[:MAX_EXPERIENCE]


# Education


def _find_university(lines: Sequence[str], index: int, degree_line: str) -> str:
    same_line = _UNIVERSITY_RE.search(degree_line)
    if same_line:
        return _trim_edges(same_line.group(0))
    neighbours = [*range(index + 1, min(index + 4, len(lines))), index - 1]
    for position in neighbours:
        if position < 0 or position >= len(lines):
            continue
        candidate = lines[position]
        if position > index and _DEGREE_RE.search(candidate):
            break
        if _UNIVERSITY_WORD_RE.search(candidate) and len(candidate) < 100:
            return strip_date_ranges(strip_bullet_prefix(candidate))
    return ""


def parse_education_line(lines: Sequence[str], index: int, match: re.Match[str]) -> Education:
    line = lines[index]
    university = _find_university(lines, index, line)

    degree = _DEGREE_SPLIT_RE.split(line[match.start():])[0]
    if university and university in degree:
        degree = degree.replace(university, " ")
    degree = _trim_edges(_YEAR_RE.sub(" ", strip_date_ranges(degree))).strip("() ")

    years = _YEAR_RE.findall(line)[:2]

    location = ""
    for candidate in _LOCATION_RE.finditer(line):
        value = candidate.group(1)
        start = candidate.start(1)
        if start < match.end():
            continue
        if university and value in university:
            continue
        location = value
        break

    return Education(
        degree=degree or PLACEHOLDER_DEGREE,
        university=university or PLACEHOLDER_UNIVERSITY,
        years=" - ".join(years) if years else PLACEHOLDER_YEARS,
        location=location or PLACEHOLDER_LOCATION,
    )


def _education_from_lines(lines: Sequence[str]) -> list[Education]:
    entries: list[Education] = []
    for index, line in enumerate(lines):
        match = _DEGREE_RE.search(line)
        if not match:
            continue
        entries.append(parse_education_line(lines, index, match))
        if len(entries) >= MAX_EDUCATION:
            break
    return entries


def _education_from_section(ctx: ExtractionContext) -> list[Education] | None:
    window = section_window(ctx.text, _EDUCATION_KEYWORDS, 3000)
    if window is None:
        return None
    lines = [line.strip() for line in window.split("\n") if len(line.strip()) > 5]
    return _education_from_lines(lines) or None


def _education_from_degree_scan(ctx: ExtractionContext) -> list[Education] | None:
    return _education_from_lines(ctx.lines) or None


EDUCATION_STRATEGIES: tuple[Strategy, ...] = (_education_from_section, _education_from_degree_scan)


def extract_education(ctx: ExtractionContext) -> list[Education]:
    return run_strategies("education", EDUCATION_STRATEGIES, ctx, [])[:MAX_EDUCATION]


# Skills


def extract_skills(ctx: ExtractionContext, taxonomy: LocalTaxonomy | None = None) -> SkillSet:
    tax = taxonomy or get_default_taxonomy_provider()
    found: dict[str, list[str]] = {category: [] for category in SKILL_CATEGORIES}

    for category, pattern in tax.category_patterns.items():
        if pattern is None:
            continue
        for match in pattern.finditer(ctx.text):
            found[category].append(tax.canonical_term(match.group(0)))

    window = section_window(ctx.text, ("skills", "technical skills", "core competencies"), 1000)
    if window and tax.all_skill_pattern is not None:
        known = {skill.casefold() for values in found.values() for skill in values}
        for raw in window.split("\n")[:20]:
            cleaned = strip_bullet_prefix(raw).strip().lower()
            if not 2 < len(cleaned) < 50:
                continue
            match = tax.all_skill_pattern.search(cleaned)
            if not match:
                continue
            term = tax.canonical_term(match.group(0))
            if term.casefold() not in known:
                known.add(term.casefold())
                found["others"].append(term)

    ctx.logger.debug(
        "resume_extract field=skills counts=%s",
        {category: len(values) for category, values in found.items()},
    )
    return SkillSet(**found)


# Achievements


def extract_achievements(ctx: ExtractionContext) -> list[str]:
    items: list[str] = []
    window = section_window(ctx.text, _ACHIEVEMENT_KEYWORDS, 800)
    if window is not None:
        candidates = [line.strip() for line in window.split("\n") if len(line.strip()) > 10][:10]
        for line in candidates:
            if is_bullet_like(line) or _ACHIEVEMENT_SIGNAL_RE.search(line):
                items.append(strip_bullet_prefix(line))

    quantified = 0
    for match in _QUANTIFIED_RE.finditer(ctx.text):
        if quantified >= 5:
            break
        sentence = normalize_line(match.group(0))
        prefix = sentence[:20].lower()
        if any(prefix in existing.lower() for existing in items):
            continue
        items.append(sentence)
        quantified += 1

    result = dedupe_casefold(items)[:MAX_EXTRACTED_ACHIEVEMENTS]
    ctx.logger.debug("resume_extract field=achievements count=%s quantified=%s", len(result), quantified)
    return result


# Projects


def _parse_project_block(block: str) -> Project | None:
    lines = [strip_bullet_prefix(line) for line in block.split("\n") if line.strip()]
    if len(lines) < 2 or is_section_heading(lines[0]):
        return None
    rest = lines[1:]
    contribution = next((line for line in rest if _CONTRIBUTION_RE.search(line)), "")
    tech_line = next((line for line in rest if _TECH_STACK_RE.search(line) and line != contribution), "")
    tech_stack = _TECH_LABEL_RE.sub("", tech_line).strip()
    description_lines = [line for line in rest[:2] if line not in {contribution, tech_line}] or rest[:1]
    return Project(
        title=lines[0][:120] or PLACEHOLDER_PROJECT_TITLE,
        description=" ".join(description_lines) or PLACEHOLDER_PROJECT_DESCRIPTION,
        contribution=contribution or PLACEHOLDER_CONTRIBUTION,
        tech_stack=tech_stack or PLACEHOLDER_TECH_STACK,
    )


def _projects_from_section(ctx: ExtractionContext) -> list[Project] | None:
    window = section_window(ctx.text, ("project",), 2000)
    if window is None:
        return None
    projects: list[Project] = []
    for block in split_blocks(window):
        if len(block) <= 20:
            continue
        project = _parse_project_block(block)
        if project is not None:
            projects.append(project)
        if len(projects) >= MAX_PROJECTS:
            break
    return projects or None


PROJECT_STRATEGIES: tuple[Strategy, ...] = (_projects_from_section,)


def extract_projects(ctx: ExtractionContext) -> list[Project]:
    return run_strategies("projects", PROJECT_STRATEGIES, ctx, [])[:MAX_PROJECTS]


# Certifications


def _certifications_from_section(ctx: ExtractionContext) -> list[str] | None:
    window = section_window(ctx.text, _CERTIFICATION_KEYWORDS, 500)
    if window is None:
        return None
    candidates = [line.strip() for line in window.split("\n") if 5 < len(line.strip()) < 100][:5]
    kept = [
        strip_bullet_prefix(line)
        for line in candidates
        if is_bullet_like(line) or _CERTIFICATION_WORD_RE.search(line)
    ]
    return dedupe_casefold(kept) or None


CERTIFICATION_STRATEGIES: tuple[Strategy, ...] = (_certifications_from_section,)


def extract_certifications(ctx: ExtractionContext) -> list[str]:
    return run_strategies("certifications", CERTIFICATION_STRATEGIES, ctx, [])[:MAX_CERTIFICATIONS]
