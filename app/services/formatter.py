from __future__ import annotations

import logging
import re

from app.schemas.normalized import Contact, Education, Experience, Project, Resume
from app.schemas.normalized.resume import (
    PLACEHOLDER_COMPANY,
    PLACEHOLDER_CONTRIBUTION,
    PLACEHOLDER_DEGREE,
    PLACEHOLDER_END,
    PLACEHOLDER_LOCATION,
    PLACEHOLDER_PROJECT_DESCRIPTION,
    PLACEHOLDER_PROJECT_TITLE,
    PLACEHOLDER_START,
    PLACEHOLDER_TECH_STACK,
    PLACEHOLDER_TITLE,
    PLACEHOLDER_UNIVERSITY,
    PLACEHOLDER_YEARS,
)

logger = logging.getLogger(__name__)

SUMMARY_HEADER = "PROFESSIONAL SUMMARY"
EXPERIENCE_HEADER = "WORK EXPERIENCE"
PROJECTS_HEADER = "PROJECTS"
EDUCATION_HEADER = "EDUCATION"
SKILLS_HEADER = "SKILLS"
ACHIEVEMENTS_HEADER = "ACHIEVEMENTS"
CERTIFICATIONS_HEADER = "CERTIFICATIONS"
LINKS_HEADER = "LINKS"

SECTION_ORDER = (
    SUMMARY_HEADER,
    EXPERIENCE_HEADER,
    PROJECTS_HEADER,
    EDUCATION_HEADER,
    SKILLS_HEADER,
    ACHIEVEMENTS_HEADER,
    CERTIFICATIONS_HEADER,
    LINKS_HEADER,
)

SKILL_LABELS = (
    ("programming", "Programming"),
    ("tools", "Tools & Tech"),
    ("databases", "Databases"),
    ("cloud", "Cloud"),
    ("others", "Others"),
)

CONTACT_SEPARATOR = " | "
ENTRY_SEPARATOR = " — "
RANGE_SEPARATOR = " – "
BULLET = "•"
MAX_FORMATTED_ACHIEVEMENTS = 4

_DASH_RE = re.compile(r"\s*[-–—]+\s*")
_EXCESS_BLANKS_RE = re.compile(r"\n{3,}")


def link_url(value: str) -> str:
    clean = value.strip()
    if not clean:
        return ""
    if re.match(r"^https?://", clean, re.IGNORECASE):
        return clean
    return f"https://{clean}"


def _link_fields(contact: Contact) -> list[tuple[str, str]]:
    fields = [("LinkedIn", contact.linkedin), ("Portfolio", contact.portfolio), ("GitHub", contact.github)]
    return [(label, value.strip()) for label, value in fields if value.strip()]


def format_contact_line(contact: Contact) -> str:
    """Visible fields joined by " | " plus the ``||URLS:`` suffix for links."""
    parts = [value.strip() for value in (contact.email, contact.phone) if value.strip()]
    links = _link_fields(contact)
    parts.extend(label for label, _ in links)
    if not parts:
        return ""
    line = CONTACT_SEPARATOR.join(parts)
    if links:
        line += "||URLS:" + "||".join(f"{label}::{link_url(value)}" for label, value in links)
    return line


def _date_range(start: str, end: str) -> str:
    points = [
        _DASH_RE.sub("–", value.strip())
        for value, placeholder in ((start, PLACEHOLDER_START), (end, PLACEHOLDER_END))
        if value.strip() and value != placeholder
    ]
    return RANGE_SEPARATOR.join(points)


def _years_range(years: str) -> str:
    if not years.strip() or years == PLACEHOLDER_YEARS:
        return ""
    return _DASH_RE.sub(RANGE_SEPARATOR, years.strip())


def _is_placeholder_experience(entry: Experience) -> bool:
    if entry.title == PLACEHOLDER_TITLE or entry.company == PLACEHOLDER_COMPANY:
        return True
    return "technical skills" in f"{entry.title} {entry.company}".lower()


def format_experience(entries: list[Experience]) -> list[str]:
    blocks: list[str] = []
    for entry in entries:
        if _is_placeholder_experience(entry):
            logger.debug("resume_format_skip section=experience title=%r company=%r", entry.title, entry.company)
            continue
        dates = _date_range(entry.start_date, entry.end_date)
        lines = [f"{entry.title}{ENTRY_SEPARATOR}{dates}" if dates else entry.title, entry.company.upper()]
        lines.extend(f"{BULLET} {bullet}" for bullet in entry.bullets if len(bullet.strip()) > 5)
        blocks.append("\n".join(lines))
    return blocks


def _unique_education(entries: list[Education]) -> list[Education]:
    seen: set[str] = set()
    kept: list[Education] = []
    for entry in entries:
        if entry.degree == PLACEHOLDER_DEGREE:
            continue
        key = f"{entry.degree}-{entry.university}".lower()
        if key in seen:
            logger.debug("resume_format_skip section=education duplicate=%r", entry.degree)
            continue
        seen.add(key)
        kept.append(entry)
    return kept


def format_education(entries: list[Education]) -> list[str]:
    blocks: list[str] = []
    for entry in _unique_education(entries):
        degree = entry.degree.strip()
        university = entry.university.strip() if entry.university != PLACEHOLDER_UNIVERSITY else ""
        if university and university.lower() in degree.lower() and university.lower() != degree.lower():
            degree = _DASH_RE.sub(" ", re.sub(re.escape(university), " ", degree, flags=re.IGNORECASE)).strip(" ,")
        years = _years_range(entry.years)
        lines = [f"{degree}{ENTRY_SEPARATOR}{years}" if years else degree]
        second = university
        if entry.location and entry.location != PLACEHOLDER_LOCATION:
            second = f"{university}, {entry.location}" if university else entry.location
        if second:
            lines.append(second)
        blocks.append("\n".join(lines))
    return blocks


def format_projects(projects: list[Project]) -> list[str]:
    blocks: list[str] = []
    for project in projects:
        if project.title == PLACEHOLDER_PROJECT_TITLE or len(project.title.strip()) < 3:
            continue
        lines = [project.title.strip()]
        if project.description and project.description != PLACEHOLDER_PROJECT_DESCRIPTION:
            lines.append(f"{BULLET} {project.description}")
        if project.contribution and project.contribution != PLACEHOLDER_CONTRIBUTION:
            lines.append(f"{BULLET} {project.contribution}")
        if project.tech_stack and project.tech_stack != PLACEHOLDER_TECH_STACK:
            lines.append(f"{BULLET} Tech Stack: {project.tech_stack}")
        blocks.append("\n".join(lines))
    return blocks


def format_skills(resume: Resume) -> list[str]:
    lines: list[str] = []
    for category, label in SKILL_LABELS:
        values = getattr(resume.skills, category)
        if values:
            lines.append(f"{BULLET} {label}: {', '.join(values)}")
    return lines


def format_links(contact: Contact) -> list[str]:
    return [f"{label}: {value}" for label, value in _link_fields(contact)]


def _section(header: str, blocks: list[str], *, joiner: str = "\n\n") -> str:
    if not blocks:
        return ""
    return f"{header}\n\n{joiner.join(blocks)}"


def format_resume(resume: Resume) -> str:
    """Serialise a Resume into the canonical line-oriented text document.

    Sections follow ``SECTION_ORDER``; entries still carrying placeholder
    titles or degrees are left out, and runs of blank lines are collapsed.
    """
    sections = {
        SUMMARY_HEADER: _section(SUMMARY_HEADER, [" ".join(resume.summary.split())] if resume.summary.strip() else []),
        EXPERIENCE_HEADER: _section(EXPERIENCE_HEADER, format_experience(resume.experience)),
        PROJECTS_HEADER: _section(PROJECTS_HEADER, format_projects(resume.projects)),
        EDUCATION_HEADER: _section(EDUCATION_HEADER, format_education(resume.education)),
        SKILLS_HEADER: _section(SKILLS_HEADER, format_skills(resume), joiner="\n"),
        ACHIEVEMENTS_HEADER: _section(
            ACHIEVEMENTS_HEADER,
            [f"{BULLET} {item}" for item in resume.achievements[:MAX_FORMATTED_ACHIEVEMENTS]],
            joiner="\n",
        ),
        CERTIFICATIONS_HEADER: _section(
            CERTIFICATIONS_HEADER,
            [f"{BULLET} {item}" for item in resume.certifications],
            joiner="\n",
        ),
        LINKS_HEADER: _section(LINKS_HEADER, format_links(resume.contact), joiner="\n"),
    }

    parts = [resume.name.strip()]
    contact_line = format_contact_line(resume.contact)
    if contact_line:
        parts.append(contact_line)
    parts.extend(sections[header] for header in SECTION_ORDER if sections[header])

    document = "\n\n".join(parts).strip()
    document = _EXCESS_BLANKS_RE.sub("\n\n", document)
    document = "\n".join(line.rstrip() for line in document.split("\n"))
    logger.debug("resume_formatted chars=%s sections=%s", len(document), sum(1 for value in sections.values() if value))
    return document
