"""Line classification for the canonical resume text document.

``classify`` is a pure function of one line and the fold state carried by
the renderer. Rules are tried in a fixed order and the first match wins;
reordering them changes how ambiguous lines (a contact line versus a table
row, an entry line versus a bare date range) are drawn.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum


class LineKind(str, Enum):
    BLANK = "blank"
    NAME = "name"
    CONTACT = "contact"
    SECTION_HEADER = "section_header"
    TABLE_ROW = "table_row"
    ORGANIZATION = "organization"
    ENTRY = "entry"
    BULLET = "bullet"
    DATE = "date"
    PARAGRAPH = "paragraph"


class Pending(str, Enum):
    IDLE = "idle"
    EXPECTING_COMPANY_DATE = "expecting_company_date"
    EXPECTING_UNIVERSITY_DATE = "expecting_university_date"


SECTION_HEADERS = (
    "PROFESSIONAL SUMMARY",
    "WORK EXPERIENCE",
    "EXPERIENCE",
    "EDUCATION",
    "TECHNICAL SKILLS",
    "SKILLS",
    "PROJECTS",
    "ACHIEVEMENTS",
    "CERTIFICATIONS",
    "LINKS",
)
_MARKDOWN_HEADERS = {"EDUCATION", "WORK EXPERIENCE", "EXPERIENCE"}

SUMMARY = "PROFESSIONAL SUMMARY"
EXPERIENCE = "EXPERIENCE"
EDUCATION = "EDUCATION"
LINKS = "LINKS"

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"
_DATE_POINT = rf"(?:{_MONTH}\s+\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})"
_DATE_RANGE = rf"{_DATE_POINT}\s*[-–—]\s*(?:{_DATE_POINT}|present|current)"
_DATE_LINE_RE = re.compile(rf"^\s*{_DATE_RANGE}\b", re.IGNORECASE)
_DATE_ANYWHERE_RE = re.compile(_DATE_RANGE, re.IGNORECASE)
_YEAR_OR_PRESENT_RE = re.compile(r"\b(?:19|20)\d{2}\b|\bpresent\b", re.IGNORECASE)
_LINK_KEYWORD_RE = re.compile(r"linkedin|github|portfolio", re.IGNORECASE)
_LONG_NUMBER_RE = re.compile(r"\d{10,}")
_TABLE_ROW_RE = re.compile(r"^\|.*\|?$")
_ENTRY_SPLIT_RE = re.compile(r"\s*[—–]\s*")
URLS_MARKER = "||URLS:"


@dataclass(frozen=True)
class LineContext:
    section: str = ""
    pending: Pending = Pending.IDLE
    after_break: bool = False
    seen_content: bool = False


def normalize_header(line: str) -> str | None:
    """Canonical header text for a section-header line, else None."""
    stripped = line.strip()
    if stripped in SECTION_HEADERS:
        return stripped
    if stripped.startswith("## "):
        candidate = stripped[3:].strip().upper()
        if candidate in _MARKDOWN_HEADERS:
            return candidate
    return None


def section_group(header: str) -> str:
    if header in {"WORK EXPERIENCE", "EXPERIENCE"}:
        return EXPERIENCE
    if header in {"TECHNICAL SKILLS", "SKILLS"}:
        return "SKILLS"
    return header


def is_date_line(line: str) -> bool:
    stripped = line.strip()
    if _DATE_LINE_RE.match(stripped):
        return True
    return "|" in stripped and not stripped.startswith("|") and bool(_YEAR_OR_PRESENT_RE.search(stripped))


def has_date_range(line: str) -> bool:
    return bool(_DATE_ANYWHERE_RE.search(line))


def is_table_row(line: str) -> bool:
    stripped = line.strip()
    return bool(_TABLE_ROW_RE.match(stripped)) and len(table_cells(stripped)) >= 1


def table_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.strip().strip("|").split("|") if cell.strip()]


def is_contact_shaped(line: str) -> bool:
    if "@" in line or _LINK_KEYWORD_RE.search(line) or URLS_MARKER in line:
        return True
    return "|" in line and not is_table_row(line)


def split_entry(line: str) -> tuple[str, str] | None:
    """Split "left — right" on the first em/en dash, when both sides are non-empty."""
    parts = _ENTRY_SPLIT_RE.split(line.strip(), maxsplit=1)
    if len(parts) != 2:
        return None
    left, right = parts[0].strip(), parts[1].strip()
    if not left or not right:
        return None
    return left, right


def _looks_like_name(line: str) -> bool:
    stripped = line.strip()
    return 3 < len(stripped) < 60 and not _LONG_NUMBER_RE.search(stripped)


def classify(line: str, ctx: LineContext) -> LineKind:
    stripped = line.strip()
    if not stripped:
        return LineKind.BLANK

    header = normalize_header(stripped)
    section = section_group(ctx.section)

    if not ctx.seen_content and header is None and not is_contact_shaped(stripped) and _looks_like_name(stripped):
        return LineKind.NAME

    if section in {"", LINKS} and header is None and is_contact_shaped(stripped):
        return LineKind.CONTACT

    if header is not None:
        return LineKind.SECTION_HEADER

    in_entries = section in {EXPERIENCE, EDUCATION}
    if in_entries and is_table_row(stripped):
        return LineKind.TABLE_ROW

    if (
        in_entries
        and (ctx.after_break or ctx.pending is not Pending.IDLE)
        and not stripped.startswith("•")
        and not has_date_range(stripped)
        and not is_date_line(stripped)
    ):
        return LineKind.ORGANIZATION

    if section != SUMMARY and not stripped.startswith("•") and not is_date_line(stripped):
        entry = split_entry(stripped)
        if entry is not None and not is_date_line(entry[0]) and len(entry[0]) <= 100:
            return LineKind.ENTRY

    if stripped.startswith("•"):
        return LineKind.BULLET

    if is_date_line(stripped):
        return LineKind.DATE

    return LineKind.PARAGRAPH


def expecting_for(section: str) -> Pending:
    group = section_group(section)
    if group == EXPERIENCE:
        return Pending.EXPECTING_COMPANY_DATE
    if group == EDUCATION:
        return Pending.EXPECTING_UNIVERSITY_DATE
    return Pending.IDLE


def advance(ctx: LineContext, line: str, kind: LineKind) -> LineContext:
    """State after drawing ``line`` as ``kind``."""
    if kind is LineKind.BLANK:
        return replace(ctx, after_break=True)
    updated = replace(ctx, after_break=False, seen_content=True)
    if kind is LineKind.SECTION_HEADER:
        return replace(updated, section=normalize_header(line) or ctx.section, pending=Pending.IDLE, after_break=True)
    if kind is LineKind.TABLE_ROW:
        return replace(updated, pending=expecting_for(ctx.section))
    if kind is LineKind.ENTRY:
        entry = split_entry(line)
        dated = entry is not None and has_date_range(entry[1])
        return replace(updated, pending=expecting_for(ctx.section) if dated else Pending.IDLE)
    if kind in {LineKind.ORGANIZATION, LineKind.DATE}:
        return replace(updated, pending=Pending.IDLE)
    return updated


def classify_document(text: str) -> list[tuple[str, LineKind]]:
    """Classify every line without drawing; lines consumed by look-ahead are not skipped."""
    ctx = LineContext()
    result: list[tuple[str, LineKind]] = []
    for line in text.split("\n"):
        kind = classify(line, ctx)
        result.append((line.strip(), kind))
        ctx = advance(ctx, line, kind)
    return result
