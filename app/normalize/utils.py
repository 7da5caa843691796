from __future__ import annotations

import re

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_RE = re.compile(r"(?<!\d)(?:(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}|\+\d{10,15})(?!\d)")
_URL_RE = re.compile(r"(?:https?://|www\.|linkedin\.com|github\.com)", re.IGNORECASE)
_SECTION_RE = re.compile(
    r"^\s*(?:#+\s*)?("
    r"summary|professional summary|summary of qualifications|objective|career objective|"
    r"profile|professional profile|about me|"
    r"experience|work experience|professional experience|employment|employment history|work history|"
    r"education|academic background|qualifications|"
    r"skills|technical skills|core competencies|"
    r"projects|key projects|personal projects|"
    r"achievements|accomplishments|awards|awards and recognition|"
    r"certifications|certificates|licenses and certifications|"
    r"links|languages|interests"
    r")\s*:?\s*$",
    re.IGNORECASE,
)
_BLOCK_SPLIT_RE = re.compile(r"\n[ \t]*\n")


def clamp_text(text: str, max_chars: int) -> str:
    """Trim and cut text to at most ``max_chars`` characters."""
    clean = (text or "").replace("\r\n", "\n").replace("\r", "\n").strip()
    if len(clean) > max_chars:
        clean = clean[:max_chars].rstrip()
    return clean


def split_lines(text: str, max_lines: int) -> list[str]:
    lines = [line.strip() for line in (text or "").split("\n")]
    return [line for line in lines if line][:max_lines]


def split_blocks(text: str) -> list[str]:
    return [block.strip() for block in _BLOCK_SPLIT_RE.split(text or "") if block.strip()]


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line).strip()


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def strip_bullet_prefix(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def contains_any(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def is_section_heading(line: str) -> bool:
    stripped = normalize_line(line)
    if not stripped:
        return False
    return bool(_SECTION_RE.match(stripped))


def is_contact_or_url(line: str) -> bool:
    stripped = normalize_line(line)
    if not stripped:
        return False
    return bool(_EMAIL_RE.search(stripped) or _PHONE_RE.search(stripped) or _URL_RE.search(stripped))


def find_section(text: str, keywords: tuple[str, ...]) -> int | None:
    """Return the offset where the body of the first matching section starts.

    Keywords are tried in priority order, first as a heading on a line of its
    own, then as a plain case-insensitive substring.
    """
    for keyword in keywords:
        heading = re.search(
            rf"^[ \t]*(?:#+[ \t]*)?{re.escape(keyword)}s?[ \t]*:?[ \t]*$",
            text,
            re.IGNORECASE | re.MULTILINE,
        )
        if heading:
            return heading.end()
    lowered = text.lower()
    for keyword in keywords:
        index = lowered.find(keyword)
        if index >= 0:
            return index + len(keyword)
    return None


def section_window(text: str, keywords: tuple[str, ...], max_chars: int | None = None) -> str | None:
    """Text after a section keyword, bounded by ``max_chars`` and the next heading."""
    start = find_section(text, keywords)
    if start is None:
        return None
    body = text[start:]
    if max_chars is not None:
        body = body[:max_chars]
    kept: list[str] = []
    for index, line in enumerate(body.split("\n")):
        if index > 0 and is_section_heading(line):
            break
        kept.append(line)
    return "\n".join(kept)
