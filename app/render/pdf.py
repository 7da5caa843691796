from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from io import BytesIO

from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .layout import (
    SUMMARY,
    URLS_MARKER,
    LineContext,
    LineKind,
    Pending,
    advance,
    classify,
    has_date_range,
    is_date_line,
    normalize_header,
    section_group,
    split_entry,
    table_cells,
)
from .template import LINK_COLOR, PAGE_CONFIG, SPACING, TEXT_COLOR, TYPOGRAPHY, PageConfig, TextStyle

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "[Content truncated...]"
OVERFLOW_NEW_PAGE = "new_page"
OVERFLOW_TRUNCATE = "truncate"
LOOKAHEAD_LINES = 4

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/[^\s|,]+", re.IGNORECASE)
_GITHUB_RE = re.compile(r"(?:https?://)?(?:www\.)?github\.com/[^\s|,]+", re.IGNORECASE)
_PORTFOLIO_RE = re.compile(r"(?:https?://)?(?:www\.)?[A-Za-z0-9.-]+\.(?:com|net|org|io|dev)(?:/[^\s|,]*)?", re.IGNORECASE)


class RenderError(RuntimeError):
    pass


@dataclass(frozen=True)
class Placement:
    page: int
    x: float
    y: float
    text: str
    font: str
    size: float

    @property
    def right(self) -> float:
        return self.x + stringWidth(self.text, self.font, self.size)


@dataclass(frozen=True)
class LinkBox:
    page: int
    rect: tuple[float, float, float, float]
    url: str


@dataclass
class RenderResult:
    pdf: bytes
    pages: int
    truncated: bool = False
    content_truncated: bool = False
    placements: list[Placement] = field(default_factory=list)
    links: list[LinkBox] = field(default_factory=list)


class _PageFull(Exception):
    """Raised internally when the truncate policy runs out of page space."""


def _with_scheme(url: str) -> str:
    clean = url.strip().rstrip(".,;")
    return clean if re.match(r"^https?://", clean, re.IGNORECASE) else f"https://{clean}"


def contact_link_map(line: str) -> tuple[str, dict[str, str]]:
    """Visible text and label -> URL map for a contact line.

    An explicit ``||URLS:Label::url||...`` suffix wins; otherwise LinkedIn,
    GitHub and portfolio URLs are picked out of the visible parts.
    """
    if URLS_MARKER in line:
        display, _, raw = line.partition(URLS_MARKER)
        urls: dict[str, str] = {}
        for pair in raw.split("||"):
            label, sep, url = pair.partition("::")
            if sep and label.strip() and url.strip():
                urls[label.strip()] = url.strip()
        return display.strip(), urls

    urls = {}
    for part in (piece.strip() for piece in line.split("|")):
        if not part:
            continue
        for label, pattern in (("LinkedIn", _LINKEDIN_RE), ("GitHub", _GITHUB_RE), ("Portfolio", _PORTFOLIO_RE)):
            match = pattern.search(part)
            if not match:
                continue
            if label == "Portfolio" and ("@" in part or re.search(r"linkedin|github", match.group(0), re.IGNORECASE)):
                continue
            urls.setdefault(part, _with_scheme(match.group(0)))
            urls.setdefault(label, _with_scheme(match.group(0)))
            break
    return line.strip(), urls


def wrap_words(text: str, font: str, size: float, width: float) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and stringWidth(candidate, font, size) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.split())


class ResumePdfRenderer:
    """Walks the canonical text document once and draws it with reportlab."""

    def __init__(self, overflow_policy: str = OVERFLOW_NEW_PAGE, page: PageConfig = PAGE_CONFIG) -> None:
        if overflow_policy not in {OVERFLOW_NEW_PAGE, OVERFLOW_TRUNCATE}:
            raise ValueError(f"Unknown overflow policy '{overflow_policy}'")
        self.overflow_policy = overflow_policy
        self.page = page
        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=(page.width, page.height))
        self._canvas.setTitle("Resume")
        self._page_number = 1
        self._y = page.start_y
        self._truncated = False
        self._placements: list[Placement] = []
        self._links: list[LinkBox] = []

    # Page space

    def _reserve(self, height: float) -> float:
        """Move the cursor down by ``height`` and return the new baseline."""
        if self._y - height < self.page.min_y:
            if self.overflow_policy == OVERFLOW_TRUNCATE:
                self._truncated = True
                raise _PageFull()
            self._canvas.showPage()
            self._page_number += 1
            self._y = self.page.start_y
        self._y -= height
        return self._y

    def _gap(self, height: float) -> None:
        self._y = max(self._y - height, self.page.min_y)

    # Drawing primitives

    def _draw(self, text: str, x: float, y: float, style: TextStyle, color=TEXT_COLOR) -> float:
        self._canvas.setFillColorRGB(*color)
        self._canvas.setFont(style.font, style.size)
        self._canvas.drawString(x, y, text)
        self._placements.append(Placement(self._page_number, x, y, text, style.font, style.size))
        return stringWidth(text, style.font, style.size)

    def _draw_right(self, text: str, y: float, style: TextStyle) -> None:
        x = self.page.right_edge - stringWidth(text, style.font, style.size)
        self._draw(text, x, y, style)

    def _draw_centered(self, text: str, y: float, style: TextStyle) -> None:
        x = (self.page.width - stringWidth(text, style.font, style.size)) / 2
        self._draw(text, x, y, style)

    def _draw_justified(self, text: str, y: float, style: TextStyle, width: float) -> None:
        words = text.split()
        if len(words) < 2:
            self._draw(text, self.page.margin_left, y, style)
            return
        used = sum(stringWidth(word, style.font, style.size) for word in words)
        gap = (width - used) / (len(words) - 1)
        x = self.page.margin_left
        self._canvas.setFillColorRGB(*TEXT_COLOR)
        self._canvas.setFont(style.font, style.size)
        for word in words:
            self._canvas.drawString(x, y, word)
            x += stringWidth(word, style.font, style.size) + gap
        self._placements.append(Placement(self._page_number, self.page.margin_left, y, text, style.font, style.size))

    def _add_link(self, x: float, y: float, width: float, size: float, url: str) -> None:
        rect = (x, y - SPACING.link_padding, x + width, y + size + SPACING.link_padding)
        self._canvas.linkURL(url, rect, relative=0, thickness=0)
        self._links.append(LinkBox(self._page_number, rect, url))

    # Line kinds

    def _name(self, line: str) -> None:
        y = self._reserve(TYPOGRAPHY.name.size)
        self._draw_centered(line.upper(), y, TYPOGRAPHY.name)
        self._gap(SPACING.after_name)

    def _contact(self, line: str) -> None:
        style = TYPOGRAPHY.contact
        display, urls = contact_link_map(line)
        parts = [part.strip() for part in display.split("|") if part.strip()]
        if not parts:
            return
        separator = " | "
        sep_width = stringWidth(separator, style.font, style.size)
        total = sum(stringWidth(part, style.font, style.size) for part in parts) + sep_width * (len(parts) - 1)
        y = self._reserve(style.line_height)
        x = (self.page.width - total) / 2
        for index, part in enumerate(parts):
            url = urls.get(part)
            width = self._draw(part, x, y, style, LINK_COLOR if url else TEXT_COLOR)
            if url:
                self._add_link(x, y, width, style.size, url)
            x += width
            if index < len(parts) - 1:
                x += self._draw(separator, x, y, style)
        self._gap(SPACING.after_contact)

    def _section_header(self, line: str) -> None:
        self._gap(SPACING.before_section)
        y = self._reserve(TYPOGRAPHY.section_header.line_height)
        self._draw((normalize_header(line) or line).upper(), self.page.margin_left, y, TYPOGRAPHY.section_header)
        self._gap(SPACING.after_section_header)

    def _table_row(self, line: str) -> None:
        cells = table_cells(line)
        y = self._reserve(TYPOGRAPHY.body.line_height)
        self._draw(cells[0], self.page.margin_left, y, TYPOGRAPHY.company)
        if len(cells) > 1:
            self._draw_right(" | ".join(cells[1:]), y, TYPOGRAPHY.dates)

    def _organization(self, line: str, section: str, date_line: str | None) -> None:
        text = line.strip().upper() if section_group(section) == "EXPERIENCE" else _title_case(line.strip())
        y = self._reserve(TYPOGRAPHY.company.line_height)
        self._draw(text, self.page.margin_left, y, TYPOGRAPHY.company)
        if date_line:
            self._draw_right(date_line.strip(), y, TYPOGRAPHY.dates)

    def _entry(self, line: str, after_break: bool) -> None:
        left, right = split_entry(line) or (line.strip(), "")
        if after_break:
            self._gap(SPACING.between_entries)
        y = self._reserve(TYPOGRAPHY.company.line_height)
        self._draw(left, self.page.margin_left, y, TYPOGRAPHY.company)
        if has_date_range(right) or is_date_line(right):
            self._draw_right(right, y, TYPOGRAPHY.dates)
            return
        y = self._reserve(TYPOGRAPHY.body.line_height)
        self._draw(right, self.page.margin_left, y, TYPOGRAPHY.body)

    def _bullet(self, line: str) -> None:
        style = TYPOGRAPHY.body
        text = line.strip()[1:].strip()
        if not text:
            self._gap(style.line_height / 2)
            return
        indent = TYPOGRAPHY.bullet_indent
        wrapped = wrap_words(text, style.font, style.size, self.page.content_width - indent)
        for index, chunk in enumerate(wrapped):
            y = self._reserve(style.line_height)
            if index == 0:
                self._draw("•", self.page.margin_left, y, style)
            self._draw(chunk, self.page.margin_left + indent, y, style)
        self._gap(SPACING.between_bullets)

    def _date(self, line: str, pending: Pending) -> None:
        y = self._reserve(TYPOGRAPHY.dates.line_height)
        if pending is not Pending.IDLE:
            self._draw_right(line.strip(), y, TYPOGRAPHY.dates)
        else:
            self._draw(line.strip(), self.page.margin_left, y, TYPOGRAPHY.dates)

    def _paragraph(self, line: str, section: str) -> None:
        style = TYPOGRAPHY.body
        width = self.page.content_width
        wrapped = wrap_words(line.strip(), style.font, style.size, width)
        justify = section == SUMMARY
        for index, chunk in enumerate(wrapped):
            y = self._reserve(style.line_height)
            if justify and index < len(wrapped) - 1:
                self._draw_justified(chunk, y, style, width)
            else:
                self._draw(chunk, self.page.margin_left, y, style)
        self._gap(SPACING.paragraph)

    # Driver

    def _lookahead_date(self, lines: list[str], index: int) -> int | None:
        for position in range(index + 1, min(index + 1 + LOOKAHEAD_LINES, len(lines))):
            candidate = lines[position].strip()
            if not candidate:
                continue
            if is_date_line(candidate) and not candidate.startswith("•"):
                return position
            return None
        return None

    def render(self, text: str) -> RenderResult:
        lines = [_CONTROL_RE.sub("", line).strip() for line in text.split("\n")]
        ctx = LineContext()
        consumed: set[int] = set()
        try:
            for index, line in enumerate(lines):
                if index in consumed:
                    continue
                kind = classify(line, ctx)
                if kind is LineKind.NAME:
                    self._name(line)
                elif kind is LineKind.CONTACT:
                    self._contact(line)
                elif kind is LineKind.SECTION_HEADER:
                    self._section_header(line)
                elif kind is LineKind.TABLE_ROW:
                    self._table_row(line)
                elif kind is LineKind.ORGANIZATION:
                    date_index = self._lookahead_date(lines, index)
                    if date_index is not None:
                        consumed.add(date_index)
                    self._organization(line, ctx.section, lines[date_index] if date_index is not None else None)
                elif kind is LineKind.ENTRY:
                    self._entry(line, ctx.after_break)
                elif kind is LineKind.BULLET:
                    self._bullet(line)
                elif kind is LineKind.DATE:
                    self._date(line, ctx.pending)
                elif kind is LineKind.PARAGRAPH:
                    self._paragraph(line, ctx.section)
                ctx = advance(ctx, line, kind)
        except _PageFull:
            logger.warning("resume_pdf_truncated policy=%s pages=%s", self.overflow_policy, self._page_number)

        self._canvas.save()
        pdf = self._buffer.getvalue()
        if not pdf:
            raise RenderError("Generated PDF is empty")
        return RenderResult(
            pdf=pdf,
            pages=self._page_number,
            truncated=self._truncated,
            placements=self._placements,
            links=self._links,
        )


def render_pdf(text: str, *, overflow_policy: str = OVERFLOW_NEW_PAGE, max_chars: int = 50_000) -> RenderResult:
    """Render the canonical text document to PDF bytes.

    Input longer than ``max_chars`` is cut and ends with a visible marker.
    Any failure of the PDF backend surfaces as ``RenderError``.
    """
    if not text or not text.strip():
        raise RenderError("Invalid text content for PDF generation")

    content_truncated = len(text) > max_chars
    content = f"{text[:max_chars]}\n\n{TRUNCATION_MARKER}" if content_truncated else text

    try:
        result = ResumePdfRenderer(overflow_policy).render(content)
    except RenderError:
        raise
    except Exception as exc:  # noqa: BLE001 - backend failures are reported as RenderError
        logger.error("resume_pdf_failed chars=%s: %s", len(content), type(exc).__name__)
        raise RenderError(f"PDF generation failed: {type(exc).__name__}") from exc

    result.content_truncated = content_truncated
    logger.info(
        "resume_pdf_rendered pages=%s bytes=%s links=%s truncated=%s",
        result.pages,
        len(result.pdf),
        len(result.links),
        result.truncated or content_truncated,
    )
    return result
