from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageConfig:
    # A4 in points
    width: float = 595.28
    height: float = 841.89
    margin_top: float = 51.02
    margin_bottom: float = 51.02
    margin_left: float = 42.52
    margin_right: float = 42.52

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def start_y(self) -> float:
        return self.height - self.margin_top

    @property
    def min_y(self) -> float:
        return self.margin_bottom

    @property
    def right_edge(self) -> float:
        return self.width - self.margin_right


@dataclass(frozen=True)
class TextStyle:
    font: str
    size: float
    line_height: float


@dataclass(frozen=True)
class Typography:
    regular_font: str = "Helvetica"
    bold_font: str = "Helvetica-Bold"
    name: TextStyle = TextStyle("Helvetica-Bold", 19, 20.9)
    contact: TextStyle = TextStyle("Helvetica", 10.5, 11.55)
    section_header: TextStyle = TextStyle("Helvetica-Bold", 11.5, 12.65)
    body: TextStyle = TextStyle("Helvetica", 10.5, 11.55)
    company: TextStyle = TextStyle("Helvetica-Bold", 10.5, 11.55)
    dates: TextStyle = TextStyle("Helvetica", 10, 11)
    bullet_indent: float = 14.17


@dataclass(frozen=True)
class Spacing:
    after_name: float = 4.5
    after_contact: float = 6
    before_section: float = 7
    after_section_header: float = 4
    between_entries: float = 5
    between_bullets: float = 2
    paragraph: float = 3
    link_padding: float = 2


TEXT_COLOR = (0.0, 0.0, 0.0)
LINK_COLOR = (0.0, 0.0, 0.8)

PAGE_CONFIG = PageConfig()
TYPOGRAPHY = Typography()
SPACING = Spacing()


def validate_template(page: PageConfig = PAGE_CONFIG, typography: Typography = TYPOGRAPHY) -> bool:
    if page.width <= 0 or page.height <= 0:
        return False
    if min(page.margin_top, page.margin_bottom, page.margin_left, page.margin_right) < 0:
        return False
    if page.content_width <= typography.bullet_indent:
        return False
    return typography.body.line_height >= typography.body.size
