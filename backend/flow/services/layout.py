"""
Page geometry, cursor and the flow helpers the report and deck layouts share.

Every content block is measured first, then placed with ensure_space so that
no content baseline ever lands below page_height - margin.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .canvas import RGB, DocumentCanvas

COLORS: Dict[str, RGB] = {
    "primary": (59, 130, 246),
    "secondary": (16, 185, 129),
    "accent": (139, 92, 246),
    "warning": (245, 158, 11),
    "danger": (239, 68, 68),
    "dark": (15, 23, 42),
    "dark_gray": (30, 41, 59),
    "slate": (71, 85, 105),
    "light_gray": (148, 163, 184),
    "border": (226, 232, 240),
    "light": (248, 250, 252),
    "white": (255, 255, 255),
}

PALETTE: Sequence[RGB] = (
    COLORS["primary"],
    COLORS["secondary"],
    COLORS["accent"],
    COLORS["warning"],
)


def palette_color(index: int) -> RGB:
    return PALETTE[index % len(PALETTE)]


def mix(rgb: RGB, other: RGB, amount: float) -> RGB:
    """Blend rgb toward other; amount=1 returns other (core PDF drawing has no alpha)"""
    return tuple(int(round(a + (b - a) * amount)) for a, b in zip(rgb, other))


def tint(rgb: RGB, amount: float = 0.88) -> RGB:
    return mix(rgb, COLORS["white"], amount)


@dataclass(frozen=True)
class TextStyle:
    size: float
    weight: str = "normal"
    color: RGB = COLORS["dark_gray"]
    line_height: float = 5.0

    @property
    def ascent(self) -> float:
        # baseline offset from the top of a line box
        return self.line_height * 0.75


BODY = TextStyle(10, line_height=5.4)
SMALL = TextStyle(8.5, color=COLORS["slate"], line_height=4.6)
LABEL = TextStyle(9, "bold", COLORS["dark"], 5.0)
CARD_TITLE = TextStyle(12, "bold", COLORS["white"], 6.5)
SUBHEADING = TextStyle(12, "bold", COLORS["dark"], 7.0)

# float slack for heights summed in a different order
FIT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class PageGeometry:
    """Named page regions derived from the page size"""
    width: float
    height: float
    margin: float = 20.0
    header_height: float = 15.0
    header_gap: float = 10.0
    footer_height: float = 12.0

    @classmethod
    def for_canvas(cls, canvas: DocumentCanvas, margin: float = 20.0) -> "PageGeometry":
        return cls(width=canvas.page_width, height=canvas.page_height, margin=margin)

    @property
    def content_top(self) -> float:
        return self.header_height + self.header_gap

    @property
    def content_bottom(self) -> float:
        return self.height - self.margin

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def usable_height(self) -> float:
        return self.content_bottom - self.content_top

    @property
    def footer_top(self) -> float:
        return self.height - self.footer_height


@dataclass
class DocumentCursor:
    page_width: float
    page_height: float
    current_y: float
    margin: float

    @property
    def bottom(self) -> float:
        return self.page_height - self.margin

    @property
    def remaining(self) -> float:
        return self.bottom - self.current_y

    def fits(self, height: float) -> bool:
        return self.current_y + height <= self.bottom + FIT_TOLERANCE

    def advance(self, height: float):
        self.current_y += height


class PageFlow:
    """
    One composition pass over a canvas: owns the cursor, starts pages with
    their header chrome and places measured blocks.
    """

    def __init__(self, canvas: DocumentCanvas, geometry: PageGeometry, brand: str = "FLOW"):
        self.canvas = canvas
        self.geometry = geometry
        self.brand = brand
        self.running_title = ""
        self.cursor = DocumentCursor(
            page_width=geometry.width,
            page_height=geometry.height,
            current_y=geometry.content_top,
            margin=geometry.margin,
        )
        self.page_breaks = 0

    # ------------------------------------------------------------------ pages

    def new_page(self, running_title: str = None):
        if running_title is not None:
            self.running_title = running_title
        self.canvas.add_page()
        self.draw_header()
        self.cursor.current_y = self.geometry.content_top

    def draw_header(self):
        g = self.geometry
        with self.canvas.chrome():
            self.canvas.set_fill_color(COLORS["dark"])
            self.canvas.draw_rect(0, 0, g.width, g.header_height)
            self.canvas.set_fill_color(COLORS["primary"])
            self.canvas.draw_rect(0, g.header_height, g.width, 1.5)
            self.canvas.set_font("bold", 14)
            self.canvas.set_text_color(COLORS["white"])
            self.canvas.draw_text(self.brand, g.margin, 10)
            if self.running_title:
                self.canvas.set_font("normal", 9)
                self.canvas.set_text_color(COLORS["light_gray"])
                self.canvas.draw_text(self.running_title, g.width - g.margin, 10, align="right")

    def ensure_space(self, height: float) -> bool:
        """Start a new page when height does not fit. Returns True on a break."""
        if self.cursor.fits(height):
            return False
        # a block taller than a whole page can only be placed from the top
        if self.cursor.current_y <= self.geometry.content_top and height > self.geometry.usable_height:
            return False
        self.new_page()
        self.page_breaks += 1
        return True

    def spacer(self, height: float):
        self.cursor.advance(height)

    # ------------------------------------------------------------------- text

    def measure(self, text: str, style: TextStyle, width: float) -> List[str]:
        self.canvas.set_font(style.weight, style.size)
        return self.canvas.wrap_text(text, width)

    def lines_height(self, lines: Sequence[str], style: TextStyle) -> float:
        return len(lines) * style.line_height

    def write_lines(self, lines: Sequence[str], style: TextStyle, x: float = None, align: str = "left"):
        """Place pre-wrapped lines one by one, breaking pages between lines"""
        x = self.geometry.content_left if x is None else x
        for line in lines:
            self.ensure_space(style.line_height)
            self.canvas.set_font(style.weight, style.size)
            self.canvas.set_text_color(style.color)
            self.canvas.draw_text(line, x, self.cursor.current_y + style.ascent, align=align)
            self.cursor.advance(style.line_height)

    def paragraph(self, text: str, style: TextStyle = BODY, indent: float = 0.0, after: float = 2.0):
        width = self.geometry.content_width - indent
        lines = self.measure(text, style, width)
        self.write_lines(lines, style, x=self.geometry.content_left + indent)
        self.spacer(after)

    def bullets(self, items: Sequence[str], style: TextStyle = BODY, indent: float = 4.0, after: float = 2.0):
        x = self.geometry.content_left + indent
        width = self.geometry.content_width - indent - 4
        for item in items:
            lines = self.measure(item, style, width)
            if not lines:
                continue
            self.ensure_space(style.line_height)
            self.canvas.set_fill_color(style.color)
            self.canvas.draw_circle(x + 1, self.cursor.current_y + style.line_height / 2, 0.7)
            self.write_lines(lines, style, x=x + 4)
        self.spacer(after)

    def section_header(self, title: str, color: RGB = COLORS["primary"], level: int = 0,
                       keep_with: float = 12.0):
        """Coloured header bar, kept on the same page as the first content"""
        bar = 10.0
        if self.cursor.current_y > self.geometry.content_top:
            self.spacer(2)
        self.ensure_space(bar + 4 + keep_with)
        g = self.geometry
        y = self.cursor.current_y
        self.canvas.set_fill_color(color)
        self.canvas.draw_rounded_rect(g.content_left, y, g.content_width, bar, 1.5)
        self.canvas.set_font("bold", 12)
        self.canvas.set_text_color(COLORS["white"])
        self.canvas.draw_text(title, g.content_left + 4, y + 6.8)
        self.canvas.mark_section(title, level=level)
        self.cursor.advance(bar + 4)

    @staticmethod
    def table_lead(row_height: float = 7.0) -> float:
        """Height of a table's header row plus its first data row"""
        return 2 * row_height + 1

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]], widths: Sequence[float],
              color: RGB = COLORS["dark"], row_height: float = 7.0, font_size: float = 8.5):
        """Header row plus striped rows. The header is repeated after a page break."""
        g = self.geometry

        def draw_head():
            y = self.cursor.current_y
            self.canvas.set_fill_color(color)
            self.canvas.draw_rect(g.content_left, y, sum(widths), row_height + 1)
            self.canvas.set_font("bold", font_size)
            self.canvas.set_text_color(COLORS["white"])
            x = g.content_left
            for header, w in zip(headers, widths):
                self.canvas.draw_text(self.fit(header, w - 3), x + 2, y + row_height * 0.7)
                x += w
            self.cursor.advance(row_height + 1)

        self.ensure_space(self.table_lead(row_height))
        draw_head()
        for index, row in enumerate(rows):
            if self.ensure_space(row_height):
                draw_head()
            y = self.cursor.current_y
            if index % 2 == 0:
                self.canvas.set_fill_color(COLORS["light"])
                self.canvas.draw_rect(g.content_left, y, sum(widths), row_height)
            self.canvas.set_font("normal", font_size)
            self.canvas.set_text_color(COLORS["dark_gray"])
            x = g.content_left
            for value, w in zip(row, widths):
                self.canvas.draw_text(self.fit(value, w - 3), x + 2, y + row_height * 0.7)
                x += w
            self.cursor.advance(row_height)
        self.spacer(4)

    def fit(self, text: str, width: float) -> str:
        """Truncate one run so it fits width in the current font"""
        text = str(text)
        if self.canvas.text_width(text) <= width:
            return text
        while text and self.canvas.text_width(text + "...") > width:
            text = text[:-1]
        return text + "..."
