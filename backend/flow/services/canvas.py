"""
Document Canvas - thin stateful drawing surface over an fpdf2 document.

Coordinates are absolute page millimetres with the origin top-left. The canvas
does not wrap text and does not check coordinates against the page: anything
drawn off-page is simply not visible. Callers own layout.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from typing import Iterator, List, Optional, Tuple

from fpdf import FPDF

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

PDF_MEDIA_TYPE = "application/pdf"

# jsPDF-style modes ('S' = stroke) mapped onto fpdf2 styles
_DRAW_MODES = {"F": "F", "S": "D", "D": "D", "FD": "DF", "DF": "DF"}

_FONT_STYLES = {"normal": "", "bold": "B", "italic": "I", "bolditalic": "BI"}

_ORIENTATIONS = {"portrait": "P", "landscape": "L", "p": "P", "l": "L"}


class CanvasClosedError(RuntimeError):
    """Raised when drawing on a canvas that has already been saved"""


@dataclass(frozen=True)
class DrawOp:
    """One recorded draw call"""
    page: int
    kind: str
    x: float
    y: float
    w: float = 0.0
    h: float = 0.0
    text: str = ""
    chrome: bool = False


@dataclass(frozen=True)
class OutlineEntry:
    page: int
    title: str
    level: int


@dataclass(frozen=True)
class ExportArtifact:
    """A finished file ready to hand to the user"""
    filename: str
    media_type: str
    content: bytes

    def as_stream(self) -> BytesIO:
        buffer = BytesIO(self.content)
        buffer.seek(0)
        return buffer


def clean_text(text) -> str:
    """Map text onto the Latin-1 range the core PDF fonts can encode"""
    if text is None:
        return ""
    text = str(text)
    repl = {'€': 'EUR', '…': '...', '–': '-', '—': '-', '“': '"', '”': '"', '‘': "'", '’': "'",
            '•': '-', '✓': '+', '▲': '+', '▼': '-'}
    for c, r in repl.items():
        text = text.replace(c, r)
    return text.encode('latin-1', 'replace').decode('latin-1')


class DocumentCanvas:
    """Paginated drawing surface with explicit style state"""

    def __init__(
        self,
        orientation: str = "portrait",
        page_format: str = "A4",
        title: Optional[str] = None,
        author: str = "Flow - Market Intelligence Platform",
        created_at: Optional[datetime] = None,
    ):
        self._orientation = _ORIENTATIONS[orientation.lower()]
        self.pdf = FPDF(orientation=self._orientation, unit="mm", format=page_format)
        self.pdf.set_auto_page_break(auto=False)
        self.pdf.set_author(author)
        self.pdf.set_creator("Flow Analytics")
        if title:
            self.pdf.set_title(clean_text(title))
        if created_at is not None:
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            self.pdf.set_creation_date(created_at)

        self.operations: List[DrawOp] = []
        self.outline: List[OutlineEntry] = []
        self._page_count = 0
        self._chrome_depth = 0
        self._closed = False
        self._font: Tuple[str, float] = ("normal", 10)
        self.pdf.set_font("helvetica", "", 10)

    # ------------------------------------------------------------------ state

    @property
    def page_width(self) -> float:
        return self.pdf.w

    @property
    def page_height(self) -> float:
        return self.pdf.h

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def current_page(self) -> int:
        return self.pdf.page

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise CanvasClosedError("Canvas has already been saved")

    def _record(self, kind: str, x: float, y: float, w: float = 0.0, h: float = 0.0, text: str = ""):
        self.operations.append(DrawOp(
            page=self.pdf.page, kind=kind, x=x, y=y, w=w, h=h, text=text,
            chrome=self._chrome_depth > 0,
        ))

    @contextmanager
    def chrome(self) -> Iterator["DocumentCanvas"]:
        """Tag draws made inside the block as page chrome (header/footer bands)"""
        self._chrome_depth += 1
        try:
            yield self
        finally:
            self._chrome_depth -= 1

    def set_fill_color(self, rgb: RGB):
        self._check_open()
        self.pdf.set_fill_color(*rgb)

    def set_text_color(self, rgb: RGB):
        self._check_open()
        self.pdf.set_text_color(*rgb)

    def set_draw_color(self, rgb: RGB):
        self._check_open()
        self.pdf.set_draw_color(*rgb)

    def set_line_width(self, width: float):
        self._check_open()
        self.pdf.set_line_width(width)

    def set_font(self, weight: str = "normal", size: float = 10):
        self._check_open()
        self._font = (weight, size)
        self.pdf.set_font("helvetica", _FONT_STYLES[weight], size)

    # ----------------------------------------------------------------- shapes

    def draw_rect(self, x: float, y: float, w: float, h: float, mode: str = "F"):
        self._check_open()
        self.pdf.rect(x, y, w, h, style=_DRAW_MODES[mode])
        self._record("rect", x, y, w, h)

    def draw_rounded_rect(self, x: float, y: float, w: float, h: float, radius: float = 2, mode: str = "F"):
        self._check_open()
        self.pdf.rect(x, y, w, h, style=_DRAW_MODES[mode], round_corners=True, corner_radius=radius)
        self._record("rounded_rect", x, y, w, h)

    def draw_circle(self, cx: float, cy: float, r: float, mode: str = "F"):
        self._check_open()
        self.pdf.ellipse(cx - r, cy - r, 2 * r, 2 * r, style=_DRAW_MODES[mode])
        self._record("circle", cx, cy, 2 * r, 2 * r)

    def draw_ellipse(self, cx: float, cy: float, rx: float, ry: float, mode: str = "F"):
        self._check_open()
        self.pdf.ellipse(cx - rx, cy - ry, 2 * rx, 2 * ry, style=_DRAW_MODES[mode])
        self._record("ellipse", cx, cy, 2 * rx, 2 * ry)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float):
        self._check_open()
        self.pdf.line(x1, y1, x2, y2)
        self._record("line", x1, y1, x2 - x1, y2 - y1)

    # ------------------------------------------------------------------- text

    def text_width(self, text: str) -> float:
        return self.pdf.get_string_width(clean_text(text))

    def draw_text(self, text: str, x: float, y: float, align: str = "left"):
        """Draw one run of text with its baseline at y"""
        self._check_open()
        text = clean_text(text)
        if not text:
            return
        width = self.pdf.get_string_width(text)
        if align == "center":
            x -= width / 2
        elif align == "right":
            x -= width
        self.pdf.text(x, y, text)
        self._record("text", x, y, width, 0.0, text)

    def wrap_text(self, text: str, max_width: float) -> List[str]:
        """Split text into lines no wider than max_width in the current font"""
        text = clean_text(text)
        if not text.strip():
            return []
        lines: List[str] = []
        for paragraph in text.split("\n"):
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if self.pdf.get_string_width(candidate) <= max_width:
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                # a single word wider than the line is hard-split
                while self.pdf.get_string_width(word) > max_width and len(word) > 1:
                    cut = len(word) - 1
                    while cut > 1 and self.pdf.get_string_width(word[:cut]) > max_width:
                        cut -= 1
                    lines.append(word[:cut])
                    word = word[cut:]
                current = word
            if current:
                lines.append(current)
        return lines

    # ------------------------------------------------------------------ pages

    def add_page(self, orientation: Optional[str] = None):
        """Append a page and make it current. Caller cursor state is untouched."""
        self._check_open()
        if orientation:
            self.pdf.add_page(orientation=_ORIENTATIONS[orientation.lower()])
        else:
            self.pdf.add_page()
        self._page_count += 1
        self._restore_font()

    def set_page(self, index: int):
        """Make an existing page current again (1-based)"""
        self._check_open()
        if not 1 <= index <= self._page_count:
            raise ValueError(f"Page {index} does not exist (document has {self._page_count})")
        self.pdf.page = index
        self._restore_font()

    def _restore_font(self):
        # fpdf2 skips set_font when the font is unchanged; each page stream needs its own Tf
        weight, size = self._font
        self.pdf.font_family = ""
        self.pdf.set_font("helvetica", _FONT_STYLES[weight], size)

    def mark_section(self, title: str, level: int = 0):
        """Record an outline entry on the current page"""
        self._check_open()
        title = clean_text(title)
        self.pdf.start_section(title, level=level)
        self.outline.append(OutlineEntry(page=self.pdf.page, title=title, level=level))

    def texts(self, include_chrome: bool = True) -> List[DrawOp]:
        return [op for op in self.operations if op.kind == "text" and (include_chrome or not op.chrome)]

    # ------------------------------------------------------------------- save

    def save(self, filename: str) -> ExportArtifact:
        """Finalize the document. The canvas cannot be drawn on afterwards."""
        self._check_open()
        if self._page_count == 0:
            self.add_page()
        pdf_bytes = self.pdf.output()
        if isinstance(pdf_bytes, str):
            pdf_bytes = pdf_bytes.encode('latin-1')
        self._closed = True
        logger.debug("Saved %s (%d pages, %d bytes)", filename, self._page_count, len(pdf_bytes))
        return ExportArtifact(filename=filename, media_type=PDF_MEDIA_TYPE, content=bytes(pdf_bytes))
