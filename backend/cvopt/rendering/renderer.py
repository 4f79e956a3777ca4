from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional, Sequence

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from ..spec.models import RendererConfig
from ..storage.store import DocumentStore

PAGE_SIZES = {
    "letter": LETTER,
    "A4": A4,
}

@dataclass
class Placement:
    page: int
    x: float
    y: float
    text: str

@dataclass
class TextUnit:
    """One non-blank input line and where its wrapped rows land."""
    text: str
    placements: List[Placement] = field(default_factory=list)

@dataclass
class PageLayout:
    units: List[TextUnit] = field(default_factory=list)
    page_count: int = 1

class PDFRenderer:
    """Lays plain text lines out onto paginated PDF pages and stores the result.

    Lines are written as-is: markup characters such as ``**`` or leading
    ``*`` bullets are not interpreted.
    """

    def __init__(self, store: DocumentStore, config: Optional[RendererConfig] = None):
        self.store = store
        self.config = config or RendererConfig()
        self.page_width, self.page_height = PAGE_SIZES[self.config.page_size]

    @property
    def leading(self) -> float:
        return self.config.font_size * 1.2 + self.config.line_gap

    def wrap(self, line: str, max_width: float) -> List[str]:
        """Word-wrap a line; rows still wider than the text area break between characters."""
        cfg = self.config
        rows: List[str] = []
        for row in simpleSplit(line, cfg.font_name, cfg.font_size, max_width) or [line]:
            while stringWidth(row, cfg.font_name, cfg.font_size) > max_width and len(row) > 1:
                cut = 1
                while cut < len(row) and stringWidth(row[:cut + 1], cfg.font_name, cfg.font_size) <= max_width:
                    cut += 1
                rows.append(row[:cut])
                row = row[cut:]
            rows.append(row)
        return rows

    def layout(self, lines: Sequence[str]) -> PageLayout:
        cfg = self.config
        left = cfg.margin
        bottom = cfg.margin
        max_width = self.page_width - 2 * cfg.margin
        first_baseline = self.page_height - cfg.margin - cfg.font_size

        result = PageLayout()
        page = 0
        y = first_baseline

        for raw_line in lines:
            line = raw_line.strip()
            if not line:
                # Paragraph spacing
                y -= cfg.paragraph_spacing * self.leading
                continue

            unit = TextUnit(text=line)
            for row in self.wrap(line, max_width):
                if y < bottom:
                    page += 1
                    y = first_baseline
                unit.placements.append(Placement(page=page, x=left, y=y, text=row))
                y -= self.leading
            result.units.append(unit)

        result.page_count = page + 1
        return result

    def to_pdf_bytes(self, lines: Sequence[str]) -> bytes:
        layout = self.layout(lines)
        buffer = BytesIO()
        c = canvas.Canvas(
            buffer,
            pagesize=(self.page_width, self.page_height),
            invariant=1 if self.config.invariant else 0,
        )

        placements = [p for unit in layout.units for p in unit.placements]
        for page in range(layout.page_count):
            c.setFont(self.config.font_name, self.config.font_size)
            for p in placements:
                if p.page == page:
                    c.drawString(p.x, p.y, p.text)
            c.showPage()

        c.save()
        return buffer.getvalue()

    def render(self, lines: Sequence[str]) -> str:
        """Render ``lines`` to a new stored PDF and return its handle.

        The handle is returned only once the store has finished writing;
        storage failures propagate as StorageError.
        """
        data = self.to_pdf_bytes(lines)
        handle = self.store.new_handle()
        self.store.save(handle, data)
        return handle
