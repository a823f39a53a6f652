# bookkeeping/modules/reporting/layout.py
"""
Page layout primitives shared by every report.

Geometry is expressed in millimetres from the TOP-LEFT corner of an A4 page
and converted to reportlab's bottom-left point space only when drawing.

Pages are laid out in two passes:
  1. ReportLayout appends blocks (cards, tables, notes) under a running
     cursor `y`, starting a new page whenever a block would reach into
     the footer area.
  2. PageCanvas.save() walks every page once more and paints the header
     band and the "Page i of N" footer, which needs the final page count.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Mapping, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from ...config import OrgProfile
from ...constants import CATEGORY_ACCENTS, PALETTE
from ...utils.helpers import fmt_amount

_log = logging.getLogger(__name__)

PAGE_WIDTH = A4[0] / mm      # 210
PAGE_HEIGHT = A4[1] / mm     # 297
HEADER_HEIGHT = 45
FOOTER_SPACE = 30
SIDE_MARGIN = 15
TOP_MARGIN = 55
BLOCK_GAP = 10
TABLE_GAP = 20
CONTENT_WIDTH = PAGE_WIDTH - 2 * SIDE_MARGIN

TITLE_BAND = 20
LOGO_X, LOGO_Y, LOGO_SIZE = 15, 8, 28
TEXT_X_WITH_LOGO = 50
TEXT_X_WITHOUT_LOGO = SIDE_MARGIN

FONT = "Times-Roman"
FONT_BOLD = "Times-Bold"

NO_DATA_TEXT = "No data available for this section"
TOTAL_LABEL = "TOTAL"


def rgb(name: str) -> colors.Color:
    r, g, b = PALETTE[name]
    return colors.Color(r / 255.0, g / 255.0, b / 255.0)


def accent_for(product_name: str) -> str:
    return CATEGORY_ACCENTS.get(product_name, "primary")


def report_filename(subject: str, today: date | datetime | None = None, suffix: str = "RML") -> str:
    """
    Deterministic download name: <Subject>_Report_<yyyy-MM-dd>_<Suffix>.pdf
    ("Outstanding Debts" -> "Outstanding_Debts_Report_2024-05-01_RML.pdf").
    """
    today = today or date.today()
    return f"{'_'.join(subject.split())}_Report_{today:%Y-%m-%d}_{suffix}.pdf"


def ellipsize(text: str, font: str, size: float, max_width: float) -> str:
    """Trim `text` with a trailing '...' so it fits `max_width` points."""
    text = str(text)
    if stringWidth(text, font, size) <= max_width:
        return text
    ell = "..."
    while text and stringWidth(text + ell, font, size) > max_width:
        text = text[:-1]
    return (text.rstrip() + ell) if text else ""


# ------------------------------ Page decorations ----------------------------

@dataclass(frozen=True)
class Branding:
    """What the second pass paints on every page."""

    org_name: str
    address_lines: Tuple[str, ...]
    footer_label: str
    logo_png: Optional[bytes] = None


class PageCanvas(canvas.Canvas):
    """
    Canvas that holds every page back until save(), then paints the header
    band and footer on each one. `page_labels` records the footer page
    numbers as they were stamped.
    """

    def __init__(self, filename, *args, branding: Branding, **kwargs):
        super().__init__(filename, *args, **kwargs)
        self.branding = branding
        self.page_labels: List[str] = []
        self._saved_page_states: List[dict] = []
        self._logo = ImageReader(io.BytesIO(branding.logo_png)) if branding.logo_png else None

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for number, state in enumerate(self._saved_page_states, start=1):
            self.__dict__.update(state)
            self.draw_header()
            self.draw_footer(number, total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    # -- helpers in top-down millimetres --

    def _top_y(self, top_mm: float) -> float:
        return (PAGE_HEIGHT - top_mm) * mm

    def draw_header(self) -> None:
        b = self.branding
        self.saveState()
        self.setFillColor(rgb("primary"))
        self.rect(0, self._top_y(HEADER_HEIGHT), PAGE_WIDTH * mm, HEADER_HEIGHT * mm, fill=1, stroke=0)

        text_x = TEXT_X_WITHOUT_LOGO
        if self._logo is not None:
            self.drawImage(
                self._logo,
                LOGO_X * mm,
                self._top_y(LOGO_Y + LOGO_SIZE),
                LOGO_SIZE * mm,
                LOGO_SIZE * mm,
                mask="auto",
            )
            text_x = TEXT_X_WITH_LOGO

        self.setFillColor(rgb("white"))
        self.setFont(FONT_BOLD, 20)
        self.drawString(text_x * mm, self._top_y(18), b.org_name)
        self.setFont(FONT, 11)
        self.setFillColor(rgb("header_text"))
        for i, line in enumerate(b.address_lines[:2]):
            self.drawString(text_x * mm, self._top_y(26 + 6 * i), line)
        self.restoreState()

    def draw_footer(self, number: int, total: int) -> None:
        footer_y = PAGE_HEIGHT - 15
        label = f"Page {number} of {total}"
        self.saveState()
        self.setStrokeColor(rgb("border"))
        self.setLineWidth(0.5 * mm)
        self.line(SIDE_MARGIN * mm, self._top_y(footer_y - 8), (PAGE_WIDTH - SIDE_MARGIN) * mm, self._top_y(footer_y - 8))

        self.setFillColor(rgb("secondary"))
        self.setFont(FONT, 9)
        self.drawString(SIDE_MARGIN * mm, self._top_y(footer_y), self.branding.footer_label)

        self.setFillColor(rgb("expenses"))
        self.setFont(FONT_BOLD, 10)
        self.drawCentredString(PAGE_WIDTH / 2 * mm, self._top_y(footer_y), "CONFIDENTIAL")

        self.setFillColor(rgb("secondary"))
        self.setFont(FONT, 9)
        self.drawRightString((PAGE_WIDTH - SIDE_MARGIN) * mm, self._top_y(footer_y), label)
        self.restoreState()
        self.page_labels.append(label)


# ------------------------------ Blocks --------------------------------------

@dataclass(frozen=True)
class Column:
    header: str
    width: float = 1.0          # relative share of the table width
    align: str = "LEFT"


@dataclass(frozen=True)
class SummaryItem:
    label: str
    value: str
    color: str = "secondary"
    bold_value: bool = False


@dataclass(frozen=True)
class TableFonts:
    header: float = 14
    body: float = 13
    total: float = 15


DEFAULT_FONTS = TableFonts()
COMPACT_FONTS = TableFonts(header=10, body=9.5, total=11)


def build_table_rows(
    columns: Sequence[Column],
    rows: Sequence[Sequence[object]],
    totals: Optional[Mapping[int, float]] = None,
) -> List[List[str]]:
    """
    Body rows as printed: all-blank rows dropped, and a TOTAL row appended
    when at least one data row remains and `totals` is given.
    `totals` maps column index -> summed value.
    """
    width = len(columns)
    out: List[List[str]] = []
    for row in rows:
        cells = ["" if c is None else str(c) for c in list(row)[:width]]
        cells += [""] * (width - len(cells))
        if any(c.strip() for c in cells):
            out.append(cells)
    if out and totals is not None:
        total_row = [""] * width
        total_row[0] = TOTAL_LABEL
        for idx, value in totals.items():
            total_row[idx] = fmt_amount(value)
        out.append(total_row)
    return out


class ReportLayout:
    """
    Running-cursor layout over a PageCanvas.

    `y` is the top of the next block in mm from the page top. Every block
    calls ensure_space() with its height before drawing anything.
    """

    def __init__(self, branding: Branding, title: str = "", author: str = ""):
        self.buffer = io.BytesIO()
        self.canvas = PageCanvas(self.buffer, branding=branding, pagesize=A4)
        if title:
            self.canvas.setTitle(title)
        if author:
            self.canvas.setAuthor(author)
        self.y: float = TOP_MARGIN
        self.page_count = 1

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    @property
    def bottom(self) -> float:
        return PAGE_HEIGHT - FOOTER_SPACE

    def remaining(self) -> float:
        return self.bottom - self.y

    def fits(self, height: float) -> bool:
        return self.y + height <= self.bottom

    def ensure_space(self, height: float) -> bool:
        """Start a new page unless `height` mm fit above the footer. True if a page was added."""
        if self.fits(height):
            return False
        self.new_page()
        return True

    def new_page(self) -> None:
        self.canvas.showPage()
        self.page_count += 1
        self.y = TOP_MARGIN

    def finish(self) -> bytes:
        """Close the last page, run the decoration pass and return the PDF bytes."""
        self.canvas.showPage()
        self.canvas.save()
        return self.buffer.getvalue()

    # ------------------------------------------------------------------
    # Drawing helpers (top-down mm)
    # ------------------------------------------------------------------

    def _py(self, top_mm: float) -> float:
        return (PAGE_HEIGHT - top_mm) * mm

    def _text(self, x: float, y: float, text: str, *, size: float = 13, bold: bool = False,
              color: str = "secondary", align: str = "left", max_width: Optional[float] = None) -> None:
        c = self.canvas
        font = FONT_BOLD if bold else FONT
        if max_width is not None:
            text = ellipsize(text, font, size, max_width * mm)
        c.setFont(font, size)
        c.setFillColor(rgb(color))
        if align == "center":
            c.drawCentredString(x * mm, self._py(y), text)
        elif align == "right":
            c.drawRightString(x * mm, self._py(y), text)
        else:
            c.drawString(x * mm, self._py(y), text)

    def _card_frame(self, height: float, title: str, accent: str, band: float = TITLE_BAND) -> None:
        c = self.canvas
        x, w, top = SIDE_MARGIN, CONTENT_WIDTH, self.y
        c.saveState()
        c.setFillColor(rgb("background"))
        c.setStrokeColor(rgb("header_text"))
        c.setLineWidth(0.5 * mm)
        c.roundRect(x * mm, self._py(top + height), w * mm, height * mm, 4 * mm, stroke=1, fill=1)
        c.setFillColor(rgb(accent))
        c.roundRect(x * mm, self._py(top + band), w * mm, band * mm, 4 * mm, stroke=0, fill=1)
        # square off the band's bottom corners
        c.rect(x * mm, self._py(top + band), w * mm, 4 * mm, stroke=0, fill=1)
        c.restoreState()
        self._text(x + 5, top + band * 0.65, title, size=16, bold=True, color="white")

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def card(
        self,
        title: str,
        rows: Sequence[Tuple[str, str]],
        *,
        badge: Optional[str] = None,
        accent: str = "primary",
        height: float = 60,
    ) -> float:
        """Introduction card: title band, label/value rows and an optional badge pill."""
        self.ensure_space(height)
        self._card_frame(height, title, accent)
        content_y = self.y + TITLE_BAND + 12
        for i, (label, value) in enumerate(rows):
            ry = content_y + 12 * i
            self._text(25, ry, label, size=14, bold=True, color="primary")
            self._text(70, ry, value, max_width=CONTENT_WIDTH - 60 - (60 if badge else 0))
        if badge:
            c = self.canvas
            bx, bw, bh = PAGE_WIDTH - SIDE_MARGIN - 65, 55, 10
            c.saveState()
            c.setFillColor(rgb(accent))
            c.roundRect(bx * mm, self._py(content_y - 2 + bh), bw * mm, bh * mm, 3 * mm, stroke=0, fill=1)
            c.restoreState()
            self._text(bx + bw / 2, content_y + 5, badge, size=11, bold=True, color="white", align="center")
        self.y += height + BLOCK_GAP
        return self.y

    def summary_card(
        self,
        title: str,
        columns: Sequence[Sequence[SummaryItem]],
        *,
        accent: str = "primary",
        height: Optional[float] = None,
    ) -> float:
        """Label/value pairs laid out in side-by-side columns under a title band."""
        depth = max((len(col) for col in columns), default=0)
        height = height or TITLE_BAND + 10 + depth * 24
        self.ensure_space(height)
        self._card_frame(height, title, accent)
        col_w = CONTENT_WIDTH / max(len(columns), 1)
        top = self.y + TITLE_BAND + 10
        for ci, col in enumerate(columns):
            x = SIDE_MARGIN + 10 + ci * col_w
            for ri, item in enumerate(col):
                iy = top + ri * 24
                self._text(x, iy, item.label, size=14, bold=True, color="primary", max_width=col_w - 12)
                self._text(x, iy + 12, item.value, size=14 if item.bold_value else 13,
                           bold=item.bold_value, color=item.color, max_width=col_w - 12)
        self.y += height + BLOCK_GAP
        return self.y

    def approval_card(
        self,
        compiled_by: Tuple[str, str],
        presented_to: Tuple[str, str],
        when: datetime,
        height: float = 70,
    ) -> float:
        self.ensure_space(height)
        band = 15
        self._card_frame(height, "DOCUMENT APPROVAL", "primary", band=band)
        top = self.y + band + 15
        c = self.canvas
        for x, heading, (name, role), caption in (
            (25, "COMPILED BY:", compiled_by, f"Signature        Date: {when:%b %d, %Y}"),
            (PAGE_WIDTH / 2 + 10, "PRESENTED TO:", presented_to, "Signature & Date"),
        ):
            self._text(x, top, heading, size=12, bold=True, color="secondary")
            self._text(x, top + 12, name, size=14, bold=True, color="primary")
            self._text(x, top + 20, role, size=11, color="secondary")
            c.saveState()
            c.setStrokeColor(rgb("secondary"))
            c.setLineWidth(0.3 * mm)
            c.line(x * mm, self._py(top + 36), (x + 70) * mm, self._py(top + 36))
            c.restoreState()
            self._text(x, top + 42, caption, size=10, color="secondary")
        self.y += height + BLOCK_GAP
        return self.y

    def note(self, text: str, *, size: float = 13, color: str = "secondary", gap: float = BLOCK_GAP) -> float:
        self.ensure_space(5 + gap)
        self._text(SIDE_MARGIN, self.y + 5, text, size=size, color=color, max_width=CONTENT_WIDTH)
        self.y += 5 + gap
        return self.y

    def section_title(self, title: str) -> None:
        self._text(SIDE_MARGIN, self.y, title, size=16, bold=True, color="primary", max_width=CONTENT_WIDTH)

    def table(
        self,
        title: str,
        columns: Sequence[Column],
        rows: Sequence[Sequence[object]],
        *,
        accent: str = "primary",
        totals: Optional[Mapping[int, float]] = None,
        fonts: TableFonts = DEFAULT_FONTS,
    ) -> float:
        """
        Titled table. Empty input prints the no-data line instead; otherwise
        the body flows across pages with its header row repeated.
        """
        body = build_table_rows(columns, rows, totals)
        # title plus header row plus one body row must fit together
        self.ensure_space(60 if body else 25)
        self.section_title(title)

        if not body:
            self._text(SIDE_MARGIN, self.y + 15, NO_DATA_TEXT, size=13)
            self.y += 30
            return self.y

        self.y += 8
        has_total = totals is not None
        t = self._make_table(columns, body, accent, fonts, has_total)
        width = CONTENT_WIDTH * mm
        fresh_page = False
        while True:
            avail = self.remaining() * mm
            _, h = t.wrap(width, avail)
            if h <= avail:
                t.drawOn(self.canvas, SIDE_MARGIN * mm, self._py(self.y) - h)
                self.y += h / mm
                break
            parts = t.split(width, avail)
            if len(parts) < 2:
                if fresh_page:
                    _log.warning("Layout.table_overflow title=%s height_mm=%.1f", title, h / mm)
                    t.drawOn(self.canvas, SIDE_MARGIN * mm, self._py(self.y) - h)
                    self.y += h / mm
                    break
                self.new_page()
                fresh_page = True
                continue
            head, rest = parts[0], parts[1]
            _, hh = head.wrap(width, avail)
            head.drawOn(self.canvas, SIDE_MARGIN * mm, self._py(self.y) - hh)
            self.new_page()
            fresh_page = True
            t = rest

        self.y += TABLE_GAP
        return self.y

    def _make_table(
        self,
        columns: Sequence[Column],
        body: List[List[str]],
        accent: str,
        fonts: TableFonts,
        has_total: bool,
    ) -> Table:
        share = sum(c.width for c in columns) or 1.0
        widths = [CONTENT_WIDTH * mm * c.width / share for c in columns]
        pad = 5

        header = [ellipsize(c.header, FONT_BOLD, fonts.header, w - 2 * pad) for c, w in zip(columns, widths)]
        last = len(body)
        data = [header]
        for i, row in enumerate(body, start=1):
            is_total = has_total and i == last
            font, size = (FONT_BOLD, fonts.total) if is_total else (FONT, fonts.body)
            data.append([ellipsize(cell, font, size, w - 2 * pad) for cell, w in zip(row, widths)])

        cmds = [
            ("BACKGROUND", (0, 0), (-1, 0), rgb(accent)),
            ("TEXTCOLOR", (0, 0), (-1, 0), rgb("white")),
            ("FONTNAME", (0, 0), (-1, 0), FONT_BOLD),
            ("FONTSIZE", (0, 0), (-1, 0), fonts.header),
            ("LEADING", (0, 0), (-1, 0), fonts.header * 1.2),
            ("FONTNAME", (0, 1), (-1, last), FONT),
            ("FONTSIZE", (0, 1), (-1, last), fonts.body),
            ("LEADING", (0, 1), (-1, last), fonts.body * 1.2),
            ("TEXTCOLOR", (0, 1), (-1, last), rgb("secondary")),
            ("ROWBACKGROUNDS", (0, 1), (-1, last), [rgb("white"), rgb("background")]),
            ("LINEBELOW", (0, 1), (-1, last), 0.2 * mm, rgb("border")),
            ("LEFTPADDING", (0, 0), (-1, -1), pad),
            ("RIGHTPADDING", (0, 0), (-1, -1), pad),
            ("TOPPADDING", (0, 0), (-1, 0), 7),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 7),
            ("TOPPADDING", (0, 1), (-1, last), 5),
            ("BOTTOMPADDING", (0, 1), (-1, last), 5),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
        for ci, col in enumerate(columns):
            if col.align != "LEFT":
                cmds.append(("ALIGN", (ci, 0), (ci, last), col.align))
        if has_total:
            cmds += [
                ("FONTNAME", (0, last), (-1, last), FONT_BOLD),
                ("FONTSIZE", (0, last), (-1, last), fonts.total),
                ("LEADING", (0, last), (-1, last), fonts.total * 1.2),
                ("TEXTCOLOR", (0, last), (-1, last), rgb("primary")),
            ]
        return Table(data, colWidths=widths, repeatRows=1, style=TableStyle(cmds))



# ------------------------------ Document setup ------------------------------

@dataclass(frozen=True)
class ReportOptions:
    """Per-run settings handed to every render_* function."""

    org: OrgProfile = field(default_factory=OrgProfile)
    logo_png: Optional[bytes] = None


def open_layout(options: ReportOptions, report_name: str) -> ReportLayout:
    """New layout whose pages carry the org header and a '<Org> - <name> Report' footer."""
    org = options.org
    branding = Branding(
        org_name=org.name,
        address_lines=tuple(org.address_lines),
        footer_label=f"{org.short_name} - {report_name} Report",
        logo_png=options.logo_png,
    )
    return ReportLayout(branding, title=f"{report_name} Report", author=org.short_name)


def approval(layout: ReportLayout, options: ReportOptions, when: datetime) -> float:
    return layout.approval_card(options.org.compiled_by, options.org.presented_to, when)
