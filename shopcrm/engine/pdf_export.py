"""
PDF Export - Commercial proposal document (A4) built with the reportlab canvas.

Layout, in millimetres from the top edge:
  20-40   company name, tagline and document title
  45-70   client / project / date / total block between two rules
  80+     proposal body, wrapped to a 170 mm column, 6 mm per line
  290     footer on every page: generator note and "Página i de N"
A new page starts whenever the next line would sit below 280 mm; body
text on continuation pages starts at 20 mm.
"""

from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
import logging
from typing import List, Tuple

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from shopcrm.config import config
from shopcrm.engine.dashboard import format_brl
from shopcrm.logging_config import log_call

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4

LEFT = 20
RIGHT = 190
BODY_WIDTH = 170
BODY_START_Y = 80
PAGE_BREAK_Y = 280
CONTINUATION_Y = 20
LINE_HEIGHT = 6
FOOTER_Y = 290

BODY_FONT = 'Helvetica'
BOLD_FONT = 'Helvetica-Bold'
BODY_SIZE = 11

PRIMARY = HexColor('#ea580c')
TEXT = HexColor('#334155')
MUTED = HexColor('#64748b')
RULE = HexColor('#e2e8f0')
FOOTER = HexColor('#969696')


@dataclass
class QuoteDocument:
    client_name: str
    project_title: str
    issued_on: date
    total: float
    body: str
    items: List[Tuple[str, float, float]] = field(default_factory=list)


# =============================================================================
# LAYOUT (pure)
# =============================================================================

def wrap_text(text: str, width_mm: float = BODY_WIDTH, font: str = BODY_FONT, size: float = BODY_SIZE) -> List[str]:
    """
    Greedy word wrap to a fixed column width. Paragraph breaks are kept as
    empty lines; a single word wider than the column gets a line of its own.
    """
    max_width = width_mm * mm
    lines: List[str] = []
    for paragraph in text.splitlines():
        words = paragraph.split()
        if not words:
            lines.append('')
            continue
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if stringWidth(candidate, font, size) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def paginate(lines: List[str], start_y: float = BODY_START_Y, page_break_y: float = PAGE_BREAK_Y,
             line_height: float = LINE_HEIGHT, top_y: float = CONTINUATION_Y) -> List[List[Tuple[float, str]]]:
    """Assign each line a (y, text) slot, opening a new page past page_break_y."""
    pages: List[List[Tuple[float, str]]] = [[]]
    y = start_y
    for line in lines:
        if y > page_break_y:
            pages.append([])
            y = top_y
        pages[-1].append((y, line))
        y += line_height
    return pages


def pdf_filename(client_name: str, when: date) -> str:
    """Proposta_<first name>_<dd-mm-yyyy>.pdf"""
    first = (client_name.split() or ['Cliente'])[0]
    return f"Proposta_{first}_{when.strftime('%d-%m-%Y')}.pdf"


# =============================================================================
# RENDERING
# =============================================================================

def _y(top_mm: float) -> float:
    """Top-based millimetres to reportlab's bottom-based points."""
    return PAGE_HEIGHT - top_mm * mm


def _draw_header(c: canvas.Canvas, doc: QuoteDocument) -> None:
    c.setFont(BOLD_FONT, 22)
    c.setFillColor(PRIMARY)
    c.drawString(LEFT * mm, _y(20), config.COMPANY_NAME)

    c.setFont(BODY_FONT, 10)
    c.setFillColor(MUTED)
    c.drawString(LEFT * mm, _y(26), config.COMPANY_TAGLINE)

    c.setFont(BOLD_FONT, 16)
    c.setFillColor(HexColor('#000000'))
    c.drawString(LEFT * mm, _y(40), "PROPOSTA COMERCIAL")

    c.setStrokeColor(RULE)
    c.setLineWidth(0.5 * mm)
    c.line(LEFT * mm, _y(45), RIGHT * mm, _y(45))

    c.setFillColor(TEXT)
    c.setFont(BODY_FONT, BODY_SIZE)
    c.drawString(LEFT * mm, _y(55), "Cliente:")
    c.drawString(LEFT * mm, _y(62), "Projeto:")
    c.drawString(140 * mm, _y(55), "Data:")
    c.drawString(155 * mm, _y(55), doc.issued_on.strftime('%d/%m/%Y'))
    c.drawString(140 * mm, _y(62), "Total:")

    c.setFont(BOLD_FONT, BODY_SIZE)
    c.drawString(40 * mm, _y(55), doc.client_name)
    c.drawString(40 * mm, _y(62), doc.project_title or 'Orçamento Personalizado')
    c.setFillColor(PRIMARY)
    c.drawString(155 * mm, _y(62), format_brl(doc.total))

    c.line(LEFT * mm, _y(70), RIGHT * mm, _y(70))


def _draw_footer(c: canvas.Canvas, page: int, page_count: int) -> None:
    c.setFont(BODY_FONT, 9)
    c.setFillColor(FOOTER)
    c.drawString(LEFT * mm, _y(FOOTER_Y), f"Gerado por {config.COMPANY_NAME} CRM")
    c.drawString(180 * mm, _y(FOOTER_Y), f"Página {page} de {page_count}")


def _body_lines(doc: QuoteDocument) -> List[str]:
    lines: List[str] = []
    if doc.items:
        lines.append("Itens:")
        for description, quantity, unit_price in doc.items:
            lines.extend(wrap_text(f"{quantity:g}x {description} - {format_brl(quantity * unit_price)}"))
        lines.append('')
    lines.extend(wrap_text(doc.body))
    return lines


@log_call
def render_quote_pdf(doc: QuoteDocument) -> bytes:
    """Render the proposal and return the PDF bytes."""
    pages = paginate(_body_lines(doc))
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Proposta - {doc.project_title}")

    for number, page in enumerate(pages, start=1):
        if number == 1:
            _draw_header(c, doc)
        c.setFont(BODY_FONT, BODY_SIZE)
        c.setFillColor(TEXT)
        for y, line in page:
            c.drawString(LEFT * mm, _y(y), line)
        _draw_footer(c, number, len(pages))
        c.showPage()

    c.save()
    logger.info(f"Rendered proposal PDF for {doc.client_name}: {len(pages)} page(s)")
    return buffer.getvalue()
