"""Printable bib sheet for the race office.

One section per race day, starting on a new page:
- Bold day title and home organization line
- Column headers: BIB, NAME, TEAM, DECISION
- One row per competitor in file order, continued onto further pages
- Loaner rows highlighted in red so the bibs can be pulled from the box
"""

import fitz  # PyMuPDF

from .errors import WriteError
from .bib_logic import DECISION_LOANER, DECISION_LOANER_CONFLICT
from .models import HomeOrg, RaceDay

# --- Page layout constants (letter: 612 x 792 pt) ---
PAGE_W = 612
PAGE_H = 792

LEFT_MARGIN = 48
COL_X = [LEFT_MARGIN, 108, 300, 450]
COL_HEADERS = ['BIB', 'NAME', 'TEAM', 'DECISION']

TITLE_Y = 48
SUBTITLE_Y = 66
HEADERS_Y = 96
ROWS_START_Y = 114
ROWS_BOTTOM_Y = PAGE_H - 40
FOOTER_Y = PAGE_H - 20

TITLE_SIZE = 16
SUBTITLE_SIZE = 10
HEADER_SIZE = 9
ROW_SIZE = 9
FOOTER_SIZE = 7
LINE_HEIGHT = ROW_SIZE * 1.6

FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'

BLACK = (0, 0, 0)
RED = (0.8, 0, 0)
GRAY = (0.5, 0.5, 0.5)

HOME_ORG_TITLES = {
    HomeOrg.MID_ATLANTIC: 'Mid-Atlantic',
    HomeOrg.NEW_ENGLAND: 'New England',
}


def generate_bib_sheet_pdf(days: list[RaceDay], home_org: HomeOrg, output_path: str):
    """Generate the bib sheet PDF.

    Args:
        days: Resolved race days in load order.
        home_org: Home organization; its bib column is printed.
        output_path: Where to save the PDF.
    """
    doc = fitz.open()
    if not any(day.records for day in days):
        doc.new_page(width=PAGE_W, height=PAGE_H)
        _save(doc, output_path)
        return

    for day in days:
        if not day.records:
            continue
        page = _new_day_page(doc, day, home_org)
        y = ROWS_START_Y
        for record in day.records:
            if y > ROWS_BOTTOM_Y:
                page = _new_day_page(doc, day, home_org, continued=True)
                y = ROWS_START_Y
            _draw_row(page, y, record.home_bib(home_org), record.log_name(),
                      record.team, record.decision)
            y += LINE_HEIGHT

    for i, page in enumerate(doc):
        _draw_footer(page, i + 1, doc.page_count)

    _save(doc, output_path)


def _save(doc, output_path: str):
    """Save and close the document; any save failure becomes a WriteError."""
    try:
        doc.save(output_path)
    except Exception as e:  # MuPDF raises its own FzError types, not OSError
        raise WriteError([(output_path, str(e))]) from e
    finally:
        doc.close()


# --- Drawing functions ---

def _new_day_page(doc, day: RaceDay, home_org: HomeOrg, continued: bool = False):
    """Start a page with the day title and column headers."""
    page = doc.new_page(width=PAGE_W, height=PAGE_H)

    title = day.name + (' (continued)' if continued else '')
    page.insert_text(fitz.Point(LEFT_MARGIN, TITLE_Y), title,
                     fontname=FONT_BOLD, fontsize=TITLE_SIZE, color=BLACK)
    subtitle = f"Home organization: {HOME_ORG_TITLES[home_org]}  -  {len(day.records)} competitors"
    page.insert_text(fitz.Point(LEFT_MARGIN, SUBTITLE_Y), subtitle,
                     fontname=FONT_REGULAR, fontsize=SUBTITLE_SIZE, color=GRAY)

    for x, header in zip(COL_X, COL_HEADERS):
        page.insert_text(fitz.Point(x, HEADERS_Y), header,
                         fontname=FONT_BOLD, fontsize=HEADER_SIZE, color=BLACK)
    rule_y = HEADERS_Y + 5
    page.draw_line(fitz.Point(LEFT_MARGIN, rule_y),
                   fitz.Point(PAGE_W - LEFT_MARGIN, rule_y),
                   color=BLACK, width=0.75)
    return page


def _draw_row(page, y, bib, name, team, decision):
    color = RED if decision in (DECISION_LOANER, DECISION_LOANER_CONFLICT) else BLACK
    cells = [bib, _fit(name, COL_X[2] - COL_X[1]), _fit(team, COL_X[3] - COL_X[2]), decision]
    for x, text in zip(COL_X, cells):
        page.insert_text(fitz.Point(x, y), text,
                         fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=color)


def _fit(text: str, width: float) -> str:
    """Truncate text with '...' so it fits the column width."""
    limit = width - 8
    if fitz.get_text_length(text, fontname=FONT_REGULAR, fontsize=ROW_SIZE) <= limit:
        return text
    while text and fitz.get_text_length(text + '...', fontname=FONT_REGULAR,
                                        fontsize=ROW_SIZE) > limit:
        text = text[:-1]
    return text + '...'


def _draw_footer(page, page_no: int, page_count: int):
    text = f"Page {page_no} of {page_count}"
    tw = fitz.get_text_length(text, fontname=FONT_REGULAR, fontsize=FOOTER_SIZE)
    page.insert_text(fitz.Point(PAGE_W / 2 - tw / 2, FOOTER_Y), text,
                     fontname=FONT_REGULAR, fontsize=FOOTER_SIZE, color=GRAY)
