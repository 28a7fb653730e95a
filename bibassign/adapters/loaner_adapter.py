"""Adapter for the loaner bib list (CSV with Slot and Bib columns)."""

import csv
import logging

from ..core.errors import LoadError
from ..core.models import clean_bib
from .base import BaseAdapter

log = logging.getLogger(__name__)

# Map common header variations to our canonical names
COLUMN_ALIASES = {
    'slot': 'slot',
    'bib': 'bib',
    'bibnumber': 'bib',
    'bib#': 'bib',
}


class LoanerAdapter(BaseAdapter):
    """Parse the loaner bib CSV. Row order is the order loaners are issued."""

    def parse(self, data_path: str) -> list[str]:
        try:
            with open(data_path, 'r', encoding='utf-8-sig', newline='') as f:
                rows = list(csv.reader(f))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise LoadError(data_path, str(e)) from e

        if not rows:
            raise LoadError(data_path, "file is empty")

        col_map = {}
        for i, col in enumerate(rows[0]):
            canonical = COLUMN_ALIASES.get(col.lower().strip().replace(' ', ''))
            if canonical and canonical not in col_map:
                col_map[canonical] = i

        bib_idx = col_map.get('bib')
        if bib_idx is None:
            raise LoadError(data_path, f"no Bib column in header {rows[0]}")

        bibs = []
        for line_no, row in enumerate(rows[1:], start=2):
            if not row:
                continue
            bib = clean_bib(row[bib_idx]) if bib_idx < len(row) else ''
            if not bib:
                log.warning("%s line %d: blank loaner bib skipped", data_path, line_no)
                continue
            bibs.append(bib)

        return bibs
