"""Adapter for race day registration exports (CSV).

Layout:
  - Row 1-2: event header rows, kept verbatim for the processed file
  - Row 3+:  one competitor per row, exactly one cell per CompetitorRecord field:
             NEMS bib, Mid-Atlantic bib, USSA, FIS, first, last, YOB, gender,
             team, registration date, USSA membership, NASTAR, season pass,
             decision
"""

import csv

from ..core.errors import LoadError
from ..core.models import CompetitorRecord, FIELD_ORDER, RaceDay
from .base import BaseAdapter

HEADER_ROWS = 2


class RaceDayAdapter(BaseAdapter):
    """Parse a race day CSV into a RaceDay."""

    def parse(self, data_path: str) -> RaceDay:
        try:
            with open(data_path, 'r', encoding='utf-8-sig', newline='') as f:
                rows = list(csv.reader(f))
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise LoadError(data_path, str(e)) from e

        if len(rows) < HEADER_ROWS:
            raise LoadError(data_path,
                            f"expected {HEADER_ROWS} header rows, found {len(rows)}")

        day = RaceDay(source_path=data_path, header_lines=rows[:HEADER_ROWS])

        for line_no, row in enumerate(rows[HEADER_ROWS:], start=HEADER_ROWS + 1):
            if not row:
                continue
            if len(row) != len(FIELD_ORDER):
                raise LoadError(
                    data_path,
                    f"line {line_no}: number of fields mismatch, "
                    f"{len(row)} != {len(FIELD_ORDER)}")
            day.records.append(CompetitorRecord.from_row(row))

        return day
