"""Writes processed race day files.

Each race day becomes "processed - <name>.csv" in the output directory:
the two original header rows, then every competitor row in load order with
the assigned bib and decision filled in.
"""

import csv
import logging
import os

from .errors import WriteError
from .models import RaceDay

log = logging.getLogger(__name__)


def write_race_day(day: RaceDay, output_dir: str) -> str:
    """Write one processed race day and return its path."""
    output_path = day.output_path(output_dir)
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerows(day.header_lines)
        for record in day.records:
            writer.writerow(record.to_row())
    return output_path


def write_output(days: list[RaceDay], output_dir: str) -> list[str]:
    """Write every race day, continuing past per-file failures.

    Files that were written stay on disk even if a later one fails.

    Returns:
        Paths written, in day order.

    Raises:
        WriteError: listing every destination that could not be written.
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise WriteError([(output_dir, str(e))]) from e

    written = []
    failures = []
    for day in days:
        try:
            path = write_race_day(day, output_dir)
        except OSError as e:
            dest = day.output_path(output_dir)
            log.error("error writing %s: %s", dest, e)
            failures.append((dest, str(e)))
            continue
        log.info("Wrote %s", path)
        written.append(path)

    if failures:
        raise WriteError(failures)
    return written
