#!/usr/bin/env python3
"""CLI entry point for assigning bibs across a race series.

Usage:
    python assign_bibs.py --home-org mid-atlantic --loaners loaner_bibs.csv \\
        --race-days "Day 1 GS.csv" "Day 2 SL.csv" --output ./output/
"""

import argparse
import logging
import os
import sys

# Add parent directory to path for imports (skip when frozen by PyInstaller)
if not getattr(sys, 'frozen', False):
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bibassign.core.models import HomeOrg, RunConfig
from bibassign.core.bib_logic import BibSolver
from bibassign.core.errors import BibAssignError
from bibassign.core.output_writer import write_output
from bibassign.core.pdf_generator import generate_bib_sheet_pdf
from bibassign.core.run_log import close_run_log, configure_run_log
from bibassign.adapters.loaner_adapter import LoanerAdapter
from bibassign.adapters.race_day_adapter import RaceDayAdapter

log = logging.getLogger('bibassign.assign_bibs')


def parse_args(argv=None) -> RunConfig:
    parser = argparse.ArgumentParser(description='Assign race bibs across a race series')
    parser.add_argument('--home-org', default=HomeOrg.MID_ATLANTIC.value,
                        choices=[org.value for org in HomeOrg],
                        help='Organization whose bib column is authoritative')
    parser.add_argument('--loaners', required=True, help='Loaner bib CSV (Slot, Bib)')
    parser.add_argument('--race-days', nargs='+', required=True,
                        help='Race day CSV file(s), in day order')
    parser.add_argument('--output', required=True, help='Output directory for processed files')
    parser.add_argument('--bib-sheet', action='store_true',
                        help='Also write a printable bib_sheet.pdf')

    args = parser.parse_args(argv)

    return RunConfig(
        home_org=HomeOrg(args.home_org),
        loaner_path=args.loaners,
        race_day_paths=list(args.race_days),
        output_dir=args.output,
        bib_sheet=args.bib_sheet,
    )


def run(config: RunConfig):
    """Load every input, resolve bibs, then write the processed files.

    Nothing is written unless every file loads and both passes complete.

    Raises:
        BibAssignError: on any load, pool or write failure.
    """
    loaner_bibs = LoanerAdapter().parse(config.loaner_path)
    log.info("Loaded %d loaner bibs from %s", len(loaner_bibs), config.loaner_path)

    solver = BibSolver(config.home_org, loaner_bibs)
    adapter = RaceDayAdapter()
    for path in config.race_day_paths:
        day = adapter.parse(path)
        log.info("Loaded %d competitors from %s", len(day.records), path)
        solver.add_day(day)

    summary = solver.bib_logic()

    written = write_output(solver.days, config.output_dir)

    if config.bib_sheet:
        pdf_path = os.path.join(config.output_dir, 'bib_sheet.pdf')
        generate_bib_sheet_pdf(solver.days, config.home_org, pdf_path)
        written.append(pdf_path)

    return summary, written


def main(argv=None) -> int:
    config = parse_args(argv)

    try:
        log_path = configure_run_log(config.output_dir)
        print(f"Run log: {log_path}")
        summary, written = run(config)
    except BibAssignError as e:
        log.error("%s", e)
        print(f"\nFailed: {e}")
        return 1
    finally:
        close_run_log()

    for path in written:
        print(f"Generated {path}")
    print(f"{summary.total} entries across {len(config.race_day_paths)} race days:")
    for decision, count in sorted(summary.decisions.items()):
        print(f"  {decision}: {count}")
    print(f"Loaners issued: {len(summary.loaners_issued)}")

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
