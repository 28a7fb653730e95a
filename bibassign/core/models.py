"""Data models for the race bib assigner."""

import os
from dataclasses import dataclass, field, fields
from enum import Enum


class HomeOrg(Enum):
    """Which organization's bib column is ours for the run."""
    MID_ATLANTIC = 'mid-atlantic'
    NEW_ENGLAND = 'new-england'


@dataclass
class RunConfig:
    """Configuration for a single bib assignment run."""
    home_org: HomeOrg           # HomeOrg.MID_ATLANTIC or HomeOrg.NEW_ENGLAND
    loaner_path: str            # "loaner_bibs.csv"
    race_day_paths: list = field(default_factory=list)  # in day order
    output_dir: str = '.'
    bib_sheet: bool = False     # also write bib_sheet.pdf


def clean_bib(bib: str) -> str:
    return bib.strip()


@dataclass
class CompetitorRecord:
    """One data line of a race day file.

    Field order matches the column order of the file and must not change.
    """
    nems_bib: str = ''
    mid_bib: str = ''
    ussa: str = ''
    fis: str = ''
    first_name: str = ''
    last_name: str = ''
    yob: str = ''
    gender: str = ''
    team: str = ''
    registration_date: str = ''
    ussa_membership: str = ''
    nastar: str = ''
    season_pass: str = ''
    decision: str = ''

    @classmethod
    def from_row(cls, row: list[str]) -> 'CompetitorRecord':
        if len(row) != len(FIELD_ORDER):
            raise ValueError(
                f"expected {len(FIELD_ORDER)} fields, got {len(row)}")
        return cls(*row)

    def to_row(self) -> list[str]:
        return [getattr(self, name) for name in FIELD_ORDER]

    def home_bib(self, home_org: HomeOrg) -> str:
        if home_org is HomeOrg.NEW_ENGLAND:
            return clean_bib(self.nems_bib)
        return clean_bib(self.mid_bib)

    def away_bib(self, home_org: HomeOrg) -> str:
        if home_org is HomeOrg.NEW_ENGLAND:
            return clean_bib(self.mid_bib)
        return clean_bib(self.nems_bib)

    def set_bib(self, home_org: HomeOrg, bib: str) -> None:
        """Write the bib into the home organization's column only."""
        if home_org is HomeOrg.NEW_ENGLAND:
            self.nems_bib = clean_bib(bib)
        else:
            self.mid_bib = clean_bib(bib)

    def set_decision(self, label: str) -> None:
        self.decision = label

    def identity_key(self) -> str:
        """Key used to recognize the same competitor across race days."""
        return (self.ussa + self.first_name + self.last_name + self.yob).strip()

    def log_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


FIELD_ORDER = tuple(f.name for f in fields(CompetitorRecord))


@dataclass
class RaceDay:
    """All competitor records of one race day file, in file order."""
    source_path: str
    header_lines: list = field(default_factory=list)  # two rows of cells, passed through
    records: list = field(default_factory=list)

    @property
    def name(self) -> str:
        base = os.path.basename(self.source_path)
        return os.path.splitext(base)[0]

    def output_path(self, output_dir: str) -> str:
        return os.path.join(output_dir, f"processed - {self.name}.csv")
