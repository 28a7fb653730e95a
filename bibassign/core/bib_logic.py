"""Two-pass bib resolution across every day of a race series.

Pass 1 claims every home bib in the series before anything else is decided,
so an away bib or loaner handed out on day 1 can never collide with a home
bib that only shows up on day 3.

Pass 2 visits the records without a home bib, in day order then file order:
  1. Competitor already decided on an earlier record -> reuse that bib
  2. Away bib present and free                        -> take the away bib
  3. Away bib present but claimed                     -> next loaner
  4. No away bib                                      -> next loaner
Every new decision is claimed in the registry and cached under the
competitor's identity key, which is what makes step 1 work on later days.
"""

import logging
import os
from collections import Counter
from dataclasses import dataclass, field

from .loaner_pool import LoanerPool
from .models import HomeOrg, RaceDay
from .registry import BibRegistry, OverrideCache

log = logging.getLogger(__name__)

DECISION_HOME = 'Home'
DECISION_EXISTING = 'Existing Assignment'
DECISION_AWAY = 'Away'
DECISION_LOANER_CONFLICT = 'Loaner - Conflict'
DECISION_LOANER = 'Loaner'


@dataclass
class ResolutionSummary:
    """Outcome counts of a completed run."""
    decisions: Counter = field(default_factory=Counter)
    loaners_issued: list = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.decisions.values())


def claim_home_bibs(days: list[RaceDay], home_org: HomeOrg,
                    registry: BibRegistry | None = None) -> BibRegistry:
    """Pass 1: claim every home bib in the series.

    Args:
        days: Race days in load order.
        home_org: Organization whose bib column is authoritative.
        registry: Registry to grow; a fresh one is created if omitted.

    Returns:
        The registry holding every home bib.
    """
    if registry is None:
        registry = BibRegistry()

    for day in days:
        log.info("Home Bib Processing %s", os.path.basename(day.source_path))
        for record in day.records:
            bib = record.home_bib(home_org)
            if not bib:
                continue
            registry.claim(bib)
            record.set_decision(DECISION_HOME)
            log.info("\t%s: Home bib allocated %s", record.log_name(), bib)

    return registry


def resolve_remaining(days: list[RaceDay], home_org: HomeOrg,
                      registry: BibRegistry, pool: LoanerPool,
                      cache: OverrideCache) -> list[str]:
    """Pass 2: give every record without a home bib its final bib.

    Must run after claim_home_bibs has seen all days.

    Returns:
        Loaners handed to competitors, in issue order. Pool entries passed
        over because they were blank or already claimed are not included.

    Raises:
        PoolExhaustedError: a loaner was needed and the pool is empty. The
            records after the failing one are left untouched.
    """
    loaners = []
    for day in days:
        log.info("Second Pass Processing %s", os.path.basename(day.source_path))
        for record in day.records:
            if record.home_bib(home_org):
                continue

            key = record.identity_key()
            if not key:
                log.warning("\tRecord with blank identity shares one override "
                            "with every other blank record (team %r)", record.team)

            existing = cache.get(key)
            if existing is not None:
                record.set_bib(home_org, existing)
                record.set_decision(DECISION_EXISTING)
                log.info("\t%s: Using existing override %s", record.log_name(), existing)
                continue

            away = record.away_bib(home_org)
            if away and registry.is_claimed(away):
                bib = _next_free_loaner(pool, registry)
                loaners.append(bib)
                decision = DECISION_LOANER_CONFLICT
                log.info("\t%s: Away bib %s is used, using loaner %s",
                         record.log_name(), away, bib)
            elif away:
                bib = away
                decision = DECISION_AWAY
                log.info("\t%s: Using Away bib %s", record.log_name(), bib)
            else:
                bib = _next_free_loaner(pool, registry)
                loaners.append(bib)
                decision = DECISION_LOANER
                log.info("\t%s: Doesn't have a bib, using loaner %s",
                         record.log_name(), bib)

            record.set_bib(home_org, bib)
            record.set_decision(decision)
            registry.claim(bib)
            cache.remember(key, bib)

    return loaners


def _next_free_loaner(pool: LoanerPool, registry: BibRegistry) -> str:
    """Next loaner nobody holds yet; claimed or blank entries are passed over."""
    while True:
        bib = pool.next_bib()
        if not bib:
            log.warning("\tBlank loaner entry, skipping")
        elif registry.is_claimed(bib):
            log.warning("\tLoaner %s is already in use, skipping", bib)
        else:
            return bib


class BibSolver:
    """Owns the registry, loaner pool and override cache for one run."""

    def __init__(self, home_org: HomeOrg, loaner_bibs: list[str]):
        self.home_org = home_org
        self.days: list[RaceDay] = []
        self.registry = BibRegistry()
        self.pool = LoanerPool(loaner_bibs)
        self.cache = OverrideCache()

    def add_day(self, day: RaceDay) -> None:
        self.days.append(day)

    def bib_logic(self) -> ResolutionSummary:
        """Run both passes over every loaded day, mutating records in place."""
        claim_home_bibs(self.days, self.home_org, self.registry)
        loaners = resolve_remaining(self.days, self.home_org, self.registry,
                                    self.pool, self.cache)

        summary = ResolutionSummary(loaners_issued=loaners)
        for day in self.days:
            summary.decisions.update(r.decision for r in day.records)
        return summary
