"""Finite pool of spare bibs handed out in file order."""

from .errors import PoolExhaustedError


class LoanerPool:
    """Ordered loaner bibs with a cursor that only moves forward."""

    def __init__(self, bibs: list[str]):
        self._bibs = list(bibs)
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._bibs)

    @property
    def remaining(self) -> int:
        return len(self._bibs) - self._cursor

    @property
    def issued(self) -> list[str]:
        return self._bibs[:self._cursor]

    def next_bib(self) -> str:
        """Return the next loaner and advance the cursor.

        Raises:
            PoolExhaustedError: the cursor is already past the last entry.
        """
        if self._cursor >= len(self._bibs):
            raise PoolExhaustedError(self._cursor)
        bib = self._bibs[self._cursor]
        self._cursor += 1
        return bib
