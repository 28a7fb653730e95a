"""Errors raised by a bib assignment run.

Every error here is terminal for the run; the CLI reports it and exits.
"""


class BibAssignError(Exception):
    """Base class for all run failures."""


class LoadError(BibAssignError):
    """A race day or loaner file could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"error loading {path}: {reason}")


class PoolExhaustedError(BibAssignError):
    """A loaner bib was needed but the pool has no entries left."""

    def __init__(self, issued: int):
        self.issued = issued
        super().__init__(f"ran out of loaner bibs after issuing {issued}")


class WriteError(BibAssignError):
    """One or more processed race day files could not be written."""

    def __init__(self, failures: list[tuple[str, str]]):
        self.failures = failures
        paths = ', '.join(path for path, _ in failures)
        super().__init__(f"error writing output: {paths}")
