"""Run-scoped bookkeeping: claimed bibs and per-competitor overrides."""


class BibRegistry:
    """Bibs already claimed in this run. Claims are never released."""

    def __init__(self):
        self._claimed = set()

    def __len__(self) -> int:
        return len(self._claimed)

    def __contains__(self, bib: str) -> bool:
        return bib in self._claimed

    def is_claimed(self, bib: str) -> bool:
        return bib in self._claimed

    def claim(self, bib: str) -> None:
        self._claimed.add(bib)


class OverrideCache:
    """Identity key -> bib decided for that competitor on an earlier record."""

    def __init__(self):
        self._bibs: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._bibs)

    def get(self, key: str) -> str | None:
        return self._bibs.get(key)

    def remember(self, key: str, bib: str) -> None:
        existing = self._bibs.get(key)
        if existing is not None and existing != bib:
            raise ValueError(
                f"competitor {key!r} already assigned {existing}, refusing {bib}")
        self._bibs[key] = bib
