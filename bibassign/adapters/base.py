"""Abstract base adapter for reading race series input files."""

from abc import ABC, abstractmethod


class BaseAdapter(ABC):
    @abstractmethod
    def parse(self, data_path: str):
        """Parse one input file.

        Race day adapters return a RaceDay; loaner adapters return the
        loaner bibs as a list of strings in issuance order.

        Raises:
            LoadError: the file is unreadable or malformed. Adapters never
                return a partially parsed file.
        """
        pass
