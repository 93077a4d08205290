"""Map from assembly labels to the addresses they stand for."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple


class LabelMap:
    """Labels in the order they were recorded, with their addresses.

    A label recorded twice keeps its first address for lookups.
    """

    def __init__(self):
        self._entries: List[Tuple[str, int]] = []
        self._first: Dict[str, int] = {}

    def append(self, label, addr):
        """Record a label at an address."""
        self._entries.append((label, addr))
        self._first.setdefault(label, addr)

    def find(self, name) -> Optional[int]:
        """Return the address of a label, or None if it is unknown."""
        return self._first.get(name)

    def __contains__(self, name):
        return name in self._first

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def format(self):
        """Return the table as ``name : address`` lines."""
        return "".join(f"{name} : {addr}\n" for name, addr in self._entries)