"""Labels of an SPL program and the stack of enclosing while loops."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


class LabelError(Exception):
    """Raised for a redeclared label or a loop label used outside a loop."""


@dataclass(frozen=True)
class Label:
    """A named position in the generated code."""

    name: str

    def __str__(self):
        return self.name


class LabelTable:
    """Declared labels, generated label names and the while-loop stack."""

    def __init__(self):
        self._labels: Dict[str, Label] = {}
        self._next_name = 1
        self._loops: List[Tuple[Label, Label]] = []
        self.line = 0

    def create(self):
        """Return a new label with a generated, unused name.

        The label is not entered in the table of declared labels.
        """
        label = Label(f"_L{self._next_name}")
        self._next_name += 1
        return label

    def add(self, name):
        """Declare a label; a name may be declared only once."""
        if name in self._labels:
            raise LabelError(f"{self.line}: Label '{name}' redeclared.")
        label = Label(name)
        self._labels[name] = label
        return label

    def get(self, name):
        """Return the declared label of that name, or None."""
        return self._labels.get(name)

    def __contains__(self, name):
        return name in self._labels

    def push_while(self, start, end):
        """Enter a while loop whose start and end labels are given."""
        self._loops.append((start, end))

    def pop_while(self):
        """Leave the innermost while loop."""
        if not self._loops:
            raise LabelError("no while loop to leave")
        self._loops.pop()

    def _innermost(self):
        if not self._loops:
            raise LabelError(f"{self.line}: break or continue outside a while loop")
        return self._loops[-1]

    def while_start(self) -> Optional[Label]:
        """Return the start label of the innermost while loop."""
        return self._innermost()[0]

    def while_end(self) -> Optional[Label]:
        """Return the end label of the innermost while loop."""
        return self._innermost()[1]