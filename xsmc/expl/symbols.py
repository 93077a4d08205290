"""Symbol tables of the expression language: types, fields, globals, locals, parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

#: First address handed out to global and local variables.
DATA_START = 4096


class SymbolError(Exception):
    """Raised when a symbol is declared twice."""


@dataclass(eq=False)
class TypeEntry:
    """A type: built-in or user defined, with its fields in order."""

    name: str
    size: int = 0
    fields: List["Field"] = field(default_factory=list)


@dataclass(eq=False)
class Field:
    """A field of a user defined type."""

    name: str
    type: Optional[TypeEntry] = None
    field_index: int = 0


@dataclass(eq=False)
class Param:
    """A formal parameter of a function."""

    name: str
    type: Optional[TypeEntry] = None
    amp: int = 0


@dataclass(eq=False)
class GlobalSymbol:
    """A global variable, array or function.

    Functions have size -1 and are bound to a function number; variables are
    bound to a memory address.
    """

    name: str
    type: Optional[TypeEntry]
    size: int
    binding: int
    paramlist: Any = None
    flabel: int = 0


@dataclass(eq=False)
class LocalSymbol:
    """A local variable of the function being compiled."""

    name: str
    type: Optional[TypeEntry]
    binding: int


def _find(entries, name):
    return next((entry for entry in entries if entry.name == name), None)


class SymbolTables:
    """All symbol tables of one compilation.

    ``globals``, ``locals``, ``params`` and ``types`` hold entries in the
    order they were installed. ``pending_fields`` collects the fields of the
    type being declared until ``tinstall`` takes them.
    """

    def __init__(self, total_count=DATA_START, fbind=0):
        self.total_count = total_count
        self.fbind = fbind
        self.globals: List[GlobalSymbol] = []
        self.locals: List[LocalSymbol] = []
        self.params: List[Param] = []
        self.types: List[TypeEntry] = []
        self.pending_fields: List[Field] = []

    def glookup(self, name) -> Optional[GlobalSymbol]:
        """Return the global symbol of that name, or None."""
        return _find(self.globals, name)

    def ginstall(self, name, type, size, paramlist):
        """Install a global; size -1 marks a function."""
        if self.glookup(name) is not None:
            raise SymbolError(f'Variable re-initialized "{name}"')
        if size == -1:
            binding = self.fbind
            self.fbind += 1
        else:
            binding = self.total_count
            self.total_count += size
        symbol = GlobalSymbol(name, type, size, binding, paramlist)
        self.globals.append(symbol)
        return symbol

    def llookup(self, name) -> Optional[LocalSymbol]:
        """Return the local symbol of that name, or None."""
        return _find(self.locals, name)

    def linstall(self, name, type):
        """Install a local variable at the next free address."""
        symbol = LocalSymbol(name, type, self.total_count)
        self.total_count += 1
        self.locals.append(symbol)
        return symbol

    def plookup(self, name) -> Optional[Param]:
        """Return the parameter of that name, or None."""
        return _find(self.params, name)

    def pinstall(self, name, type):
        """Append a formal parameter."""
        param = Param(name, type)
        self.params.append(param)
        return param

    def tlookup(self, name) -> Optional[TypeEntry]:
        """Return the type of that name, or None."""
        return _find(self.types, name)

    def tinstall(self, name, size, fields):
        """Install a type with the given fields.

        Fields whose type is the placeholder type ``dummy`` refer to the type
        being declared. Fields are numbered in order and the type's size is
        their count; the pending field list is started afresh.
        """
        entry = TypeEntry(name)
        self.types.append(entry)
        fields = list(fields) if fields is not None else []
        dummy = self.tlookup("dummy")
        for index, item in enumerate(fields):
            if item.type is dummy:
                item.type = self.tlookup(name)
            item.field_index = index
        entry.fields = fields
        entry.size = len(fields)
        self.pending_fields = []
        return entry

    def flookup(self, name, fields) -> Optional[Field]:
        """Return the field of that name in a field list, or None."""
        return _find(fields or (), name)

    def finstall(self, type, name):
        """Add a field to the type being declared."""
        item = Field(name, type)
        self.pending_fields.append(item)
        return item

    def format_globals(self):
        """Return the global table as ``name----type-----binding`` lines."""
        return "".join(
            f"{symbol.name}----{symbol.type.name if symbol.type else None}"
            f"-----{symbol.binding}\n"
            for symbol in self.globals
        )