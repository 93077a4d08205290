"""Symbolic constants and register aliases of an SPL program."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .nodes import NodeType

CONSTANT_NAME_MAX_LEN = 30


class SymbolError(Exception):
    """Raised for conflicting or unknown constant and alias names."""


@dataclass
class Alias:
    """A name given to a register within a block nesting depth."""

    name: str
    reg: int
    depth: int


class SymbolTable:
    """Constants and the stack of register aliases.

    ``depth`` is the current block nesting depth and ``line`` the current
    source line; both are kept up to date by the parser.
    """

    def __init__(self):
        self._constants: Dict[str, int] = {}
        self._aliases: List[Alias] = []  # newest first
        self.depth = 0
        self.line = 0

    def lookup_constant(self, name) -> Optional[int]:
        """Return the value of a constant, or None."""
        return self._constants.get(name)

    def lookup_alias(self, name) -> Optional[Alias]:
        """Return the innermost alias of that name, or None."""
        return next((a for a in self._aliases if a.name == name), None)

    def lookup_alias_reg(self, reg) -> Optional[Alias]:
        """Return the innermost alias of that register, or None."""
        return next((a for a in self._aliases if a.reg == reg), None)

    def push_alias(self, name, reg):
        """Give a register a name in the current block."""
        if name in self._constants:
            raise SymbolError(
                f"{self.line}: Alias name {name} already used as symbolic contant!!"
            )
        existing = self.lookup_alias(name)
        if existing is not None and existing.depth == self.depth:
            raise SymbolError(
                f"{self.line}: Alias name {name} already used as in the current block!!"
            )
        same_reg = self.lookup_alias_reg(reg)
        if same_reg is not None and same_reg.depth == self.depth:
            same_reg.name = name
        else:
            self._aliases.insert(0, Alias(name, reg, self.depth))

    def pop_aliases(self):
        """Drop the aliases made at the current depth."""
        while self._aliases and self._aliases[0].depth == self.depth:
            self._aliases.pop(0)

    def insert_constant(self, name, value):
        """Define a constant; a name may be defined only once."""
        if name in self._constants:
            raise SymbolError(
                f"{self.line}: Multiple Definitions for constant {name}!!"
            )
        self._constants[name] = value

    def load_constants(self, path="splconstants.cfg"):
        """Define the constants listed as ``name value`` pairs in a file.

        Reading stops at the first pair whose value is not an integer.
        """
        try:
            with open(path, encoding="utf-8") as handle:
                words = handle.read().split()
        except OSError as exc:
            raise SymbolError(f"Unable to open {path} file!") from exc
        for name, value in zip(words[::2], words[1::2]):
            try:
                number = int(value)
            except ValueError:
                break
            self.insert_constant(name, number)

    def substitute(self, node):
        """Turn an identifier node into a number or register node."""
        value = self.lookup_constant(node.name)
        if value is not None:
            node.nodetype = NodeType.NUM
            node.name = None
            node.value = value
            return node
        alias = self.lookup_alias(node.name)
        if alias is None:
            raise SymbolError(f"{self.line}: Unknown identifier {node.name} used!!")
        node.nodetype = NodeType.REG
        node.name = None
        node.value = alias.reg
        return node