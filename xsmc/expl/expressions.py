"""Register allocation and assembly generation for expressions."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .symbols import SymbolTables
from .tree import ASTNode, NodeType

#: Highest register number an expression may use.
MAX_REGISTER = 16

#: Label numbers below this are taken by the heap routines.
FIRST_LABEL = 3

_ARITHMETIC = {
    NodeType.PLUS: "ADD",
    NodeType.MINUS: "SUB",
    NodeType.MUL: "MUL",
    NodeType.DIV: "DIV",
    NodeType.MOD: "MOD",
    NodeType.LE: "LE",
    NodeType.GE: "GE",
    NodeType.LT: "LT",
    NodeType.GT: "GT",
    NodeType.DEQ: "EQ",
    NodeType.NEQ: "NE",
}


class CodegenError(Exception):
    """Raised when a tree cannot be turned into assembly."""


def _position(entries, name) -> Optional[int]:
    return next(
        (index for index, entry in enumerate(entries) if entry.name == name), None
    )


class ExpressionGenerator:
    """Emits assembly for expression nodes into an in-memory listing.

    ``counter`` is the highest register in use (-1 when none is).
    ``isamp`` asks the next identifier for its address instead of its value;
    ``fld`` asks the next identifier, field or array element for the address
    it was loaded from. Both are cleared once used.
    """

    def __init__(self, tables=None):
        self.tables = tables if tables is not None else SymbolTables()
        self.counter = -1
        self.label = FIRST_LABEL
        self.isamp = False
        self.fld = False
        self._out: List[str] = []
        self._handlers: Dict[int, Callable[[ASTNode], int]] = {
            NodeType.AND: self._and,
            NodeType.OR: self._or,
            NodeType.NOT: self._not,
            NodeType.ID: self._identifier,
            NodeType.FIELD: self._field,
            NodeType.ARRAY: self._array,
            NodeType.NUM: self._number,
            NodeType.STRVAL: self._string,
            NodeType.NILL: self._nill,
        }
        for kind in _ARITHMETIC:
            self._handlers[kind] = self._binary

    @property
    def code(self):
        """The assembly emitted so far."""
        return "".join(self._out)

    def _emit(self, *lines):
        self._out.extend(f"{line}\n" for line in lines)

    # -- resources ------------------------------------------------------

    def get_reg(self):
        """Take the next free register and return its number."""
        if self.counter < MAX_REGISTER:
            self.counter += 1
            return self.counter
        raise CodegenError("Running out of registers")

    def free_reg(self):
        """Release the most recently taken register."""
        if self.counter >= 0:
            self.counter -= 1

    def free_all(self):
        """Release every register."""
        self.counter = -1

    def get_label(self):
        """Return a fresh label number."""
        self.label += 1
        return self.label

    # -- dispatch -------------------------------------------------------

    def expression(self, node):
        """Emit code for an expression and return the register holding it.

        A missing node emits nothing and yields register 0.
        """
        if node is None:
            return 0
        handler = self._handlers.get(node.nodetype)
        if handler is None:
            raise CodegenError(
                f"NODETYPE is {int(node.nodetype)}: Error : Unknown node Type"
            )
        return handler(node)

    # -- symbols --------------------------------------------------------

    def _global(self, node):
        symbol = node.gentry or self.tables.glookup(node.name)
        if symbol is None:
            raise CodegenError(f"Un-declared identifier {node.name}")
        return symbol

    def _frame_slot_local(self, r1, offset):
        """Leave BP + offset + 1 in a new register, using r1 as scratch."""
        r2 = self.get_reg()
        self._emit(f"MOV R{r2},BP", f"MOV R{r1},{offset + 1}", f"ADD R{r2},R{r1}")
        return r2

    def _frame_slot_param(self, offset):
        """Leave BP - 2 - (offset + 1) in a new register."""
        r2 = self.get_reg()
        self._emit(f"MOV R{r2},BP")
        r3 = self.get_reg()
        self._emit(
            f"MOV R{r3},2",
            f"SUB R{r2},R{r3}",
            f"MOV R{r3},{offset + 1}",
            f"SUB R{r2},R{r3}",
        )
        self.free_reg()
        return r2

    # -- leaves ---------------------------------------------------------

    def _number(self, node):
        r1 = self.get_reg()
        self._emit(f"MOV R{r1},{node.value}")
        return r1

    def _string(self, node):
        r1 = self.get_reg()
        self._emit(f'MOV R{r1},"{node.name}"')
        return r1

    def _nill(self, node):
        r1 = self.get_reg()
        self._emit(f"MOV R{r1},-1")
        return r1

    def _identifier(self, node):
        r1 = self.get_reg()
        offset = _position(self.tables.locals, node.name)
        if offset is not None:
            r2 = self._frame_slot_local(r1, offset)
            if self.isamp:
                self._emit(f"MOV R{r1},R{r2}")
                self.isamp = False
            else:
                self._emit(f"MOV R{r1},[R{r2}]")
                if self.fld:
                    self._emit(f"MOV R{r1},R{r2}")
                    self.fld = False
            self.free_reg()
            return r1

        offset = _position(self.tables.params, node.name)
        if offset is not None:
            r2 = self._frame_slot_param(offset)
            self._emit(f"MOV R{r1},[R{r2}]")
            self.isamp = False
            self.fld = False
            self.free_reg()
            return r1

        binding = self._global(node).binding
        if self.isamp:
            self._emit(f"MOV R{r1},{binding}")
            self.isamp = False
        else:
            self._emit(f"MOV R{r1},[{binding}]")
            if self.fld:
                self._emit(f"MOV R{r1},{binding}")
                self.fld = False
        return r1

    def _walk_fields(self, node, fields, r1, r2):
        """Follow the ``ptr2`` chain of field names, loading each in turn."""
        link = node
        while link.ptr2 is not None:
            wanted = link.ptr2.name
            for position, entry in enumerate(fields or (), start=1):
                if entry.name == wanted:
                    r2 = self.get_reg()
                    self._emit(
                        f"MOV R{r2},{position}",
                        f"ADD R{r2},R{r1}",
                        f"MOV R{r1},[R{r2}]",
                    )
                    self.free_reg()
                    break
            link = link.ptr2
        if self.fld:
            self._emit(f"MOV R{r1},R{r2}")
            self.fld = False
        return r1

    def _field(self, node):
        r1 = self.get_reg()
        offset = _position(self.tables.locals, node.name)
        if offset is not None:
            local = self.tables.locals[offset]
            r2 = self._frame_slot_local(r1, offset)
            self._emit(f"MOV R{r1},[R{r2}]")
            self.free_reg()
            fields = local.type.fields if local.type is not None else None
            return self._walk_fields(node, fields, r1, r2)

        offset = _position(self.tables.params, node.name)
        if offset is not None:
            param = self.tables.params[offset]
            r2 = self._frame_slot_param(offset)
            self._emit(f"MOV R{r1},[R{r2}]")
            self.free_reg()
            fields = param.type.fields if param.type is not None else None
            return self._walk_fields(node, fields, r1, r2)

        symbol = self._global(node)
        self._emit(f"MOV R{r1},[{symbol.binding}]")
        fields = symbol.type.fields if symbol.type is not None else None
        return self._walk_fields(node, fields, r1, r1)

    def _array(self, node):
        saved = self.fld
        self.fld = False
        index = self.expression(node.ptr2)
        self.fld = saved
        r1 = self.get_reg()
        binding = self._global(node.ptr1).binding
        self._emit(
            f"MOV R{r1},{binding}",
            f"ADD R{r1},R{index}",
            f"MOV R{index},[R{r1}]",
        )
        if self.fld:
            self._emit(f"MOV R{index},R{r1}")
            self.fld = False
        self.free_reg()
        return index

    # -- operators ------------------------------------------------------

    def _binary(self, node):
        r1 = self.expression(node.ptr1)
        r2 = self.expression(node.ptr2)
        self._emit(f"{_ARITHMETIC[node.nodetype]} R{r1},R{r2}")
        self.free_reg()
        return r1

    def _short_circuit(self, node, jump, combine):
        r1 = self.expression(node.ptr1)
        r2 = self.get_reg()
        self._emit(f"MOV R{r2},1")
        skip = self.get_label()
        self._emit(f"{jump} R{r1},L{skip}")
        r3 = self.expression(node.ptr2)
        self._emit(f"MOV R{r2},R{r3}")
        self.free_reg()
        self._emit(f"L{skip}:", f"{combine} R{r1},R{r2}")
        self.free_reg()
        return r1

    def _and(self, node):
        return self._short_circuit(node, "JZ", "MUL")

    def _or(self, node):
        return self._short_circuit(node, "JNZ", "ADD")

    def _not(self, node):
        r1 = self.expression(node.ptr2)
        nonzero = self.get_label()
        self._emit(f"JNZ R{r1},L{nonzero}", f"MOV R{r1},1")
        done = self.get_label()
        self._emit(
            f"JMP L{done}",
            f"L{nonzero}:",
            f"MOV R{r1},0",
            f"L{done}:",
        )
        return r1