"""Semantic checks on syntax tree nodes against the symbol tables."""

from __future__ import annotations

from .symbols import SymbolError, SymbolTables


class TypeCheckError(Exception):
    """Raised when a program fails a declaration or type check."""


_SAME_TYPE = {
    "r": "return type do not match with the function return type",
    "i": "Expected boolean , Found value in if",
    "e": "Expected boolean , Found value in if else",
    "w": "Expected boolean , Found value in while",
    "a": "conflict in assignment types",
    "d": "conflict in operand types in DEQ",
    "n": "conflict in operand types in NEQ",
}

_NO_STRING = {
    "+": "PLUS",
    "-": "MINUS",
    "*": "MUL",
    "/": "DIV",
    "%": "MOD",
    "<": "LT",
    ">": "GT",
    "#": "LE",
    "$": "GE",
}


class TypeChecker:
    """Checks declarations and expressions, filling in node types."""

    def __init__(self, tables=None):
        self.tables = tables if tables is not None else SymbolTables()

    def _type(self, name):
        return self.tables.tlookup(name)

    def _is_basic(self, t):
        return t is self._type("integer") or t is self._type("string")

    def verify(self, node, check_global, check_local, check_param, elem_type):
        """Check that a name being declared is not already declared.

        A non-None ``elem_type`` is an array element type, which must be
        integer.
        """
        if check_local and self.tables.llookup(node.name) is not None:
            raise TypeCheckError("Re initialization of variable")
        if check_param and self.tables.plookup(node.name) is not None:
            raise TypeCheckError("Re initialization of variable in paramlist")
        if check_global and self.tables.glookup(node.name) is not None:
            raise TypeCheckError("Re initialization of identifier")
        if elem_type is not None and elem_type is not self._type("integer"):
            raise TypeCheckError("arrays of udt and strings are not allowed")
        return True

    def install_array(self, node, size_node, elem_type):
        """Declare a global array of integers or strings."""
        if elem_type is self._type("integer"):
            array_type = self._type("array_integer")
        elif elem_type is self._type("string"):
            array_type = self._type("array_string")
        else:
            raise TypeCheckError("arrays of udt is not allowed")
        try:
            return self.tables.ginstall(node.name, array_type, size_node.value, None)
        except SymbolError as exc:
            raise TypeCheckError(str(exc)) from None

    def compare(self, t1, t2, op):
        """Check operand types for the operation ``op``.

        ``op`` ``' '`` only reports whether the types are the same; every
        other operation returns True or raises.
        """
        if op == " ":
            return t1 is t2
        string = self._type("string")
        boolean = self._type("boolean")
        if op in _SAME_TYPE:
            if t1 is not t2:
                raise TypeCheckError(_SAME_TYPE[op])
        elif op in _NO_STRING:
            if t1 is string or t2 is string:
                raise TypeCheckError(f"conflict in operand types in {_NO_STRING[op]}")
        elif op in "&|":
            if not (t1 is boolean and t2 is boolean):
                name = "AND" if op == "&" else "OR"
                raise TypeCheckError(f"conflict in operand types in {name}")
        elif op == "!":
            if t1 is not boolean:
                raise TypeCheckError("conflict in operand types in NOT")
        elif op == "=":
            if self._is_basic(t1):
                raise TypeCheckError("conflict in operand types in DEQNILL")
        elif op == "^":
            if self._is_basic(t1):
                raise TypeCheckError("conflict in operand types in NEQNILL")
            self._check_exposcall(t1, t2)
        elif op == "x":
            self._check_exposcall(t1, t2)
        return True

    def _check_exposcall(self, t1, t2):
        string = self._type("string")
        if t2 is not None:
            if t2 is not string:
                raise TypeCheckError("invalid fun_code type in exposcall")
        elif t1 is string:
            raise TypeCheckError("invalid return type to exposcall")

    @staticmethod
    def _udt_error(free, alloc, field_access):
        if free:
            return TypeCheckError("cannot free a non udt")
        if alloc:
            return TypeCheckError("cannot ALLOC a non udt")
        if field_access:
            return TypeCheckError(" . operation over integer/string type is not allowed")
        return TypeCheckError("cannot assign null to non-udt")

    def _attach_field(self, node, field):
        fields = node.type.fields if node.type is not None else None
        entry = self.tables.flookup(field.name, fields)
        if entry is None:
            raise TypeCheckError("Un-declared field variable")
        field.type = entry.type
        node.ptr2 = field

    def assign_type(self, node, field, udt, free, alloc, field_access, read):
        """Give an identifier node the type of the symbol it names.

        Locals are searched first, then parameters, then globals. ``udt``
        requires a user defined type; ``field_access`` resolves ``field`` in
        that type and hangs it under the node.
        """
        local = self.tables.llookup(node.name)
        if local is not None:
            if udt and self._is_basic(local.type):
                raise self._udt_error(free, alloc, field_access)
            node.type = local.type
            if field_access:
                self._attach_field(node, field)
            return True

        param = self.tables.plookup(node.name)
        if param is not None:
            if not read:
                if udt and self._is_basic(param.type):
                    raise self._udt_error(free, alloc, field_access)
                node.type = param.type
                if field_access:
                    self._attach_field(node, field)
            elif param.type is self._type("integer"):
                node.type = self._type("integer")
            elif param.type is self._type("string"):
                node.type = self._type("string")
            return True

        symbol = self.tables.glookup(node.name)
        if symbol is None:
            raise TypeCheckError(f"Un-declared variable {node.name}")
        if not read and symbol.type in (
            self._type("array_integer"),
            self._type("array_string"),
        ):
            if field_access:
                raise TypeCheckError(f" . operation over arrays not allowed {node.name}")
            raise TypeCheckError(
                f"conflict in ID NodeType : Expected Variable . Found Array {node.name}"
            )
        if udt and self._is_basic(symbol.type):
            raise self._udt_error(free, alloc, field_access)
        if not free:
            node.gentry = symbol
        node.type = symbol.type
        if field_access:
            self._attach_field(node, field)
        return True

    def assign_array_type(self, node, index, func):
        """Type an array element or a function call node.

        Returns False for a function call and True for an array element.
        """
        symbol = self.tables.glookup(node.name)
        if symbol is None:
            raise TypeCheckError(f"Un-declared identifier {node.name}")
        if func:
            if symbol.size != -1:
                raise TypeCheckError(
                    f"conflict in ID NodeType : Expected Function {node.name}"
                )
            node.gentry = symbol
            node.type = symbol.type
            return False
        if self._is_basic(symbol.type):
            raise TypeCheckError(
                f"conflict in ID NodeType : Expected Variable , Found Array {node.name}"
            )
        if index.type is not self._type("integer"):
            raise TypeCheckError(f"Expected value {node.name}")
        node.gentry = symbol
        if symbol.type is self._type("array_integer"):
            node.type = self._type("integer")
        elif symbol.type is self._type("array_string"):
            node.type = self._type("string")
        return True


def prologue(total_count):
    """Return the header and start-up code of a compiled program."""
    header = "0\n2056\n0\n0\n0\n0\n0\n0\n"
    return (
        header
        + f"MOV SP,{total_count - 1}\n"
        + f"MOV BP,{total_count}\n"
        + "PUSH R0\n"
        + "CALL MAIN\n"
        + "INT 10\n"
    )


def last_node(head):
    """Return the last node of a list linked through ``ptr2``."""
    while head.ptr2 is not None:
        head = head.ptr2
    return head