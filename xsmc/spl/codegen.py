"""Assembly generation from SPL syntax trees."""

from __future__ import annotations

from typing import Iterator, Optional

from .labels import Label, LabelTable
from .nodes import Node, NodeType
from .registers import C_REG_BASE, register_name

# Temporary registers start at C_REG_BASE; reaching this many is an overflow.
_TEMP_LIMIT = 5

# Operator, operator with swapped operands (None if it cannot be swapped),
# and whether a number may be used directly as the right operand.
_BINARY = {
    NodeType.LT: ("LT", "GT", False),
    NodeType.GT: ("GT", "LT", False),
    NodeType.EQ: ("EQ", "EQ", False),
    NodeType.LE: ("LE", "GE", False),
    NodeType.GE: ("GE", "LE", False),
    NodeType.NE: ("NE", "NE", False),
    NodeType.AND: ("MUL", "MUL", False),
    NodeType.OR: ("ADD", "ADD", False),
    NodeType.ADD: ("ADD", "ADD", True),
    NodeType.SUB: ("SUB", None, True),
    NodeType.MUL: ("MUL", "MUL", True),
    NodeType.DIV: ("DIV", None, True),
    NodeType.MOD: ("MOD", None, True),
}

_SIMPLE = {
    NodeType.BACKUP: "BACKUP",
    NodeType.RESTORE: "RESTORE",
    NodeType.RETURN: "RET",
    NodeType.IRETURN: "IRET",
    NodeType.HALT: "HALT",
    NodeType.BREAKPOINT: "BRKP",
    NodeType.READ: "IN",
}

_TRANSFERS = {
    NodeType.LOAD: "LOAD",
    NodeType.LOADI: "LOADI",
    NodeType.STORE: "STORE",
}


class CodegenError(Exception):
    """Raised when a tree cannot be turned into assembly."""


def _chain(node: Optional[Node]) -> Iterator[Node]:
    while node is not None:
        yield node
        node = node.ptr1


class CodeGenerator:
    """Emits assembly for SPL trees, using R16 upwards for temporaries.

    ``line_count`` counts the instructions emitted the way the assembler
    expects them counted; ``regcount`` is the number of live temporaries.
    """

    def __init__(self, labels=None):
        self.labels = labels if labels is not None else LabelTable()
        self.regcount = 0
        self.line_count = 0
        self._out = []
        self._handlers = {
            NodeType.NOT: self._not,
            NodeType.STMTLIST: self._stmtlist,
            NodeType.ASSIGN: self._assign,
            NodeType.ADDR_EXPR: self._addr_expr,
            NodeType.NUM: self._num,
            NodeType.STRING: self._string,
            NodeType.REG: self._register,
            NodeType.IF: self._if,
            NodeType.WHILE: self._while,
            NodeType.BREAK: self._break,
            NodeType.CONTINUE: self._continue,
            NodeType.MULTIPUSH: self._multipush,
            NodeType.MULTIPOP: self._multipop,
            NodeType.READI: self._readi,
            NodeType.PRINT: self._print,
            NodeType.INLINE: self._inline,
            NodeType.ENCRYPT: self._encrypt,
            NodeType.LABEL_DEF: self._label_def,
            NodeType.CALL: self._call,
            NodeType.GOTO: self._goto,
        }

    @property
    def code(self):
        """The assembly emitted so far."""
        return "".join(self._out)

    # -- output helpers -------------------------------------------------

    def _emit(self, *lines, count=None):
        self._out.extend(f"{line}\n" for line in lines)
        self.line_count += len(lines) if count is None else count

    def _place(self, label):
        self._out.append(f"{label}:\n")

    def _temp(self, offset=0):
        return f"R{C_REG_BASE + self.regcount + offset}"

    def _push(self):
        self.regcount += 1
        if self.regcount == _TEMP_LIMIT:
            raise CodegenError(
                "Register Overflow. Please reduce size of your expression."
            )

    def _pop(self):
        self.regcount -= 1

    @staticmethod
    def _reg(node):
        try:
            return register_name(node.value)
        except ValueError as exc:
            raise CodegenError(str(exc)) from None

    # -- dispatch -------------------------------------------------------

    def generate(self, root):
        """Emit the code for a tree; a missing tree emits nothing."""
        if root is None:
            return
        kind = root.nodetype
        if kind in _BINARY:
            self._binary(root, *_BINARY[kind])
        elif kind in _SIMPLE:
            self._emit(_SIMPLE[kind])
        elif kind in _TRANSFERS:
            self._transfer(root, _TRANSFERS[kind])
        elif kind in self._handlers:
            self._handlers[kind](root)
        else:
            raise CodegenError(f"Unknown Command {int(kind)} {root.name}")

    # -- expressions ----------------------------------------------------

    def _operand(self, op, dest, right, immediate=True):
        """Emit ``op dest, <right>`` and release any temporary used."""
        if right.nodetype == NodeType.REG:
            self._emit(f"{op} {dest}, {self._reg(right)}")
        elif immediate and right.nodetype == NodeType.NUM:
            self._emit(f"{op} {dest}, {right.value}")
        else:
            self.generate(right)
            self._emit(f"{op} {dest}, {self._temp(-1)}")
            self._pop()

    def _binary(self, root, op, swapped, immediate):
        left, right = root.ptr1, root.ptr2
        if left.nodetype != NodeType.REG:
            self.generate(left)
            self._operand(op, self._temp(-1), right, immediate)
            return
        reg1 = self._reg(left)
        if right.nodetype == NodeType.REG or (
            immediate and right.nodetype == NodeType.NUM
        ):
            operand = (
                self._reg(right) if right.nodetype == NodeType.REG else right.value
            )
            temp = self._temp()
            self._emit(f"MOV {temp}, {reg1}", f"{op} {temp}, {operand}")
            self._push()
        elif swapped is not None:
            self.generate(right)
            self._emit(f"{swapped} {self._temp(-1)}, {reg1}")
        else:
            self._emit(f"MOV {self._temp()}, {reg1}")
            self._push()
            self.generate(right)
            self._emit(f"{op} {self._temp(-2)}, {self._temp(-1)}")
            self._pop()

    def _not(self, root):
        self._emit(f"MOV {self._temp()}, 1")
        self._push()
        operand = root.ptr1
        if operand.nodetype == NodeType.REG:
            self._emit(f"SUB {self._temp(-1)}, {self._reg(operand)}")
        else:
            self.generate(operand)
            self._emit(f"SUB {self._temp(-2)}, {self._temp(-1)}")
            self._pop()

    def _addr_expr(self, root):
        self.generate(root.ptr1)
        top = self._temp(-1)
        self._emit(f"MOV {top}, [{top}]")

    def _num(self, root):
        self._emit(f"MOV {self._temp()}, {root.value}")
        self._push()

    def _string(self, root):
        self._emit(f"MOV {self._temp()}, {root.name}")
        self._push()

    def _register(self, root):
        self._emit(f"MOV {self._temp()}, {self._reg(root)}")
        self._push()

    # -- statements -----------------------------------------------------

    def _stmtlist(self, root):
        self.generate(root.ptr1)
        self.generate(root.ptr2)

    def _store_value(self, dest, source):
        kind = source.nodetype
        if kind == NodeType.REG:
            self._emit(f"MOV {dest}, {self._reg(source)}")
        elif kind == NodeType.NUM:
            self._emit(f"MOV {dest}, {source.value}")
        elif kind == NodeType.STRING:
            self._emit(f"MOV {dest}, {source.name}")
        elif kind == NodeType.PORT:
            temp = self._temp()
            self._emit(
                f"PORT {temp}, {self._reg(source)}", f"MOV {dest}, {temp}", count=1
            )
        else:
            self.generate(source)
            self._emit(f"MOV {dest}, {self._temp(-1)}")
            self._pop()

    def _assign(self, root):
        target, source = root.ptr1, root.ptr2
        holds_address = False
        if target.nodetype == NodeType.ADDR_EXPR:
            inner = target.ptr1
            if inner.nodetype == NodeType.NUM:
                dest = f"[{inner.value}]"
            elif inner.nodetype == NodeType.REG:
                dest = f"[{self._reg(inner)}]"
            else:
                self.generate(inner)
                dest = f"[{self._temp(-1)}]"
                holds_address = True
        else:
            dest = self._reg(target)
        self._store_value(dest, source)
        if holds_address:
            self._pop()

    def _transfer(self, root, op):
        left, right = root.ptr1, root.ptr2
        if left.nodetype == NodeType.REG:
            self._operand(op, self._reg(left), right)
        else:
            self.generate(left)
            self._operand(op, self._temp(-1), right)
            self._pop()

    def _jump_if_zero(self, cond, label: Label):
        if cond.nodetype == NodeType.REG:
            self._emit(f"JZ {self._reg(cond)}, {label}")
        else:
            self.generate(cond)
            self._emit(f"JZ {self._temp(-1)}, {label}")
            self._pop()

    def _if(self, root):
        else_label = self.labels.create()
        end_label = self.labels.create()
        self._jump_if_zero(root.ptr1, else_label)
        self.generate(root.ptr2)
        self._emit(f"JMP {end_label}")
        self._place(else_label)
        self.generate(root.ptr3)
        self._place(end_label)

    def _while(self, root):
        start = self.labels.create()
        end = self.labels.create()
        self.labels.push_while(start, end)
        self._place(start)
        self._jump_if_zero(root.ptr1, end)
        self.generate(root.ptr2)
        self._emit(f"JMP {start}")
        self.labels.pop_while()
        self._place(end)

    def _break(self, root):
        self._emit(f"JMP {self.labels.while_end()}")

    def _continue(self, root):
        self._emit(f"JMP {self.labels.while_start()}")

    def _multipush(self, root):
        for reg in _chain(root.ptr1):
            self._emit(f"PUSH {self._reg(reg)}")

    def _multipop(self, root):
        for reg in reversed(list(_chain(root.ptr1))):
            self._emit(f"POP {self._reg(reg)}")

    def _readi(self, root):
        self._emit("INI", f"PORT {self._reg(root.ptr1)}, P0")

    def _print(self, root):
        self.generate(root.ptr1)
        self._emit(f"PORT P1, {self._temp(-1)}", "OUT")
        self._pop()

    def _inline(self, root):
        self._emit(root.ptr1.name)

    def _encrypt(self, root):
        self._emit(f"ENCRYPT {self._reg(root.ptr1)}")

    def _label_def(self, root):
        self._out.append(f"{root.ptr1.name}:\n")

    def _jump_to(self, root, op):
        target = root.ptr1
        if target.nodetype == NodeType.NUM:
            self._out.append(f"{op} {target.value}\n")
        elif target.name not in self.labels:
            raise CodegenError(f"{root.value}: Label '{target.name}' is not declared")
        else:
            self._out.append(f"{op} {target.name}\n")

    def _call(self, root):
        self._jump_to(root, "CALL")

    def _goto(self, root):
        self._jump_to(root, "JMP")


def compile_tree(root, labels=None):
    """Return the assembly for a whole SPL tree."""
    generator = CodeGenerator(labels)
    generator.generate(root)
    return generator.code