"""Assembly generation for statements, calls and system calls."""

from __future__ import annotations

from typing import Optional

from .expressions import CodegenError, ExpressionGenerator
from .tree import NodeType

#: Memory word used to pass the address of an array element to Read.
READ_ADDRESS_SLOT = 2044

#: A system call takes a function code and three arguments.
_SYSCALL_ARGS = 4


def _index_of(entries, name) -> Optional[int]:
    return next(
        (index for index, entry in enumerate(entries) if entry.name == name), None
    )


class CodeGenerator(ExpressionGenerator):
    """Emits assembly for whole trees: statements as well as expressions.

    ``loop_start`` and ``loop_end`` hold the label numbers of the most
    recently entered while loop; break and continue jump to them.
    """

    def __init__(self, tables=None):
        super().__init__(tables)
        self.temporary = 0
        self.loop_start: Optional[int] = None
        self.loop_end: Optional[int] = None
        self._read_pending = False
        self._handlers.update(
            {
                NodeType.EXPR: self._arguments,
                NodeType.DEFAULT: self._sequence,
                NodeType.ASGN: self._assign,
                NodeType.ARRAY_ASGN: self._array_assign,
                NodeType.READ: self._read,
                NodeType.ARRAY_READ: self._array_read,
                NodeType.WRITE: self._write,
                NodeType.IF: self._if,
                NodeType.IF_ELSE: self._if_else,
                NodeType.WHILE: self._while,
                NodeType.FUNC: self._call,
                NodeType.RET: self._return,
                NodeType.BRK: self._break,
                NodeType.CONTINUE: self._continue,
                NodeType.BRKP: self._breakpoint,
                NodeType.ALLOC: self._alloc,
                NodeType.FREE: self._free,
                NodeType.INIT: self._init,
                NodeType.EXPOSCALL: self._exposcall,
            }
        )

    def generate(self, root):
        """Emit code for a tree and return the register holding its value.

        Statements yield register 0; a missing tree emits nothing.
        """
        return self.expression(root)

    # -- register saving ------------------------------------------------

    def _save_registers(self):
        status = self.counter
        self._emit(*(f"PUSH R{i}" for i in range(status + 1)))
        return status

    def _restore_registers(self, status):
        self._emit(*(f"POP R{i}" for i in range(status, -1, -1)))
        self.counter = status
        return status + 1

    def _result_from_stack(self, depth):
        """Load the word ``depth`` below the top of the stack into a register."""
        r1 = self.get_reg()
        r2 = self.get_reg()
        self._emit(
            f"MOV R{r1},{depth}",
            f"MOV R{r2},SP",
            f"ADD R{r2},R{r1}",
            f"MOV R{r1},[R{r2}]",
        )
        self.free_reg()
        return r1

    # -- structure ------------------------------------------------------

    def _sequence(self, node):
        self.generate(node.ptr1)
        self.generate(node.ptr2)
        return 0

    def _arguments(self, node):
        params = node.ptr3
        if params is not None:
            count = len(params)
        else:
            count = 1
            link = node
            while link is not None and link.nodetype == NodeType.EXPR:
                count += 1
                link = link.ptr2
        if count < 2:
            raise CodegenError("argument list does not match the parameter list")
        link = node
        for _ in range(count - 1):
            if link is None:
                raise CodegenError("argument list does not match the parameter list")
            reg = self.generate(link.ptr1)
            self._emit(f"PUSH R{reg}")
            self.free_reg()
            link = link.ptr2
        if link is None:
            raise CodegenError("argument list does not match the parameter list")
        reg = self.generate(link)
        self._emit(f"PUSH R{reg}")
        self.free_reg()
        return 0

    # -- assignment -----------------------------------------------------

    def _assign(self, node):
        target = node.ptr1
        number = self.generate(node.ptr2)
        if target.nodetype == NodeType.FIELD:
            self.fld = True
            r1 = self.generate(target)
            self._emit(f"MOV [R{r1}],R{number}")
            self.free_reg()
        else:
            offset = _index_of(self.tables.locals, target.name)
            if offset is not None:
                r1 = self.get_reg()
                slot = self._frame_slot_local(r1, offset)
                self._emit(f"MOV [R{slot}],R{number}")
                self.free_reg()
                self.free_reg()
            else:
                offset = _index_of(self.tables.params, target.name)
                if offset is not None:
                    slot = self._frame_slot_param(offset)
                    self._emit(f"MOV [R{slot}],R{number}")
                    self.free_reg()
                else:
                    binding = self._global(target).binding
                    self._emit(f"MOV [{binding}],R{number}")
        self.free_reg()
        return 0

    def _array_assign(self, node):
        address = self.generate(node.ptr2)
        r1 = self.get_reg()
        self._emit(
            f"MOV R{r1},{self._global(node.ptr1).binding}",
            f"ADD R{address},R{r1}",
        )
        self.free_reg()
        value = self.generate(node.ptr3)
        self._emit(f"MOV [R{address}],R{value}")
        self.free_reg()
        self.free_reg()
        return 0

    # -- input and output -----------------------------------------------

    def _read_header(self):
        self._emit('MOV R0,"Read"', "PUSH R0", "MOV R0,-1", "PUSH R0")

    def _finish_read(self, status):
        self._emit("ADD SP,2")
        self.free_all()
        self._emit("CALL 0", "SUB SP,5")
        self._emit(*("POP R0" for _ in range(self.temporary)))
        self._restore_registers(status)

    def _read(self, node):
        target = node.ptr2
        self.temporary = 0
        if target.nodetype == NodeType.FIELD:
            self.fld = True
            self._save_registers()
            self._read_header()
            reg = self.generate(target)
            self._emit(f"PUSH R{reg}")
            self.free_reg()
            self.temporary += 1
            status = self.counter
        else:
            local = _index_of(self.tables.locals, target.name)
            param = _index_of(self.tables.params, target.name)
            if local is not None:
                r2 = self.get_reg()
                slot = self._frame_slot_local(r2, local)
                self._save_registers()
                self._read_header()
                self._emit(f"PUSH R{slot}")
                self.free_reg()
                self.temporary += 1
                self.free_reg()
                self.temporary += 1
                status = self.counter
            elif param is not None:
                slot = self._frame_slot_param(param)
                self._save_registers()
                self._read_header()
                self._emit(f"PUSH R{slot}")
                self.free_reg()
                self.temporary += 1
                status = self.counter
            else:
                binding = self._global(target).binding
                self._save_registers()
                self._read_header()
                self._emit(f"MOV R0,{binding}", "PUSH R0")
                status = self.counter
        self._finish_read(status)
        return 0

    def _array_read(self, node):
        self.temporary = 0
        index = self.generate(node.ptr3)
        symbol = self._global(node.ptr2)
        r1 = self.get_reg()
        self._emit(f"MOV R{r1},{symbol.binding}")
        r2 = self.get_reg()
        self._emit(f"MOV R{r2},{symbol.size}", f"GT R{r2},R{index}")
        inside = self.get_label()
        self._emit(f"JNZ R{r2},L{inside}", "INT 10", f"L{inside}:")
        self.free_reg()
        self._emit(f"ADD R{index},R{r1}")
        self.free_reg()
        self._emit(f"MOV [{READ_ADDRESS_SLOT}],R{index}")
        self._save_registers()
        self._read_header()
        self._emit(f"MOV R0,[{READ_ADDRESS_SLOT}]", "PUSH R0")
        self.free_reg()
        self.temporary += 1
        status = self.counter
        self._finish_read(status)
        self.temporary = 0
        return 0

    def _write(self, node):
        status = self._save_registers()
        self._emit('MOV R0,"Write"', "PUSH R0", "MOV R0,-2", "PUSH R0")
        number = self.generate(node.ptr2)
        self._emit(f"PUSH R{number}")
        self.free_reg()
        self._emit("ADD SP,2")
        self.free_all()
        self._emit("CALL 0", "SUB SP,5")
        self._restore_registers(status)
        return 0

    # -- control flow ---------------------------------------------------

    def _if(self, node):
        skip = self.get_label()
        cond = self.generate(node.ptr1)
        self._emit(f"JZ R{cond},L{skip}")
        self.generate(node.ptr2)
        self._emit(f"L{skip}:")
        self.free_reg()
        return 0

    def _if_else(self, node):
        cond = self.generate(node.ptr1)
        otherwise = self.get_label()
        done = self.get_label()
        self._emit(f"JZ R{cond},L{otherwise}")
        self.free_reg()
        self.generate(node.ptr2)
        self._emit(f"JMP L{done}", f"L{otherwise}:")
        self.free_reg()
        self.generate(node.ptr3)
        self._emit(f"L{done}:")
        return 0

    def _while(self, node):
        start = self.get_label()
        end = self.get_label()
        self.loop_start = start
        self.loop_end = end
        self._emit(f"L{start}:")
        cond = self.generate(node.ptr1)
        self._emit(f"JZ R{cond},L{end}")
        self.free_reg()
        self.generate(node.ptr2)
        self._emit(f"JMP L{start}", f"L{end}:")
        self.free_reg()
        return 0

    def _break(self, node):
        if self.loop_end is None:
            raise CodegenError("break outside a while loop")
        self._emit(f"JMP L{self.loop_end}")
        return 0

    def _continue(self, node):
        if self.loop_start is None:
            raise CodegenError("continue outside a while loop")
        self._emit(f"JMP L{self.loop_start}")
        return 0

    def _breakpoint(self, node):
        self._emit("BRKP")
        return 0

    # -- functions ------------------------------------------------------

    def _call(self, node):
        status = self._save_registers()
        self.free_all()
        if node.ptr2 is not None:
            self.generate(node.ptr2)
        elif node.ptr3 is not None:
            reg = self.generate(node.ptr3)
            self._emit(f"PUSH R{reg}")
            self.free_reg()
        self._emit("PUSH R0")
        symbol = self.tables.glookup(node.name)
        if symbol is None:
            raise CodegenError(f"Un-declared function {node.name}")
        self._emit(f"CALL F{symbol.binding}", f"POP R{status + 1}")
        if status == -1:
            self.get_reg()
        scratch = self.get_reg()
        params = symbol.paramlist or ()
        self._emit(*(f"POP R{scratch}" for _ in params))
        if status == -1:
            self.free_reg()
        self.free_reg()
        self.temporary = len(params) + self._restore_registers(status)
        return self.get_reg()

    def _return(self, node):
        result = self.generate(node.ptr2)
        r1 = self.get_reg()
        self._emit(f"MOV R{r1},BP")
        r2 = self.get_reg()
        self._emit(f"MOV R{r2},2", f"SUB R{r1},R{r2}")
        self.free_reg()
        self._emit(f"MOV [R{r1}],R{result}")
        self.free_reg()
        self.free_reg()
        self._emit(*("POP R0" for _ in self.tables.locals))
        self._emit("MOV BP,[SP]", "POP R0", "RET")
        return 0

    # -- heap and system calls ------------------------------------------

    def _alloc(self, node):
        status = self._save_registers()
        self.free_all()
        self._emit(
            'MOV R0,"Alloc"',
            "PUSH R0",
            "MOV R0,8",
            "PUSH R0",
            "ADD SP,2",
            "PUSH R0",
            "CALL 0",
            "SUB SP,5",
        )
        self.temporary = self._restore_registers(status)
        return self._result_from_stack(self.temporary + 5)

    def _free(self, node):
        self.get_reg()
        r1 = self.generate(node.ptr2)
        status = self._save_registers()
        self.free_all()
        self._emit(
            'MOV R0,"Free"',
            "PUSH R0",
            f"PUSH R{r1}",
            "ADD SP,2",
            "PUSH R0",
            "CALL 0",
            "SUB SP,5",
        )
        self._restore_registers(status)
        return 0

    def _init(self, node):
        status = self._save_registers()
        self.free_all()
        self._emit(
            'MOV R0,"Heapset"',
            "PUSH R0",
            "ADD SP,3",
            "PUSH R0",
            "CALL 0",
            "SUB SP,5",
        )
        self._restore_registers(status)
        return 0

    def _exposcall(self, node):
        status = self._save_registers()
        self.free_all()
        code = node.ptr3
        if code is None:
            raise CodegenError("exposcall without a function code")
        if code.name == "Read":
            self._read_pending = True
        if code.nodetype == NodeType.STRVAL:
            self._emit(f'MOV R0,"{code.name}"', "PUSH R0")
        elif code.nodetype == NodeType.ID:
            reg = self.generate(code)
            self._emit(f"MOV R0,R{reg}", "PUSH R0")
        arg_count = 1
        argument = code.ptr1
        while argument is not None:
            if arg_count >= _SYSCALL_ARGS:
                raise CodegenError("too many arguments to exposcall")
            kind = argument.nodetype
            if kind == NodeType.STRVAL:
                self._emit(f'MOV R0,"{argument.name}"')
            elif kind == NodeType.NUM:
                self._emit(f"MOV R0,{argument.value}")
            elif kind in (NodeType.ID, NodeType.ARRAY, NodeType.FIELD):
                if arg_count == 2 and self._read_pending:
                    self.fld = True
                    self._read_pending = False
                reg = self.generate(argument)
                self._emit(f"MOV R0,R{reg}")
            self._emit("PUSH R0")
            arg_count += 1
            argument = argument.ptr1
        self._emit(*("PUSH R0" for _ in range(_SYSCALL_ARGS - arg_count)))
        self._emit("PUSH R0", "CALL 0", "SUB SP,5")
        self.temporary = self._restore_registers(status)
        return self._result_from_stack(self.temporary + 5)