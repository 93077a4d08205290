# xsmc

Compiler back ends that turn syntax trees into assembly text for the XSM
machine. The package uses only the Python standard library.

There are two sub-packages:

- `xsmc.spl` generates code for SPL, the system programming language
  used for XSM operating-system routines.
- `xsmc.expl` holds the parts of an ExpL compiler. These are the symbol
  tables, type checks, expression and statement code generation, the heap
  routines, and a table that maps labels to addresses.

## SPL

You build a program as a tree of `Node` objects (`xsmc.spl.nodes`). Make
leaves with `term_node(nodetype, name, value)` and inner nodes with
`nonterm_node(nodetype, a, b)`. `Node.attach(b, c, d)` sets all three
children of a node, as an `if` with an `else` block needs.

Register numbers come from `Register` (`xsmc.spl.registers`).
`register_name(value)` returns the assembly spelling of a register number.
It raises `ValueError` for R16–R19, which the compiler keeps for itself,
and for numbers that are not registers. `is_allowed_register(value)` is
true for R0–R15.

```python
from xsmc.spl.codegen import compile_tree
from xsmc.spl.labels import LabelTable
from xsmc.spl.nodes import NodeType, nonterm_node, term_node
from xsmc.spl.registers import Register

# R0 = R1 + 5
target = term_node(NodeType.REG, None, Register.R0)
source = nonterm_node(
    NodeType.ADD,
    term_node(NodeType.REG, None, Register.R1),
    term_node(NodeType.NUM, None, 5),
)
program = nonterm_node(NodeType.ASSIGN, target, source)

print(compile_tree(program, LabelTable()), end="")
# MOV R16, R1
# ADD R16, 5
# MOV R0, R16
```

`compile_tree` is a thin wrapper around `CodeGenerator`
(`xsmc.spl.codegen`). You can also use the class directly. Call
`generate(root)` as many times as you like, then read the text from
`code`. `line_count` counts the instructions emitted, and label lines are
not counted.

Intermediate values go in R16 and the registers after it. An expression
that needs a fifth scratch register raises `CodegenError`. So do these:

- an unknown node type;
- a `CALL` to a label that was not declared;
- a `goto` to a label that was not declared.

The other modules in `xsmc.spl` are:

- `labels`: `LabelTable` does three jobs.
  - `create()` hands out fresh labels named `_L1`, `_L2`, and so on.
  - `add(name)` declares a label of the program. Declaring the same name
    twice raises `LabelError`.
  - It keeps the stack of enclosing `while` loops, which `break` and
    `continue` jump to. Using either outside a loop raises `LabelError`.
- `symbols`: `SymbolTable` holds symbolic constants and register aliases.
  - Each alias belongs to a block nesting depth. `pop_aliases()` drops the
    aliases made at the current `depth`.
  - `load_constants(path)` reads `name value` pairs from a file. Its
    default path is `splconstants.cfg`.
  - `substitute(node)` rewrites an identifier node into the number or
    register it stands for.
  - Conflicting names and unknown names raise `SymbolError`.
- `paths` has two functions.
  - `expand_path(path, environ)` replaces a leading `$VAR` path component
    with the value of that variable.
  - `output_filename("prog.spl")` returns `"prog.xsm"`.

## ExpL

`SymbolTables` (`xsmc.expl.symbols`) holds the tables of types, globals,
locals, parameters and pending fields.

- Globals and locals get addresses counting up from 4096.
- Functions are installed with size `-1`. They get function numbers
  counting up from 0.
- Installing a global twice raises `SymbolError`.

`TypeChecker` (`xsmc.expl.typecheck`) checks declarations and operand
types against those tables. It sets the types of identifier nodes, and it
raises `TypeCheckError` with a message that describes the problem. The
same module also provides:

- `prologue(total_count)`, which returns the program header and the
  start-up code;
- `last_node(head)`, which walks a list linked through `ptr2`.

Trees are made of `ASTNode` objects, built with `tree_create`
(`xsmc.expl.tree`).

- `ExpressionGenerator` (`xsmc.expl.expressions`) emits code for
  expressions.
- `CodeGenerator` (`xsmc.expl.codegen`) adds statements on top of that:
  assignment, `read` and `write`, `if`, `while`, function calls and
  returns, heap calls, and `exposcall`.

Jump targets in the output are symbolic labels such as `L4`.

```python
from xsmc.expl.codegen import CodeGenerator
from xsmc.expl.symbols import SymbolTables
from xsmc.expl.tree import NodeType, tree_create

tables = SymbolTables()
integer = tables.tinstall("integer", 1, None)
tables.ginstall("x", integer, 1, None)  # bound to address 4096

x = tree_create(integer, NodeType.ID, "x", None, None, None, None, None)
seven = tree_create(integer, NodeType.NUM, None, 7, None, None, None, None)
statement = tree_create(None, NodeType.ASGN, None, None, None, x, seven, None)

generator = CodeGenerator(tables)
generator.generate(statement)
print(generator.code, end="")
# MOV R0,7
# MOV [4096],R0
```

Two more modules complete `xsmc.expl`:

- `runtime` has `initialize_routine()`, `alloc_routine()` and
  `free_routine()`. They return the assembly for a heap made of 16-word
  blocks kept on a free list.
- `labelmap` has `LabelMap`, which records label names with their code
  addresses. It answers lookups with `find(name)` and lists the table
  with `format()`.

## What the package does not do

- There is no parser for SPL or ExpL source text. You build the syntax
  trees in Python yourself.
- There is no command-line program, and nothing in the package reads or
  writes source or object files. Code generators return assembly as
  strings. The only file the package opens is the constants file passed
  to `SymbolTable.load_constants`.
- `LabelMap` only stores and looks up addresses. No pass rewrites
  symbolic jumps in generated assembly into numeric addresses.

## Tests

The tests use pytest. Install the `test` extra and run `pytest`.