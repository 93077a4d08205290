"""ExpL compiler parts: syntax tree, symbol tables, type checks, code generation, heap routines and label map."""

__all__ = [
    "codegen",
    "expressions",
    "labelmap",
    "runtime",
    "symbols",
    "tree",
    "typecheck",
]