"""SPL code generation: syntax tree, registers, constants and aliases, labels and file names."""

__all__ = ["codegen", "labels", "nodes", "paths", "registers", "symbols"]