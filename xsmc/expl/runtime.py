"""Heap management routines emitted into compiled programs."""

_INITIALIZE = (
    "INITIALIZE:",
    "PUSH BP",
    "MOV BP, SP",
    "MOV R0,0",
    "MOV R1,1",
    "L0:",
    "MOV [R0],-1",
    "ADD R0,R1",
    "MOV R2,255",
    "GE R2,R0",
    "JZ R2,L1",
    "JMP L0",
    "L1:",
    "MOV R0,0",
    "MOV R1,16",
    "MOV R3,16",
    "L2:",
    "MOV [R0],R1",
    "ADD R1,R3",
    "ADD R0,R3",
    "MOV R2,255",
    "GE R2,R0",
    "JZ R2,L3",
    "JMP L2",
    "L3:",
    "MOV [240],-1",
    "MOV [256],0",
    "MOV BP, [SP]",
    "POP R0",
    "RET",
)

_ALLOC = (
    "ALLOC:",
    "PUSH BP",
    "MOV BP, SP",
    "MOV R0, [256]",
    "MOV R1, [R0]",
    "MOV [256], R1",
    "MOV R1, BP",
    "MOV R2, 2",
    "SUB R1, R2",
    "MOV [R1], R0",
    "MOV BP, [SP]",
    "POP R0",
    "RET",
)

_FREE = (
    "FREE:",
    "PUSH BP",
    "MOV BP, SP",
    "MOV R0, 2",
    "MOV R1, BP",
    "SUB R1, R0",
    "MOV R0, [R1]",
    "MOV R1, [256]",
    "MOV [256], R0",
    "MOV [R0], R1",
    "MOV BP, [SP]",
    "POP R0",
    "RET",
)


def _text(lines):
    return "".join(f"{line}\n" for line in lines)


def initialize_routine():
    """Return the routine that links the heap's 16-word blocks into a free list."""
    return _text(_INITIALIZE)


def alloc_routine():
    """Return the routine that takes a block off the free list.

    The block address is left at BP - 2.
    """
    return _text(_ALLOC)


def free_routine():
    """Return the routine that puts the block at BP - 2 back on the free list."""
    return _text(_FREE)