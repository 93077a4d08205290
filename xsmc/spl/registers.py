"""Register numbering for the SPL machine and register naming for output."""

from enum import IntEnum

#: First general purpose register reserved for the compiler's temporaries.
C_REG_BASE = 16

#: Maximum length of a register name in emitted code.
REG_NAME_MAX_LEN = 5


class Register(IntEnum):
    """Registers known to SPL, numbered as the compiler numbers them."""

    R0 = 0
    R1 = 1
    R2 = 2
    R3 = 3
    R4 = 4
    R5 = 5
    R6 = 6
    R7 = 7
    R8 = 8
    R9 = 9
    R10 = 10
    R11 = 11
    R12 = 12
    R13 = 13
    R14 = 14
    R15 = 15
    R16 = 16
    R17 = 17
    R18 = 18
    R19 = 19

    P0 = 20
    P1 = 21
    P2 = 22
    P3 = 23

    BP = 24
    IP = 25
    SP = 26
    PTBR = 27
    PTLR = 28
    EIP = 29
    EPN = 30
    EC = 31
    EMA = 32


NUM_GEN_REG = 20
NUM_PORTS = 4
NUM_SPECIAL_REG = 9

_SPECIAL = {
    Register.BP,
    Register.SP,
    Register.IP,
    Register.PTBR,
    Register.PTLR,
    Register.EIP,
    Register.EPN,
    Register.EC,
    Register.EMA,
}


def is_allowed_register(value):
    """Return True if an SPL program may use the register directly."""
    return Register.R0 <= value < Register.R0 + C_REG_BASE


def register_name(value):
    """Return the assembly name of a register number.

    Registers R16-R19 are reserved for the compiler and have no name here,
    as do numbers outside the register range; both raise ValueError.
    """
    if Register.R0 <= value <= Register.R15:
        return f"R{value - Register.R0}"
    if Register.P0 <= value <= Register.P3:
        return f"P{value - Register.P0}"
    try:
        reg = Register(value)
    except ValueError:
        raise ValueError(f"unknown register number {value}") from None
    if reg in _SPECIAL:
        return reg.name
    raise ValueError(f"register {reg.name} cannot be named in SPL output")