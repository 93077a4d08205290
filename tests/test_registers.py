import pytest

from xsmc.spl.registers import (
    C_REG_BASE,
    Register,
    is_allowed_register,
    register_name,
)


@pytest.mark.parametrize("value", range(C_REG_BASE))
def test_low_general_registers_are_allowed(value):
    assert is_allowed_register(value) is True


@pytest.mark.parametrize(
    "value",
    [Register.R16, Register.R19, Register.P0, Register.BP, Register.EMA, -1],
)
def test_reserved_and_special_registers_are_not_allowed(value):
    assert is_allowed_register(value) is False


@pytest.mark.parametrize(
    "reg",
    [r for r in Register if not (Register.R16 <= r <= Register.R19)],
)
def test_register_name_matches_enum_name(reg):
    assert register_name(reg) == reg.name


def test_register_name_accepts_plain_ints():
    assert register_name(int(Register.PTBR)) == Register.PTBR.name
    assert register_name(int(Register.P3)) == Register.P3.name


@pytest.mark.parametrize("value", [Register.R16, Register.R19, 99, -5])
def test_register_name_rejects_unnamed(value):
    with pytest.raises(ValueError):
        register_name(value)


def test_names_are_unique_across_nameable_registers():
    names = [
        register_name(r)
        for r in Register
        if not (Register.R16 <= r <= Register.R19)
    ]
    assert len(names) == len(set(names))