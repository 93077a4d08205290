import pytest

from xsmc.expl.expressions import CodegenError, ExpressionGenerator
from xsmc.expl.symbols import Field, SymbolTables
from xsmc.expl.tree import ASTNode, NodeType


def _tables():
    tables = SymbolTables()
    for name in ("integer", "string", "boolean", "array_integer", "array_string"):
        tables.tinstall(name, 1, None)
    return tables


def _num(value):
    return ASTNode(type=None, nodetype=NodeType.NUM, value=value)


def _id(name):
    return ASTNode(type=None, nodetype=NodeType.ID, name=name)


def test_labels_start_after_reserved_ones():
    gen = ExpressionGenerator(_tables())
    first = gen.get_label()
    second = gen.get_label()
    assert first == 4
    assert second == first + 1


def test_registers_run_out():
    gen = ExpressionGenerator(_tables())
    taken = [gen.get_reg() for _ in range(17)]
    assert taken == list(range(17))
    with pytest.raises(CodegenError):
        gen.get_reg()


def test_free_reg_stops_at_none_in_use():
    gen = ExpressionGenerator(_tables())
    gen.free_reg()
    assert gen.counter == -1
    assert gen.get_reg() == 0


def test_missing_node_yields_register_zero():
    gen = ExpressionGenerator(_tables())
    assert gen.expression(None) == 0
    assert gen.code == ""


def test_number():
    gen = ExpressionGenerator(_tables())
    assert gen.expression(_num(7)) == 0
    assert gen.code == "MOV R0,7\n"
    assert gen.counter == 0


def test_string_value():
    gen = ExpressionGenerator(_tables())
    node = ASTNode(type=None, nodetype=NodeType.STRVAL, name="hello")
    assert gen.expression(node) == 0
    assert gen.code == 'MOV R0,"hello"\n'


def test_nill_loads_minus_one():
    gen = ExpressionGenerator(_tables())
    reg = gen.expression(ASTNode(type=None, nodetype=NodeType.NILL))
    assert gen.code == f"MOV R{reg},-1\n"


@pytest.mark.parametrize(
    "kind, op",
    [
        (NodeType.PLUS, "ADD"),
        (NodeType.MINUS, "SUB"),
        (NodeType.MUL, "MUL"),
        (NodeType.DIV, "DIV"),
        (NodeType.MOD, "MOD"),
        (NodeType.LT, "LT"),
        (NodeType.GT, "GT"),
        (NodeType.LE, "LE"),
        (NodeType.GE, "GE"),
        (NodeType.DEQ, "EQ"),
        (NodeType.NEQ, "NE"),
    ],
)
def test_binary_operators_leave_result_in_first_register(kind, op):
    gen = ExpressionGenerator(_tables())
    node = ASTNode(type=None, nodetype=kind, ptr1=_num(2), ptr2=_num(3))
    reg = gen.expression(node)
    assert reg == 0
    assert gen.counter == 0
    lines = gen.code.splitlines()
    assert lines[-1].split()[0] == op
    assert len(lines) == 3


def test_global_identifier():
    tables = _tables()
    symbol = tables.ginstall("x", tables.tlookup("integer"), 1, None)
    gen = ExpressionGenerator(tables)
    assert gen.expression(_id("x")) == 0
    assert gen.code == f"MOV R0,[{symbol.binding}]\n"


def test_global_identifier_address():
    tables = _tables()
    symbol = tables.ginstall("x", tables.tlookup("integer"), 1, None)
    gen = ExpressionGenerator(tables)
    gen.isamp = True
    gen.expression(_id("x"))
    assert gen.code == f"MOV R0,{symbol.binding}\n"
    assert gen.isamp is False


def test_local_identifier():
    tables = _tables()
    tables.linstall("a", tables.tlookup("integer"))
    tables.linstall("b", tables.tlookup("integer"))
    gen = ExpressionGenerator(tables)
    reg = gen.expression(_id("b"))
    assert reg == 0
    assert gen.counter == 0
    assert gen.code.splitlines() == [
        "MOV R1,BP",
        "MOV R0,2",
        "ADD R1,R0",
        "MOV R0,[R1]",
    ]


def test_parameter_identifier():
    tables = _tables()
    tables.pinstall("a", tables.tlookup("integer"))
    tables.pinstall("b", tables.tlookup("integer"))
    gen = ExpressionGenerator(tables)
    reg = gen.expression(_id("b"))
    assert reg == 0
    assert gen.counter == 0
    lines = gen.code.splitlines()
    assert lines[0] == "MOV R1,BP"
    assert lines[-1] == "MOV R0,[R1]"
    assert lines.count("SUB R1,R2") == 2


def test_undeclared_global_is_an_error():
    gen = ExpressionGenerator(_tables())
    with pytest.raises(CodegenError):
        gen.expression(_id("missing"))


def test_unknown_node_type_is_an_error():
    gen = ExpressionGenerator(_tables())
    with pytest.raises(CodegenError):
        gen.expression(ASTNode(type=None, nodetype=NodeType.WHILE))


def test_not_uses_second_subtree_and_two_labels():
    gen = ExpressionGenerator(_tables())
    node = ASTNode(type=None, nodetype=NodeType.NOT, ptr2=_num(1))
    reg = gen.expression(node)
    assert reg == 0
    lines = gen.code.splitlines()
    assert "JNZ R0,L4" in lines
    assert lines[-1] == "L5:"
    assert gen.label == 5


@pytest.mark.parametrize("kind, jump, combine", [
    (NodeType.AND, "JZ", "MUL"),
    (NodeType.OR, "JNZ", "ADD"),
])
def test_short_circuit(kind, jump, combine):
    gen = ExpressionGenerator(_tables())
    node = ASTNode(type=None, nodetype=kind, ptr1=_num(1), ptr2=_num(0))
    reg = gen.expression(node)
    assert reg == 0
    assert gen.counter == 0
    lines = gen.code.splitlines()
    assert f"{jump} R0,L4" in lines
    assert lines[-2] == "L4:"
    assert lines[-1] == f"{combine} R0,R1"


def test_array_element():
    tables = _tables()
    symbol = tables.ginstall("arr", tables.tlookup("array_integer"), 10, None)
    gen = ExpressionGenerator(tables)
    node = ASTNode(type=None, nodetype=NodeType.ARRAY, ptr1=_id("arr"), ptr2=_num(3))
    reg = gen.expression(node)
    assert reg == 0
    assert gen.counter == 0
    assert gen.code.splitlines() == [
        "MOV R0,3",
        f"MOV R1,{symbol.binding}",
        "ADD R1,R0",
        "MOV R0,[R1]",
    ]


def _point_tables():
    tables = _tables()
    integer = tables.tlookup("integer")
    point = tables.tinstall("point", 0, [Field("x", integer), Field("y", integer)])
    symbol = tables.ginstall("p", point, 1, None)
    return tables, symbol


def _field_node():
    member = ASTNode(type=None, nodetype=NodeType.FIELD, name="y")
    return ASTNode(type=None, nodetype=NodeType.FIELD, name="p", ptr2=member)


def test_global_field():
    tables, symbol = _point_tables()
    gen = ExpressionGenerator(tables)
    reg = gen.expression(_field_node())
    assert reg == 0
    assert gen.counter == 0
    assert gen.code.splitlines() == [
        f"MOV R0,[{symbol.binding}]",
        "MOV R1,2",
        "ADD R1,R0",
        "MOV R0,[R1]",
    ]


def test_field_address_requested():
    tables, _ = _point_tables()
    gen = ExpressionGenerator(tables)
    gen.fld = True
    gen.expression(_field_node())
    assert gen.code.splitlines()[-1] == "MOV R0,R1"
    assert gen.fld is False


def test_nested_expression_releases_registers():
    tables = _tables()
    tables.ginstall("x", tables.tlookup("integer"), 1, None)
    gen = ExpressionGenerator(tables)
    inner = ASTNode(type=None, nodetype=NodeType.MUL, ptr1=_id("x"), ptr2=_num(4))
    outer = ASTNode(type=None, nodetype=NodeType.PLUS, ptr1=_num(1), ptr2=inner)
    reg = gen.expression(outer)
    assert reg == 0
    assert gen.counter == 0