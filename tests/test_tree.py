from xsmc.expl.tree import ASTNode, NodeType, tree_create


def test_tree_create_sets_fields():
    left = tree_create(None, NodeType.NUM, None, 3, None, None, None, None)
    right = tree_create(None, NodeType.NUM, None, 4, None, None, None, None)
    node = tree_create("integer", NodeType.PLUS, None, None, None, left, right, None)
    assert node.nodetype == NodeType.PLUS
    assert node.type == "integer"
    assert node.ptr1 is left and node.ptr2 is right
    assert node.ptr3 is None
    assert left.value == 3 and right.value == 4


def test_tree_create_without_value_or_name():
    node = tree_create(None, NodeType.BRK, None, None, None, None, None, None)
    assert node.value is None
    assert node.name is None
    assert node.gentry is None and node.lentry is None


def test_tree_create_keeps_name_and_arglist():
    args = tree_create(None, NodeType.ID, "x", None, None, None, None, None)
    call = tree_create(None, NodeType.FUNC, "f", None, args, None, None, None)
    assert call.name == "f"
    assert call.arglist is args
    assert call == ASTNode(type=None, nodetype=NodeType.FUNC, name="f", arglist=args)


def test_node_type_values_from_header():
    assert NodeType.DIV == 25
    assert NodeType.NEQ == 27
    assert NodeType.DEFAULT == 100
    assert NodeType(40) is NodeType.FIELD