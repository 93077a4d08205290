from xsmc.expl.runtime import alloc_routine, free_routine, initialize_routine


def _lines(text):
    assert text.endswith("\n")
    return text.splitlines()


def test_routines_start_with_their_labels():
    assert _lines(initialize_routine())[0] == "INITIALIZE:"
    assert _lines(alloc_routine())[0] == "ALLOC:"
    assert _lines(free_routine())[0] == "FREE:"


def test_routines_share_frame_setup_and_teardown():
    for routine in (initialize_routine, alloc_routine, free_routine):
        lines = _lines(routine())
        assert lines[1:3] == ["PUSH BP", "MOV BP, SP"]
        assert lines[-3:] == ["MOV BP, [SP]", "POP R0", "RET"]


def test_initialize_terminates_free_list():
    lines = _lines(initialize_routine())
    assert "MOV [240],-1" in lines
    assert "MOV [256],0" in lines
    for label in ("L0", "L1", "L2", "L3"):
        assert f"{label}:" in lines


def test_alloc_updates_free_list_head():
    lines = _lines(alloc_routine())
    assert lines.index("MOV R0, [256]") < lines.index("MOV [256], R1")
    assert "MOV [R1], R0" in lines


def test_free_pushes_block_back():
    lines = _lines(free_routine())
    assert "MOV [256], R0" in lines
    assert lines.index("MOV R1, [256]") < lines.index("MOV [R0], R1")


def test_routines_are_stable():
    assert initialize_routine() == initialize_routine()
    assert alloc_routine() != free_routine()