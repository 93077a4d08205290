from xsmc.spl.paths import expand_path, output_filename, strip_extension


def test_expand_path_substitutes_variable():
    env = {"SPLDIR": "/opt/spl"}
    assert expand_path("$SPLDIR/prog.spl", env) == "/opt/spl/prog.spl"


def test_expand_path_whole_path_variable():
    env = {"PROG": "/tmp/os.spl"}
    assert expand_path("$PROG", env) == "/tmp/os.spl"


def test_expand_path_unset_variable_leaves_path():
    assert expand_path("$NOPE/a/b.spl", {}) == "$NOPE/a/b.spl"


def test_expand_path_plain_relative_path_unchanged():
    assert expand_path("dir/file.spl", {}) == "dir/file.spl"


def test_expand_path_absolute_path_unchanged():
    assert expand_path("/abs/file.spl", {"": "x"}) == "/abs/file.spl"


def test_strip_extension_keeps_dot():
    assert strip_extension("prog.spl") == "prog."


def test_strip_extension_uses_last_dot():
    assert strip_extension("a.b.spl") == "a.b."


def test_strip_extension_without_dot_is_empty():
    assert strip_extension("noext") == ""


def test_output_filename_replaces_extension():
    assert output_filename("prog.spl") == "prog.xsm"


def test_output_filename_is_strip_plus_xsm():
    for name in ["x/y/int7.spl", "a.b.c", "dir.d/file.spl"]:
        out = output_filename(name)
        assert out == strip_extension(name) + "xsm"
        assert out.endswith(".xsm")