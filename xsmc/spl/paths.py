"""File name handling for the SPL compiler."""

import os

FILENAME_MAX_LEN = 200


def expand_path(path, environ=None):
    """Expand an environment variable named by the first path component.

    The first component, minus its leading character (normally ``$``), is
    looked up in ``environ``; if set, its value replaces the component.
    Otherwise the path is returned unchanged.
    """
    if environ is None:
        environ = os.environ
    head, sep, rest = path.partition("/")
    name = head[1:]
    value = environ.get(name) if name else None
    replacement = value if value is not None else head
    return f"{replacement}/{rest}" if sep else replacement


def strip_extension(pathname):
    """Remove the extension after the last dot, keeping the dot.

    A name without a dot yields an empty string.
    """
    index = pathname.rfind(".")
    return pathname[: index + 1]


def output_filename(inpfname):
    """Return the output file name: the input with an ``xsm`` extension."""
    return strip_extension(inpfname) + "xsm"