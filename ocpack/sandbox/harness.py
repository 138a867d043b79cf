"""
Child-process entry point for ``evaluate`` dependency discovery.

Run as ``python -I harness.py`` with the data provider source on stdin.
Only the top-level statements execute; the evaluated code sees a recording
``require``, an inert ``module`` placeholder, a silent ``print``, an
``__import__`` that hands back inert stubs and a reduced builtins table
without ``type``, ``object`` or ``super``.

A reduced builtins table alone does not isolate anything: dunder attributes
(``().__class__.__base__.__subclasses__()``) and frame introspection
(``gi_frame.f_back.f_globals``) lead back to the real builtins. Source that
names any of them is refused before it is compiled (see
:func:`blocked_names`); the parent process applies the same check before
starting this script.

Writes the JSON list of required aliases to stdout and exits 0, or writes
the error to stderr and exits 1. The parent enforces the deadline.

This file is executed by path and must only import the standard library.
"""

import ast
import builtins
import json
import sys

SAFE_BUILTINS = (
    "abs", "all", "any", "ascii", "bin", "bool", "bytes", "callable", "chr",
    "classmethod", "complex", "dict", "divmod", "enumerate", "filter", "float",
    "format", "frozenset", "hash", "hex", "int", "isinstance", "issubclass",
    "iter", "len", "list", "map", "max", "min", "next", "oct", "ord",
    "pow", "property", "range", "repr", "reversed", "round", "set", "slice",
    "sorted", "staticmethod", "str", "sum", "tuple", "zip",
    "__build_class__", "None", "True", "False", "NotImplemented", "Ellipsis",
    "BaseException", "Exception", "ArithmeticError", "AssertionError",
    "AttributeError", "ImportError", "IndexError", "KeyError", "LookupError",
    "NameError", "NotImplementedError", "RuntimeError", "StopIteration",
    "TypeError", "ValueError", "ZeroDivisionError",
)

# Private/dunder attributes, then generator, coroutine, frame, traceback
# and code object internals.
BLOCKED_ATTRIBUTE_PREFIXES = ("_", "gi_", "cr_", "ag_", "f_", "tb_", "co_")
ALLOWED_DUNDER_NAMES = frozenset({"__name__"})


def blocked_names(tree):
    """Identifiers in *tree* that could reach interpreter internals."""
    found = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Name) and node.id.startswith("__") and node.id not in ALLOWED_DUNDER_NAMES:
            found.append(node.id)
        elif isinstance(node, ast.Attribute) and node.attr.startswith(BLOCKED_ATTRIBUTE_PREFIXES):
            found.append(node.attr)
        elif isinstance(node, ast.MatchClass):
            found.extend(a for a in node.kwd_attrs if a.startswith(BLOCKED_ATTRIBUTE_PREFIXES))
    return found


class Inert:
    """Stands in for every module, attribute and call result the evaluated code touches."""

    def __getattr__(self, name):
        return self

    def __call__(self, *args, **kwargs):
        return self

    def __getitem__(self, key):
        return self

    def __iter__(self):
        return iter(())

    def __bool__(self):
        return False

    def __repr__(self):
        return "<inert>"


class ModulePlaceholder:
    def __init__(self):
        self.exports = {}


def evaluate(source):
    tree = ast.parse(source, "<data-provider>")
    blocked = blocked_names(tree)
    if blocked:
        raise PermissionError(f"'{blocked[0]}' is not allowed during evaluation")

    captured = []

    def require(alias):
        if isinstance(alias, str) and alias not in captured:
            captured.append(alias)
        return Inert()

    def inert_import(name, globals=None, locals=None, fromlist=(), level=0):
        return Inert()

    table = {name: getattr(builtins, name) for name in SAFE_BUILTINS if hasattr(builtins, name)}
    table["__import__"] = inert_import
    table["print"] = lambda *args, **kwargs: None

    namespace = {
        "__builtins__": table,
        "__name__": "data_provider",
        "require": require,
        "module": ModulePlaceholder(),
    }
    exec(compile(tree, "<data-provider>", "exec"), namespace)
    return captured


def main():
    source = sys.stdin.read()
    try:
        captured = evaluate(source)
    except BaseException as exc:
        sys.stderr.write(f"{type(exc).__name__}: {exc}\n")
        return 1
    sys.stdout.write(json.dumps(captured))
    return 0


if __name__ == "__main__":
    sys.exit(main())
