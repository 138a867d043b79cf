"""
Sandboxed Bundler - serves resolved local requires from an embedded table.

For a non-empty Local Require Map the data provider is rewritten so that
every ``require(...)`` call goes through an injected resolver::

    import json as _oc_json
    _oc_local_requires = _oc_json.loads('{"./config": {"a": 1}}')
    def _oc_require(alias):
        if alias in _oc_local_requires:
            return _oc_local_requires[alias]
        return require(alias)

Known aliases return the embedded JSON (no filesystem access at render
time); anything else falls through to the ``require`` the rendering runtime
provides. The runtime's ``require`` itself is never reassigned.
"""

from __future__ import annotations

import ast
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from ..artifacts import DataProviderArtifact
from ..hashing import hash_string
from ..minify import minify_python
from .resolver import REQUIRE_FUNCTION, parse_source, resolve_local_requires

logger = logging.getLogger("ocpack.sandbox.bundler")

RESOLVER_FUNCTION = "_oc_require"
TABLE_NAME = "_oc_local_requires"

_SHIM_TEMPLATE = """\
import json as _oc_json
{table} = _oc_json.loads({payload})
def {resolver}(alias):
    if alias in {table}:
        return {table}[alias]
    return {require}(alias)
"""


class _RequireRewriter(ast.NodeTransformer):
    """Routes ``require(...)`` calls through the injected resolver."""

    def visit_Call(self, node: ast.Call) -> ast.AST:
        self.generic_visit(node)
        if isinstance(node.func, ast.Name) and node.func.id == REQUIRE_FUNCTION:
            node.func = ast.copy_location(ast.Name(id=RESOLVER_FUNCTION, ctx=ast.Load()), node.func)
        return node


def _shim(require_map: Dict[str, Any]) -> list:
    payload = json.dumps(require_map, sort_keys=True, separators=(",", ":"))
    source = _SHIM_TEMPLATE.format(
        table=TABLE_NAME,
        payload=repr(payload),
        resolver=RESOLVER_FUNCTION,
        require=REQUIRE_FUNCTION,
    )
    return ast.parse(source).body


def _preamble_length(body: list) -> int:
    """Statements that must stay first: the docstring and ``__future__`` imports."""
    index = 0
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        index = 1
    while (
        index < len(body)
        and isinstance(body[index], ast.ImportFrom)
        and body[index].module == "__future__"
    ):
        index += 1
    return index


def bundle_data_provider(
    require_map: Dict[str, Any],
    source: str,
    *,
    filename: str = "server.py",
) -> str:
    """
    Embed *require_map* into *source* and minify the result.

    An empty map leaves the source untouched apart from minification.
    """
    if require_map:
        tree = parse_source(source, filename)
        tree = _RequireRewriter().visit(tree)
        at = _preamble_length(tree.body)
        tree.body[at:at] = _shim(require_map)
        ast.fix_missing_locations(tree)
        source = ast.unparse(tree) + "\n"

    return minify_python(source, filename=filename)


def build_data_provider(
    component_root: Union[str, Path],
    source: str,
    *,
    strategy: str = "scan",
    timeout: float = 5.0,
    filename: str = "server.py",
) -> DataProviderArtifact:
    """
    Resolve, bundle and hash a data provider.

    Raises:
        UnresolvableRequireFault: If a local require cannot be satisfied.
        ScriptSyntaxFault: If *source* is not valid Python.
    """
    require_map = resolve_local_requires(
        component_root, source, strategy=strategy, timeout=timeout, filename=filename,
    )
    bundled = bundle_data_provider(require_map, source, filename=filename)
    hash_key = hash_string(bundled)
    logger.debug("Bundled %s with %d embedded require(s) -> %s", filename, len(require_map), hash_key)
    return DataProviderArtifact(hash_key=hash_key, bundled_source=bundled)
