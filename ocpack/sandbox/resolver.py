"""
Local Dependency Resolver - which local JSON files does a data provider need?

Data providers may only depend on local *configuration*: every
``require("./x")`` must name a JSON file, which is embedded into the bundle
so the published component is a single file with no on-disk companions.
Bare module names (``require("requests")``) are left to the runtime.

Discovery strategies:

``scan`` (default)
    Parse the source and collect every ``require("<literal>")`` call. No
    author code runs. Requires inside function bodies are found too.

``evaluate``
    Execute only the top-level statements in a child interpreter with a
    reduced builtins table and inert imports (see
    :mod:`ocpack.sandbox.harness`), bounded by a deadline. Source that names
    dunder, private or frame attributes is refused before it runs.
    Requires issued only inside functions that are not called at load time
    are not captured.
"""

from __future__ import annotations

import ast
import json
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Union

from ..faults import (
    DiscoveryTimeoutFault,
    JsonParseFault,
    LocalScriptNotAllowedFault,
    PackageIOFault,
    RequireNotFoundFault,
    ScriptEvaluationFault,
    ScriptSyntaxFault,
)
from .harness import blocked_names

logger = logging.getLogger("ocpack.sandbox.resolver")

REQUIRE_FUNCTION = "require"
JSON_EXTENSION = ".json"
HARNESS_PATH = Path(__file__).with_name("harness.py")


# ── Discovery ───────────────────────────────────────────────────────────


class _RequireCollector(ast.NodeVisitor):
    """Collects literal ``require("...")`` arguments in source order."""

    def __init__(self) -> None:
        self.aliases: List[str] = []

    def visit_Call(self, node: ast.Call) -> None:
        if (
            isinstance(node.func, ast.Name)
            and node.func.id == REQUIRE_FUNCTION
            and len(node.args) == 1
            and not node.keywords
            and isinstance(node.args[0], ast.Constant)
            and isinstance(node.args[0].value, str)
        ):
            alias = node.args[0].value
            if alias not in self.aliases:
                self.aliases.append(alias)
        self.generic_visit(node)


def parse_source(source: str, filename: str = "server.py") -> ast.Module:
    """
    Parse data provider source.

    Raises:
        ScriptSyntaxFault: If *source* is not valid Python.
    """
    try:
        return ast.parse(source, filename=filename)
    except SyntaxError as exc:
        raise ScriptSyntaxFault(filename, exc.msg or str(exc), line=exc.lineno) from exc


def scan_requires(source: str, *, filename: str = "server.py") -> List[str]:
    """Distinct literal require aliases, in source order, without executing anything."""
    collector = _RequireCollector()
    collector.visit(parse_source(source, filename))
    return collector.aliases


def evaluate_requires(source: str, *, timeout: float = 5.0, filename: str = "server.py") -> List[str]:
    """
    Distinct require aliases reached by the top-level statements.

    Source naming dunder or frame internals is refused before any
    interpreter is started, since those names lead out of the reduced
    builtins table.

    Raises:
        ScriptSyntaxFault: If *source* is not valid Python.
        DiscoveryTimeoutFault: If evaluation does not finish within *timeout* seconds.
        ScriptEvaluationFault: If the source is refused or the evaluated code raises.
    """
    blocked = blocked_names(parse_source(source, filename))
    if blocked:
        raise ScriptEvaluationFault(f"'{blocked[0]}' is not allowed during evaluation")

    try:
        result = subprocess.run(
            [sys.executable, "-I", str(HARNESS_PATH)],
            input=source,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise DiscoveryTimeoutFault(timeout) from exc

    if result.returncode != 0:
        lines = result.stderr.strip().splitlines()
        raise ScriptEvaluationFault(lines[-1] if lines else f"exit status {result.returncode}")

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise ScriptEvaluationFault(f"unreadable discovery output: {exc}") from exc


def discover_requires(
    source: str,
    *,
    strategy: str = "scan",
    timeout: float = 5.0,
    filename: str = "server.py",
) -> List[str]:
    """Dispatch to the configured discovery strategy."""
    if strategy == "evaluate":
        return evaluate_requires(source, timeout=timeout, filename=filename)
    return scan_requires(source, filename=filename)


# ── Resolution ──────────────────────────────────────────────────────────


def is_local_alias(alias: str) -> bool:
    return alias.startswith((".", "/"))


def resolve_alias_path(component_root: Union[str, Path], alias: str) -> Path:
    """
    Map a local alias to the JSON file it refers to.

    Extension-less aliases default to ``.json``.

    Raises:
        LocalScriptNotAllowedFault: If the alias names any other extension.
    """
    path = Path(os.path.normpath(os.path.join(str(component_root), alias)))
    ext = path.suffix.lower()
    if ext == "":
        return Path(str(path) + JSON_EXTENSION)
    if ext != JSON_EXTENSION:
        raise LocalScriptNotAllowedFault(alias, str(path))
    return path


def load_local_json(alias: str, path: Path) -> Any:
    if not path.is_file():
        raise RequireNotFoundFault(alias, str(path))
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise PackageIOFault("read", str(path), str(exc)) from exc
    try:
        return json.loads(content)
    except ValueError as exc:
        raise JsonParseFault(alias, str(path), str(exc)) from exc


def resolve_local_requires(
    component_root: Union[str, Path],
    source: str,
    *,
    strategy: str = "scan",
    timeout: float = 5.0,
    filename: str = "server.py",
) -> Dict[str, Any]:
    """
    Build the Local Require Map for a data provider.

    Args:
        component_root: Directory local aliases are resolved against
        source: Data provider source
        strategy: ``scan`` or ``evaluate``
        timeout: Deadline for ``evaluate``, in seconds
        filename: Name used in syntax error reports

    Returns:
        ``{alias: parsed JSON}`` for every local alias, in discovery order.

    Raises:
        UnresolvableRequireFault: (``RequireNotFoundFault``,
            ``LocalScriptNotAllowedFault``, ``JsonParseFault``) for the
            first alias that cannot be satisfied.
    """
    aliases = discover_requires(source, strategy=strategy, timeout=timeout, filename=filename)

    require_map: Dict[str, Any] = {}
    for alias in aliases:
        if not is_local_alias(alias):
            continue
        require_map[alias] = load_local_json(alias, resolve_alias_path(component_root, alias))

    logger.debug(
        "Resolved %d local require(s) out of %d discovered: %s",
        len(require_map), len(aliases), ", ".join(require_map) or "-",
    )
    return require_map
