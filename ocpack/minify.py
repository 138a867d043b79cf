"""
Minifiers for generated scripts and static assets.

- Python scripts (compiled templates, bundled data providers): python-minifier
- Browser JavaScript: rjsmin
- Stylesheets: rcssmin
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

import python_minifier
import rcssmin
import rjsmin

from .faults import ScriptSyntaxFault

logger = logging.getLogger("ocpack.minify")

SCRIPT_EXTENSIONS = (".js",)
STYLESHEET_EXTENSIONS = (".css",)


def minify_python(source: str, *, filename: str = "<generated>") -> str:
    """
    Minify Python source without renaming module-level names.

    Globals must survive minification because the rendering runtime looks
    them up (``data``, ``oc``, the injected ``require``).

    Raises:
        ScriptSyntaxFault: If *source* is not valid Python.
    """
    try:
        return python_minifier.minify(
            source,
            filename=filename,
            rename_globals=False,
            remove_literal_statements=False,
        )
    except SyntaxError as exc:
        raise ScriptSyntaxFault(filename, exc.msg or str(exc), line=exc.lineno) from exc


def minify_js(source: str) -> str:
    return rjsmin.jsmin(source)


def minify_css(source: str) -> str:
    return rcssmin.cssmin(source)


_ASSET_MINIFIERS: Dict[str, Callable[[str], str]] = {
    **{ext: minify_js for ext in SCRIPT_EXTENSIONS},
    **{ext: minify_css for ext in STYLESHEET_EXTENSIONS},
}


def asset_minifier(extension: str) -> Optional[Callable[[str], str]]:
    """Minifier for a static asset extension, or None when it is copied verbatim."""
    return _ASSET_MINIFIERS.get(extension)
