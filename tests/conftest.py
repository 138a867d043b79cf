"""
Shared test fixtures and helpers for the ocpack test suite.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import pytest
from jinja2 import Environment


HELLO_TEMPLATE = "<p>Hello {{ name }}</p>"

DATA_PROVIDER = '''\
"""Hello world data provider."""
config = require("./config")


def data(context):
    return {"name": context.get("name", config["greeting"])}
'''


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Ambient OCPACK_* variables must not leak into config loading."""
    for key in list(os.environ):
        if key.startswith("OCPACK_"):
            monkeypatch.delenv(key)


def write_component(
    root: Path,
    name: str = "hello-world",
    *,
    template: str = HELLO_TEMPLATE,
    template_type: str = "jinja2",
    template_src: str = "template.html",
    data: Optional[str] = None,
    data_src: str = "server.py",
    static: Any = None,
    files: Optional[Dict[str, Any]] = None,
    oc: Optional[Dict[str, Any]] = None,
    extra: Optional[Dict[str, Any]] = None,
    dirname: Optional[str] = None,
) -> Path:
    """
    Lay out a component source tree under *root* and return its path.

    ``files`` maps relative paths to contents: ``str`` is written as text,
    ``bytes`` as-is and anything else as JSON.
    """
    component = root / (dirname or name)
    component.mkdir(parents=True, exist_ok=True)

    manifest_files: Dict[str, Any] = {
        "template": {"src": template_src, "type": template_type},
    }
    (component / template_src).parent.mkdir(parents=True, exist_ok=True)
    (component / template_src).write_text(template)

    if data is not None:
        (component / data_src).write_text(data)
        manifest_files["data"] = data_src
    if static is not None:
        manifest_files["static"] = static

    for rel, content in (files or {}).items():
        path = component / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        elif isinstance(content, str):
            path.write_text(content)
        else:
            path.write_text(json.dumps(content))

    manifest = {
        "name": name,
        "version": "1.0.0",
        "oc": {"files": manifest_files, **(oc or {})},
        **(extra or {}),
    }
    (component / "package.json").write_text(json.dumps(manifest, indent=2))
    return component


def render(template_source: str, hash_key: str, context: Dict[str, Any], **ns_kwargs) -> str:
    """Execute a compiled ``template.py`` the way the rendering runtime does."""
    namespace: Dict[str, Any] = {"environment": Environment(autoescape=True)}
    exec(template_source, namespace)
    namespace_name = ns_kwargs.get("namespace", "oc")
    bucket = ns_kwargs.get("bucket", "components")
    return namespace[namespace_name][bucket][hash_key](context)


def failing_require(alias):
    raise AssertionError(f"runtime require called for {alias!r}")


@pytest.fixture
def make_component(tmp_path):
    """Factory building component trees inside ``tmp_path``."""

    def _make(name: str = "hello-world", **kwargs) -> Path:
        return write_component(tmp_path, name, **kwargs)

    return _make


@pytest.fixture
def hello_component(make_component):
    """Full component: jinja2 template, data provider with a local JSON require, two static dirs."""
    return make_component(
        data=DATA_PROVIDER,
        static=["img", "css"],
        files={
            "config.json": {"greeting": "World"},
            "img/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00fake",
            "css/site.css": "body {\n    color : red ;\n}\n",
            "css/vendor/reset.css": "/* reset */\nhtml { margin : 0 ; }\n",
        },
    )
