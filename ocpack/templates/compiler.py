"""
Template Compiler - turns a raw view template into a registered render function.

Pipeline:
    raw template ──(pypugjs, jade only)──▶ Jinja2 source
                 ──(Jinja2 code generator)──▶ Python module source
                 ──▶ unary ``template(locals)`` closure   ← hashed here
                 ──▶ registration statement
                 ──▶ python-minifier

The hash key is computed over the closure text, not the raw template, so
templates that compile to the same code share one render-cache entry.

The artifact is executed by the rendering runtime in a namespace that
provides ``environment`` (a Jinja2 ``Environment``); after execution the
renderer is reachable as ``oc["components"][hash_key]``.
"""

from __future__ import annotations

import logging
import textwrap
from typing import Callable, Dict

from jinja2 import Environment, TemplateSyntaxError
from pypugjs.ext.jinja import Compiler as PugJinjaCompiler
from pypugjs.utils import process as pug_to_jinja

from ..artifacts import TemplateArtifact
from ..faults import TemplateSyntaxFault, UnsupportedTemplateTypeFault
from ..hashing import hash_string
from ..minify import minify_python
from ..validator import SUPPORTED_TEMPLATE_TYPES

logger = logging.getLogger("ocpack.templates.compiler")

RENDER_FUNCTION = "template"

_RENDER_EPILOGUE = (
    "    from jinja2.runtime import new_context\n"
    "    return environment.concat(root(new_context(environment, name, blocks, locals)))\n"
)


class TemplateCompiler:
    """
    Compiles view templates into hashed, registered, minified render functions.

    Args:
        namespace: Shared namespace the runtime looks renderers up in
        bucket: Component-registry bucket inside the namespace
        autoescape: Compile with HTML autoescaping

    Example:
        compiler = TemplateCompiler()
        artifact = compiler.compile("<p>{{ name }}</p>", "jinja2")
        artifact.hash_key        # '3f1c…'
        artifact.compiled_source # "def template(locals):…"
    """

    def __init__(
        self,
        *,
        namespace: str = "oc",
        bucket: str = "components",
        autoescape: bool = True,
    ):
        self.namespace = namespace
        self.bucket = bucket
        self.env = Environment(autoescape=autoescape)
        self._frontends: Dict[str, Callable[[str], str]] = {
            "jinja2": lambda source: source,
            "jade": self._jade_to_jinja,
        }

    def precompile(self, template: str, template_type: str) -> str:
        """
        Compile *template* to the source of a unary ``template(locals)`` function.

        Raises:
            UnsupportedTemplateTypeFault: If *template_type* is not supported.
            TemplateSyntaxFault: If the template does not parse.
        """
        frontend = self._frontends.get(template_type)
        if frontend is None:
            raise UnsupportedTemplateTypeFault(template_type, SUPPORTED_TEMPLATE_TYPES)

        jinja_source = frontend(template)
        try:
            module_source = self.env.compile(jinja_source, raw=True)
        except TemplateSyntaxError as exc:
            raise TemplateSyntaxFault(template_type, exc.message or str(exc), line=exc.lineno) from exc

        body = textwrap.indent(module_source.strip("\n"), "    ")
        return f"def {RENDER_FUNCTION}(locals):\n{body}\n{_RENDER_EPILOGUE}"

    def register(self, compiled: str, hash_key: str) -> str:
        """Append the statement storing the closure under *hash_key*."""
        ns = self.namespace
        return (
            f"{compiled}"
            f"{ns} = globals().setdefault({ns!r}, {{}})\n"
            f"{ns}.setdefault({self.bucket!r}, {{}})[{hash_key!r}] = {RENDER_FUNCTION}\n"
        )

    def compile(self, template: str, template_type: str) -> TemplateArtifact:
        """
        Compile, hash, register and minify a view template.

        Returns:
            TemplateArtifact whose ``compiled_source`` is ready to be written
            as ``template.py``.
        """
        compiled = self.precompile(template, template_type)
        hash_key = hash_string(compiled)
        source = minify_python(self.register(compiled, hash_key), filename="template.py")
        logger.debug("Compiled %s template -> %s (%d bytes)", template_type, hash_key, len(source))
        return TemplateArtifact(hash_key=hash_key, compiled_source=source)

    @staticmethod
    def _jade_to_jinja(template: str) -> str:
        try:
            return pug_to_jinja(template, compiler=PugJinjaCompiler)
        except Exception as exc:
            raise TemplateSyntaxFault("jade", str(exc)) from exc


def compile_template(
    template: str,
    template_type: str,
    *,
    namespace: str = "oc",
    bucket: str = "components",
) -> TemplateArtifact:
    """Compile *template* with a default :class:`TemplateCompiler`."""
    return TemplateCompiler(namespace=namespace, bucket=bucket).compile(template, template_type)
