"""
View template compilation.

Supported template languages:
- ``jinja2``: Jinja2 templates (``{{ name }}``)
- ``jade``: indentation-based pug/jade markup, converted through pypugjs
"""

from .compiler import TemplateCompiler, compile_template, RENDER_FUNCTION

__all__ = [
    "TemplateCompiler",
    "compile_template",
    "RENDER_FUNCTION",
]
