"""Naming and template-type validation for component manifests."""

import re

RESERVED_NAMES = frozenset({"_package"})

SUPPORTED_TEMPLATE_TYPES = ("jade", "jinja2")

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def is_valid_component_name(name) -> bool:
    """Letters, digits, ``-`` and ``_`` only; the output directory name is reserved."""
    if not isinstance(name, str):
        return False
    return bool(_NAME_PATTERN.match(name)) and name not in RESERVED_NAMES


def is_valid_template_type(template_type) -> bool:
    return template_type in SUPPORTED_TEMPLATE_TYPES
