"""
ocpack CLI.

Usage:
    ocpack package <component-dir> [--compress] [--no-minify]
    ocpack validate <component-dir>
    ocpack list <components-dir>
"""

__cli_name__ = "ocpack"


def main():
    """Wrapper to avoid eager import of __main__ which causes warnings with -m."""
    from .__main__ import main as _main
    return _main()
