"""ocpack CLI - Main Entry Point.

Commands:
    package  - Package a component into its output directory
    validate - Check a component without writing anything
    list     - List the components inside a directory
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..archive import ARCHIVE_NAME, compress
from ..config import DISCOVERY_STRATEGIES, PackagerConfig
from ..faults import Fault
from ..manifest import ComponentManifest, MANIFEST_FILENAME
from ..packager import ComponentPackager, find_components
from . import __cli_name__
from .utils.colors import (
    success, error, info, dim, kv, table,
    _ARROW, _CHECK, _CROSS,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class OcpackGroup(click.Group):
    """Click group subclass with aligned command listing."""

    def format_commands(
        self, ctx: click.Context, formatter: click.HelpFormatter
    ) -> None:
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=48)))

        if commands:
            with formatter.section(click.style("Commands", fg="cyan", bold=True)):
                max_len = max(len(c[0]) for c in commands) + 2
                for name, help_text in commands:
                    styled_name = click.style(name.ljust(max_len), fg="green")
                    formatter.write(f"  {styled_name} {help_text}\n")


@click.group(cls=OcpackGroup)
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Minimal output')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """Compile, sandbox and bundle view components.

    \b
    Quick start:
      ocpack validate components/hello-world
      ocpack package components/hello-world --compress
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet

    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.getLogger("ocpack").setLevel(level)


def _load_config(config_file: Optional[str], env_file: Optional[str], **overrides) -> PackagerConfig:
    try:
        return PackagerConfig.load(config_file, env_file=env_file, overrides=overrides)
    except Fault as e:
        error(f"{_CROSS} {e.message}")
        sys.exit(1)


# ============================================================================
# package
# ============================================================================

@cli.command('package')
@click.argument('component', type=click.Path(file_okay=False))
@click.option('--no-minify', is_flag=True, help='Copy static .js/.css files verbatim')
@click.option('--compress', 'do_compress', is_flag=True, help=f'Also write {ARCHIVE_NAME}')
@click.option('--strategy', type=click.Choice(DISCOVERY_STRATEGIES), default=None,
              help='Data provider dependency discovery strategy')
@click.option('--timeout', type=float, default=None, help='Evaluate-strategy deadline in seconds')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), default=None,
              help='JSON config file')
@click.option('--env-file', type=click.Path(dir_okay=False), default=None, help='.env file')
@click.pass_context
def package(ctx, component: str, no_minify: bool, do_compress: bool, strategy: Optional[str],
            timeout: Optional[float], config_file: Optional[str], env_file: Optional[str]):
    """
    Package a component.

    Examples:
      ocpack package components/hello-world
      ocpack package components/hello-world --compress
      ocpack package components/hello-world --strategy evaluate --timeout 2
    """
    quiet = ctx.obj.get('quiet', False)
    config = _load_config(
        config_file, env_file,
        discovery_strategy=strategy,
        discovery_timeout=timeout,
    )
    packager = ComponentPackager(config)
    component_path = Path(component).resolve()
    publish_path = packager.output_path(component_path)

    info(f"Packaging -> {publish_path}")
    try:
        manifest = packager.package(component_path, minify=not no_minify)
    except Fault as e:
        error(f"An error happened when creating the package: {e.message}")
        if ctx.obj.get('verbose'):
            dim(f"  {e.code} during {e.metadata.get('stage')}")
        sys.exit(1)

    if do_compress:
        archive_path = component_path / ARCHIVE_NAME
        info(f"Compressing -> {archive_path}")
        try:
            compress(publish_path, archive_path)
        except Fault as e:
            error(f"An error happened when compressing the package: {e.message}")
            sys.exit(1)

    if quiet:
        return

    files = manifest["oc"]["files"]
    click.echo()
    success(f"  {_CHECK} Packaged {manifest.get('name')}@{manifest.get('version')}")
    kv("Template", files["template"]["hashKey"])
    if "dataProvider" in files:
        kv("Data provider", files["dataProvider"]["hashKey"])
    kv("Static", ", ".join(files["static"]) or "-")
    kv("Output", f"{_ARROW} {publish_path}")


# ============================================================================
# validate
# ============================================================================

@cli.command('validate')
@click.argument('component', type=click.Path(file_okay=False))
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), default=None,
              help='JSON config file')
@click.pass_context
def validate(ctx, component: str, config_file: Optional[str]):
    """
    Check manifest, component name, template type and template file.

    Examples:
      ocpack validate components/hello-world
    """
    packager = ComponentPackager(_load_config(config_file, None))
    try:
        manifest = packager.check(component)
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        sys.exit(1)

    if not ctx.obj.get('quiet'):
        success(f"  {_CHECK} {manifest.name} is valid")


# ============================================================================
# list
# ============================================================================

@cli.command('list')
@click.argument('directory', type=click.Path(file_okay=False), default='.')
def list_components(directory: str):
    """
    List component directories (those holding a package.json).

    Examples:
      ocpack list components
    """
    try:
        components = find_components(directory)
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        sys.exit(1)

    if not components:
        dim("No components found.")
        return

    rows = []
    for path in components:
        try:
            manifest = ComponentManifest.load(path / MANIFEST_FILENAME)
            template = manifest.data.get("oc", {}).get("files", {}).get("template", {})
            rows.append((path.name, manifest.version or "-", template.get("type", "-")))
        except Fault:
            rows.append((path.name, "?", "?"))

    table(["Name", "Version", "Template"], rows)


def main():
    """Entry point for `ocpack` command."""
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    cli(obj={})


if __name__ == '__main__':
    main()
