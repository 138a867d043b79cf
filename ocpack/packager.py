"""
Package Assembler - turns a component source tree into a package directory.

Stages::

    validating → compiling_template → (bundling_data)? → writing_manifest
               → copying_static → done

``failed`` is reachable from every stage; the stage a fault was raised in is
recorded in ``fault.metadata["stage"]``.

The output directory is deleted and recreated before anything is
validated, so a failed run can leave a partial package behind. Nothing is
rolled back within a run; the next run starts from an empty directory.

Usage::

    packager = ComponentPackager(PackagerConfig.load())
    manifest = packager.package("components/hello-world")
    manifest["oc"]["files"]["template"]["hashKey"]
"""

from __future__ import annotations

import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import PackagerConfig
from .faults import (
    ComponentNameInvalidFault,
    Fault,
    MissingFileFault,
    PackageIOFault,
    Severity,
    UnsupportedTemplateTypeFault,
)
from .manifest import (
    DATA_PROVIDER_OUTPUT,
    MANIFEST_FILENAME,
    TEMPLATE_OUTPUT,
    ComponentManifest,
)
from .sandbox import build_data_provider
from .static import StaticAssetProcessor
from .templates import TemplateCompiler
from .toolchain import toolchain_version
from .validator import (
    SUPPORTED_TEMPLATE_TYPES,
    is_valid_component_name,
    is_valid_template_type,
)

logger = logging.getLogger("ocpack.packager")

_FAULT_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


class PackagingStage(str, Enum):
    """Assembler states."""

    VALIDATING = "validating"
    COMPILING_TEMPLATE = "compiling_template"
    BUNDLING_DATA = "bundling_data"
    WRITING_MANIFEST = "writing_manifest"
    COPYING_STATIC = "copying_static"
    DONE = "done"
    FAILED = "failed"


class ComponentPackager:
    """
    Packages one component per :meth:`package` call.

    Args:
        config: Packaging options (defaults to :class:`PackagerConfig()`)
        template_compiler: Compiler override (defaults to one built from *config*)
    """

    def __init__(
        self,
        config: Optional[PackagerConfig] = None,
        *,
        template_compiler: Optional[TemplateCompiler] = None,
    ):
        self.config = config or PackagerConfig()
        self.compiler = template_compiler or TemplateCompiler(
            namespace=self.config.registry_namespace,
            bucket=self.config.registry_bucket,
        )
        self.stage: Optional[PackagingStage] = None
        self.history: List[PackagingStage] = []

    def output_path(self, component_path: Union[str, Path]) -> Path:
        return Path(component_path) / self.config.output_dirname

    # ── Public API ───────────────────────────────────────────────────

    def package(self, component_path: Union[str, Path], minify: bool = True) -> Dict[str, Any]:
        """
        Package the component at *component_path*.

        Args:
            component_path: Component root (holds ``package.json``)
            minify: Allow static ``.js``/``.css`` minification; the
                manifest's ``oc.minify: false`` also disables it

        Returns:
            The rewritten manifest, as written to ``<output>/package.json``.

        Raises:
            Fault: The first fault of any stage, tagged with the stage.
        """
        component_path = Path(component_path)
        self.history = []
        try:
            return self._run(component_path, minify)
        except Fault as fault:
            fault.metadata.setdefault("stage", self.stage.value if self.stage else None)
            logger.log(
                _FAULT_LOG_LEVELS.get(fault.severity, logging.ERROR),
                "Packaging %s failed during %s: %s",
                component_path, fault.metadata["stage"], fault,
            )
            self._enter(PackagingStage.FAILED)
            raise

    def check(self, component_path: Union[str, Path]) -> ComponentManifest:
        """
        Run the validation stage only; nothing is written.

        Raises:
            MissingFileFault, ValidationFault, UnsupportedTemplateTypeFault
        """
        manifest, _, _ = self._validate(Path(component_path))
        if not is_valid_template_type(manifest.template_type):
            raise UnsupportedTemplateTypeFault(manifest.template_type, SUPPORTED_TEMPLATE_TYPES)
        return manifest

    # ── Stages ───────────────────────────────────────────────────────

    def _run(self, component_path: Path, minify: bool) -> Dict[str, Any]:
        self._enter(PackagingStage.VALIDATING)
        if not component_path.is_dir():
            raise MissingFileFault(str(component_path), reason="is not a directory")
        publish_path = self.output_path(component_path)
        self._reset_output(publish_path)
        manifest, template, version = self._validate(component_path)

        self._enter(PackagingStage.COMPILING_TEMPLATE)
        compiled = self.compiler.compile(template, manifest.template_type)
        self._write(publish_path / TEMPLATE_OUTPUT, compiled.compiled_source)
        manifest.set_template(compiled.hash_key)
        manifest.set_toolchain_version(version)

        if manifest.data_src:
            self._enter(PackagingStage.BUNDLING_DATA)
            data_path = component_path / manifest.data_src
            if not data_path.is_file():
                raise MissingFileFault(manifest.data_src, metadata={"path": str(data_path)})
            provider = build_data_provider(
                component_path,
                self._read(data_path),
                strategy=self.config.discovery_strategy,
                timeout=self.config.discovery_timeout,
                filename=manifest.data_src,
            )
            self._write(publish_path / DATA_PROVIDER_OUTPUT, provider.bundled_source)
            manifest.set_data_provider(provider.hash_key)

        self._enter(PackagingStage.WRITING_MANIFEST)
        manifest.normalize_static()
        manifest.write(publish_path / MANIFEST_FILENAME)

        self._enter(PackagingStage.COPYING_STATIC)
        static_dirs = manifest.static_dirs
        if static_dirs:
            processor = StaticAssetProcessor(
                minify=minify and manifest.minify,
                workers=self.config.static_workers,
            )
            processor.process(static_dirs, component_path, publish_path)

        self._enter(PackagingStage.DONE)
        logger.info("Packaged %s@%s -> %s", manifest.name, manifest.version, publish_path)
        return manifest.to_dict()

    def _validate(self, component_path: Path) -> Tuple[ComponentManifest, str, str]:
        manifest_path = component_path / MANIFEST_FILENAME
        if not manifest_path.is_file():
            raise MissingFileFault(
                str(manifest_path),
                message="component does not contain package.json",
            )
        version = toolchain_version(self.config)

        manifest = ComponentManifest.load(manifest_path)
        manifest.validate()

        view_path = component_path / manifest.template_src
        if not view_path.is_file():
            raise MissingFileFault(manifest.template_src, metadata={"path": str(view_path)})
        if not is_valid_component_name(manifest.name):
            raise ComponentNameInvalidFault(manifest.name)

        return manifest, self._read(view_path), version

    # ── Helpers ──────────────────────────────────────────────────────

    def _enter(self, stage: PackagingStage) -> None:
        self.stage = stage
        self.history.append(stage)
        logger.debug("Stage -> %s", stage.value)

    @staticmethod
    def _reset_output(publish_path: Path) -> None:
        try:
            if publish_path.exists():
                shutil.rmtree(publish_path)
            publish_path.mkdir(parents=True)
        except OSError as exc:
            raise PackageIOFault("reset", str(publish_path), str(exc)) from exc

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PackageIOFault("read", str(path), str(exc)) from exc

    @staticmethod
    def _write(path: Path, content: str) -> None:
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise PackageIOFault("write", str(path), str(exc)) from exc


def find_components(components_dir: Union[str, Path]) -> List[Path]:
    """
    Direct subdirectories of *components_dir* that hold a ``package.json``.

    Raises:
        MissingFileFault: If *components_dir* is not a directory.
    """
    components_dir = Path(components_dir)
    if not components_dir.is_dir():
        raise MissingFileFault(str(components_dir), reason="is not a directory")
    return sorted(
        entry.resolve()
        for entry in components_dir.iterdir()
        if entry.is_dir() and (entry / MANIFEST_FILENAME).is_file()
    )


def package_component(
    component_path: Union[str, Path],
    minify: bool = True,
    *,
    config: Optional[PackagerConfig] = None,
) -> Dict[str, Any]:
    """Package one component with a fresh :class:`ComponentPackager`."""
    return ComponentPackager(config).package(component_path, minify)


def package_many(
    components_dir: Union[str, Path],
    minify: bool = True,
    *,
    config: Optional[PackagerConfig] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Package every component found in *components_dir*, in name order.

    Stops at the first component that fails; components packaged before it
    keep their output.

    Returns:
        ``{component directory name: rewritten manifest}``
    """
    packager = ComponentPackager(config)
    return {
        path.name: packager.package(path, minify)
        for path in find_components(components_dir)
    }
