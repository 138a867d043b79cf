"""
ocpack - Component packaging engine.

Turns a component source tree (view template, optional data provider,
optional static directories, ``package.json``) into an immutable package
directory a rendering runtime can load:

- Templates: compiled to hashed, registered, minified render functions
- Data providers: local JSON requires embedded, everything else left to the runtime
- Static assets: copied in declared order, ``.js``/``.css`` minified
- Manifest: rewritten to reference the generated files only
"""

__version__ = "0.3.0"

from .config import PackagerConfig
from .faults import Fault
from .hashing import hash_string
from .artifacts import TemplateArtifact, DataProviderArtifact
from .templates import TemplateCompiler, compile_template
from .sandbox import resolve_local_requires, bundle_data_provider, build_data_provider
from .static import StaticAssetProcessor
from .manifest import ComponentManifest
from .packager import ComponentPackager, PackagingStage, find_components, package_component, package_many
from .archive import compress, cleanup

__all__ = [
    "__version__",
    "PackagerConfig",
    "Fault",
    "hash_string",
    "TemplateArtifact",
    "DataProviderArtifact",
    "TemplateCompiler",
    "compile_template",
    "resolve_local_requires",
    "bundle_data_provider",
    "build_data_provider",
    "StaticAssetProcessor",
    "ComponentManifest",
    "ComponentPackager",
    "PackagingStage",
    "find_components",
    "package_component",
    "package_many",
    "compress",
    "cleanup",
]
