"""
ocpack faults - Structured error handling for the packaging pipeline.

Every failure the engine reports is a typed ``Fault`` carrying a stable
code, a domain and free-form metadata. Faults are raised synchronously and
never retried internally.
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    PackagingFault,
    ValidationFault,
    ComponentNameInvalidFault,
    ManifestFieldMissingFault,
    TemplateSyntaxFault,
    ScriptSyntaxFault,
    MissingFileFault,
    UnsupportedTemplateTypeFault,
    SandboxFault,
    UnresolvableRequireFault,
    RequireNotFoundFault,
    LocalScriptNotAllowedFault,
    JsonParseFault,
    DiscoveryTimeoutFault,
    ScriptEvaluationFault,
    PackageIOFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",

    # Packaging
    "PackagingFault",
    "ValidationFault",
    "ComponentNameInvalidFault",
    "ManifestFieldMissingFault",
    "TemplateSyntaxFault",
    "ScriptSyntaxFault",
    "MissingFileFault",
    "UnsupportedTemplateTypeFault",

    # Sandbox
    "SandboxFault",
    "UnresolvableRequireFault",
    "RequireNotFoundFault",
    "LocalScriptNotAllowedFault",
    "JsonParseFault",
    "DiscoveryTimeoutFault",
    "ScriptEvaluationFault",

    # IO
    "PackageIOFault",
]
