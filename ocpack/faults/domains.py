"""
ocpack faults - Domain-specific fault types.

Fault Taxonomy::

    Fault
    ├── ConfigFault
    │   └── ConfigInvalidFault
    ├── PackagingFault
    │   ├── ValidationFault
    │   │   ├── ComponentNameInvalidFault
    │   │   ├── ManifestFieldMissingFault
    │   │   ├── TemplateSyntaxFault
    │   │   └── ScriptSyntaxFault
    │   ├── MissingFileFault
    │   └── UnsupportedTemplateTypeFault
    ├── SandboxFault
    │   ├── UnresolvableRequireFault
    │   │   ├── RequireNotFoundFault
    │   │   ├── LocalScriptNotAllowedFault
    │   │   └── JsonParseFault
    │   ├── DiscoveryTimeoutFault
    │   └── ScriptEvaluationFault
    └── PackageIOFault
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=Severity.FATAL,
            retryable=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# PACKAGING Faults
# ============================================================================

class PackagingFault(Fault):
    """Base class for component validation and assembly faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.PACKAGING,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class ValidationFault(PackagingFault):
    """Component manifest or source failed validation."""

    def __init__(self, message: str, *, code: str = "VALIDATION_FAILED", **kwargs):
        super().__init__(
            code=code,
            message=message,
            metadata=kwargs.get("metadata", {}),
        )


class ComponentNameInvalidFault(ValidationFault):
    """Component name contains forbidden characters or a reserved word."""

    def __init__(self, name: str, **kwargs):
        super().__init__(
            "name not valid",
            code="COMPONENT_NAME_INVALID",
            metadata={"name": name, **kwargs.get("metadata", {})},
        )


class ManifestFieldMissingFault(ValidationFault):
    """A required manifest field is absent."""

    def __init__(self, field: str, **kwargs):
        super().__init__(
            f"component manifest is missing required field '{field}'",
            code="MANIFEST_FIELD_MISSING",
            metadata={"field": field, **kwargs.get("metadata", {})},
        )


class TemplateSyntaxFault(ValidationFault):
    """View template could not be parsed by its template language."""

    def __init__(self, template_type: str, reason: str, *, line: Optional[int] = None, **kwargs):
        location = f" (line {line})" if line else ""
        super().__init__(
            f"{template_type} template could not be compiled{location}: {reason}",
            code="TEMPLATE_SYNTAX_INVALID",
            metadata={"type": template_type, "reason": reason, "line": line, **kwargs.get("metadata", {})},
        )


class ScriptSyntaxFault(ValidationFault):
    """Data provider (or static script) is not valid source."""

    def __init__(self, filename: str, reason: str, *, line: Optional[int] = None, **kwargs):
        location = f":{line}" if line else ""
        super().__init__(
            f"{filename}{location} is not valid source: {reason}",
            code="SCRIPT_SYNTAX_INVALID",
            metadata={"filename": filename, "reason": reason, "line": line, **kwargs.get("metadata", {})},
        )


class MissingFileFault(PackagingFault):
    """A declared file or directory does not exist (or has the wrong kind)."""

    def __init__(self, path: str, *, reason: str = "not found", message: Optional[str] = None, **kwargs):
        super().__init__(
            code="FILE_MISSING",
            message=message or f"file {path} {reason}",
            metadata={"path": path, "reason": reason, **kwargs.get("metadata", {})},
        )


class UnsupportedTemplateTypeFault(PackagingFault):
    """Template type is not one of the supported template languages."""

    def __init__(self, template_type: Any, supported: tuple = (), **kwargs):
        super().__init__(
            code="TEMPLATE_TYPE_UNSUPPORTED",
            message="template type not supported",
            metadata={"type": template_type, "supported": list(supported), **kwargs.get("metadata", {})},
        )


# ============================================================================
# SANDBOX Faults
# ============================================================================

class SandboxFault(Fault):
    """Base class for data provider dependency discovery faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.SANDBOX,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class UnresolvableRequireFault(SandboxFault):
    """A local require alias discovered in a data provider cannot be satisfied."""

    def __init__(self, code: str, message: str, *, alias: str, path: str, **kwargs):
        super().__init__(
            code=code,
            message=message,
            metadata={"alias": alias, "path": path, **kwargs.get("metadata", {})},
        )

    @property
    def alias(self) -> str:
        return self.metadata["alias"]


class RequireNotFoundFault(UnresolvableRequireFault):
    """Local JSON dependency does not exist."""

    def __init__(self, alias: str, path: str, **kwargs):
        super().__init__(
            "REQUIRE_NOT_FOUND",
            f"{path} not found. Only json files are require-able.",
            alias=alias,
            path=path,
            **kwargs,
        )


class LocalScriptNotAllowedFault(UnresolvableRequireFault):
    """Local code requires are refused; only JSON is embeddable."""

    def __init__(self, alias: str, path: str, **kwargs):
        super().__init__(
            "LOCAL_SCRIPT_NOT_ALLOWED",
            "Requiring local script files is not allowed. Keep it small.",
            alias=alias,
            path=path,
            **kwargs,
        )


class JsonParseFault(UnresolvableRequireFault):
    """Local JSON dependency exists but is not valid JSON."""

    def __init__(self, alias: str, path: str, reason: str, **kwargs):
        super().__init__(
            "JSON_PARSE_FAILED",
            f"Error while parsing json {path}: {reason}",
            alias=alias,
            path=path,
            metadata={"reason": reason, **kwargs.get("metadata", {})},
        )


class DiscoveryTimeoutFault(SandboxFault):
    """Evaluating a data provider did not finish before its deadline."""

    def __init__(self, timeout: float, **kwargs):
        super().__init__(
            code="DISCOVERY_TIMEOUT",
            message=f"Data provider evaluation exceeded {timeout:g}s",
            metadata={"timeout": timeout, **kwargs.get("metadata", {})},
        )


class ScriptEvaluationFault(SandboxFault):
    """Data provider raised while its top-level statements were evaluated."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(
            code="SCRIPT_EVALUATION_FAILED",
            message=f"Data provider evaluation failed: {reason}",
            metadata={"reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# IO Faults
# ============================================================================

class PackageIOFault(Fault):
    """Generic filesystem failure while reading sources or writing output."""

    def __init__(self, operation: str, path: str, reason: str, **kwargs):
        super().__init__(
            code="PACKAGE_IO_FAILED",
            message=f"Filesystem {operation} on '{path}' failed: {reason}",
            domain=FaultDomain.IO,
            metadata={"operation": operation, "path": path, "reason": reason, **kwargs.get("metadata", {})},
        )
