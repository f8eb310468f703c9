"""
Static faults - Domain-specific fault types.

Provides concrete fault classes for:
- CONFIG faults (raised at setup, abort startup)
- IO faults (include path generators, resolved files)
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
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigMissingFault(ConfigFault):
    """Required configuration is missing."""
    
    def __init__(self, key: str, **kwargs):
        super().__init__(
            code="CONFIG_MISSING",
            message=f"Required configuration key '{key}' is missing",
            metadata={"key": key, **kwargs.get("metadata", {})},
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
# IO Faults
# ============================================================================

class IOFault(Fault):
    """Base class for I/O faults."""
    
    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.IO,
            severity=severity,
            retryable=retryable,
            public=False,
            metadata=metadata,
        )


class IncludePathFault(IOFault):
    """An include path generator failed; the entry is skipped."""
    
    def __init__(self, provider: str, cause: BaseException):
        super().__init__(
            code="INCLUDE_PATH_ERROR",
            message=f"include_path error: {cause}",
            severity=Severity.WARN,
            metadata={"provider": provider, "cause": repr(cause)},
        )


class StaticFileFault(IOFault):
    """A resolved file could not be stat'ed or read."""
    
    def __init__(self, path: str, cause: BaseException):
        super().__init__(
            code="STATIC_FILE_UNREADABLE",
            message=f"Cannot serve static file {path}: {cause}",
            metadata={"path": path, "cause": repr(cause)},
        )
