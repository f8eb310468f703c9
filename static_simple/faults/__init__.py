"""
Static faults - typed fault signals.

Errors raised by the static file layer are structured faults carrying a
stable code, a domain and a severity, so the host can map them to responses
and log levels without string matching.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
- ConfigFault / ConfigMissingFault / ConfigInvalidFault: setup-time faults
- IOFault / IncludePathFault / StaticFileFault: file system faults
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigMissingFault,
    ConfigInvalidFault,
    IOFault,
    IncludePathFault,
    StaticFileFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    
    # Domains
    "ConfigFault",
    "ConfigMissingFault",
    "ConfigInvalidFault",
    "IOFault",
    "IncludePathFault",
    "StaticFileFault",
]
