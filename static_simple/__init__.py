"""
Static::Simple - serve static files ahead of an async application.

Complete integration of:
- Pipeline: prepare/dispatch/finalize hooks deciding what is static
- Search: ordered include path with per-request generators
- MIME: override table over the system database
- Delivery: conditional GET and native server passthrough
- Faults: structured error handling with fault domains
"""

__version__ = "0.1.0"

# ============================================================================
# Host
# ============================================================================

from .app import Application
from .asgi import ASGIAdapter
from .request import Request
from .response import Response
from .context import RequestCtx, StaticContext, ResolutionState, DebugTrace
from .lifecycle import HookChain, HookResult

# ============================================================================
# Static Resolution
# ============================================================================

from .config import StaticConfig, ConfigLoader
from .matching import Literal, Pattern, PathMatcher, parse_rule
from .search import DirectorySearcher, StaticDirectories, DynamicDirectories, MAX_SEARCH
from .mime import MimeResolver, extension_of
from .delivery import ConditionalDelivery, DeliveryOutcome
from .native import NativeServer, PathsendServer
from .pipeline import StaticResolutionPipeline

# ============================================================================
# Faults
# ============================================================================

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ConfigFault,
    ConfigMissingFault,
    ConfigInvalidFault,
    IOFault,
    IncludePathFault,
    StaticFileFault,
)

__all__ = [
    "__version__",
    # Host
    "Application",
    "ASGIAdapter",
    "Request",
    "Response",
    "RequestCtx",
    "StaticContext",
    "ResolutionState",
    "DebugTrace",
    "HookChain",
    "HookResult",
    # Static resolution
    "StaticConfig",
    "ConfigLoader",
    "Literal",
    "Pattern",
    "PathMatcher",
    "parse_rule",
    "DirectorySearcher",
    "StaticDirectories",
    "DynamicDirectories",
    "MAX_SEARCH",
    "MimeResolver",
    "extension_of",
    "ConditionalDelivery",
    "DeliveryOutcome",
    "NativeServer",
    "PathsendServer",
    "StaticResolutionPipeline",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "ConfigMissingFault",
    "ConfigInvalidFault",
    "IOFault",
    "IncludePathFault",
    "StaticFileFault",
]
