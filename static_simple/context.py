"""
Per-request context for static resolution.

Everything the pipeline learns about one request lives here, never on the
pipeline object itself, so concurrent requests share nothing mutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .native import NativeServer
    from .request import Request
    from .response import Response


class ResolutionState(Enum):
    """Where a request stands in static resolution."""
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    STATIC = "static"
    STATIC_NOT_FOUND = "static_not_found"
    NOT_STATIC = "not_static"


class DebugTrace:
    """
    Ordered trace messages for one request.
    
    When disabled, ``add`` drops messages so nothing is collected.
    """
    
    __slots__ = ("enabled", "messages")
    
    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self.messages: List[str] = []
    
    def add(self, message: str) -> None:
        if self.enabled and message:
            self.messages.append(message)
    
    def render(self) -> str:
        return " ".join(self.messages)
    
    def __bool__(self) -> bool:
        return bool(self.messages)
    
    def __len__(self) -> int:
        return len(self.messages)


@dataclass
class StaticContext:
    """
    Static resolution state of a single request.
    
    Attributes:
        state: Current resolution state
        resolved: File found by the searcher (at most one per request)
        trace: Debug trace buffer
        native: True once delivery was handed to the native server
    """
    
    state: ResolutionState = ResolutionState.UNRESOLVED
    resolved: Optional[Path] = None
    trace: DebugTrace = field(default_factory=DebugTrace)
    native: bool = False
    
    def resolve_to(self, path: Path) -> None:
        """Commit the request to serving *path*."""
        if self.resolved is not None:
            raise RuntimeError(f"Request already resolved to {self.resolved}")
        self.resolved = path
        self.state = ResolutionState.STATIC


@dataclass
class RequestCtx:
    """
    Host request context handed to every hook.
    
    Attributes:
        request: The HTTP request
        response: The response being built (default status 200)
        native: Native server capability, when the embedding server offers one
        debug: Host debug flag
        state: Additional state dictionary, keyed by plugin
    """
    
    request: "Request"
    response: "Response"
    native: Optional["NativeServer"] = None
    debug: bool = False
    state: Dict[str, Any] = field(default_factory=dict)
    
    @property
    def path(self) -> str:
        """Request path."""
        return self.request.path
    
    @property
    def method(self) -> str:
        """Request method."""
        return self.request.method
