"""
Request - ASGI request wrapper.

Only the surface the static layer reads is exposed: method, path,
headers and the conditional-GET value. Bodies are never consumed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from ._datastructures import Headers, parse_date_header


class Request:
    """
    Request object wrapping an ASGI HTTP scope.
    
    Attributes:
        scope: ASGI scope dict
        state: Free-form per-request state for hooks
    """
    
    __slots__ = ("scope", "_receive", "state", "_headers")
    
    def __init__(
        self,
        scope: Mapping[str, Any],
        receive: Optional[Callable[..., Awaitable[dict]]] = None,
    ):
        self.scope = scope
        self._receive = receive
        self.state: Dict[str, Any] = {}
        self._headers: Optional[Headers] = None
    
    # ========================================================================
    # Basic Properties
    # ========================================================================
    
    @property
    def method(self) -> str:
        """HTTP method (GET, POST, etc.)."""
        return self.scope.get("method", "GET")
    
    @property
    def path(self) -> str:
        """Request path (decoded)."""
        return self.scope.get("path", "/")
    
    @property
    def extensions(self) -> Mapping[str, Any]:
        """ASGI extensions advertised by the server."""
        return self.scope.get("extensions") or {}
    
    # ========================================================================
    # Headers
    # ========================================================================
    
    @property
    def headers(self) -> Headers:
        """Get parsed headers."""
        if self._headers is None:
            self._headers = Headers(raw=list(self.scope.get("headers", [])))
        return self._headers
    
    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get single header (case-insensitive)."""
        return self.headers.get(name, default)
    
    def has_header(self, name: str) -> bool:
        """Check if header exists."""
        return self.headers.has(name)
    
    # ========================================================================
    # Conditional Headers
    # ========================================================================
    
    def if_modified_since(self) -> Optional[datetime]:
        """Parse If-Modified-Since header."""
        return parse_date_header(self.header("if-modified-since"))
    
    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"
