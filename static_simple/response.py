"""
Response - HTTP response builder with ASGI sending.

Provides:
- Mutable status/headers/body, created up-front by the host for every request
- Content header stripping for no-body statuses
- Caching helpers (Last-Modified)
- Header validation against injection
- ASGI 3 sending, full or headers-only
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from ._datastructures import http_date
from .faults import Fault, FaultDomain


# Headers describing the entity rather than the message
ENTITY_HEADERS = frozenset({
    "allow",
    "expires",
    "last-modified",
})


class InvalidHeaderError(Fault):
    domain = FaultDomain.SYSTEM
    code = "INVALID_HEADER"
    message = "Invalid header"


class Response:
    """
    HTTP response.
    
    The host creates one per request with the default ``200`` status, hooks
    mutate it, and the ASGI adapter sends it once finalization is done.
    """
    
    def __init__(
        self,
        content: Union[bytes, str, Mapping, List] = b"",
        status: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        media_type: Optional[str] = None,
        *,
        encoding: str = "utf-8",
        validate_headers: bool = True,
    ):
        """
        Initialize Response.
        
        Args:
            content: Response body (bytes, str, dict/list for JSON)
            status: HTTP status code
            headers: Response headers
            media_type: Content-Type override
            encoding: Text encoding (default utf-8)
            validate_headers: Validate headers against injection attacks
        """
        self.status = status
        self.encoding = encoding
        self.validate_headers = validate_headers
        self._content = content
        
        self._headers: Dict[str, str] = {}
        if headers:
            for key, value in headers.items():
                self._headers[key.lower()] = value
        
        if media_type:
            self._headers["content-type"] = media_type
        elif "content-type" not in self._headers and content:
            self._headers["content-type"] = self._detect_media_type(content)
    
    @property
    def headers(self) -> Dict[str, str]:
        """Get response headers."""
        return self._headers
    
    @property
    def content(self) -> Union[bytes, str, Mapping, List]:
        return self._content
    
    @content.setter
    def content(self, value: Union[bytes, str, Mapping, List]) -> None:
        self._content = value
    
    def _detect_media_type(self, content: Any) -> str:
        """Auto-detect media type from content."""
        if isinstance(content, (dict, list)):
            return "application/json; charset=utf-8"
        elif isinstance(content, str):
            return "text/plain; charset=utf-8"
        return "application/octet-stream"
    
    # ========================================================================
    # Factory Methods
    # ========================================================================
    
    @classmethod
    def json(
        cls,
        obj: Any,
        status: int = 200,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Response":
        """Create JSON response."""
        return cls(
            content=json.dumps(obj, default=str),
            status=status,
            headers=headers,
            media_type="application/json; charset=utf-8",
        )
    
    @classmethod
    def text(cls, content: str, status: int = 200, **kwargs) -> "Response":
        """Create plain text response."""
        return cls(
            content=content,
            status=status,
            media_type="text/plain; charset=utf-8",
            **kwargs
        )
    
    # ========================================================================
    # Header Helpers
    # ========================================================================
    
    def set_header(self, name: str, value: str) -> None:
        """
        Set header (replaces existing).
        
        Args:
            name: Header name
            value: Header value
        """
        if self.validate_headers:
            self._validate_header(name, value)
        
        self._headers[name.lower()] = value
    
    def unset_header(self, name: str) -> None:
        """Remove header."""
        self._headers.pop(name.lower(), None)
    
    def remove_content_headers(self) -> None:
        """Drop every header that describes a body (Content-*, Allow, Expires, Last-Modified)."""
        for name in list(self._headers):
            if name.startswith("content-") or name in ENTITY_HEADERS:
                del self._headers[name]
    
    def _validate_header(self, name: str, value: str) -> None:
        """
        Validate header name and value against injection attacks.
        
        Raises InvalidHeaderError if header contains control characters.
        """
        for char in name:
            if ord(char) < 32:
                raise InvalidHeaderError(
                    message=f"Invalid header name: {name!r}",
                    metadata={"header_name": name},
                )
        
        if "\r" in value or "\n" in value:
            raise InvalidHeaderError(
                message=f"Invalid header value: {value!r}",
                metadata={"header_name": name, "header_value": value},
            )
    
    # ========================================================================
    # Caching Helpers
    # ========================================================================
    
    def set_last_modified(self, timestamp: float) -> None:
        """
        Set Last-Modified header.
        
        Args:
            timestamp: POSIX modification time
        """
        self.set_header("last-modified", http_date(timestamp))
    
    # ========================================================================
    # Body
    # ========================================================================
    
    @property
    def has_body(self) -> bool:
        """Informational statuses, 204 and 304 never carry a body."""
        return not (100 <= self.status < 200 or self.status in (204, 304))
    
    def body_bytes(self) -> bytes:
        """Encode content to bytes."""
        content = self._content
        if isinstance(content, bytes):
            return content
        elif isinstance(content, str):
            return content.encode(self.encoding)
        elif isinstance(content, (dict, list)):
            return json.dumps(content, default=str).encode(self.encoding)
        return str(content).encode(self.encoding)
    
    # ========================================================================
    # ASGI
    # ========================================================================
    
    def _prepare_headers(self) -> List[tuple]:
        """Prepare headers for ASGI (convert to list of byte tuples)."""
        return [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers.items()
        ]
    
    async def send_asgi(
        self,
        send: Callable[[dict], Awaitable[None]],
        *,
        include_body: bool = True,
    ) -> None:
        """
        Send response via ASGI.
        
        With ``include_body=False`` only the status line and headers go out,
        which is how no-body statuses are finalized.
        """
        body = self.body_bytes() if include_body and self.has_body else b""
        if include_body and self.has_body and "content-length" not in self._headers:
            self._headers["content-length"] = str(len(body))
        
        await send({
            "type": "http.response.start",
            "status": self.status,
            "headers": self._prepare_headers(),
        })
        await send({
            "type": "http.response.body",
            "body": body,
            "more_body": False,
        })
    
    async def send_headers_asgi(self, send: Callable[[dict], Awaitable[None]]) -> None:
        """Send status and headers with an empty body."""
        await self.send_asgi(send, include_body=False)

    def __repr__(self) -> str:
        return f"<Response [{self.status}] {self._headers.get('content-type', '-')}>"


# ============================================================================
# Convenience Response Factories
# ============================================================================

def NotFound(message: str = "Not Found", **kwargs) -> Response:
    """404 Not Found response."""
    return Response.json({"error": message}, status=404, **kwargs)


def InternalError(message: str = "Internal Server Error", **kwargs) -> Response:
    """500 Internal Server Error response."""
    return Response.json({"error": message}, status=500, **kwargs)
