"""
Testing helpers - in-process ASGI requests without a running socket.

Provides ``make_test_scope`` / ``make_test_request`` for unit tests of
hooks, and ``TestClient`` for end-to-end requests through an ASGI app.
"""

from __future__ import annotations

import json as stdlib_json
import time as _time
from typing import Any, Dict, List, Mapping, Optional

from .request import Request


def make_test_scope(
    method: str = "GET",
    path: str = "/",
    headers: Optional[List[tuple]] = None,
    extensions: Optional[Mapping[str, Any]] = None,
    query_string: str = "",
    scheme: str = "http",
) -> dict:
    """
    Build a minimal ASGI HTTP scope for testing.

    Args:
        method: HTTP method.
        path: Request path.
        headers: List of ``(name, value)`` tuples (strings or bytes).
        extensions: ASGI extensions advertised by the fake server.
        query_string: Raw query string (without ``?``).
        scheme: URL scheme.
    """
    raw_headers: list[tuple[bytes, bytes]] = []
    if headers:
        for name, value in headers:
            raw_headers.append((
                name.encode("latin-1") if isinstance(name, str) else name,
                value.encode("latin-1") if isinstance(value, str) else value,
            ))

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "scheme": scheme,
        "server": ("127.0.0.1", 8000),
        "client": ("127.0.0.1", 12345),
        "root_path": "",
    }
    if extensions is not None:
        scope["extensions"] = dict(extensions)
    return scope


def make_test_receive(body: bytes = b""):
    """Create an ASGI receive callable yielding *body* once."""
    messages = [{"type": "http.request", "body": body, "more_body": False}]
    idx = 0

    async def receive():
        nonlocal idx
        if idx < len(messages):
            msg = messages[idx]
            idx += 1
            return msg
        return {"type": "http.disconnect"}

    return receive


def make_test_request(
    method: str = "GET",
    path: str = "/",
    headers: Optional[List[tuple]] = None,
    **kwargs: Any,
) -> Request:
    """Build a :class:`~static_simple.request.Request` for testing."""
    scope = make_test_scope(method=method, path=path, headers=headers, **kwargs)
    return Request(scope, make_test_receive())


class TestResponse:
    """
    Wrapper around captured ASGI response events.

    ``pathsend`` holds the file path when the response was delivered
    through the pathsend extension instead of a body.
    """

    __test__ = False

    __slots__ = (
        "status_code", "headers", "body", "pathsend",
        "content_type", "charset", "elapsed", "events",
    )

    def __init__(
        self,
        status_code: int,
        headers: Dict[str, str],
        body: bytes,
        *,
        pathsend: Optional[str] = None,
        elapsed: float = 0.0,
        events: Optional[List[dict]] = None,
    ):
        self.status_code = status_code
        self.headers = headers
        self.body = body
        self.pathsend = pathsend
        self.elapsed = elapsed
        self.events = events or []

        ct = headers.get("content-type", "")
        self.content_type = ct.split(";")[0].strip()
        self.charset = "utf-8"
        if "charset=" in ct:
            self.charset = ct.split("charset=")[-1].strip()

    @property
    def text(self) -> str:
        """Body decoded as text."""
        return self.body.decode(self.charset)

    def json(self) -> Any:
        """Parse body as JSON."""
        return stdlib_json.loads(self.body)

    @property
    def content_length(self) -> Optional[int]:
        cl = self.headers.get("content-length")
        return int(cl) if cl is not None else None

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    def has_header(self, name: str) -> bool:
        return name.lower() in self.headers

    def __repr__(self) -> str:
        return (
            f"<TestResponse [{self.status_code}] "
            f"{self.content_type} {len(self.body)}B "
            f"{self.elapsed:.1f}ms>"
        )


class TestClient:
    """
    In-process ASGI test client.

    Usage::

        client = TestClient(ASGIAdapter(app))
        resp = await client.get("/files/static.css")
        assert resp.status_code == 200
    """

    __test__ = False

    def __init__(
        self,
        app: Any,
        *,
        default_headers: Optional[Dict[str, str]] = None,
        extensions: Optional[Mapping[str, Any]] = None,
    ):
        self._app = app
        self._default_headers = default_headers or {}
        self._extensions = extensions

    async def get(self, path: str, **kw) -> TestResponse:
        return await self.request("GET", path, **kw)

    async def head(self, path: str, **kw) -> TestResponse:
        return await self.request("HEAD", path, **kw)

    async def post(self, path: str, body: bytes = b"", **kw) -> TestResponse:
        return await self.request("POST", path, body=body, **kw)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        extensions: Optional[Mapping[str, Any]] = None,
        body: bytes = b"",
    ) -> TestResponse:
        """Issue a single in-process ASGI request."""
        combined_headers: list[tuple[str, str]] = []
        for k, v in self._default_headers.items():
            combined_headers.append((k.lower(), v))
        if headers:
            for k, v in headers.items():
                combined_headers.append((k.lower(), v))

        scope = make_test_scope(
            method=method,
            path=path,
            headers=combined_headers,
            extensions=extensions if extensions is not None else self._extensions,
        )
        receive = make_test_receive(body)

        status_code = 200
        resp_headers: Dict[str, str] = {}
        body_parts: list[bytes] = []
        pathsend: Optional[str] = None
        events: List[dict] = []

        async def send(event: dict):
            nonlocal status_code, pathsend
            events.append(event)
            if event["type"] == "http.response.start":
                status_code = event["status"]
                for hdr_name, hdr_val in event.get("headers", []):
                    name = hdr_name.decode("latin-1") if isinstance(hdr_name, bytes) else hdr_name
                    val = hdr_val.decode("latin-1") if isinstance(hdr_val, bytes) else hdr_val
                    resp_headers[name.lower()] = val
            elif event["type"] == "http.response.body":
                body_parts.append(event.get("body", b""))
            elif event["type"] == "http.response.pathsend":
                pathsend = event["path"]

        start_time = _time.monotonic()
        await self._app(scope, receive, send)
        elapsed_ms = (_time.monotonic() - start_time) * 1000

        return TestResponse(
            status_code=status_code,
            headers=resp_headers,
            body=b"".join(body_parts),
            pathsend=pathsend,
            elapsed=elapsed_ms,
            events=events,
        )
