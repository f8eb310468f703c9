"""
Shared test fixtures and helpers for the Static::Simple test suite.
"""

import os
import pytest
from pathlib import Path
from typing import List, Optional

from static_simple.app import Application
from static_simple.context import RequestCtx
from static_simple.request import Request
from static_simple.response import Response
from static_simple.testing import make_test_scope, make_test_receive


# Fixed modification time for files created by fixtures
MTIME = 1_700_000_000


# ============================================================================
# Request Helpers
# ============================================================================


def make_scope(
    method: str = "GET",
    path: str = "/",
    headers: Optional[List[tuple]] = None,
    extensions: Optional[dict] = None,
) -> dict:
    """Build a minimal ASGI HTTP scope."""
    return make_test_scope(method=method, path=path, headers=headers, extensions=extensions)


def make_request(
    method: str = "GET",
    path: str = "/",
    headers: Optional[List[tuple]] = None,
    extensions: Optional[dict] = None,
) -> Request:
    """Build a full Request object for testing."""
    return Request(make_scope(method, path, headers, extensions), make_test_receive())


def make_ctx(path: str = "/", headers: Optional[List[tuple]] = None, native=None) -> RequestCtx:
    """Build a RequestCtx with a fresh 200 response."""
    return RequestCtx(
        request=make_request(path=path, headers=headers),
        response=Response(),
        native=native,
    )


def write_file(root: Path, relative: str, content: str = "", mtime: int = MTIME) -> Path:
    """Create ``root/relative`` with *content* and a fixed mtime."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.utime(path, (mtime, mtime))
    return path


async def default_handler(request, ctx):
    """Application handler used when nothing static matched."""
    return Response.text("default")


class FakeNative:
    """NativeServer stand-in recording the declined file."""

    engine = "fake-engine"

    def __init__(self, document_root):
        self.document_root = Path(document_root)
        self.declined: Optional[Path] = None

    def decline(self, path):
        self.declined = path

    async def deliver(self, send, *, head=False):
        pass


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def docroot(tmp_path):
    """Application root holding a small static tree."""
    root = tmp_path / "root"
    write_file(root, "files/static.css", "background: #fff;\n")
    write_file(root, "files/script.js", "var x = 1;\n")
    write_file(root, "files/err.omg", "unknown\n")
    write_file(root, "files/noext", "no extension\n")
    write_file(root, "images/logo.png", "PNG")
    write_file(root, "static/app.css", "body {}\n")
    return root


@pytest.fixture
def app():
    return Application(default_handler)


@pytest.fixture
def debug_app():
    return Application(default_handler, debug=True)


@pytest.fixture(autouse=True)
def _clean_static_env(monkeypatch):
    """Keep STATIC_* variables from the outer environment out of the loader."""
    for key in list(os.environ):
        if key.startswith("STATIC_"):
            monkeypatch.delenv(key, raising=False)
