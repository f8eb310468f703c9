"""
MIME resolution (mime.py)

Tests extension_of and MimeResolver lookup order.
"""

import pytest

from static_simple.context import DebugTrace
from static_simple.mime import MimeResolver, extension_of, DEFAULT_TYPE


class TestExtensionOf:

    @pytest.mark.parametrize("path,ext", [
        ("style.css", "css"),
        ("/files/static.css", "css"),
        ("archive.tar.gz", "gz"),
        ("/images/logo.PNG", "PNG"),
        ("noext", None),
        ("/dir.d/noext", "d/noext"),
        ("trailing.", None),
        ("/", None),
    ])
    def test_extension(self, path, ext):
        assert extension_of(path) == ext


class TestMimeResolver:

    def test_known_extension(self):
        assert MimeResolver().resolve("css") == "text/css"

    def test_unknown_extension_falls_back(self):
        assert MimeResolver().resolve("omg") == DEFAULT_TYPE == "text/plain"

    def test_no_extension_falls_back(self):
        assert MimeResolver().resolve(None) == "text/plain"
        assert MimeResolver().resolve_path("/files/noext") == "text/plain"

    def test_resolve_path(self):
        mime = MimeResolver()
        assert mime.resolve_path("style.css") == "text/css"
        assert mime.resolve_path("err.omg") == "text/plain"

    def test_extra_types(self):
        assert MimeResolver().resolve("woff2") == "font/woff2"

    def test_override_wins(self):
        mime = MimeResolver({"css": "text/x-custom", "omg": "application/x-omg"})
        assert mime.resolve("css") == "text/x-custom"
        assert mime.resolve("omg") == "application/x-omg"

    def test_override_is_case_exact(self):
        mime = MimeResolver({"JPG": "image/x-upper"})
        assert mime.resolve("JPG") == "image/x-upper"
        assert mime.resolve("jpg") == "image/jpeg"

    def test_lookup_ignores_overrides(self):
        mime = MimeResolver({"css": "text/x-custom"})
        assert mime.lookup("css") == "text/css"
        assert mime.lookup("omg") is None

    def test_uppercase_database_lookup(self):
        assert MimeResolver().resolve("CSS") == "text/css"


class TestMimeTrace:

    def test_known(self):
        trace = DebugTrace(enabled=True)
        MimeResolver().resolve("css", trace)
        assert trace.messages == ["as text/css"]

    def test_unknown(self):
        trace = DebugTrace(enabled=True)
        MimeResolver().resolve("omg", trace)
        assert trace.messages == ["as text/plain (unknown extension omg)"]

    def test_no_extension(self):
        trace = DebugTrace(enabled=True)
        MimeResolver().resolve(None, trace)
        assert trace.messages == ["as text/plain (no extension)"]

    def test_disabled_trace_collects_nothing(self):
        trace = DebugTrace()
        MimeResolver().resolve("css", trace)
        assert len(trace) == 0
