"""
MIME type resolution for static files.

User overrides win, then the ``mimetypes`` database, then ``text/plain``.
"""

from __future__ import annotations

import mimetypes
import re
from typing import Dict, Mapping, Optional

from .context import DebugTrace

DEFAULT_TYPE = "text/plain"

# Extension of a request path: everything after the last dot, no whitespace
_EXTENSION_RE = re.compile(r".*\.(\S+)$")

# ─── Custom MIME types beyond stdlib ──────────────────────────────────────────
_EXTRA_MIME_TYPES: Dict[str, str] = {
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".webm": "video/webm",
    ".wasm": "application/wasm",
    ".map": "application/json",
    ".mjs": "application/javascript",
    ".jsonld": "application/ld+json",
    ".manifest": "text/cache-manifest",
    ".ico": "image/x-icon",
}


def extension_of(path: str) -> Optional[str]:
    """Return the trailing ``.extension`` token of *path*, or None."""
    match = _EXTENSION_RE.match(path)
    return match.group(1) if match else None


class MimeResolver:
    """
    Resolve file extensions to MIME types.
    
    The type table is built once here, at setup, so the first request does
    not pay for it. Resolution never fails: unknown and missing extensions
    fall back to ``text/plain``.
    
    Args:
        overrides: Extension (without dot) to MIME type. Keys are matched
                   exactly as configured.
    """
    
    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self.overrides: Mapping[str, str] = overrides or {}
        self._db = mimetypes.MimeTypes()
        for ext, mime in _EXTRA_MIME_TYPES.items():
            self._db.add_type(mime, ext)
    
    def lookup(self, extension: str) -> Optional[str]:
        """Database lookup, ignoring user overrides."""
        key = "." + extension
        for strict in (True, False):
            table = self._db.types_map[strict]
            mime = table.get(key) or table.get(key.lower())
            if mime:
                return mime
        return None
    
    def resolve(self, extension: Optional[str], trace: Optional[DebugTrace] = None) -> str:
        """Return the MIME type for *extension*, recording the branch taken."""
        if trace is None:
            trace = DebugTrace()
        if not extension:
            trace.add(f"as {DEFAULT_TYPE} (no extension)")
            return DEFAULT_TYPE
        
        mime = self.overrides.get(extension) or self.lookup(extension)
        if mime:
            trace.add(f"as {mime}")
            return mime
        
        trace.add(f"as {DEFAULT_TYPE} (unknown extension {extension})")
        return DEFAULT_TYPE
    
    def resolve_path(self, path: str, trace: Optional[DebugTrace] = None) -> str:
        return self.resolve(extension_of(path), trace)
