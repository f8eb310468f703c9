"""
Native server delegation.

An embedding server that can send files itself is represented by a
``NativeServer``. The pipeline declines a request to it, and the adapter
hands the file over once finalization returns ``HookResult.DECLINED``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, runtime_checkable

from ._datastructures import http_date
from .mime import MimeResolver

PATHSEND = "http.response.pathsend"

_mime = MimeResolver()


@runtime_checkable
class NativeServer(Protocol):
    """Capability offered by a server able to deliver files on its own."""
    
    engine: str
    document_root: Path
    declined: Optional[Path]
    
    def decline(self, path: Path) -> None:
        """Mark *path* for native delivery."""
        ...
    
    async def deliver(
        self,
        send: Callable[[dict], Awaitable[None]],
        *,
        head: bool = False,
    ) -> None:
        """Let the server send the declined file, headers only for HEAD."""
        ...


class PathsendServer:
    """
    ``NativeServer`` backed by the ASGI ``http.response.pathsend`` extension.
    
    One instance per request; ``decline`` records the file the server will
    send.
    """
    
    engine = "asgi.pathsend"
    
    __slots__ = ("document_root", "declined")
    
    def __init__(self, document_root: os.PathLike | str):
        self.document_root = Path(document_root).absolute()
        self.declined: Optional[Path] = None
    
    @classmethod
    def detect(
        cls,
        scope: Mapping[str, Any],
        document_root: Optional[os.PathLike | str],
    ) -> Optional["PathsendServer"]:
        """Return an instance when the server advertises pathsend, else None."""
        extensions = scope.get("extensions") or {}
        if document_root is None or PATHSEND not in extensions:
            return None
        return cls(document_root)
    
    def decline(self, path: Path) -> None:
        self.declined = Path(path)
    
    async def deliver(
        self,
        send: Callable[[dict], Awaitable[None]],
        *,
        head: bool = False,
    ) -> None:
        if self.declined is None:
            raise RuntimeError("No file was declined to the native server")
        
        st = os.stat(self.declined)
        content_type = _mime.resolve_path(self.declined.name)
        await send({
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", content_type.encode("latin-1")),
                (b"content-length", str(st.st_size).encode("latin-1")),
                (b"last-modified", http_date(st.st_mtime).encode("latin-1")),
            ],
        })
        if head:
            await send({"type": "http.response.body", "body": b"", "more_body": False})
        else:
            await send({"type": PATHSEND, "path": str(self.declined)})
    
    def __repr__(self) -> str:
        return f"<PathsendServer root={self.document_root}>"
