"""
ASGI adapter - exposes an Application as an ASGI 3 callable.

Handles:
- HTTP requests, sent according to the finalize result
- Native delivery through the ``http.response.pathsend`` extension
- Lifespan startup/shutdown acknowledgement
"""

from __future__ import annotations

import logging
import os
from typing import Awaitable, Callable, Optional, Union

from .app import Application
from .lifecycle import HookResult
from .native import PathsendServer
from .request import Request
from .response import InternalError


class ASGIAdapter:
    """
    ASGI 3 application wrapping the host.

    Args:
        app: Host application
        native_document_root: Directory the server may send files from
                              itself; enables native delivery when the
                              server advertises pathsend
    """

    def __init__(
        self,
        app: Application,
        native_document_root: Optional[Union[str, os.PathLike]] = None,
    ):
        self.app = app
        self.native_document_root = native_document_root
        self.logger = logging.getLogger("static_simple.asgi")

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        scope_type = scope["type"]
        if scope_type == "http":
            await self.handle_http(scope, receive, send)
        elif scope_type == "lifespan":
            await self.handle_lifespan(scope, receive, send)

    async def handle_http(self, scope: dict, receive: Callable, send: Callable[[dict], Awaitable[None]]):
        """Handle HTTP request."""
        request = Request(scope, receive)
        native = PathsendServer.detect(scope, self.native_document_root)

        try:
            ctx, result = await self.app.handle(request, native=native)
        except Exception as e:
            self.logger.error(f"Critical error in request pipeline: {e}", exc_info=True)
            await InternalError().send_asgi(send)
            return

        if result is HookResult.DECLINED and native is not None and native.declined is not None:
            await native.deliver(send, head=request.method == "HEAD")
        elif result is HookResult.HEADERS_ONLY or request.method == "HEAD":
            await ctx.response.send_headers_asgi(send)
        else:
            await ctx.response.send_asgi(send)

    async def handle_lifespan(self, scope: dict, receive: Callable, send: Callable):
        """Handle ASGI lifespan events."""
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                self.logger.debug("Startup complete")
                await send({"type": "lifespan.startup.complete"})

            elif message["type"] == "lifespan.shutdown":
                self.logger.debug("Shutdown complete")
                await send({"type": "lifespan.shutdown.complete"})
                break
