"""
Application - minimal host running the request lifecycle.

    prepare  ->  dispatch  ->  (handler)  ->  finalize

Plugins register hooks on the three chains through ``app.use(plugin)``.
Faults and exceptions raised before finalization become JSON error
responses; nothing written to the response before the error survives.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from .context import RequestCtx
from .faults import Fault, FaultDomain
from .lifecycle import HookChain, HookResult
from .native import NativeServer
from .request import Request
from .response import Response

Handler = Callable[[Request, RequestCtx], Awaitable[Optional[Response]]]


FAULT_STATUS = {
    FaultDomain.CONFIG: 500,
    FaultDomain.ROUTING: 404,
    FaultDomain.IO: 500,
    FaultDomain.SYSTEM: 500,
}


class Application:
    """
    Host application.

    Args:
        handler: Application handler, called when no dispatch hook handled
                 the request; its Response replaces the context response
        debug: Host debug flag, inherited by plugins
    """

    def __init__(self, handler: Handler, debug: bool = False):
        self.handler = handler
        self.debug = debug
        self.prepare = HookChain("prepare")
        self.dispatch = HookChain("dispatch")
        self.finalize = HookChain("finalize")
        self.logger = logging.getLogger("static_simple.app")

    def use(self, plugin: Any) -> Any:
        """Install a plugin exposing ``install(app)``."""
        plugin.install(self)
        return plugin

    async def handle(
        self,
        request: Request,
        native: Optional[NativeServer] = None,
    ) -> Tuple[RequestCtx, HookResult]:
        """
        Run one request through the lifecycle.

        Returns:
            The request context (carrying the final response) and the
            finalize result telling the adapter how to send it
        """
        ctx = RequestCtx(
            request=request,
            response=Response(),
            native=native,
            debug=self.debug,
        )

        try:
            await self.prepare.run(request, ctx)
            if await self.dispatch.run(request, ctx) is HookResult.CONTINUE:
                response = await self.handler(request, ctx)
                if response is not None:
                    ctx.response = response
        except Fault as e:
            ctx.response = self._fault_response(e)
        except Exception as e:
            self.logger.error(f"Unhandled exception: {e}", exc_info=True)
            body = {"error": "Internal server error"}
            if self.debug:
                body["detail"] = str(e)
            ctx.response = Response.json(body, status=500)

        result = await self.finalize.run(request, ctx)
        return ctx, result

    def _fault_response(self, e: Fault) -> Response:
        status = FAULT_STATUS.get(e.domain, 500)
        message = e.message if (e.public or self.debug) else "Internal server error"

        if status >= 500:
            self.logger.error(f"Fault {e.code}: {e.message}")
        else:
            self.logger.warning(f"Fault {e.code}: {e.message}")

        return Response.json(
            {
                "error": {
                    "code": e.code,
                    "message": message,
                    "domain": e.domain.value,
                }
            },
            status=status,
        )

    def __repr__(self) -> str:
        return f"<Application debug={self.debug} {self.prepare!r} {self.dispatch!r} {self.finalize!r}>"
