"""
Static resolution pipeline - the three lifecycle hooks.

    prepare   decide whether the request is static, before routing
    dispatch  serve the resolved file instead of the application
    finalize  flush the debug trace, decline to the native server, or
              strip bodies from no-body statuses

Per-request state is a ``StaticContext`` kept in ``ctx.state``; the
pipeline itself only holds the immutable configuration.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional, Union, TYPE_CHECKING

from .config import StaticConfig
from .context import RequestCtx, ResolutionState, StaticContext, DebugTrace
from .delivery import ConditionalDelivery
from .lifecycle import HookResult
from .matching import PathMatcher
from .mime import MimeResolver, extension_of
from .request import Request
from .search import DirectorySearcher

if TYPE_CHECKING:
    from pathlib import Path
    from .app import Application

logger = logging.getLogger("static_simple.pipeline")

# Statuses finalized without a body
NO_BODY_STATUSES = frozenset({203, 204, 304})


class StaticResolutionPipeline:
    """
    Serve static files ahead of the application's own routing.

    Usage::

        app = Application(handler, debug=True)
        StaticResolutionPipeline.setup(app, {"dirs": ["static"]}, root="root")
    """

    STATE_KEY = "static"

    def __init__(
        self,
        config: StaticConfig,
        *,
        searcher: Optional[DirectorySearcher] = None,
        mime: Optional[MimeResolver] = None,
    ):
        self.config = config
        self.matcher = PathMatcher(config.dirs)
        self.searcher = searcher or DirectorySearcher()
        self.mime = mime or MimeResolver(config.mime_types)
        self.delivery = ConditionalDelivery(config, self.mime)

    @classmethod
    def setup(
        cls,
        app: "Application",
        options: Optional[Mapping[str, Any]] = None,
        *,
        root: Union[str, os.PathLike],
        priority: int = 10,
    ) -> "StaticResolutionPipeline":
        """Build from raw options, inheriting the host debug flag, and install."""
        config = StaticConfig.from_mapping(options, root=root, debug=app.debug)
        pipeline = cls(config)
        pipeline.install(app, priority=priority)
        return pipeline

    def install(self, app: "Application", priority: int = 10) -> None:
        """Register the three hooks on the host application."""
        app.prepare.add(self.prepare, priority=priority, name="static.prepare")
        app.dispatch.add(self.dispatch, priority=priority, name="static.dispatch")
        app.finalize.add(self.finalize, priority=priority, name="static.finalize")

    # ------------------------------------------------------------------
    # Per-request state
    # ------------------------------------------------------------------

    def context(self, ctx: RequestCtx) -> StaticContext:
        """Return the request's StaticContext, creating it on first use."""
        static = ctx.state.get(self.STATE_KEY)
        if static is None:
            static = StaticContext(trace=DebugTrace(enabled=self.config.debug))
            ctx.state[self.STATE_KEY] = static
        return static

    def locate(self, path: str, ctx: RequestCtx, trace: Optional[DebugTrace] = None) -> Optional["Path"]:
        return self.searcher.locate(path, self.config.include_path, ctx, trace)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def prepare(self, request: Request, ctx: RequestCtx) -> HookResult:
        static = self.context(ctx)
        static.state = ResolutionState.RESOLVING
        path = request.path

        # Forced static directories: a miss is a 404
        if self.matcher.first_match(path) is not None:
            resolved = self.locate(path, ctx, static.trace)
            if resolved is not None:
                static.resolve_to(resolved)
                static.trace.add("from static directory")
            else:
                static.state = ResolutionState.STATIC_NOT_FOUND
                static.trace.add(f"404: file not found: {path.lstrip('/')}")
                ctx.response.status = 404
            return HookResult.HANDLED

        # Paths with an extension are static when the file exists
        if extension_of(path):
            resolved = self.locate(path, ctx, static.trace)
            if resolved is not None:
                static.resolve_to(resolved)
                return HookResult.HANDLED

        static.state = ResolutionState.NOT_STATIC
        return HookResult.CONTINUE

    async def dispatch(self, request: Request, ctx: RequestCtx) -> HookResult:
        if ctx.response.status != 200:
            return HookResult.HANDLED

        static = self.context(ctx)
        if static.state is ResolutionState.STATIC and static.resolved is not None:
            self.delivery.serve(static.resolved, ctx, static)
            return HookResult.HANDLED
        return HookResult.CONTINUE

    async def finalize(self, request: Request, ctx: RequestCtx) -> HookResult:
        static: Optional[StaticContext] = ctx.state.get(self.STATE_KEY)

        if self.config.debug and static is not None and static.trace:
            logger.debug("Static::Simple: Serving %s", static.trace.render())

        if self.config.use_native and static is not None and static.native:
            return HookResult.DECLINED

        response = ctx.response
        if 100 <= response.status < 200 or response.status in NO_BODY_STATUSES:
            response.remove_content_headers()
            return HookResult.HEADERS_ONLY

        return HookResult.CONTINUE
