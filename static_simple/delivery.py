"""
Conditional delivery of a resolved static file.

Decides between handing the file to the native server, a ``304 Not
Modified`` short-circuit, and a full response carrying the file bytes.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .context import RequestCtx, StaticContext
from .faults import StaticFileFault
from .mime import MimeResolver

if TYPE_CHECKING:
    from .config import StaticConfig

logger = logging.getLogger("static_simple.delivery")


class DeliveryOutcome(Enum):
    SERVED = "served"
    NOT_MODIFIED = "not_modified"
    NATIVE = "native"


class ConditionalDelivery:
    """
    Serve resolved files onto the request's response.

    Reads are whole-file and happen before any header is touched, so a
    failing read leaves the response as it was.
    """

    def __init__(self, config: "StaticConfig", mime: MimeResolver):
        self.config = config
        self.mime = mime

    def serve(self, resolved: Path, ctx: RequestCtx, static: StaticContext) -> DeliveryOutcome:
        """
        Deliver *resolved* for the request in *ctx*.

        Raises:
            StaticFileFault: the file vanished or cannot be read
        """
        request = ctx.request
        response = ctx.response

        if self._should_decline(resolved, ctx, static):
            return DeliveryOutcome.NATIVE

        content_type = self.mime.resolve_path(request.path, static.trace)

        try:
            st = os.stat(resolved)
        except OSError as exc:
            raise StaticFileFault(str(resolved), exc) from exc

        ims = request.if_modified_since()
        if ims is not None and int(ims.timestamp()) == int(st.st_mtime):
            response.status = 304
            response.remove_content_headers()
            return DeliveryOutcome.NOT_MODIFIED

        try:
            content = resolved.read_bytes()
        except OSError as exc:
            raise StaticFileFault(str(resolved), exc) from exc

        response.content = content
        response.set_header("content-type", content_type)
        response.set_header("content-length", str(st.st_size))
        response.set_last_modified(st.st_mtime)
        return DeliveryOutcome.SERVED

    def _should_decline(self, resolved: Path, ctx: RequestCtx, static: StaticContext) -> bool:
        """
        Native delegation applies only to files under the configured root
        itself, with no custom MIME types, since the native server knows
        neither the include path nor the overrides.
        """
        config = self.config
        native = ctx.native
        if not config.use_native or native is None or config.mime_types:
            return False
        if resolved != config.root / ctx.path.lstrip("/"):
            return False

        document_root = Path(native.document_root).absolute()
        if document_root != config.root:
            logger.warning(
                "Static::Simple: Your %s document root must be set to %s to use "
                "native delivery. Yours is currently %s",
                native.engine, config.root, document_root,
            )
            return False

        native.decline(resolved)
        static.native = True
        static.trace.add(f"DECLINED to {native.engine}")
        return True
