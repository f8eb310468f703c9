"""
Hook chains - ordered request lifecycle extension points.

The host runs three chains per request: ``prepare`` (before routing),
``dispatch`` and ``finalize``. Each hook returns a ``HookResult``; anything
other than ``CONTINUE`` stops the chain and tells the host what to do next.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import RequestCtx
    from .request import Request


class HookResult(Enum):
    """Outcome of a lifecycle hook."""
    CONTINUE = "continue"          # run the rest of the chain / default step
    HANDLED = "handled"            # stop: this hook did the stage's work
    HEADERS_ONLY = "headers_only"  # finalize: send status and headers, no body
    DECLINED = "declined"          # finalize: the native server delivers


Hook = Callable[
    ["Request", "RequestCtx"],
    Union[Optional[HookResult], Awaitable[Optional[HookResult]]],
]


@dataclass
class HookDescriptor:
    """Descriptor for hook registration."""
    hook: Hook
    priority: int
    name: str


class HookChain:
    """
    Ordered hooks for one lifecycle stage.

    Lower priority runs first; equal priorities keep registration order.
    A hook returning ``None`` counts as ``CONTINUE``.
    """

    def __init__(self, stage: str):
        self.stage = stage
        self.hooks: List[HookDescriptor] = []

    def add(self, hook: Hook, priority: int = 50, name: Optional[str] = None) -> None:
        """Add hook to chain."""
        if name is None:
            name = getattr(hook, "__qualname__", None) or type(hook).__name__
        self.hooks.append(HookDescriptor(hook=hook, priority=priority, name=name))
        self.hooks.sort(key=lambda desc: desc.priority)

    @property
    def names(self) -> List[str]:
        return [desc.name for desc in self.hooks]

    async def run(self, request: "Request", ctx: "RequestCtx") -> HookResult:
        """Run hooks in order until one short-circuits."""
        for desc in self.hooks:
            result = desc.hook(request, ctx)
            if inspect.isawaitable(result):
                result = await result
            if result is not None and result is not HookResult.CONTINUE:
                return result
        return HookResult.CONTINUE

    def __len__(self) -> int:
        return len(self.hooks)

    def __repr__(self) -> str:
        return f"<HookChain {self.stage} {self.names}>"
