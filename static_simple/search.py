"""
Include path search - find the first directory holding the requested file.

The include path is an ordered list of entries:

    include_path = [
        "/path/to/overlay",
        DynamicDirectories(customer_dirs),   # called per request
        "/your/app/root",
    ]

A request for ``images/logo.jpg`` checks ``/path/to/overlay/images/logo.jpg``,
then every directory returned by ``customer_dirs(ctx)``, then
``/your/app/root/images/logo.jpg``, returning the first file found.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple, Union

from .context import DebugTrace
from .faults import IncludePathFault

logger = logging.getLogger("static_simple.search")

# Maximum number of queue entries examined for one lookup
MAX_SEARCH = 64


@dataclass(frozen=True)
class StaticDirectories:
    """A fixed list of directories, searched in order."""

    directories: Tuple[Union[str, Path], ...]

    def __iter__(self):
        return iter(self.directories)


@dataclass(frozen=True)
class DynamicDirectories:
    """
    Directories computed per request.

    ``generator(ctx)`` returns a sequence of entries (directories, further
    providers or plain callables). Raising, or returning an entry that is
    none of those, is reported and the entry skipped.
    """

    generator: Callable[[Any], Sequence[Any]]

    @property
    def name(self) -> str:
        return getattr(self.generator, "__qualname__", repr(self.generator))

    def expand(self, ctx: Any) -> Sequence[Any]:
        entries = self.generator(ctx)
        if isinstance(entries, (str, bytes, os.PathLike)) or not isinstance(entries, Iterable):
            raise TypeError(
                f"expected a sequence of directories, got {type(entries).__name__}"
            )
        return list(entries)


DirectoryProvider = Union[StaticDirectories, DynamicDirectories]
IncludeEntry = Union[str, Path, DirectoryProvider, Callable[[Any], Sequence[Any]], None]


def _is_traversal(path: str) -> bool:
    return ".." in PurePosixPath(path).parts


class DirectorySearcher:
    """
    Locate request paths under an include path.

    Stateless; the same instance serves every request.
    """

    def __init__(self, max_search: int = MAX_SEARCH):
        self.max_search = max_search

    def locate(
        self,
        path: str,
        include_path: Iterable[IncludeEntry],
        ctx: Any = None,
        trace: Optional[DebugTrace] = None,
    ) -> Optional[Path]:
        """
        Return the first existing ``<dir>/<path>`` or None.

        Args:
            path: Request path (leading slash ignored)
            include_path: Ordered include path entries
            ctx: Request context handed to dynamic providers
            trace: Debug trace receiving the matched file
        """
        relative = path.lstrip("/")
        if not relative or _is_traversal(relative):
            return None

        queue = deque(self._flatten(include_path))
        count = self.max_search

        while queue:
            count -= 1
            if count <= 0:
                break

            entry = queue.popleft()
            if not entry:
                continue

            if callable(entry) and not isinstance(entry, (DynamicDirectories, os.PathLike)):
                entry = DynamicDirectories(entry)

            if isinstance(entry, DynamicDirectories):
                try:
                    produced = entry.expand(ctx)
                except Exception as exc:
                    fault = IncludePathFault(entry.name, exc)
                    logger.error("Static::Simple: %s", fault.message)
                    continue
                queue.extendleft(reversed(list(self._flatten(produced))))
                continue

            if not isinstance(entry, (str, os.PathLike)):
                fault = IncludePathFault(
                    repr(entry), TypeError(f"not a directory: {entry!r}"),
                )
                logger.error("Static::Simple: %s", fault.message)
                continue

            directory = os.fspath(entry)
            if not isinstance(directory, str):
                directory = os.fsdecode(directory)
            if directory != os.sep:
                directory = directory.rstrip(os.sep)
            candidate = os.path.join(directory, relative)
            if os.path.isdir(directory) and os.path.isfile(candidate):
                if trace is not None:
                    trace.add(candidate)
                return Path(candidate).absolute()

        return None

    @staticmethod
    def _flatten(entries: Iterable[IncludeEntry]) -> Iterable[IncludeEntry]:
        for entry in entries:
            if isinstance(entry, StaticDirectories):
                yield from entry
            else:
                yield entry
