"""
Directory rules - decide whether a path is forced into static mode.

Rules are compiled once, when configuration is loaded:

    Literal("static")          matches "static/css/app.css", "statically/x"
    Pattern(r"^(images|css)")  matches "images/logo.png", "css/site.css"
    "qr/^(images|css)/"        string form of a Pattern, resolved at load time

Paths are matched without their leading slash.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple, Union

from .faults import ConfigInvalidFault

# "qr/<regex>/<flags>" marks a regular expression in string-only config
_MARKED_PATTERN_RE = re.compile(r"^qr/(?P<source>.*)/(?P<flags>[imsx]*)$", re.DOTALL)

_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}


@dataclass(frozen=True)
class Literal:
    """Prefix rule, anchored at the start of the path."""

    prefix: str
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", _compile(f"^{self.prefix}", self.prefix))

    def matches(self, path: str) -> bool:
        return self.regex.search(path) is not None


@dataclass(frozen=True)
class Pattern:
    """Regular expression rule, searched anywhere in the path."""

    regex: re.Pattern

    def matches(self, path: str) -> bool:
        return self.regex.search(path) is not None

    @property
    def source(self) -> str:
        return self.regex.pattern


DirRule = Union[Literal, Pattern]


def _compile(source: str, raw: object, flags: int = 0) -> re.Pattern:
    try:
        return re.compile(source, flags)
    except re.error as exc:
        raise ConfigInvalidFault("static.dirs", f"malformed pattern {raw!r}: {exc}") from exc


def parse_rule(value: Union[str, re.Pattern, Literal, Pattern]) -> DirRule:
    """
    Turn a configured ``dirs`` entry into a tagged rule.

    Raises:
        ConfigInvalidFault: malformed regex or unsupported value type
    """
    if isinstance(value, (Literal, Pattern)):
        return value
    if isinstance(value, re.Pattern):
        return Pattern(value)
    if not isinstance(value, str):
        raise ConfigInvalidFault("static.dirs", f"unsupported rule {value!r}")

    if value.startswith("qr/"):
        marked = _MARKED_PATTERN_RE.match(value)
        if marked is None:
            raise ConfigInvalidFault("static.dirs", f"unterminated pattern {value!r}")
        flags = 0
        for letter in marked.group("flags"):
            flags |= _FLAGS[letter]
        return Pattern(_compile(marked.group("source"), value, flags))

    if not value:
        raise ConfigInvalidFault("static.dirs", "empty rule")
    return Literal(value)


class PathMatcher:
    """
    Evaluate ``dirs`` rules in configured order; first match wins.
    """

    __slots__ = ("rules",)

    def __init__(self, rules: Iterable[DirRule] = ()):
        self.rules: Tuple[DirRule, ...] = tuple(rules)

    @staticmethod
    def matches(path: str, rule: DirRule) -> bool:
        return rule.matches(path.lstrip("/"))

    def first_match(self, path: str) -> Optional[DirRule]:
        relative = path.lstrip("/")
        for rule in self.rules:
            if rule.matches(relative):
                return rule
        return None
