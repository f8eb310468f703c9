"""
Core data structures for request handling.

Provides:
- Headers: Case-insensitive header access over raw ASGI header pairs
- parse_date_header / http_date: HTTP-date conversion helpers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import formatdate, parsedate_to_datetime
from typing import Dict, Iterator, List, Optional, Tuple


# ============================================================================
# Headers
# ============================================================================

@dataclass
class Headers:
    """
    Case-insensitive header access with raw preservation.
    
    Normalizes header names while preserving original casing.
    """
    
    raw: List[Tuple[bytes, bytes]] = field(default_factory=list)
    _index: Dict[str, List[Tuple[bytes, bytes]]] = field(default_factory=dict, init=False, repr=False)
    
    def __post_init__(self):
        """Build case-insensitive index."""
        self._index = {}
        for name, value in self.raw:
            key = name.decode("latin-1").lower()
            if key not in self._index:
                self._index[key] = []
            self._index[key].append((name, value))
    
    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get first value for header (case-insensitive)."""
        pairs = self._index.get(name.lower())
        if pairs:
            return pairs[0][1].decode("latin-1")
        return default
    
    def get_all(self, name: str) -> List[str]:
        """Get all values for header (case-insensitive)."""
        pairs = self._index.get(name.lower(), [])
        return [value.decode("latin-1") for _, value in pairs]
    
    def has(self, name: str) -> bool:
        """Check if header exists."""
        return name.lower() in self._index
    
    def items(self) -> Iterator[Tuple[str, str]]:
        """Iterate over all headers."""
        for name, value in self.raw:
            yield name.decode("latin-1"), value.decode("latin-1")
    
    def __contains__(self, name: str) -> bool:
        return self.has(name)
    
    def __getitem__(self, name: str) -> str:
        """Get header value (raises KeyError if not found)."""
        value = self.get(name)
        if value is None:
            raise KeyError(f"Header '{name}' not found")
        return value
    
    def __repr__(self) -> str:
        return f"Headers({list(self.items())})"


# ============================================================================
# Dates
# ============================================================================

def parse_date_header(date_str: Optional[str]) -> Optional[datetime]:
    """
    Parse HTTP date header.
    
    Returns datetime object or None.
    """
    if not date_str:
        return None
    
    try:
        parsed = parsedate_to_datetime(date_str)
    except (ValueError, TypeError):
        return None
    
    # "-0000" zones parse naive; HTTP dates are always GMT
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def http_date(timestamp: float) -> str:
    """Format a POSIX timestamp as an RFC 7231 HTTP-date."""
    return formatdate(timestamp, usegmt=True)
