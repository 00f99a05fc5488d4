"""
ObjectNameFilter model - Include or exclude schema/catalog names
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass
class ObjectNameFilter:
    """
    A list of exact names or wildcard expressions (*, %, ?).

    With inclusion=False (default) matching names are removed; with
    inclusion=True only matching names are kept.
    """
    expressions: List[str] = field(default_factory=list)
    inclusion: bool = False
    case_sensitive: bool = False

    def _compile(self, expression: str) -> "re.Pattern":
        parts = []
        for ch in expression:
            if ch in ("*", "%"):
                parts.append(".*")
            elif ch == "?":
                parts.append(".")
            else:
                parts.append(re.escape(ch))
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return re.compile("^" + "".join(parts) + "$", flags)

    def matches(self, name: str) -> bool:
        return any(self._compile(e).match(name) for e in self.expressions)

    def is_excluded(self, name: str) -> bool:
        if not self.expressions:
            return False
        if self.inclusion:
            return not self.matches(name)
        return self.matches(name)

    def apply(self, names: Iterable[str]) -> List[str]:
        return [n for n in names if not self.is_excluded(n)]
