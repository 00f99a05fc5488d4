"""
Identifier Policy - Case folding and quoting of object names

The policy answers two questions for a connected dialect:

- How is an unquoted name stored? (upper, lower or mixed case)
- Does a name need quoting in generated SQL?

Both operations are idempotent: quoting an already quoted name and
folding an already folded name return the input unchanged.
"""

import re
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Optional, Set

import yaml
from cachetools import LRUCache, cached

from .dialects.base import CaseFolding, DialectProfile
from .exceptions import MetadataError
from ..utils.sql_helpers import is_quoted, trim_quotes

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from .connection import ConnectionContext
    from ..config.settings import Settings

_KEYWORDS_FILE = Path(__file__).parent / "resources" / "keywords.yaml"

_SPECIAL_CHARACTERS = re.compile(r"[^A-Za-z0-9_]")


@cached(cache=LRUCache(maxsize=8), lock=threading.RLock())
def load_keyword_resource(path: str = str(_KEYWORDS_FILE)) -> Dict[str, FrozenSet[str]]:
    """Load the reserved word lists, keyed by "standard" or dialect id/family."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return {
        str(key): frozenset(str(word).upper() for word in words or [])
        for key, words in data.items()
    }


def build_keyword_set(
    profile: DialectProfile,
    connection: Optional["ConnectionContext"] = None,
    settings: Optional["Settings"] = None
) -> FrozenSet[str]:
    """Standard keywords plus dialect, driver and configured additions."""
    resource = load_keyword_resource()
    keywords: Set[str] = set(resource.get("standard", ()))
    keywords.update(resource.get(profile.family, ()))
    keywords.update(resource.get(profile.db_id, ()))

    if connection is not None:
        try:
            keywords.update(k.upper() for k in connection.sql_keywords())
        except MetadataError as e:
            logger.warning(f"Could not read driver keywords: {e}")

    if settings is not None:
        extra = settings.get_dialect_list("additional_keywords", profile.db_id, profile.family)
        keywords.update(k.upper() for k in extra)

    return frozenset(keywords)


def resolve_case_folding(mode: CaseFolding, connection: Optional["ConnectionContext"]) -> CaseFolding:
    """Turn DRIVER into the concrete mode reported by the connection."""
    if mode != CaseFolding.DRIVER:
        return mode
    if connection is None:
        return CaseFolding.MIXED
    try:
        if connection.stores_upper_case_identifiers():
            return CaseFolding.UPPER
        if connection.stores_lower_case_identifiers():
            return CaseFolding.LOWER
    except MetadataError as e:
        logger.warning(f"Could not read identifier storage from driver, using mixed case: {e}")
    return CaseFolding.MIXED


class IdentifierPolicy:
    """
    Quoting and case folding for one dialect.

    Usage:
        policy = IdentifierPolicy.create(profile, connection, settings)
        policy.quote_object_name("ORDER")  # -> '"ORDER"'
        policy.adjust_object_name_case("orders")  # -> 'ORDERS' on Oracle
    """

    def __init__(
        self,
        profile: DialectProfile,
        keywords: Iterable[str] = (),
        object_case: CaseFolding = CaseFolding.MIXED,
        schema_case: Optional[CaseFolding] = None
    ):
        self.profile = profile
        self.keywords: FrozenSet[str] = frozenset(k.upper() for k in keywords)
        self.object_case = object_case
        self.schema_case = schema_case or object_case
        self.quote_char = profile.quote_char or '"'
        self.quote_char_end = "]" if self.quote_char == "[" else self.quote_char

    @classmethod
    def create(
        cls,
        profile: DialectProfile,
        connection: Optional["ConnectionContext"] = None,
        settings: Optional["Settings"] = None
    ) -> "IdentifierPolicy":
        """Build the policy, resolving driver reported case folding once."""
        object_case = resolve_case_folding(profile.object_case, connection)
        schema_case = None
        if profile.schema_case is not None:
            schema_case = resolve_case_folding(profile.schema_case, connection)
        return cls(profile, build_keyword_set(profile, connection, settings), object_case, schema_case)

    # ==================== Quoting ====================

    def _wrap(self, name: str) -> str:
        escaped = name.replace(self.quote_char_end, self.quote_char_end * 2)
        return f"{self.quote_char}{escaped}{self.quote_char_end}"

    def is_quoted(self, name: Optional[str]) -> bool:
        if not name:
            return False
        text = name.strip()
        if len(text) >= 2 and text.startswith(self.quote_char) and text.endswith(self.quote_char_end):
            return True
        return is_quoted(text)

    def is_keyword(self, name: Optional[str]) -> bool:
        if not name:
            return False
        return name.strip().upper() in self.keywords

    def is_default_case(self, name: str) -> bool:
        """True if the name is stored exactly as written when unquoted."""
        if self.object_case == CaseFolding.UPPER:
            return name == name.upper()
        if self.object_case == CaseFolding.LOWER:
            return name == name.lower()
        return True

    def quote_object_name(self, name: Optional[str], force_quote: bool = False) -> Optional[str]:
        """
        Quote a name if the dialect requires it.

        Args:
            name: Object name, possibly already quoted
            force_quote: Quote even if the rules would not require it

        Returns:
            The name, quoted with the dialect's quote character when needed
        """
        if name is None:
            return None
        text = name.strip()
        if not text:
            return name
        if self.is_quoted(text):
            return text
        if self.profile.never_quote:
            return text

        needs_quote = force_quote
        if not needs_quote and self.profile.quote_digit_identifiers and text[0].isdigit():
            needs_quote = True
        if not needs_quote and self.object_case != CaseFolding.MIXED and not self.is_default_case(text):
            needs_quote = True
        if not needs_quote and self.is_keyword(text):
            needs_quote = True

        if needs_quote or _SPECIAL_CHARACTERS.search(text):
            return self._wrap(text)
        return text

    @staticmethod
    def trim_quotes(name: Optional[str]) -> Optional[str]:
        return trim_quotes(name)

    # ==================== Case folding ====================

    def _fold(self, name: Optional[str], mode: CaseFolding) -> Optional[str]:
        if name is None:
            return None
        text = name.strip()
        if self.quote_char in text or '"' in text or self.is_quoted(text):
            return text
        if mode == CaseFolding.UPPER:
            return text.upper()
        if mode == CaseFolding.LOWER:
            return text.lower()
        return text

    def adjust_object_name_case(self, name: Optional[str]) -> Optional[str]:
        return self._fold(name, self.object_case)

    def adjust_schema_name_case(self, name: Optional[str]) -> Optional[str]:
        return self._fold(name, self.schema_case)
