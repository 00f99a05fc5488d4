"""
Base Database Dialect - Dialect profile and abstract family descriptor

A DatabaseDialect subclass describes one database family: how it is
recognized from the product name, which capability readers it wires and
the few behaviours that differ per family (default table types, schema
list adjustments, current catalog lookup).

The DialectProfile is the immutable record of capability flags derived once
per connection from the dialect, the driver and the settings.
"""

import re
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..connection import ConnectionContext
    from ..metadata import MetadataFacade
    from ..readers.bundle import ReaderBundle

_DB_ID_PATTERN = re.compile(r"[ ()\[\]/$,.]")


def make_db_id(product_name: str) -> str:
    """Derive the dialect id used in setting keys from a product name."""
    return _DB_ID_PATTERN.sub("_", product_name or "").lower()


class CaseFolding(Enum):
    """How a dialect stores unquoted identifiers."""
    UPPER = "upper"
    LOWER = "lower"
    MIXED = "mixed"
    DRIVER = "driver"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["CaseFolding"]:
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown case folding mode: {value!r}")
            return None


@dataclass(frozen=True)
class DialectProfile:
    """Capability flags and strings of one connected database."""
    db_id: str
    family: str
    product_name: str
    product_version: str = ""
    major_version: int = 0
    minor_version: int = 0
    schema_term: str = "Schema"
    catalog_term: str = "Catalog"
    quote_char: str = '"'
    ddl_needs_commit: bool = False
    use_driver_commit: bool = False
    inline_constraints: bool = False
    null_keyword_required: bool = True
    null_keyword: str = "NULL"
    supports_catalogs: bool = True
    supports_on_delete_restrict: bool = True
    supports_get_primary_keys: bool = True
    rollback_after_error: bool = False
    hide_index_types: bool = False
    quote_digit_identifiers: bool = False
    never_quote: bool = False
    trim_defaults: bool = True
    default_before_null: bool = False
    column_comment_inline: bool = False
    columns_in_view_definition: bool = True
    object_case: CaseFolding = CaseFolding.DRIVER
    schema_case: Optional[CaseFolding] = None
    table_type_name: str = "TABLE"

    def is_family(self, *families: str) -> bool:
        return self.family in families

    def version_at_least(self, major: int, minor: int = 0) -> bool:
        return (self.major_version, self.minor_version) >= (major, minor)


class DatabaseDialect(ABC):
    """
    Abstract base class for database families.

    Each family knows how to:
    1. Recognize itself from the driver reported product name
    2. Build the capability reader bundle for a MetadataFacade
    3. Adjust the few catalog results that differ per family

    Usage:
        dialect_class = DialectFactory.find("PostgreSQL")
        dialect = dialect_class()
        readers = dialect.create_readers(facade)
    """

    # Family id used as the second level of dialect setting lookups
    family: str = "generic"

    # Quote character used when the driver does not report one
    default_quote_char: str = '"'

    def normalize_product_name(self, product_name: str) -> str:
        """Return the product name used to derive the dialect id."""
        return product_name

    def create_readers(self, meta: "MetadataFacade") -> "ReaderBundle":
        """
        Build the capability readers for this family.

        Capabilities left empty are filled with generic readers by the
        MetadataFacade.
        """
        from ..readers.bundle import ReaderBundle
        return ReaderBundle()

    def default_table_types(self, meta: "MetadataFacade") -> Optional[List[str]]:
        """Table types to request when the caller asked for all types."""
        return None

    def adjust_schema_list(self, schemas: List[str]) -> List[str]:
        return schemas

    def get_current_catalog(self, connection: "ConnectionContext") -> Optional[str]:
        """Current catalog, or None to use the driver's value."""
        return None

    def format_trigger_source(self, meta: "MetadataFacade", source: str) -> str:
        """Turn the text returned by the trigger_source query into a script."""
        return source
