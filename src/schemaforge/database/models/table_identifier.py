"""
TableIdentifier model - Fully qualified name of a database object
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from ...utils.sql_helpers import trim_quotes

if TYPE_CHECKING:
    from ..identifier_policy import IdentifierPolicy


def _split_expression(expression: str) -> List[str]:
    """Split a dotted name, keeping dots inside quoted parts."""
    parts = []
    current = []
    closing = None
    for ch in expression:
        if closing:
            current.append(ch)
            if ch == closing:
                closing = None
        elif ch in ('"', "`"):
            closing = ch
            current.append(ch)
        elif ch == "[":
            closing = "]"
            current.append(ch)
        elif ch == ".":
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    parts.append("".join(current).strip())
    return parts


@dataclass
class TableIdentifier:
    """
    A table, view, synonym, sequence or other named object.

    Names are kept as given. A quoted name ("Order Items") is never case
    adjusted; unquoted names are adjusted at most once through
    adjust_case().
    """
    name: str
    schema: Optional[str] = None
    catalog: Optional[str] = None
    object_type: str = "TABLE"
    never_adjust_case: bool = False
    case_adjusted: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def parse(cls, expression: str, object_type: str = "TABLE") -> "TableIdentifier":
        """
        Parse "table", "schema.table" or "catalog.schema.table".

        Examples:
            TableIdentifier.parse('hr."Order Items"')
            -> TableIdentifier(name='"Order Items"', schema='hr')
        """
        parts = _split_expression(expression.strip())
        if len(parts) >= 3:
            return cls(name=parts[-1], schema=parts[-2], catalog=".".join(parts[:-2]), object_type=object_type)
        if len(parts) == 2:
            return cls(name=parts[1], schema=parts[0], object_type=object_type)
        return cls(name=parts[0], object_type=object_type)

    def copy(self) -> "TableIdentifier":
        return TableIdentifier(
            name=self.name,
            schema=self.schema,
            catalog=self.catalog,
            object_type=self.object_type,
            never_adjust_case=self.never_adjust_case,
            case_adjusted=self.case_adjusted,
        )

    @property
    def raw_name(self) -> str:
        return trim_quotes(self.name)

    @property
    def raw_schema(self) -> Optional[str]:
        return trim_quotes(self.schema) if self.schema else None

    @property
    def raw_catalog(self) -> Optional[str]:
        return trim_quotes(self.catalog) if self.catalog else None

    def adjust_case(self, policy: "IdentifierPolicy") -> "TableIdentifier":
        """Fold the unquoted parts to the dialect's storage case (once)."""
        if self.never_adjust_case or self.case_adjusted:
            return self
        self.name = policy.adjust_object_name_case(self.name)
        if self.schema:
            self.schema = policy.adjust_schema_name_case(self.schema)
        if self.catalog:
            self.catalog = policy.adjust_object_name_case(self.catalog)
        self.case_adjusted = True
        return self

    def table_expression(
        self,
        policy: Optional["IdentifierPolicy"] = None,
        include_schema: bool = True,
        include_catalog: bool = True
    ) -> str:
        """Dotted name suitable for SQL statements, quoting parts when needed."""
        parts = []
        if include_catalog and self.catalog:
            parts.append(self.catalog)
        if include_schema and self.schema:
            parts.append(self.schema)
        parts.append(self.name)
        if policy is not None:
            parts = [policy.quote_object_name(p) for p in parts]
        return ".".join(parts)

    def is_same(self, other: "TableIdentifier") -> bool:
        """Compare names case-insensitively, ignoring parts missing on either side."""
        if (self.raw_name or "").lower() != (other.raw_name or "").lower():
            return False
        if self.schema and other.schema and self.raw_schema.lower() != other.raw_schema.lower():
            return False
        if self.catalog and other.catalog and self.raw_catalog.lower() != other.raw_catalog.lower():
            return False
        return True

    def __str__(self) -> str:
        return self.table_expression()
