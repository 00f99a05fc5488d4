"""
ColumnIdentifier model - One column of a table definition
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..sql_types import SqlType


@dataclass
class ColumnIdentifier:
    """Column metadata with a display type (e.g. VARCHAR(20)) and a type code."""
    name: str
    dbms_type: str = ""
    data_type: int = SqlType.OTHER
    column_size: int = 0
    decimal_digits: int = 0
    nullable: bool = True
    default_value: Optional[str] = None
    comment: Optional[str] = None
    is_pk: bool = False
    position: int = 0
    extras: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "ColumnIdentifier":
        return ColumnIdentifier(
            name=self.name,
            dbms_type=self.dbms_type,
            data_type=self.data_type,
            column_size=self.column_size,
            decimal_digits=self.decimal_digits,
            nullable=self.nullable,
            default_value=self.default_value,
            comment=self.comment,
            is_pk=self.is_pk,
            position=self.position,
            extras=dict(self.extras),
        )
