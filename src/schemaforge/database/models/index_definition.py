"""
IndexDefinition model - An index grouped from per-column index rows
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class IndexColumn:
    """Indexed column or expression with an optional direction (ASC/DESC)."""
    name: str
    direction: Optional[str] = None

    @property
    def expression(self) -> str:
        if self.direction:
            return f"{self.name} {self.direction}"
        return self.name


@dataclass
class IndexDefinition:
    """An index of a table. options holds dialect clauses appended to CREATE INDEX."""
    name: str
    unique: bool = False
    primary_key_index: bool = False
    columns: List[IndexColumn] = field(default_factory=list)
    index_type: str = "NORMAL"
    options: str = ""
    definition: Optional[str] = None

    def add_column(self, name: str, direction: Optional[str] = None):
        self.columns.append(IndexColumn(name, direction))

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def expression(self) -> str:
        return ", ".join(c.expression for c in self.columns)
