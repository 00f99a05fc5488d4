"""
RowSet - Small tabular container for metadata results

Rows are lists of cell values addressed by row index and column name or
column index. Column name lookups are case-insensitive so driver results
using lower case names (pyodbc) and upper case names (JDBC style) can be
read the same way.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union

import pandas as pd

Column = Union[int, str]


class RowSet:
    """
    Ordered rows of named cells.

    Usage:
        rows = RowSet(["NAME", "TYPE"])
        row = rows.add_row()
        rows.set_value(row, "NAME", "orders")
        rows.get_string(0, "name")  # -> "orders"
    """

    def __init__(self, columns: Sequence[str], rows: Optional[Iterable[Sequence[Any]]] = None):
        self._columns: List[str] = list(columns)
        self._index: Dict[str, int] = {}
        for i, name in enumerate(self._columns):
            self._index.setdefault(name.upper(), i)
        self._rows: List[List[Any]] = []
        for values in rows or []:
            self.add_row(values)

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[List[Any]]:
        return iter(self._rows)

    def has_column(self, name: str) -> bool:
        return name.upper() in self._index

    def column_index(self, column: Column) -> int:
        """Resolve a column name or index to an index."""
        if isinstance(column, int):
            if column < 0 or column >= len(self._columns):
                raise IndexError(f"Column index out of range: {column}")
            return column
        try:
            return self._index[column.upper()]
        except KeyError:
            raise KeyError(f"Unknown column: {column}") from None

    # ==================== Modification ====================

    def add_row(self, values: Optional[Sequence[Any]] = None) -> int:
        """Append a row and return its index. Missing trailing cells are None."""
        row = list(values) if values is not None else []
        if len(row) < len(self._columns):
            row.extend([None] * (len(self._columns) - len(row)))
        self._rows.append(row[:len(self._columns)])
        return len(self._rows) - 1

    def set_value(self, row: int, column: Column, value: Any):
        self._rows[row][self.column_index(column)] = value

    def delete_row(self, row: int):
        del self._rows[row]

    def sort_by(self, column: Column, ascending: bool = True):
        """Sort rows by one column, None values last."""
        idx = self.column_index(column)
        present = [r for r in self._rows if r[idx] is not None]
        missing = [r for r in self._rows if r[idx] is None]
        present.sort(key=lambda r: str(r[idx]).lower(), reverse=not ascending)
        self._rows = present + missing

    # ==================== Access ====================

    def get_value(self, row: int, column: Column) -> Any:
        return self._rows[row][self.column_index(column)]

    def get_string(self, row: int, column: Column) -> Optional[str]:
        value = self.get_value(row, column)
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    def get_int(self, row: int, column: Column, default: int = 0) -> int:
        value = self.get_value(row, column)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def column_values(self, column: Column) -> List[Any]:
        idx = self.column_index(column)
        return [r[idx] for r in self._rows]

    def records(self) -> List[Dict[str, Any]]:
        """Rows as dicts keyed by column name."""
        return [dict(zip(self._columns, r)) for r in self._rows]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a pandas DataFrame."""
        return pd.DataFrame(self._rows, columns=self._columns)

    def __repr__(self) -> str:
        return f"RowSet(columns={self._columns}, rows={len(self._rows)})"
