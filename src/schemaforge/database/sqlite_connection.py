"""
SQLite Connection Context - Catalog calls built on sqlite_master and PRAGMAs

SQLite has no catalog API of its own, so the baseline calls are emulated:

- tables:       sqlite_master
- columns:      PRAGMA table_info
- foreign keys: PRAGMA foreign_key_list
- indexes:      PRAGMA index_list / index_xinfo
"""

import re
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from .connection import (
    ConnectionContext,
    COLUMN_COLUMNS,
    INDEX_INFO_COLUMNS,
    KEY_COLUMNS,
    PRIMARY_KEY_COLUMNS,
    TABLE_COLUMNS,
)
from .exceptions import ConnectivityError, StructuralOperationError
from .row_set import RowSet
from .sql_types import type_code_from_name
from ..utils.sql_helpers import like_to_regex

import logging
logger = logging.getLogger(__name__)

_TYPE_SIZE_PATTERN = re.compile(r"^\s*([^(]*?)\s*(?:\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\))?\s*$")

_RULE_CODES = {
    "CASCADE": 0,
    "RESTRICT": 1,
    "SET NULL": 2,
    "NO ACTION": 3,
    "SET DEFAULT": 4,
}


def _pragma_name(name: str) -> str:
    """Quote an identifier for use in a PRAGMA argument."""
    return '"' + name.replace('"', '""') + '"'


class SqliteConnectionContext(ConnectionContext):
    """
    ConnectionContext for the sqlite3 module.

    Usage:
        context = SqliteConnectionContext.open(":memory:")
        facade = MetadataFacade(context)
    """

    def __init__(self, connection: sqlite3.Connection, owns_connection: bool = False):
        self.connection = connection
        self._owns_connection = owns_connection

    @classmethod
    def open(cls, database: str) -> "SqliteConnectionContext":
        try:
            conn = sqlite3.connect(database)
        except sqlite3.Error as e:
            raise ConnectivityError(f"Cannot open SQLite database {database}: {e}") from e
        return cls(conn, owns_connection=True)

    # ==================== Product information ====================

    def product_name(self) -> str:
        return "SQLite"

    def product_version(self) -> str:
        return sqlite3.sqlite_version

    def supports_catalogs(self) -> bool:
        return False

    def stores_mixed_case_identifiers(self) -> bool:
        return True

    # ==================== Catalog calls ====================

    def _table_names(self) -> List[str]:
        rows = self.execute_query("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
        return [r[0] for r in rows]

    def get_tables(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str],
        types: Optional[Sequence[str]]
    ) -> RowSet:
        result = RowSet(TABLE_COLUMNS)
        name_regex = like_to_regex(name_pattern)
        wanted = {t.upper() for t in types} if types else None

        rows = self.execute_query(
            "SELECT name, type FROM sqlite_master WHERE type IN ('table', 'view') ORDER BY type, name"
        )
        for name, obj_type in rows:
            if not name_regex.match(name):
                continue
            if obj_type == "view":
                table_type = "VIEW"
            elif name.startswith("sqlite_"):
                table_type = "SYSTEM TABLE"
            else:
                table_type = "TABLE"
            if wanted is not None and table_type not in wanted:
                continue
            result.add_row([None, None, name, table_type, None])
        return result

    def get_columns(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        column_pattern: str = "%"
    ) -> RowSet:
        result = RowSet(COLUMN_COLUMNS)
        column_regex = like_to_regex(column_pattern)

        for cid, name, declared, notnull, default, pk in self.execute_query(
            f"PRAGMA table_info({_pragma_name(table)})"
        ):
            if not column_regex.match(name):
                continue
            type_name, size, digits = self._parse_declared_type(declared)
            nullable = 0 if notnull else 1
            result.add_row([
                None, None, table, name, type_code_from_name(declared),
                type_name, size, None, digits, 10,
                nullable, None, default, None, None,
                None, cid + 1, "NO" if notnull else "YES",
            ])
        return result

    @staticmethod
    def _parse_declared_type(declared: Optional[str]):
        match = _TYPE_SIZE_PATTERN.match(declared or "")
        if not match:
            return (declared or "").upper(), 0, 0
        base, size, digits = match.groups()
        return base.upper(), int(size) if size else 0, int(digits) if digits else 0

    def _primary_key_index_name(self, table: str) -> Optional[str]:
        for row in self.execute_query(f"PRAGMA index_list({_pragma_name(table)})"):
            if row[3] == "pk":
                return row[1]
        return None

    def get_primary_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        result = RowSet(PRIMARY_KEY_COLUMNS)
        pk_name = self._primary_key_index_name(table)
        columns = [
            (row[5], row[1])
            for row in self.execute_query(f"PRAGMA table_info({_pragma_name(table)})")
            if row[5]
        ]
        for key_seq, column in sorted(columns):
            result.add_row([None, None, table, column, key_seq, pk_name])
        return result

    def _foreign_key_rows(self, table: str) -> List[List[Any]]:
        """KEY_COLUMNS rows for the foreign keys defined on one table."""
        rows = []
        fk_list = self.execute_query(f"PRAGMA foreign_key_list({_pragma_name(table)})")
        parent_pks: Dict[str, List[str]] = {}
        for fk_id, seq, parent, from_col, to_col, on_update, on_delete, _match in fk_list:
            if to_col is None:
                # References the parent's primary key implicitly
                if parent not in parent_pks:
                    pk_rows = self.get_primary_keys(None, None, parent)
                    parent_pks[parent] = pk_rows.column_values("COLUMN_NAME")
                pk_columns = parent_pks[parent]
                to_col = pk_columns[seq] if seq < len(pk_columns) else None
            rows.append([
                None, None, parent, to_col,
                None, None, table, from_col,
                seq + 1,
                _RULE_CODES.get((on_update or "").upper(), 3),
                _RULE_CODES.get((on_delete or "").upper(), 3),
                f"{table}_fk_{fk_id}", None, 7,
            ])
        return rows

    def get_imported_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        return RowSet(KEY_COLUMNS, self._foreign_key_rows(table))

    def get_exported_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        result = RowSet(KEY_COLUMNS)
        for child in self._table_names():
            for row in self._foreign_key_rows(child):
                if row[2].lower() == table.lower():
                    result.add_row(row)
        return result

    def get_index_info(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        unique_only: bool = False
    ) -> RowSet:
        result = RowSet(INDEX_INFO_COLUMNS)
        for _seq, index_name, unique, _origin, _partial in self.execute_query(
            f"PRAGMA index_list({_pragma_name(table)})"
        ):
            if unique_only and not unique:
                continue
            position = 0
            for seqno, cid, column, desc, _coll, key in self.execute_query(
                f"PRAGMA index_xinfo({_pragma_name(index_name)})"
            ):
                if not key:
                    continue
                position += 1
                result.add_row([
                    None, None, table, 0 if unique else 1, None,
                    index_name, 3, position, column,
                    "D" if desc else "A", None, None, None,
                ])
        return result

    def get_table_types(self) -> List[str]:
        return ["TABLE", "VIEW", "SYSTEM TABLE"]

    # ==================== SQL execution ====================

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> RowSet:
        try:
            cursor = self.connection.execute(sql, tuple(params))
            columns = [d[0] for d in cursor.description] if cursor.description else []
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise ConnectivityError(str(e), sql) from e
        return RowSet(columns, rows)

    def execute_update(self, sql: str, params: Sequence[Any] = ()) -> int:
        try:
            cursor = self.connection.execute(sql, tuple(params))
        except sqlite3.Error as e:
            raise StructuralOperationError(str(e), sql) from e
        return cursor.rowcount

    # ==================== Transactions ====================

    @property
    def auto_commit(self) -> bool:
        return self.connection.isolation_level is None

    def commit(self):
        try:
            self.connection.commit()
        except sqlite3.Error as e:
            raise ConnectivityError(f"Commit failed: {e}") from e

    def rollback(self):
        try:
            self.connection.rollback()
        except sqlite3.Error as e:
            raise ConnectivityError(f"Rollback failed: {e}") from e

    def close(self):
        if self._owns_connection:
            self.connection.close()
            self._owns_connection = False
