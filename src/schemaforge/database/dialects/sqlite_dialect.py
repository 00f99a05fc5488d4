"""
SQLite Dialect - SQLite-specific metadata readers
"""

import re
from typing import List

from .base import DatabaseDialect
from ..models import IndexDefinition, TableIdentifier
from ..readers.bundle import ReaderBundle
from ..readers.generic import GenericIndexReader, SqlConstraintReader

import logging
logger = logging.getLogger(__name__)

# CONSTRAINT name CHECK (...) or CHECK (...) at table level, one nesting level deep
_TABLE_CHECK = re.compile(
    r"(?:CONSTRAINT\s+(\"[^\"]+\"|\w+)\s+)?CHECK\s*(\((?:[^()]|\([^()]*\))*\))",
    re.IGNORECASE,
)


class SqliteConstraintReader(SqlConstraintReader):
    """Check constraints parsed from the CREATE TABLE statement in sqlite_master."""

    TABLE_SQL = "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = ?"

    def get_column_constraints(self, table: TableIdentifier):
        return {}

    def get_table_constraints(self, table: TableIdentifier):
        create_sql = None
        with self._recovering(f"table constraints for {table}"):
            rows = self._query(self.TABLE_SQL, (table.raw_name,))
            if rows.row_count > 0:
                create_sql = rows.get_string(0, 0)
        if not create_sql:
            return None

        clauses = []
        for name, condition in _TABLE_CHECK.findall(create_sql):
            clause = f"CHECK {condition}"
            if name:
                clause = f"CONSTRAINT {name} {clause}"
            clauses.append(clause)
        if not clauses:
            return None
        return "\n   ,".join(clauses)


class SqliteIndexReader(GenericIndexReader):
    """Uses the CREATE INDEX statement stored in sqlite_master."""

    INDEX_SQL = "SELECT name, sql FROM sqlite_master WHERE type = 'index' AND tbl_name = ?"

    def process_index_list(self, table: TableIdentifier, indexes: List[IndexDefinition]):
        if not indexes:
            return
        by_name = {index.name: index for index in indexes}
        with self._recovering(f"index definitions of {table}"):
            for name, sql in self._query(self.INDEX_SQL, (table.raw_name,)):
                # Automatic indexes have no statement
                if sql and name in by_name:
                    by_name[name].definition = sql


class SQLiteDialect(DatabaseDialect):
    """Dialect for SQLite databases."""

    family = "sqlite"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=SqliteConstraintReader(meta),
            index_reader=SqliteIndexReader(meta),
        )
