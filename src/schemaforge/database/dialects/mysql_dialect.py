"""
MySQL Dialect - MySQL-specific metadata readers
"""

import re
from typing import List

from .base import DatabaseDialect
from ..models import ColumnIdentifier, ProcedureDefinition, TableIdentifier
from ..readers.base import ColumnHook
from ..readers.bundle import ReaderBundle
from ..readers.generic import GenericProcedureReader

import logging
logger = logging.getLogger(__name__)

# Drivers report ENUM/SET as CHAR, so the display type may carry a size: enum(5)
_ENUM_TYPE = re.compile(r"^(enum|set)\b", re.IGNORECASE)


def _is_enum_type(dbms_type) -> bool:
    return bool(dbms_type) and _ENUM_TYPE.match(dbms_type) is not None


class MySqlProcedureReader(GenericProcedureReader):
    """Routine source via SHOW CREATE PROCEDURE/FUNCTION."""

    def read_procedure_source(self, definition: ProcedureDefinition):
        name = self.meta.quote_object_name(definition.name)
        if definition.catalog:
            name = f"{self.meta.quote_object_name(definition.catalog)}.{name}"
        sql = f"SHOW CREATE {definition.object_type} {name}"

        source = None
        with self._recovering(f"source of {definition.name}"):
            rows = self._query(sql)
            # Columns: name, sql_mode, create statement, ...
            if rows.row_count > 0 and len(rows.columns) > 2:
                source = rows.get_string(0, 2)
        if not source:
            definition.source = f"-- Source of {definition.name} not found"
            return
        nl = self.meta.line_ending
        definition.source = source.rstrip() + nl + self.meta.alternate_delimiter + nl


class MySqlEnumReader(ColumnHook):
    """Replace the bare ENUM/SET type with the declared value list."""

    def process_columns(self, table: TableIdentifier, columns: List[ColumnIdentifier]):
        if not any(_is_enum_type(c.dbms_type) for c in columns):
            return

        types = {}
        with self._recovering(f"enum values of {table}"):
            rows = self._query(f"SHOW COLUMNS FROM {self.meta.get_table_expression(table)}")
            for i in range(rows.row_count):
                types[rows.get_string(i, "Field")] = rows.get_string(i, "Type")

        for column in columns:
            declared = types.get(column.name)
            if _is_enum_type(column.dbms_type) and declared:
                column.dbms_type = declared


class MySQLDialect(DatabaseDialect):
    """Dialect for MySQL and MariaDB."""

    family = "mysql"
    default_quote_char = "`"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            procedure_reader=MySqlProcedureReader(meta),
            column_hooks=[MySqlEnumReader(meta)],
        )
