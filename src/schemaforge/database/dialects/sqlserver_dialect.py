"""
SQL Server Dialect - SQL Server-specific metadata readers
"""

from typing import List, Optional

from .base import DatabaseDialect
from ..exceptions import MetadataError
from ..models import IndexDefinition, TableIdentifier
from ..readers.bundle import ReaderBundle
from ..readers.generic import GenericIndexReader, SqlConstraintReader

import logging
logger = logging.getLogger(__name__)


class SqlServerConstraintReader(SqlConstraintReader):

    column_constraint_sql = (
        "SELECT col.name, cc.definition\n"
        "FROM sys.check_constraints cc\n"
        "  JOIN sys.tables t ON t.object_id = cc.parent_object_id\n"
        "  JOIN sys.schemas s ON s.schema_id = t.schema_id\n"
        "  JOIN sys.columns col ON col.object_id = t.object_id AND col.column_id = cc.parent_column_id\n"
        "WHERE s.name = ?\n"
        "  AND t.name = ?\n"
        "  AND cc.parent_column_id > 0"
    )

    table_constraint_sql = (
        "SELECT cc.name, cc.definition\n"
        "FROM sys.check_constraints cc\n"
        "  JOIN sys.tables t ON t.object_id = cc.parent_object_id\n"
        "  JOIN sys.schemas s ON s.schema_id = t.schema_id\n"
        "WHERE s.name = ?\n"
        "  AND t.name = ?\n"
        "  AND cc.parent_column_id = 0\n"
        "ORDER BY cc.name"
    )


class SqlServerIndexReader(GenericIndexReader):
    """
    CLUSTERED/NONCLUSTERED keywords plus INCLUDE and WITH options.

    Options are read from the sys catalog views (SQL Server 2005 and later).
    """

    OPTIONS_SQL = (
        "SELECT ix.ignore_dup_key, ix.is_padded, ic.is_included_column, ix.fill_factor, col.name AS column_name\n"
        "FROM sys.index_columns ic\n"
        "  JOIN sys.columns col ON col.object_id = ic.object_id AND col.column_id = ic.column_id\n"
        "  JOIN sys.indexes ix ON ix.index_id = ic.index_id AND ix.object_id = col.object_id\n"
        "  JOIN sys.all_objects ao ON ao.object_id = ix.object_id\n"
        "  JOIN sys.schemas sh ON sh.schema_id = ao.schema_id\n"
        "WHERE ix.name = ?\n"
        "  AND ao.name = ?\n"
        "  AND sh.name = ?\n"
        "ORDER BY ic.index_column_id"
    )

    def get_index_type_keyword(self, index_type: Optional[str]) -> str:
        if not index_type:
            return ""
        if index_type == "NORMAL":
            return "NONCLUSTERED "
        return f"{index_type} "

    def process_index_list(self, table: TableIdentifier, indexes: List[IndexDefinition]):
        if not self.profile.version_at_least(9):
            return
        schema = self._schema_of(table)
        for index in indexes:
            if index.primary_key_index:
                continue
            try:
                index.options = self.get_index_options(table.raw_name, schema, index.name)
            except MetadataError as e:
                logger.warning(f"Could not read options of index {index.name}: {e}")

    def get_index_options(self, table_name: str, schema: Optional[str], index_name: str) -> str:
        nl = self.meta.line_ending
        rows = self._query(self.OPTIONS_SQL, (index_name, table_name, schema))

        included = []
        ignore_dups = is_padded = False
        fill_factor = -1
        for i in range(rows.row_count):
            if i == 0:
                ignore_dups = bool(rows.get_value(i, "ignore_dup_key"))
                is_padded = bool(rows.get_value(i, "is_padded"))
                fill_factor = rows.get_int(i, "fill_factor", -1)
            if rows.get_value(i, "is_included_column"):
                included.append(self.meta.quote_object_name(rows.get_string(i, "column_name")))

        options = ""
        if included:
            options += f"{nl}   INCLUDE ({', '.join(included)})"
        settings = []
        if ignore_dups:
            settings.append("IGNORE_DUP_KEY = ON")
        if fill_factor > 0:
            settings.append(f"FILLFACTOR = {fill_factor}")
        if is_padded:
            settings.append("PAD_INDEX = ON")
        if settings:
            options += f"{nl}   WITH ({', '.join(settings)})"
        return options


class SQLServerDialect(DatabaseDialect):
    """Dialect for Microsoft SQL Server."""

    family = "sqlserver"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=SqlServerConstraintReader(meta),
            index_reader=SqlServerIndexReader(meta),
        )

    def get_current_catalog(self, connection) -> Optional[str]:
        rows = connection.execute_query("SELECT db_name()")
        if rows.row_count == 0:
            return None
        return rows.get_string(0, 0)
