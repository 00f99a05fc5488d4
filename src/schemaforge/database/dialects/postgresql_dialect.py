"""
PostgreSQL Dialect - PostgreSQL-specific metadata readers
"""

from typing import List, Optional

from .base import DatabaseDialect
from ..models import IndexDefinition, ProcedureDefinition, TableIdentifier
from ..readers.bundle import ReaderBundle
from ..readers.generic import (
    PROCEDURE_LIST_COLUMNS,
    GenericIndexReader,
    GenericProcedureReader,
    SqlConstraintReader,
    SqlSequenceReader,
)
from ..row_set import RowSet

import logging
logger = logging.getLogger(__name__)


class PostgresConstraintReader(SqlConstraintReader):

    table_constraint_sql = (
        "SELECT c.conname, pg_get_constraintdef(c.oid)\n"
        "FROM pg_catalog.pg_constraint c\n"
        "  JOIN pg_catalog.pg_class t ON t.oid = c.conrelid\n"
        "  JOIN pg_catalog.pg_namespace n ON n.oid = t.relnamespace\n"
        "WHERE c.contype = 'c'\n"
        "  AND n.nspname = ?\n"
        "  AND t.relname = ?\n"
        "ORDER BY c.conname"
    )


class PostgresIndexReader(GenericIndexReader):
    """Uses pg_indexes.indexdef as the source of each index."""

    INDEX_DEF_SQL = (
        "SELECT indexname, indexdef\n"
        "FROM pg_catalog.pg_indexes\n"
        "WHERE schemaname = ?\n"
        "  AND tablename = ?"
    )

    def process_index_list(self, table: TableIdentifier, indexes: List[IndexDefinition]):
        if not indexes:
            return
        by_name = {index.name: index for index in indexes}
        with self._recovering(f"index definitions of {table}"):
            for name, definition in self._query(self.INDEX_DEF_SQL, (self._schema_of(table), table.raw_name)):
                index = by_name.get(name)
                if index is not None:
                    index.definition = definition


class PostgresProcedureReader(GenericProcedureReader):
    """Functions from pg_proc; source from pg_get_functiondef()."""

    LIST_SQL = (
        "SELECT p.proname AS proc_name,\n"
        "       n.nspname AS proc_schema,\n"
        "       d.description AS remarks,\n"
        "       CASE WHEN rt.typname = 'void' THEN 1 ELSE 2 END AS proc_type\n"
        "FROM pg_catalog.pg_proc p\n"
        "  JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace\n"
        "  JOIN pg_catalog.pg_type rt ON rt.oid = p.prorettype\n"
        "  LEFT JOIN pg_catalog.pg_description d ON d.objoid = p.oid\n"
        "WHERE n.nspname LIKE ?\n"
        "  AND p.proname LIKE ?\n"
        "ORDER BY proc_schema, proc_name"
    )

    SOURCE_SQL = (
        "SELECT pg_get_functiondef(p.oid)\n"
        "FROM pg_catalog.pg_proc p\n"
        "  JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace\n"
        "WHERE n.nspname = ?\n"
        "  AND p.proname = ?"
    )

    def get_procedures(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None
    ) -> RowSet:
        result = RowSet(PROCEDURE_LIST_COLUMNS)
        with self._recovering("function list"):
            rows = self._query(self.LIST_SQL, (schema or "%", name_pattern or "%"))
            for name, proc_schema, remarks, proc_type in rows:
                type_name = "PROCEDURE" if proc_type == 1 else "FUNCTION"
                result.add_row([name, type_name, None, proc_schema, remarks, proc_type])
        return result

    def read_procedure_source(self, definition: ProcedureDefinition):
        schema = definition.schema or self.meta.get_current_schema()
        nl = self.meta.line_ending
        sources = []
        with self._recovering(f"source of {definition.name}"):
            for (source,) in self._query(self.SOURCE_SQL, (schema, definition.name)):
                if source:
                    sources.append(source.rstrip() + nl + ";" + nl)
        # Overloaded functions produce one definition each
        definition.source = nl.join(sources) or f"-- Source of {definition.name} not found"


class PostgresSequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT sequence_name\n"
        "FROM information_schema.sequences\n"
        "WHERE sequence_schema = ?\n"
        "ORDER BY sequence_name"
    )

    definition_sql = (
        "SELECT sequence_name, minimum_value AS min_value, maximum_value AS max_value,\n"
        "       increment, start_value, cycle_option AS cycle\n"
        "FROM information_schema.sequences\n"
        "WHERE sequence_schema = ?\n"
        "  AND sequence_name = ?"
    )


class PostgreSQLDialect(DatabaseDialect):
    """Dialect for PostgreSQL databases."""

    family = "postgresql"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=PostgresConstraintReader(meta),
            index_reader=PostgresIndexReader(meta),
            procedure_reader=PostgresProcedureReader(meta),
            sequence_reader=PostgresSequenceReader(meta),
        )

    def default_table_types(self, meta) -> Optional[List[str]]:
        """The driver only returns tables and views unless asked for every type."""
        return meta.get_table_types()
