"""
HSQLDB Dialect - HSQL Database Engine metadata readers

Versions before 1.8 have no INFORMATION_SCHEMA qualifier; the quirks table
strips it from the queries below for those servers.
"""

from .base import DatabaseDialect
from ..readers.bundle import ReaderBundle
from ..readers.generic import SqlConstraintReader, SqlSequenceReader

import logging
logger = logging.getLogger(__name__)


class HsqlConstraintReader(SqlConstraintReader):

    table_constraint_sql = (
        "SELECT tc.constraint_name, cc.check_clause\n"
        "FROM INFORMATION_SCHEMA.SYSTEM_TABLE_CONSTRAINTS tc\n"
        "  JOIN INFORMATION_SCHEMA.SYSTEM_CHECK_CONSTRAINTS cc\n"
        "    ON cc.constraint_schema = tc.constraint_schema AND cc.constraint_name = tc.constraint_name\n"
        "WHERE tc.constraint_type = 'CHECK'\n"
        "  AND tc.table_schema = ?\n"
        "  AND tc.table_name = ?"
    )


class HsqlSequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT sequence_name\n"
        "FROM INFORMATION_SCHEMA.SYSTEM_SEQUENCES\n"
        "WHERE sequence_schema = ?\n"
        "ORDER BY sequence_name"
    )

    definition_sql = (
        "SELECT sequence_name, minimum_value AS min_value, maximum_value AS max_value,\n"
        "       increment, start_with AS start_value, cycle_option AS cycle\n"
        "FROM INFORMATION_SCHEMA.SYSTEM_SEQUENCES\n"
        "WHERE sequence_schema = ?\n"
        "  AND sequence_name = ?"
    )


class HSQLDialect(DatabaseDialect):
    """Dialect for HSQLDB."""

    family = "hsql"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=HsqlConstraintReader(meta),
            sequence_reader=HsqlSequenceReader(meta),
        )
