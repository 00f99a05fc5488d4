"""
DB2 Dialect - DB2 LUW metadata readers

DB2 product names vary per platform (DB2/LINUXX8664, DB2/NT, ...), so
settings for all of them live under the "db2" family.
"""

from .base import DatabaseDialect
from ..readers.bundle import ReaderBundle
from ..readers.generic import SqlConstraintReader, SqlSequenceReader, SqlSynonymReader

import logging
logger = logging.getLogger(__name__)


class Db2ConstraintReader(SqlConstraintReader):

    table_constraint_sql = (
        "SELECT constname, text\n"
        "FROM syscat.checks\n"
        "WHERE tabschema = ?\n"
        "  AND tabname = ?\n"
        "  AND type = 'C'"
    )


class Db2SequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT seqname\n"
        "FROM syscat.sequences\n"
        "WHERE seqschema = ?\n"
        "  AND seqtype = 'S'\n"
        "ORDER BY seqname"
    )

    definition_sql = (
        "SELECT seqname AS sequence_name, minvalue AS min_value, maxvalue AS max_value,\n"
        "       increment, start AS start_value, cycle\n"
        "FROM syscat.sequences\n"
        "WHERE seqschema = ?\n"
        "  AND seqname = ?"
    )


class Db2AliasReader(SqlSynonymReader):
    """DB2 calls synonyms aliases."""

    synonym_keyword = "ALIAS"

    list_sql = (
        "SELECT tabname\n"
        "FROM syscat.tables\n"
        "WHERE type = 'A'\n"
        "  AND tabschema = ?"
    )

    table_sql = (
        "SELECT base_tabschema, base_tabname\n"
        "FROM syscat.tables\n"
        "WHERE type = 'A'\n"
        "  AND tabschema = ?\n"
        "  AND tabname = ?"
    )


class DB2Dialect(DatabaseDialect):
    """Dialect for DB2."""

    family = "db2"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=Db2ConstraintReader(meta),
            sequence_reader=Db2SequenceReader(meta),
            synonym_reader=Db2AliasReader(meta),
        )
