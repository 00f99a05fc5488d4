"""
Ingres Dialect - Ingres metadata readers
"""

from .base import DatabaseDialect
from ..readers.bundle import ReaderBundle
from ..readers.generic import SqlSequenceReader, SqlSynonymReader

import logging
logger = logging.getLogger(__name__)


class IngresSequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT seq_name\n"
        "FROM iisequences\n"
        "WHERE seq_owner = ?"
    )

    definition_sql = (
        "SELECT seq_name AS sequence_name, min_value, max_value, increment_value AS increment,\n"
        "       start_value, cycle_flag AS cycle\n"
        "FROM iisequences\n"
        "WHERE seq_owner = ?\n"
        "  AND seq_name = ?"
    )


class IngresSynonymReader(SqlSynonymReader):

    list_sql = (
        "SELECT synonym_name\n"
        "FROM iisynonyms\n"
        "WHERE synonym_owner = ?"
    )

    table_sql = (
        "SELECT table_owner, table_name\n"
        "FROM iisynonyms\n"
        "WHERE synonym_owner = ?\n"
        "  AND synonym_name = ?"
    )


class IngresDialect(DatabaseDialect):
    """Dialect for Ingres."""

    family = "ingres"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            sequence_reader=IngresSequenceReader(meta),
            synonym_reader=IngresSynonymReader(meta),
        )
