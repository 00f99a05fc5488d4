"""
Informix Dialect - Informix metadata readers
"""

from .base import DatabaseDialect
from ..readers.bundle import ReaderBundle
from ..readers.generic import SqlSynonymReader

import logging
logger = logging.getLogger(__name__)


class InformixSynonymReader(SqlSynonymReader):

    list_sql = (
        "SELECT t.tabname\n"
        "FROM systables t\n"
        "WHERE t.tabtype = 'S'\n"
        "  AND t.owner = ?"
    )

    table_sql = (
        "SELECT b.owner, b.tabname\n"
        "FROM systables t\n"
        "  JOIN syssyntable s ON s.tabid = t.tabid\n"
        "  JOIN systables b ON b.tabid = s.btabid\n"
        "WHERE t.owner = ?\n"
        "  AND t.tabname = ?"
    )


class InformixDialect(DatabaseDialect):
    """Dialect for Informix."""

    family = "informix"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(synonym_reader=InformixSynonymReader(meta))
