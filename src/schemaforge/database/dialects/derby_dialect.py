"""
Derby Dialect - Apache Derby and Cloudscape metadata readers
"""

from .base import DatabaseDialect
from ..readers.bundle import ReaderBundle
from ..readers.generic import SqlConstraintReader, SqlSequenceReader

import logging
logger = logging.getLogger(__name__)


class DerbyConstraintReader(SqlConstraintReader):

    table_constraint_sql = (
        "SELECT c.constraintname, ck.checkdefinition\n"
        "FROM sys.sysconstraints c\n"
        "  JOIN sys.syschecks ck ON ck.constraintid = c.constraintid\n"
        "  JOIN sys.systables t ON t.tableid = c.tableid\n"
        "  JOIN sys.sysschemas s ON s.schemaid = t.schemaid\n"
        "WHERE s.schemaname = ?\n"
        "  AND t.tablename = ?"
    )


class DerbySequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT sq.sequencename\n"
        "FROM sys.syssequences sq\n"
        "  JOIN sys.sysschemas s ON s.schemaid = sq.schemaid\n"
        "WHERE s.schemaname = ?\n"
        "ORDER BY sq.sequencename"
    )

    definition_sql = (
        "SELECT sq.sequencename AS sequence_name, sq.minimumvalue AS min_value,\n"
        "       sq.maximumvalue AS max_value, sq.increment, sq.startvalue AS start_value, sq.cycleoption AS cycle\n"
        "FROM sys.syssequences sq\n"
        "  JOIN sys.sysschemas s ON s.schemaid = sq.schemaid\n"
        "WHERE s.schemaname = ?\n"
        "  AND sq.sequencename = ?"
    )


class DerbyDialect(DatabaseDialect):
    """Dialect for Derby (and its predecessor Cloudscape)."""

    family = "derby"

    def create_readers(self, meta) -> ReaderBundle:
        readers = ReaderBundle(constraint_reader=DerbyConstraintReader(meta))
        # Sequences were added in 10.6
        if meta.profile.version_at_least(10, 6):
            readers.sequence_reader = DerbySequenceReader(meta)
        return readers
