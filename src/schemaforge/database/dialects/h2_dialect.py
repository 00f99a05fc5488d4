"""
H2 Dialect - H2 Database metadata readers
"""

from .base import DatabaseDialect
from ..readers.bundle import ReaderBundle
from ..readers.generic import SqlConstraintReader, SqlSequenceReader

import logging
logger = logging.getLogger(__name__)


class H2ConstraintReader(SqlConstraintReader):

    table_constraint_sql = (
        "SELECT constraint_name, check_expression\n"
        "FROM information_schema.constraints\n"
        "WHERE constraint_type = 'CHECK'\n"
        "  AND table_schema = ?\n"
        "  AND table_name = ?"
    )


class H2SequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT sequence_name\n"
        "FROM information_schema.sequences\n"
        "WHERE sequence_schema = ?\n"
        "ORDER BY sequence_name"
    )

    definition_sql = (
        "SELECT sequence_name, min_value, max_value, increment, current_value AS start_value, is_cycle AS cycle\n"
        "FROM information_schema.sequences\n"
        "WHERE sequence_schema = ?\n"
        "  AND sequence_name = ?"
    )


class H2Dialect(DatabaseDialect):
    """Dialect for H2."""

    family = "h2"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=H2ConstraintReader(meta),
            sequence_reader=H2SequenceReader(meta),
        )
