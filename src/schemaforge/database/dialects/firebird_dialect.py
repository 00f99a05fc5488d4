"""
Firebird Dialect - Firebird metadata readers

Firebird has no schemas; sequences are called generators.
"""

from typing import Any, Dict, Optional, Sequence

from .base import DatabaseDialect
from ..models import TableIdentifier
from ..readers.bundle import ReaderBundle
from ..readers.generic import SqlConstraintReader, SqlSequenceReader

import logging
logger = logging.getLogger(__name__)


class FirebirdConstraintReader(SqlConstraintReader):

    table_constraint_sql = (
        "SELECT TRIM(rc.rdb$constraint_name), trg.rdb$trigger_source\n"
        "FROM rdb$relation_constraints rc\n"
        "  JOIN rdb$check_constraints chk ON chk.rdb$constraint_name = rc.rdb$constraint_name\n"
        "  JOIN rdb$triggers trg ON trg.rdb$trigger_name = chk.rdb$trigger_name\n"
        "WHERE rc.rdb$relation_name = ?\n"
        "  AND rc.rdb$constraint_type = 'CHECK'\n"
        "  AND trg.rdb$trigger_type = 1"
    )

    def _params(self, table: TableIdentifier) -> Sequence[Any]:
        return (table.raw_name,)


class FirebirdSequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT TRIM(rdb$generator_name)\n"
        "FROM rdb$generators\n"
        "WHERE COALESCE(rdb$system_flag, 0) = 0\n"
        "ORDER BY 1"
    )

    definition_sql = (
        "SELECT TRIM(rdb$generator_name) AS sequence_name\n"
        "FROM rdb$generators\n"
        "WHERE rdb$generator_name = ?"
    )

    def _list_params(self, schema: Optional[str]) -> Sequence[Any]:
        return ()

    def _definition_params(self, schema: Optional[str], name: str) -> Sequence[Any]:
        return (name,)

    def get_sequence_source(self, schema: Optional[str], name: str) -> str:
        return super().get_sequence_source(None, name)

    def build_source(self, sequence_name: str, values: Dict[str, Any]) -> str:
        return f"CREATE GENERATOR {sequence_name}"


class FirebirdDialect(DatabaseDialect):
    """Dialect for Firebird."""

    family = "firebird"

    def normalize_product_name(self, product_name: str) -> str:
        # Drivers report names like "Firebird 2.5/Linux/..."
        return "Firebird"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=FirebirdConstraintReader(meta),
            sequence_reader=FirebirdSequenceReader(meta),
        )
