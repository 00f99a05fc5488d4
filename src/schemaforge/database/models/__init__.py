"""
Metadata Models - Dataclasses returned by the metadata facade

All models are re-exported here for convenience:
    from schemaforge.database.models import TableIdentifier, ColumnIdentifier, ...
"""

from .table_identifier import TableIdentifier
from .column_identifier import ColumnIdentifier
from .index_definition import IndexColumn, IndexDefinition
from .foreign_key import FkRule, ForeignKeyDefinition
from .procedure_definition import ProcedureDefinition, ProcedureType
from .object_name_filter import ObjectNameFilter

__all__ = [
    "TableIdentifier",
    "ColumnIdentifier",
    "IndexColumn",
    "IndexDefinition",
    "FkRule",
    "ForeignKeyDefinition",
    "ProcedureDefinition",
    "ProcedureType",
    "ObjectNameFilter",
]
