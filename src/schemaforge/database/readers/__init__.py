"""
Capability Readers - Dialect specific metadata retrieval

Usage:
    from schemaforge.database.readers import ReaderBundle, GenericIndexReader
"""

from .base import (
    ColumnHook,
    ConstraintReader,
    ErrorInfoReader,
    IndexReader,
    MetadataReader,
    OutputReader,
    ProcedureReader,
    SchemaInfoReader,
    SequenceReader,
    SynonymReader,
    TableListHook,
    recovering,
)
from .bundle import ReaderBundle
from .generic import (
    GenericConstraintReader,
    GenericErrorInfoReader,
    GenericIndexReader,
    GenericProcedureReader,
    GenericSchemaInfoReader,
    GenericSequenceReader,
    GenericSynonymReader,
    SqlConstraintReader,
    SqlSequenceReader,
    SqlSynonymReader,
)

__all__ = [
    # Interfaces
    "MetadataReader",
    "ConstraintReader",
    "IndexReader",
    "ProcedureReader",
    "SequenceReader",
    "SynonymReader",
    "SchemaInfoReader",
    "ErrorInfoReader",
    "TableListHook",
    "ColumnHook",
    "OutputReader",
    "recovering",

    # Bundle
    "ReaderBundle",

    # Generic implementations
    "GenericConstraintReader",
    "GenericIndexReader",
    "GenericProcedureReader",
    "GenericSequenceReader",
    "GenericSynonymReader",
    "GenericSchemaInfoReader",
    "GenericErrorInfoReader",
    "SqlConstraintReader",
    "SqlSequenceReader",
    "SqlSynonymReader",
]
