"""
Reader Bundle - The capability readers wired for one connection
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from .base import (
    ColumnHook,
    ConstraintReader,
    ErrorInfoReader,
    IndexReader,
    OutputReader,
    ProcedureReader,
    SchemaInfoReader,
    SequenceReader,
    SynonymReader,
    TableListHook,
)

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..metadata import MetadataFacade


@dataclass
class ReaderBundle:
    """One reader per capability, plus optional dialect hooks."""
    constraint_reader: Optional[ConstraintReader] = None
    index_reader: Optional[IndexReader] = None
    procedure_reader: Optional[ProcedureReader] = None
    sequence_reader: Optional[SequenceReader] = None
    synonym_reader: Optional[SynonymReader] = None
    schema_info_reader: Optional[SchemaInfoReader] = None
    error_info_reader: Optional[ErrorInfoReader] = None
    table_list_hooks: List[TableListHook] = field(default_factory=list)
    column_hooks: List[ColumnHook] = field(default_factory=list)
    output_reader: Optional[OutputReader] = None

    def fill_defaults(self, meta: "MetadataFacade") -> "ReaderBundle":
        """Use the generic reader for every capability the dialect left empty."""
        from .generic import (
            GenericConstraintReader,
            GenericErrorInfoReader,
            GenericIndexReader,
            GenericProcedureReader,
            GenericSchemaInfoReader,
            GenericSequenceReader,
            GenericSynonymReader,
        )

        defaults = {
            "constraint_reader": GenericConstraintReader,
            "index_reader": GenericIndexReader,
            "procedure_reader": GenericProcedureReader,
            "sequence_reader": GenericSequenceReader,
            "synonym_reader": GenericSynonymReader,
            "schema_info_reader": GenericSchemaInfoReader,
            "error_info_reader": GenericErrorInfoReader,
        }
        for attribute, reader_class in defaults.items():
            if getattr(self, attribute) is None:
                logger.debug(
                    f"No {attribute.replace('_', ' ')} for {meta.profile.db_id}, using {reader_class.__name__}"
                )
                setattr(self, attribute, reader_class(meta))
        return self
