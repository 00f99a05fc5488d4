"""
Base Capability Readers - Interfaces for dialect specific metadata retrieval

Each capability (constraints, indexes, procedures, sequences, synonyms,
schema info, error info) is a small interface. Generic implementations
built on the baseline catalog calls live in generic.py; dialect modules
override what their database does differently.

Readers never let a ConnectivityError reach the caller: failures are
logged and an empty result is returned. On dialects where a failed
statement aborts the transaction (PostgreSQL), the recovering() context
manager rolls back to a savepoint before the empty result is returned.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from ..exceptions import MetadataClosedError, MetadataError
from ..models import ColumnIdentifier, IndexColumn, IndexDefinition, ProcedureDefinition, TableIdentifier
from ..row_set import RowSet

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..connection import ConnectionContext
    from ..dialects.base import DialectProfile
    from ..metadata import MetadataFacade

_SAVEPOINT_NAME = "schemaforge_meta"


def _recover(connection: "ConnectionContext", savepoint: Optional[str]):
    """Make the connection usable again after a failed statement."""
    if savepoint:
        try:
            connection.rollback_to_savepoint(savepoint)
            return
        except MetadataError as e:
            logger.debug(f"Rollback to savepoint failed, rolling back transaction: {e}")
    try:
        connection.rollback()
    except MetadataError as e:
        logger.error(f"Could not roll back after failed metadata query: {e}")


@contextmanager
def recovering(connection: "ConnectionContext", profile: "DialectProfile", what: str):
    """
    Run metadata statements, logging failures instead of raising them.

    Usage:
        result = {}
        with recovering(self.connection, self.profile, "check constraints"):
            result = self._read_constraints(table)
        return result
    """
    needs_recovery = profile.rollback_after_error and not connection.auto_commit
    savepoint = None
    if needs_recovery:
        try:
            connection.set_savepoint(_SAVEPOINT_NAME)
            savepoint = _SAVEPOINT_NAME
        except MetadataError as e:
            logger.debug(f"Could not set savepoint: {e}")

    try:
        yield
    except MetadataClosedError:
        raise
    except MetadataError as e:
        logger.warning(f"Could not retrieve {what}: {e}")
        if needs_recovery:
            _recover(connection, savepoint)
    else:
        if savepoint:
            try:
                connection.release_savepoint(savepoint)
            except MetadataError as e:
                logger.debug(f"Could not release savepoint: {e}")


class MetadataReader:
    """Common base of all readers, bound to one MetadataFacade."""

    # False for generic readers of capabilities the dialect does not have
    supported: bool = True

    def __init__(self, meta: "MetadataFacade"):
        self.meta = meta

    @property
    def connection(self) -> "ConnectionContext":
        return self.meta.connection

    @property
    def profile(self) -> "DialectProfile":
        return self.meta.profile

    @property
    def settings(self):
        return self.meta.settings

    def _query(self, sql: str, params: Sequence[Any] = ()) -> RowSet:
        sql = self.meta.quirks.adjust_query(sql)
        logger.debug(f"Metadata query: {sql}")
        return self.connection.execute_query(sql, params)

    def _recovering(self, what: str):
        return recovering(self.connection, self.profile, what)

    def _schema_of(self, table: TableIdentifier) -> Optional[str]:
        """Raw schema of a table, falling back to the current schema."""
        return table.raw_schema or self.meta.get_current_schema()


# ==================== Constraints ====================

class ConstraintReader(MetadataReader, ABC):
    """Check and other column/table constraints not covered by PK/FK calls."""

    @abstractmethod
    def get_column_constraints(self, table: TableIdentifier) -> Dict[str, str]:
        """Map of column name to constraint clause (e.g. "CHECK (qty > 0)")."""
        pass

    @abstractmethod
    def get_table_constraints(self, table: TableIdentifier) -> Optional[str]:
        """Table level constraint clauses joined by "\\n   ,", or None."""
        pass


# ==================== Indexes ====================

class IndexReader(MetadataReader, ABC):
    """Index information and CREATE INDEX generation."""

    @abstractmethod
    def get_index_info(self, table: TableIdentifier) -> RowSet:
        """Raw index rows, one per indexed column."""
        pass

    def process_index_list(self, table: TableIdentifier, indexes: List[IndexDefinition]):
        """Hook to add dialect specific information to grouped indexes."""
        pass

    @abstractmethod
    def build_create_index_sql(
        self,
        table: TableIdentifier,
        index_name: str,
        unique: bool,
        columns: List[IndexColumn],
        index_type: Optional[str] = None,
        table_name_to_use: Optional[str] = None
    ) -> str:
        pass

    @abstractmethod
    def get_index_source(
        self,
        table: TableIdentifier,
        indexes: List[IndexDefinition],
        table_name_to_use: Optional[str] = None
    ) -> str:
        pass


# ==================== Procedures ====================

class ProcedureReader(MetadataReader, ABC):
    """Stored procedures, functions and packages."""

    # True if routines are grouped into packages (one definition per package)
    groups_routines: bool = False

    @abstractmethod
    def get_procedures(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None
    ) -> RowSet:
        """Rows with PROCEDURE_NAME, TYPE, CATALOG, SCHEMA, REMARKS, RESULT_TYPE."""
        pass

    @abstractmethod
    def get_procedure_columns(self, definition: ProcedureDefinition) -> RowSet:
        """Rows with COLUMN_NAME, TYPE, DATA_TYPE, SQL_TYPE, REMARKS."""
        pass

    @abstractmethod
    def read_procedure_source(self, definition: ProcedureDefinition):
        """Populate definition.source."""
        pass


# ==================== Sequences ====================

class SequenceReader(MetadataReader, ABC):

    @abstractmethod
    def get_sequence_list(self, schema: Optional[str]) -> List[str]:
        pass

    @abstractmethod
    def get_sequence_definition(self, schema: Optional[str], name: str) -> RowSet:
        pass

    @abstractmethod
    def get_sequence_source(self, schema: Optional[str], name: str) -> str:
        pass


# ==================== Synonyms ====================

class SynonymReader(MetadataReader, ABC):

    @abstractmethod
    def get_synonym_list(self, schema: Optional[str]) -> List[str]:
        pass

    @abstractmethod
    def get_synonym_table(self, owner: Optional[str], name: str) -> Optional[TableIdentifier]:
        pass

    @abstractmethod
    def get_synonym_source(self, owner: Optional[str], name: str) -> str:
        pass


# ==================== Schema and error info ====================

class SchemaInfoReader(MetadataReader, ABC):

    @abstractmethod
    def get_current_schema(self) -> Optional[str]:
        pass


class ErrorInfoReader(MetadataReader, ABC):
    """Compile errors of server side objects (views, procedures, packages)."""

    @abstractmethod
    def get_error_info(self, schema: Optional[str], object_name: str, object_type: str) -> str:
        pass


# ==================== Hooks ====================

class TableListHook(MetadataReader, ABC):
    """Post-processing of the table list (hidden rows, relabelled types)."""

    @abstractmethod
    def process_table_list(self, rows: RowSet, schema: Optional[str]):
        """Modify the NAME/TYPE/CATALOG/SCHEMA/REMARKS rows in place."""
        pass


class ColumnHook(MetadataReader, ABC):
    """Post-processing of a table definition."""

    @abstractmethod
    def process_columns(self, table: TableIdentifier, columns: List[ColumnIdentifier]):
        pass


class OutputReader(MetadataReader, ABC):
    """Server side message buffer (e.g. Oracle DBMS_OUTPUT)."""

    @abstractmethod
    def enable(self, limit: int = -1):
        pass

    @abstractmethod
    def disable(self):
        pass

    @abstractmethod
    def get_messages(self) -> str:
        pass

    def close(self):
        self.disable()
