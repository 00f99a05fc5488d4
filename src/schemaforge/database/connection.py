"""
Connection Context - Minimal session abstraction used by the metadata engine

A ConnectionContext wraps one live database session. It exposes the
baseline catalog calls every driver offers (tables, columns, keys, indexes,
...) as RowSets with the standard JDBC/ODBC result column names, plus
query/update execution and transaction control.

Implementations translate driver exceptions into ConnectivityError
(queries and catalog calls) and StructuralOperationError (updates).
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from .exceptions import StructuralOperationError, UnsupportedCapabilityError
from .row_set import RowSet

import logging
logger = logging.getLogger(__name__)

# Result column layouts of the baseline catalog calls
TABLE_COLUMNS = ("TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "TABLE_TYPE", "REMARKS")

COLUMN_COLUMNS = (
    "TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "COLUMN_NAME", "DATA_TYPE",
    "TYPE_NAME", "COLUMN_SIZE", "BUFFER_LENGTH", "DECIMAL_DIGITS", "NUM_PREC_RADIX",
    "NULLABLE", "REMARKS", "COLUMN_DEF", "SQL_DATA_TYPE", "SQL_DATETIME_SUB",
    "CHAR_OCTET_LENGTH", "ORDINAL_POSITION", "IS_NULLABLE",
)

PRIMARY_KEY_COLUMNS = ("TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "COLUMN_NAME", "KEY_SEQ", "PK_NAME")

KEY_COLUMNS = (
    "PKTABLE_CAT", "PKTABLE_SCHEM", "PKTABLE_NAME", "PKCOLUMN_NAME",
    "FKTABLE_CAT", "FKTABLE_SCHEM", "FKTABLE_NAME", "FKCOLUMN_NAME",
    "KEY_SEQ", "UPDATE_RULE", "DELETE_RULE", "FK_NAME", "PK_NAME", "DEFERRABILITY",
)

INDEX_INFO_COLUMNS = (
    "TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "NON_UNIQUE", "INDEX_QUALIFIER",
    "INDEX_NAME", "TYPE", "ORDINAL_POSITION", "COLUMN_NAME", "ASC_OR_DESC",
    "CARDINALITY", "PAGES", "FILTER_CONDITION",
)

PRIVILEGE_COLUMNS = ("TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "GRANTOR", "GRANTEE", "PRIVILEGE", "IS_GRANTABLE")

PROCEDURE_COLUMNS = (
    "PROCEDURE_CAT", "PROCEDURE_SCHEM", "PROCEDURE_NAME", "NUM_INPUT_PARAMS",
    "NUM_OUTPUT_PARAMS", "NUM_RESULT_SETS", "REMARKS", "PROCEDURE_TYPE",
)

PROCEDURE_PARAMETER_COLUMNS = (
    "PROCEDURE_CAT", "PROCEDURE_SCHEM", "PROCEDURE_NAME", "COLUMN_NAME", "COLUMN_TYPE",
    "DATA_TYPE", "TYPE_NAME", "COLUMN_SIZE", "BUFFER_LENGTH", "DECIMAL_DIGITS",
    "NUM_PREC_RADIX", "NULLABLE", "REMARKS",
)


class ConnectionContext(ABC):
    """
    Abstract base class for a live database session.

    Usage:
        context = SqliteConnectionContext.open(":memory:")
        rows = context.get_tables(None, None, "%", ["TABLE"])
        for i in range(rows.row_count):
            print(rows.get_string(i, "TABLE_NAME"))
    """

    # ==================== Product information ====================

    @abstractmethod
    def product_name(self) -> str:
        """Database product name as reported by the driver."""
        pass

    @abstractmethod
    def product_version(self) -> str:
        pass

    def user_name(self) -> Optional[str]:
        return None

    def current_catalog(self) -> Optional[str]:
        return None

    def set_current_catalog(self, catalog: str):
        raise UnsupportedCapabilityError("Changing the current catalog is not supported")

    def schema_term(self) -> Optional[str]:
        return None

    def catalog_term(self) -> Optional[str]:
        return None

    def identifier_quote_string(self) -> Optional[str]:
        return '"'

    def sql_keywords(self) -> List[str]:
        """Additional keywords reported by the driver."""
        return []

    def supports_catalogs(self) -> bool:
        return True

    def stores_upper_case_identifiers(self) -> bool:
        return False

    def stores_lower_case_identifiers(self) -> bool:
        return False

    def stores_mixed_case_identifiers(self) -> bool:
        return False

    # ==================== Catalog calls ====================

    @abstractmethod
    def get_tables(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str],
        types: Optional[Sequence[str]]
    ) -> RowSet:
        """List tables; result columns follow TABLE_COLUMNS."""
        pass

    @abstractmethod
    def get_columns(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        column_pattern: str = "%"
    ) -> RowSet:
        """List columns; result columns follow COLUMN_COLUMNS."""
        pass

    @abstractmethod
    def get_primary_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        pass

    @abstractmethod
    def get_imported_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        """Foreign keys defined on the table (KEY_COLUMNS)."""
        pass

    @abstractmethod
    def get_exported_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        """Foreign keys of other tables referencing the table (KEY_COLUMNS)."""
        pass

    @abstractmethod
    def get_index_info(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        unique_only: bool = False
    ) -> RowSet:
        """One row per indexed column (INDEX_INFO_COLUMNS)."""
        pass

    def get_table_types(self) -> List[str]:
        return ["TABLE", "VIEW"]

    def get_schemas(self) -> List[str]:
        return []

    def get_catalogs(self) -> List[str]:
        return []

    def get_table_privileges(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        return RowSet(PRIVILEGE_COLUMNS)

    def get_procedures(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None
    ) -> RowSet:
        return RowSet(PROCEDURE_COLUMNS)

    def get_procedure_columns(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        procedure: str
    ) -> RowSet:
        return RowSet(PROCEDURE_PARAMETER_COLUMNS)

    # ==================== SQL execution ====================

    @abstractmethod
    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> RowSet:
        """Run a query and return all rows. Raises ConnectivityError."""
        pass

    @abstractmethod
    def execute_update(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a statement and return the update count. Raises StructuralOperationError."""
        pass

    def call_procedure(self, name: str, args: Sequence[Any]) -> List[Any]:
        """Call a procedure with output parameters and return their values."""
        raise UnsupportedCapabilityError(f"Calling procedures with output parameters is not supported: {name}")

    # ==================== Transactions ====================

    @property
    def auto_commit(self) -> bool:
        return True

    @abstractmethod
    def commit(self):
        pass

    @abstractmethod
    def rollback(self):
        pass

    def set_savepoint(self, name: str):
        self.execute_update(f"SAVEPOINT {name}")

    def rollback_to_savepoint(self, name: str):
        self.execute_update(f"ROLLBACK TO SAVEPOINT {name}")

    def release_savepoint(self, name: str):
        try:
            self.execute_update(f"RELEASE SAVEPOINT {name}")
        except StructuralOperationError as e:
            # Not every database knows RELEASE SAVEPOINT
            logger.debug(f"Could not release savepoint {name}: {e}")

    def close(self):
        pass
