"""
ODBC Connection Context - Catalog calls through pyodbc

pyodbc exposes the ODBC catalog functions (SQLTables, SQLColumns,
SQLPrimaryKeys, SQLForeignKeys, SQLStatistics, SQLProcedures) as cursor
methods. Their result layouts match the JDBC names used by the engine,
only in lower case, which RowSet lookups ignore.
"""

from typing import Any, List, Optional, Sequence

import pyodbc

from .connection import (
    ConnectionContext,
    COLUMN_COLUMNS,
    INDEX_INFO_COLUMNS,
    KEY_COLUMNS,
    PRIMARY_KEY_COLUMNS,
    PROCEDURE_COLUMNS,
    PROCEDURE_PARAMETER_COLUMNS,
    TABLE_COLUMNS,
)
from .exceptions import ConnectivityError, StructuralOperationError
from .row_set import RowSet

import logging
logger = logging.getLogger(__name__)

# SQL_IDENTIFIER_CASE values
_SQL_IC_UPPER = 1
_SQL_IC_LOWER = 2
_SQL_IC_SENSITIVE = 3
_SQL_IC_MIXED = 4


class OdbcConnectionContext(ConnectionContext):
    """
    ConnectionContext for pyodbc connections.

    Usage:
        context = OdbcConnectionContext.open("DSN=warehouse;UID=scott;PWD=tiger")
        facade = MetadataFacade(context)
    """

    def __init__(self, connection: "pyodbc.Connection", owns_connection: bool = False):
        self.connection = connection
        self._owns_connection = owns_connection

    @classmethod
    def open(cls, connection_string: str, timeout: int = 10) -> "OdbcConnectionContext":
        try:
            conn = pyodbc.connect(connection_string, timeout=timeout)
        except pyodbc.Error as e:
            raise ConnectivityError(f"ODBC connection failed: {e}") from e
        return cls(conn, owns_connection=True)

    def _getinfo(self, info_type: int, default: Any = None) -> Any:
        try:
            value = self.connection.getinfo(info_type)
        except pyodbc.Error as e:
            logger.debug(f"getinfo({info_type}) failed: {e}")
            return default
        return default if value is None else value

    def _catalog_call(self, columns: Sequence[str], call_name: str, **kwargs) -> RowSet:
        """Run a pyodbc catalog function and copy its rows into a RowSet."""
        try:
            cursor = self.connection.cursor()
            try:
                rows = getattr(cursor, call_name)(**kwargs).fetchall()
            finally:
                cursor.close()
        except pyodbc.Error as e:
            raise ConnectivityError(f"{call_name} failed: {e}") from e
        result = RowSet(columns)
        for row in rows:
            result.add_row(list(row))
        return result

    # ==================== Product information ====================

    def product_name(self) -> str:
        return self._getinfo(pyodbc.SQL_DBMS_NAME, "")

    def product_version(self) -> str:
        return self._getinfo(pyodbc.SQL_DBMS_VER, "")

    def user_name(self) -> Optional[str]:
        return self._getinfo(pyodbc.SQL_USER_NAME)

    def current_catalog(self) -> Optional[str]:
        return self._getinfo(pyodbc.SQL_DATABASE_NAME)

    def schema_term(self) -> Optional[str]:
        return self._getinfo(pyodbc.SQL_SCHEMA_TERM)

    def catalog_term(self) -> Optional[str]:
        return self._getinfo(pyodbc.SQL_CATALOG_TERM)

    def identifier_quote_string(self) -> Optional[str]:
        return self._getinfo(pyodbc.SQL_IDENTIFIER_QUOTE_CHAR, '"')

    def sql_keywords(self) -> List[str]:
        keywords = self._getinfo(pyodbc.SQL_KEYWORDS, "")
        return [k.strip() for k in keywords.split(",") if k.strip()]

    def supports_catalogs(self) -> bool:
        return bool(self.catalog_term())

    def _identifier_case(self) -> int:
        return self._getinfo(pyodbc.SQL_IDENTIFIER_CASE, _SQL_IC_MIXED)

    def stores_upper_case_identifiers(self) -> bool:
        return self._identifier_case() == _SQL_IC_UPPER

    def stores_lower_case_identifiers(self) -> bool:
        return self._identifier_case() == _SQL_IC_LOWER

    def stores_mixed_case_identifiers(self) -> bool:
        return self._identifier_case() in (_SQL_IC_MIXED, _SQL_IC_SENSITIVE)

    # ==================== Catalog calls ====================

    def get_tables(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str],
        types: Optional[Sequence[str]]
    ) -> RowSet:
        table_type = ",".join(types) if types else None
        return self._catalog_call(
            TABLE_COLUMNS, "tables",
            table=name_pattern, catalog=catalog, schema=schema, tableType=table_type,
        )

    def get_columns(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        column_pattern: str = "%"
    ) -> RowSet:
        return self._catalog_call(
            COLUMN_COLUMNS, "columns",
            table=table, catalog=catalog, schema=schema, column=column_pattern,
        )

    def get_primary_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        return self._catalog_call(
            PRIMARY_KEY_COLUMNS, "primaryKeys", table=table, catalog=catalog, schema=schema
        )

    def get_imported_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        return self._catalog_call(
            KEY_COLUMNS, "foreignKeys",
            foreignTable=table, foreignCatalog=catalog, foreignSchema=schema,
        )

    def get_exported_keys(self, catalog: Optional[str], schema: Optional[str], table: str) -> RowSet:
        return self._catalog_call(
            KEY_COLUMNS, "foreignKeys", table=table, catalog=catalog, schema=schema
        )

    def get_index_info(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        table: str,
        unique_only: bool = False
    ) -> RowSet:
        result = self._catalog_call(
            INDEX_INFO_COLUMNS, "statistics",
            table=table, catalog=catalog, schema=schema, unique=unique_only, quick=True,
        )
        # SQLStatistics reports table statistics as a row without an index name
        for i in range(result.row_count - 1, -1, -1):
            if result.get_value(i, "INDEX_NAME") is None:
                result.delete_row(i)
        return result

    def get_table_types(self) -> List[str]:
        rows = self._catalog_call(TABLE_COLUMNS, "tables", tableType="%")
        return [t for t in rows.column_values("TABLE_TYPE") if t]

    def get_schemas(self) -> List[str]:
        rows = self._catalog_call(TABLE_COLUMNS, "tables", schema="%")
        return sorted({s for s in rows.column_values("TABLE_SCHEM") if s})

    def get_catalogs(self) -> List[str]:
        rows = self._catalog_call(TABLE_COLUMNS, "tables", catalog="%")
        return sorted({c for c in rows.column_values("TABLE_CAT") if c})

    def get_procedures(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None
    ) -> RowSet:
        return self._catalog_call(
            PROCEDURE_COLUMNS, "procedures", procedure=name_pattern, catalog=catalog, schema=schema
        )

    def get_procedure_columns(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        procedure: str
    ) -> RowSet:
        return self._catalog_call(
            PROCEDURE_PARAMETER_COLUMNS, "procedureColumns",
            procedure=procedure, catalog=catalog, schema=schema,
        )

    # ==================== SQL execution ====================

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> RowSet:
        try:
            cursor = self.connection.cursor()
            try:
                cursor.execute(sql, *params)
                columns = [d[0] for d in cursor.description] if cursor.description else []
                rows = [list(r) for r in cursor.fetchall()] if cursor.description else []
            finally:
                cursor.close()
        except pyodbc.Error as e:
            raise ConnectivityError(str(e), sql) from e
        return RowSet(columns, rows)

    def execute_update(self, sql: str, params: Sequence[Any] = ()) -> int:
        try:
            cursor = self.connection.cursor()
            try:
                cursor.execute(sql, *params)
                return cursor.rowcount
            finally:
                cursor.close()
        except pyodbc.Error as e:
            raise StructuralOperationError(str(e), sql) from e

    # ==================== Transactions ====================

    @property
    def auto_commit(self) -> bool:
        return bool(self.connection.autocommit)

    def commit(self):
        try:
            self.connection.commit()
        except pyodbc.Error as e:
            raise ConnectivityError(f"Commit failed: {e}") from e

    def rollback(self):
        try:
            self.connection.rollback()
        except pyodbc.Error as e:
            raise ConnectivityError(f"Rollback failed: {e}") from e

    def close(self):
        if self._owns_connection:
            self.connection.close()
            self._owns_connection = False
