"""
Pytest configuration and fixtures for schemaforge tests.
"""
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

import pytest

from schemaforge.config.settings import Settings
from schemaforge.database.connection import (
    ConnectionContext,
    COLUMN_COLUMNS,
    INDEX_INFO_COLUMNS,
    KEY_COLUMNS,
    PRIMARY_KEY_COLUMNS,
    PROCEDURE_COLUMNS,
    PRIVILEGE_COLUMNS,
    TABLE_COLUMNS,
)
from schemaforge.database.exceptions import ConnectivityError, StructuralOperationError
from schemaforge.database.metadata import MetadataFacade
from schemaforge.database.row_set import RowSet
from schemaforge.database.sql_types import SqlType
from schemaforge.database.sqlite_connection import SqliteConnectionContext
from schemaforge.utils.sql_helpers import like_to_regex


class FakeConnectionContext(ConnectionContext):
    """
    In-memory ConnectionContext with scripted catalog results.

    Tables, columns, keys and indexes are registered with the add_* helpers.
    Queries return the RowSet registered for the first fragment contained in
    the SQL. Every update, commit and rollback is recorded.
    """

    def __init__(
        self,
        product: str = "Generic DB",
        version: str = "1.0",
        auto_commit: bool = True,
        upper_case: bool = False,
        lower_case: bool = False,
        user: str = "tester",
        catalog: Optional[str] = None,
    ):
        self.product = product
        self.version = version
        self._auto_commit = auto_commit
        self.upper_case = upper_case
        self.lower_case = lower_case
        self.user = user
        self.catalog = catalog

        self.tables = RowSet(TABLE_COLUMNS)
        self.columns: Dict[str, RowSet] = {}
        self.primary_keys: Dict[str, RowSet] = {}
        self.imported_keys: Dict[str, RowSet] = {}
        self.exported_keys: Dict[str, RowSet] = {}
        self.index_info: Dict[str, RowSet] = {}
        self.privileges: Dict[str, RowSet] = {}
        self.procedures = RowSet(PROCEDURE_COLUMNS)
        self.table_types = ["TABLE", "VIEW"]
        self.queries: Dict[str, RowSet] = {}

        # Catalog call names that raise ConnectivityError
        self.failing_calls = set()
        self.update_error: Optional[str] = None

        self.executed: List[str] = []
        self.updates: List[str] = []
        self.commits = 0
        self.rollbacks = 0

    # ==================== Scripting helpers ====================

    def add_table(self, name: str, table_type: str = "TABLE", schema: Optional[str] = None, remarks: str = None):
        self.tables.add_row([None, schema, name, table_type, remarks])

    def add_column(
        self,
        table: str,
        name: str,
        type_name: str = "INTEGER",
        data_type: int = SqlType.INTEGER,
        size: int = 0,
        digits: int = 0,
        nullable: bool = True,
        default: Optional[str] = None,
        comment: Optional[str] = None,
        position: Optional[int] = None,
    ):
        rows = self.columns.setdefault(table, RowSet(COLUMN_COLUMNS))
        rows.add_row([
            None, None, table, name, data_type,
            type_name, size, None, digits, 10,
            1 if nullable else 0, comment, default, None, None,
            None, position if position is not None else rows.row_count + 1, "YES" if nullable else "NO",
        ])

    def set_primary_key(self, table: str, columns: Sequence[str], pk_name: Optional[str] = None):
        rows = RowSet(PRIMARY_KEY_COLUMNS)
        for seq, column in enumerate(columns, start=1):
            rows.add_row([None, None, table, column, seq, pk_name])
        self.primary_keys[table] = rows

    def add_foreign_key(
        self,
        table: str,
        fk_name: Optional[str],
        target: str,
        pairs: Sequence[tuple],
        update_rule: int = 3,
        delete_rule: int = 3,
    ):
        """Register a foreign key; pairs are (column, target column) in key order."""
        rows = self.imported_keys.setdefault(table, RowSet(KEY_COLUMNS))
        exported = self.exported_keys.setdefault(target, RowSet(KEY_COLUMNS))
        for seq, (column, target_column) in enumerate(pairs, start=1):
            values = [
                None, None, target, target_column,
                None, None, table, column,
                seq, update_rule, delete_rule, fk_name, None, 7,
            ]
            rows.add_row(values)
            exported.add_row(values)

    def add_index(
        self,
        table: str,
        name: str,
        columns: Sequence[str],
        unique: bool = False,
        descending: Sequence[str] = (),
        index_type: int = 3,
    ):
        rows = self.index_info.setdefault(table, RowSet(INDEX_INFO_COLUMNS))
        for position, column in enumerate(columns, start=1):
            rows.add_row([
                None, None, table, 0 if unique else 1, None,
                name, index_type, position, column,
                "D" if column in descending else "A", None, None, None,
            ])

    def add_grant(self, table: str, grantee: str, privilege: str, grantable: bool = False):
        rows = self.privileges.setdefault(table, RowSet(PRIVILEGE_COLUMNS))
        rows.add_row([None, None, table, "dba", grantee, privilege, "YES" if grantable else "NO"])

    def add_procedure(
        self,
        name: str,
        package: Optional[str] = None,
        schema: Optional[str] = None,
        procedure_type: int = 1,
    ):
        """Register a routine; package members carry the package name as catalog."""
        self.procedures.add_row([package, schema, name, 0, 0, 0, None, procedure_type])

    def _check(self, call: str):
        if call in self.failing_calls:
            raise ConnectivityError(f"{call} failed")

    # ==================== Product information ====================

    def product_name(self) -> str:
        self._check("product_name")
        return self.product

    def product_version(self) -> str:
        return self.version

    def user_name(self) -> Optional[str]:
        return self.user

    def current_catalog(self) -> Optional[str]:
        return self.catalog

    def stores_upper_case_identifiers(self) -> bool:
        return self.upper_case

    def stores_lower_case_identifiers(self) -> bool:
        return self.lower_case

    def stores_mixed_case_identifiers(self) -> bool:
        return not (self.upper_case or self.lower_case)

    # ==================== Catalog calls ====================

    def get_tables(self, catalog, schema, name_pattern, types) -> RowSet:
        self._check("get_tables")
        name_regex = like_to_regex(name_pattern)
        wanted = {t.upper() for t in types} if types else None
        result = RowSet(TABLE_COLUMNS)
        for row in self.tables:
            if not name_regex.match(row[2]):
                continue
            if schema and row[1] != schema:
                continue
            if wanted is not None and row[3].upper() not in wanted:
                continue
            result.add_row(row)
        return result

    def get_columns(self, catalog, schema, table, column_pattern="%") -> RowSet:
        self._check("get_columns")
        return self.columns.get(table, RowSet(COLUMN_COLUMNS))

    def get_primary_keys(self, catalog, schema, table) -> RowSet:
        self._check("get_primary_keys")
        return self.primary_keys.get(table, RowSet(PRIMARY_KEY_COLUMNS))

    def get_imported_keys(self, catalog, schema, table) -> RowSet:
        self._check("get_imported_keys")
        return self.imported_keys.get(table, RowSet(KEY_COLUMNS))

    def get_exported_keys(self, catalog, schema, table) -> RowSet:
        self._check("get_exported_keys")
        return self.exported_keys.get(table, RowSet(KEY_COLUMNS))

    def get_index_info(self, catalog, schema, table, unique_only=False) -> RowSet:
        self._check("get_index_info")
        return self.index_info.get(table, RowSet(INDEX_INFO_COLUMNS))

    def get_table_types(self) -> List[str]:
        self._check("get_table_types")
        return list(self.table_types)

    def get_table_privileges(self, catalog, schema, table) -> RowSet:
        return self.privileges.get(table, RowSet(PRIVILEGE_COLUMNS))

    def get_procedures(self, catalog, schema, name_pattern=None) -> RowSet:
        self._check("get_procedures")
        return self.procedures

    # ==================== SQL execution ====================

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> RowSet:
        self.executed.append(sql)
        self._check("execute_query")
        for fragment, rows in self.queries.items():
            if fragment in sql:
                return rows
        return RowSet(["VALUE"])

    def execute_update(self, sql: str, params: Sequence[Any] = ()) -> int:
        self.updates.append(sql)
        if self.update_error is not None:
            raise StructuralOperationError(self.update_error, sql)
        return 0

    # ==================== Transactions ====================

    @property
    def auto_commit(self) -> bool:
        return self._auto_commit

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def make_facade(connection: ConnectionContext, overrides: Optional[Dict[str, Any]] = None) -> MetadataFacade:
    """Facade over the packaged default settings plus the given overrides."""
    settings = Settings.load()
    if overrides:
        settings = settings.with_overrides(overrides)
    return MetadataFacade(connection, settings=settings)


@pytest.fixture
def fake_connection():
    """A generic database without any objects."""
    return FakeConnectionContext()


@pytest.fixture
def orders_connection():
    """A generic database with customers and orders tables."""
    conn = FakeConnectionContext()
    conn.add_table("customers")
    conn.add_column("customers", "id", nullable=False)
    conn.add_column("customers", "name", "VARCHAR", SqlType.VARCHAR, size=100)
    conn.set_primary_key("customers", ["id"], "pk_customers")
    conn.add_index("customers", "pk_customers", ["id"], unique=True)

    conn.add_table("orders")
    conn.add_column("orders", "id", nullable=False)
    conn.add_column("orders", "customer_id", nullable=False)
    conn.add_column("orders", "amount", "DECIMAL", SqlType.DECIMAL, size=10, digits=2, default="0")
    conn.set_primary_key("orders", ["id"], "pk_orders")
    conn.add_index("orders", "pk_orders", ["id"], unique=True)
    conn.add_index("orders", "idx_orders_customer", ["customer_id"])
    conn.add_foreign_key("orders", "fk_orders_customer", "customers", [("customer_id", "id")], delete_rule=0)
    return conn


@pytest.fixture
def sqlite_context():
    """An in-memory SQLite database, closed after the test."""
    conn = sqlite3.connect(":memory:")
    context = SqliteConnectionContext(conn)
    yield context
    conn.close()
