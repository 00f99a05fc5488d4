"""
Integration tests against an in-memory SQLite database.
"""
import sqlite3

import pytest

from schemaforge.database.exceptions import StructuralOperationError
from schemaforge.database.metadata import MetadataFacade
from schemaforge.database.models import TableIdentifier
from schemaforge.main import main

SCHEMA = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY,
    name VARCHAR(100) NOT NULL,
    UNIQUE (name)
);
CREATE TABLE orders (
    id INTEGER PRIMARY KEY,
    customer_id INTEGER NOT NULL REFERENCES customers (id) ON DELETE CASCADE,
    amount NUMERIC(10,2) DEFAULT 0,
    CONSTRAINT chk_amount CHECK (amount >= 0)
);
CREATE INDEX idx_orders_customer ON orders (customer_id);
CREATE VIEW v_orders AS SELECT id, amount FROM orders;
"""

ORDERS = TableIdentifier("orders")


@pytest.fixture
def meta(sqlite_context):
    sqlite_context.connection.executescript(SCHEMA)
    facade = MetadataFacade(sqlite_context)
    yield facade
    facade.close()


class TestSqliteCatalog:
    """Test catalog information read from sqlite_master and PRAGMAs."""

    def test_dialect(self, meta):
        assert meta.db_id == "sqlite"
        assert meta.profile.inline_constraints

    def test_tables_and_views(self, meta):
        rows = meta.get_tables(types=["TABLE", "VIEW"])
        found = {(rows.get_string(i, "NAME"), rows.get_string(i, "TYPE")) for i in range(rows.row_count)}
        assert found == {("customers", "TABLE"), ("orders", "TABLE"), ("v_orders", "VIEW")}

    def test_name_pattern(self, meta):
        names = [t.raw_name for t in meta.get_table_list(name_pattern="cust*", types=["TABLE"])]
        assert names == ["customers"]

    def test_table_definition(self, meta):
        columns = meta.get_table_definition(ORDERS)
        assert [c.name for c in columns] == ["id", "customer_id", "amount"]
        assert [c.position for c in columns] == [1, 2, 3]
        assert columns[0].is_pk
        assert not columns[1].nullable
        assert columns[2].dbms_type == "NUMERIC(10,2)"
        assert columns[2].default_value == "0"

    def test_foreign_keys(self, meta):
        rows = meta.get_foreign_keys(ORDERS)
        assert rows.row_count == 1
        assert rows.get_string(0, "FK_NAME") == "orders_fk_0"
        assert rows.get_string(0, "REFERENCES") == "customers.id"
        assert rows.get_string(0, "DELETE_RULE") == "CASCADE"

    def test_referenced_by(self, meta):
        rows = meta.get_referenced_by(TableIdentifier("customers"))
        assert rows.row_count == 1
        assert rows.get_string(0, "COLUMN") == "id"

    def test_indexes(self, meta):
        names = [index.name for index in meta.get_table_index_list(ORDERS)]
        assert names == ["idx_orders_customer"]

    def test_table_exists(self, meta):
        assert meta.table_exists(ORDERS)
        assert not meta.table_exists(TableIdentifier("missing"))


class TestSqliteSource:
    """Test generated scripts."""

    def test_table_source(self, meta):
        """Test that keys and checks are inline and no COMMIT is added."""
        source = meta.get_table_source(ORDERS)
        assert source.startswith("CREATE TABLE orders\n(\n")
        assert "   ,CONSTRAINT chk_amount CHECK (amount >= 0)\n" in source
        assert "   ,PRIMARY KEY (id)\n" in source
        assert "FOREIGN KEY (customer_id) REFERENCES customers (id)" in source
        assert "ON DELETE CASCADE" in source
        assert "orders_fk_0" not in source
        assert "ALTER TABLE" not in source
        assert "CREATE INDEX idx_orders_customer ON orders (customer_id);" in source
        assert "COMMIT" not in source

    def test_column_checks_appear_once(self, meta, sqlite_context):
        """Test that checks declared on a column are written once, as table constraints."""
        sqlite_context.connection.execute(
            "CREATE TABLE stock (id INTEGER PRIMARY KEY, qty INTEGER NOT NULL CHECK (qty > 0), "
            "note TEXT CHECK (length(note) < 200))"
        )
        source = meta.get_table_source(TableIdentifier("stock"))
        assert source.count("CHECK (qty > 0)") == 1
        assert source.count("CHECK (length(note) < 200)") == 1
        assert "   ,CHECK (qty > 0)\n" in source
        column_lines = [line for line in source.split("\n") if line.startswith(("   qty", "   note"))]
        assert len(column_lines) == 2
        assert not any("CHECK" in line for line in column_lines)

    def test_implicit_unique_index_is_skipped(self, meta):
        source = meta.get_table_source(TableIdentifier("customers"))
        assert "sqlite_autoindex" not in source
        assert "CREATE" in source

    def test_view_source_is_used_verbatim(self, meta):
        view = TableIdentifier("v_orders", object_type="VIEW")
        assert meta.get_view_source(view) == "CREATE VIEW v_orders AS SELECT id, amount FROM orders"
        assert meta.get_extended_view_source(view) == "CREATE VIEW v_orders AS SELECT id, amount FROM orders;\n"

    def test_view_source_with_drop(self, meta):
        view = TableIdentifier("v_orders", object_type="VIEW")
        source = meta.get_extended_view_source(view, include_drop=True)
        assert source.startswith("DROP VIEW v_orders;\n\nCREATE VIEW v_orders")


class TestSqliteDrop:
    """Test dropping tables."""

    def test_drop_table(self, meta, sqlite_context):
        assert not sqlite_context.auto_commit
        meta.drop_table(ORDERS)
        assert not meta.table_exists(ORDERS)

    def test_drop_missing_table(self, meta):
        with pytest.raises(StructuralOperationError) as excinfo:
            meta.drop_table(TableIdentifier("missing"))
        assert excinfo.value.sql == "DROP TABLE missing"


class TestCommandLine:
    """Test the schemaforge command against a database file."""

    @pytest.fixture
    def database(self, tmp_path):
        path = tmp_path / "shop.db"
        conn = sqlite3.connect(path)
        conn.executescript(SCHEMA)
        conn.commit()
        conn.close()
        return str(path)

    def test_tables(self, database, capsys):
        assert main(["--sqlite", database, "tables", "--types", "TABLE"]) == 0
        out = capsys.readouterr().out
        assert "customers" in out
        assert "orders" in out
        assert "v_orders" not in out

    def test_source(self, database, capsys):
        assert main(["--sqlite", database, "source", "orders", "--drop"]) == 0
        assert capsys.readouterr().out.startswith("DROP TABLE orders;")

    def test_missing_table(self, database, capsys):
        assert main(["--sqlite", database, "columns", "missing"]) == 1
        assert "missing" in capsys.readouterr().out
