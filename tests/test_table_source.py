"""
Unit tests for DDLSynthesizer.
Tests CREATE TABLE scripts, key placement, foreign key statements and
trailers.
"""
import pytest

from schemaforge.database.models import TableIdentifier
from schemaforge.database.sql_types import SqlType

from conftest import FakeConnectionContext, make_facade

ORDERS = TableIdentifier("orders")


class TestCreateTable:
    """Test the CREATE TABLE statement."""

    def test_separate_primary_key(self, orders_connection):
        """Test that the PK is an ALTER TABLE statement when constraints are not inline."""
        meta = make_facade(orders_connection)
        source = meta.get_table_source(ORDERS)
        assert source.startswith("CREATE TABLE orders\n(\n")
        assert "ALTER TABLE orders\n  ADD CONSTRAINT pk_orders\n  PRIMARY KEY (id);" in source
        assert source.count("PRIMARY KEY") == 1

    def test_inline_primary_key(self, orders_connection):
        """Test that inline dialects get exactly one PRIMARY KEY clause in the body."""
        meta = make_facade(orders_connection, {"db.generic_db.inline_constraints": True})
        source = meta.get_table_source(ORDERS)
        assert "   ,PRIMARY KEY (id)\n" in source
        assert source.count("PRIMARY KEY") == 1
        assert "ADD CONSTRAINT pk_orders" not in source
        body = source[:source.index(");")]
        assert "PRIMARY KEY (id)" in body

    def test_inline_foreign_keys(self, orders_connection):
        meta = make_facade(orders_connection, {"db.generic_db.inline_constraints": True})
        source = meta.get_table_source(ORDERS)
        assert (
            "   ,CONSTRAINT fk_orders_customer FOREIGN KEY (customer_id) REFERENCES customers (id)"
            " ON UPDATE NO ACTION ON DELETE CASCADE\n"
        ) in source
        assert "ALTER TABLE" not in source

    def test_columns_are_aligned(self, orders_connection):
        meta = make_facade(orders_connection)
        lines = meta.get_table_source(ORDERS).split("\n")
        assert lines[2].startswith("   id ")
        assert lines[2].index("INTEGER") == lines[3].index("INTEGER") == lines[4].index("DECIMAL")
        assert lines[2].endswith("NOT NULL,")

    def test_default_before_null(self, orders_connection):
        meta = make_facade(orders_connection)
        assert "DECIMAL(10,2)  DEFAULT 0 NULL\n" in meta.get_table_source(ORDERS)

    def test_default_after_null(self, orders_connection):
        meta = make_facade(orders_connection, {"db.generic_db.default_before_null": False})
        assert "DECIMAL(10,2)  NULL DEFAULT 0\n" in meta.get_table_source(ORDERS)

    def test_null_keyword_not_required(self, orders_connection):
        meta = make_facade(orders_connection, {"db.generic_db.null_keyword_required": False})
        source = meta.get_table_source(ORDERS)
        assert " NULL\n" not in source
        assert "DEFAULT 0\n" in source

    def test_indexes(self, orders_connection):
        """Test that the PK index is left out and the other indexes are created."""
        meta = make_facade(orders_connection)
        source = meta.get_table_source(ORDERS)
        assert "CREATE INDEX idx_orders_customer ON orders (customer_id);" in source
        assert "CREATE UNIQUE INDEX pk_orders" not in source

    def test_include_drop(self, orders_connection):
        meta = make_facade(orders_connection)
        source = meta.get_table_source(ORDERS, include_drop=True)
        assert source.startswith("DROP TABLE orders;\n\nCREATE TABLE orders\n(")

    def test_without_foreign_keys(self, orders_connection):
        meta = make_facade(orders_connection)
        assert "FOREIGN KEY" not in meta.get_table_source(ORDERS, include_fk=False)

    def test_other_table_name(self, orders_connection):
        meta = make_facade(orders_connection)
        source = meta.ddl.generate_table_source(ORDERS, table_name_to_use="orders_copy")
        assert source.startswith("CREATE TABLE orders_copy\n")
        assert "ALTER TABLE orders_copy\n  ADD CONSTRAINT pk_orders" in source
        assert "CREATE INDEX idx_orders_customer ON orders_copy (customer_id);" in source

    def test_crlf_line_endings(self, orders_connection):
        meta = make_facade(orders_connection, {"ddl.line_ending": "crlf"})
        assert meta.get_table_source(ORDERS).startswith("CREATE TABLE orders\r\n(\r\n")

    def test_table_without_columns(self, orders_connection):
        meta = make_facade(orders_connection)
        assert meta.get_table_source(TableIdentifier("missing")) == ""


class TestCommitTrailer:
    """Test the COMMIT; trailer."""

    def test_trailer_when_commit_needed(self, orders_connection):
        meta = make_facade(orders_connection, {"db.generic_db.ddl_needs_commit": True})
        assert meta.get_table_source(ORDERS).endswith("\nCOMMIT;\n")

    def test_no_trailer_otherwise(self, orders_connection):
        meta = make_facade(orders_connection)
        assert "COMMIT" not in meta.get_table_source(ORDERS)


class TestPrimaryKeySource:
    """Test get_pk_source naming rules."""

    def test_named(self, fake_connection):
        meta = make_facade(fake_connection)
        sql = meta.ddl.get_pk_source("orders", ["id", "line_no"], "pk_orders")
        assert sql == "ALTER TABLE orders\n  ADD CONSTRAINT pk_orders\n  PRIMARY KEY (id, line_no);"

    def test_unnamed(self, fake_connection):
        """Test that the CONSTRAINT clause is dropped without a name."""
        meta = make_facade(fake_connection)
        sql = meta.ddl.get_pk_source("orders", ["id"], None)
        assert "CONSTRAINT" not in sql
        assert sql.endswith("PRIMARY KEY (id);")

    def test_system_name_is_dropped(self, fake_connection):
        meta = make_facade(fake_connection, {"db.generic_db.system_constraint_names": "^SYS_"})
        assert "SYS_C0042" not in meta.ddl.get_pk_source("orders", ["id"], "SYS_C0042")

    def test_generated_name(self, fake_connection):
        meta = make_facade(fake_connection, {"ddl.auto_generate_pk_name": True})
        sql = meta.ddl.get_pk_source("sales.orders", ["id"], None)
        assert "ADD CONSTRAINT pk_orders\n" in sql

    def test_no_columns(self, fake_connection):
        assert make_facade(fake_connection).ddl.get_pk_source("orders", [], "pk") == ""


class TestForeignKeySource:
    """Test foreign key statements."""

    @pytest.fixture
    def shipments_connection(self):
        conn = FakeConnectionContext()
        conn.add_column("shipments", "order_id", nullable=False)
        conn.add_column("shipments", "line_no", nullable=False)
        conn.add_foreign_key(
            "shipments", "fk_shipment_line", "order_lines",
            [("order_id", "order_id"), ("line_no", "line_no")],
        )
        return conn

    def test_multi_column_key_is_one_statement(self, shipments_connection):
        """Test that two rows of one constraint produce one ALTER TABLE."""
        meta = make_facade(shipments_connection)
        table = TableIdentifier("shipments")
        rows = meta.get_foreign_keys(table)
        assert rows.row_count == 2

        sql = meta.ddl.get_fk_source(table, rows)
        assert sql.count("ALTER TABLE") == 1
        assert "ADD CONSTRAINT fk_shipment_line FOREIGN KEY (order_id, line_no)" in sql
        assert "REFERENCES order_lines (order_id, line_no)" in sql
        assert sql.endswith(";\n\n")

    def test_columns_follow_key_sequence(self, shipments_connection):
        """Test that column order comes from KEY_SEQ, not row order."""
        shipments_connection.imported_keys["shipments"].sort_by("FKCOLUMN_NAME")
        meta = make_facade(shipments_connection)
        sql = meta.ddl.get_fk_source(TableIdentifier("shipments"), meta.get_foreign_keys(TableIdentifier("shipments")))
        assert "FOREIGN KEY (order_id, line_no)" in sql

    def test_definitions_are_accepted(self, shipments_connection):
        meta = make_facade(shipments_connection)
        table = TableIdentifier("shipments")
        sql = meta.ddl.get_fk_source(table, meta.get_foreign_key_definitions(table))
        assert sql.count("ALTER TABLE shipments") == 1

    def test_restrict_on_delete_is_omitted(self):
        """Test that ON DELETE RESTRICT disappears where it is not supported."""
        conn = FakeConnectionContext()
        conn.add_foreign_key("orders", "fk_orders_customer", "customers", [("customer_id", "id")],
                             update_rule=0, delete_rule=1)
        meta = make_facade(conn, {"db.generic_db.on_delete_restrict": False})
        sql = meta.ddl.get_fk_source(ORDERS, meta.get_foreign_keys(ORDERS))
        assert "ON UPDATE CASCADE" in sql
        assert "ON DELETE" not in sql

    def test_restrict_on_delete_is_kept_when_supported(self):
        conn = FakeConnectionContext()
        conn.add_foreign_key("orders", "fk_orders_customer", "customers", [("customer_id", "id")], delete_rule=1)
        meta = make_facade(conn)
        sql = meta.ddl.get_fk_source(ORDERS, meta.get_foreign_keys(ORDERS))
        assert "ON DELETE RESTRICT" in sql

    def test_system_name_is_left_out(self):
        conn = FakeConnectionContext()
        conn.add_foreign_key("orders", "SYS_C0042", "customers", [("customer_id", "id")])
        meta = make_facade(conn, {"db.generic_db.system_constraint_names": "^SYS_"})
        sql = meta.ddl.get_fk_source(ORDERS, meta.get_foreign_keys(ORDERS))
        assert "ADD FOREIGN KEY (customer_id)" in sql
        assert "SYS_C0042" not in sql

    def test_nothing_for_no_keys(self, fake_connection):
        meta = make_facade(fake_connection)
        assert meta.ddl.get_fk_source(ORDERS, None) == ""
        assert meta.ddl.get_fk_source(ORDERS, meta.get_foreign_keys(ORDERS)) == ""


class TestCommentsAndGrants:
    """Test comment and grant statements after the table."""

    @pytest.fixture
    def commented_connection(self):
        conn = FakeConnectionContext()
        conn.add_table("orders", remarks="Customer's orders")
        conn.add_column("orders", "id", nullable=False)
        conn.add_column("orders", "amount", "DECIMAL", SqlType.DECIMAL, size=10, digits=2, comment="Gross amount")
        return conn

    def test_comments(self, commented_connection):
        meta = make_facade(commented_connection)
        source = meta.get_table_source(ORDERS)
        assert "COMMENT ON TABLE orders IS 'Customer''s orders';" in source
        assert "COMMENT ON COLUMN orders.amount IS 'Gross amount';" in source

    def test_inline_column_comments(self, commented_connection):
        meta = make_facade(commented_connection, {"db.generic_db.column_comment_inline": True})
        source = meta.get_table_source(ORDERS)
        assert "COMMENT 'Gross amount'" in source
        assert "COMMENT ON COLUMN" not in source

    def test_grants(self, orders_connection):
        """Test that privileges are grouped per grantee and the current user is skipped."""
        orders_connection.add_grant("orders", "reporting", "SELECT")
        orders_connection.add_grant("orders", "reporting", "INSERT")
        orders_connection.add_grant("orders", "tester", "DELETE")
        orders_connection.add_grant("orders", "admin", "SELECT", grantable=True)
        meta = make_facade(orders_connection)
        source = meta.get_table_source(ORDERS)
        assert "GRANT SELECT, INSERT ON orders TO reporting;\n" in source
        assert "GRANT SELECT ON orders TO admin WITH GRANT OPTION;\n" in source
        assert "TO tester" not in source

    def test_grants_disabled(self, orders_connection):
        orders_connection.add_grant("orders", "reporting", "SELECT")
        meta = make_facade(orders_connection, {"ddl.include_grants": False})
        assert "GRANT" not in meta.get_table_source(ORDERS)
