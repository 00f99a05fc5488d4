"""
Unit tests for the driver quirk table.
"""
import pytest

from schemaforge.config.settings import Settings
from schemaforge.database.dialects.base import DialectProfile
from schemaforge.database.quirks import (
    FK_NAME_NUL_TERMINATOR,
    HSQL_SCHEMA_PREFIX,
    NUMERIC_SENTINEL,
    Quirk,
    QuirkTable,
)


def _profile(family, major=0, minor=0):
    return DialectProfile(db_id=family, family=family, product_name=family, major_version=major, minor_version=minor)


class TestQuirk:
    """Test version range matching."""

    def test_applies_to(self):
        quirk = Quirk("q", "hsql", "", min_version=(1, 0), max_version=(1, 8))
        assert quirk.applies_to("hsql", (1, 7))
        assert not quirk.applies_to("hsql", (1, 8))
        assert not quirk.applies_to("hsql", (0, 9))
        assert not quirk.applies_to("h2", (1, 7))


class TestPostgresQuirks:
    """Test the PostgreSQL driver fixes."""

    @pytest.fixture
    def quirks(self):
        return QuirkTable(_profile("postgresql", 9, 4), Settings.load())

    def test_active(self, quirks):
        assert quirks.is_active(FK_NAME_NUL_TERMINATOR)
        assert quirks.is_active(NUMERIC_SENTINEL)
        assert not quirks.is_active(HSQL_SCHEMA_PREFIX)

    def test_fk_name_is_cut_at_nul(self, quirks):
        """Test that constraint names are cut at the \\000 marker."""
        assert quirks.fix_fk_name("fk_orders\\000garbage") == "fk_orders"
        assert quirks.fix_fk_name("fk_orders\x00garbage") == "fk_orders"
        assert quirks.fix_fk_name("fk_orders") == "fk_orders"
        assert quirks.fix_fk_name(None) is None

    def test_numeric_sentinel(self, quirks):
        """Test that the unbounded NUMERIC sentinel becomes 0/0."""
        assert quirks.fix_numeric(65535, 65531) == (0, 0)
        assert quirks.fix_numeric(10, 2) == (10, 2)

    def test_quirk_can_be_disabled(self):
        """Test that a quirk is skipped when disabled for the dialect."""
        settings = Settings.load().with_overrides({"db.postgresql.quirks.fk_name_nul_terminator.enabled": False})
        quirks = QuirkTable(_profile("postgresql", 15, 0), settings)
        assert not quirks.is_active(FK_NAME_NUL_TERMINATOR)
        assert quirks.fix_fk_name("fk\\000x") == "fk\\000x"
        assert quirks.active_names == [NUMERIC_SENTINEL]

    def test_configured_sentinel(self):
        """Test that the sentinel values can be configured."""
        settings = Settings.load().with_overrides({"db.postgresql.quirks.numeric_sentinel.size": 1000})
        quirks = QuirkTable(_profile("postgresql", 15, 0), settings)
        assert quirks.fix_numeric(1000, 65531) == (0, 0)
        assert quirks.fix_numeric(65535, 3) == (65535, 3)


class TestOtherDialects:
    """Test that quirks are bound to their family and versions."""

    def test_other_family_unchanged(self):
        quirks = QuirkTable(_profile("oracle", 19), Settings.load())
        assert quirks.active_names == []
        assert quirks.fix_fk_name("fk\\000x") == "fk\\000x"
        assert quirks.fix_numeric(65535, 65531) == (65535, 65531)

    def test_old_hsql_query_rewrite(self):
        """Test that old HSQL versions lose the INFORMATION_SCHEMA qualifier."""
        quirks = QuirkTable(_profile("hsql", 1, 7))
        sql = "SELECT * FROM INFORMATION_SCHEMA.SYSTEM_VIEWS"
        assert quirks.adjust_query(sql) == "SELECT * FROM SYSTEM_VIEWS"

    def test_new_hsql_query_unchanged(self):
        quirks = QuirkTable(_profile("hsql", 2, 3))
        sql = "SELECT * FROM INFORMATION_SCHEMA.SYSTEM_VIEWS"
        assert quirks.adjust_query(sql) == sql
