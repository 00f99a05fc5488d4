"""
Unit tests for DialectFactory and DialectDetector.
Tests product name recognition, dialect ids and profile flags.
"""
import dataclasses

import pytest
from unittest.mock import patch

from schemaforge.config.settings import Settings
from schemaforge.database.dialects import (
    CaseFolding,
    DialectDetector,
    DialectFactory,
    GenericDialect,
    MySQLDialect,
    OracleDialect,
    PostgreSQLDialect,
    SQLiteDialect,
    SQLServerDialect,
    make_db_id,
    parse_version,
)
from schemaforge.database.dialects.db2_dialect import DB2Dialect
from schemaforge.database.dialects.derby_dialect import DerbyDialect
from schemaforge.database.dialects.h2_dialect import H2Dialect
from schemaforge.database.dialects.minor_dialects import McKoiDialect

from conftest import FakeConnectionContext


class TestDialectFactory:
    """Test recognition of database families from product names."""

    @pytest.mark.parametrize("product_name,expected", [
        ("Oracle", OracleDialect),
        ("PostgreSQL", PostgreSQLDialect),
        ("Microsoft SQL Server", SQLServerDialect),
        ("MySQL", MySQLDialect),
        ("DB2/LINUXX8664", DB2Dialect),
        ("Apache Derby", DerbyDialect),
        ("Cloudscape", DerbyDialect),
        ("Mckoi SQL Database ( 1.0.2 )", McKoiDialect),
        ("SQLite", SQLiteDialect),
        ("H2", H2Dialect),
    ])
    def test_find(self, product_name, expected):
        """Test that known product names map to their dialect."""
        assert DialectFactory.find(product_name) is expected

    def test_h2_requires_exact_name(self):
        """Test that h2 only matches the complete product name."""
        assert DialectFactory.find("H2 Compatible Engine") is GenericDialect

    def test_unknown_product_is_generic(self):
        """Test that unrecognized products use the generic dialect."""
        assert DialectFactory.find("Tachyon DB") is GenericDialect
        assert DialectFactory.find(None) is GenericDialect

    def test_first_registered_token_wins(self):
        """Test that the registry is searched in registration order."""
        # Contains both "oracle" and "mysql"
        assert DialectFactory.find("Oracle MySQL Gateway") is OracleDialect

    def test_supported_families(self):
        """Test that each family is listed once."""
        families = DialectFactory.supported_families()
        assert families.count("derby") == 1
        assert "oracle" in families
        assert "sqlite" in families


class TestDialectIds:
    """Test derivation of dialect ids used in setting keys."""

    def test_make_db_id(self):
        """Test that separators are replaced and the id is lower case."""
        assert make_db_id("Microsoft SQL Server") == "microsoft_sql_server"
        assert make_db_id("DB2/LINUXX8664") == "db2_linuxx8664"
        assert make_db_id("Generic DB") == "generic_db"

    def test_mckoi_version_is_stripped(self):
        """Test that the McKoi version suffix is not part of the id."""
        settings = Settings.load()
        conn = FakeConnectionContext(product="Mckoi SQL Database ( 1.0.2 )")
        _dialect, profile = DialectDetector(settings).detect(conn)
        assert profile.db_id == "mckoi_sql_database"
        assert profile.family == "mckoi"

    def test_firebird_name_is_normalized(self):
        """Test that Firebird platform suffixes are dropped."""
        settings = Settings.load()
        conn = FakeConnectionContext(product="Firebird 2.5/Linux/x86_64")
        _dialect, profile = DialectDetector(settings).detect(conn)
        assert profile.db_id == "firebird"

    @pytest.mark.parametrize("version,expected", [
        ("11.2.0.1", (11, 2)),
        ("PostgreSQL 9.4", (9, 4)),
        ("8", (8, 0)),
        ("", (0, 0)),
        (None, (0, 0)),
    ])
    def test_parse_version(self, version, expected):
        """Test extraction of major and minor version numbers."""
        assert parse_version(version) == expected


class TestDialectDetector:
    """Test profile flags derived from settings and driver."""

    @pytest.fixture
    def settings(self):
        return Settings.load()

    def test_oracle_profile(self, settings):
        """Test that Oracle flags come from the oracle settings section."""
        conn = FakeConnectionContext(product="Oracle", version="19.3.0.0")
        dialect, profile = DialectDetector(settings).detect(conn)
        assert isinstance(dialect, OracleDialect)
        assert profile.db_id == "oracle"
        assert profile.object_case == CaseFolding.UPPER
        assert profile.supports_on_delete_restrict is False
        assert (profile.major_version, profile.minor_version) == (19, 3)

    def test_postgres_needs_commit(self, settings):
        """Test that PostgreSQL requires explicit DDL commits."""
        conn = FakeConnectionContext(product="PostgreSQL", version="15.2")
        _dialect, profile = DialectDetector(settings).detect(conn)
        assert profile.ddl_needs_commit is True
        assert profile.rollback_after_error is True
        assert profile.version_at_least(9, 6)

    def test_generic_defaults(self, settings):
        """Test default flags for an unknown database."""
        conn = FakeConnectionContext()
        dialect, profile = DialectDetector(settings).detect(conn)
        assert isinstance(dialect, GenericDialect)
        assert profile.db_id == "generic_db"
        assert profile.family == "generic"
        assert profile.ddl_needs_commit is False
        assert profile.inline_constraints is False
        assert profile.schema_term == "Schema"
        assert profile.quote_char == '"'

    def test_dialect_id_setting_wins_over_family(self, settings):
        """Test that db.<id>.<key> is preferred to db.<family>.<key>."""
        settings = settings.with_overrides({
            "db.generic.ddl_needs_commit": False,
            "db.generic_db.ddl_needs_commit": True,
            "db.generic.inline_constraints": True,
        })
        _dialect, profile = DialectDetector(settings).detect(FakeConnectionContext())
        assert profile.ddl_needs_commit is True
        assert profile.inline_constraints is True

    def test_family_setting_covers_product_variants(self, settings):
        """Test that DB2 variants share the db2 family settings."""
        conn = FakeConnectionContext(product="DB2/NT64")
        _dialect, profile = DialectDetector(settings).detect(conn)
        assert profile.db_id == "db2_nt64"
        assert profile.ddl_needs_commit is True
        assert profile.null_keyword_required is False

    def test_driver_quote_character(self, settings):
        """Test that the driver reported quote character is used."""
        conn = FakeConnectionContext()
        with patch.object(conn, "identifier_quote_string", return_value="`"):
            _dialect, profile = DialectDetector(settings).detect(conn)
        assert profile.quote_char == "`"

    def test_configured_quote_character(self, settings):
        """Test that a configured quote character overrides the driver."""
        settings = settings.with_overrides({"db.generic_db.quote_char": "["})
        _dialect, profile = DialectDetector(settings).detect(FakeConnectionContext())
        assert profile.quote_char == "["

    def test_failing_driver_degrades_to_defaults(self, settings):
        """Test that a failing product name call yields the generic dialect."""
        conn = FakeConnectionContext()
        conn.failing_calls.add("product_name")
        dialect, profile = DialectDetector(settings).detect(conn)
        assert isinstance(dialect, GenericDialect)
        assert profile.db_id == "generic"
        assert profile.product_name == ""

    def test_profile_is_immutable(self, settings):
        """Test that a profile cannot be changed after detection."""
        _dialect, profile = DialectDetector(settings).detect(FakeConnectionContext())
        with pytest.raises(dataclasses.FrozenInstanceError):
            profile.ddl_needs_commit = True
