"""
Unit tests for IdentifierPolicy.
Tests quoting, case folding and keyword handling.
"""
import pytest
from unittest.mock import Mock

from schemaforge.config.settings import Settings
from schemaforge.database.dialects.base import CaseFolding, DialectProfile
from schemaforge.database.exceptions import ConnectivityError
from schemaforge.database.identifier_policy import (
    IdentifierPolicy,
    build_keyword_set,
    resolve_case_folding,
)

from conftest import make_facade


def _profile(**kwargs):
    values = dict(db_id="test_db", family="test", product_name="Test DB")
    values.update(kwargs)
    return DialectProfile(**values)


class TestQuoting:
    """Test quote_object_name on the generic dialect."""

    @pytest.fixture
    def meta(self, fake_connection):
        return make_facade(fake_connection)

    def test_reserved_word_is_quoted(self, meta):
        """Test that a reserved word gets the dialect's quote character."""
        assert meta.quote_object_name("ORDER") == '"ORDER"'

    def test_plain_name_is_unchanged(self, meta):
        """Test that a name that is no keyword and needs no folding stays as is."""
        assert meta.quote_object_name("ID") == "ID"

    def test_quoting_is_idempotent(self, meta):
        """Test that quoting a quoted name returns it unchanged."""
        for name in ["ORDER", "ID", "order items", "1st_quarter", "Mixed", "KEY"]:
            once = meta.quote_object_name(name)
            assert meta.quote_object_name(once) == once

    def test_special_characters_are_quoted(self, meta):
        """Test that names with blanks or dashes are quoted."""
        assert meta.quote_object_name("order items") == '"order items"'
        assert meta.quote_object_name("order-items") == '"order-items"'

    def test_leading_digit_is_quoted(self, meta):
        """Test that names starting with a digit are quoted when quote_digits is set."""
        assert meta.quote_object_name("1st_quarter") == '"1st_quarter"'

    def test_none_and_empty(self, meta):
        """Test that None and blank names pass through."""
        assert meta.quote_object_name(None) is None
        assert meta.quote_object_name("") == ""

    def test_force_quote(self, meta):
        """Test that force_quote quotes any name."""
        assert meta.quote_object_name("ID", force_quote=True) == '"ID"'


class TestCaseFolding:
    """Test case folding for upper and lower case dialects."""

    @pytest.fixture
    def upper_policy(self):
        return IdentifierPolicy(_profile(), keywords=["ORDER"], object_case=CaseFolding.UPPER)

    @pytest.fixture
    def lower_policy(self):
        return IdentifierPolicy(_profile(), keywords=["ORDER"], object_case=CaseFolding.LOWER)

    def test_upper_case_folding(self, upper_policy):
        """Test that unquoted names are upper-cased."""
        assert upper_policy.adjust_object_name_case("orders") == "ORDERS"

    def test_lower_case_folding(self, lower_policy):
        """Test that unquoted names are lower-cased."""
        assert lower_policy.adjust_object_name_case("Orders") == "orders"

    def test_quoted_names_are_not_folded(self, upper_policy):
        """Test that a quoted name keeps its case."""
        assert upper_policy.adjust_object_name_case('"orders"') == '"orders"'

    def test_folding_is_idempotent(self, upper_policy, lower_policy):
        """Test that folding twice gives the same result as folding once."""
        for policy in (upper_policy, lower_policy):
            for name in ["orders", "Orders", '"Mixed Case"', "ORDER_ITEMS"]:
                once = policy.adjust_object_name_case(name)
                assert policy.adjust_object_name_case(once) == once

    def test_name_not_in_storage_case_is_quoted(self, upper_policy):
        """Test that a lower case name must be quoted on an upper case dialect."""
        assert upper_policy.quote_object_name("orders") == '"orders"'
        assert upper_policy.quote_object_name("ORDERS") == "ORDERS"

    def test_schema_case_can_differ(self):
        """Test that schema names use their own folding mode."""
        policy = IdentifierPolicy(_profile(), object_case=CaseFolding.LOWER, schema_case=CaseFolding.UPPER)
        assert policy.adjust_object_name_case("Orders") == "orders"
        assert policy.adjust_schema_name_case("sales") == "SALES"

    def test_none_is_passed_through(self, upper_policy):
        """Test that None stays None."""
        assert upper_policy.adjust_object_name_case(None) is None


class TestQuoteCharacters:
    """Test dialects with other quote characters and quoting rules."""

    def test_bracket_quotes(self):
        """Test that [ quotes close with ] and embedded ] is doubled."""
        policy = IdentifierPolicy(_profile(quote_char="["), keywords=["ORDER"], object_case=CaseFolding.MIXED)
        assert policy.quote_object_name("ORDER") == "[ORDER]"
        quoted = policy.quote_object_name("a]b")
        assert quoted == "[a]]b]"
        assert policy.quote_object_name(quoted) == quoted

    def test_never_quote(self):
        """Test that never_quote dialects get names unchanged."""
        policy = IdentifierPolicy(_profile(never_quote=True), keywords=["ORDER"])
        assert policy.quote_object_name("ORDER") == "ORDER"

    def test_trim_quotes(self):
        """Test that one level of quotes is removed."""
        assert IdentifierPolicy.trim_quotes('"Order Items"') == "Order Items"
        assert IdentifierPolicy.trim_quotes("[orders]") == "orders"


class TestDriverCaseFolding:
    """Test resolution of the 'driver' case folding mode."""

    def test_upper_from_driver(self):
        """Test that a driver storing upper case yields UPPER."""
        connection = Mock()
        connection.stores_upper_case_identifiers.return_value = True
        assert resolve_case_folding(CaseFolding.DRIVER, connection) == CaseFolding.UPPER

    def test_lower_from_driver(self):
        """Test that a driver storing lower case yields LOWER."""
        connection = Mock()
        connection.stores_upper_case_identifiers.return_value = False
        connection.stores_lower_case_identifiers.return_value = True
        assert resolve_case_folding(CaseFolding.DRIVER, connection) == CaseFolding.LOWER

    def test_failing_driver_means_mixed(self):
        """Test that a driver error degrades to MIXED."""
        connection = Mock()
        connection.stores_upper_case_identifiers.side_effect = ConnectivityError("gone")
        assert resolve_case_folding(CaseFolding.DRIVER, connection) == CaseFolding.MIXED

    def test_explicit_mode_is_kept(self):
        """Test that configured modes do not ask the driver."""
        connection = Mock()
        assert resolve_case_folding(CaseFolding.LOWER, connection) == CaseFolding.LOWER
        connection.stores_upper_case_identifiers.assert_not_called()

    def test_create_uses_driver(self):
        """Test that IdentifierPolicy.create resolves the driver mode once."""
        connection = Mock()
        connection.stores_upper_case_identifiers.return_value = True
        connection.sql_keywords.return_value = []
        policy = IdentifierPolicy.create(_profile(object_case=CaseFolding.DRIVER), connection)
        assert policy.object_case == CaseFolding.UPPER
        assert connection.stores_upper_case_identifiers.call_count == 1


class TestKeywords:
    """Test the keyword set."""

    def test_standard_keywords(self):
        """Test that SQL standard keywords are included for every dialect."""
        keywords = build_keyword_set(_profile())
        assert "ORDER" in keywords
        assert "SELECT" in keywords
        assert "ID" not in keywords

    def test_family_keywords(self):
        """Test that family specific keywords are added."""
        keywords = build_keyword_set(_profile(db_id="sqlite", family="sqlite"))
        assert "PRAGMA" in keywords
        assert "PRAGMA" not in build_keyword_set(_profile())

    def test_driver_and_configured_keywords(self):
        """Test that driver reported and configured keywords are added."""
        connection = Mock()
        connection.sql_keywords.return_value = ["price"]
        settings = Settings().with_overrides({"db.default.additional_keywords": ["qty"]})
        keywords = build_keyword_set(_profile(), connection, settings)
        assert "PRICE" in keywords
        assert "QTY" in keywords

    def test_failing_driver_keywords_are_ignored(self):
        """Test that a driver error leaves the static keyword list."""
        connection = Mock()
        connection.sql_keywords.side_effect = ConnectivityError("gone")
        keywords = build_keyword_set(_profile(), connection)
        assert "ORDER" in keywords
