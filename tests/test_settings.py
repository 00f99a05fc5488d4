"""
Unit tests for Settings.
Tests YAML loading, dialect lookup order and typed getters.
"""
import pytest

from schemaforge.config.settings import Settings, get_settings


class TestSettingsLoading:
    """Test loading of packaged and user settings."""

    def test_packaged_defaults(self):
        """Test that the packaged defaults are loaded and flattened."""
        settings = Settings.load()
        assert settings.get_property("ddl.line_ending") == "lf"
        assert settings.get_dialect_bool("ddl_needs_commit", "postgresql", "postgresql") is True
        assert "db.oracle.object_case" in settings

    def test_user_file_overrides(self, tmp_path):
        """Test that a user file replaces single keys."""
        user_file = tmp_path / "settings.yaml"
        user_file.write_text("db:\n  oracle:\n    ddl_needs_commit: true\n", encoding="utf-8")
        settings = Settings.load(user_file)
        assert settings.get_dialect_bool("ddl_needs_commit", "oracle", "oracle") is True
        # Other oracle keys stay
        assert settings.get_dialect_property("object_case", "oracle", "oracle") == "upper"

    def test_missing_user_file(self, tmp_path):
        """Test that a missing user file leaves the defaults."""
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.get_property("ddl.line_ending") == "lf"

    def test_non_mapping_user_file_is_ignored(self, tmp_path):
        """Test that a YAML list at top level is ignored."""
        user_file = tmp_path / "settings.yaml"
        user_file.write_text("- a\n- b\n", encoding="utf-8")
        settings = Settings.load(user_file)
        assert settings.get_property("ddl.line_ending") == "lf"

    def test_shared_instance(self):
        """Test that get_settings returns one snapshot."""
        assert get_settings() is get_settings()


class TestSettingsSnapshot:
    """Test that settings never change once created."""

    def test_with_overrides_returns_new_snapshot(self):
        """Test that overrides do not modify the original."""
        original = Settings({"ddl.line_ending": "lf"})
        changed = original.with_overrides({"ddl": {"line_ending": "crlf"}})
        assert original.get_property("ddl.line_ending") == "lf"
        assert changed.get_property("ddl.line_ending") == "crlf"

    def test_dotted_override_keys(self):
        """Test that dotted keys can be used directly."""
        settings = Settings().with_overrides({"db.oracle.ddl_needs_commit": True})
        assert settings.get_dialect_bool("ddl_needs_commit", "oracle") is True

    def test_properties_are_read_only(self):
        """Test that the property mapping cannot be modified."""
        settings = Settings({"a": 1})
        with pytest.raises(TypeError):
            settings._properties["a"] = 2


class TestDialectLookup:
    """Test the db.<id> -> db.<family> -> db.default lookup chain."""

    @pytest.fixture
    def settings(self):
        return Settings({
            "db.default.null_keyword": "NULL",
            "db.default.ddl_needs_commit": False,
            "db.db2.ddl_needs_commit": True,
            "db.db2_nt64.ddl_needs_commit": False,
        })

    def test_dialect_id_first(self, settings):
        """Test that the dialect id level wins."""
        assert settings.get_dialect_bool("ddl_needs_commit", "db2_nt64", "db2") is False

    def test_family_second(self, settings):
        """Test that the family level applies to other ids of the family."""
        assert settings.get_dialect_bool("ddl_needs_commit", "db2_linuxx8664", "db2") is True

    def test_default_last(self, settings):
        """Test that db.default applies when neither id nor family define the key."""
        assert settings.get_dialect_property("null_keyword", "oracle", "oracle") == "NULL"

    def test_missing_key_default(self, settings):
        """Test that the supplied default is returned for unknown keys."""
        assert settings.get_dialect_property("nothing", "oracle", "oracle", "x") == "x"
        assert settings.get_dialect_int("nothing", "oracle", "oracle", 7) == 7


class TestTypedGetters:
    """Test conversion of raw values."""

    @pytest.fixture
    def settings(self):
        return Settings({
            "flag_text": "yes",
            "flag_bad": "maybe",
            "number_text": "42",
            "number_bad": "many",
            "list_text": "TABLE, VIEW,,SYNONYM",
            "list_yaml": ["TABLE", " VIEW "],
        })

    def test_get_bool(self, settings):
        assert settings.get_bool("flag_text") is True
        assert settings.get_bool("missing", True) is True

    def test_invalid_bool_uses_default(self, settings, caplog):
        """Test that an invalid boolean logs a warning and returns the default."""
        assert settings.get_bool("flag_bad", False) is False
        assert "Invalid boolean value" in caplog.text

    def test_get_int(self, settings):
        assert settings.get_int("number_text") == 42
        assert settings.get_int("number_bad", 5) == 5

    def test_get_list(self, settings):
        """Test that comma separated strings and YAML lists are accepted."""
        assert settings.get_list("list_text") == ["TABLE", "VIEW", "SYNONYM"]
        assert settings.get_list("list_yaml") == ["TABLE", "VIEW"]
        assert settings.get_list("missing") == []
        assert settings.get_list("missing", ["A"]) == ["A"]

    def test_iteration(self, settings):
        """Test that settings iterate over their keys."""
        assert "flag_text" in list(settings)
        assert len(settings) == 6
