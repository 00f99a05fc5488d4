"""
Dialect Factory - Recognize the database family from the driver's product name

The registry is ordered: the first token found in the lower-cased product
name wins, so "sql server" is tested before "db2" and "h2" only matches
when it is the complete product name.
"""

import re
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, Type

from .base import CaseFolding, DatabaseDialect, DialectProfile, make_db_id
from .minor_dialects import GenericDialect
from ..exceptions import MetadataError

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..connection import ConnectionContext
    from ...config.settings import Settings

_VERSION_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?")


class DialectFactory:
    """
    Ordered registry of dialect classes.

    Usage:
        dialect_class = DialectFactory.find("PostgreSQL")
        dialect = DialectFactory.create("Microsoft SQL Server")
    """

    # (token, dialect class, exact match)
    _dialects: List[Tuple[str, Type[DatabaseDialect], bool]] = []

    @classmethod
    def register(cls, token: str, dialect_class: Type[DatabaseDialect], exact: bool = False):
        """
        Register a dialect after the existing ones.

        Args:
            token: Lower-case text searched in the product name
            dialect_class: DatabaseDialect subclass
            exact: Only match if the product name equals the token
        """
        cls._dialects.append((token.lower(), dialect_class, exact))
        logger.debug(f"Registered dialect for: {token}")

    @classmethod
    def find(cls, product_name: Optional[str]) -> Type[DatabaseDialect]:
        """Get the dialect class for a product name, GenericDialect if unknown."""
        name = (product_name or "").strip().lower()
        for token, dialect_class, exact in cls._dialects:
            if exact:
                if name == token:
                    return dialect_class
            elif token in name:
                return dialect_class
        logger.info(f"No dialect for product {product_name!r}, using generic dialect")
        return GenericDialect

    @classmethod
    def create(cls, product_name: Optional[str]) -> DatabaseDialect:
        return cls.find(product_name)()

    @classmethod
    def supported_families(cls) -> List[str]:
        families = []
        for _token, dialect_class, _exact in cls._dialects:
            if dialect_class.family not in families:
                families.append(dialect_class.family)
        return families


def _register_default_dialects():
    """Register built-in dialects. Called on module import."""
    from .oracle_dialect import OracleDialect
    from .postgresql_dialect import PostgreSQLDialect
    from .hsql_dialect import HSQLDialect
    from .firebird_dialect import FirebirdDialect
    from .sqlserver_dialect import SQLServerDialect
    from .db2_dialect import DB2Dialect
    from .mysql_dialect import MySQLDialect
    from .informix_dialect import InformixDialect
    from .derby_dialect import DerbyDialect
    from .ingres_dialect import IngresDialect
    from .access_dialect import AccessDialect, ExcelDialect
    from .h2_dialect import H2Dialect
    from .sqlite_dialect import SQLiteDialect
    from .minor_dialects import AdaptiveServerDialect, FirstSqlDialect, McKoiDialect

    DialectFactory.register("oracle", OracleDialect)
    DialectFactory.register("postgres", PostgreSQLDialect)
    DialectFactory.register("hsql", HSQLDialect)
    DialectFactory.register("firebird", FirebirdDialect)
    DialectFactory.register("sql server", SQLServerDialect)
    DialectFactory.register("db2", DB2Dialect)
    DialectFactory.register("adaptive server", AdaptiveServerDialect)
    DialectFactory.register("mysql", MySQLDialect)
    DialectFactory.register("informix", InformixDialect)
    DialectFactory.register("cloudscape", DerbyDialect)
    DialectFactory.register("derby", DerbyDialect)
    DialectFactory.register("ingres", IngresDialect)
    DialectFactory.register("mckoi", McKoiDialect)
    DialectFactory.register("firstsql", FirstSqlDialect)
    DialectFactory.register("excel", ExcelDialect)
    DialectFactory.register("access", AccessDialect)
    DialectFactory.register("h2", H2Dialect, exact=True)
    DialectFactory.register("sqlite", SQLiteDialect)


# Register on module import
_register_default_dialects()


def parse_version(version: Optional[str]) -> Tuple[int, int]:
    """Major and minor number of a product version string ("11.2.0.1" -> (11, 2))."""
    match = _VERSION_PATTERN.search(version or "")
    if match is None:
        return 0, 0
    return int(match.group(1)), int(match.group(2) or 0)


class DialectDetector:
    """
    Builds the DialectProfile of a connection.

    Flags come from the settings (dialect id, then family, then default);
    strings the driver reports (terms, quote character) are used when no
    setting overrides them. Failing driver calls degrade to defaults.

    Usage:
        dialect, profile = DialectDetector(settings).detect(connection)
    """

    def __init__(self, settings: "Settings"):
        self.settings = settings

    @staticmethod
    def _safe(call: Callable[[], Any], default: Any, what: str) -> Any:
        try:
            value = call()
        except MetadataError as e:
            logger.warning(f"Could not read {what}: {e}")
            return default
        return default if value is None else value

    def detect(self, connection: "ConnectionContext") -> Tuple[DatabaseDialect, DialectProfile]:
        product_name = self._safe(lambda: connection.product_name(), "", "product name")
        dialect = DialectFactory.create(product_name)
        profile = self.build_profile(dialect, connection, product_name)
        logger.info(
            f"Connected to {profile.product_name} {profile.product_version} "
            f"(dialect {profile.db_id}, family {profile.family})"
        )
        return dialect, profile

    def build_profile(
        self,
        dialect: DatabaseDialect,
        connection: "ConnectionContext",
        product_name: str
    ) -> DialectProfile:
        db_id = make_db_id(dialect.normalize_product_name(product_name)) or "generic"
        family = dialect.family
        version = str(self._safe(lambda: connection.product_version(), "", "product version"))
        major, minor = parse_version(version)

        def flag(key: str, default: bool) -> bool:
            return self.settings.get_dialect_bool(key, db_id, family, default)

        def text(key: str, default: Optional[str] = None) -> Optional[str]:
            value = self.settings.get_dialect_property(key, db_id, family)
            return default if value is None else str(value)

        schema_term = self._safe(lambda: connection.schema_term(), "", "schema term") or "Schema"
        catalog_term = self._safe(lambda: connection.catalog_term(), "", "catalog term") or "Catalog"

        quote_char = text("quote_char")
        if not quote_char:
            reported = self._safe(lambda: connection.identifier_quote_string(), "", "quote character")
            quote_char = reported.strip() or dialect.default_quote_char

        object_case = CaseFolding.parse(text("object_case")) or CaseFolding.DRIVER

        return DialectProfile(
            db_id=db_id,
            family=family,
            product_name=product_name or "",
            product_version=version,
            major_version=major,
            minor_version=minor,
            schema_term=schema_term,
            catalog_term=catalog_term,
            quote_char=quote_char,
            ddl_needs_commit=flag("ddl_needs_commit", False),
            use_driver_commit=flag("use_driver_commit", False),
            inline_constraints=flag("inline_constraints", False),
            null_keyword_required=flag("null_keyword_required", True),
            null_keyword=text("null_keyword", "NULL"),
            supports_catalogs=bool(self._safe(lambda: connection.supports_catalogs(), True, "catalog support")),
            supports_on_delete_restrict=flag("on_delete_restrict", True),
            supports_get_primary_keys=flag("supports_get_pk", True),
            rollback_after_error=flag("rollback_after_error", False),
            hide_index_types=flag("hide_index_types", False),
            quote_digit_identifiers=flag("quote_digits", False),
            never_quote=flag("never_quote", False),
            trim_defaults=flag("trim_defaults", True),
            default_before_null=flag("default_before_null", False),
            column_comment_inline=flag("column_comment_inline", False),
            columns_in_view_definition=flag("columns_in_view_definition", True),
            object_case=object_case,
            schema_case=CaseFolding.parse(text("schema_case")),
            table_type_name=text("table_type", "TABLE"),
        )
