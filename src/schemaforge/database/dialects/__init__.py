"""
Database Dialects - Family specific metadata behaviour

Each database family is a DatabaseDialect subclass that wires its
capability readers. The DialectFactory picks the family from the driver's
product name and the DialectDetector builds the immutable DialectProfile.

Usage:
    from schemaforge.database.dialects import DialectDetector

    dialect, profile = DialectDetector(settings).detect(connection)
    readers = dialect.create_readers(facade)
"""

from .base import CaseFolding, DatabaseDialect, DialectProfile, make_db_id
from .factory import DialectDetector, DialectFactory, parse_version

from .oracle_dialect import OracleDialect
from .postgresql_dialect import PostgreSQLDialect
from .sqlserver_dialect import SQLServerDialect
from .mysql_dialect import MySQLDialect
from .sqlite_dialect import SQLiteDialect
from .minor_dialects import GenericDialect

__all__ = [
    # Base classes
    "CaseFolding",
    "DatabaseDialect",
    "DialectProfile",
    "make_db_id",

    # Factory
    "DialectFactory",
    "DialectDetector",
    "parse_version",

    # Implementations
    "OracleDialect",
    "PostgreSQLDialect",
    "SQLServerDialect",
    "MySQLDialect",
    "SQLiteDialect",
    "GenericDialect",
]
