"""
Database metadata - Connection contexts, dialects and the metadata facade

Usage:
    from schemaforge.database import MetadataFacade, SqliteConnectionContext

    with MetadataFacade(SqliteConnectionContext.open("shop.db")) as meta:
        print(meta.get_table_source(TableIdentifier.parse("orders")))
"""

from .cancellation import CancellationToken
from .connection import ConnectionContext
from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    MetadataClosedError,
    MetadataError,
    StructuralOperationError,
    TemplateError,
    UnsupportedCapabilityError,
)
from .metadata import MetadataFacade
from .models import ColumnIdentifier, ForeignKeyDefinition, IndexDefinition, TableIdentifier
from .row_set import RowSet
from .sqlite_connection import SqliteConnectionContext

__all__ = [
    "CancellationToken",
    "ConnectionContext",
    "SqliteConnectionContext",
    "MetadataFacade",
    "RowSet",

    # Models
    "TableIdentifier",
    "ColumnIdentifier",
    "IndexDefinition",
    "ForeignKeyDefinition",

    # Errors
    "MetadataError",
    "ConnectivityError",
    "StructuralOperationError",
    "ConfigurationError",
    "UnsupportedCapabilityError",
    "TemplateError",
    "MetadataClosedError",
]
