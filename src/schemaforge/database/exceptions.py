"""
Metadata exceptions - Error taxonomy for introspection and DDL operations

Read-only introspection catches ConnectivityError at the reader/facade
boundary and degrades to an empty result. Mutating operations let
StructuralOperationError reach the caller after rolling back.
"""

from typing import Optional


class MetadataError(Exception):
    """Base class for all schemaforge errors."""
    pass


class ConnectivityError(MetadataError):
    """A catalog call or query against the database failed."""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message)
        self.sql = sql


class StructuralOperationError(MetadataError):
    """A mutating statement (DROP, CREATE, ALTER) failed."""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message)
        self.sql = sql


class ConfigurationError(MetadataError):
    """An invalid user supplied setting (regex, rule mapping, index type entry)."""
    pass


class UnsupportedCapabilityError(MetadataError):
    """The connection or dialect does not provide the requested capability."""
    pass


class TemplateError(MetadataError):
    """A SQL template is malformed or was rendered with missing values."""
    pass


class MetadataClosedError(MetadataError):
    """The MetadataFacade was used after close()."""
    pass
