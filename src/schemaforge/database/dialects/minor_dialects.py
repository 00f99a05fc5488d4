"""
Minor Dialects - Families without dialect specific readers

These are recognized so their settings and templates can be addressed by
family id; all capabilities use the generic readers.
"""

from .base import DatabaseDialect

import logging
logger = logging.getLogger(__name__)


class McKoiDialect(DatabaseDialect):
    """Dialect for McKoi SQL Database."""

    family = "mckoi"

    def normalize_product_name(self, product_name: str) -> str:
        # "Mckoi SQL Database ( 1.0.2 )": the version is not part of the id
        pos = product_name.find("(")
        if pos > -1:
            return product_name[:pos].strip()
        return product_name


class FirstSqlDialect(DatabaseDialect):
    """Dialect for FirstSQL/J."""

    family = "firstsql"


class AdaptiveServerDialect(DatabaseDialect):
    """Dialect for Sybase Adaptive Server Anywhere/Enterprise."""

    family = "asa"


class GenericDialect(DatabaseDialect):
    """Fallback for unrecognized products, relying on the driver's own reporting."""

    family = "generic"
