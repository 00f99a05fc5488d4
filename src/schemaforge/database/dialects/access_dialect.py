"""
Access Dialect - Microsoft Access and Excel files opened through ODBC

Neither product has server side objects; only the generic readers apply.
"""

from .base import DatabaseDialect

import logging
logger = logging.getLogger(__name__)


class AccessDialect(DatabaseDialect):
    """Dialect for Microsoft Access databases."""

    family = "access"
    default_quote_char = "`"


class ExcelDialect(DatabaseDialect):
    """Dialect for Excel workbooks used as a data source."""

    family = "excel"
    default_quote_char = "`"
