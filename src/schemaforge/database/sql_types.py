"""
SQL type codes - Standard JDBC/ODBC data type numbers and display helpers
"""

from enum import IntEnum
from typing import Optional

import logging
logger = logging.getLogger(__name__)


class SqlType(IntEnum):
    """Data type codes reported in the DATA_TYPE column of catalog results."""
    BIT = -7
    TINYINT = -6
    BIGINT = -5
    LONGVARBINARY = -4
    VARBINARY = -3
    BINARY = -2
    LONGVARCHAR = -1
    NULL = 0
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    WCHAR = -8
    WVARCHAR = -9
    WLONGVARCHAR = -10
    GUID = -11
    NCHAR = -15
    LONGNVARCHAR = -16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    SQLXML = 2009
    NCLOB = 2011


CHARACTER_TYPES = frozenset({
    SqlType.CHAR, SqlType.VARCHAR, SqlType.WCHAR, SqlType.WVARCHAR, SqlType.NCHAR,
})

DECIMAL_TYPES = frozenset({SqlType.NUMERIC, SqlType.DECIMAL})

NUMERIC_TYPES = frozenset({
    SqlType.BIT, SqlType.TINYINT, SqlType.BIGINT, SqlType.NUMERIC, SqlType.DECIMAL,
    SqlType.INTEGER, SqlType.SMALLINT, SqlType.FLOAT, SqlType.REAL, SqlType.DOUBLE,
})

DATE_TYPES = frozenset({SqlType.DATE, SqlType.TIME, SqlType.TIMESTAMP})

# Declared type names mapped to type codes (embedded databases report only names)
_NAME_TO_TYPE = {
    "INT": SqlType.INTEGER,
    "INTEGER": SqlType.INTEGER,
    "SMALLINT": SqlType.SMALLINT,
    "TINYINT": SqlType.TINYINT,
    "BIGINT": SqlType.BIGINT,
    "BOOLEAN": SqlType.BOOLEAN,
    "BIT": SqlType.BIT,
    "DECIMAL": SqlType.DECIMAL,
    "NUMERIC": SqlType.NUMERIC,
    "NUMBER": SqlType.NUMERIC,
    "REAL": SqlType.REAL,
    "FLOAT": SqlType.FLOAT,
    "DOUBLE": SqlType.DOUBLE,
    "DOUBLE PRECISION": SqlType.DOUBLE,
    "CHAR": SqlType.CHAR,
    "CHARACTER": SqlType.CHAR,
    "NCHAR": SqlType.NCHAR,
    "VARCHAR": SqlType.VARCHAR,
    "VARCHAR2": SqlType.VARCHAR,
    "NVARCHAR": SqlType.WVARCHAR,
    "TEXT": SqlType.LONGVARCHAR,
    "CLOB": SqlType.CLOB,
    "BLOB": SqlType.BLOB,
    "DATE": SqlType.DATE,
    "TIME": SqlType.TIME,
    "TIMESTAMP": SqlType.TIMESTAMP,
    "DATETIME": SqlType.TIMESTAMP,
}


def type_code_from_name(type_name: Optional[str]) -> int:
    """Best effort type code for a declared type name such as 'VARCHAR(20)'."""
    if not type_name:
        return SqlType.OTHER
    base = type_name.split("(")[0].strip().upper()
    if base in _NAME_TO_TYPE:
        return _NAME_TO_TYPE[base]
    # SQLite style affinity rules for anything else
    if "INT" in base:
        return SqlType.INTEGER
    if "CHAR" in base or "CLOB" in base or "TEXT" in base:
        return SqlType.VARCHAR
    if "REAL" in base or "FLOA" in base or "DOUB" in base:
        return SqlType.DOUBLE
    return SqlType.OTHER


def type_name_of(sql_type: int) -> str:
    try:
        return SqlType(sql_type).name
    except ValueError:
        return str(sql_type)


def is_character_type(sql_type: int) -> bool:
    return sql_type in CHARACTER_TYPES


def is_decimal_type(sql_type: int, decimal_digits: int) -> bool:
    return sql_type in DECIMAL_TYPES and decimal_digits > 0


def get_sql_type_display(type_name: str, sql_type: int, size: int, digits: int) -> str:
    """
    Build the display type of a column, e.g. VARCHAR(20) or NUMERIC(10,2).

    Args:
        type_name: Type name reported by the driver
        sql_type: Type code
        size: Column size (length or precision)
        digits: Decimal digits (scale)

    Returns:
        Type name including size information where it matters
    """
    display = type_name or type_name_of(sql_type)
    if "(" in display:
        return display

    if sql_type in CHARACTER_TYPES:
        if size > 0:
            return f"{display}({size})"
    elif sql_type in DECIMAL_TYPES or sql_type in (SqlType.DOUBLE, SqlType.FLOAT):
        if "money" in display.lower():
            return display
        if sql_type in DECIMAL_TYPES:
            if size > 0 and digits > 0:
                return f"{display}({size},{digits})"
            if size > 0:
                return f"{display}({size})"
    elif sql_type == SqlType.OTHER:
        # Oracle reports national character types as OTHER
        upper = display.upper()
        if upper.startswith("NVARCHAR") or upper.startswith("NCHAR"):
            if size > 0:
                return f"{display}({size})"
    return display
