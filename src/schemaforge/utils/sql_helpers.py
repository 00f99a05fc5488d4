"""
SQL helpers - Small text utilities shared by the metadata engine

Statement classification uses sqlparse so comments and string literals do
not confuse the verb detection.
"""

import re
from typing import List, Optional

import sqlparse

import logging
logger = logging.getLogger(__name__)

_QUOTE_PAIRS = (('"', '"'), ("[", "]"), ("`", "`"))

_CREATE_TYPE_PATTERN = re.compile(
    r"^CREATE\s+(?:OR\s+REPLACE\s+)?(?:NO\s*FORCE\s+|FORCE\s+)?(?:EDITIONABLE\s+|NONEDITIONABLE\s+)?"
    r"(?:(?:GLOBAL\s+|LOCAL\s+)?TEMPORARY\s+|TEMP\s+)?"
    r"(MATERIALIZED\s+VIEW|PACKAGE\s+BODY|TYPE\s+BODY|UNIQUE\s+INDEX|BITMAP\s+INDEX|\w+)",
    re.IGNORECASE,
)

_DOLLAR_QUOTE_PATTERN = re.compile(r"\$([A-Za-z_]*)\$(.*?)\$\1\$", re.DOTALL)


def strip_comments(sql: str) -> str:
    """Remove SQL comments and surrounding whitespace."""
    if not sql:
        return ""
    return sqlparse.format(sql, strip_comments=True).strip()


def get_sql_verb(sql: str) -> str:
    """
    Return the leading verb of a statement in upper case.

    Examples:
        get_sql_verb("-- comment\\ncreate view v as select 1") -> "CREATE"
        get_sql_verb(" SELECT * FROM t") -> "SELECT"
    """
    if not sql or not sql.strip():
        return ""
    statements = sqlparse.parse(sql)
    if not statements:
        return ""
    verb = statements[0].get_type()
    if verb and verb != "UNKNOWN":
        return verb.upper()
    cleaned = strip_comments(sql)
    if not cleaned:
        return ""
    return cleaned.split(None, 1)[0].upper()


def get_create_type(sql: str) -> Optional[str]:
    """Object type created by a CREATE statement (e.g. 'VIEW', 'MATERIALIZED VIEW')."""
    cleaned = strip_comments(sql)
    match = _CREATE_TYPE_PATTERN.match(cleaned)
    if not match:
        return None
    return re.sub(r"\s+", " ", match.group(1)).upper()


def is_quoted(name: Optional[str]) -> bool:
    if not name:
        return False
    text = name.strip()
    for start, end in _QUOTE_PAIRS:
        if len(text) >= 2 and text.startswith(start) and text.endswith(end):
            return True
    return False


def trim_quotes(name: Optional[str]) -> Optional[str]:
    """Remove one level of identifier quoting ("x", [x], `x`)."""
    if name is None:
        return None
    text = name.strip()
    for start, end in _QUOTE_PAIRS:
        if len(text) >= 2 and text.startswith(start) and text.endswith(end):
            return text[1:-1]
    return text


def escape_literal(value: Optional[str]) -> str:
    """Escape a value for use inside a single quoted SQL literal."""
    if value is None:
        return ""
    return value.replace("'", "''")


def split_list(value: Optional[str], separator: str = ",") -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(separator) if part.strip()]


def like_to_regex(pattern: Optional[str]) -> "re.Pattern":
    """Translate a catalog search pattern (% and _ wildcards) into a regex."""
    if not pattern:
        return re.compile(".*", re.DOTALL)
    parts = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def replace_dollar_quotes(sql: str) -> str:
    """Rewrite PostgreSQL $$ or $tag$ quoted bodies as standard string literals."""
    def _replace(match):
        return "'" + match.group(2).replace("'", "''") + "'"

    return _DOLLAR_QUOTE_PATTERN.sub(_replace, sql)
