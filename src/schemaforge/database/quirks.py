"""
Driver quirks - Versioned table of known driver/server bugs and their fixes

Each quirk applies to one dialect family and a server version range. A
quirk can be switched off per dialect with

    db.<dialect>.quirks.<name>.enabled: false

so a fixed driver does not keep getting "corrected" results.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Tuple

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..config.settings import Settings
    from .dialects.base import DialectProfile

Version = Tuple[int, int]


@dataclass(frozen=True)
class Quirk:
    """A known bug, active for server versions in [min_version, max_version)."""
    name: str
    family: str
    description: str
    min_version: Version = (0, 0)
    max_version: Optional[Version] = None

    def applies_to(self, family: str, version: Version) -> bool:
        if family != self.family:
            return False
        if version < self.min_version:
            return False
        if self.max_version is not None and version >= self.max_version:
            return False
        return True


FK_NAME_NUL_TERMINATOR = "fk_name_nul_terminator"
NUMERIC_SENTINEL = "numeric_sentinel"
HSQL_SCHEMA_PREFIX = "hsql_schema_prefix"

KNOWN_QUIRKS = (
    Quirk(
        FK_NAME_NUL_TERMINATOR, "postgresql",
        "Constraint names are followed by \\000 and garbage from the driver",
    ),
    Quirk(
        NUMERIC_SENTINEL, "postgresql",
        "NUMERIC without precision is reported with sentinel size and digits",
    ),
    Quirk(
        HSQL_SCHEMA_PREFIX, "hsql",
        "HSQL before 1.8 has no INFORMATION_SCHEMA schema qualifier",
        max_version=(1, 8),
    ),
)

# Sentinel values reported for an unbounded NUMERIC
_DEFAULT_NUMERIC_SENTINEL_SIZE = 65535
_DEFAULT_NUMERIC_SENTINEL_DIGITS = 65531


class QuirkTable:
    """
    The quirks active for one connection, resolved once.

    Usage:
        quirks = QuirkTable(profile, settings)
        name = quirks.fix_fk_name(raw_name)
        size, digits = quirks.fix_numeric(size, digits)
    """

    def __init__(self, profile: "DialectProfile", settings: Optional["Settings"] = None, quirks=KNOWN_QUIRKS):
        version = (profile.major_version, profile.minor_version)
        self._active: Dict[str, Quirk] = {}
        for quirk in quirks:
            if not quirk.applies_to(profile.family, version):
                continue
            if settings is not None and not settings.get_dialect_bool(
                f"quirks.{quirk.name}.enabled", profile.db_id, profile.family, True
            ):
                logger.debug(f"Quirk {quirk.name} disabled by configuration")
                continue
            self._active[quirk.name] = quirk

        self.numeric_sentinel_size = _DEFAULT_NUMERIC_SENTINEL_SIZE
        self.numeric_sentinel_digits = _DEFAULT_NUMERIC_SENTINEL_DIGITS
        if settings is not None:
            self.numeric_sentinel_size = settings.get_dialect_int(
                f"quirks.{NUMERIC_SENTINEL}.size", profile.db_id, profile.family, _DEFAULT_NUMERIC_SENTINEL_SIZE
            )
            self.numeric_sentinel_digits = settings.get_dialect_int(
                f"quirks.{NUMERIC_SENTINEL}.digits", profile.db_id, profile.family, _DEFAULT_NUMERIC_SENTINEL_DIGITS
            )

    def is_active(self, name: str) -> bool:
        return name in self._active

    @property
    def active_names(self):
        return sorted(self._active)

    def fix_fk_name(self, name: Optional[str]) -> Optional[str]:
        """Cut a constraint name at the first \\000."""
        if name is None or not self.is_active(FK_NAME_NUL_TERMINATOR):
            return name
        pos = name.find("\\000")
        if pos < 0:
            pos = name.find("\x00")
        return name[:pos] if pos > -1 else name

    def fix_numeric(self, size: int, digits: int) -> Tuple[int, int]:
        """Normalize the 'unbounded' sentinel size and digits to 0."""
        if not self.is_active(NUMERIC_SENTINEL):
            return size, digits
        if size == self.numeric_sentinel_size:
            size = 0
        if digits == self.numeric_sentinel_digits:
            digits = 0
        return size, digits

    def adjust_query(self, sql: str) -> str:
        """Rewrite template queries for old server versions."""
        if self.is_active(HSQL_SCHEMA_PREFIX):
            return re.sub(r"INFORMATION_SCHEMA\.", "", sql, flags=re.IGNORECASE)
        return sql
