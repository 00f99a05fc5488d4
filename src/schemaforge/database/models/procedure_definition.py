"""
ProcedureDefinition model - Stored procedures, functions and packages
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ProcedureType(IntEnum):
    """PROCEDURE_TYPE values of the procedure catalog call."""
    UNKNOWN = 0
    PROCEDURE = 1
    FUNCTION = 2


@dataclass
class ProcedureDefinition:
    """
    A stored routine.

    For dialects that group routines into packages (Oracle) the package
    name is kept in catalog and is_package is set on the one definition
    that represents the whole package.
    """
    name: str
    schema: Optional[str] = None
    catalog: Optional[str] = None
    result_type: ProcedureType = ProcedureType.UNKNOWN
    remarks: Optional[str] = None
    source: Optional[str] = None
    is_package: bool = False

    @property
    def object_type(self) -> str:
        if self.is_package:
            return "PACKAGE"
        if self.result_type == ProcedureType.FUNCTION:
            return "FUNCTION"
        return "PROCEDURE"

    @property
    def package_name(self) -> Optional[str]:
        return self.catalog if self.is_package else None
