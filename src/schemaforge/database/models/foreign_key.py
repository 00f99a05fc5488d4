"""
ForeignKeyDefinition model - Foreign key constraints and referential rules
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .table_identifier import TableIdentifier
from ..row_set import RowSet


class FkRule(Enum):
    """Referential actions, keyed by the standard catalog rule codes."""
    CASCADE = (0, "CASCADE")
    RESTRICT = (1, "RESTRICT")
    SET_NULL = (2, "SET NULL")
    NO_ACTION = (3, "NO ACTION")
    SET_DEFAULT = (4, "SET DEFAULT")
    INITIALLY_DEFERRED = (5, "INITIALLY DEFERRED")
    INITIALLY_IMMEDIATE = (6, "INITIALLY IMMEDIATE")
    NOT_DEFERRABLE = (7, "NOT DEFERRABLE")

    def __init__(self, code: int, text: str):
        self.code = code
        self.text = text

    @property
    def setting_name(self) -> str:
        """Name used in rule override settings, e.g. 'no_action'."""
        return self.name.lower()

    @classmethod
    def from_code(cls, code: Optional[int]) -> Optional["FkRule"]:
        for rule in cls:
            if rule.code == code:
                return rule
        return None

    @classmethod
    def from_text(cls, text: Optional[str]) -> Optional["FkRule"]:
        if not text:
            return None
        normalized = " ".join(text.upper().replace("_", " ").split())
        for rule in cls:
            if rule.text == normalized:
                return rule
        return None


def _target_of(reference: Optional[str]) -> str:
    """Table part of a "[schema.]table.column" reference."""
    reference = reference or ""
    return reference.rsplit(".", 1)[0] if "." in reference else reference


def _rule_of(rows: RowSet, row: int, column: str) -> Optional[FkRule]:
    """Rule of a key row, preferring the numeric code over the display text."""
    value_column = f"{column}_VALUE"
    if rows.has_column(value_column) and rows.get_value(row, value_column) is not None:
        rule = FkRule.from_code(rows.get_int(row, value_column, -1))
        if rule is not None:
            return rule
    return FkRule.from_text(rows.get_string(row, column))


@dataclass
class ForeignKeyDefinition:
    """A foreign key; one constraint may span several column pairs."""
    name: Optional[str]
    target_table: TableIdentifier
    columns: List[str] = field(default_factory=list)
    target_columns: List[str] = field(default_factory=list)
    update_rule: Optional[FkRule] = None
    delete_rule: Optional[FkRule] = None

    @classmethod
    def group_rows(cls, rows: RowSet) -> List["ForeignKeyDefinition"]:
        """
        Build definitions from per-column foreign key rows.

        Rows are the result of MetadataFacade.get_foreign_keys(): FK_NAME,
        COLUMN, REFERENCES ("[schema.]table.column"), UPDATE_RULE and
        DELETE_RULE. Constraints keep the order in which they first appear;
        columns are ordered by KEY_SEQ when present. Unnamed keys are told
        apart by their target table.
        """
        groups: Dict[Tuple[Optional[str], str], List[tuple]] = {}
        has_seq = rows.has_column("KEY_SEQ")
        for i in range(rows.row_count):
            name = rows.get_string(i, "FK_NAME")
            target = "" if name else _target_of(rows.get_string(i, "REFERENCES"))
            seq = rows.get_int(i, "KEY_SEQ", i) if has_seq else i
            groups.setdefault((name, target), []).append((seq, i))

        definitions = []
        for (name, _target), members in groups.items():
            members.sort(key=lambda m: m[0])
            first = members[0][1]
            fk = cls(
                name=name,
                target_table=TableIdentifier.parse(_target_of(rows.get_string(first, "REFERENCES"))),
                update_rule=_rule_of(rows, first, "UPDATE_RULE"),
                delete_rule=_rule_of(rows, first, "DELETE_RULE"),
            )
            for _seq, row in members:
                fk.columns.append(rows.get_string(row, "COLUMN"))
                ref = rows.get_string(row, "REFERENCES") or ""
                fk.target_columns.append(ref.rsplit(".", 1)[-1])
            definitions.append(fk)
        return definitions
