"""
Oracle Dialect - Oracle-specific metadata readers

Oracle groups routines into packages, keeps check constraints and
compile errors in the ALL_* dictionary views and reports materialized
views as plain tables through the baseline catalog calls.
"""

import re
from typing import Any, Dict, List, Optional

from .base import DatabaseDialect
from ..exceptions import MetadataError, UnsupportedCapabilityError
from ..models import ColumnIdentifier, IndexDefinition, ProcedureDefinition, TableIdentifier
from ..readers.base import ColumnHook, ErrorInfoReader, OutputReader, TableListHook
from ..readers.bundle import ReaderBundle
from ..readers.generic import (
    GenericIndexReader,
    GenericProcedureReader,
    SqlConstraintReader,
    SqlSequenceReader,
    SqlSynonymReader,
)
from ..row_set import RowSet
from ..sql_types import SqlType

import logging
logger = logging.getLogger(__name__)

# System generated NOT NULL checks, e.g. "ID" IS NOT NULL
_NOT_NULL_CHECK = re.compile(r'^\s*"?[\w$#]+"?\s+IS\s+NOT\s+NULL\s*$', re.IGNORECASE)


# ==================== Constraints and indexes ====================

class OracleConstraintReader(SqlConstraintReader):

    table_constraint_sql = (
        "SELECT constraint_name, search_condition\n"
        "FROM all_constraints\n"
        "WHERE constraint_type = 'C'\n"
        "  AND owner = ?\n"
        "  AND table_name = ?\n"
        "ORDER BY constraint_name"
    )

    def skip_constraint(self, name: Optional[str], condition: str) -> bool:
        return bool(_NOT_NULL_CHECK.match(condition))


class OracleIndexReader(GenericIndexReader):
    """Adds INDEX_TYPE (BITMAP, FUNCTION-BASED NORMAL) and index expressions."""

    INDEX_TYPE_SQL = (
        "SELECT index_name, index_type\n"
        "FROM all_indexes\n"
        "WHERE table_owner = ?\n"
        "  AND table_name = ?"
    )

    EXPRESSION_SQL = (
        "SELECT index_name, column_position, column_expression\n"
        "FROM all_ind_expressions\n"
        "WHERE table_owner = ?\n"
        "  AND table_name = ?"
    )

    def process_index_list(self, table: TableIdentifier, indexes: List[IndexDefinition]):
        if not indexes:
            return
        by_name = {index.name: index for index in indexes}
        params = (self._schema_of(table), table.raw_name)

        with self._recovering(f"index types of {table}"):
            for name, index_type in self._query(self.INDEX_TYPE_SQL, params):
                index = by_name.get(name)
                if index is not None and index_type:
                    index.index_type = index_type

        if not any(index.index_type.startswith("FUNCTION-BASED") for index in indexes):
            return
        with self._recovering(f"index expressions of {table}"):
            for name, position, expression in self._query(self.EXPRESSION_SQL, params):
                index = by_name.get(name)
                if index is None or not expression:
                    continue
                pos = int(position) - 1
                if 0 <= pos < len(index.columns):
                    index.columns[pos].name = str(expression).strip()

    def get_index_type_keyword(self, index_type: Optional[str]) -> str:
        if index_type and index_type.startswith("BITMAP"):
            return "BITMAP "
        return ""


# ==================== Procedures ====================

class OracleProcedureReader(GenericProcedureReader):
    """
    Procedures and packages.

    The driver reports package members with the package name as catalog.
    Those rows are collapsed into one PACKAGE row per package.
    """

    groups_routines = True

    SOURCE_SQL = (
        "SELECT text\n"
        "FROM all_source\n"
        "WHERE name = ?\n"
        "  AND owner = ?\n"
        "  AND type = ?\n"
        "ORDER BY line"
    )

    def get_procedures(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None
    ) -> RowSet:
        raw = super().get_procedures(None, schema, name_pattern)
        result = RowSet(raw.columns)
        packages = set()
        for row in raw:
            package = row[2]
            if not package:
                result.add_row(row)
                continue
            key = (row[3], package)
            if key in packages:
                continue
            packages.add(key)
            result.add_row([package, "PACKAGE", package, row[3], None, row[5]])
        return result

    def _read_source(self, owner: Optional[str], name: str, source_type: str) -> str:
        """Source lines of one object, prefixed with CREATE OR REPLACE."""
        lines = []
        with self._recovering(f"{source_type.lower()} source of {name}"):
            for (line,) in self._query(self.SOURCE_SQL, (name, owner, source_type)):
                if line is not None:
                    lines.append(line)
        if not lines:
            return ""
        return "CREATE OR REPLACE " + "".join(lines).rstrip()

    def get_package_source(self, owner: Optional[str], package_name: str) -> str:
        nl = self.meta.line_ending
        delimiter = self.meta.alternate_delimiter
        parts = []
        for source_type in ("PACKAGE", "PACKAGE BODY"):
            source = self._read_source(owner, package_name, source_type)
            if source:
                parts.append(source + nl + delimiter + nl)
        return nl.join(parts)

    def read_procedure_source(self, definition: ProcedureDefinition):
        owner = definition.schema or self.meta.get_current_schema()
        if definition.is_package or definition.catalog:
            definition.is_package = True
            source = self.get_package_source(owner, definition.catalog or definition.name)
        else:
            source = self._read_source(owner, definition.name, definition.object_type)
            if source:
                nl = self.meta.line_ending
                source = source + nl + self.meta.alternate_delimiter + nl
        definition.source = source or f"-- Source of {definition.name} not found"


# ==================== Sequences and synonyms ====================

class OracleSequenceReader(SqlSequenceReader):

    list_sql = (
        "SELECT sequence_name\n"
        "FROM all_sequences\n"
        "WHERE sequence_owner = ?\n"
        "ORDER BY sequence_name"
    )

    definition_sql = (
        "SELECT sequence_name, min_value, max_value, increment_by AS increment,\n"
        "       last_number AS start_value, cycle_flag, order_flag, cache_size\n"
        "FROM all_sequences\n"
        "WHERE sequence_owner = ?\n"
        "  AND sequence_name = ?"
    )

    def build_source(self, sequence_name: str, values: Dict[str, Any]) -> str:
        nl = self.meta.line_ending
        sql = super().build_source(sequence_name, values)
        cache_size = values.get("cache_size")
        if cache_size is not None and int(cache_size) > 0:
            sql += f"{nl}       CACHE {int(cache_size)}"
        else:
            sql += f"{nl}       NOCACHE"
        sql += f"{nl}       {'CYCLE' if values.get('cycle_flag') == 'Y' else 'NOCYCLE'}"
        sql += f"{nl}       {'ORDER' if values.get('order_flag') == 'Y' else 'NOORDER'}"
        return sql


class OracleSynonymReader(SqlSynonymReader):

    list_sql = (
        "SELECT synonym_name\n"
        "FROM all_synonyms\n"
        "WHERE owner = ?\n"
        "ORDER BY synonym_name"
    )

    table_sql = (
        "SELECT table_owner, table_name\n"
        "FROM all_synonyms\n"
        "WHERE owner = ?\n"
        "  AND synonym_name = ?"
    )

    def get_synonym_source(self, owner: Optional[str], name: str) -> str:
        if owner and owner.upper() == "PUBLIC":
            target = self.get_synonym_table(owner, name)
            if target is None:
                return ""
            nl = self.meta.line_ending
            return (
                f"CREATE PUBLIC SYNONYM {self.meta.quote_object_name(name)}{nl}"
                f"   FOR {self.meta.get_table_expression(target)};{nl}"
            )
        return super().get_synonym_source(owner, name)


# ==================== Error info ====================

class OracleErrorInfoReader(ErrorInfoReader):
    """Compile errors from ALL_ERRORS."""

    ERROR_SQL = (
        "SELECT line, position, text\n"
        "FROM all_errors\n"
        "WHERE owner = ?\n"
        "  AND name = ?\n"
        "  AND type = ?\n"
        "ORDER BY sequence"
    )

    def get_error_info(self, schema: Optional[str], object_name: str, object_type: str) -> str:
        owner = schema or self.meta.get_current_schema()
        nl = self.meta.line_ending
        lines = []
        with self._recovering(f"errors of {object_name}"):
            for line, position, text in self._query(self.ERROR_SQL, (owner, object_name, object_type.upper())):
                lines.append(f"L:{line} P:{position} {str(text).strip()}")
        if not lines:
            return ""
        header = f"Errors for {object_type.upper()} {object_name}"
        return header + nl + nl + nl.join(lines)


# ==================== Hooks ====================

class OracleTableListHook(TableListHook):
    """
    Hides internal synonyms (names containing '/'), applies the synonym
    exclude pattern and relabels materialized views.
    """

    MVIEW_SQL = "SELECT mview_name FROM all_mviews WHERE owner = ?"

    def process_table_list(self, rows: RowSet, schema: Optional[str]):
        exclude = self.meta.get_exclude_pattern("exclude_synonyms")
        for i in range(rows.row_count - 1, -1, -1):
            if (rows.get_string(i, "TYPE") or "").upper() != "SYNONYM":
                continue
            name = rows.get_string(i, "NAME") or ""
            if "/" in name or (exclude is not None and exclude.search(name)):
                rows.delete_row(i)

        if not self.settings.get_dialect_bool("detect_snapshots", self.profile.db_id, self.profile.family, True):
            return
        if rows.row_count == 0:
            return

        mviews = set()
        with self._recovering("materialized views"):
            owner = schema or self.meta.get_current_schema()
            mviews = {r[0] for r in self._query(self.MVIEW_SQL, (owner,))}
        if not mviews:
            return
        for i in range(rows.row_count):
            if rows.get_string(i, "NAME") in mviews and rows.get_string(i, "TYPE") == "TABLE":
                rows.set_value(i, "TYPE", "MATERIALIZED VIEW")


class OracleColumnHook(ColumnHook):
    """Character length semantics and DATE reported as TIMESTAMP."""

    CHAR_SEMANTICS_SQL = (
        "SELECT column_name, char_used, char_length\n"
        "FROM all_tab_columns\n"
        "WHERE owner = ?\n"
        "  AND table_name = ?\n"
        "  AND data_type IN ('VARCHAR2', 'CHAR')"
    )

    def process_columns(self, table: TableIdentifier, columns: List[ColumnIdentifier]):
        date_as_timestamp = self.settings.get_dialect_bool(
            "date_as_timestamp", self.profile.db_id, self.profile.family, False
        )
        if date_as_timestamp:
            for column in columns:
                if column.dbms_type.upper() == "DATE":
                    column.data_type = SqlType.TIMESTAMP

        if not any(c.dbms_type.upper().startswith(("VARCHAR2", "CHAR")) for c in columns):
            return
        semantics = {}
        with self._recovering(f"character semantics of {table}"):
            for name, char_used, length in self._query(self.CHAR_SEMANTICS_SQL, (self._schema_of(table), table.raw_name)):
                semantics[name] = (char_used, length)
        for column in columns:
            char_used, length = semantics.get(column.name, (None, None))
            if char_used == "C":
                base_type = column.dbms_type.split("(")[0]
                column.dbms_type = f"{base_type}({length} Char)"
                column.column_size = int(length)


# ==================== DBMS_OUTPUT ====================

class OracleDbmsOutput(OutputReader):
    """
    Access to the DBMS_OUTPUT buffer.

    Reading lines requires a context that can call procedures with output
    parameters; otherwise get_messages() returns an empty string.
    """

    def __init__(self, meta):
        super().__init__(meta)
        self.enabled = False

    def enable(self, limit: int = -1):
        size = limit if limit > 0 else None
        try:
            self.connection.execute_update("BEGIN dbms_output.enable(?); END;", (size,))
            self.enabled = True
            logger.debug(f"DBMS_OUTPUT enabled with limit {size}")
        except MetadataError as e:
            logger.warning(f"Could not enable DBMS_OUTPUT: {e}")

    def disable(self):
        if not self.enabled:
            return
        try:
            self.connection.execute_update("BEGIN dbms_output.disable; END;")
        except MetadataError as e:
            logger.warning(f"Could not disable DBMS_OUTPUT: {e}")
        self.enabled = False

    def get_messages(self) -> str:
        if not self.enabled:
            return ""
        lines = []
        try:
            while True:
                line, status = self.connection.call_procedure("dbms_output.get_line", [None, None])
                if status != 0:
                    break
                lines.append(line or "")
        except UnsupportedCapabilityError as e:
            logger.debug(f"Cannot read DBMS_OUTPUT: {e}")
        except MetadataError as e:
            logger.warning(f"Could not read DBMS_OUTPUT: {e}")
        return self.meta.line_ending.join(lines)


# ==================== Dialect ====================

class OracleDialect(DatabaseDialect):
    """Dialect for Oracle databases."""

    family = "oracle"

    def create_readers(self, meta) -> ReaderBundle:
        return ReaderBundle(
            constraint_reader=OracleConstraintReader(meta),
            index_reader=OracleIndexReader(meta),
            procedure_reader=OracleProcedureReader(meta),
            sequence_reader=OracleSequenceReader(meta),
            synonym_reader=OracleSynonymReader(meta),
            error_info_reader=OracleErrorInfoReader(meta),
            table_list_hooks=[OracleTableListHook(meta)],
            column_hooks=[OracleColumnHook(meta)],
            output_reader=OracleDbmsOutput(meta),
        )

    def adjust_schema_list(self, schemas: List[str]) -> List[str]:
        """PUBLIC owns the public synonyms but is not reported as a schema."""
        result = list(schemas)
        if "PUBLIC" not in result:
            result.append("PUBLIC")
        return sorted(result)

    def format_trigger_source(self, meta, source: str) -> str:
        nl = meta.line_ending
        return "CREATE OR REPLACE TRIGGER " + source.strip() + nl + meta.alternate_delimiter + nl
