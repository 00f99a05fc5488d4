"""
Generic Capability Readers - Defaults built on the baseline catalog calls

These readers are used for every capability a dialect does not override.
The Sql* classes are building blocks for dialect readers that only differ
in the catalog queries they run.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

from .base import (
    ConstraintReader,
    ErrorInfoReader,
    IndexReader,
    ProcedureReader,
    SchemaInfoReader,
    SequenceReader,
    SynonymReader,
)
from ..models import IndexColumn, IndexDefinition, ProcedureDefinition, ProcedureType, TableIdentifier
from ..row_set import RowSet
from ..sql_types import get_sql_type_display

import logging
logger = logging.getLogger(__name__)

PROCEDURE_LIST_COLUMNS = ("PROCEDURE_NAME", "TYPE", "CATALOG", "SCHEMA", "REMARKS", "RESULT_TYPE")

PROCEDURE_COLUMN_COLUMNS = ("COLUMN_NAME", "TYPE", "DATA_TYPE", "SQL_TYPE", "REMARKS")

# COLUMN_TYPE values of the procedure columns catalog call
_PARAMETER_MODES = {0: "UNKNOWN", 1: "IN", 2: "INOUT", 3: "RESULTSET", 4: "OUT", 5: "RETURN"}

_SIMPLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_$#]*$")


# ==================== Constraints ====================

class GenericConstraintReader(ConstraintReader):
    """The baseline catalog calls report no check constraints."""

    supported = False

    def get_column_constraints(self, table: TableIdentifier) -> Dict[str, str]:
        return {}

    def get_table_constraints(self, table: TableIdentifier) -> Optional[str]:
        return None


class SqlConstraintReader(ConstraintReader):
    """
    Constraint reader driven by two catalog queries.

    column_constraint_sql returns (column_name, condition) rows,
    table_constraint_sql returns (constraint_name, condition) rows. Both
    take the parameters produced by _params().
    """

    column_constraint_sql: Optional[str] = None
    table_constraint_sql: Optional[str] = None

    def _params(self, table: TableIdentifier) -> Sequence[Any]:
        return (self._schema_of(table), table.raw_name)

    def format_condition(self, condition: str) -> str:
        text = condition.strip()
        if text.upper().startswith("CHECK"):
            return text
        return f"CHECK ({text})"

    def skip_constraint(self, name: Optional[str], condition: str) -> bool:
        return False

    def get_column_constraints(self, table: TableIdentifier) -> Dict[str, str]:
        result: Dict[str, str] = {}
        if not self.column_constraint_sql:
            return result
        with self._recovering(f"column constraints for {table}"):
            rows = self._query(self.column_constraint_sql, self._params(table))
            for column, condition in rows:
                if column and condition and not self.skip_constraint(None, condition):
                    result[column.strip()] = self.format_condition(condition)
        return result

    def get_table_constraints(self, table: TableIdentifier) -> Optional[str]:
        if not self.table_constraint_sql:
            return None
        clauses: List[str] = []
        with self._recovering(f"table constraints for {table}"):
            rows = self._query(self.table_constraint_sql, self._params(table))
            for name, condition in rows:
                if not condition or self.skip_constraint(name, condition):
                    continue
                clause = self.format_condition(condition)
                name = name.strip() if name else None
                if name and not self.meta.is_system_constraint_name(name):
                    clause = f"CONSTRAINT {self.meta.quote_object_name(name)} {clause}"
                clauses.append(clause)
        if not clauses:
            return None
        return "\n   ,".join(clauses)


# ==================== Indexes ====================

class GenericIndexReader(IndexReader):
    """Indexes from the baseline index catalog call and the create_index template."""

    def get_index_info(self, table: TableIdentifier) -> RowSet:
        return self.connection.get_index_info(table.raw_catalog, table.raw_schema, table.raw_name, False)

    def get_index_type_keyword(self, index_type: Optional[str]) -> str:
        """Keyword placed between UNIQUE and INDEX (e.g. "BITMAP ")."""
        return ""

    def _column_expression(self, column: IndexColumn) -> str:
        name = column.name
        if _SIMPLE_NAME.match(name):
            name = self.meta.quote_object_name(name)
        if column.direction:
            return f"{name} {column.direction}"
        return name

    def build_create_index_sql(
        self,
        table: TableIdentifier,
        index_name: str,
        unique: bool,
        columns: List[IndexColumn],
        index_type: Optional[str] = None,
        table_name_to_use: Optional[str] = None
    ) -> str:
        template = self.meta.get_template("create_index")
        if template is None:
            return ""
        return template.render({
            "table_name": table_name_to_use or self.meta.get_table_expression(table),
            "index_name": self.meta.quote_object_name(index_name),
            "unique_key": "UNIQUE " if unique else "",
            "index_type": self.get_index_type_keyword(index_type),
            "columnlist": ", ".join(self._column_expression(c) for c in columns),
        })

    def get_index_source(
        self,
        table: TableIdentifier,
        indexes: List[IndexDefinition],
        table_name_to_use: Optional[str] = None
    ) -> str:
        """CREATE INDEX statements for all indexes except the primary key index."""
        nl = self.meta.line_ending
        statements = []
        for index in indexes:
            if index.primary_key_index:
                continue
            # Indexes created implicitly for constraints (sqlite_autoindex_*, SYS_*)
            if index.definition is None and self.meta.is_system_constraint_name(index.name):
                continue
            if index.definition and table_name_to_use is None:
                sql = index.definition.strip().rstrip(";")
            else:
                sql = self.build_create_index_sql(
                    table, index.name, index.unique, index.columns, index.index_type, table_name_to_use
                )
                if not sql:
                    continue
                if index.options:
                    sql += index.options
            statements.append(sql + ";")
        if not statements:
            return ""
        return nl.join(statements) + nl


# ==================== Procedures ====================

class GenericProcedureReader(ProcedureReader):
    """Procedures from the baseline procedure catalog calls."""

    def get_procedures(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None
    ) -> RowSet:
        result = RowSet(PROCEDURE_LIST_COLUMNS)
        with self._recovering("procedure list"):
            raw = self.connection.get_procedures(catalog, schema, name_pattern)
            for i in range(raw.row_count):
                name = self.clean_procedure_name(raw.get_string(i, "PROCEDURE_NAME"))
                result_type = raw.get_int(i, "PROCEDURE_TYPE", ProcedureType.UNKNOWN)
                try:
                    type_name = ProcedureType(result_type).name
                except ValueError:
                    type_name = ProcedureType.UNKNOWN.name
                result.add_row([
                    name,
                    type_name,
                    raw.get_string(i, "PROCEDURE_CAT"),
                    raw.get_string(i, "PROCEDURE_SCHEM"),
                    raw.get_string(i, "REMARKS"),
                    result_type,
                ])
        return result

    @staticmethod
    def clean_procedure_name(name: Optional[str]) -> Optional[str]:
        """Remove the ';<number>' version suffix some drivers append."""
        if name and ";" in name:
            return name[:name.index(";")]
        return name

    def get_procedure_columns(self, definition: ProcedureDefinition) -> RowSet:
        result = RowSet(PROCEDURE_COLUMN_COLUMNS)
        with self._recovering(f"parameters of {definition.name}"):
            raw = self.connection.get_procedure_columns(definition.catalog, definition.schema, definition.name)
            for i in range(raw.row_count):
                sql_type = raw.get_int(i, "DATA_TYPE")
                display = get_sql_type_display(
                    raw.get_string(i, "TYPE_NAME") or "",
                    sql_type,
                    raw.get_int(i, "COLUMN_SIZE"),
                    raw.get_int(i, "DECIMAL_DIGITS"),
                )
                result.add_row([
                    raw.get_string(i, "COLUMN_NAME"),
                    _PARAMETER_MODES.get(raw.get_int(i, "COLUMN_TYPE"), "UNKNOWN"),
                    display,
                    sql_type,
                    raw.get_string(i, "REMARKS"),
                ])
        return result

    def read_procedure_source(self, definition: ProcedureDefinition):
        values = {"name": definition.name, "schema": definition.schema, "catalog": definition.catalog}
        sql = self.meta.render_query("procedure_source", values)
        if sql is None:
            definition.source = (
                f"-- The source of {definition.object_type.lower()} {definition.name} "
                f"cannot be retrieved for {self.profile.product_name}"
            )
            return

        source = None
        with self._recovering(f"source of {definition.name}"):
            rows = self._query(sql)
            source = "".join(str(r[0]) for r in rows if r[0] is not None)
        definition.source = source or f"-- Source of {definition.name} not found"


# ==================== Sequences ====================

class GenericSequenceReader(SequenceReader):
    """No sequence support."""

    supported = False

    def get_sequence_list(self, schema: Optional[str]) -> List[str]:
        return []

    def get_sequence_definition(self, schema: Optional[str], name: str) -> RowSet:
        return RowSet(["SEQUENCE_NAME"])

    def get_sequence_source(self, schema: Optional[str], name: str) -> str:
        return ""


class SqlSequenceReader(SequenceReader):
    """
    Sequence reader driven by catalog queries.

    list_sql takes the schema and returns sequence names; definition_sql
    takes (schema, name) and returns one row describing the sequence.
    """

    list_sql: str = ""
    definition_sql: str = ""

    def _list_params(self, schema: Optional[str]) -> Sequence[Any]:
        return (schema,)

    def _definition_params(self, schema: Optional[str], name: str) -> Sequence[Any]:
        return (schema, name)

    def get_sequence_list(self, schema: Optional[str]) -> List[str]:
        names: List[str] = []
        with self._recovering("sequence list"):
            rows = self._query(self.list_sql, self._list_params(schema))
            names = [str(r[0]).strip() for r in rows if r[0]]
        return names

    def get_sequence_definition(self, schema: Optional[str], name: str) -> RowSet:
        result = RowSet(["SEQUENCE_NAME"])
        with self._recovering(f"definition of sequence {name}"):
            result = self._query(self.definition_sql, self._definition_params(schema, name))
        return result

    def get_sequence_source(self, schema: Optional[str], name: str) -> str:
        definition = self.get_sequence_definition(schema, name)
        if definition.row_count == 0:
            return ""
        values = {k.lower(): v for k, v in definition.records()[0].items()}
        sequence_name = self.meta.quote_object_name(name)
        if schema:
            sequence_name = f"{self.meta.quote_object_name(schema)}.{sequence_name}"
        nl = self.meta.line_ending
        return self.build_source(sequence_name, values) + ";" + nl

    def build_source(self, sequence_name: str, values: Dict[str, Any]) -> str:
        """CREATE SEQUENCE statement from the definition row (lower case keys)."""
        parts = [f"CREATE SEQUENCE {sequence_name}"]
        if values.get("increment") is not None:
            parts.append(f"INCREMENT BY {values['increment']}")
        if values.get("min_value") is not None:
            parts.append(f"MINVALUE {values['min_value']}")
        if values.get("max_value") is not None:
            parts.append(f"MAXVALUE {values['max_value']}")
        if values.get("start_value") is not None:
            parts.append(f"START WITH {values['start_value']}")
        if str(values.get("cycle", "")).strip().upper() in ("Y", "YES", "TRUE", "1"):
            parts.append("CYCLE")
        return self.meta.line_ending.join(
            [parts[0]] + [f"       {p}" for p in parts[1:]]
        )


# ==================== Synonyms ====================

class GenericSynonymReader(SynonymReader):
    """No synonym support."""

    supported = False

    def get_synonym_list(self, schema: Optional[str]) -> List[str]:
        return []

    def get_synonym_table(self, owner: Optional[str], name: str) -> Optional[TableIdentifier]:
        return None

    def get_synonym_source(self, owner: Optional[str], name: str) -> str:
        return ""


class SqlSynonymReader(SynonymReader):
    """
    Synonym reader driven by catalog queries.

    list_sql takes the owner and returns synonym names; table_sql takes
    (owner, name) and returns (target schema, target name).
    """

    list_sql: str = ""
    table_sql: str = ""
    synonym_keyword: str = "SYNONYM"

    def get_synonym_list(self, schema: Optional[str]) -> List[str]:
        names: List[str] = []
        with self._recovering("synonym list"):
            rows = self._query(self.list_sql, (schema,))
            names = [str(r[0]).strip() for r in rows if r[0]]
        return names

    def get_synonym_table(self, owner: Optional[str], name: str) -> Optional[TableIdentifier]:
        target = None
        with self._recovering(f"target of synonym {name}"):
            rows = self._query(self.table_sql, (owner, name))
            if rows.row_count > 0:
                target_schema = rows.get_string(0, 0)
                target_name = rows.get_string(0, 1)
                if target_name:
                    target = TableIdentifier(
                        name=target_name.strip(),
                        schema=target_schema.strip() if target_schema else None,
                        never_adjust_case=True,
                    )
        return target

    def get_synonym_source(self, owner: Optional[str], name: str) -> str:
        target = self.get_synonym_table(owner, name)
        if target is None:
            return ""
        synonym_name = self.meta.quote_object_name(name)
        if owner:
            synonym_name = f"{self.meta.quote_object_name(owner)}.{synonym_name}"
        target_name = self.meta.get_table_expression(target)
        return f"CREATE {self.synonym_keyword} {synonym_name}{self.meta.line_ending}   FOR {target_name};{self.meta.line_ending}"


# ==================== Schema and error info ====================

class GenericSchemaInfoReader(SchemaInfoReader):
    """Current schema from the configured current_schema_query setting."""

    def get_current_schema(self) -> Optional[str]:
        sql = self.settings.get_dialect_property("current_schema_query", self.profile.db_id, self.profile.family)
        if not sql:
            return None
        schema = None
        with self._recovering("current schema"):
            rows = self._query(sql)
            if rows.row_count > 0:
                schema = rows.get_string(0, 0)
        return schema.strip() if schema else None


class GenericErrorInfoReader(ErrorInfoReader):
    """No server side compile errors."""

    supported = False

    def get_error_info(self, schema: Optional[str], object_name: str, object_type: str) -> str:
        return ""
