"""
Metadata Facade - Uniform metadata API over all database dialects

One MetadataFacade is created per ConnectionContext. At construction it
detects the dialect, builds the IdentifierPolicy, wires the capability
readers and computes every cache it needs. After that the facade never
changes; configuration changes require a new facade built with a new
Settings snapshot.

Read-only calls never raise for database errors: failures are logged and
an empty result is returned. Mutating calls (drop_table) raise
StructuralOperationError. Every call on a closed facade raises
MetadataClosedError.

Usage:
    context = SqliteConnectionContext.open("shop.db")
    with MetadataFacade(context) as meta:
        for table in meta.get_table_list(types=["TABLE"]):
            columns = meta.get_table_definition(table)
            print(meta.ddl.get_table_source(table, columns))
"""

import re
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .cancellation import CancellationToken
from .connection import ConnectionContext
from .ddl.object_source import ObjectSourceBuilder
from .ddl.synthesizer import DDLSynthesizer
from .dialects import DialectDetector
from .exceptions import ConfigurationError, MetadataClosedError, MetadataError, StructuralOperationError
from .identifier_policy import IdentifierPolicy
from .models import (
    ColumnIdentifier,
    FkRule,
    ForeignKeyDefinition,
    IndexDefinition,
    ObjectNameFilter,
    ProcedureDefinition,
    ProcedureType,
    TableIdentifier,
)
from .quirks import QuirkTable
from .readers.base import recovering
from .row_set import RowSet
from .sql_templates import SqlTemplate, SqlTemplateStore, get_template_store
from .sql_types import DECIMAL_TYPES, get_sql_type_display
from ..config.settings import Settings, get_settings
from ..utils.sql_helpers import get_create_type, replace_dollar_quotes

import logging
logger = logging.getLogger(__name__)

TABLE_LIST_COLUMNS = ("NAME", "TYPE", "CATALOG", "SCHEMA", "REMARKS")

TABLE_DEFINITION_COLUMNS = (
    "COLUMN_NAME", "DATA_TYPE", "PK", "NULLABLE", "DEFAULT", "REMARKS",
    "SQL_TYPE", "SCALE/SIZE", "PRECISION", "POSITION",
)

FK_COLUMNS = (
    "FK_NAME", "COLUMN", "REFERENCES", "UPDATE_RULE", "DELETE_RULE",
    "UPDATE_RULE_VALUE", "DELETE_RULE_VALUE", "KEY_SEQ",
)

INDEX_LIST_COLUMNS = ("INDEX_NAME", "UNIQUE", "PK", "DEFINITION", "TYPE")

TRIGGER_LIST_COLUMNS = ("NAME", "TYPE", "EVENT")

_SEQUENCE_TYPES = ("SEQUENCE", "GENERATOR")
_SYNONYM_TYPES = ("SYNONYM", "ALIAS")
_EXCLUDE_KEY = re.compile(r"^exclude\.(.+)$")


class MetadataFacade:
    """
    Metadata access for one connection.

    Args:
        connection: Live ConnectionContext
        settings: Settings snapshot (the packaged defaults if omitted)
        templates: SqlTemplateStore (the shared store if omitted)
    """

    def __init__(
        self,
        connection: ConnectionContext,
        settings: Optional[Settings] = None,
        templates: Optional[SqlTemplateStore] = None
    ):
        self.connection = connection
        self.settings = settings if settings is not None else get_settings()
        self.templates = templates if templates is not None else get_template_store()
        self._closed = False

        self.dialect, self.profile = DialectDetector(self.settings).detect(connection)
        self.quirks = QuirkTable(self.profile, self.settings)
        self.policy = IdentifierPolicy.create(self.profile, connection, self.settings)

        # ==================== Caches ====================
        self.line_ending = "\r\n" if str(self.settings.get_property("ddl.line_ending", "lf")).lower() == "crlf" else "\n"
        self.alternate_delimiter = str(self.settings.get_property("ddl.alternate_delimiter", "/"))
        self._index_types = self._build_index_type_map()
        self._objects_with_data = self._build_objects_with_data()
        self._exclude_patterns = self._build_exclude_patterns()
        self._system_constraint_pattern = self._compile_setting("system_constraint_names")
        self._select_into_pattern = self._compile_setting("select_into_pattern")
        self._fk_rule_texts = self._build_fk_rule_texts()
        self._fk_rules_omitted = frozenset(self._dialect_list("fk_rules_omitted"))
        self._ignored_schemas = [s.upper() for s in self._dialect_list("ignore_schemas")]
        self._ignored_catalogs = [c.upper() for c in self._dialect_list("ignore_catalogs")]

        self.readers = self.dialect.create_readers(self).fill_defaults(self)
        self.ddl = DDLSynthesizer(self)
        self.objects = ObjectSourceBuilder(self)

        if self.readers.output_reader is not None and self._dialect_bool("dbms_output.enabled", False):
            self.readers.output_reader.enable(self._dialect_int("dbms_output.limit", -1))

    # ==================== Lifecycle ====================

    def close(self):
        """Release dialect resources. Safe to call more than once."""
        if self._closed:
            return
        if self.readers.output_reader is not None:
            self.readers.output_reader.close()
        self._closed = True
        logger.debug(f"Metadata for {self.profile.db_id} closed")

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "MetadataFacade":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _check_open(self):
        if self._closed:
            raise MetadataClosedError("Metadata has been closed")

    # ==================== Settings helpers ====================

    def _dialect_property(self, key: str, default=None):
        return self.settings.get_dialect_property(key, self.profile.db_id, self.profile.family, default)

    def _dialect_bool(self, key: str, default: bool = False) -> bool:
        return self.settings.get_dialect_bool(key, self.profile.db_id, self.profile.family, default)

    def _dialect_int(self, key: str, default: int = 0) -> int:
        return self.settings.get_dialect_int(key, self.profile.db_id, self.profile.family, default)

    def _dialect_list(self, key: str) -> List[str]:
        return self.settings.get_dialect_list(key, self.profile.db_id, self.profile.family)

    def _compile(self, key: str, expression: Optional[str]) -> Optional["re.Pattern"]:
        """Compile a configured regex; an invalid one disables that feature."""
        if not expression:
            return None
        try:
            return re.compile(str(expression), re.IGNORECASE)
        except re.error as e:
            error = ConfigurationError(f"Invalid regular expression for {key}: {expression!r} ({e})")
            logger.warning(f"{error}, ignoring it")
            return None

    def _compile_setting(self, key: str) -> Optional["re.Pattern"]:
        return self._compile(key, self._dialect_property(key))

    def _build_index_type_map(self) -> Dict[int, str]:
        """Map of index TYPE codes to names from "code,NAME;code,NAME"."""
        mapping: Dict[int, str] = {}
        value = self._dialect_property("indextypes")
        if not value:
            return mapping
        for entry in str(value).split(";"):
            if not entry.strip():
                continue
            code, _, name = entry.partition(",")
            try:
                mapping[int(code.strip())] = name.strip()
            except ValueError:
                logger.warning(f"Ignoring invalid index type entry {entry!r} for {self.profile.db_id}")
        return mapping

    def _build_objects_with_data(self) -> FrozenSet[str]:
        types = {t.upper() for t in self._dialect_list("selectable_types")}
        types.add(self.profile.table_type_name.upper())
        return frozenset(types)

    def _build_exclude_patterns(self) -> Dict[str, "re.Pattern"]:
        """Exclude patterns per object type ("db.<level>.exclude.<type>") plus named ones."""
        expressions: Dict[str, str] = {}
        levels = ["default", self.profile.family, self.profile.db_id]
        for level in levels:
            prefix = f"db.{level}."
            for key in self.settings:
                if not key.startswith(prefix):
                    continue
                match = _EXCLUDE_KEY.match(key[len(prefix):])
                if match:
                    expressions[match.group(1).replace("_", " ").upper()] = self.settings.get_property(key)
        patterns: Dict[str, "re.Pattern"] = {}
        for object_type, expression in expressions.items():
            pattern = self._compile(f"exclude.{object_type}", expression)
            if pattern is not None:
                patterns[object_type] = pattern
        synonyms = self._compile_setting("exclude_synonyms")
        if synonyms is not None:
            patterns["exclude_synonyms"] = synonyms
        return patterns

    def _build_fk_rule_texts(self) -> Dict[FkRule, str]:
        texts = {}
        for rule in FkRule:
            override = self._dialect_property(f"fkrule.{rule.setting_name}")
            texts[rule] = rule.text if override is None else str(override)
        return texts

    def get_exclude_pattern(self, name: str) -> Optional["re.Pattern"]:
        """Compiled exclude pattern for an object type or a named pattern, None if not configured."""
        return self._exclude_patterns.get(name)

    # ==================== Templates ====================

    def get_template(self, key: str) -> Optional[SqlTemplate]:
        return self.templates.get_template(key, self.profile, self.settings)

    def render_template(self, template: SqlTemplate, values: Mapping[str, Optional[str]]) -> str:
        """Render with the values the template accepts; others are dropped."""
        return template.render({k: v for k, v in values.items() if k in template.allowed})

    def render_query(self, key: str, values: Mapping[str, Optional[str]]) -> Optional[str]:
        """Render a query template for this dialect, None if the dialect has none."""
        template = self.get_template(key)
        if template is None:
            return None
        return self.quirks.adjust_query(self.render_template(template, values))

    # ==================== Profile shortcuts ====================

    @property
    def db_id(self) -> str:
        return self.profile.db_id

    @property
    def product_name(self) -> str:
        return self.profile.product_name

    @property
    def schema_term(self) -> str:
        return self.profile.schema_term

    @property
    def catalog_term(self) -> str:
        return self.profile.catalog_term

    # ==================== Identifiers ====================

    def quote_object_name(self, name: Optional[str], force_quote: bool = False) -> Optional[str]:
        return self.policy.quote_object_name(name, force_quote)

    def adjust_object_name_case(self, name: Optional[str]) -> Optional[str]:
        return self.policy.adjust_object_name_case(name)

    def adjust_schema_name_case(self, name: Optional[str]) -> Optional[str]:
        return self.policy.adjust_schema_name_case(name)

    def is_keyword(self, name: Optional[str]) -> bool:
        return self.policy.is_keyword(name)

    def _adjusted(self, table: TableIdentifier) -> TableIdentifier:
        return table.copy().adjust_case(self.policy)

    def get_table_expression(self, table: TableIdentifier) -> str:
        """Name of a table for use in SQL, with schema and catalog only where needed."""
        adjusted = self._adjusted(table)
        return adjusted.table_expression(
            self.policy,
            include_schema=self.need_schema_in_dml(adjusted),
            include_catalog=self.need_catalog_in_dml(adjusted),
        )

    def is_system_constraint_name(self, name: Optional[str]) -> bool:
        if not name or self._system_constraint_pattern is None:
            return False
        return bool(self._system_constraint_pattern.search(name))

    # ==================== DML helpers ====================

    def ignore_schema(self, schema: Optional[str]) -> bool:
        if not schema:
            return True
        if "*" in self._ignored_schemas:
            return True
        return self.policy.trim_quotes(schema).upper() in self._ignored_schemas

    def ignore_catalog(self, catalog: Optional[str]) -> bool:
        if not catalog or not self.profile.supports_catalogs:
            return True
        raw = self.policy.trim_quotes(catalog).upper()
        if "*" in self._ignored_catalogs or raw in self._ignored_catalogs:
            return True
        current = self.get_current_catalog()
        return current is not None and current.upper() == raw

    def need_schema_in_dml(self, table: TableIdentifier) -> bool:
        if not self._dialect_bool("need_schema_in_dml", True):
            return False
        return not self.ignore_schema(table.schema)

    def need_catalog_in_dml(self, table: TableIdentifier) -> bool:
        if not self._dialect_bool("need_catalog_in_dml", True):
            return False
        return not self.ignore_catalog(table.catalog)

    def get_cascade_constraints_verb(self, object_type: str = "TABLE") -> str:
        key = object_type.strip().lower().replace(" ", "_")
        return str(self._dialect_property(f"drop.{key}.cascade", "") or "")

    @staticmethod
    def is_view_type(object_type: Optional[str]) -> bool:
        return bool(object_type) and "VIEW" in object_type.upper()

    @staticmethod
    def is_synonym_type(object_type: Optional[str]) -> bool:
        return bool(object_type) and object_type.upper() in _SYNONYM_TYPES

    @staticmethod
    def is_sequence_type(object_type: Optional[str]) -> bool:
        return bool(object_type) and object_type.upper() in _SEQUENCE_TYPES

    def object_type_can_contain_data(self, object_type: Optional[str]) -> bool:
        return bool(object_type) and object_type.upper() in self._objects_with_data

    def is_select_into_new_table(self, sql: str) -> bool:
        """True for SELECT ... INTO statements that create a table (PostgreSQL, Informix)."""
        if self._select_into_pattern is None or not sql:
            return False
        return bool(self._select_into_pattern.search(sql))

    def filter_ddl(self, sql: str) -> str:
        """Prepare DDL for execution through the driver."""
        if self.profile.is_family("postgresql"):
            return replace_dollar_quotes(sql)
        return sql

    @staticmethod
    def get_object_type(sql: str) -> Optional[str]:
        """Type of object created by a CREATE statement (TABLE, VIEW, PACKAGE BODY, ...)."""
        return get_create_type(sql)

    # ==================== Catalogs and schemas ====================

    def get_catalogs(self) -> List[str]:
        self._check_open()
        catalogs: List[str] = []
        with recovering(self.connection, self.profile, "catalog list"):
            catalogs = list(self.connection.get_catalogs())
        return catalogs

    def get_catalog_information(self) -> RowSet:
        """Catalog list; empty if the only catalog is the current one."""
        result = RowSet([self.catalog_term.upper()])
        catalogs = self.get_catalogs()
        if len(catalogs) == 1 and catalogs[0] == self.get_current_catalog():
            return result
        for catalog in catalogs:
            result.add_row([catalog])
        return result

    def get_schemas(self, name_filter: Optional[ObjectNameFilter] = None) -> List[str]:
        self._check_open()
        schemas: List[str] = []
        with recovering(self.connection, self.profile, "schema list"):
            schemas = list(self.connection.get_schemas())
        schemas = self.dialect.adjust_schema_list(schemas)
        if name_filter is not None:
            schemas = name_filter.apply(schemas)
        return schemas

    def get_table_types(self) -> List[str]:
        self._check_open()
        types: List[str] = []
        with recovering(self.connection, self.profile, "table types"):
            types = [t.strip() for t in self.connection.get_table_types() if t]
        if self.profile.hide_index_types:
            types = [t for t in types if "INDEX" not in t.upper()]
        for extra in self._dialect_list("additional_table_types"):
            if extra.upper() not in (t.upper() for t in types):
                types.append(extra)
        return types

    def get_current_schema(self) -> Optional[str]:
        self._check_open()
        return self.readers.schema_info_reader.get_current_schema()

    def get_current_catalog(self) -> Optional[str]:
        self._check_open()
        catalog = None
        with recovering(self.connection, self.profile, "current catalog"):
            catalog = self.dialect.get_current_catalog(self.connection)
            if catalog is None:
                catalog = self.connection.current_catalog()
        return catalog

    def get_user_name(self) -> Optional[str]:
        self._check_open()
        user = None
        with recovering(self.connection, self.profile, "user name"):
            user = self.connection.user_name()
        return user

    # ==================== Tables ====================

    @staticmethod
    def _normalize_pattern(value: Optional[str], all_means_none: bool) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if value in ("*", "%"):
            return None if all_means_none else "%"
        return value.replace("*", "%")

    def _should_append(self, types: Optional[Sequence[str]], object_type: str, retrieve_key: str) -> bool:
        if types is None:
            return self._dialect_bool(retrieve_key, False)
        return object_type in types

    def get_tables(
        self,
        catalog: Optional[str] = None,
        schema: Optional[str] = None,
        name_pattern: Optional[str] = None,
        types: Optional[Sequence[str]] = None,
        cancel: Optional[CancellationToken] = None
    ) -> RowSet:
        """
        List tables and other objects.

        Args:
            catalog: Catalog, None/"*"/"%" for all
            schema: Schema, None/"*"/"%" for all
            name_pattern: Name pattern with % (or *) wildcards
            types: Object types, None for the dialect's default selection
            cancel: Optional token that stops the scan early

        Returns:
            RowSet with NAME, TYPE, CATALOG, SCHEMA, REMARKS
        """
        self._check_open()
        catalog = self._normalize_pattern(catalog, True)
        schema = self._normalize_pattern(schema, True)
        name_pattern = self._normalize_pattern(name_pattern, False) or "%"

        requested = [t.upper() for t in types] if types is not None else None
        if types is None:
            types = self.dialect.default_table_types(self)

        result = RowSet(TABLE_LIST_COLUMNS)
        raw = RowSet(("TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "TABLE_TYPE", "REMARKS"))
        with recovering(self.connection, self.profile, "table list"):
            raw = self.connection.get_tables(catalog, schema, name_pattern, types)

        found_types = set()
        for i in range(raw.row_count):
            if cancel is not None and cancel.cancelled:
                logger.warning(f"Table list cancelled after {result.row_count} rows")
                return result
            name = raw.get_string(i, "TABLE_NAME")
            object_type = (raw.get_string(i, "TABLE_TYPE") or "").strip()
            pattern = self._exclude_patterns.get(object_type.upper())
            if pattern is not None and name and pattern.search(name):
                continue
            if self.profile.hide_index_types and "INDEX" in object_type.upper():
                continue
            found_types.add(object_type.upper())
            result.add_row([
                name,
                object_type,
                raw.get_string(i, "TABLE_CAT"),
                raw.get_string(i, "TABLE_SCHEM"),
                raw.get_string(i, "REMARKS"),
            ])

        for hook in self.readers.table_list_hooks:
            hook.process_table_list(result, schema)

        sequence_reader = self.readers.sequence_reader
        if (sequence_reader.supported
                and "SEQUENCE" not in found_types
                and self._should_append(requested, "SEQUENCE", "retrieve_sequences")):
            self._append_objects(result, sequence_reader.get_sequence_list(schema), "SEQUENCE", schema, cancel)

        synonym_reader = self.readers.synonym_reader
        if (synonym_reader.supported
                and "SYNONYM" not in found_types
                and self._should_append(requested, "SYNONYM", "retrieve_synonyms")):
            self._append_objects(result, synonym_reader.get_synonym_list(schema), "SYNONYM", schema, cancel)

        return result

    def _append_objects(
        self,
        result: RowSet,
        names: List[str],
        object_type: str,
        schema: Optional[str],
        cancel: Optional[CancellationToken]
    ):
        existing = {
            (result.get_string(i, "NAME"), (result.get_string(i, "TYPE") or "").upper())
            for i in range(result.row_count)
        }
        for name in names:
            if cancel is not None and cancel.cancelled:
                logger.warning(f"Table list cancelled while adding {object_type.lower()}s")
                return
            if (name, object_type) in existing:
                continue
            existing.add((name, object_type))
            result.add_row([name, object_type, None, schema, None])

    def get_table_list(
        self,
        catalog: Optional[str] = None,
        schema: Optional[str] = None,
        name_pattern: Optional[str] = None,
        types: Optional[Sequence[str]] = None,
        cancel: Optional[CancellationToken] = None
    ) -> List[TableIdentifier]:
        rows = self.get_tables(catalog, schema, name_pattern, types, cancel)
        tables = []
        for i in range(rows.row_count):
            tables.append(TableIdentifier(
                name=rows.get_string(i, "NAME"),
                schema=rows.get_string(i, "SCHEMA"),
                catalog=rows.get_string(i, "CATALOG"),
                object_type=rows.get_string(i, "TYPE") or "TABLE",
                never_adjust_case=True,
            ))
        return tables

    def object_exists(self, table: TableIdentifier, types: Optional[Sequence[str]] = None) -> bool:
        """Check whether an object exists; database errors count as "does not exist"."""
        self._check_open()
        adjusted = self._adjusted(table)
        rows = None
        with recovering(self.connection, self.profile, f"existence of {table}"):
            rows = self.connection.get_tables(adjusted.raw_catalog, adjusted.raw_schema, adjusted.raw_name, types)
        if rows is None:
            return False
        name = adjusted.raw_name.lower()
        return any((rows.get_string(i, "TABLE_NAME") or "").lower() == name for i in range(rows.row_count))

    def table_exists(self, table: TableIdentifier) -> bool:
        return self.object_exists(table, [self.profile.table_type_name])

    def get_table_comment(self, table: TableIdentifier) -> Optional[str]:
        self._check_open()
        adjusted = self._adjusted(table)
        comment = None
        with recovering(self.connection, self.profile, f"comment of {table}"):
            rows = self.connection.get_tables(adjusted.raw_catalog, adjusted.raw_schema, adjusted.raw_name, None)
            for i in range(rows.row_count):
                if rows.get_string(i, "TABLE_NAME") == adjusted.raw_name:
                    comment = rows.get_string(i, "REMARKS")
                    break
        return comment or None

    def get_table_grants(self, table: TableIdentifier) -> RowSet:
        self._check_open()
        adjusted = self._adjusted(table)
        result = RowSet(("TABLE_CAT", "TABLE_SCHEM", "TABLE_NAME", "GRANTOR", "GRANTEE", "PRIVILEGE", "IS_GRANTABLE"))
        with recovering(self.connection, self.profile, f"grants of {table}"):
            result = self.connection.get_table_privileges(adjusted.raw_catalog, adjusted.raw_schema, adjusted.raw_name)
        return result

    # ==================== Columns ====================

    def get_table_definition(self, table: TableIdentifier) -> List[ColumnIdentifier]:
        """
        Columns of a table in declaration order.

        Display types include size and digits (VARCHAR(20), NUMERIC(10,2));
        primary key columns are flagged; positions are 1-based and unique.
        """
        self._check_open()
        adjusted = self._adjusted(table)
        pk_columns = {c.lower() for c in self.get_primary_key_columns(adjusted)}

        columns: List[ColumnIdentifier] = []
        with recovering(self.connection, self.profile, f"columns of {table}"):
            rows = self.connection.get_columns(adjusted.raw_catalog, adjusted.raw_schema, adjusted.raw_name)
            for i in range(rows.row_count):
                columns.append(self._build_column(rows, i, pk_columns))

        for hook in self.readers.column_hooks:
            hook.process_columns(adjusted, columns)

        positions = [c.position for c in columns]
        if 0 in positions or len(set(positions)) != len(positions):
            for index, column in enumerate(columns):
                column.position = index + 1
        return columns

    def _build_column(self, rows: RowSet, i: int, pk_columns) -> ColumnIdentifier:
        name = rows.get_string(i, "COLUMN_NAME")
        type_name = rows.get_string(i, "TYPE_NAME") or ""
        sql_type = rows.get_int(i, "DATA_TYPE")
        size = rows.get_int(i, "COLUMN_SIZE")
        digits = rows.get_int(i, "DECIMAL_DIGITS", -1)
        if sql_type in DECIMAL_TYPES:
            size, digits = self.quirks.fix_numeric(size, digits)

        default = rows.get_string(i, "COLUMN_DEF")
        if default is not None and self.profile.trim_defaults:
            default = default.strip()

        extras = {}
        if rows.has_column("IS_AUTOINCREMENT"):
            extras["autoincrement"] = rows.get_string(i, "IS_AUTOINCREMENT") == "YES"

        return ColumnIdentifier(
            name=name,
            dbms_type=get_sql_type_display(type_name, sql_type, size, digits),
            data_type=sql_type,
            column_size=size,
            decimal_digits=digits,
            # NULLABLE: 0 = no nulls, 1 = nullable, 2 = unknown
            nullable=rows.get_int(i, "NULLABLE", 1) != 0,
            default_value=default,
            comment=rows.get_string(i, "REMARKS"),
            is_pk=(name or "").lower() in pk_columns,
            position=rows.get_int(i, "ORDINAL_POSITION", 0),
            extras=extras,
        )

    def get_table_definition_rows(self, table: TableIdentifier) -> RowSet:
        """
        Table definition as rows; sequences return their definition and
        synonyms are resolved to the table they point to.
        """
        self._check_open()
        if self.is_sequence_type(table.object_type):
            return self.get_sequence_definition(table.raw_schema, table.raw_name)

        if self.is_synonym_type(table.object_type):
            target = self.get_synonym_table(table.raw_schema, table.raw_name)
            if target is not None:
                table = target

        result = RowSet(TABLE_DEFINITION_COLUMNS)
        for column in self.get_table_definition(table):
            result.add_row([
                column.name,
                column.dbms_type,
                "YES" if column.is_pk else "NO",
                "YES" if column.nullable else "NO",
                column.default_value,
                column.comment,
                column.data_type,
                column.decimal_digits,
                column.column_size,
                column.position,
            ])
        return result

    # ==================== Primary keys ====================

    def _read_primary_key(self, table: TableIdentifier) -> Tuple[Optional[str], List[str]]:
        if not self.profile.supports_get_primary_keys:
            return None, []
        adjusted = self._adjusted(table)
        pk_name = None
        columns: List[Tuple[int, str]] = []
        with recovering(self.connection, self.profile, f"primary key of {table}"):
            rows = self.connection.get_primary_keys(adjusted.raw_catalog, adjusted.raw_schema, adjusted.raw_name)
            for i in range(rows.row_count):
                columns.append((rows.get_int(i, "KEY_SEQ", i + 1), rows.get_string(i, "COLUMN_NAME")))
                pk_name = pk_name or rows.get_string(i, "PK_NAME")
        columns.sort(key=lambda c: c[0])
        return pk_name, [name for _seq, name in columns]

    def get_primary_key_columns(self, table: TableIdentifier) -> List[str]:
        self._check_open()
        return self._read_primary_key(table)[1]

    def get_primary_key_name(self, table: TableIdentifier) -> Optional[str]:
        self._check_open()
        return self._read_primary_key(table)[0]

    # ==================== Indexes ====================

    def get_table_index_list(self, table: TableIdentifier) -> List[IndexDefinition]:
        """
        Indexes of a table, grouped from the per-column index rows.

        The index backing the primary key is flagged; at most one index
        carries that flag.
        """
        self._check_open()
        adjusted = self._adjusted(table)
        pk_name, pk_columns = self._read_primary_key(adjusted)

        indexes: Dict[str, IndexDefinition] = {}
        positions: Dict[str, List[Tuple[int, str, Optional[str]]]] = {}
        with recovering(self.connection, self.profile, f"indexes of {table}"):
            rows = self.readers.index_reader.get_index_info(adjusted)
            for i in range(rows.row_count):
                name = rows.get_string(i, "INDEX_NAME")
                column = rows.get_string(i, "COLUMN_NAME")
                if not name or not column:
                    continue
                if name not in indexes:
                    index_type = self._index_types.get(rows.get_int(i, "TYPE", -1), "NORMAL")
                    non_unique = rows.get_value(i, "NON_UNIQUE")
                    indexes[name] = IndexDefinition(
                        name=name,
                        unique=not bool(non_unique) if non_unique is not None else False,
                        index_type=index_type,
                    )
                    positions[name] = []
                direction = (rows.get_string(i, "ASC_OR_DESC") or "").upper()
                positions[name].append((
                    rows.get_int(i, "ORDINAL_POSITION", len(positions[name]) + 1),
                    column,
                    "DESC" if direction == "D" else None,
                ))

        for name, index in indexes.items():
            for _pos, column, direction in sorted(positions[name], key=lambda p: p[0]):
                index.add_column(column, direction)

        result = list(indexes.values())
        self._mark_primary_key_index(result, pk_name, pk_columns)
        self.readers.index_reader.process_index_list(adjusted, result)
        return result

    @staticmethod
    def _mark_primary_key_index(indexes: List[IndexDefinition], pk_name: Optional[str], pk_columns: List[str]):
        if pk_name:
            for index in indexes:
                if index.name.lower() == pk_name.lower():
                    index.primary_key_index = True
                    return
        if not pk_columns:
            return
        wanted = [c.lower() for c in pk_columns]
        for index in indexes:
            if index.unique and [c.lower() for c in index.column_names] == wanted:
                index.primary_key_index = True
                return

    def get_table_index_information(self, table: TableIdentifier) -> RowSet:
        result = RowSet(INDEX_LIST_COLUMNS)
        for index in self.get_table_index_list(table):
            result.add_row([
                index.name,
                "YES" if index.unique else "NO",
                "YES" if index.primary_key_index else "NO",
                index.expression,
                index.index_type,
            ])
        return result

    # ==================== Foreign keys ====================

    def get_rule_display(self, code: Optional[int]) -> str:
        """Display text of an update/delete rule code, honoring dialect overrides."""
        rule = FkRule.from_code(code)
        if rule is None:
            return ""
        return self._fk_rule_texts[rule]

    def get_rule_text(self, rule: FkRule) -> str:
        return self._fk_rule_texts[rule]

    def is_rule_omitted(self, rule: Optional[FkRule], on_delete: bool) -> bool:
        """True if generated DDL must not contain a clause for this rule."""
        if rule is None:
            return True
        if rule.setting_name in self._fk_rules_omitted:
            return True
        if on_delete and rule == FkRule.RESTRICT and not self.profile.supports_on_delete_restrict:
            return True
        return not self._fk_rule_texts[rule]

    def get_foreign_keys(self, table: TableIdentifier) -> RowSet:
        """Foreign keys defined on the table, one row per column."""
        return self._get_key_rows(table, exported=False)

    def get_referenced_by(self, table: TableIdentifier) -> RowSet:
        """Foreign keys of other tables that reference this table."""
        return self._get_key_rows(table, exported=True)

    def _get_key_rows(self, table: TableIdentifier, exported: bool) -> RowSet:
        self._check_open()
        adjusted = self._adjusted(table)
        result = RowSet(FK_COLUMNS)
        what = "referencing tables" if exported else "foreign keys"
        with recovering(self.connection, self.profile, f"{what} of {table}"):
            if exported:
                rows = self.connection.get_exported_keys(adjusted.raw_catalog, adjusted.raw_schema, adjusted.raw_name)
                prefix, column_key = "FK", "PKCOLUMN_NAME"
            else:
                rows = self.connection.get_imported_keys(adjusted.raw_catalog, adjusted.raw_schema, adjusted.raw_name)
                prefix, column_key = "PK", "FKCOLUMN_NAME"

            for i in range(rows.row_count):
                other = TableIdentifier(
                    name=rows.get_string(i, f"{prefix}TABLE_NAME"),
                    schema=rows.get_string(i, f"{prefix}TABLE_SCHEM"),
                    catalog=rows.get_string(i, f"{prefix}TABLE_CAT"),
                    never_adjust_case=True,
                )
                other_column = rows.get_string(i, f"{prefix}COLUMN_NAME")
                update_code = rows.get_int(i, "UPDATE_RULE", -1)
                delete_code = rows.get_int(i, "DELETE_RULE", -1)
                result.add_row([
                    self.quirks.fix_fk_name(rows.get_string(i, "FK_NAME")),
                    rows.get_string(i, column_key),
                    f"{self.get_table_expression(other)}.{self.quote_object_name(other_column)}",
                    self.get_rule_display(update_code),
                    self.get_rule_display(delete_code),
                    update_code,
                    delete_code,
                    rows.get_int(i, "KEY_SEQ", 1),
                ])
        return result

    def get_foreign_key_definitions(self, table: TableIdentifier) -> List[ForeignKeyDefinition]:
        return ForeignKeyDefinition.group_rows(self.get_foreign_keys(table))

    # ==================== Drop ====================

    def drop_table(self, table: TableIdentifier, cascade: bool = False):
        """
        Drop a table.

        Raises:
            StructuralOperationError: if the statement fails (after a
                rollback where the dialect needs explicit DDL commits)
        """
        self._check_open()
        sql = self.objects.get_drop_statement(table, "TABLE", cascade).rstrip().rstrip(";")
        needs_commit = self.profile.ddl_needs_commit and not self.connection.auto_commit
        try:
            logger.info(f"Dropping table: {sql}")
            self.connection.execute_update(sql)
        except MetadataError as e:
            if needs_commit:
                try:
                    self.connection.rollback()
                except MetadataError as rollback_error:
                    logger.error(f"Rollback after failed DROP failed: {rollback_error}")
            if isinstance(e, StructuralOperationError):
                raise
            raise StructuralOperationError(str(e), sql) from e
        if needs_commit:
            self.connection.commit()

    # ==================== Views and triggers ====================

    def _object_values(self, name: str, schema: Optional[str], catalog: Optional[str] = None) -> Dict[str, Optional[str]]:
        return {
            "name": name,
            "schema": schema or self.get_current_schema() or "",
            "catalog": catalog or self.get_current_catalog() or "",
        }

    def _query_text(self, key: str, values: Mapping[str, Optional[str]], what: str) -> Optional[str]:
        """Run a text returning query template; None if the dialect has no template."""
        sql = self.render_query(key, values)
        if sql is None:
            logger.debug(f"No {key} template for {self.profile.db_id}")
            return None
        text = ""
        with recovering(self.connection, self.profile, what):
            rows = self.connection.execute_query(sql)
            text = "".join(str(r[0]) for r in rows if r and r[0] is not None)
        return text

    def get_view_source(self, view: TableIdentifier) -> str:
        """Source of a view (the SELECT part for most dialects), "" if unavailable."""
        self._check_open()
        adjusted = self._adjusted(view)
        key = "mview_source" if (adjusted.object_type or "").upper() == "MATERIALIZED VIEW" else "view_source"
        values = self._object_values(adjusted.raw_name, adjusted.raw_schema, adjusted.raw_catalog)
        return (self._query_text(key, values, f"source of {view}") or "").strip()

    def get_extended_view_source(
        self,
        view: TableIdentifier,
        columns: Optional[List[ColumnIdentifier]] = None,
        include_drop: bool = False,
        include_commit: bool = True
    ) -> str:
        self._check_open()
        return self.objects.get_view_source(view, columns, include_drop, include_commit)

    def get_table_triggers(self, table: TableIdentifier) -> RowSet:
        self._check_open()
        adjusted = self._adjusted(table)
        result = RowSet(TRIGGER_LIST_COLUMNS)
        sql = self.render_query("trigger_list", self._object_values(adjusted.raw_name, adjusted.raw_schema, adjusted.raw_catalog))
        if sql is None:
            return result
        with recovering(self.connection, self.profile, f"triggers of {table}"):
            for row in self.connection.execute_query(sql):
                values = [str(v).strip() if v is not None else None for v in row[:3]]
                values += [None] * (3 - len(values))
                result.add_row(values)
        return result

    def get_trigger_source(self, trigger_name: str, schema: Optional[str] = None) -> str:
        self._check_open()
        name = self.adjust_object_name_case(trigger_name)
        schema = self.adjust_schema_name_case(schema) if schema else None
        source = self._query_text(
            "trigger_source",
            self._object_values(self.policy.trim_quotes(name), self.policy.trim_quotes(schema) if schema else None),
            f"source of trigger {trigger_name}",
        )
        if not source:
            return ""
        if self._dialect_bool("replace_nl_trigger_source", False):
            source = source.replace("\r\n", "\n").replace("\n", self.line_ending)
        return self.dialect.format_trigger_source(self, source)

    # ==================== Procedures ====================

    def get_procedures(
        self,
        catalog: Optional[str],
        schema: Optional[str],
        name_pattern: Optional[str] = None
    ) -> RowSet:
        self._check_open()
        return self.readers.procedure_reader.get_procedures(
            self._normalize_pattern(catalog, True),
            self._normalize_pattern(schema, True),
            self._normalize_pattern(name_pattern, False),
        )

    def get_procedure_list(
        self,
        catalog: Optional[str] = None,
        schema: Optional[str] = None,
        cancel: Optional[CancellationToken] = None
    ) -> List[ProcedureDefinition]:
        """Procedures as definitions; package members appear once as their package."""
        rows = self.get_procedures(catalog, schema)
        definitions: List[ProcedureDefinition] = []
        seen = set()
        for i in range(rows.row_count):
            if cancel is not None and cancel.cancelled:
                logger.warning(f"Procedure list cancelled after {len(definitions)} entries")
                break
            name = rows.get_string(i, "PROCEDURE_NAME")
            type_name = rows.get_string(i, "TYPE") or ""
            is_package = type_name == "PACKAGE"
            key = (rows.get_string(i, "SCHEMA"), rows.get_string(i, "CATALOG"), name, type_name)
            if key in seen:
                continue
            seen.add(key)
            try:
                result_type = ProcedureType(rows.get_int(i, "RESULT_TYPE", 0))
            except ValueError:
                result_type = ProcedureType.UNKNOWN
            definitions.append(ProcedureDefinition(
                name=name,
                schema=rows.get_string(i, "SCHEMA"),
                catalog=rows.get_string(i, "CATALOG"),
                result_type=result_type,
                remarks=rows.get_string(i, "REMARKS"),
                is_package=is_package,
            ))
        return definitions

    def get_procedure_columns(self, definition: ProcedureDefinition) -> RowSet:
        self._check_open()
        return self.readers.procedure_reader.get_procedure_columns(definition)

    def read_procedure_source(self, definition: ProcedureDefinition) -> Optional[str]:
        self._check_open()
        self.readers.procedure_reader.read_procedure_source(definition)
        return definition.source

    def procedure_exists(self, definition: ProcedureDefinition) -> bool:
        rows = self.get_procedures(definition.catalog, definition.schema, definition.name)
        return rows.row_count > 0

    # ==================== Sequences and synonyms ====================

    def get_sequence_list(self, schema: Optional[str], cancel: Optional[CancellationToken] = None) -> List[str]:
        self._check_open()
        if cancel is not None and cancel.cancelled:
            logger.warning("Sequence list cancelled")
            return []
        return self.readers.sequence_reader.get_sequence_list(schema)

    def get_sequence_definition(self, schema: Optional[str], name: str) -> RowSet:
        self._check_open()
        return self.readers.sequence_reader.get_sequence_definition(schema, name)

    def get_sequence_source(self, schema: Optional[str], name: str) -> str:
        self._check_open()
        return self.readers.sequence_reader.get_sequence_source(schema, name)

    def get_synonym_list(self, schema: Optional[str]) -> List[str]:
        self._check_open()
        return self.readers.synonym_reader.get_synonym_list(schema)

    def get_synonym_table(self, owner: Optional[str], name: str) -> Optional[TableIdentifier]:
        self._check_open()
        return self.readers.synonym_reader.get_synonym_table(owner, name)

    def get_synonym_source(self, owner: Optional[str], name: str) -> str:
        self._check_open()
        return self.readers.synonym_reader.get_synonym_source(owner, name)

    # ==================== Server messages and errors ====================

    def enable_output(self, limit: int = -1):
        self._check_open()
        if self.readers.output_reader is not None:
            self.readers.output_reader.enable(limit)

    def disable_output(self):
        self._check_open()
        if self.readers.output_reader is not None:
            self.readers.output_reader.disable()

    def get_output_messages(self) -> str:
        self._check_open()
        if self.readers.output_reader is None:
            return ""
        return self.readers.output_reader.get_messages()

    def get_extended_error_info(self, schema: Optional[str], object_name: str, object_type: str) -> str:
        self._check_open()
        return self.readers.error_info_reader.get_error_info(schema, object_name, object_type)

    # ==================== DDL ====================

    def generate_create_object(self, include_drop: bool, object_type: str, name: str) -> str:
        self._check_open()
        return self.objects.generate_create_object(include_drop, object_type, name)

    def get_table_source(self, table: TableIdentifier, include_drop: bool = False, include_fk: bool = True) -> str:
        """Complete CREATE TABLE script of an existing table."""
        self._check_open()
        return self.ddl.generate_table_source(table, include_drop, include_fk)
