"""
DDL Synthesizer - CREATE TABLE scripts from introspected metadata

The script for a table consists of:

1. An optional DROP and the CREATE TABLE statement with aligned columns
2. The primary key and foreign keys, inline or as ALTER TABLE statements
3. CREATE INDEX statements
4. Table and column comments
5. GRANT statements
6. A COMMIT; trailer on dialects that need DDL to be committed

Usage:
    ddl = DDLSynthesizer(meta)
    print(ddl.generate_table_source(TableIdentifier.parse("orders"), include_drop=True))
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple, Union

from ..models import ColumnIdentifier, ForeignKeyDefinition, IndexDefinition, TableIdentifier
from ..row_set import RowSet
from ...utils.sql_helpers import escape_literal, trim_quotes

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..metadata import MetadataFacade

ForeignKeys = Union[RowSet, Sequence[ForeignKeyDefinition]]

_INDENT = "   "


class DDLSynthesizer:
    """Generates table DDL for the dialect of a MetadataFacade."""

    def __init__(self, meta: "MetadataFacade"):
        self.meta = meta

    @property
    def line_ending(self) -> str:
        return self.meta.line_ending

    def _target_name(self, table: TableIdentifier, table_name_to_use: Optional[str]) -> str:
        return table_name_to_use or self.meta.get_table_expression(table)

    # ==================== Table ====================

    def generate_table_source(
        self,
        table: TableIdentifier,
        include_drop: bool = False,
        include_fk: bool = True,
        table_name_to_use: Optional[str] = None
    ) -> str:
        """Retrieve columns, indexes and foreign keys of a table and build its script."""
        columns = self.meta.get_table_definition(table)
        indexes = self.meta.get_table_index_list(table)
        fks = self.meta.get_foreign_key_definitions(table) if include_fk else None
        return self.get_table_source(table, columns, indexes, fks, include_drop, include_fk, table_name_to_use)

    def get_table_source(
        self,
        table: TableIdentifier,
        columns: List[ColumnIdentifier],
        indexes: Optional[List[IndexDefinition]] = None,
        fks: Optional[ForeignKeys] = None,
        include_drop: bool = False,
        include_fk: bool = True,
        table_name_to_use: Optional[str] = None
    ) -> str:
        """
        Build the complete script for a table.

        Args:
            table: The table
            columns: Table definition
            indexes: Indexes (the primary key index supplies the PK name)
            fks: Foreign keys as rows of get_foreign_keys() or definitions
            include_drop: Start with a DROP statement
            include_fk: Include the foreign keys
            table_name_to_use: Name to use instead of the table's own name

        Returns:
            DDL script, "" if there are no columns
        """
        if not columns:
            return ""

        meta = self.meta
        profile = meta.profile
        nl = self.line_ending
        target = self._target_name(table, table_name_to_use)
        indexes = indexes or []

        parts = [meta.objects.create_header(include_drop, "TABLE", target), f"{nl}({nl}"]

        pk_columns = [c.name for c in columns if c.is_pk]
        parts.append(self._column_lines(table, columns))

        table_constraints = meta.readers.constraint_reader.get_table_constraints(table)
        if table_constraints:
            parts.append(f"{_INDENT},{table_constraints}{nl}")

        if profile.inline_constraints:
            if pk_columns:
                column_list = ", ".join(meta.quote_object_name(c) for c in pk_columns)
                parts.append(f"{_INDENT},PRIMARY KEY ({column_list}){nl}")
            if include_fk and fks:
                parts.append(self.get_fk_source(table, fks, table_name_to_use, force_inline=True))

        parts.append(f");{nl}")

        if not profile.inline_constraints and pk_columns:
            pk_source = self.get_pk_source(target, pk_columns, self._pk_index_name(indexes))
            if pk_source:
                parts.append(f"{nl}{pk_source}{nl}")

        index_source = meta.readers.index_reader.get_index_source(table, indexes, table_name_to_use)
        if index_source:
            parts.append(nl + index_source)

        if not profile.inline_constraints and include_fk and fks:
            fk_source = self.get_fk_source(table, fks, table_name_to_use)
            if fk_source:
                parts.append(nl + fk_source)

        comment = self.get_table_comment_sql(table, target)
        if comment:
            parts.append(f"{nl}{comment}{nl}")

        if not profile.column_comment_inline:
            column_comments = self.get_column_comments_sql(table, columns, target)
            if column_comments:
                parts.append(nl + column_comments)

        if meta.settings.get_bool("ddl.include_grants", True):
            grants = self.get_grant_source(table, target)
            if grants:
                parts.append(nl + grants)

        if profile.ddl_needs_commit:
            parts.append(f"{nl}COMMIT;{nl}")

        return "".join(parts)

    def _column_lines(self, table: TableIdentifier, columns: List[ColumnIdentifier]) -> str:
        meta = self.meta
        profile = meta.profile
        nl = self.line_ending
        constraints = meta.readers.constraint_reader.get_column_constraints(table)

        quoted = [meta.quote_object_name(c.name) for c in columns]
        max_name = max(len(q) for q in quoted) + 1
        max_type = max(len(c.dbms_type or "") for c in columns) + 1

        lines = []
        for column, name in zip(columns, quoted):
            column_type = column.dbms_type or ""
            default = column.default_value.strip() if column.default_value else ""
            line = _INDENT + name.ljust(max_name) + column_type

            # Align the keywords following the type
            if default or not column.nullable or profile.null_keyword_required:
                line = _INDENT + name.ljust(max_name) + column_type.ljust(max_type)

            if profile.default_before_null and default:
                line += f" DEFAULT {default}"

            if not column.nullable:
                line += " NOT NULL"
            elif profile.null_keyword_required and profile.null_keyword:
                line += f" {profile.null_keyword}"

            if not profile.default_before_null and default:
                line += f" DEFAULT {default}"

            constraint = constraints.get(column.name)
            if constraint:
                line += f" {constraint}"

            if profile.column_comment_inline and column.comment:
                line += f" COMMENT '{escape_literal(column.comment)}'"

            lines.append(line.rstrip())
        return f",{nl}".join(lines) + nl

    @staticmethod
    def _pk_index_name(indexes: List[IndexDefinition]) -> Optional[str]:
        for index in indexes:
            if index.primary_key_index:
                return index.name
        return None

    # ==================== Primary key ====================

    def get_pk_source(self, table_name: str, pk_columns: Sequence[str], pk_name: Optional[str] = None) -> str:
        """
        ALTER TABLE statement for a primary key.

        System generated names are not repeated; without a name the
        CONSTRAINT clause is left out (or pk_<table> is used when
        ddl.auto_generate_pk_name is set).
        """
        meta = self.meta
        template = meta.get_template("primary_key")
        if template is None or not pk_columns:
            return ""

        if pk_name is None:
            if meta.settings.get_bool("ddl.auto_generate_pk_name", False):
                pk_name = "pk_" + trim_quotes(table_name.split(".")[-1]).lower()
        elif meta.is_system_constraint_name(pk_name):
            pk_name = None

        sql = meta.render_template(template, {
            "table_name": table_name,
            "pk_name": meta.quote_object_name(pk_name) if pk_name else "",
            "columnlist": ", ".join(meta.quote_object_name(c) for c in pk_columns),
        })
        return sql + ";"

    # ==================== Foreign keys ====================

    def _rule_clause(self, verb: str, rule, on_delete: bool) -> str:
        if self.meta.is_rule_omitted(rule, on_delete):
            return ""
        return f" {verb} {self.meta.get_rule_text(rule)}"

    def get_fk_source(
        self,
        table: TableIdentifier,
        fks: Optional[ForeignKeys],
        table_name_to_use: Optional[str] = None,
        force_inline: bool = False
    ) -> str:
        """
        Foreign key statements, one per constraint.

        Rows belonging to the same constraint are merged so a multi column
        key yields one statement listing all columns in key order. Inline
        clauses start with "   ," so they can be placed in a CREATE TABLE.
        """
        if fks is None:
            return ""
        definitions = ForeignKeyDefinition.group_rows(fks) if isinstance(fks, RowSet) else list(fks)
        if not definitions:
            return ""

        meta = self.meta
        inline = force_inline or meta.profile.inline_constraints
        template = meta.get_template("foreign_key_inline" if inline else "foreign_key")
        if template is None:
            logger.debug(f"No foreign key template for {meta.profile.db_id}")
            return ""

        nl = self.line_ending
        target = self._target_name(table, table_name_to_use)
        statements = []
        for fk in definitions:
            name = fk.name
            if not name or meta.is_system_constraint_name(name):
                name = ""
            sql = meta.render_template(template, {
                "table_name": target,
                "fk_name": meta.quote_object_name(name) if name else "",
                "columnlist": ", ".join(meta.quote_object_name(c) for c in fk.columns),
                "fk_target_table": fk.target_table.table_expression(),
                "fk_target_columns": ", ".join(meta.quote_object_name(c) for c in fk.target_columns),
                "fk_update_rule": self._rule_clause("ON UPDATE", fk.update_rule, False),
                "fk_delete_rule": self._rule_clause("ON DELETE", fk.delete_rule, True),
            }).strip()
            if inline:
                statements.append(f"{_INDENT},{sql}{nl}")
            else:
                statements.append(f"{sql};{nl}{nl}")
        return "".join(statements)

    # ==================== Comments and grants ====================

    def get_table_comment_sql(self, table: TableIdentifier, table_name: Optional[str] = None) -> Optional[str]:
        template = self.meta.get_template("table_comment")
        if template is None:
            return None
        comment = self.meta.get_table_comment(table)
        if not comment or not comment.strip():
            return None
        return self.meta.render_template(template, {
            "table_name": table_name or self.meta.get_table_expression(table),
            "schema": table.raw_schema or "",
            "name": table.raw_name,
            "comment": escape_literal(comment),
        })

    def get_column_comments_sql(
        self,
        table: TableIdentifier,
        columns: List[ColumnIdentifier],
        table_name: Optional[str] = None
    ) -> Optional[str]:
        template = self.meta.get_template("column_comment")
        if template is None:
            return None
        nl = self.line_ending
        target = table_name or self.meta.get_table_expression(table)
        statements = []
        for column in columns:
            if not column.comment or not column.comment.strip():
                continue
            statements.append(self.meta.render_template(template, {
                "table_name": target,
                "schema": table.raw_schema or "",
                "name": table.raw_name,
                "column": self.meta.quote_object_name(column.name),
                "comment": escape_literal(column.comment),
            }))
        if not statements:
            return None
        return nl.join(statements) + nl

    def get_grant_source(self, table: TableIdentifier, table_name: Optional[str] = None) -> str:
        """GRANT statements, one per grantee; grants to the current user are skipped."""
        rows = self.meta.get_table_grants(table)
        if rows.row_count == 0:
            return ""

        user = (self.meta.get_user_name() or "").lower()
        grants: Dict[Tuple[str, bool], List[str]] = {}
        for i in range(rows.row_count):
            grantee = rows.get_string(i, "GRANTEE")
            privilege = rows.get_string(i, "PRIVILEGE")
            if not grantee or not privilege or grantee.lower() == user:
                continue
            grantable = (rows.get_string(i, "IS_GRANTABLE") or "").upper() == "YES"
            privileges = grants.setdefault((grantee, grantable), [])
            if privilege not in privileges:
                privileges.append(privilege)

        nl = self.line_ending
        target = table_name or self.meta.get_table_expression(table)
        statements = []
        for (grantee, grantable), privileges in grants.items():
            sql = f"GRANT {', '.join(privileges)} ON {target} TO {self.meta.quote_object_name(grantee)}"
            if grantable:
                sql += " WITH GRANT OPTION"
            statements.append(sql + ";" + nl)
        return "".join(statements)
