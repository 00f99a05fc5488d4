"""
Object Source Builder - DROP/CREATE headers and view scripts

Statements come from the drop_object, create_object and replace_<type>
templates of the active dialect. A replace_<type> template (e.g. Oracle's
CREATE OR REPLACE VIEW) makes a separate DROP unnecessary.
"""

from typing import TYPE_CHECKING, List, Optional

from ..models import ColumnIdentifier, TableIdentifier
from ...utils.sql_helpers import get_create_type, get_sql_verb

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..metadata import MetadataFacade

MVIEW_TYPE = "MATERIALIZED VIEW"


def _type_key(object_type: str) -> str:
    return object_type.strip().lower().replace(" ", "_")


class ObjectSourceBuilder:
    """
    Builds DROP and CREATE statements for a MetadataFacade.

    Usage:
        builder = ObjectSourceBuilder(meta)
        sql = builder.generate_create_object(True, "VIEW", "v_orders")
    """

    def __init__(self, meta: "MetadataFacade"):
        self.meta = meta

    # ==================== DROP ====================

    def _drop_sql(self, object_type: str, expression: str, cascade: bool) -> str:
        verb = self.meta.get_cascade_constraints_verb(object_type) if cascade else ""
        template = self.meta.get_template("drop_object")
        if template is None:
            sql = f"DROP {object_type.upper()} {expression}"
            if verb:
                sql += f" {verb}"
            return sql + ";"
        return self.meta.render_template(template, {
            "object_type": object_type.upper(),
            "name": expression,
            "cascade": f" {verb}" if verb else "",
        })

    def get_drop_statement(
        self,
        table: TableIdentifier,
        object_type: Optional[str] = None,
        cascade: bool = False
    ) -> str:
        """DROP statement for an object, terminated with ";"."""
        return self._drop_sql(object_type or table.object_type, self.meta.get_table_expression(table), cascade)

    # ==================== CREATE ====================

    def create_header(self, include_drop: bool, object_type: str, expression: str) -> str:
        """
        Optional DROP plus the CREATE header for an already quoted name.

        Args:
            include_drop: Prepend a DROP statement (unless the dialect can replace)
            object_type: TABLE, VIEW, ...
            expression: Object name as it should appear in the script
        """
        nl = self.meta.line_ending
        replace = self.meta.get_template(f"replace_{_type_key(object_type)}")
        if replace is not None:
            return self.meta.render_template(replace, {"name": expression})

        parts = []
        if include_drop:
            parts.append(self._drop_sql(object_type, expression, True) + nl + nl)

        create = self.meta.get_template("create_object")
        if create is None:
            parts.append(f"CREATE {object_type.upper()} {expression}")
        else:
            parts.append(self.meta.render_template(create, {"object_type": object_type.upper(), "name": expression}))
        return "".join(parts)

    def generate_create_object(self, include_drop: bool, object_type: str, name: str) -> str:
        return self.create_header(include_drop, object_type, self.meta.quote_object_name(name))

    # ==================== Views ====================

    def get_view_source(
        self,
        view: TableIdentifier,
        columns: Optional[List[ColumnIdentifier]] = None,
        include_drop: bool = False,
        include_commit: bool = True
    ) -> str:
        """
        Complete script to re-create a view.

        Databases that store the whole CREATE statement (SQLite, DB2) get it
        verbatim; for the others the SELECT is wrapped in a CREATE VIEW
        header with the column list where the dialect allows it.
        """
        meta = self.meta
        source = meta.get_view_source(view)
        if not source:
            return ""

        nl = meta.line_ending
        object_type = (view.object_type or "VIEW").upper()
        if object_type == "TABLE":
            object_type = "VIEW"
        expression = meta.get_table_expression(view)
        if not source.rstrip().endswith(";"):
            source = source.rstrip() + ";"

        parts = []
        if get_sql_verb(source) == "CREATE":
            if include_drop:
                created_type = get_create_type(source) or object_type
                parts.append(f"DROP {created_type} {expression};{nl}{nl}")
            parts.append(source)
            parts.append(nl)
        else:
            parts.append(self.create_header(include_drop, object_type, expression))
            if meta.profile.columns_in_view_definition and object_type != MVIEW_TYPE:
                if columns is None:
                    columns = meta.get_table_definition(view)
                if columns:
                    names = [f"  {meta.quote_object_name(c.name)}" for c in columns]
                    parts.append(f"{nl}({nl}" + f",{nl}".join(names) + f"{nl})")
            parts.append(f"{nl}AS{nl}")
            parts.append(source)
            parts.append(nl)

        if include_commit and meta.profile.ddl_needs_commit:
            parts.append(f"{nl}COMMIT;{nl}")
        return "".join(parts)
