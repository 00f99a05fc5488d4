"""
SQL Template Store - Per-dialect SQL fragments loaded from YAML files

Templates live in database/templates/ as one YAML file per logical key:

    key: primary_key
    placeholders: [table_name, pk_name, columnlist]
    required: [table_name, columnlist]
    optional_clauses:
      pk_name: "CONSTRAINT %pk_name%"
    dialects:
      default: |-
        ALTER TABLE %table_name%
          ADD CONSTRAINT %pk_name%
          PRIMARY KEY (%columnlist%)

A dialect entry is selected by dialect id, then dialect family, then
"default". An empty entry disables the template for that dialect.

Each entry is validated when loaded: placeholders not declared for the
key, required placeholders missing from the text and optional clauses not
found in the text are rejected. Rendering fails when a placeholder used by
the text has no value.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

import yaml

from .exceptions import TemplateError
from ..utils.sql_helpers import escape_literal

import logging
logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..config.settings import Settings
    from .dialects.base import DialectProfile

_DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"

_PLACEHOLDER_PATTERN = re.compile(r"%([a-z_]+)%")


@dataclass(frozen=True)
class SqlTemplate:
    """A validated SQL fragment with named %placeholders%."""
    key: str
    dialect: str
    text: str
    placeholders: Tuple[str, ...]
    allowed: Tuple[str, ...] = ()
    optional_clauses: Mapping[str, str] = field(default_factory=dict)
    is_query: bool = False

    @classmethod
    def build(
        cls,
        key: str,
        dialect: str,
        text: str,
        allowed: List[str],
        required: Optional[List[str]] = None,
        optional_clauses: Optional[Mapping[str, str]] = None,
        is_query: bool = False
    ) -> "SqlTemplate":
        """
        Validate and create a template.

        Raises:
            TemplateError: if the text uses undeclared placeholders, lacks a
                required one, or an optional clause is not part of the text
        """
        used: List[str] = []
        for name in _PLACEHOLDER_PATTERN.findall(text):
            if name not in used:
                used.append(name)

        unknown = [p for p in used if p not in allowed]
        if unknown:
            raise TemplateError(f"Template {key}/{dialect} uses undeclared placeholders: {unknown}")

        missing = [p for p in (required or []) if p not in used]
        if missing:
            raise TemplateError(f"Template {key}/{dialect} does not use required placeholders: {missing}")

        clauses = dict(optional_clauses or {})
        for name, clause in clauses.items():
            if name in used and clause not in text:
                raise TemplateError(f"Template {key}/{dialect}: optional clause {clause!r} not found")

        return cls(
            key=key,
            dialect=dialect,
            text=text,
            placeholders=tuple(used),
            allowed=tuple(allowed),
            optional_clauses=clauses,
            is_query=is_query,
        )

    def render(self, values: Mapping[str, Optional[str]]) -> str:
        """
        Substitute placeholder values.

        Every placeholder used by the text must be present in values (None
        counts as empty). An empty value for a placeholder with an optional
        clause removes the whole clause. Values of query templates are
        escaped for use in string literals.
        """
        unknown = [k for k in values if k not in self.allowed]
        if unknown:
            raise TemplateError(f"Template {self.key} has no placeholders {unknown}")
        missing = [p for p in self.placeholders if p not in values]
        if missing:
            raise TemplateError(f"Missing values for template {self.key}/{self.dialect}: {missing}")

        text = self.text
        for name, clause in self.optional_clauses.items():
            if name in self.placeholders and not values.get(name):
                text = re.sub(r"[ \t]*" + re.escape(clause), "", text)
                text = text.lstrip()

        def _substitute(match):
            value = values.get(match.group(1)) or ""
            return escape_literal(value) if self.is_query else value

        return _PLACEHOLDER_PATTERN.sub(_substitute, text)


class SqlTemplateStore:
    """
    Loads SQL templates from YAML files.

    Usage:
        store = get_template_store()
        template = store.get_template("primary_key", profile)
        sql = template.render({"table_name": "orders", "pk_name": "pk_orders", "columnlist": "id"})
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = templates_dir or _DEFAULT_TEMPLATES_DIR
        self._cache: Dict[str, Dict[str, Optional[SqlTemplate]]] = {}
        self._definitions: Dict[str, dict] = {}
        self._loaded = False

    def _load_templates(self, force: bool = False):
        if self._loaded and not force:
            return

        self._cache.clear()
        self._definitions.clear()

        if not self.templates_dir.exists():
            logger.warning(f"Templates directory does not exist: {self.templates_dir}")
            self._loaded = True
            return

        for yaml_file in sorted(self.templates_dir.glob("*.yaml")):
            try:
                self._load_template_file(yaml_file)
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Error loading template file {yaml_file}: {e}")

        self._loaded = True
        logger.debug(f"Loaded {len(self._cache)} SQL templates from {self.templates_dir}")

    def _load_template_file(self, yaml_path: Path):
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            return

        key = data.get("key", yaml_path.stem)
        self._definitions[key] = data
        entries: Dict[str, Optional[SqlTemplate]] = {}
        for dialect, text in (data.get("dialects") or {}).items():
            if not text:
                entries[dialect] = None
                continue
            try:
                entries[dialect] = self._build(key, dialect, text, data)
            except TemplateError as e:
                logger.error(f"Skipping invalid template: {e}")
        self._cache[key] = entries

    @staticmethod
    def _build(key: str, dialect: str, text: str, definition: dict) -> SqlTemplate:
        return SqlTemplate.build(
            key=key,
            dialect=dialect,
            text=text,
            allowed=definition.get("placeholders") or [],
            required=definition.get("required") or [],
            optional_clauses=definition.get("optional_clauses") or {},
            is_query=bool(definition.get("query", False)),
        )

    def keys(self) -> List[str]:
        self._load_templates()
        return sorted(self._cache.keys())

    def get_template(
        self,
        key: str,
        profile: "DialectProfile",
        settings: Optional["Settings"] = None
    ) -> Optional[SqlTemplate]:
        """
        Get the template for a dialect.

        A setting "db.<dialect>.template.<key>" replaces the packaged text.

        Returns:
            SqlTemplate, or None if the key has no entry for the dialect
        """
        self._load_templates()
        entries = self._cache.get(key)
        if entries is None:
            return None

        if settings is not None:
            override = settings.get_dialect_property(f"template.{key}", profile.db_id, profile.family)
            if override is not None:
                if not override:
                    return None
                try:
                    return self._build(key, profile.db_id, str(override), self._definitions[key])
                except TemplateError as e:
                    logger.warning(f"Ignoring configured template: {e}")

        for dialect in (profile.db_id, profile.family, "default"):
            if dialect in entries:
                return entries[dialect]
        return None

    def render(
        self,
        key: str,
        profile: "DialectProfile",
        values: Mapping[str, Optional[str]],
        settings: Optional["Settings"] = None
    ) -> Optional[str]:
        """Render a template, or return None if the dialect has none."""
        template = self.get_template(key, profile, settings)
        if template is None:
            return None
        return template.render(values)


# Singleton instance
_template_store: Optional[SqlTemplateStore] = None


def get_template_store() -> SqlTemplateStore:
    """Get the shared template store."""
    global _template_store
    if _template_store is None:
        _template_store = SqlTemplateStore()
    return _template_store
