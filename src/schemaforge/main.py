"""
schemaforge - Command line entry point
"""

import argparse
import logging
import sys

from .config.settings import Settings
from .database.exceptions import MetadataError
from .database.metadata import MetadataFacade
from .database.models import TableIdentifier


def open_context(args):
    """Create the ConnectionContext selected on the command line."""
    if args.sqlite:
        from .database.sqlite_connection import SqliteConnectionContext
        return SqliteConnectionContext.open(args.sqlite)
    from .database.odbc_connection import OdbcConnectionContext
    return OdbcConnectionContext.open(args.odbc)


def list_tables(meta: MetadataFacade, args) -> int:
    types = [t.strip().upper() for t in args.types.split(",")] if args.types else None
    rows = meta.get_tables(None, args.schema, args.pattern, types)
    if rows.row_count == 0:
        print("No tables found")
        return 0
    print(rows.to_dataframe().to_string(index=False))
    return 0


def show_columns(meta: MetadataFacade, args) -> int:
    rows = meta.get_table_definition_rows(TableIdentifier.parse(args.table))
    if rows.row_count == 0:
        print(f"Table not found or without columns: {args.table}")
        return 1
    print(rows.to_dataframe().to_string(index=False))
    return 0


def show_source(meta: MetadataFacade, args) -> int:
    source = meta.get_table_source(
        TableIdentifier.parse(args.table),
        include_drop=args.drop,
        include_fk=not args.no_fk,
    )
    if not source:
        print(f"Table not found or without columns: {args.table}")
        return 1
    print(source)
    return 0


def show_view_source(meta: MetadataFacade, args) -> int:
    source = meta.get_extended_view_source(TableIdentifier.parse(args.view, "VIEW"), include_drop=args.drop)
    if not source:
        print(f"No source available for view: {args.view}")
        return 1
    print(source)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemaforge",
        description="Inspect database metadata and generate DDL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schemaforge --sqlite shop.db tables
  schemaforge --sqlite shop.db columns orders
  schemaforge --odbc "DSN=warehouse" source hr.employees --drop
        """
    )

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument('--sqlite', metavar='PATH', help='SQLite database file')
    target.add_argument('--odbc', metavar='CONNSTR', help='ODBC connection string')

    parser.add_argument('--settings', metavar='FILE', help='YAML file with settings overrides')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    commands = parser.add_subparsers(dest='command', required=True)

    tables = commands.add_parser('tables', help='List tables and views')
    tables.add_argument('--schema', help='Schema to list (default: all)')
    tables.add_argument('--pattern', default='%', help='Name pattern, %% or * as wildcard')
    tables.add_argument('--types', help='Comma separated object types, e.g. TABLE,VIEW')
    tables.set_defaults(handler=list_tables)

    columns = commands.add_parser('columns', help='Show the columns of a table')
    columns.add_argument('table', help='Table name, optionally schema qualified')
    columns.set_defaults(handler=show_columns)

    source = commands.add_parser('source', help='Generate the CREATE TABLE script of a table')
    source.add_argument('table', help='Table name, optionally schema qualified')
    source.add_argument('--drop', action='store_true', help='Start with a DROP statement')
    source.add_argument('--no-fk', action='store_true', help='Leave out foreign keys')
    source.set_defaults(handler=show_source)

    view_source = commands.add_parser('view-source', help='Generate the CREATE VIEW script of a view')
    view_source.add_argument('view', help='View name, optionally schema qualified')
    view_source.add_argument('--drop', action='store_true', help='Start with a DROP statement')
    view_source.set_defaults(handler=show_view_source)

    return parser


def main(argv=None) -> int:
    """Main entry point for the schemaforge command."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    logger = logging.getLogger("schemaforge")

    try:
        context = open_context(args)
    except MetadataError as e:
        logger.error(f"Cannot connect: {e}")
        return 2

    try:
        with MetadataFacade(context, settings=Settings.load(args.settings)) as meta:
            return args.handler(meta, args)
    except MetadataError as e:
        logger.error(str(e))
        return 1
    finally:
        context.close()


if __name__ == "__main__":
    sys.exit(main())
