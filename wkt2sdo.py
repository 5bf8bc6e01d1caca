#!/usr/bin/env python3
"""
WKT to Oracle SDO_GEOMETRY - Command Line Interface

Usage:
    python wkt2sdo.py convert "<wkt>" [--srid <srid>] [--dialect oracle|postgres|mysql]
    python wkt2sdo.py parse "<wkt>"
    python wkt2sdo.py rewrite <input_file> [--output <output_file>] [--report]
    python wkt2sdo.py create-index --index <name> --table <table> --column <col> [--srid <srid>]
    python wkt2sdo.py drop-index --index <name> --table <table> --column <col>
    python wkt2sdo.py drop-table --table <table>
    python wkt2sdo.py init-config [--output <config_file>]
    python wkt2sdo.py validate-config <config_file>
"""

import argparse
import dataclasses
import logging
import sys
from contextlib import contextmanager
from pathlib import Path

from wkt2oracle import (
    ConversionConfig,
    CreateSpatialIndexStatement,
    DropSpatialIndexStatement,
    SpatialConversionError,
    SpatialStatementRewriter,
    connection_query_executor,
    get_sdo_gtype,
    get_wkt_info,
    load_config,
    parse_wkt,
)
from wkt2oracle.config import save_sample_config, validate_config

logger = logging.getLogger("wkt2sdo")


def print_banner():
    """Print the application banner."""
    banner = """
╔═══════════════════════════════════════════════════════════════════╗
║              WKT / EWKT to Oracle SDO_GEOMETRY                    ║
║                      Powered by sqlglot                           ║
╚═══════════════════════════════════════════════════════════════════╝
"""
    print(banner)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="-- %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def build_config(args) -> ConversionConfig:
    """Load the config file (if any) and apply command line overrides."""
    config_file = getattr(args, "config", None)
    config = load_config(config_file) if config_file else ConversionConfig()

    overrides = {}
    if getattr(args, "dialect", None):
        overrides["dialect"] = args.dialect
    if getattr(args, "array_limit", None) is not None:
        overrides["array_limit"] = args.array_limit
    if getattr(args, "clob_limit", None) is not None:
        overrides["clob_limit"] = args.clob_limit
    if getattr(args, "dsn", None):
        overrides["srid_mode"] = "database"
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


@contextmanager
def open_generator(args):
    """
    Yield a SpatialSqlGenerator built from the command line arguments.

    When ``--dsn`` is given, SRIDs are resolved against that Oracle database
    and the connection is closed afterwards.
    """
    config = build_config(args)
    connection = None
    try:
        if config.srid_mode == "database":
            if not getattr(args, "dsn", None):
                raise ValueError("srid_mode 'database' needs --dsn")
            # Only needed for live SRID lookups
            try:
                import oracledb
            except ImportError as e:
                raise ValueError(
                    "--dsn needs the oracledb driver: pip install wkt2oracle[oracle]"
                ) from e
            connection = oracledb.connect(user=args.user, password=args.password, dsn=args.dsn)
            logger.info("Connected to %s for SRID lookups", args.dsn)
            yield config.create_generator(connection_query_executor(connection))
        else:
            yield config.create_generator()
    finally:
        if connection is not None:
            connection.close()


def convert_inline(args):
    """Convert a WKT/EWKT literal given on the command line."""
    try:
        with open_generator(args) as generator:
            sql = generator.convert_value(args.wkt, args.srid)
    except (SpatialConversionError, ValueError) as e:
        print(f"-- ❌ CONVERSION FAILED: {e}", file=sys.stderr)
        return 1
    print(sql)
    return 0


def parse_inline(args):
    """Show how a WKT literal is classified and encoded."""
    try:
        info = get_wkt_info(args.wkt)
        parsed = parse_wkt(info.wkt_without_srid)
        gtype = get_sdo_gtype(info)
    except SpatialConversionError as e:
        print(f"-- ❌ PARSE FAILED: {e}", file=sys.stderr)
        return 1

    print(f"Geometry type:   {info.geometry_type}")
    print(f"Base type:       {info.geometry_base_type}")
    print(f"SRID:            {info.srid if info.srid is not None else '-'}")
    print(f"Dimensions:      {info.dimensions}")
    print(f"Multi:           {info.is_multi}")
    print(f"Collection:      {info.is_collection}")
    print(f"Legacy WKT:      {info.is_legacy_compatible}")
    print(f"SDO_GTYPE:       {gtype}")
    print("Element info:")
    for offset, etype, interpretation in parsed.triplets():
        print(f"  {offset:6d} {etype:5d} {interpretation:2d}")
    print(f"Ordinates ({len(parsed.ordinates)}): {','.join(parsed.ordinates)}")
    return 0


def rewrite_file(args):
    """Rewrite WKT literals in the INSERT/UPDATE statements of a SQL file."""
    input_path = Path(args.input_file)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    try:
        with open_generator(args) as generator:
            config = build_config(args)
            rewriter = SpatialStatementRewriter(generator, pretty=args.format or config.pretty)
            results = rewriter.rewrite_file(str(input_path), args.output)
    except (SpatialConversionError, ValueError) as e:
        print(f"-- ❌ REWRITE FAILED: {e}", file=sys.stderr)
        return 1

    if not args.output:
        for result in results:
            for warning in result.warnings:
                print(f"-- WARNING: {warning}", file=sys.stderr)
            if result.success:
                print(result.rewritten_sql + ";")
            else:
                print(str(result))

    failed = [r for r in results if not r.success]
    converted = sum(r.converted_values for r in results)

    if args.report:
        for num, result in enumerate(results, 1):
            print(f"\n-- Statement {num}", file=sys.stderr)
            for line in result.get_detailed_report().split("\n"):
                print(f"-- {line}", file=sys.stderr)

    print(
        f"-- {len(results)} statement(s), {converted} geometry value(s) converted, "
        f"{len(failed)} failed",
        file=sys.stderr,
    )
    return 1 if failed else 0


def create_index(args):
    """Print the DDL creating a spatial index."""
    try:
        statement = CreateSpatialIndexStatement(
            index_name=args.index,
            table_name=args.table,
            columns=args.column,
            table_schema_name=args.schema,
            tablespace=args.tablespace,
            geometry_type=args.geometry_type,
            srid=args.srid,
        )
        with open_generator(args) as generator:
            statements = generator.create_spatial_index(statement)
    except (SpatialConversionError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for sql in statements:
        print(sql + ";")
    return 0


def drop_index(args):
    """Print the DDL dropping a spatial index."""
    try:
        statement = DropSpatialIndexStatement(
            index_name=args.index,
            table_name=args.table,
            column_name=args.column,
            table_schema_name=args.schema,
        )
        with open_generator(args) as generator:
            statements = generator.drop_spatial_index(statement)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for sql in statements:
        print(sql + ";")
    return 0


def drop_table(args):
    """Print the DDL dropping a table with spatial columns."""
    try:
        with open_generator(args) as generator:
            statements = generator.drop_spatial_table(args.table, args.schema)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for sql in statements:
        print(sql + ";")
    return 0


def init_config(args):
    """Generate a configuration file with the default settings."""
    output_path = args.output
    try:
        output_dir = Path(output_path).parent
        if output_dir and not output_dir.exists():
            output_dir.mkdir(parents=True, exist_ok=True)
        save_sample_config(output_path)
    except OSError as e:
        print(f"Error creating configuration file: {e}", file=sys.stderr)
        return 1

    print(f"\n✓ Configuration file created: {output_path}")
    print("\nUsage:")
    print(f"  python wkt2sdo.py convert \"POINT(1 2)\" --config {output_path}")
    return 0


def validate_config_cmd(args):
    """Validate a configuration file."""
    config_path = args.config_file
    print(f"Validating configuration file: {config_path}")

    is_valid, errors = validate_config(config_path)
    if not is_valid:
        print("\n✗ Configuration is invalid!")
        print("\nErrors:")
        for error in errors:
            print(f"  • {error}")
        return 1

    config = load_config(config_path)
    print("\n✓ Configuration is valid!")
    print("\nSettings:")
    print(f"  Dialect:     {config.dialect}")
    print(f"  Array limit: {config.array_limit}")
    print(f"  CLOB limit:  {config.clob_limit}")
    print(f"  SRID mode:   {config.srid_mode}")
    print(f"  Pretty:      {config.pretty}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="WKT / EWKT to Oracle SDO_GEOMETRY compiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compile a geometry literal
  python wkt2sdo.py convert "SRID=4326;POINT Z(1 2 3)"

  # Same literal for PostGIS
  python wkt2sdo.py convert "SRID=4326;POINT(1 2)" --dialect postgres

  # Inspect element info and ordinates
  python wkt2sdo.py parse "POLYGON((10 10,20 20,30 30,10 10),(1 1,2 2,1 1))"

  # Rewrite the geometry literals of a data script
  python wkt2sdo.py rewrite data.sql -o data_oracle.sql --report

  # Resolve SRIDs against a database instead of inlining the lookup
  python wkt2sdo.py convert "SRID=25830;POINT(1 2)" --dsn localhost/XEPDB1 --user gis --password secret

  # Spatial index DDL
  python wkt2sdo.py create-index --index roads_geom_idx --table roads --column geom --geometry-type LineString --srid 4326

  # Configuration file
  python wkt2sdo.py init-config --output wkt2sdo.json
  python wkt2sdo.py validate-config wkt2sdo.json
"""
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", "-c", help="Path to a JSON configuration file")
    common.add_argument("--dialect", "-d", help="Target database: oracle, postgres or mysql")
    common.add_argument("--array-limit", type=int, help="Array size from which the XML form is used (default: 900)")
    common.add_argument("--clob-limit", type=int, help="Maximum string literal length (default: 4000)")
    common.add_argument("--dsn", help="Oracle DSN for SRID lookups (requires oracledb)")
    common.add_argument("--user", help="Database user for --dsn")
    common.add_argument("--password", help="Database password for --dsn")
    common.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    convert_parser = subparsers.add_parser("convert", parents=[common], help="Compile a WKT/EWKT literal to SQL")
    convert_parser.add_argument("wkt", help="WKT or EWKT literal")
    convert_parser.add_argument("--srid", help="EPSG SRID overriding the SRID= prefix")
    convert_parser.set_defaults(func=convert_inline)

    parse_parser = subparsers.add_parser("parse", parents=[common], help="Show element info and ordinates of a literal")
    parse_parser.add_argument("wkt", help="WKT or EWKT literal")
    parse_parser.set_defaults(func=parse_inline)

    rewrite_parser = subparsers.add_parser("rewrite", parents=[common], help="Rewrite WKT literals in a SQL file")
    rewrite_parser.add_argument("input_file", help="Input SQL file")
    rewrite_parser.add_argument("--output", "-o", help="Output SQL file (default: stdout)")
    rewrite_parser.add_argument("--format", "-f", action="store_true", help="Pretty-print output SQL")
    rewrite_parser.add_argument("--report", "-r", action="store_true", help="Print a per-statement report")
    rewrite_parser.set_defaults(func=rewrite_file)

    create_index_parser = subparsers.add_parser("create-index", parents=[common], help="Generate spatial index DDL")
    create_index_parser.add_argument("--index", required=True, help="Index name")
    create_index_parser.add_argument("--table", required=True, help="Table name")
    create_index_parser.add_argument("--column", required=True, action="append", help="Geometry column (repeatable)")
    create_index_parser.add_argument("--schema", help="Table schema")
    create_index_parser.add_argument("--tablespace", help="Index tablespace (Oracle)")
    create_index_parser.add_argument("--geometry-type", help="OGC geometry type, e.g. Point or LineString Z")
    create_index_parser.add_argument("--srid", type=int, help="EPSG SRID of the column")
    create_index_parser.set_defaults(func=create_index)

    drop_index_parser = subparsers.add_parser("drop-index", parents=[common], help="Generate DDL dropping a spatial index")
    drop_index_parser.add_argument("--index", required=True, help="Index name")
    drop_index_parser.add_argument("--table", required=True, help="Table name")
    drop_index_parser.add_argument("--column", required=True, help="Geometry column")
    drop_index_parser.add_argument("--schema", help="Table schema")
    drop_index_parser.set_defaults(func=drop_index)

    drop_table_parser = subparsers.add_parser("drop-table", parents=[common], help="Generate DDL dropping a spatial table")
    drop_table_parser.add_argument("--table", required=True, help="Table name")
    drop_table_parser.add_argument("--schema", help="Table schema")
    drop_table_parser.set_defaults(func=drop_table)

    init_config_parser = subparsers.add_parser("init-config", help="Generate a configuration file")
    init_config_parser.add_argument(
        "--output", "-o",
        default="wkt2sdo.json",
        help="Output path for the configuration file (default: wkt2sdo.json)"
    )
    init_config_parser.set_defaults(func=init_config)

    validate_config_parser = subparsers.add_parser("validate-config", help="Validate a configuration file")
    validate_config_parser.add_argument("config_file", help="Path to the configuration file to validate")
    validate_config_parser.set_defaults(func=validate_config_cmd)

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        print_banner()
        parser.print_help()
        return 0

    setup_logging(getattr(args, "verbose", False))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
