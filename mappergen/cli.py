# File: mappergen/cli.py
"""
Mapper Codegen - Command-Line Interface
=========================================

Command-line front end built with the standard-library ``argparse`` module.

Usage examples::

    # Generate every table described in a schema file
    mappergen -s schema.yaml -o .

    # Reflect two tables from a live database, async accessors
    mappergen --url postgresql://localhost/app -t member -t company --async

    # Print the generated sources instead of writing them
    mappergen -s schema.yaml -t member --echo

    # Validate only (no file output)
    mappergen -s schema.yaml --validate-only

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Tuple

from mappergen.errors import GeneratorError
from mappergen.generator import (
    GenerationReport,
    MapperGenerator,
    load_schema_file,
    parse_raw_schema,
    select_tables,
)
from mappergen.models import ExecutionMode, GeneratorConfig, Table
from mappergen.utils import Timer
from mappergen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


class InputError(Exception):
    """Bad command-line input; maps to ``EXIT_INPUT_ERROR``."""


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``mappergen`` logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("mappergen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from mappergen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="mappergen",
        description=(
            "Mapper Codegen - ScalikeJDBC model and accessor generator.\n\n"
            "Turns table facts (from a YAML/JSON schema file or a live "
            "database) into a Scala model class, its companion accessor "
            "object and a matching test spec."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s schema.yaml -o .\n"
            "  %(prog)s --url sqlite:///app.db -t member --async\n"
            "  %(prog)s -s schema.yaml -t member --echo\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Mapper Codegen v{__version__}",
    )

    # --- Input ---
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "-s", "--schema",
        type=str,
        default=None,
        metavar="PATH",
        help="Schema file (YAML or JSON) with a 'tables' list.",
    )
    source.add_argument(
        "--url",
        type=str,
        default=None,
        metavar="DB_URL",
        help="SQLAlchemy database URL to reflect tables from.",
    )

    tables_group = parser.add_argument_group("table selection")
    tables_group.add_argument(
        "-t", "--table",
        dest="tables",
        action="append",
        default=None,
        metavar="NAME",
        help="Table to generate (repeatable).",
    )
    tables_group.add_argument(
        "--all",
        dest="all_tables",
        action="store_true",
        default=False,
        help="Generate every table.",
    )
    tables_group.add_argument(
        "--schema-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Database schema to reflect from (with --url).",
    )
    tables_group.add_argument(
        "--class-name",
        type=str,
        default=None,
        metavar="NAME",
        help="Class name to generate (single table only).",
    )

    # --- Configuration ---
    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Generator settings file (YAML or JSON); replaces the schema file's 'config'.",
    )
    config_group.add_argument(
        "--async",
        dest="use_async",
        action="store_true",
        default=False,
        help="Generate Future-returning accessors.",
    )

    # --- Output ---
    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "-o", "--output",
        type=str,
        default=".",
        metavar="DIR",
        help="Base directory for src/test paths (default: current directory).",
    )
    output_group.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite existing files.",
    )
    output_group.add_argument(
        "--echo",
        action="store_true",
        default=False,
        help="Print generated sources to stdout instead of writing files.",
    )
    output_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the tables without generating code.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Input resolution
# ---------------------------------------------------------------------------


def _config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.use_async:
        overrides["execution_mode"] = ExecutionMode.ASYNC
    if args.class_name is not None:
        overrides["target_class_name"] = args.class_name
    return overrides


def _load_config_file(path: Path) -> GeneratorConfig:
    raw: Dict[str, Any] = load_schema_file(path)
    data: Any = raw.get("config", raw)
    if not isinstance(data, dict):
        raise InputError(f"Config file {path} does not hold a mapping.")
    return GeneratorConfig.from_mapping(data)


def _resolve_inputs(args: argparse.Namespace) -> Tuple[List[Table], GeneratorConfig]:
    """Tables and effective config from the parsed arguments."""
    names: Optional[List[str]] = None if args.all_tables else args.tables

    if args.schema is not None:
        schema_path: Path = Path(args.schema).resolve()
        raw: Dict[str, Any] = load_schema_file(schema_path)
        all_tables, config = parse_raw_schema(raw)
        logger.info("Schema:  %s (%d table(s))", schema_path, len(all_tables))
        tables: List[Table] = select_tables(all_tables, names)
    else:
        if names is None and not args.all_tables:
            raise InputError("With --url, name tables with -t/--table or pass --all.")
        from mappergen.introspection import introspect_tables

        tables = introspect_tables(args.url, names, args.schema_name)
        config = GeneratorConfig()

    if args.config is not None:
        config = _load_config_file(Path(args.config).resolve())

    if not tables:
        raise InputError("No tables selected.")
    if args.class_name is not None and len(tables) > 1:
        raise InputError("--class-name requires exactly one table.")

    overrides: Dict[str, Any] = _config_overrides(args)
    if overrides:
        config = config.with_overrides(**overrides)
    return tables, config


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(tables: Sequence[Table], config: GeneratorConfig) -> int:
    """Validate every table and print a report. Returns the exit code."""
    valid: bool = True
    with Timer("validation") as t:
        results: List[Tuple[Table, ValidationResult]] = [
            (table, validate_full(table, config)) for table in tables
        ]

    print(f"\n{'='*50}")
    print("  Table Validation Report")
    print(f"{'='*50}")
    print(f"  Tables:   {len(tables)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    for table, result in results:
        valid = valid and result.is_valid
        print(f"\n  {table.name}: {'valid' if result.is_valid else 'INVALID'}")
        for err in result.errors:
            print(f"    ✗ {err}")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")
    print(f"{'='*50}\n")

    return EXIT_SUCCESS if valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Generation modes
# ---------------------------------------------------------------------------


def _exit_code_for(report: GenerationReport) -> int:
    if report.success:
        return EXIT_SUCCESS
    if report.validation_errors:
        return EXIT_VALIDATION_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    return EXIT_GENERATION_ERROR


def _run_echo(tables: Sequence[Table], config: GeneratorConfig) -> int:
    report: GenerationReport = MapperGenerator().generate(
        tables, config, Path("."), dry_run=True
    )
    for artifact in report.artifacts:
        sys.stdout.write(artifact.model_code)
        if artifact.spec_code is not None:
            sys.stdout.write(config.eol)
            sys.stdout.write(artifact.spec_code)
    for err in report.validation_errors + report.generation_errors:
        logger.error("✗ %s", err)
    return _exit_code_for(report)


def _run_generation(
    tables: Sequence[Table],
    config: GeneratorConfig,
    args: argparse.Namespace,
    quiet: bool,
) -> int:
    output_dir: Path = Path(args.output).resolve()
    logger.info("Output:  %s", output_dir)
    logger.info("Force:   %s", args.force)

    report: GenerationReport = MapperGenerator().generate(
        tables, config, output_dir, force=args.force
    )
    if not quiet:
        print(report.summary())
    return _exit_code_for(report)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    try:
        tables, config = _resolve_inputs(args)
    except (FileNotFoundError, ValueError, InputError, GeneratorError) as exc:
        logger.error("%s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(tables, config))

    if args.echo:
        sys.exit(_run_echo(tables, config))

    exit_code: int = _run_generation(tables, config, args, quiet=args.quiet)
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("mappergen.cli loaded.")
