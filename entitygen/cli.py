# File: entitygen/cli.py
"""
entitygen - Command-Line Interface
====================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate app/Entities/UserEntity.php from app/Models/User.php
    entitygen User

    # Custom namespace and suffix, extend Resource, overwrite
    entitygen Post -N Http\\Resources -s Resource --resource --force

    # Point at a project and database explicitly
    entitygen User -p ../shop --database-url sqlite:///../shop/database/database.sqlite

    # Print the class instead of writing it
    entitygen User --dry-run

Exit codes:
    0: success
    1: precondition / argument error
    2: model parse error
    3: schema (database) error
    4: write error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence, Type

from pydantic import ValidationError

from entitygen.errors import (
    EntityGenError,
    EntityWriteError,
    ModelParseError,
    PreconditionError,
    SchemaReadError,
)
from entitygen.generator import EntityGenerator, GenerationReport
from entitygen.models import EntityGenerationConfig

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_PRECONDITION_ERROR: int = 1
EXIT_PARSE_ERROR: int = 2
EXIT_SCHEMA_ERROR: int = 3
EXIT_WRITE_ERROR: int = 4

_EXIT_CODES: Dict[Type[EntityGenError], int] = {
    PreconditionError: EXIT_PRECONDITION_ERROR,
    ModelParseError: EXIT_PARSE_ERROR,
    SchemaReadError: EXIT_SCHEMA_ERROR,
    EntityWriteError: EXIT_WRITE_ERROR,
}


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root entitygen logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity < 0:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("entitygen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from entitygen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="entitygen",
        description=(
            "Generate a Spatie Data-based Entity class from an Eloquent model "
            "by parsing its code (resolving imported classes, custom casts, "
            "etc.) and reading its table columns from the database."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s User\n"
            "  %(prog)s Post -N 'Http\\Resources' -s Resource --resource --force\n"
            "  %(prog)s User --dry-run\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"entitygen v{__version__}",
    )

    parser.add_argument(
        "model",
        metavar="MODEL",
        help='The name of the Eloquent model (e.g. "User").',
    )

    # --- Output ---
    output_group = parser.add_argument_group("output")
    output_group.add_argument(
        "-N", "--namespace",
        default="Entities",
        metavar="NS",
        help="The namespace (under \\App) to place this Entity class (default: Entities).",
    )
    output_group.add_argument(
        "-s", "--suffix",
        default="Entity",
        help="The suffix to append to the generated class name (default: Entity).",
    )
    output_group.add_argument(
        "--resource",
        action="store_true",
        default=False,
        help="Inherit Resource instead of Data.",
    )
    output_group.add_argument(
        "-f", "--force",
        action="store_true",
        default=False,
        help="Overwrite the file if it already exists.",
    )
    output_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Print the generated class instead of writing it.",
    )

    # --- Project / database ---
    project_group = parser.add_argument_group("project")
    project_group.add_argument(
        "-p", "--path",
        default=".",
        metavar="DIR",
        help="Root of the Laravel project (default: current directory).",
    )
    project_group.add_argument(
        "--database-url",
        default=None,
        metavar="URL",
        help=(
            "SQLAlchemy database URL. Defaults to $ENTITYGEN_DATABASE_URL, "
            "$DATABASE_URL, then the project's .env DB_* settings."
        ),
    )
    project_group.add_argument(
        "--table",
        default=None,
        help="Read columns from this table instead of the model's table.",
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
        help="Only report errors (and the class itself with --dry-run).",
    )

    return parser


def _build_config(args: argparse.Namespace) -> EntityGenerationConfig:
    return EntityGenerationConfig(
        model=args.model,
        namespace=args.namespace,
        suffix=args.suffix,
        resource=args.resource,
        force=args.force,
        dry_run=args.dry_run,
        project_path=Path(args.path).resolve(),
        database_url=args.database_url,
        table=args.table,
    )


def run(args: argparse.Namespace) -> int:
    """
    Run one generation and return the exit code.

    Fatal errors are logged; the generated class is printed to stdout in
    dry-run mode.
    """
    try:
        config: EntityGenerationConfig = _build_config(args)
    except ValidationError as exc:
        for err in exc.errors():
            logger.error("Invalid %s: %s", ".".join(str(p) for p in err["loc"]), err["msg"])
        return EXIT_PRECONDITION_ERROR

    logger.info("Model:   %s", config.source_path)
    logger.info("Output:  %s", config.output_path)

    try:
        report: GenerationReport = EntityGenerator(config).generate()
    except EntityGenError as exc:
        logger.error("%s", exc)
        return _EXIT_CODES.get(type(exc), EXIT_PRECONDITION_ERROR)

    if config.dry_run:
        sys.stdout.write(report.content)
    elif not args.quiet:
        print(f"Entity class [{report.class_name}] created at [{report.output_path}].")

    logger.debug("\n%s", report.summary())
    return EXIT_SUCCESS


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

    sys.exit(run(args))


def main() -> None:
    """Console-script entry point."""
    cli_main()


__all__: List[str] = [
    "cli_main",
    "main",
    "run",
    "EXIT_SUCCESS",
    "EXIT_PRECONDITION_ERROR",
    "EXIT_PARSE_ERROR",
    "EXIT_SCHEMA_ERROR",
    "EXIT_WRITE_ERROR",
]
