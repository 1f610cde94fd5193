# File: entitygen/schema.py
"""
entitygen - Database Schema Introspection
===========================================
Supplies the authoritative, ordered column list for a model's table.

Resolution steps:

    1. Table name: ``--table`` override, else the model's literal
       ``protected $table = '...'``, else Eloquent's convention
       (``BlogPost`` -> ``blog_posts``).
    2. Database URL: ``--database-url``, else ``ENTITYGEN_DATABASE_URL`` /
       ``DATABASE_URL``, else the Laravel project's ``.env``.
    3. Columns: SQLAlchemy's inspector, in table order.

Any database failure is wrapped in ``SchemaReadError``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from dotenv import dotenv_values
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from tree_sitter import Tree

from entitygen.errors import SchemaReadError
from entitygen.php_parser import find_property_default, string_literal_value
from entitygen.utils import table_name_for_model

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.schema")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

URL_ENV_VARS: Tuple[str, ...] = ("ENTITYGEN_DATABASE_URL", "DATABASE_URL")

# Laravel DB_CONNECTION -> SQLAlchemy driver
_LARAVEL_DRIVERS: Dict[str, str] = {
    "mysql": "mysql+pymysql",
    "mariadb": "mysql+pymysql",
    "pgsql": "postgresql+psycopg",
    "sqlsrv": "mssql+pyodbc",
    "sqlite": "sqlite",
}

_DEFAULT_SQLITE_DATABASE: str = "database/database.sqlite"


# ---------------------------------------------------------------------------
# Introspector interface
# ---------------------------------------------------------------------------


class SchemaIntrospector(Protocol):
    """Anything that can list a table's columns in order."""

    def column_names(self, table: str) -> List[str]: ...


class SqlAlchemySchemaIntrospector:
    """
    Read column names through ``sqlalchemy.inspect``.

    An engine is created lazily from *database_url* unless one is passed
    in; engines created here are disposed after each lookup.
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None) -> None:
        if database_url is None and engine is None:
            raise ValueError("Either database_url or engine is required.")
        self.database_url: Optional[str] = database_url
        self._engine: Optional[Engine] = engine

    def _create_engine(self) -> Engine:
        try:
            return create_engine(self.database_url)
        except (ArgumentError, ImportError) as exc:
            raise SchemaReadError(f"Cannot use database URL {redact_url(self.database_url)}: {exc}") from exc

    def column_names(self, table: str) -> List[str]:
        owned: bool = self._engine is None
        engine: Engine = self._engine if self._engine is not None else self._create_engine()
        try:
            inspector = inspect(engine)
            if not inspector.has_table(table):
                raise SchemaReadError(f"Table [{table}] does not exist.")
            columns: List[str] = [col["name"] for col in inspector.get_columns(table)]
        except SQLAlchemyError as exc:
            raise SchemaReadError(f"Cannot read columns of [{table}]: {exc}") from exc
        finally:
            if owned:
                engine.dispose()

        logger.info("Table %s has %d column(s)", table, len(columns))
        return columns


# ---------------------------------------------------------------------------
# Table name
# ---------------------------------------------------------------------------


def resolve_table_name(tree: Tree, model_name: str, override: Optional[str] = None) -> str:
    """Table behind the model: override, ``$table`` literal, or convention."""
    if override:
        return override

    declared: Optional[str] = string_literal_value(find_property_default(tree.root_node, "table"))
    if declared:
        logger.debug("Model %s declares table %s", model_name, declared)
        return declared

    return table_name_for_model(model_name)


# ---------------------------------------------------------------------------
# Database URL
# ---------------------------------------------------------------------------


def redact_url(url: Optional[str]) -> str:
    """URL with the password masked, for log output."""
    if not url:
        return ""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "<invalid url>"


def database_url_from_env_file(env_path: Path, project_path: Optional[Path] = None) -> Optional[str]:
    """
    Build a SQLAlchemy URL from a Laravel ``.env`` file.

    ``DB_URL`` / ``DATABASE_URL`` win when set.  Otherwise the ``DB_*``
    connection settings are combined; unknown drivers yield ``None``.
    """
    if not env_path.is_file():
        return None

    values: Dict[str, Optional[str]] = dotenv_values(env_path)

    for key in ("DB_URL", "DATABASE_URL"):
        if values.get(key):
            return values[key]

    connection: str = (values.get("DB_CONNECTION") or "").strip().lower()
    driver: Optional[str] = _LARAVEL_DRIVERS.get(connection)
    if driver is None:
        if connection:
            logger.warning("Unsupported DB_CONNECTION '%s' in %s", connection, env_path)
        return None

    database: Optional[str] = values.get("DB_DATABASE") or None

    if driver == "sqlite":
        base: Path = project_path if project_path is not None else env_path.parent
        db_path: Path = Path(database or _DEFAULT_SQLITE_DATABASE)
        if not db_path.is_absolute():
            db_path = base / db_path
        return f"sqlite:///{db_path}"

    port: Optional[str] = values.get("DB_PORT") or None
    url: URL = URL.create(
        driver,
        username=values.get("DB_USERNAME") or None,
        password=values.get("DB_PASSWORD") or None,
        host=values.get("DB_HOST") or None,
        port=int(port) if port and port.isdigit() else None,
        database=database,
    )
    return url.render_as_string(hide_password=False)


def resolve_database_url(
    explicit: Optional[str],
    project_path: Path,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Pick the database URL from option, environment or ``.env``."""
    if explicit:
        return explicit

    env: Mapping[str, str] = os.environ if environ is None else environ
    for var in URL_ENV_VARS:
        if env.get(var):
            logger.debug("Using database URL from $%s", var)
            return env[var]

    url: Optional[str] = database_url_from_env_file(project_path / ".env", project_path)
    if url:
        logger.debug("Using database URL from %s", project_path / ".env")
    return url


__all__: List[str] = [
    "SchemaIntrospector",
    "SqlAlchemySchemaIntrospector",
    "URL_ENV_VARS",
    "database_url_from_env_file",
    "redact_url",
    "resolve_database_url",
    "resolve_table_name",
]
