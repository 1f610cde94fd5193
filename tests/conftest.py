"""
tests/conftest.py
Shared fixtures for the entitygen test suite.

Fixtures build throwaway Laravel project trees inside pytest's tmp_path
and, for end-to-end runs, a real SQLite database created with SQLAlchemy.
PHP sources are parsed for real with tree-sitter.
"""

from __future__ import annotations

import logging
import pathlib
import textwrap
from typing import Dict, Iterator, List

import pytest
from sqlalchemy import create_engine, text

from entitygen.php_parser import PhpSourceParser


# ---------------------------------------------------------------------------
# PHP sources
# ---------------------------------------------------------------------------

USER_MODEL_WITHOUT_CASTS: str = textwrap.dedent(r"""
    <?php

    namespace App\Models;

    use Illuminate\Database\Eloquent\Model;

    class User extends Model
    {
        protected $fillable = ['name', 'email'];
    }
""").lstrip()

USER_MODEL_WITH_CASTS: str = textwrap.dedent(r"""
    <?php

    declare(strict_types=1);

    namespace App\Models;

    use App\Casts\AsMoney;
    use Illuminate\Database\Eloquent\Factories\HasFactory;
    use Illuminate\Database\Eloquent\Model;

    class User extends Model
    {
        use HasFactory;

        protected $casts = [
            'is_admin' => 'boolean',
        ];

        protected function casts(): array
        {
            return [
                'email_verified_at' => 'datetime',
                'balance' => AsMoney::class,
                'settings' => 'array',
            ];
        }
    }
""").lstrip()

MONEY_CAST: str = textwrap.dedent(r"""
    <?php

    namespace App\Casts;

    use App\Support\Money;
    use Illuminate\Contracts\Database\Eloquent\CastsAttributes;
    use Illuminate\Database\Eloquent\Model;

    class AsMoney implements CastsAttributes
    {
        public function get(Model $model, string $key, mixed $value, array $attributes): ?Money
        {
            return new Money($value);
        }

        public function set(Model $model, string $key, mixed $value, array $attributes): mixed
        {
            return $value;
        }
    }
""").lstrip()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class LaravelProject:
    """A minimal Laravel directory layout rooted at *root*."""

    def __init__(self, root: pathlib.Path) -> None:
        self.root: pathlib.Path = root
        (root / "app" / "Models").mkdir(parents=True)

    def write(self, relative: str, source: str) -> pathlib.Path:
        path: pathlib.Path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    def write_model(self, name: str, source: str) -> pathlib.Path:
        return self.write(f"app/Models/{name}.php", source)

    def entity_path(self, class_name: str, namespace: str = "Entities") -> pathlib.Path:
        return self.root / "app" / namespace.replace("\\", "/") / f"{class_name}.php"


class StaticSchemaIntrospector:
    """In-memory schema introspector keyed by table name."""

    def __init__(self, tables: Dict[str, List[str]]) -> None:
        self.tables: Dict[str, List[str]] = tables
        self.requested: List[str] = []

    def column_names(self, table: str) -> List[str]:
        self.requested.append(table)
        return list(self.tables[table])


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def php_parser() -> PhpSourceParser:
    return PhpSourceParser()


@pytest.fixture()
def parse(php_parser: PhpSourceParser):
    """Parse dedented PHP source (``<?php`` prepended when missing)."""

    def _parse(source: str):
        source = textwrap.dedent(source).strip()
        if not source.startswith("<?php"):
            source = "<?php\n" + source
        return php_parser.parse(source + "\n")

    return _parse


@pytest.fixture()
def user_model_source() -> str:
    return USER_MODEL_WITHOUT_CASTS


@pytest.fixture()
def user_model_with_casts_source() -> str:
    return USER_MODEL_WITH_CASTS


@pytest.fixture()
def money_cast_source() -> str:
    return MONEY_CAST


@pytest.fixture()
def project(tmp_path: pathlib.Path) -> LaravelProject:
    return LaravelProject(tmp_path / "shop")


@pytest.fixture()
def users_introspector() -> StaticSchemaIntrospector:
    return StaticSchemaIntrospector(
        {"users": ["id", "name", "email", "created_at", "updated_at"]}
    )


@pytest.fixture()
def make_introspector():
    """Factory for in-memory introspectors: ``make_introspector(users=[...])``."""

    def _make(**tables: List[str]) -> StaticSchemaIntrospector:
        return StaticSchemaIntrospector(dict(tables))

    return _make


@pytest.fixture()
def sqlite_url(tmp_path: pathlib.Path) -> str:
    """SQLite database with a Laravel-style ``users`` table."""
    db_path: pathlib.Path = tmp_path / "database.sqlite"
    url: str = f"sqlite:///{db_path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE users ("
            " id INTEGER PRIMARY KEY,"
            " name VARCHAR(255) NOT NULL,"
            " email VARCHAR(255) NOT NULL,"
            " email_verified_at TIMESTAMP NULL,"
            " created_at TIMESTAMP NULL,"
            " updated_at TIMESTAMP NULL"
            ")"
        ))
    engine.dispose()
    return url


@pytest.fixture(autouse=True)
def _reset_entitygen_logger() -> Iterator[None]:
    """The CLI reconfigures the ``entitygen`` logger; undo that per test."""
    yield
    root = logging.getLogger("entitygen")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
