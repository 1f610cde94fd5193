# File: entitygen/__init__.py
"""
entitygen: Eloquent Model to Data Class Generator
====================================================

Reads a Laravel project's Eloquent model source with tree-sitter, resolves
its imports and ``casts`` (following custom cast classes into their own
files), reads the table's columns through SQLAlchemy, and writes a Spatie
``laravel-data`` class with one typed, read-only property per column.

Architecture overview::

    ┌──────────────┐     ┌─────────────────┐     ┌────────────────┐
    │  CLI / Entry │────▶│ EntityGenerator │────▶│ EntityTemplate │
    │   (cli.py)   │     │ (generator.py)  │     │ (templates.py) │
    └──────────────┘     └────────┬────────┘     └────────────────┘
                                  │
         ┌──────────────┬─────────┼───────────┬──────────────┐
         ▼              ▼         ▼           ▼              ▼
    ┌──────────┐  ┌──────────┐ ┌────────┐ ┌──────────────┐ ┌──────────┐
    │php_parser│  │ imports  │ │ casts  │ │ custom_casts │ │  schema  │
    └──────────┘  └──────────┘ └────────┘ └──────────────┘ └──────────┘

Usage::

    # As a library
    from entitygen import EntityGenerationConfig, EntityGenerator
    report = EntityGenerator(EntityGenerationConfig(model="User")).generate()

    # From the command line
    entitygen User --path /var/www/shop -v
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from entitygen.casts import (
    CastTypeMapper,
    extract_literal_map,
    locate_casts,
    map_builtin_type,
    map_cast_keyword,
)
from entitygen.custom_casts import CustomCastResolver
from entitygen.errors import (
    EntityGenError,
    EntityWriteError,
    ModelParseError,
    PreconditionError,
    SchemaReadError,
)
from entitygen.filestore import SourceFileStore
from entitygen.generator import EntityGenerator, GenerationReport
from entitygen.imports import collect_imports
from entitygen.models import (
    BaseClassKind,
    EntityDefinition,
    EntityField,
    EntityGenerationConfig,
)
from entitygen.php_parser import PhpParseError, PhpSourceParser
from entitygen.schema import SchemaIntrospector, SqlAlchemySchemaIntrospector
from entitygen.templates import EntityTemplate, build_entity_definition

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "EntityGenerator",
    "GenerationReport",
    # Models
    "BaseClassKind",
    "EntityDefinition",
    "EntityField",
    "EntityGenerationConfig",
    # Analysis
    "PhpParseError",
    "PhpSourceParser",
    "collect_imports",
    "extract_literal_map",
    "locate_casts",
    "map_cast_keyword",
    "map_builtin_type",
    "CastTypeMapper",
    "CustomCastResolver",
    # Collaborators
    "SchemaIntrospector",
    "SqlAlchemySchemaIntrospector",
    "SourceFileStore",
    # Templates
    "EntityTemplate",
    "build_entity_definition",
    # Errors
    "EntityGenError",
    "EntityWriteError",
    "ModelParseError",
    "PreconditionError",
    "SchemaReadError",
]
