# File: entitygen/models.py
"""
entitygen - Core Data Models
==============================
Pydantic V2 models for the generator's configuration and for the entity
class it produces.  These are the single source of truth passed between
the CLI, the orchestrator and the template engine.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

from entitygen.utils import is_class_type, is_php_identifier, short_class_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

APP_NAMESPACE: str = "App"
APP_DIRECTORY: str = "app"
MODELS_DIRECTORY: str = "Models"
DATA_PACKAGE: str = "Spatie\\LaravelData"

# Columns Eloquent maintains itself; never part of an entity
BOOKKEEPING_COLUMNS: FrozenSet[str] = frozenset({"created_at", "updated_at", "deleted_at"})


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class BaseClassKind(str, Enum):
    """Spatie laravel-data base class the entity extends."""

    DATA = "Data"
    RESOURCE = "Resource"

    @property
    def import_name(self) -> str:
        return f"{DATA_PACKAGE}\\{self.value}"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class EntityGenerationConfig(BaseModel):
    """
    Settings for one ``entitygen`` run.

    Paths are derived from ``project_path`` following Laravel's layout:
    models live in ``app/Models`` and the entity lands in the directory
    matching its namespace under ``app/``.
    """

    model_config = _SHARED_CONFIG

    model: str = Field(..., min_length=1, description="Eloquent model name, e.g. 'User'.")
    namespace: str = Field(
        default="Entities",
        description="Namespace under App\\ for the generated class.",
    )
    suffix: str = Field(default="Entity", description="Appended to the model name.")
    resource: bool = Field(default=False, description="Extend Resource instead of Data.")
    force: bool = Field(default=False, description="Overwrite an existing file.")
    dry_run: bool = Field(default=False, description="Render without writing.")
    project_path: Path = Field(default=Path("."), description="Laravel project root.")
    database_url: Optional[str] = Field(default=None, description="SQLAlchemy database URL.")
    table: Optional[str] = Field(default=None, description="Table name override.")

    # -- Validators -----------------------------------------------------------

    @field_validator("model")
    @classmethod
    def _check_model(cls, value: str) -> str:
        value = value.strip()
        if not is_php_identifier(value):
            raise ValueError(f"'{value}' is not a valid PHP class name.")
        return value

    @field_validator("suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        value = value.strip()
        if value and not all(c.isalnum() or c == "_" or ord(c) >= 0x80 for c in value):
            raise ValueError(f"'{value}' is not a valid class name suffix.")
        return value

    @field_validator("namespace")
    @classmethod
    def _check_namespace(cls, value: str) -> str:
        value = value.strip().strip("\\/")
        if not value:
            raise ValueError("Namespace must not be empty.")
        for segment in value.replace("/", "\\").split("\\"):
            if not is_php_identifier(segment):
                raise ValueError(f"'{segment}' is not a valid namespace segment.")
        return value.replace("/", "\\")

    @field_validator("table")
    @classmethod
    def _check_table(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    # -- Derived values -------------------------------------------------------

    @computed_field  # type: ignore[prop-decorator]
    @property
    def class_name(self) -> str:
        return f"{self.model}{self.suffix}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_namespace(self) -> str:
        return f"{APP_NAMESPACE}\\{self.namespace}"

    @property
    def base_class(self) -> BaseClassKind:
        return BaseClassKind.RESOURCE if self.resource else BaseClassKind.DATA

    @property
    def eloquent_class(self) -> str:
        return f"{APP_NAMESPACE}\\{MODELS_DIRECTORY}\\{self.model}"

    @property
    def source_path(self) -> Path:
        return self.project_path / APP_DIRECTORY / MODELS_DIRECTORY / f"{self.model}.php"

    @property
    def output_directory(self) -> Path:
        return self.project_path / APP_DIRECTORY / Path(*self.namespace.split("\\"))

    @property
    def output_path(self) -> Path:
        return self.output_directory / f"{self.class_name}.php"


# ---------------------------------------------------------------------------
# Generated class
# ---------------------------------------------------------------------------


class EntityField(BaseModel):
    """One constructor-promoted, read-only property of the entity."""

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1)
    type_name: str = Field(default="string", min_length=1)

    @property
    def php_type(self) -> str:
        """Type as written in the class body (last segment for classes)."""
        if is_class_type(self.type_name):
            return short_class_name(self.type_name)
        return self.type_name

    @property
    def import_name(self) -> Optional[str]:
        if is_class_type(self.type_name):
            return self.type_name.lstrip("\\")
        return None

    def __repr__(self) -> str:
        return f"<EntityField {self.php_type} ${self.name}>"


class EntityDefinition(BaseModel):
    """Everything needed to render the entity source file."""

    model_config = _FROZEN_CONFIG

    namespace: str = Field(..., min_length=1)
    class_name: str = Field(..., min_length=1)
    base_class: BaseClassKind = BaseClassKind.DATA
    properties: List[EntityField] = Field(default_factory=list)
    imports: List[str] = Field(default_factory=list, description="Rendered 'use' lines.")

    @property
    def property_names(self) -> List[str]:
        return [p.name for p in self.properties]


__all__: List[str] = [
    "APP_DIRECTORY",
    "APP_NAMESPACE",
    "BOOKKEEPING_COLUMNS",
    "DATA_PACKAGE",
    "MODELS_DIRECTORY",
    "BaseClassKind",
    "EntityDefinition",
    "EntityField",
    "EntityGenerationConfig",
]
