# File: entitygen/errors.py
"""
entitygen - Exceptions
========================
Failures that abort a run.  Each maps to its own CLI exit code.

Custom cast resolution problems have no exception here; they are
recovered where they happen and the column falls back to ``string``.
"""

from __future__ import annotations

from typing import List


class EntityGenError(Exception):
    """Base class for all fatal generator errors."""


class PreconditionError(EntityGenError):
    """Missing model file, or output exists and ``--force`` was not given."""


class ModelParseError(EntityGenError):
    """The model's PHP source could not be parsed."""


class SchemaReadError(EntityGenError):
    """The table's column list could not be read from the database."""


class EntityWriteError(EntityGenError):
    """The generated file could not be written."""


__all__: List[str] = [
    "EntityGenError",
    "PreconditionError",
    "ModelParseError",
    "SchemaReadError",
    "EntityWriteError",
]
