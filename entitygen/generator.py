# File: entitygen/generator.py
"""
entitygen - Generation Pipeline (Orchestrator)
================================================

Connects every phase of a run:

    Model source → Imports + Casts → Column types → DB columns → Render → Write

Workflow::

    1. Check preconditions (model file exists, output free or --force).
    2. Parse the model with tree-sitter (fatal on syntax errors).
    3. Collect ``use`` imports and the ``casts`` declaration.
    4. Map every cast to a PHP type; custom casts are followed into
       their own source files.
    5. Read the table's column list from the database.
    6. Build and render the entity class.
    7. Write it atomically (or keep it in memory for --dry-run).

Error handling strategy:
    - Preconditions, parse errors, schema errors and write errors raise
      an ``EntityGenError`` subclass and nothing is written.
    - Custom cast problems never abort; the column becomes ``string``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from tree_sitter import Tree

from entitygen.casts import CastMap, CastTypeMapper, ColumnTypeMap, locate_casts
from entitygen.custom_casts import CustomCastResolver
from entitygen.errors import (
    EntityWriteError,
    ModelParseError,
    PreconditionError,
    SchemaReadError,
)
from entitygen.filestore import SourceFileStore
from entitygen.imports import ImportMap, collect_imports
from entitygen.models import EntityDefinition, EntityGenerationConfig
from entitygen.php_parser import PhpParseError, PhpSourceParser
from entitygen.schema import (
    SchemaIntrospector,
    SqlAlchemySchemaIntrospector,
    redact_url,
    resolve_database_url,
    resolve_table_name,
)
from entitygen.templates import EntityTemplate, build_entity_definition
from entitygen.utils import Timer, count_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing for a single pipeline step."""

    step_name: str = ""
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Outcome of ``EntityGenerator.generate()``."""

    success: bool = False
    class_name: str = ""
    output_path: str = ""
    table: str = ""
    dry_run: bool = False

    # Metrics
    total_columns: int = 0
    total_properties: int = 0
    total_imports: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    casts: CastMap = field(default_factory=dict)
    column_types: ColumnTypeMap = field(default_factory=dict)
    content: str = ""

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "DRY RUN" if self.dry_run else ("SUCCESS" if self.success else "FAILED")
        lines.append(f"{'='*60}")
        lines.append("  entitygen: Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Class:            {self.class_name}")
        lines.append(f"  Output:           {self.output_path}")
        lines.append(f"  Table:            {self.table}")
        lines.append(f"  Columns:          {self.total_columns}")
        lines.append(f"  Properties:       {self.total_properties}")
        lines.append(f"  Casts:            {len(self.casts)}")
        lines.append(f"  Imports:          {self.total_imports}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")

        if self.step_metrics:
            lines.append(f"{'─'*60}")
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                lines.append(
                    f"    ✓ {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class EntityGenerator:
    """
    Generate one entity class for one Eloquent model.

    Collaborators may be injected (tests pass an in-memory schema
    introspector); otherwise they are built from *config*.
    """

    def __init__(
        self,
        config: EntityGenerationConfig,
        introspector: Optional[SchemaIntrospector] = None,
        parser: Optional[PhpSourceParser] = None,
        store: Optional[SourceFileStore] = None,
    ) -> None:
        self.config: EntityGenerationConfig = config
        self.parser: PhpSourceParser = parser or PhpSourceParser()
        self.store: SourceFileStore = store or SourceFileStore(dry_run=config.dry_run)
        self.template: EntityTemplate = EntityTemplate()
        self._introspector: Optional[SchemaIntrospector] = introspector

    # -- Steps ----------------------------------------------------------------

    def check_preconditions(self) -> None:
        source: Path = self.config.source_path
        if not self.store.exists(source):
            raise PreconditionError(f"Model file [{source}] does not exist.")

        output: Path = self.config.output_path
        if self.store.exists(output) and not self.config.force and not self.config.dry_run:
            raise PreconditionError(f"File [{output}] already exists. Use --force to overwrite.")

    def parse_model(self) -> Tree:
        source: Path = self.config.source_path
        logger.debug("Parsing %s from %s", self.config.eloquent_class, source)
        try:
            text: str = self.store.read(source)
        except (OSError, UnicodeDecodeError) as exc:
            raise PreconditionError(f"Cannot read model file [{source}]: {exc}") from exc
        try:
            return self.parser.parse(text)
        except PhpParseError as exc:
            raise ModelParseError(f"Parse error in model file [{source}]: {exc.message}") from exc

    def resolve_column_types(self, casts: CastMap) -> ColumnTypeMap:
        resolver: CustomCastResolver = CustomCastResolver(
            self.config.project_path, parser=self.parser, store=self.store
        )
        return CastTypeMapper(resolver).map_all(casts)

    def introspector(self) -> SchemaIntrospector:
        if self._introspector is None:
            url: Optional[str] = resolve_database_url(
                self.config.database_url, self.config.project_path
            )
            if not url:
                raise SchemaReadError(
                    "No database configured. Pass --database-url, set DATABASE_URL, "
                    "or provide DB_* settings in the project's .env."
                )
            logger.info("Database: %s", redact_url(url))
            self._introspector = SqlAlchemySchemaIntrospector(url)
        return self._introspector

    def write(self, content: str) -> int:
        try:
            self.store.make_directories(self.config.output_directory)
            return self.store.write(self.config.output_path, content)
        except OSError as exc:
            raise EntityWriteError(
                f"Cannot write [{self.config.output_path}]: {exc}"
            ) from exc

    # -- Pipeline -------------------------------------------------------------

    def generate(self) -> GenerationReport:
        """
        Run the whole pipeline.

        Raises:
            PreconditionError, ModelParseError, SchemaReadError,
            EntityWriteError: see ``entitygen.errors``.
        """
        config: EntityGenerationConfig = self.config
        report: GenerationReport = GenerationReport(
            class_name=config.class_name,
            output_path=str(config.output_path),
            dry_run=config.dry_run,
        )

        with Timer("total") as total:
            self.check_preconditions()

            with Timer("parse model") as t:
                tree: Tree = self.parse_model()
                imports: ImportMap = collect_imports(tree)
                casts: CastMap = locate_casts(tree, imports)
            report.casts = casts
            report.step_metrics.append(
                GenerationStepMetric("parse model", t.elapsed, f"{len(casts)} cast(s)")
            )

            with Timer("resolve types") as t:
                column_types: ColumnTypeMap = self.resolve_column_types(casts)
            report.column_types = column_types
            report.step_metrics.append(GenerationStepMetric("resolve types", t.elapsed))

            with Timer("read columns") as t:
                table: str = resolve_table_name(tree, config.model, config.table)
                columns: List[str] = self.introspector().column_names(table)
            report.table = table
            report.total_columns = len(columns)
            report.step_metrics.append(
                GenerationStepMetric("read columns", t.elapsed, f"table {table}")
            )

            with Timer("render") as t:
                definition: EntityDefinition = build_entity_definition(
                    namespace=config.full_namespace,
                    class_name=config.class_name,
                    columns=columns,
                    column_types=column_types,
                    base_class=config.base_class,
                )
                content: str = self.template.render(definition)
            report.step_metrics.append(GenerationStepMetric("render", t.elapsed))

            with Timer("write") as t:
                report.total_bytes = self.write(content)
            report.step_metrics.append(
                GenerationStepMetric("write", t.elapsed, "skipped" if config.dry_run else "")
            )

        report.content = content
        report.total_properties = len(definition.properties)
        report.total_imports = len(definition.imports)
        report.total_lines = count_lines(content)
        report.total_elapsed_seconds = total.elapsed
        report.success = True

        logger.info(
            "Entity class [%s] rendered with %d propert%s",
            config.class_name,
            report.total_properties,
            "y" if report.total_properties == 1 else "ies",
        )
        return report


__all__: List[str] = [
    "EntityGenerator",
    "GenerationReport",
    "GenerationStepMetric",
]
