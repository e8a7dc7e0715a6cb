# File: mappergen/generator.py
"""
Mapper Codegen - Generation Pipeline (Orchestrator)
=====================================================

Connects every phase together:

    Table facts → Validation → Code Assembly → File Export

Workflow::

    1. Load tables and config from a YAML/JSON file (or accept in-memory
       ``Table`` objects, e.g. from ``mappergen.introspection``).
    2. Validate each table against the config (validators.py).
    3. Assemble model and spec sources per table (templates.py).
    4. Hand the artifacts to ``ArtifactWriter`` (exporters.py), unless the
       run is a dry run.
    5. Return a ``GenerationReport`` with metrics and status.

Error handling:
    - Validation findings are collected and surfaced per table.
    - A table that fails validation or assembly is skipped; the remaining
      tables are still generated.
    - Write failures are recorded in the report.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from mappergen.errors import ConfigurationError, GeneratorError, SchemaError
from mappergen.exporters import ArtifactWriter, ExportResult, model_path, spec_path
from mappergen.models import GeneratedArtifact, GeneratorConfig, Table
from mappergen.naming import class_name_for
from mappergen.templates import TemplateGenerator
from mappergen.utils import Timer, count_lines
from mappergen.validators import ValidationResult, raise_for_errors, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``MapperGenerator.generate()``.

    Contains timing information, file counts, the generated artifacts,
    and any errors/warnings encountered.
    """

    success: bool = False
    output_directory: str = ""
    dry_run: bool = False

    # Metrics
    tables_requested: int = 0
    files_written: int = 0
    files_skipped: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    artifacts: List[GeneratedArtifact] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    skipped_tables: List[str] = field(default_factory=list)

    @property
    def tables_generated(self) -> int:
        return len(self.artifacts)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  Mapper Codegen - Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}{' (dry run)' if self.dry_run else ''}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(
            f"  Tables generated: {self.tables_generated}/{self.tables_requested}"
        )
        lines.append(f"  Files written:    {self.files_written}")
        lines.append(f"  Files skipped:    {self.files_skipped}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<20s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections: Sequence[Tuple[str, str, List[str]]] = (
            ("Validation Errors", "✗", self.validation_errors),
            ("Validation Warnings", "⚠", self.validation_warnings),
            ("Generation Errors", "✗", self.generation_errors),
            ("Export Errors", "✗", self.export_errors),
            ("Skipped Tables", "⊘", self.skipped_tables),
        )
        for title, icon, items in sections:
            if not items:
                continue
            lines.append(f"{'─'*60}")
            lines.append(f"  {title} ({len(items)}):")
            for item in items:
                lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Schema loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_schema_file(path: Path) -> Dict[str, Any]:
    """
    Load a schema or config file (JSON or YAML).

    Dispatches on the file extension; anything other than ``.json`` is
    read as YAML, which also accepts JSON documents.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Schema path is not a file: {path}")

    if path.suffix.lower() == ".json":
        return _load_json_file(path)
    return _load_yaml_file(path)


def _parse_table(data: Any, index: int) -> Table:
    if not isinstance(data, dict):
        raise SchemaError(f"Table entry #{index} is not a mapping.")
    try:
        return Table.model_validate(data)
    except PydanticValidationError as exc:
        first: Dict[str, Any] = exc.errors()[0]
        where: str = ".".join(str(p) for p in first.get("loc", ()))
        raise SchemaError(
            f"Invalid table definition at '{where}': {first.get('msg', exc)}",
            table=data.get("name") or f"#{index}",
        ) from exc


def parse_raw_schema(raw: Dict[str, Any]) -> Tuple[List[Table], GeneratorConfig]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated models.

    Expected top-level keys:
        - "tables": list of table mappings (or "table": a single mapping)
        - "config": generator settings (optional, camelCase or snake_case)

    Raises:
        SchemaError: If the table definitions are missing or malformed.
        ConfigurationError: If the config mapping is invalid.
    """
    table_data: Any
    if "tables" in raw:
        table_data = raw["tables"]
    elif "table" in raw:
        table_data = [raw["table"]]
    else:
        raise SchemaError(
            "Cannot find table definitions in input. "
            "Expected top-level key: 'tables' or 'table'."
        )
    if not isinstance(table_data, list):
        raise SchemaError("'tables' must be a list of table mappings.")

    config_data: Any = raw.get("config")
    if config_data is None:
        logger.info("No generator config found in input; using defaults.")
        config_data = {}
    if not isinstance(config_data, dict):
        raise ConfigurationError("'config' must be a mapping.", field="config")

    tables: List[Table] = [_parse_table(t, i) for i, t in enumerate(table_data)]
    config: GeneratorConfig = GeneratorConfig.from_mapping(config_data)
    return tables, config


def select_tables(tables: Sequence[Table], names: Optional[Iterable[str]]) -> List[Table]:
    """Tables named in *names*, in the order given; all tables when *names* is None."""
    if names is None:
        return list(tables)
    by_name: Dict[str, Table] = {t.name: t for t in tables}
    selected: List[Table] = []
    for name in names:
        if name not in by_name:
            raise SchemaError(
                f"Table '{name}' is not defined; known tables: "
                f"{', '.join(sorted(by_name)) or '(none)'}.",
                table=name,
            )
        selected.append(by_name[name])
    return selected


# ---------------------------------------------------------------------------
# Single-table entry points
# ---------------------------------------------------------------------------


def assemble_artifact(table: Table, config: GeneratorConfig) -> GeneratedArtifact:
    """Assemble sources for *table* without validating it first."""
    engine: TemplateGenerator = TemplateGenerator(config)
    class_name: str = class_name_for(table, config)
    spec_code: Optional[str] = engine.generate_test_spec(table)
    return GeneratedArtifact(
        class_name=class_name,
        package_name=config.package_name,
        model_code=engine.generate_model(table),
        model_path=model_path(config, class_name),
        spec_code=spec_code,
        spec_path=spec_path(config, class_name) if spec_code is not None else None,
    )


def generate_artifact(table: Table, config: GeneratorConfig) -> GeneratedArtifact:
    """
    Validate *table* and assemble its model and spec sources.

    Touches no files.  Raises the typed ``GeneratorError`` for the first
    validation error found.
    """
    result: ValidationResult = validate_full(table, config)
    for warning in result.warnings:
        logger.warning("%s", warning)
    raise_for_errors(result)
    return assemble_artifact(table, config)


# ---------------------------------------------------------------------------
# MapperGenerator: multi-table orchestrator
# ---------------------------------------------------------------------------


class MapperGenerator:
    """
    Multi-table pipeline orchestrator.

    Usage::

        generator = MapperGenerator()

        # From a file
        report = generator.generate_from_file(Path("schema.yaml"), Path("."))

        # From in-memory objects
        report = generator.generate(tables, config, Path("."), force=True)

        print(report.summary())

    The generator is reusable: create once, call generate() many times.
    """

    def __init__(self, *, fail_on_warnings: bool = False) -> None:
        self._fail_on_warnings: bool = fail_on_warnings
        logger.debug("MapperGenerator initialised: fail_on_warnings=%s.", fail_on_warnings)

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        schema_path: Path,
        base_dir: Path,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
        table_names: Optional[Sequence[str]] = None,
        force: bool = False,
        dry_run: bool = False,
    ) -> GenerationReport:
        """
        Full pipeline: load file → validate → generate → export.

        Load and parse failures propagate (``FileNotFoundError``,
        ``ValueError``, ``GeneratorError``); per-table problems are
        recorded in the returned report.
        """
        raw: Dict[str, Any] = load_schema_file(Path(schema_path))
        logger.info("Loaded schema file: %s (%d top-level keys).", schema_path, len(raw))

        tables, config = parse_raw_schema(raw)
        if config_overrides:
            config = config.with_overrides(**config_overrides)
        tables = select_tables(tables, table_names)
        return self.generate(tables, config, base_dir, force=force, dry_run=dry_run)

    # -----------------------------------------------------------------
    # Public: generate from in-memory objects
    # -----------------------------------------------------------------

    def generate(
        self,
        tables: Sequence[Table],
        config: GeneratorConfig,
        base_dir: Path,
        force: bool = False,
        dry_run: bool = False,
    ) -> GenerationReport:
        """Validate, assemble and (unless *dry_run*) write every table."""
        base_dir = Path(base_dir)
        report: GenerationReport = GenerationReport(
            output_directory=str(base_dir.resolve()),
            dry_run=dry_run,
            tables_requested=len(tables),
        )
        pipeline_start: float = time.perf_counter()

        valid_tables: List[Table] = self._step_validate(tables, config, report)
        self._step_generate(valid_tables, config, report)
        if not dry_run and report.artifacts:
            self._step_export(config, base_dir, force, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    # -----------------------------------------------------------------
    # Pipeline step: Validation
    # -----------------------------------------------------------------

    def _step_validate(
        self,
        tables: Sequence[Table],
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> List[Table]:
        valid: List[Table] = []
        with Timer("validation") as t:
            for table in tables:
                result: ValidationResult = validate_full(table, config)
                report.validation_errors.extend(f"{table.name}: {e}" for e in result.errors)
                report.validation_warnings.extend(
                    f"{table.name}: {w}" for w in result.warnings
                )
                failed: bool = result.has_errors or (
                    self._fail_on_warnings and bool(result.warnings)
                )
                if failed:
                    report.skipped_tables.append(table.name)
                    for err in result.errors:
                        logger.error("  ✗ %s: %s", table.name, err)
                    continue
                for warn in result.warnings:
                    logger.warning("  ⚠ %s: %s", table.name, warn)
                valid.append(table)

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Validate Tables",
                success=len(valid) == len(tables),
                elapsed_seconds=t.elapsed,
                detail=f"{len(valid)}/{len(tables)} tables valid",
            )
        )
        return valid

    # -----------------------------------------------------------------
    # Pipeline step: Code generation
    # -----------------------------------------------------------------

    def _step_generate(
        self,
        tables: Sequence[Table],
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> None:
        with Timer("code_generation") as t:
            for table in tables:
                try:
                    artifact: GeneratedArtifact = assemble_artifact(table, config)
                except GeneratorError as exc:
                    msg: str = f"{table.name}: {type(exc).__name__}: {exc}"
                    report.generation_errors.append(msg)
                    report.skipped_tables.append(table.name)
                    logger.error(msg)
                    continue
                report.artifacts.append(artifact)

        report.total_lines = sum(
            count_lines(content) for a in report.artifacts for content in a.files().values()
        )
        detail: str = f"{len(report.artifacts)} artifacts, ~{report.total_lines:,} lines"
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Code Generation",
                success=not report.generation_errors,
                elapsed_seconds=t.elapsed,
                detail=detail,
            )
        )
        logger.info("Code generation complete: %s in %.3fs.", detail, t.elapsed)

    # -----------------------------------------------------------------
    # Pipeline step: Export
    # -----------------------------------------------------------------

    def _step_export(
        self,
        config: GeneratorConfig,
        base_dir: Path,
        force: bool,
        report: GenerationReport,
    ) -> None:
        writer: ArtifactWriter = ArtifactWriter(config, base_dir)
        combined: ExportResult = ExportResult()
        with Timer("export") as t:
            for artifact in report.artifacts:
                combined.merge(writer.write_artifact(artifact, force=force))

        report.files_written = len(combined.written)
        report.files_skipped = len(combined.skipped)
        report.total_bytes = combined.total_bytes
        report.export_errors.extend(combined.errors)

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Export Files",
                success=combined.success,
                elapsed_seconds=t.elapsed,
                detail=(
                    f"{report.files_written} written, {report.files_skipped} skipped"
                ),
            )
        )
        if combined.success:
            logger.info(
                "Export complete: %d file(s) under %s in %.3fs.",
                report.files_written,
                base_dir,
                t.elapsed,
            )
        else:
            logger.error("Export finished with %d error(s).", len(combined.errors))

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.validation_errors
            or report.generation_errors
            or report.export_errors
            or report.skipped_tables
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MapperGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "assemble_artifact",
    "generate_artifact",
    "load_schema_file",
    "parse_raw_schema",
    "select_tables",
]

logger.debug("mappergen.generator loaded — %d public symbols.", len(__all__))
