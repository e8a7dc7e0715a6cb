# File: mappergen/__init__.py
"""
Mapper Codegen - ScalikeJDBC Model & Accessor Generator
=========================================================

Turns table facts (columns, keys, nullability, auto-increment) into the
Scala source of a ScalikeJDBC model: a value type, a companion object with
row mapper and CRUD accessors, and a matching test spec.

Architecture overview::

    ┌──────────────┐     ┌─────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ MapperGenerator │────▶│ TemplateGenerator│
    │   (cli.py)   │     │ (generator.py)  │     │  (templates.py)  │
    └──────┬───────┘     └────────┬────────┘     └────────┬─────────┘
           │                      │                       │
           ▼             ┌────────┼────────┐              ▼
    ┌─────────────┐      ▼        ▼        ▼       ┌─────────────┐
    │introspection│ validators  models  exporters  │  fragments  │
    └─────────────┘                                │naming / exec│
                                                   └─────────────┘

Usage::

    # As a library
    from mappergen import GeneratorConfig, Table, generate_artifact
    artifact = generate_artifact(table, GeneratorConfig(package_name="models"))
    print(artifact.model_code)

    # From the command line
    mappergen -s schema.yaml -o . --verbose
"""

from __future__ import annotations

__version__: str = "1.0.0"

from mappergen.errors import (
    ConfigurationError,
    DuplicateIdentifierError,
    EmptyColumnListError,
    EmptyInsertColumnsError,
    GeneratorError,
    ReservedNameCollisionError,
    SchemaError,
    UnknownColumnError,
    UnsupportedConfigurationError,
)
from mappergen.models import (
    Column,
    ColumnType,
    DateTimeClass,
    ExecutionMode,
    GeneratedArtifact,
    GeneratorConfig,
    LineBreak,
    ReturnCollectionType,
    SqlTemplate,
    Table,
    TestTemplate,
)
from mappergen.naming import ColumnMapper, ColumnMapping
from mappergen.fragments import Fragment, TemplateSelector
from mappergen.templates import TemplateGenerator, generate_model, generate_test_spec
from mappergen.validators import ValidationResult, raise_for_errors, validate_full
from mappergen.exporters import ArtifactWriter, ExportResult
from mappergen.generator import GenerationReport, MapperGenerator, generate_artifact
from mappergen.introspection import introspect_table, introspect_tables, list_tables

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    # Errors
    "GeneratorError",
    "ConfigurationError",
    "UnsupportedConfigurationError",
    "SchemaError",
    "EmptyColumnListError",
    "EmptyInsertColumnsError",
    "UnknownColumnError",
    "ReservedNameCollisionError",
    "DuplicateIdentifierError",
    # Models
    "Column",
    "ColumnType",
    "DateTimeClass",
    "ExecutionMode",
    "GeneratedArtifact",
    "GeneratorConfig",
    "LineBreak",
    "ReturnCollectionType",
    "SqlTemplate",
    "Table",
    "TestTemplate",
    # Naming & fragments
    "ColumnMapper",
    "ColumnMapping",
    "Fragment",
    "TemplateSelector",
    # Assembly
    "TemplateGenerator",
    "generate_model",
    "generate_test_spec",
    "generate_artifact",
    # Validation
    "ValidationResult",
    "validate_full",
    "raise_for_errors",
    # Orchestration & output
    "MapperGenerator",
    "GenerationReport",
    "ArtifactWriter",
    "ExportResult",
    # Introspection
    "introspect_table",
    "introspect_tables",
    "list_tables",
]
