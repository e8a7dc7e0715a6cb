# File: mappergen/validators.py
"""
Mapper Codegen - Schema & Configuration Validators
====================================================
Pre-generation checks over a ``Table`` and a ``GeneratorConfig``.

Pydantic already guarantees structural correctness of both models.  This
module adds the semantic checks that decide whether the generated Scala can
compile at all: columns present, key references resolvable, identifiers
unique and not shadowing the symbols the generated companion object defines.

Findings are accumulated in a ``ValidationResult`` (errors, warnings, info)
so a caller can report every problem at once; ``raise_for_errors`` then turns
the first error into the matching typed exception from ``mappergen.errors``.

Usage by downstream modules:
    from mappergen.validators import validate_full, raise_for_errors
    result = validate_full(table, config)
    raise_for_errors(result)
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from mappergen.errors import (
    ConfigurationError,
    DuplicateIdentifierError,
    EmptyColumnListError,
    EmptyInsertColumnsError,
    GeneratorError,
    ReservedNameCollisionError,
    SchemaError,
    UnknownColumnError,
)
from mappergen.fragments import WIDE_VALUE_THRESHOLD
from mappergen.models import GeneratorConfig, Table, TestTemplate
from mappergen.naming import SCALA_KEYWORDS, ColumnMapper, ColumnMapping

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight finding descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationError`` findings."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> List[str]:
        return [item.code for item in self._items]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {
                "error": "✗",
                "warning": "⚠",
                "info": "ℹ",
            }.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Error code → exception mapping
# ---------------------------------------------------------------------------

_ERROR_TYPES: Dict[str, Type[GeneratorError]] = {
    "EMPTY_COLUMN_LIST": EmptyColumnListError,
    "EMPTY_INSERT_COLUMNS": EmptyInsertColumnsError,
    "UNKNOWN_PRIMARY_KEY_COLUMN": UnknownColumnError,
    "RESERVED_NAME_COLLISION": ReservedNameCollisionError,
    "DUPLICATE_COLUMN_NAME": DuplicateIdentifierError,
    "DUPLICATE_PRIMARY_KEY_COLUMN": DuplicateIdentifierError,
    "DUPLICATE_IDENTIFIER": DuplicateIdentifierError,
    "INVALID_CLASS_NAME": SchemaError,
    "SAME_SOURCE_AND_TEST_DIR": ConfigurationError,
    "UNENCODABLE_NAME": ConfigurationError,
}

_CLASS_NAME_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_columns(table: Table) -> ValidationResult:
    """Column list present and wire names unique."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"table": table.name}

    if not table.columns:
        result.add_error(
            "EMPTY_COLUMN_LIST",
            f"Table '{table.name}' has no columns; nothing can be generated.",
            ctx,
        )
        return result

    counts: Counter = Counter(c.name for c in table.columns)
    for name, count in counts.items():
        if count > 1:
            result.add_error(
                "DUPLICATE_COLUMN_NAME",
                f"Column '{name}' is declared {count} times.",
                {**ctx, "column": name},
            )

    for col in table.columns:
        if col.unrecognised_type is not None:
            result.add_warning(
                "UNKNOWN_COLUMN_TYPE",
                f"Column '{col.name}' has unrecognised type '{col.unrecognised_type}'; "
                "it is generated as 'Any'.",
                {**ctx, "column": col.name, "type": col.unrecognised_type},
            )
    return result


def validate_primary_keys(table: Table) -> ValidationResult:
    """Explicit key names resolve; warn on the all-columns fallback."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"table": table.name}

    if table.primary_key_names is not None:
        for key_name in table.primary_key_names:
            if table.column(key_name) is None:
                result.add_error(
                    "UNKNOWN_PRIMARY_KEY_COLUMN",
                    f"Primary key column '{key_name}' does not exist.",
                    {**ctx, "column": key_name},
                )
        key_counts: Counter = Counter(table.primary_key_names)
        for key_name, count in key_counts.items():
            if count > 1:
                result.add_error(
                    "DUPLICATE_PRIMARY_KEY_COLUMN",
                    f"Primary key column '{key_name}' is listed {count} times.",
                    {**ctx, "column": key_name},
                )

    if table.columns and not table.primary_keys:
        result.add_warning(
            "NO_PRIMARY_KEY",
            f"Table '{table.name}' declares no primary key; "
            f"all {len(table.columns)} columns are used to identify a row.",
            ctx,
        )
    return result


def validate_auto_increment(table: Table) -> ValidationResult:
    """Auto-increment is honoured only for exactly one column."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"table": table.name}
    auto = table.auto_increment_columns

    if len(auto) > 1:
        result.add_warning(
            "MULTIPLE_AUTO_INCREMENT",
            f"{len(auto)} auto-increment columns "
            f"({', '.join(c.name for c in auto)}); generated keys are ignored.",
            ctx,
        )

    key_names = {c.name for c in table.primary_keys}
    for col in auto:
        if col.name not in key_names:
            result.add_warning(
                "AUTO_INCREMENT_NOT_PRIMARY_KEY",
                f"Auto-increment column '{col.name}' is not part of the primary key.",
                {**ctx, "column": col.name},
            )

    if table.columns and not table.insert_columns:
        result.add_error(
            "EMPTY_INSERT_COLUMNS",
            f"Table '{table.name}' has only its generated key column; "
            "'create' would insert no columns.",
            ctx,
        )
    return result


def validate_identifiers(table: Table, config: GeneratorConfig) -> ValidationResult:
    """Generated identifiers are valid, unique and not reserved."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"table": table.name}
    mapper: ColumnMapper = ColumnMapper.for_table(table, config)

    if not _CLASS_NAME_RE.match(mapper.class_name) or mapper.class_name in SCALA_KEYWORDS:
        result.add_error(
            "INVALID_CLASS_NAME",
            f"Class name '{mapper.class_name}' derived for table '{table.name}' "
            "is not a usable Scala identifier; set 'target_class_name'.",
            ctx,
        )

    seen: Dict[str, str] = {}
    for col in table.columns:
        mapping: ColumnMapping = mapper.map_column(col)
        col_ctx: Dict[str, Any] = {**ctx, "column": col.name}

        clash: Optional[str] = mapper.find_collision(mapping)
        if clash is not None:
            result.add_error(
                "RESERVED_NAME_COLLISION",
                f"Column '{col.name}' maps to identifier '{mapping.identifier}', "
                f"which collides with the generated symbol '{clash}'.",
                col_ctx,
            )

        previous: Optional[str] = seen.get(mapping.bare_identifier)
        if previous is not None and previous != col.name:
            result.add_error(
                "DUPLICATE_IDENTIFIER",
                f"Columns '{previous}' and '{col.name}' both map to "
                f"identifier '{mapping.identifier}'.",
                col_ctx,
            )
        seen.setdefault(mapping.bare_identifier, col.name)

        if mapping.identifier.startswith("`"):
            result.add_info(
                "QUOTED_IDENTIFIER",
                f"Column '{col.name}' is emitted as {mapping.identifier}.",
                col_ctx,
            )
    return result


def validate_encoding(table: Table, config: GeneratorConfig) -> ValidationResult:
    """Every name copied into the generated text is representable in ``config.encoding``."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"table": table.name, "field": "encoding"}
    names: List[Tuple[str, str]] = [
        ("package", config.package_name),
        ("schema", table.schema_name or ""),
        ("table", table.name),
        ("class", config.target_class_name or ""),
    ]
    names.extend(("column", col.name) for col in table.columns)

    for kind, name in names:
        try:
            name.encode(config.encoding)
        except UnicodeEncodeError:
            location: Dict[str, Any] = {**ctx, "column": name} if kind == "column" else ctx
            result.add_error(
                "UNENCODABLE_NAME",
                f"{kind.capitalize()} name '{name}' cannot be written as {config.encoding}.",
                location,
            )
    return result


def validate_table_shape(table: Table, config: GeneratorConfig) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    if len(table.columns) > WIDE_VALUE_THRESHOLD and not config.case_class_only:
        result.add_info(
            "WIDE_VALUE_TYPE",
            f"Table '{table.name}' has {len(table.columns)} columns; "
            "a plain class with an explicit copy method is generated.",
            {"table": table.name},
        )
    return result


def validate_generator_config(config: GeneratorConfig) -> ValidationResult:
    """Cross-field configuration checks."""
    result: ValidationResult = ValidationResult()

    if config.src_dir.rstrip("/") == config.test_dir.rstrip("/"):
        result.add_error(
            "SAME_SOURCE_AND_TEST_DIR",
            f"src_dir and test_dir are both '{config.src_dir}'; "
            "model and spec files would be mixed.",
            {"field": "test_dir"},
        )

    if config.test_template is TestTemplate.NONE:
        result.add_info(
            "NO_TEST_TEMPLATE",
            "test_template is 'none'; no test specs are generated.",
            {"field": "test_template"},
        )
    return result


# ---------------------------------------------------------------------------
# Aggregate validators
# ---------------------------------------------------------------------------


def validate_table(table: Table, config: GeneratorConfig) -> ValidationResult:
    """Run all table-level validators.  Returns a merged ``ValidationResult``."""
    result: ValidationResult = validate_columns(table)
    if not table.columns:
        return result

    checks: List[Callable[[], ValidationResult]] = [
        lambda: validate_primary_keys(table),
        lambda: validate_auto_increment(table),
        lambda: validate_identifiers(table, config),
        lambda: validate_table_shape(table, config),
        lambda: validate_encoding(table, config),
    ]
    for check in checks:
        result.merge(check())

    logger.debug("Table '%s' validated: %s", table.name, result.summary())
    return result


def validate_config(config: GeneratorConfig) -> ValidationResult:
    result: ValidationResult = validate_generator_config(config)
    logger.debug("Config validated: %s", result.summary())
    return result


def validate_full(table: Table, config: GeneratorConfig) -> ValidationResult:
    """
    **Master validation entry point** for one table.

    Runs the configuration checks, then every table check.
    """
    result: ValidationResult = ValidationResult()
    result.merge(validate_config(config))
    result.merge(validate_table(table, config))

    if result.has_errors:
        logger.info(
            "Validation of table '%s' FAILED: %s", table.name, result.summary()
        )
    return result


def raise_for_errors(result: ValidationResult) -> None:
    """Raise the typed exception for the first error finding, if any."""
    errors: List[ValidationError] = result.errors
    if not errors:
        return
    first: ValidationError = errors[0]
    error_cls: Type[GeneratorError] = _ERROR_TYPES.get(first.code, SchemaError)
    message: str = first.message
    if len(errors) > 1:
        message = f"{message} (+{len(errors) - 1} more error(s))"
    raise error_cls(
        message,
        table=first.context.get("table"),
        column=first.context.get("column"),
        field=first.context.get("field"),
    )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_columns",
    "validate_primary_keys",
    "validate_auto_increment",
    "validate_identifiers",
    "validate_table_shape",
    "validate_encoding",
    "validate_generator_config",
    "validate_table",
    "validate_config",
    "validate_full",
    "raise_for_errors",
]

logger.debug("mappergen.validators loaded — %d public symbols.", len(__all__))
