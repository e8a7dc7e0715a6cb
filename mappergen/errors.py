# File: mappergen/errors.py
"""
Mapper Codegen - Error Taxonomy
=================================
Typed exceptions raised for malformed input before any text is generated.

Every error carries the offending table, column and configuration field (when
known) so callers can report *where* the input went wrong instead of finding
out when the generated Scala fails to compile.

Hierarchy::

    GeneratorError
    ├── ConfigurationError
    │   └── UnsupportedConfigurationError
    └── SchemaError
        ├── EmptyColumnListError
        ├── EmptyInsertColumnsError
        ├── UnknownColumnError
        ├── ReservedNameCollisionError
        └── DuplicateIdentifierError
"""

from __future__ import annotations

import logging
from typing import List, Optional

logger: logging.Logger = logging.getLogger("mappergen.errors")


class GeneratorError(Exception):
    """Base class for every error raised by mappergen."""

    def __init__(
        self,
        message: str,
        *,
        table: Optional[str] = None,
        column: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.table: Optional[str] = table
        self.column: Optional[str] = column
        self.field: Optional[str] = field

    @property
    def location(self) -> str:
        """Human-readable pointer at the offending input, e.g. ``member.id``."""
        parts: List[str] = []
        if self.table:
            parts.append(f"table '{self.table}'")
        if self.column:
            parts.append(f"column '{self.column}'")
        if self.field:
            parts.append(f"config field '{self.field}'")
        return ", ".join(parts)

    def __str__(self) -> str:
        where: str = self.location
        return f"{self.message} ({where})" if where else self.message


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class ConfigurationError(GeneratorError):
    """A configuration value failed validation."""


class UnsupportedConfigurationError(ConfigurationError):
    """A configuration value is well-formed but names an unknown variant."""


# ---------------------------------------------------------------------------
# Schema errors
# ---------------------------------------------------------------------------


class SchemaError(GeneratorError):
    """The table description cannot be turned into valid generated code."""


class EmptyColumnListError(SchemaError):
    """The table declares no columns."""


class EmptyInsertColumnsError(SchemaError):
    """Excluding the generated key leaves nothing to insert."""


class UnknownColumnError(SchemaError):
    """A key declaration references a column the table does not have."""


class ReservedNameCollisionError(SchemaError):
    """A column identifier shadows a symbol the generated code defines itself."""


class DuplicateIdentifierError(SchemaError):
    """Two columns map to the same identifier in generated code."""


__all__: List[str] = [
    "GeneratorError",
    "ConfigurationError",
    "UnsupportedConfigurationError",
    "SchemaError",
    "EmptyColumnListError",
    "EmptyInsertColumnsError",
    "UnknownColumnError",
    "ReservedNameCollisionError",
    "DuplicateIdentifierError",
]

logger.debug("mappergen.errors loaded — %d public symbols.", len(__all__))
