# File: mappergen/naming.py
"""
Mapper Codegen - Naming & Type Mapper
=======================================
Turns wire-level table/column facts into Scala identifiers and types.

``ColumnMapper.map_column`` is a pure, total function of a ``Column`` (plus the
fixed class name and configuration it was built with): every column maps to a
``ColumnMapping``, including columns whose JDBC type has no dedicated Scala
type (they map to ``Any``).  Detecting identifiers that clash with symbols
the generated code defines itself is left to ``mappergen.validators``, which
uses :attr:`ColumnMapper.reserved_names`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from mappergen.models import Column, ColumnType, GeneratorConfig, Table
from mappergen.utils import to_camel_case, to_pascal_case, upper_initials

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.naming")

# ---------------------------------------------------------------------------
# Scala vocabulary
# ---------------------------------------------------------------------------

SCALA_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "abstract", "case", "catch", "class", "def", "do", "else",
        "extends", "false", "final", "finally", "for", "forSome", "if",
        "implicit", "import", "lazy", "macro", "match", "new", "null",
        "object", "override", "package", "private", "protected", "return",
        "sealed", "super", "this", "throw", "trait", "try", "true", "type",
        "val", "var", "while", "with", "yield",
    }
)

_SCALA_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Symbols every generated companion object defines or binds.
_FIXED_RESERVED: FrozenSet[str] = frozenset({"column", "entity", "session"})

# Raw Scala type names
BYTE = "Byte"
SHORT = "Short"
INT = "Int"
LONG = "Long"
FLOAT = "Float"
DOUBLE = "Double"
BIG_DECIMAL = "BigDecimal"
STRING = "String"
BOOLEAN = "Boolean"
BYTES = "Array[Byte]"
LOCAL_DATE = "LocalDate"
LOCAL_TIME = "LocalTime"
BLOB = "Blob"
CLOB = "Clob"
REF = "Ref"
STRUCT = "Struct"
ANY = "Any"

_RAW_TYPES: Dict[ColumnType, str] = {
    ColumnType.TINYINT: BYTE,
    ColumnType.SMALLINT: SHORT,
    ColumnType.INTEGER: INT,
    ColumnType.BIGINT: LONG,
    ColumnType.REAL: FLOAT,
    ColumnType.FLOAT: DOUBLE,
    ColumnType.DOUBLE: DOUBLE,
    ColumnType.DECIMAL: BIG_DECIMAL,
    ColumnType.NUMERIC: BIG_DECIMAL,
    ColumnType.CHAR: STRING,
    ColumnType.VARCHAR: STRING,
    ColumnType.LONGVARCHAR: STRING,
    ColumnType.NCHAR: STRING,
    ColumnType.NVARCHAR: STRING,
    ColumnType.LONGNVARCHAR: STRING,
    ColumnType.CLOB: CLOB,
    ColumnType.NCLOB: CLOB,
    ColumnType.BLOB: BLOB,
    ColumnType.REF: REF,
    ColumnType.STRUCT: STRUCT,
    ColumnType.BOOLEAN: BOOLEAN,
    ColumnType.BIT: BOOLEAN,
    ColumnType.BINARY: BYTES,
    ColumnType.VARBINARY: BYTES,
    ColumnType.LONGVARBINARY: BYTES,
    ColumnType.DATE: LOCAL_DATE,
    ColumnType.TIME: LOCAL_TIME,
}

OPAQUE_SQL_TYPES: FrozenSet[str] = frozenset({BLOB, CLOB, REF, STRUCT})

_LITERALS: Dict[str, str] = {
    ANY: "null",
    BLOB: "null",
    CLOB: "null",
    REF: "null",
    STRUCT: "null",
    BYTES: "Array[Byte]()",
    LONG: "1L",
    BOOLEAN: "false",
    STRING: '"MyString"',
    BYTE: "123",
    INT: "123",
    SHORT: "123",
    FLOAT: "0.1F",
    DOUBLE: "0.1D",
    BIG_DECIMAL: 'new java.math.BigDecimal("1")',
}

# Narrowing of the wide generated key to the key column's declared type.
_GENERATED_KEY_COERCIONS: Dict[str, str] = {
    BYTE: "generatedKey.toByte",
    INT: "generatedKey.toInt",
    SHORT: "generatedKey.toShort",
    FLOAT: "generatedKey.toFloat",
    DOUBLE: "generatedKey.toDouble",
    STRING: "generatedKey.toString",
    BIG_DECIMAL: "BigDecimal.valueOf(generatedKey)",
}


# ---------------------------------------------------------------------------
# Mapping result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Scala-side view of one column."""

    wire_name: str
    identifier: str
    raw_type: str
    type_expression: str
    nullable: bool
    is_temporal: bool
    is_opaque_sql_type: bool
    is_any: bool
    default_value: str

    @property
    def is_not_null(self) -> bool:
        return not self.nullable

    def parameter(self, with_default: bool = True) -> str:
        """``name: Type`` with `` = None`` for nullable columns."""
        default: str = " = None" if (with_default and self.nullable) else ""
        return f"{self.identifier}: {self.type_expression}{default}"

    @property
    def bare_identifier(self) -> str:
        return self.identifier.strip("`")


# ---------------------------------------------------------------------------
# Name derivation
# ---------------------------------------------------------------------------


def quote_identifier(name: str) -> str:
    """Back-quote *name* when it is a keyword or not a plain identifier."""
    if name in SCALA_KEYWORDS or not _SCALA_IDENTIFIER_RE.match(name):
        return f"`{name}`"
    return name


def column_identifier(wire_name: str) -> str:
    camel: str = to_camel_case(wire_name)
    return quote_identifier(camel or wire_name)


def class_name_for(table: Table, config: GeneratorConfig) -> str:
    """Configured override, else the PascalCase table name."""
    if config.target_class_name:
        return config.target_class_name
    return to_pascal_case(table.name) or table.name


def syntax_name_for(class_name: str) -> str:
    """
    Alias used for the table in generated queries.

    ``Member`` -> ``m``, ``OrderItem`` -> ``oi``.  Falls back to the
    camelCase class name when the initials spell a Scala keyword.
    """
    initials: str = upper_initials(class_name).lower()
    if not initials:
        return class_name[:1].lower()
    if initials in SCALA_KEYWORDS:
        return to_camel_case(class_name)
    return initials


def generated_key_coercion(mapping: ColumnMapping) -> str:
    """Expression assigning ``generatedKey`` to the auto-increment column."""
    expr: str = _GENERATED_KEY_COERCIONS.get(mapping.raw_type, "generatedKey")
    if mapping.nullable:
        return f"Some({expr})"
    return expr


# ---------------------------------------------------------------------------
# ColumnMapper
# ---------------------------------------------------------------------------


class ColumnMapper:
    """
    Maps columns of one table to Scala identifiers, types and literals.

    Stateless after construction; safe to share across threads.
    """

    def __init__(
        self,
        class_name: str,
        syntax_name: str,
        config: GeneratorConfig,
        *,
        has_generated_key: bool = False,
    ) -> None:
        self._class_name: str = class_name
        self._syntax_name: str = syntax_name
        self._config: GeneratorConfig = config
        self._has_generated_key: bool = has_generated_key
        self._time_classes: FrozenSet[str] = frozenset(
            {LOCAL_DATE, LOCAL_TIME, config.date_time_class.simple_name}
        )

    @classmethod
    def for_table(cls, table: Table, config: GeneratorConfig) -> "ColumnMapper":
        class_name: str = class_name_for(table, config)
        return cls(
            class_name,
            syntax_name_for(class_name),
            config,
            has_generated_key=table.generated_key_column is not None,
        )

    @property
    def class_name(self) -> str:
        return self._class_name

    @property
    def syntax_name(self) -> str:
        return self._syntax_name

    @property
    def reserved_names(self) -> FrozenSet[str]:
        names = set(_FIXED_RESERVED)
        names.add(self._class_name)
        names.add(self._syntax_name)
        if self._config.is_async:
            names.add("cxt")
        if self._has_generated_key:
            names.add("generatedKey")
        return frozenset(names)

    def raw_type(self, column: Column) -> str:
        if column.data_type is ColumnType.TIMESTAMP:
            return self._config.date_time_class.simple_name
        return _RAW_TYPES.get(column.data_type, ANY)

    def default_value(self, raw_type: str) -> str:
        if raw_type in self._time_classes:
            return f"{raw_type}.now"
        return _LITERALS.get(raw_type, "null")

    def map_column(self, column: Column) -> ColumnMapping:
        raw: str = self.raw_type(column)
        return ColumnMapping(
            wire_name=column.name,
            identifier=column_identifier(column.name),
            raw_type=raw,
            type_expression=f"Option[{raw}]" if column.nullable else raw,
            nullable=column.nullable,
            is_temporal=raw in self._time_classes,
            is_opaque_sql_type=raw in OPAQUE_SQL_TYPES,
            is_any=raw == ANY,
            default_value=self.default_value(raw),
        )

    def map_table(self, table: Table) -> List[ColumnMapping]:
        """Mappings for every column, in declaration order."""
        return [self.map_column(c) for c in table.columns]

    def lookup(self, table: Table) -> Dict[str, ColumnMapping]:
        """Wire name → mapping."""
        return {c.name: self.map_column(c) for c in table.columns}

    def find_collision(self, mapping: ColumnMapping) -> Optional[str]:
        """The reserved symbol *mapping* shadows, if any."""
        bare: str = mapping.bare_identifier
        return bare if bare in self.reserved_names else None


__all__: List[str] = [
    "SCALA_KEYWORDS",
    "OPAQUE_SQL_TYPES",
    "ColumnMapping",
    "ColumnMapper",
    "quote_identifier",
    "column_identifier",
    "class_name_for",
    "syntax_name_for",
    "generated_key_coercion",
]

logger.debug("mappergen.naming loaded — %d public symbols.", len(__all__))
