# File: mappergen/models.py
"""
Mapper Codegen - Core Data Models
===================================
Pydantic V2 models for the three values that flow through the generator:

    Table / Column      — the schema facts supplied by an introspector
    GeneratorConfig     — the closed set of generation options
    GeneratedArtifact   — the generated text plus its target paths

All models are frozen: configuration and schema are read-only input to every
generation call, and an artifact is never mutated once returned.

Enum-valued options are closed ``str`` enums, so the template selector can
handle every variant explicitly.  Option values are matched case-insensitively
against the enum values when loaded from YAML/JSON.
"""

from __future__ import annotations

import codecs
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    computed_field,
    field_validator,
    model_validator,
)

from mappergen.errors import ConfigurationError, UnsupportedConfigurationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.models")

# ---------------------------------------------------------------------------
# Enums — closed option sets
# ---------------------------------------------------------------------------


class ColumnType(str, Enum):
    """JDBC type names a column can carry."""

    # Numeric
    TINYINT = "tinyint"
    SMALLINT = "smallint"
    INTEGER = "integer"
    BIGINT = "bigint"
    REAL = "real"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    NUMERIC = "numeric"

    # Character
    CHAR = "char"
    VARCHAR = "varchar"
    LONGVARCHAR = "longvarchar"
    NCHAR = "nchar"
    NVARCHAR = "nvarchar"
    LONGNVARCHAR = "longnvarchar"
    CLOB = "clob"
    NCLOB = "nclob"

    # Boolean
    BOOLEAN = "boolean"
    BIT = "bit"

    # Binary
    BINARY = "binary"
    VARBINARY = "varbinary"
    LONGVARBINARY = "longvarbinary"
    BLOB = "blob"

    # Date / Time
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"

    # Structured / opaque
    REF = "ref"
    STRUCT = "struct"
    ARRAY = "array"
    JAVA_OBJECT = "java_object"
    OTHER = "other"
    NULL = "null"
    DISTINCT = "distinct"
    DATALINK = "datalink"
    SQLXML = "sqlxml"
    ROWID = "rowid"


class SqlTemplate(str, Enum):
    """How generated accessors build their SQL."""

    INTERPOLATION = "interpolation"
    QUERY_DSL = "queryDsl"


class TestTemplate(str, Enum):
    """Test framework skeleton for the generated spec file."""

    __test__ = False  # not a pytest test class

    SCALATEST_FLAT_SPEC = "ScalaTestFlatSpec"
    SPECS2_UNIT = "specs2unit"
    SPECS2_ACCEPTANCE = "specs2acceptance"
    NONE = "none"


class ReturnCollectionType(str, Enum):
    """Result shape of the multi-row accessors (findAll, findAllBy)."""

    LIST = "list"
    VECTOR = "vector"
    ARRAY = "array"
    CAN_BUILD_FROM = "canbuildfrom"


class DateTimeBinding(str, Enum):
    """Date/time library the generated code imports from."""

    JODA = "joda"
    JAVA_TIME = "java_time"


class DateTimeClass(str, Enum):
    """Class used for ``timestamp`` columns."""

    JODA_DATE_TIME = "org.joda.time.DateTime"
    ZONED_DATE_TIME = "java.time.ZonedDateTime"
    OFFSET_DATE_TIME = "java.time.OffsetDateTime"
    LOCAL_DATE_TIME = "java.time.LocalDateTime"

    @property
    def simple_name(self) -> str:
        return self.value.rsplit(".", 1)[-1]

    @property
    def binding(self) -> DateTimeBinding:
        if self is DateTimeClass.JODA_DATE_TIME:
            return DateTimeBinding.JODA
        return DateTimeBinding.JAVA_TIME


class LineBreak(str, Enum):
    """Line terminator written at the end of every generated line."""

    LF = "LF"
    CRLF = "CRLF"

    @property
    def eol(self) -> str:
        return "\r\n" if self is LineBreak.CRLF else "\n"


class ExecutionMode(str, Enum):
    """Blocking accessors or ``Future``-returning accessors."""

    SYNC = "sync"
    ASYNC = "async"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=False,
    frozen=True,
    extra="forbid",
)

_DOTTED_NAME_RE: re.Pattern[str] = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$"
)
_CLASS_NAME_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _match_enum(enum_cls: Type[Enum], value: Any) -> Any:
    """
    Resolve *value* to a member of *enum_cls* ignoring case.

    Unmatched values are returned unchanged so pydantic reports them.
    """
    if isinstance(value, enum_cls) or not isinstance(value, str):
        return value
    wanted: str = value.strip().lower()
    for member in enum_cls:
        if member.value.lower() == wanted or member.name.lower() == wanted:
            return member
    return value


# Common vendor spellings of the JDBC type names, keyed after normalisation.
_COLUMN_TYPE_ALIASES: Dict[str, ColumnType] = {
    "int": ColumnType.INTEGER,
    "int2": ColumnType.SMALLINT,
    "int4": ColumnType.INTEGER,
    "int8": ColumnType.BIGINT,
    "bool": ColumnType.BOOLEAN,
    "text": ColumnType.LONGVARCHAR,
    "datetime": ColumnType.TIMESTAMP,
    "double_precision": ColumnType.DOUBLE,
    "character_varying": ColumnType.VARCHAR,
    "character": ColumnType.CHAR,
    "bytea": ColumnType.LONGVARBINARY,
}


def _resolve_column_type(value: str) -> Optional[ColumnType]:
    """``ColumnType`` for a type name, or None when nothing matches."""
    key: str = value.strip().lower().replace(" ", "_")
    matched: Any = _match_enum(ColumnType, key)
    if isinstance(matched, ColumnType):
        return matched
    return _COLUMN_TYPE_ALIASES.get(key)


# ---------------------------------------------------------------------------
# Schema model
# ---------------------------------------------------------------------------


class Column(BaseModel):
    """One column of a table, in the table's declaration order."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Wire name used in SQL.")
    data_type: ColumnType = Field(
        ..., alias="type", description="JDBC type name."
    )
    nullable: bool = Field(default=True, description="Whether NULL is allowed.")
    primary_key: bool = Field(
        default=False, alias="primaryKey", description="Part of the primary key?"
    )
    auto_increment: bool = Field(
        default=False,
        alias="autoIncrement",
        description="Value assigned by the data store on insert.",
    )
    unrecognised_type: Optional[str] = Field(
        default=None,
        alias="unrecognisedType",
        description="Type name as given when it matched no known type.",
    )

    @model_validator(mode="before")
    @classmethod
    def _keep_unrecognised_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        raw: Any = data.get("type", data.get("data_type"))
        if isinstance(raw, str) and _resolve_column_type(raw) is None:
            return {**data, "unrecognised_type": raw}
        return data

    @field_validator("data_type", mode="before")
    @classmethod
    def _normalise_type(cls, v: Any) -> Any:
        if isinstance(v, ColumnType) or not isinstance(v, str):
            return v
        resolved: Optional[ColumnType] = _resolve_column_type(v)
        if resolved is not None:
            return resolved
        logger.debug("Unrecognised column type %r mapped to 'other'.", v)
        return ColumnType.OTHER

    @property
    def is_not_null(self) -> bool:
        return not self.nullable

    def __repr__(self) -> str:
        flags: str = "".join(
            [
                " PK" if self.primary_key else "",
                " AI" if self.auto_increment else "",
                "" if self.nullable else " NOT NULL",
            ]
        )
        return f"<Column {self.name}: {self.data_type.value}{flags}>"


class Table(BaseModel):
    """
    Schema facts for one relation.

    ``primary_key_names`` fixes the key order explicitly (composite keys);
    when omitted, columns flagged ``primary_key`` are used in declaration
    order.  Auto-increment is honoured only when exactly one column carries
    the flag.
    """

    model_config = _SHARED_CONFIG

    schema_name: Optional[str] = Field(
        default=None, alias="schema", description="Database schema, e.g. 'public'."
    )
    name: str = Field(..., min_length=1, description="Table name.")
    columns: Tuple[Column, ...] = Field(
        default_factory=tuple, description="Columns in declaration order."
    )
    primary_key_names: Optional[Tuple[str, ...]] = Field(
        default=None,
        alias="primaryKey",
        description="Explicit primary-key column order.",
    )

    @field_validator("schema_name", mode="before")
    @classmethod
    def _blank_schema_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # -- Lookups -------------------------------------------------------------

    def column(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    @computed_field  # type: ignore[misc]
    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def primary_keys(self) -> Tuple[Column, ...]:
        """Declared primary-key columns, in key order."""
        if self.primary_key_names is not None:
            found: List[Column] = []
            for key_name in self.primary_key_names:
                col: Optional[Column] = self.column(key_name)
                if col is not None:
                    found.append(col)
            return tuple(found)
        return tuple(c for c in self.columns if c.primary_key)

    @property
    def resolved_primary_keys(self) -> Tuple[Column, ...]:
        """Key columns used in lookup predicates; all columns when none are declared."""
        return self.primary_keys or self.columns

    @property
    def auto_increment_columns(self) -> Tuple[Column, ...]:
        return tuple(c for c in self.columns if c.auto_increment)

    @property
    def generated_key_column(self) -> Optional[Column]:
        """The single auto-increment column, or None when there are zero or several."""
        candidates: Tuple[Column, ...] = self.auto_increment_columns
        return candidates[0] if len(candidates) == 1 else None

    @computed_field  # type: ignore[misc]
    @property
    def has_auto_increment(self) -> bool:
        return self.generated_key_column is not None

    @property
    def insert_columns(self) -> Tuple[Column, ...]:
        """Columns supplied by ``create``: everything except the generated key."""
        key: Optional[Column] = self.generated_key_column
        if key is None:
            return self.columns
        return tuple(c for c in self.columns if c.name != key.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}" if self.schema_name else self.name

    def __repr__(self) -> str:
        return f"<Table {self.qualified_name} ({len(self.columns)} columns)>"


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Read-only generation options.

    Field names are snake_case; the camelCase spellings used by existing
    build configurations are accepted as aliases.
    """

    model_config = _SHARED_CONFIG

    package_name: str = Field(default="models", alias="packageName")
    src_dir: str = Field(default="src/main/scala", alias="srcDir")
    test_dir: str = Field(default="src/test/scala", alias="testDir")
    sql_style: SqlTemplate = Field(default=SqlTemplate.QUERY_DSL, alias="template")
    test_template: TestTemplate = Field(
        default=TestTemplate.SCALATEST_FLAT_SPEC, alias="testTemplate"
    )
    return_collection_type: ReturnCollectionType = Field(
        default=ReturnCollectionType.LIST, alias="returnCollectionType"
    )
    date_time_class: DateTimeClass = Field(
        default=DateTimeClass.JODA_DATE_TIME, alias="dateTimeClass"
    )
    auto_construct: bool = Field(default=False, alias="autoConstruct")
    default_auto_session: bool = Field(default=True, alias="defaultAutoSession")
    case_class_only: bool = Field(default=False, alias="caseClassOnly")
    line_break: LineBreak = Field(default=LineBreak.LF, alias="lineBreak")
    encoding: str = Field(default="UTF-8", min_length=1)
    execution_mode: ExecutionMode = Field(
        default=ExecutionMode.SYNC, alias="executionMode"
    )
    target_class_name: Optional[str] = Field(default=None, alias="className")

    # -- Normalisation -------------------------------------------------------

    @field_validator(
        "sql_style",
        "return_collection_type",
        "date_time_class",
        "line_break",
        "execution_mode",
        mode="before",
    )
    @classmethod
    def _case_insensitive_enum(cls, v: Any, info: ValidationInfo) -> Any:
        enum_cls: Type[Enum] = cls.model_fields[info.field_name].annotation  # type: ignore[assignment,index]
        return _match_enum(enum_cls, v)

    @field_validator("test_template", mode="before")
    @classmethod
    def _unknown_test_template_is_none(cls, v: Any) -> Any:
        if v is None:
            return TestTemplate.NONE
        matched: Any = _match_enum(TestTemplate, v)
        if isinstance(matched, TestTemplate):
            return matched
        logger.warning(
            "Unsupported value %r for config field 'test_template'; "
            "no test spec will be generated.",
            v,
        )
        return TestTemplate.NONE

    @field_validator("package_name")
    @classmethod
    def _valid_package(cls, v: str) -> str:
        if not _DOTTED_NAME_RE.match(v):
            raise ValueError(f"'{v}' is not a valid dotted package name.")
        return v

    @field_validator("target_class_name")
    @classmethod
    def _valid_class_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        if not _CLASS_NAME_RE.match(v):
            raise ValueError(f"'{v}' is not a valid class name.")
        return v

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding '{v}'.") from exc
        return v

    # -- Derived -------------------------------------------------------------

    @computed_field  # type: ignore[misc]
    @property
    def date_time_binding(self) -> DateTimeBinding:
        return self.date_time_class.binding

    @property
    def eol(self) -> str:
        return self.line_break.eol

    @property
    def is_async(self) -> bool:
        return self.execution_mode is ExecutionMode.ASYNC

    @property
    def package_path(self) -> str:
        return self.package_name.replace(".", "/")

    # -- Construction helpers ------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]] = None) -> "GeneratorConfig":
        """
        Build a config from a raw mapping, converting pydantic failures
        into :class:`ConfigurationError` naming the offending field.
        """
        try:
            return cls.model_validate(data or {})
        except ValidationError as exc:
            first: Dict[str, Any] = exc.errors()[0]
            field_name: str = ".".join(str(p) for p in first.get("loc", ())) or "?"
            error_cls: Type[ConfigurationError] = (
                UnsupportedConfigurationError
                if first.get("type") == "enum"
                else ConfigurationError
            )
            raise error_cls(
                f"Invalid configuration: {first.get('msg', exc)}",
                field=field_name,
            ) from exc

    def with_overrides(self, **overrides: Any) -> "GeneratorConfig":
        """Return a validated copy with *overrides* applied (snake_case keys)."""
        merged: Dict[str, Any] = self.model_dump(exclude={"date_time_binding"})
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return GeneratorConfig.from_mapping(merged)


# ---------------------------------------------------------------------------
# Generation output
# ---------------------------------------------------------------------------


class GeneratedArtifact(BaseModel):
    """
    Generated source for one table.

    Paths are relative, ``/``-separated, and rooted at the configured source
    and test directories.
    """

    model_config = _SHARED_CONFIG

    class_name: str
    package_name: str
    model_code: str
    model_path: str
    spec_code: Optional[str] = None
    spec_path: Optional[str] = None

    @property
    def qualified_class_name(self) -> str:
        return f"{self.package_name}.{self.class_name}"

    @property
    def has_spec(self) -> bool:
        return self.spec_code is not None

    def files(self) -> Dict[str, str]:
        """Relative path → content for every body present."""
        out: Dict[str, str] = {self.model_path: self.model_code}
        if self.spec_code is not None and self.spec_path is not None:
            out[self.spec_path] = self.spec_code
        return out


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ColumnType",
    "SqlTemplate",
    "TestTemplate",
    "ReturnCollectionType",
    "DateTimeBinding",
    "DateTimeClass",
    "LineBreak",
    "ExecutionMode",
    "Column",
    "Table",
    "GeneratorConfig",
    "GeneratedArtifact",
]

logger.debug("mappergen.models loaded — %d public symbols.", len(__all__))
