# File: mappergen/introspection.py
"""
Mapper Codegen - Database Introspection
=========================================
Reads table facts from a live database through SQLAlchemy's runtime
inspection API and turns them into ``Table`` models:

    * columns in declaration order with nullability,
    * the primary key in constraint order,
    * the auto-increment flag where the dialect reports one,
    * SQLAlchemy type instances mapped onto ``ColumnType``.

Every function accepts an ``Engine`` or a database URL.  An engine built
from a URL is disposed before returning.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Type, Union

from sqlalchemy import create_engine, inspect
from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from mappergen.errors import SchemaError
from mappergen.models import Column, ColumnType, Table

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.introspection")

EngineOrUrl = Union[Engine, str]

# Checked in order; subclasses precede their bases.
_TYPE_MAP: Tuple[Tuple[Type[Any], ColumnType], ...] = (
    (sqltypes.Boolean, ColumnType.BOOLEAN),
    (sqltypes.SmallInteger, ColumnType.SMALLINT),
    (sqltypes.BigInteger, ColumnType.BIGINT),
    (sqltypes.Integer, ColumnType.INTEGER),
    (sqltypes.Double, ColumnType.DOUBLE),
    (sqltypes.REAL, ColumnType.REAL),
    (sqltypes.Float, ColumnType.FLOAT),
    (sqltypes.DECIMAL, ColumnType.DECIMAL),
    (sqltypes.Numeric, ColumnType.NUMERIC),
    (sqltypes.DateTime, ColumnType.TIMESTAMP),
    (sqltypes.Date, ColumnType.DATE),
    (sqltypes.Time, ColumnType.TIME),
    (sqltypes.CLOB, ColumnType.CLOB),
    (sqltypes.UnicodeText, ColumnType.LONGNVARCHAR),
    (sqltypes.Text, ColumnType.LONGVARCHAR),
    (sqltypes.NCHAR, ColumnType.NCHAR),
    (sqltypes.Unicode, ColumnType.NVARCHAR),
    (sqltypes.CHAR, ColumnType.CHAR),
    (sqltypes.String, ColumnType.VARCHAR),
    (sqltypes.BLOB, ColumnType.BLOB),
    (sqltypes.VARBINARY, ColumnType.VARBINARY),
    (sqltypes.BINARY, ColumnType.BINARY),
    (sqltypes.LargeBinary, ColumnType.LONGVARBINARY),
    (sqltypes.ARRAY, ColumnType.ARRAY),
)


def column_type_for(sa_type: Any) -> ColumnType:
    """``ColumnType`` for a reflected SQLAlchemy type instance."""
    for sa_cls, column_type in _TYPE_MAP:
        if isinstance(sa_type, sa_cls):
            return column_type
    logger.debug("No column type for %r; using 'other'.", sa_type)
    return ColumnType.OTHER


@contextmanager
def _engine(engine_or_url: EngineOrUrl) -> Iterator[Engine]:
    if isinstance(engine_or_url, Engine):
        yield engine_or_url
        return
    engine: Engine = create_engine(engine_or_url, pool_pre_ping=True)
    try:
        yield engine
    finally:
        engine.dispose()


def list_tables(engine_or_url: EngineOrUrl, schema_name: Optional[str] = None) -> List[str]:
    """Names of the tables in *schema_name* (default schema when None)."""
    with _engine(engine_or_url) as engine:
        try:
            names: List[str] = inspect(engine).get_table_names(schema=schema_name)
        except SQLAlchemyError as exc:
            raise SchemaError(f"Cannot list tables: {exc}") from exc
    logger.info("Found %d table(s) in schema %s.", len(names), schema_name or "(default)")
    return names


def introspect_table(
    engine_or_url: EngineOrUrl,
    table_name: str,
    schema_name: Optional[str] = None,
) -> Table:
    """Reflect one table into a ``Table``. Unknown tables raise ``SchemaError``."""
    with _engine(engine_or_url) as engine:
        insp = inspect(engine)
        try:
            if not insp.has_table(table_name, schema=schema_name):
                raise SchemaError(
                    f"Table '{table_name}' not found in schema "
                    f"{schema_name or '(default)'}.",
                    table=table_name,
                )
            raw_columns: List[Dict[str, Any]] = insp.get_columns(table_name, schema=schema_name)
            pk: Dict[str, Any] = insp.get_pk_constraint(table_name, schema=schema_name)
        except NoSuchTableError as exc:
            raise SchemaError(f"Table '{table_name}' not found.", table=table_name) from exc
        except SQLAlchemyError as exc:
            raise SchemaError(f"Cannot reflect table: {exc}", table=table_name) from exc

    key_names: List[str] = list(pk.get("constrained_columns") or [])
    columns: List[Column] = [
        Column(
            name=col["name"],
            data_type=column_type_for(col["type"]),
            nullable=bool(col.get("nullable", True)),
            primary_key=col["name"] in key_names,
            auto_increment=col.get("autoincrement") is True,
        )
        for col in raw_columns
    ]

    table: Table = Table(
        schema_name=schema_name,
        name=table_name,
        columns=tuple(columns),
        primary_key_names=tuple(key_names) if key_names else None,
    )
    logger.info(
        "Introspected table '%s': %d column(s), primary key %s.",
        table.qualified_name,
        len(columns),
        key_names or "(none)",
    )
    return table


def introspect_tables(
    engine_or_url: EngineOrUrl,
    table_names: Optional[Sequence[str]] = None,
    schema_name: Optional[str] = None,
) -> List[Table]:
    """Reflect *table_names* (every table when None) over one engine."""
    with _engine(engine_or_url) as engine:
        names: Sequence[str] = (
            list_tables(engine, schema_name) if table_names is None else table_names
        )
        return [introspect_table(engine, name, schema_name) for name in names]


__all__: List[str] = [
    "column_type_for",
    "list_tables",
    "introspect_table",
    "introspect_tables",
]

logger.debug("mappergen.introspection loaded — %d public symbols.", len(__all__))
