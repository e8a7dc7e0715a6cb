"""
tests/conftest.py
Shared fixtures for the mappergen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, List, Optional

import pytest
import yaml

from mappergen.models import Column, ColumnType, GeneratorConfig, SqlTemplate, Table


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_table(
    name: str,
    columns: List[Column],
    *,
    schema_name: Optional[str] = None,
    primary_key_names: Optional[List[str]] = None,
) -> Table:
    return Table(
        schema_name=schema_name,
        name=name,
        columns=tuple(columns),
        primary_key_names=tuple(primary_key_names) if primary_key_names else None,
    )


def wide_table(column_count: int) -> Table:
    """Table ``wide`` with an ``id`` key and ``column_count - 1`` varchar columns."""
    columns: List[Column] = [
        Column(name="id", data_type=ColumnType.BIGINT, nullable=False, primary_key=True)
    ]
    columns.extend(
        Column(name=f"c{i}", data_type=ColumnType.VARCHAR, nullable=True)
        for i in range(1, column_count)
    )
    return make_table("wide", columns)


# ---------------------------------------------------------------------------
# Raw schema data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_schema_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session and return as dict."""
    assert SCHEMA_EXAMPLE_PATH.exists(), (
        f"Reference schema not found at {SCHEMA_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(SCHEMA_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def schema_dict(raw_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_schema_dict)


@pytest.fixture()
def schema_yaml_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the schema dict to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(schema_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Table fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def member_table() -> Table:
    """``member(id bigint PK AI not null, name varchar not null, birthday date)``."""
    return make_table(
        "member",
        [
            Column(
                name="id",
                data_type=ColumnType.BIGINT,
                nullable=False,
                primary_key=True,
                auto_increment=True,
            ),
            Column(name="name", data_type=ColumnType.VARCHAR, nullable=False),
            Column(name="birthday", data_type=ColumnType.DATE, nullable=True),
        ],
    )


@pytest.fixture()
def composite_key_table() -> Table:
    """Composite key declared in (tag, member_id) order, no auto-increment."""
    return make_table(
        "member_group_tag",
        [
            Column(name="member_id", data_type=ColumnType.BIGINT, nullable=False),
            Column(name="tag", data_type=ColumnType.VARCHAR, nullable=False),
            Column(name="created_at", data_type=ColumnType.TIMESTAMP, nullable=False),
        ],
        primary_key_names=["tag", "member_id"],
    )


@pytest.fixture()
def keyless_table() -> Table:
    return make_table(
        "event_log",
        [
            Column(name="kind", data_type=ColumnType.VARCHAR, nullable=False),
            Column(name="payload", data_type=ColumnType.BLOB, nullable=True),
            Column(name="logged_at", data_type=ColumnType.TIMESTAMP, nullable=False),
        ],
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def dsl_config() -> GeneratorConfig:
    return GeneratorConfig()


@pytest.fixture()
def interp_config() -> GeneratorConfig:
    return GeneratorConfig(sql_style=SqlTemplate.INTERPOLATION)


# ---------------------------------------------------------------------------
# Output directory fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Return a fresh, empty base directory for generated sources."""
    out = tmp_path / "project"
    out.mkdir()
    return out
