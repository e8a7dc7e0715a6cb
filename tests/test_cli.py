"""
tests/test_cli.py
Tests for mappergen.cli (argument handling, modes and exit codes).

cli_main always ends with sys.exit, so every call is wrapped in
pytest.raises(SystemExit).
"""

from __future__ import annotations

import logging
import pathlib
from typing import Iterator, List

import pytest
import yaml
from sqlalchemy import create_engine, text

from mappergen import __version__
from mappergen.cli import (
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    cli_main,
)


@pytest.fixture(autouse=True)
def restore_mappergen_logger() -> Iterator[None]:
    """cli_main reconfigures the package logger; put it back afterwards."""
    pkg_logger = logging.getLogger("mappergen")
    handlers = list(pkg_logger.handlers)
    level = pkg_logger.level
    propagate = pkg_logger.propagate
    yield
    pkg_logger.handlers[:] = handlers
    pkg_logger.setLevel(level)
    pkg_logger.propagate = propagate


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli_main(argv)
    return int(exc_info.value.code or 0)


# ===========================================================================
# Argument handling
# ===========================================================================


class TestArguments:
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(["--version"]) == 0
        assert f"Mapper Codegen v{__version__}" in capsys.readouterr().out

    def test_source_is_required(self) -> None:
        assert _run([]) == 2

    def test_schema_and_url_are_exclusive(self, schema_yaml_path: pathlib.Path) -> None:
        assert _run(["-s", str(schema_yaml_path), "--url", "sqlite://"]) == 2

    def test_missing_schema_file(self, tmp_path: pathlib.Path) -> None:
        assert _run(["-s", str(tmp_path / "missing.yaml"), "-q"]) == EXIT_INPUT_ERROR

    def test_unknown_table(self, schema_yaml_path: pathlib.Path) -> None:
        assert _run(["-s", str(schema_yaml_path), "-t", "nope", "-q"]) == EXIT_INPUT_ERROR

    def test_class_name_needs_single_table(self, schema_yaml_path: pathlib.Path) -> None:
        code = _run(["-s", str(schema_yaml_path), "--class-name", "Person", "-q"])
        assert code == EXIT_INPUT_ERROR

    def test_url_needs_table_selection(self) -> None:
        assert _run(["--url", "sqlite://", "-q"]) == EXIT_INPUT_ERROR


# ===========================================================================
# Echo mode
# ===========================================================================


class TestEcho:
    def test_echo_prints_model_and_spec(
        self,
        schema_yaml_path: pathlib.Path,
        output_dir: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = _run(
            ["-s", str(schema_yaml_path), "-t", "member", "--echo", "-o", str(output_dir), "-q"]
        )
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert out.startswith("package models\n")
        assert "case class Member(" in out
        assert "class MemberSpec extends fixture.FlatSpec" in out
        assert list(output_dir.iterdir()) == []

    def test_echo_with_overrides(
        self, schema_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = _run(
            [
                "-s", str(schema_yaml_path),
                "-t", "member",
                "--class-name", "Person",
                "--async",
                "--echo",
                "-q",
            ]
        )
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert "case class Person(" in out
        assert "import scalikejdbc.async._" in out

    def test_config_file_replaces_schema_config(
        self,
        schema_yaml_path: pathlib.Path,
        tmp_path: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            yaml.safe_dump({"packageName": "app.db", "testTemplate": "none"}),
            encoding="utf-8",
        )
        code = _run(
            ["-s", str(schema_yaml_path), "-t", "member", "-c", str(config_path), "--echo", "-q"]
        )
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert out.startswith("package app.db\n")
        assert "MemberSpec" not in out


# ===========================================================================
# Validate-only mode
# ===========================================================================


class TestValidateOnly:
    def test_valid_schema(
        self, schema_yaml_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(["-s", str(schema_yaml_path), "--validate-only", "-q"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Table Validation Report" in out
        assert "member: valid" in out

    def test_invalid_table(
        self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(
            yaml.safe_dump(
                {"tables": [{"name": "broken", "columns": [{"name": "entity", "type": "int"}]}]}
            ),
            encoding="utf-8",
        )
        assert _run(["-s", str(path), "--validate-only", "-q"]) == EXIT_VALIDATION_ERROR
        assert "RESERVED_NAME_COLLISION" in capsys.readouterr().out


# ===========================================================================
# File generation
# ===========================================================================


class TestGeneration:
    def test_writes_files(
        self, schema_yaml_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        code = _run(["-s", str(schema_yaml_path), "-o", str(output_dir), "-q"])
        assert code == EXIT_SUCCESS
        assert (output_dir / "src/main/scala/models/Member.scala").is_file()
        assert (output_dir / "src/test/scala/models/MemberGroupTagSpec.scala").is_file()

    def test_summary_printed_unless_quiet(
        self,
        schema_yaml_path: pathlib.Path,
        output_dir: pathlib.Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _run(["-s", str(schema_yaml_path), "-t", "member", "-o", str(output_dir)])
        assert "Generation Report" in capsys.readouterr().out

    def test_validation_failure_exit_code(
        self, tmp_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        path = tmp_path / "bad.json"
        path.write_text('{"tables": [{"name": "empty", "columns": []}]}', encoding="utf-8")
        assert _run(["-s", str(path), "-o", str(output_dir), "-q"]) == EXIT_VALIDATION_ERROR

    def test_from_database(self, tmp_path: pathlib.Path, output_dir: pathlib.Path) -> None:
        url = f"sqlite:///{tmp_path / 'app.db'}"
        engine = create_engine(url)
        with engine.begin() as conn:
            conn.execute(
                text("CREATE TABLE company (id INTEGER NOT NULL PRIMARY KEY, name VARCHAR(64))")
            )
        engine.dispose()

        code = _run(["--url", url, "--all", "-o", str(output_dir), "-q"])
        assert code == EXIT_SUCCESS
        model = output_dir / "src/main/scala/models/Company.scala"
        assert "case class Company(" in model.read_text(encoding="utf-8")
