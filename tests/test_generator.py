"""
tests/test_generator.py
Integration tests for mappergen.generator (the full pipeline).

Tests cover:
- Schema file loading (YAML / JSON, malformed input)
- Raw schema parsing and table selection
- Single-table generate_artifact
- MapperGenerator: write, skip, force, dry run, per-table isolation
- GenerationReport summary
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict

import pytest

from conftest import make_table
from mappergen.errors import (
    ConfigurationError,
    EmptyColumnListError,
    SchemaError,
    UnsupportedConfigurationError,
)
from mappergen.generator import (
    GenerationReport,
    MapperGenerator,
    generate_artifact,
    load_schema_file,
    parse_raw_schema,
    select_tables,
)
from mappergen.models import (
    Column,
    ColumnType,
    GeneratorConfig,
    SqlTemplate,
    Table,
    TestTemplate,
)


# ===========================================================================
# Schema loading
# ===========================================================================


class TestLoadSchemaFile:
    def test_load_yaml(self, schema_yaml_path: pathlib.Path) -> None:
        data = load_schema_file(schema_yaml_path)
        assert "tables" in data
        assert "config" in data

    def test_load_json(self, schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(schema_dict), encoding="utf-8")
        assert load_schema_file(path) == schema_dict

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_schema_file(tmp_path / "nope.yaml")

    def test_directory_is_rejected(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            load_schema_file(tmp_path)

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_schema_file(path)

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("tables: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_schema_file(path)

    def test_top_level_list_rejected(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_schema_file(path)

    def test_empty_yaml_is_empty_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_schema_file(path) == {}


# ===========================================================================
# Parsing and selection
# ===========================================================================


class TestParseRawSchema:
    def test_reference_schema(self, schema_dict: Dict[str, Any]) -> None:
        tables, config = parse_raw_schema(schema_dict)
        assert [t.name for t in tables] == ["member", "member_group_tag"]
        assert tables[0].schema_name == "public"
        assert [c.name for c in tables[1].primary_keys] == ["member_id", "tag"]
        assert config.sql_style is SqlTemplate.QUERY_DSL
        assert config.test_template is TestTemplate.SCALATEST_FLAT_SPEC

    def test_single_table_key(self) -> None:
        tables, config = parse_raw_schema(
            {"table": {"name": "t", "columns": [{"name": "a", "type": "int"}]}}
        )
        assert [t.name for t in tables] == ["t"]
        assert config == GeneratorConfig()

    def test_missing_tables(self) -> None:
        with pytest.raises(SchemaError, match="'tables' or 'table'"):
            parse_raw_schema({"config": {}})

    def test_tables_must_be_list(self) -> None:
        with pytest.raises(SchemaError):
            parse_raw_schema({"tables": {"name": "t"}})

    def test_malformed_table_names_location(self) -> None:
        with pytest.raises(SchemaError) as exc_info:
            parse_raw_schema({"tables": [{"name": "t", "columns": [{"type": "int"}]}]})
        assert exc_info.value.table == "t"
        assert "columns.0.name" in exc_info.value.message

    def test_non_mapping_table_entry(self) -> None:
        with pytest.raises(SchemaError, match="#0"):
            parse_raw_schema({"tables": ["member"]})

    def test_config_must_be_mapping(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            parse_raw_schema({"tables": [], "config": "dsl"})
        assert exc_info.value.field == "config"

    def test_unsupported_config_value(self) -> None:
        with pytest.raises(UnsupportedConfigurationError):
            parse_raw_schema({"tables": [], "config": {"template": "jooq"}})


class TestSelectTables:
    def test_none_selects_all(self, member_table: Table, keyless_table: Table) -> None:
        assert select_tables([member_table, keyless_table], None) == [
            member_table,
            keyless_table,
        ]

    def test_selection_follows_requested_order(
        self, member_table: Table, keyless_table: Table
    ) -> None:
        selected = select_tables([member_table, keyless_table], ["event_log", "member"])
        assert [t.name for t in selected] == ["event_log", "member"]

    def test_unknown_table(self, member_table: Table) -> None:
        with pytest.raises(SchemaError) as exc_info:
            select_tables([member_table], ["missing"])
        assert exc_info.value.table == "missing"
        assert "known tables: member" in exc_info.value.message


# ===========================================================================
# Single table
# ===========================================================================


class TestGenerateArtifact:
    def test_member_artifact(self, member_table: Table, dsl_config: GeneratorConfig) -> None:
        artifact = generate_artifact(member_table, dsl_config)
        assert artifact.class_name == "Member"
        assert artifact.model_path == "src/main/scala/models/Member.scala"
        assert artifact.spec_path == "src/test/scala/models/MemberSpec.scala"
        assert artifact.model_code.startswith("package models\n")
        assert artifact.spec_code is not None

    def test_nested_package_path(self, member_table: Table) -> None:
        config = GeneratorConfig(package_name="com.example", src_dir="app", test_dir="test/")
        artifact = generate_artifact(member_table, config)
        assert artifact.model_path == "app/com/example/Member.scala"
        assert artifact.spec_path == "test/com/example/MemberSpec.scala"

    def test_no_spec(self, member_table: Table) -> None:
        artifact = generate_artifact(member_table, GeneratorConfig(test_template=TestTemplate.NONE))
        assert artifact.spec_code is None
        assert artifact.spec_path is None

    def test_invalid_table_raises(self) -> None:
        with pytest.raises(EmptyColumnListError):
            generate_artifact(make_table("empty", []), GeneratorConfig())


# ===========================================================================
# MapperGenerator
# ===========================================================================


class TestMapperGenerator:
    def test_writes_model_and_spec(
        self, member_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        report = MapperGenerator().generate([member_table], dsl_config, output_dir)
        assert report.success
        assert report.files_written == 2
        assert report.tables_generated == 1
        model = output_dir / "src/main/scala/models/Member.scala"
        spec = output_dir / "src/test/scala/models/MemberSpec.scala"
        assert model.read_text(encoding="utf-8") == report.artifacts[0].model_code
        assert spec.is_file()
        assert report.total_bytes == model.stat().st_size + spec.stat().st_size

    def test_existing_files_are_skipped(
        self, member_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        model = output_dir / "src/main/scala/models/Member.scala"
        model.parent.mkdir(parents=True)
        model.write_text("// hand written\n", encoding="utf-8")

        report = MapperGenerator().generate([member_table], dsl_config, output_dir)
        assert report.success
        assert report.files_skipped == 1
        assert report.files_written == 1
        assert model.read_text(encoding="utf-8") == "// hand written\n"

    def test_force_overwrites(
        self, member_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        model = output_dir / "src/main/scala/models/Member.scala"
        model.parent.mkdir(parents=True)
        model.write_text("// hand written\n", encoding="utf-8")

        report = MapperGenerator().generate([member_table], dsl_config, output_dir, force=True)
        assert report.files_written == 2
        assert model.read_text(encoding="utf-8").startswith("package models")

    def test_dry_run_writes_nothing(
        self, member_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        report = MapperGenerator().generate([member_table], dsl_config, output_dir, dry_run=True)
        assert report.success
        assert report.dry_run
        assert report.tables_generated == 1
        assert report.files_written == 0
        assert list(output_dir.iterdir()) == []

    def test_invalid_table_is_isolated(
        self, member_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        bad = make_table("broken", [Column(name="session", data_type=ColumnType.VARCHAR)])
        report = MapperGenerator().generate([bad, member_table], dsl_config, output_dir)
        assert not report.success
        assert report.skipped_tables == ["broken"]
        assert report.tables_generated == 1
        assert any("RESERVED_NAME_COLLISION" in e for e in report.validation_errors)
        assert (output_dir / "src/main/scala/models/Member.scala").is_file()
        assert not (output_dir / "src/main/scala/models/Broken.scala").exists()

    def test_unencodable_table_is_isolated(
        self, member_table: Table, output_dir: pathlib.Path
    ) -> None:
        bad = make_table(
            "label",
            [
                Column(name="id", data_type=ColumnType.BIGINT, primary_key=True),
                Column(name="名前", data_type=ColumnType.VARCHAR),
            ],
        )
        report = MapperGenerator().generate(
            [bad, member_table], GeneratorConfig(encoding="ascii"), output_dir
        )
        assert not report.success
        assert report.skipped_tables == ["label"]
        assert any("UNENCODABLE_NAME" in e for e in report.validation_errors)
        assert report.export_errors == []
        assert (output_dir / "src/main/scala/models/Member.scala").is_file()

    def test_warnings_do_not_fail_by_default(
        self, keyless_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        report = MapperGenerator().generate([keyless_table], dsl_config, output_dir)
        assert report.success
        assert any("NO_PRIMARY_KEY" in w for w in report.validation_warnings)

    def test_fail_on_warnings(
        self, keyless_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        report = MapperGenerator(fail_on_warnings=True).generate(
            [keyless_table], dsl_config, output_dir
        )
        assert not report.success
        assert report.skipped_tables == ["event_log"]

    def test_step_metrics(
        self, member_table: Table, dsl_config: GeneratorConfig, output_dir: pathlib.Path
    ) -> None:
        report = MapperGenerator().generate([member_table], dsl_config, output_dir)
        assert [s.step_name for s in report.step_metrics] == [
            "Validate Tables",
            "Code Generation",
            "Export Files",
        ]
        assert all(s.success for s in report.step_metrics)

    def test_generate_from_file(
        self, schema_yaml_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        report = MapperGenerator().generate_from_file(schema_yaml_path, output_dir)
        assert report.success
        assert report.tables_generated == 2
        assert (output_dir / "src/main/scala/models/MemberGroupTag.scala").is_file()

    def test_generate_from_file_with_selection_and_overrides(
        self, schema_yaml_path: pathlib.Path, output_dir: pathlib.Path
    ) -> None:
        report = MapperGenerator().generate_from_file(
            schema_yaml_path,
            output_dir,
            config_overrides={"package_name": "db", "test_template": TestTemplate.NONE},
            table_names=["member"],
        )
        assert report.files_written == 1
        assert (output_dir / "src/main/scala/db/Member.scala").is_file()
        assert not (output_dir / "src/test").exists()


class TestGenerationReport:
    def test_summary_lists_problems(self) -> None:
        report = GenerationReport(
            success=False,
            tables_requested=2,
            validation_errors=["broken: [ERROR] X: y"],
            skipped_tables=["broken"],
        )
        text = report.summary()
        assert "Mapper Codegen - Generation Report" in text
        assert "FAILED" in text
        assert "Tables generated: 0/2" in text
        assert "Skipped Tables (1):" in text
        assert "broken: [ERROR] X: y" in text

    def test_summary_marks_dry_run(self) -> None:
        assert "(dry run)" in GenerationReport(success=True, dry_run=True).summary()
