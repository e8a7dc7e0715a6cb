"""
tests/test_naming.py
Unit tests for mappergen.naming and the string helpers in mappergen.utils.

Tests cover:
- Case conversion and identifier quoting
- Class and alias derivation
- Column type mapping, literals and temporal/opaque categories
- Generated-key coercion table
- Reserved-name collision lookup
"""

from __future__ import annotations

import pytest

from mappergen.models import (
    Column,
    ColumnType,
    DateTimeClass,
    ExecutionMode,
    GeneratorConfig,
    Table,
)
from mappergen.naming import (
    ColumnMapper,
    class_name_for,
    column_identifier,
    generated_key_coercion,
    quote_identifier,
    syntax_name_for,
)
from mappergen.utils import indent_lines, scala_string_literal, to_camel_case, to_pascal_case


def _mapper(config: GeneratorConfig = GeneratorConfig()) -> ColumnMapper:
    return ColumnMapper("Member", "m", config)


# ===========================================================================
# String helpers
# ===========================================================================


class TestCaseConversion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("member", "Member"),
            ("member_group", "MemberGroup"),
            ("MEMBER_GROUP", "MemberGroup"),
            ("memberGroup", "MemberGroup"),
            ("order-item", "OrderItem"),
        ],
    )
    def test_pascal_case(self, raw: str, expected: str) -> None:
        assert to_pascal_case(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [("created_at", "createdAt"), ("ID", "id"), ("birthday", "birthday")],
    )
    def test_camel_case(self, raw: str, expected: str) -> None:
        assert to_camel_case(raw) == expected

    def test_string_literal_escapes(self) -> None:
        assert scala_string_literal('a"b\\c') == '"a\\"b\\\\c"'

    def test_indent_lines_leaves_blank_lines_empty(self) -> None:
        assert indent_lines(["a", "", "b"], 2) == ["    a", "", "    b"]


# ===========================================================================
# Identifiers
# ===========================================================================


class TestIdentifiers:
    def test_plain_identifier_untouched(self) -> None:
        assert quote_identifier("name") == "name"

    @pytest.mark.parametrize("word", ["type", "class", "val", "object"])
    def test_keywords_are_backquoted(self, word: str) -> None:
        assert quote_identifier(word) == f"`{word}`"

    def test_column_identifier_is_camel_case(self) -> None:
        assert column_identifier("created_at") == "createdAt"

    def test_column_identifier_quotes_leading_digit(self) -> None:
        assert column_identifier("1st_place") == "`1stPlace`"

    def test_column_identifier_quotes_keyword(self) -> None:
        assert column_identifier("type") == "`type`"

    def test_class_name_from_table(self) -> None:
        table = Table(name="member_group", columns=())
        assert class_name_for(table, GeneratorConfig()) == "MemberGroup"

    def test_class_name_override(self) -> None:
        table = Table(name="member_group", columns=())
        config = GeneratorConfig(target_class_name="Team")
        assert class_name_for(table, config) == "Team"

    @pytest.mark.parametrize(
        "class_name, alias",
        [("Member", "m"), ("OrderItem", "oi"), ("MemberGroupTag", "mgt"), ("DoOrder", "doOrder")],
    )
    def test_syntax_name(self, class_name: str, alias: str) -> None:
        assert syntax_name_for(class_name) == alias


# ===========================================================================
# Type mapping
# ===========================================================================


class TestColumnMapping:
    def test_not_null_bigint(self) -> None:
        mapping = _mapper().map_column(
            Column(name="id", data_type=ColumnType.BIGINT, nullable=False)
        )
        assert mapping.identifier == "id"
        assert mapping.type_expression == "Long"
        assert mapping.default_value == "1L"
        assert mapping.parameter() == "id: Long"
        assert not mapping.is_temporal
        assert not mapping.is_opaque_sql_type

    def test_nullable_date(self) -> None:
        mapping = _mapper().map_column(Column(name="birthday", data_type=ColumnType.DATE))
        assert mapping.type_expression == "Option[LocalDate]"
        assert mapping.parameter() == "birthday: Option[LocalDate] = None"
        assert mapping.parameter(with_default=False) == "birthday: Option[LocalDate]"
        assert mapping.is_temporal
        assert mapping.default_value == "LocalDate.now"

    def test_timestamp_follows_date_time_class(self) -> None:
        col = Column(name="created_at", data_type=ColumnType.TIMESTAMP, nullable=False)
        joda = _mapper().map_column(col)
        assert joda.raw_type == "DateTime"
        assert joda.default_value == "DateTime.now"

        zoned = _mapper(
            GeneratorConfig(date_time_class=DateTimeClass.ZONED_DATE_TIME)
        ).map_column(col)
        assert zoned.raw_type == "ZonedDateTime"
        assert zoned.is_temporal

    def test_opaque_sql_types(self) -> None:
        mapping = _mapper().map_column(Column(name="payload", data_type=ColumnType.BLOB))
        assert mapping.is_opaque_sql_type
        assert mapping.raw_type == "Blob"
        assert mapping.default_value == "null"

    def test_unsupported_type_is_any(self) -> None:
        mapping = _mapper().map_column(
            Column(name="geom", data_type=ColumnType.OTHER, nullable=False)
        )
        assert mapping.is_any
        assert mapping.type_expression == "Any"

    def test_string_literal(self) -> None:
        mapping = _mapper().map_column(Column(name="name", data_type=ColumnType.VARCHAR))
        assert mapping.default_value == '"MyString"'

    def test_mapping_is_deterministic(self) -> None:
        col = Column(name="name", data_type=ColumnType.VARCHAR)
        assert _mapper().map_column(col) == _mapper().map_column(col)


class TestGeneratedKeyCoercion:
    @pytest.mark.parametrize(
        "column_type, expected",
        [
            (ColumnType.INTEGER, "generatedKey.toInt"),
            (ColumnType.SMALLINT, "generatedKey.toShort"),
            (ColumnType.TINYINT, "generatedKey.toByte"),
            (ColumnType.BIGINT, "generatedKey"),
            (ColumnType.DECIMAL, "BigDecimal.valueOf(generatedKey)"),
            (ColumnType.VARCHAR, "generatedKey.toString"),
        ],
    )
    def test_not_null(self, column_type: ColumnType, expected: str) -> None:
        mapping = _mapper().map_column(Column(name="id", data_type=column_type, nullable=False))
        assert generated_key_coercion(mapping) == expected

    def test_nullable_key_is_wrapped(self) -> None:
        mapping = _mapper().map_column(Column(name="id", data_type=ColumnType.INTEGER))
        assert generated_key_coercion(mapping) == "Some(generatedKey.toInt)"


# ===========================================================================
# Reserved names
# ===========================================================================


class TestReservedNames:
    def test_sync_reserved_names(self) -> None:
        assert _mapper().reserved_names == frozenset(
            {"column", "entity", "session", "Member", "m"}
        )

    def test_async_reserves_execution_context(self) -> None:
        config = GeneratorConfig(execution_mode=ExecutionMode.ASYNC)
        assert "cxt" in _mapper(config).reserved_names

    def test_generated_key_reserved_with_auto_increment(self) -> None:
        table = Table(
            name="member",
            columns=(
                Column(name="id", data_type=ColumnType.BIGINT, primary_key=True, auto_increment=True),
                Column(name="generated_key", data_type=ColumnType.VARCHAR),
            ),
        )
        mapper = ColumnMapper.for_table(table, GeneratorConfig())
        assert "generatedKey" in mapper.reserved_names
        assert mapper.find_collision(mapper.map_column(table.columns[1])) == "generatedKey"

    def test_generated_key_free_without_auto_increment(self) -> None:
        table = Table(
            name="member",
            columns=(
                Column(name="id", data_type=ColumnType.BIGINT, primary_key=True),
                Column(name="generated_key", data_type=ColumnType.VARCHAR),
            ),
        )
        mapper = ColumnMapper.for_table(table, GeneratorConfig())
        assert "generatedKey" not in mapper.reserved_names

    @pytest.mark.parametrize("name", ["column", "entity", "session", "m"])
    def test_collision_detected(self, name: str) -> None:
        mapper = _mapper()
        mapping = mapper.map_column(Column(name=name, data_type=ColumnType.VARCHAR))
        assert mapper.find_collision(mapping) == name

    def test_ordinary_column_does_not_collide(self) -> None:
        mapper = _mapper()
        mapping = mapper.map_column(Column(name="columns_count", data_type=ColumnType.INTEGER))
        assert mapper.find_collision(mapping) is None
