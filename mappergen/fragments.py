# File: mappergen/fragments.py
"""
Mapper Codegen - Template Selector & Fragment Library
=======================================================
Builds each logical section of a generated model file as a ``Fragment``:
the section kind, its lines (relative to the enclosing declaration) and the
column identifiers the section references, in the order it references them.
Text is produced only when the assembly engine renders the fragments.

For every section the selector picks the interpolation or the query-DSL
family according to ``GeneratorConfig.sql_style``.  Both families build
the same statement: same insert column order, same conjunction of
primary-key equalities in key order.  Result wrapping, implicit
parameters and statement terminals come from the ``ExecutionStrategy`` of
the configured execution mode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from mappergen.execution import (
    BUILDER_TYPE_PARAM,
    ExecutionStrategy,
    collection_type_name,
    strategy_for,
)
from mappergen.models import (
    DateTimeBinding,
    GeneratorConfig,
    ReturnCollectionType,
    SqlTemplate,
    Table,
)
from mappergen.naming import ColumnMapper, ColumnMapping, generated_key_coercion
from mappergen.utils import indent, indent_lines, scala_string_literal

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.fragments")

# Fixed-arity case classes in the target language cap at 22 fields.
WIDE_VALUE_THRESHOLD: int = 22


class SectionKind(str, Enum):
    """Logical sections of a generated model file."""

    CONSTRUCTION = "construction"
    ROW_MAPPER = "rowMapper"
    FIND = "find"
    FIND_ALL = "findAll"
    COUNT_ALL = "countAll"
    FIND_BY = "findBy"
    FIND_ALL_BY = "findAllBy"
    COUNT_BY = "countBy"
    CREATE = "create"
    SAVE = "save"
    DESTROY = "destroy"


ACCESSOR_ORDER: Tuple[SectionKind, ...] = (
    SectionKind.FIND,
    SectionKind.FIND_ALL,
    SectionKind.COUNT_ALL,
    SectionKind.FIND_BY,
    SectionKind.FIND_ALL_BY,
    SectionKind.COUNT_BY,
    SectionKind.CREATE,
    SectionKind.SAVE,
    SectionKind.DESTROY,
)


@dataclass(frozen=True, slots=True)
class Fragment:
    """One generated section, not yet rendered."""

    kind: SectionKind
    lines: Tuple[str, ...]
    columns: Tuple[str, ...] = ()

    def render(self, eol: str = "\n") -> str:
        return eol.join(self.lines)


def _comma_separated(items: Sequence[str], closer: str = "") -> List[str]:
    """Append ``,`` to every item but the last, and *closer* to the last."""
    out: List[str] = [f"{item}," for item in items[:-1]]
    if items:
        out.append(f"{items[-1]}{closer}")
    return out


def _method(
    kind: SectionKind,
    signature: str,
    body: Sequence[str],
    columns: Sequence[str] = (),
) -> Fragment:
    lines: List[str] = [f"{indent(1)}{signature} = {{"]
    lines.extend(indent_lines(body, 2))
    lines.append(f"{indent(1)}}}")
    return Fragment(kind, tuple(lines), tuple(columns))


# ---------------------------------------------------------------------------
# TemplateSelector
# ---------------------------------------------------------------------------


class TemplateSelector:
    """
    Produces the fragments of one table's model file.

    Construct once per ``(table, config)``; every method is independent of
    the others and free of side effects.
    """

    def __init__(
        self,
        table: Table,
        config: GeneratorConfig,
        mapper: Optional[ColumnMapper] = None,
    ) -> None:
        self._table: Table = table
        self._config: GeneratorConfig = config
        self._mapper: ColumnMapper = mapper or ColumnMapper.for_table(table, config)
        self._strategy: ExecutionStrategy = strategy_for(config.execution_mode)

        self._cls: str = self._mapper.class_name
        self._alias: str = self._mapper.syntax_name
        self._columns: List[ColumnMapping] = self._mapper.map_table(table)
        by_name: Dict[str, ColumnMapping] = {c.wire_name: c for c in self._columns}
        self._keys: List[ColumnMapping] = [
            by_name[c.name] for c in table.resolved_primary_keys
        ]
        self._insert: List[ColumnMapping] = [
            by_name[c.name] for c in table.insert_columns
        ]
        generated = table.generated_key_column
        self._generated: Optional[ColumnMapping] = (
            by_name[generated.name] if generated is not None else None
        )
        self._is_dsl: bool = config.sql_style is SqlTemplate.QUERY_DSL

    # -- Shared pieces -------------------------------------------------------

    @property
    def class_name(self) -> str:
        return self._cls

    @property
    def syntax_name(self) -> str:
        return self._alias

    @property
    def strategy(self) -> ExecutionStrategy:
        return self._strategy

    @property
    def uses_wide_construction(self) -> bool:
        return (
            not self._config.case_class_only
            and len(self._columns) > WIDE_VALUE_THRESHOLD
        )

    def _default_session(self, owner: Optional[str] = None) -> str:
        if not self._config.default_auto_session:
            return ""
        return self._strategy.default_session(owner)

    def _implicits(self, owner: Optional[str] = None, multi_row: bool = False) -> str:
        builder: str = ""
        if multi_row and self._is_builder_shape:
            builder = (
                f", {BUILDER_TYPE_PARAM}: CanBuildFrom[Nothing, {self._cls}, "
                f"{BUILDER_TYPE_PARAM}[{self._cls}]]"
            )
        return self._strategy.implicit_params(self._default_session(owner), builder)

    @property
    def _is_builder_shape(self) -> bool:
        return (
            self._config.return_collection_type is ReturnCollectionType.CAN_BUILD_FROM
        )

    @property
    def _type_param(self) -> str:
        return f"[{BUILDER_TYPE_PARAM}[_]]" if self._is_builder_shape else ""

    @property
    def _many_type(self) -> str:
        shape: str = collection_type_name(self._config.return_collection_type)
        return self._strategy.result_type(f"{shape}[{self._cls}]")

    @property
    def _row_mapping(self) -> str:
        return f"map({self._cls}({self._alias}.resultName))"

    def _key_predicate(self, subject: str, value_prefix: str = "") -> str:
        """Conjunction of key equalities, e.g. ``.eq(m.id, id)`` or ``${m.id} = ${id}``."""
        if self._is_dsl:
            return ".and".join(
                f".eq({subject}.{k.identifier}, {value_prefix}{k.identifier})"
                for k in self._keys
            )
        return " and ".join(
            f"${{{subject}.{k.identifier}}} = ${{{value_prefix}{k.identifier}}}"
            for k in self._keys
        )

    @property
    def _key_identifiers(self) -> Tuple[str, ...]:
        return tuple(k.identifier for k in self._keys)

    # -- Imports -------------------------------------------------------------

    def time_imports(self) -> List[str]:
        """Date/time import lines for the temporal types the table uses."""
        classes: List[str] = []
        for col in self._columns:
            if col.is_temporal and col.raw_type not in classes:
                classes.append(col.raw_type)
        if not classes:
            return []
        joined: str = ", ".join(classes)
        if self._config.date_time_binding is DateTimeBinding.JODA:
            return [f"import org.joda.time.{{{joined}}}"]
        return [f"import java.time.{{{joined}}}", "import scalikejdbc.jsr310._"]

    def imports(self) -> List[str]:
        lines: List[str] = []
        if self._is_builder_shape:
            lines.append("import scala.collection.generic.CanBuildFrom")
        lines.append("import scalikejdbc._")
        lines.extend(f"import {name}" for name in self._strategy.imports)
        lines.extend(self.time_imports())
        opaque: List[str] = []
        for col in self._columns:
            if col.is_opaque_sql_type and col.raw_type not in opaque:
                opaque.append(col.raw_type)
        if opaque:
            lines.append(f"import java.sql.{{{', '.join(opaque)}}}")
        return lines

    # -- Value type ----------------------------------------------------------

    def construction(self) -> Fragment:
        owner_default: str = self._implicits(owner=self._cls)
        delegate: str = self._strategy.delegate_args()
        instance_methods: List[str] = [
            f"{indent(1)}def save()({owner_default}): "
            f"{self._strategy.result_type(self._cls)} = "
            f"{self._cls}.save(this){delegate}",
            "",
            f"{indent(1)}def destroy()({owner_default}): "
            f"{self._strategy.result_type('Unit')} = "
            f"{self._cls}.destroy(this){delegate}",
            "",
            "}",
        ]
        opener: str = f"){self._strategy.class_mixin} {{"
        lines: List[str] = []

        if not self.uses_wide_construction:
            lines.append(f"case class {self._cls}(")
            lines.extend(
                _comma_separated(
                    [indent(1) + c.parameter() for c in self._columns], opener
                )
            )
            lines.append("")
        else:
            lines.append(f"class {self._cls}(")
            lines.extend(
                _comma_separated(
                    [indent(1) + "val " + c.parameter() for c in self._columns],
                    opener,
                )
            )
            lines.append("")
            lines.append(f"{indent(1)}def copy(")
            lines.extend(
                _comma_separated(
                    [
                        f"{indent(2)}{c.identifier}: {c.type_expression} = this.{c.identifier}"
                        for c in self._columns
                    ],
                    f"): {self._cls} = {{",
                )
            )
            lines.append(f"{indent(2)}new {self._cls}(")
            lines.extend(
                _comma_separated(
                    [f"{indent(3)}{c.identifier} = {c.identifier}" for c in self._columns],
                    ")",
                )
            )
            lines.append(f"{indent(1)}}}")
            lines.append("")

        lines.extend(instance_methods)
        return Fragment(
            SectionKind.CONSTRUCTION,
            tuple(lines),
            tuple(c.identifier for c in self._columns),
        )

    # -- Row mapper ----------------------------------------------------------

    def row_mapper(self) -> Fragment:
        a: str = self._alias
        cls: str = self._cls
        provider: str = f"{indent(1)}def apply({a}: SyntaxProvider[{cls}])(rs: WrappedResultSet): {cls}"
        result_name: str = f"{indent(1)}def apply({a}: ResultName[{cls}])(rs: WrappedResultSet): {cls}"

        if self._config.auto_construct:
            lines: List[str] = [
                f"{provider} = autoConstruct(rs, {a})",
                f"{result_name} = autoConstruct(rs, {a})",
            ]
        else:
            fields: List[str] = []
            for col in self._columns:
                if col.is_any:
                    accessor: str = "any" if col.is_not_null else "anyOpt"
                else:
                    accessor = "get"
                fields.append(f"{indent(2)}{col.identifier} = rs.{accessor}({a}.{col.identifier})")
            lines = [
                f"{provider} = apply({a}.resultName)(rs)",
                f"{result_name} = new {cls}(",
            ]
            lines.extend(_comma_separated(fields))
            lines.append(f"{indent(1)})")

        return Fragment(
            SectionKind.ROW_MAPPER,
            tuple(lines),
            tuple(c.identifier for c in self._columns),
        )

    # -- Single-row lookups --------------------------------------------------

    def find(self) -> Fragment:
        a, cls = self._alias, self._cls
        args: str = ", ".join(f"{k.identifier}: {k.type_expression}" for k in self._keys)
        signature: str = (
            f"def find({args})({self._implicits()}): "
            f"{self._strategy.result_type(f'Option[{cls}]')}"
        )
        terminal: str = f".{self._row_mapping}.{self._strategy.single_terminal()}"
        predicate: str = self._key_predicate(a)
        if self._is_dsl:
            body: List[str] = [
                "withSQL {",
                f"{indent(1)}select.from({cls} as {a}).where{predicate}",
                "}" + terminal,
            ]
        else:
            body = [
                f'sql"""select ${{{a}.result.*}} from ${{{cls} as {a}}} where {predicate}"""',
                indent(1) + terminal,
            ]
        return _method(SectionKind.FIND, signature, body, self._key_identifiers)

    def find_by(self) -> Fragment:
        a, cls = self._alias, self._cls
        signature: str = (
            f"def findBy(where: SQLSyntax)({self._implicits()}): "
            f"{self._strategy.result_type(f'Option[{cls}]')}"
        )
        terminal: str = f".{self._row_mapping}.{self._strategy.single_terminal()}"
        if self._is_dsl:
            body: List[str] = [
                "withSQL {",
                f"{indent(1)}select.from({cls} as {a}).where.append(where)",
                "}" + terminal,
            ]
        else:
            body = [
                f'sql"""select ${{{a}.result.*}} from ${{{cls} as {a}}} where ${{where}}"""',
                indent(1) + terminal,
            ]
        return _method(SectionKind.FIND_BY, signature, body)

    # -- Multi-row lookups ---------------------------------------------------

    def find_all(self) -> Fragment:
        a, cls = self._alias, self._cls
        signature: str = (
            f"def findAll{self._type_param}()({self._implicits(multi_row=True)}): "
            f"{self._many_type}"
        )
        terminal: str = (
            f".{self._row_mapping}."
            f"{self._strategy.many_terminal(self._config.return_collection_type)}"
        )
        if self._is_dsl:
            body: List[str] = [f"withSQL(select.from({cls} as {a})){terminal}"]
        else:
            body = [f'sql"""select ${{{a}.result.*}} from ${{{cls} as {a}}}"""{terminal}']
        return _method(SectionKind.FIND_ALL, signature, body)

    def find_all_by(self) -> Fragment:
        a, cls = self._alias, self._cls
        signature: str = (
            f"def findAllBy{self._type_param}(where: SQLSyntax)"
            f"({self._implicits(multi_row=True)}): {self._many_type}"
        )
        terminal: str = (
            f".{self._row_mapping}."
            f"{self._strategy.many_terminal(self._config.return_collection_type)}"
        )
        if self._is_dsl:
            body: List[str] = [
                "withSQL {",
                f"{indent(1)}select.from({cls} as {a}).where.append(where)",
                "}" + terminal,
            ]
        else:
            body = [
                f'sql"""select ${{{a}.result.*}} from ${{{cls} as {a}}} where ${{where}}"""',
                indent(1) + terminal,
            ]
        return _method(SectionKind.FIND_ALL_BY, signature, body)

    # -- Counting ------------------------------------------------------------

    def count_all(self) -> Fragment:
        a, cls = self._alias, self._cls
        signature: str = (
            f"def countAll()({self._implicits()}): {self._strategy.result_type('Long')}"
        )
        terminal: str = f".map(rs => rs.long(1)).{self._strategy.count_terminal()}"
        if self._is_dsl:
            body: List[str] = [f"withSQL(select(sqls.count).from({cls} as {a})){terminal}"]
        else:
            body = [f'sql"""select count(1) from ${{{cls}.table}}"""{terminal}']
        return _method(SectionKind.COUNT_ALL, signature, body)

    def count_by(self) -> Fragment:
        a, cls = self._alias, self._cls
        signature: str = (
            f"def countBy(where: SQLSyntax)({self._implicits()}): "
            f"{self._strategy.result_type('Long')}"
        )
        terminal: str = f".map(_.long(1)).{self._strategy.count_terminal()}"
        if self._is_dsl:
            body: List[str] = [
                "withSQL {",
                f"{indent(1)}select(sqls.count).from({cls} as {a}).where.append(where)",
                "}" + terminal,
            ]
        else:
            body = [
                f'sql"""select count(1) from ${{{cls} as {a}}} where ${{where}}"""',
                indent(1) + terminal,
            ]
        return _method(SectionKind.COUNT_BY, signature, body)

    # -- Writes --------------------------------------------------------------

    def _insert_statement(self) -> List[str]:
        cls: str = self._cls
        names: List[str] = [c.identifier for c in self._insert]
        if self._is_dsl:
            lines: List[str] = ["withSQL {", f"{indent(1)}insert.into({cls}).columns("]
            lines.extend(_comma_separated([f"{indent(2)}column.{n}" for n in names]))
            lines.append(f"{indent(1)}).values(")
            lines.extend(_comma_separated([f"{indent(2)}{n}" for n in names]))
            lines.extend([f"{indent(1)})", "}"])
        else:
            lines = ['sql"""', f"{indent(1)}insert into ${{{cls}.table}} ("]
            lines.extend(_comma_separated([f"{indent(2)}${{column.{n}}}" for n in names]))
            lines.append(f"{indent(1)}) values (")
            lines.extend(_comma_separated([f"{indent(2)}${{{n}}}" for n in names]))
            lines.extend([f"{indent(1)})", f'{indent(1)}"""'])
        return lines

    def _created_entity(self) -> List[str]:
        prefix: str = "new " if self.uses_wide_construction else ""
        assignments: List[str] = []
        for col in self._columns:
            if self._generated is not None and col.wire_name == self._generated.wire_name:
                value: str = generated_key_coercion(col)
            else:
                value = col.identifier
            assignments.append(f"{indent(1)}{col.identifier} = {value}")
        return [f"{prefix}{self._cls}("] + _comma_separated(assignments, ")")

    def create(self) -> Fragment:
        params: List[str] = [indent(2) + c.parameter() for c in self._insert]
        closer: str = (
            f")({self._implicits()}): {self._strategy.result_type(self._cls)} = {{"
        )
        lines: List[str] = [f"{indent(1)}def create("]
        lines.extend(_comma_separated(params, closer))
        body: List[str] = self._strategy.create_body(
            self._insert_statement(),
            self._created_entity(),
            with_generated_key=self._generated is not None,
        )
        lines.extend(indent_lines(body, 2))
        lines.append(f"{indent(1)}}}")
        return Fragment(
            SectionKind.CREATE,
            tuple(lines),
            tuple(c.identifier for c in self._insert),
        )

    def save(self) -> Fragment:
        cls: str = self._cls
        signature: str = (
            f"def save(entity: {cls})({self._implicits()}): "
            f"{self._strategy.result_type(cls)}"
        )
        terminal, trailing = self._strategy.update_then("entity")
        predicate: str = self._key_predicate("column", "entity.")
        if self._is_dsl:
            body: List[str] = ["withSQL {", f"{indent(1)}update({cls}).set("]
            body.extend(
                _comma_separated(
                    [f"{indent(2)}column.{c.identifier} -> entity.{c.identifier}" for c in self._columns]
                )
            )
            body.append(f"{indent(1)}).where{predicate}")
            body.append("}." + terminal)
        else:
            body = [
                'sql"""',
                f"{indent(1)}update",
                f"{indent(2)}${{{cls}.table}}",
                f"{indent(1)}set",
            ]
            body.extend(
                _comma_separated(
                    [
                        f"{indent(2)}${{column.{c.identifier}}} = ${{entity.{c.identifier}}}"
                        for c in self._columns
                    ]
                )
            )
            body.extend(
                [
                    f"{indent(1)}where",
                    f"{indent(2)}{predicate}",
                    f'{indent(1)}""".{terminal}',
                ]
            )
        if trailing is not None:
            body.append(trailing)
        return _method(SectionKind.SAVE, signature, body, self._key_identifiers)

    def destroy(self) -> Fragment:
        cls: str = self._cls
        signature: str = (
            f"def destroy(entity: {cls})({self._implicits()}): "
            f"{self._strategy.result_type('Unit')}"
        )
        terminal, trailing = self._strategy.update_then(None)
        predicate: str = self._key_predicate("column", "entity.")
        if self._is_dsl:
            body: List[str] = [f"withSQL {{ delete.from({cls}).where{predicate} }}.{terminal}"]
        else:
            body = [f'sql"""delete from ${{{cls}.table}} where {predicate}""".{terminal}']
        if trailing is not None:
            body.append(trailing)
        return _method(SectionKind.DESTROY, signature, body, self._key_identifiers)

    # -- Companion object ----------------------------------------------------

    def accessor(self, kind: SectionKind) -> Fragment:
        builders = {
            SectionKind.FIND: self.find,
            SectionKind.FIND_ALL: self.find_all,
            SectionKind.COUNT_ALL: self.count_all,
            SectionKind.FIND_BY: self.find_by,
            SectionKind.FIND_ALL_BY: self.find_all_by,
            SectionKind.COUNT_BY: self.count_by,
            SectionKind.CREATE: self.create,
            SectionKind.SAVE: self.save,
            SectionKind.DESTROY: self.destroy,
        }
        if kind not in builders:
            raise KeyError(f"{kind!r} is not an accessor section.")
        return builders[kind]()

    def accessors(self) -> List[Fragment]:
        """The nine accessors in their fixed output order."""
        return [self.accessor(kind) for kind in ACCESSOR_ORDER]

    def object_header(self) -> List[str]:
        cls: str = self._cls
        lines: List[str] = [
            f"object {cls} extends SQLSyntaxSupport[{cls}]{self._strategy.object_mixin} {{"
        ]
        if self._table.schema_name:
            lines.append("")
            lines.append(
                f"{indent(1)}override val schemaName = "
                f"Some({scala_string_literal(self._table.schema_name)})"
            )
        wire_names: str = ", ".join(scala_string_literal(c.wire_name) for c in self._columns)
        lines.extend(
            [
                "",
                f"{indent(1)}override val tableName = {scala_string_literal(self._table.name)}",
                "",
                f"{indent(1)}override val columns = Seq({wire_names})",
                "",
            ]
        )
        return lines

    def syntax_declaration(self) -> str:
        return f'val {self._alias} = {self._cls}.syntax("{self._alias}")'

    def object_preamble(self) -> List[str]:
        """Lines between the row mapper and the first accessor."""
        lines: List[str] = ["", indent(1) + self.syntax_declaration(), ""]
        if self._strategy.declares_auto_session:
            lines.extend([f"{indent(1)}override val autoSession = AutoSession", ""])
        return lines


__all__: List[str] = [
    "WIDE_VALUE_THRESHOLD",
    "SectionKind",
    "ACCESSOR_ORDER",
    "Fragment",
    "TemplateSelector",
]

logger.debug("mappergen.fragments loaded — %d public symbols.", len(__all__))
