# File: mappergen/templates.py
"""
Mapper Codegen - Code Assembly Engine
=======================================
Composes the fragments chosen by ``TemplateSelector`` into two complete
Scala source bodies for one table:

    1. the model file: package, imports, value type, companion object with
       table binding, row mapper and the nine accessors
       (find, findAll, countAll, findBy, findAllBy, countBy, create, save,
       destroy, always in that order);
    2. the test spec: one of three framework skeletons with the table's
       literals substituted in.

**Determinism contract:**
    - Identical ``(table, config)`` input yields byte-identical output.
    - No timestamps, randomness or environment lookups are embedded.
    - All string assembly uses ``List[str]`` + ``eol.join()``; every line,
      including the last, ends with the configured line break.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from mappergen.fragments import Fragment, TemplateSelector
from mappergen.models import GeneratorConfig, SqlTemplate, Table, TestTemplate
from mappergen.naming import ColumnMapper, ColumnMapping
from mappergen.skeletons import TIME_IMPORT_PLACEHOLDER, skeleton_for

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.templates")


# ---------------------------------------------------------------------------
# TemplateGenerator class
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Stateless code-assembly engine.

    Accepts ``Table`` instances and produces Scala source strings according
    to the ``GeneratorConfig`` it was built with.

    Thread-safe: no mutable instance state.
    """

    def __init__(self, config: GeneratorConfig) -> None:
        self._config: GeneratorConfig = config
        self._eol: str = config.eol
        logger.debug(
            "TemplateGenerator initialised (style=%s, mode=%s, tests=%s).",
            config.sql_style.value,
            config.execution_mode.value,
            config.test_template.value,
        )

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    def selector(self, table: Table) -> TemplateSelector:
        return TemplateSelector(table, self._config)

    def _finish(self, lines: List[str]) -> str:
        return self._eol.join(line.rstrip() for line in lines) + self._eol

    # ===================================================================
    # 1. Model + accessor file
    # ===================================================================

    def model_fragments(self, table: Table) -> List[Fragment]:
        """Construction, row mapper and accessors, in output order."""
        selector: TemplateSelector = self.selector(table)
        return [selector.construction(), selector.row_mapper(), *selector.accessors()]

    def generate_model(self, table: Table) -> str:
        """Complete model source for *table*."""
        selector: TemplateSelector = self.selector(table)
        lines: List[str] = [f"package {self._config.package_name}", ""]
        lines.extend(selector.imports())
        lines.append("")

        lines.extend(selector.construction().lines)
        lines.append("")

        lines.extend(selector.object_header())
        lines.extend(selector.row_mapper().lines)
        lines.extend(selector.object_preamble())
        for fragment in selector.accessors():
            lines.extend(fragment.lines)
            lines.append("")
        lines.append("}")

        logger.debug(
            "Assembled model %s for table '%s' (%d lines).",
            selector.class_name,
            table.name,
            len(lines),
        )
        return self._finish(lines)

    # ===================================================================
    # 2. Test spec
    # ===================================================================

    def spec_substitutions(self, table: Table) -> Dict[str, str]:
        """Placeholder → literal text for *table*'s test spec."""
        mapper: ColumnMapper = ColumnMapper.for_table(table, self._config)
        selector: TemplateSelector = TemplateSelector(table, self._config, mapper)
        by_name: Dict[str, ColumnMapping] = mapper.lookup(table)
        keys: List[ColumnMapping] = [by_name[c.name] for c in table.resolved_primary_keys]
        is_dsl: bool = self._config.sql_style is SqlTemplate.QUERY_DSL

        where_example: str = ""
        if keys:
            first: ColumnMapping = keys[0]
            if is_dsl:
                where_example = (
                    f"sqls.eq({mapper.syntax_name}.{first.identifier}, {first.default_value})"
                )
            else:
                where_example = f'sqls"{first.wire_name} = ${{{first.default_value}}}"'

        create_fields: List[str] = [
            f"{by_name[c.name].identifier} = {by_name[c.name].default_value}"
            for c in table.insert_columns
            if c.is_not_null
        ]

        return {
            "%package%": self._config.package_name,
            "%className%": mapper.class_name,
            "%primaryKeys%": ", ".join(k.default_value for k in keys),
            "%syntaxObject%": selector.syntax_declaration() if is_dsl else "",
            "%whereExample%": where_example,
            "%createFields%": ", ".join(create_fields),
        }

    def generate_test_spec(self, table: Table) -> Optional[str]:
        """Test-spec source for *table*, or None when no test template is configured."""
        skeleton: Optional[str] = skeleton_for(
            self._config.test_template, self._config.execution_mode
        )
        if skeleton is None:
            logger.debug(
                "Test template '%s': no spec for table '%s'.",
                TestTemplate.NONE.value,
                table.name,
            )
            return None

        substitutions: Dict[str, str] = self.spec_substitutions(table)
        time_imports: List[str] = self.selector(table).time_imports()

        lines: List[str] = []
        for raw_line in skeleton.split("\n"):
            if raw_line == TIME_IMPORT_PLACEHOLDER:
                lines.extend(time_imports)
                continue
            line: str = raw_line
            for placeholder, value in substitutions.items():
                line = line.replace(placeholder, value)
            lines.append(line)

        # The skeleton ends with a newline; _finish adds the final break.
        if lines and lines[-1] == "":
            lines.pop()
        return self._finish(lines)


# ---------------------------------------------------------------------------
# Functional entry points
# ---------------------------------------------------------------------------


def generate_model(table: Table, config: GeneratorConfig) -> str:
    return TemplateGenerator(config).generate_model(table)


def generate_test_spec(table: Table, config: GeneratorConfig) -> Optional[str]:
    return TemplateGenerator(config).generate_test_spec(table)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
    "generate_model",
    "generate_test_spec",
]

logger.debug("mappergen.templates loaded.")
