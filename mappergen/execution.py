# File: mappergen/execution.py
"""
Mapper Codegen - Execution Modes
==================================
The blocking and the ``Future``-returning flavours of generated accessors
differ only in

    * how a result type is wrapped,
    * which implicit parameters an accessor takes,
    * which call terminates a statement.

The SQL a fragment builds is the same in both modes, so the fragment library
in ``mappergen.fragments`` is written once and asks an ``ExecutionStrategy``
for those three things.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from mappergen.models import ExecutionMode, ReturnCollectionType
from mappergen.utils import indent_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.execution")

# Type parameter name used by the ``canbuildfrom`` collection shape.
BUILDER_TYPE_PARAM: str = "C"

_SYNC_MANY_TERMINALS: Dict[ReturnCollectionType, str] = {
    ReturnCollectionType.LIST: "list.apply()",
    ReturnCollectionType.VECTOR: "collection.apply[Vector]()",
    ReturnCollectionType.ARRAY: "collection.apply[Array]()",
    ReturnCollectionType.CAN_BUILD_FROM: f"collection.apply[{BUILDER_TYPE_PARAM}]()",
}

_COLLECTION_NAMES: Dict[ReturnCollectionType, str] = {
    ReturnCollectionType.LIST: "List",
    ReturnCollectionType.VECTOR: "Vector",
    ReturnCollectionType.ARRAY: "Array",
    ReturnCollectionType.CAN_BUILD_FROM: BUILDER_TYPE_PARAM,
}


def collection_type_name(shape: ReturnCollectionType) -> str:
    return _COLLECTION_NAMES[shape]


# ---------------------------------------------------------------------------
# Strategy base
# ---------------------------------------------------------------------------


class ExecutionStrategy(ABC):
    """Mode-specific pieces of generated accessors."""

    mode: ExecutionMode = ExecutionMode.SYNC
    session_type: str = "DBSession"
    imports: Tuple[str, ...] = ()
    class_mixin: str = ""
    object_mixin: str = ""
    declares_auto_session: bool = True

    # -- Parameters ----------------------------------------------------------

    @abstractmethod
    def default_session(self, owner: Optional[str] = None) -> str:
        """Default value suffix for the session parameter."""
        ...

    def extra_implicits(self) -> str:
        return ""

    def implicit_params(self, default_session: str, builder: str = "") -> str:
        """Second parameter list of every accessor, without parentheses."""
        return (
            f"implicit session: {self.session_type}{default_session}"
            f"{self.extra_implicits()}{builder}"
        )

    def delegate_args(self) -> str:
        """Arguments passed on when the class delegates to its companion."""
        return "(session)"

    # -- Result wrapping -----------------------------------------------------

    @abstractmethod
    def result_type(self, type_expression: str) -> str:
        ...

    # -- Statement terminals -------------------------------------------------

    @abstractmethod
    def single_terminal(self) -> str:
        ...

    @abstractmethod
    def many_terminal(self, shape: ReturnCollectionType) -> str:
        ...

    @abstractmethod
    def count_terminal(self) -> str:
        ...

    @abstractmethod
    def update_then(self, value: Optional[str]) -> Tuple[str, Optional[str]]:
        """
        Terminal of an update statement whose accessor yields *value*.

        Returns the terminal call and an optional trailing body line.
        """
        ...

    @abstractmethod
    def create_body(
        self,
        statement: Sequence[str],
        construction: Sequence[str],
        with_generated_key: bool,
    ) -> List[str]:
        """Body of ``create``: run the insert, then build the entity."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} mode={self.mode.value}>"


# ---------------------------------------------------------------------------
# Blocking accessors
# ---------------------------------------------------------------------------


class SyncExecution(ExecutionStrategy):
    mode = ExecutionMode.SYNC
    session_type = "DBSession"
    declares_auto_session = True

    def default_session(self, owner: Optional[str] = None) -> str:
        return f" = {owner}.autoSession" if owner else " = autoSession"

    def result_type(self, type_expression: str) -> str:
        return type_expression

    def single_terminal(self) -> str:
        return "single.apply()"

    def many_terminal(self, shape: ReturnCollectionType) -> str:
        return _SYNC_MANY_TERMINALS[shape]

    def count_terminal(self) -> str:
        return "single.apply().get"

    def update_then(self, value: Optional[str]) -> Tuple[str, Optional[str]]:
        return "update.apply()", value

    def create_body(
        self,
        statement: Sequence[str],
        construction: Sequence[str],
        with_generated_key: bool,
    ) -> List[str]:
        lines: List[str] = list(statement)
        if with_generated_key:
            lines[0] = "val generatedKey = " + lines[0]
            lines[-1] = lines[-1] + ".updateAndReturnGeneratedKey.apply()"
        else:
            lines[-1] = lines[-1] + ".update.apply()"
        lines.append("")
        lines.extend(construction)
        return lines


# ---------------------------------------------------------------------------
# Future-returning accessors
# ---------------------------------------------------------------------------


class AsyncExecution(ExecutionStrategy):
    mode = ExecutionMode.ASYNC
    session_type = "AsyncDBSession"
    imports = (
        "scalikejdbc.async._",
        "scalikejdbc.async.FutureImplicits._",
        "scala.concurrent._",
    )
    class_mixin = " extends ShortenedNames"
    object_mixin = " with ShortenedNames"
    declares_auto_session = False

    def default_session(self, owner: Optional[str] = None) -> str:
        return " = AsyncDB.sharedSession"

    def extra_implicits(self) -> str:
        return ", cxt: EC = ECGlobal"

    def delegate_args(self) -> str:
        return "(session, cxt)"

    def result_type(self, type_expression: str) -> str:
        return f"Future[{type_expression}]"

    def single_terminal(self) -> str:
        return "single.future()"

    def many_terminal(self, shape: ReturnCollectionType) -> str:
        if shape is ReturnCollectionType.LIST:
            return "list.future()"
        return f"list.future().map(_.to[{collection_type_name(shape)}])"

    def count_terminal(self) -> str:
        return "single.future().map(_.get)"

    def update_then(self, value: Optional[str]) -> Tuple[str, Optional[str]]:
        return f"update.future().map(_ => {value or '()'})", None

    def create_body(
        self,
        statement: Sequence[str],
        construction: Sequence[str],
        with_generated_key: bool,
    ) -> List[str]:
        lines: List[str] = []
        if with_generated_key:
            bound: List[str] = list(statement)
            bound[0] = "generatedKey <- " + bound[0]
            bound[-1] = bound[-1] + ".updateAndReturnGeneratedKey.future()"
            lines.append("for {")
            lines.extend(indent_lines(bound, 1))
            lines.append("} yield " + construction[0])
            lines.extend(construction[1:])
        else:
            lines.extend(statement)
            lines[-1] = lines[-1] + ".update.future().map { _ =>"
            lines.extend(indent_lines(construction, 1))
            lines.append("}")
        return lines


_STRATEGIES: Dict[ExecutionMode, ExecutionStrategy] = {
    ExecutionMode.SYNC: SyncExecution(),
    ExecutionMode.ASYNC: AsyncExecution(),
}


def strategy_for(mode: ExecutionMode) -> ExecutionStrategy:
    """Shared strategy instance for *mode*."""
    return _STRATEGIES[mode]


__all__: List[str] = [
    "BUILDER_TYPE_PARAM",
    "ExecutionStrategy",
    "SyncExecution",
    "AsyncExecution",
    "collection_type_name",
    "strategy_for",
]

logger.debug("mappergen.execution loaded — %d public symbols.", len(__all__))
