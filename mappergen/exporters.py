# File: mappergen/exporters.py
"""
Mapper Codegen - Artifact Writer (Output Sink)
================================================

Responsible for:
    1. Placing a ``GeneratedArtifact`` under a base directory: the model at
       ``<src_dir>/<package path>/<Class>.scala`` and the spec at
       ``<test_dir>/<package path>/<Class>Spec.scala``.
    2. Refusing to clobber existing files unless asked to overwrite.
    3. Writing every file atomically (write-to-temp then rename) in the
       configured encoding.
    4. Recording each file touched in an ``ExportResult``.

Each individual file write is atomic; a failure part-way through a batch
leaves the files already written intact.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from mappergen.models import GeneratedArtifact, GeneratorConfig
from mappergen.utils import count_lines, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single file decision."""

    relative_path: str
    absolute_path: str
    status: str  # "created" | "overwritten" | "skipped"
    size_bytes: int = 0
    line_count: int = 0
    sha256: str = ""

    @property
    def written(self) -> bool:
        return self.status != "skipped"


@dataclass(frozen=False, slots=True)
class ExportResult:
    """Everything an ``ArtifactWriter`` did for one or more artifacts."""

    files: List[FileRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def written(self) -> List[FileRecord]:
        return [f for f in self.files if f.written]

    @property
    def skipped(self) -> List[FileRecord]:
        return [f for f in self.files if not f.written]

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    def merge(self, other: "ExportResult") -> None:
        self.files.extend(other.files)
        self.errors.extend(other.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "status": f.status,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
            "errors": list(self.errors),
        }


# ---------------------------------------------------------------------------
# Path derivation
# ---------------------------------------------------------------------------


def model_path(config: GeneratorConfig, class_name: str) -> str:
    """Relative path of the model source for *class_name*."""
    return "/".join(
        p for p in (config.src_dir.rstrip("/"), config.package_path, f"{class_name}.scala") if p
    )


def spec_path(config: GeneratorConfig, class_name: str) -> str:
    """Relative path of the test spec for *class_name*."""
    return "/".join(
        p
        for p in (config.test_dir.rstrip("/"), config.package_path, f"{class_name}Spec.scala")
        if p
    )


# ---------------------------------------------------------------------------
# ArtifactWriter
# ---------------------------------------------------------------------------


class ArtifactWriter:
    """
    Writes generated sources below *base_dir*.

    Usage::

        writer = ArtifactWriter(config, Path("."))
        result = writer.write_artifact(artifact, force=False)
    """

    def __init__(self, config: GeneratorConfig, base_dir: Path) -> None:
        self._config: GeneratorConfig = config
        self._base_dir: Path = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def target(self, relative_path: str) -> Path:
        return self._base_dir.joinpath(*relative_path.split("/"))

    # -----------------------------------------------------------------
    # Model
    # -----------------------------------------------------------------

    def write_model_if_absent(self, artifact: GeneratedArtifact) -> FileRecord:
        return self._write(
            artifact.model_path,
            artifact.model_code,
            artifact.qualified_class_name,
            overwrite=False,
        )

    def write_model(self, artifact: GeneratedArtifact) -> FileRecord:
        return self._write(
            artifact.model_path,
            artifact.model_code,
            artifact.qualified_class_name,
            overwrite=True,
        )

    # -----------------------------------------------------------------
    # Spec
    # -----------------------------------------------------------------

    def write_spec_if_absent(self, artifact: GeneratedArtifact) -> Optional[FileRecord]:
        if artifact.spec_code is None or artifact.spec_path is None:
            return None
        return self._write(
            artifact.spec_path,
            artifact.spec_code,
            f"{artifact.qualified_class_name}Spec",
            overwrite=False,
        )

    def write_spec(self, artifact: GeneratedArtifact) -> Optional[FileRecord]:
        if artifact.spec_code is None or artifact.spec_path is None:
            return None
        return self._write(
            artifact.spec_path,
            artifact.spec_code,
            f"{artifact.qualified_class_name}Spec",
            overwrite=True,
        )

    # -----------------------------------------------------------------
    # Both
    # -----------------------------------------------------------------

    def write_artifact(self, artifact: GeneratedArtifact, force: bool = False) -> ExportResult:
        """
        Write the model and, when present, the spec of *artifact*.

        OS errors and text the configured encoding cannot represent are
        recorded in the result rather than raised, so one unwritable file
        does not hide the outcome of the other.
        """
        result: ExportResult = ExportResult()
        writers = (
            (self.write_model, self.write_spec)
            if force
            else (self.write_model_if_absent, self.write_spec_if_absent)
        )
        for write in writers:
            try:
                record: Optional[FileRecord] = write(artifact)
            except (OSError, UnicodeEncodeError) as exc:
                msg: str = f"Failed to write {artifact.qualified_class_name}: {exc}"
                logger.error(msg)
                result.errors.append(msg)
                continue
            if record is not None:
                result.files.append(record)
        return result

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _write(
        self,
        relative_path: str,
        content: str,
        display_name: str,
        *,
        overwrite: bool,
    ) -> FileRecord:
        path: Path = self.target(relative_path)
        existed: bool = path.exists()

        if existed and not overwrite:
            logger.info('"%s" already exists.', display_name)
            return FileRecord(
                relative_path=relative_path,
                absolute_path=str(path.resolve()),
                status="skipped",
            )

        size: int = write_file(path, content, encoding=self._config.encoding)
        logger.info('"%s" created.', display_name)
        return FileRecord(
            relative_path=relative_path,
            absolute_path=str(path.resolve()),
            status="overwritten" if existed else "created",
            size_bytes=size,
            line_count=count_lines(content),
            sha256=hashlib.sha256(content.encode(self._config.encoding)).hexdigest(),
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FileRecord",
    "ExportResult",
    "ArtifactWriter",
    "model_path",
    "spec_path",
]

logger.debug("mappergen.exporters loaded — %d public symbols.", len(__all__))
