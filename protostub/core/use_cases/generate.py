"""
Generate use case — validate the run, pick a writer, generate stubs.

Ties together writer resolution, the pre-flight checks on the input and
output paths, and the service generator. A failed pre-flight check
aborts the run before any file is processed; everything after that is
per-file and ends up in the report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from protostub.adapters.base import ServiceWriter
from protostub.adapters.registry import WriterRegistry, default_registry
from protostub.core.services.generator import GenerationReport, ServiceGenerator

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Result of the generate use case."""

    report: GenerationReport | None = None
    writer: ServiceWriter | None = None
    proto_path: Path | None = None
    output_path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["proto"] = str(self.proto_path)
        result["out"] = str(self.output_path)
        result["writer"] = self.writer.name if self.writer else None

        if self.report:
            result["report"] = self.report.to_dict()

        return result


def run_generate(
    proto_path: Path,
    output_path: Path,
    writer_name: str | None = None,
    recursive: bool = False,
    registry: WriterRegistry | None = None,
) -> GenerateResult:
    """Generate stubs for every proto file under ``proto_path``.

    Args:
        proto_path: Proto file or folder of proto files.
        output_path: Output root; created when missing.
        writer_name: Short type name of the writer; None for the default.
        recursive: Scan subfolders of ``proto_path``.
        registry: Writer registry (default: bundled writers + plugins).

    Returns:
        GenerateResult with the per-file report, or an error when a
        pre-flight check failed.
    """
    result = GenerateResult(proto_path=proto_path, output_path=output_path)

    if not proto_path.exists():
        result.error = f"Can not find file or folder by path: {proto_path}"
        return result

    if output_path.exists() and not output_path.is_dir():
        result.error = f"Output path is file. Output path: {output_path}"
        return result

    if registry is None:
        registry = default_registry()

    writer = registry.resolve(writer_name)
    if writer is None:
        known = ", ".join(registry.list_writers()) or "none registered"
        if writer_name:
            result.error = f"Can not find service writer. Writer class: {writer_name} (known: {known})"
        else:
            result.error = "Can not find service writer. No writers are registered"
        return result
    result.writer = writer
    logger.info("Using writer %s", writer.name)

    try:
        output_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        result.error = f"Can not create output folder by path: {output_path}: {e}"
        return result

    try:
        generator = ServiceGenerator(proto_path, recursive=recursive)
        result.report = generator.generate(output_path, writer)
    except FileNotFoundError as e:
        # input vanished between the check above and discovery
        result.error = str(e)

    return result
