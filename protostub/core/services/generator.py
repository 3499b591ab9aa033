"""
Service generator — drive proto files through a writer into stub files.

For every discovered input file: parse, extract services, resolve the
output path, create the output file, and let the writer fill it. Each
file is isolated: a failure is logged with the offending path and the
run moves on to the next file.

Output files are never overwritten. If the output path already exists
the file is left exactly as it is, so hand edits to generated stubs
survive reruns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Literal

from protostub.adapters.base import ServiceWriter
from protostub.core.models.service import ServiceDescription
from protostub.core.services.extractor import extract_services
from protostub.core.services.file_discovery import discover_files
from protostub.core.services.proto_parser import ProtoParseError, parse_proto_file

logger = logging.getLogger(__name__)

OutcomeStatus = Literal[
    "generated", "exists", "no_services", "parse_error", "create_error", "write_error",
]


@dataclass
class ParsedFile:
    """A source file and the services declared in it."""

    path: Path
    services: tuple[ServiceDescription, ...] = ()


@dataclass
class FileOutcome:
    """What happened to one input file."""

    input_path: Path
    status: OutcomeStatus
    output_path: Path | None = None
    services: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in ("generated", "exists", "no_services")

    def to_dict(self) -> dict:
        return {
            "input": str(self.input_path),
            "status": self.status,
            "output": str(self.output_path) if self.output_path else None,
            "services": self.services,
            "error": self.error,
        }


@dataclass
class GenerationReport:
    """Outcomes of a generation run, in processing order."""

    outcomes: list[FileOutcome] = field(default_factory=list)

    def add(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)

    def with_status(self, status: OutcomeStatus) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def generated(self) -> list[FileOutcome]:
        return self.with_status("generated")

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def total_files(self) -> int:
        return len(self.outcomes)

    def counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for outcome in self.outcomes:
            counts[outcome.status] = counts.get(outcome.status, 0) + 1
        return counts

    def to_dict(self) -> dict:
        return {
            "total": self.total_files,
            "counts": self.counts(),
            "files": [o.to_dict() for o in self.outcomes],
        }


def proto_base_name(path: Path) -> str:
    """File name without its last extension (``a.b.proto`` → ``a.b``)."""
    return path.stem


def output_path_for(
    input_file: Path, input_root: Path, output_root: Path, writer: ServiceWriter,
) -> Path:
    """Mirror ``input_file``'s location under ``output_root``.

    The directory part is the file's path relative to ``input_root``
    (nothing when ``input_root`` is the file itself); the leaf is the
    writer's file name for the proto base name.
    """
    file_name = writer.file_name(proto_base_name(input_file))
    if input_file == input_root:
        return output_root / file_name
    relative_parent = input_file.relative_to(input_root).parent
    return output_root / relative_parent / file_name


def parse_services(path: Path) -> ParsedFile:
    """Parse one file and extract its services.

    Raises:
        ProtoParseError: If the file cannot be read or parsed.
    """
    tree = parse_proto_file(path)
    return ParsedFile(path=path, services=tuple(extract_services(tree)))


class ServiceGenerator:
    """Generate stub files for a proto file or a folder of proto files."""

    def __init__(self, proto_file_or_folder: Path, recursive: bool = False):
        if not proto_file_or_folder.exists():
            raise FileNotFoundError(
                f"Can not find file or folder by path: {proto_file_or_folder}"
            )
        self.input_root = proto_file_or_folder
        self.recursive = recursive

    def generate(self, output_folder: Path, writer: ServiceWriter) -> GenerationReport:
        """Run every discovered file through ``writer`` into ``output_folder``."""
        report = GenerationReport()

        files = discover_files(self.input_root, self.recursive)
        if not files:
            logger.warning("Can not find proto files in %s", self.input_root)

        for file in files:
            outcome = self.generate_file(file, output_folder, writer)
            report.add(outcome)

        logger.info(
            "Processed %d files: %s",
            report.total_files,
            ", ".join(f"{k}={v}" for k, v in sorted(report.counts().items())) or "nothing",
        )
        return report

    def generate_file(
        self, file: Path, output_folder: Path, writer: ServiceWriter,
    ) -> FileOutcome:
        """Process a single input file. Never raises for per-file failures."""
        try:
            parsed = parse_services(file)
        except ProtoParseError as e:
            logger.error("Can not parse proto file by path: %s: %s", file, e.message)
            return FileOutcome(file, "parse_error", error=str(e))

        if not parsed.services:
            logger.warning(
                "Can not find services in file by path: %s. File will not be created", file,
            )
            return FileOutcome(file, "no_services")

        base_name = proto_base_name(file)
        out_file_name = writer.file_name(base_name)
        output_file = output_path_for(file, self.input_root, output_folder, writer)
        services = len(parsed.services)

        if output_file.exists():
            logger.info("Output file already exists, leaving it untouched: %s", output_file)
            return FileOutcome(file, "exists", output_file, services)

        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            sink = _create_exclusive(output_file)
        except OSError as e:
            logger.error(
                "Can not create output file for file '%s'. Output path: '%s': %s",
                file, output_file, e,
            )
            return FileOutcome(file, "create_error", output_file, services, str(e))

        if sink is None:
            logger.info("Output file already exists, leaving it untouched: %s", output_file)
            return FileOutcome(file, "exists", output_file, services)

        try:
            with sink:
                for service in parsed.services:
                    writer.write(service, base_name, out_file_name, sink)
        except Exception as e:
            logger.error(
                "Can not write service description to file by path '%s'", output_file,
                exc_info=True,
            )
            _discard(output_file)
            return FileOutcome(file, "write_error", output_file, services, str(e))

        logger.info("Generated service file by path = %s", output_file.resolve())
        return FileOutcome(file, "generated", output_file, services)


def _create_exclusive(path: Path) -> BinaryIO | None:
    """Open a new file for writing; None if something is already there."""
    try:
        return open(path, "xb")
    except FileExistsError:
        return None


def _discard(path: Path) -> None:
    """Remove a file this run created but could not finish."""
    try:
        path.unlink()
    except OSError as e:
        logger.warning("Can not remove incomplete output file %s: %s", path, e)
