"""
Mock writer — test double for the generator.

Records every call instead of rendering real source. Writes a single
marker line per service so tests can check what reached the file, and
can be told to fail for specific services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from protostub.adapters.base import ServiceWriter
from protostub.core.models.service import ServiceDescription


@dataclass
class WriteCall:
    """One recorded ``write`` invocation."""

    service: ServiceDescription
    proto_base_name: str
    out_file_name: str


class MockServiceWriter(ServiceWriter):
    """Recording writer for tests.

    By default writes ``<service>:<method>,<method>`` lines. Output file
    names are ``<proto>.stub`` unless a suffix is given.
    """

    def __init__(self, suffix: str = ".stub"):
        self._suffix = suffix
        self._failures: dict[str, str] = {}
        self._call_log: list[WriteCall] = []

    @property
    def call_log(self) -> list[WriteCall]:
        """All write calls this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times write has been called."""
        return len(self._call_log)

    def set_failure(self, service_name: str, error: str = "Mock failure") -> None:
        """Make ``write`` raise for the named service."""
        self._failures[service_name] = error

    def file_name(self, proto_base_name: str) -> str:
        return f"{proto_base_name}{self._suffix}"

    def write(
        self,
        service: ServiceDescription,
        proto_base_name: str,
        out_file_name: str,
        sink: BinaryIO,
    ) -> None:
        self._call_log.append(WriteCall(service, proto_base_name, out_file_name))

        if service.name in self._failures:
            raise RuntimeError(self._failures[service.name])

        line = f"{service.name}:{','.join(service.method_names)}\n"
        sink.write(line.encode("utf-8"))

    def reset(self) -> None:
        """Clear call log and configured failures."""
        self._call_log.clear()
        self._failures.clear()
