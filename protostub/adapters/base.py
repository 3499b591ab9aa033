"""
Writer base — the plugin contract between the generator and emitters.

This defines the abstract interface every service writer implements.
The generator only talks to writers through this protocol: it asks for
an output file name, opens the file, and hands each service to
``write`` in declaration order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO

from protostub.core.models.service import ServiceDescription


class ServiceWriter(ABC):
    """Abstract base class for all service writers.

    Writers render a ``ServiceDescription`` into target-language source.
    They never open, close, seek or truncate the sink: the generator
    owns it and may call ``write`` several times on the same sink when
    one proto file declares several services.

    To create a new writer:
        1. Subclass ServiceWriter
        2. Implement file_name and write
        3. Register it in the WriterRegistry, or expose it through the
           ``protostub.writers`` entry-point group
    """

    @property
    def name(self) -> str:
        """Short type name used for ``--writer`` selection."""
        return type(self).__name__

    @property
    def description(self) -> str:
        """First line of the writer's docstring."""
        doc = (type(self).__doc__ or "").strip()
        return doc.splitlines()[0] if doc else ""

    @abstractmethod
    def file_name(self, proto_base_name: str) -> str:
        """Map a proto file's base name (no extension) to an output file name.

        Must be deterministic: the same input always yields the same name.
        """

    @abstractmethod
    def write(
        self,
        service: ServiceDescription,
        proto_base_name: str,
        out_file_name: str,
        sink: BinaryIO,
    ) -> None:
        """Render one service and append it to ``sink``.

        Args:
            service: The service to render.
            proto_base_name: Base name of the source proto file.
            out_file_name: Name returned by ``file_name`` for that file.
            sink: Open binary stream. Must be left open.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
