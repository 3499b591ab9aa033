"""
Python writer — router-backed Python service classes.

Each proto service becomes a ``<Name>Service`` class whose methods
forward requests through a router connection to the grpc stub generated
by ``grpc_tools.protoc`` (``<proto>_pb2_grpc.<Name>Stub``).
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from protostub.adapters.base import ServiceWriter
from protostub.core.models.service import MethodDescription, ServiceDescription

logger = logging.getLogger(__name__)

TAB = "    "


def module_name(proto_base_name: str) -> str:
    """Python-safe module name for a proto base name (``my-api`` → ``my_api``)."""
    return proto_base_name.replace("-", "_")


class PythonServiceWriter(ServiceWriter):
    """Python service classes wrapping grpc stubs behind a router."""

    def file_name(self, proto_base_name: str) -> str:
        return f"{module_name(proto_base_name)}_service.py"

    def write(
        self,
        service: ServiceDescription,
        proto_base_name: str,
        out_file_name: str,
        sink: BinaryIO,
    ) -> None:
        text = self.render(service, proto_base_name)
        if _has_content(sink):
            text = "\n\n" + text
        sink.write(text.encode("utf-8"))
        logger.debug(
            "Wrote %s (%d methods) to %s", service.name, len(service.methods), out_file_name,
        )

    def render(self, service: ServiceDescription, proto_base_name: str) -> str:
        """Source text for one service class."""
        class_name = f"{service.name}Service"
        lines = [
            f"from . import {module_name(proto_base_name)}_pb2_grpc as importStub",
            "",
            f"class {class_name}(object):",
            "",
            f"{TAB}def __init__(self, router):",
            f"{TAB}{TAB}self.connector = router.__get__connection("
            f"{class_name}, importStub.{service.name}Stub)",
        ]
        for method in service.methods:
            lines.append("")
            lines.extend(_render_method(method))
        return "\n".join(lines) + "\n"


def _render_method(method: MethodDescription) -> list[str]:
    lines = [f"{TAB}def {method.name}(self, request):"]
    if method.comments:
        lines.extend(_docstring(method.comments, indent=TAB * 2))
    lines.append(f'{TAB}{TAB}self.connector.createRequest("{method.name}", request)')
    return lines


def _docstring(comments: tuple[str, ...], indent: str) -> list[str]:
    body = "\n".join(comments).replace("\\", "\\\\").replace('"', '\\"')
    doc_lines = body.splitlines()
    if len(doc_lines) == 1:
        return [f'{indent}"""{doc_lines[0]}"""']
    out = [f'{indent}"""{doc_lines[0]}']
    out.extend(f"{indent}{line}" if line else "" for line in doc_lines[1:])
    out.append(f'{indent}"""')
    return out


def _has_content(sink: BinaryIO) -> bool:
    try:
        return sink.tell() > 0
    except (OSError, ValueError):
        return False
