"""
Service extractor — walk a parsed proto tree into service descriptions.

The walk follows the parser's positional tree shape:

    proto
      <top-level node>              any child with children
        <potential entity>          first grandchild
          'service' <name> '{' <rpc | option | ';' | comment>* '}'

Inside an ``rpc`` node the name, request type and response type sit at
fixed child offsets. The offsets are kept on ``ServiceDecl`` / ``RpcDecl``
so a grammar change only has to be reflected in one place. When a node
carries grammar kinds, every slot is checked before it is read: an rpc
that does not have the expected shape (a streaming rpc) is skipped with
a warning rather than misread, and non-rpc elements such as service
options are ignored.

Pure logic — never raises for an odd tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from protostub.core.models.service import MethodDescription, ServiceDescription
from protostub.core.models.syntax import SyntaxNode

logger = logging.getLogger(__name__)

SERVICE_KEYWORD = "service"


@dataclass(frozen=True)
class ServiceDecl:
    """Typed view over a ``service_def`` node."""

    node: SyntaxNode

    NAME_INDEX = 1
    FIRST_ELEMENT_INDEX = 3   # after 'service', name and '{'

    @classmethod
    def match(cls, entity: SyntaxNode) -> ServiceDecl | None:
        keyword = entity.child(0)
        if keyword is None or keyword.text != SERVICE_KEYWORD:
            return None
        return cls(entity)

    @property
    def name(self) -> str | None:
        name = self.node.child(self.NAME_INDEX)
        if name is None or not name.text:
            return None
        return name.text

    @property
    def elements(self) -> tuple[SyntaxNode, ...]:
        return self.node.children[self.FIRST_ELEMENT_INDEX:]


@dataclass(frozen=True)
class RpcDecl:
    """Typed view over an ``rpc`` node.

    ``rpc Name ( Request ) returns ( Response ) ;``
      0    1   2    3    4    5     6     7    8 9
    """

    node: SyntaxNode

    NAME_INDEX = 1
    REQUEST_TYPE_INDEX = 3
    RESPONSE_TYPE_INDEX = 7

    KIND = "rpc"
    SLOT_KINDS = {
        NAME_INDEX: "rpc_name",
        REQUEST_TYPE_INDEX: "message_type",
        RESPONSE_TYPE_INDEX: "message_type",
    }

    def problem(self) -> str | None:
        """Why this node cannot be read as an rpc, or None if it can."""
        for index, kind in self.SLOT_KINDS.items():
            slot = self.node.child(index)
            if slot is None:
                return f"missing child at position {index}"
            if self.node.kind and slot.kind != kind:
                return f"expected {kind} at position {index}, found {slot.kind or slot.text!r}"
        return None

    @property
    def name(self) -> str:
        return self._slot_text(self.NAME_INDEX)

    @property
    def request_type(self) -> str:
        return self._slot_text(self.REQUEST_TYPE_INDEX)

    @property
    def response_type(self) -> str:
        return self._slot_text(self.RESPONSE_TYPE_INDEX)

    def _slot_text(self, index: int) -> str:
        slot = self.node.child(index)
        return slot.text if slot is not None else ""


def extract_services(tree: SyntaxNode) -> list[ServiceDescription]:
    """Collect every service declared at the top level of a proto tree.

    Returns an empty list when the file declares no services.
    """
    descriptions: list[ServiceDescription] = []

    for child in tree.children:
        if not child.has_children:
            continue

        entity = child.children[0]
        if not entity.has_children:
            continue

        decl = ServiceDecl.match(entity)
        if decl is None:
            continue

        name = decl.name
        if name is None:
            logger.warning("Skipping service without a name (line %s)", entity.line)
            continue

        descriptions.append(
            ServiceDescription(name=name, methods=tuple(_extract_methods(decl)))
        )

    return descriptions


def _extract_methods(decl: ServiceDecl) -> list[MethodDescription]:
    methods: list[MethodDescription] = []
    comments: list[str] = []

    for element in decl.elements:
        if not element.has_children:
            if element.is_comment:
                comments.append(extract_comment_text(element.value))
            continue

        if element.kind and element.kind != RpcDecl.KIND:
            logger.debug("Ignoring %s in service %s", element.kind, decl.name)
            comments.clear()
            continue

        rpc = RpcDecl(element)
        problem = rpc.problem()
        if problem is None and not rpc.name:
            problem = "empty method name"
        if problem is not None:
            logger.warning(
                "Skipping element of service %s (line %s): %s",
                decl.name, element.line, problem,
            )
            comments.clear()
            continue

        methods.append(
            MethodDescription(
                name=rpc.name,
                request_type=rpc.request_type,
                response_type=rpc.response_type,
                comments=tuple(c for c in comments if c),
            )
        )
        comments.clear()

    return methods


def extract_comment_text(raw: str) -> str:
    """Strip comment markers, keeping the comment's inner text.

    ``/** Says hello. */`` → ``Says hello.``; block comments keep their
    line breaks with the leading ``*`` gutter removed.
    """
    text = raw.strip()
    if text.startswith("//"):
        return text.lstrip("/").strip()

    text = text.removeprefix("/**").removeprefix("/*").removesuffix("*/")
    lines = [line.strip().removeprefix("*").strip() for line in text.splitlines()]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)
