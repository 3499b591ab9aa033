"""
Syntax node — generic ordered tree produced by the proto parser.

Every node carries its grammar production (``kind``) and an ordered
tuple of children. Leaves carry the raw token text in ``value``.
Consumers read structure positionally, so child order always matches
source order.
"""

from __future__ import annotations

from dataclasses import dataclass

COMMENT_KIND = "COMMENT"


@dataclass(frozen=True)
class SyntaxNode:
    """A node of a parsed proto file.

    Attributes:
        kind:     Grammar rule name for inner nodes, terminal type for
                  leaves (``COMMENT`` for re-inserted comments). Empty
                  when the producer has no kind information.
        value:    Token text (leaves only).
        children: Ordered child nodes.
        line:     1-based source line, if known.
    """

    kind: str = ""
    value: str = ""
    children: tuple[SyntaxNode, ...] = ()
    line: int | None = None

    @classmethod
    def leaf(cls, value: str, kind: str = "", line: int | None = None) -> SyntaxNode:
        return cls(kind=kind, value=value, line=line)

    @classmethod
    def tree(cls, kind: str, *children: SyntaxNode, line: int | None = None) -> SyntaxNode:
        return cls(kind=kind, children=tuple(children), line=line)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def is_comment(self) -> bool:
        if self.kind == COMMENT_KIND:
            return True
        if self.children:
            return False
        raw = self.value.strip()
        return (raw.startswith("/*") and raw.endswith("*/")) or raw.startswith("//")

    @property
    def text(self) -> str:
        """Concatenated token text of the subtree, comments excluded.

        Tokens are joined without separators: ``.pkg.Reply`` stays
        ``.pkg.Reply`` and a whole ``rpc`` node reads as
        ``rpcSay(Req)returns(Resp);``.
        """
        if not self.children:
            return "" if self.is_comment else self.value
        return "".join(child.text for child in self.children)

    def child(self, index: int) -> SyntaxNode | None:
        """Child at ``index``, or None when out of range."""
        if 0 <= index < len(self.children):
            return self.children[index]
        return None

