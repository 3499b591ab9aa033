"""
Proto parser — turn proto3 source text into a generic syntax tree.

Uses a lark LALR grammar that keeps every token, so the resulting
``SyntaxNode`` tree has a stable positional shape:

    proto
      top_level_def
        service_def: 'service' service_name '{' (rpc | option | ';' | COMMENT)* '}'
          rpc: 'rpc' rpc_name '(' message_type ')' 'returns' '(' message_type ')' ';'

Message, enum and extend bodies and option values are parsed as opaque
balanced blocks. Comments are dropped by the grammar but collected by a
lexer callback; comments that sit inside a service body are woven back
into the service's children as ``COMMENT`` leaves.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from lark import Lark, Token, Tree
from lark.exceptions import LarkError, UnexpectedInput

from protostub.core.models.syntax import COMMENT_KIND, SyntaxNode

logger = logging.getLogger(__name__)

PROTO_GRAMMAR = r"""
proto: _item*

_item: syntax
     | edition
     | import_statement
     | package_statement
     | option_statement
     | top_level_def
     | empty_statement

syntax: "syntax" "=" STRING ";"
edition: "edition" "=" STRING ";"
import_statement: "import" ("weak" | "public")? STRING ";"
package_statement: "package" full_ident ";"
option_statement: "option" (WORD | STRING | block)+ ";"
empty_statement: ";"

top_level_def: message_def
             | enum_def
             | extend_def
             | service_def

message_def: "message" IDENT block
enum_def: "enum" IDENT block
extend_def: "extend" full_ident block

service_def: "service" service_name "{" (rpc | option_statement | ";")* "}"
service_name: IDENT

rpc: "rpc" rpc_name "(" "stream"? message_type ")" "returns" "(" "stream"? message_type ")" (block | ";")
rpc_name: IDENT
message_type: "."? IDENT ("." IDENT)*

full_ident: IDENT ("." IDENT)*

block: "{" (WORD | STRING | ";" | block)* "}"

IDENT: /[A-Za-z_][A-Za-z0-9_]*/
STRING: /"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*'/
WORD: /(?:[^\s;{}"'\/]|\/(?![\/*]))+/
COMMENT.2: /\/\/[^\n]*|\/\*[\s\S]*?\*\//

%import common.WS
%ignore WS
%ignore COMMENT
"""


class ProtoParseError(Exception):
    """Raised when a proto file cannot be read or does not match the grammar."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        location = source or "<input>"
        if line is not None and line > 0:
            location += f":{line}"
            if column is not None and column > 0:
                location += f":{column}"
        super().__init__(f"{location}: {message}")
        self.message = message
        self.source = source
        self.line = line
        self.column = column


class ProtoParser:
    """Reusable parser instance.

    Building the LALR tables is the expensive part, so one instance is
    shared by ``parse_proto``. Not safe for concurrent use: comments are
    collected into an instance buffer during each parse.
    """

    def __init__(self) -> None:
        self._comments: list[Token] = []
        self._lark = Lark(
            PROTO_GRAMMAR,
            start="proto",
            parser="lalr",
            lexer="contextual",
            keep_all_tokens=True,
            propagate_positions=True,
            lexer_callbacks={"COMMENT": self._comments.append},
        )

    def parse(self, text: str, source: str | None = None) -> SyntaxNode:
        """Parse proto source text into a ``SyntaxNode`` tree.

        Raises:
            ProtoParseError: If the text does not match the grammar.
        """
        self._comments.clear()
        try:
            tree = self._lark.parse(text)
        except UnexpectedInput as e:
            raise ProtoParseError(
                _describe(e), source=source, line=e.line, column=e.column,
            ) from e
        except LarkError as e:
            raise ProtoParseError(str(e), source=source) from e

        comments = list(self._comments)
        self._comments.clear()
        return _convert(tree, comments)


def _describe(error: UnexpectedInput) -> str:
    token = getattr(error, "token", None)
    if token is not None and getattr(token, "type", "") == "$END":
        return "unexpected end of input"
    if token is not None:
        return f"unexpected token {str(token)!r}"
    char = getattr(error, "char", None)
    if char is not None:
        return f"unexpected character {char!r}"
    return "syntax error"


def _start_pos(node: Tree | Token) -> int:
    if isinstance(node, Token):
        return node.start_pos or 0
    return getattr(node.meta, "start_pos", 0)


def _convert(node: Tree | Token, comments: list[Token]) -> SyntaxNode:
    if isinstance(node, Token):
        return SyntaxNode.leaf(str(node), kind=node.type, line=node.line)

    children = [_convert(child, comments) for child in node.children]
    if node.data == "service_def":
        children = _weave_comments(node, children, comments)

    line = None if node.meta.empty else node.meta.line
    return SyntaxNode(kind=str(node.data), children=tuple(children), line=line)


def _end_pos(node: Tree | Token) -> int:
    if isinstance(node, Token):
        return node.end_pos or 0
    return getattr(node.meta, "end_pos", 0)


def _end_line(node: Tree | Token) -> int | None:
    if isinstance(node, Token):
        return node.end_line
    return getattr(node.meta, "end_line", None)


def _weave_comments(
    node: Tree, children: list[SyntaxNode], comments: list[Token]
) -> list[SyntaxNode]:
    """Insert the comments found between service elements at their source position.

    Only comments that stand on their own lines are kept. A comment that
    sits inside an element (an rpc option block) belongs to that element,
    and a comment trailing an element or the opening brace on the same
    line describes what precedes it; neither is re-inserted.
    """
    raw = node.children
    # raw[2] is '{', raw[-1] is '}'
    body_start = raw[2].end_pos
    body_end = raw[-1].start_pos
    elements = raw[2:-1]

    inner = [
        c for c in comments
        if body_start <= c.start_pos < body_end and _stands_alone(c, elements)
    ]
    if not inner:
        return children

    items = [(_start_pos(r), child) for r, child in zip(raw, children)]
    items += [
        (c.start_pos, SyntaxNode.leaf(str(c), kind=COMMENT_KIND, line=c.line))
        for c in inner
    ]
    items.sort(key=lambda item: item[0])
    return [child for _, child in items]


def _stands_alone(comment: Token, elements: list[Tree | Token]) -> bool:
    previous = None
    for element in elements:
        start, end = _start_pos(element), _end_pos(element)
        if start <= comment.start_pos < end:
            return False
        if end <= comment.start_pos:
            previous = element
    return previous is None or _end_line(previous) != comment.line


@lru_cache(maxsize=1)
def default_parser() -> ProtoParser:
    """Process-wide parser, built on first use."""
    return ProtoParser()


def parse_proto(text: str, source: str | None = None) -> SyntaxNode:
    """Parse proto source text.

    Args:
        text: Proto source.
        source: Optional name used in error messages.

    Raises:
        ProtoParseError: On a grammar mismatch.
    """
    return default_parser().parse(text, source=source)


def parse_proto_file(path: Path) -> SyntaxNode:
    """Read and parse a proto file.

    Raises:
        ProtoParseError: If the file cannot be read, is not UTF-8,
            or does not match the grammar.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ProtoParseError(f"not valid UTF-8: {e.reason}", source=str(path)) from e
    except OSError as e:
        raise ProtoParseError(f"cannot read file: {e}", source=str(path)) from e

    tree = parse_proto(text, source=str(path))
    logger.debug("Parsed %s: %d top-level nodes", path, len(tree.children))
    return tree
