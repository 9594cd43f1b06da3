"""
Swift syntax map: a flat, ordered stream of classified tokens.

Tokens are the leaves of the tree-sitter parse tree, classified into
``SyntaxKind`` and addressed in UTF-8 bytes, the same coordinates tree-sitter
and the structure nodes use. Code inside string interpolations (``\\( ... )``)
is tokenized as ordinary code so names used only there still count as
identifiers.
"""

from __future__ import annotations

import re
from bisect import bisect_left
from typing import List

from .node_types import ByteRange, SyntaxKind, SyntaxToken

COMMENT_TYPES = frozenset({"comment", "multiline_comment"})
NUMBER_TYPES = frozenset({"integer_literal", "real_literal", "hex_literal", "oct_literal", "bin_literal"})
STRING_TYPES = frozenset({"line_string_literal", "multi_line_string_literal", "raw_string_literal"})
IDENTIFIER_TYPES = frozenset({"simple_identifier", "type_identifier"})
PUNCTUATION = frozenset({"(", ")", "[", "]", "{", "}", ",", ":", ";"})

WORD_RE = re.compile(r"[^\W\d]\w*|\$\w+")
INTERPOLATION_START_RE = re.compile(r"\\#*\(")


class SyntaxMapError(Exception):
    """Raised when the syntax map cannot answer a token query."""


class _TokenCollector:
    def __init__(self, source: bytes):
        self.source = source
        self.tokens: List[SyntaxToken] = []
        # whether the last emitted STRING token may still be extended
        self._string_open = False

    def _text(self, node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def _emit(self, kind: SyntaxKind, start: int, end: int) -> None:
        if end <= start:
            return
        if kind is SyntaxKind.STRING and self._string_open:
            last = self.tokens[-1]
            self.tokens[-1] = SyntaxToken(kind, last.offset, end - last.offset)
            return
        self.tokens.append(SyntaxToken(kind, start, end - start))
        self._string_open = kind is SyntaxKind.STRING

    def collect(self, root) -> List[SyntaxToken]:
        # (node, inside a string literal)
        stack = [(root, False)]
        while stack:
            node, in_string = stack.pop()
            if node.is_missing or node.end_byte <= node.start_byte:
                continue
            ntype = node.type
            if ntype in COMMENT_TYPES:
                self._emit(SyntaxKind.COMMENT, node.start_byte, node.end_byte)
                continue
            if ntype in NUMBER_TYPES:
                self._emit(SyntaxKind.NUMBER, node.start_byte, node.end_byte)
                continue
            if ntype == "regex_literal":
                self._string_open = False
                self._emit(SyntaxKind.STRING, node.start_byte, node.end_byte)
                self._string_open = False
                continue
            children = node.children
            if ntype == "attribute" and node.named_child_count:
                name = node.named_children[0]
                self._emit(SyntaxKind.ATTRIBUTE, node.start_byte, name.end_byte)
                rest = [c for c in children if c.start_byte >= name.end_byte]
                stack.extend((c, False) for c in reversed(rest))
                continue
            if ntype in STRING_TYPES:
                self._string_open = False
                in_string = True
            elif ntype == "interpolated_expression":
                in_string = False
                if children and self._is_interpolation_start(children[0]) and children[-1].type == ")":
                    # the closing paren belongs to the string, not the expression
                    stack.append((children[-1], True))
                    children = children[:-1]
            if children:
                stack.extend((c, in_string) for c in reversed(children))
                continue
            self._leaf(node, in_string)
        return self.tokens

    def _is_interpolation_start(self, node) -> bool:
        return not node.is_named and INTERPOLATION_START_RE.fullmatch(self._text(node)) is not None

    def _leaf(self, node, in_string: bool) -> None:
        start, end = node.start_byte, node.end_byte
        text = self._text(node)
        if in_string:
            if not node.is_named and (text == ")" or INTERPOLATION_START_RE.fullmatch(text)):
                self._emit(SyntaxKind.STRING_INTERPOLATION_ANCHOR, start, end)
            else:
                self._emit(SyntaxKind.STRING, start, end)
            return
        if node.type == "ERROR":
            return
        if self._is_interpolation_start(node):
            self._emit(SyntaxKind.STRING_INTERPOLATION_ANCHOR, start, end)
            return
        if node.type in IDENTIFIER_TYPES:
            if len(text) > 2 and text.startswith("`") and text.endswith("`"):
                # escaped identifier; the token covers the name only
                start, end = start + 1, end - 1
            self._emit(SyntaxKind.IDENTIFIER, start, end)
        elif WORD_RE.fullmatch(text):
            self._emit(SyntaxKind.KEYWORD, start, end)
        elif text.startswith("#"):
            self._emit(SyntaxKind.POUND_DIRECTIVE, start, end)
        elif text.startswith("@"):
            self._emit(SyntaxKind.ATTRIBUTE, start, end)
        elif text in PUNCTUATION:
            self._emit(SyntaxKind.PUNCTUATION, start, end)
        else:
            self._emit(SyntaxKind.OPERATOR, start, end)


class SyntaxMap:
    """Byte-addressed token stream for one file."""

    def __init__(self, tokens: List[SyntaxToken], byte_length: int):
        self.tokens = tokens
        self.byte_length = byte_length
        self._offsets = [t.offset for t in tokens]

    @classmethod
    def from_file(cls, file) -> "SyntaxMap":
        source = file.contents.encode("utf-8")
        tokens = _TokenCollector(source).collect(file.tree.root_node)
        return cls(tokens, file.byte_length)

    def tokens_in_byte_range(self, byte_range: ByteRange) -> List[SyntaxToken]:
        """Tokens whose first byte lies inside ``byte_range``."""
        if byte_range.start < 0 or byte_range.length < 0 or byte_range.end > self.byte_length:
            raise SyntaxMapError(
                f"byte range {byte_range.start}+{byte_range.length} outside file of {self.byte_length} bytes"
            )
        lo = bisect_left(self._offsets, byte_range.start)
        hi = bisect_left(self._offsets, byte_range.end)
        return self.tokens[lo:hi]
