"""
Value types shared by the structure provider, the syntax map and the rule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ExpressionKind(Enum):
    """Kinds of structure nodes the provider reports."""
    CLOSURE = "closure"
    CALL = "call"
    ARRAY = "array"
    DICTIONARY = "dictionary"
    BLOCK = "block"


class SyntaxKind(Enum):
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    STRING = "string"
    STRING_INTERPOLATION_ANCHOR = "string_interpolation_anchor"
    NUMBER = "number"
    COMMENT = "comment"
    ATTRIBUTE = "attribute"
    POUND_DIRECTIVE = "pound_directive"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"


class Severity(Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ByteRange:
    """Half-open range over UTF-8 byte offsets."""
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class CharRange:
    """Half-open range over character (code point) offsets."""
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class SyntaxToken:
    kind: SyntaxKind
    offset: int  # bytes
    length: int  # bytes

    @property
    def byte_range(self) -> ByteRange:
        return ByteRange(self.offset, self.length)


@dataclass(frozen=True)
class StructureNode:
    """One node of the structure tree; offsets and lengths are in bytes."""
    kind: ExpressionKind
    offset: int
    length: int
    substructure: Tuple["StructureNode", ...] = field(default_factory=tuple)

    @property
    def first_child_offset(self) -> Optional[int]:
        if not self.substructure:
            return None
        return self.substructure[0].offset


@dataclass(frozen=True)
class CaptureList:
    """Raw text between the capture-list brackets and where it sits in the file."""
    text: str
    span: CharRange


@dataclass(frozen=True)
class CaptureEntry:
    reference_name: str
    offset_within_list: int  # first non-whitespace character of the entry
    name_offset_within_list: int  # first character of reference_name


@dataclass(frozen=True)
class Location:
    path: Optional[str]
    line: int  # 1-based
    character: int  # 1-based column

    def __str__(self) -> str:
        return f"{self.path or '<nopath>'}:{self.line}:{self.character}"


@dataclass(frozen=True)
class StyleViolation:
    rule_id: str
    rule_name: str
    reference_name: str
    character_offset: int
    severity: Severity
    reason: str
    location: Location


def walk(nodes: Tuple[StructureNode, ...] | List[StructureNode]):
    """Yield every node depth-first, parents before children."""
    for node in nodes:
        yield node
        yield from walk(node.substructure)
