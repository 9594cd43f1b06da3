"""
Source file abstraction: raw text plus byte <-> character offset conversion.

Structure nodes and syntax tokens are addressed in UTF-8 bytes, while
pattern matching and reported locations use character offsets. Every
conversion goes through this module and returns ``None`` when the input does
not land on character boundaries inside the file.
"""

from __future__ import annotations

from bisect import bisect_right
from pathlib import Path
from typing import List, Optional, Tuple

from .node_types import ByteRange, CharRange, Location, StructureNode


class SourceFile:
    """In-memory snapshot of one Swift file."""

    def __init__(self, contents: str, path: Optional[str] = None):
        self.contents = contents
        self.path = path
        # byte offset at which each character starts, plus the total byte length
        self._byte_starts: List[int] = []
        total = 0
        for ch in contents:
            self._byte_starts.append(total)
            total += len(ch.encode("utf-8"))
        self._byte_starts.append(total)
        self._line_starts: List[int] = [0]
        for idx, ch in enumerate(contents):
            if ch == "\n":
                self._line_starts.append(idx + 1)
        self._tree = None
        self._syntax_map = None
        self._structure: Optional[Tuple[StructureNode, ...]] = None

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceFile":
        p = Path(path)
        return cls(p.read_text(encoding="utf-8"), path=str(p))

    @property
    def byte_length(self) -> int:
        return self._byte_starts[-1]

    # ---- lazily built collaborators ----
    @property
    def tree(self):
        if self._tree is None:
            from .parsing import parse_source

            self._tree = parse_source(self.contents.encode("utf-8"))
        return self._tree

    @property
    def syntax_map(self):
        if self._syntax_map is None:
            from .syntax_map import SyntaxMap

            self._syntax_map = SyntaxMap.from_file(self)
        return self._syntax_map

    @property
    def structure(self) -> Tuple[StructureNode, ...]:
        if self._structure is None:
            from .structure import parse_structure

            self._structure = parse_structure(self)
        return self._structure

    # ---- offset conversion ----
    def byte_offset_to_char_offset(self, byte_offset: int) -> Optional[int]:
        if byte_offset < 0 or byte_offset > self.byte_length:
            return None
        idx = bisect_right(self._byte_starts, byte_offset) - 1
        if idx < 0 or self._byte_starts[idx] != byte_offset:
            return None
        return idx

    def char_offset_to_byte_offset(self, char_offset: int) -> Optional[int]:
        if char_offset < 0 or char_offset > len(self.contents):
            return None
        return self._byte_starts[char_offset]

    def byte_range_to_char_range(self, start: int, length: int) -> Optional[CharRange]:
        if length < 0:
            return None
        first = self.byte_offset_to_char_offset(start)
        last = self.byte_offset_to_char_offset(start + length)
        if first is None or last is None:
            return None
        return CharRange(first, last - first)

    def char_range_to_byte_range(self, start: int, length: int) -> Optional[ByteRange]:
        if length < 0:
            return None
        first = self.char_offset_to_byte_offset(start)
        last = self.char_offset_to_byte_offset(start + length)
        if first is None or last is None:
            return None
        return ByteRange(first, last - first)

    def substring(self, char_range: CharRange) -> str:
        return self.contents[char_range.start:char_range.end]

    def substring_with_byte_range(self, start: int, length: int) -> Optional[str]:
        char_range = self.byte_range_to_char_range(start, length)
        if char_range is None:
            return None
        return self.substring(char_range)

    # ---- locations ----
    def line_of(self, char_offset: int) -> int:
        """1-based line containing ``char_offset``."""
        return bisect_right(self._line_starts, char_offset)

    def location(self, char_offset: int) -> Location:
        line = self.line_of(char_offset)
        column = char_offset - self._line_starts[line - 1] + 1
        return Location(path=self.path, line=line, character=column)
