"""
Tree-sitter access for Swift source.

One parser is built per process from tree-sitter-language-pack's Swift
grammar and reused for every file.
"""

from __future__ import annotations

from functools import lru_cache

from tree_sitter import Parser, Tree
from tree_sitter_language_pack import get_language


@lru_cache(maxsize=1)
def get_parser() -> Parser:
    return Parser(get_language("swift"))


def parse_source(source: bytes) -> Tree:
    """Parse UTF-8 encoded Swift source; node offsets are bytes into ``source``."""
    return get_parser().parse(source)
