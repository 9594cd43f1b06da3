"""
Unused capture list rule.

Flags names declared in a closure's capture list that the closure body never
mentions. "Mentions" is lexical: any identifier or keyword token with the same
spelling anywhere in the body counts as a use, even one bound by a nested
scope.

Per closure:
  1. bound the search window to the text before the first nested construct
  2. match ``{ [ ... ]`` anchored at the window start
  3. split the list into entries, stripping qualifiers and alias targets
  4. collect the body's identifier/keyword spellings and report the rest

Capture lists whose entries contain ``]`` (for example an array-valued alias)
do not match and produce no findings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from .node_types import (
    ByteRange,
    CaptureEntry,
    CaptureList,
    CharRange,
    ExpressionKind,
    Severity,
    StructureNode,
    StyleViolation,
    SyntaxKind,
)
from .syntax_map import SyntaxMapError

CAPTURE_LIST_RE = re.compile(r"\s*\{\s*\[([^\]]+)\]")


@dataclass(frozen=True)
class SeverityConfiguration:
    severity: Severity = Severity.WARNING


@dataclass(frozen=True)
class RuleDescription:
    identifier: str
    name: str
    description: str
    kind: str
    min_swift_version: str
    non_triggering_examples: Tuple[str, ...] = field(default_factory=tuple)
    triggering_examples: Tuple[str, ...] = field(default_factory=tuple)


DESCRIPTION = RuleDescription(
    identifier="unused_capture_list",
    name="Unused Capture List",
    description="Unused reference in a capture list should be removed.",
    kind="lint",
    min_swift_version="4.2",
    non_triggering_examples=(
        "[1, 2].map { [weak self] num in\n"
        "    self?.handle(num)\n"
        "}",
        "let failure: Failure = { [weak self, unowned delegate = self.delegate!] foo in\n"
        "    delegate.handle(foo, self)\n"
        "}",
        "numbers.forEach({\n"
        "    [weak handler] in\n"
        "    handler?.handle($0)\n"
        "})",
        "withEnvironment(apiService: MockService(fetchProjectResponse: project)) {\n"
        "    [Device.phone4_7inch, Device.phone5_8inch, Device.pad].forEach { device in\n"
        "        device.handle()\n"
        "    }\n"
        "}",
        "{ [foo] _ in foo.bar() }()",
        "sizes.max().flatMap { [(offset: offset, size: $0)] } ?? []",
        "[1, 2].map { [weak self] num in\n"
        '    print("\\(self) handled \\(num)")\n'
        "}",
    ),
    triggering_examples=(
        "[1, 2].map { [weak ↓self] num in\n"
        "    print(num)\n"
        "}",
        "let failure: Failure = { [weak self, unowned ↓delegate = self.delegate!] foo in\n"
        "    self?.handle(foo)\n"
        "}",
        "let failure: Failure = { [weak ↓self, unowned ↓delegate = self.delegate!] foo in\n"
        "    print(foo)\n"
        "}",
        "numbers.forEach({\n"
        "    [weak ↓handler] in\n"
        "    print($0)\n"
        "})",
        "withEnvironment(apiService: MockService(fetchProjectResponse: project)) { [↓foo] in\n"
        "    [Device.phone4_7inch, Device.phone5_8inch, Device.pad].forEach { device in\n"
        "        device.handle()\n"
        "    }\n"
        "}",
        "{ [↓foo] in _ }()",
    ),
)


def capture_list_search_range(file, node: StructureNode) -> Optional[CharRange]:
    """Character range from the closure start to its first child (or its end)."""
    first_child = node.first_child_offset
    if first_child is None:
        first_child = node.offset + node.length
    return file.byte_range_to_char_range(node.offset, first_child - node.offset)


def extract_capture_list(file, search_range: CharRange) -> Optional[CaptureList]:
    match = CAPTURE_LIST_RE.match(file.contents, search_range.start, search_range.end)
    if match is None:
        return None
    text = match.group(1)
    if not text.strip():
        return None
    return CaptureList(text=text, span=CharRange(match.start(1), len(text)))


def parse_capture_entries(capture_list: str) -> List[CaptureEntry]:
    """Split a capture list into entries, left to right.

    ``unowned(safe) delegate = self.delegate!`` binds ``delegate``: the part
    after ``=`` is ignored and the last word before it is the name.
    """
    entries: List[CaptureEntry] = []
    location_offset = 0
    for item in capture_list.split(","):
        item_offset = location_offset
        location_offset += len(item) + 1  # 1 for comma
        stripped = item.lstrip()
        if not stripped:
            continue
        declaration = item.split("=", 1)[0].rstrip()
        words = declaration.split()
        if not words:
            continue
        reference = words[-1]
        entries.append(
            CaptureEntry(
                reference_name=reference,
                offset_within_list=item_offset + len(item) - len(stripped),
                name_offset_within_list=item_offset + len(declaration) - len(reference),
            )
        )
    return entries


def identifier_strings(file, byte_range: ByteRange) -> Set[str]:
    identifiers: Set[str] = set()
    for token in file.syntax_map.tokens_in_byte_range(byte_range):
        if token.kind not in (SyntaxKind.IDENTIFIER, SyntaxKind.KEYWORD):
            continue
        spelling = file.substring_with_byte_range(token.offset, token.length)
        if spelling is not None:
            identifiers.add(spelling)
    return identifiers


class UnusedCaptureListRule:
    """Reports capture-list entries that the closure body never refers to."""

    description = DESCRIPTION

    def __init__(self, configuration: Optional[SeverityConfiguration] = None):
        self.configuration = configuration or SeverityConfiguration()

    def validate(self, file, kind: ExpressionKind, node: StructureNode) -> List[StyleViolation]:
        if kind is not ExpressionKind.CLOSURE:
            return []
        closure_range = file.byte_range_to_char_range(node.offset, node.length)
        if closure_range is None:
            return []
        search_range = capture_list_search_range(file, node)
        if search_range is None:
            return []
        capture_list = extract_capture_list(file, search_range)
        if capture_list is None:
            return []

        references = parse_capture_entries(capture_list.text)

        rest_start = capture_list.span.end + 1  # skip "]"
        rest_length = closure_range.end - rest_start
        rest_byte_range = file.char_range_to_byte_range(rest_start, rest_length)
        if rest_byte_range is None:
            return []
        try:
            identifiers = identifier_strings(file, rest_byte_range)
        except SyntaxMapError:
            return []
        return self._violations(file, references, identifiers, capture_list.span)

    def _violations(
        self,
        file,
        references: List[CaptureEntry],
        identifiers: Set[str],
        capture_list_span: CharRange,
    ) -> List[StyleViolation]:
        violations: List[StyleViolation] = []
        for entry in references:
            if entry.reference_name in identifiers:
                continue
            offset = capture_list_span.start + entry.name_offset_within_list
            violations.append(
                StyleViolation(
                    rule_id=self.description.identifier,
                    rule_name=self.description.name,
                    reference_name=entry.reference_name,
                    character_offset=offset,
                    severity=self.configuration.severity,
                    reason=f"Unused reference {entry.reference_name} in a capture list should be removed.",
                    location=file.location(offset),
                )
            )
        return violations
