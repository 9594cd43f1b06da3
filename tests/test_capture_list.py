from __future__ import annotations

import pytest

from capturelint.capture_list import (
    DESCRIPTION,
    SeverityConfiguration,
    UnusedCaptureListRule,
    capture_list_search_range,
    extract_capture_list,
    parse_capture_entries,
)
from capturelint.linter import lint_file, lint_source
from capturelint.node_types import CaptureEntry, CharRange, ExpressionKind, Severity, StructureNode, walk
from capturelint.source_file import SourceFile
from capturelint.syntax_map import SyntaxMapError


def _strip_markers(example: str):
    """Remove ↓ markers, returning the clean text and the marked offsets."""
    out: list[str] = []
    offsets: list[int] = []
    for ch in example:
        if ch == "↓":
            offsets.append(len(out))
        else:
            out.append(ch)
    return "".join(out), offsets


def _names(src: str) -> list[str]:
    return [v.reference_name for v in lint_source(src)]


def _closure(f: SourceFile) -> StructureNode:
    return next(n for n in walk(f.structure) if n.kind is ExpressionKind.CLOSURE)


# ---- entry parsing ----

def test_parse_entries_strips_qualifiers_and_alias_targets():
    text = "weak self, unowned delegate = self.delegate!"
    entries = parse_capture_entries(text)
    assert entries == [
        CaptureEntry(reference_name="self", offset_within_list=0, name_offset_within_list=5),
        CaptureEntry(reference_name="delegate", offset_within_list=11, name_offset_within_list=19),
    ]
    assert text[19:27] == "delegate"


def test_parse_entries_skips_blank_items_without_shifting_offsets():
    text = "a, , b,"
    entries = parse_capture_entries(text)
    assert [(e.reference_name, e.offset_within_list) for e in entries] == [("a", 0), ("b", 5)]


def test_parse_entries_handles_parenthesised_qualifier_and_malformed_items():
    entries = parse_capture_entries("unowned(unsafe) x,  = foo, weak\ty")
    assert [e.reference_name for e in entries] == ["x", "y"]


# ---- boundary resolver and extractor ----

def test_search_range_stops_at_first_child():
    f = SourceFile("{ [weak self] num in self?.handle(num) }")
    closure = _closure(f)
    window = capture_list_search_range(f, closure)
    assert f.substring(window) == "{ [weak self] num in "


def test_search_range_without_children_covers_whole_closure():
    f = SourceFile("{ [foo] in bar }")
    closure = _closure(f)
    assert f.substring(capture_list_search_range(f, closure)) == "{ [foo] in bar }"


def test_extract_capture_list_span():
    f = SourceFile("x = { [weak self] in self }")
    cl = extract_capture_list(f, CharRange(4, 23))
    assert cl.text == "weak self"
    assert cl.span == CharRange(7, 9)


def test_extract_capture_list_allows_whitespace_before_brace():
    f = SourceFile("x =  { [a] in }")
    cl = extract_capture_list(f, CharRange(3, 12))
    assert cl.text == "a"
    assert cl.span == CharRange(8, 1)


def test_extract_capture_list_requires_match_at_window_start():
    f = SourceFile("{ foo([a]) }")
    assert extract_capture_list(f, CharRange(0, len(f.contents))) is None


def test_extract_capture_list_rejects_blank_list():
    f = SourceFile("{ [  ] in }")
    assert extract_capture_list(f, CharRange(0, len(f.contents))) is None


# ---- scenarios ----

def test_used_via_optional_chaining():
    assert lint_source("{ [weak self] num in self?.handle(num) }") == []


def test_unused_self_is_reported_at_the_name():
    src = "{ [weak self] num in print(num) }"
    (v,) = lint_source(src)
    assert v.reference_name == "self"
    assert v.character_offset == 8
    assert src[v.character_offset:v.character_offset + 4] == "self"
    assert v.reason == "Unused reference self in a capture list should be removed."
    assert v.rule_id == "unused_capture_list"
    assert v.severity is Severity.WARNING


def test_alias_reported_by_bound_name_only():
    src = "{ [weak self, unowned delegate = self.delegate!] foo in self?.handle(foo) }"
    (v,) = lint_source(src)
    assert v.reference_name == "delegate"
    assert src[v.character_offset:].startswith("delegate =")


def test_immediately_invoked_closure():
    assert _names("{ [foo] in _ }()") == ["foo"]


def test_closure_with_parameter_clause_after_capture_list():
    src = "{ [weak self](num) in print(num) }"
    (v,) = lint_source(src)
    assert v.reference_name == "self"
    assert v.character_offset == 8


def test_parameter_clause_with_several_parameters():
    assert _names("{ [foo](a, b) in print(a) }") == ["foo"]


def test_trailing_closure_after_init_reference():
    src = "Foo.init { [weak self] in print(1) }"
    (v,) = lint_source(src)
    assert v.reference_name == "self"
    assert src[v.character_offset:v.character_offset + 4] == "self"


def test_empty_brackets():
    assert lint_source("{ [] in doSomething() }") == []


def test_array_literal_at_closure_start_is_not_a_capture_list():
    assert lint_source("sizes.max().flatMap { [(offset: offset, size: $0)] } ?? []") == []


# ---- properties ----

def test_nested_capture_lists_are_checked_separately():
    src = (
        "{ [foo] in\n"
        "    [a].forEach { [weak b] in print(a) }\n"
        "}"
    )
    violations = lint_source(src)
    assert [v.reference_name for v in violations] == ["foo", "b"]
    assert [(v.location.line, v.location.character) for v in violations] == [(1, 4), (2, 25)]


def test_nested_array_never_taken_as_outer_capture_list():
    src = "{\n    [a].forEach { [weak b] in print(b) }\n}"
    assert lint_source(src) == []


def test_violations_keep_capture_list_order():
    assert _names("{ [a, b, c] in print(b) }") == ["a", "c"]


def test_usage_is_lexical():
    # a nested closure rebinding the name still counts as a use
    assert lint_source("{ [foo] in bar { foo in print(foo) } }") == []


def test_use_inside_string_interpolation():
    assert lint_source('{ [weak self] in print("\\(self)") }') == []


def test_name_in_plain_string_or_comment_is_not_a_use():
    assert _names('{ [weak self] in print("self") // self\n}') == ["self"]


def test_nested_brackets_in_capture_list_are_not_supported():
    assert lint_source("{ [xs = [1, 2]] in print(1) }") == []


def test_idempotent():
    src = "{ [weak self, unowned delegate = self.delegate!] foo in print(foo) }"
    assert lint_source(src) == lint_source(src)


def test_offsets_after_multibyte_characters():
    src = 'let s = "héllo"\n[1].map { [weak self] n in print(n) }'
    (v,) = lint_source(src)
    assert src[v.character_offset:v.character_offset + 4] == "self"
    assert (v.location.line, v.location.character) == (2, 17)


# ---- rule contract ----

def test_non_closure_nodes_are_ignored():
    f = SourceFile("{ [foo] in bar }")
    closure = _closure(f)
    rule = UnusedCaptureListRule()
    assert rule.validate(f, ExpressionKind.CALL, closure) == []
    assert len(rule.validate(f, ExpressionKind.CLOSURE, closure)) == 1


def test_inconsistent_node_offsets_fail_open():
    f = SourceFile('"é" { [foo] in bar }')
    rule = UnusedCaptureListRule()
    assert rule.validate(f, ExpressionKind.CLOSURE, StructureNode(ExpressionKind.CLOSURE, 0, 999)) == []
    # starts in the middle of "é"
    assert rule.validate(f, ExpressionKind.CLOSURE, StructureNode(ExpressionKind.CLOSURE, 2, 4)) == []


class _FailingSyntaxMap:
    def tokens_in_byte_range(self, byte_range):
        raise SyntaxMapError("unavailable")


def test_tokenizer_failure_yields_no_violations():
    f = SourceFile("{ [foo] in bar }")
    closure = _closure(f)
    f._syntax_map = _FailingSyntaxMap()
    assert UnusedCaptureListRule().validate(f, ExpressionKind.CLOSURE, closure) == []


def test_lint_file_runs_rule_over_every_node():
    f = SourceFile("run { [foo] in\n    [1].map { [weak self] n in n }\n}", path="A.swift")
    violations = lint_file(f, UnusedCaptureListRule())
    assert [v.reference_name for v in violations] == ["foo", "self"]
    assert [v.location.path for v in violations] == ["A.swift", "A.swift"]


def test_configured_severity_is_applied():
    f = SourceFile("{ [foo] in bar }")
    closure = _closure(f)
    rule = UnusedCaptureListRule(SeverityConfiguration(Severity.ERROR))
    (v,) = rule.validate(f, closure.kind, closure)
    assert v.severity is Severity.ERROR


# ---- rule examples ----

@pytest.mark.parametrize("example", DESCRIPTION.non_triggering_examples)
def test_non_triggering_examples(example):
    assert lint_source(example) == []


@pytest.mark.parametrize("example", DESCRIPTION.triggering_examples)
def test_triggering_examples(example):
    src, expected = _strip_markers(example)
    assert [v.character_offset for v in lint_source(src)] == expected
