"""
Violation reporters: Xcode-style lines and JSON.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

from .node_types import StyleViolation


def _xcode_line(v: StyleViolation) -> str:
    return (
        f"{v.location}: {v.severity.value}: {v.rule_name} Violation: {v.reason} ({v.rule_id})"
    )


def xcode_report(violations: List[StyleViolation]) -> str:
    return "\n".join(_xcode_line(v) for v in violations)


def violation_to_dict(v: StyleViolation) -> Dict[str, Any]:
    return {
        "file": v.location.path,
        "line": v.location.line,
        "character": v.location.character,
        "severity": v.severity.value.capitalize(),
        "type": v.rule_name,
        "rule_id": v.rule_id,
        "reason": v.reason,
    }


def json_report(violations: List[StyleViolation]) -> str:
    return json.dumps([violation_to_dict(v) for v in violations], ensure_ascii=False, indent=2)


REPORTERS = {
    "xcode": xcode_report,
    "json": json_report,
}


def generate_report(reporter: str, violations: List[StyleViolation]) -> str:
    try:
        render = REPORTERS[reporter]
    except KeyError:
        raise ValueError(f"Unknown reporter: {reporter}") from None
    return render(violations)


def summary_line(violations: List[StyleViolation], serious: int, files: int) -> str:
    noun = "violation" if len(violations) == 1 else "violations"
    file_noun = "file" if files == 1 else "files"
    return f"Done linting! Found {len(violations)} {noun}, {serious} serious in {files} {file_noun}."
