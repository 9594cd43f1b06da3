"""
Lint driver: find Swift files, walk their structure and run the rule on every node.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

import fnmatch
import os
import sys

from .capture_list import UnusedCaptureListRule
from .config_loader import LintConfig
from .node_types import Severity, StyleViolation, walk
from .source_file import SourceFile


@dataclass
class LintResult:
    violations: List[StyleViolation] = field(default_factory=list)
    files_linted: int = 0
    skipped: List[str] = field(default_factory=list)  # unreadable files

    @property
    def serious_count(self) -> int:
        return sum(1 for v in self.violations if v.severity is Severity.ERROR)


def _matches(rel: str, patterns: Iterable[str], is_dir: bool = False) -> bool:
    forms = [rel, "/" + rel]
    if is_dir:
        forms.append("/" + rel + "/")
    return any(fnmatch.fnmatch(form, pat) for pat in patterns for form in forms)


def collect_swift_files(paths: List[str], include: List[str], exclude: List[str]) -> List[Path]:
    collected: List[Path] = []
    for root in paths:
        base = Path(root)
        if base.is_file():
            if base.suffix == ".swift":
                collected.append(base)
            continue
        if not base.exists():
            continue
        for dirpath, dirnames, filenames in os.walk(base):
            # prune excluded dirs
            for d in list(dirnames):
                rel = (Path(dirpath) / d).relative_to(base).as_posix()
                if _matches(rel, exclude, is_dir=True):
                    dirnames.remove(d)
            dirnames.sort()
            for fn in sorted(filenames):
                if not fn.endswith(".swift"):
                    continue
                f_path = Path(dirpath) / fn
                rel = f_path.relative_to(base).as_posix()
                if _matches(rel, exclude):
                    continue
                if include and not _matches(rel, include):
                    continue
                collected.append(f_path)
    return collected


def lint_file(file: SourceFile, rule: UnusedCaptureListRule) -> List[StyleViolation]:
    """All violations in one file, ordered by offset."""
    violations: List[StyleViolation] = []
    for node in walk(file.structure):
        violations.extend(rule.validate(file, node.kind, node))
    # stable: entries of one closure keep their capture-list order
    return sorted(violations, key=lambda v: v.character_offset)


def lint_source(source: str, config: Optional[LintConfig] = None, path: Optional[str] = None) -> List[StyleViolation]:
    config = config or LintConfig()
    rule = UnusedCaptureListRule(config.unused_capture_list)
    return lint_file(SourceFile(source, path=path), rule)


def lint_paths(paths: List[str], config: LintConfig, quiet: bool = False) -> LintResult:
    result = LintResult()
    rule = UnusedCaptureListRule(config.unused_capture_list)
    files = collect_swift_files(paths, config.include, config.exclude)
    for idx, path in enumerate(files, start=1):
        if not quiet:
            print(f"Linting '{path.name}' ({idx}/{len(files)})", file=sys.stderr)
        try:
            file = SourceFile.from_path(path)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Could not read contents of '{path}': {e}", file=sys.stderr)
            result.skipped.append(str(path))
            continue
        result.violations.extend(lint_file(file, rule))
        result.files_linted += 1
    return result
