"""
Configuration loader - YAML files or [tool.capturelint] in pyproject.toml
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

import yaml

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    import tomli

from .capture_list import DESCRIPTION, SeverityConfiguration
from .node_types import Severity
from .reporters import REPORTERS


class ConfigError(ValueError):
    """Invalid or unreadable configuration."""


@dataclass
class LintConfig:
    """Settings for one lint run"""
    paths: List[str] = field(default_factory=lambda: ["."])
    include: List[str] = field(default_factory=lambda: ["**/*.swift"])
    exclude: List[str] = field(default_factory=lambda: [
        "**/.build/**", "**/build/**", "**/Pods/**", "**/Carthage/**",
        "**/DerivedData/**",
    ])
    reporter: str = "xcode"
    strict: bool = False
    # severity applied to every unused_capture_list violation
    unused_capture_list: SeverityConfiguration = field(default_factory=SeverityConfiguration)


def load_config(config_path: Optional[Path] = None) -> LintConfig:
    """
    Load configuration

    Args:
        config_path: explicit config file; when None the working directory is searched

    Returns:
        LintConfig: the loaded configuration (defaults when nothing is found)
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found_config = find_config_file()
    if found_config:
        return _load_config_file(found_config)

    return LintConfig()


def find_config_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """
    Find a config file by priority

    Returns:
        Path: the first config file found, or None
    """
    base = Path(cwd) if cwd else Path('.')
    candidates = [
        base / 'capturelint.yaml',
        base / 'capturelint.yml',
        base / '.capturelint.yaml',
        base / '.capturelint.yml',
        base / 'pyproject.toml',  # only with [tool.capturelint]
    ]

    for candidate in candidates:
        if candidate.exists():
            if candidate.name == 'pyproject.toml':
                if _has_capturelint_config(candidate):
                    return candidate
                continue
            return candidate

    return None


def _load_config_file(config_path: Path) -> LintConfig:
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in ['.yaml', '.yml']:
        return _load_yaml_config(config_path)
    elif suffix == '.toml':
        return _load_toml_config(config_path)
    else:
        raise ConfigError(f"Unsupported config file format: {suffix}")


def _load_yaml_config(config_path: Path) -> LintConfig:
    with config_path.open('r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not data:
        return LintConfig()

    return _parse_config_data(data)


def _load_toml_config(config_path: Path) -> LintConfig:
    with config_path.open('rb') as f:
        try:
            data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    # pyproject.toml keeps settings under [tool.capturelint]
    if 'tool' in data and 'capturelint' in data['tool']:
        config_data = data['tool']['capturelint']
    else:
        config_data = data

    return _parse_config_data(config_data)


def _has_capturelint_config(pyproject_path: Path) -> bool:
    try:
        with pyproject_path.open('rb') as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError):
        return False
    return 'tool' in data and 'capturelint' in data['tool']


def parse_severity(value: Any) -> Severity:
    try:
        return Severity(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in Severity)
        raise ConfigError(f"Invalid severity {value!r} (expected one of: {allowed})") from None


def _parse_severity_configuration(value: Any) -> SeverityConfiguration:
    # both `unused_capture_list: error` and `unused_capture_list: {severity: error}`
    if isinstance(value, dict):
        if 'severity' not in value:
            return SeverityConfiguration()
        value = value['severity']
    return SeverityConfiguration(severity=parse_severity(value))


def _parse_config_data(data: Dict[str, Any]) -> LintConfig:
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")
    config = LintConfig()

    if 'paths' in data:
        config.paths = [str(p) for p in data['paths']]
    if 'include' in data:
        config.include = [str(p) for p in data['include']]
    if 'exclude' in data:
        config.exclude = [str(p) for p in data['exclude']]
    if 'reporter' in data:
        reporter = str(data['reporter']).strip().lower()
        if reporter not in REPORTERS:
            raise ConfigError(f"Unknown reporter {reporter!r} (expected one of: {', '.join(REPORTERS)})")
        config.reporter = reporter
    if 'strict' in data:
        config.strict = bool(data['strict'])

    rule_id = DESCRIPTION.identifier
    if rule_id in data:
        config.unused_capture_list = _parse_severity_configuration(data[rule_id])

    return config
