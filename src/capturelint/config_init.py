"""
Config initialisation - write the packaged capturelint.yaml template
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import importlib.resources as ir


def _load_packaged_yaml() -> str | None:
    """Read the packaged template (templates/capturelint.yaml); None when unavailable."""
    try:
        pref = ir.files("capturelint") / "templates" / "capturelint.yaml"
        if pref.is_file():
            return pref.read_text(encoding="utf-8")
    except (ModuleNotFoundError, OSError):
        pass
    return None


def init_config(output_path: Optional[Path] = None, force: bool = False) -> Optional[Path]:
    """
    Write a starter configuration file

    Args:
        output_path: target path, capturelint.yaml in the working directory by default
        force: overwrite an existing file

    Returns:
        Path: the written file, or None when an existing file was left alone
    """
    if output_path is None:
        output_path = Path("capturelint.yaml")

    if output_path.exists() and not force:
        print(f"Config file already exists: {output_path} (use --force to overwrite)")
        return None

    content = _load_packaged_yaml()
    if not content:
        raise FileNotFoundError("capturelint/templates/capturelint.yaml template resource missing")

    output_path.write_text(content, encoding="utf-8")
    print(f"Config file written: {output_path}")
    return output_path
