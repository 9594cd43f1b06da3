"""
capturelint - find unused references in Swift closure capture lists

Simple API:

    from capturelint import lint_source

    for violation in lint_source("{ [weak self] num in print(num) }"):
        print(violation.location, violation.reason)
"""


def lint_source(*args, **kwargs):
    """Lazy import wrapper for lint_source to keep package import light."""
    from .linter import lint_source as _lint_source

    return _lint_source(*args, **kwargs)


def lint_paths(*args, **kwargs):
    """Lazy import wrapper for lint_paths."""
    from .linter import lint_paths as _lint_paths

    return _lint_paths(*args, **kwargs)


from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("capturelint")
except PackageNotFoundError:
    # Fallback for development/uninstalled package
    __version__ = "unknown"

__all__ = ["lint_source", "lint_paths", "__version__"]
