"""Path normalization shared by the parser, cache, and validator"""

import os
from pathlib import Path
from urllib.parse import unquote


def normalize_path(path: str | Path) -> str:
    """Return an absolute path with '.'/'..' segments collapsed (symlinks untouched)."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def to_posix(path: str) -> str:
    """Treat backslashes as separators so link paths resolve the same on every platform."""
    return path.replace('\\', '/')


def resolve_link_path(raw: str, source_path: str, decode: bool = True) -> str:
    """Resolve a link's raw path against the directory of source_path."""
    candidate = to_posix(unquote(raw) if decode else raw)
    if os.path.isabs(candidate):
        return normalize_path(candidate)
    return normalize_path(os.path.join(os.path.dirname(source_path), candidate))


def relative_link_path(target: str, source_path: str) -> str:
    """Return target relative to the source file's directory, with '/' separators."""
    return to_posix(os.path.relpath(target, os.path.dirname(source_path)))


def is_within(path: str, root: str) -> bool:
    """True if path is root or lies below it."""
    root = normalize_path(root)
    return os.path.commonpath([normalize_path(path), root]) == root
