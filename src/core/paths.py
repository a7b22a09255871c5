"""
Path utilities used across the project.

Provides consistent POSIX-style normalization and the prefixer that maps
caller-relative paths onto the configured root inside the repository.
"""

from __future__ import annotations


def normalize_posix_relpath(p: str) -> str:
    """Normalize a user path to a clean POSIX relative path.

    Converts backslashes to '/', trims whitespace, removes leading '/'
    and repeated './' markers.
    """
    s = (p or "").strip()
    s = s.replace("\\", "/")        # Unify path separators across OSes.
    s = s.lstrip("/")               # Repository paths are always relative.
    while s.startswith("./"):       # Drop repeated "./" prefixes.
        s = s[2:]
    if s == ".":
        return ""
    return s


def clean_root(root: str) -> str:
    """Normalize a root directory hint.

    Treats '.', './', '/', and empty as repository root (returns '').
    """
    r = (root or "").strip().replace("\\", "/")
    if r in ("", ".", "./", "/"):
        return ""
    while r.startswith("./"):
        r = r[2:]
    return r.strip("/")


class PathPrefixer:
    """Prepend (and strip) a fixed root to repository paths."""

    def __init__(self, prefix: str = "", separator: str = "/") -> None:
        self._separator = separator
        root = clean_root(prefix)
        self._prefix = f"{root}{separator}" if root else ""

    @property
    def prefix(self) -> str:
        return self._prefix

    def prefix_path(self, path: str) -> str:
        return self._prefix + normalize_posix_relpath(path)

    def strip_prefix(self, path: str) -> str:
        p = normalize_posix_relpath(path)
        if self._prefix and p.startswith(self._prefix):
            return p[len(self._prefix):]
        return p
