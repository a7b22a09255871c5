from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from core.errors import ValidationError
from core.paths import normalize_posix_relpath


# GitLab caps per_page at 100
MAX_PAGE_SIZE = 100


def normalize_project_id(project_id: object) -> str:
    # Numeric ids and "namespace/project" paths are both accepted by the API
    raw = str(project_id if project_id is not None else "").strip().strip("/")
    if not raw:
        raise ValidationError("project_id must be non-empty")
    return raw


def normalize_branch(branch: Optional[str]) -> Optional[str]:
    # None means "resolve the project's default branch"
    if branch is None:
        return None
    branch_clean = branch.strip()
    if not branch_clean:
        return None
    return branch_clean


def normalize_path(path: str) -> str:
    # Keep repository paths stable and OS-independent:
    # - Convert "\" to "/"
    # - Drop leading "/" and repeated "./"
    # - Require a non-empty relative path
    path_clean = normalize_posix_relpath(path).rstrip("/")
    if not path_clean:
        raise ValidationError("path must be non-empty")
    return path_clean


def normalize_tree_path(path: Optional[str]) -> str:
    # The repository root is the empty path
    return normalize_posix_relpath(path or "").rstrip("/")


def normalize_page_size(page_size: int) -> int:
    n = int(page_size)
    if n <= 0:
        raise ValidationError("page_size must be positive")
    return min(n, MAX_PAGE_SIZE)


def encode_segment(value: str) -> str:
    # GitLab expects slashes inside ids and file paths to be percent-encoded
    return quote(value, safe="")
