"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (GitLab
connection settings, path prefix, HTTP timeouts, pacing and limits).
"""

from __future__ import annotations

import os


def _env_str(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# GitLab connection
GITLAB_BASE_URL = _env_str("GITLAB_BASE_URL", "https://gitlab.com")
GITLAB_TOKEN = _env_str("GITLAB_TOKEN")
GITLAB_PROJECT_ID = _env_str("GITLAB_PROJECT_ID")
# Empty means "use the project's default branch"
GITLAB_BRANCH = _env_str("GITLAB_BRANCH")

# Root inside the repository every path is resolved against
GITLAB_PATH_PREFIX = _env_str("GITLAB_PATH_PREFIX")

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)
GITLAB_TIMEOUT = _env_float("GITLAB_TIMEOUT", 20.0)
GITLAB_MAX_CONCURRENCY = _env_int("GITLAB_MAX_CONCURRENCY", 5)
GITLAB_RATE_PER_SEC = _env_float("GITLAB_RATE_PER_SEC", 5.0)
GITLAB_TREE_PAGE_SIZE = _env_int("GITLAB_TREE_PAGE_SIZE", 100)

# Limits / output
MAX_FILE_CHARS = _env_int("MAX_FILE_CHARS", 200_000)
LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()
