"""Factory for building the GitLab-backed filesystem.

Exposes get_filesystem, which wires a GitLabClient into a GitAdapter from
explicit settings, and default_filesystem, which reads them from config.
"""

from __future__ import annotations

from typing import Optional, Union

import config
from clients.gitlab import GitLabClient
from core.errors import ValidationError
from core.interfaces import RepositoryClient
from sources.git_adapter import GitAdapter


def get_filesystem(
    *,
    project_id: Optional[Union[int, str]] = None,
    branch: Optional[str] = None,
    base_url: str = GitLabClient.DEFAULT_BASE_URL,
    token: Optional[str] = None,
    prefix: str = "",
    timeout: float = 20.0,
    http_verify: bool = True,
    max_concurrency: int = 5,
    rate_per_sec: float = 5.0,
    tree_page_size: int = 100,
    client: Optional[RepositoryClient] = None,
) -> GitAdapter:
    """
    Build a GitAdapter.

    An injected client wins; otherwise a GitLabClient is created, which
    requires a project id.
    """
    if client is None:
        if project_id is None or not str(project_id).strip():
            raise ValidationError("Missing GitLab project id")

        client = GitLabClient(
            project_id=project_id,
            branch=branch,
            base_url=base_url,
            token=token,
            timeout=timeout,
            verify=http_verify,
            max_concurrency=max_concurrency,
            rate_per_sec=rate_per_sec,
            tree_page_size=tree_page_size,
        )

    return GitAdapter(client, prefix)


def default_filesystem() -> GitAdapter:
    return get_filesystem(
        project_id=config.GITLAB_PROJECT_ID,
        branch=config.GITLAB_BRANCH or None,
        base_url=config.GITLAB_BASE_URL,
        token=config.GITLAB_TOKEN or None,
        prefix=config.GITLAB_PATH_PREFIX,
        timeout=config.GITLAB_TIMEOUT,
        http_verify=config.HTTP_VERIFY,
        max_concurrency=config.GITLAB_MAX_CONCURRENCY,
        rate_per_sec=config.GITLAB_RATE_PER_SEC,
        tree_page_size=config.GITLAB_TREE_PAGE_SIZE,
    )
