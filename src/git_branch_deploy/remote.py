"""Authenticated remote resolution for the target repository."""

from __future__ import annotations

import re
from typing import Callable

from .errors import ConfigError, RemoteBranchMissing
from .logging import get_logger
from .models.deploy import RemoteDescriptor
from .vcs import remote_branch_exists

logger = get_logger(__name__)

_SLUG_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")

BranchProbe = Callable[[str, str], bool]


def resolve_remote(
    repository: str,
    token: str,
    branch: str,
    host: str = "github.com",
) -> RemoteDescriptor:
    """Build the authenticated HTTPS remote for ``repository``.

    Raises:
        ConfigError: If the token is empty or the slug is not ``owner/name``
    """
    token = (token or "").strip()
    if not token:
        raise ConfigError("You have to provide a GITHUB_TOKEN")

    repository = (repository or "").strip()
    if not repository:
        raise ConfigError("You have to provide a GITHUB_REPOSITORY")
    if not _SLUG_RE.match(repository):
        raise ConfigError(
            f"GITHUB_REPOSITORY must look like 'owner/name', got {repository!r}",
            data={"repository": repository},
        )

    url = f"https://x-access-token:{token}@{host}/{repository}.git"
    return RemoteDescriptor(repository=repository, branch=branch, url=url)


def ensure_branch_exists(
    remote: RemoteDescriptor,
    probe: BranchProbe = remote_branch_exists,
) -> RemoteDescriptor:
    """Confirm the target branch exists before anything destructive happens.

    Raises:
        RemoteBranchMissing: If the remote has no such branch
    """
    if not probe(remote.url, remote.branch):
        raise RemoteBranchMissing(remote.branch, remote.display_url)
    logger.info("Remote branch found", remote=remote.display_url, branch=remote.branch)
    return remote
