# File: src/git_branch_deploy/models/deploy.py
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..logging import redact_credentials


class DeployType(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    ASSETS = "assets"
    BACKEND_ASSETS = "backend-assets"

    @property
    def target_branch(self) -> str:
        if self is DeployType.BACKEND_ASSETS:
            return "assets"
        return "gh-pages"


class DeployOutcome(str, Enum):
    SKIPPED = "skipped"
    NO_CHANGES = "no_changes"
    NOTHING_TO_DEPLOY = "nothing_to_deploy"
    DEPLOYED = "deployed"


class CommitIdentity(BaseModel):
    """A parsed ``Name <email>`` pair used for author and committer."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")

    @property
    def formatted(self) -> str:
        return f"{self.name} <{self.email}>"


class RemoteDescriptor(BaseModel):
    """
    Where a deployment goes:
      - repository: GitHub slug, ``owner/name``
      - branch: target branch on that repository
      - url: authenticated remote URL (never log this one, use display_url)
    """

    repository: str = Field(min_length=1)
    branch: str = Field(min_length=1)
    url: str = Field(min_length=1, repr=False)

    @property
    def display_url(self) -> str:
        return redact_credentials(self.url)


class DeployResult(BaseModel):
    outcome: DeployOutcome
    deploy_type: DeployType
    branch: str
    commit: Optional[str] = None
    stat: Optional[str] = None
    message: str
