from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from .logging import get_logger

log = get_logger("git_branch_deploy.settings")

DEFAULT_COMMITTER = "GitHub <noreply@github.com>"
DEFAULT_AUTHOR = "github-actions[bot] <41898282+github-actions[bot]@users.noreply.github.com>"
DEFAULT_MESSAGE = "Deploy to GitHub pages"


class Settings(BaseSettings):
    # remote
    GITHUB_TOKEN: str = Field(default="", repr=False)
    GITHUB_REPOSITORY: str = Field(default="")
    GITHUB_HOST: str = Field(default="github.com")

    # deploy
    DEPLOY_TYPE: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DEPLOY_TYPE", "INPUT_DEPLOY_TYPE"),
    )
    WORKSPACE: str = Field(default=".")
    KEEP_HISTORY: bool = Field(default=False)
    CLONE_DEPTH: int = Field(default=1, ge=0)
    STAT_MAX_FILES: int = Field(default=10, ge=1)

    # commit identity
    GIT_COMMITTER: str = Field(default=DEFAULT_COMMITTER)
    GIT_AUTHOR: str = Field(default=DEFAULT_AUTHOR)
    COMMIT_MESSAGE: str = Field(default=DEFAULT_MESSAGE, min_length=1)

    # site reader
    SITE_BASE_URL: str = Field(default="")
    SITE_REPO_URL: str = Field(default="")
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="console", pattern="^(json|console)$")

    class Config:
        extra = "ignore"

    @property
    def workspace_path(self) -> Path:
        return Path(self.WORKSPACE).expanduser().resolve()

    @property
    def token(self) -> str:
        return self.GITHUB_TOKEN.strip()

    def log_summary(self) -> None:
        log.info(
            "Deploy settings",
            repository=self.GITHUB_REPOSITORY or None,
            deploy_type=self.DEPLOY_TYPE,
            workspace=str(self.workspace_path),
            keep_history=self.KEEP_HISTORY,
            clone_depth=self.CLONE_DEPTH,
            token_present=bool(self.token),
        )
