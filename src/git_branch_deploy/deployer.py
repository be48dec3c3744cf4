# File: src/git_branch_deploy/deployer.py
from __future__ import annotations

from contextlib import ExitStack, closing
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .errors import ConfigError
from .fs import scratch_dir, strip_vcs_metadata
from .identity import parse_identity
from .logging import get_logger
from .models.deploy import CommitIdentity, DeployOutcome, DeployResult, DeployType, RemoteDescriptor
from .remote import BranchProbe, ensure_branch_exists, resolve_remote
from .settings import Settings
from .strategies import DeployStrategy, get_strategy
from .vcs import GitRepo, remote_branch_exists

logger = get_logger(__name__)


class DeployStage(str, Enum):
    RESOLVE_REMOTE = "resolve_remote"
    SNAPSHOT_OLD = "snapshot_old"
    INIT_NEW = "init_new"
    APPLY_STRATEGY = "apply_strategy"
    CHECK_DIRTY = "check_dirty"
    COMMIT = "commit"
    PUSH = "push"
    DONE = "done"


class Deployer:
    """Runs one deployment: old snapshot -> new snapshot -> commit -> force-push."""

    def __init__(self, settings: Settings, probe: BranchProbe = remote_branch_exists):
        self.settings = settings
        self.probe = probe
        self.stage: Optional[DeployStage] = None

    def _enter(self, stage: DeployStage, **context) -> None:
        self.stage = stage
        logger.info("Deploy stage", stage=stage.value, **context)

    def _result(
        self,
        strategy: DeployStrategy,
        outcome: DeployOutcome,
        message: str,
        commit: Optional[str] = None,
        stat: Optional[str] = None,
    ) -> DeployResult:
        self._enter(DeployStage.DONE, outcome=outcome.value)
        logger.info(message, deploy_type=strategy.deploy_type.value, branch=strategy.target_branch)
        return DeployResult(
            outcome=outcome,
            deploy_type=strategy.deploy_type,
            branch=strategy.target_branch,
            commit=commit,
            stat=stat,
            message=message,
        )

    def run(
        self,
        deploy_type: Union[str, DeployType, None] = None,
        remote: Optional[RemoteDescriptor] = None,
    ) -> DeployResult:
        """Deploy the workspace build output to the branch of ``deploy_type``.

        Args:
            deploy_type: Deploy type, defaults to the configured one
            remote: Pre-resolved remote; resolved from settings when omitted

        Returns:
            The outcome of the run, including the no-op ones

        Raises:
            DeployError: On any failure; scratch directories are removed first
        """
        settings = self.settings
        strategy = get_strategy(deploy_type if deploy_type is not None else settings.DEPLOY_TYPE)
        workspace = settings.workspace_path
        branch = strategy.target_branch

        if not strategy.has_local_input(workspace):
            return self._result(
                strategy,
                DeployOutcome.SKIPPED,
                f"Nothing to publish, {strategy.required} does not exist",
            )

        committer = parse_identity(settings.GIT_COMMITTER)
        author = parse_identity(settings.GIT_AUTHOR)

        self._enter(DeployStage.RESOLVE_REMOTE, deploy_type=strategy.deploy_type.value, branch=branch)
        if remote is None:
            remote = resolve_remote(
                settings.GITHUB_REPOSITORY,
                settings.token,
                branch,
                host=settings.GITHUB_HOST,
            )
        elif remote.branch != branch:
            raise ConfigError(
                f"Remote targets branch {remote.branch!r} but {strategy.deploy_type.value} deploys to {branch!r}"
            )
        ensure_branch_exists(remote, self.probe)

        # unwinds in reverse: repository handles close before their directories go
        with ExitStack() as stack:
            old_dir = stack.enter_context(scratch_dir("branch-old"))
            new_dir = stack.enter_context(scratch_dir("branch-new"))

            self._enter(DeployStage.SNAPSHOT_OLD, path=str(old_dir))
            with closing(GitRepo.clone_branch(remote.url, branch, old_dir, depth=settings.CLONE_DEPTH)) as old:
                self._enter(DeployStage.INIT_NEW, path=str(new_dir))
                new = stack.enter_context(closing(GitRepo.init(new_dir)))
                new.checkout_branch(branch)
                baseline = new.adopt_baseline(old)
            strip_vcs_metadata(old_dir)
            logger.info("Old snapshot ready", baseline=baseline)

            return self._publish(strategy, remote, old_dir, new, workspace, committer, author)

    def _publish(
        self,
        strategy: DeployStrategy,
        remote: RemoteDescriptor,
        old_dir: Path,
        new: GitRepo,
        workspace: Path,
        committer: CommitIdentity,
        author: CommitIdentity,
    ) -> DeployResult:
        settings = self.settings
        branch = strategy.target_branch

        self._enter(DeployStage.APPLY_STRATEGY, deploy_type=strategy.deploy_type.value)
        strategy.apply(old_dir, new.path, workspace)

        self._enter(DeployStage.CHECK_DIRTY)
        if not new.is_dirty():
            return self._result(strategy, DeployOutcome.NO_CHANGES, "No changes to commit")

        new.set_config("user.name", committer.name)
        new.set_config("user.email", committer.email)
        new.stage_all()
        if not new.has_staged_changes():
            return self._result(strategy, DeployOutcome.NOTHING_TO_DEPLOY, "Nothing to deploy")

        self._enter(DeployStage.COMMIT, author=author.formatted, keep_history=settings.KEEP_HISTORY)
        if not settings.KEEP_HISTORY:
            new.drop_history()
        sha = new.commit(settings.COMMIT_MESSAGE, author, allow_empty=True)
        stat = new.diff_stat(settings.STAT_MAX_FILES)
        logger.info("Created deploy commit", commit=sha, stat=stat)

        self._enter(DeployStage.PUSH, remote=remote.display_url, branch=branch)
        new.push(remote.url, branch, force=True)

        return self._result(
            strategy,
            DeployOutcome.DEPLOYED,
            f"Content has been deployed to {remote.repository}@{branch}",
            commit=sha,
            stat=stat,
        )
