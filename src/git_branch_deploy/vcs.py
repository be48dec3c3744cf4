"""Git operations on directory-scoped repository handles."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.cmd import Git

from .errors import VcsError
from .logging import get_logger, redact_credentials
from .models.deploy import CommitIdentity

logger = get_logger(__name__)

PathLike = Union[str, Path]


@contextmanager
def _git_errors(action: str) -> Iterator[None]:
    try:
        yield
    except GitCommandError as e:
        command = e.command
        if isinstance(command, (list, tuple)):
            command = " ".join(str(part) for part in command)
        stderr = (e.stderr or "").strip()
        # GitPython wraps stderr as "stderr: '...'"
        if stderr.startswith("stderr:"):
            stderr = stderr[len("stderr:"):].strip().strip("'")
        logger.error("Git command failed", action=action, status=e.status, command=str(command))
        raise VcsError(f"{action} failed", stderr=stderr, command=str(command)) from e


def remote_branch_exists(remote_url: str, branch: str) -> bool:
    """Check whether ``branch`` exists on the remote without local state.

    Raises:
        VcsError: If the remote cannot be queried
    """
    with _git_errors(f"Listing branches of {redact_credentials(remote_url)}"):
        output = Git().ls_remote("--heads", remote_url, f"refs/heads/{branch}")
    return bool(output.strip())


class GitRepo:
    """A repository handle bound to one working directory."""

    def __init__(self, path: PathLike):
        self.path = Path(path).resolve()
        try:
            self.repo = Repo(str(self.path))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise VcsError(f"Not a git repository: {self.path}") from e

    def __repr__(self) -> str:
        return f"GitRepo({str(self.path)!r})"

    @classmethod
    def init(cls, path: PathLike) -> "GitRepo":
        """Create a new repository rooted at ``path``."""
        with _git_errors(f"Initializing repository in {path}"):
            Repo.init(str(path), mkdir=True)
        logger.debug("Initialized repository", path=str(path))
        return cls(path)

    @classmethod
    def clone_branch(
        cls,
        remote_url: str,
        branch: str,
        dest: PathLike,
        depth: Optional[int] = 1,
    ) -> "GitRepo":
        """Clone a single branch into an empty directory.

        Args:
            remote_url: Remote URL, possibly authenticated
            branch: Branch to clone
            dest: Destination directory (created if missing, must be empty)
            depth: Clone depth, ``None`` or 0 for a full clone

        Raises:
            VcsError: If ``dest`` is not empty or the clone fails
        """
        target = Path(dest)
        target.mkdir(parents=True, exist_ok=True)
        if any(target.iterdir()):
            raise VcsError(f"Clone destination is not empty: {target}")

        clone_kwargs = {
            "branch": branch,
            "single_branch": True,
            "no_tags": True,
        }
        if depth:
            clone_kwargs["depth"] = depth

        logger.info("Cloning branch", remote=redact_credentials(remote_url), branch=branch, depth=depth)
        with _git_errors(f"Cloning branch {branch!r}"):
            Repo.clone_from(remote_url, str(target), **clone_kwargs)
        return cls(target)

    def close(self) -> None:
        self.repo.close()

    def checkout_branch(self, name: str) -> None:
        """Switch to local branch ``name``, creating it without history if needed."""
        with _git_errors(f"Checking out branch {name!r}"):
            if name in [head.name for head in self.repo.heads]:
                self.repo.git.checkout(name)
            else:
                # unborn branch; the first commit creates it
                self.repo.git.symbolic_ref("HEAD", f"refs/heads/{name}")

    def set_config(self, key: str, value: str) -> None:
        """Set a repository-scoped configuration value such as ``user.name``."""
        section, _, option = key.rpartition(".")
        if not section or not option:
            raise VcsError(f"Invalid config key: {key!r}")
        with self.repo.config_writer(config_level="repository") as writer:
            writer.set_value(section, option, value)

    def adopt_baseline(self, source: "GitRepo") -> str:
        """Point HEAD and the index at ``source``'s HEAD commit.

        The working tree is left untouched, so files only become tracked
        again once something writes them back.

        Returns:
            The adopted commit sha
        """
        with _git_errors(f"Fetching baseline from {source.path}"):
            self.repo.git.fetch("--quiet", "--no-tags", "--depth=1", str(source.path), "HEAD")
            self.repo.git.update_ref("HEAD", "FETCH_HEAD")
            self.repo.git.read_tree("HEAD")
        sha = self.head_commit()
        logger.debug("Adopted baseline", path=str(self.path), commit=sha)
        return sha

    def drop_history(self) -> None:
        """Make the current branch unborn again, keeping the index.

        The next commit becomes a root commit.
        """
        with _git_errors("Dropping branch history"):
            if self.repo.head.is_valid():
                self.repo.git.update_ref("-d", "HEAD")

    def head_commit(self) -> str:
        with _git_errors("Resolving HEAD"):
            return self.repo.git.rev_parse("HEAD")

    def stage_all(self) -> None:
        with _git_errors("Staging files"):
            self.repo.git.add("--all")

    def is_dirty(self) -> bool:
        """True if the working tree or index differs from HEAD, untracked files included."""
        with _git_errors("Checking working tree"):
            return self.repo.is_dirty(index=True, working_tree=True, untracked_files=True)

    def has_staged_changes(self) -> bool:
        """True if anything is staged relative to HEAD."""
        with _git_errors("Checking staged changes"):
            return bool(self.repo.git.diff("--cached", "--name-only").strip())

    def commit(
        self,
        message: str,
        author: CommitIdentity,
        allow_empty: bool = False,
    ) -> str:
        """Record a commit with an explicit author.

        Returns:
            The new commit sha

        Raises:
            VcsError: If nothing is staged and ``allow_empty`` is false
        """
        args = ["--quiet", f"--author={author.formatted}", f"--message={message}"]
        if allow_empty:
            args.append("--allow-empty")
        with _git_errors("Committing"):
            self.repo.git.commit(*args)
        return self.head_commit()

    def diff_stat(self, max_files: int = 10) -> str:
        """Summary of the files changed by HEAD, truncated to ``max_files``."""
        with _git_errors("Showing commit stat"):
            return self.repo.git.show(f"--stat-count={max_files}", "--format=%h %s", "HEAD")

    def push(self, remote_url: str, branch: str, force: bool = True) -> None:
        """Push local ``branch`` to the remote, overwriting its history if ``force``."""
        args = ["--quiet"]
        if force:
            args.append("--force")
        args.extend([remote_url, f"{branch}:refs/heads/{branch}"])
        logger.info("Pushing branch", remote=redact_credentials(remote_url), branch=branch, force=force)
        with _git_errors(f"Pushing branch {branch!r}"):
            self.repo.git.push(*args)
