"""Filesystem helpers for scratch snapshots and build output."""

import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from .errors import FilesystemError
from .logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

VCS_METADATA = ".git"


def remove_path(path: PathLike) -> None:
    """Remove a file or directory tree; a missing path is not an error.

    Raises:
        FilesystemError: If removal fails
    """
    target = Path(path)
    try:
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()
    except OSError as e:
        raise FilesystemError(f"Failed to remove {target}: {e}", path=str(target))


def empty_dir(path: PathLike) -> None:
    """Make sure ``path`` is an existing, empty directory.

    Raises:
        FilesystemError: If the directory cannot be created or cleared
    """
    target = Path(path)
    try:
        target.mkdir(parents=True, exist_ok=True)
        for child in target.iterdir():
            remove_path(child)
    except OSError as e:
        raise FilesystemError(f"Failed to empty {target}: {e}", path=str(target))


def copy_tree(src: PathLike, dst: PathLike, include_vcs: bool = False) -> None:
    """Recursively copy ``src`` into ``dst``, overwriting existing files.

    Files already in ``dst`` that are absent from ``src`` are left in place.
    ``.git`` directories are skipped unless ``include_vcs`` is set.

    Args:
        src: Source directory
        dst: Destination directory (created if missing)
        include_vcs: Whether to copy version-control metadata too

    Raises:
        FilesystemError: If ``src`` is not a directory or the copy fails
    """
    source = Path(src)
    target = Path(dst)
    if not source.is_dir():
        raise FilesystemError(f"Source directory does not exist: {source}", path=str(source))

    ignore = None if include_vcs else shutil.ignore_patterns(VCS_METADATA)
    try:
        shutil.copytree(source, target, symlinks=True, ignore=ignore, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise FilesystemError(f"Failed to copy {source} to {target}: {e}", path=str(source))

    logger.debug("Copied directory", src=str(source), dst=str(target))


def strip_vcs_metadata(path: PathLike) -> None:
    """Delete the ``.git`` entry at the root of ``path``."""
    remove_path(Path(path) / VCS_METADATA)


@contextmanager
def scratch_dir(prefix: str) -> Iterator[Path]:
    """Create a temporary directory that is removed on every exit path.

    Args:
        prefix: Name prefix, e.g. ``branch-old``

    Yields:
        Path to the new, empty directory
    """
    try:
        path = Path(tempfile.mkdtemp(prefix=prefix))
    except OSError as e:
        raise FilesystemError(f"Failed to create scratch directory: {e}")

    logger.debug("Created scratch directory", path=str(path))
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        if path.exists():
            logger.warning("Scratch directory left behind", path=str(path))
        else:
            logger.debug("Removed scratch directory", path=str(path))
