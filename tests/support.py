from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

from git import Repo

Content = Union[str, bytes]


def write_files(root: Path, files: Dict[str, Content]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


def read_tree(root: Path) -> Dict[str, bytes]:
    """Every file under ``root`` keyed by posix relpath, .git excluded."""
    out: Dict[str, bytes] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root)
        if ".git" in rel.parts or not path.is_file():
            continue
        out[rel.as_posix()] = path.read_bytes()
    return out


def set_identity(repo: Repo) -> None:
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Seed")
        writer.set_value("user", "email", "seed@example.com")


def make_remote(root: Path, branch: str, files: Dict[str, Content]) -> Path:
    """Bare repository with one commit on ``branch`` holding ``files``."""
    bare = root / "remote.git"
    Repo.init(str(bare), bare=True).close()

    seed = root / "seed"
    repo = Repo.init(str(seed))
    try:
        set_identity(repo)
        repo.git.symbolic_ref("HEAD", f"refs/heads/{branch}")
        write_files(seed, files)
        repo.git.add("--all")
        repo.git.commit("--allow-empty", "-m", "seed")
        repo.git.push(str(bare), f"{branch}:refs/heads/{branch}")
    finally:
        repo.close()
    return bare


def branch_files(bare: Path, branch: str) -> Dict[str, bytes]:
    repo = Repo(str(bare))
    try:
        return {
            item.path: item.data_stream.read()
            for item in repo.tree(branch).traverse()
            if item.type == "blob"
        }
    finally:
        repo.close()


def branch_commit(bare: Path, branch: str):
    repo = Repo(str(bare))
    try:
        commit = repo.commit(branch)
        return commit.hexsha, [p.hexsha for p in commit.parents], commit.author.name, commit.author.email
    finally:
        repo.close()
