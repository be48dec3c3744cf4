# File: src/git_branch_deploy/strategies.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .errors import ConfigError, FilesystemError
from .fs import copy_tree, empty_dir
from .logging import get_logger
from .models.deploy import DeployType

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeployStrategy:
    """
    Copy plan for one deploy type, applied in this order:
      1. carry_old: copy the whole old snapshot into the new one
      2. root_source: workspace directory copied onto the new root
      3. replace: (workspace source, snapshot dir) pairs; each destination
         is emptied, then filled from the source
      4. preserve: old snapshot dirs that overwrite whatever is there
    """

    deploy_type: DeployType
    carry_old: bool = False
    root_source: Optional[str] = None
    replace: Tuple[Tuple[str, str], ...] = ()
    preserve: Tuple[str, ...] = ()
    required: Optional[str] = None

    @property
    def target_branch(self) -> str:
        return self.deploy_type.target_branch

    def sources(self) -> List[str]:
        paths = [src for src, _ in self.replace]
        if self.root_source:
            paths.insert(0, self.root_source)
        return paths

    def has_local_input(self, workspace: Path) -> bool:
        """False when the run should be skipped because there is nothing to publish."""
        if self.required is None:
            return True
        return (workspace / self.required).is_dir()

    def apply(self, old_dir: Path, new_dir: Path, workspace: Path) -> None:
        """Populate ``new_dir`` from the old snapshot and the workspace.

        Raises:
            FilesystemError: If a build source is missing or a copy fails
        """
        missing = [src for src in self.sources() if not (workspace / src).is_dir()]
        if missing:
            raise FilesystemError(
                f"Missing build output for {self.deploy_type.value} deploy: {', '.join(missing)}",
                path=str(workspace / missing[0]),
            )

        if self.carry_old:
            copy_tree(old_dir, new_dir)

        if self.root_source:
            copy_tree(workspace / self.root_source, new_dir)

        for src, dst in self.replace:
            empty_dir(new_dir / dst)
            copy_tree(workspace / src, new_dir / dst)
            logger.info("Replaced directory", src=src, dst=dst)

        for name in self.preserve:
            previous = old_dir / name
            if not previous.is_dir():
                logger.warning("Nothing to preserve, directory absent from old snapshot", dir=name)
                continue
            empty_dir(new_dir / name)
            copy_tree(previous, new_dir / name)
            logger.info("Preserved directory", dir=name)


STRATEGIES: Dict[DeployType, DeployStrategy] = {
    DeployType.FRONTEND: DeployStrategy(
        deploy_type=DeployType.FRONTEND,
        root_source="build",
        # TODO: drop "media" once the backend publishes everything under assets/
        preserve=("api", "media", "assets"),
    ),
    DeployType.BACKEND: DeployStrategy(
        deploy_type=DeployType.BACKEND,
        carry_old=True,
        replace=(("build/api", "api"), ("build/media", "media")),
    ),
    DeployType.ASSETS: DeployStrategy(
        deploy_type=DeployType.ASSETS,
        carry_old=True,
        replace=(("assets", "assets"),),
    ),
    DeployType.BACKEND_ASSETS: DeployStrategy(
        deploy_type=DeployType.BACKEND_ASSETS,
        root_source="build/assets",
        required="build/assets",
    ),
}


def parse_deploy_type(value: Union[str, DeployType, None]) -> DeployType:
    """
    Raises:
        ConfigError: If the value is not one of the known deploy types
    """
    if isinstance(value, DeployType):
        return value
    text = (value or "").strip().lower()
    try:
        return DeployType(text)
    except ValueError:
        choices = ", ".join(t.value for t in DeployType)
        raise ConfigError(f"Unknown deploy type {value!r}, expected one of: {choices}")


def get_strategy(deploy_type: Union[str, DeployType, None]) -> DeployStrategy:
    return STRATEGIES[parse_deploy_type(deploy_type)]
