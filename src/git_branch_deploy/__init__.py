"""Publish build artifacts to dedicated branches of a GitHub repository."""

from .deployer import Deployer, DeployStage
from .errors import ConfigError, DeployError, FilesystemError, IdentityError, RemoteBranchMissing, VcsError
from .models import DeployOutcome, DeployResult, DeployType
from .settings import Settings

__all__ = [
    "ConfigError",
    "DeployError",
    "DeployOutcome",
    "DeployResult",
    "DeployStage",
    "DeployType",
    "Deployer",
    "FilesystemError",
    "IdentityError",
    "RemoteBranchMissing",
    "Settings",
    "VcsError",
]

__version__ = "0.1.0"
