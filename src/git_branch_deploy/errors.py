"""Deployment error definitions."""

from typing import Optional, Dict, Any

from .logging import redact_credentials


class DeployError(Exception):
    """Base exception for deployment failures."""

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None
    ):
        message = redact_credentials(message)
        super().__init__(message)
        self.message = message
        self.data = data or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a structured log payload."""
        payload = {
            "error": type(self).__name__,
            "message": self.message,
        }

        if self.data:
            payload["data"] = self.data

        return payload


class ConfigError(DeployError):
    """Error for missing or invalid configuration."""


class IdentityError(ConfigError):
    """Error for a commit identity that is not of the form ``Name <email>``."""

    def __init__(self, value: str):
        super().__init__(
            f"Malformed identity {value!r}, expected 'Name <email>'",
            data={"value": value},
        )
        self.value = value


class RemoteBranchMissing(DeployError):
    """Error for a target branch that does not exist on the remote."""

    def __init__(self, branch: str, remote: str):
        super().__init__(
            f"Remote branch {branch!r} does not exist on {remote}",
            data={"branch": branch, "remote": remote},
        )
        self.branch = branch
        self.remote = remote


class VcsError(DeployError):
    """Error for a failed version-control command."""

    def __init__(
        self,
        message: str,
        stderr: str = "",
        command: Optional[str] = None,
    ):
        stderr = redact_credentials(stderr or "").strip()
        detail = f"{message}: {stderr}" if stderr else message
        super().__init__(detail, data={"command": redact_credentials(command or "")})
        self.stderr = stderr
        self.command = self.data["command"]


class FilesystemError(DeployError):
    """Error for copy/remove failures in scratch or build directories."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, data={"path": path} if path else None)
        self.path = path


def describe_failure(
    exception: BaseException,
    default_message: str = "Unexpected error"
) -> str:
    """Convert any exception to the one-line failure message shown to users.

    Args:
        exception: Exception to convert
        default_message: Prefix used for exceptions outside the taxonomy

    Returns:
        Single-line, credential-free message
    """
    if isinstance(exception, DeployError):
        message = exception.message
    else:
        message = f"{default_message}: {exception}"

    return " ".join(redact_credentials(message).split())
