from .deploy import CommitIdentity, DeployOutcome, DeployResult, DeployType, RemoteDescriptor
from .site import SiteRecord, SiteView

__all__ = [
    "CommitIdentity",
    "DeployOutcome",
    "DeployResult",
    "DeployType",
    "RemoteDescriptor",
    "SiteRecord",
    "SiteView",
]
