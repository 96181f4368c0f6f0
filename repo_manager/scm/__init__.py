"""SCM abstraction layer."""

from repo_manager.scm.git import GitSCM
from repo_manager.scm.protocol import SCM, RemoteSet

__all__ = [
    "SCM",
    "RemoteSet",
    "GitSCM",
]
