"""Local storage module.

Local git-based versioning of pipeline stages, fully offline.
"""

from local_storage.git_versioner import GitError, LocalGitVersioner

__all__ = ["GitError", "LocalGitVersioner"]
