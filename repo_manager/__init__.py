"""repo-manager - keep a tidy owner/repo workspace of git clones."""

__version__ = "0.1.0"
