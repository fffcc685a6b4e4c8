"""
Infrastructure layer for hashrarity.

Contains abstractions for external systems:
- ObjectStore: Handle on a git objects directory (loose + packed)
- read_pack_index: Pack index (.idx) name table reader
- GitClient: Git command execution (discovery, object kinds, log)

These provide clean interfaces that can be mocked for testing.
"""

from .object_store import ObjectStore
from .pack_index import read_pack_index
from .git_client import GitClient, GitCommit

__all__ = [
    'ObjectStore',
    'read_pack_index',
    'GitClient',
    'GitCommit',
]
