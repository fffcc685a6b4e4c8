"""
Git client infrastructure for hashrarity.

Provides a clean abstraction over git command execution.
Repository discovery and the few lookups that need git itself go
through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from the enumeration and classification logic
"""

import subprocess
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from pathlib import Path
from datetime import datetime
import logging

from ..domain.object_hash import OBJECT_FORMATS
from ..exit_codes import NoRepositoryError
from .object_store import ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class GitCommit:
    """A git commit with metadata."""
    hash: str
    date: datetime
    author: str
    email: str
    message: str


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        store = client.open_store("/path/to/repo")
        print(store.path, store.hash_length)
    """

    def __init__(self, timeout: int = 30):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
        """
        self.timeout = timeout

    def _run(
        self,
        cmd: str,
        cwd: str,
        input: Optional[str] = None,
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            cmd: Command to run
            cwd: Working directory
            input: Text fed to the command's stdin

        Returns:
            Tuple of (stdout, returncode)
        """
        try:
            result = subprocess.run(
                cmd,
                shell=True,
                cwd=cwd,
                input=input,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
            if result.returncode != 0 and result.stderr:
                logger.debug(f"{cmd}: {result.stderr.strip()}")

            output = result.stdout
            return output.strip() if output else None, result.returncode

        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {cmd}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {cmd} - {e}")
            return None, -1

    def is_git_repo(self, path: str) -> bool:
        """Check if path is inside a git repository (work tree or bare)."""
        if not Path(path).is_dir():
            return False
        _, code = self._run("git rev-parse --git-dir", cwd=path)
        return code == 0

    def object_format(self, path: str) -> str:
        """
        Get the repository's hash scheme name ('sha1' or 'sha256').

        git older than 2.29 has no --show-object-format and only
        supports sha1, so a failed lookup means sha1.
        """
        output, code = self._run("git rev-parse --show-object-format", cwd=path)
        if code == 0 and output in OBJECT_FORMATS:
            return output
        return "sha1"

    def objects_dir(self, path: str) -> Optional[Path]:
        """
        Resolve the objects directory, honouring GIT_OBJECT_DIRECTORY,
        linked worktrees and bare repositories.
        """
        output, code = self._run("git rev-parse --git-path objects", cwd=path)
        if code != 0 or not output:
            return None
        objects = Path(output)
        if not objects.is_absolute():
            objects = Path(path) / objects
        return objects.resolve()

    def open_store(self, path: str) -> ObjectStore:
        """
        Open the object store of the repository containing path.

        Raises:
            NoRepositoryError: If path is not inside a git repository
        """
        path = str(Path(path).expanduser())
        if not self.is_git_repo(path):
            raise NoRepositoryError(f"Not a git repository: {path}")

        objects = self.objects_dir(path)
        if objects is None:
            raise NoRepositoryError(f"Could not locate object directory for {path}")

        object_format = self.object_format(path)
        logger.debug(f"Opened {object_format} object store at {objects}")
        return ObjectStore(objects, OBJECT_FORMATS[object_format])

    def object_types(self, path: str, hashes: Iterable[str]) -> Dict[str, str]:
        """
        Look up the kind (commit, tree, blob, tag) of each object.

        Args:
            path: Path to git repository
            hashes: Hex object names

        Returns:
            Mapping of hex name to object type; missing objects are omitted
        """
        names = list(hashes)
        if not names:
            return {}

        output, code = self._run(
            "git cat-file --batch-check='%(objectname) %(objecttype)'",
            cwd=path,
            input='\n'.join(names) + '\n',
        )
        if code != 0 or not output:
            return {}

        types = {}
        for line in output.split('\n'):
            parts = line.split()
            # "<name> missing" for unknown objects
            if len(parts) == 2 and parts[1] != 'missing':
                types[parts[0]] = parts[1]
        return types

    def log(
        self,
        path: str,
        all_refs: bool = False,
        limit: Optional[int] = None
    ) -> List[GitCommit]:
        """
        Get commit log.

        Args:
            path: Path to git repository
            all_refs: Walk every ref instead of HEAD only
            limit: Maximum commits to return

        Returns:
            List of GitCommit objects, newest first
        """
        cmd = 'git log --format="%H|%aI|%an|%ae|%s"'
        if all_refs:
            cmd += ' --all'
        if limit:
            cmd += f' -n {limit}'

        output, code = self._run(cmd, cwd=path)
        if code != 0 or not output:
            return []

        commits = []
        for line in output.strip().split('\n'):
            if not line or '|' not in line:
                continue

            parts = line.split('|', 4)
            if len(parts) < 5:
                continue

            commit_hash = parts[0].strip()
            date_str = parts[1].strip()
            author = parts[2].strip()
            email = parts[3].strip()
            message = parts[4].strip()

            try:
                date = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
            except (ValueError, AttributeError):
                logger.debug(f"Unparseable commit date {date_str!r} for {commit_hash}")
                continue

            commits.append(GitCommit(
                hash=commit_hash,
                date=date,
                author=author,
                email=email,
                message=message
            ))

        return commits
