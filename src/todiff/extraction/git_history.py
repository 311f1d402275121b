"""Reading todo.txt snapshots out of a Git repository's history."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

import git
import structlog
from git import Commit, Repo

logger = structlog.get_logger(__name__)


@dataclass
class TodoRevision:
    """One commit that touched the todo file, with both snapshots."""

    hexsha: str
    short_hash: str
    summary: str
    author_name: str
    timestamp: datetime
    before_lines: List[str]
    after_lines: List[str]


class TodoHistory:
    """Walks the commits of a repository that changed a todo.txt file."""

    def __init__(self, repo_path: Union[str, Path]) -> None:
        """Open the repository.

        Args:
            repo_path: Path to the Git repository

        Raises:
            ValueError: If repository path is invalid
        """
        self.repo_path = Path(repo_path)
        if not self.repo_path.exists():
            raise ValueError(f"Repository path does not exist: {self.repo_path}")

        try:
            self.repo = Repo(self.repo_path)
        except git.exc.InvalidGitRepositoryError as e:
            raise ValueError(f"Invalid Git repository: {self.repo_path}") from e

    def read_lines(self, file_path: str, revision: Union[str, Commit]) -> List[str]:
        """Read the todo file as it was at a revision.

        A file missing from the revision reads as an empty snapshot.

        Args:
            file_path: Path of the file relative to the repository root
            revision: Commit hash, ref name or Commit object

        Returns:
            Decoded lines of the file

        Raises:
            ValueError: If the revision does not exist
        """
        try:
            commit = revision if isinstance(revision, Commit) else self.repo.commit(revision)
        except (git.exc.BadName, ValueError) as e:
            raise ValueError(f"Commit not found: {revision}") from e

        try:
            blob = commit.tree / file_path
        except KeyError:
            return []
        if blob.type != "blob":
            return []

        content = blob.data_stream.read().decode("utf-8", errors="replace")
        return content.splitlines()

    def iter_revisions(
        self,
        file_path: str,
        branch: str = "HEAD",
        max_count: Optional[int] = None,
    ) -> Iterator[TodoRevision]:
        """Yield commits that touched the file, newest first.

        Each revision compares the file against the commit's first parent;
        a root commit compares against an empty snapshot.

        Args:
            file_path: Path of the file relative to the repository root
            branch: Branch or ref to walk (default: HEAD)
            max_count: Maximum number of commits to yield

        Yields:
            TodoRevision objects

        Raises:
            ValueError: If the branch does not exist
        """
        kwargs = {"paths": file_path}
        if max_count:
            kwargs["max_count"] = max_count

        try:
            commits = list(self.repo.iter_commits(branch, **kwargs))
        except git.exc.GitCommandError as e:
            raise ValueError(f"Cannot read history of {branch}: {e}") from e

        logger.debug("walking_history", file_path=file_path, branch=branch, commits=len(commits))
        for commit in commits:
            parent = commit.parents[0] if commit.parents else None
            yield TodoRevision(
                hexsha=commit.hexsha,
                short_hash=commit.hexsha[:7],
                summary=commit.summary if isinstance(commit.summary, str) else commit.summary.decode(),
                author_name=commit.author.name or "",
                timestamp=datetime.fromtimestamp(commit.committed_date),
                before_lines=self.read_lines(file_path, parent) if parent else [],
                after_lines=self.read_lines(file_path, commit),
            )
