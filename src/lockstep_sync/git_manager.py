"""
Git repository management and operations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple
from git import Repo, InvalidGitRepositoryError, NoSuchPathError
from git.exc import GitCommandError

from .models import GitRepositoryError, NoUpstreamTrackingError


logger = logging.getLogger(__name__)

NO_TRACKING_MARKER = "no tracking information"


class GitManager:
    """Manages Git operations for a single repository working directory."""

    def __init__(self, repo_path: Optional[Path] = None) -> None:
        """Initialize Git manager with optional repository path."""
        self.repo_path = Path(repo_path or Path.cwd()).resolve()
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        """Get the Git repository instance."""
        if self._repo is None:
            self._repo = self._open_repository()
        return self._repo

    def _open_repository(self) -> Repo:
        """Open the repository rooted exactly at repo_path.

        Parent directories are not searched: a missing submodule checkout must not
        silently resolve to the enclosing root repository.
        """
        logger.debug(f"Opening repository in: {self.repo_path}")
        try:
            return Repo(self.repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitRepositoryError(f"No Git repository found at {self.repo_path}") from e

    def get_current_branch(self) -> str:
        """Get the current branch name."""
        try:
            return self.repo.active_branch.name
        except TypeError as e:
            logger.error(f"Error getting current branch: {e}")
            raise GitRepositoryError(f"Could not determine current branch: {e}") from e

    def remote_names(self) -> List[str]:
        """Names of the configured remotes (e.g. ['origin'])."""
        return [r.name for r in self.repo.remotes]

    def checkout_branch(self, branch_name: str) -> None:
        """Checkout a specific branch."""
        try:
            self.repo.git.checkout(branch_name)
            logger.debug(f"Checked out branch: {branch_name} in {self.repo_path}")
        except GitCommandError as e:
            logger.error(f"Error checking out branch {branch_name}: {e}")
            raise GitRepositoryError(f"Failed to checkout branch {branch_name}: {e}") from e

    def create_local_branch(self, branch_name: str) -> None:
        """Create a new local branch from HEAD and check it out."""
        try:
            self.repo.git.checkout("-b", branch_name)
            logger.debug(f"Created branch {branch_name} in {self.repo_path}")
        except GitCommandError as e:
            logger.error(f"Error creating branch {branch_name}: {e}")
            raise GitRepositoryError(f"Failed to create branch {branch_name}: {e}") from e

    def lacks_upstream(self) -> bool:
        """True when the checked-out branch has no upstream configured."""
        try:
            return self.repo.active_branch.tracking_branch() is None
        except TypeError:
            # detached HEAD; git pull reports it
            return False

    def pull(self, remote_name: Optional[str] = None, branch_name: Optional[str] = None) -> None:
        """Pull into the current branch.

        Without arguments this relies on the branch's upstream. A missing upstream is
        reported as NoUpstreamTrackingError so callers can treat it as informational;
        it is detected from the branch configuration before git runs, with git's
        English stderr as a fallback.
        """
        args = [a for a in (remote_name, branch_name) if a]
        if not args and self.lacks_upstream():
            raise NoUpstreamTrackingError(
                f"There is no tracking information for the current branch in {self.repo_path}"
            )
        try:
            self.repo.git.pull(*args)
            logger.debug(f"Pulled {' '.join(args) or 'upstream'} in {self.repo_path}")
        except GitCommandError as e:
            if NO_TRACKING_MARKER in str(e).lower():
                raise NoUpstreamTrackingError(
                    f"There is no tracking information for the current branch in {self.repo_path}"
                ) from e
            logger.error(f"Pull failed in {self.repo_path}: {e}")
            raise GitRepositoryError(f"Failed to pull: {e}") from e

    def list_branches(self) -> List[str]:
        """List local and remote-tracking branch names.

        Local branches are returned by short name ('feature/x'), remote-tracking
        branches with their remote prefix ('origin/feature/x'). Symbolic remote HEAD
        refs are skipped.
        """
        try:
            output = self.repo.git.for_each_ref("--format=%(refname)", "refs/heads", "refs/remotes")
        except GitCommandError as e:
            logger.error(f"Error listing branches in {self.repo_path}: {e}")
            raise GitRepositoryError(f"Failed to list branches: {e}") from e

        names: List[str] = []
        for ln in output.splitlines():
            ref = ln.strip()
            if ref.startswith("refs/heads/"):
                names.append(ref[len("refs/heads/"):])
            elif ref.startswith("refs/remotes/"):
                name = ref[len("refs/remotes/"):]
                if name.endswith("/HEAD"):
                    continue
                names.append(name)
        return names

    def get_commit_for_ref(self, ref: str) -> str:
        """Return the full commit hash a ref points at."""
        try:
            value = self.repo.git.rev_parse("--verify", f"{ref}^{{commit}}").strip()
        except GitCommandError as e:
            logger.error(f"Could not resolve {ref} in {self.repo_path}: {e}")
            raise GitRepositoryError(f"Failed to resolve {ref}: {e}") from e
        if not value:
            raise GitRepositoryError(f"Failed to resolve {ref}: empty rev-parse output")
        return value

    def branches_containing_commit(self, commit_sha: str) -> Tuple[List[str], List[str]]:
        """Return (local_branches, remote_branches) that contain the given commit.

        Remote branch names are returned with their remote prefix as shown by
        `git branch -r` (e.g., "origin/feature/x").
        """
        try:
            local_branches: List[str] = []
            output = self.repo.git.branch("--contains", commit_sha)
            # Lines like: "* main" or "  feature/x"
            for ln in output.splitlines():
                name = ln.replace("*", "").strip()
                if not name:
                    continue
                # e.g. '(HEAD detached at 1234abcd)'
                if name.startswith("(") or "detached" in name.lower():
                    continue
                local_branches.append(name)

            remote_branches: List[str] = []
            output_r = self.repo.git.branch("-r", "--contains", commit_sha)
            for ln in output_r.splitlines():
                name = ln.strip()
                # 'origin/HEAD -> origin/main'
                if not name or "->" in name:
                    continue
                remote_branches.append(name)

            return local_branches, remote_branches
        except GitCommandError as e:
            logger.error(f"Error listing branches containing {commit_sha}: {e}")
            raise GitRepositoryError(f"Failed to list branches containing {commit_sha}: {e}") from e

    def raw_log(
        self, branch: str, max_entries: int = 100, fmt: str = "%d%s", first_parent: bool = True
    ) -> List[str]:
        """Return formatted log lines for the most recent commits of a branch."""
        args = [f"-n{max_entries}", branch, f"--pretty=format:{fmt}"]
        if first_parent:
            args.append("--first-parent")
        try:
            output = self.repo.git.log(*args)
        except GitCommandError as e:
            logger.error(f"Error reading log of {branch} in {self.repo_path}: {e}")
            raise GitRepositoryError(f"Failed to read log of {branch}: {e}") from e
        return [ln for ln in output.splitlines() if ln.strip()]
