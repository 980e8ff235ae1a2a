"""Git command wrapper and file version history"""

import logging
import subprocess
from datetime import date, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when a git command cannot be run or exits non-zero"""

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class GitClient:
    """Run git commands inside a working directory"""

    def __init__(self, repo_dir: str | Path, timeout: float = 60):
        self.repo_dir = Path(repo_dir)
        self.timeout = timeout

    def run(self, *args: str) -> str:
        """
        Run `git <args>` and return its stdout

        Raises:
            GitError: If git is missing, times out, or exits non-zero
        """
        command = ["git", *args]
        logger.debug(f"Running {' '.join(command)} in {self.repo_dir}")

        try:
            completed = subprocess.run(
                command,
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise GitError(f"git {args[0]} failed: {stderr or e}", e) from e
        except subprocess.TimeoutExpired as e:
            raise GitError(f"git {args[0]} timed out after {self.timeout}s", e) from e
        except OSError as e:
            # git binary missing or repo_dir not accessible
            raise GitError(f"Could not run git: {e}", e) from e

        return completed.stdout

    def is_repository(self) -> bool:
        """Whether repo_dir is inside a git work tree"""
        try:
            return self.run("rev-parse", "--is-inside-work-tree").strip() == "true"
        except GitError:
            return False


class GitHistory:
    """Creation dates of files, taken from their git history"""

    def __init__(self, client: GitClient):
        self.client = client

    def first_revision(self, name: str) -> date | None:
        """
        Date of the earliest commit touching name (following renames)

        Returns:
            The author date of the first revision, or None when the file has
            no recorded history or history is unavailable
        """
        try:
            output = self.client.run("log", "--follow", "--format=%aI", "--", name)
        except GitError as e:
            logger.debug(f"No history for {name}: {e}")
            return None

        timestamps = [line.strip() for line in output.splitlines() if line.strip()]
        if not timestamps:
            return None

        # git log lists newest first
        try:
            return datetime.fromisoformat(timestamps[-1]).date()
        except ValueError:
            logger.warning(f"Unparseable git date for {name}: {timestamps[-1]!r}")
            return None


class NullHistory:
    """History source used when git is disabled; knows no dates"""

    def first_revision(self, name: str) -> date | None:
        return None
