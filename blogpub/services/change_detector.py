"""Detect new content on the git remote and fast-forward the local checkout"""

import logging

from blogpub.services.git import GitClient, GitError

logger = logging.getLogger(__name__)


class ChangeDetector:
    """Compare the local checkout with its remote"""

    def __init__(self, client: GitClient, remote: str = "origin", branch: str = ""):
        """
        Initialize change detector

        Args:
            client: Git client bound to the content checkout
            remote: Remote to fetch from
            branch: Remote branch to compare against; empty uses the upstream
                of the current branch
        """
        self.client = client
        self.remote = remote
        self.branch = branch

    @property
    def upstream_ref(self) -> str:
        if self.branch:
            return f"{self.remote}/{self.branch}"
        return "@{upstream}"

    def has_new_content(self) -> bool:
        """
        Check the remote for new commits and synchronize when there are any

        Process:
        1. Fetch the remote
        2. Count upstream commits missing from HEAD
        3. If there are any, fast-forward the checkout

        Failures to reach the remote or to fast-forward are logged and
        reported as "no new content"; the next scheduled run retries.

        Returns:
            bool: True if new content was pulled into the checkout
        """
        try:
            self.client.run("fetch", "--quiet", self.remote)
        except GitError as e:
            logger.warning(f"Could not fetch from {self.remote}, skipping this cycle: {e}")
            return False

        try:
            target = self._rev_parse(self.upstream_ref)
            incoming = int(self.client.run("rev-list", "--count", f"HEAD..{target}").strip())
        except (GitError, ValueError) as e:
            logger.warning(f"Could not compare with {self.upstream_ref}, skipping this cycle: {e}")
            return False

        if incoming == 0:
            logger.info(f"Content is up to date with {self.upstream_ref}")
            return False

        logger.info(f"{incoming} new commit(s) on {self.upstream_ref}, now at {target[:12]}")

        try:
            self.client.run("merge", "--ff-only", "--quiet", target)
        except GitError as e:
            # A refused fast-forward leaves the working tree as it was
            logger.error(f"Could not fast-forward to {target[:12]}: {e}")
            return False

        logger.info(f"Synchronized content to {target[:12]}")
        return True

    def _rev_parse(self, ref: str) -> str:
        return self.client.run("rev-parse", "--verify", ref).strip()
