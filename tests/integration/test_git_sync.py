"""Integration tests against real git repositories"""

import os
import shutil
import subprocess
from datetime import date
from pathlib import Path

import pytest

from blogpub.config import AppConfig
from blogpub.services.change_detector import ChangeDetector
from blogpub.services.git import GitClient, GitHistory
from blogpub.services.pipeline import PublishPipeline

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

GIT_CONFIG = [
    "-c", "user.name=Blog Author",
    "-c", "user.email=author@example.com",
    "-c", "init.defaultBranch=main",
    "-c", "commit.gpgsign=false",
]


def git(cwd: Path, *args: str, when: str | None = None) -> str:
    env = dict(os.environ)
    if when:
        env["GIT_AUTHOR_DATE"] = when
        env["GIT_COMMITTER_DATE"] = when
    completed = subprocess.run(
        ["git", *GIT_CONFIG, *args],
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )
    return completed.stdout


def commit_file(repo: Path, name: str, text: str, when: str) -> None:
    (repo / name).write_text(text)
    git(repo, "add", name)
    git(repo, "commit", "-m", f"Update {name}", when=when)


@pytest.fixture
def repos(tmp_path):
    """A bare remote, an author clone that pushes, and the site checkout"""
    remote = tmp_path / "remote.git"
    author = tmp_path / "author"
    site = tmp_path / "site"

    git(tmp_path, "init", "--bare", str(remote))
    git(tmp_path, "clone", str(remote), str(author))
    git(author, "symbolic-ref", "HEAD", "refs/heads/main")
    commit_file(author, "a.md", "# Post A\n", "2024-03-01T12:00:00+00:00")
    git(author, "push", "-u", "origin", "main")
    git(tmp_path, "clone", str(remote), str(site))

    return remote, author, site


class TestChangeDetectorWithGit:
    """Change detection against a real remote"""

    def test_fresh_clone_has_no_new_content(self, repos):
        _, _, site = repos

        assert ChangeDetector(GitClient(site)).has_new_content() is False

    def test_pushed_commit_is_detected_and_pulled(self, repos):
        _, author, site = repos
        commit_file(author, "b.md", "# Post B\n", "2024-04-01T12:00:00+00:00")
        git(author, "push")

        detector = ChangeDetector(GitClient(site))

        assert detector.has_new_content() is True
        assert (site / "b.md").read_text() == "# Post B\n"
        # Second check finds nothing new
        assert detector.has_new_content() is False

    def test_local_only_commits_are_not_new_content(self, repos):
        _, _, site = repos
        commit_file(site, "local.md", "# Local\n", "2024-05-01T12:00:00+00:00")

        assert ChangeDetector(GitClient(site)).has_new_content() is False

    def test_unreachable_remote_skips_cycle(self, repos, tmp_path):
        _, _, site = repos
        git(site, "remote", "set-url", "origin", str(tmp_path / "does-not-exist.git"))

        assert ChangeDetector(GitClient(site, timeout=30)).has_new_content() is False


class TestGitHistoryWithGit:
    """Creation dates from real history"""

    def test_first_revision_survives_later_edits(self, repos):
        _, author, _ = repos
        commit_file(author, "a.md", "# Post A (edited)\n", "2025-01-15T08:00:00+00:00")

        history = GitHistory(GitClient(author))

        assert history.first_revision("a.md") == date(2024, 3, 1)

    def test_untracked_file_has_no_history(self, repos):
        _, author, _ = repos
        (author / "new.md").write_text("# New\n")

        assert GitHistory(GitClient(author)).first_revision("new.md") is None


class TestPipelineWithGit:
    """Full batch driven by a real checkout"""

    def test_publish_after_push(self, repos, tmp_path):
        _, author, site = repos
        public = tmp_path / "public"
        app_config = AppConfig(content_dir=str(site), output_dir=str(public))
        pipeline = PublishPipeline.from_config(app_config)

        # Nothing new yet: nothing published
        first = pipeline.run()
        assert first.ran is False
        assert not public.exists()

        commit_file(author, "b.md", "# Post B\n", "2024-04-01T12:00:00+00:00")
        git(author, "push")

        second = pipeline.run()

        assert second.ran is True
        assert second.converted_count == 2
        index = (public / "index.html").read_text()
        assert "<td>2024-03-01</td>" in index
        assert "<td>2024-04-01</td>" in index
