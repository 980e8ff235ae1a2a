"""Build the index page listing every converted document"""

import html
import logging
from urllib.parse import quote
from collections.abc import Callable, Iterable
from datetime import date
from typing import Protocol

from bs4 import BeautifulSoup

from blogpub.models.document import ConvertedArtifact, IndexEntry, IndexPage

logger = logging.getLogger(__name__)


class VersionHistory(Protocol):
    def first_revision(self, name: str) -> date | None: ...


def newest_first(artifacts: Iterable[ConvertedArtifact]) -> list[ConvertedArtifact]:
    """Order by modification time descending; equal times fall back to name ascending"""
    by_name = sorted(artifacts, key=lambda a: a.document.name)
    return sorted(by_name, key=lambda a: a.document.modified_at, reverse=True)


def extract_title(html_content: str) -> str | None:
    """Text of the first <h1> in an HTML fragment, whitespace collapsed"""
    soup = BeautifulSoup(html_content, "lxml")
    h1_tag = soup.find("h1")
    if not h1_tag:
        return None

    title = " ".join(h1_tag.get_text().split())
    return title or None


class IndexBuilder:
    """Derive titles and dates for a batch and render the listing page"""

    def __init__(
        self,
        history: VersionHistory,
        heading: str = "Posts",
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize index builder

        Args:
            history: Source of first-revision dates
            heading: Page heading shown above the table
            today: Clock used when a document has no history
        """
        self.history = history
        self.heading = heading
        self.today = today

    def build(self, artifacts: Iterable[ConvertedArtifact]) -> IndexPage:
        """
        Build the index for the complete set of converted documents

        Args:
            artifacts: Every artifact converted in this batch

        Returns:
            IndexPage with one entry per artifact, newest first
        """
        entries = [self.entry_for(artifact) for artifact in newest_first(artifacts)]
        logger.info(f"Built index with {len(entries)} entries")
        return IndexPage(entries=entries, html=self.render(entries))

    def entry_for(self, artifact: ConvertedArtifact) -> IndexEntry:
        document = artifact.document

        title = extract_title(artifact.html)
        if title is None:
            logger.info(f"No level-1 heading in {document.name}, using file name as title")
            title = document.stem

        created = self.history.first_revision(document.name)
        if created is None:
            logger.info(f"No version history for {document.name}, dating it today")
            created = self.today()

        return IndexEntry(
            link=artifact.output_name,
            title=title,
            date=created.strftime("%Y-%m-%d"),
        )

    def render(self, entries: list[IndexEntry]) -> str:
        rows = []
        for entry in entries:
            # Percent-encode so names with "#", "?" or "%" still resolve to the file
            href = html.escape(quote(entry.link))
            rows.append(
                f'<tr><td><a href="{href}">{html.escape(entry.title)}</a></td>'
                f"<td>{entry.date}</td></tr>"
            )
        parts = [f"<h1>{html.escape(self.heading)}</h1>", "<table>", *rows, "</table>"]
        return "\n".join(parts) + "\n"
