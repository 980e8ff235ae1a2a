"""Unit tests for the index builder"""

from datetime import date, datetime

import pytest

from blogpub.models.document import ConvertedArtifact, Document
from blogpub.services.index_builder import IndexBuilder, extract_title, newest_first


class FakeHistory:
    """History returning fixed first-revision dates"""

    def __init__(self, dates: dict[str, date] | None = None):
        self.dates = dates or {}
        self.calls: list[str] = []

    def first_revision(self, name: str) -> date | None:
        self.calls.append(name)
        return self.dates.get(name)


def _artifact(name: str, html: str, modified_at: datetime) -> ConvertedArtifact:
    document = Document(name=name, modified_at=modified_at)
    return ConvertedArtifact(document=document, output_name=document.output_name(), html=html)


@pytest.fixture
def builder():
    history = FakeHistory({"a.md": date(2023, 5, 1), "b.md": date(2024, 2, 29)})
    return IndexBuilder(history, today=lambda: date(2026, 10, 17))


class TestExtractTitle:
    """Test title extraction from rendered HTML"""

    def test_first_h1_wins(self):
        html = "<p>intro</p>\n<h1>First</h1>\n<h1>Second</h1>\n"
        assert extract_title(html) == "First"

    def test_nested_markup_is_flattened(self):
        assert extract_title("<h1>Hello <em>streams</em> world</h1>") == "Hello streams world"

    def test_no_h1_returns_none(self):
        assert extract_title("<h2>Only a subheading</h2><p>text</p>") is None

    def test_empty_h1_returns_none(self):
        assert extract_title("<h1>   </h1>") is None


class TestOrdering:
    """Test index ordering"""

    def test_newest_first(self):
        older = _artifact("a.md", "", datetime(2024, 1, 1))
        newer = _artifact("b.md", "", datetime(2024, 6, 1))

        assert [a.document.name for a in newest_first([older, newer])] == ["b.md", "a.md"]

    def test_equal_times_ordered_by_name(self):
        same = datetime(2024, 1, 1, 12, 0)
        artifacts = [
            _artifact("zeta.md", "", same),
            _artifact("alpha.md", "", same),
            _artifact("mid.md", "", datetime(2023, 1, 1)),
        ]

        ordered = [a.document.name for a in newest_first(artifacts)]

        assert ordered == ["alpha.md", "zeta.md", "mid.md"]

    def test_order_is_non_increasing(self):
        times = [datetime(2024, m, 1) for m in (3, 1, 12, 7, 7, 2)]
        artifacts = [_artifact(f"p{i}.md", "", t) for i, t in enumerate(times)]

        ordered = newest_first(artifacts)

        for current, following in zip(ordered, ordered[1:]):
            assert current.document.modified_at >= following.document.modified_at


class TestIndexBuilder:
    """Test index entries and page rendering"""

    def test_build_renders_table(self, builder):
        """Test the exact page layout: heading, table, one row per post"""
        artifacts = [
            _artifact("a.md", "<h1>Post A</h1>\n", datetime(2024, 1, 1)),
            _artifact("b.md", "<h1>Post B</h1>\n", datetime(2024, 3, 1)),
        ]

        page = builder.build(artifacts)

        assert [e.title for e in page.entries] == ["Post B", "Post A"]
        assert page.html == (
            "<h1>Posts</h1>\n"
            "<table>\n"
            '<tr><td><a href="b.html">Post B</a></td><td>2024-02-29</td></tr>\n'
            '<tr><td><a href="a.html">Post A</a></td><td>2023-05-01</td></tr>\n'
            "</table>\n"
        )

    def test_title_falls_back_to_file_name(self, builder):
        artifact = _artifact("c.md", "<p>No heading here</p>\n", datetime(2024, 1, 1))
        page = builder.build([artifact])

        assert page.entries[0].title == "c"
        assert page.entries[0].link == "c.html"

    def test_date_falls_back_to_today(self, builder):
        page = builder.build([_artifact("new.md", "<h1>New</h1>", datetime(2024, 1, 1))])

        assert page.entries[0].date == "2026-10-17"

    def test_history_is_queried_with_source_name(self):
        history = FakeHistory()
        IndexBuilder(history).build([_artifact("a.md", "<h1>A</h1>", datetime(2024, 1, 1))])

        assert history.calls == ["a.md"]

    def test_titles_and_heading_are_escaped(self):
        builder = IndexBuilder(
            FakeHistory(), heading="Notes & Rants", today=lambda: date(2024, 1, 1)
        )

        page = builder.build(
            [_artifact("fish.md", "<h1>Fish &amp; &lt;Chips&gt;</h1>", datetime(2024, 1, 1))]
        )

        assert page.entries[0].title == "Fish & <Chips>"
        assert "<h1>Notes &amp; Rants</h1>" in page.html
        assert ">Fish &amp; &lt;Chips&gt;</a>" in page.html

    def test_links_are_percent_encoded(self, builder):
        """Test file names with URL delimiters still link to their artifact"""
        artifacts = [
            _artifact("c#1.md", "<h1>C sharp</h1>", datetime(2024, 1, 3)),
            _artifact("why?.md", "<h1>Why</h1>", datetime(2024, 1, 2)),
            _artifact("100% & more.md", "<h1>All</h1>", datetime(2024, 1, 1)),
        ]

        page = builder.build(artifacts)

        assert '<a href="c%231.html">C sharp</a>' in page.html
        assert '<a href="why%3F.html">Why</a>' in page.html
        assert '<a href="100%25%20%26%20more.html">All</a>' in page.html
        assert page.entries[0].link == "c#1.html"

    def test_empty_batch_produces_empty_table(self, builder):
        page = builder.build([])

        assert page.entries == []
        assert page.html == "<h1>Posts</h1>\n<table>\n</table>\n"
