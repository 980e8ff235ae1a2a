"""Publish pipeline: detect changes, convert, index, publish"""

import logging
from datetime import datetime
from typing import Protocol

from blogpub.config import AppConfig, config
from blogpub.models.batch import BatchContext, BatchReport
from blogpub.services.change_detector import ChangeDetector
from blogpub.services.converter import ConversionError, MarkdownConverter
from blogpub.services.git import GitClient, GitHistory, NullHistory
from blogpub.services.index_builder import IndexBuilder
from blogpub.services.publisher import Publisher
from blogpub.services.storage import FileSystemStorage, Storage

logger = logging.getLogger(__name__)


class ChangeGate(Protocol):
    def has_new_content(self) -> bool: ...


class PublishPipeline:
    """Run one publish batch end to end"""

    def __init__(
        self,
        source: Storage,
        converter: MarkdownConverter,
        index_builder: IndexBuilder,
        publisher: Publisher,
        change_detector: ChangeGate | None = None,
        *,
        source_suffix: str = ".md",
        include_drafts: bool = False,
    ):
        """
        Initialize publish pipeline

        Args:
            source: Storage holding the markdown documents
            converter: Markdown converter
            index_builder: Index page builder
            publisher: Publisher for the serving storage
            change_detector: Gate deciding whether a batch runs; None always runs
            source_suffix: Extension identifying documents
            include_drafts: Publish documents marked as drafts
        """
        self.source = source
        self.converter = converter
        self.index_builder = index_builder
        self.publisher = publisher
        self.change_detector = change_detector
        self.source_suffix = source_suffix
        self.include_drafts = include_drafts

    @classmethod
    def from_config(cls, app_config: AppConfig | None = None) -> "PublishPipeline":
        """Wire the pipeline against the local filesystem and git"""
        app_config = app_config or config

        client = GitClient(app_config.content_dir, timeout=app_config.git_timeout_seconds)
        if app_config.sync_enabled:
            change_detector = ChangeDetector(
                client, remote=app_config.git_remote, branch=app_config.git_branch
            )
        else:
            change_detector = None

        history = GitHistory(client) if client.is_repository() else NullHistory()

        return cls(
            source=FileSystemStorage(app_config.content_dir),
            converter=MarkdownConverter(output_suffix=app_config.output_suffix),
            index_builder=IndexBuilder(history, heading=app_config.index_heading),
            publisher=Publisher(
                FileSystemStorage(app_config.output_dir),
                index_filename=app_config.index_filename,
                skip_unchanged=app_config.skip_unchanged,
                manifest_filename=app_config.manifest_filename or None,
            ),
            change_detector=change_detector,
            source_suffix=app_config.source_suffix,
            include_drafts=app_config.include_drafts,
        )

    def run(self, *, force: bool = False) -> BatchReport:
        """
        Execute a single publish batch

        Process:
        1. Ask the change detector whether new content arrived (unless forced)
        2. Resolve the document set into a batch context
        3. Convert every document, skipping malformed ones
        4. Build the index from all converted documents
        5. Publish artifacts and index

        Args:
            force: Run the batch even if no new content was detected

        Returns:
            BatchReport: Result of the run
        """
        start_time = datetime.now()

        if not force and self.change_detector is not None:
            if not self.change_detector.has_new_content():
                logger.info("No new content, nothing to publish")
                return self._report(start_time, ran=False)

        context = BatchContext(documents=self.source.list_documents(self.source_suffix))
        logger.info(f"Publishing {len(context.documents)} document(s)")

        self.convert_all(context)

        index_page = self.index_builder.build(context.artifacts)
        published = self.publisher.publish(context.artifacts, index_page)

        report = self._report(
            start_time,
            ran=True,
            context=context,
            published=published.written,
            unchanged=published.unchanged,
            index_written=published.index_written,
            removed=published.removed,
        )
        logger.info(
            f"Batch complete: {report.converted_count} converted, "
            f"{report.skipped_count} skipped in {report.duration_seconds:.2f}s"
        )
        return report

    def convert_all(self, context: BatchContext) -> None:
        """Convert each document of the batch, recording one result per document"""
        for document in context.documents:
            try:
                artifact = self.converter.convert(document, self.source)
            except ConversionError as e:
                logger.warning(f"Skipping {document.name}: {e.message}")
                context.record_skip(document, e.message)
                continue

            if artifact.draft and not self.include_drafts:
                logger.info(f"Not publishing draft {document.name}")
                context.record_draft(document)
                continue

            context.record_artifact(artifact)

    def _report(
        self,
        start_time: datetime,
        *,
        ran: bool,
        context: BatchContext | None = None,
        published: int = 0,
        unchanged: int = 0,
        index_written: bool = False,
        removed: list[str] | None = None,
    ) -> BatchReport:
        end_time = datetime.now()
        return BatchReport(
            started_at=start_time,
            finished_at=end_time,
            duration_seconds=(end_time - start_time).total_seconds(),
            ran=ran,
            results=context.results if context else [],
            published=published,
            unchanged=unchanged,
            index_written=index_written,
            removed=removed or [],
        )
