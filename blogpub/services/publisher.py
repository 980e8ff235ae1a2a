"""Place converted artifacts and the index page at their serving locations"""

import json
import logging
from collections.abc import Iterable

from blogpub.models.batch import PublishManifest, PublishResult
from blogpub.models.document import ConvertedArtifact, IndexPage
from blogpub.services.storage import Storage

logger = logging.getLogger(__name__)


class Publisher:
    """Write pipeline output to the serving storage, unmodified"""

    def __init__(
        self,
        storage: Storage,
        index_filename: str = "index.html",
        *,
        skip_unchanged: bool = True,
        manifest_filename: str | None = None,
    ):
        """
        Initialize publisher

        Args:
            storage: Serving storage
            index_filename: Name the index page is published under
            skip_unchanged: Leave outputs alone when their bytes already match
            manifest_filename: Where to record published artifact names; when set,
                artifacts recorded by an earlier run but not produced by this one
                are deleted
        """
        self.storage = storage
        self.index_filename = index_filename
        self.skip_unchanged = skip_unchanged
        self.manifest_filename = manifest_filename

    def publish(
        self, artifacts: Iterable[ConvertedArtifact], index_page: IndexPage
    ) -> PublishResult:
        """
        Publish all artifacts, then the index page, then remove stale artifacts

        Returns:
            PublishResult with written/unchanged counts (index included)

        Raises:
            OSError: If the serving storage cannot be written
        """
        result = PublishResult()
        names = []

        for artifact in artifacts:
            names.append(artifact.output_name)
            if self.write(artifact.output_name, artifact.html):
                result.written += 1
            else:
                result.unchanged += 1

        result.index_written = self.write(self.index_filename, index_page.html)
        if result.index_written:
            result.written += 1
        else:
            result.unchanged += 1

        if self.manifest_filename:
            result.removed = self.prune(names)

        logger.info(
            f"Published {result.written} file(s), {result.unchanged} unchanged, "
            f"{len(result.removed)} removed"
        )
        return result

    def write(self, name: str, content: str) -> bool:
        """Write one output; returns False when it was left untouched"""
        if self.skip_unchanged and self._is_current(name, content):
            logger.debug(f"Unchanged: {name}")
            return False

        self.storage.write_text(name, content)
        logger.debug(f"Wrote {name}")
        return True

    def prune(self, current: list[str]) -> list[str]:
        """Delete artifacts of the previous run that are not in current, then record current"""
        previous = self._load_manifest()
        keep = {*current, self.index_filename, self.manifest_filename}

        removed = []
        for name in previous.outputs:
            if name in keep or name in removed:
                continue
            self.storage.delete(name)
            logger.info(f"Removed stale output {name}")
            removed.append(name)

        manifest = PublishManifest(outputs=sorted(set(current)))
        self.write(self.manifest_filename, manifest.model_dump_json(indent=2) + "\n")
        return removed

    def _load_manifest(self) -> PublishManifest:
        """Load the manifest of the previous run; unusable manifests count as empty"""
        if not self.storage.exists(self.manifest_filename):
            return PublishManifest()

        try:
            data = json.loads(self.storage.read_text(self.manifest_filename))
            return PublishManifest(**data)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unusable manifest {self.manifest_filename}: {e}")
            return PublishManifest()

    def _is_current(self, name: str, content: str) -> bool:
        if not self.storage.exists(name):
            return False
        try:
            return self.storage.read_bytes(name) == content.encode("utf-8")
        except OSError as e:
            logger.warning(f"Could not read existing {name}, rewriting it: {e}")
            return False
