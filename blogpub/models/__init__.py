"""Data models for the publish pipeline"""

from blogpub.models.batch import (
    BatchContext,
    BatchReport,
    DocumentResult,
    DocumentStatus,
    PublishManifest,
    PublishResult,
)
from blogpub.models.document import ConvertedArtifact, Document, IndexEntry, IndexPage

__all__ = [
    "BatchContext",
    "BatchReport",
    "DocumentResult",
    "DocumentStatus",
    "PublishManifest",
    "PublishResult",
    "ConvertedArtifact",
    "Document",
    "IndexEntry",
    "IndexPage",
]
