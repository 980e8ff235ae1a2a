"""Models describing a single publish batch and its outcome"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from blogpub.models.document import ConvertedArtifact, Document


class DocumentStatus(str, Enum):
    """What happened to a document during a batch"""

    CONVERTED = "converted"
    SKIPPED = "skipped"
    DRAFT = "draft"


class DocumentResult(BaseModel):
    """Explicit per-document result value"""

    name: str = Field(description="Document name")
    status: DocumentStatus = Field(description="Outcome of the conversion")
    reason: str | None = Field(default=None, description="Why the document was not converted")


class BatchContext(BaseModel):
    """State of one run, passed from stage to stage"""

    documents: list[Document] = Field(
        default_factory=list, description="Documents resolved at the start of the batch"
    )
    artifacts: list[ConvertedArtifact] = Field(
        default_factory=list, description="Successfully converted documents"
    )
    results: list[DocumentResult] = Field(
        default_factory=list, description="One result per resolved document"
    )

    def record_artifact(self, artifact: ConvertedArtifact) -> None:
        self.artifacts.append(artifact)
        self.results.append(
            DocumentResult(name=artifact.document.name, status=DocumentStatus.CONVERTED)
        )

    def record_skip(self, document: Document, reason: str) -> None:
        self.results.append(
            DocumentResult(name=document.name, status=DocumentStatus.SKIPPED, reason=reason)
        )

    def record_draft(self, document: Document) -> None:
        self.results.append(
            DocumentResult(
                name=document.name, status=DocumentStatus.DRAFT, reason="marked as draft"
            )
        )


class PublishResult(BaseModel):
    """What the publisher did with one batch of outputs"""

    written: int = Field(default=0, ge=0, description="Outputs written")
    unchanged: int = Field(default=0, ge=0, description="Outputs left untouched (same content)")
    index_written: bool = Field(default=False, description="Whether the index page was written")
    removed: list[str] = Field(
        default_factory=list, description="Stale outputs of earlier runs that were deleted"
    )


class PublishManifest(BaseModel):
    """Names of the outputs the publisher placed in the serving storage"""

    outputs: list[str] = Field(default_factory=list)


class BatchReport(BaseModel):
    """Aggregated result of a publish run"""

    started_at: datetime = Field(description="When the run started")
    finished_at: datetime = Field(description="When the run ended")
    duration_seconds: float = Field(ge=0.0, description="Duration in seconds")
    ran: bool = Field(description="False when the change gate skipped the batch")
    results: list[DocumentResult] = Field(default_factory=list)
    published: int = Field(default=0, ge=0, description="Outputs written this run")
    unchanged: int = Field(default=0, ge=0, description="Outputs left untouched (same content)")
    index_written: bool = Field(default=False, description="Whether the index page was written")
    removed: list[str] = Field(
        default_factory=list, description="Stale outputs deleted from the serving storage"
    )

    @property
    def converted_count(self) -> int:
        return sum(1 for r in self.results if r.status == DocumentStatus.CONVERTED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.status == DocumentStatus.SKIPPED)

    @property
    def has_warnings(self) -> bool:
        return self.skipped_count > 0
