"""Document, artifact and index data models"""

from datetime import datetime
from pathlib import PurePosixPath

from pydantic import BaseModel, Field


class Document(BaseModel):
    """One source markdown file representing a single post"""

    name: str = Field(min_length=1, description="Path relative to the content root (e.g. a.md)")
    modified_at: datetime = Field(description="Last modification time of the source file")

    @property
    def stem(self) -> str:
        """File name without directory and extension"""
        return PurePosixPath(self.name).stem

    def output_name(self, suffix: str = ".html") -> str:
        """Artifact name: the source name with its extension replaced"""
        return str(PurePosixPath(self.name).with_suffix(suffix))


class ConvertedArtifact(BaseModel):
    """HTML rendering of one Document"""

    document: Document = Field(description="Document this artifact was rendered from")
    output_name: str = Field(min_length=1, description="Name the artifact is published under")
    html: str = Field(description="Rendered HTML fragment")
    draft: bool = Field(default=False, description="Front matter marked the document as a draft")


class IndexEntry(BaseModel):
    """One row of the index page"""

    link: str = Field(min_length=1, description="Relative link to the artifact")
    title: str = Field(min_length=1, description="Post title")
    date: str = Field(
        pattern=r"^\d{4}-\d{2}-\d{2}$", description="Creation date formatted as YYYY-MM-DD"
    )


class IndexPage(BaseModel):
    """The generated listing page"""

    entries: list[IndexEntry] = Field(default_factory=list, description="Rows, newest first")
    html: str = Field(description="Rendered index page")
