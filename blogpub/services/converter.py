"""Markdown to HTML conversion"""

import logging
from typing import Any

import yaml
from markdown_it import MarkdownIt
from mdit_py_plugins.front_matter import front_matter_plugin

from blogpub.models.document import ConvertedArtifact, Document
from blogpub.services.storage import Storage

logger = logging.getLogger(__name__)


class ConversionError(Exception):
    """Raised when a document cannot be converted"""

    def __init__(self, name: str, message: str):
        self.name = name
        self.message = message
        super().__init__(f"Failed to convert {name}: {message}")


class MarkdownConverter:
    """Render markdown documents into HTML fragments"""

    def __init__(self, output_suffix: str = ".html"):
        self.output_suffix = output_suffix

        # Initialize markdown-it parser with plugins
        self.md = MarkdownIt("commonmark", {"html": True})
        self.md.use(front_matter_plugin)
        self.md.enable("table")

    def convert(self, document: Document, storage: Storage) -> ConvertedArtifact:
        """
        Convert one document read from storage

        Args:
            document: Document to convert
            storage: Storage holding the document source

        Returns:
            ConvertedArtifact named after the document

        Raises:
            ConversionError: If the source cannot be read or is malformed
        """
        try:
            source = storage.read_text(document.name)
        except UnicodeDecodeError as e:
            raise ConversionError(document.name, f"not valid UTF-8 ({e.reason})") from e
        except OSError as e:
            raise ConversionError(document.name, f"cannot be read ({e})") from e

        html, front_matter = self.render(source, document.name)
        draft = front_matter.get("draft", False)
        if not isinstance(draft, bool):
            raise ConversionError(document.name, "draft must be a boolean")

        logger.debug(f"Converted {document.name} ({len(html)} bytes{', draft' if draft else ''})")
        return ConvertedArtifact(
            document=document,
            output_name=document.output_name(self.output_suffix),
            html=html,
            draft=draft,
        )

    def render(self, source: str, name: str = "<string>") -> tuple[str, dict[str, Any]]:
        """
        Render markdown text

        Returns:
            Tuple of (html, front_matter)

        Raises:
            ConversionError: If the front matter is not a valid YAML mapping
        """
        env: dict[str, Any] = {}
        tokens = self.md.parse(source, env)
        front_matter = self._front_matter(tokens, name)
        html = self.md.renderer.render(tokens, self.md.options, env)
        return html, front_matter

    def _front_matter(self, tokens: list, name: str) -> dict[str, Any]:
        """Parse the YAML front matter block, if the document has one"""
        for token in tokens:
            if token.type != "front_matter":
                continue

            try:
                data = yaml.safe_load(token.content)
            except yaml.YAMLError as e:
                raise ConversionError(name, f"invalid front matter: {e}") from e

            if data is None:
                return {}
            if not isinstance(data, dict):
                raise ConversionError(name, "front matter must be a mapping")
            return data

        return {}
