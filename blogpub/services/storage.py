"""Storage backends for source documents and published output"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from blogpub.models.document import Document

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Minimal file store the pipeline reads from and writes to"""

    @abstractmethod
    def list_documents(self, suffix: str) -> list[Document]:
        """List top-level files ending in suffix, sorted by name"""

    @abstractmethod
    def read_bytes(self, name: str) -> bytes:
        """Return raw content of name (raises OSError if it cannot be read)"""

    @abstractmethod
    def write_text(self, name: str, text: str) -> None:
        """Replace name with text; readers see either the old or the new content"""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Whether name is present"""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove name; a missing name is not an error"""

    def read_text(self, name: str) -> str:
        """Read name as strict UTF-8"""
        return self.read_bytes(name).decode("utf-8")


class FileSystemStorage(Storage):
    """Storage rooted at a local directory"""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def list_documents(self, suffix: str) -> list[Document]:
        if not self.root.is_dir():
            logger.warning(f"Content directory does not exist: {self.root}")
            return []

        documents = []
        for path in sorted(self.root.glob(f"*{suffix}")):
            if not path.is_file():
                continue
            documents.append(
                Document(
                    name=path.name,
                    modified_at=datetime.fromtimestamp(path.stat().st_mtime),
                )
            )
        return documents

    def read_bytes(self, name: str) -> bytes:
        return (self.root / name).read_bytes()

    def write_text(self, name: str, text: str) -> None:
        target = self.root / name
        target.parent.mkdir(parents=True, exist_ok=True)

        # Write next to the target and rename over it
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def exists(self, name: str) -> bool:
        return (self.root / name).is_file()

    def delete(self, name: str) -> None:
        (self.root / name).unlink(missing_ok=True)


class MemoryStorage(Storage):
    """Dict-backed storage with explicit modification times"""

    def __init__(self):
        self._files: dict[str, tuple[bytes, datetime]] = {}
        self._unreadable: set[str] = set()
        self.writes: list[str] = []
        self.deletes: list[str] = []

    def put(
        self,
        name: str,
        content: str | bytes,
        modified_at: datetime | None = None,
        *,
        unreadable: bool = False,
    ) -> None:
        """Add or replace a file without recording it as a pipeline write"""
        data = content.encode("utf-8") if isinstance(content, str) else content
        self._files[name] = (data, modified_at or datetime.now())
        if unreadable:
            self._unreadable.add(name)
        else:
            self._unreadable.discard(name)

    def list_documents(self, suffix: str) -> list[Document]:
        return [
            Document(name=name, modified_at=modified_at)
            for name, (_, modified_at) in sorted(self._files.items())
            if name.endswith(suffix) and "/" not in name
        ]

    def read_bytes(self, name: str) -> bytes:
        if name in self._unreadable:
            raise PermissionError(f"Permission denied: {name}")
        try:
            return self._files[name][0]
        except KeyError:
            raise FileNotFoundError(f"No such file: {name}") from None

    def write_text(self, name: str, text: str) -> None:
        self._files[name] = (text.encode("utf-8"), datetime.now())
        self._unreadable.discard(name)
        self.writes.append(name)

    def exists(self, name: str) -> bool:
        return name in self._files

    def delete(self, name: str) -> None:
        self._files.pop(name, None)
        self._unreadable.discard(name)
        self.deletes.append(name)
