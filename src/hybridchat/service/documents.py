"""In-memory document store for the fixed domain corpus.

Documents are read once at startup and never mutated. The catalog is split
into a resident partition (injected into every LLM call) and a searchable
partition (reachable through the retrieval tools).
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from hybridchat.constants import (
    DEFAULT_CONTENT_DIR,
    DEFAULT_RESIDENT_DOCUMENTS,
    DEFAULT_SEARCHABLE_DOCUMENTS,
    env_list,
)
from hybridchat.errors import DocumentNotFoundError, DocumentStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    """A named, immutable text document."""

    name: str
    content: str

    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))


@dataclass
class FileStatus:
    """Outcome of loading one catalog entry."""

    name: str
    loaded: bool
    size_bytes: int = 0
    error: str | None = None


@dataclass
class LoadReport:
    """Summary of a store load."""

    loaded_count: int = 0
    total_bytes: int = 0
    statuses: list[FileStatus] = field(default_factory=list)

    @property
    def missing(self) -> list[str]:
        return [status.name for status in self.statuses if not status.loaded]


@dataclass
class DocumentCatalog:
    """Static partition configuration of the corpus.

    A filename may appear in both partitions.
    """

    resident: list[str]
    searchable: list[str]
    base_directory: Path = Path(DEFAULT_CONTENT_DIR)

    def filenames(self) -> list[str]:
        """Union of both partitions in catalog order, without duplicates."""
        return list(dict.fromkeys([*self.resident, *self.searchable]))

    @classmethod
    def from_env(cls) -> "DocumentCatalog":
        """Build the catalog from CONTENT_DIR, RESIDENT_DOCUMENTS and SEARCHABLE_DOCUMENTS."""
        load_dotenv()
        return cls(
            resident=env_list("RESIDENT_DOCUMENTS", DEFAULT_RESIDENT_DOCUMENTS),
            searchable=env_list("SEARCHABLE_DOCUMENTS", DEFAULT_SEARCHABLE_DOCUMENTS),
            base_directory=Path(os.getenv("CONTENT_DIR", DEFAULT_CONTENT_DIR)),
        )


class DocumentStore:
    """Read-only catalog of loaded documents, in load order."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    async def load(self, filenames: list[str], base_directory: Path | str) -> LoadReport:
        """Load each filename from base_directory.

        A file that cannot be read is recorded in the report and skipped;
        the load itself never fails because of a single file.

        Args:
            filenames: Catalog filenames, in order
            base_directory: Directory holding the files

        Returns:
            LoadReport with per-file status
        """
        base = Path(base_directory)
        report = LoadReport()

        for filename in filenames:
            if filename in self._documents:
                continue

            path = base / filename
            try:
                content = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"⚠️ Could not load {filename}: {e}")
                report.statuses.append(FileStatus(name=filename, loaded=False, error=str(e)))
                continue

            document = Document(name=filename, content=content)
            self._documents[filename] = document
            report.loaded_count += 1
            report.total_bytes += document.size_bytes
            report.statuses.append(
                FileStatus(name=filename, loaded=True, size_bytes=document.size_bytes)
            )
            logger.info(f"✓ Loaded: {filename} ({document.size_bytes / 1024:.2f} KB)")

        logger.info(
            f"📚 Loaded {report.loaded_count}/{len(filenames)} documents "
            f"({report.total_bytes / 1024 / 1024:.2f} MB)"
        )
        return report

    def get(self, name: str) -> Document:
        """Return the document called name.

        Raises:
            DocumentNotFoundError: If the document is not loaded
        """
        try:
            return self._documents[name]
        except KeyError:
            raise DocumentNotFoundError(name) from None

    def partition(self, names: list[str]) -> list[Document]:
        """Return the loaded members of a partition, in partition order."""
        return [self._documents[name] for name in dict.fromkeys(names) if name in self._documents]

    # Defined last: the method name shadows the builtin inside the class body.
    def list(self) -> list[dict[str, int | str]]:
        """List loaded documents as {"filename", "size_bytes"} in load order."""
        return [
            {"filename": document.name, "size_bytes": document.size_bytes}
            for document in self._documents.values()
        ]


async def load_catalog(catalog: DocumentCatalog) -> tuple[DocumentStore, LoadReport]:
    """Load every document named by the catalog into a new store.

    Raises:
        DocumentStoreError: If no resident document could be loaded
    """
    logger.info(f"📂 Loading document catalog from {catalog.base_directory}")
    store = DocumentStore()
    report = await store.load(catalog.filenames(), catalog.base_directory)

    resident = store.partition(catalog.resident)
    if not resident:
        raise DocumentStoreError(
            f"No resident documents could be loaded from '{catalog.base_directory}' "
            f"({len(catalog.resident)} configured)"
        )

    resident_bytes = sum(document.size_bytes for document in resident)
    searchable_count = len(store.partition(catalog.searchable))
    logger.info(
        f"✅ Resident partition: {len(resident)}/{len(catalog.resident)} documents "
        f"({resident_bytes / 1024:.2f} KB per request)"
    )
    logger.info(
        f"✅ Searchable partition: {searchable_count}/{len(catalog.searchable)} documents"
    )
    return store, report
