import re
import uuid
from dataclasses import dataclass
from pathlib import Path

from labinsight.documents.exceptions import DocumentNotFoundError
from labinsight.extraction.models import DocumentKind

_REF_PATTERN = re.compile(r"^[0-9a-f]{32}\.(pdf|jpeg|png)$")


@dataclass(frozen=True)
class StoredDocument:
    document_ref: str
    mime_type: str
    size_bytes: int


def document_file_path(files_root: Path, document_ref: str) -> Path:
    """Build path to a stored document: {files_root}/{document_ref}"""
    return files_root / document_ref


class FileStore:
    """Local blob store addressed by opaque document references."""

    def __init__(self, files_root: Path) -> None:
        self._files_root = files_root

    def save(self, data: bytes, kind: DocumentKind) -> StoredDocument:
        document_ref = f"{uuid.uuid4().hex}.{kind.value}"
        path = document_file_path(self._files_root, document_ref)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return StoredDocument(
            document_ref=document_ref, mime_type=kind.mime_type, size_bytes=len(data)
        )

    def load(self, document_ref: str) -> bytes:
        """Read document bytes from disk.

        Raises:
            DocumentNotFoundError: if the reference is malformed or missing.
        """
        if not _REF_PATTERN.match(document_ref):
            raise DocumentNotFoundError(f"Invalid document reference: {document_ref}")
        path = document_file_path(self._files_root, document_ref)
        if not path.exists():
            raise DocumentNotFoundError(f"Document not found: {document_ref}")
        return path.read_bytes()
