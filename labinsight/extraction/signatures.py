from labinsight.extraction.models import DocumentKind

_SIGNATURES: tuple[tuple[bytes, DocumentKind], ...] = (
    (b"%PDF", DocumentKind.PDF),
    (b"\xff\xd8\xff", DocumentKind.JPEG),
    (b"\x89PNG\r\n\x1a\n", DocumentKind.PNG),
)


def detect_document_kind(data: bytes) -> DocumentKind | None:
    """Return the format announced by the leading magic bytes, if any.

    PDF writers are allowed to emit junk before the header, so ``%PDF`` is
    searched for in the first kilobyte rather than only at offset zero.
    """
    for signature, kind in _SIGNATURES:
        if data.startswith(signature):
            return kind
    if b"%PDF-" in data[:1024]:
        return DocumentKind.PDF
    return None
