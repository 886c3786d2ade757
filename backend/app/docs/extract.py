"""Text extraction from uploaded files."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import docx
from pypdf import PdfReader

from backend.app.errors import ExtractionError
from backend.app.models.docs import FileKind

logger = logging.getLogger(__name__)

_DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def infer_file_kind(filename: str, content_type: str | None) -> FileKind | None:
    """Infer the declared file kind from content type, falling back to extension.

    Returns:
        FileKind, or None when the upload is not a supported type
    """
    name = filename.lower()
    mimetype = (content_type or "").split(";")[0].strip().lower()

    if mimetype == "application/pdf" or name.endswith(".pdf"):
        return FileKind.pdf
    if mimetype == _DOCX_MIMETYPE or name.endswith(".docx"):
        return FileKind.docx
    # Browsers report markdown as text/plain or octet-stream, so the extension wins
    if name.endswith(".md") or mimetype == "text/markdown":
        return FileKind.md
    if mimetype == "text/plain" or name.endswith(".txt"):
        return FileKind.txt
    return None


class TextExtractor(Protocol):
    """Protocol for text extraction implementations."""

    async def extract(self, file_path: str, kind: FileKind) -> str:
        """Extract plain text from a stored file.

        Raises:
            ExtractionError: reason is one of not_found, unsupported, unreadable
        """
        ...


def _read_plain(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError("unreadable", "File is not valid UTF-8 text") from e


def _read_pdf(path: Path) -> str:
    try:
        reader = PdfReader(path)
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except Exception as e:
        raise ExtractionError("unreadable", f"PDF text extraction failed: {e}") from e
    return "\n".join(p for p in pages if p)


def _read_docx(path: Path) -> str:
    try:
        document = docx.Document(str(path))
    except Exception as e:
        raise ExtractionError("unreadable", f"DOCX text extraction failed: {e}") from e
    return "\n".join(p.text for p in document.paragraphs)


_READERS: dict[FileKind, Callable[[Path], str]] = {
    FileKind.txt: _read_plain,
    FileKind.md: _read_plain,
    FileKind.pdf: _read_pdf,
    FileKind.docx: _read_docx,
}


class FileTextExtractor:
    """Local-file extractor backed by pypdf and python-docx.

    Parsing runs in a worker thread so large files do not block the event loop.
    """

    async def extract(self, file_path: str, kind: FileKind) -> str:
        """Extract plain text from a stored file."""
        path = Path(file_path)
        if not path.is_file():
            raise ExtractionError("not_found", f"Stored file not found: {path.name}")

        reader = _READERS.get(kind)
        if reader is None:
            raise ExtractionError("unsupported", f"Unsupported file type: {kind}")

        text = await asyncio.to_thread(reader, path)
        logger.debug(f"Extracted {len(text)} chars from {path.name} ({kind.value})")
        return text
