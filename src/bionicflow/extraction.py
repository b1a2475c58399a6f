from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Callable, Dict, List

import docx
import pypdf
from docx.opc.exceptions import PackageNotFoundError
from pypdf.errors import PyPdfError

from .epub import extract_epub_text
from .errors import ExtractionError

logger = logging.getLogger(__name__)

PLAIN_TEXT_SUFFIXES = {".txt", ".text", ".md", ".markdown"}
UTF16_BOMS = (b"\xff\xfe", b"\xfe\xff")


def extract_plain_text(path: Path) -> str:
    raw = path.read_bytes()
    if raw.startswith(UTF16_BOMS):
        return raw.decode("utf-16")
    if b"\x00" in raw:
        raise ExtractionError(f"{path.name} looks like a binary file, not text.")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def extract_pdf_text(path: Path) -> str:
    """Concatenate the text of every PDF page, separated by spaces."""
    try:
        reader = pypdf.PdfReader(str(path))
        pages: List[str] = []
        for page in reader.pages:
            pages.append(page.extract_text() or "")
    except (PyPdfError, ValueError) as exc:
        raise ExtractionError(f"Failed to parse PDF {path.name}: {exc}") from exc
    return " ".join(pages)


def extract_docx_text(path: Path) -> str:
    try:
        document = docx.Document(str(path))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise ExtractionError(
            f"Failed to parse {path.name}. Please ensure it is a valid Word document."
        ) from exc
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


EXTRACTORS: Dict[str, Callable[[Path], str]] = {
    **{suffix: extract_plain_text for suffix in PLAIN_TEXT_SUFFIXES},
    ".pdf": extract_pdf_text,
    ".docx": extract_docx_text,
    ".epub": extract_epub_text,
}

SUPPORTED_SUFFIXES = frozenset(EXTRACTORS)


def extract_text(path: str | Path) -> str:
    """Return the readable text of a plain-text, PDF, Word or EPUB document.

    Raises ExtractionError when the file is missing, unsupported, unreadable
    or contains no text.
    """
    source = Path(path)
    if not source.is_file():
        raise ExtractionError(f"File not found: {source}")

    extractor = EXTRACTORS.get(source.suffix.lower())
    if extractor is None:
        supported = ", ".join(sorted(SUPPORTED_SUFFIXES))
        raise ExtractionError(
            f"Unsupported file type '{source.suffix or source.name}'. Supported: {supported}"
        )

    logger.debug("Extracting %s with %s", source, extractor.__name__)
    try:
        text = extractor(source)
    except OSError as exc:
        raise ExtractionError(f"Unable to read {source}: {exc}") from exc

    if not text.strip():
        raise ExtractionError(f"No readable text found in {source.name}.")
    return text
