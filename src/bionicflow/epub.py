from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
import zipfile
from html.parser import HTMLParser
from pathlib import Path, PurePosixPath
from typing import Dict, List

from .errors import ExtractionError

logger = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
CHAPTER_SUFFIXES = {".xhtml", ".html", ".htm", ".txt"}
CHAPTER_MEDIA_PREFIXES = ("application/xhtml", "text/html", "text/plain")


class EPUBParseError(ExtractionError):
    """Raised when an EPUB archive cannot be parsed."""


def extract_epub_text(path: Path) -> str:
    """Return the readable chapters of an EPUB joined in reading (spine) order."""
    try:
        with zipfile.ZipFile(path, "r") as archive:
            opf_path = _package_document_path(archive)
            chapters = _reading_order(archive, opf_path) or _all_chapter_files(archive)
            logger.debug("Reading %d chapters from %s", len(chapters), path)
            texts: List[str] = []
            for name in chapters:
                try:
                    markup = archive.read(name).decode("utf-8", errors="ignore")
                except KeyError:
                    logger.debug("Spine entry %s missing from %s", name, path)
                    continue
                chapter_text = markup_to_text(markup)
                if chapter_text:
                    texts.append(chapter_text)
    except zipfile.BadZipFile as exc:
        raise EPUBParseError(f"Invalid EPUB archive: {path}") from exc
    return "\n\n".join(texts).strip()


def _package_document_path(archive: zipfile.ZipFile) -> str:
    try:
        root = ET.fromstring(archive.read(CONTAINER_PATH))
    except KeyError as exc:
        raise EPUBParseError(f"EPUB missing {CONTAINER_PATH}") from exc
    except ET.ParseError as exc:
        raise EPUBParseError("Unable to parse container.xml") from exc
    rootfile = root.find(".//{*}rootfile")
    full_path = rootfile.attrib.get("full-path") if rootfile is not None else None
    if not full_path:
        raise EPUBParseError("container.xml does not name a package document")
    return full_path


def _reading_order(archive: zipfile.ZipFile, opf_path: str) -> List[str]:
    try:
        package = ET.fromstring(archive.read(opf_path))
    except (KeyError, ET.ParseError):
        return []

    hrefs: Dict[str, str] = {}
    for item in package.iterfind(".//{*}manifest/{*}item"):
        media_type = item.attrib.get("media-type", "").lower()
        item_id = item.attrib.get("id")
        href = item.attrib.get("href")
        if item_id and href and media_type.startswith(CHAPTER_MEDIA_PREFIXES):
            hrefs[item_id] = href

    base = PurePosixPath(opf_path).parent
    ordered: List[str] = []
    for itemref in package.iterfind(".//{*}spine/{*}itemref"):
        href = hrefs.get(itemref.attrib.get("idref", ""))
        if href:
            ordered.append((base / href).as_posix() if str(base) != "." else href)
    return ordered


def _all_chapter_files(archive: zipfile.ZipFile) -> List[str]:
    return [
        name
        for name in archive.namelist()
        if PurePosixPath(name).suffix.lower() in CHAPTER_SUFFIXES
    ]


class _MarkupText(HTMLParser):
    """Collects text content, turning block-level elements into line breaks."""

    BREAKING_TAGS = frozenset(
        {"p", "div", "br", "li", "ul", "ol", "section", "article", "blockquote"}
        | {f"h{level}" for level in range(1, 7)}
    )
    SKIPPED_TAGS = frozenset({"script", "style", "head"})

    def __init__(self) -> None:
        super().__init__()
        self._lines: List[List[str]] = [[]]
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in self.SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag == "br":
            self._break()

    def handle_endtag(self, tag: str) -> None:
        if tag in self.SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in self.BREAKING_TAGS:
            self._break()

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        words = data.split()
        if words:
            self._lines[-1].extend(words)

    def _break(self) -> None:
        if self._lines[-1]:
            self._lines.append([])

    def text(self) -> str:
        return "\n".join(" ".join(words) for words in self._lines if words)


def markup_to_text(markup: str) -> str:
    """Strip tags from an (X)HTML chapter, keeping one line per block element."""
    parser = _MarkupText()
    parser.feed(markup)
    parser.close()
    return parser.text()
