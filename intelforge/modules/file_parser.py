#!/usr/bin/env python3

"""
Module for extracting text from report files of different types
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

import magic
import pdfplumber
from bs4 import BeautifulSoup
from tqdm import tqdm

from intelforge.modules.exceptions import (
    FileProcessingError,
    FileSizeError,
    HTMLProcessingError,
    IOCFileNotFoundError,
    PDFProcessingError,
    UnsupportedFileTypeError,
)
from intelforge.modules.logger import get_logger

logger = get_logger(__name__)

# Constants
MAX_FILE_SIZE_MB = 100.0
PDF_PROGRESS_MIN_PAGES = 5

EXTENSION_MAP = {
    ".pdf": "pdf",
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
    ".xml": "html",
    ".txt": "text",
    ".log": "text",
    ".md": "text",
    ".csv": "text",
    ".json": "text",
    ".ioc": "text",
}


class FileParser(ABC):
    """Abstract base class for all file parsers."""

    def __init__(self, file_path: Path | str, max_size_mb: float = MAX_FILE_SIZE_MB) -> None:
        """
        Initialize the file parser.

        Args:
            file_path: Path to the file to parse
            max_size_mb: Largest accepted file size

        Raises:
            IOCFileNotFoundError: If the file does not exist
            FileSizeError: If the file is larger than allowed
        """
        self.file_path = Path(file_path)

        if not self.file_path.is_file():
            raise IOCFileNotFoundError(str(self.file_path))

        size_mb = self.file_path.stat().st_size / (1024 * 1024)
        if size_mb > max_size_mb:
            raise FileSizeError(size_mb, max_size_mb)

    @abstractmethod
    def extract_text(self) -> str:
        """
        Extract text from the file.

        Returns:
            The extracted text content
        """


class TextParser(FileParser):
    """Class for reading plain-text reports."""

    def extract_text(self) -> str:
        try:
            return self.file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            raise FileProcessingError(str(self.file_path), str(e)) from e


class PDFParser(FileParser):
    """Class for extracting text from PDF files."""

    def extract_text(self) -> str:
        """
        Extract text from a PDF file.

        Page text comes first, followed by the rows of any tables on the
        page, since indicator tables are common in vendor reports.

        Returns:
            The extracted text content
        """
        logger.info("Extracting text from PDF: %s", self.file_path)

        parts: list[str] = []
        try:
            with pdfplumber.open(self.file_path) as pdf:
                pages = pdf.pages
                for page in tqdm(
                    pages,
                    desc="Processing pages",
                    unit="page",
                    disable=len(pages) < PDF_PROGRESS_MIN_PAGES,
                ):
                    parts.append(str(page.extract_text() or ""))

                    for table in page.extract_tables() or []:
                        for row in table or []:
                            if row:
                                parts.append(" ".join(str(cell) for cell in row if cell))
        except Exception as e:
            raise PDFProcessingError(str(e)) from e

        return "\n".join(parts)


class HTMLParser(FileParser):
    """Class for extracting text from HTML files."""

    def extract_text(self) -> str:
        """
        Extract visible text from an HTML file.

        Link targets are kept next to their text so URLs that only appear in
        ``href`` attributes are not lost.

        Returns:
            The extracted text content
        """
        logger.info("Extracting text from HTML: %s", self.file_path)

        try:
            content = self.file_path.read_text(encoding="utf-8", errors="ignore")
            soup = BeautifulSoup(content, "html.parser")

            # Remove scripts and styles that we're not interested in
            for tag in soup(["script", "style", "meta", "noscript", "head"]):
                tag.decompose()

            for link in soup.find_all("a", href=True):
                href = str(link["href"])
                if href.startswith(("http://", "https://")):
                    link.append(f" {href} ")

            text = soup.get_text(separator=" ", strip=True)
        except OSError as e:
            raise FileProcessingError(str(self.file_path), str(e)) from e
        except (ValueError, TypeError, AttributeError) as e:
            raise HTMLProcessingError(str(e)) from e

        # Clean multiple whitespaces
        return re.sub(r"[ \t]+", " ", text)


PARSERS: dict[str, type[FileParser]] = {
    "text": TextParser,
    "html": HTMLParser,
    "pdf": PDFParser,
}


def detect_file_type_by_mime(mime_type: str) -> str | None:
    """Detect file type from MIME type."""
    mime_lower = mime_type.lower()
    if "pdf" in mime_lower:
        return "pdf"
    if "html" in mime_lower or "xml" in mime_lower:
        return "html"
    if mime_lower.startswith("text/") or mime_lower in ("application/json", "inode/x-empty"):
        return "text"
    return None


def detect_file_type_by_extension(file_path: Path) -> str | None:
    """Detect file type from file extension."""
    return EXTENSION_MAP.get(file_path.suffix.lower())


def detect_file_type(file_path: Path | str) -> str:
    """
    Detect the type of a report file.

    libmagic sniffs the content first; the extension decides when the MIME
    type is inconclusive or libmagic fails.

    Args:
        file_path: Path to the file

    Returns:
        Detected file type ('pdf', 'html', or 'text')

    Raises:
        IOCFileNotFoundError: If the file does not exist
        UnsupportedFileTypeError: If neither content nor extension is supported
    """
    path = Path(file_path)
    if not path.is_file():
        raise IOCFileNotFoundError(str(path))

    try:
        mime_type = str(magic.from_file(str(path), mime=True))
    except (OSError, magic.MagicException) as e:
        logger.warning("Error detecting file type: %s, falling back to extension", e)
    else:
        detected = detect_file_type_by_mime(mime_type)
        # text/plain HTML fragments are still HTML
        if detected == "text" and path.suffix.lower() in (".html", ".htm", ".xhtml"):
            return "html"
        if detected:
            return detected
        logger.debug("Unrecognized MIME type %s for %s", mime_type, path)

    by_extension = detect_file_type_by_extension(path)
    if by_extension is None:
        raise UnsupportedFileTypeError(str(path))
    return by_extension


def get_parser(file_path: Path | str, file_type: str | None = None) -> FileParser:
    """
    Return the parser for a report file.

    Args:
        file_path: Path to the file
        file_type: Force a file type ('pdf', 'html' or 'text')

    Returns:
        The appropriate parser for the file type

    Raises:
        UnsupportedFileTypeError: If the type has no parser
    """
    resolved_type = file_type or detect_file_type(file_path)
    parser_class = PARSERS.get(resolved_type)
    if parser_class is None:
        raise UnsupportedFileTypeError(str(file_path))
    return parser_class(file_path)


def read_report(file_path: Path | str, file_type: str | None = None) -> str:
    """Read a local report file and return its text."""
    return get_parser(file_path, file_type).extract_text()
