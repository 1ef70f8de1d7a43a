#!/usr/bin/env python3

"""
Unit tests for report readers and file type detection
"""

from pathlib import Path

import pytest

from intelforge.modules.exceptions import (
    FileSizeError,
    IOCFileNotFoundError,
    PDFProcessingError,
    UnsupportedFileTypeError,
)
from intelforge.modules.file_parser import (
    HTMLParser,
    PDFParser,
    TextParser,
    detect_file_type,
    detect_file_type_by_extension,
    detect_file_type_by_mime,
    get_parser,
    read_report,
)


def create_minimal_pdf(pdf_path: Path, text_content: str) -> None:
    """
    Create a minimal PDF file with one line of text.

    The raw PDF syntax is enough for pdfplumber, so no PDF writer is needed.

    Args:
        pdf_path: Path where PDF will be created
        text_content: Text to include in the PDF
    """
    pdf_content = f"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /Resources 4 0 R /MediaBox [0 0 612 792] /Contents 5 0 R >>
endobj
4 0 obj
<< /Font << /F1 << /Type /Font /Subtype /Type1 /BaseFont /Helvetica >> >> >>
endobj
5 0 obj
<< /Length {len(text_content) + 50} >>
stream
BT
/F1 12 Tf
100 700 Td
({text_content}) Tj
ET
endstream
endobj
xref
0 6
0000000000 65535 f
0000000009 00000 n
0000000058 00000 n
0000000115 00000 n
0000000214 00000 n
0000000304 00000 n
trailer
<< /Size 6 /Root 1 0 R >>
startxref
{400 + len(text_content)}
%%EOF
"""
    pdf_path.write_text(pdf_content, encoding="latin-1")


HTML_REPORT = """<!DOCTYPE html>
<html>
<head>
  <title>Header only 203.0.113.99</title>
  <script>var tracker = "198.51.100.7";</script>
  <style>.x { color: red; }</style>
</head>
<body>
  <h1>Campaign analysis</h1>
  <p>The implant beacons to
     <a href="https://c2-panel.xyz/api/beacon">the panel</a>
     and to 45.77.10.5.</p>
  <noscript>Enable JS at 192.0.2.44</noscript>
</body>
</html>
"""


class TestFileParserBase:
    """Test checks shared by every parser."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises IOCFileNotFoundError."""
        with pytest.raises(IOCFileNotFoundError):
            TextParser(tmp_path / "missing.txt")

    def test_size_limit(self, tmp_path: Path) -> None:
        """Files above the size limit are refused."""
        # Arrange: A file of a little more than one kilobyte
        path = tmp_path / "big.txt"
        path.write_text("x" * 2048, encoding="utf-8")

        # Act / Assert: A 1 KB limit rejects it
        with pytest.raises(FileSizeError) as exc_info:
            TextParser(path, max_size_mb=1 / 1024)
        assert exc_info.value.max_size_mb == pytest.approx(1 / 1024)


class TestTextParser:
    """Test plain-text reading."""

    def test_read_text(self, tmp_path: Path) -> None:
        """Text files are returned as-is."""
        path = tmp_path / "report.txt"
        path.write_text("C2 at evil[.]com\n", encoding="utf-8")

        assert TextParser(path).extract_text() == "C2 at evil[.]com\n"

    def test_invalid_utf8_ignored(self, tmp_path: Path) -> None:
        """Undecodable bytes are skipped rather than failing the read."""
        path = tmp_path / "report.log"
        path.write_bytes(b"host \xff\xfe 8.8.8.8")

        assert "8.8.8.8" in TextParser(path).extract_text()


class TestHTMLParser:
    """Test HTML text extraction."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.report_name = "report.html"

    def test_visible_text_only(self, tmp_path: Path) -> None:
        """Head, scripts, styles and noscript blocks are removed."""
        # Arrange: Write an HTML report
        path = tmp_path / self.report_name
        path.write_text(HTML_REPORT, encoding="utf-8")

        # Act: Extract text
        text = HTMLParser(path).extract_text()

        # Assert: Body text is kept, hidden content is not
        assert "Campaign analysis" in text
        assert "45.77.10.5" in text
        assert "203.0.113.99" not in text
        assert "198.51.100.7" not in text
        assert "192.0.2.44" not in text

    def test_link_targets_kept(self, tmp_path: Path) -> None:
        """URLs only present in href attributes end up in the text."""
        path = tmp_path / self.report_name
        path.write_text(HTML_REPORT, encoding="utf-8")

        text = HTMLParser(path).extract_text()

        assert "https://c2-panel.xyz/api/beacon" in text


class TestPDFParser:
    """Test PDF text extraction using real PDF files."""

    def test_extract_text(self, tmp_path: Path) -> None:
        """Page text is extracted with pdfplumber."""
        # Arrange: Create a real PDF file with known content
        pdf_path = tmp_path / "report.pdf"
        create_minimal_pdf(pdf_path, "Beacon to 45.77.10.5 and bad-c2.xyz")

        # Act: Extract text using PDFParser
        extracted_text = PDFParser(pdf_path).extract_text()

        # Assert: Verify the expected text is present
        assert "45.77.10.5" in extracted_text
        assert "bad-c2.xyz" in extracted_text

    def test_corrupt_pdf(self, tmp_path: Path) -> None:
        """A file that is not a PDF raises PDFProcessingError."""
        pdf_path = tmp_path / "broken.pdf"
        pdf_path.write_bytes(b"this is not a pdf at all")

        with pytest.raises(PDFProcessingError):
            PDFParser(pdf_path).extract_text()


class TestFileTypeDetection:
    """Test file type detection."""

    @pytest.mark.parametrize(
        ("mime_type", "expected"),
        [
            ("application/pdf", "pdf"),
            ("text/html", "html"),
            ("application/xhtml+xml", "html"),
            ("text/plain", "text"),
            ("application/json", "text"),
            ("application/octet-stream", None),
        ],
    )
    def test_by_mime(self, mime_type: str, expected: str | None) -> None:
        """MIME types map to parser names."""
        assert detect_file_type_by_mime(mime_type) == expected

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("a.PDF", "pdf"), ("a.htm", "html"), ("a.log", "text"), ("a.exe", None)],
    )
    def test_by_extension(self, name: str, expected: str | None) -> None:
        """Extensions map to parser names, unknown ones to None."""
        assert detect_file_type_by_extension(Path(name)) == expected

    def test_detect_text_and_html(self, tmp_path: Path) -> None:
        """Content sniffing recognises text and HTML reports."""
        text_path = tmp_path / "notes.txt"
        text_path.write_text("plain notes about 8.8.8.8\n", encoding="utf-8")
        html_path = tmp_path / "page.html"
        html_path.write_text(HTML_REPORT, encoding="utf-8")

        assert detect_file_type(text_path) == "text"
        assert detect_file_type(html_path) == "html"

    def test_detect_pdf(self, tmp_path: Path) -> None:
        """PDF files are recognised by their content."""
        pdf_path = tmp_path / "report.pdf"
        create_minimal_pdf(pdf_path, "hello")

        assert detect_file_type(pdf_path) == "pdf"

    def test_unsupported_binary(self, tmp_path: Path) -> None:
        """Binary files with an unknown extension are unsupported."""
        path = tmp_path / "sample.bin"
        path.write_bytes(bytes(range(256)) * 4)

        with pytest.raises(UnsupportedFileTypeError):
            detect_file_type(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Detection on a missing file raises IOCFileNotFoundError."""
        with pytest.raises(IOCFileNotFoundError):
            detect_file_type(tmp_path / "missing.pdf")


class TestParserFactory:
    """Test parser selection and report reading."""

    def test_get_parser_by_content(self, tmp_path: Path) -> None:
        """The parser class follows the detected type."""
        path = tmp_path / "page.html"
        path.write_text(HTML_REPORT, encoding="utf-8")

        assert isinstance(get_parser(path), HTMLParser)

    def test_forced_type(self, tmp_path: Path) -> None:
        """A forced type overrides detection."""
        path = tmp_path / "page.html"
        path.write_text(HTML_REPORT, encoding="utf-8")

        assert isinstance(get_parser(path, "text"), TextParser)

    def test_unknown_forced_type(self, tmp_path: Path) -> None:
        """A forced type without a parser is unsupported."""
        path = tmp_path / "report.txt"
        path.write_text("x", encoding="utf-8")

        with pytest.raises(UnsupportedFileTypeError):
            get_parser(path, "docx")

    def test_read_report(self, tmp_path: Path) -> None:
        """read_report returns the text of a report."""
        path = tmp_path / "page.html"
        path.write_text(HTML_REPORT, encoding="utf-8")

        assert "45.77.10.5" in read_report(path)
