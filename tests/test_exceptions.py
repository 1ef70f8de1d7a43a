#!/usr/bin/env python3

"""
Unit tests for intelforge.modules.exceptions module

Tests check the exception hierarchy, messages and attributes.
"""

import pytest

from intelforge.modules.exceptions import (
    ConfigError,
    ExtractionError,
    FileParsingError,
    FileProcessingError,
    FileSizeError,
    HTMLProcessingError,
    IntelForgeError,
    IOCFileNotFoundError,
    NetworkError,
    PDFProcessingError,
    TriageError,
    UnsupportedFileTypeError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test that every exception derives from the right base."""

    @pytest.mark.parametrize(
        ("exception_class", "base"),
        [
            (ValidationError, IntelForgeError),
            (ConfigError, IntelForgeError),
            (ExtractionError, IntelForgeError),
            (FileParsingError, IntelForgeError),
            (PDFProcessingError, FileParsingError),
            (HTMLProcessingError, FileParsingError),
            (FileProcessingError, FileParsingError),
            (IOCFileNotFoundError, IntelForgeError),
            (UnsupportedFileTypeError, ValidationError),
            (FileSizeError, ValidationError),
            (NetworkError, IntelForgeError),
            (TriageError, NetworkError),
        ],
    )
    def test_subclass(self, exception_class: type, base: type) -> None:
        """Exception classes sit under the expected parent."""
        assert issubclass(exception_class, base)


class TestExceptionMessages:
    """Test exception messages and attributes."""

    def test_config_error(self) -> None:
        """ConfigError keeps the setting and reason."""
        error = ConfigError("chunk_lines", "must be at least 1")

        assert error.setting == "chunk_lines"
        assert error.reason == "must be at least 1"
        assert str(error) == "Invalid configuration for chunk_lines: must be at least 1"

    def test_file_not_found(self) -> None:
        """IOCFileNotFoundError names the file."""
        error = IOCFileNotFoundError("/tmp/report.pdf")

        assert error.file_path == "/tmp/report.pdf"
        assert str(error) == "File not found: /tmp/report.pdf"

    def test_file_size_error(self) -> None:
        """FileSizeError formats both sizes with two decimals."""
        error = FileSizeError(150.456, 100.0)

        assert error.actual_size_mb == 150.456
        assert str(error) == "File size (150.46MB) exceeds maximum allowed size (100.00MB)"

    def test_processing_errors(self) -> None:
        """Parser errors include their reason."""
        assert str(PDFProcessingError("bad xref")) == "Error processing PDF: bad xref"
        assert str(HTMLProcessingError("bad tag")) == "Error processing HTML: bad tag"
        assert str(FileProcessingError("a.txt", "denied")) == "Failed to process a.txt: denied"

    def test_triage_error(self) -> None:
        """TriageError lists the providers tried."""
        error = TriageError(["openai", "openrouter"], "timeout")

        assert error.providers == ["openai", "openrouter"]
        assert "openai, openrouter" in str(error)
        assert "none" in str(TriageError([], "no provider answered"))

    def test_caught_by_base(self) -> None:
        """Everything can be caught as IntelForgeError."""
        with pytest.raises(IntelForgeError):
            raise UnsupportedFileTypeError("sample.bin")
