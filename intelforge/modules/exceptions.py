#!/usr/bin/env python3

"""
Custom exceptions for IntelForge
"""


class IntelForgeError(Exception):
    """Base exception for IntelForge."""


class ValidationError(IntelForgeError):
    """Exception raised for input validation errors."""


class ConfigError(IntelForgeError):
    """Exception raised when configuration is invalid or missing."""

    def __init__(self, setting: str, reason: str) -> None:
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid configuration for {setting}: {reason}")


class ExtractionError(IntelForgeError):
    """Exception raised when IOC extraction fails."""


class FileParsingError(IntelForgeError):
    """Exception raised when file parsing fails."""


class PDFProcessingError(FileParsingError):
    """Exception raised when PDF processing fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Error processing PDF: {reason}")


class HTMLProcessingError(FileParsingError):
    """Exception raised when HTML processing fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Error processing HTML: {reason}")


class FileProcessingError(FileParsingError):
    """Exception raised when file processing fails."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Failed to process {file_path}: {reason}")


class IOCFileNotFoundError(IntelForgeError):
    """Exception raised when file is not found."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"File not found: {file_path}")


class UnsupportedFileTypeError(ValidationError):
    """Exception raised for unsupported file types."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"Unsupported file type: {file_path}")


class FileSizeError(ValidationError):
    """Exception raised when file size exceeds limits."""

    def __init__(self, actual_size_mb: float, max_size_mb: float, item_type: str = "File") -> None:
        self.actual_size_mb = actual_size_mb
        self.max_size_mb = max_size_mb
        self.item_type = item_type
        message = (
            f"{item_type} size ({actual_size_mb:.2f}MB) exceeds "
            f"maximum allowed size ({max_size_mb:.2f}MB)"
        )
        super().__init__(message)


class NetworkError(IntelForgeError):
    """Exception raised for network-related errors."""


class TriageError(NetworkError):
    """Exception raised when no triage provider produced a usable answer."""

    def __init__(self, providers: list[str], reason: str) -> None:
        self.providers = providers
        self.reason = reason
        tried = ", ".join(providers) if providers else "none"
        super().__init__(f"AI triage failed (providers tried: {tried}): {reason}")
