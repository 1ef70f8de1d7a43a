#!/usr/bin/env python3

"""
Core helpers for extracting indicators of compromise (IOCs).
"""

from __future__ import annotations

from collections.abc import Iterable
from re import Pattern
from urllib.parse import urlsplit

from intelforge.modules.extractor_patterns import PATTERNS
from intelforge.modules.logger import get_logger
from intelforge.modules.models import ExtractionOptions, IOCType, normalize_case, unique_values
from intelforge.modules.warninglists import DEFAULT_WARNING_LISTS, WarningLists

# Constants for validation
MAX_DOMAIN_LENGTH = 253
MAX_PORT = 65535

logger = get_logger(__name__)


class ExtractorBase:
    """Shared helper methods for IOC extraction."""

    def __init__(
        self,
        options: ExtractionOptions | None = None,
        warning_lists: WarningLists | None = None,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            options: Filtering options, defaults to ExtractionOptions()
            warning_lists: Classification tables, defaults to the bundled ones
        """
        self.options = options if options is not None else ExtractionOptions()
        self.warning_lists = warning_lists if warning_lists is not None else DEFAULT_WARNING_LISTS

        # Shared, read-only compiled patterns
        self.patterns: dict[IOCType, Pattern[str]] = PATTERNS

    def _find_matches(self, text: str, ioc_type: IOCType) -> list[str]:
        """Return every match of a type's pattern in text order."""
        return [match.group(0) for match in self.patterns[ioc_type].finditer(text)]

    def _unique(self, ioc_type: IOCType, values: Iterable[str]) -> list[str]:
        """Case-normalize values for a type and drop repeats, keeping first-seen order."""
        return list(unique_values(normalize_case(ioc_type, value) for value in values))

    def _extract_pattern(self, text: str, ioc_type: IOCType) -> list[str]:
        """
        Extract matches for a specific pattern.

        Args:
            text: Normalized text to search in
            ioc_type: IOC type whose pattern is used

        Returns:
            Case-normalized, deduplicated matches in first-seen order
        """
        if not text:
            return []
        return self._unique(ioc_type, self._find_matches(text, ioc_type))

    @staticmethod
    def _url_hostname(url: str) -> str | None:
        """
        Return the lowercased hostname of a URL.

        Args:
            url: URL to parse

        Returns:
            Hostname, or None when the URL has none or cannot be parsed
        """
        try:
            hostname = urlsplit(url).hostname
        except ValueError as exc:
            logger.debug("Failed to parse URL %s: %s", url, exc)
            return None
        return hostname.lower() if hostname else None

    @staticmethod
    def _has_valid_port(url: str) -> bool:
        try:
            port = urlsplit(url).port
        except ValueError:
            return False
        return port is None or port <= MAX_PORT
