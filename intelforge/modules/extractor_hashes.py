#!/usr/bin/env python3

"""
Hash extraction mixin for IOC extraction.
"""

from __future__ import annotations

from intelforge.modules.extractor_base import ExtractorBase
from intelforge.modules.models import IOCType


class HashExtractionMixin(ExtractorBase):
    """Hash extraction methods."""

    def extract_md5(self, text: str) -> list[str]:
        """Extract MD5 hashes from text."""
        return self._extract_pattern(text, IOCType.MD5)

    def extract_sha256(self, text: str) -> list[str]:
        """Extract SHA256 hashes from text."""
        return self._extract_pattern(text, IOCType.SHA256)
