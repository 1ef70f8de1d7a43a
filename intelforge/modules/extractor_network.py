#!/usr/bin/env python3

"""
Network-related extraction mixin for IOC extraction.
"""

from __future__ import annotations

import ipaddress

from intelforge.modules.extractor_base import MAX_DOMAIN_LENGTH, ExtractorBase
from intelforge.modules.extractor_patterns import URL_TRAILING_PUNCTUATION
from intelforge.modules.models import IOCType


class NetworkExtractionMixin(ExtractorBase):
    """Network IOC extraction methods."""

    def extract_ipv4(self, text: str) -> list[str]:
        """Extract IPv4 addresses from text."""
        return self._extract_pattern(text, IOCType.IPV4)

    def extract_ipv6(self, text: str) -> list[str]:
        """Extract IPv6 addresses from text, keeping only parseable ones."""
        candidates = self._extract_pattern(text, IOCType.IPV6)
        return [candidate for candidate in candidates if self._is_valid_ipv6(candidate)]

    def extract_domains(self, text: str) -> list[str]:
        """Extract domain names from text."""
        domains = self._extract_pattern(text, IOCType.DOMAINS)
        return [domain for domain in domains if len(domain) <= MAX_DOMAIN_LENGTH]

    def extract_urls(self, text: str) -> list[str]:
        """Extract http(s) URLs from text, trimming trailing sentence punctuation."""
        if not text:
            return []
        trimmed = (self._trim_url(url) for url in self._find_matches(text, IOCType.URLS))
        urls = self._unique(IOCType.URLS, trimmed)
        return [url for url in urls if self._has_valid_port(url)]

    def extract_emails(self, text: str) -> list[str]:
        """
        Extract email addresses from text.

        The userinfo part of a URL (``http://user@evil.com/``) looks like an
        address but belongs to the URL, so matches starting there are skipped.
        """
        if not text:
            return []
        userinfo_spans = [
            match.span("userinfo")
            for match in self.patterns[IOCType.URLS].finditer(text)
            if match.group("userinfo")
        ]
        emails = (
            match.group(0)
            for match in self.patterns[IOCType.EMAILS].finditer(text)
            if not any(start <= match.start() < end for start, end in userinfo_spans)
        )
        return self._unique(IOCType.EMAILS, emails)

    @staticmethod
    def _is_valid_ipv6(candidate: str) -> bool:
        # A bare "::" is punctuation, not an address
        if not candidate.strip(":"):
            return False
        try:
            ipaddress.IPv6Address(candidate)
        except ValueError:
            return False
        return True

    @staticmethod
    def _trim_url(url: str) -> str:
        """
        Strip characters that close the surrounding sentence.

        Trailing punctuation goes, and so does a closing parenthesis that has
        no opening partner inside the URL, as in ``(see http://evil.com/x)``.
        """
        while url:
            last = url[-1]
            if last in URL_TRAILING_PUNCTUATION:
                url = url[:-1]
            elif last == ")" and url.count(")") > url.count("("):
                url = url[:-1]
            else:
                break
        return url
