#!/usr/bin/env python3

"""
Aggregation mixin for IOC extraction.

Runs every type matcher over normalized text and reconciles the raw lists
into one IOCSet: private addresses and legitimate infrastructure are
filtered, domains already covered by a URL are dropped, and anything on the
analysed document's own host is excluded.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, cast

from intelforge.modules.extractor_base import ExtractorBase
from intelforge.modules.logger import get_logger
from intelforge.modules.models import IOCSet, IOCType
from intelforge.modules.normalizer import normalize

logger = get_logger(__name__)

if TYPE_CHECKING:
    from intelforge.modules.extractor import IOCExtractor


class ExtractionAggregateMixin(ExtractorBase):
    """Aggregate extraction methods into a single result."""

    def extract_raw(self, text: str) -> dict[IOCType, list[str]]:
        """
        Run every type matcher without any filtering.

        Args:
            text: Normalized text

        Returns:
            Deduplicated matches per IOC type
        """
        extractor = cast("IOCExtractor", self)
        extraction_methods: list[tuple[IOCType, Callable[[str], list[str]]]] = [
            (IOCType.IPV4, extractor.extract_ipv4),
            (IOCType.IPV6, extractor.extract_ipv6),
            (IOCType.DOMAINS, extractor.extract_domains),
            (IOCType.URLS, extractor.extract_urls),
            (IOCType.SHA256, extractor.extract_sha256),
            (IOCType.MD5, extractor.extract_md5),
            (IOCType.EMAILS, extractor.extract_emails),
        ]
        return {ioc_type: method(text) for ioc_type, method in extraction_methods}

    def _source_hostname(self) -> str | None:
        """Hostname of the analysed document, if one was supplied and parses."""
        source_url = self.options.source_url
        if not source_url:
            return None
        hostname = self._url_hostname(source_url)
        if hostname is None:
            logger.debug("Skipping source host exclusion, cannot parse %r", source_url)
        return hostname

    def extract_all(self, text: str) -> IOCSet:
        """
        Extract all types of IOCs from text.

        Args:
            text: Raw, possibly defanged report text

        Returns:
            Reconciled IOCSet
        """
        if not text:
            return IOCSet.empty()

        options = self.options
        lists = self.warning_lists
        raw = self.extract_raw(normalize(text))

        ipv4 = raw[IOCType.IPV4]
        ipv6 = raw[IOCType.IPV6]
        if not options.include_private:
            ipv4 = [ip for ip in ipv4 if not lists.is_private_ip(ip)]
            ipv6 = [ip for ip in ipv6 if not lists.is_private_ip(ip)]

        source_host = self._source_hostname()

        urls = raw[IOCType.URLS]
        if options.filter_legitimate:
            urls = [url for url in urls if not lists.is_legitimate_url(url)]
        if source_host:
            urls = [url for url in urls if self._url_hostname(url) != source_host]

        emails = raw[IOCType.EMAILS]
        if options.filter_legitimate:
            emails = [email for email in emails if not lists.is_legitimate_email_domain(email)]

        url_hosts = {self._url_hostname(url) for url in urls}
        domains = [domain for domain in raw[IOCType.DOMAINS] if domain not in url_hosts]
        if options.filter_legitimate:
            domains = [domain for domain in domains if not lists.is_legitimate_domain(domain)]
        if source_host:
            domains = [domain for domain in domains if domain != source_host]

        return IOCSet(
            ipv4=ipv4,
            ipv6=ipv6,
            domains=domains,
            urls=urls,
            sha256=raw[IOCType.SHA256],
            md5=raw[IOCType.MD5],
            emails=emails,
        )
