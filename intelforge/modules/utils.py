#!/usr/bin/env python3

"""
Shared utilities for IntelForge modules.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from intelforge.modules.models import IOCSet, IOCType, unique_values


def _hostname(url: str) -> str | None:
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return None
    return hostname.lower() if hostname else None


def merge_ioc_sets(ioc_sets: Iterable[IOCSet]) -> IOCSet:
    """
    Merge several IOCSets into one while preserving order.

    Values are unioned per type in first-seen order. A domain found in one
    set can be the hostname of a URL found in another, so URL subsumption is
    applied again on the merged result.

    Args:
        ioc_sets: Sets to merge, e.g. per-chunk extraction results

    Returns:
        Merged IOCSet
    """
    merged: dict[str, list[str]] = {ioc_type.value: [] for ioc_type in IOCType}
    for ioc_set in ioc_sets:
        for ioc_type in IOCType:
            merged[ioc_type.value].extend(ioc_set.get(ioc_type))

    unique = {name: unique_values(values) for name, values in merged.items()}

    url_hosts = {_hostname(url) for url in unique[IOCType.URLS.value]}
    unique[IOCType.DOMAINS.value] = tuple(
        domain for domain in unique[IOCType.DOMAINS.value] if domain not in url_hosts
    )
    return IOCSet(**unique)


def deduplicate_iocs_with_state(
    new_iocs: IOCSet,
    seen_iocs: dict[IOCType, set[str]],
) -> IOCSet:
    """
    Remove IOCs that were already reported.

    This function is designed for incremental processing where you need to
    track seen IOCs across multiple calls, e.g. one report after another.

    Args:
        new_iocs: Newly extracted IOCs to deduplicate
        seen_iocs: State dictionary tracking already-seen IOCs (modified in place)

    Returns:
        IOCSet containing only the IOCs not seen before
    """
    unique: dict[str, list[str]] = {}
    for ioc_type in IOCType:
        seen = seen_iocs.setdefault(ioc_type, set())
        fresh = []
        for value in new_iocs.get(ioc_type):
            if value not in seen:
                seen.add(value)
                fresh.append(value)
        unique[ioc_type.value] = fresh
    return IOCSet(**unique)
