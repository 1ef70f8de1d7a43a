#!/usr/bin/env python3

"""
Module for extracting indicators of compromise (IOCs) from text.
"""

from __future__ import annotations

import dataclasses

from intelforge.modules.extractor_aggregate import ExtractionAggregateMixin
from intelforge.modules.extractor_hashes import HashExtractionMixin
from intelforge.modules.extractor_network import NetworkExtractionMixin
from intelforge.modules.models import ExtractionOptions, IOCSet


class IOCExtractor(
    NetworkExtractionMixin,
    HashExtractionMixin,
    ExtractionAggregateMixin,
):
    """Class for extracting different types of IOCs from text."""


def extract_iocs(
    text: str,
    options: ExtractionOptions | None = None,
    **overrides: bool | str | None,
) -> IOCSet:
    """
    Extract a reconciled IOCSet from free text.

    The call is pure and re-entrant: it never raises for string input and an
    empty text gives an empty IOCSet.

    Args:
        text: Report text, defanged or not
        options: Extraction options, defaults to ExtractionOptions()
        **overrides: ExtractionOptions fields replacing those of ``options``,
            e.g. ``include_private=True``

    Returns:
        Extracted IOCs

    Raises:
        TypeError: If an override is not an ExtractionOptions field
    """
    effective = options if options is not None else ExtractionOptions()
    if overrides:
        effective = dataclasses.replace(effective, **overrides)
    return IOCExtractor(effective).extract_all(text)
