#!/usr/bin/env python3

"""
Module for formatting IOCs output in different formats
"""

from __future__ import annotations

import csv
import io
import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import ClassVar

import stix2

from intelforge.modules.exceptions import ValidationError
from intelforge.modules.models import IOCSet, IOCType

DEFAULT_TLP = "TLP:CLEAR"

SECTION_TITLES: dict[IOCType, str] = {
    IOCType.IPV4: "IPv4 Addresses",
    IOCType.IPV6: "IPv6 Addresses",
    IOCType.DOMAINS: "Domains",
    IOCType.URLS: "URLs",
    IOCType.SHA256: "SHA256 Hashes",
    IOCType.MD5: "MD5 Hashes",
    IOCType.EMAILS: "Email Addresses",
}

# STIX pattern object path per IOC type
STIX_PATTERN_PATHS: dict[IOCType, str] = {
    IOCType.IPV4: "ipv4-addr:value",
    IOCType.IPV6: "ipv6-addr:value",
    IOCType.DOMAINS: "domain-name:value",
    IOCType.URLS: "url:value",
    IOCType.SHA256: "file:hashes.'SHA-256'",
    IOCType.MD5: "file:hashes.MD5",
    IOCType.EMAILS: "email-addr:value",
}


class OutputFormatter(ABC):
    """Abstract base class for all output formatters."""

    extension: ClassVar[str] = ".txt"

    def __init__(self, ioc_set: IOCSet, metadata: Mapping[str, str] | None = None) -> None:
        """
        Initialize the output formatter.

        Args:
            ioc_set: IOCs to format
            metadata: Optional report details such as ``source_title`` and ``tlp``
        """
        self.ioc_set = ioc_set
        self.metadata: dict[str, str] = dict(metadata or {})

    @abstractmethod
    def format(self) -> str:
        """
        Format the data.

        Returns:
            The formatted data
        """

    def save(self, output_file: Path | str) -> None:
        """
        Save the formatted data to a file.

        Args:
            output_file: Path to the output file
        """
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.format(), encoding="utf-8")

    def _source_title(self) -> str:
        return self.metadata.get("source_title", "")


class JSONFormatter(OutputFormatter):
    """Class for formatting output in JSON."""

    extension = ".json"

    def _prepare_data_for_json(self) -> dict[str, object]:
        """Build the document with sorted value lists and report metadata."""
        meta = {
            "source_title": self._source_title(),
            "tlp": self.metadata.get("tlp", DEFAULT_TLP),
            "generated_at": self.metadata.get(
                "generated_at",
                datetime.now(timezone.utc).isoformat(timespec="seconds"),
            ),
        }
        iocs = {name: sorted(values) for name, values in self.ioc_set.as_dict().items()}
        return {"meta": meta, "iocs": iocs}

    def format(self) -> str:
        return json.dumps(self._prepare_data_for_json(), indent=4, ensure_ascii=False)


class TextFormatter(OutputFormatter):
    """Class for formatting output in plain text."""

    def format(self) -> str:
        """
        Format the data in plain text.

        Returns:
            Markdown-style sections, one per non-empty IOC type
        """
        output = ["# Indicators of Compromise (IOCs) Extracted"]

        title = self._source_title()
        if title:
            output.append(f"\nSource: {title}")

        if self.ioc_set.is_empty():
            output.append("\nNo IOCs found.")

        for ioc_type, section_title in SECTION_TITLES.items():
            values = self.ioc_set.get(ioc_type)
            if not values:
                continue
            output.append(f"\n## {section_title}\n")
            output.extend(sorted(values))

        return "\n".join(output) + "\n"


class CSVFormatter(OutputFormatter):
    """Class for formatting output as quoted ``type,value`` rows."""

    extension = ".csv"

    def format(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
        writer.writerow(["type", "value"])
        for record in self.ioc_set.records():
            writer.writerow([record.type.value, record.value])
        return buffer.getvalue()


def _escape_stix_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def stix_pattern(ioc_type: IOCType, value: str) -> str:
    """Return the STIX pattern expression matching one IOC."""
    return f"[{STIX_PATTERN_PATHS[ioc_type]} = '{_escape_stix_value(value)}']"


class STIXFormatter(OutputFormatter):
    """Class for formatting output as a STIX 2.1 bundle."""

    extension = ".stix.json"

    def _build_indicators(self) -> list[stix2.Indicator]:
        extra: dict[str, str] = {}
        title = self._source_title()
        if title:
            extra["description"] = f"Extracted from {title}"
        valid_from = datetime.now(timezone.utc)

        indicators = []
        for record in self.ioc_set.records():
            indicators.append(
                stix2.Indicator(
                    name=f"{record.type.value}: {record.value}",
                    pattern=stix_pattern(record.type, record.value),
                    pattern_type="stix",
                    valid_from=valid_from,
                    indicator_types=["malicious-activity"],
                    **extra,
                ),
            )
        return indicators

    def format(self) -> str:
        bundle = stix2.Bundle(*self._build_indicators())
        return str(bundle.serialize(pretty=True))


FORMATTERS: dict[str, type[OutputFormatter]] = {
    "text": TextFormatter,
    "json": JSONFormatter,
    "csv": CSVFormatter,
    "stix": STIXFormatter,
}


def get_formatter(
    name: str,
    ioc_set: IOCSet,
    metadata: Mapping[str, str] | None = None,
) -> OutputFormatter:
    """
    Create the formatter registered under a name.

    Args:
        name: One of ``text``, ``json``, ``csv`` or ``stix``
        ioc_set: IOCs to format
        metadata: Optional report details

    Raises:
        ValidationError: If the format name is unknown
    """
    formatter_class = FORMATTERS.get(name.lower())
    if formatter_class is None:
        choices = ", ".join(FORMATTERS)
        raise ValidationError(f"Unknown output format '{name}' (choose from {choices})")
    return formatter_class(ioc_set, metadata)
