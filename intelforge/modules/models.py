#!/usr/bin/env python3

"""
Value types shared by the extraction pipeline and its consumers.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, fields
from enum import Enum

from intelforge.modules.exceptions import ValidationError


class IOCType(str, Enum):
    """Kinds of indicator; values double as IOCSet field names."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"
    DOMAINS = "domains"
    URLS = "urls"
    SHA256 = "sha256"
    MD5 = "md5"
    EMAILS = "emails"

    def __str__(self) -> str:
        return self.value


# IPv4 keeps the matched text; every other type is compared case-insensitively
CASE_INSENSITIVE_TYPES: frozenset[IOCType] = frozenset(
    ioc_type for ioc_type in IOCType if ioc_type is not IOCType.IPV4
)


def normalize_case(ioc_type: IOCType, value: str) -> str:
    """Apply the case rule of an IOC type to a single value."""
    if ioc_type in CASE_INSENSITIVE_TYPES:
        return value.lower()
    return value


def unique_values(values: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate values keeping first-seen order."""
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True)
class IOC:
    """A single typed indicator."""

    type: IOCType
    value: str


@dataclass(frozen=True)
class IOCCounts:
    """Number of indicators per type."""

    ipv4: int = 0
    ipv6: int = 0
    domains: int = 0
    urls: int = 0
    sha256: int = 0
    md5: int = 0
    emails: int = 0

    @property
    def total(self) -> int:
        return (
            self.ipv4 + self.ipv6 + self.domains + self.urls + self.sha256 + self.md5 + self.emails
        )


@dataclass(frozen=True)
class ExtractionOptions:
    """
    Options accepted by the extraction entry point.

    Attributes:
        include_private: Keep RFC1918, loopback, link-local and ULA addresses
        filter_legitimate: Drop allow-listed domains, URLs and email domains
        source_url: URL of the analysed document; its hostname is excluded
    """

    include_private: bool = False
    filter_legitimate: bool = True
    source_url: str | None = None


@dataclass(frozen=True)
class IOCSet:
    """Deduplicated, typed result of one extraction."""

    ipv4: tuple[str, ...] = ()
    ipv6: tuple[str, ...] = ()
    domains: tuple[str, ...] = ()
    urls: tuple[str, ...] = ()
    sha256: tuple[str, ...] = ()
    md5: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable of strings but always store tuples
        for field in fields(self):
            value = getattr(self, field.name)
            if not isinstance(value, tuple):
                object.__setattr__(self, field.name, tuple(value))

    @classmethod
    def empty(cls) -> IOCSet:
        return cls()

    @classmethod
    def from_mapping(cls, mapping: object) -> IOCSet:
        """
        Build an IOCSet from an IOCSet-shaped mapping.

        Only the structure is checked: unknown keys are ignored, values that
        are not lists count as empty and non-string items are dropped.

        Args:
            mapping: Parsed JSON object, e.g. an AI triage answer

        Returns:
            New IOCSet with case-normalized, deduplicated values

        Raises:
            ValidationError: If the input is not a mapping
        """
        if not isinstance(mapping, Mapping):
            raise ValidationError(
                f"Expected an object with IOC lists, got {type(mapping).__name__}",
            )

        collected: dict[str, tuple[str, ...]] = {}
        for ioc_type in IOCType:
            raw = mapping.get(ioc_type.value)
            if not isinstance(raw, (list, tuple)):
                continue
            values = (
                normalize_case(ioc_type, item.strip())
                for item in raw
                if isinstance(item, str) and item.strip()
            )
            collected[ioc_type.value] = unique_values(values)
        return cls(**collected)

    def get(self, ioc_type: IOCType | str) -> tuple[str, ...]:
        """Return the sequence for one IOC type."""
        values: tuple[str, ...] = getattr(self, IOCType(ioc_type).value)
        return values

    def as_dict(self) -> dict[str, list[str]]:
        """Return all seven sequences as plain lists keyed by type name."""
        return {ioc_type.value: list(self.get(ioc_type)) for ioc_type in IOCType}

    def records(self) -> Iterator[IOC]:
        """Iterate typed records, in type order then value order."""
        for ioc_type in IOCType:
            for value in self.get(ioc_type):
                yield IOC(ioc_type, value)

    def counts(self) -> IOCCounts:
        return IOCCounts(**{ioc_type.value: len(self.get(ioc_type)) for ioc_type in IOCType})

    def is_empty(self) -> bool:
        return len(self) == 0

    def __len__(self) -> int:
        return sum(len(self.get(ioc_type)) for ioc_type in IOCType)
