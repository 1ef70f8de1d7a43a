#!/usr/bin/env python3

"""
Warning lists used to classify extracted values as noise.

A warning list is a named table of entries with a comparison type, in the
spirit of the MISP warning lists: ``cidr`` (network membership), ``hostname``
(exact or subdomain), ``string`` (exact, case-insensitive) and ``regex``
(case-insensitive search). The ``categories`` of a list say which kind of
value it applies to: ``ip``, ``domain``, ``url-path`` or ``email-domain``.

The default table ships as ``data/warninglists.json`` and is read once at
import; it is never modified afterwards.
"""

from __future__ import annotations

import ipaddress
import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from re import Pattern
from typing import ClassVar, Union
from urllib.parse import urlsplit

from intelforge.modules.exceptions import ConfigError
from intelforge.modules.logger import get_logger

logger = get_logger(__name__)

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_WARNINGLISTS_FILE = DATA_DIR / "warninglists.json"

LIST_TYPES = frozenset({"cidr", "hostname", "string", "regex"})
CATEGORIES = frozenset({"ip", "domain", "url-path", "email-domain"})


@dataclass(frozen=True)
class WarningList:
    """One named table of entries sharing a comparison type."""

    name: str
    type: str
    categories: frozenset[str]
    entries: tuple[str, ...]
    description: str = ""

    _values: frozenset[str] = field(init=False, repr=False, compare=False)
    _networks: tuple[IPNetwork, ...] = field(init=False, repr=False, compare=False)
    _patterns: tuple[Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.type not in LIST_TYPES:
            raise ConfigError(f"warning list {self.name}", f"unknown type '{self.type}'")
        unknown = self.categories - CATEGORIES
        if unknown:
            raise ConfigError(
                f"warning list {self.name}",
                f"unknown categories {sorted(unknown)}",
            )

        networks: list[IPNetwork] = []
        patterns: list[Pattern[str]] = []
        if self.type == "cidr":
            for entry in self.entries:
                try:
                    networks.append(ipaddress.ip_network(entry, strict=False))
                except ValueError as exc:
                    raise ConfigError(f"warning list {self.name}", str(exc)) from exc
        elif self.type == "regex":
            for entry in self.entries:
                try:
                    patterns.append(re.compile(entry, re.IGNORECASE))
                except re.error as exc:
                    raise ConfigError(
                        f"warning list {self.name}",
                        f"invalid regex '{entry}': {exc}",
                    ) from exc

        object.__setattr__(self, "_values", frozenset(e.lower() for e in self.entries))
        object.__setattr__(self, "_networks", tuple(networks))
        object.__setattr__(self, "_patterns", tuple(patterns))

    def applies_to(self, category: str) -> bool:
        return category in self.categories

    def matches(self, value: str) -> bool:
        """
        Check a value against this list.

        Args:
            value: Value to check, already reduced to what the category
                compares (an address, a hostname, a path, a mail domain)

        Returns:
            True if any entry matches
        """
        if not value:
            return False

        check_methods = {
            "cidr": self._check_cidr,
            "hostname": self._check_hostname,
            "string": self._check_string,
            "regex": self._check_regex,
        }
        return check_methods[self.type](value)

    def _check_cidr(self, value: str) -> bool:
        try:
            address = ipaddress.ip_address(value)
        except ValueError:
            return False
        return any(address in network for network in self._networks)

    def _check_hostname(self, value: str) -> bool:
        # Try the name itself and every parent domain
        labels = value.lower().rstrip(".").split(".")
        return any(".".join(labels[i:]) in self._values for i in range(len(labels)))

    def _check_string(self, value: str) -> bool:
        return value.lower() in self._values

    def _check_regex(self, value: str) -> bool:
        return any(pattern.search(value) for pattern in self._patterns)


class WarningLists:
    """A set of warning lists answering classification questions."""

    DEFAULT_FILE: ClassVar[Path] = DEFAULT_WARNINGLISTS_FILE

    def __init__(self, lists: Iterable[WarningList]) -> None:
        self.lists: tuple[WarningList, ...] = tuple(lists)

    @classmethod
    def from_dict(cls, data: object) -> WarningLists:
        """
        Build warning lists from a parsed JSON document.

        Raises:
            ConfigError: If the document does not have the expected shape
        """
        if not isinstance(data, Mapping) or not isinstance(data.get("lists"), list):
            raise ConfigError("warninglists", "expected an object with a 'lists' array")

        lists: list[WarningList] = []
        for index, raw in enumerate(data["lists"]):
            if not isinstance(raw, Mapping):
                raise ConfigError("warninglists", f"entry {index} is not an object")
            name = str(raw.get("name", f"list-{index}"))
            entries = raw.get("list", [])
            categories = raw.get("categories", [])
            if not isinstance(entries, list) or not isinstance(categories, list):
                raise ConfigError(
                    f"warning list {name}",
                    "'list' and 'categories' must be arrays",
                )
            lists.append(
                WarningList(
                    name=name,
                    type=str(raw.get("type", "string")),
                    categories=frozenset(str(category) for category in categories),
                    entries=tuple(str(entry) for entry in entries),
                    description=str(raw.get("description", "")),
                ),
            )
        return cls(lists)

    @classmethod
    def from_json(cls, path: Path | str) -> WarningLists:
        """
        Load warning lists from a JSON file.

        Args:
            path: File with the same shape as the bundled table

        Returns:
            Loaded warning lists

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        file_path = Path(path)
        try:
            with file_path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise ConfigError("warninglists", f"cannot load {file_path}: {exc}") from exc

        warning_lists = cls.from_dict(data)
        logger.debug("Loaded %d warning lists from %s", len(warning_lists.lists), file_path)
        return warning_lists

    @classmethod
    def default(cls) -> WarningLists:
        return DEFAULT_WARNING_LISTS

    def match(self, value: str, category: str) -> WarningList | None:
        """Return the first list of a category that matches the value."""
        for warning_list in self.lists:
            if warning_list.applies_to(category) and warning_list.matches(value):
                return warning_list
        return None

    def is_private_ip(self, ip: str) -> bool:
        return self.match(ip, "ip") is not None

    def is_legitimate_domain(self, domain: str) -> bool:
        return self.match(domain.lower().rstrip("."), "domain") is not None

    def is_legitimate_url(self, url: str) -> bool:
        """
        Check whether a URL points at known-benign infrastructure or content.

        The hostname is checked against the domain lists, then the path and
        query against the benign URL patterns.
        """
        try:
            parts = urlsplit(url)
            hostname = parts.hostname
        except ValueError:
            return False

        if hostname and self.is_legitimate_domain(hostname):
            return True

        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"
        return self.match(target, "url-path") is not None

    def is_legitimate_email_domain(self, email: str) -> bool:
        domain = email.rpartition("@")[2].lower()
        return self.match(domain, "email-domain") is not None


DEFAULT_WARNING_LISTS = WarningLists.from_json(DEFAULT_WARNINGLISTS_FILE)


def is_private_ip(ip: str) -> bool:
    """Return True for private, loopback, link-local and unique local addresses."""
    return DEFAULT_WARNING_LISTS.is_private_ip(ip)


def is_legitimate_domain(domain: str) -> bool:
    """Return True for allow-listed, reserved and file-name-looking domains."""
    return DEFAULT_WARNING_LISTS.is_legitimate_domain(domain)


def is_legitimate_url(url: str) -> bool:
    """Return True for URLs on legitimate hosts or with benign paths."""
    return DEFAULT_WARNING_LISTS.is_legitimate_url(url)


def is_legitimate_email_domain(email: str) -> bool:
    """Return True for webmail providers and public-sector mail domains."""
    return DEFAULT_WARNING_LISTS.is_legitimate_email_domain(email)
