#!/usr/bin/env python3
"""
Unit tests for warning-list classification
"""

import json
from pathlib import Path

import pytest

from intelforge.modules.exceptions import ConfigError
from intelforge.modules.warninglists import (
    DEFAULT_WARNING_LISTS,
    DEFAULT_WARNINGLISTS_FILE,
    WarningList,
    WarningLists,
    is_legitimate_domain,
    is_legitimate_email_domain,
    is_legitimate_url,
    is_private_ip,
)


class TestPrivateIP:
    """Test private address classification."""

    @pytest.mark.parametrize(
        "ip",
        [
            "10.1.2.3",
            "172.16.0.1",
            "172.31.255.255",
            "192.168.1.1",
            "169.254.10.10",
            "127.0.0.1",
            "::1",
            "fe80::1",
            "fd12:3456::1",
        ],
    )
    def test_private_addresses(self, ip: str) -> None:
        """RFC1918, loopback, link-local and ULA addresses are private."""
        assert is_private_ip(ip)

    @pytest.mark.parametrize("ip", ["8.8.8.8", "172.32.0.1", "2001:4860::8888"])
    def test_public_addresses(self, ip: str) -> None:
        """Public addresses are not private."""
        assert not is_private_ip(ip)

    def test_garbage_is_not_private(self) -> None:
        """Unparseable input is simply not private."""
        assert not is_private_ip("not-an-ip")
        assert not is_private_ip("")


class TestLegitimateDomain:
    """Test domain classification."""

    @pytest.mark.parametrize(
        "domain",
        [
            "google.com",
            "mail.google.com",
            "GitHub.com",
            "nasa.gov",
            "cs.stanford.edu",
            "army.mil",
            "hmrc.gov.uk",
            "ox.ac.uk",
            "localhost",
            "printer.local",
            "example.com",
            "payload.exe",
            "style.css",
        ],
    )
    def test_legitimate(self, domain: str) -> None:
        """Platforms, public sector, reserved names and file names are filtered."""
        assert is_legitimate_domain(domain)

    @pytest.mark.parametrize(
        "domain",
        ["malicious-domain.com", "google.com.evil.ru", "notgoogle.com", "sub.example.com"],
    )
    def test_not_legitimate(self, domain: str) -> None:
        """Look-alikes and arbitrary domains are kept."""
        assert not is_legitimate_domain(domain)


class TestLegitimateURL:
    """Test URL classification."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.microsoft.com/en-us/security",
            "https://evil.ru/logo.png",
            "https://evil.ru/static/app.js?v=3",
            "https://evil.ru/about",
            "https://evil.ru/contact-us.html",
            "https://evil.ru/?utm_source=mail",
            "https://evil.ru/en/index",
            "https://evil.ru/blog/2024/05/post",
        ],
    )
    def test_legitimate(self, url: str) -> None:
        """Legitimate hosts and benign paths are filtered."""
        assert is_legitimate_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "https://evil.ru/gate.php?id=1",
            "http://45.77.10.5/bins/x86",
            "https://evil.ru/login/verify-account",
        ],
    )
    def test_not_legitimate(self, url: str) -> None:
        """Payload and phishing paths are kept."""
        assert not is_legitimate_url(url)

    def test_unparseable_url(self) -> None:
        """A URL that cannot be parsed is not legitimate."""
        assert not is_legitimate_url("http://[::1")


class TestLegitimateEmailDomain:
    """Test email domain classification."""

    @pytest.mark.parametrize(
        "email",
        ["user@gmail.com", "user@Outlook.com", "user@yahoo.co.uk", "prof@mit.edu"],
    )
    def test_legitimate(self, email: str) -> None:
        """Webmail and public-sector mail domains are filtered."""
        assert is_legitimate_email_domain(email)

    def test_attacker_domain(self) -> None:
        """Other mail domains are kept."""
        assert not is_legitimate_email_domain("billing@invoice-secure.ru")


class TestWarningList:
    """Test single warning lists."""

    def test_match_returns_list(self) -> None:
        """match() names the list that fired."""
        matched = DEFAULT_WARNING_LISTS.match("10.0.0.1", "ip")

        assert matched is not None
        assert matched.name == "private-ipv4-ranges"

    def test_category_restricts_lists(self) -> None:
        """Lists only answer for their categories."""
        assert DEFAULT_WARNING_LISTS.match("10.0.0.1", "domain") is None

    def test_string_list_is_exact(self) -> None:
        """String lists compare whole values, case-insensitively."""
        warning_list = WarningList(
            name="docs",
            type="string",
            categories=frozenset({"domain"}),
            entries=("Example.com",),
        )

        assert warning_list.matches("example.COM")
        assert not warning_list.matches("a.example.com")
        assert not warning_list.matches("")

    def test_unknown_type_rejected(self) -> None:
        """An unknown comparison type is a configuration error."""
        with pytest.raises(ConfigError):
            WarningList(name="x", type="glob", categories=frozenset({"domain"}), entries=())

    def test_unknown_category_rejected(self) -> None:
        """An unknown category is a configuration error."""
        with pytest.raises(ConfigError):
            WarningList(name="x", type="string", categories=frozenset({"hash"}), entries=())

    def test_bad_entries_rejected(self) -> None:
        """Invalid networks and regular expressions are reported."""
        with pytest.raises(ConfigError):
            WarningList(name="x", type="cidr", categories=frozenset({"ip"}), entries=("10.0/x",))
        with pytest.raises(ConfigError):
            WarningList(name="x", type="regex", categories=frozenset({"domain"}), entries=("(",))


class TestWarningListsLoading:
    """Test loading warning-list tables."""

    def test_bundled_table(self) -> None:
        """The bundled table loads with lists for every category."""
        loaded = WarningLists.from_json(DEFAULT_WARNINGLISTS_FILE)
        categories = set()
        for warning_list in loaded.lists:
            categories |= warning_list.categories

        assert categories == {"ip", "domain", "url-path", "email-domain"}
        assert WarningLists.default() is DEFAULT_WARNING_LISTS

    def test_custom_table(self, tmp_path: Path) -> None:
        """A replacement table works through the same predicates."""
        table = {
            "version": 1,
            "lists": [
                {
                    "name": "house",
                    "type": "hostname",
                    "categories": ["domain"],
                    "list": ["corp.net"],
                },
            ],
        }
        path = tmp_path / "lists.json"
        path.write_text(json.dumps(table), encoding="utf-8")

        lists = WarningLists.from_json(path)

        assert lists.is_legitimate_domain("vpn.corp.net")
        assert not lists.is_legitimate_domain("google.com")
        assert not lists.is_private_ip("10.0.0.1")

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file is a configuration error."""
        with pytest.raises(ConfigError):
            WarningLists.from_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Unparseable JSON is a configuration error."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError):
            WarningLists.from_json(path)

    @pytest.mark.parametrize(
        "data",
        [[], {"lists": "x"}, {"lists": ["x"]}, {"lists": [{"name": "a", "list": "x"}]}],
    )
    def test_wrong_shape(self, data: object) -> None:
        """Documents of the wrong shape are rejected."""
        with pytest.raises(ConfigError):
            WarningLists.from_dict(data)
