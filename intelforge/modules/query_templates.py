#!/usr/bin/env python3

"""
Hunting query templates filled from extracted IOCs.

Templates are written against abstract placeholders. Repository and field
placeholders (``{PROXY_REPO}``, ``{DST_IP_FIELD}``) come from a data profile
describing where a SIEM keeps its data; list placeholders (``{IP_LIST}``,
``{DOMAIN_LIST}``) are filled with quoted IOC values.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from re import Pattern

from intelforge.modules.exceptions import ValidationError
from intelforge.modules.models import IOCSet, IOCType

PLACEHOLDER_PATTERN: Pattern[str] = re.compile(r"\{([A-Z0-9_]+)\}")


@dataclass(frozen=True)
class DataProfile:
    """Repository selectors and field names of one data platform."""

    name: str
    description: str = ""
    repos: Mapping[str, str] = field(default_factory=dict)
    fields: Mapping[str, str] = field(default_factory=dict)

    def placeholders(self) -> dict[str, str]:
        return {**self.repos, **self.fields}


DEFAULT_PROFILE = DataProfile(
    name="default",
    description="Generic NG-SIEM repositories and field names",
    repos={
        "PROXY_REPO": "#type=proxy",
        "DNS_REPO": "#type=dns",
        "EDR_REPO": "#type=edr",
        "IDP_REPO": "#type=idp",
        "EMAIL_REPO": "#type=email",
        "CLOUD_REPO": "#type=cloudtrail",
    },
    fields={
        "DST_IP_FIELD": "dst_ip",
        "SRC_IP_FIELD": "src_ip",
        "DOMAIN_FIELD": "domain",
        "URL_FIELD": "url",
        "HOST_FIELD": "host",
        "USERNAME_FIELD": "user",
        "PROC_PATH_FIELD": "process_path",
        "SHA256_FIELD": "sha256",
        "MD5_FIELD": "md5",
        "EMAIL_FIELD": "email",
        "ACTION_FIELD": "action",
    },
)


@dataclass(frozen=True)
class QueryTemplate:
    """A hunting query with placeholders and the IOC types it consumes."""

    id: str
    name: str
    description: str
    template: str
    required_types: frozenset[IOCType] = frozenset()
    repo: str = "all"

    def is_applicable(self, ioc_set: IOCSet) -> bool:
        """True when at least one of the required IOC types has values."""
        return any(ioc_set.get(ioc_type) for ioc_type in self.required_types)


TEMPLATES: tuple[QueryTemplate, ...] = (
    QueryTemplate(
        id="ip-proxy-hunt",
        name="IP Address Hunt (Proxy)",
        description="Hunt for suspicious IP addresses in proxy logs",
        template=(
            "{PROXY_REPO}\n"
            "| in({DST_IP_FIELD}, values=[{IP_LIST}])\n"
            "| timechart(span=1h, series={DST_IP_FIELD})"
        ),
        required_types=frozenset({IOCType.IPV4, IOCType.IPV6}),
        repo="proxy",
    ),
    QueryTemplate(
        id="domain-dns-hunt",
        name="Domain Hunt (DNS/Proxy)",
        description="Hunt for suspicious domains in DNS and proxy logs",
        template=(
            "{DNS_REPO} OR {PROXY_REPO}\n"
            "| in({DOMAIN_FIELD}, values=[{DOMAIN_LIST}])\n"
            "| groupBy({HOST_FIELD}, function=count())\n"
            "| sort(_count, order=desc)"
        ),
        required_types=frozenset({IOCType.DOMAINS}),
        repo="dns",
    ),
    QueryTemplate(
        id="url-proxy-hunt",
        name="URL Hunt (Proxy)",
        description="Hunt for suspicious URLs in proxy logs",
        template=(
            "{PROXY_REPO}\n"
            "| in({URL_FIELD}, values=[{URL_LIST}])\n"
            "| table([{HOST_FIELD}, {URL_FIELD}, {USERNAME_FIELD}, @timestamp])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.URLS}),
        repo="proxy",
    ),
    QueryTemplate(
        id="hash-edr-hunt",
        name="File Hash Hunt (EDR)",
        description="Hunt for malicious SHA256 file hashes in endpoint data",
        template=(
            "{EDR_REPO}\n"
            "| in({SHA256_FIELD}, values=[{HASH_LIST}])\n"
            "| table([{HOST_FIELD}, {USERNAME_FIELD}, {PROC_PATH_FIELD}, {SHA256_FIELD}, @timestamp])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.SHA256}),
        repo="edr",
    ),
    QueryTemplate(
        id="md5-edr-hunt",
        name="MD5 Hash Hunt (EDR)",
        description="Hunt for malicious MD5 file hashes in endpoint data",
        template=(
            "{EDR_REPO}\n"
            "| in({MD5_FIELD}, values=[{MD5_LIST}])\n"
            "| table([{HOST_FIELD}, {USERNAME_FIELD}, {PROC_PATH_FIELD}, {MD5_FIELD}, @timestamp])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.MD5}),
        repo="edr",
    ),
    QueryTemplate(
        id="ip-edr-network",
        name="EDR Network Connections to IOC IPs",
        description="Endpoint processes connecting to known bad IPs",
        template=(
            "{EDR_REPO}\n"
            "| in({DST_IP_FIELD}, values=[{IP_LIST}])\n"
            "| table([{HOST_FIELD}, {USERNAME_FIELD}, {PROC_PATH_FIELD}, {DST_IP_FIELD}, @timestamp])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.IPV4, IOCType.IPV6}),
        repo="edr",
    ),
    QueryTemplate(
        id="email-idp-hunt",
        name="Email Hunt (Identity)",
        description="Hunt for suspicious email addresses in identity provider logs",
        template=(
            "{IDP_REPO}\n"
            "| in({EMAIL_FIELD}, values=[{EMAIL_LIST}])\n"
            '| {ACTION_FIELD} = "login"\n'
            "| groupBy({EMAIL_FIELD}, function=count())\n"
            "| sort(_count, order=desc)"
        ),
        required_types=frozenset({IOCType.EMAILS}),
        repo="idp",
    ),
    QueryTemplate(
        id="email-sender-hunt",
        name="Email Indicators (Email Security)",
        description="Search email security logs for sender addresses",
        template=(
            "{EMAIL_REPO}\n"
            "| in({EMAIL_FIELD}, values=[{EMAIL_LIST}])\n"
            "| groupBy({EMAIL_FIELD}, function=count())\n"
            "| sort(_count, order=desc)"
        ),
        required_types=frozenset({IOCType.EMAILS}),
        repo="email",
    ),
    QueryTemplate(
        id="phishing-urls-email",
        name="Phishing URLs in Email",
        description="Hunt for suspicious URLs in email messages",
        template=(
            "{EMAIL_REPO}\n"
            "| in({URL_FIELD}, values=[{URL_LIST}])\n"
            "| table([SenderAddress, RecipientAddress, Subject, {URL_FIELD}, @timestamp])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.URLS}),
        repo="email",
    ),
    QueryTemplate(
        id="attachment-hash-hunt",
        name="Malicious Attachment Hunt",
        description="Hunt for malicious file attachments by hash",
        template=(
            "{EMAIL_REPO}\n"
            "| in({SHA256_FIELD}, values=[{HASH_LIST}])\n"
            "| table([SenderAddress, RecipientAddress, Subject, AttachmentName, {SHA256_FIELD}, @timestamp])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.SHA256}),
        repo="email",
    ),
    QueryTemplate(
        id="cloud-ip-hunt",
        name="Cloud Activity from IOC IPs",
        description="Hunt for cloud API activity from suspicious IP addresses",
        template=(
            "{CLOUD_REPO}\n"
            "| in(sourceIPAddress, values=[{IP_LIST}])\n"
            "| table([userIdentity.principalId, eventName, sourceIPAddress, @timestamp])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.IPV4, IOCType.IPV6}),
        repo="cloud",
    ),
    QueryTemplate(
        id="timeline-analysis",
        name="Timeline Analysis for IOCs",
        description="Build a timeline of all activity touching network IOCs",
        template=(
            "#type=*\n"
            "| in({DOMAIN_FIELD}, values=[{DOMAIN_LIST}])"
            " or in({DST_IP_FIELD}, values=[{IP_LIST}])"
            " or in({URL_FIELD}, values=[{URL_LIST}])\n"
            "| table([@timestamp, #type, {HOST_FIELD}, {USERNAME_FIELD}])\n"
            "| sort(@timestamp, order=desc)"
        ),
        required_types=frozenset({IOCType.DOMAINS, IOCType.IPV4, IOCType.IPV6, IOCType.URLS}),
    ),
    QueryTemplate(
        id="suspicious-processes",
        name="Suspicious Process Execution",
        description="Hunt for script hosts launched with evasive command lines",
        template=(
            "{EDR_REPO}\n"
            "| {PROC_PATH_FIELD} = /(powershell|cmd|wscript|cscript|rundll32|regsvr32)\\.exe/i\n"
            "| CommandLine = /(-enc|-w hidden|bypass|downloadstring|invoke)/i\n"
            "| table([{HOST_FIELD}, {USERNAME_FIELD}, {PROC_PATH_FIELD}, CommandLine, @timestamp])"
        ),
        repo="edr",
    ),
)


def format_iocs_for_template(values: Iterable[str]) -> str:
    """Render values as a comma-separated list of double-quoted strings."""
    return ", ".join('"{}"'.format(value.replace('"', '\\"')) for value in values)


def _list_placeholders(ioc_set: IOCSet) -> dict[str, str]:
    return {
        "IP_LIST": format_iocs_for_template(ioc_set.ipv4 + ioc_set.ipv6),
        "DOMAIN_LIST": format_iocs_for_template(ioc_set.domains),
        "URL_LIST": format_iocs_for_template(ioc_set.urls),
        "HASH_LIST": format_iocs_for_template(ioc_set.sha256),
        "MD5_LIST": format_iocs_for_template(ioc_set.md5),
        "EMAIL_LIST": format_iocs_for_template(ioc_set.emails),
    }


def render_template(
    template: QueryTemplate,
    ioc_set: IOCSet,
    profile: DataProfile = DEFAULT_PROFILE,
) -> str:
    """
    Fill a template from an IOC set and a data profile.

    Placeholders that neither the profile nor the IOC lists define are left
    untouched, so a half-configured profile stays visible in the output.

    Args:
        template: Template to render
        ioc_set: IOCs for the list placeholders
        profile: Repository and field names

    Returns:
        Rendered query text
    """
    values = {**profile.placeholders(), **_list_placeholders(ioc_set)}
    return PLACEHOLDER_PATTERN.sub(
        lambda match: values.get(match.group(1), match.group(0)),
        template.template,
    )


def get_template(template_id: str) -> QueryTemplate:
    """
    Look up a template by id.

    Raises:
        ValidationError: If no template has that id
    """
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    raise ValidationError(f"Unknown query template: {template_id}")


def applicable_templates(ioc_set: IOCSet) -> list[QueryTemplate]:
    """Templates that consume at least one IOC type present in the set."""
    return [template for template in TEMPLATES if template.is_applicable(ioc_set)]


def render_applicable(
    ioc_set: IOCSet,
    profile: DataProfile = DEFAULT_PROFILE,
) -> dict[str, str]:
    """Render every applicable template, keyed by template id."""
    return {
        template.id: render_template(template, ioc_set, profile)
        for template in applicable_templates(ioc_set)
    }
