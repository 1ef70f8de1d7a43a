#!/usr/bin/env python3

"""
Regex patterns for IOC extraction.

Every quantifier is bounded, and domain matches may only start at the
beginning of a dotted run, so the patterns stay linear on long adversarial
input such as "1.1.1.1.1...".
"""

from __future__ import annotations

import re
from re import Pattern

from intelforge.modules.models import IOCType

IPV4_OCTET = r"(?:25[0-5]|2[0-4][0-9]|1[0-9]{2}|[1-9]?[0-9])"
HEX_GROUP = r"[0-9A-Fa-f]{0,4}"
DOMAIN_LABEL = r"[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
TLD = r"[a-zA-Z]{2,63}"
# Labels a 253-character name can hold
MAX_DOMAIN_LABELS = 126

PATTERNS: dict[IOCType, Pattern[str]] = {
    # Not part of a longer dotted-number run such as 1.2.3.4.5
    IOCType.IPV4: re.compile(
        rf"(?<![0-9]\.)\b(?:{IPV4_OCTET}\.){{3}}{IPV4_OCTET}\b(?!\.[0-9])",
    ),
    # Candidates only; validated with the ipaddress module afterwards
    IOCType.IPV6: re.compile(
        rf"(?<![\w:])(?:{HEX_GROUP}:){{2,8}}"
        rf"(?:(?:[0-9]{{1,3}}\.){{3}}[0-9]{{1,3}}|{HEX_GROUP})"
        r"(?![\w:])",
    ),
    # Starts only at the beginning of a dotted run; refuses the local part
    # of an email address (john.doe@...)
    IOCType.DOMAINS: re.compile(
        rf"\b(?<![\w-]\.)(?:{DOMAIN_LABEL}\.){{1,{MAX_DOMAIN_LABELS}}}{TLD}\b(?!@)",
    ),
    IOCType.URLS: re.compile(
        r"\bhttps?://"
        r"(?P<userinfo>[\w.~%!$&'()*+,;=:\-]{1,256}@)?"
        r"(?:\[[0-9A-Fa-f:.]{2,45}\]|[a-zA-Z0-9](?:[\w.\-]{0,251}[a-zA-Z0-9])?)"
        r"(?::[0-9]{1,5})?"
        r"(?:[/?#][\w.~!$&'()*+,;=:@%/?#\-]*)?",
        re.IGNORECASE,
    ),
    IOCType.SHA256: re.compile(r"\b[a-fA-F0-9]{64}\b"),
    IOCType.MD5: re.compile(r"\b[a-fA-F0-9]{32}\b"),
    IOCType.EMAILS: re.compile(
        rf"\b[a-zA-Z0-9._%+\-]{{1,64}}@(?:{DOMAIN_LABEL}\.){{1,{MAX_DOMAIN_LABELS}}}{TLD}\b",
    ),
}

# Characters that end a sentence rather than a URL
URL_TRAILING_PUNCTUATION = ".,;:!?'*"
