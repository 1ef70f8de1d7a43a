#!/usr/bin/env python3

"""
Optional AI triage of extracted IOCs.

An OpenAI-compatible chat-completions endpoint is asked to drop indicators
that are clearly benign. Providers are tried in order until one returns a
parseable answer. The answer is only ever used to prune: values the model
invents are ignored, and values the model was never shown are kept.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from re import Pattern

import requests

from intelforge.modules.exceptions import ConfigError, TriageError, ValidationError
from intelforge.modules.logger import get_logger
from intelforge.modules.models import IOCSet, IOCType

logger = get_logger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENROUTER_MODEL = "anthropic/claude-3-haiku"

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_PREVIEW_CHARS = 8000
MAX_TOKENS = 2000

CODE_FENCE_PATTERN: Pattern[str] = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)

SYSTEM_PROMPT = (
    "You are a threat intelligence analyst reviewing indicators of compromise "
    "extracted automatically from a report. Remove indicators that are clearly "
    "benign: well-known legitimate services, documentation examples, software "
    "vendors and references to the report's own publisher. Keep everything that "
    "could be attacker infrastructure or a malicious file.\n\n"
    "Respond with ONLY a JSON object with the keys ipv4, ipv6, domains, urls, "
    "sha256, md5 and emails, each an array of strings copied exactly from the "
    "input. Do not add new values."
)


@dataclass(frozen=True)
class TriageProvider:
    """An OpenAI-compatible chat-completions provider."""

    name: str
    base_url: str
    api_key: str = field(repr=False)
    model: str
    extra_headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"


def openai_provider(api_key: str, model: str | None = None) -> TriageProvider:
    return TriageProvider("openai", OPENAI_BASE_URL, api_key, model or DEFAULT_OPENAI_MODEL)


def openrouter_provider(api_key: str, model: str | None = None) -> TriageProvider:
    return TriageProvider(
        "openrouter",
        OPENROUTER_BASE_URL,
        api_key,
        model or DEFAULT_OPENROUTER_MODEL,
        extra_headers={"X-Title": "IntelForge"},
    )


def build_preview(ioc_set: IOCSet, max_chars: int) -> IOCSet:
    """
    Select the values that fit into a prompt of at most ``max_chars``.

    Values are taken type by type in order until the budget is spent.

    Args:
        ioc_set: Full IOC set
        max_chars: Character budget for the serialized values

    Returns:
        IOCSet holding the values that will be shown to the model
    """
    budget = max_chars
    selected: dict[str, list[str]] = {ioc_type.value: [] for ioc_type in IOCType}
    for record in ioc_set.records():
        # Quotes plus separator
        cost = len(record.value) + 4
        if cost > budget:
            break
        selected[record.type.value].append(record.value)
        budget -= cost
    return IOCSet(**selected)


def parse_triage_response(content: str) -> IOCSet:
    """
    Parse a model answer into an IOCSet.

    Markdown code fences are stripped and, if the answer carries prose
    around the JSON object, the outermost braces are used.

    Raises:
        ValidationError: If no JSON object can be parsed
    """
    text = CODE_FENCE_PATTERN.sub("", content).strip()
    try:
        data = json.loads(text)
    except ValueError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise ValidationError("AI response does not contain a JSON object") from None
        try:
            data = json.loads(text[start:end + 1])
        except ValueError as exc:
            raise ValidationError(f"AI response is not valid JSON: {exc}") from exc
    return IOCSet.from_mapping(data)


def prune(original: IOCSet, shown: IOCSet, kept: IOCSet) -> IOCSet:
    """
    Apply a triage answer to the original set.

    A value survives when the model kept it or was never shown it. Order
    follows the original set, so triage can only remove values.
    """
    result: dict[str, list[str]] = {}
    for ioc_type in IOCType:
        shown_values = set(shown.get(ioc_type))
        kept_values = set(kept.get(ioc_type))
        result[ioc_type.value] = [
            value
            for value in original.get(ioc_type)
            if value in kept_values or value not in shown_values
        ]
    return IOCSet(**result)


class AITriageClient:
    """Client asking chat-completions providers to prune an IOC set."""

    def __init__(
        self,
        providers: Sequence[TriageProvider],
        timeout: float = DEFAULT_TIMEOUT,
        max_preview_chars: int = DEFAULT_MAX_PREVIEW_CHARS,
    ) -> None:
        """
        Initialize the triage client.

        Args:
            providers: Providers in the order they are tried
            timeout: Per-request timeout in seconds
            max_preview_chars: Character budget for the values sent

        Raises:
            ConfigError: If no provider is configured
        """
        if not providers:
            raise ConfigError("triage providers", "no AI provider is configured")
        self.providers = list(providers)
        self.timeout = timeout
        self.max_preview_chars = max_preview_chars

    def _build_payload(self, provider: TriageProvider, preview: IOCSet) -> dict[str, object]:
        return {
            "model": provider.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(preview.as_dict(), indent=2)},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": 0,
        }

    def _request(self, provider: TriageProvider, preview: IOCSet) -> str:
        """
        Send one chat-completions request.

        Returns:
            Message content of the first choice

        Raises:
            requests.RequestException: On transport or HTTP errors
            ValidationError: If the response has no message content
        """
        headers = {
            "Authorization": f"Bearer {provider.api_key}",
            "Content-Type": "application/json",
            **provider.extra_headers,
        }
        response = requests.post(
            provider.endpoint,
            headers=headers,
            json=self._build_payload(provider, preview),
            timeout=self.timeout,
        )
        response.raise_for_status()

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ValidationError(f"unexpected response shape from {provider.name}") from exc
        if not isinstance(content, str):
            raise ValidationError(f"empty response from {provider.name}")
        return content

    def triage(self, ioc_set: IOCSet) -> IOCSet:
        """
        Prune an IOC set with the first provider that answers.

        Args:
            ioc_set: IOCs to review

        Returns:
            Subset of ``ioc_set`` in its original order

        Raises:
            TriageError: If every provider failed
        """
        if ioc_set.is_empty():
            return ioc_set

        preview = build_preview(ioc_set, self.max_preview_chars)
        tried: list[str] = []
        last_error = "no provider answered"

        for provider in self.providers:
            tried.append(provider.name)
            try:
                kept = parse_triage_response(self._request(provider, preview))
            except (requests.RequestException, ValidationError) as exc:
                logger.warning("AI triage with %s failed: %s", provider.name, exc)
                last_error = str(exc)
                continue

            result = prune(ioc_set, preview, kept)
            logger.info(
                "AI triage with %s kept %d of %d IOCs",
                provider.name,
                len(result),
                len(ioc_set),
            )
            return result

        raise TriageError(tried, last_error)


def triage_or_passthrough(ioc_set: IOCSet, client: AITriageClient) -> IOCSet:
    """Run AI triage, returning the input unchanged if every provider fails."""
    try:
        return client.triage(ioc_set)
    except TriageError as exc:
        logger.warning("%s; keeping unreviewed IOCs", exc)
        return ioc_set
