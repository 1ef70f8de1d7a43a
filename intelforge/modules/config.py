#!/usr/bin/env python3

"""
Configuration loader for IntelForge.

Supports .env, environment variables, and INI config files.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from configparser import ConfigParser
from configparser import Error as ConfigParserError
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from intelforge.modules.exceptions import ConfigError
from intelforge.modules.models import ExtractionOptions
from intelforge.modules.streaming import DEFAULT_CHUNK_LINES, DEFAULT_MAX_WORKERS
from intelforge.modules.triage import (
    DEFAULT_MAX_PREVIEW_CHARS,
    DEFAULT_TIMEOUT,
    AITriageClient,
    TriageProvider,
    openai_provider,
    openrouter_provider,
)
from intelforge.modules.warninglists import DEFAULT_WARNING_LISTS, WarningLists

ENV_PREFIX = "INTELFORGE_"
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}

# setting -> (INI section, INI option)
SETTINGS: dict[str, tuple[str, str]] = {
    "include_private": ("extraction", "include_private"),
    "filter_legitimate": ("extraction", "filter_legitimate"),
    "warninglists": ("extraction", "warninglists"),
    "chunk_lines": ("batch", "chunk_lines"),
    "max_workers": ("batch", "max_workers"),
    "timeout": ("triage", "timeout"),
    "max_preview_chars": ("triage", "max_preview_chars"),
}

TRIAGE_SECTION_PREFIX = "triage."


@dataclass(frozen=True)
class AppConfig:
    """Resolved application configuration."""

    include_private: bool = False
    filter_legitimate: bool = True
    warninglists_path: Path | None = None
    chunk_lines: int = DEFAULT_CHUNK_LINES
    max_workers: int = DEFAULT_MAX_WORKERS
    triage_timeout: float = DEFAULT_TIMEOUT
    max_preview_chars: int = DEFAULT_MAX_PREVIEW_CHARS
    providers: tuple[TriageProvider, ...] = field(default=(), repr=False)
    config_path: Path | None = None

    def extraction_options(self, source_url: str | None = None) -> ExtractionOptions:
        return ExtractionOptions(
            include_private=self.include_private,
            filter_legitimate=self.filter_legitimate,
            source_url=source_url,
        )

    def warning_lists(self) -> WarningLists:
        """Load the configured warning-list table, or the bundled one."""
        if self.warninglists_path is None:
            return DEFAULT_WARNING_LISTS
        return WarningLists.from_json(self.warninglists_path)

    def triage_client(self) -> AITriageClient:
        """
        Build the AI triage client.

        Raises:
            ConfigError: If no provider is configured
        """
        return AITriageClient(
            self.providers,
            timeout=self.triage_timeout,
            max_preview_chars=self.max_preview_chars,
        )


def parse_bool(setting: str, raw: str) -> bool:
    """Parse a boolean setting."""
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(setting, f"expected a boolean, got {raw!r}")


def parse_positive_int(setting: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigError(setting, f"expected an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(setting, f"must be at least 1, got {value}")
    return value


def parse_positive_float(setting: str, raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError:
        raise ConfigError(setting, f"expected a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(setting, f"must be positive, got {value}")
    return value


def _find_default_config_paths() -> Iterable[Path]:
    """Return default config locations in priority order."""
    yield Path.cwd() / "intelforge.ini"
    yield Path.home() / ".config" / "intelforge" / "config.ini"


def _read_ini(config_path: Path) -> ConfigParser:
    parser = ConfigParser()
    try:
        with config_path.open(encoding="utf-8") as handle:
            parser.read_file(handle)
    except (OSError, ConfigParserError) as e:
        raise ConfigError(str(config_path), str(e)) from e
    return parser


def _ini_settings(parser: ConfigParser) -> dict[str, str]:
    values: dict[str, str] = {}
    for setting, (section, option) in SETTINGS.items():
        if parser.has_option(section, option):
            values[setting] = parser.get(section, option)
    return values


def _ini_providers(parser: ConfigParser) -> list[TriageProvider]:
    """Read providers from ``[triage.<name>]`` sections."""
    providers = []
    for section in parser.sections():
        if not section.startswith(TRIAGE_SECTION_PREFIX):
            continue
        name = section[len(TRIAGE_SECTION_PREFIX):]
        missing = [
            option
            for option in ("base_url", "api_key", "model")
            if not parser.get(section, option, fallback="").strip()
        ]
        if missing:
            raise ConfigError(section, f"missing {', '.join(missing)}")
        providers.append(
            TriageProvider(
                name=name,
                base_url=parser.get(section, "base_url").strip(),
                api_key=parser.get(section, "api_key").strip(),
                model=parser.get(section, "model").strip(),
            ),
        )
    return providers


def _env_settings(environ: Mapping[str, str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for setting in SETTINGS:
        env_name = ENV_PREFIX + setting.upper()
        if env_name in environ:
            values[setting] = environ[env_name]
    return values


def _env_providers(environ: Mapping[str, str]) -> list[TriageProvider]:
    providers = []
    openai_key = environ.get("OPENAI_API_KEY", "").strip()
    if openai_key:
        providers.append(openai_provider(openai_key, environ.get(ENV_PREFIX + "OPENAI_MODEL")))
    openrouter_key = environ.get("OPENROUTER_API_KEY", "").strip()
    if openrouter_key:
        providers.append(
            openrouter_provider(openrouter_key, environ.get(ENV_PREFIX + "OPENROUTER_MODEL")),
        )
    return providers


def load_config(cli_config_path: str | None = None, **cli_overrides: object) -> AppConfig:
    """
    Load configuration with precedence: CLI > env > config file > defaults.

    Args:
        cli_config_path: Explicit INI file; it must exist
        **cli_overrides: Setting values from the command line; None means unset

    Returns:
        Resolved configuration

    Raises:
        ConfigError: If a file cannot be read or a value is invalid
    """
    load_dotenv(override=False)

    unknown = sorted(set(cli_overrides) - set(SETTINGS))
    if unknown:
        raise ConfigError(", ".join(unknown), "unknown setting")

    config_path: Path | None = None
    parser = ConfigParser()
    if cli_config_path:
        config_path = Path(cli_config_path)
        if not config_path.is_file():
            raise ConfigError(str(config_path), "config file not found")
        parser = _read_ini(config_path)
    else:
        for path in _find_default_config_paths():
            if path.is_file():
                config_path = path
                parser = _read_ini(path)
                break

    raw: dict[str, object] = {}
    raw.update(_ini_settings(parser))
    raw.update(_env_settings(os.environ))
    raw.update({name: value for name, value in cli_overrides.items() if value is not None})

    def text(name: str) -> str | None:
        value = raw.get(name)
        return None if value is None else str(value)

    def flag(name: str, default: bool) -> bool:
        value = raw.get(name)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return parse_bool(name, str(value))

    def count(name: str, default: int) -> int:
        value = text(name)
        return default if value is None else parse_positive_int(name, value)

    timeout_text = text("timeout")
    warninglists = text("warninglists")

    # Environment providers come first, then INI sections
    providers = _env_providers(os.environ) + _ini_providers(parser)

    return AppConfig(
        include_private=flag("include_private", False),
        filter_legitimate=flag("filter_legitimate", True),
        warninglists_path=Path(warninglists) if warninglists else None,
        chunk_lines=count("chunk_lines", DEFAULT_CHUNK_LINES),
        max_workers=count("max_workers", DEFAULT_MAX_WORKERS),
        triage_timeout=(
            DEFAULT_TIMEOUT if timeout_text is None
            else parse_positive_float("timeout", timeout_text)
        ),
        max_preview_chars=count("max_preview_chars", DEFAULT_MAX_PREVIEW_CHARS),
        providers=tuple(providers),
        config_path=config_path,
    )
