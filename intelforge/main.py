#!/usr/bin/env python3

"""
IntelForge - Extract, filter and export Indicators of Compromise from threat reports
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from colorama import Fore, Style, init

from intelforge import __version__
from intelforge.modules.config import AppConfig, load_config
from intelforge.modules.exceptions import ExtractionError, IntelForgeError, IOCFileNotFoundError
from intelforge.modules.logger import get_logger, setup_logger
from intelforge.modules.models import IOCSet
from intelforge.modules.output_formatter import FORMATTERS, get_formatter
from intelforge.modules.query_templates import applicable_templates, get_template, render_template
from intelforge.modules.streaming import ChunkedIOCExtractor, ParallelReportExtractor
from intelforge.modules.triage import triage_or_passthrough
from intelforge.modules.utils import merge_ioc_sets

# Colorama color constants
COLOR_CYAN: str = str(Fore.CYAN)
COLOR_GREEN: str = str(Fore.GREEN)
STYLE_RESET: str = str(Style.RESET_ALL)

VERSION = __version__

logger = get_logger(__name__)


def get_str_arg(args: argparse.Namespace, name: str, default: str = "") -> str:
    """Get string argument from argparse namespace."""
    value: object = getattr(args, name, None)
    return str(value) if value is not None else default


def get_bool_arg(args: argparse.Namespace, name: str) -> bool:
    """Get boolean argument from argparse namespace."""
    value: object = getattr(args, name, False)
    return bool(value)


def get_optional_bool_arg(args: argparse.Namespace, name: str) -> bool | None:
    value: object = getattr(args, name, None)
    return None if value is None else bool(value)


def get_optional_int_arg(args: argparse.Namespace, name: str) -> int | None:
    value: object = getattr(args, name, None)
    return int(str(value)) if value is not None else None


def get_list_arg(args: argparse.Namespace, name: str) -> list[str]:
    """Get list argument from argparse namespace."""
    value: object = getattr(args, name, None)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def get_optional_str_arg(args: argparse.Namespace, name: str) -> str | None:
    """Get optional string argument from argparse namespace."""
    value: object = getattr(args, name, None)
    return str(value) if value is not None else None


def banner() -> None:
    """Display the tool banner."""
    print(
        f"""{COLOR_CYAN}
╔═══════════════════════════════════════════════╗
║                                               ║
║               IntelForge v{VERSION:<8}            ║
║                                               ║
║   IOC extraction for threat intel reports     ║
║                                               ║
╚═══════════════════════════════════════════════╝
{STYLE_RESET}""",
        file=sys.stderr,
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="intelforge",
        description="Indicators of Compromise (IOCs) Extractor",
        epilog="Without -f or -m the report text is read from standard input.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    input_group = parser.add_mutually_exclusive_group()
    input_group.add_argument("-f", "--file", help="Path to the report to analyze")
    input_group.add_argument("-m", "--multiple", nargs="+", help="Several reports to analyze")

    parser.add_argument("-o", "--output", help="Output file path (use - for stdout)")
    parser.add_argument(
        "-t", "--type", choices=["pdf", "html", "text"], help="Force specific file type"
    )
    parser.add_argument(
        "--format",
        choices=sorted(FORMATTERS),
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--include-private",
        action="store_true",
        default=None,
        help="Keep private, loopback and link-local IP addresses",
    )
    parser.add_argument(
        "--no-filter",
        dest="filter_legitimate",
        action="store_false",
        default=None,
        help="Don't drop domains, URLs and emails of legitimate services",
    )
    parser.add_argument("--source-url", help="URL of the report; its own host is excluded")
    parser.add_argument("--title", help="Report title recorded in JSON, text and STIX output")
    parser.add_argument("--tlp", help="TLP marking recorded in JSON output")
    parser.add_argument(
        "--templates",
        nargs="*",
        metavar="ID",
        help="Render hunting queries (all applicable ones, or the given template ids)",
    )
    parser.add_argument(
        "--triage",
        action="store_true",
        help="Ask the configured AI providers to prune benign IOCs",
    )
    parser.add_argument("--chunk-lines", type=int, help="Lines per extraction chunk")
    parser.add_argument("--workers", type=int, help="Number of parallel workers")
    parser.add_argument("--warninglists", help="Path to a replacement warning-list JSON table")
    parser.add_argument("--config", help="Path to config file (INI)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--log-file", help="Path to log file")
    parser.add_argument("--version", action="version", version=f"IntelForge v{VERSION}")

    return parser


def setup_application(args: argparse.Namespace) -> None:
    """Set up logging and display banner."""
    debug = get_bool_arg(args, "debug")
    verbose = get_bool_arg(args, "verbose")
    log_file_path = get_optional_str_arg(args, "log_file")

    log_level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    log_file = Path(log_file_path) if log_file_path else None
    setup_logger(level=log_level, log_file=log_file)

    if not debug and not verbose and sys.stderr.isatty():
        banner()


def resolve_config(args: argparse.Namespace) -> AppConfig:
    """Resolve configuration from CLI/env/config."""
    return load_config(
        get_optional_str_arg(args, "config"),
        include_private=get_optional_bool_arg(args, "include_private"),
        filter_legitimate=get_optional_bool_arg(args, "filter_legitimate"),
        warninglists=get_optional_str_arg(args, "warninglists"),
        chunk_lines=get_optional_int_arg(args, "chunk_lines"),
        max_workers=get_optional_int_arg(args, "workers"),
    )


def process_multiple_files_input(args: argparse.Namespace, config: AppConfig) -> tuple[IOCSet, str]:
    """Process several reports in parallel and merge their IOCs."""
    file_paths = get_list_arg(args, "multiple")

    for file_path in file_paths:
        if not Path(file_path).is_file():
            raise IOCFileNotFoundError(file_path)

    logger.info("Processing %d files with %d workers", len(file_paths), config.max_workers)
    extractor = ParallelReportExtractor(
        max_workers=config.max_workers,
        chunk_lines=config.chunk_lines,
        options=config.extraction_options(get_optional_str_arg(args, "source_url")),
        warning_lists=config.warning_lists(),
    )
    results = extractor.extract_from_files(file_paths)
    if not results:
        raise ExtractionError("None of the reports could be processed")

    return merge_ioc_sets(results.values()), f"{len(file_paths)} files"


def process_single_input(args: argparse.Namespace, config: AppConfig) -> tuple[IOCSet, str]:
    """Process a single report file or standard input."""
    extractor = ChunkedIOCExtractor(
        chunk_lines=config.chunk_lines,
        max_workers=config.max_workers,
        options=config.extraction_options(get_optional_str_arg(args, "source_url")),
        warning_lists=config.warning_lists(),
    )

    file_arg = get_optional_str_arg(args, "file")
    if file_arg:
        logger.info("Processing %s", file_arg)
        return extractor.extract_from_file(file_arg, get_optional_str_arg(args, "type")), file_arg

    logger.info("Reading report from standard input")
    return extractor.extract(sys.stdin.read()), "stdin"


def display_results(ioc_set: IOCSet) -> None:
    """Display extraction results summary."""
    logger.info("Found %d indicators of compromise", len(ioc_set))

    for ioc_type, count in asdict(ioc_set.counts()).items():
        if count:
            print(f"    {COLOR_CYAN}- {ioc_type}: {count}{STYLE_RESET}", file=sys.stderr)


def write_result(text: str, output_path: str | None, description: str) -> None:
    """Print to stdout, or write to a file when a path is given."""
    if output_path is None or output_path == "-":
        print(text.rstrip("\n"))
        return
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("%s saved to %s", description, path)


def save_output(args: argparse.Namespace, ioc_set: IOCSet, input_display: str) -> None:
    """Format and save output."""
    output_format = get_str_arg(args, "format", "text")
    metadata = {"source_title": get_optional_str_arg(args, "title") or input_display}
    tlp = get_optional_str_arg(args, "tlp")
    if tlp:
        metadata["tlp"] = tlp

    formatter = get_formatter(output_format, ioc_set, metadata)
    output_path = get_optional_str_arg(args, "output")
    write_result(formatter.format(), output_path, f"Results in {output_format} format")

    if output_path and output_path != "-":
        print(f"{COLOR_GREEN}Results saved to {output_path}{STYLE_RESET}", file=sys.stderr)
        display_results(ioc_set)


def format_queries(ioc_set: IOCSet, template_ids: list[str]) -> str:
    """Render hunting queries as text blocks, one per template."""
    templates = (
        [get_template(template_id) for template_id in template_ids]
        if template_ids
        else applicable_templates(ioc_set)
    )

    blocks = []
    for template in templates:
        if not template.is_applicable(ioc_set):
            logger.warning("Template %s has no matching IOCs", template.id)
            continue
        blocks.append(f"# {template.name} ({template.id})\n{render_template(template, ioc_set)}\n")
    return "\n".join(blocks)


def save_queries(args: argparse.Namespace, ioc_set: IOCSet) -> None:
    """Render the requested hunting queries next to the main output."""
    queries = format_queries(ioc_set, get_list_arg(args, "templates"))
    if not queries:
        logger.warning("No query templates apply to the extracted IOCs")
        return

    output_path = get_optional_str_arg(args, "output")
    queries_path = (
        str(Path(output_path).with_suffix(".queries.txt"))
        if output_path and output_path != "-"
        else None
    )
    write_result(queries, queries_path, "Hunting queries")


def main(argv: list[str] | None = None) -> None:
    """Main function."""
    init(autoreset=True)
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        setup_application(args)

        if not get_optional_str_arg(args, "file") and not get_list_arg(args, "multiple"):
            if sys.stdin.isatty():
                parser.print_help()
                logger.error("No input provided. Use -f, -m or pipe a report on stdin")
                sys.exit(1)

        config = resolve_config(args)

        if get_list_arg(args, "multiple"):
            ioc_set, input_display = process_multiple_files_input(args, config)
        else:
            ioc_set, input_display = process_single_input(args, config)

        if get_bool_arg(args, "triage"):
            ioc_set = triage_or_passthrough(ioc_set, config.triage_client())

        save_output(args, ioc_set, input_display)
        if getattr(args, "templates", None) is not None:
            save_queries(args, ioc_set)

    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user")
        sys.exit(1)
    except IntelForgeError as e:
        logger.error("%s", e)
        sys.exit(1)
    except Exception as e:
        logger.error("Unexpected error: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
