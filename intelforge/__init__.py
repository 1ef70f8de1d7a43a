"""
IntelForge - Extract, filter and export Indicators of Compromise from threat reports
"""

__version__ = "1.0.0"

from intelforge.modules.extractor import IOCExtractor, extract_iocs
from intelforge.modules.file_parser import HTMLParser, PDFParser, TextParser, read_report
from intelforge.modules.models import IOC, ExtractionOptions, IOCSet, IOCType
from intelforge.modules.normalizer import normalize
from intelforge.modules.output_formatter import (
    CSVFormatter,
    JSONFormatter,
    STIXFormatter,
    TextFormatter,
    get_formatter,
)
from intelforge.modules.query_templates import render_template
from intelforge.modules.streaming import ChunkedIOCExtractor
from intelforge.modules.warninglists import (
    is_legitimate_domain,
    is_legitimate_email_domain,
    is_legitimate_url,
    is_private_ip,
)

# Export main functionality for library use
__all__ = [
    "IOC",
    "CSVFormatter",
    "ChunkedIOCExtractor",
    "ExtractionOptions",
    "HTMLParser",
    "IOCExtractor",
    "IOCSet",
    "IOCType",
    "JSONFormatter",
    "PDFParser",
    "STIXFormatter",
    "TextFormatter",
    "TextParser",
    "__version__",
    "extract_iocs",
    "get_formatter",
    "is_legitimate_domain",
    "is_legitimate_email_domain",
    "is_legitimate_url",
    "is_private_ip",
    "normalize",
    "read_report",
    "render_template",
]
