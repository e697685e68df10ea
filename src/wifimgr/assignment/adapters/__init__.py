"""Infrastructure adapters for device assignment.

These adapters implement the port interfaces defined in the domain layer,
connecting the application to the Mist inventory API, input files and
the text report.
"""

from .input_parsers import (
    MacListParser,
    MacSiteCsvParser,
    PlainTextInputParser,
    parse_inline_macs,
    read_input_file,
)
from .mist_inventory import MistInventoryAdapter
from .report_renderer import LineHint, ReportLine, TextReportRenderer, format_duration

__all__ = [
    "MistInventoryAdapter",
    "PlainTextInputParser",
    "MacListParser",
    "MacSiteCsvParser",
    "parse_inline_macs",
    "read_input_file",
    "TextReportRenderer",
    "ReportLine",
    "LineHint",
    "format_duration",
]
