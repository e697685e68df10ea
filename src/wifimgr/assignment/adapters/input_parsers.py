"""Plain-text input parser adapter.

This adapter implements IInputParser for the two file formats accepted by
the bulk assignment commands. Neither format has a header row.

    MAC list:   one MAC per non-blank line
    MAC+site:   MAC,SiteName per non-blank line; the first comma separates
                the fields, anything after a second comma is ignored, and
                there is no quoting or escaping

Any problem aborts the whole parse. Nothing is ever returned for a file
that contains a bad line.
"""

import logging
from pathlib import Path
from typing import Iterable

from ...api.exceptions import FormatError, InputFileError
from ..domain.entities import AssignmentRequest, ParsedCsv, normalize_mac
from ..domain.ports import IInputParser

logger = logging.getLogger(__name__)

CSV_FORMAT_MESSAGE = "invalid format in file: expected MAC,SITE format"


def read_input_file(path: str) -> str:
    """Read an input file as UTF-8 text.

    A leading byte order mark is dropped.

    Raises:
        InputFileError: If the file cannot be read or decoded
    """
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(path, cause=e)


def _non_blank_lines(content: str) -> Iterable[tuple[int, str]]:
    """Yield (1-based line number, stripped line) for non-blank lines."""
    for number, line in enumerate(content.split("\n"), start=1):
        stripped = line.strip()
        if stripped:
            yield number, stripped


def parse_inline_macs(macs: Iterable[str]) -> list[str]:
    """Normalize MAC addresses given as command arguments.

    Raises:
        FormatError: If no non-blank MAC remains
    """
    result = [normalize_mac(mac) for mac in macs if mac.strip()]
    if not result:
        raise FormatError("no MAC addresses provided")
    return result


class MacListParser:
    """Parser for newline-delimited MAC files."""

    def parse(self, content: str, source: str) -> list[str]:
        """Return the MACs in file order.

        Raises:
            FormatError: If the content has no non-blank line
        """
        macs = [normalize_mac(line) for _, line in _non_blank_lines(content)]
        if not macs:
            raise FormatError(f"no MAC addresses found in file {source}", source=source)

        logger.debug(f"Parsed {len(macs)} MAC addresses from {source}")
        return macs


class MacSiteCsvParser:
    """Parser for MAC,SiteName files.

    Entries are grouped by site name in first-appearance order; order within
    each group follows the file.
    """

    def parse(self, content: str, source: str) -> ParsedCsv:
        """Return requests grouped by target site.

        Raises:
            FormatError: On the first line without a comma, or if the
                content has no entries
        """
        parsed = ParsedCsv()

        for number, line in _non_blank_lines(content):
            fields = line.split(",")
            if len(fields) < 2:
                raise FormatError(
                    CSV_FORMAT_MESSAGE,
                    source=source,
                    line_number=number,
                    line=line,
                )

            parsed.add(
                AssignmentRequest(
                    index=len(parsed.requests) + 1,
                    mac=normalize_mac(fields[0]),
                    site=fields[1].strip(),
                    raw_mac=fields[0].strip(),
                )
            )

        if not parsed.requests:
            raise FormatError(f"no valid entries found in file {source}", source=source)

        logger.debug(
            f"Parsed {len(parsed.requests)} entries for {len(parsed.sites)} sites from {source}"
        )
        return parsed


class PlainTextInputParser(IInputParser):
    """IInputParser backed by MacListParser and MacSiteCsvParser."""

    def __init__(self):
        self.mac_list = MacListParser()
        self.mac_site_csv = MacSiteCsvParser()

    def parse_mac_list(self, content: str, source: str) -> list[str]:
        return self.mac_list.parse(content, source)

    def parse_mac_site_csv(self, content: str, source: str) -> ParsedCsv:
        return self.mac_site_csv.parse(content, source)
