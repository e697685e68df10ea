"""Report renderer adapter.

This adapter implements IReportRenderer to turn a BulkAssignmentReport
into the fixed-structure text summary printed by the CLI. The wording is
relied on by downstream scripts and must not change.

Each line is a ReportLine: the text itself plus an optional presentation
hint. The hint never appears in the text; a terminal may use it for
emphasis and a log file may ignore it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...api.exceptions import OperationCancelledError, error_message
from ..domain.entities import AssignmentMode, BulkAssignmentReport
from ..domain.ports import IReportRenderer


class LineHint(str, Enum):
    """Presentation hints for report lines."""

    HEADING = "heading"
    DETAIL = "detail"
    ERROR = "error"


@dataclass(frozen=True)
class ReportLine:
    """One line of rendered report output."""

    text: str
    hint: Optional[LineHint] = None

    def __str__(self) -> str:
        return self.text


def format_duration(seconds: float) -> str:
    """Format elapsed time, e.g. ``850ms``, ``1.234s`` or ``2m3.5s``."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.3f}s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m{rest:.1f}s"


class TextReportRenderer(IReportRenderer):
    """Renders the bulk assignment summary.

    Single-target layout:

        Bulk AP assignment complete!
          Successfully assigned: 1 of 2 APs
          Failed assignments: 1
          Operation took: 1.204s

        Errors encountered:
          AP 2 (00:11:22:33:44:56): <message>

    Multi-target (CSV) runs add one status line per site before the summary,
    append ``across N sites`` to the success line, and group error details
    under ``Site <site>:`` headings.
    """

    def render(self, report: BulkAssignmentReport) -> list[ReportLine]:
        multi = report.mode == AssignmentMode.MULTI_TARGET
        kind = report.device_kind

        lines: list[ReportLine] = []

        if multi:
            lines.extend(self._site_lines(report))
            lines.append(ReportLine(""))

        summary = f"  Successfully assigned: {report.succeeded} of {report.total} {kind.plural}"
        if multi:
            summary += f" across {report.site_count} sites"

        lines.extend([
            ReportLine(f"Bulk {kind.label} assignment complete!", LineHint.HEADING),
            ReportLine(summary),
            ReportLine(f"  Failed assignments: {report.failed}"),
            ReportLine(f"  Operation took: {format_duration(report.elapsed_seconds)}"),
        ])

        if report.failed > 0:
            lines.append(ReportLine(""))
            lines.append(ReportLine("Errors encountered:", LineHint.HEADING))
            if multi:
                lines.extend(self._grouped_failures(report))
            else:
                for outcome in report.failures:
                    lines.append(self._failure_line(outcome, indent="  ", kind_label=kind.label))

        return lines

    def render_text(self, report: BulkAssignmentReport) -> str:
        """Render the report as a single newline-joined string."""
        return "\n".join(line.text for line in self.render(report))

    # ----------------------------------------
    # Helpers
    # ----------------------------------------

    def _site_lines(self, report: BulkAssignmentReport) -> list[ReportLine]:
        lines = []
        for summary in report.sites:
            if summary.resolved:
                lines.append(ReportLine(
                    f"Site {summary.site}: assigned {summary.succeeded} of "
                    f"{summary.total} {report.device_kind.plural} successfully",
                    LineHint.ERROR if summary.failed else None,
                ))
            elif isinstance(summary.error, OperationCancelledError):
                lines.append(ReportLine(
                    f"Site {summary.site}: skipped: {error_message(summary.error)}",
                    LineHint.ERROR,
                ))
            else:
                lines.append(ReportLine(
                    f"Site {summary.site}: could not resolve site ID: "
                    f"{error_message(summary.error)}",
                    LineHint.ERROR,
                ))
        return lines

    def _grouped_failures(self, report: BulkAssignmentReport) -> list[ReportLine]:
        lines = []
        for summary in report.sites:
            failures = report.failures_for(summary.site)
            if not failures:
                continue
            lines.append(ReportLine(f"  Site {summary.site}:", LineHint.DETAIL))
            for outcome in failures:
                lines.append(
                    self._failure_line(outcome, indent="    ", kind_label=report.device_kind.label)
                )
        return lines

    @staticmethod
    def _failure_line(outcome, indent: str, kind_label: str) -> ReportLine:
        return ReportLine(
            f"{indent}{kind_label} {outcome.request.index} ({outcome.request.original_mac}): "
            f"{error_message(outcome.error)}",
            LineHint.ERROR,
        )
