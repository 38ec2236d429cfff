"""Extraction of structured failure facts and file annotations."""

import html
from collections.abc import Sequence

from result_report_action.models.record import CallStackFrame, FailureSummary
from result_report_action.models.report import Annotation, FailureDetail, StackFrame


def relative_path(path: str, workspace: str | None) -> str:
    """Strip the workspace root from ``path``; keep it unchanged otherwise."""
    if not workspace:
        return path
    return path.removeprefix(f"{workspace.rstrip('/')}/")


def collect_failures(
    summaries: Sequence[FailureSummary], workspace: str | None = None
) -> list[FailureDetail]:
    """Extract one ``FailureDetail`` per failure summary, in order."""
    return [_failure_detail(summary, workspace) for summary in summaries]


def _failure_detail(summary: FailureSummary, workspace: str | None) -> FailureDetail:
    context = summary.source_code_context
    location = context.location if context else None

    file_path = (location.file_path if location else None) or summary.file_name
    line_number = location.line_number if location else None
    if line_number is None:
        line_number = summary.line_number

    return FailureDetail(
        file_name=summary.file_name,
        file_path=relative_path(file_path, workspace) if file_path else None,
        line_number=line_number,
        issue_type=summary.issue_type,
        message=summary.message,
        call_stack=[
            _stack_frame(frame, summary.file_name, workspace)
            for frame in (context.call_stack if context else ())
        ],
    )


def _stack_frame(
    frame: CallStackFrame, file_name: str | None, workspace: str | None
) -> StackFrame:
    symbol = frame.symbol_info
    location = symbol.location if symbol else None
    file_path = (location.file_path if location else None) or file_name or ""
    return StackFrame(
        image_name=(symbol.image_name if symbol else None) or "",
        address=frame.address_string or "",
        symbol_name=(symbol.symbol_name if symbol else None) or "",
        file_path=relative_path(file_path, workspace),
        line_number=location.line_number if location else None,
    )


def annotation_for(failure: FailureDetail) -> Annotation | None:
    """Build the file annotation of a failure with path, line and message."""
    if not (failure.file_path and failure.line_number and failure.message):
        return None
    return Annotation(
        path=failure.file_path,
        start_line=failure.line_number,
        end_line=failure.line_number,
        severity="failure",
        message=failure.message,
        category=failure.issue_type,
    )


def format_stack_trace(call_stack: Sequence[StackFrame]) -> str:
    """Format frames one per line, keeping blank fields of unresolved frames."""
    lines = []
    for index, frame in enumerate(call_stack):
        line = "" if frame.line_number is None else str(frame.line_number)
        lines.append(
            f"{index:<2} {frame.image_name} {frame.address} "
            f"{frame.symbol_name} {frame.file_path}: {line}"
        )
    return "\n".join(lines)


def render_failure(failure: FailureDetail) -> str:
    """Render the textual failure dump of one failure."""
    title_attr = 'align="right" width="100px"'
    detail_width = 'width="668px"'
    rows = [
        ("File", failure.file_location),
        ("Issue Type", failure.issue_type or ""),
        ("Message", failure.message or ""),
    ]
    contents = (
        '<table id="detail-table">'
        + "".join(
            f"<tr><td {title_attr}><b>{title}</b>"
            f"<td {detail_width}>{html.escape(value)}"
            for title, value in rows
        )
        + "</table>\n"
    )
    if failure.call_stack:
        trace = html.escape(format_stack_trace(failure.call_stack))
        contents += (
            f"<details><summary>Call Stack</summary>\n\n<pre>\n{trace}\n</pre>\n"
            "</details>\n"
        )
    return contents
