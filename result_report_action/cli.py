"""CLI entry point for the test result report action."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import asdict
from pathlib import Path
from typing import Any

from result_report_action.config import ReportConfig
from result_report_action.errors import ReportError
from result_report_action.formatter import Formatter
from result_report_action.models.report import Annotation, TestReport
from result_report_action.sources.loading import load_source_manifest

STATUS_SYMBOLS = {
    "success": "✓",
    "failure": "✗",
    None: "-",
}


def log_report_summary(log: logging.Logger, report: TestReport) -> None:
    """Log a formatted summary of the report's chapters."""
    log.info("=" * 80)
    log.info("Test Report Summary:")
    log.info("=" * 80)

    for chapter in report.chapters:
        count = sum(len(section.leaves) for section in chapter.sections.values())
        log.info("%s: %d test(s)", chapter.heading, count)
        if chapter.device:
            log.info("  Device: %s", chapter.device)

    stats = report.stats
    log.info(
        "%s %s: %d passed, %d failed, %d skipped, %d expected failure(s) (%.2fs)",
        STATUS_SYMBOLS[report.status],
        report.entity_name or "tests",
        stats.passed,
        stats.failed,
        stats.skipped,
        stats.expected_failure,
        stats.duration,
    )


def format_output(report: TestReport) -> dict[str, Any]:
    """Format report statistics for JSON output."""
    return {
        "status": report.status,
        "total": report.stats.total,
        "passed": report.stats.passed,
        "failed": report.stats.failed,
        "skipped": report.stats.skipped,
        "expected_failures": report.stats.expected_failure,
        "annotations": len(report.annotations),
    }


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def workflow_command(annotation: Annotation) -> str:
    """Format an annotation as a GitHub Actions workflow command."""
    properties = [
        f"file={_escape_property(annotation.path)}",
        f"line={annotation.start_line}",
        f"endLine={annotation.end_line}",
    ]
    if annotation.category:
        properties.append(f"title={_escape_property(annotation.category)}")
    return f"::error {','.join(properties)}::{_escape_data(annotation.message)}"


def write_annotations(path: Path, annotations: Sequence[Annotation]) -> None:
    """Write annotations as a JSON array."""
    path.write_text(
        json.dumps([asdict(annotation) for annotation in annotations], indent=2),
        encoding="utf-8",
    )


async def run(
    source_key: str,
    source_config_json: str,
    config: ReportConfig,
    output_path: Path | None = None,
    annotations_path: Path | None = None,
) -> int:
    """Build the report and return exit code."""
    log = logging.getLogger("result_report_action")

    log.info("Loading record source: %s", source_key)
    manifest = load_source_manifest(source_key)

    config_dict = json.loads(source_config_json)
    source_config = manifest.config_cls(**config_dict)

    try:
        async with manifest.source_factory(source_config) as source:
            report = await Formatter(source=source, config=config).format()
    except ReportError as e:
        log.error("Formatting failed: %s", e)
        return 2

    log_report_summary(log, report)

    document = report.render()
    if output_path is None:
        print(document)
    else:
        output_path.write_text(document, encoding="utf-8")
        log.info("Report written to %s", output_path)

    if annotations_path is not None:
        write_annotations(annotations_path, report.annotations)
        log.info(
            "%d annotation(s) written to %s", len(report.annotations), annotations_path
        )
    elif output_path is not None:
        for annotation in report.annotations:
            print(workflow_command(annotation))

    if output_path is not None:
        print(json.dumps(format_output(report)))

    return 1 if report.status == "failure" else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Render a test run record as a markdown report"
    )
    parser.add_argument(
        "--source",
        required=True,
        help="Record source key (json-directory, xcresulttool)",
    )
    parser.add_argument(
        "--source-config",
        required=True,
        help="JSON configuration for the record source",
    )
    parser.add_argument(
        "--failures-only",
        action="store_true",
        help="Only show failing groups and tests in summaries and details",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="File to write the markdown report to (default: stdout)",
    )
    parser.add_argument(
        "--annotations",
        type=Path,
        help="File to write failure annotations to as JSON",
    )
    parser.add_argument(
        "--resolve-concurrency",
        type=int,
        default=1,
        help="Number of test records resolved concurrently",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = ReportConfig(
        failures_only=args.failures_only,
        resolve_concurrency=args.resolve_concurrency,
    )
    exit_code = asyncio.run(
        run(
            source_key=args.source,
            source_config_json=args.source_config,
            config=config,
            output_path=args.output,
            annotations_path=args.annotations,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
