"""Tests for report models."""

from result_report_action.models.report import (
    Chapter,
    GroupStats,
    TestReport,
)
from result_report_action.testing.factories import (
    FailureDetailFactory,
    LeafResultFactory,
)


def test_group_stats_total_and_sum() -> None:
    """Totals count every status and sums add field by field."""
    first = GroupStats(passed=1, failed=2, duration=1.5)
    second = GroupStats(skipped=3, expected_failure=4, duration=0.5)

    combined = first + second

    assert combined == GroupStats(
        passed=1, failed=2, skipped=3, expected_failure=4, duration=2.0
    )
    assert combined.total == 10


def test_report_status() -> None:
    """Any failure fails the run; otherwise a pass makes it succeed."""
    assert TestReport().status is None
    assert TestReport(stats=GroupStats(skipped=2)).status is None
    assert TestReport(stats=GroupStats(passed=1)).status == "success"
    assert TestReport(stats=GroupStats(passed=5, failed=1)).status == "failure"


def test_variant_key() -> None:
    """Leaves are keyed by identifier and configuration name."""
    configured = LeafResultFactory.build(identifier="A/t", configuration_name="C1")
    plain = LeafResultFactory.build(identifier="A/t", configuration_name=None)

    assert configured.variant_key == ("A/t", "C1")
    assert plain.variant_key == ("A/t", "")


def test_failure_file_location() -> None:
    """The line number is appended when known."""
    assert (
        FailureDetailFactory.build(file_name="A.swift", line_number=3).file_location
        == "A.swift:3"
    )
    assert (
        FailureDetailFactory.build(file_name="A.swift", line_number=None).file_location
        == "A.swift"
    )
    assert FailureDetailFactory.build(file_name=None).file_location == ""


def test_chapter_heading_fallbacks() -> None:
    """Title first, then scheme command, then a generic heading."""
    assert Chapter(title="UI Tests", scheme_command_name="Test").heading == "UI Tests"
    assert Chapter(scheme_command_name="Test").heading == "Test"
    assert Chapter().heading == "Test"


def test_report_render_joins_chapters() -> None:
    """Each chapter contributes its heading and blocks in order."""
    report = TestReport(
        chapters=[
            Chapter(title="One", summary="S1", failures="F1", details="D1"),
            Chapter(title="Two", summary="S2", failures="F2", details="D2"),
        ]
    )

    assert report.render() == "## One\n\nS1\nF1\nD1\n## Two\n\nS2\nF2\nD2"
