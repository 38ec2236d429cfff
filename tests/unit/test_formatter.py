"""Tests for the formatting pass."""

import re
from typing import Any

import pytest

from result_report_action.config import ReportConfig
from result_report_action.errors import (
    MalformedStatusError,
    RecordFormatError,
    ReferenceResolutionError,
    ReportContext,
    TreeDepthError,
)
from result_report_action.formatter import Formatter, parse_status, workspace_root
from result_report_action.models.report import Annotation, GroupStats, TestStatus
from result_report_action.testing import records
from result_report_action.testing.sources import InMemorySource

WORKSPACE = "/Users/dev/App"


def run_records(
    *tests: dict[str, Any], summaries: dict[str, Any] | None = None
) -> dict[str | None, Any]:
    """Records of one invocation running ``tests`` in the AppTests bundle."""
    return {
        None: records.invocation("tests", metadata_ref="meta"),
        "meta": records.metadata(f"{WORKSPACE}/App.xcodeproj"),
        "tests": records.plan_runs(records.testable("AppTests", *tests)),
        **(summaries or {}),
    }


@pytest.fixture
def source() -> InMemorySource:
    """Two groups: one pass and one failure in A, one skip in B."""
    return InMemorySource(
        records=run_records(
            records.group(
                "A",
                records.leaf("A/testPass()", duration=0.5),
                records.leaf(
                    "A/testFail()", "Failure", duration=1.0, summary_ref="s-fail"
                ),
            ),
            records.group("B", records.leaf("B/testSkip()", "Skipped")),
            summaries={
                "s-fail": records.summary(
                    "A/testFail()",
                    "Failure",
                    failures=[
                        records.failure(
                            "expected true, got false",
                            file_path=f"{WORKSPACE}/Tests/FooTests.swift",
                            line=42,
                        )
                    ],
                )
            },
        )
    )


async def test_formats_run_end_to_end(source: InMemorySource) -> None:
    """Counts, status, failures and annotations reflect the run."""
    report = await Formatter(source=source).format()

    assert report.entity_name == "App"
    assert report.stats == GroupStats(passed=1, failed=1, skipped=1, duration=1.0)
    assert report.stats.total == 3
    assert report.status == "failure"

    [chapter] = report.chapters
    assert list(chapter.sections) == ["AppTests"]
    assert chapter.device == "iPhone 15, 17.0 (21A328)"
    assert chapter.sdk == "iOS 17.0 Simulator, 17.0"
    assert chapter.failures.count("<h4>") == 1
    assert "AppTests/A/testFail()" in chapter.failures
    assert chapter.details.count('<td align="center"') == 3

    assert report.annotations == [
        Annotation(
            path="Tests/FooTests.swift",
            start_line=42,
            end_line=42,
            severity="failure",
            message="expected true, got false",
            category="Assertion Failure",
        )
    ]


async def test_renders_document(source: InMemorySource) -> None:
    """The document holds every block of every chapter in order."""
    report = await Formatter(source=source).format()

    document = report.render()

    assert document.startswith("## Test\n")
    assert document.index("### Summary") < document.index("### ❌ Failures")
    assert document.index("### ❌ Failures") < document.index("### Test Details")


async def test_formatting_is_idempotent(source: InMemorySource) -> None:
    """Formatting the same records twice renders the same document."""
    first = await Formatter(source=source).format()
    second = await Formatter(source=source).format()

    assert first.render() == second.render()
    assert first.annotations == second.annotations


async def test_resolves_references_in_order(source: InMemorySource) -> None:
    """Root, metadata, tests and summaries are resolved once each."""
    await Formatter(source=source).format()

    assert source.resolved == [None, "meta", "tests", "s-fail"]


async def test_concurrent_resolution_keeps_leaf_order() -> None:
    """Leaves keep source order when summaries resolve concurrently."""
    names = [f"testCase{index}()" for index in range(6)]
    source = InMemorySource(
        records=run_records(
            records.group(
                "A", *(records.leaf(f"A/{name}", summary_ref=name) for name in names)
            ),
            summaries={name: records.summary(f"A/{name}") for name in names},
        )
    )

    report = await Formatter(
        source=source, config=ReportConfig(resolve_concurrency=3)
    ).format()

    leaves = report.chapters[0].sections["AppTests"].leaves
    assert [leaf.name for leaf in leaves] == names
    assert sorted(source.resolved[3:]) == sorted(names)


async def test_sections_with_same_name_are_merged() -> None:
    """Testables repeated across plan runs accumulate into one section."""
    source = InMemorySource(
        records={
            None: records.invocation("tests"),
            "tests": {
                "summaries": [
                    {
                        "name": f"Run {config}",
                        "testableSummaries": [
                            records.testable(
                                "AppTests",
                                records.group(
                                    "A",
                                    records.leaf(
                                        "A/testLocale()", summary_ref=config
                                    ),
                                ),
                            )
                        ],
                    }
                    for config in ("English", "French")
                ]
            },
            "English": records.summary(
                "A/testLocale()", configuration=("English", {"Language": "en"})
            ),
            "French": records.summary(
                "A/testLocale()", configuration=("French", {"Language": "fr"})
            ),
        }
    )

    report = await Formatter(source=source).format()

    section = report.chapters[0].sections["AppTests"]
    assert [leaf.configuration_name for leaf in section.leaves] == [
        "English",
        "French",
    ]
    assert section.leaves[1].configuration_values == [("Language", "fr")]
    assert report.stats.passed == 2
    assert report.status == "success"


async def test_chapter_totals_add_up_to_run_totals() -> None:
    """Each chapter counts its own leaves; the run sums them."""
    source = InMemorySource(
        records={
            None: records.invocation("tests-1", "tests-2"),
            "tests-1": records.plan_runs(
                records.testable("AppTests", records.leaf("A/testOne()", "Failure"))
            ),
            "tests-2": records.plan_runs(
                records.testable(
                    "AppTests",
                    records.leaf("A/testOne()"),
                    records.leaf("A/testTwo()"),
                )
            ),
        }
    )

    report = await Formatter(source=source).format()

    first, second = report.chapters
    assert '<td align="right" width="118px">1' in first.summary
    assert '<td align="right" width="118px">2' in second.summary
    assert report.stats == GroupStats(passed=2, failed=1)


async def test_actions_without_tests_are_skipped() -> None:
    """Actions that produced no test results add no chapter."""
    source = InMemorySource(
        records={None: {"actions": [{"schemeCommandName": "Build", "title": "Build"}]}}
    )

    report = await Formatter(source=source).format()

    assert report.chapters == []
    assert report.status is None
    assert report.render() == ""


async def test_malformed_status_aborts_with_context() -> None:
    """An unknown status names the offending leaf."""
    source = InMemorySource(
        records=run_records(records.group("A", records.leaf("A/testOdd()", "Flaky")))
    )

    with pytest.raises(MalformedStatusError) as exc_info:
        await Formatter(source=source).format()

    context = exc_info.value.context
    assert (context.chapter, context.section, context.group, context.leaf) == (
        "Test",
        "AppTests",
        "A",
        "A/testOdd()",
    )
    assert "'Flaky'" in str(exc_info.value)


async def test_unresolvable_reference_aborts_with_context() -> None:
    """A dangling summary reference fails the whole pass."""
    source = InMemorySource(
        records=run_records(
            records.group("A", records.leaf("A/testGone()", summary_ref="missing"))
        )
    )

    with pytest.raises(ReferenceResolutionError) as exc_info:
        await Formatter(source=source).format()

    assert exc_info.value.ref_id == "missing"
    assert exc_info.value.context is not None
    assert exc_info.value.context.leaf == "A/testGone()"
    assert "leaf='A/testGone()'" in str(exc_info.value)


async def test_malformed_record_aborts_with_context() -> None:
    """A record not matching its model is reported with its reference."""
    source = InMemorySource(
        records={None: records.invocation("tests"), "tests": {"summaries": 42}}
    )

    with pytest.raises(RecordFormatError) as exc_info:
        await Formatter(source=source).format()

    assert exc_info.value.ref_id == "tests"
    assert exc_info.value.context is not None
    assert exc_info.value.context.chapter == "Test"


async def test_deep_tree_aborts() -> None:
    """Trees nested beyond the configured depth are rejected."""
    source = InMemorySource(
        records=run_records(
            records.group("A", records.group("B", records.leaf("B/testDeep()")))
        )
    )

    with pytest.raises(TreeDepthError):
        await Formatter(source=source, config=ReportConfig(max_depth=2)).format()


async def test_summary_duration_used_when_node_has_none() -> None:
    """A leaf without its own duration takes the summary's."""
    source = InMemorySource(
        records=run_records(
            records.group("A", records.leaf("A/testSlow()", summary_ref="s")),
            summaries={"s": records.summary("A/testSlow()", duration=4.0)},
        )
    )

    report = await Formatter(source=source).format()

    [leaf] = report.chapters[0].sections["AppTests"].leaves
    assert leaf.duration == 4.0


def test_parse_status() -> None:
    """Recognized statuses convert; others raise."""
    context = ReportContext(section="AppTests")

    assert parse_status("Expected Failure", context) == TestStatus.EXPECTED_FAILURE
    with pytest.raises(MalformedStatusError, match="section='AppTests'"):
        parse_status("expected failure", context)


def test_workspace_root() -> None:
    """The workspace root is the directory of the project file."""
    assert workspace_root(f"{WORKSPACE}/App.xcodeproj") == WORKSPACE
    assert workspace_root(None) is None


async def test_anchors_are_unique_across_chapters() -> None:
    """Two actions running the same tests declare each anchor once."""
    tests = records.plan_runs(
        records.testable(
            "AppTests",
            records.group(
                "FooTests",
                records.leaf("FooTests/testA()"),
                records.leaf("FooTests/testB()", "Failure"),
            ),
        )
    )
    source = InMemorySource(
        records={
            None: records.invocation("tests-1", "tests-2"),
            "tests-1": tests,
            "tests-2": tests,
        }
    )

    report = await Formatter(source=source).format()

    declarations = re.findall(r'<a name="([^"]+)"></a>', report.render())
    assert len(report.chapters) == 2
    assert declarations
    assert len(declarations) == len(set(declarations))
    for target in re.findall(r'<a href="#([^"]+)">', report.render()):
        assert target in declarations


async def test_expected_failures_are_annotated() -> None:
    """Failure details of any leaf produce annotations, not only failures."""
    source = InMemorySource(
        records=run_records(
            records.group(
                "A",
                records.leaf("A/testKnown()", "Expected Failure", summary_ref="s"),
            ),
            summaries={
                "s": records.summary(
                    "A/testKnown()",
                    "Expected Failure",
                    failures=[
                        records.failure(
                            "m", file_path=f"{WORKSPACE}/Tests/Foo.swift", line=3
                        )
                    ],
                )
            },
        )
    )

    report = await Formatter(source=source).format()

    assert [(a.path, a.start_line, a.message) for a in report.annotations] == [
        ("Tests/Foo.swift", 3, "m")
    ]
    assert "<h4>" not in report.chapters[0].failures
