"""Formatting pass turning a test-run record into a report."""

import asyncio
import logging
import posixpath
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from pydantic import BaseModel

from result_report_action.activities import (
    AttachmentExporter,
    attachment_link,
    collect_activities,
)
from result_report_action.aggregator import aggregate_section, total_stats
from result_report_action.config import ReportConfig
from result_report_action.errors import (
    MalformedStatusError,
    RecordFormatError,
    ReferenceResolutionError,
    ReportContext,
)
from result_report_action.failures import annotation_for, collect_failures
from result_report_action.flattener import flatten_tests
from result_report_action.glyphs import Glyphs
from result_report_action.models.record import (
    ActionRecord,
    InvocationMetadata,
    InvocationRecord,
    LeafNode,
    Reference,
    TestableSummary,
    TestPlanRunSummaries,
    TestSummary,
)
from result_report_action.models.report import (
    Annotation,
    Chapter,
    GroupSummary,
    LeafResult,
    Section,
    TestReport,
    TestStatus,
)
from result_report_action.renderer import ReportRenderer
from result_report_action.sources.base import RecordSource

log = logging.getLogger(__name__)


def parse_status(value: str, context: ReportContext) -> TestStatus:
    """Convert a raw status, rejecting values outside the recognized set."""
    try:
        return TestStatus(value)
    except ValueError:
        raise MalformedStatusError(value, context) from None


def workspace_root(workspace_file_path: str | None) -> str | None:
    """Directory containing the workspace or project file."""
    if not workspace_file_path:
        return None
    return posixpath.dirname(workspace_file_path)


def chapter_annotations(groups: Iterable[Sequence[GroupSummary]]) -> list[Annotation]:
    """Annotations of every leaf carrying failure details, in report order."""
    annotations: list[Annotation] = []
    for section_groups in groups:
        for group in section_groups:
            for variant in group.variants:
                for leaf in variant.leaves:
                    for failure in leaf.failures:
                        if (annotation := annotation_for(failure)) is not None:
                            annotations.append(annotation)
    return annotations


@dataclass(frozen=True, kw_only=True)
class Formatter:
    """Builds a report from the records of one record source.

    Chapters are built one after another and appended only once complete; any
    error aborts the whole pass.
    """

    source: RecordSource
    config: ReportConfig = field(default_factory=ReportConfig)
    glyphs: Glyphs = field(default_factory=Glyphs)
    export_attachment: AttachmentExporter | None = None

    async def format(self) -> TestReport:
        """Run the formatting pass."""
        record = await self._parse(InvocationRecord, None, ReportContext())
        report = TestReport()

        if record.metadata_ref:
            metadata = await self._parse(
                InvocationMetadata, record.metadata_ref, ReportContext()
            )
            if metadata.scheme_identifier:
                report.entity_name = metadata.scheme_identifier.entity_name
            report.workspace_path = metadata.creating_workspace_file_path

        for action in record.actions:
            tests_ref = action.action_result.tests_ref if action.action_result else None
            if tests_ref is None:
                log.info("Skipping action without tests: %s", action.title)
                continue

            chapter = await self._build_chapter(
                action, tests_ref, workspace_root(report.workspace_path)
            )
            groups = {
                name: aggregate_section(section.leaves)
                for name, section in chapter.sections.items()
            }
            totals = total_stats(
                group for section_groups in groups.values() for group in section_groups
            )
            renderer = ReportRenderer(
                glyphs=self.glyphs,
                failures_only=self.config.failures_only,
                chapter_key=(str(len(report.chapters)), chapter.heading),
            )
            renderer.render(chapter, groups, totals)

            report.chapters.append(chapter)
            report.annotations.extend(chapter_annotations(groups.values()))
            report.stats = report.stats + totals
            log.info(
                "Chapter %s: %d tests, %d failed",
                chapter.heading,
                totals.total,
                totals.failed,
            )

        return report

    async def _build_chapter(
        self, action: ActionRecord, tests_ref: Reference, workspace: str | None
    ) -> Chapter:
        destination = action.run_destination
        device = destination.target_device_record if destination else None
        sdk = destination.target_sdk_record if destination else None
        chapter = Chapter(
            scheme_command_name=action.scheme_command_name,
            title=action.title,
            device=(
                _join(
                    device.model_name,
                    device.operating_system_version_with_build_number,
                )
                if device
                else None
            ),
            sdk=_join(sdk.name, sdk.operating_system_version) if sdk else None,
        )
        context = ReportContext(chapter=chapter.heading)
        log.info("Formatting chapter %s", chapter.heading)

        plan_runs = await self._parse(TestPlanRunSummaries, tests_ref, context)
        for plan_run in plan_runs.summaries:
            for testable in plan_run.testable_summaries:
                if not testable.name:
                    continue
                section = chapter.sections.setdefault(
                    testable.name, Section(name=testable.name)
                )
                leaves = await self._collect_leaves(testable, context, workspace)
                log.info("Section %s: %d tests", testable.name, len(leaves))
                section.leaves.extend(leaves)

        return chapter

    async def _collect_leaves(
        self, testable: TestableSummary, context: ReportContext, workspace: str | None
    ) -> list[LeafResult]:
        section_context = ReportContext(chapter=context.chapter, section=testable.name)
        tagged = flatten_tests(
            testable.tests,
            testable.name or "",
            max_depth=self.config.max_depth,
            context=section_context,
        )

        if self.config.resolve_concurrency == 1:
            return [
                await self._leaf_result(node, group, section_context, workspace)
                for node, group in tagged
            ]

        semaphore = asyncio.Semaphore(self.config.resolve_concurrency)

        async def bounded(node: LeafNode, group: str) -> LeafResult:
            async with semaphore:
                return await self._leaf_result(node, group, section_context, workspace)

        # gather keeps results in submission order
        results = await asyncio.gather(
            *(bounded(node, group) for node, group in tagged)
        )
        return list(results)

    async def _leaf_result(
        self,
        node: LeafNode,
        group: str,
        context: ReportContext,
        workspace: str | None,
    ) -> LeafResult:
        leaf_context = ReportContext(
            chapter=context.chapter,
            section=context.section,
            group=group,
            leaf=node.identifier,
        )
        status = parse_status(node.test_status, leaf_context)

        summary: TestSummary | None = None
        if node.summary_ref:
            summary = await self._parse(TestSummary, node.summary_ref, leaf_context)
        if summary is None:
            return LeafResult(
                identifier=node.identifier,
                name=node.name or node.identifier,
                status=status,
                group=group,
                duration=node.duration,
            )

        configuration = summary.configuration
        export = self.export_attachment or attachment_link(
            self.config.attachment_base_url
        )
        return LeafResult(
            identifier=node.identifier,
            name=node.name or summary.name or node.identifier,
            status=status,
            group=group,
            duration=node.duration if node.duration is not None else summary.duration,
            configuration_name=(configuration.name or configuration.identifier)
            if configuration
            else None,
            configuration_values=[
                (value.key, value.value) for value in configuration.values.storage
            ]
            if configuration
            else [],
            failures=collect_failures(summary.failure_summaries, workspace),
            activities=collect_activities(summary.activity_summaries, export),
        )

    async def _parse[M: BaseModel](
        self, model_cls: type[M], ref: Reference | None, context: ReportContext
    ) -> M:
        ref_id = ref.id if ref else None
        log.debug("Resolving %s reference %s (%s)", model_cls.__name__, ref_id, context)
        try:
            return await self.source.parse(model_cls, ref_id)
        except (ReferenceResolutionError, RecordFormatError) as e:
            raise e.with_context(context) from e


def _join(*parts: str | None) -> str | None:
    joined = ", ".join(part for part in parts if part)
    return joined or None
