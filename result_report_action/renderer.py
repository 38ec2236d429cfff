"""Rendering of chapters into summary, failures and details blocks."""

import html
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from result_report_action.anchors import Anchor, anchor
from result_report_action.failures import render_failure
from result_report_action.glyphs import Glyphs
from result_report_action.models.report import (
    Activity,
    Chapter,
    GroupStats,
    GroupSummary,
    LeafResult,
    TestStatus,
    VariantSummary,
)

type SectionGroups = Mapping[str, Sequence[GroupSummary]]

VALIGN = 'valign="top"'
STATUS_WIDTH = 'width="52px"'
DETAIL_WIDTH = 'width="716px"'


def format_rate(count: int, total: int) -> str:
    """Percentage of ``count`` in ``total``, rounded half up to a whole number.

    A zero total renders as ``0%``.
    """
    if total == 0:
        return "0%"
    rate = (Decimal(count) * 100 / Decimal(total)).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    return f"{rate}%"


def format_duration(duration: float) -> str:
    """Duration in seconds with two decimals."""
    return f"{duration:.2f}s"


def indentation(level: int) -> str:
    """Markdown list indentation for a nesting level."""
    return "  " * level


def escape_text(text: str) -> str:
    """Escape HTML and hash signs so text cannot open a heading."""
    return html.escape(text).replace("#", "&#35;")


def bold_if(value: str, condition: bool) -> str:
    """Wrap ``value`` in bold tags when ``condition`` holds."""
    return f"<b>{value}</b>" if condition else value


@dataclass(frozen=True, kw_only=True)
class ReportRenderer:
    """Renders the blocks of a chapter from its aggregated sections."""

    glyphs: Glyphs = field(default_factory=Glyphs)
    failures_only: bool = False
    chapter_key: tuple[str, ...] = ()

    def render(
        self, chapter: Chapter, groups: SectionGroups, totals: GroupStats
    ) -> None:
        """Fill the summary, failures and details blocks of ``chapter``."""
        chapter.summary = self.render_summary(chapter, groups, totals)
        chapter.failures = self.render_failures(groups)
        chapter.details = self.render_details(groups)

    def anchor(self, role: str, *parts: str) -> Anchor:
        """Anchor of a location in this chapter; ``role`` tells both ends apart."""
        return anchor(role, *self.chapter_key, *parts)

    def leaf_anchor(
        self,
        section: str,
        group: str,
        variant: VariantSummary,
        index: int,
        role: str = "test",
    ) -> Anchor:
        """Anchor of one leaf row, or of its failure entry with ``role="failure"``."""
        return self.anchor(role, section, group, *variant.key, str(index))

    def _visible_groups(self, groups: Sequence[GroupSummary]) -> list[GroupSummary]:
        if not self.failures_only:
            return list(groups)
        return [group for group in groups if group.stats.failed > 0]

    def _visible_variants(self, group: GroupSummary) -> list[VariantSummary]:
        if not self.failures_only:
            return list(group.variants)
        return [variant for variant in group.variants if variant.stats.failed > 0]

    def _visible_leaves(self, variant: VariantSummary) -> list[tuple[int, LeafResult]]:
        return [
            (index, leaf)
            for index, leaf in enumerate(variant.leaves)
            if not self.failures_only or leaf.status == TestStatus.FAILURE
        ]

    def _visible_sections(
        self, groups: SectionGroups
    ) -> Iterator[tuple[str, list[GroupSummary]]]:
        for section, section_groups in groups.items():
            visible = self._visible_groups(section_groups)
            if visible or not self.failures_only:
                yield section, visible

    def render_summary(
        self, chapter: Chapter, groups: SectionGroups, totals: GroupStats
    ) -> str:
        """Render the totals table and one table per group."""
        status = self.glyphs.status
        lines = ["### Summary", "<table id=\"summary\">", "<tr>"]
        lines.append(
            "".join(
                [
                    "<th>Total",
                    f"<th>{status(TestStatus.SUCCESS)}&nbsp;Passed",
                    f"<th>{status(TestStatus.FAILURE)}&nbsp;Failed",
                    f"<th>{status(TestStatus.SKIPPED)}&nbsp;Skipped",
                    f"<th>{status(TestStatus.EXPECTED_FAILURE)}&nbsp;Expected Failure",
                    f"<th>{self.glyphs.time}&nbsp;Time",
                ]
            )
        )
        lines.append("<tr>")
        lines.append(
            "".join(
                [
                    f'<td align="right" width="118px">{totals.total}',
                    f'<td align="right" width="118px">{totals.passed}',
                    f'<td align="right" width="118px">'
                    f"{bold_if(str(totals.failed), totals.failed > 0)}",
                    f'<td align="right" width="118px">{totals.skipped}',
                    f'<td align="right" width="158px">{totals.expected_failure}',
                    f'<td align="right" width="138px">'
                    f"{format_duration(totals.duration)}",
                ]
            )
        )
        lines += ["</table>\n", "---\n"]

        sections = list(self._visible_sections(groups))
        if not sections:
            return "\n".join(lines)

        lines.append("### Test Summary")
        for section, section_groups in sections:
            section_link = self.anchor("detail", section).link(escape_text(section))
            declaration = self.anchor("summary", section).declaration
            lines.append(f"#### {declaration}{section_link}\n")
            if chapter.device:
                lines.append(f"- **Device:** {escape_text(chapter.device)}")
            if chapter.sdk:
                lines.append(f"- **SDK:** {escape_text(chapter.sdk)}")
            if chapter.device or chapter.sdk:
                lines.append("")
            for group in section_groups:
                lines += self._summary_group(section, group)
        lines.append("---\n")
        return "\n".join(lines)

    def _summary_group(self, section: str, group: GroupSummary) -> list[str]:
        status = self.glyphs.status
        group_link = self.anchor("detail", section, group.name).link(
            escape_text(group.name)
        )
        lines = [
            f"##### {self.anchor('summary', section, group.name).declaration}"
            f"{self.glyphs.test_class}&nbsp;{group_link}\n",
            '<table id="test-table-summary">',
            "<tr>",
            "".join(
                [
                    "<th>Test",
                    "<th>Status",
                    "<th>Total",
                    f"<th>{status(TestStatus.SUCCESS)}",
                    f"<th>{status(TestStatus.FAILURE)}",
                    f"<th>{status(TestStatus.SKIPPED)}",
                    f"<th>{status(TestStatus.EXPECTED_FAILURE)}",
                    f"<th>{self.glyphs.time}",
                ]
            ),
        ]
        for variant in self._visible_variants(group):
            stats = variant.stats
            key = (section, group.name, *variant.key)
            declaration = self.anchor("summary", *key).declaration
            link = self.anchor("detail", *key).link(escape_text(variant.label))
            lines.append("<tr>")
            lines.append(
                "".join(
                    [
                        f'<td align="left" width="368px">{declaration}{link}',
                        f'<td align="center" width="52px">{status(variant.status)}',
                        f'<td align="right" width="80px">{stats.total}',
                        f'<td align="right" width="80px">{stats.passed}',
                        f'<td align="right" width="80px">'
                        f"{bold_if(str(stats.failed), stats.failed > 0)}",
                        f'<td align="right" width="80px">{stats.skipped}',
                        f'<td align="right" width="80px">{stats.expected_failure}',
                        f'<td align="right" width="80px">'
                        f"{format_duration(stats.duration)}",
                    ]
                )
            )
        lines.append("</table>\n")
        return lines

    def render_failures(self, groups: SectionGroups) -> str:
        """Render one entry per failing leaf with its failure dumps."""
        lines = [f"### {self.glyphs.status(TestStatus.FAILURE)} Failures"]
        entries: list[str] = []
        for section, section_groups in groups.items():
            for group in section_groups:
                for variant in group.variants:
                    for index, leaf in enumerate(variant.leaves):
                        if leaf.status != TestStatus.FAILURE:
                            continue
                        parts = (section, group.name, variant, index)
                        failure_anchor = self.leaf_anchor(*parts, role="failure")
                        declaration = failure_anchor.declaration
                        title = escape_text(f"{section}/{group.name}/{leaf.name}")
                        link = self.leaf_anchor(*parts).link(title)
                        entries.append(f"<h4>{declaration}{link}</h4>")
                        entries.extend(map(render_failure, leaf.failures))

        if entries:
            lines += ["\n".join(entries), ""]
        else:
            lines.append("All tests passed :tada:\n")
        return "\n".join(lines)

    def render_details(self, groups: SectionGroups) -> str:
        """Render one block per section, group and configuration variant."""
        lines = ["### Test Details"]
        for section, section_groups in self._visible_sections(groups):
            back = self.anchor("summary", section).link(self.glyphs.back)
            lines.append(
                f"#### {self.anchor('detail', section).declaration}"
                f"{escape_text(section)}&nbsp;{back}"
            )
            lines.append("")
            for group in section_groups:
                lines += self._detail_group(section, group)
        return "\n".join(lines)

    def _detail_group(self, section: str, group: GroupSummary) -> list[str]:
        status = self.glyphs.status
        stats = group.stats
        back = self.anchor("summary", section, group.name).link(self.glyphs.back)
        lines = [
            f"{self.anchor('detail', section, group.name).declaration}"
            f"<h5>{escape_text(group.name)}&nbsp;{back}</h5>",
            '<table id="test-summary-table">',
            "<tr>",
            "".join(
                [
                    f"<th>{status(TestStatus.SUCCESS)}",
                    f"<th>{status(TestStatus.FAILURE)}",
                    f"<th>{status(TestStatus.SKIPPED)}",
                    f"<th>{status(TestStatus.EXPECTED_FAILURE)}",
                    f"<th>{self.glyphs.time}",
                ]
            ),
            "<tr>",
            "".join(
                [
                    f'<td align="right" width="154px">'
                    f"{stats.passed} ({format_rate(stats.passed, stats.total)})",
                    f'<td align="right" width="154px">'
                    + bold_if(
                        f"{stats.failed} ({format_rate(stats.failed, stats.total)})",
                        stats.failed > 0,
                    ),
                    f'<td align="right" width="154px">'
                    f"{stats.skipped} ({format_rate(stats.skipped, stats.total)})",
                    f'<td align="right" width="154px">{stats.expected_failure} '
                    f"({format_rate(stats.expected_failure, stats.total)})",
                    f'<td align="right" width="154px">'
                    f"{format_duration(stats.duration)}",
                ]
            ),
            "</table>\n",
        ]

        rows: list[str] = []
        for variant in group.variants:
            rows += self._variant_rows(section, group, variant)
        if rows:
            lines += ['<table id="details">', *rows, "</table>", ""]
        return lines

    def _variant_rows(
        self, section: str, group: GroupSummary, variant: VariantSummary
    ) -> list[str]:
        leaves = self._visible_leaves(variant)
        if not leaves:
            return []

        status = self.glyphs.status
        key = (section, group.name, *variant.key)
        declaration = self.anchor("detail", *key).declaration
        back = self.anchor("summary", *key).link(self.glyphs.back)
        rows: list[str] = []
        for position, (index, leaf) in enumerate(leaves):
            suffix = f"&nbsp;{back}" if position == 0 else ""
            content = self._leaf_content(section, group, variant, index, leaf, suffix)
            if len(leaves) == 1:
                rows.append(
                    f'<tr><td align="center" {VALIGN} {STATUS_WIDTH}>'
                    f"{declaration}{status(leaf.status)}"
                    f"<td {VALIGN} {DETAIL_WIDTH}>{content}"
                )
            elif position == 0:
                content = f"{status(leaf.status)} {content}"
                rows.append(
                    f'<tr><td align="center" rowspan="{len(leaves)}" {VALIGN} '
                    f"{STATUS_WIDTH}>{declaration}{status(variant.status)}"
                    f"<td {VALIGN} {DETAIL_WIDTH}>{content}"
                )
            else:
                content = f"{status(leaf.status)} {content}"
                rows.append(f"<tr><td {VALIGN} {DETAIL_WIDTH}>{content}")
        return rows

    def _leaf_content(
        self,
        section: str,
        group: GroupSummary,
        variant: VariantSummary,
        index: int,
        leaf: LeafResult,
        suffix: str = "",
    ) -> str:
        method = f"{self.glyphs.test_method}&nbsp;<code>{escape_text(leaf.name)}</code>"
        if leaf.status == TestStatus.FAILURE:
            parts = (section, group.name, variant, index)
            back = self.leaf_anchor(*parts, role="failure").link(self.glyphs.back)
            method = f"{self.leaf_anchor(*parts).declaration}{method}{back}"

        lines = [f"{method}{suffix}"]
        if leaf.configuration_values:
            values = ", ".join(
                f"{key}: {value}" for key, value in leaf.configuration_values
            )
            lines.append(
                f"<br><b>Configuration:</b><br><code>{escape_text(values)}</code>"
            )
        if leaf.activities:
            activities = "\n".join(
                self._activity(activity, leaf.status) for activity in leaf.activities
            )
            lines.append(f"<br><b>Activities:</b>\n\n{activities}")
        return "<br>".join(lines)

    def _activity(self, activity: Activity, status: TestStatus) -> str:
        title = f"{indentation(activity.indent)}- {escape_text(activity.title)}"
        if not activity.attachments:
            return title

        # Any failure variant starts expanded
        is_open = " open" if "Failure" in status.value else ""
        images = "".join(
            f'<div><img width="{html.escape(attachment.width)}" '
            f'src="{html.escape(attachment.link)}"></div>'
            for attachment in activity.attachments
        )
        return (
            f"{title}\n{indentation(activity.indent + 1)}<details{is_open}>"
            f"<summary>{self.glyphs.attachment}</summary>{images}</details>\n"
        )
