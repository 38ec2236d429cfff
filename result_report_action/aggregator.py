"""Regrouping of flattened leaves and rollup statistics."""

from collections.abc import Iterable, Sequence

from result_report_action.classifier import classify_statuses
from result_report_action.models.report import (
    GroupStats,
    GroupSummary,
    LeafResult,
    TestStatus,
    VariantSummary,
)


def group_leaves(leaves: Iterable[LeafResult]) -> dict[str, list[LeafResult]]:
    """Map each group name to its member leaves, in first-seen order."""
    groups: dict[str, list[LeafResult]] = {}
    for leaf in leaves:
        groups.setdefault(leaf.group, []).append(leaf)
    return groups


def group_variants(
    leaves: Iterable[LeafResult],
) -> dict[tuple[str, str], list[LeafResult]]:
    """Map each test and configuration identity to its member leaves."""
    variants: dict[tuple[str, str], list[LeafResult]] = {}
    for leaf in leaves:
        variants.setdefault(leaf.variant_key, []).append(leaf)
    return variants


def fold_stats(leaves: Iterable[LeafResult]) -> GroupStats:
    """Count leaves by status; the duration is the last non-zero one."""
    counts = dict.fromkeys(TestStatus, 0)
    duration = 0.0
    for leaf in leaves:
        counts[leaf.status] += 1
        if leaf.duration:
            duration = leaf.duration
    return GroupStats(
        passed=counts[TestStatus.SUCCESS],
        failed=counts[TestStatus.FAILURE],
        skipped=counts[TestStatus.SKIPPED],
        expected_failure=counts[TestStatus.EXPECTED_FAILURE],
        duration=duration,
    )


def summarize_variant(
    key: tuple[str, str], leaves: Sequence[LeafResult]
) -> VariantSummary:
    """Aggregate the leaves of one test under one configuration."""
    first = leaves[0]
    label = first.name
    if first.configuration_name:
        label = f"{first.name} ({first.configuration_name})"
    return VariantSummary(
        key=key,
        label=label,
        leaves=leaves,
        stats=fold_stats(leaves),
        status=classify_statuses(leaf.status for leaf in leaves),
    )


def aggregate_section(leaves: Sequence[LeafResult]) -> list[GroupSummary]:
    """Aggregate a section's leaves by group, then by configuration variant."""
    return [
        GroupSummary(
            name=name,
            variants=[
                summarize_variant(key, variant_leaves)
                for key, variant_leaves in group_variants(members).items()
            ],
            stats=fold_stats(members),
        )
        for name, members in group_leaves(leaves).items()
    ]


def total_stats(groups: Iterable[GroupSummary]) -> GroupStats:
    """Sum the group-level statistics of one or more sections."""
    return sum((group.stats for group in groups), GroupStats())
