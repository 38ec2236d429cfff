"""Flattening of nested suite trees into leaves tagged with their group."""

from collections.abc import Sequence

from result_report_action.errors import ReportContext, TreeDepthError
from result_report_action.models.record import GroupNode, LeafNode, TestNode

type TaggedLeaf = tuple[LeafNode, str]


def flatten_tests(
    tests: Sequence[TestNode],
    group_name: str,
    *,
    max_depth: int = 256,
    context: ReportContext | None = None,
) -> list[TaggedLeaf]:
    """Flatten a suite tree into ``(leaf, owning group name)`` pairs.

    Leaves are returned in pre-order with children in array order. The owning
    group is the leaf's immediate parent; leaves at the root belong to
    ``group_name``. Groups without leaf descendants contribute nothing.

    Raises:
        TreeDepthError: If groups nest deeper than ``max_depth``

    """
    leaves: list[TaggedLeaf] = []
    _collect(tests, group_name, 0, max_depth, context or ReportContext(), leaves)
    return leaves


def _collect(
    tests: Sequence[TestNode],
    group_name: str,
    depth: int,
    max_depth: int,
    context: ReportContext,
    leaves: list[TaggedLeaf],
) -> None:
    if depth >= max_depth:
        raise TreeDepthError(
            max_depth,
            ReportContext(
                chapter=context.chapter, section=context.section, group=group_name
            ),
        )
    for test in tests:
        if isinstance(test, GroupNode):
            name = test.name or test.identifier or group_name
            _collect(test.subtests, name, depth + 1, max_depth, context, leaves)
        else:
            leaves.append((test, group_name))
