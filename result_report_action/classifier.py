"""Classification of a configuration variant's statuses."""

from collections.abc import Iterable

from result_report_action.models.report import GroupStatus, TestStatus


def classify_statuses(statuses: Iterable[TestStatus]) -> GroupStatus | None:
    """Derive one display status from the statuses of a variant's leaves.

    Identical statuses keep their value. Otherwise, ignoring skipped tests, any
    failure makes the variant a mixed failure; ignoring expected failures too,
    only successes make it a mixed success; anything else is an expected
    failure. An empty input has no status.
    """
    statuses = list(statuses)
    if not statuses:
        return None

    first = statuses[0]
    if all(status == first for status in statuses):
        return GroupStatus(first.value)

    ran = [status for status in statuses if status != TestStatus.SKIPPED]
    if TestStatus.FAILURE in ran:
        return GroupStatus.MIXED_FAILURE

    ran = [status for status in ran if status != TestStatus.EXPECTED_FAILURE]
    if all(status == TestStatus.SUCCESS for status in ran):
        return GroupStatus.MIXED_SUCCESS

    return GroupStatus.EXPECTED_FAILURE
