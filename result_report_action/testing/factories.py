"""Test factories for generating report data."""

from polyfactory.factories import DataclassFactory

from result_report_action.models.report import FailureDetail, LeafResult


class LeafResultFactory(DataclassFactory[LeafResult]):
    """Factory for LeafResult."""

    __model__ = LeafResult

    configuration_name = None
    configuration_values = ()
    failures = ()
    activities = ()


class FailureDetailFactory(DataclassFactory[FailureDetail]):
    """Factory for FailureDetail."""

    __model__ = FailureDetail

    call_stack = ()
