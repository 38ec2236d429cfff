"""Models for the typed test-run records supplied by a record source."""

from collections.abc import Sequence
from typing import Annotated, Any

from pydantic import Discriminator, Field, Tag, field_validator

from result_report_action.models.base import Model


class Reference(Model):
    """Opaque reference to a record resolvable through a record source."""

    id: str


class SchemeIdentifier(Model):
    """Scheme the invocation was run for."""

    entity_name: str | None = None


class InvocationMetadata(Model):
    """Run metadata reachable through the invocation's metadata reference."""

    creating_workspace_file_path: str | None = None
    scheme_identifier: SchemeIdentifier | None = None


class DeviceRecord(Model):
    """Device the tests ran on."""

    model_name: str | None = None
    operating_system_version_with_build_number: str | None = None


class SdkRecord(Model):
    """SDK the tests were built against."""

    name: str | None = None
    operating_system_version: str | None = None


class RunDestination(Model):
    """Destination of a test action."""

    display_name: str | None = None
    target_device_record: DeviceRecord | None = Field(
        default=None, alias="targetDeviceRecord"
    )
    target_sdk_record: SdkRecord | None = Field(default=None, alias="targetSDKRecord")


class ActionResult(Model):
    """Outcome of an action, pointing to its test results."""

    tests_ref: Reference | None = None


class ActionRecord(Model):
    """One executed action (e.g. one scheme/destination test run)."""

    scheme_command_name: str | None = None
    title: str | None = None
    run_destination: RunDestination | None = None
    action_result: ActionResult | None = None


class InvocationRecord(Model):
    """Root record of a test invocation."""

    metadata_ref: Reference | None = None
    actions: Sequence[ActionRecord] = Field(default_factory=list)


class LeafNode(Model):
    """A concrete executed test as listed in the suite tree."""

    identifier: str
    name: str | None = None
    test_status: str
    duration: float | None = None
    summary_ref: Reference | None = None


class GroupNode(Model):
    """A suite node containing further groups or leaves."""

    name: str | None = None
    identifier: str | None = None
    duration: float | None = None
    subtests: Sequence["TestNode"] = Field(default_factory=list)


def node_kind(value: Any) -> str:
    """Tell group nodes from leaves by the presence of ``subtests``."""
    if isinstance(value, dict):
        return "group" if "subtests" in value else "leaf"
    return "group" if isinstance(value, GroupNode) else "leaf"


TestNode = Annotated[
    Annotated[GroupNode, Tag("group")] | Annotated[LeafNode, Tag("leaf")],
    Discriminator(node_kind),
]

GroupNode.model_rebuild()


class TestableSummary(Model):
    """Results of one testable unit (a test bundle/target)."""

    __test__ = False

    name: str | None = None
    target_name: str | None = None
    tests: Sequence[TestNode] = Field(default_factory=list)


class TestPlanRunSummary(Model):
    """Results of one test plan configuration run."""

    __test__ = False

    name: str | None = None
    testable_summaries: Sequence[TestableSummary] = Field(default_factory=list)


class TestPlanRunSummaries(Model):
    """Record behind an action's tests reference."""

    __test__ = False

    summaries: Sequence[TestPlanRunSummary] = Field(default_factory=list)


class KeyValue(Model):
    """One configuration key/value pair."""

    key: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return value if isinstance(value, str) else str(value)


class KeyValueStorage(Model):
    """Ordered key/value pairs."""

    storage: Sequence[KeyValue] = Field(default_factory=list)


class TestConfiguration(Model):
    """Test plan configuration a test ran under."""

    __test__ = False

    identifier: str | None = None
    name: str | None = None
    values: KeyValueStorage = Field(default_factory=KeyValueStorage)


class SourceLocation(Model):
    """File location attached to a failure or a stack frame."""

    file_path: str | None = None
    line_number: int | None = None


class SymbolInfo(Model):
    """Symbolication of one stack frame."""

    image_name: str | None = None
    symbol_name: str | None = None
    location: SourceLocation | None = None


class CallStackFrame(Model):
    """One frame of a failure call stack."""

    address_string: str | None = None
    symbol_info: SymbolInfo | None = None


class SourceCodeContext(Model):
    """Source location and call stack of a failure."""

    location: SourceLocation | None = None
    call_stack: Sequence[CallStackFrame] = Field(default_factory=list)


class FailureSummary(Model):
    """One failure recorded for a test."""

    file_name: str | None = None
    line_number: int | None = None
    issue_type: str | None = None
    message: str | None = None
    source_code_context: SourceCodeContext | None = None


class AttachmentDimensions(Model):
    """Pixel dimensions of an image attachment."""

    width: int | None = None
    height: int | None = None
    orientation: int | None = None


class AttachmentRecord(Model):
    """An attachment captured during an activity."""

    name: str | None = None
    filename: str | None = None
    uniform_type_identifier: str | None = None
    payload_ref: Reference | None = None
    dimensions: AttachmentDimensions | None = None
    user_info: KeyValueStorage | None = None


class ActivitySummary(Model):
    """One step of a test's activity trace."""

    title: str = ""
    activity_type: str | None = None
    attachments: Sequence[AttachmentRecord] = Field(default_factory=list)
    subactivities: Sequence["ActivitySummary"] = Field(default_factory=list)


class TestSummary(Model):
    """Detailed record of one executed test."""

    __test__ = False

    identifier: str | None = None
    name: str | None = None
    test_status: str | None = None
    duration: float | None = None
    configuration: TestConfiguration | None = None
    failure_summaries: Sequence[FailureSummary] = Field(default_factory=list)
    activity_summaries: Sequence[ActivitySummary] = Field(default_factory=list)
