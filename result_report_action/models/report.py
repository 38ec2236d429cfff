"""Models for the normalized report built from a test run."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal


class TestStatus(StrEnum):
    """Status of one executed test."""

    __test__ = False

    SUCCESS = "Success"
    FAILURE = "Failure"
    SKIPPED = "Skipped"
    EXPECTED_FAILURE = "Expected Failure"


class GroupStatus(StrEnum):
    """Display status of a configuration variant."""

    SUCCESS = "Success"
    FAILURE = "Failure"
    SKIPPED = "Skipped"
    EXPECTED_FAILURE = "Expected Failure"
    MIXED_FAILURE = "Mixed Failure"
    MIXED_SUCCESS = "Mixed Success"


@dataclass(frozen=True, kw_only=True)
class StackFrame:
    """One call-stack frame; unresolved fields are empty strings."""

    image_name: str = ""
    address: str = ""
    symbol_name: str = ""
    file_path: str = ""
    line_number: int | None = None


@dataclass(frozen=True, kw_only=True)
class FailureDetail:
    """Structured facts extracted from one failure summary."""

    file_name: str | None = None
    file_path: str | None = None
    line_number: int | None = None
    issue_type: str | None = None
    message: str | None = None
    call_stack: Sequence[StackFrame] = ()

    @property
    def file_location(self) -> str:
        """File name with line number, as shown in the failure dump."""
        if self.file_name and self.line_number:
            return f"{self.file_name}:{self.line_number}"
        return self.file_name or ""


@dataclass(frozen=True, kw_only=True)
class Annotation:
    """File annotation emitted for a failure with a complete location."""

    path: str
    start_line: int
    end_line: int
    severity: Literal["failure", "warning", "notice"]
    message: str
    category: str | None = None


@dataclass(frozen=True, kw_only=True)
class AttachmentView:
    """Image attachment ready to be rendered."""

    link: str
    width: str


@dataclass(frozen=True, kw_only=True)
class Activity:
    """One activity of a test's trace, flattened with its nesting depth."""

    title: str
    indent: int
    attachments: Sequence[AttachmentView] = ()


@dataclass(frozen=True, kw_only=True)
class LeafResult:
    """One concrete executed test, tagged with its owning group."""

    identifier: str
    name: str
    status: TestStatus
    group: str
    duration: float | None = None
    configuration_name: str | None = None
    configuration_values: Sequence[tuple[str, str]] = ()
    failures: Sequence[FailureDetail] = ()
    activities: Sequence[Activity] = ()

    @property
    def variant_key(self) -> tuple[str, str]:
        """Identity of the test under its configuration, if any."""
        return (self.identifier, self.configuration_name or "")


@dataclass(frozen=True, kw_only=True)
class GroupStats:
    """Counts and duration of the leaves at one aggregation level."""

    passed: int = 0
    failed: int = 0
    skipped: int = 0
    expected_failure: int = 0
    duration: float = 0.0

    @property
    def total(self) -> int:
        """Number of leaves counted at this level."""
        return self.passed + self.failed + self.skipped + self.expected_failure

    def __add__(self, other: "GroupStats") -> "GroupStats":
        """Sum counts and durations of two levels."""
        return GroupStats(
            passed=self.passed + other.passed,
            failed=self.failed + other.failed,
            skipped=self.skipped + other.skipped,
            expected_failure=self.expected_failure + other.expected_failure,
            duration=self.duration + other.duration,
        )


@dataclass(frozen=True, kw_only=True)
class VariantSummary:
    """Aggregated view of one configuration variant within a group."""

    key: tuple[str, str]
    label: str
    leaves: Sequence[LeafResult]
    stats: GroupStats
    status: GroupStatus | None


@dataclass(frozen=True, kw_only=True)
class GroupSummary:
    """Aggregated view of one group within a section."""

    name: str
    variants: Sequence[VariantSummary]
    stats: GroupStats


@dataclass(kw_only=True)
class Section:
    """One testable unit with its flattened leaves."""

    name: str
    leaves: list[LeafResult] = field(default_factory=list)


@dataclass(kw_only=True)
class Chapter:
    """One executed test action and its rendered blocks."""

    scheme_command_name: str | None = None
    title: str | None = None
    device: str | None = None
    sdk: str | None = None
    sections: dict[str, Section] = field(default_factory=dict)
    summary: str = ""
    failures: str = ""
    details: str = ""

    @property
    def heading(self) -> str:
        """Heading used for the chapter in the rendered document."""
        return self.title or self.scheme_command_name or "Test"


@dataclass(kw_only=True)
class TestReport:
    """Complete report of one formatting pass."""

    __test__ = False

    entity_name: str | None = None
    workspace_path: str | None = None
    chapters: list[Chapter] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)
    stats: GroupStats = field(default_factory=GroupStats)

    @property
    def status(self) -> Literal["success", "failure"] | None:
        """Overall status; None when no leaf passed or failed."""
        if self.stats.failed > 0:
            return "failure"
        if self.stats.passed > 0:
            return "success"
        return None

    def render(self) -> str:
        """Join every chapter's blocks into one markdown document."""
        blocks: list[str] = []
        for chapter in self.chapters:
            blocks.append(f"## {chapter.heading}\n")
            blocks.extend((chapter.summary, chapter.failures, chapter.details))
        return "\n".join(blocks)

