"""Errors raised while building a report."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class ReportContext:
    """Coordinates of the input being processed when an error occurred."""

    chapter: str | None = None
    section: str | None = None
    group: str | None = None
    leaf: str | None = None

    def __str__(self) -> str:
        parts = [
            f"{name}={value!r}"
            for name, value in (
                ("chapter", self.chapter),
                ("section", self.section),
                ("group", self.group),
                ("leaf", self.leaf),
            )
            if value is not None
        ]
        return ", ".join(parts) or "run"


class ReportError(Exception):
    """Base class for errors that abort a formatting pass."""


class ReferenceResolutionError(ReportError):
    """Raised when a record source cannot resolve a reference."""

    def __init__(
        self, ref_id: str | None, reason: str, context: ReportContext | None = None
    ) -> None:
        self.ref_id = ref_id
        self.reason = reason
        self.context = context
        where = f" ({context})" if context else ""
        super().__init__(f"Cannot resolve reference {ref_id!r}{where}: {reason}")

    def with_context(self, context: ReportContext) -> "ReferenceResolutionError":
        """Return a copy of this error located at ``context``."""
        return ReferenceResolutionError(self.ref_id, self.reason, context)


class RecordFormatError(ReportError):
    """Raised when a resolved record does not match its expected model."""

    def __init__(
        self, ref_id: str | None, detail: str, context: ReportContext | None = None
    ) -> None:
        self.ref_id = ref_id
        self.detail = detail
        self.context = context
        where = f" ({context})" if context else ""
        super().__init__(f"Malformed record {ref_id!r}{where}: {detail}")

    def with_context(self, context: ReportContext) -> "RecordFormatError":
        """Return a copy of this error located at ``context``."""
        return RecordFormatError(self.ref_id, self.detail, context)


class MalformedStatusError(ReportError):
    """Raised for a test status outside the recognized set."""

    def __init__(self, status: object, context: ReportContext) -> None:
        self.status = status
        self.context = context
        super().__init__(f"Unknown test status {status!r} ({context})")


class TreeDepthError(ReportError):
    """Raised when a suite tree nests deeper than allowed."""

    def __init__(self, max_depth: int, context: ReportContext) -> None:
        self.max_depth = max_depth
        self.context = context
        super().__init__(
            f"Suite tree exceeds maximum depth of {max_depth} ({context})"
        )


class SourceNotFoundError(ReportError):
    """Raised when a record source is not found."""
