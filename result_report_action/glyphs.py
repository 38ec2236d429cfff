"""Icons used when rendering a report."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from result_report_action.models.report import GroupStatus, TestStatus

type StatusGlyph = Callable[[TestStatus | GroupStatus | None], str]

STATUS_SYMBOLS: Mapping[str, str] = {
    "Success": "✅",
    "Failure": "❌",
    "Skipped": "⏭️",
    "Expected Failure": "⚠️",
    "Mixed Failure": "❌",
    "Mixed Success": "✅",
}


def emoji_status(status: TestStatus | GroupStatus | None) -> str:
    """Emoji glyph of a status; empty when there is no status."""
    if status is None:
        return ""
    return STATUS_SYMBOLS[status.value]


@dataclass(frozen=True, kw_only=True)
class Glyphs:
    """Icon lookups injected into the renderer."""

    status: StatusGlyph = field(default=emoji_status)
    back: str = "⬆️"
    test_class: str = "📦"
    test_method: str = "🧪"
    attachment: str = "📎"
    time: str = ":stopwatch:"
