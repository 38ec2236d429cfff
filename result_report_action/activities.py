"""Collection of activity traces and sizing of their image attachments."""

import logging
from collections.abc import Callable, Sequence

from result_report_action.models.record import ActivitySummary, AttachmentRecord
from result_report_action.models.report import Activity, AttachmentView

log = logging.getLogger(__name__)

type AttachmentExporter = Callable[[AttachmentRecord], str]

# EXIF orientations from 5 upwards are rotated by 90 degrees
ROTATED_ORIENTATION = 5


def attachment_link(base_url: str) -> AttachmentExporter:
    """Return a lookup linking attachments to ``<base_url>/<file name>``."""

    def link(attachment: AttachmentRecord) -> str:
        name = attachment.filename or attachment.name
        if not name and attachment.payload_ref:
            name = attachment.payload_ref.id
        return f"{base_url.rstrip('/')}/{name or ''}"

    return link


def attachment_width(attachment: AttachmentRecord) -> str:
    """Display width of an image attachment, honoring its ``Scale`` info."""
    dimensions = attachment.dimensions
    pixels: int | None = None
    if dimensions and dimensions.width and dimensions.height:
        rotated = (dimensions.orientation or 0) >= ROTATED_ORIENTATION
        pixels = dimensions.height if rotated else dimensions.width

    scale = _scale(attachment)
    if scale:
        if pixels:
            return f"{pixels / scale:.0f}px"
        return f"{100 / scale:.0f}%"
    return f"{pixels}px" if pixels else "100%"


def _scale(attachment: AttachmentRecord) -> int | None:
    if not attachment.user_info:
        return None
    for info in attachment.user_info.storage:
        if info.key == "Scale":
            try:
                return int(info.value) or None
            except ValueError:
                log.warning("Ignoring non-numeric attachment scale %r", info.value)
    return None


def collect_activities(
    summaries: Sequence[ActivitySummary],
    export: AttachmentExporter,
    indent: int = 0,
) -> list[Activity]:
    """Flatten an activity tree in pre-order, recording each nesting depth.

    Only attachments with dimensions are kept; they are the visual evidence
    rendered inline.
    """
    activities: list[Activity] = []
    for summary in summaries:
        activities.append(
            Activity(
                title=summary.title,
                indent=indent,
                attachments=[
                    AttachmentView(
                        link=export(attachment), width=attachment_width(attachment)
                    )
                    for attachment in summary.attachments
                    if attachment.dimensions
                ],
            )
        )
        activities.extend(collect_activities(summary.subactivities, export, indent + 1))
    return activities
