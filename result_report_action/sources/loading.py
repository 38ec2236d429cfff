"""Loading of record sources from entry points."""

from importlib.metadata import entry_points
from typing import Any

from result_report_action.errors import SourceNotFoundError
from result_report_action.sources.manifest import SourceManifest

ENTRY_POINT_GROUP = "result_report_action.sources"


def load_source_manifest(key: str) -> SourceManifest[Any]:
    """Load a record source manifest by key.

    Args:
        key: The source key as registered in pyproject.toml
             (e.g., "json-directory", "xcresulttool")

    Returns:
        The source manifest instance

    Raises:
        SourceNotFoundError: If no source with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            manifest: SourceManifest[Any] = entry.load()
            return manifest

    available = [e.name for e in entries]
    raise SourceNotFoundError(
        f"Record source '{key}' not found. Available sources: {available}"
    )
