"""Tests for record source loading module."""

import pytest

from result_report_action.errors import SourceNotFoundError
from result_report_action.sources.json_directory import json_directory_manifest
from result_report_action.sources.loading import load_source_manifest
from result_report_action.sources.xcresulttool import xcresulttool_manifest


def test_load_source_manifest_returns_manifest() -> None:
    """Loads source manifests by key."""
    assert load_source_manifest("json-directory") is json_directory_manifest
    assert load_source_manifest("xcresulttool") is xcresulttool_manifest


def test_load_source_manifest_raises_for_unknown_source() -> None:
    """Raises SourceNotFoundError for unknown source key."""
    with pytest.raises(SourceNotFoundError) as exc_info:
        load_source_manifest("unknown-source")

    assert "unknown-source" in str(exc_info.value)
    assert "Available sources" in str(exc_info.value)
