"""JSON directory record source module."""

from result_report_action.sources.json_directory.config import JsonDirectoryConfig
from result_report_action.sources.json_directory.manifest import (
    json_directory_manifest,
)
from result_report_action.sources.json_directory.source import JsonDirectorySource

__all__ = ["JsonDirectoryConfig", "JsonDirectorySource", "json_directory_manifest"]
