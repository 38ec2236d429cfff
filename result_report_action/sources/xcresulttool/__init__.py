"""xcresulttool record source module."""

from result_report_action.sources.xcresulttool.config import XcresultToolConfig
from result_report_action.sources.xcresulttool.manifest import xcresulttool_manifest
from result_report_action.sources.xcresulttool.source import (
    XcresultToolSource,
    unwrap,
)

__all__ = [
    "XcresultToolConfig",
    "XcresultToolSource",
    "unwrap",
    "xcresulttool_manifest",
]
