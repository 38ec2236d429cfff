"""xcresulttool record source manifest."""

from result_report_action.sources.manifest import SourceManifest
from result_report_action.sources.xcresulttool.config import XcresultToolConfig
from result_report_action.sources.xcresulttool.source import XcresultToolSource

xcresulttool_manifest = SourceManifest(
    config_cls=XcresultToolConfig,
    source_factory=XcresultToolSource.from_config,
)
