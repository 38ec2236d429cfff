"""JSON directory record source manifest."""

from result_report_action.sources.json_directory.config import JsonDirectoryConfig
from result_report_action.sources.json_directory.source import JsonDirectorySource
from result_report_action.sources.manifest import SourceManifest

json_directory_manifest = SourceManifest(
    config_cls=JsonDirectoryConfig,
    source_factory=JsonDirectorySource.from_config,
)
