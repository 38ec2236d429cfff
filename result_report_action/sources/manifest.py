"""Record source manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from result_report_action.sources.base import RecordSource


@dataclass(frozen=True, kw_only=True)
class SourceManifest[ConfigT: BaseModel]:
    """Manifest describing a record source plugin.

    The manifest contains references to the configuration class and the
    source factory function for lazy loading of sources based on their key.
    """

    config_cls: type[ConfigT]
    source_factory: Callable[[ConfigT], AbstractAsyncContextManager[RecordSource]]
