"""Record source reading pre-exported JSON records from a directory."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from result_report_action.errors import ReferenceResolutionError
from result_report_action.sources.base import RecordSource
from result_report_action.sources.json_directory.config import JsonDirectoryConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class JsonDirectorySource(RecordSource):
    """Resolves ``<id>`` to ``<path>/<id>.json``; the root is ``root.json``."""

    config: JsonDirectoryConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: JsonDirectoryConfig
    ) -> AsyncGenerator["JsonDirectorySource", None]:
        """Create source after checking the directory exists."""
        if not config.path.is_dir():
            raise ReferenceResolutionError(
                None, f"Record directory not found: {config.path}"
            )
        yield cls(config=config)

    async def resolve(self, ref_id: str | None = None) -> Mapping[str, Any]:
        """Read and decode the JSON file behind a reference."""
        name = self.config.root_name if ref_id is None else ref_id
        path = self.config.path / f"{name}.json"
        if path.parent != self.config.path:
            raise ReferenceResolutionError(ref_id, "Reference escapes record directory")

        log.debug("Reading record %s from %s", ref_id, path)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError as e:
            raise ReferenceResolutionError(ref_id, f"No record file {path}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ReferenceResolutionError(
                ref_id, f"Invalid JSON in {path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ReferenceResolutionError(ref_id, f"Record in {path} is not an object")
        return data
