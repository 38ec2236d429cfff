"""Record source backed by ``xcrun xcresulttool``."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from result_report_action.errors import ReferenceResolutionError
from result_report_action.sources.base import RecordSource
from result_report_action.sources.xcresulttool.config import XcresultToolConfig

log = logging.getLogger(__name__)

SCALAR_CONVERTERS: Mapping[str, Any] = {
    "Int": int,
    "Int8": int,
    "Int16": int,
    "Int32": int,
    "Int64": int,
    "UInt8": int,
    "UInt16": int,
    "UInt32": int,
    "UInt64": int,
    "Double": float,
    "Float": float,
    "Bool": lambda value: value == "true",
}

GROUP_TYPES = frozenset({"ActionTestSummaryGroup"})


def unwrap(value: Any) -> Any:
    """Strip xcresulttool's ``_type``/``_value``/``_values`` wrappers.

    Scalars are converted according to their declared type name; objects keep
    only their public keys.
    """
    if isinstance(value, list):
        return [unwrap(item) for item in value]
    if not isinstance(value, dict):
        return value
    if "_values" in value:
        return [unwrap(item) for item in value["_values"]]
    if "_value" in value:
        type_name = value.get("_type", {}).get("_name", "String")
        converter = SCALAR_CONVERTERS.get(type_name)
        return converter(value["_value"]) if converter else value["_value"]
    record = {
        key: unwrap(item) for key, item in value.items() if not key.startswith("_")
    }
    # Empty groups come without subtests but must still read as groups
    if value.get("_type", {}).get("_name") in GROUP_TYPES:
        record.setdefault("subtests", [])
    return record


@dataclass(frozen=True, kw_only=True)
class XcresultToolSource(RecordSource):
    """Reads records from a result bundle through ``xcresulttool get``."""

    config: XcresultToolConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: XcresultToolConfig
    ) -> AsyncGenerator["XcresultToolSource", None]:
        """Create source after checking the bundle exists."""
        if not config.path.exists():
            raise ReferenceResolutionError(
                None, f"Result bundle not found: {config.path}"
            )
        yield cls(config=config)

    def command(self, ref_id: str | None) -> list[str]:
        """Build the xcresulttool invocation for a reference."""
        args = [self.config.xcrun, "xcresulttool", "get"]
        if self.config.legacy:
            args.append("--legacy")
        args += ["--format", "json", "--path", str(self.config.path)]
        if ref_id is not None:
            args += ["--id", ref_id]
        return args

    async def resolve(self, ref_id: str | None = None) -> Mapping[str, Any]:
        """Run xcresulttool and unwrap its typed JSON output."""
        log.debug("Resolving reference %s from %s", ref_id, self.config.path)
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command(ref_id),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ReferenceResolutionError(
                ref_id, f"Cannot run {self.config.xcrun}: {e}"
            ) from e
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            raise ReferenceResolutionError(
                ref_id, f"xcresulttool failed: {stderr.decode().strip()}"
            )

        try:
            data = unwrap(json.loads(stdout))
        except json.JSONDecodeError as e:
            raise ReferenceResolutionError(
                ref_id, f"xcresulttool returned invalid JSON: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ReferenceResolutionError(ref_id, "xcresulttool returned a non-object")
        return data
