"""Fixtures for integration tests."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import pytest


class WriteRecordsFn(Protocol):
    """Protocol for record directory creation function."""

    def __call__(self, records: Mapping[str | None, Mapping[str, Any]]) -> Path:
        """Write records as JSON files and return the directory."""


@pytest.fixture
def write_records(tmp_path: Path) -> WriteRecordsFn:
    """Factory writing a record directory readable by the json-directory source."""
    directory = tmp_path / "records"

    def write(records: Mapping[str | None, Mapping[str, Any]]) -> Path:
        directory.mkdir(exist_ok=True)
        for ref_id, record in records.items():
            name = "root" if ref_id is None else ref_id
            (directory / f"{name}.json").write_text(json.dumps(record))
        return directory

    return write
