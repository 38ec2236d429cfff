"""Configuration for the JSON directory record source."""

from pathlib import Path

from pydantic import BaseModel


class JsonDirectoryConfig(BaseModel):
    """Configuration for the JSON directory record source."""

    path: Path
    root_name: str = "root"
