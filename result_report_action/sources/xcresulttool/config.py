"""Configuration for the xcresulttool record source."""

from pathlib import Path

from pydantic import BaseModel


class XcresultToolConfig(BaseModel):
    """Configuration for the xcresulttool record source."""

    path: Path
    xcrun: str = "xcrun"
    # Newer Xcode versions only serve the record graph with --legacy
    legacy: bool = True
