"""Configuration of a formatting pass."""

from pydantic import BaseModel, Field


class ReportConfig(BaseModel):
    """Options controlling how a report is built and rendered."""

    failures_only: bool = False
    resolve_concurrency: int = Field(default=1, ge=1)
    max_depth: int = Field(default=256, ge=1)
    attachment_base_url: str = "attachments"
