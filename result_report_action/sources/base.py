"""Abstract base class for test-run record sources."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from result_report_action.errors import RecordFormatError


@dataclass(frozen=True, kw_only=True)
class RecordSource(ABC):
    """Abstract base for record sources.

    A source supplies the root record of a test invocation and resolves the
    opaque references found inside it. Resolving the same reference twice
    within one pass must return the same content.
    """

    @abstractmethod
    async def resolve(self, ref_id: str | None = None) -> Mapping[str, Any]:
        """Return the raw record behind a reference.

        Args:
            ref_id: Reference identifier, or None for the root record

        Returns:
            The record as plain JSON data

        Raises:
            ReferenceResolutionError: If the reference cannot be resolved

        """

    async def parse[M: BaseModel](
        self, model_cls: type[M], ref_id: str | None = None
    ) -> M:
        """Resolve a reference and validate it as ``model_cls``.

        Raises:
            ReferenceResolutionError: If the reference cannot be resolved
            RecordFormatError: If the record does not match the model

        """
        data = await self.resolve(ref_id)
        try:
            return model_cls.model_validate(data)
        except ValidationError as e:
            raise RecordFormatError(ref_id, str(e)) from e
