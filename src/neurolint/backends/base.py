"""Abstract base for transform service backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class TransformRequest(BaseModel):
    """Body of a transform call."""

    model_config = ConfigDict(populate_by_name=True)

    code: str
    file_path: str = Field(alias="filePath")
    layers: list[int]


class LayerResult(BaseModel):
    """Outcome of one layer applied to one file."""

    id: int
    name: str = ""
    status: Literal["success", "error", "skipped"] = "success"
    changes: int = 0


class TransformResponse(BaseModel):
    """Transformed content plus per-layer results."""

    transformed: str
    layers: list[LayerResult] = Field(default_factory=list)


class TransformBackend(ABC):
    """Abstract base class for the remote transform service.

    Implementations raise TransformError for any failure, carrying an HTTP
    ``status_code`` or a transport ``code`` so the retry predicate can
    classify it.
    """

    @abstractmethod
    async def transform(self, request: TransformRequest) -> TransformResponse:
        """Transform one file's content.

        Args:
            request: Source code, its path relative to the project, and layers

        Returns:
            TransformResponse with the new content and layer results
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the service is reachable.

        Returns:
            True if the service answered, False otherwise
        """
        ...

    async def close(self) -> None:
        """Release connections. Default: nothing to release."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""
        ...
