"""Transform service backends."""

from neurolint.backends.base import (
    LayerResult,
    TransformBackend,
    TransformRequest,
    TransformResponse,
)
from neurolint.backends.http import HttpTransformBackend

__all__ = [
    "HttpTransformBackend",
    "LayerResult",
    "TransformBackend",
    "TransformRequest",
    "TransformResponse",
]
