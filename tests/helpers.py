"""Shared test helpers for NeuroLint tests."""

import asyncio
from pathlib import Path

from neurolint.backends.base import (
    LayerResult,
    TransformBackend,
    TransformRequest,
    TransformResponse,
)
from neurolint.core.errors import TransformError


class FakeBackend(TransformBackend):
    """Scriptable in-process transform backend.

    By default appends ``// fixed`` to every file; names in ``unchanged``
    come back as sent. ``failures`` maps a file name to errors raised on
    successive calls before it succeeds; ``permanent`` maps a file name to
    an error raised on every call.
    """

    def __init__(
        self,
        *,
        change: bool = True,
        unchanged: set[str] | None = None,
        failures: dict[str, list[Exception]] | None = None,
        permanent: dict[str, Exception] | None = None,
        healthy: bool = True,
        delay: float = 0.0,
    ) -> None:
        self.change = change
        self.unchanged = unchanged or set()
        self.failures = {k: list(v) for k, v in (failures or {}).items()}
        self.permanent = permanent or {}
        self.healthy = healthy
        self.delay = delay
        self.calls: list[TransformRequest] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    def called_names(self) -> list[str]:
        return [Path(call.file_path).name for call in self.calls]

    async def transform(self, request: TransformRequest) -> TransformResponse:
        self.calls.append(request)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            # Always yield so concurrent tasks interleave
            await asyncio.sleep(self.delay)
            name = Path(request.file_path).name
            if name in self.permanent:
                raise self.permanent[name]
            pending = self.failures.get(name)
            if pending:
                raise pending.pop(0)
        finally:
            self.in_flight -= 1

        changes = self.change and name not in self.unchanged
        transformed = request.code + "// fixed\n" if changes else request.code
        return TransformResponse(
            transformed=transformed,
            layers=[
                LayerResult(id=layer, name=f"Layer {layer}", changes=1 if changes else 0)
                for layer in request.layers
            ],
        )

    async def health_check(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


def http_error(status: int) -> TransformError:
    return TransformError(f"HTTP {status}", status_code=status)


def transport_error(code: str) -> TransformError:
    return TransformError(f"{code}: connection failed", code=code)


async def no_sleep(seconds: float) -> None:
    """Sleep replacement that returns immediately."""
