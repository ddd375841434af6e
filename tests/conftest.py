import json
from collections.abc import AsyncIterator, Callable, Iterator

import httpx
import pytest

from djelia.client import AsyncDjelia, Djelia
from djelia.config import DjeliaConfig

API_KEY = "123e4567-e89b-12d3-a456-426614174000"
BASE_URL = "https://djelia.test"


def ndjson(*records: object, trailing_newline: bool = True) -> bytes:
    body = "\n".join(json.dumps(record) for record in records)
    if trailing_newline:
        body += "\n"
    return body.encode()


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


class FakeByteStream:
    def __init__(self, fragments: list[bytes], error: Exception | None = None) -> None:
        self._fragments = list(fragments)
        self._error = error
        self.pulled = 0
        self.close_calls = 0

    def iter_bytes(self) -> Iterator[bytes]:
        for fragment in self._fragments:
            self.pulled += 1
            yield fragment
        if self._error is not None:
            raise self._error

    def close(self) -> None:
        self.close_calls += 1


class FakeAsyncByteStream:
    def __init__(self, fragments: list[bytes], error: Exception | None = None) -> None:
        self._fragments = list(fragments)
        self._error = error
        self.pulled = 0
        self.close_calls = 0

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        for fragment in self._fragments:
            self.pulled += 1
            yield fragment
        if self._error is not None:
            raise self._error

    async def aclose(self) -> None:
        self.close_calls += 1


class RecordingHandler:
    """MockTransport handler that replays queued responses and keeps the requests."""

    def __init__(self, *responses: httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        if len(self._responses) > 1:
            response = self._responses.pop(0)
        else:
            response = _replayable(self._responses[0])
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return response(request)


def _replayable(response):
    if not isinstance(response, httpx.Response):
        return response
    try:
        content = response.content
    except httpx.ResponseNotRead:
        return response
    return httpx.Response(response.status_code, headers=response.headers, content=content)


async def aiter_fragments(fragments: list[bytes]) -> AsyncIterator[bytes]:
    for fragment in fragments:
        yield fragment


def make_config(**overrides) -> DjeliaConfig:
    values = {"api_key": API_KEY, "base_url": BASE_URL, "retry_backoff": 0.0}
    values.update(overrides)
    return DjeliaConfig(**values)


def make_client(handler: RecordingHandler, **overrides) -> Djelia:
    return Djelia(config=make_config(**overrides), transport=httpx.MockTransport(handler))


def make_async_client(handler: RecordingHandler, **overrides) -> AsyncDjelia:
    return AsyncDjelia(config=make_config(**overrides), transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    for key in ("DJELIA_API_KEY", "DJELIA_API_KEY_FILE", "DJELIA_BASE_URL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def segment_lines():
    return [
        {"text": "i ni ce", "start": 0.0, "end": 1.2},
        {"text": "i ka kene", "start": 1.2, "end": 2.5},
        {"text": "n ka kene", "start": 2.5, "end": 3.1},
    ]
