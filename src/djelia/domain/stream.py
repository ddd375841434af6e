import logging
from collections import deque
from collections.abc import AsyncIterator, Iterator
from typing import Generic, TypeVar

from djelia.ports.transport import AsyncByteStream, ByteStream, FragmentPipeline

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordStream(Generic[T]):
    """Lazy, single-pass sequence over one streaming response.

    A fragment is pulled from the transport only when every record produced
    by the previous fragment has been handed out. The transport is closed at
    end of stream, on error, on ``close()``, when leaving a ``with`` block, and
    when the stream is garbage collected.
    """

    def __init__(self, transport: ByteStream, pipeline: FragmentPipeline[T]) -> None:
        self._transport = transport
        self._pipeline = pipeline
        self._fragments: Iterator[bytes] | None = None
        self._pending: deque[T] = deque()
        self._exhausted = False
        self._closed = False
        self._yielded = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "RecordStream[T]":
        return self

    def __next__(self) -> T:
        while not self._pending:
            if self._exhausted or self._closed:
                self.close()
                raise StopIteration
            self._pull()
        self._yielded += 1
        return self._pending.popleft()

    def __enter__(self) -> "RecordStream[T]":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        close_fragments = getattr(self._fragments, "close", None)
        try:
            if close_fragments is not None:
                close_fragments()
        finally:
            self._transport.close()
            logger.debug("Stream closed after %d records", self._yielded)

    def _pull(self) -> None:
        try:
            if self._fragments is None:
                self._fragments = iter(self._transport.iter_bytes())
            try:
                fragment = next(self._fragments)
            except StopIteration:
                self._exhausted = True
                self._pending.extend(self._pipeline.finish())
                return
            self._pending.extend(self._pipeline.feed(fragment))
        except BaseException:
            self.close()
            raise


class AsyncRecordStream(Generic[T]):
    """Async counterpart of :class:`RecordStream`.

    Awaiting the next transport fragment is the only suspension point. Use
    ``async with`` or ``aclose()`` when abandoning the stream early.
    """

    def __init__(self, transport: AsyncByteStream, pipeline: FragmentPipeline[T]) -> None:
        self._transport = transport
        self._pipeline = pipeline
        self._fragments: AsyncIterator[bytes] | None = None
        self._pending: deque[T] = deque()
        self._exhausted = False
        self._closed = False
        self._yielded = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "AsyncRecordStream[T]":
        return self

    async def __anext__(self) -> T:
        while not self._pending:
            if self._exhausted or self._closed:
                await self.aclose()
                raise StopAsyncIteration
            await self._pull()
        self._yielded += 1
        return self._pending.popleft()

    async def __aenter__(self) -> "AsyncRecordStream[T]":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        close_fragments = getattr(self._fragments, "aclose", None)
        try:
            if close_fragments is not None:
                await close_fragments()
        finally:
            await self._transport.aclose()
            logger.debug("Stream closed after %d records", self._yielded)

    async def _pull(self) -> None:
        try:
            if self._fragments is None:
                self._fragments = self._transport.aiter_bytes().__aiter__()
            try:
                fragment = await self._fragments.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
                self._pending.extend(self._pipeline.finish())
                return
            self._pending.extend(self._pipeline.feed(fragment))
        except BaseException:
            await self.aclose()
            raise
