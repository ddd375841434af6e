from typing import AsyncIterator, Iterator, Protocol, TypeVar

T_co = TypeVar("T_co", covariant=True)


class ByteStream(Protocol):
    def iter_bytes(self) -> Iterator[bytes]: ...
    def close(self) -> None: ...


class AsyncByteStream(Protocol):
    def aiter_bytes(self) -> AsyncIterator[bytes]: ...
    async def aclose(self) -> None: ...


class FragmentPipeline(Protocol[T_co]):
    def feed(self, fragment: bytes) -> list[T_co]: ...
    def finish(self) -> list[T_co]: ...
