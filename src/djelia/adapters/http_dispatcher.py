import logging
from collections.abc import AsyncIterator, Iterator
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from djelia.adapters.auth import Auth
from djelia.config import DjeliaConfig
from djelia.domain.errors import DjeliaError, ErrorKind, error_for_status, request_failed

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
    httpx.RemoteProtocolError,
)


def prepare_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    return {
        key: str(value).lower() if isinstance(value, bool) else value
        for key, value in params.items()
    }


def decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise DjeliaError(ErrorKind.GENERIC, f"Invalid JSON response: {exc}") from exc


def _error_detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except (ValueError, httpx.StreamError):
        return response.reason_phrase or None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.reason_phrase or None


def _is_server_error(response: httpx.Response) -> bool:
    return response.status_code >= 500


def _last_outcome(retry_state: RetryCallState) -> httpx.Response:
    # Out of attempts: hand back the final 5xx response, or re-raise the final exception.
    return retry_state.outcome.result()


def retry_policy(config: DjeliaConfig, method: str, path: str) -> dict[str, Any]:
    """Keyword arguments for ``Retrying`` / ``AsyncRetrying`` around one request.

    Connection failures and 5xx responses are retried up to ``max_retries``
    times, waiting ``retry_backoff * 2**(n - 1)`` seconds (capped at
    ``retry_backoff_max``) before retry ``n``.
    """

    def log_retry(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        reason = outcome.exception() if outcome.failed else outcome.result().status_code
        logger.warning(
            "Retrying %s %s in %.1fs (attempt %d/%d): %s",
            method, path, retry_state.next_action.sleep,
            retry_state.attempt_number, config.max_retries, reason,
        )

    return {
        "stop": stop_after_attempt(config.max_retries + 1),
        "wait": wait_exponential(multiplier=config.retry_backoff, max=config.retry_backoff_max),
        "retry": retry_if_exception_type(RETRYABLE_EXCEPTIONS) | retry_if_result(_is_server_error),
        "before_sleep": log_retry,
        "retry_error_callback": _last_outcome,
    }


class HttpByteStream:
    """Transport handle for one streaming response."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def iter_bytes(self) -> Iterator[bytes]:
        try:
            yield from self._response.iter_bytes()
        except httpx.HTTPError as exc:
            raise request_failed(exc) from exc
        finally:
            self._response.close()

    def close(self) -> None:
        self._response.close()


class AsyncHttpByteStream:
    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            raise request_failed(exc) from exc
        finally:
            # Also reached when an abandoned iterator is finalized by the event loop.
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()


class HttpDispatcher:
    def __init__(
        self,
        auth: Auth,
        config: DjeliaConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            headers=auth.headers(),
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        return self._send(method, path, stream=False, **kwargs)

    def open_stream(self, method: str, path: str, **kwargs: Any) -> HttpByteStream:
        return HttpByteStream(self._send(method, path, stream=True, **kwargs))

    def close(self) -> None:
        self._client.close()

    def _send(self, method: str, path: str, *, stream: bool, **kwargs: Any) -> httpx.Response:
        retrying = Retrying(**retry_policy(self._config, method, path))
        try:
            response = retrying(self._attempt, method, path, stream, **kwargs)
        except httpx.HTTPError as exc:
            raise request_failed(exc) from exc
        if response.is_success:
            return response
        raise self._status_error(response)

    def _attempt(
        self,
        method: str,
        path: str,
        stream: bool,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
    ) -> httpx.Response:
        request = self._client.build_request(
            method, path, params=prepare_params(params), json=json, files=files
        )
        logger.debug("Request: %s %s", method, request.url)
        response = self._client.send(request, stream=stream)
        if _is_server_error(response):
            self._release(response)
        return response

    def _release(self, response: httpx.Response) -> None:
        try:
            response.read()
        except httpx.HTTPError:
            logger.debug("Could not read error body for status %d", response.status_code)
        finally:
            response.close()

    def _status_error(self, response: httpx.Response) -> DjeliaError:
        self._release(response)
        return error_for_status(response.status_code, _error_detail(response))


class AsyncHttpDispatcher:
    def __init__(
        self,
        auth: Auth,
        config: DjeliaConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=auth.headers(),
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        return await self._send(method, path, stream=False, **kwargs)

    async def open_stream(self, method: str, path: str, **kwargs: Any) -> AsyncHttpByteStream:
        return AsyncHttpByteStream(await self._send(method, path, stream=True, **kwargs))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, *, stream: bool, **kwargs: Any) -> httpx.Response:
        retrying = AsyncRetrying(**retry_policy(self._config, method, path))
        try:
            response = await retrying(self._attempt, method, path, stream, **kwargs)
        except httpx.HTTPError as exc:
            raise request_failed(exc) from exc
        if response.is_success:
            return response
        raise await self._status_error(response)

    async def _attempt(
        self,
        method: str,
        path: str,
        stream: bool,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
    ) -> httpx.Response:
        request = self._client.build_request(
            method, path, params=prepare_params(params), json=json, files=files
        )
        logger.debug("Request: %s %s", method, request.url)
        response = await self._client.send(request, stream=stream)
        if _is_server_error(response):
            await self._release(response)
        return response

    async def _release(self, response: httpx.Response) -> None:
        try:
            await response.aread()
        except httpx.HTTPError:
            logger.debug("Could not read error body for status %d", response.status_code)
        finally:
            await response.aclose()

    async def _status_error(self, response: httpx.Response) -> DjeliaError:
        await self._release(response)
        return error_for_status(response.status_code, _error_detail(response))
