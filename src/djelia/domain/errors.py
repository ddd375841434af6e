from enum import Enum, auto


class ErrorKind(Enum):
    AUTHENTICATION = auto()
    VALIDATION = auto()
    LANGUAGE = auto()
    SPEAKER = auto()
    API = auto()
    GENERIC = auto()


VALIDATION_KINDS = {ErrorKind.VALIDATION, ErrorKind.LANGUAGE, ErrorKind.SPEAKER}

STATUS_MESSAGES: dict[int, str] = {
    401: "Invalid or expired API key",
    403: "Forbidden: You do not have permission to access this resource",
    404: "Resource not found",
    422: "Validation error",
}

STATUS_KINDS: dict[int, ErrorKind] = {
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.API,
    404: ErrorKind.API,
    422: ErrorKind.VALIDATION,
}


class DjeliaError(Exception):
    """Every failure raised by the client.

    Callers branch on ``kind``; ``status_code`` is set for errors that come
    from an HTTP response.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.kind is ErrorKind.API:
            return f"API Error ({self.status_code}): {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"DjeliaError(kind={self.kind.name}, status_code={self.status_code!r}, message={self.message!r})"

    @property
    def is_validation(self) -> bool:
        return self.kind in VALIDATION_KINDS


def error_for_status(status_code: int, detail: str | None = None) -> DjeliaError:
    kind = STATUS_KINDS.get(status_code, ErrorKind.API)

    if status_code == 422:
        message = f"Validation error: {detail}" if detail else STATUS_MESSAGES[422]
    elif status_code in STATUS_MESSAGES:
        message = STATUS_MESSAGES[status_code]
    else:
        message = detail or f"API error {status_code}"

    return DjeliaError(kind, message, status_code=status_code)


def request_failed(exc: BaseException) -> DjeliaError:
    return DjeliaError(ErrorKind.GENERIC, f"Request failed: {exc}")
