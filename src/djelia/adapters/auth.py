import uuid

from djelia.domain.errors import DjeliaError, ErrorKind

API_KEY_HEADER = "x-api-key"
API_KEY_MISSING = "API key must be provided via parameter or environment variable"


def is_valid_api_key(api_key: str | None) -> bool:
    if not api_key:
        return False
    try:
        uuid.UUID(api_key)
    except ValueError:
        return False
    return True


class Auth:
    def __init__(self, api_key: str | None) -> None:
        if not is_valid_api_key(api_key):
            raise DjeliaError(ErrorKind.AUTHENTICATION, API_KEY_MISSING)
        self._api_key = api_key

    @property
    def api_key(self) -> str:
        return self._api_key

    def headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: self._api_key}
