import pytest

from djelia.domain.errors import DjeliaError, ErrorKind, error_for_status, request_failed


class TestDjeliaError:
    def test_api_error_message_includes_status(self):
        error = DjeliaError(ErrorKind.API, "Resource not found", status_code=404)
        assert str(error) == "API Error (404): Resource not found"
        assert error.message == "Resource not found"

    def test_non_api_error_message_is_plain(self):
        error = DjeliaError(ErrorKind.SPEAKER, "Speaker ID must be one of [0, 1]")
        assert str(error) == "Speaker ID must be one of [0, 1]"
        assert error.status_code is None

    @pytest.mark.parametrize("kind", [ErrorKind.VALIDATION, ErrorKind.LANGUAGE, ErrorKind.SPEAKER])
    def test_validation_family(self, kind):
        assert DjeliaError(kind, "bad").is_validation

    @pytest.mark.parametrize("kind", [ErrorKind.AUTHENTICATION, ErrorKind.API, ErrorKind.GENERIC])
    def test_outside_validation_family(self, kind):
        assert not DjeliaError(kind, "bad").is_validation


class TestErrorForStatus:
    def test_unauthorized(self):
        error = error_for_status(401)
        assert error.kind is ErrorKind.AUTHENTICATION
        assert error.status_code == 401
        assert str(error) == "Invalid or expired API key"

    def test_forbidden(self):
        error = error_for_status(403)
        assert error.kind is ErrorKind.API
        assert "Forbidden" in str(error)

    def test_not_found(self):
        assert str(error_for_status(404)) == "API Error (404): Resource not found"

    def test_unprocessable_with_detail(self):
        error = error_for_status(422, "text is required")
        assert error.kind is ErrorKind.VALIDATION
        assert error.message == "Validation error: text is required"

    def test_unprocessable_without_detail(self):
        assert error_for_status(422).message == "Validation error"

    def test_other_status_uses_detail(self):
        error = error_for_status(429, "Too Many Requests")
        assert error.kind is ErrorKind.API
        assert str(error) == "API Error (429): Too Many Requests"

    def test_other_status_without_detail(self):
        assert error_for_status(500).message == "API error 500"


def test_request_failed_is_generic():
    error = request_failed(ConnectionResetError("reset by peer"))
    assert error.kind is ErrorKind.GENERIC
    assert str(error) == "Request failed: reset by peer"
