"""Tests for error handling and Problem Details implementation."""

import json
from fastapi import Request
from fastapi.responses import JSONResponse
from unittest.mock import Mock

from cursorpage.errors.problem_details import (
    ProblemDetail,
    ProblemDetailException,
    NotFoundError,
    InternalServerError,
    ServiceUnavailableError,
    create_problem_response
)


def body(response: JSONResponse) -> dict:
    return json.loads(response.body)


class TestProblemDetail:
    """Test ProblemDetail model."""

    def test_problem_detail_defaults(self):
        """Test ProblemDetail with default values."""
        problem = ProblemDetail(title="Test Error", status=400)

        assert problem.type == "about:blank"
        assert problem.detail is None
        assert problem.instance is None

    def test_problem_detail_extra_fields(self):
        """Test ProblemDetail allows extension members."""
        problem = ProblemDetail(title="Test Error", status=503, database_error="timeout")

        assert problem.database_error == "timeout"


class TestProblemDetailException:
    """Test ProblemDetailException base class."""

    def test_basic_exception(self):
        """Test basic exception creation."""
        exc = ProblemDetailException("Something broke")

        assert exc.status == 500
        assert exc.title == "Internal Server Error"
        assert exc.detail == "Something broke"
        assert exc.type_uri == "about:blank"
        assert str(exc) == "Something broke"

    def test_message_defaults_to_title(self):
        """Without a detail the title is the message."""
        assert str(NotFoundError()) == "Not Found"

    def test_to_response(self):
        """Test converting to JSONResponse."""
        request = Mock(spec=Request)
        request.url.path = "/v1/records"

        response = NotFoundError("Stage 'x' not found", retry=False).to_response(request)

        assert response.status_code == 404
        assert response.headers["Content-Type"] == "application/problem+json"
        assert body(response) == {
            "type": "about:blank",
            "title": "Not Found",
            "status": 404,
            "detail": "Stage 'x' not found",
            "instance": "/v1/records",
            "retry": False
        }


class TestSpecificExceptions:
    """Test specific exception classes."""

    def test_not_found_error(self):
        """Test NotFoundError."""
        exc = NotFoundError("Stage 'archived' not found")

        assert exc.status == 404
        assert exc.title == "Not Found"

    def test_internal_server_error(self):
        """Test InternalServerError."""
        exc = InternalServerError("Database error: timeout")

        assert exc.status == 500
        assert exc.title == "Internal Server Error"
        assert exc.detail == "Database error: timeout"

    def test_service_unavailable_error(self):
        """Test ServiceUnavailableError."""
        exc = ServiceUnavailableError("Database connection failed", database_error="refused")

        assert exc.status == 503
        assert exc.title == "Service Unavailable"
        assert exc.extensions == {"database_error": "refused"}


class TestCreateProblemResponse:
    """Test create_problem_response function."""

    def test_none_fields_omitted(self):
        """Unset optional members are not serialized."""
        response = create_problem_response(status=400, title="Bad Request")

        assert body(response) == {"type": "about:blank", "title": "Bad Request", "status": 400}

    def test_explicit_instance_wins(self):
        """An explicit instance is kept even with a request."""
        request = Mock(spec=Request)
        request.url.path = "/ignored"

        response = create_problem_response(status=404, title="Not Found", instance="/records/9", request=request)

        assert body(response)["instance"] == "/records/9"
