"""
Error taxonomy tests.

Tests:
1. every error class is built with the right kind and status
2. to_dict() exposes only the message and kind
3. log() writes the message
4. FastAPI handlers render errors as JSON
"""
import pytest
from fastapi.testclient import TestClient

from buidler_analyzer.common.config import Settings
from buidler_analyzer.common.errors import (
    AnalysisFailedError,
    BaseError,
    ConfigError,
    ErrorKind,
    GitHubError,
    GitHubNotFoundError,
    InvalidURLError,
    MissingParameterError,
    ValidationError,
)
from buidler_analyzer.main import create_app

pytestmark = pytest.mark.unit


class TestBaseError:

    def test_base_error_creation(self):
        error = BaseError(
            message="Test error",
            kind=ErrorKind.UNKNOWN,
            http_status=500,
            context={"info": "test"},
        )

        assert error.message == "Test error"
        assert error.kind == ErrorKind.UNKNOWN
        assert error.http_status == 500
        assert error.context == {"info": "test"}
        assert str(error) == "Test error"

    def test_to_dict(self):
        error = BaseError(
            message="Test error",
            kind=ErrorKind.ANALYSIS_FAILED,
            context={"secret": "upstream detail"},
        )

        assert error.to_dict() == {"error": "Test error", "kind": "analysis_failed"}

    def test_log_method(self, caplog):
        error = BaseError(
            message="Test logging",
            kind=ErrorKind.INTERNAL_ERROR,
            context={"test": "context"},
        )

        error.log(level="warning")

        assert "Test logging" in caplog.text
        assert "BaseError" in caplog.text


class TestGitHubErrors:

    def test_github_error_is_always_500(self):
        error = GitHubError("boom", url="/users/x", status_code=403)

        assert error.http_status == 500
        assert error.status_code == 403
        assert error.kind == ErrorKind.GITHUB_API_ERROR
        assert error.context["url"] == "/users/x"

    def test_not_found(self):
        error = GitHubNotFoundError("/users/ghost")

        assert isinstance(error, GitHubError)
        assert error.kind == ErrorKind.GITHUB_NOT_FOUND
        assert error.status_code == 404
        assert error.http_status == 500


class TestRequestErrors:

    def test_missing_parameter(self):
        error = MissingParameterError("Owner and repo parameters are required", "owner", "repo")

        assert isinstance(error, ValidationError)
        assert error.http_status == 400
        assert error.kind == ErrorKind.MISSING_REQUIRED_FIELD
        assert error.context["field"] == "owner,repo"

    def test_invalid_url(self):
        error = InvalidURLError("https://gitlab.com/a/b")

        assert error.http_status == 400
        assert error.message == "Invalid GitHub URL"
        assert error.context["url"] == "https://gitlab.com/a/b"

    def test_config_error(self):
        error = ConfigError("GitHub API key not found", setting="GITHUB_TOKEN")

        assert error.http_status == 500
        assert error.kind == ErrorKind.CONFIG_ERROR

    def test_analysis_failed_keeps_cause_out_of_body(self):
        cause = GitHubError("GitHub API responded with status 502", url="/orgs/x", status_code=502)
        error = AnalysisFailedError("Failed to analyze organization", cause=cause)

        assert error.http_status == 500
        assert error.context["status_code"] == 502
        assert "502" in error.context["cause"]
        assert error.to_dict() == {
            "error": "Failed to analyze organization",
            "kind": "analysis_failed",
        }


class TestFastAPIHandlers:

    @pytest.fixture
    def app(self):
        app = create_app(Settings(github_token="t"))

        @app.get("/_raise_validation")
        def _raise_validation():
            raise ValidationError("bad input", field="x")

        @app.get("/_raise_upstream")
        def _raise_upstream():
            raise GitHubError("leaky upstream detail", status_code=404)

        @app.get("/_raise_unexpected")
        def _raise_unexpected():
            raise RuntimeError("boom")

        return app

    def test_validation_error_response(self, app):
        response = TestClient(app).get("/_raise_validation")

        assert response.status_code == 400
        assert response.json() == {"error": "bad input", "kind": "invalid_input"}

    def test_upstream_error_response(self, app):
        response = TestClient(app).get("/_raise_upstream")

        assert response.status_code == 500
        assert response.json()["kind"] == "github_api_error"

    def test_unexpected_error_response(self, app):
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/_raise_unexpected")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "kind": "internal_error"}
