"""Logging setup tests."""
import json
import logging

import pytest

from buidler_analyzer.common.errors import AnalysisFailedError, GitHubError
from buidler_analyzer.common.logging_config import (
    JsonFormatter,
    TextFormatter,
    get_formatter,
    setup_logging,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def _record(msg="hello", **extra):
    record = logging.LogRecord("buidler_analyzer.test", logging.WARNING, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def _error_record(error):
    return _record(
        f"{type(error).__name__}: {error.message}",
        kind=error.kind.value,
        http_status=error.http_status,
        context=error.context,
    )


class TestJsonFormatter:

    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(_record(owner="denoland")))

        assert data["message"] == "hello"
        assert data["level"] == "WARNING"
        assert data["service"] == "buidler-analyzer"
        assert data["owner"] == "denoland"
        assert "msg" not in data

    def test_upstream_context_is_flattened(self):
        error = GitHubError("GitHub API responded with status 502", url="/orgs/x/repos", status_code=502)

        data = json.loads(JsonFormatter().format(_error_record(error)))

        assert data["kind"] == "github_api_error"
        assert data["http_status"] == 500
        assert data["status_code"] == 502
        assert data["url"] == "/orgs/x/repos"
        assert "context" not in data

    def test_opaque_failure_keeps_cause(self):
        cause = GitHubError("GitHub API responded with status 403", url="/users/x", status_code=403)
        error = AnalysisFailedError("Failed to analyze user", cause=cause)

        data = json.loads(JsonFormatter().format(_error_record(error)))

        assert data["kind"] == "analysis_failed"
        assert data["status_code"] == 403
        assert data["cause"].startswith("GitHubError")

    def test_context_does_not_override_record_fields(self):
        data = json.loads(JsonFormatter().format(_record(context={"message": "spoofed", "url": None})))

        assert data["message"] == "hello"
        assert "url" not in data


class TestTextFormatter:

    def test_plain_record_is_single_line(self):
        line = TextFormatter(use_color=False).format(_record())

        assert "WARNING" in line
        assert line.endswith("buidler_analyzer.test | hello")

    def test_error_suffix(self):
        error = GitHubError("boom", url="/repos/a/b/commits", status_code=500)

        line = TextFormatter(use_color=False).format(_error_record(error))

        assert line.endswith("[github_api_error status=500 url=/repos/a/b/commits]")

    def test_color_codes(self):
        assert "\033[33m" in TextFormatter(use_color=True).format(_record())
        assert "\033[" not in TextFormatter(use_color=False).format(_record())


def test_get_formatter():
    assert isinstance(get_formatter("JSON"), JsonFormatter)
    assert isinstance(get_formatter("text"), TextFormatter)


def test_setup_logging_writes_json_file(restore_root_logger, tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    log_file = tmp_path / "analyzer.log"

    setup_logging(level="debug", log_file=str(log_file), log_format="text")
    GitHubError("upstream down", url="/users/x", status_code=503).log()
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").propagate
    entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert entry["message"] == "GitHubError: upstream down"
    assert entry["status_code"] == 503
    assert entry["url"] == "/users/x"
