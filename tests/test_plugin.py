"""Tests for pytest plugin integration."""

from __future__ import annotations

import json

import pytest

from pytest_bastion.config import BastionConfig
from pytest_bastion.plugin import _build_config

CONFTEST = """
import httpx
import pytest

from pytest_bastion import HttpxRequestExecutor


@pytest.fixture
def bastion_executor():
    def handler(request):
        if request.url.path == "/status":
            return httpx.Response(200, json={"code": 200})
        if request.url.path == "/down":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(404, json={"detail": "Not Found"})

    return HttpxRequestExecutor(base_url="http://testserver", transport=httpx.MockTransport(handler))
"""

TESTS = """
from dataclasses import dataclass

from pytest_bastion import GeneralRequest, StatusCodeAssertions


@dataclass
class Status:
    code: int


def test_passes(bastion):
    bastion("Status", GeneralRequest.get("/status")).bind(Status) \\
        .with_assertions(StatusCodeAssertions.expecting(200)).call()


def test_wrong_status(bastion):
    bastion("Missing", GeneralRequest.get("/missing")).bind(dict) \\
        .with_assertions(StatusCodeAssertions.expecting(200)).call()


def test_undecodable(bastion):
    bastion("Missing", GeneralRequest.get("/missing")).bind(Status).call()


def test_transport_error(bastion):
    bastion("Down", GeneralRequest.get("/down")).bind(Status).call()
"""


@pytest.fixture
def bastion_project(pytester: pytest.Pytester) -> pytest.Pytester:
    pytester.makeconftest(CONFTEST)
    pytester.makepyfile(test_api=TESTS)
    return pytester


class TestOutcomes:
    """Tests for turning call outcomes into test outcomes."""

    def test_outcomes(self, bastion_project):
        """Test failed and errored calls fail their tests."""
        result = bastion_project.runpytest()

        result.assert_outcomes(passed=1, failed=3)
        result.stdout.fnmatch_lines(
            [
                "E   *AssertionError: Expected status code to be one of [[]200[]], but was 404.",
                "E   *ModelDecodeError: Could not parse response into model object of type Status",
                "E   *RequestExecutionError: GET /down failed*",
            ]
        )

    def test_terminal_summary(self, bastion_project):
        """Test the run summary is printed."""
        result = bastion_project.runpytest()
        result.stdout.fnmatch_lines(["*- bastion -*", "4 calls: 1 passed, 2 failed, 1 errored"])

    def test_no_summary_without_calls(self, pytester):
        """Test runs without Bastion calls print no summary."""
        pytester.makepyfile("def test_plain():\n    assert True\n")

        result = pytester.runpytest()

        result.assert_outcomes(passed=1)
        result.stdout.no_fnmatch_line("*calls:*")

    def test_suppress_assertions_option(self, bastion_project):
        """Test suppression turns assertion failures into passes."""
        result = bastion_project.runpytest("--bastion-suppress-assertions", "-k", "wrong_status")
        result.assert_outcomes(passed=1)

    def test_report(self, bastion_project):
        """Test the JSON report is written."""
        bastion_project.runpytest("--bastion-report=reports/bastion.json")

        data = json.loads((bastion_project.path / "reports" / "bastion.json").read_text())
        assert data["total_calls"] == 4
        assert [c["outcome"] for c in data["calls"]] == ["passed", "failed", "failed", "error"]
        assert data["end_time"] is not None

    def test_marker_registered(self, pytester):
        """Test the bastion marker is registered."""
        result = pytester.runpytest("--markers")
        result.stdout.fnmatch_lines(["*@pytest.mark.bastion:*"])


class TestConfiguration:
    """Tests for configuration through pyproject.toml and the command line."""

    CONFIG_TEST = """
def test_config(bastion_config):
    assert bastion_config.base_url == {base_url!r}
    assert bastion_config.timeout == {timeout!r}
"""

    def test_pyproject_section(self, pytester):
        """Test [tool.bastion] is read from the rootdir."""
        pytester.makepyprojecttoml('[tool.bastion]\nbase_url = "http://from-file"\ntimeout = 4\n')
        pytester.makepyfile(self.CONFIG_TEST.format(base_url="http://from-file", timeout=4.0))

        pytester.runpytest().assert_outcomes(passed=1)

    def test_cli_overrides_pyproject(self, pytester):
        """Test CLI options win over the file."""
        pytester.makepyprojecttoml('[tool.bastion]\nbase_url = "http://from-file"\ntimeout = 4\n')
        pytester.makepyfile(self.CONFIG_TEST.format(base_url="http://from-cli", timeout=4.0))

        pytester.runpytest("--bastion-base-url=http://from-cli").assert_outcomes(passed=1)

    def test_timeout_option(self, pytester):
        """Test the timeout option."""
        pytester.makepyfile(self.CONFIG_TEST.format(base_url="", timeout=1.5))

        pytester.runpytest("--bastion-timeout=1.5").assert_outcomes(passed=1)

    def test_invalid_config_is_usage_error(self, pytester):
        """Test unknown options abort the run."""
        pytester.makepyprojecttoml('[tool.bastion]\nbase_uri = "http://typo"\n')
        pytester.makepyfile("def test_plain():\n    pass\n")

        result = pytester.runpytest()

        assert result.ret == pytest.ExitCode.USAGE_ERROR
        result.stderr.fnmatch_lines(["*Unknown [[]tool.bastion[]] options: base_uri*"])

    def test_executor_uses_config(self, pytester):
        """Test the default executor fixture is built from the config."""
        pytester.makepyfile(
            """
def test_executor(bastion_executor):
    assert bastion_executor.base_url == "http://cli"
"""
        )

        pytester.runpytest("--bastion-base-url=http://cli").assert_outcomes(passed=1)


class TestBuildConfig:
    """Tests for merging options into a BastionConfig."""

    def test_defaults_without_options(self, pytestconfig):
        """Test a session without options or [tool.bastion] gets defaults."""
        config = _build_config(pytestconfig)
        assert config == BastionConfig()
