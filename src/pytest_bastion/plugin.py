"""Pytest plugin for Bastion API tests.

Tests receive builders through the ``bastion`` fixture. Every builder created
that way reports to a per-test recorder; once the test body returns, the first
failed or errored call fails the test with its cause::

    def test_user(bastion):
        bastion("Fetch user", GeneralRequest.get("/users/1")) \\
            .bind(User) \\
            .with_assertions(StatusCodeAssertions.expecting(200)) \\
            .call()
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from pytest_bastion.config import BastionConfig, load_config_from_pyproject, merge_configs
from pytest_bastion.events.base import BastionErrorEvent, BastionFailedEvent
from pytest_bastion.events.listeners import EventRecorder
from pytest_bastion.exceptions import BastionConfigurationError
from pytest_bastion.execution.client import HttpxRequestExecutor
from pytest_bastion.factory import BastionFactory
from pytest_bastion.reporting.metrics import MetricsListener, RunMetrics

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from pytest_bastion.bastion import Bastion
    from pytest_bastion.execution.client import RequestExecutor
    from pytest_bastion.request.base import Request

_config_key = pytest.StashKey[BastionConfig]()
_metrics_key = pytest.StashKey[RunMetrics]()
_recorder_key = pytest.StashKey[EventRecorder]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add pytest command line options."""
    group = parser.getgroup("bastion")
    group.addoption(
        "--bastion-base-url",
        action="store",
        default=None,
        help="Base URL for Bastion requests (overrides [tool.bastion] base_url)",
    )
    group.addoption(
        "--bastion-timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: 30.0)",
    )
    group.addoption(
        "--bastion-suppress-assertions",
        action="store_true",
        default=False,
        help="Run Bastion calls without their assertions; callbacks still run",
    )
    group.addoption(
        "--bastion-report",
        action="store",
        default=None,
        help="Write a JSON report of all Bastion calls to this path",
    )


def _build_config(config: pytest.Config) -> BastionConfig:
    """Merge CLI options over ``[tool.bastion]`` in the rootdir's pyproject.toml."""
    file_config = load_config_from_pyproject(Path(config.rootpath) / "pyproject.toml")
    defaults = BastionConfig()
    timeout = config.getoption("--bastion-timeout", default=None)
    cli_config = BastionConfig(
        base_url=config.getoption("--bastion-base-url", default=None) or defaults.base_url,
        timeout=timeout if timeout is not None else defaults.timeout,
        suppress_assertions=config.getoption("--bastion-suppress-assertions", default=False),
        report_path=config.getoption("--bastion-report", default=None),
    )
    return merge_configs(cli_config, file_config)


def pytest_configure(config: pytest.Config) -> None:
    """Register the marker and load configuration."""
    config.addinivalue_line("markers", "bastion: mark test as a Bastion API test")
    try:
        config.stash[_config_key] = _build_config(config)
    except BastionConfigurationError as e:
        raise pytest.UsageError(str(e)) from e
    config.stash[_metrics_key] = RunMetrics()


@pytest.fixture(scope="session")
def bastion_config(request: pytest.FixtureRequest) -> BastionConfig:
    """Configuration merged from CLI options and pyproject.toml.

    Priority (highest to lowest):
    1. CLI options
    2. pyproject.toml [tool.bastion]
    3. Built-in defaults
    """
    return request.config.stash.get(_config_key, BastionConfig())


@pytest.fixture
def bastion_executor(bastion_config: BastionConfig) -> RequestExecutor:
    """Transport used by the ``bastion`` fixture. Override to test in-process apps."""
    return HttpxRequestExecutor.from_config(bastion_config)


@pytest.fixture
def bastion_factory(
    request: pytest.FixtureRequest,
    bastion_config: BastionConfig,
    bastion_executor: RequestExecutor,
) -> BastionFactory:
    """Factory whose builders report to this test's outcome and the run metrics."""
    recorder = EventRecorder()
    request.node.stash[_recorder_key] = recorder
    listeners: list[Any] = [recorder]
    run_metrics = request.config.stash.get(_metrics_key, None)
    if run_metrics is not None:
        listeners.append(MetricsListener(run_metrics))
    return BastionFactory(bastion_config, executor=bastion_executor, listeners=listeners)


@pytest.fixture
def bastion(bastion_factory: BastionFactory) -> Callable[[str | None, Request], Bastion[Any]]:
    """Create a Bastion builder: ``bastion(message, request)``."""
    return bastion_factory.get_bastion


@pytest.hookimpl(wrapper=True)
def pytest_runtest_call(item: pytest.Item) -> Generator[None, Any, Any]:
    """Fail a test whose body returned normally but whose Bastion calls did not pass."""
    result = yield
    recorder = item.stash.get(_recorder_key, None)
    if recorder is not None:
        for event in recorder.events:
            if isinstance(event, (BastionFailedEvent, BastionErrorEvent)):
                raise event.cause
    return result


def pytest_terminal_summary(terminalreporter: Any, exitstatus: int, config: pytest.Config) -> None:
    """Print a one-line summary of the Bastion calls made during the run."""
    run_metrics = config.stash.get(_metrics_key, None)
    if run_metrics is None or not run_metrics.calls:
        return
    terminalreporter.write_sep("-", "bastion")
    terminalreporter.write_line(run_metrics.summary())


def pytest_unconfigure(config: pytest.Config) -> None:
    """Write the JSON report if one was requested."""
    run_metrics = config.stash.get(_metrics_key, None)
    bastion_config = config.stash.get(_config_key, None)
    if run_metrics is None or bastion_config is None or not bastion_config.report_path:
        return
    run_metrics.finish()
    report_path = run_metrics.write_json(Path(config.rootpath) / bastion_config.report_path)
    print(f"\npytest-bastion: JSON report written to {report_path}")
