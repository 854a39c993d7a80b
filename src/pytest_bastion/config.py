"""Configuration for pytest-bastion."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pytest_bastion.auth import resolve_env_value
from pytest_bastion.exceptions import BastionConfigurationError

# Python 3.11+ has tomllib, earlier versions need tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

if TYPE_CHECKING:
    from pytest_bastion.auth import AuthProvider

CONFIG_SECTION = "bastion"


@dataclass
class BastionConfig:
    """Settings shared by every Bastion builder a factory creates.

    Attributes:
        base_url: Base URL relative request URLs are resolved against.
        timeout: Request timeout in seconds.
        headers: Headers sent with every request. Values prefixed with ``$``
            are read from the environment.
        follow_redirects: Whether the executor follows redirects.
        suppress_assertions: Default suppression flag for new builders.
        log_events: Whether factories register a ``LoggingListener``.
        auth: Authentication applied to every request.
        report_path: Where the pytest plugin writes its JSON report.
    """

    base_url: str = ""
    timeout: float = 30.0
    headers: dict[str, str] = field(default_factory=dict)
    follow_redirects: bool = False
    suppress_assertions: bool = False
    log_events: bool = True
    auth: AuthProvider | None = None
    report_path: str | None = None

    def resolved_headers(self) -> dict[str, str]:
        """Return the default headers with ``$ENV`` references resolved.

        Raises:
            ValueError: If a referenced environment variable is not set.
        """
        return {name: resolve_env_value(value) for name, value in self.headers.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BastionConfig:
        """Create config from a dictionary such as the ``[tool.bastion]`` table.

        Examples:
            >>> config = BastionConfig.from_dict({"base_url": "https://api.example.com", "timeout": 5})
            >>> config.timeout
            5.0
        """
        defaults = cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown [tool.{CONFIG_SECTION}] options: {', '.join(unknown)}"
            raise BastionConfigurationError(msg)

        return cls(
            base_url=data.get("base_url", defaults.base_url),
            timeout=float(data.get("timeout", defaults.timeout)),
            headers=dict(data.get("headers", defaults.headers)),
            follow_redirects=data.get("follow_redirects", defaults.follow_redirects),
            suppress_assertions=data.get("suppress_assertions", defaults.suppress_assertions),
            log_events=data.get("log_events", defaults.log_events),
            auth=_parse_auth_config(data.get("auth")),
            report_path=data.get("report_path", defaults.report_path),
        )


def _parse_auth_config(auth_data: dict[str, Any] | None) -> AuthProvider | None:
    """Parse the ``[tool.bastion.auth]`` table.

    Example config in pyproject.toml::

        [tool.bastion.auth]
        bearer_token = "$API_TOKEN"

        # OR

        [tool.bastion.auth]
        api_key = "$API_KEY"
        query_param = "api_key"
    """
    if not auth_data:
        return None

    from pytest_bastion.auth import APIKeyAuth, BearerTokenAuth

    if "bearer_token" in auth_data:
        return BearerTokenAuth(auth_data["bearer_token"])
    if "api_key" in auth_data:
        return APIKeyAuth(
            auth_data["api_key"],
            header_name=auth_data.get("header_name"),
            query_param=auth_data.get("query_param"),
        )

    msg = f"[tool.{CONFIG_SECTION}.auth] needs either 'bearer_token' or 'api_key'"
    raise BastionConfigurationError(msg)


def load_config_from_pyproject(path: Path | None = None) -> BastionConfig:
    """Load configuration from the ``[tool.bastion]`` section of pyproject.toml.

    Args:
        path: Path to pyproject.toml. Defaults to the current working directory.

    Returns:
        The loaded config, or defaults if the file or section is missing.

    Raises:
        BastionConfigurationError: If the file cannot be parsed or holds invalid options.
    """
    if path is None:
        path = Path.cwd() / "pyproject.toml"

    if not path.exists():
        return BastionConfig()

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        msg = f"Failed to parse {path}: {e}"
        raise BastionConfigurationError(msg) from e

    config_data = data.get("tool", {}).get(CONFIG_SECTION, {})
    if not config_data:
        return BastionConfig()

    return BastionConfig.from_dict(config_data)


def merge_configs(
    cli_config: BastionConfig | None = None,
    file_config: BastionConfig | None = None,
) -> BastionConfig:
    """Merge CLI and file configs, with CLI taking precedence.

    A CLI value only wins when it differs from the built-in default, so
    options the user did not pass fall through to pyproject.toml.

    Examples:
        >>> file_cfg = BastionConfig(base_url="https://staging", timeout=5.0)
        >>> cli_cfg = BastionConfig(timeout=10.0)
        >>> merged = merge_configs(cli_cfg, file_cfg)
        >>> merged.base_url, merged.timeout
        ('https://staging', 10.0)
    """
    defaults = BastionConfig()
    if cli_config is None and file_config is None:
        return defaults
    if cli_config is None:
        return file_config or defaults
    if file_config is None:
        return cli_config

    merged: dict[str, Any] = {}
    for f in fields(BastionConfig):
        cli_value = getattr(cli_config, f.name)
        default_value = getattr(defaults, f.name)
        merged[f.name] = cli_value if cli_value != default_value else getattr(file_config, f.name)
    return BastionConfig(**merged)
