from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, TypedDict

from dotenv import load_dotenv

from .core import InvalidConfigurationError, MissingCredentialsError


class IReporterConfig(TypedDict):
    """Configuration dictionary for an iReporter connection.

    Attributes:
        domain: Base URL of the iReporter server (e.g., https://ireporter.example.com)
        username: Login user for the ConMas API
        password: Login password for the ConMas API
        verify_tls: Whether to verify TLS certificates (default True)
        http_connect_timeout: Optional HTTP connect timeout in seconds
        http_read_timeout: Optional HTTP read timeout in seconds
    """

    domain: str
    username: str
    password: str
    verify_tls: bool
    http_connect_timeout: Optional[int]
    http_read_timeout: Optional[int]


def _str_to_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    value_norm = value.strip().lower()
    if value_norm in {"1", "true", "yes", "y", "on"}:
        return True
    if value_norm in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_timeout(name: str) -> Optional[int]:
    """Read an optional positive integer timeout from the environment."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise InvalidConfigurationError(name, raw, "must be an integer") from exc
    if value <= 0:
        raise InvalidConfigurationError(name, raw, "must be positive")
    return value


def load_config(
    env_path: Optional[Path] = None, *, require_credentials: bool = True
) -> IReporterConfig:
    """Load configuration from environment variables and optional .env files.

    Behavior:
        - If env_path is given, load that file with override=True (it wins over OS env).
        - Else, if a .env exists in the current working directory, load it with
          override=False.
        - Finally, read the variables from the environment.

    Required variables:
        IRPT_DOMAIN: Base URL of the iReporter server
        IRPT_USERNAME: API login user
        IRPT_PASSWORD: API login password

    Optional variables:
        IRPT_VERIFY_TLS: Verify TLS certificates (default: true)
        IRPT_HTTP_CONNECT_TIMEOUT: Connect timeout in seconds (default: none)
        IRPT_HTTP_READ_TIMEOUT: Read timeout in seconds (default: none)

    Raises:
        FileNotFoundError: If an explicit env_path does not exist.
        MissingCredentialsError: If required variables are missing.
        InvalidConfigurationError: If a timeout is not a positive integer.
    """
    if env_path:
        p = Path(env_path).expanduser()
        if not p.exists():
            raise FileNotFoundError(f"Environment file not found: {p}")
        load_dotenv(p, override=True)
    else:
        default_env = Path.cwd() / ".env"
        if default_env.exists():
            load_dotenv(default_env, override=False)

    domain = os.getenv("IRPT_DOMAIN")
    username = os.getenv("IRPT_USERNAME")
    password = os.getenv("IRPT_PASSWORD")

    if require_credentials:
        missing = [
            name
            for name, val in (
                ("IRPT_DOMAIN", domain),
                ("IRPT_USERNAME", username),
                ("IRPT_PASSWORD", password),
            )
            if not val
        ]
        if missing:
            raise MissingCredentialsError(missing)

    return IReporterConfig(
        domain=domain or "",
        username=username or "",
        password=password or "",
        verify_tls=_str_to_bool(os.getenv("IRPT_VERIFY_TLS"), default=True),
        http_connect_timeout=_parse_timeout("IRPT_HTTP_CONNECT_TIMEOUT"),
        http_read_timeout=_parse_timeout("IRPT_HTTP_READ_TIMEOUT"),
    )
