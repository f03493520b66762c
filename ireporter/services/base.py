"""Connection and session handling for the ConMas API.

The server exposes a single endpoint, ``/ConMasAPI/Rests/APIExecute.aspx``,
that takes a ``command`` field and answers with XML. IReporterConnection
owns that endpoint and the session cookie:

- login/logout around every command (no long-lived session)
- form-encoded posts for read commands, multipart posts for uploads
- HTTP and XML failures mapped to ireporter exceptions

Operations on one connection are serialized by a lock, since login and logout
share the single session slot.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Optional, Tuple, Union, cast

import requests

from ..config import IReporterConfig
from ..core import (
    AuthenticationError,
    IReporterError,
    LogContext,
    MissingCredentialsError,
    TransportError,
    get_logger,
    validate_domain,
    validate_timeout,
)
from ..responses import CommandResponse, LoginResponse, parse_response

API_PATH = "/ConMasAPI/Rests/APIExecute.aspx"
SESSION_COOKIE_NAME = "ASP.NET_SessionId"

Timeout = Union[None, float, Tuple[Optional[float], Optional[float]]]


def wire_value(value: Any) -> str:
    """Format a parameter the way the server expects (``true``/``false`` for bools)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def add_param(
    params: dict[str, str], name: str, value: Any, *, skip_empty: bool = False
) -> None:
    """Set ``params[name]`` unless the value is absent.

    With ``skip_empty`` an empty string also counts as absent.
    """
    if value is None or (skip_empty and value == ""):
        return
    params[name] = wire_value(value)


class IReporterConnection:
    """Session gateway and HTTP transport for one iReporter server.

    Usage:
        conn = IReporterConnection.from_config(cfg)
        response = conn.execute("GetReportList")

        # Or with an existing session cookie and no credentials
        conn = IReporterConnection(domain, session_id="ASP.NET_SessionId=abc")
    """

    def __init__(
        self,
        domain: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        *,
        session_id: Optional[str] = None,
        verify_tls: bool = True,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the connection.

        Args:
            domain: Server base URL (e.g., https://ireporter.example.com).
            username: API login user.
            password: API login password.
            session_id: Existing ``ASP.NET_SessionId=...`` cookie to reuse once.
            verify_tls: Whether to verify TLS certificates.
            connect_timeout: Optional connect timeout in seconds.
            read_timeout: Optional read timeout in seconds.
            logger: Optional logger instance.

        Raises:
            InvalidURLError: If the domain is not an http(s) URL.
        """
        self.domain = validate_domain(domain)
        self.endpoint = f"{self.domain}{API_PATH}"
        self.username = username
        self._password = password
        self.session_id = session_id
        self.verify_tls = verify_tls
        self.connect_timeout = validate_timeout(connect_timeout, "connect_timeout")
        self.read_timeout = validate_timeout(read_timeout, "read_timeout")
        self.log = logger or get_logger(__name__)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: IReporterConfig) -> "IReporterConnection":
        """Create a connection from load_config() output."""
        return cls(
            domain=cfg["domain"],
            username=cfg.get("username") or None,
            password=cfg.get("password") or None,
            verify_tls=cfg.get("verify_tls", True),
            connect_timeout=cfg.get("http_connect_timeout"),
            read_timeout=cfg.get("http_read_timeout"),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self._password)

    @property
    def is_authenticated(self) -> bool:
        return self.session_id is not None

    @property
    def http_timeout(self) -> Timeout:
        if self.connect_timeout is None and self.read_timeout is None:
            return None
        return (self.connect_timeout, self.read_timeout)

    # =========================================================================
    # Transport
    # =========================================================================

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.session_id:
            headers["Cookie"] = self.session_id
        return headers

    def post(
        self,
        command: str,
        *,
        data: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        """POST one command to the API endpoint.

        Without ``files`` the body is form-urlencoded; with ``files`` it is
        multipart/form-data. The session cookie is sent when present.

        Raises:
            TransportError: On network failure or a non-2xx status.
        """
        body = {"command": command, **(data or {})}
        try:
            response = requests.post(
                self.endpoint,
                data=body,
                files=files,
                headers=self._headers(),
                timeout=self.http_timeout,
                verify=self.verify_tls,
                allow_redirects=False,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(command, e) from e
        self.log.debug("%s -> HTTP %d", command, response.status_code)
        return response

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def _missing_credentials(self) -> list[str]:
        return [
            name
            for name, val in (("username", self.username), ("password", self._password))
            if not val
        ]

    def require_credentials(self) -> None:
        if self.session_id or self.has_credentials:
            return
        raise MissingCredentialsError(self._missing_credentials())

    @staticmethod
    def _extract_session_token(response: requests.Response) -> Optional[str]:
        value = response.cookies.get(SESSION_COOKIE_NAME)
        if not value:
            return None
        return f"{SESSION_COOKIE_NAME}={value}"

    def login(self) -> None:
        """Log in and store the session cookie.

        Raises:
            MissingCredentialsError: If username or password is missing.
            AuthenticationError: If the server rejects the login or sends no cookie.
            TransportError: On HTTP failure.
            ParseError: If the response is not XML.
        """
        if not self.has_credentials:
            raise MissingCredentialsError(self._missing_credentials())

        response = self.post(
            "Login", data={"user": self.username or "", "password": self._password or ""}
        )
        result = cast(LoginResponse, parse_response("Login", response.text))

        if not result.succeeded:
            raise AuthenticationError(self.domain, result.remark or "Unknown error")

        token = self._extract_session_token(response)
        if not token:
            raise AuthenticationError(
                self.domain, "login succeeded but no session cookie was returned"
            )

        self.session_id = token
        self.log.info("Logged in to %s as %s", self.domain, self.username)

    def logout(self) -> None:
        """End the session. Failures are logged, never raised."""
        if not self.session_id and not self.username:
            return
        try:
            self.post("Logout")
            self.log.debug("Logged out of %s", self.domain)
        except IReporterError as e:
            self.log.warning("Logout failed or session already invalid: %s", e)
        finally:
            self.session_id = None

    def ensure_authenticated(self) -> None:
        """Log in unless a session cookie is already held."""
        if self.session_id:
            return
        self.login()

    # =========================================================================
    # Command execution
    # =========================================================================

    def execute(
        self,
        command: str,
        params: Optional[Mapping[str, str]] = None,
        *,
        files: Optional[Mapping[str, Any]] = None,
    ) -> CommandResponse:
        """Run one authenticated command and return the parsed response.

        The sequence is: check credentials, log in if needed, post, parse,
        then log out on every exit path.

        Raises:
            MissingCredentialsError: If there is neither a session nor credentials.
            AuthenticationError, TransportError, ParseError: As raised by the steps.
        """
        with self._lock:
            with LogContext(command, self.log, domain=self.domain):
                self.require_credentials()
                try:
                    self.ensure_authenticated()
                    response = self.post(command, data=params, files=files)
                    return parse_response(command, response.text)
                finally:
                    if self.session_id:
                        self.logout()

    def close(self) -> None:
        """Log out if a session is still held."""
        if self.session_id:
            self.logout()

    def __enter__(self) -> "IReporterConnection":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
