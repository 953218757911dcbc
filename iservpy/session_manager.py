"""Session management for IServ portals using requests."""

import dataclasses
import json
import logging
import re
from dataclasses import dataclass
from http.cookies import CookieError, SimpleCookie
from pathlib import Path
from typing import Any

import requests

from iservpy.config import DEFAULT_COOKIES_FILE, configure_logging

logger = logging.getLogger(__name__)

LOGIN_PATH = "/iserv/login_check"
LANDING_PATH = "iserv/"

# Statuses in [200, 303) count as success so the login redirect stays visible.
SUCCESS_STATUS_MIN = 200
SUCCESS_STATUS_MAX = 303

# A comma starts a new cookie only when a "name=" follows; "expires=Wed, 21 Oct" stays whole.
_FOLDED_COOKIE_SPLIT = re.compile(r",\s*(?=[^;,=\s]+=)")


@dataclass(frozen=True)
class TransportConfig:
    """Immutable request defaults shared by every call of a session."""

    base_url: str
    cookie_header: str = ""
    timeout: float = 30

    def headers(self) -> dict[str, str]:
        """Default headers, carrying the session cookie."""
        return {"Cookie": self.cookie_header}

    def url(self, path: str) -> str:
        """Resolve a path against the base URL; absolute URLs pass through."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"


def save_cookies(cookie_header: str, filepath: str | Path) -> None:
    """
    Save a cookie header to a JSON file, replacing any previous record.

    Args:
        cookie_header: Serialized ``Cookie`` header value
        filepath: Path to save the cookies file
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(cookie_header, f, ensure_ascii=False)

    logger.debug("Cookies saved to %s", filepath)


def load_cookies(filepath: str | Path) -> str:
    """
    Load a cookie header from a JSON file.

    Args:
        filepath: Path to the cookies file

    Returns:
        The stored ``Cookie`` header value
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Cookies file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    # Older records hold the raw list of Set-Cookie lines
    if isinstance(data, list):
        return "; ".join(
            cookie_header_from_set_cookie(str(line)) for line in data if line
        )
    return str(data or "")


def cookie_header_from_set_cookie(set_cookie: str) -> str:
    """Fold one ``Set-Cookie`` line into ``name=value`` pairs, dropping attributes.

    Lines that cannot be parsed are returned verbatim.
    """
    parsed = SimpleCookie()
    try:
        parsed.load(set_cookie)
    except CookieError:
        parsed.clear()
    if not parsed:
        logger.debug("Could not parse Set-Cookie value, keeping it verbatim")
        return set_cookie
    return "; ".join(f"{name}={morsel.value}" for name, morsel in parsed.items())


def split_set_cookie(folded: str) -> list[str]:
    """Split a comma-folded ``Set-Cookie`` header back into single lines."""
    return [line.strip() for line in _FOLDED_COOKIE_SPLIT.split(folded) if line.strip()]


def _set_cookie_lines(response: requests.Response) -> list[str]:
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        lines = raw_headers.getlist("Set-Cookie")
        if lines:
            return list(lines)
    set_cookie = response.headers.get("Set-Cookie")
    if not set_cookie:
        return []
    return split_set_cookie(set_cookie)


def cookie_header_from_response(response: requests.Response) -> str:
    """Build the ``Cookie`` header for follow-up requests from a login response."""
    if response.cookies:
        return "; ".join(f"{name}={value}" for name, value in response.cookies.items())
    return "; ".join(cookie_header_from_set_cookie(line) for line in _set_cookie_lines(response))


class IServSession:
    """Cookie session against one IServ host."""

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        keepalive: bool = False,
        log: bool = False,
        reuse_cookies: bool = False,
        cookie_file: str | Path = DEFAULT_COOKIES_FILE,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        """
        Initialize the session.

        Args:
            host: Host of the IServ instance, without protocol
            username: Username used for login
            password: Password used for login
            keepalive: Accepted for compatibility, currently has no effect
            log: Enable debug logging
            reuse_cookies: Save the session cookie and reuse it on the next run.
                Only works for one user per cookie file.
            cookie_file: Path of the persisted cookie record
            timeout: Request timeout in seconds
            session: Optional pre-configured requests.Session
        """
        self.host = host
        self.username = username
        self._password = password
        self.keepalive = keepalive
        self.reuse_cookies = reuse_cookies
        self.cookie_file = Path(cookie_file)
        self.session = session if session is not None else requests.Session()

        if log:
            configure_logging(logging.DEBUG)

        self._transport = TransportConfig(
            base_url=f"https://{host}",
            cookie_header=self._get_presaved_cookies() or "",
            timeout=timeout,
        )

    @property
    def transport(self) -> TransportConfig:
        return self._transport

    @property
    def cookie_header(self) -> str:
        return self._transport.cookie_header

    @property
    def is_authenticated(self) -> bool:
        return bool(self._transport.cookie_header)

    def request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """
        Make a request with the session cookie.

        Redirects are never followed. Statuses outside [200, 303) raise.

        Args:
            method: HTTP method
            path: Path relative to the host, or an absolute URL
            **kwargs: Additional arguments passed to requests.Session.request

        Returns:
            Response object

        Raises:
            requests.HTTPError: If the response status is not a success status
        """
        transport = self._transport
        headers = transport.headers()
        headers.update(kwargs.pop("headers", None) or {})
        kwargs.setdefault("timeout", transport.timeout)
        kwargs["allow_redirects"] = False

        response = self.session.request(
            method, transport.url(path), headers=headers, **kwargs
        )
        _raise_for_status(response)
        return response

    def get(self, path: str, **kwargs: Any) -> requests.Response:
        """Make a GET request. See :meth:`request`."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> requests.Response:
        """Make a POST request. See :meth:`request`."""
        return self.request("POST", path, **kwargs)

    def login(self) -> None:
        """Log in, unless a reused cookie is still accepted by the server."""
        if self.reuse_cookies and self.is_authenticated and self.is_cookie_valid():
            logger.debug("Skipping login since cookies are already valid")
            return

        logger.debug("Logging in to %s as %s", self.host, self.username)
        response = self.post(
            LOGIN_PATH,
            data={"_username": self.username, "_password": self._password},
        )

        cookie_header = cookie_header_from_response(response)
        self._transport = dataclasses.replace(self._transport, cookie_header=cookie_header)
        self._save_cookies(cookie_header)
        logger.debug("Logged in (status %s)", response.status_code)

    def is_cookie_valid(self) -> bool:
        """Check whether the current cookie is still accepted by the server."""
        try:
            self.get(LANDING_PATH)
        except requests.RequestException as e:
            status = getattr(e.response, "status_code", None)
            logger.debug("Cookies NOT valid. Check returned %s (%s)", status, e)
            return False
        logger.debug("Cookies are valid")
        return True

    def _get_presaved_cookies(self) -> str | None:
        logger.debug("Trying to load saved cookies")
        if self.reuse_cookies and self.cookie_file.exists():
            logger.debug("Found saved cookies in %s", self.cookie_file)
            return load_cookies(self.cookie_file)
        logger.debug("No pre-saved cookies found")
        return None

    def _save_cookies(self, cookie_header: str) -> None:
        if self.reuse_cookies:
            save_cookies(cookie_header, self.cookie_file)


def _raise_for_status(response: requests.Response) -> None:
    status = response.status_code
    if SUCCESS_STATUS_MIN <= status < SUCCESS_STATUS_MAX:
        return
    raise requests.HTTPError(
        f"{status} Error: {response.reason} for url: {response.url}",
        response=response,
    )
