"""Synapse admin API client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from synapse_tui import __version__

_logger = logging.getLogger(__name__)

DEFAULT_HOST = "http://127.0.0.1:8008"
DEFAULT_TIMEOUT = 10.0
USER_AGENT = f"synapse-tui ({__version__})"

VALIDATE_PATH = "_synapse/admin/v1/username_available?username=a"
LIST_USERS_PATH = "_synapse/admin/v2/users?from={offset}&limit={limit}&guests=false"


class ErrorKind(Enum):
    """Failure classes of the data source boundary."""

    UNAUTHORIZED = "unauthorized"
    HOST_UNREACHABLE = "host_unreachable"
    INVALID_RESPONSE = "invalid_response"


class BackendError(Exception):
    """A request to the homeserver failed."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


def _bool_from_num(value: Any) -> bool:
    """Synapse reports some flags as 0/1 integers."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    raise ValueError(f"expected a boolean or integer, got {value!r}")


@dataclass(frozen=True)
class UserRecord:
    """One entry of the admin user list."""

    name: str
    displayname: str = ""
    admin: bool = False
    is_guest: bool = False
    deactivated: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> UserRecord:
        """Build from an admin API user object. Raises ValueError/KeyError on bad input."""
        return cls(
            name=str(data["name"]),
            displayname=str(data.get("displayname") or ""),
            admin=_bool_from_num(data.get("admin", False)),
            is_guest=_bool_from_num(data.get("is_guest", False)),
            deactivated=_bool_from_num(data.get("deactivated", False)),
        )


class SynapseClient:
    """Blocking client for the Synapse admin API.

    ``token_valid`` is False until ``validate_token()`` succeeds and drops back
    to False whenever the server answers 401.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        access_token: str = "",
        allow_invalid_certs: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.host = host.rstrip("/")
        self.access_token = access_token
        self.token_valid = False
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT},
            verify=not allow_invalid_certs,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    @property
    def requires_setup(self) -> bool:
        return not self.token_valid

    def set_credentials(self, host: str, access_token: str) -> None:
        self.host = host.strip().rstrip("/")
        self.access_token = access_token.strip()
        self.token_valid = False

    def validate_token(self) -> None:
        """Check the credentials against the server. Raises BackendError."""
        # There is no dedicated endpoint; any admin-only call will do.
        self._send("GET", VALIDATE_PATH)
        self.token_valid = True
        _logger.info("Access token accepted by %s", self.host)

    def list_users(self, offset: int, limit: int) -> list[UserRecord]:
        path = LIST_USERS_PATH.format(offset=offset, limit=limit)
        resp = self._send("GET", path)
        try:
            body = resp.json()
            users = [UserRecord.from_json(u) for u in body["users"]]
        except (ValueError, KeyError, TypeError) as e:
            raise BackendError(
                ErrorKind.INVALID_RESPONSE,
                f"Server response is invalid\n{resp.text}\n{e}",
            ) from e
        _logger.debug("Fetched %d users at offset %d", len(users), offset)
        return users

    def _send(self, method: str, path: str, expected_status: int = 200) -> httpx.Response:
        url = f"{self.host}/{path}"
        headers = {"Authorization": f"Bearer {self.access_token}"}
        try:
            resp = self._client.request(method, url, headers=headers)
        except UnicodeEncodeError as e:
            # Header values must be ASCII
            self.token_valid = False
            _logger.warning("%s %s not sent: %s", method, url, e)
            raise BackendError(ErrorKind.UNAUTHORIZED, "Error : token contains invalid characters") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            _logger.warning("%s %s failed: %s", method, url, e)
            raise BackendError(
                ErrorKind.HOST_UNREACHABLE,
                f"error sending request for url ({url}): {e}",
            ) from e

        status_line = f"{resp.status_code} {resp.reason_phrase}".strip()
        if resp.status_code == httpx.codes.UNAUTHORIZED:
            self.token_valid = False
            _logger.warning("%s %s returned %s", method, url, status_line)
            raise BackendError(ErrorKind.UNAUTHORIZED, f"{method} {url} returned {status_line}")
        if resp.status_code != expected_status:
            _logger.warning("%s %s returned %s", method, url, status_line)
            raise BackendError(ErrorKind.INVALID_RESPONSE, f"{method} {url} returned {status_line}")
        return resp
