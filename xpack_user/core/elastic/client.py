"""Low-level HTTP clients for the Elasticsearch security API.

One client class per supported cluster generation. The classes share the
request plumbing but expose different API surfaces: the 5.x client has no
security user endpoints at all.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Type, Union
from urllib.parse import quote

import requests

from ..exceptions import UnsupportedClientError
from .exceptions import ElasticError, Elastic5Error, Elastic6Error, Elastic7Error

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 5


class ElasticClient:
    """HTTP client for one Elasticsearch cluster.

    Usage:
        client = Elastic7Client("http://localhost:9200")
        info = client.info()
    """

    family = "elastic"
    error_class: Type[ElasticError] = ElasticError

    def __init__(self, base_url: str, timeout: float = REQUEST_TIMEOUT):
        """Initialize client.

        Args:
            base_url: Cluster base URL (e.g. http://localhost:9200)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base_url!r})"

    def perform_request(
        self,
        method: str,
        path: str,
        body: Optional[Union[bytes, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Execute one request and return the decoded JSON body.

        Args:
            method: HTTP verb
            path: API path starting with "/"
            body: Raw JSON request body

        Returns:
            Decoded response body, or None when the response is empty

        Raises:
            ElasticError: Family-specific subclass on HTTP status >= 400
        """
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        resp = requests.request(method, url, data=body, headers=headers, timeout=self.timeout)
        self._handle_error(resp)
        if not resp.content:
            return None
        return resp.json()

    def info(self) -> Dict[str, Any]:
        """Return the cluster root document (name, version, tagline)."""
        return self.perform_request("GET", "/") or {}

    def _handle_error(self, resp: requests.Response) -> None:
        """Raise the family error class when the response indicates failure."""
        if resp.status_code < 400:
            return

        reason = resp.text
        error_type = None
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                error_type = error.get("type")
                reason = error.get("reason") or reason
            elif isinstance(error, str):
                reason = error
        raise self.error_class(resp.status_code, reason, resp.url or "", error_type=error_type)


class _SecurityUserAPI(ElasticClient):
    """Security user endpoints shared by the 6.x and 7.x clients."""

    user_path = ""

    def _user_url(self, name: str) -> str:
        return f"{self.user_path}/{quote(name, safe='')}"

    def xpack_security_put_user(self, name: str, body: Union[bytes, str]) -> Optional[Dict[str, Any]]:
        """Create or update a user."""
        return self.perform_request("PUT", self._user_url(name), body=body)

    def xpack_security_get_user(self, name: str) -> Dict[str, Any]:
        """Fetch a user; the response maps the username to its document.

        Raises:
            ElasticError: With status 404 if the response does not carry the user
        """
        path = self._user_url(name)
        res = self.perform_request("GET", path) or {}
        if name not in res:
            raise self.error_class(404, f"user [{name}] not found", f"{self.base_url}{path}")
        return res

    def xpack_security_delete_user(self, name: str) -> Optional[Dict[str, Any]]:
        """Delete a user."""
        return self.perform_request("DELETE", self._user_url(name))


class Elastic7Client(_SecurityUserAPI):
    """Client for 7.x and later clusters."""

    family = "elastic7"
    error_class = Elastic7Error
    user_path = "/_security/user"


class Elastic6Client(_SecurityUserAPI):
    """Client for 6.x clusters."""

    family = "elastic6"
    error_class = Elastic6Error
    user_path = "/_xpack/security/user"


class Elastic5Client(ElasticClient):
    """Client for 5.x clusters. No security user endpoints."""

    family = "elastic5"
    error_class = Elastic5Error


def _major_version(number: str) -> int:
    try:
        return int(str(number).split(".", 1)[0])
    except ValueError:
        raise UnsupportedClientError(f"unrecognized elasticsearch version: {number!r}") from None


def create_client(
    base_url: str,
    version: Optional[int] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> ElasticClient:
    """Build the client matching the cluster generation.

    Args:
        base_url: Cluster base URL
        version: Major version; when omitted the cluster is asked via GET /
        timeout: Per-request timeout in seconds

    Returns:
        Elastic7Client, Elastic6Client or Elastic5Client

    Raises:
        UnsupportedClientError: If the major version is older than 5
    """
    if version is None:
        probe = ElasticClient(base_url, timeout=timeout)
        number = probe.info().get("version", {}).get("number", "")
        version = _major_version(number)
        logger.info("Detected Elasticsearch %s at %s", number, probe.base_url)

    if version >= 7:
        return Elastic7Client(base_url, timeout=timeout)
    if version == 6:
        return Elastic6Client(base_url, timeout=timeout)
    if version == 5:
        return Elastic5Client(base_url, timeout=timeout)
    raise UnsupportedClientError(f"unsupported elasticsearch major version: {version}")
