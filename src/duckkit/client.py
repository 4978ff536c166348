"""
HTTP client for the platform's JSON API.

Thin wrapper around httpx.Client that attaches credentials, turns non-2xx
responses into APIError, and implements the cursor pagination contract
shared by every list endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from duckkit.errors import APIError, ReadStateError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_PAGE_SIZE = 1000


class APIClient:
    """
    Session-scoped client for the platform API.

    Usage:
        client = APIClient("http://localhost:8080/v1", token="...")
        principals = client.list_all("/principals")
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API root including any version prefix (e.g. ``/v1``)
            token: Bearer token; takes precedence over api_key
            api_key: API key sent as ``X-API-Key``
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif api_key:
            headers["X-API-Key"] = api_key

        self.base_url = base_url.rstrip("/")
        self._token = token
        self._api_key = api_key if not token else None
        self._http = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def uses_api_key(self) -> bool:
        """True when the session authenticates with an API key."""
        return self._api_key is not None

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # REQUESTS
    # =========================================================================

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send a request and decode the JSON response.

        Raises:
            APIError: On any non-2xx status
            TransportError: When no response was received
        """
        try:
            response = self._http.request(method, path, params=params, json=json)
        except httpx.TransportError as e:
            raise TransportError(method, path, e) from e

        if response.is_error:
            raise _api_error(response)

        if not response.content:
            return {}
        body = response.json()
        return body if isinstance(body, dict) else {"data": body}

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("PATCH", path, json=json)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("PUT", path, json=json)

    def delete(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return self.request("DELETE", path, params=params, json=json)

    # =========================================================================
    # PAGINATION
    # =========================================================================

    def list_all(
        self,
        path: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Collect every item of a paged list endpoint.

        Requests pages with ``max_results`` and ``page_token`` until the
        server returns an empty ``next_page_token``.

        Raises:
            ReadStateError: If the server hands back a token it already issued
        """
        items: List[Dict[str, Any]] = []
        seen_tokens = set()
        page_token = ""

        while True:
            query: Dict[str, Any] = dict(params or {})
            query["max_results"] = page_size
            if page_token:
                query["page_token"] = page_token

            body = self.get(path, params=query)
            items.extend(body.get("data") or [])

            page_token = body.get("next_page_token") or ""
            if not page_token:
                return items
            if page_token in seen_tokens:
                raise ReadStateError(
                    path, ValueError(f"pagination token {page_token!r} repeated")
                )
            seen_tokens.add(page_token)


def _api_error(response: httpx.Response) -> APIError:
    message = response.text.strip()
    code = ""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = str(body.get("message") or body.get("error") or body.get("detail") or message)
        code = str(body.get("code") or body.get("error_code") or "")
    if not message:
        message = response.reason_phrase
    return APIError(response.status_code, message, code=code)


def is_not_found(error: Exception) -> bool:
    return isinstance(error, APIError) and error.status_code == 404


def is_conflict(error: Exception) -> bool:
    """True for 409, or any API error whose message says the resource exists."""
    if not isinstance(error, APIError):
        return False
    return error.status_code == 409 or "already exists" in error.message.lower()


__all__ = ["APIClient", "is_conflict", "is_not_found"]
