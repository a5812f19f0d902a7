from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from ..core.constants import DEFAULT_API_TIMEOUT
from ..core.exceptions import ApiError

logger = logging.getLogger(__name__)


@dataclass
class ApiConfig:
    base_url: str
    timeout: float = DEFAULT_API_TIMEOUT


class ApiClient:
    """Thin wrapper around the overtime backend's REST API.

    Attaches ``Authorization: Bearer <token>`` when the token provider returns one.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
    ):
        self._config = config
        self._token_provider = token_provider or (lambda: None)
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self, token: Optional[str] = None) -> dict:
        token = token or self._token_provider()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def request(self, method: str, path: str, *, token: Optional[str] = None, **kwargs) -> requests.Response:
        """Send one request; ``token`` overrides the provider for calls made after the store was cleared."""
        url = self._url(path)
        try:
            resp = self._session.request(
                method,
                url,
                headers=self._headers(token),
                timeout=self._config.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiError(f"Backend unreachable: {e}") from e

        if resp.status_code >= 400:
            message = self._error_message(resp)
            logger.warning("%s %s -> %s %s", method, url, resp.status_code, message)
            raise ApiError(message, status=resp.status_code)
        return resp

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text[:200] or f"HTTP {resp.status_code}"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {resp.status_code}"

    def get_json(self, path: str, **kwargs) -> Any:
        return self._json(self.request("GET", path, **kwargs))

    def post_json(self, path: str, data: Optional[dict] = None, *, token: Optional[str] = None) -> Any:
        return self._json(self.request("POST", path, token=token, json=data or {}))

    def put_json(self, path: str, data: Optional[dict] = None) -> Any:
        return self._json(self.request("PUT", path, json=data or {}))

    def delete(self, path: str, data: Optional[dict] = None) -> Any:
        return self._json(self.request("DELETE", path, json=data))

    def get_bytes(self, path: str, **kwargs) -> bytes:
        return self.request("GET", path, **kwargs).content

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text
