"""
HTTP client for the Coach Builder API.

Thin wrapper over httpx: one method per endpoint, JSON in and out, and
every non-2xx response turned into an ApiError carrying the server's
message. No retries; timeouts are httpx's defaults.
"""

import logging
from typing import Any, Optional

import httpx

from ..core.accounts import ACCESS_CODE_HEADER

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    A failed API call.

    status_code is None when the request never got a response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_auth_error(self) -> bool:
        """401/403: the stored session should be discarded."""
        return self.status_code in (401, 403)


class ApiClient:
    """
    Calls the API on behalf of a logged-in coach or the admin.

    Pass an existing httpx.Client (FastAPI's TestClient works) to reuse its
    transport; otherwise one is created for base_url.
    """

    def __init__(self, base_url: str = "", http: Optional[httpx.Client] = None) -> None:
        self._http = http if http is not None else httpx.Client(base_url=base_url)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------

    def login(self, code: str) -> dict[str, Any]:
        return self._request("POST", "/api/login", body={"code": code})

    def create_workout_log(self, access_code: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/api/workout-logs", access_code=access_code, body=payload)

    def list_workout_logs(self, access_code: str) -> list[dict[str, Any]]:
        return self._request("GET", "/api/workout-logs", access_code=access_code) or []

    def delete_all_workout_logs(self, access_code: str) -> dict[str, Any]:
        return self._request("DELETE", "/api/workout-logs", access_code=access_code)

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        access_code: Optional[str] = None,
        body: Optional[Any] = None,
    ) -> Any:
        headers = {ACCESS_CODE_HEADER: access_code} if access_code else {}

        try:
            response = self._http.request(method, path, headers=headers, json=body)
        except httpx.RequestError as e:
            logger.error(
                "API request failed",
                extra={"method": method, "path": path, "error": str(e)}
            )
            raise ApiError(f"Request failed: {e}") from e

        data = self._decode(response)

        if not response.is_success:
            message = None
            if isinstance(data, dict):
                message = data.get("detail") or data.get("error")
            if not isinstance(message, str) or not message:
                message = f"Request failed ({response.status_code})"

            logger.debug(
                "API returned an error",
                extra={"method": method, "path": path, "status_code": response.status_code}
            )
            raise ApiError(message, response.status_code)

        return data

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None
