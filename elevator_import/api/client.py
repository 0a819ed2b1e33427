from __future__ import annotations

from typing import Any

import requests

"""HTTP client for the elevator management REST service.

Endpoints used:
- POST   /auth/login       {email, password} -> {token}
- GET    /elevators        -> {data: [elevator, ...]}
- POST   /elevators        {elevator}
- DELETE /elevators/{id}

The client authenticates once and sends ``Authorization: Bearer <token>`` on
every later call. Create / delete return the raw ``requests.Response`` so the
caller can decide how to count a non-success status.
"""

__all__ = [
    "ApiError",
    "ApiAuthError",
    "ElevatorApiClient",
]


class ApiError(Exception):
    pass


class ApiAuthError(ApiError):
    pass


class ElevatorApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.token: str | None = None

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def login(self, email: str, password: str) -> str:
        """Authenticate and keep the bearer token.

        Raises:
            ApiAuthError: On transport failure, non-success status or a
                response without a token
        """
        try:
            resp = self.session.post(
                self._url("/auth/login"),
                headers={"Content-Type": "application/json"},
                json={"email": email, "password": password},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiAuthError(f"login request failed: {e}") from e
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not resp.ok:
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiAuthError(message or f"login failed (status {resp.status_code})")
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ApiAuthError("login response did not contain a token")
        self.token = token
        return token

    def list_elevators(self) -> list[dict[str, Any]]:
        try:
            resp = self.session.get(
                self._url("/elevators"), headers=self._headers(), timeout=self.timeout
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ApiError(f"could not list elevators: {e}") from e
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ApiError("could not list elevators: response has no data list")
        return items

    def create_elevator(self, payload: dict[str, Any]) -> requests.Response:
        return self.session.post(
            self._url("/elevators"),
            headers=self._headers(),
            json=payload,
            timeout=self.timeout,
        )

    def delete_elevator(self, elevator_id: str) -> requests.Response:
        return self.session.delete(
            self._url(f"/elevators/{elevator_id}"),
            headers=self._headers(),
            timeout=self.timeout,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> ElevatorApiClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
