"""Counter API Client — async httpx wrappers for the backend's counter endpoints.

Invariants:
    - Non-2xx responses raise ApiClientError with the envelope's error.message,
      or a per-call fallback when the body is not an error envelope
"""

from dataclasses import dataclass

import httpx

DEFAULT_BASE_URL = "http://localhost:3000"


class ApiClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class CounterData:
    counter_address: str
    count: str
    authority: str | None = None
    signature: str | None = None


@dataclass(frozen=True)
class InitializedCounter:
    counter_address: str
    seed: str
    signature: str


class CounterApiClient:
    """Thin client for GET/POST /api/counter/*."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
    ):
        self._owns_client = http_client is None
        self.http = http_client or httpx.AsyncClient(
            base_url=base_url, timeout=timeout_seconds,
        )

    async def fetch_counter(self, counter_address: str) -> CounterData:
        body = await self._request(
            "GET", f"/api/counter/{counter_address}",
            fallback="Failed to fetch counter value",
        )
        return CounterData(
            counter_address=body["counterAddress"],
            count=body["count"],
            authority=body.get("authority"),
        )

    async def initialize_counter(self, seed: str = "counter") -> InitializedCounter:
        body = await self._request(
            "POST", "/api/counter/initialize", json={"seed": seed},
            fallback="Failed to initialize counter",
        )
        return InitializedCounter(
            counter_address=body["counterAddress"],
            seed=body["seed"],
            signature=body["signature"],
        )

    async def increment_counter(self, counter_address: str) -> CounterData:
        body = await self._request(
            "POST", "/api/counter/increment",
            json={"counterAddress": counter_address},
            fallback="Failed to increment counter",
        )
        return CounterData(
            counter_address=body["counterAddress"],
            count=body["newCount"],
            signature=body.get("signature"),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    async def _request(self, method: str, url: str, fallback: str, **kwargs) -> dict:
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ApiClientError(f"{fallback}: {e}") from e
        if response.is_success:
            return response.json()
        raise ApiClientError(_error_message(response, fallback), response.status_code)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        return fallback
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str) and error:
        return error
    return fallback
