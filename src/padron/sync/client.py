"""HTTP client for the person collection endpoint."""

from typing import Any

import httpx

from ..errors import ShapeFailure, TransportFailure

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class PersonaClient:
    """One method per round trip. No retries; non-2xx raises TransportFailure."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _send(self, method: str, body: dict[str, Any] | None = None) -> httpx.Response:
        headers = JSON_HEADERS if body is not None else {"Accept": "application/json"}
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                return await client.request(method, self.base_url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportFailure(f"Request timed out after {self._timeout}s") from e
        except httpx.RequestError as e:
            raise TransportFailure(f"Request failed: {e}") from e

    @staticmethod
    def _check(response: httpx.Response, include_body: bool = False) -> None:
        if response.is_success:
            return

        message = f"HTTP {response.status_code}"
        body = response.text if include_body else ""
        if body:
            message += f" - {body}"
        raise TransportFailure(message, status_code=response.status_code, body=body)

    async def list(self) -> Any:
        """GET the collection. Returns the decoded JSON, whatever its shape."""
        response = await self._send("GET")
        self._check(response)
        try:
            return response.json()
        except ValueError as e:
            raise ShapeFailure(f"Respuesta no es JSON válido: {e}") from e

    async def create(self, record: dict[str, Any]) -> None:
        """POST a new person."""
        response = await self._send("POST", record)
        self._check(response)

    async def update(self, identifier: str | None, fields: dict[str, Any]) -> None:
        """PATCH a person. The identifier always travels as ``id_persona``."""
        body = {"id_persona": identifier}
        body.update({k: v for k, v in fields.items() if k != "id_persona"})
        response = await self._send("PATCH", body)
        self._check(response, include_body=True)

    async def delete(self, identifier: str | None) -> None:
        """DELETE a person by identifier."""
        response = await self._send("DELETE", {"id_persona": identifier})
        self._check(response)
