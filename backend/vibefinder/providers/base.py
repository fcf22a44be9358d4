from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

import httpx


class ProviderError(Exception):
    pass


class ProviderAuthError(ProviderError):
    pass


class MalformedPayloadError(ProviderError):
    pass


@dataclass(slots=True)
class ProviderClient:
    """Single-attempt JSON client shared by the external providers.

    An empty ``api_key`` puts the client in offline mode: subclasses serve their
    bundled catalog instead of touching the network.
    """

    api_key: str = ""
    base_url: str = ""
    timeout: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = field(init=False, repr=False, default=None)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json", **self._auth_headers()},
            timeout=self.timeout,
            transport=self.transport,
        )

    @property
    def provider_name(self) -> str:
        return type(self).__name__.removesuffix("Client").lower()

    @property
    def offline(self) -> bool:
        return not self.api_key

    def _auth_headers(self) -> Dict[str, str]:
        return {}

    def _auth_params(self) -> Dict[str, Any]:
        return {}

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> Any:
        client = self._client
        if client is None:
            raise ProviderError(f"{self.provider_name} client not initialized")

        logger = logging.getLogger(f"providers.{self.provider_name}")
        query = {**self._auth_params(), **{k: v for k, v in (params or {}).items() if v is not None}}

        try:
            response = await client.request(method, url.lstrip("/"), params=query, json=json)
        except httpx.RequestError as exc:
            raise ProviderError(f"{self.provider_name} network error: {exc}") from exc

        if response.status_code in (401, 403):
            raise ProviderAuthError(f"{self.provider_name} rejected credentials ({response.status_code})")

        if response.status_code >= 400:
            detail = response.text[:300]
            logger.error("%s %s %s -> %s %s", self.provider_name, method, url, response.status_code, detail)
            raise ProviderError(f"{self.provider_name} api error {response.status_code}: {detail}")

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedPayloadError(f"{self.provider_name} returned invalid json") from exc
