"""HTTP catalogue client backed by httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.interfaces.catalogue_client import CatalogueClient
from app.schemas.catalogue import CatalogueType, Item, OperationResult
from app.services.errors import (
    CatalogueConflict,
    CatalogueError,
    CatalogueNotFound,
    CatalogueUnavailable,
)

logger = logging.getLogger(__name__)

ITEM_PATH = "/item"
TOKEN_HEADER = "token"


class HttpCatalogueClient(CatalogueClient):
    """Talks to one catalogue server over its item API."""

    def __init__(
        self,
        catalogue_type: CatalogueType,
        base_url: str | None,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise RuntimeError(f"{catalogue_type.value} catalogue URL not configured")
        self.catalogue_type = catalogue_type
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def create_item(self, item: Item, token: str) -> OperationResult:
        return await self._request("POST", json=item, token=token)

    async def update_item(self, item: Item, token: str) -> OperationResult:
        return await self._request("PUT", json=item, token=token)

    async def delete_item(self, item: Item, token: str) -> OperationResult:
        return await self._request("DELETE", params={"id": item.get("id")}, token=token)

    async def get_item(self, item_id: str) -> OperationResult:
        return await self._request("GET", params={"id": item_id})

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        *,
        json: Item | None = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> OperationResult:
        headers = {TOKEN_HEADER: token} if token is not None else None
        try:
            response = await self._client.request(method, ITEM_PATH, json=json, params=params, headers=headers)
        except httpx.RequestError as exc:
            logger.warning("%s catalogue %s %s unreachable: %s", self.catalogue_type.value, method, ITEM_PATH, exc)
            raise CatalogueUnavailable(
                f"{self.catalogue_type.value} catalogue request failed: {exc}",
                catalogue_type=self.catalogue_type,
            ) from exc

        body = self._parse_body(response)
        if response.is_success:
            results = body.get("results", body) if isinstance(body, dict) else body
            return OperationResult(status_code=response.status_code, results=results)

        logger.info(
            "%s catalogue %s %s returned %s", self.catalogue_type.value, method, ITEM_PATH, response.status_code
        )
        raise self._error_for(response.status_code, body)

    def _error_for(self, status_code: int, body: Any) -> CatalogueError:
        message = f"{self.catalogue_type.value} catalogue returned {status_code}"
        if status_code == 404:
            return CatalogueNotFound(message, catalogue_type=self.catalogue_type, body=body)
        if status_code == 409:
            return CatalogueConflict(message, catalogue_type=self.catalogue_type, body=body)
        return CatalogueError(message, catalogue_type=self.catalogue_type, status_code=status_code, body=body)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"detail": response.text[:500]}
