"""REST Store - HTTP client for the hosted backend's REST API.

Talks PostgREST conventions (`/rest/v1/<table>`, `eq.` filters, embedded
selects). Authenticates with the project anon key and, when a signed-in
session is available, the user's access token.
"""

from typing import Any

import httpx

from stockdash.config import settings
from stockdash.infra.logging import get_logger
from stockdash.services.store import (
    HISTORY_TABLE,
    PRODUCT_TABLE,
    Row,
    Store,
    StoreError,
    StoreResult,
)

logger = get_logger(__name__)

HISTORY_SELECT = "id,action,created_at,item_id,stock_items(name,quantity)"


class RestStore(Store):
    """Store backed by the hosted REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        anon_key: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize REST store.

        Args:
            base_url: Backend base URL (defaults to settings)
            anon_key: Project anon key (defaults to settings)
            access_token: Signed-in user's JWT; the anon key is used when absent
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or settings.store_url).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.store_anon_key
        self.access_token = access_token or settings.store_access_token
        self.timeout = timeout or settings.store_timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/rest/v1",
                timeout=self.timeout,
                headers=self._auth_headers(),
            )
        return self._client

    def _auth_headers(self) -> dict[str, str]:
        bearer = self.access_token or self.anon_key
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {bearer}",
            "Content-Type": "application/json",
        }

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> StoreResult[Any]:
        """Send one request and fold the outcome into a StoreResult."""
        client = await self._get_client()
        headers = {"Prefer": "return=minimal"} if method in ("POST", "PATCH", "DELETE") else None

        try:
            response = await client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=headers,
            )
            response.raise_for_status()

            data = response.json() if response.content else None
            logger.debug(
                "Store request completed",
                method=method,
                table=table,
                status_code=response.status_code,
            )
            return StoreResult(data=data)

        except httpx.HTTPStatusError as e:
            error = self._parse_error(e.response)
            logger.error(
                "Store returned error",
                method=method,
                table=table,
                status_code=e.response.status_code,
                error=error.message,
                code=error.code,
            )
            return StoreResult(error=error)

        except Exception as e:
            logger.error(
                "Store request failed",
                method=method,
                table=table,
                error=str(e),
                error_type=type(e).__name__,
            )
            return StoreResult.failure(str(e) or type(e).__name__)

    def _parse_error(self, response: httpx.Response) -> StoreError:
        """Extract message/code/details from an error response body."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("message"):
            return StoreError(
                message=str(body["message"]),
                code=body.get("code"),
                details=body.get("details") or body.get("hint"),
            )
        text = response.text[:500] if response.text else ""
        return StoreError(
            message=text or f"HTTP {response.status_code}",
            code=str(response.status_code),
        )

    async def select_products(self) -> StoreResult[list[Row]]:
        result = await self._request("GET", PRODUCT_TABLE, params={"select": "*"})
        if not result.ok:
            return result
        return StoreResult(data=list(result.data or []))

    async def insert_product(self, row: Row) -> StoreResult[None]:
        return await self._request("POST", PRODUCT_TABLE, json=row)

    async def update_product(self, product_id: str, fields: Row) -> StoreResult[None]:
        return await self._request(
            "PATCH",
            PRODUCT_TABLE,
            params={"id": f"eq.{product_id}"},
            json=fields,
        )

    async def delete_product(self, product_id: str) -> StoreResult[None]:
        return await self._request("DELETE", PRODUCT_TABLE, params={"id": f"eq.{product_id}"})

    async def insert_history(self, item_id: str, action: str) -> StoreResult[None]:
        return await self._request(
            "POST",
            HISTORY_TABLE,
            json={"item_id": item_id, "action": action},
        )

    async def delete_history(self, item_id: str) -> StoreResult[None]:
        return await self._request("DELETE", HISTORY_TABLE, params={"item_id": f"eq.{item_id}"})

    async def select_history(self) -> StoreResult[list[Row]]:
        result = await self._request(
            "GET",
            HISTORY_TABLE,
            params={"select": HISTORY_SELECT, "order": "created_at.desc"},
        )
        if not result.ok:
            return result
        return StoreResult(data=list(result.data or []))

    async def ping(self) -> bool:
        result = await self._request("GET", PRODUCT_TABLE, params={"select": "id", "limit": "1"})
        return result.ok
