"""
Infrastructure layer: Supabase (PostgREST) client with retry logic.
"""
from typing import Any, Dict, List, Optional
import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from tracker.config import settings
from tracker.domain.models import (
    AllocationRecord,
    Commune,
    DeliveryRecord,
    Department,
    Operator,
    Region,
)
from tracker.infrastructure.api_constants import (
    APIConstants,
    SupabaseSelects,
    SupabaseTables,
)

logger = logging.getLogger(__name__)


class SupabaseAPIError(Exception):
    """Raised when the Supabase REST API cannot serve a request."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SupabaseClient:
    """
    Read-only client for the campaign tables.
    Implements retry logic with exponential backoff on 5xx and transport errors.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        """Initialize the API client with configuration."""
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_anon_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "accept": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=settings.supabase_timeout,
        )

    async def __aenter__(self) -> "SupabaseClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, endpoint, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                logger.warning(f"Supabase {e.response.status_code} on {endpoint}, retrying")
                raise
            # Don't retry on client errors (4xx)
            raise SupabaseAPIError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body

        Raises:
            SupabaseAPIError: If the request fails after retries
        """
        try:
            return await self._send(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            logger.error(f"Supabase request to {endpoint} failed after retries: {e}")
            raise SupabaseAPIError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=502,
            )
        except httpx.RequestError as e:
            logger.error(f"Supabase request to {endpoint} errored: {e}")
            raise SupabaseAPIError(f"API request error: {str(e)}", status_code=503)

    async def fetch_table(
        self,
        table: str,
        select: str = "*",
        page_size: int = APIConstants.DEFAULT_PAGE_SIZE,
        order: str = APIConstants.DEFAULT_ORDER,
    ) -> List[Dict[str, Any]]:
        """
        Fetch every row of a table, paging with limit/offset.

        Pages are requested in a fixed ``order``; without it Postgres may
        return overlapping or incomplete pages.

        Args:
            table: Table name
            select: PostgREST select expression
            page_size: Rows per request
            order: PostgREST order expression, must be a unique key

        Returns:
            List of row dictionaries
        """
        rows: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page = await self._make_request(
                "GET",
                SupabaseTables.path(table),
                params={
                    "select": select,
                    "order": order,
                    "limit": page_size,
                    "offset": offset,
                },
            )
            if not isinstance(page, list):
                raise SupabaseAPIError(f"Unexpected payload for table {table}")
            rows.extend(page)
            if len(page) < page_size:
                break
            offset += page_size
        logger.debug(f"Fetched {len(rows)} rows from {table}")
        return rows

    async def get_regions(self) -> List[Region]:
        rows = await self.fetch_table(SupabaseTables.REGIONS, SupabaseSelects.REGIONS)
        return [Region(**row) for row in rows]

    async def get_departments(self) -> List[Department]:
        rows = await self.fetch_table(SupabaseTables.DEPARTMENTS, SupabaseSelects.DEPARTMENTS)
        return [Department(**row) for row in rows]

    async def get_communes(self) -> List[Commune]:
        rows = await self.fetch_table(SupabaseTables.COMMUNES, SupabaseSelects.COMMUNES)
        return [Commune(**row) for row in rows]

    async def get_operators(self) -> List[Operator]:
        """
        Fetch operators.

        The cooperative flag and phone are stored as ``operateur_coop_gie``
        and ``contact_info``.
        """
        rows = await self.fetch_table(SupabaseTables.OPERATORS, SupabaseSelects.OPERATORS)
        return [
            Operator(
                id=row["id"],
                name=row["name"],
                commune_id=row["commune_id"],
                is_coop=row.get("operateur_coop_gie"),
                phone=row.get("contact_info"),
            )
            for row in rows
        ]

    async def get_allocations(self) -> List[AllocationRecord]:
        rows = await self.fetch_table(SupabaseTables.ALLOCATIONS, SupabaseSelects.ALLOCATIONS)
        return [AllocationRecord(**row) for row in rows]

    async def get_deliveries(self) -> List[DeliveryRecord]:
        """
        Fetch deliveries joined with truck, driver and allocation context.

        Returns:
            List of flattened DeliveryRecord instances
        """
        rows = await self.fetch_table(SupabaseTables.DELIVERIES, SupabaseSelects.DELIVERIES_VIEW)
        return [self.to_delivery_record(row) for row in rows]

    @staticmethod
    def to_delivery_record(row: Dict[str, Any]) -> DeliveryRecord:
        """Flatten one joined delivery row."""
        allocation = row.get("allocations") or {}
        return DeliveryRecord(
            id=row["id"],
            allocation_id=row.get("allocation_id"),
            bl_number=row.get("bl_number") or "",
            truck_id=row.get("truck_id"),
            driver_id=row.get("driver_id"),
            driver_name=(row.get("drivers") or {}).get("name"),
            truck_plate=(row.get("trucks") or {}).get("plate_number"),
            tonnage_loaded=row.get("tonnage_loaded"),
            tonnage_delivered=row.get("tonnage_delivered"),
            delivery_date=row.get("delivery_date"),
            region_name=(allocation.get("regions") or {}).get("name"),
            commune_name=(allocation.get("communes") or {}).get("name"),
            operator_name=(allocation.get("operators") or {}).get("name"),
            project_id=allocation.get("project_id"),
        )


# Singleton instance
_supabase_client: Optional[SupabaseClient] = None


def get_supabase_client() -> SupabaseClient:
    """
    Get or create the singleton API client instance.

    Returns:
        SupabaseClient instance
    """
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = SupabaseClient()
    return _supabase_client
