"""USDA FoodData Central API clients."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from supabase import create_client

SEARCH_PATH = "foods/search"
SEARCH_DATA_TYPES = "Survey (FNDDS),Foundation,Branded"
SEARCH_SORT_BY = "dataType.keyword"
SEARCH_SORT_ORDER = "asc"
DEFAULT_TIMEOUT_SECONDS = 15.0

_logger = logging.getLogger(__name__)


class FdcError(Exception):
    """Base error for FoodData Central access."""


class FdcTimeoutError(FdcError):
    """The provider did not answer within the request timeout."""

    def __init__(self) -> None:
        super().__init__("Request timeout")


class FdcUpstreamError(FdcError):
    """The provider answered with a non-success status."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        super().__init__(f"API Error: {status_code} {reason}".rstrip())
        self.status_code = status_code


class FdcProxyError(FdcError):
    """The server-side proxy function could not be invoked."""

    def __init__(self, function_name: str, detail: object) -> None:
        super().__init__(f"Edge function {function_name} failed: {detail}")
        self.function_name = function_name


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(
        self, query: str, page_size: int, page_number: int = 1
    ) -> dict[str, Any]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: str) -> dict[str, Any]:
        """Fetch a food by FDC id and return raw API data."""

    async def close(self) -> None:
        """Release any held resources."""


def search_params(query: str, page_size: int, page_number: int) -> dict[str, str]:
    """Build the query parameters shared by both access paths."""
    return {
        "query": query.strip(),
        "pageSize": str(page_size),
        "pageNumber": str(page_number),
        "dataType": SEARCH_DATA_TYPES,
        "sortBy": SEARCH_SORT_BY,
        "sortOrder": SEARCH_SORT_ORDER,
    }


@dataclass
class HttpxFdcClient(FdcClient):
    """Direct HTTPX-backed FDC client using an API key."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def create(
        cls,
        api_key: str,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(
        self, query: str, page_size: int, page_number: int = 1
    ) -> dict[str, Any]:
        """Search foods by query."""
        response = await self._get(
            SEARCH_PATH, search_params(query, page_size, page_number)
        )
        if response.is_error:
            _logger.warning(
                "FDC search failed: status=%s query=%s", response.status_code, query
            )
            raise FdcUpstreamError(response.status_code, response.reason_phrase)
        return response.json()

    async def get_food(self, fdc_id: str) -> dict[str, Any]:
        """Fetch a food by FDC id."""
        response = await self._get(f"food/{fdc_id}", {"format": "full"})
        if response.is_error:
            raise FdcUpstreamError(response.status_code, response.reason_phrase)
        return response.json()

    async def forward(self, path: str, params: dict[str, str]) -> httpx.Response:
        """Send an already-sanitized request upstream and return the raw response."""
        return await self._get(path, params)

    async def _get(self, path: str, params: dict[str, str]) -> httpx.Response:
        try:
            return await self.http_client.get(
                f"{self.base_url}/{path}",
                params={**params, "api_key": self.api_key},
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise FdcTimeoutError from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


class FunctionsInvoker(Protocol):
    """Subset of the Supabase functions client used by the proxy path."""

    def invoke(self, function_name: str, invoke_options: dict | None = None) -> Any:
        """Invoke an edge function."""


@dataclass
class SupabaseProxyFdcClient(FdcClient):
    """FDC client that relays through a Supabase Edge Function.

    The function receives ``{"path", "params"}`` and answers with the
    provider's JSON. The API key stays on the server.
    """

    functions: FunctionsInvoker
    function_name: str = "fooddata_proxy"

    @classmethod
    def create(
        cls, supabase_url: str, supabase_key: str, function_name: str
    ) -> "SupabaseProxyFdcClient":
        """Create a proxy client backed by a Supabase client."""
        client = create_client(supabase_url, supabase_key)
        return cls(functions=client.functions, function_name=function_name)

    async def search_foods(
        self, query: str, page_size: int, page_number: int = 1
    ) -> dict[str, Any]:
        """Search foods through the proxy function."""
        return await self._invoke(
            SEARCH_PATH, search_params(query, page_size, page_number)
        )

    async def get_food(self, fdc_id: str) -> dict[str, Any]:
        """Fetch a food through the proxy function."""
        return await self._invoke(f"food/{fdc_id}", {"format": "full"})

    async def _invoke(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        options = {"body": {"path": path, "params": params}, "responseType": "json"}
        try:
            data = await asyncio.to_thread(
                self.functions.invoke, self.function_name, invoke_options=options
            )
        except Exception as exc:
            raise FdcProxyError(self.function_name, exc) from exc
        if not isinstance(data, dict):
            raise FdcProxyError(self.function_name, "unexpected response body")
        if "error" in data and "foods" not in data and "fdcId" not in data:
            raise FdcProxyError(self.function_name, data["error"])
        return data

    async def close(self) -> None:
        """Nothing to release; the Supabase client owns its session."""
        return None
