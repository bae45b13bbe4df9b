"""Server-side relay that keeps the FDC API key off client devices."""

import json
import logging
import re
from dataclasses import dataclass, field

from food_search.adapters.fdc_client import HttpxFdcClient
from food_search.services.rate_limit import TokenBucketLimiter

SEARCH_PATH = "foods/search"
PARAM_WHITELIST = frozenset(
    {"query", "pageSize", "pageNumber", "dataType", "sortBy", "sortOrder", "format"}
)
MAX_QUERY_LENGTH = 80
MAX_PAGE_VALUE = 50

_FOOD_PATH = re.compile(r"^food/\d+$")
_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayResponse:
    """Raw response to hand back to the caller."""

    status_code: int
    content: bytes
    media_type: str = "application/json"


def is_allowed_path(path: str) -> bool:
    """Return True for the search endpoint and numeric food lookups."""
    return path == SEARCH_PATH or bool(_FOOD_PATH.match(path))


def _clamp_page_value(value: str) -> str:
    try:
        number = int(float(value))
    except (ValueError, OverflowError):
        number = 1
    if number == 0:
        number = 1
    return str(max(1, min(MAX_PAGE_VALUE, number)))


def sanitize_params(params: dict[str, object] | None) -> dict[str, str]:
    """Keep whitelisted parameters and bound their values."""
    sanitized: dict[str, str] = {}
    for key, value in (params or {}).items():
        if key not in PARAM_WHITELIST or value is None:
            continue
        text = str(value).strip()
        if key == "query":
            text = text[:MAX_QUERY_LENGTH]
        if key in {"pageSize", "pageNumber"}:
            text = _clamp_page_value(text)
        sanitized[key] = text
    return sanitized


def _error(status_code: int, message: str) -> RelayResponse:
    body = json.dumps({"error": message}).encode()
    return RelayResponse(status_code=status_code, content=body)


@dataclass
class FoodDataRelay:
    """Forwards whitelisted FDC requests using the server's API key."""

    upstream: HttpxFdcClient | None
    limiter: TokenBucketLimiter = field(default_factory=TokenBucketLimiter)

    async def relay(self, body: dict[str, object], client_ip: str) -> RelayResponse:
        """Validate, throttle and forward one ``{path, params}`` request."""
        if self.upstream is None:
            return _error(500, "Missing FDC API key")
        path = body.get("path")
        if not path or not isinstance(path, str):
            return _error(400, "Missing path")
        if not is_allowed_path(path):
            return _error(400, "Invalid path")
        if not self.limiter.take(client_ip):
            _logger.warning("Proxy rate limit exceeded: ip=%s", client_ip)
            return _error(429, "Rate limit exceeded")

        raw_params = body.get("params")
        params = sanitize_params(raw_params if isinstance(raw_params, dict) else None)
        try:
            response = await self.upstream.forward(path, params)
        except Exception as exc:
            _logger.exception("Proxy forward failed: path=%s", path)
            return _error(500, str(exc) or "Unexpected error")
        return RelayResponse(
            status_code=response.status_code,
            content=response.content,
            media_type=response.headers.get("content-type", "application/json"),
        )
