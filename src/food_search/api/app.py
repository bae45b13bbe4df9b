"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, Response, status

from food_search.adapters.fdc_client import FdcError
from food_search.api.admin import router as admin_router
from food_search.app_logging import configure_logging
from food_search.config import parse_restrictions
from food_search.containers import AppContainer
from food_search.services.restrictions import restriction_warning

MAX_PAGE_SIZE = 50


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    default_page_size = container.settings.default_page_size

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/foods/search")
    async def search_foods(  # noqa: PLR0913
        request: Request,
        query: str = "",
        page_size: int = Query(default=default_page_size, ge=1, le=MAX_PAGE_SIZE),
        page_number: int = Query(default=1, ge=1),
        restrictions: str | None = None,
        filter_restricted: bool = False,
    ) -> dict[str, object]:
        """Search foods; failures are reported in the body, not the status."""
        state_container: AppContainer = request.app.state.container
        service = state_container.food_data_service
        result, violations = await service.search_foods_with_restrictions(
            query,
            parse_restrictions(restrictions),
            filter_enabled=filter_restricted,
            page_size=page_size,
            page_number=page_number,
        )
        payload = result.to_dict()
        payload["foods"] = [
            {
                **food,
                "violatesRestrictions": bool(food_violations),
                "violations": food_violations,
                "warning": restriction_warning(food_violations),
            }
            for food, food_violations in zip(
                payload["foods"], violations, strict=True
            )
        ]
        return payload

    @app.get("/foods/suggested")
    async def suggested_foods(request: Request) -> dict[str, object]:
        """Return a starter list of popular foods."""
        state_container: AppContainer = request.app.state.container
        foods = await state_container.food_data_service.get_suggested_foods()
        return {"foods": [food.to_dict() for food in foods]}

    @app.get("/foods/{fdc_id}")
    async def food_details(fdc_id: str, request: Request) -> dict[str, object]:
        """Return full details for one food."""
        state_container: AppContainer = request.app.state.container
        try:
            details = await state_container.food_data_service.get_food_details(fdc_id)
        except FdcError as exc:
            logger.warning("Food details unavailable: fdc_id=%s", fdc_id)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
            ) from exc
        return details.to_dict()

    @app.post("/proxy/fooddata")
    async def fooddata_proxy(request: Request) -> Response:
        """Relay a ``{path, params}`` request to FDC with the server key."""
        state_container: AppContainer = request.app.state.container
        try:
            body = await request.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        relayed = await state_container.relay.relay(body, _client_ip(request))
        return Response(
            content=relayed.content,
            status_code=relayed.status_code,
            media_type=relayed.media_type,
        )

    return app


def _client_ip(request: Request) -> str:
    """Resolve the caller's address, honouring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client is not None:
        return request.client.host
    return "unknown"
