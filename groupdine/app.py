from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import CacheError, ValidationError
from .popularity.ranking import get_popular_restaurants, log_choice
from .recommendations.models import (
    ChoiceRequest,
    ChoiceResponse,
    Criteria,
    PopularRestaurant,
    SuggestionResponse,
)
from .recommendations.pipeline import get_restaurant_suggestion
from .recommendations.services import Services, get_services

logger = logging.getLogger(__name__)

app = FastAPI(title="Group Dining Recommendation API", version="1.0.0")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(
        f"Invalid request body for {request.url.path}",
        context={"errors": _validation_details(exc)},
    )
    logger.info("Rejected request: %s %s", error, error.context)
    return JSONResponse(
        status_code=422,
        content={
            "error": error.user_message,
            "code": error.code.value,
            "retryable": error.retryable,
            "detail": error.context["errors"],
        },
    )


def _validation_details(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/recommendations",
    response_model=SuggestionResponse,
    response_model_exclude_none=True,
)
async def recommendations(
    body: Criteria,
    services: Services = Depends(get_services),
) -> SuggestionResponse:
    return await get_restaurant_suggestion(body, services)


@app.post("/choices", response_model=ChoiceResponse, response_model_exclude_none=True)
def choices(
    body: ChoiceRequest,
    services: Services = Depends(get_services),
) -> ChoiceResponse:
    try:
        count = log_choice(body.place_id, services.choices)
    except CacheError:
        logger.warning("Failed to log choice for %s", body.place_id, exc_info=True)
        return ChoiceResponse(status="failed")
    return ChoiceResponse(status="recorded", count=count)


@app.get("/popular", response_model=list[PopularRestaurant], response_model_exclude_none=True)
def popular(services: Services = Depends(get_services)) -> list[PopularRestaurant]:
    return get_popular_restaurants(services.choices, services.cache, services.places.photo_url)


@app.get("/cache/stats")
def cache_stats(services: Services = Depends(get_services)) -> dict:
    return services.cache.get_stats()
