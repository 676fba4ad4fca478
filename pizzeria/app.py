from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .clients.base import Catalog, Copy
from .clients.dispatch import build_clients
from .clients.local import LocalCatalog, LocalCopy
from .config import RuntimeConfig, Service
from .context import RequestContext
from .dependencies import (
    catalog_client,
    copy_client,
    delay_copy,
    delay_recommendations,
    fail_recommendations_randomly,
    local_catalog,
    local_copy,
    request_context,
    require_internal,
)
from .errors import PizzeriaError, RecommendationConflict, ReferentialIntegrityError
from .faults.injector import ServiceFaults
from .logging_config import configure_logging
from .models import (
    AdjectivesResponse,
    DoughsResponse,
    HistoryResponse,
    IngredientsResponse,
    NamesResponse,
    Pizza,
    PizzaRecommendation,
    QuotesResponse,
    Restrictions,
    ToolsResponse,
)
from .recommendations.generator import generate_recommendation
from .store.data_store import InMemoryStore

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 15


# ── Health ───────────────────────────────────────────────────────────────

health_router = APIRouter()


@health_router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@health_router.get("/ready")
def ready() -> dict[str, str]:
    return {"status": "ready"}


# ── Catalog service ──────────────────────────────────────────────────────

catalog_router = APIRouter()


@catalog_router.get("/api/ingredients/{ingredient_type}", response_model=IngredientsResponse)
def ingredients(ingredient_type: str, catalog: Catalog = Depends(local_catalog)) -> IngredientsResponse:
    return IngredientsResponse(ingredients=catalog.ingredients(ingredient_type))


@catalog_router.get("/api/doughs", response_model=DoughsResponse)
def doughs(catalog: Catalog = Depends(local_catalog)) -> DoughsResponse:
    return DoughsResponse(doughs=catalog.doughs())


@catalog_router.get("/api/tools", response_model=ToolsResponse)
def tools(catalog: Catalog = Depends(local_catalog)) -> ToolsResponse:
    return ToolsResponse(tools=catalog.tools())


@catalog_router.post(
    "/api/internal/recommendations",
    response_model=Pizza,
    response_model_exclude_none=True,
    status_code=201,
    dependencies=[Depends(require_internal)],
)
def record_recommendation(body: Pizza, catalog: Catalog = Depends(local_catalog)) -> Pizza:
    try:
        return catalog.record_recommendation(body)
    except ReferentialIntegrityError as exc:
        raise RecommendationConflict(str(exc)) from exc


@catalog_router.get(
    "/api/internal/recommendations/{pizza_id}",
    response_model=Pizza,
    response_model_exclude_none=True,
)
def get_recommendation(pizza_id: int, catalog: Catalog = Depends(local_catalog)) -> Pizza:
    pizza = catalog.get_recommendation(pizza_id)
    if pizza is None:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    return pizza


@catalog_router.get(
    "/api/internal/recommendations",
    response_model=HistoryResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_internal)],
)
def recommendation_history(request: Request) -> HistoryResponse:
    store: InMemoryStore = request.app.state.store
    return HistoryResponse(pizzas=store.history(HISTORY_LIMIT))


# ── Copy service ─────────────────────────────────────────────────────────

copy_router = APIRouter(dependencies=[Depends(delay_copy)])


@copy_router.get("/api/adjectives", response_model=AdjectivesResponse)
def adjectives(copy: Copy = Depends(local_copy)) -> AdjectivesResponse:
    return AdjectivesResponse(adjectives=copy.adjectives())


@copy_router.get("/api/names", response_model=NamesResponse)
def names(copy: Copy = Depends(local_copy)) -> NamesResponse:
    return NamesResponse(names=copy.names())


@copy_router.get("/api/quotes", response_model=QuotesResponse)
def quotes(copy: Copy = Depends(local_copy)) -> QuotesResponse:
    return QuotesResponse(quotes=copy.quotes())


# ── Recommendations service ──────────────────────────────────────────────

recommendations_router = APIRouter(dependencies=[Depends(delay_recommendations)])


@recommendations_router.post(
    "/api/pizza",
    response_model=PizzaRecommendation,
    response_model_exclude_none=True,
    dependencies=[Depends(fail_recommendations_randomly)],
)
def recommend_pizza(
    restrictions: Restrictions | None = Body(default=None),
    ctx: RequestContext = Depends(request_context),
    catalog: Catalog = Depends(catalog_client),
    copy: Copy = Depends(copy_client),
) -> PizzaRecommendation:
    logger.debug("Received pizza recommendation request", extra={"trace_id": ctx.trace.trace_id})
    return generate_recommendation(
        restrictions or Restrictions(),
        catalog,
        copy,
        sleep=ctx.sleep,
    )


@recommendations_router.get("/api/pizza/{pizza_id}", response_model=Pizza, response_model_exclude_none=True)
def get_pizza(pizza_id: int, catalog: Catalog = Depends(catalog_client)) -> Pizza:
    pizza = catalog.get_recommendation(pizza_id)
    if pizza is None:
        raise HTTPException(status_code=404, detail="Pizza not found")
    return pizza


# ── Errors ───────────────────────────────────────────────────────────────


def _pizzeria_error_handler(request: Request, exc: PizzeriaError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


# ── Assembly ─────────────────────────────────────────────────────────────


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    clients = getattr(app.state, "clients", None)
    if clients is not None:
        clients.close()


def create_app(
    config: RuntimeConfig | None = None,
    store: InMemoryStore | None = None,
    http: httpx.Client | None = None,
) -> FastAPI:
    """Build an app hosting the services enabled in ``config``.

    ``store`` is only used when the catalog or copy service is hosted here;
    ``http`` is the client used to reach peers hosting the others.
    """
    config = config or RuntimeConfig.from_env()

    app = FastAPI(title="Pizza Recommendation API", version="1.0.0", lifespan=_lifespan)
    app.state.config = config
    app.state.copy_faults = ServiceFaults(delay_ms=config.copy_delay_ms)
    app.state.recommendations_faults = ServiceFaults(
        delay_ms=config.recommendations_delay_ms,
        fail_percentage=config.recommendations_fail_percentage,
    )
    app.add_exception_handler(PizzeriaError, _pizzeria_error_handler)
    app.include_router(health_router)

    hosts_data = config.serves(Service.CATALOG) or config.serves(Service.COPY)
    if hosts_data:
        store = store or InMemoryStore(retention=config.retention)
        app.state.store = store
        app.state.local_catalog = LocalCatalog(store)
        app.state.local_copy = LocalCopy(store)

    if config.serves(Service.CATALOG):
        app.include_router(catalog_router)
    if config.serves(Service.COPY):
        app.include_router(copy_router)
    if config.serves(Service.RECOMMENDATIONS):
        app.state.clients = build_clients(config, store if hosts_data else None, http)
        app.include_router(recommendations_router)

    logger.info(
        "Serving %s",
        ", ".join(s.value for s in Service if config.serves(s)) or "health checks only",
    )
    return app


_config = RuntimeConfig.from_env()
configure_logging(_config.log_level, _config.log_format)
app = create_app(_config)
