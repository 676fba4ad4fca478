from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request

from .clients.base import Catalog, Copy
from .config import RuntimeConfig
from .context import RequestContext
from .faults.injector import ServiceFaults

logger = logging.getLogger(__name__)


def get_config(request: Request) -> RuntimeConfig:
    return request.app.state.config


def request_context(request: Request) -> RequestContext:
    """Trace, identity and fault directives of the current request."""
    config = get_config(request)
    return RequestContext.from_headers(
        request.headers,
        internal_token=config.internal_token,
        trust_client_traces=config.trust_client_traces,
        timeout=config.request_timeout,
    )


def require_internal(ctx: RequestContext = Depends(request_context)) -> RequestContext:
    """Raise 401 unless the call comes from one of our own services."""
    if not ctx.internal:
        raise HTTPException(status_code=401, detail="Internal endpoint")
    return ctx


def local_catalog(request: Request, ctx: RequestContext = Depends(request_context)) -> Catalog:
    """Catalog backed by this process's store, for the catalog service's own routes."""
    return request.app.state.local_catalog.with_context(ctx)


def local_copy(request: Request, ctx: RequestContext = Depends(request_context)) -> Copy:
    return request.app.state.local_copy.with_context(ctx)


def catalog_client(request: Request, ctx: RequestContext = Depends(request_context)) -> Catalog:
    """Catalog as seen by the recommendation service, local or remote."""
    return request.app.state.clients.catalog.with_context(ctx)


def copy_client(request: Request, ctx: RequestContext = Depends(request_context)) -> Copy:
    return request.app.state.clients.copy.with_context(ctx)


def delay_copy(request: Request) -> None:
    faults: ServiceFaults = request.app.state.copy_faults
    faults.delay()


def delay_recommendations(request: Request) -> None:
    faults: ServiceFaults = request.app.state.recommendations_faults
    faults.delay()


def fail_recommendations_randomly(request: Request) -> None:
    faults: ServiceFaults = request.app.state.recommendations_faults
    if faults.should_fail():
        logger.error("Simulated random failure: Pizza service temporarily unavailable")
        raise HTTPException(status_code=503, detail="Pizza service temporarily unavailable")
