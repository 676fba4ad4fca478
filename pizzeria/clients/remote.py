from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..context import RequestContext
from ..errors import (
    DeadlineExceeded,
    ReferentialIntegrityError,
    UnknownIngredientType,
    UpstreamUnavailable,
)
from ..models import (
    AdjectivesResponse,
    Dough,
    DoughsResponse,
    Ingredient,
    IngredientsResponse,
    IngredientType,
    NamesResponse,
    Pizza,
    QuotesResponse,
    ToolsResponse,
)
from .base import Catalog, Copy

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class _PeerClient:
    """JSON over HTTP to a peer service, on behalf of one request.

    Every call carries the request's trace context, caller identity, fault
    headers and the internal marker.  No retries are attempted.
    """

    base_url: str
    http: httpx.Client
    internal_token: str = "1"
    timeout: float = 10.0
    ctx: RequestContext = field(default_factory=RequestContext)

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    def request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        url = self.url(path)
        timeout = self.ctx.timeout_for(self.timeout)
        try:
            response = self.http.request(
                method,
                url,
                json=json,
                headers=self.ctx.outbound_headers(self.internal_token),
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            logger.error("Timed out querying %s", url, extra={"trace_id": self.ctx.trace.trace_id})
            raise DeadlineExceeded(f"querying {url}: timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("Failed querying %s: %s", url, exc, extra={"trace_id": self.ctx.trace.trace_id})
            raise UpstreamUnavailable(f"querying {url}: {exc}") from exc
        return response

    def decode(self, response: httpx.Response, model: type[T]) -> T:
        if not response.is_success:
            raise self.unexpected_status(response)
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            logger.error("Unexpected response body from %s: %s", response.request.url, exc)
            raise UpstreamUnavailable(
                f"reading response body from {response.request.url}: {exc}"
            ) from exc

    def unexpected_status(self, response: httpx.Response) -> UpstreamUnavailable:
        logger.error(
            "Unexpected status %d from %s",
            response.status_code, response.request.url,
            extra={"trace_id": self.ctx.trace.trace_id},
        )
        return UpstreamUnavailable(
            f"querying {response.request.url}: unexpected status code {response.status_code}"
        )


@dataclass(frozen=True)
class RemoteCatalog(Catalog):
    """Catalog served by a peer instance's HTTP API."""

    peer: _PeerClient

    @classmethod
    def create(
        cls,
        base_url: str,
        http: httpx.Client,
        internal_token: str = "1",
        timeout: float = 10.0,
    ) -> RemoteCatalog:
        return cls(_PeerClient(base_url, http, internal_token, timeout))

    def with_context(self, ctx: RequestContext) -> RemoteCatalog:
        return replace(self, peer=replace(self.peer, ctx=ctx))

    def ingredients(self, ingredient_type: str) -> list[Ingredient]:
        response = self.peer.request("GET", f"/api/ingredients/{ingredient_type}")
        if response.status_code == httpx.codes.BAD_REQUEST:
            raise UnknownIngredientType(ingredient_type)
        body = self.peer.decode(response, IngredientsResponse)
        try:
            kind = IngredientType(ingredient_type)
        except ValueError:
            return body.ingredients
        return [i.model_copy(update={"type": kind}) for i in body.ingredients]

    def tools(self) -> list[str]:
        response = self.peer.request("GET", "/api/tools")
        return self.peer.decode(response, ToolsResponse).tools

    def doughs(self) -> list[Dough]:
        response = self.peer.request("GET", "/api/doughs")
        return self.peer.decode(response, DoughsResponse).doughs

    def record_recommendation(self, pizza: Pizza) -> Pizza:
        payload = pizza.model_dump(mode="json", by_alias=True, exclude_none=True)
        response = self.peer.request("POST", "/api/internal/recommendations", json=payload)
        if response.status_code == httpx.codes.CONFLICT:
            raise ReferentialIntegrityError(_error_message(response))
        return self.peer.decode(response, Pizza)

    def get_recommendation(self, pizza_id: int) -> Pizza | None:
        response = self.peer.request("GET", f"/api/internal/recommendations/{pizza_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        return self.peer.decode(response, Pizza)


@dataclass(frozen=True)
class RemoteCopy(Copy):
    peer: _PeerClient

    @classmethod
    def create(
        cls,
        base_url: str,
        http: httpx.Client,
        internal_token: str = "1",
        timeout: float = 10.0,
    ) -> RemoteCopy:
        return cls(_PeerClient(base_url, http, internal_token, timeout))

    def with_context(self, ctx: RequestContext) -> RemoteCopy:
        return replace(self, peer=replace(self.peer, ctx=ctx))

    def adjectives(self) -> list[str]:
        response = self.peer.request("GET", "/api/adjectives")
        return self.peer.decode(response, AdjectivesResponse).adjectives

    def names(self) -> list[str]:
        response = self.peer.request("GET", "/api/names")
        return self.peer.decode(response, NamesResponse).names

    def quotes(self) -> list[str]:
        response = self.peer.request("GET", "/api/quotes")
        return self.peer.decode(response, QuotesResponse).quotes


def _error_message(response: httpx.Response) -> str:
    try:
        return str(response.json()["error"])
    except (ValueError, KeyError, TypeError):
        return f"unexpected status code {response.status_code}"
