from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ..config import RuntimeConfig, Service
from ..store.data_store import InMemoryStore
from .base import Catalog, Copy
from .local import LocalCatalog, LocalCopy
from .remote import RemoteCatalog, RemoteCopy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Clients:
    """Catalog and Copy implementations chosen once at start-up.

    ``owned_http`` is the HTTP client ``build_clients`` opened itself, if any;
    ``close()`` releases it.
    """

    catalog: Catalog
    copy: Copy
    owned_http: httpx.Client | None = None

    def close(self) -> None:
        if self.owned_http is not None and not self.owned_http.is_closed:
            self.owned_http.close()
            logger.info("Closed HTTP client for peer services")


def build_clients(
    config: RuntimeConfig,
    store: InMemoryStore | None = None,
    http: httpx.Client | None = None,
) -> Clients:
    """Use the in-process store for every capability this process hosts, HTTP otherwise.

    An HTTP client is only opened when a capability is remote and ``http`` is
    not given; the returned ``Clients`` then owns it.
    """
    if store is None and (config.serves(Service.CATALOG) or config.serves(Service.COPY)):
        raise ValueError("a store is required to host catalog or copy locally")

    needs_http = not (config.serves(Service.CATALOG) and config.serves(Service.COPY))
    owned_http: httpx.Client | None = None
    if needs_http and http is None:
        http = owned_http = httpx.Client(timeout=config.http_timeout)

    catalog: Catalog
    copy: Copy

    if config.serves(Service.CATALOG):
        catalog = LocalCatalog(store)
    else:
        catalog = RemoteCatalog.create(
            config.endpoint(Service.CATALOG), http, config.internal_token, config.http_timeout,
        )

    if config.serves(Service.COPY):
        copy = LocalCopy(store)
    else:
        copy = RemoteCopy.create(
            config.endpoint(Service.COPY), http, config.internal_token, config.http_timeout,
        )

    logger.info(
        "Recommendation dependencies: catalog=%s copy=%s",
        type(catalog).__name__, type(copy).__name__,
    )
    return Clients(catalog=catalog, copy=copy, owned_http=owned_http)
