"""Project catalog sources — where non-global partitions come from.

All sources implement ``CatalogSource``. They return the raw catalog
document for a partition (``{"units": [...], "unitSystems": [...]}``);
parsing and validation happen in the loader.

No retries or caching here: the service caches loaded partitions, and a
failed fetch simply propagates to the caller.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

import httpx

from unitcatalog.errors import UnknownPartition

logger = logging.getLogger(__name__)


class CatalogSource(ABC):
    """Asynchronous supplier of raw catalog documents, keyed by partition."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name for logging."""
        ...

    @abstractmethod
    async def fetch(self, partition: str) -> str:
        """Return the raw catalog document for ``partition``.

        Raises:
            UnknownPartition: the source has no catalog for ``partition``.
        """
        ...


class StaticCatalogSource(CatalogSource):
    """In-memory source, mainly for tests and embedded deployments."""

    def __init__(self, documents: Mapping[str, str]) -> None:
        self._documents = dict(documents)
        self.fetch_count = 0

    @property
    def name(self) -> str:
        return "static"

    async def fetch(self, partition: str) -> str:
        self.fetch_count += 1
        document = self._documents.get(partition)
        if document is None:
            raise UnknownPartition(partition)
        return document


class HttpCatalogSource(CatalogSource):
    """Fetch project catalogs over HTTP.

    ``url_template`` must contain a ``{partition}`` placeholder, e.g.
    ``https://catalogs.example.com/projects/{partition}/units.json``.
    """

    def __init__(
        self,
        url_template: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if "{partition}" not in url_template:
            msg = "url_template must contain a '{partition}' placeholder."
            raise ValueError(msg)
        self._url_template = url_template
        self._timeout = timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return "http"

    async def fetch(self, partition: str) -> str:
        url = self._url_template.format(partition=partition)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(url)
            if resp.status_code == 404:
                raise UnknownPartition(partition)
            resp.raise_for_status()

        logger.debug("Fetched catalog for %s from %s (%d bytes)", partition, url, len(resp.content))
        return resp.text
