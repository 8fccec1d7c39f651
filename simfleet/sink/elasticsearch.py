"""Elasticsearch sink — one index request per sample over HTTP.

Talks to the document API directly with httpx:

    PUT {es_server}/{index}/_doc/{server_id}-{epoch_seconds}

The body is the flat document from ``MetricSample.to_document()``,
encoded with orjson. No retries: a failed write is a dropped sample.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
import orjson

from simfleet.exceptions import PublishError, SinkClientError
from simfleet.sink.base import BaseSink
from simfleet.types import MetricSample

if TYPE_CHECKING:
    from simfleet.config import SimfleetSettings

_logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


class ElasticsearchSink(BaseSink):
    """Writes samples into an Elasticsearch (or OpenSearch) index."""

    name = "elasticsearch"

    def __init__(
        self,
        url: str,
        index: str,
        username: str = "",
        password: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        if not index:
            raise SinkClientError("Elasticsearch index name must not be empty")
        try:
            base_url = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise SinkClientError(f"Invalid Elasticsearch URL {url!r}: {e}") from e
        if base_url.scheme not in ("http", "https") or not base_url.host:
            raise SinkClientError(
                f"Elasticsearch URL must be http(s)://host[:port], got {url!r}"
            )

        self.index = index
        self.url = str(base_url)
        auth = httpx.BasicAuth(username, password) if username else None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=auth,
            timeout=timeout,
            headers=_JSON_HEADERS,
            transport=transport,
        )
        _logger.info("Elasticsearch sink ready: %s index=%s", self.url, index)

    @classmethod
    def from_settings(cls, settings: SimfleetSettings, **kwargs) -> ElasticsearchSink:
        return cls(
            url=settings.es_server,
            index=settings.es_index,
            username=settings.es_username,
            password=settings.es_password,
            timeout=settings.request_timeout,
            **kwargs,
        )

    async def _write(self, sample: MetricSample) -> None:
        try:
            body = orjson.dumps(sample.to_document())
        except (orjson.JSONEncodeError, TypeError) as e:
            raise PublishError(f"serialization failed: {e}") from e

        path = f"/{self.index}/_doc/{sample.document_id}"
        try:
            resp = await self._client.put(path, content=body)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PublishError(
                f"HTTP {e.response.status_code} from {self.name}"
            ) from e
        except httpx.HTTPError as e:
            raise PublishError(f"{type(e).__name__}: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
