import logging
from typing import Any

import httpx

from .config import Settings
from .models import Torrent, TorrentJSON
from .projector import torrent_to_json

logger = logging.getLogger(__name__)


class SearchIndex:
    """Keeps torrent documents in an Elasticsearch-compatible index.

    Calls block until the index answers and are never retried; errors
    propagate to the caller.
    """

    def __init__(
        self,
        client: httpx.Client,
        base_url: str = "http://localhost:9200",
        index_name: str = "nyaapantsu",
        type_name: str = "torrents",
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.index_name = index_name
        self.type_name = type_name

    @classmethod
    def from_settings(cls, client: httpx.Client, config: Settings) -> "SearchIndex":
        return cls(
            client,
            config.elasticsearch_url,
            config.elasticsearch_index,
            config.elasticsearch_type,
        )

    def document_url(self, torrent_id: int) -> str:
        return f"{self.base_url}/{self.index_name}/{self.type_name}/{torrent_id:d}"

    def _request_kwargs(self, timeout: float | None) -> dict[str, Any]:
        # Leave the client's own timeout in place unless the caller sets one
        return {} if timeout is None else {"timeout": timeout}

    def upsert(self, doc: TorrentJSON, timeout: float | None = None) -> None:
        """Index a document and refresh so it is searchable on return."""
        url = self.document_url(doc.id)
        try:
            response = self.client.put(
                url,
                params={"refresh": "true"},
                json=doc.model_dump(mode="json"),
                **self._request_kwargs(timeout),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to index torrent {doc.id}: {e}")
            raise

        logger.debug(f"Indexed torrent {doc.id}")

    def delete(self, torrent_id: int, timeout: float | None = None) -> None:
        """Remove a document. A missing document is an error."""
        url = self.document_url(torrent_id)
        try:
            response = self.client.delete(url, **self._request_kwargs(timeout))
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to remove torrent {torrent_id} from index: {e}")
            raise

        logger.debug(f"Removed torrent {torrent_id} from index")

    def add_torrent(
        self, torrent: Torrent, config: Settings, timeout: float | None = None
    ) -> TorrentJSON:
        doc = torrent_to_json(torrent, config)
        self.upsert(doc, timeout)
        return doc

    def remove_torrent(self, torrent: Torrent, timeout: float | None = None) -> None:
        self.delete(torrent.id, timeout)
