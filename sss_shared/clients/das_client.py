"""
Digital Asset Standard (DAS) query client.

Retrieves the assets owned by an address from a DAS indexing service with a
single ``getAssetsByOwner`` request. Only the first page of results is
returned.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import httpx
from solders.pubkey import Pubkey

from ..config import SolanaConfig
from ..errors import error_context
from ..logging_utils import OperationType, create_operation_logger, log_operation_context

logger = create_operation_logger(__name__)

REQUEST_ID = "sss-shared"
FETCH_CONTEXT = "Failed to fetch digital assets"


@dataclass(frozen=True)
class DigitalAsset:
    """A digital asset as reported by the indexing service."""
    id: str
    content: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DigitalAsset':
        return cls(
            id=data["id"],
            content=data.get("content"),
            metadata=data.get("metadata"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "content": self.content, "metadata": self.metadata}


@dataclass(frozen=True)
class AssetPage:
    """The ``result`` object of a ``getAssetsByOwner`` response."""
    total: int
    limit: int
    items: List[DigitalAsset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssetPage':
        return cls(
            total=int(data["total"]),
            limit=int(data["limit"]),
            items=[DigitalAsset.from_dict(item) for item in data["items"]],
        )


def build_assets_by_owner_request(owner: str) -> Dict[str, Any]:
    """Build the JSON-RPC body for ``getAssetsByOwner``."""
    return {
        "jsonrpc": "2.0",
        "id": REQUEST_ID,
        "method": "getAssetsByOwner",
        "params": {
            "ownerAddress": owner,
            "grouping": ["collection"],
            "sortBy": {
                "sortBy": "created",
                "sortDirection": "desc"
            }
        }
    }


class DasClient:
    """Client for a DAS-compatible indexing endpoint."""

    def __init__(self, url: str, timeout: float = 30.0, http_client: Optional[httpx.Client] = None):
        self.url = url
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_config(cls, config: SolanaConfig) -> 'DasClient':
        return cls(config.das_api_url, timeout=config.timeout)

    def get_assets_page(self, owner: Union[Pubkey, str]) -> AssetPage:
        """
        Fetch the first page of assets owned by ``owner``.

        Raises:
            FfiError: transport failure, non-2xx status, JSON-RPC error or
                malformed body
        """
        owner_address = str(owner)

        with log_operation_context(OperationType.ASSET_QUERY, "get_assets_by_owner", {"owner": owner_address}):
            with error_context(FETCH_CONTEXT):
                response = self._post(build_assets_by_owner_request(owner_address))
                response.raise_for_status()
                body = response.json()
                if "error" in body:
                    raise ValueError(f"indexer returned error {body['error']}")
                page = AssetPage.from_dict(body["result"])

        logger.info(
            "Digital assets fetched",
            owner=owner_address,
            count=len(page.items),
            total=page.total,
            limit=page.limit
        )
        return page

    def get_assets_by_owner(self, owner: Union[Pubkey, str]) -> List[DigitalAsset]:
        """Fetch the assets owned by ``owner`` (first page only)."""
        return self.get_assets_page(owner).items

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if self._http_client is not None:
            return self._http_client.post(self.url, json=payload, headers=headers)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.url, json=payload, headers=headers)


def fetch_digital_assets_by_owner(owner: Union[Pubkey, str],
                                  config: Optional[SolanaConfig] = None) -> List[DigitalAsset]:
    """Fetch the assets owned by ``owner`` using the configured indexing endpoint."""
    if config is None:
        config = SolanaConfig.from_env()
    return DasClient.from_config(config).get_assets_by_owner(owner)
