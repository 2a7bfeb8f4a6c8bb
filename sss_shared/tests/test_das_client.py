"""
Unit tests for the DAS asset query client.
"""

import json
import unittest

import httpx
from solders.keypair import Keypair

from ..clients.das_client import (
    AssetPage,
    DasClient,
    DigitalAsset,
    build_assets_by_owner_request,
)
from ..config import SolanaConfig
from ..errors import FfiError

DAS_URL = "https://das.example.com/"

SAMPLE_RESULT = {
    "total": 2,
    "limit": 1000,
    "page": 1,
    "items": [
        {
            "interface": "V1_NFT",
            "id": "JEGruwYE13mhX2wi2MGrPmeLiVyZtbBptmVy9vG3pXRC",
            "content": {"json_uri": "https://x/1.json", "metadata": {"name": "Tree #1"}},
            "compression": {"compressed": True}
        },
        {
            "interface": "FungibleToken",
            "id": "9ARngHhVaCtH5JFieRdSS5Y8cdZk2TMF4tfGSWFB9iSK",
            "content": None
        }
    ]
}


def rpc_response(result=None, error=None, status_code=200):
    body = {"jsonrpc": "2.0", "id": "sss-shared"}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    return httpx.Response(status_code, json=body)


class TestAssetsByOwnerRequest(unittest.TestCase):
    """Test cases for the getAssetsByOwner request body."""

    def test_request_shape(self):
        """Test the getAssetsByOwner request body."""
        body = build_assets_by_owner_request("Owner111")

        self.assertEqual(body["jsonrpc"], "2.0")
        self.assertEqual(body["method"], "getAssetsByOwner")
        self.assertEqual(body["params"], {
            "ownerAddress": "Owner111",
            "grouping": ["collection"],
            "sortBy": {"sortBy": "created", "sortDirection": "desc"}
        })


class TestDasClient(unittest.TestCase):
    """Test cases for DasClient."""

    def setUp(self):
        self.owner = Keypair().pubkey()
        self.requests = []

    def make_client(self, response):
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if isinstance(response, Exception):
                raise response
            return response

        return DasClient(DAS_URL, http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    def test_get_assets_by_owner(self):
        """Test assets are parsed from the result items."""
        client = self.make_client(rpc_response(SAMPLE_RESULT))

        assets = client.get_assets_by_owner(self.owner)

        self.assertEqual(len(assets), 2)
        self.assertIsInstance(assets[0], DigitalAsset)
        self.assertEqual(assets[0].id, "JEGruwYE13mhX2wi2MGrPmeLiVyZtbBptmVy9vG3pXRC")
        self.assertEqual(assets[0].content["json_uri"], "https://x/1.json")
        self.assertIsNone(assets[1].content)

    def test_sends_single_post(self):
        """Test exactly one JSON POST is sent."""
        client = self.make_client(rpc_response(SAMPLE_RESULT))

        client.get_assets_page(self.owner)

        self.assertEqual(len(self.requests), 1)
        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), DAS_URL)
        self.assertEqual(request.headers["content-type"], "application/json")
        body = json.loads(request.content)
        self.assertEqual(body["params"]["ownerAddress"], str(self.owner))

    def test_page_metadata(self):
        """Test total and limit are exposed on the page."""
        page = self.make_client(rpc_response(SAMPLE_RESULT)).get_assets_page(str(self.owner))

        self.assertIsInstance(page, AssetPage)
        self.assertEqual(page.total, 2)
        self.assertEqual(page.limit, 1000)

    def test_empty_result(self):
        """Test an empty item list."""
        client = self.make_client(rpc_response({"total": 0, "limit": 1000, "items": []}))

        self.assertEqual(client.get_assets_by_owner(self.owner), [])

    def test_json_rpc_error(self):
        """Test a JSON-RPC error body raises FfiError."""
        client = self.make_client(rpc_response(error={"code": -32602, "message": "Invalid params"}))

        with self.assertRaises(FfiError) as ctx:
            client.get_assets_by_owner(self.owner)
        self.assertIn("Failed to fetch digital assets", str(ctx.exception))

    def test_http_error_status(self):
        """Test a non-2xx status raises FfiError."""
        client = self.make_client(httpx.Response(503, text="unavailable"))

        with self.assertRaises(FfiError):
            client.get_assets_by_owner(self.owner)

    def test_transport_error(self):
        """Test a connection failure raises FfiError."""
        client = self.make_client(httpx.ConnectError("connection refused"))

        with self.assertRaises(FfiError) as ctx:
            client.get_assets_by_owner(self.owner)
        self.assertIn("connection refused", str(ctx.exception))

    def test_malformed_body(self):
        """Test a result missing fields raises FfiError."""
        client = self.make_client(httpx.Response(200, json={"jsonrpc": "2.0", "result": {"items": []}}))

        with self.assertRaises(FfiError):
            client.get_assets_by_owner(self.owner)

    def test_non_json_body(self):
        """Test a non-JSON body raises FfiError."""
        client = self.make_client(httpx.Response(200, text="<html>"))

        with self.assertRaises(FfiError):
            client.get_assets_by_owner(self.owner)

    def test_from_config(self):
        """Test client creation from configuration."""
        client = DasClient.from_config(SolanaConfig(das_api_url=DAS_URL, timeout=5))

        self.assertEqual(client.url, DAS_URL)
        self.assertEqual(client.timeout, 5)


class TestDigitalAsset(unittest.TestCase):
    """Test cases for DigitalAsset."""

    def test_to_dict_keeps_known_fields(self):
        """Test to_dict keeps only id, content and metadata."""
        asset = DigitalAsset.from_dict(SAMPLE_RESULT["items"][0])

        self.assertEqual(asset.to_dict(), {
            "id": "JEGruwYE13mhX2wi2MGrPmeLiVyZtbBptmVy9vG3pXRC",
            "content": {"json_uri": "https://x/1.json", "metadata": {"name": "Tree #1"}},
            "metadata": None
        })

    def test_missing_id_rejected(self):
        """Test an item without id is rejected."""
        with self.assertRaises(KeyError):
            DigitalAsset.from_dict({"content": {}})
