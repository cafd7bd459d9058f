"""Tests for granola_md.source — API client and token resolution."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from granola_md.config.models import APIConfig
from granola_md.errors import GranolaAPIError
from granola_md.source import GranolaClient, page_documents, resolve_token
from granola_md.source.auth import load_credentials


def _response(status_code=200, payload=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason_phrase = "Error" if status_code >= 400 else "OK"
    resp.json.return_value = payload if payload is not None else {}
    return resp


def _mock_client(*responses):
    client = AsyncMock()
    client.post.side_effect = list(responses)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


# ---------------------------------------------------------------------------
# GranolaClient.get_documents()
# ---------------------------------------------------------------------------


class TestGetDocuments:
    @pytest.mark.asyncio
    async def test_posts_with_bearer_token(self):
        mock_client = _mock_client(_response(payload={"documents": [{"id": "a"}], "has_more": False}))
        client = GranolaClient(APIConfig(), token="tok")

        with patch("granola_md.source.client.httpx.AsyncClient", return_value=mock_client):
            page = await client.get_documents(limit=10, offset=20)

        assert page["documents"] == [{"id": "a"}]
        args, kwargs = mock_client.post.call_args
        assert args[0] == "https://api.granola.ai/v2/get-documents"
        assert kwargs["json"] == {"limit": 10, "offset": 20}
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_rate_limit_is_retryable(self):
        mock_client = _mock_client(_response(status_code=429))
        client = GranolaClient(APIConfig(), token="tok")

        with patch("granola_md.source.client.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(GranolaAPIError) as exc_info:
                await client.get_documents()

        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_client_error_not_retryable(self):
        mock_client = _mock_client(_response(status_code=401))
        client = GranolaClient(APIConfig(), token="tok")

        with patch("granola_md.source.client.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(GranolaAPIError, match="401") as exc_info:
                await client.get_documents()

        assert not exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self):
        client = GranolaClient(APIConfig(), token="tok")

        with patch("httpx.AsyncClient.post", side_effect=httpx.ConnectError("down")):
            with pytest.raises(GranolaAPIError) as exc_info:
                await client.get_documents()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_non_object_payload(self):
        mock_client = _mock_client(_response(payload=["not", "a", "page"]))
        client = GranolaClient(APIConfig(), token="tok")

        with patch("granola_md.source.client.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(GranolaAPIError, match="unexpected payload"):
                await client.get_documents()

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            GranolaClient(APIConfig(), token="")


# ---------------------------------------------------------------------------
# GranolaClient.iter_documents()
# ---------------------------------------------------------------------------


class TestIterDocuments:
    @pytest.mark.asyncio
    async def test_follows_pages(self):
        mock_client = _mock_client(
            _response(payload={"documents": [{"id": "a"}, {"id": "b"}], "has_more": True}),
            _response(payload={"documents": [{"id": "c"}], "has_more": False}),
        )
        client = GranolaClient(APIConfig(page_size=2, page_delay=0), token="tok")

        with patch("granola_md.source.client.httpx.AsyncClient", return_value=mock_client):
            docs = [doc async for doc in client.iter_documents()]

        assert [d["id"] for d in docs] == ["a", "b", "c"]
        offsets = [call.kwargs["json"]["offset"] for call in mock_client.post.call_args_list]
        assert offsets == [0, 2]

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self):
        mock_client = _mock_client(_response(payload={"documents": [], "has_more": True}))
        client = GranolaClient(APIConfig(page_delay=0), token="tok")

        with patch("granola_md.source.client.httpx.AsyncClient", return_value=mock_client):
            assert [doc async for doc in client.iter_documents()] == []

        assert mock_client.post.call_count == 1

    @pytest.mark.asyncio
    async def test_sleeps_between_pages(self):
        mock_client = _mock_client(
            _response(payload={"documents": [{"id": "a"}], "has_more": True}),
            _response(payload={"documents": [{"id": "b"}], "has_more": False}),
        )
        client = GranolaClient(APIConfig(page_size=1, page_delay=0.2), token="tok")

        with patch("granola_md.source.client.httpx.AsyncClient", return_value=mock_client), \
                patch("granola_md.source.client.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            docs = [doc async for doc in client.iter_documents()]

        assert len(docs) == 2
        mock_sleep.assert_awaited_once_with(0.2)


class TestPageDocuments:
    def test_shapes(self):
        assert page_documents({"documents": [{"id": "a"}]}) == [{"id": "a"}]
        assert page_documents({"docs": [{"id": "b"}]}) == [{"id": "b"}]
        assert page_documents([{"id": "c"}, "junk"]) == [{"id": "c"}]
        assert page_documents({"documents": "nope"}) == []
        assert page_documents(None) == []


# ---------------------------------------------------------------------------
# Token resolution
# ---------------------------------------------------------------------------


class TestResolveToken:
    def test_explicit_token_wins(self, monkeypatch):
        monkeypatch.setenv("GRANOLA_TOKEN", "from-env")
        assert resolve_token(APIConfig(), "explicit") == "explicit"

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_TOKEN", "from-env")
        assert resolve_token(APIConfig(token_env="CUSTOM_TOKEN")) == "from-env"

    def test_credentials_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GRANOLA_TOKEN", raising=False)
        creds = tmp_path / "supabase.json"
        creds.write_text(json.dumps({"access_token": "file-token", "token_type": "bearer"}))
        assert resolve_token(APIConfig(credentials_file=str(creds))) == "file-token"

    def test_nothing_available(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GRANOLA_TOKEN", raising=False)
        config = APIConfig(credentials_file=str(tmp_path / "missing.json"))
        with pytest.raises(GranolaAPIError, match="GRANOLA_TOKEN"):
            resolve_token(config)

    def test_expired_credentials(self, tmp_path):
        creds = tmp_path / "supabase.json"
        creds.write_text(json.dumps({"access_token": "t", "token_type": "bearer", "expires_at": 1}))
        with pytest.raises(GranolaAPIError, match="expired"):
            load_credentials(creds)

    def test_corrupt_credentials(self, tmp_path):
        creds = tmp_path / "supabase.json"
        creds.write_text("{not json")
        with pytest.raises(GranolaAPIError, match="Failed to load"):
            load_credentials(creds)
