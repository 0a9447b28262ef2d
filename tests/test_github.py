"""Tests for the GitHub client and manifest fetcher (no network required)."""

from __future__ import annotations

import base64
import time
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from actionscan.engines.action_resolver.identity import parse_reference
from actionscan.engines.action_resolver.resolver import ManifestFetcher
from actionscan.engines.github.client import GitHubClient
from actionscan.engines.github.manifest_fetcher import GitHubManifestFetcher
from actionscan.exceptions import ManifestUnavailableError, RateLimitError

_REQUEST = httpx.Request("GET", "https://api.github.com/test")


def _response(status: int, json=None, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status, json=json, headers=headers, request=_REQUEST)


def _file_payload(text: str) -> dict:
    return {
        "type": "file",
        "encoding": "base64",
        "content": base64.b64encode(text.encode()).decode(),
    }


def _bare_client() -> GitHubClient:
    client = GitHubClient.__new__(GitHubClient)
    client._client = AsyncMock()
    return client


# ── GitHubClient ─────────────────────────────────────────────────────────


class TestGitHubClient:
    def test_parse_next_link(self):
        header = (
            '<https://api.github.com/repos/a/b/pulls/1/files?page=2>; rel="next", '
            '<https://api.github.com/repos/a/b/pulls/1/files?page=5>; rel="last"'
        )
        url = "https://api.github.com/repos/a/b/pulls/1/files?page=2"
        assert GitHubClient._parse_next_link(header) == url

    def test_parse_next_link_empty(self):
        assert GitHubClient._parse_next_link("") is None

    def test_token_from_env(self):
        with patch.dict("os.environ", {"GITHUB_TOKEN": "abc"}, clear=False):
            client = GitHubClient()
        assert client._client.headers["Authorization"] == "token abc"

    def test_explicit_token_wins(self):
        with patch.dict("os.environ", {"GITHUB_TOKEN": "abc"}, clear=False):
            client = GitHubClient(token="xyz")
        assert client._client.headers["Authorization"] == "token xyz"

    @pytest.mark.anyio
    async def test_rate_limit_sleep(self):
        client = GitHubClient.__new__(GitHubClient)
        response = MagicMock()
        response.headers = {
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(time.time()) + 2),
        }
        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await client._check_rate_limit(response)
            mock_sleep.assert_called_once()
            assert mock_sleep.call_args[0][0] >= 1

    @pytest.mark.anyio
    async def test_retry_on_server_error(self):
        client = _bare_client()
        client._client.get = AsyncMock(side_effect=[_response(502), _response(200, json={})])

        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await client._request_with_retry("/test")
        assert result.status_code == 200
        assert client._client.get.call_count == 2

    @pytest.mark.anyio
    async def test_retry_exhausted(self):
        client = _bare_client()
        client._client.get = AsyncMock(return_value=_response(503))

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(httpx.HTTPStatusError):
                await client._request_with_retry("/test")
        assert client._client.get.call_count == 3

    @pytest.mark.anyio
    async def test_rate_limit_exhausted_raises(self):
        client = _bare_client()
        limited = _response(403, headers={"X-RateLimit-Remaining": "0", "Retry-After": "5"})
        client._client.get = AsyncMock(return_value=limited)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(RateLimitError) as exc_info:
                await client._request_with_retry("/test")
        assert exc_info.value.retry_after == 5

    @pytest.mark.anyio
    async def test_retry_on_timeout(self):
        client = _bare_client()
        client._client.get = AsyncMock(
            side_effect=[httpx.ReadTimeout("slow"), _response(200, json={})]
        )
        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await client._request_with_retry("/test")
        assert result.status_code == 200

    @pytest.mark.anyio
    async def test_get_optional_404(self):
        client = _bare_client()
        client._client.get = AsyncMock(return_value=_response(404))
        assert await client.get_optional("/repos/o/r/contents/action.yml") is None

    @pytest.mark.anyio
    async def test_get_optional_other_4xx_raises(self):
        client = _bare_client()
        client._client.get = AsyncMock(return_value=_response(401))
        with pytest.raises(httpx.HTTPStatusError):
            await client.get_optional("/repos/o/r/contents/action.yml")

    @pytest.mark.anyio
    async def test_get_file_content_decodes(self):
        client = _bare_client()
        client._client.get = AsyncMock(return_value=_response(200, json=_file_payload("name: x\n")))

        content = await client.get_file_content("o", "r", "action.yml", ref="v1")

        assert content == "name: x\n"
        client._client.get.assert_called_once_with(
            "/repos/o/r/contents/action.yml", params={"ref": "v1"}
        )

    @pytest.mark.anyio
    async def test_get_file_content_directory_is_none(self):
        client = _bare_client()
        client._client.get = AsyncMock(return_value=_response(200, json=[{"type": "file"}]))
        assert await client.get_file_content("o", "r", "somedir") is None

    @pytest.mark.anyio
    async def test_list_directory(self):
        client = _bare_client()
        entries = [{"type": "file", "name": "ci.yml", "path": ".github/workflows/ci.yml"}]
        client._client.get = AsyncMock(return_value=_response(200, json=entries))
        assert await client.list_directory("o", "r", ".github/workflows") == entries

    @pytest.mark.anyio
    async def test_list_directory_missing(self):
        client = _bare_client()
        client._client.get = AsyncMock(return_value=_response(404))
        assert await client.list_directory("o", "r", ".github/workflows") is None


# ── GitHubManifestFetcher ────────────────────────────────────────────────


def _fetcher(side_effect) -> tuple[GitHubManifestFetcher, AsyncMock]:
    client = MagicMock(spec=GitHubClient)
    client.get_file_content = AsyncMock(side_effect=side_effect)
    return GitHubManifestFetcher(client), client.get_file_content


class TestGitHubManifestFetcher:
    def test_satisfies_protocol(self):
        assert isinstance(GitHubManifestFetcher(MagicMock(spec=GitHubClient)), ManifestFetcher)

    @pytest.mark.anyio
    async def test_action_yml(self):
        fetcher, get_content = _fetcher(["runs:\n  using: composite\n  steps: []\n"])
        manifest = await fetcher.fetch(parse_reference("org/a@v1"))
        assert manifest == {"runs": {"using": "composite", "steps": []}}
        get_content.assert_called_once_with("org", "a", "action.yml", ref="v1")

    @pytest.mark.anyio
    async def test_falls_back_to_action_yaml(self):
        fetcher, get_content = _fetcher([None, "name: fallback\n"])
        manifest = await fetcher.fetch(parse_reference("org/a/sub@v1"))
        assert manifest == {"name": "fallback"}
        paths = [call.args[2] for call in get_content.call_args_list]
        assert paths == ["sub/action.yml", "sub/action.yaml"]

    @pytest.mark.anyio
    async def test_absent(self):
        fetcher, get_content = _fetcher([None, None])
        assert await fetcher.fetch(parse_reference("org/a@v1")) is None
        assert get_content.call_count == 2

    @pytest.mark.anyio
    async def test_empty_file(self):
        fetcher, _ = _fetcher([""])
        assert await fetcher.fetch(parse_reference("org/a@v1")) == {}

    @pytest.mark.anyio
    async def test_non_mapping_document(self):
        fetcher, _ = _fetcher(["- just\n- a list\n"])
        assert await fetcher.fetch(parse_reference("org/a@v1")) == {}

    @pytest.mark.anyio
    async def test_invalid_yaml(self):
        fetcher, _ = _fetcher(["runs: [unclosed\n"])
        with pytest.raises(ManifestUnavailableError) as exc_info:
            await fetcher.fetch(parse_reference("org/a@v1"))
        assert "invalid YAML" in exc_info.value.reason

    @pytest.mark.anyio
    async def test_server_error(self):
        err = httpx.HTTPStatusError("500", request=_REQUEST, response=_response(500))
        fetcher, _ = _fetcher(err)
        with pytest.raises(ManifestUnavailableError) as exc_info:
            await fetcher.fetch(parse_reference("org/a@v1"))
        assert exc_info.value.full_name == "org/a@v1"
        assert "HTTP 500" in exc_info.value.reason

    @pytest.mark.anyio
    async def test_rate_limited(self):
        fetcher, _ = _fetcher(RateLimitError(60))
        with pytest.raises(ManifestUnavailableError):
            await fetcher.fetch(parse_reference("org/a@v1"))

    @pytest.mark.anyio
    async def test_transport_error(self):
        fetcher, _ = _fetcher(httpx.ConnectError("refused"))
        with pytest.raises(ManifestUnavailableError) as exc_info:
            await fetcher.fetch(parse_reference("org/a@v1"))
        assert "ConnectError" in exc_info.value.reason
