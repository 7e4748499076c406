"""Unit tests for the language-model relationship suggester."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from backend.src.services.config import AppConfig
from backend.src.services.relationship_suggester import (
    RelationshipSuggester,
    RelationshipSuggesterError,
    parse_json_array,
)

CLIENT_PATH = "backend.src.services.relationship_suggester.httpx.AsyncClient"


@pytest.fixture
def config(tmp_path):
    return AppConfig(vault_base_path=tmp_path, llm_api_key="test-key")


@pytest.fixture
def suggester(config):
    return RelationshipSuggester(config=config)


def _completion(content: str) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    response.raise_for_status = MagicMock()
    return response


def _install(mock_client, response) -> AsyncMock:
    post = AsyncMock(return_value=response)
    mock_client.return_value.__aenter__.return_value.post = post
    return post


class TestParseJsonArray:
    def test_plain_array(self):
        assert parse_json_array('["a", "b"]') == ["a", "b"]

    def test_array_wrapped_in_prose(self):
        reply = 'Sure! Here you go:\n```json\n[{"from": "A", "to": "B"}]\n```\nHope it helps.'

        assert parse_json_array(reply) == [{"from": "A", "to": "B"}]

    @pytest.mark.parametrize("reply", ["no json here", '{"from": "A"}', "", "[broken"])
    def test_unparseable_reply_is_empty(self, reply):
        assert parse_json_array(reply) == []


class TestSuggestConnections:
    @pytest.mark.asyncio
    async def test_returns_relationship_dicts(self, suggester):
        reply = '[{"from": "Chlorophyll", "to": "Sunlight", "explanation": "absorbs it"}, "junk"]'
        with patch(CLIENT_PATH) as mock_client:
            post = _install(mock_client, _completion(reply))

            result = await suggester.suggest_connections(["Chlorophyll", "Sunlight"])

        assert result == [{"from": "Chlorophyll", "to": "Sunlight", "explanation": "absorbs it"}]
        body = post.call_args.kwargs["json"]
        assert body["temperature"] == 0.6
        assert body["max_tokens"] == RelationshipSuggester.MAX_TOKENS
        assert body["messages"][1]["content"] == (
            "Find connections between these concepts: Chlorophyll, Sunlight"
        )
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"

    @pytest.mark.asyncio
    async def test_non_json_reply_yields_empty_list(self, suggester):
        with patch(CLIENT_PATH) as mock_client:
            _install(mock_client, _completion("They are all related somehow."))

            assert await suggester.suggest_connections(["A", "B"]) == []

    @pytest.mark.asyncio
    async def test_http_error_raises(self, suggester):
        request = httpx.Request("POST", "https://example.test/chat/completions")
        failing = MagicMock()
        failing.raise_for_status.side_effect = httpx.HTTPStatusError(
            "rate limited", request=request, response=httpx.Response(429, request=request)
        )
        with patch(CLIENT_PATH) as mock_client:
            _install(mock_client, failing)

            with pytest.raises(RelationshipSuggesterError) as excinfo:
                await suggester.suggest_connections(["A", "B"])

        assert excinfo.value.details == {"status_code": 429}

    @pytest.mark.asyncio
    async def test_timeout_raises(self, suggester):
        with patch(CLIENT_PATH) as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ReadTimeout("slow")
            )

            with pytest.raises(RelationshipSuggesterError, match="timeout"):
                await suggester.suggest_connections(["A", "B"])

    @pytest.mark.asyncio
    async def test_empty_choices_raise(self, suggester):
        response = _completion("")
        response.json.return_value = {"choices": []}
        with patch(CLIENT_PATH) as mock_client:
            _install(mock_client, response)

            with pytest.raises(RelationshipSuggesterError):
                await suggester.suggest_connections(["A", "B"])

    @pytest.mark.asyncio
    async def test_missing_api_key_raises_without_calling_out(self, tmp_path):
        suggester = RelationshipSuggester(config=AppConfig(vault_base_path=tmp_path))

        with patch(CLIENT_PATH) as mock_client:
            with pytest.raises(RelationshipSuggesterError, match="not configured"):
                await suggester.suggest_connections(["A", "B"])

        mock_client.assert_not_called()


class TestExtractConcepts:
    @pytest.mark.asyncio
    async def test_returns_stripped_labels(self, suggester):
        with patch(CLIENT_PATH) as mock_client:
            post = _install(mock_client, _completion('[" Photosynthesis ", "", 3, "Sunlight"]'))

            concepts = await suggester.extract_concepts("Plants turn light into sugar.")

        assert concepts == ["Photosynthesis", "Sunlight"]
        body = post.call_args.kwargs["json"]
        assert body["temperature"] == 0.3
        assert body["messages"][1]["content"] == "Plants turn light into sugar."


def test_explicit_arguments_override_config(config):
    suggester = RelationshipSuggester(
        api_key="other", model="some/model", base_url="https://llm.test/v1/", config=config
    )

    assert suggester.api_key == "other"
    assert suggester.model == "some/model"
    assert suggester.base_url == "https://llm.test/v1"
