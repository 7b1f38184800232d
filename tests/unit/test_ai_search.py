"""Unit tests for Gemini-backed natural-language search."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.prompts.prompts import DIETS, MEAL_TYPES, get_search_extraction_prompt
from src.providers.ai_search import GeminiSearchProvider, parse_search_params
from src.search.errors import AISearchError, QuotaExceededError

SEARCH_BODY = {"results": [{"id": 1, "title": "Vegan Chili"}, {"id": 2, "title": "Lentil Soup"}], "totalResults": 2}


def gemini_client(text=None, error=None):
    client = MagicMock()
    if error is not None:
        client.models.generate_content.side_effect = error
    else:
        client.models.generate_content.return_value = SimpleNamespace(text=text)
    return client


@pytest.fixture
def spoonacular():
    client = MagicMock()
    client.complex_search = AsyncMock(return_value=SEARCH_BODY)
    return client


class TestParseSearchParams:
    """Test lenient parsing of Gemini answers."""

    def test_plain_json(self):
        params = parse_search_params('{"query": "chili", "diet": "vegan"}')

        assert params.to_params() == {"query": "chili", "diet": "vegan"}

    def test_json_wrapped_in_code_fence(self):
        text = 'Here you go:\n```json\n{"query": "soup", "maxReadyTime": 30}\n```'

        params = parse_search_params(text)

        assert params.to_params() == {"query": "soup", "maxReadyTime": 30}

    @pytest.mark.parametrize("text", [None, "", "no json here", "{not json}", "[1, 2]"])
    def test_unparseable(self, text):
        assert parse_search_params(text) is None

    def test_invalid_values(self):
        assert parse_search_params('{"maxReadyTime": -10}') is None


class TestPrompt:
    """Test the extraction prompt."""

    def test_prompt_contains_request_and_allowed_values(self):
        prompt = get_search_extraction_prompt("quick vegan dinner")

        assert prompt.endswith("Request: quick vegan dinner")
        assert all(diet in prompt for diet in DIETS)
        assert all(meal_type in prompt for meal_type in MEAL_TYPES)
        assert '"maxReadyTime"' in prompt


class TestGeminiSearchProvider:
    """Test GeminiSearchProvider with mocked Gemini and Spoonacular clients."""

    def test_requires_api_key_without_client(self, spoonacular, monkeypatch):
        from src.utils.config import config

        monkeypatch.setattr(config, "GEMINI_API_KEY", "")

        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            GeminiSearchProvider(spoonacular)

    @pytest.mark.asyncio
    async def test_ai_search(self, spoonacular):
        client = gemini_client('{"query": "dinner", "diet": "vegan", "maxReadyTime": 30}')
        provider = GeminiSearchProvider(spoonacular, model="test-model", max_results=12, client=client)

        result = await provider.ai_search("  quick vegan dinner  ")

        assert client.models.generate_content.call_args.kwargs["model"] == "test-model"
        assert "quick vegan dinner" in client.models.generate_content.call_args.kwargs["contents"]
        spoonacular.complex_search.assert_awaited_once_with(
            {"query": "dinner", "diet": "vegan", "maxReadyTime": 30}, number=12
        )
        assert result["aiOptimized"] is True
        assert result["results"] == SEARCH_BODY["results"]
        assert result["totalResults"] == 2
        assert result["originalQuery"] == "quick vegan dinner"
        assert result["apiLimitReached"] is False

    @pytest.mark.asyncio
    async def test_empty_extraction_searches_raw_query(self, spoonacular):
        provider = GeminiSearchProvider(spoonacular, client=gemini_client("{}"))

        result = await provider.ai_search("something nice for tonight")

        assert spoonacular.complex_search.await_args.args[0] == {"query": "something nice for tonight"}
        assert result["searchParams"] == {"query": "something nice for tonight"}

    @pytest.mark.asyncio
    async def test_gemini_error_raises_ai_search_error(self, spoonacular):
        provider = GeminiSearchProvider(spoonacular, client=gemini_client(error=RuntimeError("503 UNAVAILABLE")))

        with pytest.raises(AISearchError, match="AI search failed"):
            await provider.ai_search("quick vegan dinner")

        spoonacular.complex_search.assert_not_called()

    @pytest.mark.asyncio
    async def test_unparseable_answer_raises_ai_search_error(self, spoonacular):
        provider = GeminiSearchProvider(spoonacular, client=gemini_client("I cannot help with that"))

        with pytest.raises(AISearchError, match="could not parse"):
            await provider.ai_search("quick vegan dinner")

    @pytest.mark.asyncio
    async def test_spoonacular_quota_propagates(self, spoonacular):
        spoonacular.complex_search.side_effect = QuotaExceededError()
        provider = GeminiSearchProvider(spoonacular, client=gemini_client('{"query": "dinner"}'))

        with pytest.raises(QuotaExceededError):
            await provider.ai_search("quick vegan dinner")
