"""Natural-language ("AI") recipe search using Gemini.

GeminiSearchProvider.ai_search(query):
1. Ask Gemini to extract complexSearch parameters from the sentence
   (prompt in src/prompts/prompts.py).
2. Parse the answer leniently: direct JSON first, then the first {...} block.
3. Run a single complexSearch page with those parameters.

The result is one unpaginated batch flagged aiOptimized. Model and parsing
failures raise AISearchError so the coordinator can fall back to keyword
search; Spoonacular errors (including quota) propagate unchanged.
"""

import asyncio
import json
import re
from typing import Any, Optional

from google import genai
from pydantic import ValidationError

from src.models.models import ExtractedSearchParams
from src.prompts.prompts import get_search_extraction_prompt
from src.providers.spoonacular import SpoonacularClient
from src.search.errors import AISearchError
from src.utils.config import config
from src.utils.logger import logger


def parse_search_params(response_text: Optional[str]) -> Optional[ExtractedSearchParams]:
    """Parse Gemini's answer into validated ExtractedSearchParams.

    Tries json.loads on the full text, then a regex-extracted JSON object
    (Gemini sometimes wraps the object in prose or code fences).

    Returns:
        ExtractedSearchParams, or None if no valid JSON object was found or it
        failed validation.
    """
    if not response_text:
        return None

    parsed: Any = None
    try:
        parsed = json.loads(response_text)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", response_text, re.DOTALL)
        if match:
            try:
                parsed = json.loads(match.group())
            except json.JSONDecodeError as e:
                logger.debug(f"Regex JSON extraction failed: {e}")

    if not isinstance(parsed, dict):
        logger.warning("Failed to parse JSON from Gemini response")
        return None

    try:
        return ExtractedSearchParams.model_validate(parsed)
    except ValidationError as e:
        logger.warning(f"Gemini search parameters failed validation: {e.error_count()} error(s)")
        return None


class GeminiSearchProvider:
    """Natural-language search provider: Gemini parameter extraction + Spoonacular."""

    def __init__(
        self,
        spoonacular: SpoonacularClient,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_results: Optional[int] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        """Initialize GeminiSearchProvider.

        Args:
            spoonacular: Client used to run the extracted search.
            api_key: Gemini API key. Defaults to config.GEMINI_API_KEY.
            model: Gemini model name. Defaults to config.GEMINI_MODEL.
            max_results: Recipes per natural-language search. Defaults to config.AI_SEARCH_MAX_RESULTS.
            client: Pre-built genai.Client (tests).

        Raises:
            ValueError: If no Gemini API key is available and no client was given.
        """
        api_key = api_key or config.GEMINI_API_KEY
        if client is None and not api_key:
            raise ValueError("GEMINI_API_KEY is required for natural-language search")

        self.spoonacular = spoonacular
        self.model = model or config.GEMINI_MODEL
        self.max_results = max_results or config.AI_SEARCH_MAX_RESULTS
        self.client = client or genai.Client(api_key=api_key)

    async def extract_params(self, query: str) -> ExtractedSearchParams:
        """Ask Gemini for complexSearch parameters.

        Raises:
            AISearchError: If the Gemini call fails or its answer cannot be parsed.
        """
        try:
            # Sync Gemini client, run in a worker thread
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=get_search_extraction_prompt(query),
            )
        except Exception as e:
            raise AISearchError(f"AI search failed: Gemini request error: {e}") from e

        params = parse_search_params(getattr(response, "text", None))
        if params is None:
            raise AISearchError("AI search failed: could not parse Gemini response")
        return params

    async def ai_search(self, query: str) -> dict[str, Any]:
        """Search recipes from a natural-language request.

        Returns:
            {"results": [...], "totalResults": int, "aiOptimized": True,
             "originalQuery": str, "searchParams": dict}
        """
        query = query.strip()
        params = await self.extract_params(query)
        search_params = params.to_params()
        if not search_params:
            # Nothing extracted; search the sentence itself
            search_params = {"query": query}

        logger.info(f"AI search parameters for {query!r}: {search_params}")
        body = await self.spoonacular.complex_search(search_params, number=self.max_results)

        return {
            "results": body.get("results", []),
            "totalResults": body.get("totalResults", len(body.get("results", []))),
            "aiOptimized": True,
            "originalQuery": query,
            "searchParams": search_params,
            "apiLimitReached": bool(body.get("apiLimitReached")),
        }
