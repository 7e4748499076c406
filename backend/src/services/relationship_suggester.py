"""Language-model collaborator: concept extraction and relationship suggestions."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

JSON_ARRAY_PATTERN = re.compile(r"\[.*\]", re.DOTALL)

EXTRACT_CONCEPTS_PROMPT = """You are a learning assistant that helps identify key concepts from notes.
Extract the main concepts, terms, and ideas from the given text.
Return them as a JSON array of strings. Only return the JSON array, nothing else.
Example: ["concept1", "concept2", "concept3"]"""

SUGGEST_CONNECTIONS_PROMPT = """You are a learning assistant helping students see connections between concepts.
Identify meaningful relationships between the given concepts.
Explain each connection in a simple, insightful way.

Return a JSON array with objects containing:
- from: first concept
- to: second concept
- explanation: how they connect (1 sentence)

Only return the JSON array."""


class RelationshipSuggesterError(Exception):
    """Raised when the language-model call fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


def parse_json_array(text: str) -> List[Any]:
    """
    Parse a model reply that should be a JSON array.

    Falls back to the first ``[...]`` span when the model wraps the array in
    prose, and to an empty list when nothing parses.
    """
    candidates = [text or ""]
    match = JSON_ARRAY_PATTERN.search(text or "")
    if match:
        candidates.append(match.group(0))
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(parsed, list):
            return parsed
    return []


class RelationshipSuggester:
    """Thin client for an OpenAI-compatible chat-completions endpoint."""

    MAX_TOKENS = 1000

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        config: AppConfig | None = None,
    ) -> None:
        config = config or get_config()
        self.api_key = api_key if api_key is not None else config.llm_api_key
        self.model = model or config.llm_model
        self.base_url = (base_url or config.llm_base_url).rstrip("/")
        self.timeout = timeout or config.llm_timeout_seconds

    async def _complete(self, system_prompt: str, user_message: str, temperature: float) -> str:
        if not self.api_key:
            raise RelationshipSuggesterError("Language model API key not configured")

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ]

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": self.model,
                        "messages": messages,
                        "temperature": temperature,
                        "max_tokens": self.MAX_TOKENS,
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"LLM API error: {e.response.status_code}")
            raise RelationshipSuggesterError(
                f"API error: {e.response.status_code}",
                {"status_code": e.response.status_code},
            )
        except httpx.TimeoutException:
            raise RelationshipSuggesterError("Request timeout")
        except httpx.HTTPError as e:
            raise RelationshipSuggesterError(f"LLM call failed: {str(e)}")

        choices = data.get("choices", [])
        if not choices:
            raise RelationshipSuggesterError("No response from model")
        return choices[0].get("message", {}).get("content", "") or ""

    async def extract_concepts(self, note_content: str) -> List[str]:
        """Ask the model for the key concepts of ``note_content``."""
        reply = await self._complete(EXTRACT_CONCEPTS_PROMPT, note_content, temperature=0.3)
        return [item.strip() for item in parse_json_array(reply) if isinstance(item, str) and item.strip()]

    async def suggest_connections(self, concepts: List[str]) -> List[Dict[str, Any]]:
        """Ask the model how ``concepts`` relate; returns raw ``{from, to, explanation}`` dicts."""
        reply = await self._complete(
            SUGGEST_CONNECTIONS_PROMPT,
            f"Find connections between these concepts: {', '.join(concepts)}",
            temperature=0.6,
        )
        return [item for item in parse_json_array(reply) if isinstance(item, dict)]


_suggester: RelationshipSuggester | None = None


def get_relationship_suggester() -> RelationshipSuggester:
    """Get or create the suggester singleton."""
    global _suggester
    if _suggester is None:
        _suggester = RelationshipSuggester()
    return _suggester


__all__ = [
    "RelationshipSuggester",
    "RelationshipSuggesterError",
    "get_relationship_suggester",
    "parse_json_array",
]
