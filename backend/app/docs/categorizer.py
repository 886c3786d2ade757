"""LLM-backed categorization of extracted text into a CategoryTree."""

import logging
from dataclasses import dataclass
from typing import Any

from backend.app.docs.tree import new_node_id
from backend.app.errors import GenerationError
from backend.app.llm.client import StructuredCompletionClient
from backend.app.llm.schemas import CATEGORIZATION_INSTRUCTION, CATEGORY_TREE_SCHEMA
from backend.app.models.docs import CategoryNode

logger = logging.getLogger(__name__)

FALLBACK_CATEGORY_NAME = "Full Document Content"
EMPTY_TEXT_PLACEHOLDER = "No text was extracted from the document."


@dataclass
class CategorizationResult:
    """Outcome of categorization.

    error_message is set when the completion call failed; categories then hold
    the single fallback node with the full text so nothing is lost.
    """

    categories: list[CategoryNode]
    error_message: str | None = None


def fallback_tree(content: str) -> list[CategoryNode]:
    """Single-node tree holding the given content."""
    return [CategoryNode(id=new_node_id(), name=FALLBACK_CATEGORY_NAME, content=content)]


class DocumentCategorizer:
    """Turns extracted text into a filtered, id-assigned category tree."""

    def __init__(
        self,
        client: StructuredCompletionClient,
        *,
        name_max_length: int = 100,
        content_min_length: int = 10,
    ) -> None:
        self._client = client
        self._name_max_length = name_max_length
        self._content_min_length = content_min_length

    async def categorize(self, text: str) -> CategorizationResult:
        """Categorize text.

        Args:
            text: Extracted document text (may be empty)

        Returns:
            CategorizationResult; never raises for completion failures
        """
        stripped = text.strip()
        if not stripped:
            return CategorizationResult(categories=fallback_tree(EMPTY_TEXT_PLACEHOLDER))

        try:
            raw = await self._client.complete(
                system_instruction=CATEGORIZATION_INSTRUCTION,
                output_schema=CATEGORY_TREE_SCHEMA,
                user_payload=text,
            )
            if not isinstance(raw, list):
                raise GenerationError("malformed_output", "AI categorization did not return a list")
        except GenerationError as e:
            logger.warning(f"Categorization failed ({e.reason}), keeping full text as one category")
            return CategorizationResult(
                categories=fallback_tree(stripped),
                error_message=f"AI categorization failed: {e.message}",
            )

        nodes = self._filter(raw)
        if not nodes:
            logger.info("No categories survived filtering, using full document as one category")
            return CategorizationResult(categories=fallback_tree(stripped))

        return CategorizationResult(categories=nodes)

    def _filter(self, raw_nodes: list[Any]) -> list[CategoryNode]:
        """Build CategoryNodes from raw output, dropping out-of-bounds nodes.

        A dropped node's surviving children take its place. A node whose own
        content is too short is kept when it still has surviving children.
        """
        result: list[CategoryNode] = []
        for raw in raw_nodes:
            if not isinstance(raw, dict):
                continue

            name = str(raw.get("name") or "").strip()
            content = str(raw.get("content") or "").strip()
            raw_children = raw.get("children")
            children = self._filter(raw_children) if isinstance(raw_children, list) else []

            name_ok = 0 < len(name) <= self._name_max_length
            content_ok = len(content) > self._content_min_length

            if name_ok and (content_ok or children):
                result.append(
                    CategoryNode(id=new_node_id(), name=name, content=content, children=children)
                )
            else:
                result.extend(children)
        return result
