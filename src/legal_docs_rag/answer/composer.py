"""Grounded answer generation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from legal_docs_rag.answer.prompts import build_answer_prompt

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from legal_docs_rag.retrieval.models import MergedSource

logger = logging.getLogger(__name__)


class AnswerComposer:
    """Builds the grounded prompt and invokes the chat model.

    Parameters
    ----------
    llm:
        Any LangChain chat model. When *None*, :func:`get_llm` is used.
    """

    def __init__(self, llm: BaseChatModel | None = None) -> None:
        if llm is None:
            from legal_docs_rag.answer.llm import get_llm

            llm = get_llm()
        self._llm = llm

    async def compose(self, question: str, state: str, context: list[MergedSource]) -> str:
        """Return the model's answer to *question* grounded in *context*."""
        messages = build_answer_prompt(question, state, context)
        logger.info("Composing answer for %s with %d context source(s)", state, len(context))
        response = await self._llm.ainvoke(messages)
        content = response.content
        return content if isinstance(content, str) else str(content)
