"""
Answer — grounded prompt construction, chat-model invocation, and fallback suggestions.
"""

from legal_docs_rag.answer.composer import AnswerComposer
from legal_docs_rag.answer.suggestions import build_suggestions

__all__ = ["AnswerComposer", "build_suggestions"]
