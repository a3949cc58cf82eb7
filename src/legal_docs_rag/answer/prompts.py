"""Prompt templates for grounded answers.

Keeping prompts in one place makes them easy to audit and version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from legal_docs_rag.retrieval.models import MergedSource

NO_CONTEXT_PLACEHOLDER = "No specific documentation found for this query."

SYSTEM_TEMPLATE = """\
You are a friendly and helpful legal documentation assistant for US state laws. \
Your purpose is to help everyday people understand state-specific legal \
documentation and regulations in simple terms.

Role and Behavior:
1. Be friendly and approachable in your responses
2. Explain legal concepts in plain, everyday language
3. Define any legal terms or jargon when you use them
4. Use simple examples when helpful
5. Break down complex legal concepts into smaller, understandable parts

Documentation Context:
{context}

Remember:
- Explain everything as if you're talking to a teenager
- Keep your explanation accurate but easy to understand
- It's okay to simplify, but don't leave out important details
- Only rely on the documentation context above; if it does not cover the \
question, say so instead of guessing

State: {state}
"""


def format_context(sources: list[MergedSource]) -> str:
    """Render merged sources as context blocks, or the no-context placeholder."""
    if not sources:
        return NO_CONTEXT_PLACEHOLDER
    blocks = []
    for source in sources:
        header = f"Relevant Information:\nSource: {source.url}" if source.url else "Relevant Information:"
        blocks.append(f"{header}\n{source.content}\n---\n")
    return "\n".join(blocks)


def build_answer_prompt(question: str, state: str, sources: list[MergedSource]) -> list[BaseMessage]:
    """Assemble the system + user messages for a grounded answer."""
    system = SYSTEM_TEMPLATE.format(context=format_context(sources), state=state)
    return [
        SystemMessage(content=system),
        HumanMessage(content=question),
    ]
