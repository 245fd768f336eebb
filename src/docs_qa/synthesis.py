"""
Answer synthesis from ranked passages.

`AnswerSynthesizer.synthesize` never raises: every failure is turned into a
user-facing message that still says how many relevant sections were found.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .errors import FailureKind, classify_failure
from .generation import GenerationProvider

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 400
MAX_OUTPUT_TOKENS = 500
TEMPERATURE = 0.3

PROMPT_TEMPLATE = """Based STRICTLY on these document excerpts, answer the user's question concisely.

QUESTION: {query}

DOCUMENT EXCERPTS:
{context}

INSTRUCTIONS:
- Answer using ONLY information from the documents above
- If the answer isn't found, say "The documents don't contain specific information about this"
- Be factual and reference which document the information came from
- Keep the answer under 300 words

ANSWER:"""

SETUP_REQUIRED_MESSAGE = """**AI Search Setup Required**

I found {count} relevant sections in your documents!

To get AI-powered answers:

1. Get a free Gemini API key from https://aistudio.google.com/
2. Set it in your environment: GEMINI_API_KEY=your_key_here
3. Restart the server"""

QUOTA_MESSAGE = """**API Limit Reached**

I found {count} relevant sections in your documents!

The Gemini API quota has been reached. This usually resets within minutes.

- Wait 1-2 minutes and try again
- Use keyword search for immediate results
- Review the search results below"""

AUTH_MESSAGE = """**API Key Issue**

I found {count} relevant sections in your documents, but the Gemini API key was rejected.

Please check GEMINI_API_KEY in your environment. Keys are available from https://aistudio.google.com/"""

TEMPORARY_ISSUE_MESSAGE = """**AI Service Temporary Issue**

I found {count} relevant sections!

The AI service is currently experiencing issues. Please:

- Try again in a moment
- Use keyword search for now
- Review the search results below"""


def build_context(chunks: Sequence[str]) -> str:
    return "\n\n".join(
        f"[Document {index}]\n{chunk[:EXCERPT_LENGTH]}..."
        for index, chunk in enumerate(chunks, start=1)
    )


def build_prompt(query: str, chunks: Sequence[str]) -> str:
    return PROMPT_TEMPLATE.format(query=query, context=build_context(chunks))


class AnswerSynthesizer:
    """Turn the top-ranked chunks into a grounded answer."""

    def __init__(self, generation_provider: GenerationProvider) -> None:
        self.generation_provider = generation_provider

    async def synthesize(self, query: str, chunks: Sequence[str]) -> str:
        count = len(chunks)
        if not self.generation_provider.is_configured:
            return SETUP_REQUIRED_MESSAGE.format(count=count)

        logger.info("Generating answer for %r from %d chunks", query, count)
        try:
            return await self.generation_provider.generate(
                build_prompt(query, chunks),
                max_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
            )
        except Exception as exc:
            kind = classify_failure(exc)
            logger.warning("Answer generation failed (%s): %s", kind.value, exc)
            if kind is FailureKind.QUOTA:
                return QUOTA_MESSAGE.format(count=count)
            if kind is FailureKind.AUTH:
                return AUTH_MESSAGE.format(count=count)
            return TEMPORARY_ISSUE_MESSAGE.format(count=count)
