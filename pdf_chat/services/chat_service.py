"""
Chat service for generating answers using the LLM.
"""

from typing import List, Optional
from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import settings
from ..exceptions import UpstreamServiceError
from ..models import AskResponse, QueryMatch, SourcePreview
from ..utils import (
    measure_time,
    make_preview,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
Based on the following context from PDF documents, please answer the question.
Use ONLY the information in the context. If the answer cannot be found in the context, say that the information is not found in the provided context.

Context:
{context}

Question: {question}

Please provide a clear and accurate answer based solely on the provided context.
"""


class ChatService:
    """Service for generating chat responses using LLM."""

    def __init__(self, llm: Optional[BaseChatModel] = None):
        """Initialize the chat service."""
        self.llm = llm or self._initialize_llm()

    def _initialize_llm(self) -> ChatGoogleGenerativeAI:
        """Initialize the language model."""
        llm = ChatGoogleGenerativeAI(
            model=settings.google_chat_model,
            google_api_key=settings.google_api_key,
            temperature=settings.google_temperature,
            max_output_tokens=settings.google_max_tokens
        )

        log_processing_info("LLM initialized", {
            "model": settings.google_chat_model,
            "temperature": settings.google_temperature
        })

        return llm

    def build_context(self, matches: List[QueryMatch]) -> str:
        """Join match texts, best match first, separated by a blank line."""
        ordered = sorted(matches, key=lambda match: match.score, reverse=True)
        return "\n\n".join(match.text for match in ordered)

    def create_prompt(self, question: str, context: str) -> str:
        """
        Create a prompt for the LLM.

        Args:
            question: User's question, inserted verbatim
            context: Context from retrieved chunks

        Returns:
            Formatted prompt string
        """
        return PROMPT_TEMPLATE.format(context=context, question=question).strip()

    def build_sources(self, matches: List[QueryMatch]) -> List[SourcePreview]:
        """Preview of each match in descending score order."""
        ordered = sorted(matches, key=lambda match: match.score, reverse=True)
        return [
            SourcePreview(page_content=make_preview(match.text, settings.preview_length))
            for match in ordered
        ]

    @staticmethod
    def _response_text(content) -> str:
        if isinstance(content, str):
            return content
        # Some chat models return a list of content parts
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)

    @measure_time
    async def generate_answer(self, question: str, matches: List[QueryMatch]) -> AskResponse:
        """
        Generate an answer to the user's question from the retrieved chunks.

        The chat model is called exactly once.

        Raises:
            UpstreamServiceError: If the completion call fails
        """
        context = self.build_context(matches)
        prompt = self.create_prompt(question, context)

        try:
            response = await self.llm.ainvoke(prompt)
        except Exception as e:
            error_info = handle_processing_error(
                "response_generation",
                e,
                {
                    "question_length": len(question),
                    "matches_count": len(matches)
                }
            )
            raise UpstreamServiceError(
                "chat", f"Failed to generate response: {error_info['error_message']}"
            ) from e

        answer = self._response_text(response.content)
        sources = self.build_sources(matches)

        log_processing_info("Response generated", {
            "question_length": len(question),
            "context_length": len(context),
            "answer_length": len(answer),
            "sources_count": len(sources)
        })

        return AskResponse(answer=answer, sources=sources)
