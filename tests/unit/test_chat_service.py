"""Unit tests for ChatService answer generation."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage

from pdf_chat.exceptions import UpstreamServiceError
from pdf_chat.models import QueryMatch
from pdf_chat.services.chat_service import ChatService


def _match(text: str, score: float) -> QueryMatch:
    return QueryMatch(text=text, source_document_id="doc.pdf", score=score, page=1)


def _mock_llm(content="An answer.") -> MagicMock:
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    return llm


@pytest.mark.unit
def test_context_is_ordered_by_descending_score():
    service = ChatService(llm=_mock_llm())

    context = service.build_context([_match("low", 0.1), _match("high", 0.9), _match("mid", 0.5)])

    assert context == "high\n\nmid\n\nlow"


@pytest.mark.unit
def test_prompt_contains_context_question_and_instruction():
    service = ChatService(llm=_mock_llm())

    prompt = service.create_prompt("What color is the {sky}?", "The sky is blue.")

    assert "Context:\nThe sky is blue." in prompt
    assert "Question: What color is the {sky}?" in prompt
    assert "ONLY" in prompt
    assert "not found in the provided context" in prompt


@pytest.mark.unit
def test_preview_of_long_chunk_is_truncated():
    service = ChatService(llm=_mock_llm())

    sources = service.build_sources([_match("a" * 151, 0.5), _match("b" * 150, 0.9)])

    assert sources[0].page_content == "b" * 150
    assert sources[1].page_content == "a" * 150 + "..."


@pytest.mark.unit
@pytest.mark.asyncio
async def test_generate_answer_calls_llm_once_and_returns_text_verbatim():
    llm = _mock_llm("  The sky is blue.\n")
    service = ChatService(llm=llm)

    result = await service.generate_answer("What color is the sky?", [_match("The sky is blue.", 0.99)])

    llm.ainvoke.assert_awaited_once()
    prompt = llm.ainvoke.await_args.args[0]
    assert "The sky is blue." in prompt
    assert "What color is the sky?" in prompt
    assert result.answer == "  The sky is blue.\n"
    assert len(result.sources) == 1
    assert result.sources[0].page_content == "The sky is blue."


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_content_parts_are_joined():
    llm = _mock_llm([{"type": "text", "text": "Blue"}, " sky."])
    service = ChatService(llm=llm)

    result = await service.generate_answer("What color?", [_match("The sky is blue.", 0.9)])

    assert result.answer == "Blue sky."


@pytest.mark.unit
@pytest.mark.asyncio
async def test_no_matches_still_asks_model():
    llm = _mock_llm("The provided context does not contain that information.")
    service = ChatService(llm=llm)

    result = await service.generate_answer("Who won?", [])

    llm.ainvoke.assert_awaited_once()
    assert result.sources == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_llm_failure_is_upstream_error():
    llm = MagicMock()
    llm.ainvoke = AsyncMock(side_effect=RuntimeError("model overloaded"))
    service = ChatService(llm=llm)

    with pytest.raises(UpstreamServiceError) as exc_info:
        await service.generate_answer("Why?", [_match("text", 0.3)])

    assert exc_info.value.service == "chat"
    assert "model overloaded" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.asyncio
async def test_works_with_langchain_chat_model():
    service = ChatService(llm=FakeListChatModel(responses=["It is blue."]))

    result = await service.generate_answer("What color is the sky?", [_match("The sky is blue.", 0.8)])

    assert result.answer == "It is blue."
