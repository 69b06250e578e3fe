"""
Main document service that orchestrates PDF processing, retrieval, and answer generation.
"""

from typing import List, Dict, Any, Optional
from pydantic import ValidationError as PydanticValidationError

from .pdf_processor import PDFProcessor
from .vector_service import VectorService
from .chat_service import ChatService
from ..config import settings
from ..exceptions import ChatbotError, ExtractionError, ValidationError
from ..models import AskResponse, UploadedDocument
from ..utils import (
    validate_file_type,
    validate_file_size,
    measure_time,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


class DocumentService:
    """Main service driving one question over a set of uploaded PDFs."""

    def __init__(
        self,
        pdf_processor: Optional[PDFProcessor] = None,
        vector_service: Optional[VectorService] = None,
        chat_service: Optional[ChatService] = None
    ):
        """Initialize the document service."""
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.vector_service = vector_service or VectorService()
        self.chat_service = chat_service or ChatService()

    def _validate_files(self, file_contents: List[Dict[str, Any]]) -> List[UploadedDocument]:
        """
        Validate uploaded files.

        Args:
            file_contents: List of dictionaries with 'filename', 'content'
                and optionally 'content_type' keys

        Returns:
            List of validated UploadedDocument objects

        Raises:
            ValidationError: If validation fails
        """
        if not file_contents:
            raise ValidationError("At least one PDF file is required")

        if len(file_contents) > settings.max_files:
            raise ValidationError(
                f"Too many files. Maximum {settings.max_files} files allowed."
            )

        validated_files = []

        for file_info in file_contents:
            filename = file_info.get('filename') or ''
            content = file_info.get('content') or b''
            content_type = file_info.get('content_type')

            if not validate_file_type(filename, content_type):
                raise ValidationError(
                    f"Invalid file type: {filename or '<unnamed>'}. Only PDF files are allowed."
                )

            if not content:
                raise ValidationError(f"File {filename} is empty")

            if not validate_file_size(len(content)):
                raise ValidationError(
                    f"File {filename} is too large: {len(content)/1024/1024:.1f}MB. "
                    f"Maximum size is {settings.max_file_size_mb}MB."
                )

            try:
                validated_files.append(UploadedDocument(
                    filename=filename,
                    content=content,
                    content_type=content_type,
                    size=len(content)
                ))
            except PydanticValidationError as e:
                raise ValidationError(f"File validation failed for {filename}: {e}") from e

        return validated_files

    def _validate_question(self, question: Optional[str]) -> str:
        """
        Validate the user's question.

        Args:
            question: Question text from the request, possibly missing

        Returns:
            The question, unchanged

        Raises:
            ValidationError: If the question is blank or too long
        """
        if question is None or not question.strip():
            raise ValidationError("A non-empty question is required")

        if len(question) > settings.max_question_length:
            raise ValidationError(
                f"Question is too long. Maximum {settings.max_question_length} characters allowed."
            )

        return question

    @measure_time
    async def answer_question(
        self,
        file_contents: List[Dict[str, Any]],
        question: Optional[str]
    ) -> AskResponse:
        """
        Answer a question from the uploaded PDFs.

        Runs extraction (concurrently per file), chunking, retrieval and
        answer generation in that order. Any failure aborts the request.

        Args:
            file_contents: List of file information dictionaries
            question: User's question

        Returns:
            AskResponse with the answer and source previews

        Raises:
            ValidationError: Missing or invalid files or question
            ExtractionError: A file could not be parsed, or no file had text
            UpstreamServiceError: Embedding, index or chat call failed
        """
        validated_files = self._validate_files(file_contents)
        question = self._validate_question(question)

        log_processing_info("Question processing started", {
            "files_count": len(validated_files),
            "question_length": len(question)
        })

        try:
            pages = await self.pdf_processor.process_multiple_pdfs(validated_files)
            silent_files = self._files_without_text(validated_files, pages)
            if not pages:
                raise ExtractionError(
                    silent_files[0] if len(silent_files) == 1 else None,
                    "No extractable text found in the uploaded documents: "
                    f"{', '.join(silent_files)}"
                )
            if silent_files:
                logger.warning(f"Continuing without files that had no text: {', '.join(silent_files)}")

            chunks = self.pdf_processor.split_documents_into_chunks(pages)
            matches = await self.vector_service.retrieve(chunks, question)
            result = await self.chat_service.generate_answer(question, matches)

        except ChatbotError as e:
            handle_processing_error(
                "question_processing",
                e,
                {
                    "files_count": len(validated_files),
                    "error_class": type(e).__name__
                }
            )
            raise

        log_processing_info("Question processing completed", {
            "files_count": len(validated_files),
            "pages": len(pages),
            "chunks": len(chunks),
            "matches": len(matches),
            "answer_length": len(result.answer)
        })

        return result

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check.

        Returns:
            Dictionary with health status information
        """
        vector_health = await self.vector_service.health_check()

        return {
            "status": vector_health.get("status", "unknown"),
            "vector_service": vector_health,
            "chat_model": settings.google_chat_model
        }

    @staticmethod
    def _files_without_text(files: List[UploadedDocument], pages) -> List[str]:
        """Names of the uploaded files, in upload order, that produced no page text."""
        with_text = {page.metadata.get('document_index') for page in pages}
        return [file.filename for index, file in enumerate(files) if index not in with_text]

    async def close(self) -> None:
        """
        Release the vector service's client.

        Called once when the application shuts down.
        """
        await self.vector_service.close()
