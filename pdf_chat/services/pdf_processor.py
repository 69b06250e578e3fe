"""
PDF processing service for extracting and chunking text from PDF files.
"""

import asyncio
import PyPDF2
from io import BytesIO
from typing import List, Optional
from langchain_core.documents import Document

from .text_splitter import BoundaryTextSplitter
from ..config import settings
from ..exceptions import ExtractionError
from ..models import UploadedDocument
from ..utils import (
    measure_time,
    create_document_metadata,
    clean_text,
    generate_point_id,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


class PDFProcessor:
    """Service for processing PDF files and extracting text."""

    def __init__(self, chunk_size: Optional[int] = None, chunk_overlap: Optional[int] = None):
        """Initialize the PDF processor."""
        self.text_splitter = BoundaryTextSplitter(
            chunk_size=chunk_size or settings.chunk_size,
            chunk_overlap=settings.chunk_overlap if chunk_overlap is None else chunk_overlap
        )

    def extract_text_from_pdf(self, file_content: bytes, filename: str, document_index: int = 0) -> List[Document]:
        """
        Extract text from PDF file content.

        Args:
            file_content: PDF file content as bytes
            filename: Name of the PDF file
            document_index: Position of the file in the upload

        Returns:
            List of Document objects, one per page with text

        Raises:
            ExtractionError: If the file cannot be read as a PDF
        """
        documents = []

        try:
            pdf_reader = PyPDF2.PdfReader(BytesIO(file_content))
            total_pages = len(pdf_reader.pages)
        except Exception as e:
            error_info = handle_processing_error(
                "pdf_extraction",
                e,
                {"filename": filename, "file_size": len(file_content)}
            )
            raise ExtractionError(
                filename,
                f"Failed to extract text from PDF {filename}: {error_info['error_message']}"
            ) from e

        log_processing_info("PDF extraction started", {
            "filename": filename,
            "total_pages": total_pages,
            "file_size": len(file_content)
        })

        for page_num, page in enumerate(pdf_reader.pages):
            try:
                page_text = page.extract_text()
            except Exception as page_error:
                error_info = handle_processing_error(
                    "page_extraction",
                    page_error,
                    {"filename": filename, "page": page_num + 1}
                )
                logger.warning(f"Skipping page {page_num + 1}: {error_info}")
                continue

            cleaned_text = clean_text(page_text)
            if not cleaned_text:
                continue

            metadata = create_document_metadata(
                filename=filename,
                page_num=page_num + 1,
                total_pages=total_pages,
                additional_metadata={"document_index": document_index}
            )
            documents.append(Document(page_content=cleaned_text, metadata=metadata))

        if not documents:
            logger.warning(f"No extractable text found in {filename}")

        log_processing_info("PDF extraction completed", {
            "filename": filename,
            "documents_created": len(documents),
            "total_pages": total_pages
        })

        return documents

    @measure_time
    async def process_multiple_pdfs(self, files: List[UploadedDocument]) -> List[Document]:
        """
        Extract text from all uploaded PDFs concurrently.

        Pages are returned in upload order regardless of which file finishes
        parsing first.

        Raises:
            ExtractionError: For the first file, in upload order, that failed
        """
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self.extract_text_from_pdf, file.content, file.filename, index)
                for index, file in enumerate(files)
            ),
            return_exceptions=True
        )

        all_documents = []
        for file, result in zip(files, results):
            if isinstance(result, ExtractionError):
                raise result
            if isinstance(result, BaseException):
                raise ExtractionError(
                    file.filename,
                    f"Failed to extract text from PDF {file.filename}: {result}"
                ) from result
            all_documents.extend(result)

        log_processing_info("Multiple PDF processing completed", {
            "total_files": len(files),
            "total_documents": len(all_documents)
        })

        return all_documents

    def split_documents_into_chunks(self, documents: List[Document]) -> List[Document]:
        """
        Split page documents into overlapping chunks for vector search.

        Args:
            documents: List of page Document objects

        Returns:
            List of chunked Document objects
        """
        chunks = self.text_splitter.split_documents(documents)

        per_document = {}
        for i, chunk in enumerate(chunks):
            source = chunk.metadata.get('source', 'unknown')
            document_key = chunk.metadata.get('document_index', source)
            chunk_index = per_document.get(document_key, 0)
            per_document[document_key] = chunk_index + 1
            chunk.metadata.update({
                'chunk_id': generate_point_id(source, i),
                'chunk_index': chunk_index,
                'total_chunks': len(chunks)
            })

        log_processing_info("Document chunking completed", {
            "original_documents": len(documents),
            "chunks_created": len(chunks)
        })

        return chunks
