"""
Services package for the PDF Chat Backend.
"""

from .text_splitter import BoundaryTextSplitter
from .pdf_processor import PDFProcessor
from .vector_service import VectorService
from .chat_service import ChatService
from .document_service import DocumentService

__all__ = [
    "BoundaryTextSplitter",
    "PDFProcessor",
    "VectorService",
    "ChatService",
    "DocumentService"
]
