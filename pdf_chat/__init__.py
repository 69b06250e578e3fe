"""
PDF Chat Backend Application

Upload PDFs, ask a question, get an answer grounded in the uploaded text.

Features:
- In-memory PDF processing (no file storage)
- Concurrent text extraction across uploaded files
- Boundary-aware overlapping chunking
- Qdrant vector index (per-request in-memory or managed remote collection)
- Google Gemini embeddings and chat completion
- Typed error handling mapped onto HTTP status codes
"""

__version__ = "1.0.0"
__description__ = "Retrieval-augmented question answering over uploaded PDFs"
