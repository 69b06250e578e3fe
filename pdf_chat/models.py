"""
Pydantic models for request/response validation.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourcePreview(BaseModel):
    """Truncated text of a retrieved chunk."""
    model_config = ConfigDict(populate_by_name=True)

    page_content: str = Field(..., alias="pageContent", description="Chunk text preview")


class AskResponse(BaseModel):
    """Response model for a question about uploaded PDFs."""
    answer: str = Field(..., description="Generated answer")
    sources: List[SourcePreview] = Field(default_factory=list, description="Previews of the chunks used as context")


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str = Field(..., description="Health status")
    message: str = Field(..., description="Status message")
    version: str = Field(..., description="Application version")
    timestamp: str = Field(..., description="Current timestamp")
    vector_store: str = Field(..., description="Active vector index mode")


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str = Field(..., description="Error message")


class UploadedDocument(BaseModel):
    """A PDF received with a request. Lives only for that request."""
    filename: str = Field(..., description="Name of the file, used as its identifier")
    content: bytes = Field(..., description="File content as bytes")
    content_type: Optional[str] = Field(default=None, description="Declared media type")
    size: int = Field(..., description="File size in bytes")

    @field_validator('size')
    @classmethod
    def validate_file_size(cls, v):
        """Validate file size."""
        # Import here to avoid circular imports
        from .config import settings
        max_size = settings.max_file_size_mb * 1024 * 1024
        if v > max_size:
            raise ValueError(f"File size {v} bytes ({v/1024/1024:.1f}MB) exceeds maximum allowed size {max_size} bytes ({settings.max_file_size_mb}MB)")
        return v


class QueryMatch(BaseModel):
    """A chunk returned by the nearest-neighbour query."""
    text: str = Field(..., description="Chunk text")
    source_document_id: str = Field(..., description="Document the chunk came from")
    score: float = Field(..., description="Similarity score")
    page: Optional[int] = Field(default=None, description="Page number in the source document")
