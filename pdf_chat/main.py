"""
FastAPI application for the PDF Chat Backend.
"""

import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import List, Optional
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from .config import settings, validate_required_settings
from .exceptions import ChatbotError, ConfigurationError
from .models import AskResponse, ErrorResponse, HealthResponse
from .services import DocumentService
from .utils import format_timestamp

# Configure logging
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@lru_cache
def get_document_service() -> DocumentService:
    """Shared document service, built on first use."""
    return DocumentService()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail startup before serving any request if credentials are missing
    validate_required_settings()
    logger.info(f"{settings.app_name} {settings.app_version} starting with vector store '{settings.vector_store}'")
    yield
    if get_document_service.cache_info().currsize:
        await get_document_service().close()


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Ask questions about uploaded PDF documents",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump()
    )


@app.exception_handler(ChatbotError)
async def chatbot_exception_handler(request: Request, exc: ChatbotError):
    """Render pipeline errors with their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.warning(f"Request validation failed on {request.url.path}: {errors}")
    return _error_response(400, message)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {str(exc)}")
    return _error_response(500, str(exc) or "An error occurred while processing your request")


@app.get("/", response_model=dict)
async def root():
    """Root endpoint."""
    return {
        "message": "PDF Chat API is running",
        "version": settings.app_version,
        "timestamp": format_timestamp()
    }


@app.get("/health", response_model=HealthResponse)
async def health_check(service: DocumentService = Depends(get_document_service)):
    """Health check endpoint."""
    health_info = await service.health_check()

    return HealthResponse(
        status=health_info.get("status", "unknown"),
        message="Service health check completed",
        version=settings.app_version,
        timestamp=format_timestamp(),
        vector_store=settings.vector_store
    )


@app.post(
    "/ask",
    response_model=AskResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def ask(
    files: Optional[List[UploadFile]] = File(None),
    question: Optional[str] = Form(None),
    service: DocumentService = Depends(get_document_service)
):
    """
    Answer a question about the uploaded PDF files.

    Files are processed directly from memory and discarded after the request.
    """
    file_contents = []
    for file in files or []:
        content = await file.read()
        file_contents.append({
            'filename': file.filename,
            'content': content,
            'content_type': file.content_type
        })

    return await service.answer_question(file_contents, question)


def run() -> None:
    """Validate configuration, then serve the API with uvicorn."""
    try:
        validate_required_settings()
    except ConfigurationError as e:
        logger.error(f"Configuration validation failed: {e.message}")
        sys.exit(1)

    import uvicorn
    uvicorn.run(
        "pdf_chat.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )


if __name__ == "__main__":
    run()
