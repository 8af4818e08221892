"""
Chatbot API: book recommendations over the retrieval index.

503 - the recommendation index is not ready (startup still running, or
      embeddings could not be generated)
200 - normal reply, including "no matching books, please clarify"
500 - internal failure; error detail only exposed in debug mode
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from .schemas import (
    BookResult,
    ErrorResponse,
    HistoryData,
    HistoryResponse,
    RecommendData,
    RecommendRequest,
    RecommendResponse,
    RefreshResponse,
    StatusData,
    StatusResponse
)
from ..agents.composer import ResponseComposer
from ..core.catalog import SQLiteCatalog
from ..core.config import CHAT_RESULT_LIMIT, SEARCH_TOP_K, debug_enabled, get_embedding_provider, get_primary_responder
from ..core.errors import EmbeddingServiceError, IndexNotReadyError, InitializationFailedError
from ..core.retrieval import IndexState, RetrievalService
from ..vector.store import EmbeddingStore
from util.logging import logger

router = APIRouter()

NOT_READY_MESSAGE = "AI service is not ready. Please wait for initialization to complete or check server logs."
BOOK_REQUEST_PATTERN = re.compile(r"book|recommend|suggest|find|search|read|novel|story|author|genre", re.IGNORECASE)

_service: Optional[RetrievalService] = None
_composer: Optional[ResponseComposer] = None


def get_retrieval_service() -> RetrievalService:
    """Process-wide retrieval service, built on first use."""
    global _service
    if _service is None:
        _service = RetrievalService(
            catalog=SQLiteCatalog(),
            store=EmbeddingStore(),
            embedding_provider=get_embedding_provider()
        )
    return _service


def get_composer() -> ResponseComposer:
    global _composer
    if _composer is None:
        _composer = ResponseComposer(primary=get_primary_responder())
    return _composer


def is_book_request(message: str) -> bool:
    return bool(BOOK_REQUEST_PATTERN.search(message or ""))


def _error(status_code: int, message: str, error: Exception = None, detail: str = None) -> JSONResponse:
    if error is not None and debug_enabled():
        detail = f"{type(error).__name__}: {error}"
    body = ErrorResponse(message=message, error=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


@router.post("/recommend", response_model=RecommendResponse)
async def recommend(
    req: RecommendRequest,
    service: RetrievalService = Depends(get_retrieval_service),
    composer: ResponseComposer = Depends(get_composer),
):
    """Chat with the librarian and get book recommendations."""
    message = req.message

    if not service.is_ready:
        if service.state == IndexState.INITIALIZING:
            logger.log_chat_request("recommend", message, False, status="not_ready")
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, NOT_READY_MESSAGE,
                          detail="Vector database initialization in progress")
        try:
            await service.initialize()
        except (IndexNotReadyError, InitializationFailedError, EmbeddingServiceError) as e:
            logger.log_chat_request("recommend", message, False, status="not_ready")
            logger.error(f"Recommendation index unavailable: {type(e).__name__}: {e}")
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, NOT_READY_MESSAGE, error=e,
                          detail="Vector database not initialized with AI embeddings")
        except Exception as e:
            logger.log_chat_request("recommend", message, False, status="failed")
            logger.error(f"Error initializing recommendation index: {type(e).__name__}: {e}")
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR,
                          "Failed to initialize recommendations. Please try again.", error=e)
        if not service.is_ready:
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, NOT_READY_MESSAGE,
                          detail="Vector database holds no books")

    book_request = is_book_request(message)
    books = []

    if book_request:
        try:
            books = await service.search(message, SEARCH_TOP_K)
        except (IndexNotReadyError, InitializationFailedError, EmbeddingServiceError) as e:
            logger.log_chat_request("recommend", message, True, status="not_ready")
            return _error(status.HTTP_503_SERVICE_UNAVAILABLE, NOT_READY_MESSAGE, error=e)
        except Exception as e:
            logger.log_chat_request("recommend", message, True, status="failed")
            logger.error(f"Error in book search: {type(e).__name__}: {e}")
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR,
                          "Failed to search for books. Please try again.", error=e)

    try:
        if books:
            reply = await composer.recommend(message, books)
        elif book_request:
            reply = await composer.general_reply(
                f"I couldn't find specific books matching \"{message}\". "
                "Could you please provide more details about what you're looking for?"
            )
        else:
            reply = await composer.general_reply(message)
    except Exception as e:
        logger.log_chat_request("recommend", message, book_request, len(books), status="failed")
        logger.error(f"Error generating chat response: {type(e).__name__}: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR,
                      "Failed to generate response. Please try again.", error=e)

    logger.log_chat_request("recommend", message, book_request, len(books))

    return RecommendResponse(
        data=RecommendData(
            response=reply.text,
            books=[BookResult(**hit.to_dict()) for hit in books[:CHAT_RESULT_LIMIT]],
            is_book_request=book_request,
            ai_powered=not reply.used_fallback,
            used_fallback=reply.used_fallback
        )
    )


@router.get("/history", response_model=HistoryResponse)
async def history():
    """Chat history placeholder; conversations are not stored."""
    return HistoryResponse(data=HistoryData(history=[]))


@router.post("/refresh-index", response_model=RefreshResponse)
async def refresh_index(service: RetrievalService = Depends(get_retrieval_service)):
    """Re-embed every catalog book (admin)."""
    try:
        await service.refresh()
    except Exception as e:
        logger.error(f"Error refreshing vector database: {type(e).__name__}: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to refresh AI vector database", error=e)

    return RefreshResponse(message="AI vector database refreshed successfully")


@router.get("/status", response_model=StatusResponse)
async def index_status(service: RetrievalService = Depends(get_retrieval_service)):
    return StatusResponse(data=StatusData(**service.status()))
