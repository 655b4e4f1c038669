from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from tradehub.utils.exceptions import QueryFailure

logger = logging.getLogger(__name__)


async def query_failure_handler(request: Request, exc: QueryFailure):
    """Échec de l'exécuteur distant : message d'origine renvoyé tel quel"""
    logger.warning(f"Query failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": "query_failure", "message": exc.message, "code": exc.code},
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Dernier recours pour les erreurs non gérées par les services"""

    if isinstance(exc, IntegrityError):
        logger.error(f"Integrity error on {request.url.path}: {exc.orig}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": "Product data conflicts with an existing record."},
        )

    if isinstance(exc, SQLAlchemyError):
        logger.critical(f"Database error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "A database operation failed."},
        )

    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred on the server."},
    )
