from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException
from loguru import logger

from aurora_music.domain.library.exceptions import (
    AuroraError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


def to_http_exception(error: AuroraError) -> HTTPException:
    """Map a domain error to the matching HTTP status."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, DuplicateError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


@contextmanager
def domain_errors(action: str) -> Iterator[None]:
    """Translate domain errors raised inside the block into HTTP errors.

    Anything unexpected is logged with its traceback and becomes a 500.
    """
    try:
        yield
    except HTTPException:
        raise
    except AuroraError as e:
        raise to_http_exception(e) from e
    except Exception as e:
        logger.exception(f"Failed to {action}")
        raise HTTPException(status_code=500, detail=f"Failed to {action}: {str(e)}") from e
