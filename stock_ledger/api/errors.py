"""
Translation of ledger errors into HTTP responses.
"""

from fastapi import HTTPException

from stock_ledger.errors import (
    AlreadyReceived,
    InsufficientStock,
    LedgerError,
    NotFound,
    StorageError,
    ValidationError,
)

STATUS_BY_ERROR: dict[type[LedgerError], int] = {
    ValidationError: 400,
    InsufficientStock: 400,
    NotFound: 404,
    AlreadyReceived: 409,
    StorageError: 503,
}


def to_http_exception(error: LedgerError) -> HTTPException:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
