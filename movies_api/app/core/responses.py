"""
Conversion of service results into the JSON response envelope.

Every endpoint answers with ``{status, data | error | message}``.
Errors are checked first, so an outcome that carries an error is never
reported as a success, and ``Ok(None)`` is reported as a missing
record rather than as an empty success.
"""

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .results import ERROR_RESULTS, Message, Ok

NOT_FOUND_MESSAGE = "Movie not found"
UNEXPECTED_ERROR_MESSAGE = "Unexpected error occurred"


def envelope(status_code: int, headers: Optional[Dict[str, str]] = None, **fields: Any) -> JSONResponse:
    """Build a JSON response whose body repeats the status code."""
    body = {"status": status_code}
    body.update(fields)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def format_response(result: Any) -> JSONResponse:
    """Map a ``Result`` variant to its HTTP response.

    Decision order:

    1. error variants -> ``{status, error}`` with the variant's status;
    2. ``Ok`` -> 404 when ``data`` is ``None``, otherwise ``{status, data}``;
    3. ``Message`` -> ``{status, message}``;
    4. anything else -> 500.
    """
    if isinstance(result, ERROR_RESULTS) and result.error:
        return envelope(result.status or 400, error=result.error)

    if isinstance(result, Ok):
        if result.data is None:
            return envelope(404, error=NOT_FOUND_MESSAGE)
        return envelope(result.status or 200, data=result.data)

    if isinstance(result, Message):
        return envelope(result.status or 200, message=result.message)

    return envelope(500, error=UNEXPECTED_ERROR_MESSAGE)
