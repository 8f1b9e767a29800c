"""Request correlation ids.

Every response carries X-Request-ID. A client-supplied id is echoed when it
looks like a plain token; anything else is replaced with a fresh uuid4 so
arbitrary header content never reaches the logs.
"""

import re
import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def is_valid_request_id(value: str) -> bool:
    return bool(_REQUEST_ID.match(value))


def setup_correlation_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=REQUEST_ID_HEADER,
        generator=lambda: str(uuid.uuid4()),
        validator=is_valid_request_id,
        transformer=lambda value: value,
    )


def get_correlation_id() -> str | None:
    """Current request's id, or None outside a request."""
    return correlation_id.get(None)


__all__ = ["REQUEST_ID_HEADER", "get_correlation_id", "is_valid_request_id", "setup_correlation_middleware"]
