"""Decorators for bridge error handling."""

import functools
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from ..exceptions import BridgeError, RateLimitError, TransportError

logger = logging.getLogger(__name__)


def _metadata(request_id: str) -> dict[str, str]:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
    }


def format_success_response(data: Any, metadata: dict[str, Any] | None = None) -> str:
    """Format a successful tool response as indented JSON."""
    response: dict[str, Any] = {
        "success": True,
        "data": data,
        "metadata": _metadata(str(uuid.uuid4())),
    }
    if metadata:
        response["metadata"].update(metadata)
    return json.dumps(response, indent=2, default=str)


def handle_bridge_errors(func: Callable[..., str]) -> Callable[..., str]:
    """Decorator to turn bridge errors into JSON error responses.

    Every ``BridgeError`` kind is reported with its ``error_code``; anything
    else is logged with a traceback and reported as ``unexpected_error``.

    Args:
        func: The function to decorate

    Returns:
        Decorated function that handles errors consistently
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> str:
        request_id = str(uuid.uuid4())
        start_time = datetime.now()

        try:
            logger.info(f"Request {request_id}: Starting {func.__name__}")
            result = func(*args, **kwargs)

            duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
            logger.info(f"Request {request_id}: Completed {func.__name__} in {duration_ms}ms")

            return result

        except BridgeError as e:
            duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
            logger.warning(f"Request {request_id}: {e.error_code} in {duration_ms}ms: {e}")

            response: dict[str, Any] = {
                "success": False,
                "error": e.error_code,
                "message": str(e),
                "metadata": _metadata(request_id),
            }
            if e.details:
                response["details"] = e.details
            if isinstance(e, TransportError) and e.status_code is not None:
                response["status_code"] = e.status_code
            if isinstance(e, RateLimitError):
                response["retry_after"] = e.retry_after

            return json.dumps(response, indent=2, default=str)

        except Exception as e:
            duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
            logger.exception(f"Request {request_id}: Unexpected error in {duration_ms}ms: {e}")

            return json.dumps(
                {
                    "success": False,
                    "error": "unexpected_error",
                    "message": f"An unexpected error occurred: {e!s}",
                    "metadata": _metadata(request_id),
                },
                indent=2,
            )

    return wrapper
