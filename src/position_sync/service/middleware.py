"""
Error handling middleware.

Provides consistent error responses and request ID tracking.
"""

import json
import uuid
from typing import Callable

from aiohttp import web

from position_sync.service.errors import APIError, ErrorCode
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.service.middleware")


@web.middleware
async def error_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
    """
    - Adds a request_id to every request and response
    - Renders APIError as structured JSON with its status
    - Turns unexpected errors into a generic 500 without a stack trace
    """
    request_id = f"req_{uuid.uuid4().hex[:12]}"
    request["request_id"] = request_id

    try:
        response = await handler(request)
        response.headers["X-Request-ID"] = request_id
        return response

    except APIError as e:
        log = logger.error if e.status >= 500 else logger.warning
        log(f"API error: {e.code.value} - {e.message} ({request.method} {request.path}, {request_id})")
        return web.json_response(e.to_dict(request_id), status=e.status, headers={"X-Request-ID": request_id})

    except json.JSONDecodeError as e:
        logger.warning(f"JSON decode error: {e} ({request.path}, {request_id})")
        body = APIError(ErrorCode.INVALID_REQUEST, "Invalid JSON in request body").to_dict(request_id)
        return web.json_response(body, status=400, headers={"X-Request-ID": request_id})

    except web.HTTPException:
        # Let aiohttp handle its own HTTP exceptions
        raise

    except Exception as e:
        logger.error(f"Unexpected error: {e} ({request.method} {request.path}, {request_id})", exc_info=True)
        body = APIError(ErrorCode.INTERNAL_ERROR, "An internal error occurred", status=500).to_dict(request_id)
        return web.json_response(body, status=500, headers={"X-Request-ID": request_id})
