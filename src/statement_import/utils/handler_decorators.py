"""
Decorators shared by the statement import Lambda handlers.

Route functions return plain dicts; these wrappers add the caller identity,
turn exceptions into HTTP responses and log each request.
"""

import logging
import traceback
from datetime import datetime, timezone
from functools import wraps
from typing import Dict, Any, Callable

from pydantic import ValidationError

from statement_import.services.import_errors import StoreOperationError, UnreadableFileError
from statement_import.utils.auth import get_user_from_event
from statement_import.utils.lambda_utils import create_response, handle_error

logger = logging.getLogger(__name__)


def standard_error_handling(func: Callable) -> Callable:
    """
    Wrap a handler result in a 200 response and map exceptions to statuses:
    - ValidationError, ValueError, KeyError -> 400 Bad Request
    - UnreadableFileError -> 422 Unprocessable Entity
    - StoreOperationError -> 502 Bad Gateway, with the partial import count
    - Exception -> 500 Internal Server Error
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> Dict[str, Any]:
        try:
            result = func(*args, **kwargs)

            if isinstance(result, dict) and "statusCode" in result:
                return result

            return create_response(200, result)

        except (ValidationError, ValueError, KeyError) as e:
            logger.error(f"Validation error in {func.__name__}: {str(e)}")
            return handle_error(400, str(e))

        except UnreadableFileError as e:
            logger.warning(f"Unreadable file in {func.__name__}: {str(e)}")
            return handle_error(422, f"Could not read file: {str(e)}")

        except StoreOperationError as e:
            logger.error(f"Store failure in {func.__name__}: {str(e)}")
            return create_response(502, {
                "message": "Import failed, it is safe to retry",
                "importedBeforeFailure": e.imported_before_failure
            })

        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {str(e)}")
            logger.error(f"Stacktrace: {traceback.format_exc()}")
            return handle_error(500, f"Error in {func.__name__.replace('_handler', '')}")

    return wrapper


def log_request_response(func: Callable) -> Callable:
    """Log request id, method, route, status code and duration."""
    @wraps(func)
    def wrapper(event: Dict[str, Any], *args, **kwargs) -> Dict[str, Any]:
        request_context = event.get("requestContext") or {}
        request_id = request_context.get("requestId", "unknown")
        method = (request_context.get("http") or {}).get("method", "unknown")
        route = event.get("routeKey", "unknown")

        start_time = datetime.now(timezone.utc)
        logger.info(f"[{request_id}] {method} {route} - Request started")

        try:
            result = func(event, *args, **kwargs)

            duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
            status_code = result.get("statusCode", "unknown") if isinstance(result, dict) else "unknown"
            logger.info(f"[{request_id}] {method} {route} - Response {status_code} in {duration_ms:.1f}ms")

            return result

        except Exception as e:
            duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
            logger.error(f"[{request_id}] {method} {route} - Error after {duration_ms:.1f}ms: {str(e)}")
            raise

    return wrapper


def require_authenticated_user(func: Callable) -> Callable:
    """
    Resolve the caller and call `func(event, user_id)`; 401 without a user.

    The Lambda context argument is dropped.
    """
    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any, *args, **kwargs) -> Dict[str, Any]:
        user = get_user_from_event(event)
        if not user:
            logger.warning("Authentication required but no user found in event")
            return handle_error(401, "Unauthorized")

        return func(event, user["id"], *args, **kwargs)

    return wrapper


def api_handler(
    require_auth: bool = True,
    log_requests: bool = True,
    handle_errors: bool = True
):
    """
    Stack the decorators above: logging outermost, error mapping innermost.

    Example:
        @api_handler()
        def handler(event, user_id):
            return {"message": "success"}
    """
    def decorator(func: Callable) -> Callable:
        decorated_func = func

        # Apply decorators in reverse order (innermost first)
        if handle_errors:
            decorated_func = standard_error_handling(decorated_func)

        if require_auth:
            decorated_func = require_authenticated_user(decorated_func)

        if log_requests:
            decorated_func = log_request_response(decorated_func)

        return decorated_func

    return decorator
