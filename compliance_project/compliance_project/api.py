"""
Helpers shared by the internal JSON endpoints.

Every endpoint answers with a JSON envelope carrying ``success`` so the
caller can tell a hard failure (nothing happened) from a soft or partial
outcome (it happened, some sub-items were skipped or failed).
"""

import json
import logging
from functools import wraps
from hmac import compare_digest

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .exceptions import NotFound, PipelineValidationError

logger = logging.getLogger(__name__)


def error_response(message, status):
    return JsonResponse({"success": False, "error": message}, status=status)


def parse_json_body(request):
    """Return the request body as a dict ({} when empty)."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (TypeError, ValueError) as exc:
        raise PipelineValidationError(f"Malformed JSON body: {exc}") from exc
    if not isinstance(payload, dict):
        raise PipelineValidationError("JSON body must be an object")
    return payload


def require_field(payload, name):
    value = payload.get(name)
    if value in (None, ""):
        raise PipelineValidationError(f"{name} is required")
    return value


def parse_int(value, name, minimum=None):
    # bool is an int subclass; JSON true/false is never an id or a size
    if isinstance(value, bool):
        raise PipelineValidationError(f"{name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise PipelineValidationError(f"{name} must be an integer") from None
    if minimum is not None and number < minimum:
        raise PipelineValidationError(f"{name} must be at least {minimum}")
    return number


def require_int(payload, name, minimum=1):
    return parse_int(require_field(payload, name), name, minimum)


def optional_int(payload, name, minimum=1):
    value = payload.get(name)
    if value in (None, ""):
        return None
    return parse_int(value, name, minimum)


def _key_is_valid(request):
    expected = getattr(settings, "INTERNAL_API_KEY", "")
    if not expected:
        return True
    supplied = request.headers.get("X-Internal-Key", "")
    return compare_digest(supplied, expected)


def internal_endpoint(methods=("POST",)):
    """
    Decorate a view that takes ``(request, payload)`` and returns a dict.

    - CSRF exempt (service-to-service calls)
    - X-Internal-Key check against settings.INTERNAL_API_KEY
    - validation errors -> 400, unknown ids -> 404
    """

    def decorator(view):
        @csrf_exempt
        @require_http_methods(list(methods))
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if not _key_is_valid(request):
                return error_response("Invalid internal API key", 403)

            try:
                payload = parse_json_body(request) if request.method == "POST" else request.GET.dict()
                result = view(request, payload, *args, **kwargs)
            except PipelineValidationError as exc:
                return error_response(str(exc), 400)
            except NotFound as exc:
                return error_response(str(exc), 404)

            return JsonResponse({"success": True, **result})

        return wrapper

    return decorator
