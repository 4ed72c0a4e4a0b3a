"""JSON plumbing shared by the inventory, request, dashboard and donor endpoints.

Every response uses the same envelope::

    {"success": true, "message": "...", "data": ..., "timestamp": "..."}

Failures carry ``success: false`` plus ``error`` (the error kind) and, for
validation failures, ``errors`` mapping field names to messages. Keys are
camelCase on the wire and snake_case inside the project.
"""

from __future__ import annotations

import json
import logging
import re
from functools import wraps
from typing import Any, Dict, Optional

from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt

from blood.results import ErrorKind, Result, ServiceError

logger = logging.getLogger(__name__)

STATUS_FOR_ERROR = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.INVALID_BOUNDS: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE_GROUP: 409,
    ErrorKind.CAPACITY_EXCEEDED: 409,
    ErrorKind.INSUFFICIENT_STOCK: 409,
    ErrorKind.ILLEGAL_TRANSITION: 409,
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_camel(data: Any) -> Any:
    if isinstance(data, dict):
        return {snake_to_camel(key) if isinstance(key, str) else key: to_camel(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_camel(item) for item in data]
    return data


def to_snake(data: Any) -> Any:
    if isinstance(data, dict):
        return {camel_to_snake(key) if isinstance(key, str) else key: value for key, value in data.items()}
    return data


def _envelope(success: bool, message: str, data: Any = None, **extra) -> Dict[str, Any]:
    body = {
        "success": success,
        "message": message,
        "data": to_camel(data),
        "timestamp": timezone.now().isoformat(),
    }
    body.update(extra)
    return body


def ok(data: Any = None, message: str = "Success", status: int = 200) -> JsonResponse:
    return JsonResponse(_envelope(True, message, data), status=status)


def created(data: Any = None, message: str = "Created successfully") -> JsonResponse:
    return ok(data, message, status=201)


def error_response(error: ServiceError) -> JsonResponse:
    extra = {"error": error.kind.value}
    if error.fields:
        extra["errors"] = to_camel(error.fields)
    return JsonResponse(_envelope(False, error.message, **extra), status=STATUS_FOR_ERROR[error.kind])


def fail(kind: ErrorKind, message: str, fields: Optional[Dict[str, str]] = None) -> JsonResponse:
    return error_response(Result.failure(kind, message, fields).error)


def respond(result: Result, serialize, message: str = "Success", status: int = 200) -> JsonResponse:
    """Turn a service ``Result`` into a response, serializing the value on success."""

    if not result.ok:
        return error_response(result.error)
    data = serialize(result.value) if serialize is not None else None
    return ok(data, message, status=status)


def method_not_allowed(request: HttpRequest) -> JsonResponse:
    return JsonResponse(
        _envelope(False, f"Method {request.method} not allowed", error="METHOD_NOT_ALLOWED"),
        status=405,
    )


def api_view(*methods: str):
    """Restrict a view to ``methods`` and decode its JSON body into ``request.payload``.

    ``request.payload`` holds the body with keys converted to snake_case; it is
    an empty dict for requests without a body.
    """

    allowed = {method.upper() for method in methods}

    def decorator(view):
        @csrf_exempt
        @wraps(view)
        def wrapper(request: HttpRequest, *args, **kwargs):
            if request.method not in allowed:
                response = method_not_allowed(request)
                response["Allow"] = ", ".join(sorted(allowed))
                return response

            payload: Dict[str, Any] = {}
            if request.body:
                try:
                    decoded = json.loads(request.body)
                except (UnicodeDecodeError, json.JSONDecodeError):
                    logger.warning("Malformed JSON body on %s %s", request.method, request.path)
                    return fail(ErrorKind.VALIDATION_ERROR, "Request body must be valid JSON")
                if not isinstance(decoded, dict):
                    return fail(ErrorKind.VALIDATION_ERROR, "Request body must be a JSON object")
                payload = to_snake(decoded)
            request.payload = payload
            return view(request, *args, **kwargs)

        return wrapper

    return decorator
