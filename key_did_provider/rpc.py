"""Minimal JSON-RPC 2.0 handler.

``create_handler`` binds a method table to a callable that takes a request
context and a JSON-RPC message, and returns the JSON-RPC response (or
``None`` for notifications).
"""

import logging
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from key_did_provider.errors import ProviderError, RPCError

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

ERROR_MESSAGES = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid Request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
}

MethodHandler = Callable[[Any, Any], Any]
HandlerMethods = Mapping[str, MethodHandler]
RequestHandler = Callable[[Any, Mapping[str, Any]], Optional[Dict[str, Any]]]


class RPCRequest(BaseModel):
    """A JSON-RPC request or notification."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: Any = None
    id: Optional[Union[int, str]] = None

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


def error_response(
    request_id: Optional[Union[int, str]], code: int, message: Optional[str] = None, data: Any = None
) -> Dict[str, Any]:
    """Build a JSON-RPC error response."""
    error = RPCError(code, message or ERROR_MESSAGES.get(code, "Server error"), data)
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_dict()}


def result_response(request_id: Optional[Union[int, str]], result: Any) -> Dict[str, Any]:
    """Build a JSON-RPC success response."""
    if isinstance(result, BaseModel):
        result = result.model_dump()
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def _error_details(exc: ValidationError) -> list:
    return exc.errors(include_url=False, include_context=False)


def create_handler(methods: HandlerMethods) -> RequestHandler:
    """Create a request handler dispatching to ``methods`` by name.

    Each method is called as ``method(context, params)``. ``RPCError``
    keeps its code; pydantic validation errors become "Invalid params";
    any other failure becomes "Internal error".
    """

    def handle(context: Any, msg: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            request = RPCRequest.model_validate(msg)
        except ValidationError as exc:
            request_id = msg.get("id") if isinstance(msg, Mapping) else None
            logger.warning("Rejected invalid RPC request: %s", exc.error_count())
            return error_response(request_id, INVALID_REQUEST, data=_error_details(exc))

        method = methods.get(request.method)
        if method is None:
            logger.info("RPC method not found: %s", request.method)
            if request.is_notification:
                return None
            return error_response(request.id, METHOD_NOT_FOUND)

        try:
            result = method(context, request.params)
        except RPCError as exc:
            logger.info("RPC method %s failed with code %s", request.method, exc.code)
            response = {"jsonrpc": JSONRPC_VERSION, "id": request.id, "error": exc.to_dict()}
        except ValidationError as exc:
            logger.info("RPC method %s received invalid params", request.method)
            response = error_response(request.id, INVALID_PARAMS, data=_error_details(exc))
        except ProviderError as exc:
            logger.warning("RPC method %s failed: %s", request.method, exc)
            response = error_response(request.id, INTERNAL_ERROR, str(exc))
        except Exception as exc:
            logger.exception("RPC method %s raised unexpectedly", request.method)
            response = error_response(request.id, INTERNAL_ERROR, str(exc))
        else:
            response = result_response(request.id, result)

        if request.is_notification:
            return None
        return response

    return handle
