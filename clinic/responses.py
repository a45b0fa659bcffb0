"""
Response shaping.

Admin routes answer with the `{success, data, error}` envelope; public routes
answer with bare JSON and `{error}` on failure. Each family gets an APIRoute
subclass so every exception raised while handling a request, including the
request-validation errors FastAPI raises itself, goes through
`translate_exception` once.
"""
from __future__ import annotations

from typing import Any, Callable, Coroutine

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from .auth import AuthState, request_auth_state
from .errors import UnauthorizedError, translate_exception

Handler = Callable[[Request], Coroutine[Any, Any, Response]]


def success(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def envelope_error(exc: BaseException) -> JSONResponse:
    status, error = translate_exception(exc)
    return JSONResponse(status_code=status, content=jsonable_encoder({"success": False, "error": error.to_dict()}))


def plain_error(exc: BaseException) -> JSONResponse:
    status, error = translate_exception(exc)
    message = error.message if status < 500 else "Internal server error"
    return JSONResponse(status_code=status, content={"error": message})


class EnvelopeRoute(APIRoute):
    """Route class for admin endpoints."""

    def get_route_handler(self) -> Handler:
        original = super().get_route_handler()

        async def handler(request: Request) -> Response:
            try:
                return await original(request)
            except RequestValidationError as exc:
                # body errors are raised before dependencies run; auth still wins
                if request_auth_state(request) is not AuthState.AUTHENTICATED:
                    return envelope_error(UnauthorizedError())
                return envelope_error(exc)
            except Exception as exc:
                return envelope_error(exc)

        return handler


class PlainErrorRoute(APIRoute):
    """Route class for public endpoints."""

    def get_route_handler(self) -> Handler:
        original = super().get_route_handler()

        async def handler(request: Request) -> Response:
            try:
                return await original(request)
            except Exception as exc:
                return plain_error(exc)

        return handler
